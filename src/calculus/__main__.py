from calculus.cli import cli

cli()
