from pumlwatch.cli import cli

cli()
