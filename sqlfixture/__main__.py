from sqlfixture.cli.main import cli

cli(prog_name="sqlfixture")
