from qgen.cli.main import app

app()
