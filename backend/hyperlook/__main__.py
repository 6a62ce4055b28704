from hyperlook.cli.main import app

app()
