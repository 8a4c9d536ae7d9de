from redbag_claimer.cli.main import app


app()
