from glpeek.cli.main import run_app

run_app()
