from electropos import create_app

app = create_app()
