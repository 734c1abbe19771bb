from moftrack import create_app

app = create_app()
