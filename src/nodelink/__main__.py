from nodelink.cli import app

app()
