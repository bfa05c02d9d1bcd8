# backend/wsgi.py
from haki import create_app

app = create_app()
