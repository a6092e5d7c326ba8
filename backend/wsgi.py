# backend/wsgi.py
from storeconsole import create_app

app = create_app()
