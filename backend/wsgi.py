# backend/wsgi.py
from ppe_tracker import create_app

app = create_app()
