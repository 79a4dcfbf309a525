# app/main.py

# ASGI entry point: uvicorn app.main:app
from app import create_app

app = create_app()
