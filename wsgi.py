"""WSGI entry point: gunicorn wsgi:app"""
from newsroom import create_app

app = create_app()

if __name__ == '__main__':
    app.run()
