"""Application entry point.

Starts the Flask development server or is used by gunicorn in production.

Usage:
    Development:  python run.py
    Production:   gunicorn --bind 0.0.0.0:8787 --workers 2 --threads 8 run:app
"""
from chat_proxy import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8787, debug=app.config.get("FLASK_DEBUG", False), threaded=True)
