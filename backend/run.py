"""
Development server entry point for the HealthTrack API.
Run from backend/: python run.py
"""
import logging
import os
from healthtrack import create_app

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO'),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = create_app()

if __name__ == '__main__':
    if os.getenv('FLASK_ENV') == 'production':
        raise RuntimeError('run.py is for local development; serve production through a WSGI server.')

    app.run(
        host=os.getenv('FLASK_HOST', '127.0.0.1'),
        port=int(os.getenv('FLASK_PORT', 5000)),
        debug=True,
    )
