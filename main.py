"""
main.py

Development server for the SealDrop share API.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery, werkzeug
  - Infrastructure: Redis server (unless RECORD_BACKEND=memory)

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Expired files are swept by Celery beat (`celery -A celery_app beat`)
"""

import os

from app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    app.run(host=host, port=port, debug=debug)
