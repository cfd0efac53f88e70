"""
main.py

Flask entry point for the ephemeral file sharing service.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery
  - Infrastructure: Redis server (passphrase store and Celery broker)

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Short links are served at /<identifier>
  - Uses application factory pattern for better testability
"""

import os

from fileshare.app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 3000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    # The reloader would start a second sweeper thread
    app.run(host=host, port=port, debug=debug, use_reloader=False)
