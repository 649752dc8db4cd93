"""
Entrypoint for running the API in development.
In production run `api.__main__:app` via a WSGI server (gunicorn/uwsgi).
"""
import logging
import os
from . import create_app
from .config import get_config

logging.basicConfig(
    level=getattr(logging, str(get_config(None).LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    debug = bool(os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes"))
    app.run(host=host, port=port, debug=debug)
