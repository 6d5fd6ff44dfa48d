"""Flask application exposing the HealthPulse engine over HTTP."""
from __future__ import annotations

import logging
from typing import Any

from flask import Flask

from . import __version__
from .api import api
from .logging_utils import configure_quiet_logger
from .settings import HEALTHPULSE_HOST, HEALTHPULSE_PORT

# Package-wide handlers: every healthpulse.* module logger reaches the rotating file.
configure_quiet_logger("healthpulse", file_name="app_server.log")
logger = logging.getLogger(__name__)


def create_app() -> Flask:
    app = Flask(__name__)
    app.register_blueprint(api)

    @app.get("/api/ping")
    def ping() -> Any:
        return {"status": "ok", "version": __version__}

    return app


def main() -> None:
    app = create_app()

    logger.info("Starting HealthPulse API on %s:%s", HEALTHPULSE_HOST, HEALTHPULSE_PORT)
    app.run(host=HEALTHPULSE_HOST, port=HEALTHPULSE_PORT, debug=False, use_reloader=False)


if __name__ == "__main__":  # pragma: no cover
    main()
