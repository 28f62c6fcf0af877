from __future__ import annotations

import logging

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(app: Flask) -> logging.Logger:
    """Configure console logging for the app and the package loggers."""
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    package_logger = logging.getLogger(__name__.rpartition(".common")[0])
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    package_logger.setLevel(level)

    app.logger.setLevel(level)
    logging.getLogger("werkzeug").setLevel(level)
    return app.logger
