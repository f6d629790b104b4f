"""Logging configuration for RSS Gallery."""

import json
import logging
import sys

from rss_gallery.config import get_settings


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the pipeline stage when one was given."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        base = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        stage = getattr(record, "stage", None)
        if stage:
            base["stage"] = stage
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base)


def setup_logging() -> None:
    """Install a single stdout handler; JSON lines in prod, readable text in dev."""
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)

    if settings.env == "prod":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level)
