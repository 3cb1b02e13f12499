"""
Logging setup for the relay.

The relay logs flow milestones (login redirect, state mismatch, token
endpoint outcome) with a few structured fields attached. On Cloud Run those
records go through google-cloud-logging; everywhere else they are written to
stdout as one JSON object per line. Codes, tokens and secrets are never put
into a record.
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any


def log_fields(**fields: Any) -> dict[str, Any]:
    """Build the ``extra`` argument carrying structured fields for a record."""
    return {"extra_fields": fields}


class JsonFormatter(logging.Formatter):
    """Render a record and its structured fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, dict):
            entry.update(fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _setup_cloud_logging(level: str) -> None:
    try:
        import google.cloud.logging

        google.cloud.logging.Client().setup_logging(
            log_level=logging.getLevelName(level)
        )
        logging.info("Cloud Logging initialized for Cloud Run.")
    except Exception as e:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logging.warning(f"Cloud Logging setup failed, using basic config: {e}")


def setup_global_logging() -> None:
    """
    Configure the root logger once, before the app is built.

    LOG_LEVEL selects the level (default INFO); K_SERVICE switches to
    Cloud Logging. Safe to call repeatedly.
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    if os.getenv("K_SERVICE") is not None:
        _setup_cloud_logging(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
