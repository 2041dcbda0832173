"""Structured logging helpers."""

from __future__ import annotations

import json
import logging
import os
from typing import Any


def _json_logs_enabled() -> bool:
    return os.getenv("SAMPLE_CHUNKS_JSON_LOGS", "false").lower() == "true"


def configure_logging(level: str = "INFO", json_logs: bool | None = None) -> None:
    """Configure global logging. Respects SAMPLE_CHUNKS_JSON_LOGS env override."""

    if json_logs is None:
        json_logs = _json_logs_enabled()

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s" if json_logs else "%(levelname)s:%(name)s:%(message)s",
    )


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    json_logs: bool | None = None,
    **fields: Any,
) -> None:
    """Emit a structured log event."""

    if not logger.isEnabledFor(level):
        return
    if json_logs is None:
        json_logs = _json_logs_enabled()

    payload = {"event": event, **fields}
    if json_logs:
        logger.log(level, json.dumps(payload, default=str))
    else:
        logger.log(level, payload)
