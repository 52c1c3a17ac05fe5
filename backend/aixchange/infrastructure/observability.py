"""Structured Logging — JSON formatter, setup and per-request access logging.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (user_id, entity_id, error_code, path, mode, attempt, method,
      status_code, duration_ms) surfaced when present
    - JSON format in production, human-readable in development
    - Every request produces one access line; slow requests log at WARNING

Design Decisions:
    - setup_logging called once on startup via lifespan; repeated calls do not stack handlers
    - Access logging as Starlette middleware: routes stay free of timing code
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

EXTRA_FIELDS = (
    "user_id", "entity_id", "error_code", "path", "mode", "attempt",
    "method", "status_code", "duration_ms",
)
SLOW_REQUEST_MS = 1000

_HANDLER_NAME = "aixchange"

access_logger = logging.getLogger("aixchange.access")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured access line per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        fields = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = _elapsed_ms(start)
            access_logger.error(
                f"{request.method} {request.url.path} failed", exc_info=True, extra=fields,
            )
            raise
        fields.update(status_code=response.status_code, duration_ms=_elapsed_ms(start))
        log = access_logger.warning if fields["duration_ms"] > SLOW_REQUEST_MS else access_logger.info
        log(f"{request.method} {request.url.path} {response.status_code}", extra=fields)
        return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
