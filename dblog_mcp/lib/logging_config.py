"""Logging setup for the server process.

Everything is written to stderr (and optionally a file); stdout is reserved
for stdio transport frames. With ``json_format`` each record becomes a single
JSON object, which is what log shippers in front of the SSE deployment expect.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional

SERVICE_NAME = 'dblog-mcp'

# Libraries that log every request at INFO
NOISY_LOGGERS = ('uvicorn.access', 'httpx', 'mcp.server.lowlevel.server', 'sse_starlette')


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tool context merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'service': SERVICE_NAME,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}"
        }

        context = getattr(record, 'extra_fields', None)
        if context:
            payload.update(context)

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name; unknown names fall back to INFO
        json_format: Emit JSON records instead of plain text
        log_file: Optional file that receives the same records
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    formatter = JSONFormatter() if json_format else logging.Formatter(
        '%(asctime)s %(levelname)-8s [%(name)s] %(message)s'
    )

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    if log_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


class ContextAdapter(logging.LoggerAdapter):
    """Attach fixed context (e.g. the tool name) to every record."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra['extra_fields'] = {**self.extra, **extra.get('extra_fields', {})}
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, extra_fields: Dict[str, Any] = None) -> logging.Logger:
    """Return a module logger, wrapped with fixed context when given."""
    logger = logging.getLogger(name)
    if extra_fields:
        return ContextAdapter(logger, extra_fields)
    return logger
