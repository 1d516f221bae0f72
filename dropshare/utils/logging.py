"""Structured JSON logging for the lambda functions

IMPORTANT: lambda packages call `initialize_logging()` from their `__init__.py`,
so the root logger is configured before any handler module logs.

One JSON object is written to stdout per record, which CloudWatch Logs
Insights can query field by field. Anything passed through `extra=` becomes a
top-level field:

    >>> logger.info('Share link created. Responding with 201.', extra={'shareId': 'V1StGXR8_Z', 'event': 'SHARE_CREATED'})
    {"timestamp": "2026-10-19T12:00:00.000Z", "level": "INFO", "logger": "dropshare.lambdas.create_link.app",
     "message": "Share link created. Responding with 201.", "shareId": "V1StGXR8_Z", "event": "SHARE_CREATED"}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from dropshare.constants import ENV


# Attributes every LogRecord carries; anything else on a record came from `extra=`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))) | {'message', 'asctime', 'taskName'}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update({k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS})

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        # Extras may hold datetimes, exceptions, ... which fall back to str()
        return json.dumps(entry, default=str)


def initialize_logging() -> None:
    """Route the root logger to stdout through JsonFormatter at $LOG_LEVEL (default INFO)."""
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                },
            },
            'root': {
                'level': os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper(),
                'handlers': ['stdout'],
            },
        }
    )
