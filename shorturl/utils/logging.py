"""Application-wide logging initialization

IMPORTANT: `initialize_logging()` is called from each Lambda package's
`__init__.py`, before the handler module logs anything.

Logging format (one JSON document per line on stdout):
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "shorturl.lambdas.redirect_url.app",
    "message": "Redirecting client to target URL. Responding with 302.",
    "shortcode": "42",
    "event": "REDIRECT_SUCCESS"
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from shorturl.constants import ENV, Defaults


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    STANDARD_ATTRS = frozenset(logging.LogRecord('', 0, '', 0, '', (), None).__dict__) | {'message', 'asctime'}

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec='milliseconds') \
                            .replace('+00:00', 'Z')
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Attach `extra` fields
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS:
                log[key] = value

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, Defaults.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
