"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` at module level of every lambda
handler, before any other logging is done.

Logging format:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "linkshortener.services.short_url_store",
    "message": "Shortened https://example.com to abc123.",
    "shortcode": "abc123"
}

When LOG_SERVER_URL is set, records are additionally shipped to the remote
log server (see linkshortener.utils.remote_logging). Shipping happens on a
QueueListener thread; loggers only enqueue the record.
"""

import os
import json
import queue
import atexit
import logging
import logging.config
import logging.handlers
from datetime import datetime, UTC

from linkshortener.constants import ENV
from linkshortener.utils.remote_logging import RemoteLogClient, RemoteLogHandler


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    STANDARD_ATTRS = frozenset(
        {
            'args',
            'asctime',
            'created',
            'exc_info',
            'exc_text',
            'filename',
            'funcName',
            'levelname',
            'levelno',
            'lineno',
            'module',
            'msecs',
            'msg',
            'name',
            'pathname',
            'process',
            'processName',
            'relativeCreated',
            'stack_info',
            'thread',
            'threadName',
            'taskName',
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec="milliseconds") \
                            .replace("+00:00", "Z")
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        # Attach `extra` fields
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS and key not in log:
                log[key] = value

        return json.dumps(log, default=str)


_remote_listener: logging.handlers.QueueListener | None = None
_remote_queue_handler: logging.handlers.QueueHandler | None = None


def remote_log_handler() -> RemoteLogHandler | None:
    """Build a RemoteLogHandler when LOG_SERVER_URL is configured, else None."""
    server_url = os.getenv(ENV.RemoteLog.SERVER_URL)
    if not server_url:
        return None

    client = RemoteLogClient(server_url)
    client.initialize_from_environment()
    return RemoteLogHandler(client)


def attach_remote_handler(handler: RemoteLogHandler) -> logging.handlers.QueueHandler:
    """Attach `handler` to the root logger behind a queue

    The root logger gets a QueueHandler; a QueueListener thread drains the
    queue into `handler`, so a slow log server never delays the caller.

    Returns:
        logging.handlers.QueueHandler: handler added to the root logger.
    """
    global _remote_listener, _remote_queue_handler
    stop_remote_logging()

    log_queue = queue.SimpleQueue()
    _remote_listener = logging.handlers.QueueListener(log_queue, handler, respect_handler_level=True)
    _remote_listener.start()

    _remote_queue_handler = logging.handlers.QueueHandler(log_queue)
    logging.getLogger().addHandler(_remote_queue_handler)
    return _remote_queue_handler


def stop_remote_logging() -> None:
    """Detach the queue from the root logger, flush pending records and stop the listener."""
    global _remote_listener, _remote_queue_handler
    if _remote_queue_handler is not None:
        logging.getLogger().removeHandler(_remote_queue_handler)
        _remote_queue_handler = None
    if _remote_listener is not None:
        _remote_listener.stop()
        _remote_listener = None


atexit.register(stop_remote_logging)


def initialize_logging() -> None:
    stop_remote_logging()

    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
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

    handler = remote_log_handler()
    if handler is not None:
        attach_remote_handler(handler)
