"""Remote log shipping

Ships log records to an external log server. Delivery is best-effort: a
failed submission falls back to a local stderr line and never reaches the
code that emitted the record.

Wire protocol of the log server:

    POST /register  {"username", "email"}              -> {"clientId", "clientSecret"}
    POST /auth      {"client_id", "client_secret"}     -> {"access_token", "token_type", "expires_in"}
    POST /logs      {"level", "package", "message", "timestamp"}
                    Authorization: Bearer <access_token>

Classes:
    LogClientCredentials:
        Client id/secret pair issued by the log server.
    RemoteLogClient:
        Registers, authenticates (with cached bearer token) and submits logs.
    RemoteLogHandler:
        `logging.Handler` shipping records through a RemoteLogClient.

Example:
    >>> client = RemoteLogClient('https://logs.example.com')
    >>> client.initialize_from_environment()
    True
    >>> attach_remote_handler(RemoteLogHandler(client))  # linkshortener.utils.logging
"""

import os
import sys
import time
import logging
from dataclasses import dataclass
from datetime import datetime, UTC

import requests

from linkshortener.constants import ENV
from linkshortener.exceptions import RemoteLoggingError

# Refresh tokens this many seconds before the server-side expiry
TOKEN_EXPIRY_BUFFER_SECONDS = 60
REQUEST_TIMEOUT_SECONDS = 5

LEVELS = {
    logging.DEBUG: 'debug',
    logging.INFO: 'info',
    logging.WARNING: 'warn',
    logging.ERROR: 'error',
    logging.CRITICAL: 'error',
}


@dataclass(frozen=True)
class LogClientCredentials:
    client_id: str
    client_secret: str


class RemoteLogClient:
    """Client for the remote log server.

    Attributes:
        base_url (str):
            Base URL of the log server.
        credentials (LogClientCredentials | None):
            Client credentials; set by `register()`, `initialize_from_environment()`
            or the constructor.
        session (requests.Session):
            HTTP session used for all requests.
    """

    def __init__(
        self,
        base_url: str,
        credentials: LogClientCredentials | None = None,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip('/')
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout
        self._access_token: str | None = None
        self._token_expiry: float | None = None

    def initialize_from_environment(self) -> bool:
        """Hydrate credentials from LOG_CLIENT_ID / LOG_CLIENT_SECRET.

        Returns:
            bool: True if both credentials were found.
        """
        client_id = os.getenv(ENV.RemoteLog.CLIENT_ID)
        client_secret = os.getenv(ENV.RemoteLog.CLIENT_SECRET)
        if client_id and client_secret:
            self.credentials = LogClientCredentials(client_id, client_secret)
        return self.credentials is not None

    def register(self, username: str, email: str) -> LogClientCredentials:
        """Register a new client with the log server and keep its credentials.

        Raises:
            RemoteLoggingError: If registration fails.
        """
        data = self._post('/register', {'username': username, 'email': email})
        try:
            self.credentials = LogClientCredentials(data['clientId'], data['clientSecret'])
        except KeyError as e:
            raise RemoteLoggingError(f'Malformed registration response (missing {e}).') from e
        return self.credentials

    def authenticate(self) -> str:
        """Return a valid bearer token, requesting a new one when the cached one expired.

        Raises:
            RemoteLoggingError: If credentials are missing or authentication fails.
        """
        if self.credentials is None:
            raise RemoteLoggingError('Client credentials not set. Register first.')

        if self._access_token and self._token_expiry and time.time() < self._token_expiry:
            return self._access_token

        data = self._post(
            '/auth',
            {
                'client_id': self.credentials.client_id,
                'client_secret': self.credentials.client_secret,
            },
        )
        try:
            self._access_token = data['access_token']
            self._token_expiry = time.time() + int(data['expires_in']) - TOKEN_EXPIRY_BUFFER_SECONDS
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteLoggingError('Malformed authentication response.') from e

        return self._access_token

    def submit(self, level: str, package: str, message: str) -> None:
        """Submit a single log entry.

        Raises:
            RemoteLoggingError: If the entry could not be delivered.
        """
        token = self.authenticate()
        payload = {
            'level': level,
            'package': package,
            'message': message,
            'timestamp': datetime.now(UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
        }
        self._post('/logs', payload, headers={'Authorization': f'Bearer {token}'})

    def _post(self, path: str, payload: dict, headers: dict | None = None) -> dict:
        try:
            response = self.session.post(f'{self.base_url}{path}', json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RemoteLoggingError(f'Request to {path} failed ({e}).') from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteLoggingError(f'Response of {path} is not valid JSON.') from e


class RemoteLogHandler(logging.Handler):
    """Ship log records to the remote log server, falling back to stderr.

    Records emitted by `requests`/`urllib3` themselves are never shipped to
    avoid feedback loops.
    """

    IGNORED_LOGGERS = ('urllib3', 'requests', __name__)

    def __init__(self, client: RemoteLogClient, level: int = logging.NOTSET):
        super().__init__(level)
        self.client = client
        self.fallback = logging.StreamHandler(sys.stderr)
        self.fallback.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(self.IGNORED_LOGGERS):
            return

        try:
            self.client.submit(LEVELS.get(record.levelno, 'info'), record.name, record.getMessage())
        except RemoteLoggingError as e:
            self.fallback.handle(
                logging.makeLogRecord(
                    {
                        'name': __name__,
                        'levelno': logging.ERROR,
                        'levelname': 'ERROR',
                        'msg': f'Failed to send log to server: {e}',
                    }
                )
            )
            self.fallback.handle(record)
        except Exception:
            self.handleError(record)
