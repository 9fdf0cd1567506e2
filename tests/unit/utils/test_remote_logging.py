"""Unit tests for remote log shipping in remote_logging.py

Test coverage includes:

1. Credentials
   - Hydration from environment variables.
   - Registration stores issued credentials.

2. Authentication
   - Missing credentials raise RemoteLoggingError.
   - Bearer tokens are cached until shortly before expiry, then refreshed.

3. Submission
   - Log entries are posted with the bearer token.
   - HTTP failures raise RemoteLoggingError.

4. RemoteLogHandler
   - Records are shipped with mapped levels.
   - Delivery failures fall back to stderr and never raise.
   - Records of HTTP libraries are not shipped.
"""

import logging
from unittest.mock import MagicMock

import pytest
import requests
from freezegun import freeze_time

from linkshortener.exceptions import RemoteLoggingError
from linkshortener.utils.remote_logging import LogClientCredentials, RemoteLogClient, RemoteLogHandler


# -------------------------------
# Fixtures
# -------------------------------


def http_response(status_code=200, payload=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.content = b'{}' if payload is not None else b''
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f'{status_code} Error')
    return response


@pytest.fixture
def session():
    _session = MagicMock(spec=requests.Session)
    _session.post.return_value = http_response(payload={'access_token': 'token-1', 'token_type': 'Bearer', 'expires_in': 3600})
    return _session


@pytest.fixture
def client(session):
    return RemoteLogClient(
        'https://logs.example.com/',
        credentials=LogClientCredentials('client-id', 'client-secret'),
        session=session,
    )


def make_record(name='linkshortener.services.short_url_store', level=logging.INFO, msg='Shortened %s.', args=('abc123',)):
    return logging.LogRecord(name, level, __file__, 1, msg, args, None)


# -------------------------------
# 1. Credentials
# -------------------------------


def test_initialize_from_environment(monkeypatch, session):
    monkeypatch.setenv('LOG_CLIENT_ID', 'env-id')
    monkeypatch.setenv('LOG_CLIENT_SECRET', 'env-secret')
    client = RemoteLogClient('https://logs.example.com', session=session)

    assert client.initialize_from_environment() is True
    assert client.credentials == LogClientCredentials('env-id', 'env-secret')


def test_initialize_from_environment_without_credentials(monkeypatch, session):
    monkeypatch.delenv('LOG_CLIENT_ID', raising=False)
    monkeypatch.delenv('LOG_CLIENT_SECRET', raising=False)
    client = RemoteLogClient('https://logs.example.com', session=session)

    assert client.initialize_from_environment() is False
    assert client.credentials is None


def test_register(session):
    session.post.return_value = http_response(payload={'clientId': 'new-id', 'clientSecret': 'new-secret'})
    client = RemoteLogClient('https://logs.example.com', session=session)

    credentials = client.register('alice', 'alice@example.com')

    assert credentials == LogClientCredentials('new-id', 'new-secret')
    assert client.credentials == credentials
    session.post.assert_called_once_with(
        'https://logs.example.com/register',
        json={'username': 'alice', 'email': 'alice@example.com'},
        headers=None,
        timeout=5,
    )


def test_register_with_malformed_response(session):
    session.post.return_value = http_response(payload={'clientId': 'new-id'})
    client = RemoteLogClient('https://logs.example.com', session=session)

    with pytest.raises(RemoteLoggingError, match='Malformed registration response'):
        client.register('alice', 'alice@example.com')


# -------------------------------
# 2. Authentication
# -------------------------------


def test_authenticate_without_credentials(session):
    client = RemoteLogClient('https://logs.example.com', session=session)

    with pytest.raises(RemoteLoggingError, match='Client credentials not set'):
        client.authenticate()
    session.post.assert_not_called()


def test_authenticate_requests_token(client, session):
    assert client.authenticate() == 'token-1'
    session.post.assert_called_once_with(
        'https://logs.example.com/auth',
        json={'client_id': 'client-id', 'client_secret': 'client-secret'},
        headers=None,
        timeout=5,
    )


def test_authenticate_caches_token(client, session):
    with freeze_time('2025-10-15 12:00:00') as frozen:
        client.authenticate()
        frozen.tick(3600 - 61)
        assert client.authenticate() == 'token-1'

    assert session.post.call_count == 1


def test_authenticate_refreshes_expired_token(client, session):
    with freeze_time('2025-10-15 12:00:00') as frozen:
        client.authenticate()
        session.post.return_value = http_response(payload={'access_token': 'token-2', 'expires_in': 3600})
        frozen.tick(3600 - 59)  # within the refresh buffer
        assert client.authenticate() == 'token-2'

    assert session.post.call_count == 2


def test_authenticate_with_rejected_credentials(client, session):
    session.post.return_value = http_response(status_code=401)

    with pytest.raises(RemoteLoggingError, match='Request to /auth failed'):
        client.authenticate()


# -------------------------------
# 3. Submission
# -------------------------------


@freeze_time('2025-10-15 12:00:00')
def test_submit_posts_log_with_bearer_token(client, session):
    client.submit('info', 'ShortURLStore', 'Shortened https://example.com to abc123.')

    session.post.assert_called_with(
        'https://logs.example.com/logs',
        json={
            'level': 'info',
            'package': 'ShortURLStore',
            'message': 'Shortened https://example.com to abc123.',
            'timestamp': '2025-10-15T12:00:00.000Z',
        },
        headers={'Authorization': 'Bearer token-1'},
        timeout=5,
    )


def test_submit_with_unreachable_server(client, session):
    session.post.side_effect = requests.ConnectionError('unreachable')

    with pytest.raises(RemoteLoggingError):
        client.submit('info', 'ShortURLStore', 'message')


# -------------------------------
# 4. RemoteLogHandler
# -------------------------------


@pytest.mark.parametrize(
    'level, expected',
    [
        (logging.DEBUG, 'debug'),
        (logging.INFO, 'info'),
        (logging.WARNING, 'warn'),
        (logging.ERROR, 'error'),
    ],
)
def test_handler_ships_records(level, expected):
    client = MagicMock(spec=RemoteLogClient)
    handler = RemoteLogHandler(client)

    handler.emit(make_record(level=level))

    client.submit.assert_called_once_with(expected, 'linkshortener.services.short_url_store', 'Shortened abc123.')


def test_handler_falls_back_to_stderr(capsys):
    client = MagicMock(spec=RemoteLogClient)
    client.submit.side_effect = RemoteLoggingError('Request to /logs failed (unreachable).')
    handler = RemoteLogHandler(client)

    handler.emit(make_record(level=logging.WARNING))

    err = capsys.readouterr().err
    assert 'Failed to send log to server: Request to /logs failed (unreachable).' in err
    assert '[WARNING] linkshortener.services.short_url_store: Shortened abc123.' in err


def test_handler_never_raises_into_caller(session):
    session.post.side_effect = requests.ConnectionError('unreachable')
    logger = logging.getLogger('linkshortener.test.remote')
    logger.propagate = False
    handler = RemoteLogHandler(RemoteLogClient('https://logs.example.com', LogClientCredentials('id', 'secret'), session))
    logger.addHandler(handler)
    try:
        logger.error('Something went wrong.')
    finally:
        logger.removeHandler(handler)


def test_handler_skips_http_library_records():
    client = MagicMock(spec=RemoteLogClient)
    handler = RemoteLogHandler(client)

    handler.emit(make_record(name='urllib3.connectionpool'))

    client.submit.assert_not_called()
