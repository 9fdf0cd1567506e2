"""Unit tests for RedirectResolver and Redirect

Test coverage includes:

1. Resolution states
   - Blank shortcode -> ERROR (invalid shortcode).
   - Unknown shortcode -> ERROR (not found).
   - Expired shortcode -> EXPIRED, no click recorded.
   - Active shortcode -> REDIRECTING with target URL, click recorded.

2. Best-effort click recording
   - Storage failures while recording never change the resolution.

3. One-shot navigation
   - go_now() navigates immediately, exactly once.
   - schedule() navigates after the delay.
   - Racing schedule() and go_now() navigates once.
"""

import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import redis

from linkshortener.services import RedirectResolver, RedirectState, Redirect, ShortURLStore
from linkshortener.services.redirect_resolver import INVALID_SHORTCODE_MESSAGE, NOT_FOUND_MESSAGE, EXPIRED_MESSAGE


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def resolver(store):
    return RedirectResolver(store)


@pytest.fixture
def active_url(store):
    return store.create('https://example.com/blog/article-123', custom_shortcode='abc123', validity_minutes=10)


# -------------------------------
# 1. Resolution states
# -------------------------------


@pytest.mark.parametrize('shortcode', [None, '', '   '])
def test_resolve_blank_shortcode(resolver, shortcode):
    resolution = resolver.resolve(shortcode)

    assert resolution.state is RedirectState.ERROR
    assert resolution.message == INVALID_SHORTCODE_MESSAGE
    assert resolution.original_url is None
    assert not resolution.succeeded


def test_resolve_unknown_shortcode(resolver, active_url):
    resolution = resolver.resolve('zzz999')

    assert resolution.state is RedirectState.ERROR
    assert resolution.message == NOT_FOUND_MESSAGE
    assert resolution.shortcode == 'zzz999'


def test_resolve_expired_shortcode(resolver, store, clock, active_url):
    clock.advance(timedelta(minutes=11))

    resolution = resolver.resolve('abc123', source='https://google.com')

    assert resolution.state is RedirectState.EXPIRED
    assert resolution.message == EXPIRED_MESSAGE
    assert resolution.original_url is None
    assert store.get('abc123').clicks == ()


def test_resolve_active_shortcode(resolver, store, active_url):
    resolution = resolver.resolve('abc123', source='https://google.com', location='Europe/Sofia')

    assert resolution.state is RedirectState.REDIRECTING
    assert resolution.succeeded
    assert resolution.original_url == 'https://example.com/blog/article-123'

    (click,) = store.get('abc123').clicks
    assert click.source == 'https://google.com'
    assert click.location == 'Europe/Sofia'


def test_resolve_active_shortcode_without_metadata(resolver, store, active_url):
    resolver.resolve('abc123')

    (click,) = store.get('abc123').clicks
    assert (click.source, click.location) == ('direct', 'unknown')


def test_resolve_records_one_click_per_visit(resolver, store, active_url):
    for _ in range(3):
        resolver.resolve('abc123')
    assert len(store.get('abc123').clicks) == 3


# -------------------------------
# 2. Best-effort click recording
# -------------------------------


def test_resolve_when_click_write_fails(resolver, fake_redis, active_url):
    fake_redis.set.side_effect = redis.exceptions.ConnectionError('Connection error')

    resolution = resolver.resolve('abc123')

    assert resolution.state is RedirectState.REDIRECTING
    assert resolution.original_url == 'https://example.com/blog/article-123'


def test_resolve_when_click_is_rejected(active_url):
    store = MagicMock(spec=ShortURLStore)
    store.get.return_value = active_url
    store.is_expired.return_value = False
    store.record_click.return_value = False

    resolution = RedirectResolver(store).resolve('abc123', 'direct', 'UTC')

    assert resolution.state is RedirectState.REDIRECTING
    store.record_click.assert_called_once_with('abc123', 'direct', 'UTC')


# -------------------------------
# 3. One-shot navigation
# -------------------------------


def test_go_now_navigates_once():
    navigate = MagicMock()
    redirect = Redirect('https://example.com', navigate)

    assert redirect.go_now() is True
    assert redirect.go_now() is False

    navigate.assert_called_once_with('https://example.com')
    assert redirect.fired


def test_schedule_navigates_after_delay():
    navigated = threading.Event()
    navigate = MagicMock(side_effect=lambda url: navigated.set())
    redirect = Redirect('https://example.com', navigate, delay=0.01)

    timer = redirect.schedule()
    timer.join(timeout=2)

    assert navigated.is_set()
    navigate.assert_called_once_with('https://example.com')


def test_schedule_is_started_once():
    redirect = Redirect('https://example.com', MagicMock(), delay=60)
    try:
        assert redirect.schedule() is redirect.schedule()
    finally:
        redirect.schedule().cancel()


def test_go_now_races_scheduled_navigation():
    navigate = MagicMock()
    redirect = Redirect('https://example.com', navigate, delay=0.05)

    timer = redirect.schedule()
    assert redirect.go_now() is True
    timer.join(timeout=2)

    navigate.assert_called_once_with('https://example.com')


def test_default_delay():
    assert Redirect('https://example.com', MagicMock()).delay == 1.5
