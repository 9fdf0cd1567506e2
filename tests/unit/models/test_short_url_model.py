"""Unit tests for ShortURLModel and ClickModel

Test coverage includes:

1. Construction
   - new() derives expires_at from the validity period and assigns an id.
   - Models are immutable.

2. Click history
   - with_click() appends without touching the original record.

3. Serialization
   - to_dict() uses the stored JSON field names and ISO-8601 timestamps.
   - from_dict() restores an identical record, including empty click history.
   - from_dict() accepts JavaScript-style timestamps ('...000Z').
   - Malformed records raise.
"""

import dataclasses
import json
from datetime import datetime, timedelta, UTC

import pytest

from linkshortener.models import ShortURLModel, ClickModel


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def created_at():
    return datetime(2025, 10, 15, 12, 0, 0, 123456, tzinfo=UTC)


@pytest.fixture
def short_url(created_at):
    return ShortURLModel.new(
        shortcode='abc123',
        target='https://example.com/blog/article-123',
        created_at=created_at,
        validity_minutes=30,
    )


# -------------------------------
# 1. Construction
# -------------------------------


def test_new_derives_expiry_from_validity(short_url, created_at):
    assert short_url.expires_at - short_url.created_at == timedelta(minutes=30)
    assert short_url.created_at == created_at
    assert short_url.clicks == ()


def test_new_assigns_unique_ids(created_at):
    first = ShortURLModel.new(shortcode='a', target='https://a.com', created_at=created_at, validity_minutes=1)
    second = ShortURLModel.new(shortcode='b', target='https://b.com', created_at=created_at, validity_minutes=1)
    assert first.id
    assert first.id != second.id


def test_new_keeps_given_id(created_at):
    short_url = ShortURLModel.new(id='my-id', shortcode='a', target='https://a.com', created_at=created_at, validity_minutes=1)
    assert short_url.id == 'my-id'


def test_model_is_immutable(short_url):
    with pytest.raises(dataclasses.FrozenInstanceError):
        short_url.shortcode = 'other'


# -------------------------------
# 2. Click history
# -------------------------------


def test_with_click_appends_click(short_url, created_at):
    click = ClickModel(timestamp=created_at + timedelta(minutes=1), source='direct', location='Europe/Sofia')

    clicked = short_url.with_click(click)

    assert clicked.clicks == (click,)
    assert short_url.clicks == ()
    assert clicked.id == short_url.id
    assert clicked.expires_at == short_url.expires_at


def test_with_click_preserves_order(short_url, created_at):
    first = ClickModel(timestamp=created_at, source='direct', location='unknown')
    second = ClickModel(timestamp=created_at + timedelta(seconds=5), source='https://t.co', location='UTC')

    clicked = short_url.with_click(first).with_click(second)

    assert clicked.clicks == (first, second)


# -------------------------------
# 3. Serialization
# -------------------------------


def test_to_dict_uses_stored_field_names(short_url):
    data = short_url.to_dict()

    assert data == {
        'id': short_url.id,
        'shortcode': 'abc123',
        'originalUrl': 'https://example.com/blog/article-123',
        'createdAt': '2025-10-15T12:00:00.123456Z',
        'expiresAt': '2025-10-15T12:30:00.123456Z',
        'validityMinutes': 30,
        'clicks': [],
    }


def test_round_trip_without_clicks(short_url):
    restored = ShortURLModel.from_dict(json.loads(json.dumps(short_url.to_dict())))
    assert restored == short_url
    assert restored.clicks == ()


def test_round_trip_with_clicks(short_url, created_at):
    clicked = short_url.with_click(ClickModel(timestamp=created_at, source='direct', location='unknown'))
    restored = ShortURLModel.from_dict(json.loads(json.dumps(clicked.to_dict())))
    assert restored == clicked


def test_from_dict_accepts_javascript_timestamps():
    data = {
        'id': '1760529600000',
        'shortcode': 'Xy12Ab',
        'originalUrl': 'https://example.com',
        'createdAt': '2025-10-15T12:00:00.000Z',
        'expiresAt': '2025-10-15T12:30:00.000Z',
        'validityMinutes': 30,
        'clicks': [{'timestamp': '2025-10-15T12:01:00.000Z', 'source': 'direct', 'location': 'Europe/Sofia'}],
    }

    short_url = ShortURLModel.from_dict(data)

    assert short_url.created_at == datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC)
    assert short_url.clicks[0].location == 'Europe/Sofia'


def test_from_dict_with_missing_field_raises():
    with pytest.raises(KeyError):
        ShortURLModel.from_dict({'id': '1', 'shortcode': 'abc123'})


def test_from_dict_reads_offsetless_timestamps_as_utc():
    data = {
        'id': '1',
        'shortcode': 'abc123',
        'originalUrl': 'https://example.com',
        'createdAt': '2025-10-15T12:00:00',
        'expiresAt': '2025-10-15T12:30:00',
        'validityMinutes': 30,
        'clicks': [{'timestamp': '2025-10-15T12:01:00', 'source': 'direct', 'location': 'unknown'}],
    }

    short_url = ShortURLModel.from_dict(data)

    assert short_url.created_at == datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC)
    assert short_url.expires_at.tzinfo is not None
    assert short_url.clicks[0].timestamp == datetime(2025, 10, 15, 12, 1, 0, tzinfo=UTC)
