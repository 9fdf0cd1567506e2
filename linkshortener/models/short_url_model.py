import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, UTC

from linkshortener.types import ShortURLRecord


def to_iso(value: datetime) -> str:
    """Serialize an aware datetime as ISO-8601 with a 'Z' suffix for UTC."""
    return value.isoformat().replace('+00:00', 'Z')


def from_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. Values without an offset are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


@dataclass(frozen=True)
class ClickModel:
    """Represent a single recorded visit of a short URL.

    Attributes:
        timestamp (datetime):
            Time of the click (UTC).
        source (str):
            Referrer of the visitor, or 'direct' when there is none.
        location (str):
            Coarse locale hint (e.g. timezone name), or 'unknown'.
    """

    timestamp: datetime
    source: str
    location: str

    def to_dict(self) -> ShortURLRecord:
        return {
            'timestamp': to_iso(self.timestamp),
            'source': self.source,
            'location': self.location,
        }

    @classmethod
    def from_dict(cls, data: ShortURLRecord) -> 'ClickModel':
        return cls(
            timestamp=from_iso(data['timestamp']),
            source=data['source'],
            location=data['location'],
        )


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL mapping and its click history.

    Attributes:
        id (str):
            Opaque identity assigned at creation, independent of the shortcode.
        shortcode (str):
            The unique short identifier representing the shortened URL.
        target (str):
            The original long URL that the shortcode redirects to.
        created_at (datetime):
            Creation time (UTC). Never changes.
        expires_at (datetime):
            `created_at + validity_minutes`. Never recomputed after creation.
        validity_minutes (int):
            Validity period in minutes, 1..1440.
        clicks (tuple[ClickModel, ...]):
            Recorded clicks in chronological order. Append-only.

    Example:
        >>> from datetime import datetime, UTC
        >>> url = ShortURLModel.new(
        ...     shortcode='abc123',
        ...     target='https://example.com/article/123',
        ...     created_at=datetime(2025, 10, 15, tzinfo=UTC),
        ...     validity_minutes=30,
        ... )
        >>> url.expires_at
        datetime.datetime(2025, 10, 15, 0, 30, tzinfo=datetime.timezone.utc)
        >>> url.to_dict()['originalUrl']
        'https://example.com/article/123'
    """

    # fmt: off
    id: str                                           # Opaque identity of the record
    shortcode: str                                    # Unique short identifier of shortened URL
    target: str                                       # Original long URL
    created_at: datetime                              # Creation time (UTC)
    expires_at: datetime                              # After this moment the record is expired
    validity_minutes: int                             # Validity period in minutes
    clicks: tuple[ClickModel, ...] = field(default=())  # Append-only click history
    # fmt: on

    @classmethod
    def new(cls, *, shortcode: str, target: str, created_at: datetime, validity_minutes: int, id: str | None = None) -> 'ShortURLModel':
        """Build a fresh record with `expires_at` derived from the validity period."""
        return cls(
            id=id or uuid.uuid4().hex,
            shortcode=shortcode,
            target=target,
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=validity_minutes),
            validity_minutes=validity_minutes,
        )

    def with_click(self, click: ClickModel) -> 'ShortURLModel':
        """Return a copy of this record with `click` appended to its history."""
        return replace(self, clicks=(*self.clicks, click))

    def to_dict(self) -> ShortURLRecord:
        return {
            'id': self.id,
            'shortcode': self.shortcode,
            'originalUrl': self.target,
            'createdAt': to_iso(self.created_at),
            'expiresAt': to_iso(self.expires_at),
            'validityMinutes': self.validity_minutes,
            'clicks': [click.to_dict() for click in self.clicks],
        }

    @classmethod
    def from_dict(cls, data: ShortURLRecord) -> 'ShortURLModel':
        """Rebuild a record from its stored JSON form.

        Raises:
            KeyError, TypeError, ValueError:
                If the stored record is missing fields or holds malformed values.
        """
        return cls(
            id=str(data['id']),
            shortcode=data['shortcode'],
            target=data['originalUrl'],
            created_at=from_iso(data['createdAt']),
            expires_at=from_iso(data['expiresAt']),
            validity_minutes=int(data['validityMinutes']),
            clicks=tuple(ClickModel.from_dict(click) for click in data.get('clicks', [])),
        )
