"""Short URL record store

The record store owns the short URL lifecycle on top of a ShortURLBaseDAO:
creation (validation, shortcode allocation, expiry computation), lookups,
the expiry predicate, click recording, the cleanup sweep and aggregate stats.

Expiry is pull-based. A record is expired as soon as `now > expires_at`;
nothing evicts it until `cleanup_expired()` runs. Expired-but-not-cleaned
records still count toward shortcode uniqueness and `total_urls`.

Every mutating operation performs exactly one read-modify-write through the
DAO. Nothing is cached between calls.

NOTE: the uniqueness check and the write are not atomic. Two writers creating
      the same custom shortcode at the same moment can both succeed, and the
      last write wins.

Example:
    >>> store = ShortURLStore(ShortURLRedisDAO(prefix='linkshortener:dev'))
    >>> short_url = store.create('https://example.com/a', validity_minutes=1)
    >>> store.record_click(short_url.shortcode, source='https://news.ycombinator.com')
    True
    >>> store.stats().to_dict()
    {'totalUrls': 1, 'totalClicks': 1, 'activeUrls': 1}
"""

import logging
import urllib.parse
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, UTC

from beartype import beartype

from linkshortener.constants import Validity, DIRECT_SOURCE, UNKNOWN_LOCATION
from linkshortener.dao.base import ShortURLBaseDAO
from linkshortener.exceptions import InvalidURLError, InvalidValidityError, ShortcodeTakenError
from linkshortener.models import ShortURLModel, ClickModel
from linkshortener.utils.shortener import generate_unique_shortcode


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def is_absolute_url(url: str) -> bool:
    """True if `url` has both a scheme and a network location, e.g. 'https://example.com'."""
    try:
        components = urllib.parse.urlsplit(url)
    except ValueError:
        return False
    return bool(components.scheme) and bool(components.netloc)


@dataclass(frozen=True)
class ShortURLStats:
    """Aggregate numbers over the stored collection."""

    total_urls: int
    total_clicks: int
    active_urls: int

    def to_dict(self) -> dict[str, int]:
        return {
            'totalUrls': self.total_urls,
            'totalClicks': self.total_clicks,
            'activeUrls': self.active_urls,
        }


class ShortURLStore:
    """CRUD-like operations over the short URL collection.

    Attributes:
        dao (ShortURLBaseDAO):
            Persistence adapter holding the whole collection.
        clock (Callable[[], datetime]):
            Returns the current time as an aware UTC datetime.
    """

    def __init__(self, dao: ShortURLBaseDAO, clock: Callable[[], datetime] | None = None):
        self.dao = dao
        self.clock = clock or utcnow

    @beartype
    def create(
        self,
        original_url: str,
        custom_shortcode: str | None = None,
        validity_minutes: int = Validity.DEFAULT,
    ) -> ShortURLModel:
        """Shorten `original_url` and persist the new record.

        Args:
            original_url (str):
                Absolute URL to shorten.
            custom_shortcode (str | None):
                User-chosen shortcode. Blank or None allocates a random one.
            validity_minutes (int):
                Validity period, 1..1440 minutes. Defaults to 30.

        Returns:
            ShortURLModel: the stored record.

        Raises:
            InvalidURLError:
                If `original_url` is blank or not an absolute URL.
            InvalidValidityError:
                If `validity_minutes` is outside 1..1440.
            ShortcodeTakenError:
                If `custom_shortcode` is used by any stored record (expired or not).
            ShortcodeAllocationError:
                If no free shortcode could be generated.
            DataStoreError:
                If the collection could not be written.
        """
        original_url = original_url.strip()
        if not original_url:
            raise InvalidURLError('Original URL is required.')
        if not is_absolute_url(original_url):
            raise InvalidURLError(f"'{original_url}' is not a valid absolute URL.")

        if not Validity.MIN <= validity_minutes <= Validity.MAX:
            raise InvalidValidityError(
                f'Validity period must be between {Validity.MIN} and {Validity.MAX} minutes (given value: {validity_minutes}).'
            )

        shortcode = (custom_shortcode or '').strip()
        if shortcode:
            if self.exists(shortcode):
                logger.info('Custom shortcode already taken.', extra={'shortcode': shortcode})
                raise ShortcodeTakenError(f"Shortcode '{shortcode}' already exists.")
        else:
            shortcode = generate_unique_shortcode(self.exists)

        short_url = ShortURLModel.new(
            shortcode=shortcode,
            target=original_url,
            created_at=self.clock(),
            validity_minutes=validity_minutes,
        )
        self._save(short_url)

        logger.info(
            'Shortened %s to %s.',
            original_url,
            shortcode,
            extra={'shortcode': shortcode, 'validity_minutes': validity_minutes},
        )
        return short_url

    def list_all(self) -> list[ShortURLModel]:
        return self.dao.load_all()

    @beartype
    def get(self, shortcode: str) -> ShortURLModel | None:
        """Find the stored record with exactly this (case-sensitive) shortcode."""
        short_url = next((url for url in self.dao.load_all() if url.shortcode == shortcode), None)
        logger.debug('Looked up shortcode %s (found: %s).', shortcode, short_url is not None)
        return short_url

    def exists(self, shortcode: str) -> bool:
        return self.get(shortcode) is not None

    @beartype
    def is_expired(self, short_url: ShortURLModel) -> bool:
        return self.clock() > short_url.expires_at

    @beartype
    def record_click(self, shortcode: str, source: str | None = None, location: str | None = None) -> bool:
        """Append a click to an active short URL.

        Args:
            shortcode (str):
                Shortcode that was visited.
            source (str | None):
                Referrer of the visitor. Falls back to 'direct'.
            location (str | None):
                Coarse locale hint of the visitor. Falls back to 'unknown'.

        Returns:
            bool: True if the click was recorded, False if the shortcode is
                  unknown or expired (nothing is written in that case).

        Raises:
            DataStoreError:
                If the collection could not be written.
        """
        short_url = self.get(shortcode)
        if short_url is None:
            logger.warning('Attempted to record click for non-existent shortcode.', extra={'shortcode': shortcode})
            return False

        if self.is_expired(short_url):
            logger.warning('Attempted to record click for expired shortcode.', extra={'shortcode': shortcode})
            return False

        click = ClickModel(
            timestamp=self.clock(),
            source=source or DIRECT_SOURCE,
            location=location or UNKNOWN_LOCATION,
        )
        self._save(short_url.with_click(click))

        logger.info(
            'Recorded click for %s from %s.',
            shortcode,
            click.source,
            extra={'shortcode': shortcode, 'source': click.source, 'location': click.location},
        )
        return True

    def cleanup_expired(self) -> int:
        """Remove every expired record from the collection.

        The collection is only written when something was removed, so running
        the sweep twice in a row leaves the second run without effect.

        Returns:
            int: number of removed records.

        Raises:
            DataStoreError:
                If the collection could not be written.
        """
        short_urls = self.dao.load_all()
        active = [url for url in short_urls if not self.is_expired(url)]
        expired_count = len(short_urls) - len(active)

        if expired_count > 0:
            self.dao.save_all(active)
            logger.info('Cleaned up %d expired short URLs.', expired_count, extra={'expired_count': expired_count})

        return expired_count

    def stats(self) -> ShortURLStats:
        """Aggregate totals over every stored record (expired ones included in `total_urls`)."""
        short_urls = self.dao.load_all()
        stats = ShortURLStats(
            total_urls=len(short_urls),
            total_clicks=sum(len(url.clicks) for url in short_urls),
            active_urls=sum(1 for url in short_urls if not self.is_expired(url)),
        )
        logger.debug('Computed short URL stats.', extra=stats.to_dict())
        return stats

    def _save(self, short_url: ShortURLModel) -> None:
        # Read-modify-write: replace any record with the same id, append
        short_urls = [url for url in self.dao.load_all() if url.id != short_url.id]
        self.dao.save_all([*short_urls, short_url])
