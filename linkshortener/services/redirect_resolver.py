"""Redirect resolution for short URLs

Resolving a shortcode walks a small state machine:

    LOADING -> REDIRECTING   (active short URL, click recorded best-effort)
            -> ERROR         (blank or unknown shortcode)
            -> EXPIRED       (short URL past its expiry)

Resolution failures are terminal states, not exceptions. Click recording
never changes the outcome of a resolution.

Navigation to the target is a one-shot side effect (`Redirect`) fired after
a short delay, or immediately via `go_now()`.

Example:
    >>> resolver = RedirectResolver(store)
    >>> resolution = resolver.resolve('abc123', source='direct', location='Europe/Sofia')
    >>> resolution.state
    <RedirectState.REDIRECTING: 'redirecting'>
    >>> Redirect(resolution.original_url, navigate=webbrowser.open).schedule()
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from beartype import beartype

from linkshortener.constants import REDIRECT_DELAY_SECONDS
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.services.short_url_store import ShortURLStore


logger = logging.getLogger(__name__)


class RedirectState(StrEnum):
    LOADING = 'loading'
    REDIRECTING = 'redirecting'
    ERROR = 'error'
    EXPIRED = 'expired'


INVALID_SHORTCODE_MESSAGE = 'Invalid shortcode provided.'
NOT_FOUND_MESSAGE = 'Short URL not found. It may have been deleted or never existed.'
EXPIRED_MESSAGE = 'This short URL has expired.'
REDIRECTING_MESSAGE = 'Redirecting...'


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a shortcode."""

    shortcode: str | None
    state: RedirectState
    message: str
    original_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is RedirectState.REDIRECTING


class RedirectResolver:
    """Resolve shortcodes to their target URL and record clicks."""

    def __init__(self, store: ShortURLStore):
        self.store = store

    @beartype
    def resolve(self, shortcode: str | None, source: str | None = None, location: str | None = None) -> Resolution:
        """Resolve `shortcode` and record a click when it is active.

        Args:
            shortcode (str | None):
                Requested shortcode.
            source (str | None):
                Referrer of the visitor ('direct' when missing).
            location (str | None):
                Coarse locale hint of the visitor ('unknown' when missing).

        Returns:
            Resolution: terminal state of the resolution.
        """
        if not shortcode or not shortcode.strip():
            logger.error('No shortcode provided for redirect.')
            return Resolution(shortcode, RedirectState.ERROR, INVALID_SHORTCODE_MESSAGE)

        logger.info('Processing redirect for shortcode %s.', shortcode, extra={'shortcode': shortcode})

        short_url = self.store.get(shortcode)
        if short_url is None:
            logger.warning('Shortcode not found.', extra={'shortcode': shortcode})
            return Resolution(shortcode, RedirectState.ERROR, NOT_FOUND_MESSAGE)

        if self.store.is_expired(short_url):
            logger.warning('Attempted access to expired shortcode.', extra={'shortcode': shortcode})
            return Resolution(shortcode, RedirectState.EXPIRED, EXPIRED_MESSAGE)

        resolution = Resolution(shortcode, RedirectState.REDIRECTING, REDIRECTING_MESSAGE, short_url.target)
        self._record_click(shortcode, source, location)
        return resolution

    def _record_click(self, shortcode: str, source: str | None, location: str | None) -> None:
        try:
            recorded = self.store.record_click(shortcode, source, location)
        except DataStoreError:
            logger.exception('Failed to record click.', extra={'shortcode': shortcode})
            return

        if not recorded:
            logger.error('Failed to record click.', extra={'shortcode': shortcode})


class Redirect:
    """One-shot navigation to a target URL.

    `schedule()` navigates after `delay` seconds; `go_now()` navigates
    immediately. Only the first of the two ever calls `navigate`.

    Attributes:
        url (str):
            Target URL.
        navigate (Callable[[str], object]):
            Performs the actual navigation, e.g. `webbrowser.open`.
        delay (float):
            Seconds to wait in `schedule()`. Defaults to 1.5.
    """

    def __init__(self, url: str, navigate: Callable[[str], object], delay: float = REDIRECT_DELAY_SECONDS):
        self.url = url
        self.navigate = navigate
        self.delay = delay
        self._lock = threading.Lock()
        self._fired = False
        self._timer: threading.Timer | None = None

    @property
    def fired(self) -> bool:
        return self._fired

    def schedule(self) -> threading.Timer:
        """Start the delayed navigation. Not cancellable once started."""
        if self._timer is None:
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()
        return self._timer

    def go_now(self) -> bool:
        """Navigate immediately, racing any scheduled navigation.

        Returns:
            bool: True if this call performed the navigation.
        """
        fired = self._fire()
        if fired:
            logger.info('User manually redirected to %s.', self.url)
        return fired

    def _fire(self) -> bool:
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        self.navigate(self.url)
        return True
