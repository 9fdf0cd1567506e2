"""Shortcode generation utility

This module provides helpers for generating random, fixed-length Base62
shortcodes and for allocating one that isn't used by any stored record.

Functions:
    generate_shortcode(length=6):
        Generate a random shortcode suitable for use as a URL slug.

    generate_unique_shortcode(exists, max_attempts=10, length=6):
        Generate shortcodes until one is free, within a bounded retry budget.

Example:
    >>> from linkshortener.utils import generate_shortcode
    >>> generate_shortcode()
    'aZ3k9Q'
"""

import string
import secrets
from collections.abc import Callable

from linkshortener.constants import Shortcode
from linkshortener.exceptions import ShortcodeAllocationError


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


def generate_shortcode(length: int = Shortcode.LENGTH) -> str:
    """Generate a random Base62 shortcode.

    Every character is drawn uniformly from [a-zA-Z0-9]. No visually
    ambiguous characters are excluded.

    Args:
        length (int, optional):
            Length of the resulting shortcode. Defaults to 6.

    Returns:
        str: A random alphanumeric shortcode.

    Raises:
        TypeError: If length is not an integer.
        ValueError: If length is not positive.
    """
    if not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    return ''.join(secrets.choice(ALPHABET) for _ in range(length))


def generate_unique_shortcode(
    exists: Callable[[str], bool],
    max_attempts: int = Shortcode.MAX_ATTEMPTS,
    length: int = Shortcode.LENGTH,
) -> str:
    """Generate a shortcode for which `exists` is False.

    The collision probability in a 62^6 space is tiny, but the loop is still
    bounded: after `max_attempts` draws that all collide, allocation fails.

    Args:
        exists (Callable[[str], bool]):
            Predicate telling whether a shortcode is already taken.
        max_attempts (int, optional):
            Number of shortcodes drawn before giving up. Defaults to 10.
        length (int, optional):
            Length of the shortcode. Defaults to 6.

    Returns:
        str: A shortcode not currently taken.

    Raises:
        ShortcodeAllocationError:
            If every drawn shortcode is already taken.

    Example:
        >>> generate_unique_shortcode(lambda code: False)
        'Xk81bQ'
    """
    for _ in range(max_attempts):
        shortcode = generate_shortcode(length)
        if not exists(shortcode):
            return shortcode

    raise ShortcodeAllocationError(f'Could not allocate a unique shortcode after {max_attempts} attempts.')
