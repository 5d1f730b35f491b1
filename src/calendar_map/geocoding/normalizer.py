"""Cache-key normalisation for free-text addresses."""

from __future__ import annotations


def normalize_address(address: str) -> str:
    """Return the cache key for an address.

    Surrounding whitespace is trimmed and the text lower-cased, so
    "  262 High Holborn " and "262 HIGH HOLBORN" share one cache slot.
    The key is only ever used for cache bookkeeping; providers always
    receive the address exactly as the user wrote it.
    """
    return address.strip().lower()
