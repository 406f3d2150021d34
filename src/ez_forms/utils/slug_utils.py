"""Public slug generation for forms"""

import re
import time
from typing import Optional

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

SUFFIX_DIGITS = 6


def current_millis() -> int:
    return time.time_ns() // 1_000_000


def slugify_title(title: str) -> str:
    """Lower-case the title and collapse every non-alphanumeric run into one hyphen"""
    return _NON_ALPHANUMERIC.sub("-", (title or "").lower()).strip("-")


def generate_slug(title: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Derive a URL-safe slug from a form title.

    The slug is the slugified title followed by the low-order six decimal
    digits of a millisecond timestamp, e.g. ``"team-lunch-483920"``. A title
    with no alphanumeric characters yields the bare suffix.

    Args:
        title: Form title
        timestamp_ms: Milliseconds since the epoch; defaults to the current time

    Returns:
        Slug matching ``^([a-z0-9]+(-[a-z0-9]+)*-)?\\d{6}$``
    """
    if timestamp_ms is None:
        timestamp_ms = current_millis()

    suffix = f"{timestamp_ms % 10**SUFFIX_DIGITS:0{SUFFIX_DIGITS}d}"
    base = slugify_title(title)
    return f"{base}-{suffix}" if base else suffix
