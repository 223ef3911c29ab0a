"""Charset selection from Content-Type headers."""

from __future__ import annotations

import codecs
import re

import structlog

from freshfetch.config import settings

logger = structlog.get_logger()

_CHARSET_RE = re.compile(r"""charset\s*=\s*["']?([^"';\s]+)""", re.IGNORECASE)


def resolve_charset(content_type: str | None, default: str | None = None) -> str:
    """Return the codec name declared by ``content_type``.

    Falls back to ``default`` (or the configured default charset) when the
    header is missing, has no charset parameter, or names an unknown codec.
    """
    fallback = default or settings.default_charset
    if not content_type:
        return fallback

    match = _CHARSET_RE.search(content_type)
    if not match:
        return fallback

    declared = match.group(1)
    try:
        return codecs.lookup(declared).name
    except LookupError:
        logger.warning("Unknown charset, using fallback", charset=declared, fallback=fallback)
        return fallback
