"""Identifier and label normalisation helpers."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_NON_ALNUM_ANY_CASE = re.compile(r"[^a-z0-9]+", re.IGNORECASE)
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[._-]+")
_WHITESPACE = re.compile(r"\s+")


def slugify(value: str) -> str:
    """Return a lowercase, hyphen-separated, URL-safe slug.

    Args:
        value (str): Raw text.

    Returns:
        str: Slug, possibly empty.
    """
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


def sentence_case(value: str) -> str:
    """Turn an identifier such as `firstName` or `bin_type` into a display label.

    Args:
        value (str): Raw identifier.

    Returns:
        str: Label with split words and an upper-cased first letter.
    """
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", value)
    spaced = _SEPARATORS.sub(" ", spaced)
    spaced = _WHITESPACE.sub(" ", spaced).strip()
    return spaced[:1].upper() + spaced[1:]


def comparable_key(value: str) -> str:
    """Normalise a key for fuzzy comparison (lowercase alphanumerics joined by hyphens)."""
    return _NON_ALNUM_ANY_CASE.sub("-", value).lower()


def first_present(meta: object, keys: tuple[str, ...]) -> object | None:
    """Return the first non-null value found under any of `keys`.

    Args:
        meta (object): Candidate mapping.
        keys (tuple[str, ...]): Synonym keys in priority order.

    Returns:
        object | None: First value that is not None.
    """
    if not isinstance(meta, dict):
        return None
    for key in keys:
        value = meta.get(key)
        if value is not None:
            return value
    return None


def first_string(meta: object, keys: tuple[str, ...]) -> str | None:
    """Return the first synonym value when it is a string."""
    value = first_present(meta, keys)
    return value if isinstance(value, str) else None


def first_number(meta: object, keys: tuple[str, ...]) -> int | float | None:
    """Return the first synonym value that is a number (booleans excluded)."""
    if not isinstance(meta, dict):
        return None
    for key in keys:
        value = meta.get(key)
        if isinstance(value, int | float) and not isinstance(value, bool):
            return value
    return None
