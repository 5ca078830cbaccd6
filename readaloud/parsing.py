"""Shared parsing helpers for config and ledger value normalization."""

from __future__ import annotations

import re


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_IDENTITY_SEPARATORS = re.compile(r"[;,]")


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_required_boolean(value: str, field_name: str) -> bool:
    """Parse a required runtime boolean value from accepted textual tokens.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is not None:
        return parsed

    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def parse_non_negative_count(value: object) -> int | None:
    """Parse a whole, non-negative count from ledger cell text.

    Spreadsheet exports often render integers as `3.0`, so integral floats are
    accepted. Returns `None` for blank or malformed values.
    """

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    try:
        parsed = float(normalized)
    except ValueError:
        return None
    if parsed < 0 or not parsed.is_integer():
        return None
    return int(parsed)


def normalize_identity(value: str) -> str:
    """Normalize a requester identity (e-mail) for case-insensitive matching."""

    return value.strip().lower()


def split_identities(raw: str) -> tuple[str, ...]:
    """Split a comma/semicolon separated identity list into normalized entries."""

    identities = (normalize_identity(item) for item in _IDENTITY_SEPARATORS.split(raw))
    return tuple(identity for identity in identities if identity)
