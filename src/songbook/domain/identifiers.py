"""Deterministic and random identifier minting.

Class and collection identifiers are derived from (school, date, name) so that
re-creating the same container is idempotent. Groups and raw records get random
identifiers.
"""

from __future__ import annotations

import hashlib
import re
import secrets
import string
from datetime import date, datetime
from typing import Final

RECORD_ID_PREFIX: Final[str] = "rec"
RECORD_ID_LENGTH: Final[int] = 14
_RECORD_ALPHABET: Final[str] = string.ascii_letters + string.digits

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_UNDERSCORES = re.compile(r"_+")


def new_record_id() -> str:
    """Return a fresh store handle (``rec`` + 14 alphanumerics)."""

    suffix = "".join(secrets.choice(_RECORD_ALPHABET) for _ in range(RECORD_ID_LENGTH))
    return f"{RECORD_ID_PREFIX}{suffix}"


def _slug(value: str, max_length: int) -> str:
    slug = _UNDERSCORES.sub("_", _NON_ALNUM.sub("_", value.lower())).strip("_")
    return slug[:max_length]


def _date_part(value: date | datetime | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return value.split("T", 1)[0].replace("-", "")


def _iso(value: date | datetime | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _short_hash(*parts: str) -> str:
    return hashlib.md5("|".join(parts).encode(), usedforsecurity=False).hexdigest()[:6]


def derive_event_id(
    school_name: str,
    event_type: str,
    event_date: date | datetime | str | None = None,
) -> str:
    """Return the canonical event id, e.g. ``evt_calder_high_music_event_20251120_a1b2c3``."""

    school_slug = _slug(school_name, 30)
    type_slug = _slug(event_type, 20)
    date_str = _date_part(event_date)
    digest = _short_hash(school_name, event_type, _iso(event_date))
    if date_str:
        return f"evt_{school_slug}_{type_slug}_{date_str}_{digest}"
    return f"evt_{school_slug}_{type_slug}_{digest}"


def derive_class_id(
    school_name: str,
    event_date: date | datetime | str,
    name: str,
    *,
    prefix: str = "cls",
    scope: str | None = None,
) -> str:
    """Return the deterministic identifier of a class or collection container.

    ``scope`` (an event id) is mixed into the hash when another event at the
    same school and date already owns the plain identifier.
    """

    school_slug = _slug(school_name, 30)
    name_slug = _NON_ALNUM.sub("", name.lower())[:15]
    date_str = _date_part(event_date)
    parts = [school_name, _iso(event_date), name]
    if scope:
        parts.append(scope)
    digest = _short_hash(*parts)
    return f"{prefix}_{school_slug}_{date_str}_{name_slug}_{digest}"


def derive_collection_id(
    school_name: str,
    event_date: date | datetime | str,
    name: str,
    *,
    scope: str | None = None,
) -> str:
    return derive_class_id(school_name, event_date, name, prefix="col", scope=scope)


def new_group_id(event_id: str) -> str:
    return f"group_{event_id}_{secrets.token_hex(4)}"
