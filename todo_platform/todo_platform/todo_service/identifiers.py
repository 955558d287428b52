"""
Resource identifier generation and validation.

Ids are 32 lowercase hexadecimal characters. Anything supplied by a caller
goes through ``parse_id`` before it reaches the database; a malformed id is
reported exactly like a missing one.
"""
import re
import uuid

from .errors import InvalidIdentifier

_ID_PATTERN = re.compile(r"[0-9a-fA-F]{32}")


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(raw) -> bool:
    return isinstance(raw, str) and _ID_PATTERN.fullmatch(raw) is not None


def parse_id(raw) -> str:
    """
    Parse an externally supplied identifier.

    Raises:
        InvalidIdentifier: If ``raw`` is not a 32-character hex string
    """
    if not is_valid_id(raw):
        raise InvalidIdentifier(f"Invalid identifier: {raw!r}")
    return raw.lower()
