"""Wizard and child identifiers."""

import uuid


def generate_id() -> str:
    """Generate a new random (version 4) UUID string."""
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Check that ``value`` is a canonical UUID string.

    Only the hyphenated 36 character form is accepted so that the session
    key derived from an id is unambiguous.
    """
    if not isinstance(value, str) or len(value) != 36:
        return False
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return str(parsed) == value.lower()
