"""Lightweight validation helpers."""

from typing import Any

from concierge.utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy."""
    if value in (None, "", []) or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
