"""
Validation utilities for procauth.
Provides argument checks shared by the subject model and the rule-set helper.
"""

from typing import Any, Optional, Sized

from ..types.errors import InvalidArgumentError


def is_blank(value: Optional[str]) -> bool:
    """True for None, non-strings and strings containing only whitespace."""
    return not isinstance(value, str) or not value.strip()


def require_not_none(value: Any, name: str) -> Any:
    """Return value, raising InvalidArgumentError if it is None."""
    if value is None:
        raise InvalidArgumentError(f"{name} must not be None", field=name)
    return value


def require_non_blank(value: Optional[str], name: str) -> str:
    """Return value, raising InvalidArgumentError if it is None or blank."""
    require_not_none(value, name)
    if is_blank(value):
        raise InvalidArgumentError(f"{name} blank", field=name, value=value)
    return value


def require_non_empty(value: Optional[Sized], name: str) -> Sized:
    """Return value, raising InvalidArgumentError if it is None or empty."""
    require_not_none(value, name)
    if len(value) == 0:
        raise InvalidArgumentError(f"{name} empty", field=name)
    return value

