"""
Field validation utilities.

Provides centralized validation logic for child, plan and credential fields
so request models and services reject the same values.
"""

from typing import List, Optional, Union

from core.constants import (
    MAX_CHILD_AGE, MAX_PASSWORD_BYTES, MIN_CHILD_AGE, MIN_PASSWORD_LENGTH
)

VALID_GENDERS = ('male', 'female')
VALID_DIFFICULTY_LEVELS = ('beginner', 'intermediate', 'advanced')
VALID_REQUEST_STATUSES = ('none', 'pending', 'approved', 'rejected')


def validate_gender_field(v: Union[str, None]) -> Optional[str]:
    """
    Validate gender field value.

    Valid values: 'male', 'female', or None.

    Raises:
        ValueError: If the value is not a valid gender value
    """
    if v is None:
        return None
    v = v.strip().lower()
    if v in VALID_GENDERS:
        return v
    raise ValueError('Gender must be male or female')


def validate_child_age(v: Optional[int]) -> Optional[int]:
    if v is None:
        return None
    if not MIN_CHILD_AGE <= v <= MAX_CHILD_AGE:
        raise ValueError(f'Age must be between {MIN_CHILD_AGE} and {MAX_CHILD_AGE}')
    return v


def validate_choice(v: Optional[str], choices: tuple, field_name: str) -> Optional[str]:
    if v is None:
        return None
    if v not in choices:
        raise ValueError(f'{field_name} must be one of: {", ".join(choices)}')
    return v


def validate_password(v: str) -> str:
    """
    Validate a new password.

    bcrypt only looks at the first 72 bytes, so longer secrets are refused
    instead of being silently truncated.
    """
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if len(v.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')
    return v


def validate_allowed_days(v: Optional[List[int]]) -> Optional[List[int]]:
    """Weekday numbers, 0 (Sunday) to 6 (Saturday), deduplicated and sorted."""
    if v is None:
        return None
    for day in v:
        if not 0 <= day <= 6:
            raise ValueError('Allowed days must be between 0 and 6')
    return sorted(set(v))
