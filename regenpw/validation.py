"""
RegenPW - Input Validation

Checks caller input before it reaches the deriver and mapper:
- Password length is an integer within [min, max]
- At least one keyword, and every keyword is a non-blank string
- At least one character class is enabled
- Master salt is either None or a non-empty string

Each validator returns None on success and raises on failure.
"""

from collections.abc import Sequence
from typing import Optional

from .config import DEFAULT_CONFIG, PasswordOptions, SecurityConfig
from .errors import InvalidConfiguration, InvalidInput


def validate_password_length(length, security: SecurityConfig = DEFAULT_CONFIG.security) -> None:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidInput("Password length must be a valid integer")

    if length < security.min_password_length:
        raise InvalidInput(
            f"Password length must be at least {security.min_password_length} characters"
        )

    if length > security.max_password_length:
        raise InvalidInput(
            f"Password length cannot exceed {security.max_password_length} characters"
        )


def validate_password_options(options) -> None:
    if not isinstance(options, PasswordOptions):
        raise InvalidConfiguration("Password options must be a PasswordOptions instance")

    for name, value in options.as_dict().items():
        if not isinstance(value, bool):
            raise InvalidConfiguration(f"Option '{name}' must be a boolean")

    if not options.active_classes():
        raise InvalidConfiguration("At least one character type must be enabled")


def validate_keywords(keywords) -> None:
    if isinstance(keywords, str) or not isinstance(keywords, Sequence):
        raise InvalidInput("Keywords must be a list of strings")

    if len(keywords) == 0:
        raise InvalidInput("At least one keyword is required")

    for i, keyword in enumerate(keywords):
        if not isinstance(keyword, str):
            raise InvalidInput(f"Keyword at index {i} must be a string")
        if not keyword.strip():
            raise InvalidInput(f"Keyword at index {i} cannot be empty or contain only whitespace")


def validate_master_salt(master_salt: Optional[str]) -> None:
    if master_salt is None:
        return

    if not isinstance(master_salt, str):
        raise InvalidInput("Master salt must be a string or None")

    if len(master_salt) == 0:
        raise InvalidInput("Master salt cannot be empty string (use None instead)")


def validate_all_inputs(
    keywords,
    length,
    options,
    master_salt: Optional[str] = None,
    security: SecurityConfig = DEFAULT_CONFIG.security,
) -> None:
    """Run every check in order; the first failure is raised."""
    validate_keywords(keywords)
    validate_password_length(length, security)
    validate_password_options(options)
    validate_master_salt(master_salt)
