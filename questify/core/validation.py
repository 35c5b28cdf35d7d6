"""Client-side checks for the login and registration forms."""

from __future__ import annotations

import re

from questify.constants import messages
from questify.constants.quiz_constants import MIN_PASSWORD_LENGTH
from questify.core.errors import ValidationError

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.fullmatch(email))


def validate_login(email: str, password: str) -> None:
    if not email.strip():
        raise ValidationError(messages.EMAIL_REQUIRED)
    if not password.strip():
        raise ValidationError(messages.PASSWORD_REQUIRED)
    if not is_valid_email(email):
        raise ValidationError(messages.INVALID_EMAIL)


def validate_registration(name: str, email: str, password: str, confirm_password: str) -> None:
    if not name.strip():
        raise ValidationError(messages.NAME_REQUIRED)
    if not email.strip():
        raise ValidationError(messages.EMAIL_REQUIRED)
    if not is_valid_email(email):
        raise ValidationError(messages.INVALID_EMAIL)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(messages.PASSWORD_TOO_SHORT)
    if password != confirm_password:
        raise ValidationError(messages.PASSWORDS_DO_NOT_MATCH)
