"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, trimmed email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a phone number in any common international format.

    Keeps the caller's formatting but requires 7 to 15 digits and only
    digits, spaces, dashes, dots, parentheses and a leading plus.

    Raises:
        ValueError: If the number is malformed
    """
    if not phone:
        return phone

    phone = phone.strip()
    if not re.fullmatch(r"\+?[\d\s().-]+", phone):
        raise ValueError("Phone number contains invalid characters")

    digits = re.sub(r"\D", "", phone)
    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")
    return phone


def require_text(value: Optional[str], field: str) -> str:
    """Reject missing or whitespace-only text"""
    if value is None or not value.strip():
        raise ValueError(f"{field} is required")
    return value.strip()
