"""
Input validation and sanitization for contact form submissions.

The acceptance rules are deliberately lenient (a plain digit count for phone
numbers, a two-part pattern for email) and must keep the same boundary the
portfolio front end validates against.
"""

import re
from typing import Dict, Optional


MIN_NAME_LENGTH = 2
MIN_MESSAGE_LENGTH = 10
PHONE_DIGITS = 10

NAME_ERROR = "Name must be at least 2 characters long"
PHONE_ERROR = "Please enter a valid 10-digit phone number"
EMAIL_ERROR = "Please enter a valid email address"
MESSAGE_ERROR = "Message must be at least 10 characters long"

# Error message per request field, used when a field is missing or not a string
FIELD_ERRORS = {
    "name": NAME_ERROR,
    "number": PHONE_ERROR,
    "email": EMAIL_ERROR,
    "message": MESSAGE_ERROR,
}

_NON_DIGIT = re.compile(r"[^0-9]")
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def phone_digits(number: str) -> str:
    """Strip every character that is not an ASCII digit."""
    return _NON_DIGIT.sub("", number)


def validate_name(name: Optional[str]) -> str:
    if not name or len(name.strip()) < MIN_NAME_LENGTH:
        raise ValueError(NAME_ERROR)
    return name


def validate_phone(number: Optional[str]) -> str:
    """Accept any string that strips down to exactly ten digits."""
    if not number or len(phone_digits(number)) != PHONE_DIGITS:
        raise ValueError(PHONE_ERROR)
    return number


def validate_email(email: Optional[str]) -> str:
    if not email or not _EMAIL_PATTERN.fullmatch(email):
        raise ValueError(EMAIL_ERROR)
    return email


def validate_message(message: Optional[str]) -> str:
    if not message or len(message.strip()) < MIN_MESSAGE_LENGTH:
        raise ValueError(MESSAGE_ERROR)
    return message


def sanitize_submission(name: str, number: str, email: str, message: str) -> Dict[str, str]:
    """
    Trim every field and lowercase the email.

    Applying it to its own output returns the same values.
    """
    return {
        "name": name.strip(),
        "number": number.strip(),
        "email": email.strip().lower(),
        "message": message.strip(),
    }
