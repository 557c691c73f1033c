"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional

from ..models import APPOINTMENT_STATUSES, ROLES

MAX_NOTES_LENGTH = 1000

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        raise ValueError("Correo electrónico inválido")

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Correo electrónico inválido")

    return email


def parse_date(value) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValueError("La fecha es requerida")
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError("La fecha debe tener el formato YYYY-MM-DD") from e


def normalize_time(value: Optional[str]) -> str:
    """
    Validate a 24h ``HH:MM`` slot and normalise it to two-digit hours.

    "9:30" and "09:30" name the same slot, so both are stored as "09:30".
    """
    if not value or not str(value).strip():
        raise ValueError("La hora es requerida")

    match = _TIME_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError("La hora debe tener el formato HH:MM")

    hour, minute = match.groups()
    return f"{int(hour):02d}:{minute}"


def require_text(value: Optional[str], message: str) -> str:
    """Strip ``value`` and reject it when empty."""
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


def validate_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if len(value) > MAX_NOTES_LENGTH:
        raise ValueError(f"Las notas no pueden superar {MAX_NOTES_LENGTH} caracteres")
    return value


def validate_role(value: str) -> str:
    if value not in ROLES:
        raise ValueError("Rol inválido")
    return value


def validate_status(value: str) -> str:
    if value not in APPOINTMENT_STATUSES:
        raise ValueError("Estado inválido")
    return value
