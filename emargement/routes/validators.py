import re

# Simple, practical email syntax check.
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_RE.match(normalized):
        raise ValueError('Invalid email address.')
    return normalized


def require_min_length(value: str, min_length: int, field_name: str) -> str:
    """Check the trimmed length but keep the value exactly as sent."""
    if len(value.strip()) < min_length:
        raise ValueError(f'{field_name} must be at least {min_length} characters.')
    return value


def require_iso_date_string(value):
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValueError('Date must be a YYYY-MM-DD string.')
    return value
