# marketplace/models/validators.py
import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PROMO_CODE_RE = re.compile(r"^[A-Z0-9]+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def normalize_promo_code(value: str) -> str:
    """Trim and upper-case; any other character is left for is_valid_promo_code to reject."""
    return (value or "").strip().upper()


def is_valid_promo_code(value: str) -> bool:
    return bool(_PROMO_CODE_RE.match(value or ""))
