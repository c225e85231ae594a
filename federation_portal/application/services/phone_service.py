import re
import hashlib
from typing import Iterable, Optional

DEFAULT_PREFIXES = ("996", "7", "998", "971", "1")

_ALLOWED_CHARS = re.compile(r"^[\d\s+\-().]+$")
_CANONICAL = re.compile(r"^\+\d{10,15}$")


class InvalidPhoneError(ValueError):
    pass


def normalize_phone(raw: Optional[str], prefixes: Iterable[str] = DEFAULT_PREFIXES) -> str:
    """Return the canonical ``+<digits>`` form of a phone number.

    Local Kyrgyz numbers (``0XXX...``) get the ``996`` country code and Russian
    trunk-prefixed numbers (``8XXXXXXXXXX``) are rewritten to ``7``. Raises
    InvalidPhoneError when the result is not a plausible number for one of the
    supported countries.
    """
    if raw is None or not raw.strip():
        raise InvalidPhoneError("Phone number is required")
    if not _ALLOWED_CHARS.match(raw.strip()):
        raise InvalidPhoneError("Invalid phone number format")

    digits = re.sub(r"\D", "", raw)
    if digits.startswith("0"):
        digits = "996" + digits[1:]
    elif digits.startswith("8") and len(digits) == 11:
        digits = "7" + digits[1:]

    canonical = "+" + digits
    if not _CANONICAL.match(canonical):
        raise InvalidPhoneError("Invalid phone number format")
    if not any(digits.startswith(p) for p in prefixes):
        raise InvalidPhoneError("Invalid phone number format")
    return canonical


def is_valid_phone(raw: Optional[str], prefixes: Iterable[str] = DEFAULT_PREFIXES) -> bool:
    try:
        normalize_phone(raw, prefixes)
        return True
    except InvalidPhoneError:
        return False


def mask_phone(phone: str) -> str:
    """Mask a phone number for log lines."""
    if len(phone) <= 4:
        return phone
    return f"{phone[:-4]}XXXX"


def hash_phone(phone: str) -> str:
    return hashlib.sha256(phone.encode()).hexdigest()[:12]


def federation_code_for_phone(phone: str) -> Optional[str]:
    """Map a canonical phone number to the federation that owns its SMS gateway."""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("996"):
        return "kg"
    if digits.startswith("998"):
        return "uz"
    if digits.startswith("971"):
        return "ae"
    if digits.startswith("7") and len(digits) == 11:
        return "kz"
    return None
