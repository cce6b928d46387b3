"""
OTP Service

Phone normalization, OTP generation and hashing primitives.
"""

import binascii
import hashlib
import hmac
import secrets
import string

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


def normalize_phone(value: str | None) -> str:
    """Strip every character that is not an ASCII digit, keeping digit order."""
    if not value or not value.strip():
        return ""
    return "".join(ch for ch in value if ch in string.digits)


def is_phone_valid(normalized_phone: str) -> bool:
    """A normalized phone number must contain 10-15 digits."""
    return PHONE_MIN_DIGITS <= len(normalized_phone) <= PHONE_MAX_DIGITS


def mask_phone(normalized_phone: str) -> str:
    # e.g. 79991234567 -> 799****4567
    if len(normalized_phone) <= 7:
        return "*" * len(normalized_phone)
    return f"{normalized_phone[:3]}{'*' * (len(normalized_phone) - 7)}{normalized_phone[-4:]}"


def is_code_format_valid(code: str | None, length: int) -> bool:
    """Check the code is exactly `length` ASCII digits."""
    if not code or not code.strip():
        return False
    return len(code) == length and code.isascii() and code.isdigit()


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric OTP code with exactly `length` digits.

    Drawn uniformly from [10^(length-1), 10^length - 1] using the
    operating system CSPRNG, so the leading digit is never zero.
    """
    low = 10 ** (length - 1)
    high = 10 ** length
    return str(secrets.randbelow(high - low) + low)


def hash_otp(code: str) -> str:
    """Hash an OTP code using SHA-256 (upper-case hex)."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest().upper()


def verify_otp_hash(code: str, expected_hex_hash: str) -> bool:
    """
    Compare a code against a stored SHA-256 hex digest in constant time.

    A stored hash that is not valid hex never matches.

    Args:
        code: Code supplied by the caller.
        expected_hex_hash: Hash stored on the challenge.

    Returns:
        bool: True if the code hashes to the stored digest.
    """
    current_hash = hashlib.sha256(code.encode("utf-8")).digest()

    try:
        expected_hash = binascii.unhexlify(expected_hex_hash)
    except (binascii.Error, ValueError, TypeError):
        return False

    return hmac.compare_digest(current_hash, expected_hash)
