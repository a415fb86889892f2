"""
auth.py
Admin PIN gate (bcrypt once the PIN has been changed).

The factory default PIN "1234" is stored as plain text so that old backups keep
working; any PIN set through change_pin is stored as a bcrypt hash.
"""

from __future__ import annotations

import hmac
from dataclasses import replace

import bcrypt

from errors import ValidationError
from models import Settings

MIN_PIN_LENGTH = 4


def _is_bcrypt_hash(value: str) -> bool:
    return value.startswith(("$2a$", "$2b$", "$2y$"))


def hash_pin(pin: str) -> str:
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(pin.encode("utf-8"), salt).decode("utf-8")


def verify_pin(pin: str, settings: Settings) -> bool:
    stored = settings.security.admin_pin
    if _is_bcrypt_hash(stored):
        return bcrypt.checkpw(pin.encode("utf-8"), stored.encode("utf-8"))
    return hmac.compare_digest(pin.encode("utf-8"), stored.encode("utf-8"))


def change_pin(settings: Settings, new_pin: str) -> Settings:
    """Return settings carrying the hashed new PIN; the caller saves them."""
    if len(new_pin) < MIN_PIN_LENGTH or not new_pin.isdigit():
        raise ValidationError(f"PIN en az {MIN_PIN_LENGTH} haneli bir sayı olmalıdır.", field="adminPin")
    return replace(settings, security=replace(settings.security, admin_pin=hash_pin(new_pin)))
