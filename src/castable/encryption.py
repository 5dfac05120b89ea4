"""Encryption service used by the ``encrypted`` cast family.

The pipelines only see the ``Encrypter`` contract from ``core``.  This module
supplies the Fernet-backed implementation and the process-wide default.

Configuration
-------------
``CASTABLE_ENCRYPTION_KEY``
    urlsafe-base64 Fernet key read the first time the default encrypter is
    needed.  ``set_default_encrypter`` replaces the default entirely.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from .core import Encrypter, EncryptionError

logger = logging.getLogger(__name__)

ENCRYPTION_KEY_ENV = "CASTABLE_ENCRYPTION_KEY"


class FernetEncrypter(Encrypter):
    """Symmetric authenticated encryption of strings (AES-128-CBC + HMAC)."""

    def __init__(self, key: Union[str, bytes]) -> None:
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as exc:
            raise EncryptionError(f"invalid encryption key: {exc}") from exc

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")

    def encrypt(self, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError(f"only strings can be encrypted, got {type(value).__name__}")
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, payload: str) -> str:
        try:
            return self._fernet.decrypt(payload.encode("ascii")).decode("utf-8")
        except InvalidToken as exc:
            raise EncryptionError("the payload is invalid") from exc


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide default
# ─────────────────────────────────────────────────────────────────────────────

_default_encrypter: Optional[Encrypter] = None


def get_default_encrypter() -> Encrypter:
    """Return the process default, building it from the environment once."""
    global _default_encrypter
    if _default_encrypter is None:
        key = os.getenv(ENCRYPTION_KEY_ENV, "").strip()
        if not key:
            raise EncryptionError(f"{ENCRYPTION_KEY_ENV} is not set")
        _default_encrypter = FernetEncrypter(key)
        logger.debug("default encrypter built from %s", ENCRYPTION_KEY_ENV)
    return _default_encrypter


def set_default_encrypter(encrypter: Optional[Encrypter]) -> None:
    """Swap the process default; ``None`` resets to the environment key."""
    global _default_encrypter
    _default_encrypter = encrypter
