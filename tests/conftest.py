"""pytest configuration and shared fixtures."""

import pytest

from castable import (
    CasterRegistry,
    Encrypter,
    EncryptionError,
    FernetEncrypter,
    Model,
    set_default_encrypter,
)


class ReversingEncrypter(Encrypter):
    """Deterministic stand-in for a real encryption service."""

    prefix = "enc:"

    def __init__(self):
        self.calls = []

    def encrypt(self, value):
        if not isinstance(value, str):
            raise TypeError("only strings can be encrypted")
        self.calls.append(("encrypt", value))
        return self.prefix + value[::-1]

    def decrypt(self, payload):
        self.calls.append(("decrypt", payload))
        if not payload.startswith(self.prefix):
            raise EncryptionError("the payload is invalid")
        return payload[len(self.prefix):][::-1]


@pytest.fixture
def encrypter():
    """Reversible fake encrypter."""
    return ReversingEncrypter()


@pytest.fixture
def fernet():
    """Real Fernet encrypter with a throwaway key."""
    return FernetEncrypter(FernetEncrypter.generate_key())


@pytest.fixture(autouse=True)
def reset_default_encrypter(monkeypatch):
    """Every test starts without a process-wide encrypter or key."""
    monkeypatch.delenv("CASTABLE_ENCRYPTION_KEY", raising=False)
    set_default_encrypter(None)
    yield
    set_default_encrypter(None)


@pytest.fixture
def registry():
    """Empty caster registry."""
    return CasterRegistry()


@pytest.fixture
def make_model(registry, encrypter):
    """Build a Model subclass with the given casts, wired to the fixtures."""

    def factory(casts=None, *, dates=None, base=Model, **namespace):
        attrs = {
            "casts": dict(casts or {}),
            "dates": list(dates or []),
            "caster_registry": registry,
            "encrypter": encrypter,
        }
        attrs.update(namespace)
        return type("Record", (base,), attrs)

    return factory
