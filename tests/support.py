"""Caster and value types shared by the test modules."""

from decimal import Decimal

from castable import Castable, CastsAttributes, CastsInboundAttributes


class Money:
    """Object-like value stored across two attributes."""

    def __init__(self, amount, currency="USD"):
        self.amount = Decimal(str(amount))
        self.currency = currency

    def __eq__(self, other):
        return (
            isinstance(other, Money)
            and self.amount == other.amount
            and self.currency == other.currency
        )

    def to_dict(self):
        return {"amount": str(self.amount), "currency": self.currency}


class MoneyCaster(CastsAttributes):
    """``<key>`` holds the amount, ``<key>_currency`` the currency."""

    def __init__(self, currency="USD"):
        self.currency = currency
        self.get_calls = 0
        self.set_calls = []

    def get(self, model, key, value, attributes):
        self.get_calls += 1
        if value is None:
            return None
        return Money(value, attributes.get(f"{key}_currency") or self.currency)

    def set(self, model, key, value, attributes):
        self.set_calls.append(value)
        if value is None:
            return {key: None, f"{key}_currency": None}
        if not isinstance(value, Money):
            value = Money(value, self.currency)
        return {key: str(value.amount), f"{key}_currency": value.currency}


class UpperCaster(CastsAttributes):
    """Returns plain strings, so nothing is ever cached."""

    get_calls = 0

    def get(self, model, key, value, attributes):
        UpperCaster.get_calls += 1
        return None if value is None else value.upper()

    def set(self, model, key, value, attributes):
        return None if value is None else value.lower()


class HashCaster(CastsInboundAttributes):
    """Write-only caster: reads return the stored value."""

    def __init__(self, algorithm="sha256"):
        self.algorithm = algorithm

    def set(self, model, key, value, attributes):
        return f"{self.algorithm}:{value}"


class Address(Castable):
    """Value type that names its own caster."""

    def __init__(self, street, city):
        self.street = street
        self.city = city

    @classmethod
    def cast_using(cls, arguments):
        return AddressCaster(*arguments)


class AddressCaster(CastsAttributes):
    def __init__(self, separator="|"):
        self.separator = separator

    def get(self, model, key, value, attributes):
        if value is None:
            return None
        street, city = value.split(self.separator)
        return Address(street, city)

    def set(self, model, key, value, attributes):
        return f"{value.street}{self.separator}{value.city}"


class Point(Castable):
    """Castable that answers with a registry identifier."""

    @classmethod
    def cast_using(cls, arguments):
        return "money"
