"""Tests for the attribute write path."""

import json

import pytest

from castable import InvalidCastException, JsonEncodingError
from support import HashCaster, Money, MoneyCaster, UpperCaster


@pytest.fixture(autouse=True)
def casters(registry):
    registry.register("money", MoneyCaster)
    registry.register("hash", HashCaster)
    registry.register("upper", UpperCaster)


class TestMutatorPrecedence:
    """Set mutators short-circuit everything else."""

    def test_mutator_result_returned(self, make_model):
        def set_email_attribute(self, value):
            self.attributes["email"] = value.lower()
            return "mutated"

        Record = make_model({"email": "encrypted"}, set_email_attribute=set_email_attribute)
        record = Record()

        assert record.set_attribute("email", "A@B.COM") == "mutated"
        assert record.attributes == {"email": "a@b.com"}

    def test_mutator_skips_date_coercion(self, make_model):
        def set_born_attribute(self, value):
            self.attributes["born"] = value

        Record = make_model(dates=["born"], set_born_attribute=set_born_attribute)
        record = Record({"born": 0})

        assert record.attributes["born"] == 0


class TestDateCoercion:
    """Date attributes are normalized before anything else."""

    def test_dates_list(self, make_model):
        Record = make_model(dates=["born"])

        assert Record({"born": 0}).attributes["born"] == "1970-01-01 00:00:00"

    def test_date_cast(self, make_model):
        Record = make_model({"born": "date"})

        assert Record({"born": "2024-02-03T04:05:06"}).attributes["born"] == "2024-02-03 04:05:06"

    def test_none_not_coerced(self, make_model):
        Record = make_model(dates=["born"])

        assert Record({"born": None}).attributes["born"] is None


class TestClassCastWrite:
    """Class-castable fields delegate to their caster."""

    def test_mapping_response_merged(self, make_model):
        Record = make_model({"price": "money:EUR"})
        record = Record()

        record.set_attribute("price", Money("9.5", "EUR"))

        assert record.attributes == {"price": "9.5", "price_currency": "EUR"}

    def test_single_value_response_wrapped(self, make_model):
        Record = make_model({"password": "hash:md5"})
        record = Record({"password": "pw"})

        assert record.attributes == {"password": "md5:pw"}

    def test_object_value_cached(self, make_model):
        Record = make_model({"price": "money"})
        record = Record()
        value = Money(3)

        record.set_attribute("price", value)

        assert record._cache.get("price") is value

    def test_primitive_value_not_cached(self, make_model):
        Record = make_model({"price": "money"})
        record = Record()

        record.set_attribute("price", "3")

        assert "price" not in record._cache
        assert record.attributes["price"] == "3"

    def test_inbound_only_never_cached(self, make_model):
        Record = make_model({"password": HashCaster})
        record = Record()

        record.set_attribute("password", Money(1))

        assert "password" not in record._cache

    def test_caster_receives_attribute_snapshot(self, make_model):
        seen = {}

        class Spy(HashCaster):
            def set(self, model, key, value, attributes):
                seen["attributes"] = attributes
                attributes["tampered"] = True
                return value

        Record = make_model({"a": Spy()})
        record = Record.hydrate({"other": 1})
        record.set_attribute("a", "x")

        assert seen["attributes"] == {"other": 1, "tampered": True}
        assert "tampered" not in record.attributes

    def test_invalid_declaration_raises(self, make_model):
        Record = make_model({"x": "NoSuchClass"})

        with pytest.raises(InvalidCastException) as info:
            Record({"x": 1})

        assert info.value.key == "x"


class TestNullWrite:
    """Writing None to a class-cast field clears every attribute it owns."""

    def test_owned_attributes_cleared(self, make_model):
        Record = make_model({"price": "money"})
        record = Record({"price": Money(3, "GBP")})

        record.set_attribute("price", None)

        assert record.attributes == {"price": None, "price_currency": None}
        assert "price" not in record._cache

    def test_caster_sees_current_value(self, make_model):
        """The caster is asked with the current value, not None."""
        caster = MoneyCaster()
        Record = make_model({"price": caster})
        current = Money(3, "GBP")
        record = Record({"price": current})

        record.set_attribute("price", None)

        assert caster.set_calls[-1] is current


class TestJsonAndEncryption:
    """JSON encoding, nested paths and encryption on write."""

    def test_json_family_encoded(self, make_model):
        Record = make_model({"meta": "array"})
        record = Record({"meta": {"a": [1, 2]}})

        assert json.loads(record.attributes["meta"]) == {"a": [1, 2]}

    def test_json_none_stored_as_none(self, make_model):
        Record = make_model({"meta": "json"})

        assert Record({"meta": None}).attributes["meta"] is None

    def test_unencodable_value(self, make_model):
        Record = make_model({"meta": "json"})

        with pytest.raises(JsonEncodingError, match="meta"):
            Record({"meta": {"bad": object()}})

    def test_encrypted_string(self, make_model, encrypter):
        Record = make_model({"secret": "encrypted"})

        assert Record({"secret": "abc"}).attributes["secret"] == "enc:cba"

    def test_encrypted_json(self, make_model, encrypter):
        Record = make_model({"payload": "encrypted:array"})
        record = Record({"payload": {"a": 1}})

        stored = record.attributes["payload"]
        assert stored.startswith("enc:")
        assert json.loads(encrypter.decrypt(stored)) == {"a": 1}

    def test_encrypted_none_not_encrypted(self, make_model, encrypter):
        Record = make_model({"secret": "encrypted"})

        assert Record({"secret": None}).attributes["secret"] is None
        assert encrypter.calls == []

    def test_encryption_errors_propagate(self, make_model):
        Record = make_model({"secret": "encrypted"})

        with pytest.raises(TypeError):
            Record({"secret": 42})

    def test_uncast_stored_verbatim(self, make_model):
        value = {"x": 1}

        assert make_model()({"plain": value}).attributes["plain"] is value


class TestNestedJsonWrite:
    """``base->path`` keys write inside the JSON document at ``base``."""

    def test_creates_document(self, make_model):
        Record = make_model({"meta": "json"})
        record = Record()

        record.set_attribute("meta->a.b", 5)

        assert json.loads(record.attributes["meta"]) == {"a": {"b": 5}}

    def test_merges_with_prior_content(self, make_model):
        Record = make_model({"meta": "json"})
        record = Record({"meta": {"keep": 1, "a": {"x": 0}}})

        record.set_attribute("meta->a->b", 5)

        assert json.loads(record.attributes["meta"]) == {"keep": 1, "a": {"x": 0, "b": 5}}

    def test_value_not_double_encoded(self, make_model):
        Record = make_model({"meta": "json"})
        record = Record()

        record.set_attribute("meta->tags", ["a", "b"])

        assert json.loads(record.attributes["meta"]) == {"tags": ["a", "b"]}

    def test_encrypted_base(self, make_model, encrypter):
        Record = make_model({"vault": "encrypted:json"})
        record = Record({"vault": {"a": 1}})

        record.set_attribute("vault->b", 2)

        stored = record.attributes["vault"]
        assert stored.startswith("enc:")
        assert json.loads(encrypter.decrypt(stored)) == {"a": 1, "b": 2}

    def test_uncast_base(self, make_model):
        record = make_model()()

        record.set_attribute("doc->x", 1)

        assert json.loads(record.attributes["doc"]) == {"x": 1}
