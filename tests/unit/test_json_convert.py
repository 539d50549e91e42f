"""Unit tests for the ObjectId JSON converter."""

from __future__ import annotations

import json
import logging

import pytest
from bson import ObjectId
from pydantic import BaseModel, ValidationError

from mongo_helper.exceptions import ObjectIdDecodeError
from mongo_helper.json_convert import (
    EMPTY_OBJECT_ID,
    ObjectIdConverter,
    ObjectIdField,
    StrictObjectIdField,
    deserialize_object,
    serialize_object,
)

VALID_ID = "5f1b2c3d4e5f6a7b8c9d0e1f"


class Person(BaseModel):
    id: ObjectIdField = EMPTY_OBJECT_ID
    name: str
    age: int


class StrictPerson(BaseModel):
    id: StrictObjectIdField
    name: str


class DerivedId(ObjectId):
    pass


class TestConverter:
    def test_can_convert_only_object_ids(self) -> None:
        conv = ObjectIdConverter.default
        assert conv.can_convert(ObjectId)
        assert conv.can_convert(DerivedId)
        assert not conv.can_convert(str)
        assert not conv.can_convert(dict)
        assert not conv.can_convert("ObjectId")

    def test_write_is_canonical_hex(self) -> None:
        assert ObjectIdConverter.default.write(ObjectId(VALID_ID)) == VALID_ID

    def test_read_valid(self) -> None:
        assert ObjectIdConverter.default.read(VALID_ID) == ObjectId(VALID_ID)

    def test_read_passes_instances_through(self) -> None:
        oid = ObjectId()
        assert ObjectIdConverter.default.read(oid) is oid

    @pytest.mark.parametrize("value", ["not-an-id", "", None, 42, "5f1b2c"])
    def test_read_invalid_is_empty_id(self, value, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="mongo_helper.json_convert"):
            assert ObjectIdConverter.default.read(value) == EMPTY_OBJECT_ID
        assert "decoded as the empty id" in caplog.text

    def test_strict_read_raises(self) -> None:
        with pytest.raises(ObjectIdDecodeError) as exc_info:
            ObjectIdConverter(strict=True).read("nope")
        assert exc_info.value.value == "nope"

    def test_empty_id_is_all_zero(self) -> None:
        assert str(EMPTY_OBJECT_ID) == "0" * 24


class TestSerializeObject:
    def test_bare_object_id(self) -> None:
        assert serialize_object(ObjectId(VALID_ID)) == f'"{VALID_ID}"'

    def test_dict_with_object_id(self) -> None:
        text = serialize_object({"_id": ObjectId(VALID_ID), "tags": ["a"]})
        assert json.loads(text) == {"_id": VALID_ID, "tags": ["a"]}

    def test_model(self) -> None:
        text = serialize_object(Person(id=ObjectId(VALID_ID), name="Tom", age=16))
        assert json.loads(text) == {"id": VALID_ID, "name": "Tom", "age": 16}

    def test_unknown_type_still_fails(self) -> None:
        with pytest.raises(Exception):
            serialize_object({"x": object()})


class TestDeserializeObject:
    def test_model(self) -> None:
        person = deserialize_object(
            Person, json.dumps({"id": VALID_ID, "name": "Tom", "age": 16})
        )
        assert person.id == ObjectId(VALID_ID)
        assert person.name == "Tom"

    def test_model_with_invalid_id_gets_empty_id(self) -> None:
        person = deserialize_object(
            Person, json.dumps({"id": "garbage", "name": "Tom", "age": 16})
        )
        assert person.id == EMPTY_OBJECT_ID

    def test_bare_object_id(self) -> None:
        assert deserialize_object(ObjectId, f'"{VALID_ID}"') == ObjectId(VALID_ID)
        assert deserialize_object(ObjectId, '"bad"') == EMPTY_OBJECT_ID

    def test_strict_field_rejects_invalid(self) -> None:
        with pytest.raises(ValidationError):
            deserialize_object(StrictPerson, '{"id": "bad", "name": "x"}')

    def test_round_trip_preserves_string(self) -> None:
        oid = deserialize_object(ObjectId, f'"{VALID_ID}"')
        assert serialize_object(oid) == f'"{VALID_ID}"'


def test_python_mode_dump_keeps_object_id() -> None:
    oid = ObjectId(VALID_ID)
    data = Person(id=oid, name="Tom", age=16).model_dump()
    assert isinstance(data["id"], ObjectId)
    assert data["id"] == oid
    assert Person(id=oid, name="Tom", age=16).model_dump(mode="json")["id"] == VALID_ID
