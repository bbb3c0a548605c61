from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytest

from typedb.fields import column
from typedb.model import DeserializeError, deserialize, deserialize_for_type, save_original_copy
from typedb.registry import ModelOptions, register_model_with_options, reset_registry
from typedb.types import Model, TypedbError


@dataclass
class LoadTestUser(Model):
    id: int = column(db="id", load="primary", default=0)
    name: str = column(db="name", default="")
    email: str = column(db="email", load="unique", default="")


@dataclass
class Mixed(Model):
    id: int = column(db="id", default=0)
    label: str = column(db="users.label", default="")
    ratio: float = column(db="ratio", default=0.0)
    active: bool = column(db="active", default=False)
    blob: str = column(db="blob", default="")
    note: Optional[str] = column(db="note", default="x")
    stamp: Optional[datetime] = column(db="stamp", default=None)
    skipped: str = column(db="-", default="keep")
    untagged: str = column(default="plain")


@dataclass
class Tracked(Model):
    id: int = column(db="id", load="primary", default=0)
    name: str = column(db="name", default="")


@pytest.fixture(autouse=True)
def _clean_registry():
    reset_registry()
    yield
    reset_registry()


def test_deserialize_for_type_fills_fields():
    row = {"id": 123, "name": "Alice", "email": "alice@example.com"}
    user = deserialize_for_type(LoadTestUser, row)
    assert isinstance(user, LoadTestUser)
    assert (user.id, user.name, user.email) == (123, "Alice", "alice@example.com")


def test_deserialize_into_existing_model():
    user = LoadTestUser(id=1, name="Old")
    deserialize({"name": "Alice"}, user)
    assert user.name == "Alice"
    assert user.id == 1


def test_missing_and_unknown_columns():
    user = deserialize_for_type(LoadTestUser, {"id": 7, "extra": "ignored"})
    assert user.id == 7
    assert user.name == ""
    assert not hasattr(user, "extra")


def test_invalid_int_raises():
    with pytest.raises(DeserializeError):
        deserialize_for_type(LoadTestUser, {"id": "not-an-int", "name": "Alice"})


def test_deserialize_error_is_typedb_error():
    with pytest.raises(TypedbError):
        deserialize_for_type(LoadTestUser, {"id": [1, 2]})


def test_numeric_string_converts_to_int():
    user = deserialize_for_type(LoadTestUser, {"id": "42"})
    assert user.id == 42


def test_dotted_tag_matches_full_key_first():
    m = deserialize_for_type(Mixed, {"users.label": "full", "label": "short"})
    assert m.label == "full"


def test_non_string_value_into_str_field():
    user = deserialize_for_type(LoadTestUser, {"name": 99})
    assert user.name == str(99)


def test_null_into_plain_field_gives_zero_value():
    user = LoadTestUser(id=3, name="Bob")
    deserialize({"name": None, "id": None}, user)
    assert user.name == ""
    assert user.id == 0


def test_bool_from_string():
    m = deserialize_for_type(Mixed, {"active": "true"})
    assert m.active is True
    with pytest.raises(DeserializeError):
        deserialize_for_type(Mixed, {"active": "maybe"})


def test_deserialize_for_type_rejects_non_dataclass():
    with pytest.raises(TypedbError):
        deserialize_for_type(int, {"id": 1})


def test_original_copy_not_saved_by_default():
    user = deserialize_for_type(Tracked, {"id": 1, "name": "Alice"})
    assert user._original_copy is None
    assert save_original_copy(user) is False


def test_original_copy_saved_when_partial_update_enabled():
    register_model_with_options(Tracked, ModelOptions(partial_update=True))
    user = deserialize_for_type(Tracked, {"id": 1, "name": "Alice"})
    snapshot = user._original_copy
    assert snapshot is not None and snapshot is not user
    assert (snapshot.id, snapshot.name) == (1, "Alice")
    assert snapshot._original_copy is None

    user.name = "Changed"
    assert snapshot.name == "Alice"
    assert save_original_copy(user) is True
    assert user._original_copy.name == "Changed"
    assert user._original_copy._original_copy is None