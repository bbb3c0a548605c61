from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from typedb.fields import FieldNotFoundError, column
from typedb.load import load, load_by_composite, load_by_field, update_model_in_place
from typedb.registry import ModelOptions, register_model_with_options, reset_registry
from typedb.types import Executor, Model, NotFoundError, TypedbError


@dataclass
class LoadTestUser(Model):
    id: int = column(db="id", load="primary", default=0)
    name: str = column(db="name", default="")
    email: str = column(db="email", load="unique", default="")

    def query_by_id(self):
        return "SELECT id, name, email FROM users WHERE id = $1"

    def query_by_email(self):
        return "SELECT id, name, email FROM users WHERE email = $1"


@dataclass
class LoadTestUserPost(Model):
    user_id: int = column(db="user_id", load="composite:userpost", default=0)
    post_id: int = column(db="post_id", load="composite:userpost", default=0)

    def query_by_post_id_user_id(self):
        return "SELECT user_id, post_id FROM user_posts WHERE post_id = $1 AND user_id = $2"


@dataclass
class BadUser(Model):
    id: int = column(db="id", default=0)


@dataclass
class NoQueryUser(Model):
    id: int = column(db="id", load="primary", default=0)


@dataclass
class WrongQueryUser(Model):
    id: int = column(db="id", load="primary", default=0)

    def query_by_id(self):
        return 42


class MockExecutor(Executor):
    def __init__(self, row=None, error=None):
        self.row = row
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def exec(self, query, *args):
        return None

    def query_all(self, query, *args):
        return []

    def query_row_map(self, query, *args):
        self.calls.append((query, args))
        if self.error is not None:
            raise self.error
        if self.row is None:
            raise NotFoundError()
        return self.row


@pytest.fixture(autouse=True)
def _clean_registry():
    reset_registry()
    yield
    reset_registry()


def test_load_success():
    mock = MockExecutor(row={"id": 123, "name": "Alice", "email": "alice@example.com"})
    user = LoadTestUser(id=123)
    load(mock, user)
    assert user.name == "Alice"
    assert user.email == "alice@example.com"
    assert mock.calls == [("SELECT id, name, email FROM users WHERE id = $1", (123,))]


def test_load_no_primary_key_field():
    with pytest.raises(TypedbError) as info:
        load(MockExecutor(), BadUser(id=123))
    assert str(info.value) == 'typedb: no field with load:"primary" tag found'


def test_load_primary_key_not_set():
    with pytest.raises(TypedbError) as info:
        load(MockExecutor(), LoadTestUser())
    assert str(info.value) == "typedb: primary key field id is not set"


def test_load_query_method_not_found():
    mock = MockExecutor(row={"id": 1})
    with pytest.raises(TypedbError) as info:
        load(mock, NoQueryUser(id=1))
    assert "query_by_id() method not found" in str(info.value)
    assert mock.calls == []


def test_load_query_method_wrong_return():
    with pytest.raises(TypedbError) as info:
        load(MockExecutor(row={"id": 1}), WrongQueryUser(id=1))
    assert "should return exactly one value (string)" in str(info.value)


def test_load_not_found():
    user = LoadTestUser(id=999)
    with pytest.raises(NotFoundError):
        load(MockExecutor(), user)
    assert user.name == ""


def test_load_by_field_success():
    mock = MockExecutor(row={"id": 123, "name": "Alice", "email": "test@example.com"})
    user = LoadTestUser(email="test@example.com")
    load_by_field(mock, user, "email")
    assert user.id == 123
    assert user.name == "Alice"
    assert mock.calls[0][1] == ("test@example.com",)


def test_load_by_field_not_set():
    with pytest.raises(TypedbError) as info:
        load_by_field(MockExecutor(), LoadTestUser(), "email")
    assert str(info.value) == "typedb: field email is not set"


def test_load_by_field_query_method_not_found():
    with pytest.raises(TypedbError) as info:
        load_by_field(MockExecutor(), LoadTestUser(name="Alice"), "name")
    assert "query_by_name() method not found" in str(info.value)


def test_load_by_field_unknown_field():
    with pytest.raises(FieldNotFoundError):
        load_by_field(MockExecutor(), LoadTestUser(id=1), "missing")


def test_load_by_composite_success():
    mock = MockExecutor(row={"user_id": 1, "post_id": 2})
    user_post = LoadTestUserPost(user_id=1, post_id=2)
    load_by_composite(mock, user_post, "userpost")
    assert mock.calls[0][1] == (2, 1)
    assert (user_post.user_id, user_post.post_id) == (1, 2)


def test_load_by_composite_field_not_set():
    with pytest.raises(TypedbError) as info:
        load_by_composite(MockExecutor(), LoadTestUserPost(user_id=1), "userpost")
    assert str(info.value) == "typedb: composite key field post_id is not set"


def test_load_by_composite_key_not_found():
    with pytest.raises(TypedbError) as info:
        load_by_composite(MockExecutor(), LoadTestUser(id=123), "nonexistent")
    assert "must have at least 2 fields" in str(info.value)


def test_update_model_in_place_copies_fields():
    dest = LoadTestUser(id=1)
    src = LoadTestUser(id=1, name="Alice", email="alice@example.com")
    update_model_in_place(dest, src)
    assert (dest.id, dest.name, dest.email) == (1, "Alice", "alice@example.com")


def test_update_model_in_place_rejects_non_models():
    with pytest.raises(TypedbError):
        update_model_in_place(LoadTestUser(id=1), {"id": 1})
    with pytest.raises(TypedbError):
        update_model_in_place(None, LoadTestUser(id=1))


def test_load_keeps_original_copy_when_partial_update_enabled():
    register_model_with_options(LoadTestUser, ModelOptions(partial_update=True))
    mock = MockExecutor(row={"id": 5, "name": "Alice", "email": "alice@example.com"})
    user = LoadTestUser(id=5)
    load(mock, user)
    snapshot = user._original_copy
    assert snapshot is not None
    assert (snapshot.id, snapshot.name, snapshot.email) == (5, "Alice", "alice@example.com")