"""Queries that return model instances."""

from __future__ import annotations

from typing import Any, TypeVar

from .model import deserialize_for_type
from .types import Executor, NotFoundError

T = TypeVar("T")


def query_all(executor: Executor, model_type: type[T], query: str, *args: Any) -> list[T]:
    """Run a query and return every row as a model; an empty list if none."""
    rows = executor.query_all(query, *args) or []
    return [deserialize_for_type(model_type, row) for row in rows]


def query_first(executor: Executor, model_type: type[T], query: str, *args: Any) -> T | None:
    """Run a query and return the first row as a model, or None if there is none."""
    try:
        row = executor.query_row_map(query, *args)
    except NotFoundError:
        return None
    return deserialize_for_type(model_type, row)


def query_one(executor: Executor, model_type: type[T], query: str, *args: Any) -> T:
    """Run a query and return its row as a model; raise NotFoundError if there is none."""
    row = executor.query_row_map(query, *args)
    return deserialize_for_type(model_type, row)