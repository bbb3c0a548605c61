"""Loading a model in place by its primary, unique or composite key."""

from __future__ import annotations

import dataclasses
from typing import Any

from .fields import FieldInfo, find_field_by_tag, find_method, get_field_value, is_zero, model_fields, split_tag
from .query import query_one
from .types import Executor, Model, TypedbError


def _run_key_query(executor: Executor, model: Any, method_name: str, values: list[Any]) -> None:
    method = find_method(model, method_name)
    if method is None:
        raise TypedbError(f"typedb: {method_name}() method not found")
    query = method()
    if not isinstance(query, str):
        raise TypedbError(f"typedb: {method_name}() should return exactly one value (string)")
    found = query_one(executor, type(model), query, *values)
    update_model_in_place(model, found)


def load(executor: Executor, model: Any) -> None:
    """Load a model by its load="primary" field using its query_by_<field>() method."""
    primary = find_field_by_tag(model, "load", "primary")
    if primary is None:
        raise TypedbError('typedb: no field with load:"primary" tag found')
    value = get_field_value(model, primary.name)
    if is_zero(value):
        raise TypedbError(f"typedb: primary key field {primary.name} is not set")
    _run_key_query(executor, model, f"query_by_{primary.name}", [value])


def load_by_field(executor: Executor, model: Any, field_name: str) -> None:
    """Load a model by any field using its query_by_<field>() method."""
    value = get_field_value(model, field_name)
    if is_zero(value):
        raise TypedbError(f"typedb: field {field_name} is not set")
    _run_key_query(executor, model, f"query_by_{field_name}", [value])


def _composite_fields(model: Any, composite_name: str) -> list[FieldInfo]:
    wanted = f"composite:{composite_name}"
    return [
        info
        for info in model_fields(model)
        if info.exported and wanted in split_tag(info.load)
    ]


def load_by_composite(executor: Executor, model: Any, composite_name: str) -> None:
    """Load a model by a composite key.

    Fields tagged load="composite:<name>" are sorted by name; their values are
    passed in that order to query_by_<field1>_<field2>...().
    """
    fields = _composite_fields(model, composite_name)
    if len(fields) < 2:
        raise TypedbError(f'typedb: composite key "{composite_name}" must have at least 2 fields')
    names = sorted(info.name for info in fields)
    values = []
    for name in names:
        value = get_field_value(model, name)
        if is_zero(value):
            raise TypedbError(f"typedb: composite key field {name} is not set")
        values.append(value)
    _run_key_query(executor, model, "query_by_" + "_".join(names), values)


def _is_instance(obj: Any) -> bool:
    return obj is not None and not isinstance(obj, type) and dataclasses.is_dataclass(obj)


def update_model_in_place(dest: Any, src: Any) -> None:
    """Copy every public field of src into the field of the same name in dest."""
    if not _is_instance(dest) or not _is_instance(src):
        raise TypedbError("typedb: both models must be dataclass instances")
    src_names = {info.name for info in model_fields(src) if info.exported}
    for info in model_fields(dest):
        if info.exported and info.name in src_names:
            setattr(dest, info.name, getattr(src, info.name))
    if isinstance(dest, Model) and isinstance(src, Model):
        dest._original_copy = src._original_copy