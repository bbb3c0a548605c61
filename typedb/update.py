"""Building and running UPDATE statements from model instances."""

from __future__ import annotations

import dataclasses
from typing import Any

from .fields import FieldInfo, find_field_by_tag, find_method, get_field_value, is_zero, model_fields
from .model import save_original_copy
from .registry import get_model_options
from .types import Executor, TypedbError

_EXCLUDED_DB_TAGS = ("", "-")


def timestamp_function(driver_name: str) -> str:
    """Return the SQL expression for the current timestamp on a driver."""
    driver = driver_name.lower()
    if driver == "mysql":
        return "NOW()"
    if driver in ("sqlserver", "mssql"):
        return "GETDATE()"
    return "CURRENT_TIMESTAMP"


def quote_identifier(driver_name: str, name: str) -> str:
    """Quote a table or column name in the style of the driver."""
    driver = driver_name.lower()
    if driver == "mysql":
        return "`" + name.replace("`", "``") + "`"
    if driver in ("sqlserver", "mssql"):
        return "[" + name.replace("]", "]]") + "]"
    return '"' + name.replace('"', '""') + '"'


def placeholder(driver_name: str, index: int) -> str:
    """Return the bind placeholder for the 1-based argument index."""
    driver = driver_name.lower()
    if driver in ("postgres", "pgx"):
        return f"${index}"
    if driver in ("sqlserver", "mssql"):
        return f"@p{index}"
    if driver == "oracle":
        return f":{index}"
    return "?"


def _table_name(model: Any) -> str:
    method = find_method(model, "table_name")
    if method is None:
        raise TypedbError("typedb: Update validation failed: table_name() method not found")
    name = method()
    if not isinstance(name, str) or not name:
        raise TypedbError("typedb: Update validation failed: table_name() must return a non-empty string")
    return name


def _has_dot_notation(model: Any) -> bool:
    return any("." in info.db for info in model_fields(model))


def _is_instance(obj: Any) -> bool:
    return obj is not None and not isinstance(obj, type) and dataclasses.is_dataclass(obj)


def _column_fields(obj: Any, primary_field_name: str) -> list[FieldInfo]:
    return [
        info
        for info in model_fields(obj)
        if info.exported and info.db not in _EXCLUDED_DB_TAGS and info.name != primary_field_name
    ]


def _column_values(obj: Any, primary_field_name: str) -> dict[str, Any]:
    return {info.column_name: getattr(obj, info.name) for info in _column_fields(obj, primary_field_name)}


def changed_fields(model: Any, primary_field_name: str) -> set[str] | None:
    """Return the column names that differ from the model's saved original copy.

    Returns None when the model has no original copy, meaning every field
    counts as changed.
    """
    if not _is_instance(model):
        raise TypedbError("typedb: model must be a dataclass instance")
    original = getattr(model, "_original_copy", None)
    if original is None:
        return None
    if not _is_instance(original):
        raise TypedbError("typedb: original copy must be a dataclass instance")
    current = _column_values(model, primary_field_name)
    previous = _column_values(original, primary_field_name)
    changed = {
        name for name, value in current.items() if name not in previous or previous[name] != value
    }
    changed.update(previous.keys() - current.keys())
    return changed


def _fields_for_update(
    model: Any, primary_field_name: str, changed: set[str] | None
) -> tuple[list[str], list[Any], list[str]]:
    columns: list[str] = []
    values: list[Any] = []
    auto_columns: list[str] = []
    for info in _column_fields(model, primary_field_name):
        if info.db_update == "false":
            continue
        name = info.column_name
        if info.db_update == "auto-timestamp":
            if changed is None or name in changed:
                auto_columns.append(name)
            continue
        if changed is not None and name not in changed:
            continue
        value = getattr(model, info.name)
        if is_zero(value):
            continue
        columns.append(name)
        values.append(value)
    return columns, values, auto_columns


def update(executor: Executor, model: Any) -> None:
    """Write a model's set fields to its row, found by its load="primary" field.

    Zero and None values are left out. Fields tagged db_update="false" are
    never written; fields tagged db_update="auto-timestamp" are set to the
    database's current timestamp. With partial updates enabled for the
    model's class, only fields changed since the last deserialization are
    written, and the saved copy is refreshed afterwards.
    """
    table = _table_name(model)
    if _has_dot_notation(model):
        raise TypedbError(
            "typedb: Update cannot be used with joined models (detected dot notation in db tags)"
        )

    primary = find_field_by_tag(model, "load", "primary")
    if primary is None:
        raise TypedbError('typedb: Update requires a field with load:"primary" tag')
    if primary.db in _EXCLUDED_DB_TAGS:
        raise TypedbError(f"typedb: primary key field {primary.name} must have a db tag")
    primary_column = primary.column_name

    primary_value = get_field_value(model, primary.name)
    if is_zero(primary_value):
        raise TypedbError(
            f"typedb: Update requires primary key field {primary.name} to be set (non-zero value)"
        )

    driver = getattr(executor, "driver_name", "") or ""
    partial = get_model_options(type(model)).partial_update
    changed = changed_fields(model, primary.name) if partial else None

    columns, values, auto_columns = _fields_for_update(model, primary.name, changed)
    if not columns and not auto_columns:
        raise TypedbError("typedb: Update requires at least one non-nil field to update")

    set_clauses = [
        f"{quote_identifier(driver, name)} = {placeholder(driver, index)}"
        for index, name in enumerate(columns, start=1)
    ]
    now = timestamp_function(driver)
    set_clauses.extend(f"{quote_identifier(driver, name)} = {now}" for name in auto_columns)

    query = (
        f"UPDATE {quote_identifier(driver, table)} SET {', '.join(set_clauses)} "
        f"WHERE {quote_identifier(driver, primary_column)} = {placeholder(driver, len(values) + 1)}"
    )
    try:
        executor.exec(query, *values, primary_value)
    except Exception as exc:
        raise TypedbError(f"typedb: Update failed: {exc}") from exc

    if partial:
        save_original_copy(model)