"""Turning result rows into model instances."""

from __future__ import annotations

import copy
import dataclasses
import typing
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from types import UnionType
from typing import Any, TypeVar

from .fields import FieldInfo, model_fields
from .registry import get_model_options
from .types import Model, TypedbError

T = TypeVar("T")

_ZERO_VALUES: dict[type, Any] = {int: 0, float: 0.0, str: "", bool: False, bytes: b""}
_TRUE_STRINGS = {"1", "t", "true", "y", "yes", "on"}
_FALSE_STRINGS = {"0", "f", "false", "n", "no", "off"}


class DeserializeError(TypedbError, ValueError):
    """Raised when a column value cannot be stored in a model field."""


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is UnionType:
        args = typing.get_args(tp)
        rest = [arg for arg in args if arg is not type(None)]
        optional = len(rest) != len(args)
        if len(rest) == 1:
            return rest[0], optional
        return tp, optional
    return tp, False


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii", errors="replace")
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(value)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)) and value == int(value):
        return int(value)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii")
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(value)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii")
    if isinstance(value, str):
        return float(value.strip())
    raise ValueError(value)


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.hex()
    return str(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise ValueError(value)


def _to_temporal(tp: type, value: Any) -> Any:
    if isinstance(value, tp):
        return value
    if isinstance(value, str):
        return tp.fromisoformat(value.strip())
    raise ValueError(value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, (int, float, Decimal, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(value) from exc
    raise ValueError(value)


_CONVERTERS = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    str: _to_str,
    bytes: _to_bytes,
    Decimal: _to_decimal,
}


def _convert(info: FieldInfo, column: str, value: Any) -> Any:
    tp, optional = _unwrap_optional(info.type)
    if value is None:
        if optional or not isinstance(tp, type):
            return None
        return _ZERO_VALUES.get(tp)
    if tp is Any:
        return value
    try:
        converter = _CONVERTERS.get(tp)
        if converter is not None:
            return converter(value)
        if tp in (datetime, date, time):
            return _to_temporal(tp, value)
    except (ValueError, TypeError, UnicodeDecodeError) as exc:
        raise DeserializeError(
            f"typedb: cannot convert column {column!r} value {value!r} "
            f"to {getattr(tp, '__name__', tp)} for field {info.name}"
        ) from exc
    origin = typing.get_origin(tp)
    check = origin if origin is not None else tp
    if isinstance(check, type) and not isinstance(value, check):
        raise DeserializeError(
            f"typedb: cannot convert column {column!r} value {value!r} "
            f"to {check.__name__} for field {info.name}"
        )
    return value


def deserialize(row: dict[str, Any], model: Any) -> None:
    """Fill a model's tagged fields from a row keyed by column name.

    A field whose db tag is missing from the row keeps its value. When
    partial updates are enabled for the model's class, a snapshot of the
    result is kept for later change detection.
    """
    for info in model_fields(model):
        if not info.exported or info.db in ("", "-"):
            continue
        if info.db in row:
            key = info.db
        elif info.column_name in row:
            key = info.column_name
        else:
            continue
        setattr(model, info.name, _convert(info, key, row[key]))
    save_original_copy(model)


def deserialize_for_type(model_type: type[T], row: dict[str, Any]) -> T:
    """Create a new instance of model_type and fill it from row."""
    if not isinstance(model_type, type) or not dataclasses.is_dataclass(model_type):
        raise TypedbError(f"typedb: {model_type!r} is not a dataclass model type")
    try:
        model = model_type()
    except TypeError as exc:
        raise TypedbError(
            f"typedb: {model_type.__name__} cannot be created without arguments"
        ) from exc
    deserialize(row, model)
    return model


def save_original_copy(model: Any) -> bool:
    """Keep a deep copy of the model if partial updates are enabled for its class.

    Returns True when a copy was saved.
    """
    if not isinstance(model, Model) or not get_model_options(type(model)).partial_update:
        return False
    previous = model.__dict__.get("_original_copy")
    # Mapping the old snapshot to None keeps snapshots from nesting.
    memo: dict[int, Any] = {id(previous): None} if previous is not None else {}
    snapshot = copy.deepcopy(model, memo)
    snapshot.__dict__.pop("_original_copy", None)
    model._original_copy = snapshot
    return True