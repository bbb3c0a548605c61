"""Field metadata for dataclass models, and lookups by name, tag and method."""

from __future__ import annotations

import dataclasses
import functools
import inspect
import typing
from dataclasses import dataclass
from types import UnionType
from typing import Any, Callable

from .types import TypedbError

_METADATA_KEY = "typedb"
_TAG_ATTRS = {"db": "db", "load": "load", "dbUpdate": "db_update", "db_update": "db_update"}
_ZERO_TYPES = (bool, int, float, complex, str, bytes, bytearray, list, tuple, dict, set, frozenset)
_BUILTIN_TYPES = {
    "bool": bool,
    "int": int,
    "float": float,
    "complex": complex,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
    "list": list,
    "tuple": tuple,
    "dict": dict,
    "set": set,
    "frozenset": frozenset,
}


class FieldNotFoundError(TypedbError, LookupError):
    """Raised when a model has no field of the given name."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"typedb: field not found: {field_name}")
        self.field_name = field_name


class MethodNotFoundError(TypedbError, LookupError):
    """Raised when a model has no public method of the given name."""

    def __init__(self, method_name: str) -> None:
        super().__init__(f"typedb: method not found: {method_name}")
        self.method_name = method_name


@dataclass(frozen=True)
class FieldInfo:
    """A model field with its column tags."""

    name: str
    type: Any
    db: str = ""
    load: str = ""
    db_update: str = ""

    def tag(self, key: str) -> str:
        """Return the tag value for key ("db", "load" or "dbUpdate"), or ""."""
        attr = _TAG_ATTRS.get(key)
        return getattr(self, attr) if attr else ""

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")

    @property
    def column_name(self) -> str:
        """The column name of the db tag; for "table.column" the last part."""
        return self.db.rsplit(".", 1)[-1]


def column(db: str = "", load: str = "", db_update: str = "", default: Any = None) -> Any:
    """Declare a dataclass field mapped to a database column."""
    return dataclasses.field(
        default=default,
        metadata={_METADATA_KEY: {"db": db, "load": load, "db_update": db_update}},
    )


def model_fields(model_type: Any) -> tuple[FieldInfo, ...]:
    """Return the fields of a dataclass model, base-class fields first."""
    cls = model_type if isinstance(model_type, type) else type(model_type)
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"typedb: {cls.__name__} is not a dataclass model")
    return _fields_of(cls)


def _resolve_type(tp: Any) -> Any:
    # Annotations kept as text are resolved only for built-in names;
    # anything else is left unchecked.
    if isinstance(tp, str):
        return _BUILTIN_TYPES.get(tp.strip(), Any)
    return tp


@functools.lru_cache(maxsize=None)
def _fields_of(cls: type) -> tuple[FieldInfo, ...]:
    result = []
    for f in dataclasses.fields(cls):
        tags = f.metadata.get(_METADATA_KEY, {})
        result.append(
            FieldInfo(
                name=f.name,
                type=_resolve_type(f.type),
                db=tags.get("db", ""),
                load=tags.get("load", ""),
                db_update=tags.get("db_update", ""),
            )
        )
    return tuple(result)


def is_zero(value: Any) -> bool:
    """True for None and for empty or zero values of the built-in types."""
    if value is None:
        return True
    if isinstance(value, _ZERO_TYPES):
        return not value
    return False


def get_model_type(model: Any) -> type:
    """Return the class of a model instance; raise TypeError for anything else."""
    if model is None or isinstance(model, type) or not dataclasses.is_dataclass(model):
        raise TypeError("typedb: get_model_type requires a model instance")
    return type(model)


def find_field_by_tag(model: Any, tag_key: str, tag_value: str) -> FieldInfo | None:
    """Return the first field whose tag_key tag is or contains tag_value."""
    for info in model_fields(get_model_type(model)):
        tag = info.tag(tag_key)
        if tag == tag_value or contains_tag_value(tag, tag_value):
            return info
    return None


def contains_tag_value(tag: str, value: str) -> bool:
    """True if one comma-separated part of tag equals value exactly."""
    if not tag or not value:
        return False
    return value in split_tag(tag)


def split_tag(tag: str) -> list[str]:
    """Split a tag on commas and strip each part."""
    if not tag:
        return []
    return [part.strip() for part in tag.split(",")]


def _require_instance(model: Any, none_message: str) -> None:
    if model is None:
        raise TypedbError(none_message)
    if isinstance(model, type) or not dataclasses.is_dataclass(model):
        raise TypedbError("typedb: model must be a dataclass instance")


def _lookup(model: Any, field_name: str) -> FieldInfo:
    for info in model_fields(type(model)):
        if info.name == field_name:
            return info
    raise FieldNotFoundError(field_name)


def get_field_value(model: Any, field_name: str) -> Any:
    """Return the value of a model field by name."""
    _require_instance(model, "typedb: cannot get field value from None")
    _lookup(model, field_name)
    return getattr(model, field_name)


def _accepts(tp: Any, value: Any) -> bool:
    if value is None or tp is Any:
        return True
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is UnionType:
        return any(_accepts(arg, value) for arg in typing.get_args(tp))
    if origin is not None:
        tp = origin
    if not isinstance(tp, type):
        return True
    if isinstance(value, bool) and tp in (int, float):
        return False
    if tp is float and isinstance(value, int):
        return True
    return isinstance(value, tp)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def set_field_value(model: Any, field_name: str, value: Any) -> None:
    """Set a model field by name, checking the value against the field's type."""
    _require_instance(model, "typedb: cannot set field value on None")
    info = _lookup(model, field_name)
    if not info.exported:
        raise TypedbError(f"typedb: field {field_name} cannot be set")
    if not _accepts(info.type, value):
        raise TypedbError(
            f"typedb: cannot assign {type(value).__name__} to field "
            f"{field_name} of type {_type_name(info.type)}"
        )
    if info.type is float and isinstance(value, int):
        value = float(value)
    try:
        setattr(model, field_name, value)
    except dataclasses.FrozenInstanceError as exc:
        raise TypedbError(f"typedb: field {field_name} cannot be set") from exc


def find_method(model: Any, method_name: str) -> Callable[..., Any] | None:
    """Return the bound public method of that name, or None."""
    if method_name.startswith("_"):
        return None
    attr = getattr(type(model), method_name, None)
    if attr is None or not inspect.isroutine(attr):
        return None
    return getattr(model, method_name)


def call_method(model: Any, method_name: str, *args: Any) -> Any:
    """Call a public method by name and return its result."""
    method = find_method(model, method_name)
    if method is None:
        raise MethodNotFoundError(method_name)
    return method(*args)