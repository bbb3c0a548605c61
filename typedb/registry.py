"""Registry of model types and their per-model options."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TypeVar

from .types import Model

M = TypeVar("M", bound=type)


@dataclass(frozen=True)
class ModelOptions:
    """Behaviour settings for a registered model.

    partial_update keeps a copy of the model after deserialization so that
    update() only writes the columns that changed since then.
    """

    partial_update: bool = False


_lock = threading.RLock()
_registered: list[type] = []
_options: dict[type, ModelOptions] = {}


def _check_model_type(model_type: object, func: str) -> None:
    if not isinstance(model_type, type) or not issubclass(model_type, Model):
        raise TypeError(f"typedb: {func} requires a Model subclass, got {model_type!r}")


def register_model(model_type: M) -> M:
    """Register a model class; usable as a decorator. Duplicates are ignored."""
    _check_model_type(model_type, "register_model")
    with _lock:
        if model_type not in _registered:
            _registered.append(model_type)
    return model_type


def register_model_with_options(model_type: M, options: ModelOptions) -> M:
    """Register a model class and store its options."""
    _check_model_type(model_type, "register_model_with_options")
    with _lock:
        if model_type not in _registered:
            _registered.append(model_type)
        _options[model_type] = options
    return model_type


def get_model_options(model_type: type) -> ModelOptions:
    """Return the options of a model, or default options if none were set."""
    with _lock:
        return _options.get(model_type, ModelOptions())


def get_registered_models() -> list[type]:
    """Return a copy of the registered model classes, in registration order."""
    with _lock:
        return list(_registered)


def reset_registry() -> None:
    """Forget every registered model and its options."""
    with _lock:
        _registered.clear()
        _options.clear()