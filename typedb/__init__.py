"""Typed model mapping over plain SQL: dataclass models, queries, loading by key and updates."""

__version__ = "0.1.0"

__all__ = ["types", "registry", "fields", "model", "query", "load", "update"]