"""Core types: errors, the executor interface, configuration and the model base."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable


class TypedbError(Exception):
    """Base class for errors raised by typedb."""


class NotFoundError(TypedbError, LookupError):
    """Raised when a query that must return a row returns none."""

    def __init__(self, message: str = "typedb: not found") -> None:
        super().__init__(message)


class Executor(abc.ABC):
    """Runs queries against a database connection or transaction."""

    driver_name: str = ""

    @abc.abstractmethod
    def exec(self, query: str, *args: Any) -> Any:
        """Run a statement that returns no rows (INSERT, UPDATE, DELETE, DDL)."""

    @abc.abstractmethod
    def query_all(self, query: str, *args: Any) -> list[dict[str, Any]]:
        """Return every row as a dict keyed by column name."""

    @abc.abstractmethod
    def query_row_map(self, query: str, *args: Any) -> dict[str, Any]:
        """Return the first row as a dict; raise NotFoundError when there is none."""


@dataclass
class Config:
    """Connection and pool settings."""

    dsn: str = ""
    max_open_conns: int = 10
    max_idle_conns: int = 5
    conn_max_lifetime: timedelta = timedelta(minutes=30)
    conn_max_idle_time: timedelta = timedelta(minutes=5)
    op_timeout: timedelta = timedelta(seconds=5)


Option = Callable[[Config], None]


class Model:
    """Base class for models.

    Subclasses are dataclasses whose fields are declared with ``column()``.
    The original copy used for partial updates is kept outside the dataclass
    fields, so it never takes part in database operations.
    """

    _original_copy: Model | None = None