from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

from .connection import DatabaseConnection
from .mysql_base import transaction


class UnitOfWork(Protocol):
    """Groups repository writes so they commit or roll back together."""

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError


class MySQLUnitOfWork(UnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with transaction(self._conn_factory):
            yield
