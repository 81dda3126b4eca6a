import asyncio

from src.adapter.repositories.in_memory import (
    InMemorySessionRepository,
    InMemoryTables,
    InMemoryUserRepository,
)
from src.app.services.unit_of_work import UnitOfWork


class InMemoryStore:
    """Committed state shared by every InMemoryUnitOfWork built on it"""

    def __init__(self):
        self.tables = InMemoryTables()
        self.lock = asyncio.Lock()


class InMemoryUnitOfWork(UnitOfWork):
    """
    In-memory implementation of UnitOfWork pattern.

    A unit of work works on a private copy of the tables and holds the store
    lock from __aenter__ to __aexit__, so transactions are serialized and
    either fully committed or discarded. Not reentrant: do not nest.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store
        self._tables = InMemoryTables()

    async def __aenter__(self):
        await self.store.lock.acquire()
        self._tables.copy_from(self.store.tables)
        self.users = InMemoryUserRepository(self._tables)
        self.sessions = InMemorySessionRepository(self._tables)
        return self

    async def __aexit__(self, *args):
        try:
            await self.rollback()
        finally:
            self.store.lock.release()

    async def commit(self):
        self.store.tables.copy_from(self._tables)

    async def rollback(self):
        self._tables.copy_from(self.store.tables)
