from __future__ import annotations
from typing import Optional
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

class AsyncUnitOfWork:
    """Одна транзакция на блок `async with`: commit при успехе, rollback при исключении."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sf = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self):
        self.session = self._sf()
        await self.session.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if exc:
                await self.session.rollback()
            else:
                await self.session.commit()
        finally:
            await self.session.__aexit__(exc_type, exc, tb)
            self.session = None
