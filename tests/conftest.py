"""
Shared fixtures: a throwaway SQLite database and a scripted inference backend.

No network, no PostgreSQL, no model credentials required.
"""

from __future__ import annotations

from typing import AsyncIterator, Union

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sectorcast.db.models import Base


class ScriptedInference:
    """Inference stand-in that replays canned replies and records prompts.

    Each entry in *replies* is either a string returned from ``infer`` or an
    exception instance raised from it. The last entry repeats.
    """

    def __init__(self, *replies: Union[str, BaseException]) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def infer(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies[min(len(self.prompts), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def close(self) -> None:
        return None


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """File-backed SQLite so concurrent sessions share one database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'forecasts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest.fixture
def scripted_inference():
    return ScriptedInference
