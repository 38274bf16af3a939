"""Lazily created aiohttp session shared by live providers and the inference client."""

from __future__ import annotations

import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class SharedSession:
    """Holds one ``aiohttp.ClientSession`` for the life of the process.

    A session passed in at construction is used as-is and never closed
    here; otherwise one is created on first use and closed by ``close()``.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None) -> None:
        self._session = session
        self._owned = session is None

    async def get(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": "sectorcast/1.0"},
            )
            self._owned = True
        return self._session

    async def close(self) -> None:
        if self._owned and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None
