"""Per-session export state.

A session groups the catalog cache and the single export job of one report.
Starting a new draft resets the session: the cached catalog is dropped and
any poll loop still running is stopped.

Sessions are keyed by a caller-supplied id, so the registry keeps only the
most recently used ones and stops the poll loop of every session it evicts.
"""

import asyncio
import logging
from collections import OrderedDict

from reportdeck.core.config import settings
from reportdeck.services.export.catalog import CatalogFetcher
from reportdeck.services.export.client import GammaClient
from reportdeck.services.export.job_manager import ExportJobManager

__all__ = [
    "ReportSession",
    "SessionRegistry",
]

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


class ReportSession:
    def __init__(self, session_id: str, client: GammaClient):
        self.session_id = session_id
        self.catalog = CatalogFetcher(client)
        self.exports = ExportJobManager(client)

    async def reset(self) -> None:
        logger.info("Resetting report session %s", self.session_id)
        self.catalog.reset()
        await self.exports.cancel()


class SessionRegistry:
    def __init__(self, client: GammaClient | None = None, max_sessions: int | None = None):
        self._client = client
        self.max_sessions = max_sessions or settings.max_sessions
        self._sessions: OrderedDict[str, ReportSession] = OrderedDict()
        self._lock = asyncio.Lock()

    @property
    def client(self) -> GammaClient:
        if self._client is None:
            self._client = GammaClient()
        return self._client

    async def get(self, session_id: str | None = None) -> ReportSession:
        session_id = session_id or DEFAULT_SESSION_ID
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                return session

            session = ReportSession(session_id, self.client)
            self._sessions[session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, evicted = self._sessions.popitem(last=False)
                logger.info("Evicting least recently used report session %s", evicted_id)
                await evicted.exports.cancel()
            return session

    async def close(self) -> None:
        for session in list(self._sessions.values()):
            await session.exports.cancel()
        self._sessions.clear()
        if self._client is not None:
            await self._client.aclose()
