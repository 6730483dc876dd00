"""
Telugu Bible API — API Key Usage Tracker
==========================================

What:  Records "last used now" against the api_keys row matching a presented token.
Why:   The dashboard shows when each key was last used. Keys are not enforced,
       so this bookkeeping must never slow down or fail a verse request.
How:   `schedule()` starts a detached asyncio task and returns immediately.
       The task opens its own session, runs one UPDATE, and logs (never
       raises) on failure. Pending tasks are held in a set so they are not
       garbage-collected mid-flight, and `drain()` waits for them at shutdown.
Who:   Scheduled by UsageTrackingMiddleware; drained by the lifespan handler.

Ordering:
    Updates from concurrent requests race freely. The last writer wins, which
    is fine for a "last used" timestamp.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Set

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bible_api.models.api_key import ApiKey

logger = logging.getLogger("bible_api.usage")


def mask_token(token: str) -> str:
    """Show enough of a key to correlate logs without leaking it."""
    if len(token) <= 12:
        return token[:2] + "..."
    return f"{token[:8]}...{token[-4:]}"


class UsageTracker:
    """
    Fire-and-forget writer for `api_keys.last_used_at`.

    One instance per application, created at startup with the same session
    factory the routes use.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, token: str) -> asyncio.Task:
        """
        Start a background update for `token` and return without waiting.

        Must be called from inside the running event loop (middleware is).
        """
        task = asyncio.get_running_loop().create_task(
            self.record_usage(token),
            name=f"api-key-usage:{mask_token(token)}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def record_usage(self, token: str) -> bool:
        """
        Set last_used_at = now() on the key whose key_hash equals `token`.

        Returns True when the update committed (even if no row matched),
        False when the store failed. Never raises.
        """
        now = datetime.now(timezone.utc)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(ApiKey)
                    .where(ApiKey.key_hash == token)
                    .values(last_used_at=now)
                )
                await session.commit()
        except Exception as e:
            logger.warning(
                "Could not record usage for API key %s: %s",
                mask_token(token),
                str(e),
            )
            return False

        if result.rowcount == 0:
            logger.debug("Usage recorded for unknown API key %s", mask_token(token))
        else:
            logger.debug("API key %s last used at %s", mask_token(token), now.isoformat())
        return True

    async def drain(self, timeout: Optional[float] = None) -> None:
        """
        Wait for in-flight updates, then cancel whatever is still running.

        Called during shutdown so the engine is not disposed under a live task.
        """
        if not self._pending:
            return
        done, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if pending:
            logger.warning("Cancelling %d unfinished API key usage updates", len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
