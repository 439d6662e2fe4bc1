"""
In-memory dashboard sessions.

Sessions live only in this process: the store starts empty and a reaper
task drops expired entries periodically.
"""

import asyncio
import logging
import secrets
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """Issues, validates and expires opaque session tokens."""

    def __init__(
        self,
        lifetime: timedelta = timedelta(days=10),
        clock: Callable[[], float] = time.time,
    ):
        self.lifetime = lifetime
        self._clock = clock
        self._sessions: dict[str, float] = {}

    def issue(self) -> str:
        token = f"session_{secrets.token_urlsafe(24)}"
        self._sessions[token] = self._clock()
        return token

    def _expired(self, created_at: float, now: float) -> bool:
        return now - created_at >= self.lifetime.total_seconds()

    def validate(self, token: Optional[str]) -> bool:
        """True for a live session. An expired one is removed."""
        if not token:
            return False
        created_at = self._sessions.get(token)
        if created_at is None:
            return False
        if self._expired(created_at, self._clock()):
            del self._sessions[token]
            return False
        return True

    def sweep(self) -> int:
        """Drop every expired session; returns how many were removed."""
        now = self._clock()
        expired = [t for t, created in self._sessions.items() if self._expired(created, now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Expired %d sessions", len(expired))
        return len(expired)

    async def reap_forever(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            self.sweep()
