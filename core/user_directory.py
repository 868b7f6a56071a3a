"""
Display-name lookup for rendering replies.

Independent of the stores: names are cached for a while and fall back to the
raw id when the platform lookup fails.
"""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger("omikuji.users")

# Returns the display name, or None when the user does not exist.
NameFetcher = Callable[[str], Awaitable[Optional[str]]]

DEFAULT_TTL_SECONDS = 3600.0


class UserDirectory:
    def __init__(
        self,
        fetch: NameFetcher,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Tuple[float, str]] = {}

    async def lookup(self, user_id: str) -> Optional[str]:
        """Return the user's display name, or None if the user is unknown."""
        now = self._clock()
        cached = self._cache.get(user_id)
        if cached and now - cached[0] < self._ttl:
            return cached[1]

        try:
            name = await self._fetch(user_id)
        except Exception as e:
            logger.warning("Failed to look up user %s: %s", user_id, e)
            return None

        if not name:
            return None
        self._cache[user_id] = (now, name)
        return name

    async def display_name(self, user_id: str) -> str:
        return await self.lookup(user_id) or user_id

    async def display_names(self, user_ids: Iterable[str]) -> List[str]:
        return [await self.display_name(user_id) for user_id in user_ids]

    def invalidate(self, user_id: Optional[str] = None) -> None:
        if user_id is None:
            self._cache.clear()
        else:
            self._cache.pop(user_id, None)
