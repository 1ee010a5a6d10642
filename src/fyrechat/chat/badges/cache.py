"""Write-once cache of the global and per-channel badge tables."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..models import BadgeTable
from .provider import BaseBadgeProvider

logger = logging.getLogger(__name__)

GLOBAL_SLOT = "global"


class BadgeCache:
    """Lazily populated badge tables, fetched at most once per slot.

    Each slot (the global table, or one channel table per room id) moves
    from unfetched to fetching to populated exactly once. Callers that
    arrive while a slot is being fetched await the in-flight fetch instead
    of starting another. Failed fetches populate the slot with an empty
    table, so they are never retried.

    The cache must only be used from a single event loop.
    """

    def __init__(self, provider: BaseBadgeProvider | None = None):
        self._provider = provider
        self._global: BadgeTable | None = None
        self._channels: dict[str, BadgeTable] = {}
        self._inflight: dict[str, asyncio.Task] = {}

    @property
    def enabled(self) -> bool:
        """Whether a badge provider is configured."""
        return self._provider is not None

    def get_global(self) -> BadgeTable:
        """The global badge table, empty until loaded."""
        return self._global or {}

    def get_channel(self, room_id: str) -> BadgeTable:
        """The badge table for a room, empty until loaded."""
        return self._channels.get(room_id, {})

    def is_loaded(self, room_id: str = "") -> bool:
        """Whether the global slot (and the room's slot, if given) is populated."""
        if self._global is None:
            return False
        return not room_id or room_id in self._channels

    async def ensure_loaded(self, room_id: str = "") -> None:
        """Make sure the global table and the room's table have been fetched.

        Does nothing when no provider is configured.
        """
        if self._provider is None:
            return

        provider = self._provider
        waits = [self._ensure_slot(GLOBAL_SLOT, provider.fetch_global)]
        if room_id:
            waits.append(
                self._ensure_slot(f"channel:{room_id}", lambda: provider.fetch_channel(room_id))
            )
        await asyncio.gather(*waits)

    async def _ensure_slot(
        self,
        slot: str,
        fetch: Callable[[], Awaitable[BadgeTable | None]],
    ) -> None:
        if self._is_populated(slot):
            return

        task = self._inflight.get(slot)
        if task is None:
            task = asyncio.ensure_future(self._populate(slot, fetch))
            self._inflight[slot] = task
        # A cancelled caller must not cancel the fetch other callers are awaiting
        await asyncio.shield(task)

    async def _populate(
        self,
        slot: str,
        fetch: Callable[[], Awaitable[BadgeTable | None]],
    ) -> None:
        try:
            table = await fetch()
        except Exception as e:
            logger.warning(f"Badge table fetch for {slot} failed: {e!r}")
            table = None
        finally:
            self._inflight.pop(slot, None)

        if table is None:
            logger.debug(f"Caching empty badge table for {slot}")
            table = {}
        self._store(slot, table)

    def _is_populated(self, slot: str) -> bool:
        if slot == GLOBAL_SLOT:
            return self._global is not None
        return slot.removeprefix("channel:") in self._channels

    def _store(self, slot: str, table: BadgeTable) -> None:
        if slot == GLOBAL_SLOT:
            self._global = table
        else:
            self._channels[slot.removeprefix("channel:")] = table
