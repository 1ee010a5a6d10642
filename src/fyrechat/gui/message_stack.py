"""Bounded stack of overlay messages with time-to-live expiry."""

import collections
import itertools
import time
from dataclasses import dataclass, field

from ..chat.models import ResolvedChatEvent

_entry_ids = itertools.count(1)


@dataclass
class StackEntry:
    """A message currently shown on the overlay."""

    resolved: ResolvedChatEvent
    added_at: float
    id: int = field(default_factory=lambda: next(_entry_ids))
    fading: bool = False


class MessageStack:
    """Ordered stack of overlay entries, oldest first.

    Holds at most max_messages entries; adding past the limit evicts the
    oldest. With a ttl, each entry starts fading ``fade`` seconds before it
    is removed at ``ttl`` seconds. The fade phase is skipped when fade is 0
    or not shorter than ttl. A ttl of 0 disables expiry.
    """

    def __init__(self, max_messages: int = 30, ttl: float = 22, fade: float = 2):
        self._entries: collections.deque[StackEntry] = collections.deque()
        self.max_messages = max_messages
        self.ttl = ttl
        self.fade = fade

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[StackEntry]:
        return list(self._entries)

    @property
    def has_fade_phase(self) -> bool:
        return self.fade > 0 and self.ttl > self.fade

    def add(
        self, resolved: ResolvedChatEvent, now: float | None = None
    ) -> tuple[StackEntry, list[StackEntry]]:
        """Append a message. Returns the new entry and any evicted entries."""
        if now is None:
            now = time.monotonic()
        entry = StackEntry(resolved=resolved, added_at=now)
        self._entries.append(entry)

        evicted: list[StackEntry] = []
        while len(self._entries) > self.max_messages:
            evicted.append(self._entries.popleft())
        return entry, evicted

    def tick(self, now: float | None = None) -> tuple[list[StackEntry], list[StackEntry]]:
        """Advance expiry. Returns (entries that started fading, removed entries)."""
        if self.ttl <= 0 or not self._entries:
            return [], []
        if now is None:
            now = time.monotonic()

        started_fading: list[StackEntry] = []
        removed: list[StackEntry] = []
        kept: collections.deque[StackEntry] = collections.deque()
        for entry in self._entries:
            age = now - entry.added_at
            if age >= self.ttl:
                removed.append(entry)
                continue
            if self.has_fade_phase and not entry.fading and age >= self.ttl - self.fade:
                entry.fading = True
                started_fading.append(entry)
            kept.append(entry)
        self._entries = kept
        return started_fading, removed

    def clear(self) -> list[StackEntry]:
        """Remove all entries and return them."""
        removed = list(self._entries)
        self._entries.clear()
        return removed
