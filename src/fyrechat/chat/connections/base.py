"""Base chat connection abstract class."""

import asyncio
import logging
import random
from abc import abstractmethod

from PySide6.QtCore import QObject, Signal

from ..badges.cache import BadgeCache
from ..badges.resolver import resolve_badges
from ..models import ChatEvent, ResolvedChatEvent

logger = logging.getLogger(__name__)

# Exponential backoff constants for reconnection
INITIAL_RECONNECT_DELAY = 2.0  # seconds
MAX_RECONNECT_DELAY = 60.0  # seconds
RECONNECT_BACKOFF_FACTOR = 2.0
RECONNECT_JITTER = 0.1  # 10% jitter to prevent thundering herd


class BaseChatConnection(QObject):
    """Abstract base class for chat connections.

    Subclasses run their event loop in a QThread and emit signals
    for the main thread to consume.
    """

    # Emitted once per decoded chat line, in arrival order
    event_received = Signal(object)  # ResolvedChatEvent
    # Connection state signals
    connected = Signal(str)  # nick
    disconnected = Signal()
    error = Signal(str)

    def __init__(self, badge_cache: BadgeCache | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self._badge_cache = badge_cache or BadgeCache()
        self._channel: str = ""
        self._is_connected: bool = False
        self._reconnect_delay: float = INITIAL_RECONNECT_DELAY
        self._should_reconnect: bool = True  # Set to False for intentional disconnect
        self._stop_event: asyncio.Event | None = None

    @property
    def channel(self) -> str:
        """The channel currently connected to."""
        return self._channel

    @property
    def badge_cache(self) -> BadgeCache:
        """The badge tables used to resolve badge keys."""
        return self._badge_cache

    @property
    def is_connected(self) -> bool:
        """Whether the connection is active."""
        return self._is_connected

    @abstractmethod
    async def connect_to_channel(self, channel: str) -> None:
        """Connect to a channel's chat and read until disconnected.

        Args:
            channel: The channel login name.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the current channel."""

    def _set_connected(self, channel: str, nick: str) -> None:
        """Mark as connected and emit signal."""
        self._channel = channel
        self._is_connected = True
        self.connected.emit(nick)

    def _set_disconnected(self) -> None:
        """Mark as disconnected and emit signal."""
        was_connected = self._is_connected
        self._is_connected = False
        if was_connected:
            self.disconnected.emit()

    def _emit_event(self, event: ResolvedChatEvent) -> None:
        """Emit a decoded chat event."""
        self.event_received.emit(event)

    async def _resolve_and_emit(self, event: ChatEvent) -> ResolvedChatEvent:
        """Load the badge tables the event needs, resolve its badges and emit it."""
        badge_urls: list[str] = []
        if self._badge_cache.enabled and event.room_id and event.badge_keys:
            await self._badge_cache.ensure_loaded(event.room_id)
            badge_urls = resolve_badges(event.badge_keys, event.room_id, self._badge_cache)

        resolved = ResolvedChatEvent(event=event, badge_urls=tuple(badge_urls))
        self._emit_event(resolved)
        return resolved

    def _emit_error(self, message: str) -> None:
        """Emit an error."""
        logger.error(f"Chat connection error ({self.__class__.__name__}): {message}")
        self.error.emit(message)

    def _reset_backoff(self) -> None:
        """Reset reconnection backoff delay after successful connection."""
        self._reconnect_delay = INITIAL_RECONNECT_DELAY

    def _get_next_backoff(self) -> float:
        """Get the next backoff delay with jitter and update for next call."""
        delay = self._reconnect_delay
        # Add jitter (±10%)
        jitter = delay * RECONNECT_JITTER * (2 * random.random() - 1)
        delay_with_jitter = delay + jitter

        self._reconnect_delay = min(
            self._reconnect_delay * RECONNECT_BACKOFF_FACTOR,
            MAX_RECONNECT_DELAY,
        )

        return delay_with_jitter

    def _begin_run(self) -> None:
        """Arm reconnection and the stop event for a new connect_to_channel() run."""
        self._should_reconnect = True
        self._stop_event = asyncio.Event()

    def _request_stop(self) -> None:
        """Stop reconnecting and wake any pending sleep."""
        self._should_reconnect = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Sleep up to timeout seconds. Returns True early once a stop is requested."""
        if self._stop_event is None:
            await asyncio.sleep(timeout)
            return not self._should_reconnect
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _sleep_with_backoff(self) -> None:
        """Sleep for the current backoff delay before reconnecting.

        Returns early when disconnect() is called meanwhile.
        """
        delay = self._get_next_backoff()
        logger.info(
            f"{self.__class__.__name__}: reconnecting in {delay:.1f}s "
            f"(next delay: {self._reconnect_delay:.1f}s)"
        )
        await self._wait_for_stop(delay)
