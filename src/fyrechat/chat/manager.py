"""Chat manager - owns the connection worker and the badge cache."""

import asyncio
import logging

from PySide6.QtCore import QObject, QThread, Signal

from ..core.settings import OverlaySettings
from .badges.cache import BadgeCache
from .badges.provider import BadgeProxyProvider
from .connections.base import BaseChatConnection
from .connections.demo import DemoChatConnection
from .connections.twitch import TwitchChatConnection

logger = logging.getLogger(__name__)

WORKER_STOP_TIMEOUT_MS = 3000


class ChatConnectionWorker(QThread):
    """Worker thread that runs a chat connection's async event loop."""

    def __init__(self, connection: BaseChatConnection, channel: str, parent=None):
        super().__init__(parent)
        self.connection = connection
        self.channel = channel
        self._loop: asyncio.AbstractEventLoop | None = None
        self._should_stop = False

    def run(self):
        """Run the connection in a new event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self.connection.connect_to_channel(self.channel))
        except Exception as e:
            if not self._should_stop:
                logger.error(f"Chat worker error: {e}")
                self.connection._emit_error(str(e))
        finally:
            self._loop.close()
            self._loop = None

    def stop(self):
        """Ask the connection to disconnect; run() returns once it has."""
        self._should_stop = True
        if self._loop and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self.connection.disconnect(), self._loop)


class ChatManager(QObject):
    """Bridges the chat connection running in a worker thread to the overlay.

    Creates the badge cache (shared by every event the connection decodes),
    picks the demo or Twitch source from settings and re-emits its signals
    on the main thread.
    """

    # Emitted with each ResolvedChatEvent, in arrival order
    event_received = Signal(object)
    # Emitted with a human-readable connection status
    status_changed = Signal(str)

    def __init__(self, settings: OverlaySettings, parent: QObject | None = None):
        super().__init__(parent)
        self.settings = settings
        provider = BadgeProxyProvider(settings.badge_proxy) if settings.badge_proxy else None
        self._badge_cache = BadgeCache(provider)
        self._connection: BaseChatConnection | None = None
        self._worker: ChatConnectionWorker | None = None

    @property
    def badge_cache(self) -> BadgeCache:
        return self._badge_cache

    def _create_connection(self) -> BaseChatConnection:
        if self.settings.demo:
            return DemoChatConnection(
                with_badges=self.settings.demo_badges, badge_cache=self._badge_cache
            )
        return TwitchChatConnection(badge_cache=self._badge_cache)

    def start(self) -> None:
        """Start reading chat for the configured channel."""
        if self._worker is not None:
            return

        connection = self._create_connection()
        connection.event_received.connect(self.event_received)
        connection.connected.connect(self._on_connected)
        connection.disconnected.connect(self._on_disconnected)
        connection.error.connect(self._on_error)
        self._connection = connection

        self._worker = ChatConnectionWorker(connection, self.settings.channel, parent=self)
        self._worker.start()
        logger.info(f"Chat started for #{self.settings.channel} ({self.settings.summary()})")

    def stop(self) -> None:
        """Stop the connection and wait for the worker thread to exit."""
        if self._worker is None:
            return
        self._worker.stop()
        if not self._worker.wait(WORKER_STOP_TIMEOUT_MS):
            logger.warning("Chat worker did not stop in time")
        self._worker = None
        self._connection = None

    def _on_connected(self, nick: str) -> None:
        self.status_changed.emit(f"Connected as {nick} (joining #{self.settings.channel})")

    def _on_disconnected(self) -> None:
        self.status_changed.emit("Disconnected, reconnecting...")

    def _on_error(self, message: str) -> None:
        self.status_changed.emit(f"Connection error: {message}")
