"""Main Qt application."""

import logging
import sys

from PySide6.QtWidgets import QApplication

from ..chat.manager import ChatManager
from ..core.settings import OverlaySettings
from .overlay import OverlayWindow

logger = logging.getLogger(__name__)


class Application(QApplication):
    """Overlay application: one chat manager feeding one overlay window."""

    def __init__(self, settings: OverlaySettings, argv: list[str] | None = None):
        super().__init__(argv if argv is not None else sys.argv[:1])
        self.setApplicationName("FyreChat")
        self.settings = settings
        self.overlay = OverlayWindow(settings)
        self.chat_manager = ChatManager(settings, parent=self)
        self.chat_manager.event_received.connect(self.overlay.add_event)
        self.chat_manager.status_changed.connect(self.overlay.set_status)
        self.aboutToQuit.connect(self.cleanup)

    def start(self) -> None:
        self.overlay.show()
        self.chat_manager.start()

    def cleanup(self) -> None:
        logger.info("Shutting down chat")
        self.chat_manager.stop()


def run(settings: OverlaySettings) -> int:
    """Run the application."""
    app = Application(settings)
    app.start()
    return app.exec()
