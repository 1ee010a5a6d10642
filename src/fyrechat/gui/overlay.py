"""Overlay window showing the live message stack."""

import logging

from PySide6.QtCore import QByteArray, QPropertyAnimation, Qt, QTimer, QUrl
from PySide6.QtGui import QTextDocument
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsOpacityEffect,
    QLabel,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from ..chat.emotes.renderer import emote_url, render_message_html
from ..chat.models import EmoteSegment, ResolvedChatEvent
from ..core.settings import OverlaySettings
from .image_store import ImageStore
from .message_stack import MessageStack, StackEntry
from .theme import get_overlay_stylesheet

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 100
OVERLAY_WIDTH = 420
ROW_TEXT_WIDTH = OVERLAY_WIDTH - 40

_IMAGE_RESOURCE = QTextDocument.ResourceType.ImageResource.value


class MessageRow(QTextBrowser):
    """One chat bubble. Images are served from the shared ImageStore."""

    def __init__(self, resolved: ResolvedChatEvent, images: ImageStore, parent=None):
        super().__init__(parent)
        self.setObjectName("message")
        self._images = images
        self._html = render_message_html(resolved)
        self.image_urls = set(resolved.badge_urls) | {
            emote_url(s.emote_id) for s in resolved.event.segments if isinstance(s, EmoteSegment)
        }
        self.setOpenLinks(False)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.refresh()

    def loadResource(self, type: int, name: QUrl):  # noqa: N802
        if int(getattr(type, "value", type)) == _IMAGE_RESOURCE:
            image = self._images.get(name.toString())
            if image is not None:
                return image
            return QByteArray()
        return super().loadResource(type, name)

    def refresh(self) -> None:
        """Re-render the bubble, picking up any images loaded since."""
        self.setHtml(self._html)
        self.document().setTextWidth(ROW_TEXT_WIDTH)
        margins = self.contentsMargins()
        self.setFixedHeight(int(self.document().size().height()) + margins.top() + margins.bottom())

    def fade_out(self, duration_ms: int) -> None:
        effect = QGraphicsOpacityEffect(self)
        self.setGraphicsEffect(effect)
        self._fade = QPropertyAnimation(effect, b"opacity", self)
        self._fade.setDuration(duration_ms)
        self._fade.setStartValue(1.0)
        self._fade.setEndValue(0.0)
        self._fade.start()


class OverlayWindow(QWidget):
    """Frameless, translucent window stacking the newest messages at the bottom."""

    def __init__(self, settings: OverlaySettings, parent: QWidget | None = None):
        super().__init__(parent)
        self.settings = settings
        self.setObjectName("overlay")
        self.setWindowTitle(f"FyreChat - #{settings.channel}")
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setStyleSheet(get_overlay_stylesheet(settings.theme))
        self.resize(OVERLAY_WIDTH, 720)

        self._stack = MessageStack(settings.max_messages, settings.ttl, settings.fade)
        self._rows: dict[int, MessageRow] = {}
        self._images = ImageStore(self)
        self._images.image_loaded.connect(self._on_image_loaded)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        self._debug_label = QLabel(settings.summary(), self)
        self._debug_label.setObjectName("debug")
        self._debug_label.setVisible(settings.debug)
        layout.addWidget(self._debug_label)
        layout.addStretch(1)
        self._layout = layout

        self._timer = QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self._tick)
        if settings.ttl > 0:
            self._timer.start()

    def set_status(self, text: str) -> None:
        """Show connection status in the debug banner (only in debug mode)."""
        if self.settings.debug:
            self._debug_label.setText(f"{text} | {self.settings.summary()}")

    def add_event(self, resolved: ResolvedChatEvent) -> None:
        entry, evicted = self._stack.add(resolved)
        row = MessageRow(resolved, self._images, self)
        self._rows[entry.id] = row
        self._layout.addWidget(row)
        self._remove_rows(evicted)

    def _tick(self) -> None:
        started_fading, removed = self._stack.tick()
        fade_ms = int(self.settings.fade * 1000)
        for entry in started_fading:
            row = self._rows.get(entry.id)
            if row is not None:
                row.fade_out(fade_ms)
        self._remove_rows(removed)

    def _remove_rows(self, entries: list[StackEntry]) -> None:
        for entry in entries:
            row = self._rows.pop(entry.id, None)
            if row is not None:
                self._layout.removeWidget(row)
                row.deleteLater()

    def _on_image_loaded(self, url: str) -> None:
        for row in self._rows.values():
            if url in row.image_urls:
                row.refresh()

    def closeEvent(self, event) -> None:  # noqa: N802
        self._timer.stop()
        super().closeEvent(event)
