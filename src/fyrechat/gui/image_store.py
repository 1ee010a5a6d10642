"""In-memory store of emote and badge images, downloaded on first use."""

import logging

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtGui import QImage
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

logger = logging.getLogger(__name__)

MAX_IMAGE_ENTRIES = 2000


class ImageStore(QObject):
    """Downloads images by URL once and keeps them for the process lifetime.

    A failed download is remembered so the URL is not requested again.
    """

    # Emitted with the URL once its image is available
    image_loaded = Signal(str)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._network = QNetworkAccessManager(self)
        self._images: dict[str, QImage] = {}
        self._pending: set[str] = set()
        self._failed: set[str] = set()

    def get(self, url: str) -> QImage | None:
        """Return the image for url, starting a download if it isn't loaded yet."""
        image = self._images.get(url)
        if image is not None:
            return image
        self.request(url)
        return None

    def request(self, url: str) -> None:
        if not url or url in self._images or url in self._pending or url in self._failed:
            return
        if len(self._images) >= MAX_IMAGE_ENTRIES:
            # Evict the oldest entry (dicts keep insertion order)
            self._images.pop(next(iter(self._images)))
        self._pending.add(url)
        reply = self._network.get(QNetworkRequest(QUrl(url)))
        reply.finished.connect(lambda: self._on_finished(url, reply))

    def _on_finished(self, url: str, reply: QNetworkReply) -> None:
        self._pending.discard(url)
        try:
            if reply.error() != QNetworkReply.NetworkError.NoError:
                logger.debug(f"Image download failed for {url}: {reply.errorString()}")
                self._failed.add(url)
                return
            image = QImage.fromData(bytes(reply.readAll()))
            if image.isNull():
                logger.debug(f"Could not decode image from {url}")
                self._failed.add(url)
                return
            self._images[url] = image
        finally:
            reply.deleteLater()
        self.image_loaded.emit(url)
