from __future__ import annotations
import io
import logging
from typing import Optional

import pillow_avif  # noqa: F401  registers the AVIF decoder with Pillow
from PIL import Image, UnidentifiedImageError
from PyQt5.QtCore import QObject, pyqtSignal, QRunnable, pyqtSlot

from .archive_handler import PageSource

logger = logging.getLogger(__name__)


def get_aspect_ratio(image_bytes: Optional[bytes]) -> Optional[float]:
    """Width / height of an encoded image, or None when it cannot be identified."""
    if not image_bytes:
        return None
    try:
        # Only the header is parsed; pixel data is never decoded here
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("Could not read image dimensions: %s", e)
        return None
    if width <= 0 or height <= 0:
        return None
    return width / height


# Background worker for page preloading

class WorkerSignals(QObject):
    """Defines signals available from a running worker thread."""
    finished = pyqtSignal(object, object)  # cache key, page bytes or None

class PageLoadWorker(QRunnable):
    """Worker thread fetching the bytes of a single page."""
    def __init__(self, key, source: PageSource):
        super().__init__()
        self.key = key
        self.source = source
        self.signals = WorkerSignals()

    @pyqtSlot()
    def run(self):
        """Execute the page fetch."""
        data = self.source.get_page_bytes(self.key.page_index)
        self.signals.finished.emit(self.key, data)
