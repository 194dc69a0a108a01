from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, List, Optional

from PyQt5.QtCore import QObject, QSettings, QTimer, QThreadPool, pyqtSignal, pyqtSlot

from models.document import DocumentLibrary, DocumentRecord
from models.slot import InvalidSlotShapeError, NavigationTarget
from utils.archive_handler import PageSource, open_page_source
from utils.config import (
    APP_NAME,
    DEFAULT_CACHE_MAX_BYTES,
    DEFAULT_CACHE_MAX_ENTRIES,
    SAVE_DELAY_MS,
)
from utils.image_cache import CacheKey, ImageCache
from utils.images import PageLoadWorker, get_aspect_ratio
from utils.keymap import NavigationAction
from utils.paths import get_document_id
from .layout_engine import LayoutDecision, LayoutEngine, PageOutOfRangeError
from .navigation import NavigationEngine

logger = logging.getLogger(__name__)


class ReaderSession(QObject):
    """
    Everything one open document needs to be paged through: its layout table,
    navigation, and page image cache. One session per document; nothing is shared.
    """
    ORG_NAME = APP_NAME
    APP_NAME = APP_NAME
    SETTINGS_CACHE_ENTRIES = "image_cache_max_entries"
    SETTINGS_CACHE_BYTES = "image_cache_max_bytes"

    slot_changed = pyqtSignal(int)
    layout_changed = pyqtSignal(object)  # LayoutDecision
    page_loaded = pyqtSignal(int)
    page_unavailable = pyqtSignal(int)

    def __init__(
        self,
        record: DocumentRecord,
        source: PageSource,
        library: Optional[DocumentLibrary] = None,
        settings: Optional[QSettings] = None,
        cache: Optional[ImageCache] = None,
        threadpool=None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.record = record
        self.source = source
        self.library = library
        self.settings = settings if settings is not None else QSettings(self.ORG_NAME, self.APP_NAME)
        self.cache = cache if cache is not None else ImageCache(*self._cache_limits())
        self.threadpool = threadpool if threadpool is not None else QThreadPool.globalInstance()

        self.record.total_pages = source.page_count
        self.layout = LayoutEngine(self.total_pages)
        self.navigation = NavigationEngine(self.layout)
        self.current_slot = min(max(record.last_read_page, 0), max(self.total_pages - 1, 0))

        self._in_flight: Dict[CacheKey, PageLoadWorker] = {}
        self._closed = False

        self.save_timer = QTimer(self)
        self.save_timer.setSingleShot(True)
        self.save_timer.setInterval(SAVE_DELAY_MS)
        self.save_timer.timeout.connect(self._perform_save)

        if self.library is not None:
            self.library.add_removal_listener(self._on_document_removed)

    @classmethod
    def open_document(cls, path: Path, library: Optional[DocumentLibrary] = None, **kwargs) -> Optional["ReaderSession"]:
        """Opens *path*, registers it in *library* and returns a session, or None if unreadable."""
        source = open_page_source(path)
        if source is None:
            return None
        if library is not None:
            record = library.add(path, source.file_type, source.page_count)
        else:
            record = DocumentRecord(id=get_document_id(path), path=Path(path), file_type=source.file_type)
        return cls(record, source, library=library, **kwargs)

    def _cache_limits(self):
        max_entries = self.settings.value(self.SETTINGS_CACHE_ENTRIES, DEFAULT_CACHE_MAX_ENTRIES, type=int)
        max_bytes = self.settings.value(self.SETTINGS_CACHE_BYTES, DEFAULT_CACHE_MAX_BYTES, type=int)
        return max_entries, max_bytes

    # --- Host surface ---

    @property
    def document_id(self) -> str:
        return self.record.id

    @property
    def total_pages(self) -> int:
        return self.source.page_count

    @property
    def is_spread_mode(self) -> bool:
        return self.layout.use_spread

    @property
    def current_slot_count(self) -> int:
        return self.layout.slot_count

    def get_pages_for_slot(self, slot_index: int) -> List[int]:
        return self.layout.get_pages_for_slot(slot_index)

    def current_pages(self) -> List[int]:
        return self.layout.get_pages_for_slot(self.current_slot) if self.layout.slot_count else []

    def display_pages(self, slot_index: int) -> List[int]:
        """Pages of a slot in on-screen order for the document's reading direction."""
        slot = self.layout.slot_at(slot_index)
        if slot is None:
            return []
        return list(slot.display_pages(self.record.right_to_left))

    def update_viewport(self, width: float, height: float) -> LayoutDecision:
        visible = self.current_pages()
        anchor_page = visible[0] if visible else self.record.last_read_page
        previous = self.layout.decision
        generation = self.layout.generation

        decision = self.layout.determine_layout(width, height, self.total_pages, self.sample_aspect_ratio)
        rebuilt = self.layout.generation != generation
        if (
            rebuilt
            or previous is None
            or decision.use_spread != previous.use_spread
            or decision.total_pages != previous.total_pages
        ):
            self.layout_changed.emit(decision)

        if rebuilt:
            # Slot indices changed meaning: stay on the page that was showing
            self._apply_target(self.navigation.jump_to_page(anchor_page, self.total_pages))
        return decision

    # --- Navigation ---

    def go_to_adjacent_slot(self, direction: int) -> bool:
        return self._apply_target(self.navigation.go_to_adjacent_slot(direction, self.current_slot))

    def step_one_page(self, direction: int) -> bool:
        return self._apply_target(
            self.navigation.step_one_page(direction, self.current_slot, self.total_pages)
        )

    def jump_to_page(self, page: int) -> bool:
        return self._apply_target(self.navigation.jump_to_page(page, self.total_pages))

    def handle_action(self, action: NavigationAction) -> bool:
        if action is NavigationAction.NEXT_SLOT:
            return self.go_to_adjacent_slot(1)
        if action is NavigationAction.PREVIOUS_SLOT:
            return self.go_to_adjacent_slot(-1)
        if action is NavigationAction.NEXT_PAGE:
            return self.step_one_page(1)
        if action is NavigationAction.PREVIOUS_PAGE:
            return self.step_one_page(-1)
        return False

    def _apply_target(self, target: Optional[NavigationTarget]) -> bool:
        if target is None:
            return False
        if target.is_slot:
            index = target.index
        else:
            index = self._slot_for_raw_page(target.index)
            if index is None:
                return False
        self._set_current_slot(index)
        return True

    def _slot_for_raw_page(self, page: int) -> Optional[int]:
        """A page no slot shows alone: in spread mode it gets a single slot of its own."""
        if not self.layout.use_spread:
            return page
        index = self.layout.find_slot_for_pages([page])
        if index is not None:
            return index
        try:
            return self.layout.add_slot([page])
        except (InvalidSlotShapeError, PageOutOfRangeError) as e:
            logger.error("Cannot show page %d on its own: %s", page, e)
            return None

    def _set_current_slot(self, slot_index: int):
        self.current_slot = slot_index
        pages = self.layout.get_pages_for_slot(slot_index)
        if pages and self.library is not None:
            self.library.update_last_read_page(self.record.id, pages[0])
            self.save_timer.start()
        elif pages:
            self.record.mark_read(pages[0])
        self.slot_changed.emit(slot_index)
        self.preload_adjacent()

    # --- Images ---

    def _key(self, page: int) -> CacheKey:
        return CacheKey(self.record.id, page)

    def get_page_image(self, page: int) -> Optional[bytes]:
        """Image bytes for *page*, from the cache or the page source; None if unavailable."""
        if not 0 <= page < self.total_pages:
            logger.error("Page %d is out of range (%d pages)", page, self.total_pages)
            return None
        key = self._key(page)
        data = self.cache.get(key)
        if data is not None:
            return data

        if (worker := self._in_flight.get(key)) is not None:
            if not self.threadpool.tryTake(worker):
                # Already running; its result arrives through page_loaded
                logger.debug("Page %d is being fetched in the background", page)
                return None
            del self._in_flight[key]

        data = self.source.get_page_bytes(page)
        if not data:
            logger.warning("Page %d of %s is unavailable", page, self.record.display_name)
            self.page_unavailable.emit(page)
            return None
        self.cache.put(key, data)
        return data

    def sample_aspect_ratio(self, page: int) -> Optional[float]:
        ratio = self.record.aspect_ratios.get(page)
        if ratio is not None:
            return ratio
        ratio = get_aspect_ratio(self.get_page_image(page))
        if ratio is None:
            return None
        if self.library is not None:
            self.library.record_aspect_ratio(self.record.id, page, ratio)
            self.save_timer.start()
        else:
            self.record.aspect_ratios[page] = ratio
        return ratio

    def preload(self, page: int):
        """Fetch *page* in the background unless it is cached or already being fetched."""
        if self._closed or not 0 <= page < self.total_pages:
            return
        key = self._key(page)
        if key in self.cache or key in self._in_flight:
            return
        worker = PageLoadWorker(key, self.source)
        worker.signals.finished.connect(self._on_page_loaded)
        self._in_flight[key] = worker
        self.threadpool.start(worker)

    def preload_adjacent(self):
        for page in self.navigation.neighbour_pages(self.current_slot, self.total_pages):
            self.preload(page)

    @pyqtSlot(object, object)
    def _on_page_loaded(self, key: CacheKey, data: Optional[bytes]):
        self._in_flight.pop(key, None)
        if self._closed:
            return
        if not data:
            self.page_unavailable.emit(key.page_index)
            return
        self.cache.put(key, data)
        self.page_loaded.emit(key.page_index)

    # --- Lifecycle ---

    def _on_document_removed(self, doc_id: str):
        if doc_id != self.record.id:
            return
        self.save_timer.stop()
        self._closed = True
        removed = self.cache.remove_document(doc_id)
        logger.info("Cleared %d cached pages of removed document %s", removed, self.record.display_name)

    @pyqtSlot()
    def _perform_save(self):
        if self.library is not None:
            self.library.save()

    def close(self):
        if self.save_timer.isActive():
            self.save_timer.stop()
            self._perform_save()
        self._closed = True
        self._in_flight.clear()
        self.cache.log_stats()
        self.cache.clear()
        if self.library is not None:
            self.library.remove_removal_listener(self._on_document_removed)
