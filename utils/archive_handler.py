from __future__ import annotations
import logging
import zipfile
import rarfile
import fitz  # PyMuPDF
import ebooklib
from ebooklib import epub
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from natsort import natsorted

from .config import (
    HIDDEN_PREFIX,
    IGNORED_ARCHIVE_PREFIXES,
    PDF_RENDER_ZOOM,
    SUPPORTED_DOC_EXTS,
    SUPPORTED_EPUB_EXTS,
    SUPPORTED_IMAGE_EXTS,
    SUPPORTED_RAR_EXTS,
    SUPPORTED_ZIP_EXTS,
)

logger = logging.getLogger(__name__)

# --- Page sources: one per open document, pages fetched lazily by index ---

class PageSource(ABC):
    """Supplies the raw image bytes of a document's pages by page index."""
    file_type = "unknown"

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    @abstractmethod
    def page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def _read_page(self, index: int) -> Optional[bytes]:
        raise NotImplementedError

    def get_page_bytes(self, index: int) -> Optional[bytes]:
        """Returns the page's image bytes, or None when the page cannot be read."""
        if not 0 <= index < self.page_count:
            logger.warning("Page %d is outside %s (%d pages).", index, self.path.name, self.page_count)
            return None
        return self._read_page(index)

    def __len__(self) -> int:
        return self.page_count


class FolderPageSource(PageSource):
    """Image files in a plain folder."""
    file_type = "folder"

    def __init__(self, path: Path):
        super().__init__(path)
        self._files = natsorted(
            [p for p in self.path.iterdir()
             if p.is_file() and not p.name.startswith(HIDDEN_PREFIX) and p.suffix.lower() in SUPPORTED_IMAGE_EXTS],
            key=lambda p: p.name,
        )

    @property
    def page_count(self) -> int:
        return len(self._files)

    def _read_page(self, index: int) -> Optional[bytes]:
        try:
            return self._files[index].read_bytes()
        except OSError as e:
            logger.warning("Could not read %s: %s", self._files[index].name, e)
            return None


class ZipPageSource(PageSource):
    """Images within a .zip/.cbz archive."""
    file_type = "zip"

    def __init__(self, path: Path):
        super().__init__(path)
        with zipfile.ZipFile(self.path, 'r') as zf:
            self._members = _get_image_filenames(zf.namelist())

    @property
    def page_count(self) -> int:
        return len(self._members)

    def _read_page(self, index: int) -> Optional[bytes]:
        # Opened per read so worker threads never share a handle
        try:
            with zipfile.ZipFile(self.path, 'r') as zf:
                return zf.read(self._members[index])
        except (zipfile.BadZipFile, KeyError, OSError) as e:
            logger.warning("Could not read page %d of %s: %s", index, self.path.name, e)
            return None


class RarPageSource(PageSource):
    """Images within a .rar/.cbr archive."""
    file_type = "rar"

    def __init__(self, path: Path):
        super().__init__(path)
        with rarfile.RarFile(self.path) as rf:
            self._members = _get_image_filenames(rf.namelist())

    @property
    def page_count(self) -> int:
        return len(self._members)

    def _read_page(self, index: int) -> Optional[bytes]:
        try:
            with rarfile.RarFile(self.path) as rf:
                return rf.read(self._members[index])
        except (rarfile.Error, KeyError, OSError) as e:
            logger.warning("Could not read page %d of %s: %s", index, self.path.name, e)
            return None


class PdfPageSource(PageSource):
    """Pages of a .pdf document, rendered to PNG."""
    file_type = "pdf"

    def __init__(self, path: Path, zoom: float = PDF_RENDER_ZOOM):
        super().__init__(path)
        self.zoom = zoom
        with fitz.open(self.path) as doc:
            self._page_count = doc.page_count

    @property
    def page_count(self) -> int:
        return self._page_count

    def _read_page(self, index: int) -> Optional[bytes]:
        try:
            with fitz.open(self.path) as doc:
                page = doc.load_page(index)
                # Render at a higher DPI for better quality
                pix = page.get_pixmap(matrix=fitz.Matrix(self.zoom, self.zoom), alpha=False)
                return pix.tobytes("png")
        except Exception as e:
            logger.warning("Could not render page %d of %s: %s", index, self.path.name, e)
            return None


class EpubPageSource(PageSource):
    """Image items within an .epub file."""
    file_type = "epub"

    def __init__(self, path: Path):
        super().__init__(path)
        book = epub.read_epub(str(self.path))
        image_items = natsorted(
            list(book.get_items_of_type(ebooklib.ITEM_IMAGE)),
            key=lambda item: item.get_name()
        )
        self._item_ids = [item.get_id() for item in image_items]

    @property
    def page_count(self) -> int:
        return len(self._item_ids)

    def _read_page(self, index: int) -> Optional[bytes]:
        try:
            book = epub.read_epub(str(self.path))
            item = book.get_item_with_id(self._item_ids[index])
            return item.get_content() if item else None
        except Exception as e:
            logger.warning("Could not read page %d of %s: %s", index, self.path.name, e)
            return None


# --- Main Public Functions ---

_SOURCES_BY_TYPE = {
    "folder": FolderPageSource,
    "zip": ZipPageSource,
    "rar": RarPageSource,
    "pdf": PdfPageSource,
    "epub": EpubPageSource,
}

def _get_image_filenames(file_list: List[str]) -> List[str]:
    """Filters and sorts a list of archive member names for supported images."""
    return natsorted([
        f for f in file_list
        if not f.startswith(IGNORED_ARCHIVE_PREFIXES)
        and not f.endswith('/')
        and Path(f).suffix.lower() in SUPPORTED_IMAGE_EXTS
    ])

def detect_file_type(path: Path) -> Optional[str]:
    """Maps a path to one of the supported document types, or None."""
    path = Path(path)
    if path.is_dir():
        return "folder"
    ext = path.suffix.lower()
    if ext in SUPPORTED_ZIP_EXTS:
        return "zip"
    if ext in SUPPORTED_RAR_EXTS:
        return "rar"
    if ext in SUPPORTED_DOC_EXTS:
        return "pdf"
    if ext in SUPPORTED_EPUB_EXTS:
        return "epub"
    return None

def open_page_source(path: Path) -> Optional[PageSource]:
    """
    Universal entry point: returns the page source for any supported document,
    or None when the path is missing, unsupported or unreadable.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Document not found: %s", path)
        return None

    file_type = detect_file_type(path)
    if file_type is None:
        logger.warning("Unsupported document type: %s", path.name)
        return None

    try:
        return _SOURCES_BY_TYPE[file_type](path)
    except Exception as e:
        logger.error("Could not open %s: %s", path.name, e)
        return None
