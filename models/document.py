from __future__ import annotations
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from natsort import natsorted

from utils.archive_handler import detect_file_type
from utils.paths import get_document_id, get_state_file_path

logger = logging.getLogger(__name__)


# --- Data Classes ---


@dataclass
class DocumentRecord:
    id: str
    path: Path
    file_type: str
    total_pages: int = 0
    right_to_left: bool = True
    last_read_page: int = 0
    added_at: float = field(default_factory=time.time)
    last_read_at: Optional[float] = None
    aspect_ratios: Dict[int, float] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.path.name if self.path.is_dir() else self.path.stem

    def mark_read(self, page: int):
        self.last_read_page = page
        self.last_read_at = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "file_type": self.file_type,
            "total_pages": self.total_pages,
            "right_to_left": self.right_to_left,
            "last_read_page": self.last_read_page,
            "added_at": self.added_at,
            "last_read_at": self.last_read_at,
            # JSON object keys are strings
            "aspect_ratios": {str(p): r for p, r in self.aspect_ratios.items()},
        }

    @classmethod
    def from_dict(cls, doc_id: str, blob: Dict[str, Any]) -> "DocumentRecord":
        return cls(
            id=doc_id,
            path=Path(blob["path"]),
            file_type=blob.get("file_type", "unknown"),
            total_pages=blob.get("total_pages", 0),
            right_to_left=blob.get("right_to_left", True),
            last_read_page=blob.get("last_read_page", 0),
            added_at=blob.get("added_at", 0.0),
            last_read_at=blob.get("last_read_at"),
            aspect_ratios={
                int(p): float(r) for p, r in blob.get("aspect_ratios", {}).items()
            },
        )


# --- Library Model ---


class DocumentLibrary:
    def __init__(self, state_file: Optional[Path] = None):
        self.state_file = state_file or get_state_file_path()
        self.documents: Dict[str, DocumentRecord] = {}
        self._removal_listeners: List[Callable[[str], None]] = []

        self._load_state()

    def add(self, path: Path, file_type: Optional[str] = None, total_pages: int = 0) -> DocumentRecord:
        path = Path(path)
        doc_id = get_document_id(path)
        if existing := self.documents.get(doc_id):
            if total_pages and existing.total_pages != total_pages:
                existing.total_pages = total_pages
            return existing

        record = DocumentRecord(
            id=doc_id,
            path=path,
            file_type=file_type or detect_file_type(path) or "unknown",
            total_pages=total_pages,
        )
        self.documents[doc_id] = record
        logger.info("Added %s to the library.", record.display_name)
        return record

    def get(self, doc_id: str) -> Optional[DocumentRecord]:
        return self.documents.get(doc_id)

    def remove(self, doc_id: str) -> bool:
        """Drops a document and tells every listener so per-document caches can be cleared."""
        record = self.documents.pop(doc_id, None)
        if record is None:
            return False
        logger.info("Removed %s from the library.", record.display_name)
        for callback in list(self._removal_listeners):
            callback(doc_id)
        return True

    def add_removal_listener(self, callback: Callable[[str], None]):
        self._removal_listeners.append(callback)

    def remove_removal_listener(self, callback: Callable[[str], None]):
        if callback in self._removal_listeners:
            self._removal_listeners.remove(callback)

    def sorted_documents(self, by: str = "title", reverse: bool = False) -> List[DocumentRecord]:
        if by == "added":
            return sorted(self.documents.values(), key=lambda d: d.added_at, reverse=reverse)
        if by == "last_read":
            return sorted(
                self.documents.values(), key=lambda d: d.last_read_at or 0.0, reverse=reverse
            )
        return natsorted(self.documents.values(), key=lambda d: d.display_name, reverse=reverse)

    def record_aspect_ratio(self, doc_id: str, page: int, ratio: float):
        if doc := self.documents.get(doc_id):
            doc.aspect_ratios[page] = ratio

    def update_last_read_page(self, doc_id: str, page: int):
        if doc := self.documents.get(doc_id):
            doc.mark_read(page)

    def _load_state(self):
        if not self.state_file.exists():
            return
        try:
            raw = json.loads(self.state_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to parse %s: %s", self.state_file.name, e)
            return

        for doc_id, blob in raw.get("documents", {}).items():
            try:
                self.documents[doc_id] = DocumentRecord.from_dict(doc_id, blob)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable entry %s: %s", doc_id, e)

    def save(self):
        data = {"documents": {k: d.to_dict() for k, d in self.documents.items()}}
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            self.state_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
            logger.info("Application state saved.")
        except OSError as e:
            logger.error("DocumentLibrary save error: %s", e)
