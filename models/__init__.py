"""
models package
~~~~~~~~~~~~~~
Exposes the slot types and the document library for easy import:
    from models import DocumentLibrary, SingleSlot, SpreadSlot
"""
from .slot import (  # noqa: F401
    InvalidSlotShapeError,
    NavigationTarget,
    SingleSlot,
    Slot,
    SpreadSlot,
    TargetKind,
    slot_from_pages,
)
from .document import DocumentLibrary, DocumentRecord  # noqa: F401
