from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union


class InvalidSlotShapeError(ValueError):
    """Raised when a page list cannot form a slot (a slot holds one or two pages)."""


# --- Slots ---


@dataclass(frozen=True)
class SingleSlot:
    page: int

    @property
    def pages(self) -> Tuple[int, ...]:
        return (self.page,)

    @property
    def is_spread(self) -> bool:
        return False

    def display_pages(self, right_to_left: bool = False) -> Tuple[int, ...]:
        return self.pages


@dataclass(frozen=True)
class SpreadSlot:
    left: int
    right: int

    def __post_init__(self):
        if self.left >= self.right:
            raise InvalidSlotShapeError(
                f"Spread pages must be increasing, got ({self.left}, {self.right})"
            )

    @property
    def pages(self) -> Tuple[int, ...]:
        return (self.left, self.right)

    @property
    def is_spread(self) -> bool:
        return True

    def display_pages(self, right_to_left: bool = False) -> Tuple[int, ...]:
        """Pages in on-screen order; right-to-left books put the later page first."""
        if right_to_left:
            return (self.right, self.left)
        return self.pages


Slot = Union[SingleSlot, SpreadSlot]


def slot_from_pages(pages: Sequence[int]) -> Slot:
    pages = list(pages)
    if len(pages) == 1:
        return SingleSlot(pages[0])
    if len(pages) == 2:
        return SpreadSlot(pages[0], pages[1])
    raise InvalidSlotShapeError(f"A slot holds 1 or 2 pages, got {len(pages)}: {pages}")


# --- Navigation results ---


class TargetKind(Enum):
    SLOT = "slot"
    RAW_PAGE = "raw_page"


@dataclass(frozen=True)
class NavigationTarget:
    """
    Where a navigation step wants the view to go.
    SLOT targets index the layout table; RAW_PAGE targets are page indices
    that no slot currently shows on its own.
    """
    kind: TargetKind
    index: int

    @classmethod
    def for_slot(cls, index: int) -> "NavigationTarget":
        return cls(TargetKind.SLOT, index)

    @classmethod
    def for_raw_page(cls, index: int) -> "NavigationTarget":
        return cls(TargetKind.RAW_PAGE, index)

    @property
    def is_slot(self) -> bool:
        return self.kind is TargetKind.SLOT
