from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from models.slot import SingleSlot, Slot, SpreadSlot, slot_from_pages
from utils.config import (
    ASPECT_SAMPLE_PAGES,
    DEFAULT_PAGE_ASPECT,
    PORTRAIT_PAGE_ASPECT,
    SPREAD_MIN_VIEWPORT_ASPECT,
)

logger = logging.getLogger(__name__)

AspectRatioSampler = Callable[[int], Optional[float]]


class PageOutOfRangeError(IndexError):
    """Raised when a slot would reference a page outside the document."""


@dataclass(frozen=True)
class LayoutDecision:
    """Outcome of one layout evaluation."""

    viewport_aspect: float
    average_page_aspect: Optional[float]
    sampled_pages: int
    use_spread: bool
    total_pages: int


def build_single_table(total_pages: int) -> List[Slot]:
    return [SingleSlot(p) for p in range(total_pages)]


def build_spread_table(total_pages: int) -> List[Slot]:
    if total_pages <= 0:
        return []
    slots: List[Slot] = [SingleSlot(0)]
    for left in range(1, total_pages, 2):
        if left + 1 < total_pages:
            slots.append(SpreadSlot(left, left + 1))
        else:
            slots.append(SingleSlot(left))
    return slots


class LayoutEngine:
    """
    Owns the layout table of one document: the ordered slots a view pages through.
    Spread mode opens with the cover alone and pairs the remaining pages two by two;
    navigation may append ad-hoc slots after the regular ones.
    """
    def __init__(self, total_pages: int = 0) -> None:
        self.total_pages = total_pages
        self._slots: List[Slot] = build_single_table(total_pages)
        self._regular_count = len(self._slots)
        self._use_spread = False
        self._decision: Optional[LayoutDecision] = None
        self.generation = 0

    # --- State ---
    @property
    def use_spread(self) -> bool:
        return self._use_spread

    @property
    def decision(self) -> Optional[LayoutDecision]:
        return self._decision

    @property
    def slots(self) -> Tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def slot_count(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def is_ad_hoc(self, slot_index: int) -> bool:
        return self._regular_count <= slot_index < len(self._slots)

    # --- Layout decision ---
    def determine_layout(
        self,
        viewport_width: float,
        viewport_height: float,
        total_pages: int,
        sampler: AspectRatioSampler,
    ) -> LayoutDecision:
        if viewport_width <= 0 or viewport_height <= 0:
            logger.warning(
                "Ignoring degenerate viewport %sx%s", viewport_width, viewport_height
            )
            if self._decision is None:
                decision = LayoutDecision(0.0, None, 0, False, total_pages)
            elif self._decision.total_pages != total_pages:
                # Keep the mode, but the table has to cover the new page count
                decision = replace(self._decision, total_pages=total_pages)
            else:
                return self._decision
            self._apply(decision)
            return decision

        viewport_aspect = viewport_width / viewport_height
        if viewport_aspect < SPREAD_MIN_VIEWPORT_ASPECT:
            logger.debug("Viewport aspect %.3f is not wide enough for spreads", viewport_aspect)
            decision = LayoutDecision(viewport_aspect, None, 0, False, total_pages)
        else:
            average, sampled = self._sample_average_aspect(total_pages, sampler)
            use_spread = average < PORTRAIT_PAGE_ASPECT
            logger.debug(
                "Viewport aspect %.3f, average page aspect %.3f over %d pages -> %s",
                viewport_aspect, average, sampled, "spread" if use_spread else "single",
            )
            decision = LayoutDecision(viewport_aspect, average, sampled, use_spread, total_pages)

        self._apply(decision)
        return decision

    def _apply(self, decision: LayoutDecision) -> None:
        needs_rebuild = (
            self._decision is None
            or decision.use_spread != self._use_spread
            or decision.total_pages != self.total_pages
        )
        self._decision = decision
        if not needs_rebuild:
            return

        self.total_pages = decision.total_pages
        self._use_spread = decision.use_spread
        if decision.use_spread:
            self._slots = build_spread_table(decision.total_pages)
        else:
            self._slots = build_single_table(decision.total_pages)
        self._regular_count = len(self._slots)
        self.generation += 1
        logger.info(
            "Layout rebuilt: %s mode, %d slots for %d pages",
            "spread" if self._use_spread else "single", len(self._slots), self.total_pages,
        )

    @staticmethod
    def _sample_average_aspect(
        total_pages: int, sampler: AspectRatioSampler
    ) -> Tuple[float, int]:
        ratios = []
        for page in range(min(total_pages, ASPECT_SAMPLE_PAGES)):
            try:
                ratio = sampler(page)
            except Exception:
                logger.exception("Aspect ratio lookup failed for page %d", page)
                continue
            if ratio is not None and ratio > 0:
                ratios.append(ratio)

        if not ratios:
            logger.warning(
                "No page aspect ratio available, assuming %.2f", DEFAULT_PAGE_ASPECT
            )
            return DEFAULT_PAGE_ASPECT, 0
        return sum(ratios) / len(ratios), len(ratios)

    # --- Slot lookup ---
    def slot_at(self, slot_index: int) -> Optional[Slot]:
        if 0 <= slot_index < len(self._slots):
            return self._slots[slot_index]
        return None

    def get_pages_for_slot(self, slot_index: int) -> List[int]:
        slot = self.slot_at(slot_index)
        if slot is None:
            logger.error("Slot %d is out of range (%d slots)", slot_index, len(self._slots))
            return []
        return list(slot.pages)

    def find_slot_for_pages(self, target_pages: Sequence[int]) -> Optional[int]:
        target = tuple(target_pages)
        if not target:
            logger.error("Cannot look up a slot for an empty page list")
            return None
        for index, slot in enumerate(self._slots):
            if slot.pages == target:
                return index
        logger.debug("No slot shows pages %s", list(target))
        return None

    def find_slot_containing_page(self, page: int) -> Optional[int]:
        # Regular slots come first in the table, so they win over ad-hoc ones
        for index, slot in enumerate(self._slots):
            if page in slot.pages:
                return index
        return None

    # --- Ad-hoc slots ---
    def add_slot(self, target_pages: Sequence[int]) -> int:
        slot = slot_from_pages(target_pages)
        for page in slot.pages:
            if not 0 <= page < self.total_pages:
                raise PageOutOfRangeError(
                    f"Page {page} is outside the document ({self.total_pages} pages)"
                )
        self._slots.append(slot)
        index = len(self._slots) - 1
        logger.debug("Added ad-hoc slot %d: %s", index, list(slot.pages))
        return index
