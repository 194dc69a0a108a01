from __future__ import annotations
import logging
from typing import List, Optional

from models.slot import InvalidSlotShapeError, NavigationTarget
from utils.config import PRELOAD_SINGLE_RADIUS
from .layout_engine import LayoutEngine, PageOutOfRangeError

logger = logging.getLogger(__name__)


def compute_target_pages(current_pages: List[int], direction: int, total_pages: int) -> List[int]:
    """
    Pages to show after moving a single page from *current_pages*.
    From a spread the window slides by one page instead of jumping a whole spread.
    """
    if direction > 0:
        if len(current_pages) == 1:
            nxt = current_pages[0] + 1
            if nxt + 1 < total_pages:
                return [nxt, nxt + 1]
            if nxt < total_pages:
                return [nxt]
            return []
        right = current_pages[1]
        if right + 1 < total_pages:
            return [right, right + 1]
        if right < total_pages:
            return [right]
        return []

    if len(current_pages) == 1:
        prev = current_pages[0] - 1
        if prev - 1 >= 0:
            return [prev - 1, prev]
        if prev >= 0:
            return [prev]
        return []
    left = current_pages[0]
    if left - 1 >= 0:
        return [left - 1, left]
    if left >= 0:
        return [left]
    return []


class NavigationEngine:
    """Turns relative moves into navigation targets over a LayoutEngine's table."""

    def __init__(self, layout: LayoutEngine):
        self.layout = layout

    def go_to_adjacent_slot(self, direction: int, current_slot: int) -> Optional[NavigationTarget]:
        target = current_slot + direction
        if not 0 <= target < self.layout.slot_count:
            logger.debug("No slot %d to move to (%d slots)", target, self.layout.slot_count)
            return None
        return NavigationTarget.for_slot(target)

    def step_one_page(self, direction: int, current_slot: int, total_pages: int) -> Optional[NavigationTarget]:
        """Move by one underlying page, even while spreads are shown."""
        if direction == 0:
            return None
        if not self.layout.use_spread:
            return self.go_to_adjacent_slot(1 if direction > 0 else -1, current_slot)

        current_pages = self.layout.get_pages_for_slot(current_slot)
        if not current_pages:
            logger.error("Cannot step from slot %d: it shows no pages", current_slot)
            return None
        if len(current_pages) > 2:
            logger.error("Slot %d has an invalid shape: %s", current_slot, current_pages)
            return None

        target_pages = compute_target_pages(current_pages, direction, total_pages)
        if not target_pages:
            logger.debug("No page beyond %s in direction %d", current_pages, direction)
            return None
        logger.debug("Stepping from %s to %s", current_pages, target_pages)

        index = self.layout.find_slot_for_pages(target_pages)
        if index is not None:
            return NavigationTarget.for_slot(index)

        if len(target_pages) == 1:
            return NavigationTarget.for_raw_page(target_pages[0])

        if len(target_pages) == 2:
            try:
                index = self.layout.add_slot(target_pages)
            except (InvalidSlotShapeError, PageOutOfRangeError) as e:
                logger.error("Could not add a slot for %s: %s", target_pages, e)
                return None
            return NavigationTarget.for_slot(index)

        logger.error("Unexpected target pages %s", target_pages)
        return None

    def jump_to_page(self, page: int, total_pages: int) -> Optional[NavigationTarget]:
        if not 0 <= page < total_pages:
            logger.debug("Page %d is outside the document", page)
            return None
        if not self.layout.use_spread:
            return NavigationTarget.for_slot(page)
        index = self.layout.find_slot_containing_page(page)
        if index is None:
            return NavigationTarget.for_raw_page(page)
        return NavigationTarget.for_slot(index)

    def neighbour_pages(self, current_slot: int, total_pages: int) -> List[int]:
        """Pages worth having in the cache around *current_slot*, current ones first."""
        if self.layout.use_spread:
            candidates = []
            for slot_index in (current_slot, current_slot + 1, current_slot - 1):
                slot = self.layout.slot_at(slot_index)
                if slot is not None:
                    candidates.extend(slot.pages)
        else:
            candidates = [current_slot]
            for offset in range(1, PRELOAD_SINGLE_RADIUS + 1):
                candidates.extend([current_slot + offset, current_slot - offset])

        pages: List[int] = []
        for page in candidates:
            if 0 <= page < total_pages and page not in pages:
                pages.append(page)
        return pages
