from enum import Enum

from PyQt5.QtCore import Qt


class NavigationAction(Enum):
    NEXT_SLOT = "next_slot"
    PREVIOUS_SLOT = "previous_slot"
    # One underlying page, even while showing spreads
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"
    NONE = "none"


_KEY_MAP = {
    Qt.Key_J: NavigationAction.NEXT_SLOT,
    Qt.Key_Right: NavigationAction.NEXT_SLOT,
    Qt.Key_PageDown: NavigationAction.NEXT_SLOT,
    Qt.Key_K: NavigationAction.PREVIOUS_SLOT,
    Qt.Key_Left: NavigationAction.PREVIOUS_SLOT,
    Qt.Key_PageUp: NavigationAction.PREVIOUS_SLOT,
    Qt.Key_H: NavigationAction.NEXT_PAGE,
    Qt.Key_L: NavigationAction.PREVIOUS_PAGE,
}

_SHIFT_KEY_MAP = {
    Qt.Key_J: NavigationAction.NEXT_PAGE,
    Qt.Key_K: NavigationAction.PREVIOUS_PAGE,
}


def action_for_key(key: int, modifiers=Qt.NoModifier) -> NavigationAction:
    """Translates a Qt key code plus modifiers into a reader navigation action."""
    if int(modifiers) & int(Qt.ShiftModifier) and key in _SHIFT_KEY_MAP:
        return _SHIFT_KEY_MAP[key]
    return _KEY_MAP.get(key, NavigationAction.NONE)
