import pytest
from PyQt5.QtCore import Qt

from utils.keymap import NavigationAction, action_for_key


@pytest.mark.parametrize("key, action", [
    (Qt.Key_J, NavigationAction.NEXT_SLOT),
    (Qt.Key_Right, NavigationAction.NEXT_SLOT),
    (Qt.Key_PageDown, NavigationAction.NEXT_SLOT),
    (Qt.Key_K, NavigationAction.PREVIOUS_SLOT),
    (Qt.Key_Left, NavigationAction.PREVIOUS_SLOT),
    (Qt.Key_PageUp, NavigationAction.PREVIOUS_SLOT),
    (Qt.Key_H, NavigationAction.NEXT_PAGE),
    (Qt.Key_L, NavigationAction.PREVIOUS_PAGE),
    (Qt.Key_Q, NavigationAction.NONE),
])
def test_plain_keys(key, action):
    assert action_for_key(key) is action


def test_shift_turns_slot_keys_into_page_steps():
    assert action_for_key(Qt.Key_J, Qt.ShiftModifier) is NavigationAction.NEXT_PAGE
    assert action_for_key(Qt.Key_K, Qt.ShiftModifier) is NavigationAction.PREVIOUS_PAGE
    assert action_for_key(Qt.Key_Right, Qt.ShiftModifier) is NavigationAction.NEXT_SLOT
