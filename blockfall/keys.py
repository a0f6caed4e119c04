"""Game actions, keyboard keys and the default key bindings."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Union


class Key(IntEnum):
    """Keyboard keys the game knows how to bind and display."""

    NULL = 0
    SPACE = 32
    APOSTROPHE = 39
    COMMA = 44
    MINUS = 45
    PERIOD = 46
    SLASH = 47
    ZERO = 48
    ONE = 49
    TWO = 50
    THREE = 51
    FOUR = 52
    FIVE = 53
    SIX = 54
    SEVEN = 55
    EIGHT = 56
    NINE = 57
    SEMICOLON = 59
    EQUAL = 61
    A = 65
    B = 66
    C = 67
    D = 68
    E = 69
    F = 70
    G = 71
    H = 72
    I = 73  # noqa: E741
    J = 74
    K = 75
    L = 76
    M = 77
    N = 78
    O = 79  # noqa: E741
    P = 80
    Q = 81
    R = 82
    S = 83
    T = 84
    U = 85
    V = 86
    W = 87
    X = 88
    Y = 89
    Z = 90
    LEFT_BRACKET = 91
    BACKSLASH = 92
    RIGHT_BRACKET = 93
    GRAVE = 96
    ESCAPE = 256
    ENTER = 257
    TAB = 258
    BACKSPACE = 259
    RIGHT = 262
    LEFT = 263
    DOWN = 264
    UP = 265


class Action(IntEnum):
    """Things a key can be bound to, in controls-menu order."""

    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    ROTATE_FORWARD = 2
    ROTATE_BACKWARD = 3
    SOFT_DROP = 4
    PAUSE = 5
    RESTART = 6
    QUIT = 7
    MENU_UP = 8
    MENU_DOWN = 9
    MENU_SELECT = 10
    MENU_BACK = 11
    TOGGLE_FPS = 12

    @property
    def label(self) -> str:
        """Name shown in the controls menu."""
        return self.name.replace("_", " ")


Keymap = Dict[Action, Key]

_DEFAULT_BINDINGS = {
    Action.MOVE_LEFT: Key.LEFT,
    Action.MOVE_RIGHT: Key.RIGHT,
    Action.ROTATE_FORWARD: Key.X,
    Action.ROTATE_BACKWARD: Key.Z,
    Action.SOFT_DROP: Key.DOWN,
    Action.PAUSE: Key.SPACE,
    Action.RESTART: Key.R,
    Action.QUIT: Key.Q,
    Action.MENU_UP: Key.UP,
    Action.MENU_DOWN: Key.DOWN,
    Action.MENU_SELECT: Key.X,
    Action.MENU_BACK: Key.Z,
    Action.TOGGLE_FPS: Key.F,
}

_KEY_LABELS = {
    Key.NULL: "?",
    Key.APOSTROPHE: "'",
    Key.COMMA: ",",
    Key.MINUS: "-",
    Key.PERIOD: ".",
    Key.SLASH: "/",
    Key.SEMICOLON: ";",
    Key.EQUAL: "=",
    Key.BACKSLASH: "\\",
    Key.GRAVE: "`",
    Key.SPACE: "SPC",
    Key.ESCAPE: "ESC",
    Key.ENTER: "RET",
    Key.TAB: "TAB",
    Key.BACKSPACE: "BACK",
    Key.RIGHT: "RIGHT",
    Key.LEFT: "LEFT",
    Key.DOWN: "DOWN",
    Key.UP: "UP",
}
_KEY_LABELS.update({key: chr(key) for key in Key if Key.ZERO <= key <= Key.NINE})
_KEY_LABELS.update({key: chr(key) for key in Key if Key.A <= key <= Key.Z})


def default_keymap() -> Keymap:
    """Return a fresh mapping of every action to its default key."""
    return dict(_DEFAULT_BINDINGS)


def key_to_str(key: Union[Key, int]) -> str:
    """Short display label for a key; empty for keys without one."""
    return _KEY_LABELS.get(key, "")