"""Game rules: the playing field, falling pieces, scoring and menu handling."""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, FrozenSet, Iterable, List, Optional, Union

from .keys import Action, Key, Keymap, default_keymap
from .pieces import (
    PIECE_HEIGHT,
    BlockType,
    Piece,
    get_shape,
    next_rotation,
    previous_rotation,
    random_piece,
)

GRID_HEIGHT = 20
GRID_WIDTH = 10

PIECE_STARTING_X = GRID_WIDTH // 2 - 2
# Aligned at the very top with rotation 0.
PIECE_STARTING_Y = GRID_HEIGHT - 3

SHIFT_INTERVAL = 6.0 / 60.0
SHIFT_DELAY = 16.0 / 60.0

CLEAR_ANIMATION_STEPS = 5
CLEAR_ANIMATION_INTERVAL = 4.0 / 60.0

DEFAULT_START_LEVEL = 8

# Seconds between drops, after NES speeds; see GameState.get_gravity for
# how levels map onto entries.
LEVEL_GRAVITY = (
    48.0 / 60.0,
    43.0 / 60.0,
    38.0 / 60.0,
    33.0 / 60.0,
    28.0 / 60.0,
    23.0 / 60.0,
    18.0 / 60.0,
    13.0 / 60.0,
    8.0 / 60.0,
    6.0 / 60.0,
    5.0 / 60.0,
    4.0 / 60.0,
    3.0 / 60.0,
    2.0 / 60.0,
    1.0 / 60.0,
)

PAUSE_MENU_OPTIONS = ("RESUME", "CONTROLS", "RESTART", "QUIT")
GAME_OVER_MENU_OPTIONS = ("RESTART", "QUIT")

KeyCode = Union[Key, int]


class Scene(Enum):
    """Which screen the game is showing."""

    START_SCREEN = 0
    GAME = 1
    CONTROLS_MENU = 2
    PAUSED = 3
    GAME_OVER = 4


def level_line_req(level: int, start_level: int) -> int:
    """Total cleared lines needed to reach ``level`` from ``start_level``."""
    if level == start_level:
        return min(start_level * 10 + 10, max(100, start_level * 10 - 50))
    return level * 10


def calculate_score(lines: int, level: int) -> int:
    """Points for clearing ``lines`` lines at once on ``level``."""
    base = {1: 40, 2: 100, 3: 300, 4: 1200}.get(lines, 0)
    return base * (level + 1)


def _empty_rows() -> List[List[BlockType]]:
    return [[BlockType.NONE] * GRID_WIDTH for _ in range(GRID_HEIGHT)]


@dataclass
class Grid:
    """The playing field; row 0 is the bottom row."""

    blocks: List[List[BlockType]] = field(default_factory=_empty_rows)

    @staticmethod
    def _cells(piece: Piece, x: int, y: int):
        shape = get_shape(piece)
        if shape is None:
            raise ValueError(f"{piece.piece_type!r} has no shape")
        for y_i, row in enumerate(shape):
            for x_i, block in enumerate(row):
                if block is not BlockType.NONE:
                    yield x + x_i, y + PIECE_HEIGHT - y_i - 1, block

    def can_place_piece(self, piece: Piece, x: int, y: int) -> bool:
        """True if the piece fits at (x, y) without leaving the field or overlapping.

        Cells above the top of the field count as free.
        """
        for grid_x, grid_y, _ in self._cells(piece, x, y):
            if not 0 <= grid_x < GRID_WIDTH or grid_y < 0:
                return False
            if grid_y < GRID_HEIGHT and self.blocks[grid_y][grid_x] is not BlockType.NONE:
                return False
        return True

    def place_piece(self, piece: Piece, x: int, y: int) -> None:
        """Write the piece's blocks into the field; cells above the top are lost."""
        for grid_x, grid_y, block in self._cells(piece, x, y):
            if grid_y < GRID_HEIGHT:
                self.place_block(block, grid_x, grid_y)

    def place_block(self, block: BlockType, x: int, y: int) -> None:
        """Set one cell; placing NONE leaves the cell as it is."""
        if block is BlockType.NONE:
            return
        if not (0 <= x < GRID_WIDTH and 0 <= y < GRID_HEIGHT):
            raise IndexError(f"cell ({x}, {y}) is outside the grid")
        self.blocks[y][x] = block

    def line_is_empty(self, y: int) -> bool:
        return all(block is BlockType.NONE for block in self.blocks[y])

    def line_is_full(self, y: int) -> bool:
        return all(block is not BlockType.NONE for block in self.blocks[y])

    def move_line(self, src: int, dest: int) -> None:
        """Copy row ``src`` over row ``dest``."""
        self.blocks[dest] = list(self.blocks[src])

    def drop_lines_down(self) -> None:
        """Remove every full row, letting the rows above fall into place."""
        y = 0
        while y < GRID_HEIGHT:
            if not self.line_is_full(y):
                y += 1
                continue
            for above in range(y + 1, GRID_HEIGHT):
                self.move_line(above, above - 1)
            self.blocks[GRID_HEIGHT - 1] = [BlockType.NONE] * GRID_WIDTH

    def can_clear_lines(self) -> bool:
        return any(self.line_is_full(y) for y in range(GRID_HEIGHT))


@dataclass
class ClearAnimation:
    """Progress of the line-clear animation."""

    active: bool = False
    step: int = 0
    # Starting at a full interval runs the first step immediately.
    step_time: float = CLEAR_ANIMATION_INTERVAL


@dataclass
class KeyInput:
    """Keyboard state for one frame.

    ``pressed`` holds keys that went down this frame, ``down`` keys being
    held, and ``queue`` the keys pressed this frame in order.
    """

    pressed: FrozenSet[KeyCode] = frozenset()
    down: FrozenSet[KeyCode] = frozenset()
    queue: Deque[KeyCode] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self.pressed = frozenset(self.pressed)
        self.down = frozenset(self.down)
        self.queue = deque(self.queue)

    def is_pressed(self, key: KeyCode) -> bool:
        return key != Key.NULL and key in self.pressed

    def is_down(self, key: KeyCode) -> bool:
        return key != Key.NULL and key in self.down

    def pop_pressed(self) -> KeyCode:
        """Next key from the press queue, or Key.NULL when it is empty."""
        return self.queue.popleft() if self.queue else Key.NULL


class GameState:
    """Everything that changes while the game runs."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        """Start a fresh game, restoring default key bindings."""
        self.scene = Scene.GAME
        self.close_game = False
        self.show_fps = False

        self.pause_menu_line = 0
        self.controls_menu_line = 0
        self.game_over_menu_line = 0
        self.select_new_key = False

        self.start_level = DEFAULT_START_LEVEL
        self.level = self.start_level
        self.lines_level = 0
        self.lines = 0
        self.score = 0

        self.piece_x = PIECE_STARTING_X
        self.piece_y = PIECE_STARTING_Y

        self.soft_drop = False
        self.time_since_drop = 0.0

        self.shift_active = False
        self.dir_last_update = 0
        self.dir_time_held = 0.0

        self.grid = Grid()
        self.full_lines: List[int] = []
        self.clear_anim = ClearAnimation()

        self.piece = random_piece(self.rng)
        self.next = self._different_piece(self.piece)
        self.keys: Keymap = default_keymap()

    def _different_piece(self, current: Piece) -> Piece:
        candidate = random_piece(self.rng)
        while candidate.piece_type == current.piece_type:
            candidate = random_piece(self.rng)
        return candidate

    def next_piece(self) -> None:
        """Bring in the queued piece at the start position and queue a new one."""
        self.piece_x = PIECE_STARTING_X
        self.piece_y = PIECE_STARTING_Y
        self.piece = self.next
        self.next = self._different_piece(self.piece)

    def get_gravity(self) -> float:
        """Seconds between drops at the current level, halved while soft dropping."""
        level = self.level
        if level <= 9:
            gravity = LEVEL_GRAVITY[level]
        elif level <= 12:
            gravity = LEVEL_GRAVITY[10]
        elif level <= 15:
            gravity = LEVEL_GRAVITY[11]
        elif level <= 18:
            gravity = LEVEL_GRAVITY[12]
        elif level <= 28:
            gravity = LEVEL_GRAVITY[13]
        else:
            gravity = LEVEL_GRAVITY[14]
        return gravity / 2.0 if self.soft_drop else gravity

    def time_to_drop(self) -> bool:
        return self.time_since_drop >= self.get_gravity()

    def _shift(self, direction: int, frame_time: float) -> None:
        if self.dir_last_update == direction:
            self.dir_time_held += frame_time
        else:
            self.dir_time_held = frame_time

        if not self.shift_active:
            if self.dir_last_update != direction and self.can_place(direction, 0):
                self.piece_x += direction
            if not self.can_place(direction, 0):
                self.shift_active = True
            if self.dir_time_held >= SHIFT_DELAY:
                self.shift_active = True

        if self.shift_active:
            if self.dir_last_update == direction:
                if self.dir_time_held >= SHIFT_INTERVAL and self.can_place(direction, 0):
                    self.piece_x += direction
                    self.dir_time_held = 0.0
            else:
                self.shift_active = False

        self.dir_last_update = direction

    def move_left(self, frame_time: float) -> None:
        """Shift left: once on press, then repeatedly after the auto-shift delay."""
        self._shift(-1, frame_time)

    def move_right(self, frame_time: float) -> None:
        """Shift right: once on press, then repeatedly after the auto-shift delay."""
        self._shift(1, frame_time)

    def can_place(self, x_offset: int, y_offset: int) -> bool:
        return self.grid.can_place_piece(
            self.piece, self.piece_x + x_offset, self.piece_y + y_offset
        )

    def can_increase_level(self) -> bool:
        return level_line_req(self.level + 1, self.start_level) <= self.lines

    def clear_lines(self) -> None:
        """Record full rows and award lines, score and level for them."""
        self.full_lines = [y for y in range(GRID_HEIGHT) if self.grid.line_is_full(y)]
        self.lines += len(self.full_lines)
        self.score += calculate_score(len(self.full_lines), self.level)
        if self.can_increase_level():
            self.level += 1

    def update_clear_anim(self, frame_time: float) -> None:
        """Advance the clear animation; drop the rows once it has finished."""
        anim = self.clear_anim
        if not (self.full_lines and anim.active):
            return
        if anim.step < CLEAR_ANIMATION_STEPS:
            anim.step_time += frame_time
            if anim.step_time >= CLEAR_ANIMATION_INTERVAL:
                left_x = 4 - anim.step
                right_x = 5 + anim.step
                for y in self.full_lines:
                    self.grid.place_block(BlockType.HIDDEN, left_x, y)
                    self.grid.place_block(BlockType.HIDDEN, right_x, y)
                anim.step += 1
                anim.step_time = 0.0
        else:
            self.grid.drop_lines_down()
            anim.active = False
            anim.step = 0
            anim.step_time = CLEAR_ANIMATION_INTERVAL
            self.full_lines = []

    def can_update_game(self) -> bool:
        return self.scene is Scene.GAME and not self.clear_anim.active

    def update_game(self, frame_time: float) -> None:
        """Apply gravity; lock the piece when it lands, or end the game."""
        self.time_since_drop += frame_time
        if not self.time_to_drop():
            return
        self.time_since_drop = 0.0

        if self.grid.can_place_piece(self.piece, self.piece_x, self.piece_y - 1):
            self.piece_y -= 1
            return

        if self.piece_y == PIECE_STARTING_Y:
            self.scene = Scene.GAME_OVER
            return

        self.grid.place_piece(self.piece, self.piece_x, self.piece_y)
        self.clear_lines()
        if self.full_lines:
            self.clear_anim.active = True
        self.next_piece()

    def _pressed(self, keyboard: KeyInput, action: Action) -> bool:
        return keyboard.is_pressed(self.keys[action])

    def _held(self, keyboard: KeyInput, action: Action) -> bool:
        return keyboard.is_down(self.keys[action])

    def handle_keys(self, keyboard: KeyInput, frame_time: float) -> None:
        """React to one frame of keyboard input in the current scene."""
        handler = {
            Scene.START_SCREEN: None,
            Scene.CONTROLS_MENU: self._handle_controls_menu,
            Scene.PAUSED: self._handle_paused,
            Scene.GAME: self._handle_game,
            Scene.GAME_OVER: self._handle_game_over,
        }[self.scene]
        if handler is not None:
            handler(keyboard, frame_time)

    def _handle_controls_menu(self, keyboard: KeyInput, frame_time: float) -> None:
        reset_line = len(Action)

        if self.select_new_key:
            new_key = keyboard.pop_pressed()
            if new_key != Key.NULL:
                self.keys[Action(self.controls_menu_line)] = new_key
                self.select_new_key = False

        if self._pressed(keyboard, Action.MENU_SELECT):
            if self.controls_menu_line == reset_line:
                self.keys = default_keymap()
            else:
                self.keys[Action(self.controls_menu_line)] = Key.NULL
                self.select_new_key = True

        if self._pressed(keyboard, Action.MENU_BACK):
            self.scene = Scene.PAUSED

        # The menu has one line per action plus the reset option.
        if self._pressed(keyboard, Action.MENU_UP):
            self.controls_menu_line = (self.controls_menu_line - 1) % (reset_line + 1)
        if self._pressed(keyboard, Action.MENU_DOWN):
            self.controls_menu_line = (self.controls_menu_line + 1) % (reset_line + 1)

        if self._pressed(keyboard, Action.QUIT):
            self.close_game = True

    def _handle_paused(self, keyboard: KeyInput, frame_time: float) -> None:
        if self._pressed(keyboard, Action.MENU_BACK):
            self.scene = Scene.GAME
        if self._pressed(keyboard, Action.PAUSE):
            self.scene = Scene.GAME

        count = len(PAUSE_MENU_OPTIONS)
        if self._pressed(keyboard, Action.MENU_DOWN):
            self.pause_menu_line = (self.pause_menu_line + 1) % count
        if self._pressed(keyboard, Action.MENU_UP):
            self.pause_menu_line = (self.pause_menu_line - 1) % count

        if self._pressed(keyboard, Action.MENU_SELECT):
            option = PAUSE_MENU_OPTIONS[self.pause_menu_line]
            if option == "RESUME":
                self.scene = Scene.GAME
            elif option == "QUIT":
                self.close_game = True
            elif option == "RESTART":
                self.reset()
                self.scene = Scene.GAME
            elif option == "CONTROLS":
                self.scene = Scene.CONTROLS_MENU
                self.controls_menu_line = 0

        if self._pressed(keyboard, Action.QUIT):
            self.close_game = True

    def _handle_game(self, keyboard: KeyInput, frame_time: float) -> None:
        if not self.clear_anim.active:
            if self._held(keyboard, Action.MOVE_LEFT):
                self.move_left(frame_time)
            elif self._held(keyboard, Action.MOVE_RIGHT):
                self.move_right(frame_time)
            else:
                self.dir_last_update = 0
                self.dir_time_held = 0.0
                self.shift_active = False

            if self._pressed(keyboard, Action.ROTATE_FORWARD):
                self._try_rotate(next_rotation(self.piece.rotation))
            if self._pressed(keyboard, Action.ROTATE_BACKWARD):
                self._try_rotate(previous_rotation(self.piece.rotation))

            self.soft_drop = self._held(keyboard, Action.SOFT_DROP)

        if self._pressed(keyboard, Action.PAUSE):
            self.scene = Scene.PAUSED
        if self._pressed(keyboard, Action.RESTART):
            self.reset()
        if self._pressed(keyboard, Action.QUIT):
            self.close_game = True

    def _try_rotate(self, rotation: int) -> None:
        rotated = Piece(self.piece.piece_type, rotation)
        if self.grid.can_place_piece(rotated, self.piece_x, self.piece_y):
            self.piece = rotated

    def _handle_game_over(self, keyboard: KeyInput, frame_time: float) -> None:
        if self._pressed(keyboard, Action.RESTART):
            self.reset()
            self.scene = Scene.GAME

        if self._pressed(keyboard, Action.QUIT):
            self.close_game = True

        count = len(GAME_OVER_MENU_OPTIONS)
        if self._pressed(keyboard, Action.MENU_DOWN):
            self.game_over_menu_line = (self.game_over_menu_line + 1) % count
        if self._pressed(keyboard, Action.MENU_UP):
            self.game_over_menu_line = (self.game_over_menu_line - 1) % count

        if self._pressed(keyboard, Action.MENU_SELECT):
            option = GAME_OVER_MENU_OPTIONS[self.game_over_menu_line]
            if option == "QUIT":
                self.close_game = True
            elif option == "RESTART":
                self.reset()
                self.scene = Scene.GAME


def filled_row(block: BlockType, columns: Iterable[int]) -> List[BlockType]:
    """A grid row with ``block`` in the given columns and empty elsewhere."""
    wanted = set(columns)
    return [block if x in wanted else BlockType.NONE for x in range(GRID_WIDTH)]