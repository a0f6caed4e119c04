import random

import pytest

from blockfall.game import (
    CLEAR_ANIMATION_INTERVAL,
    CLEAR_ANIMATION_STEPS,
    GRID_HEIGHT,
    GRID_WIDTH,
    LEVEL_GRAVITY,
    PIECE_STARTING_X,
    PIECE_STARTING_Y,
    SHIFT_DELAY,
    GameState,
    Grid,
    KeyInput,
    Scene,
    calculate_score,
    filled_row,
    level_line_req,
)
from blockfall.keys import Action, Key, default_keymap
from blockfall.pieces import BlockType, Piece


def make_state(seed=1):
    return GameState(random.Random(seed))


def press(*keys):
    return KeyInput(pressed=frozenset(keys))


def hold(*keys):
    return KeyInput(down=frozenset(keys))


# --- scoring and levels -------------------------------------------------------

def test_calculate_score_base_values():
    assert calculate_score(1, 0) == 40
    assert calculate_score(4, 0) == 1200


@pytest.mark.parametrize("lines", [1, 2, 3, 4])
@pytest.mark.parametrize("level", [0, 5, 19])
def test_calculate_score_scales_with_level(lines, level):
    assert calculate_score(lines, level) == calculate_score(lines, 0) * (level + 1)


@pytest.mark.parametrize("lines", [0, 5])
def test_calculate_score_other_counts_are_zero(lines):
    assert calculate_score(lines, 7) == 0


def test_level_line_req_at_start_level():
    assert level_line_req(8, 8) == 90


@pytest.mark.parametrize("level", [1, 9, 15])
def test_level_line_req_other_levels(level):
    assert level_line_req(level, 0) == level * 10


# --- grid ---------------------------------------------------------------------

def test_new_grid_is_empty():
    grid = Grid()
    assert all(grid.line_is_empty(y) for y in range(GRID_HEIGHT))
    assert not grid.can_clear_lines()


def test_full_line_detected():
    grid = Grid()
    for x in range(GRID_WIDTH):
        grid.place_block(BlockType.J, x, 3)
    assert grid.line_is_full(3)
    assert not grid.line_is_empty(3)
    assert grid.can_clear_lines()


def test_place_block_none_keeps_cell():
    grid = Grid()
    grid.place_block(BlockType.T, 2, 2)
    grid.place_block(BlockType.NONE, 2, 2)
    assert grid.blocks[2][2] is BlockType.T


def test_place_block_outside_raises():
    with pytest.raises(IndexError):
        Grid().place_block(BlockType.T, GRID_WIDTH, 0)


def test_place_piece_blocks_same_spot():
    grid = Grid()
    piece = Piece(BlockType.O)
    assert grid.can_place_piece(piece, 3, 5)
    grid.place_piece(piece, 3, 5)
    assert not grid.can_place_piece(piece, 3, 5)
    cells = [(x, y) for y, row in enumerate(grid.blocks) for x, b in enumerate(row) if b is BlockType.O]
    assert len(cells) == 4


@pytest.mark.parametrize(
    "x,y,expected",
    [
        (-1, 5, True),
        (-2, 5, False),
        (GRID_WIDTH - 3, 5, True),
        (GRID_WIDTH - 2, 5, False),
        (3, -1, True),
        (3, -2, False),
    ],
)
def test_can_place_piece_bounds(x, y, expected):
    assert Grid().can_place_piece(Piece(BlockType.O), x, y) is expected


def test_can_place_piece_without_shape_raises():
    with pytest.raises(ValueError):
        Grid().can_place_piece(Piece(BlockType.NONE), 0, 0)


def test_move_line_copies_row():
    grid = Grid()
    grid.blocks[4] = filled_row(BlockType.S, [0, 2])
    grid.move_line(4, 7)
    assert grid.blocks[7] == grid.blocks[4]
    grid.blocks[7][1] = BlockType.Z
    assert grid.blocks[4][1] is BlockType.NONE


def test_drop_lines_down_removes_full_rows():
    grid = Grid()
    grid.blocks[0] = filled_row(BlockType.J, range(GRID_WIDTH))
    grid.blocks[1] = filled_row(BlockType.L, [0])
    grid.drop_lines_down()
    assert grid.blocks[0] == filled_row(BlockType.L, [0])
    assert grid.line_is_empty(1)
    assert not grid.can_clear_lines()


# --- key input ----------------------------------------------------------------

def test_key_input_queries():
    keyboard = KeyInput(pressed={Key.X}, down={Key.LEFT}, queue=[Key.A, Key.B])
    assert keyboard.is_pressed(Key.X)
    assert not keyboard.is_pressed(Key.LEFT)
    assert keyboard.is_down(Key.LEFT)
    assert keyboard.pop_pressed() == Key.A
    assert keyboard.pop_pressed() == Key.B
    assert keyboard.pop_pressed() == Key.NULL


def test_null_key_never_pressed():
    keyboard = KeyInput(pressed={Key.NULL}, down={Key.NULL})
    assert not keyboard.is_pressed(Key.NULL)
    assert not keyboard.is_down(Key.NULL)


# --- game state ---------------------------------------------------------------

def test_new_state_defaults():
    state = make_state()
    assert state.scene is Scene.GAME
    assert (state.piece_x, state.piece_y) == (PIECE_STARTING_X, PIECE_STARTING_Y)
    assert state.score == 0 and state.lines == 0
    assert state.level == state.start_level
    assert state.piece.piece_type != state.next.piece_type
    assert state.keys == default_keymap()


def test_same_seed_same_pieces():
    a, b = make_state(7), make_state(7)
    assert (a.piece, a.next) == (b.piece, b.next)


def test_next_piece_takes_queued_piece():
    state = make_state()
    queued = state.next
    state.piece_x, state.piece_y = 0, 2
    state.next_piece()
    assert state.piece == queued
    assert state.next.piece_type != state.piece.piece_type
    assert (state.piece_x, state.piece_y) == (PIECE_STARTING_X, PIECE_STARTING_Y)


@pytest.mark.parametrize(
    "level,index", [(0, 0), (8, 8), (9, 9), (12, 10), (13, 11), (18, 12), (28, 13), (40, 14)]
)
def test_gravity_per_level(level, index):
    state = make_state()
    state.level = level
    assert state.get_gravity() == LEVEL_GRAVITY[index]


def test_soft_drop_halves_gravity():
    state = make_state()
    normal = state.get_gravity()
    state.soft_drop = True
    assert state.get_gravity() == normal / 2.0


def test_update_game_drops_after_gravity():
    state = make_state()
    state.update_game(0.0)
    assert state.piece_y == PIECE_STARTING_Y
    state.update_game(state.get_gravity())
    assert state.piece_y == PIECE_STARTING_Y - 1
    assert state.time_since_drop == 0.0


def test_blocked_at_start_is_game_over():
    state = make_state()
    state.piece = Piece(BlockType.O)
    state.grid.blocks[PIECE_STARTING_Y] = filled_row(BlockType.J, range(GRID_WIDTH))
    state.update_game(10.0)
    assert state.scene is Scene.GAME_OVER
    assert not state.can_update_game()


def _state_about_to_clear():
    state = make_state()
    state.grid.blocks[0] = filled_row(BlockType.J, range(4, GRID_WIDTH))
    state.piece = Piece(BlockType.I)
    state.piece_x, state.piece_y = 0, -2
    return state


def test_landing_clears_line_and_scores():
    state = _state_about_to_clear()
    level = state.level
    state.update_game(10.0)
    assert state.full_lines == [0]
    assert state.lines == 1
    assert state.score == calculate_score(1, level)
    assert state.clear_anim.active
    assert not state.can_update_game()
    assert state.piece_y == PIECE_STARTING_Y


def test_clear_animation_hides_then_drops():
    state = _state_about_to_clear()
    state.update_game(10.0)
    for _ in range(CLEAR_ANIMATION_STEPS):
        state.update_clear_anim(CLEAR_ANIMATION_INTERVAL)
    assert all(b is BlockType.HIDDEN for b in state.grid.blocks[0])
    state.update_clear_anim(CLEAR_ANIMATION_INTERVAL)
    assert state.grid.line_is_empty(0)
    assert not state.clear_anim.active
    assert state.full_lines == []
    assert state.can_update_game()


def test_level_increase_threshold():
    state = make_state()
    state.lines = level_line_req(state.level + 1, state.start_level)
    assert state.can_increase_level()
    state.lines -= 1
    assert not state.can_increase_level()


def test_move_left_then_auto_shift():
    state = make_state()
    state.piece = Piece(BlockType.O)
    start = state.piece_x
    state.move_left(0.01)
    assert state.piece_x == start - 1
    state.move_left(0.01)
    assert state.piece_x == start - 1
    state.move_left(SHIFT_DELAY)
    assert state.piece_x == start - 2


def test_move_right_stops_at_wall():
    state = make_state()
    state.piece = Piece(BlockType.O)
    state.piece_x = GRID_WIDTH - 3
    state.move_right(0.01)
    assert state.piece_x == GRID_WIDTH - 3
    assert not state.can_place(1, 0)


# --- key handling -------------------------------------------------------------

def test_rotate_keys():
    state = make_state()
    state.piece = Piece(BlockType.T)
    state.handle_keys(press(Key.X), 0.0)
    assert state.piece.rotation == 1
    state.handle_keys(press(Key.Z), 0.0)
    state.handle_keys(press(Key.Z), 0.0)
    assert state.piece.rotation == 3


def test_holding_left_moves_piece_and_soft_drop():
    state = make_state()
    start = state.piece_x
    state.handle_keys(hold(Key.LEFT, Key.DOWN), 0.01)
    assert state.piece_x == start - 1
    assert state.soft_drop


def test_movement_ignored_during_clear_animation():
    state = make_state()
    state.clear_anim.active = True
    start = state.piece_x
    state.handle_keys(hold(Key.LEFT), 0.01)
    assert state.piece_x == start


def test_pause_and_resume():
    state = make_state()
    state.handle_keys(press(Key.SPACE), 0.0)
    assert state.scene is Scene.PAUSED
    state.handle_keys(press(Key.SPACE), 0.0)
    assert state.scene is Scene.GAME


def test_pause_menu_to_controls():
    state = make_state()
    state.scene = Scene.PAUSED
    state.handle_keys(press(Key.DOWN), 0.0)
    assert state.pause_menu_line == 1
    state.handle_keys(press(Key.X), 0.0)
    assert state.scene is Scene.CONTROLS_MENU
    assert state.controls_menu_line == 0


def test_pause_menu_wraps_up():
    state = make_state()
    state.scene = Scene.PAUSED
    state.handle_keys(press(Key.UP), 0.0)
    assert state.pause_menu_line == 3
    state.handle_keys(press(Key.X), 0.0)
    assert state.close_game


def test_restart_in_game_resets():
    state = make_state()
    state.score = 500
    state.piece_y = 3
    state.handle_keys(press(Key.R), 0.0)
    assert state.score == 0
    assert state.piece_y == PIECE_STARTING_Y


def test_quit_in_game():
    state = make_state()
    state.handle_keys(press(Key.Q), 0.0)
    assert state.close_game


def test_controls_menu_rebind():
    state = make_state()
    state.scene = Scene.CONTROLS_MENU
    state.handle_keys(press(Key.X), 0.0)
    assert state.select_new_key
    assert state.keys[Action.MOVE_LEFT] == Key.NULL
    state.handle_keys(KeyInput(queue=[Key.A]), 0.0)
    assert state.keys[Action.MOVE_LEFT] == Key.A
    assert not state.select_new_key


def test_controls_menu_reset_option():
    state = make_state()
    state.scene = Scene.CONTROLS_MENU
    state.keys[Action.PAUSE] = Key.P
    state.handle_keys(press(Key.UP), 0.0)
    assert state.controls_menu_line == len(Action)
    state.handle_keys(press(Key.X), 0.0)
    assert state.keys == default_keymap()
    state.handle_keys(press(Key.DOWN), 0.0)
    assert state.controls_menu_line == 0


def test_controls_menu_back_to_pause():
    state = make_state()
    state.scene = Scene.CONTROLS_MENU
    state.handle_keys(press(Key.Z), 0.0)
    assert state.scene is Scene.PAUSED


def test_game_over_menu():
    state = make_state()
    state.scene = Scene.GAME_OVER
    state.handle_keys(press(Key.UP), 0.0)
    assert state.game_over_menu_line == 1
    state.handle_keys(press(Key.X), 0.0)
    assert state.close_game


def test_game_over_restart():
    state = make_state()
    state.scene = Scene.GAME_OVER
    state.score = 100
    state.handle_keys(press(Key.R), 0.0)
    assert state.scene is Scene.GAME
    assert state.score == 0