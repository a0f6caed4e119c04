"""Rendering of the playing field, side panel and menus onto a pygame surface."""

from __future__ import annotations

from typing import Dict, Iterator, Tuple

import pygame

from .game import (
    GAME_OVER_MENU_OPTIONS,
    GRID_HEIGHT,
    GRID_WIDTH,
    PAUSE_MENU_OPTIONS,
    GameState,
    Grid,
    Scene,
)
from .keys import Action, key_to_str
from .pieces import PIECE_HEIGHT, BlockType, Piece, get_shape

Color = Tuple[int, int, int]

GRID_PIXELS = 25
GRID_BORDER_PIXELS = 3
BLOCK_SIZE = GRID_PIXELS - GRID_BORDER_PIXELS

GRID_WIDTH_PX = GRID_WIDTH * GRID_PIXELS
GRID_HEIGHT_PX = GRID_HEIGHT * GRID_PIXELS

INFO_DISPLAY_WIDTH = 6 * GRID_PIXELS
SECTION_BORDER_PX = 3

SCREEN_WIDTH = GRID_WIDTH_PX + SECTION_BORDER_PX + INFO_DISPLAY_WIDTH
SCREEN_HEIGHT = GRID_HEIGHT_PX + SECTION_BORDER_PX

BACKGROUND_COLOR: Color = (0x16, 0x16, 0x16)
SKYBLUE: Color = (102, 191, 255)
YELLOW: Color = (253, 249, 0)
PURPLE: Color = (200, 122, 255)
GREEN: Color = (0, 228, 48)
RED: Color = (230, 41, 55)
DARKBLUE: Color = (0, 82, 172)
ORANGE: Color = (255, 161, 0)
RAYWHITE: Color = (245, 245, 245)
LIME: Color = (0, 158, 47)

TEXT_SIZE = 20
STATS_X = GRID_WIDTH_PX + 15

NEXT_PIECE_X = GRID_WIDTH + 1
NEXT_PIECE_Y = GRID_HEIGHT - 15

_BLOCK_COLORS: Dict[BlockType, Color] = {
    BlockType.NONE: BACKGROUND_COLOR,
    BlockType.HIDDEN: BACKGROUND_COLOR,
    BlockType.I: SKYBLUE,
    BlockType.O: YELLOW,
    BlockType.T: PURPLE,
    BlockType.S: GREEN,
    BlockType.Z: RED,
    BlockType.J: DARKBLUE,
    BlockType.L: ORANGE,
}


def block_color(block: BlockType) -> Color:
    """Colour a cell of the given type is drawn in."""
    return _BLOCK_COLORS[BlockType(block)]


def block_rect(x: int, y: int) -> pygame.Rect:
    """Screen rectangle of grid cell (x, y); y counts up from the bottom row."""
    left = x * GRID_PIXELS + GRID_BORDER_PIXELS
    top = (GRID_HEIGHT - y - 1) * GRID_PIXELS + GRID_BORDER_PIXELS
    return pygame.Rect(left, top, BLOCK_SIZE, BLOCK_SIZE)


def _piece_cells(piece: Piece) -> Iterator[Tuple[int, int, BlockType]]:
    """Occupied cells of a piece as (dx, dy, block), dy counted from its bottom row."""
    shape = get_shape(piece)
    if shape is None:
        raise ValueError(f"{piece.piece_type!r} has no shape")
    for row_index, row in enumerate(shape):
        for dx, block in enumerate(row):
            if block is not BlockType.NONE:
                yield dx, PIECE_HEIGHT - row_index - 1, block


class Renderer:
    """Draws a game state onto a surface."""

    def __init__(self, surface: pygame.Surface) -> None:
        if not pygame.font.get_init():
            pygame.font.init()
        self.surface = surface
        self._fonts: Dict[int, pygame.font.Font] = {}

    def _font(self, size: int) -> pygame.font.Font:
        font = self._fonts.get(size)
        if font is None:
            font = self._fonts[size] = pygame.font.Font(None, size)
        return font

    def _text(self, text: str, x: float, y: float, size: int, color: Color) -> pygame.Rect:
        rendered = self._font(size).render(text, False, color)
        return self.surface.blit(rendered, (int(x), int(y)))

    def draw_block(self, x: int, y: int, color: Color) -> None:
        """Fill grid cell (x, y) with a colour."""
        self.surface.fill(color, block_rect(x, y))

    def draw_grid(self, grid: Grid) -> None:
        """Draw every cell of the playing field."""
        for y, row in enumerate(grid.blocks):
            for x, block in enumerate(row):
                self.draw_block(x, y, block_color(block))

    def draw_grid_outline(self) -> None:
        """Frame the playing field."""
        left_x = 1
        right_x = GRID_WIDTH_PX + GRID_BORDER_PIXELS
        top_y = 1
        bottom_y = SCREEN_HEIGHT - 1
        corners = [
            (left_x, top_y),
            (left_x, bottom_y),
            (right_x, bottom_y),
            (right_x, top_y),
        ]
        pygame.draw.lines(self.surface, RAYWHITE, True, corners)

    def draw_piece(self, piece: Piece, x: int, y: int) -> None:
        """Draw a piece with its bottom-left shape corner at grid cell (x, y)."""
        for dx, dy, block in _piece_cells(piece):
            self.draw_block(x + dx, y + dy, block_color(block))

    def draw_next_piece(self, piece: Piece) -> None:
        """Show the queued piece in the side panel."""
        self._text("NEXT", STATS_X, (NEXT_PIECE_Y + 6) * GRID_PIXELS, TEXT_SIZE, RAYWHITE)
        self.draw_piece(piece, NEXT_PIECE_X, NEXT_PIECE_Y)

    def draw_stats(self, score: int, level: int, lines: int) -> None:
        """Show level, cleared lines and score in the side panel."""
        for (label, value), top in zip(
            (("LEVEL", level), ("LINES", lines), ("SCORE", score)), (20, 80, 140)
        ):
            self._text(label, STATS_X, top, TEXT_SIZE, RAYWHITE)
            self._text(str(value), STATS_X, top + 20, TEXT_SIZE, RAYWHITE)

    def _draw_menu(self, options, selected: int) -> None:
        start_x = 2.5 * GRID_PIXELS
        spacing = 2 * GRID_PIXELS
        start_y = GRID_HEIGHT // 4 * GRID_PIXELS + 2 * spacing
        for i, option in enumerate(options):
            color = RED if i == selected else RAYWHITE
            self._text(option, start_x, start_y + i * spacing, TEXT_SIZE, color)

    def draw_pause_menu(self, state: GameState) -> None:
        """List the pause options, highlighting the selected one."""
        self._draw_menu(PAUSE_MENU_OPTIONS, state.pause_menu_line)

    def draw_controls_menu(self, state: GameState) -> None:
        """List every action with its bound key, plus the reset option."""
        start_x = 1.5 * GRID_PIXELS
        spacing = GRID_PIXELS
        start_y = GRID_HEIGHT // 6 * GRID_PIXELS
        key_x = SCREEN_WIDTH - 5 * GRID_PIXELS

        for action in Action:
            top = start_y + action.value * spacing
            self._text(action.label, start_x, top, TEXT_SIZE, RAYWHITE)
            color = RED if state.controls_menu_line == action.value else RAYWHITE
            self._text(key_to_str(state.keys[action]), key_x, top, TEXT_SIZE, color)

        reset_line = len(Action)
        color = RED if state.controls_menu_line == reset_line else RAYWHITE
        self._text(
            "RESET CONTROLS", start_x, start_y + (reset_line + 1) * spacing, TEXT_SIZE, color
        )

    def draw_game_over_menu(self, state: GameState) -> None:
        """List the game-over options, highlighting the selected one."""
        self._draw_menu(GAME_OVER_MENU_OPTIONS, state.game_over_menu_line)

    def draw_screen(self, state: GameState, fps: float = 0.0) -> None:
        """Draw a whole frame for the current scene."""
        self.surface.fill(BACKGROUND_COLOR)

        if state.scene is Scene.GAME:
            self.draw_grid(state.grid)
            self.draw_piece(state.piece, state.piece_x, state.piece_y)
        elif state.scene is Scene.GAME_OVER:
            self._text("GAME OVER", 4, GRID_HEIGHT // 4 * GRID_PIXELS, 40, RAYWHITE)
            self.draw_game_over_menu(state)
        elif state.scene is Scene.PAUSED:
            self._text("PAUSED", 1.5 * GRID_PIXELS, GRID_HEIGHT // 4 * GRID_PIXELS, 45, RAYWHITE)
            self.draw_pause_menu(state)
        elif state.scene is Scene.CONTROLS_MENU:
            self._text("CONTROLS", 1.5 * GRID_PIXELS, GRID_PIXELS, 45, RAYWHITE)
            self.draw_controls_menu(state)

        if state.show_fps:
            self._text(f"{round(fps)} FPS", 0, 0, TEXT_SIZE, LIME)

        if state.scene in (Scene.GAME, Scene.GAME_OVER, Scene.PAUSED):
            if state.scene is not Scene.PAUSED:
                self.draw_next_piece(state.next)
            self.draw_grid_outline()
            self.draw_stats(state.score, state.level, state.lines)