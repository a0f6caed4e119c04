"""Tetromino block types, shapes and rotations."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

PIECE_WIDTH = 4
PIECE_HEIGHT = 4
NUM_ROTATIONS = 4


class BlockType(IntEnum):
    """Contents of a single grid cell."""

    NONE = 0
    HIDDEN = 1
    I = 2  # noqa: E741
    O = 3  # noqa: E741
    T = 4
    S = 5
    Z = 6
    J = 7
    L = 8

    @property
    def is_playable(self) -> bool:
        """True for block types that form a tetromino."""
        return self not in (BlockType.NONE, BlockType.HIDDEN)


PLAYABLE_TYPES: Tuple[BlockType, ...] = tuple(b for b in BlockType if b.is_playable)

# A shape is PIECE_HEIGHT rows of PIECE_WIDTH cells; row 0 is the top row.
Shape = Tuple[Tuple[BlockType, ...], ...]


def _shapes(block: BlockType, *rotations: Tuple[str, str, str, str]) -> Tuple[Shape, ...]:
    return tuple(
        tuple(
            tuple(block if cell == "#" else BlockType.NONE for cell in row)
            for row in rotation
        )
        for rotation in rotations
    )


_SHAPES = {
    BlockType.O: _shapes(
        BlockType.O,
        ("....", ".##.", ".##.", "...."),
        ("....", ".##.", ".##.", "...."),
        ("....", ".##.", ".##.", "...."),
        ("....", ".##.", ".##.", "...."),
    ),
    BlockType.I: _shapes(
        BlockType.I,
        ("....", "####", "....", "...."),
        ("..#.", "..#.", "..#.", "..#."),
        ("....", "####", "....", "...."),
        ("..#.", "..#.", "..#.", "..#."),
    ),
    BlockType.T: _shapes(
        BlockType.T,
        ("....", "###.", ".#..", "...."),
        (".#..", "##..", ".#..", "...."),
        (".#..", "###.", "....", "...."),
        (".#..", ".##.", ".#..", "...."),
    ),
    BlockType.S: _shapes(
        BlockType.S,
        ("....", ".##.", "##..", "...."),
        (".#..", ".##.", "..#.", "...."),
        ("....", ".##.", "##..", "...."),
        (".#..", ".##.", "..#.", "...."),
    ),
    BlockType.Z: _shapes(
        BlockType.Z,
        ("....", "##..", ".##.", "...."),
        ("..#.", ".##.", ".#..", "...."),
        ("....", "##..", ".##.", "...."),
        ("..#.", ".##.", ".#..", "...."),
    ),
    BlockType.J: _shapes(
        BlockType.J,
        ("....", "###.", "..#.", "...."),
        (".#..", ".#..", "##..", "...."),
        ("#...", "###.", "....", "...."),
        (".##.", ".#..", ".#..", "...."),
    ),
    BlockType.L: _shapes(
        BlockType.L,
        ("....", "###.", "#...", "...."),
        ("##..", ".#..", ".#..", "...."),
        ("..#.", "###.", "....", "...."),
        (".#..", ".#..", ".##.", "...."),
    ),
}


@dataclass(frozen=True)
class Piece:
    """A tetromino of a given type in one of its rotations."""

    piece_type: BlockType
    rotation: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.rotation < NUM_ROTATIONS:
            raise ValueError(f"rotation must be in 0..{NUM_ROTATIONS - 1}, got {self.rotation}")


def get_shape(piece: Piece) -> Optional[Shape]:
    """Return the cell layout of a piece, or None for non-playable types."""
    rotations = _SHAPES.get(piece.piece_type)
    if rotations is None:
        return None
    return rotations[piece.rotation]


def next_rotation(rotation: int) -> int:
    """Rotation index after turning forward once."""
    return 0 if rotation == NUM_ROTATIONS - 1 else rotation + 1


def previous_rotation(rotation: int) -> int:
    """Rotation index after turning backward once."""
    return NUM_ROTATIONS - 1 if rotation == 0 else rotation - 1


def random_piece(rng: Optional[random.Random] = None) -> Piece:
    """Pick a playable piece uniformly at random, in rotation 0."""
    chooser = rng if rng is not None else random
    return Piece(chooser.choice(PLAYABLE_TYPES))