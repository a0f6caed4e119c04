# blockfall

A falling-block puzzle game on a 10 × 20 grid, drawn with pygame. Pieces
fall at speeds taken from the classic NES level table, completed lines are
swept away from the centre outwards before the rows above drop down, and
every control can be rebound from inside the game.

## Installing

```
pip install .
```

## Playing

```
blockfall
```

To get a repeatable piece sequence, pass a seed:

```
blockfall --seed 42
```

The game starts at level 8. Clearing lines raises the score and, after
enough lines, the level and the falling speed. A new piece is never of the
same type as the one before it. The game ends when a piece cannot fall any
further from its starting position.

### Default controls

| Action          | Key   |
|-----------------|-------|
| Move left       | LEFT  |
| Move right      | RIGHT |
| Rotate forward  | X     |
| Rotate backward | Z     |
| Soft drop       | DOWN  |
| Pause           | SPC   |
| Restart         | R     |
| Quit            | Q     |
| Menu up         | UP    |
| Menu down       | DOWN  |
| Menu select     | X     |
| Menu back       | Z     |
| Toggle FPS      | F     |

Holding a direction moves once, then repeats after a short delay.
Holding soft drop halves the time between drops. Closing the window also
quits.

### Menus

Pausing opens a menu with RESUME, CONTROLS, RESTART and QUIT; the pause
key or menu back also resumes. In CONTROLS, select an action and press the
new key for it; RESET CONTROLS at the bottom restores the defaults, and
menu back returns to the pause menu. When the game ends, the game-over
menu offers RESTART and QUIT, and the restart key works there too.

Restarting begins a fresh game and also restores the default key bindings.

## Scoring

| Lines at once | Points             |
|---------------|--------------------|
| 1             | 40 × (level + 1)   |
| 2             | 100 × (level + 1)  |
| 3             | 300 × (level + 1)  |
| 4             | 1200 × (level + 1) |

## Using the game logic

The rules in `blockfall.game` have no display dependency and can be driven
directly, one frame at a time, with `KeyInput` standing in for the keyboard:

```python
from blockfall.game import GameState, KeyInput, calculate_score
from blockfall.keys import Key

state = GameState()
state.handle_keys(KeyInput(down={Key.LEFT}), 1 / 60)
state.update_game(1 / 60)
print(state.piece_x, state.score, state.level, calculate_score(4, 8))
```

`blockfall.pieces` holds the block types, shapes and rotations,
`blockfall.keys` the actions, keys and default bindings, and
`blockfall.draw` the `Renderer` that paints a `GameState` onto a pygame
surface.

## What it does not do

- Nothing is saved: key bindings, scores and levels are lost when the game
  closes.
- The Toggle FPS action can be bound, but no key press switches the FPS
  display on or off.
- There is no start screen or level choice; every game begins at level 8.

## Running the tests

```
pip install ".[test]"
pytest
```