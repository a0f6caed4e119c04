"""Window, input polling and the main loop."""

from __future__ import annotations

import argparse
import random
from typing import Dict, Iterable, List, Set, Tuple

import pygame

from .draw import SCREEN_HEIGHT, SCREEN_WIDTH, Renderer
from .game import GameState, KeyInput, Scene
from .keys import Key

TARGET_FPS = 60
WINDOW_TITLE = "BLOCKFALL"

_PYGAME_KEYS: Dict[int, Key] = {
    pygame.K_SPACE: Key.SPACE,
    pygame.K_QUOTE: Key.APOSTROPHE,
    pygame.K_COMMA: Key.COMMA,
    pygame.K_MINUS: Key.MINUS,
    pygame.K_PERIOD: Key.PERIOD,
    pygame.K_SLASH: Key.SLASH,
    pygame.K_SEMICOLON: Key.SEMICOLON,
    pygame.K_EQUALS: Key.EQUAL,
    pygame.K_LEFTBRACKET: Key.LEFT_BRACKET,
    pygame.K_BACKSLASH: Key.BACKSLASH,
    pygame.K_RIGHTBRACKET: Key.RIGHT_BRACKET,
    pygame.K_BACKQUOTE: Key.GRAVE,
    pygame.K_ESCAPE: Key.ESCAPE,
    pygame.K_RETURN: Key.ENTER,
    pygame.K_TAB: Key.TAB,
    pygame.K_BACKSPACE: Key.BACKSPACE,
    pygame.K_RIGHT: Key.RIGHT,
    pygame.K_LEFT: Key.LEFT,
    pygame.K_DOWN: Key.DOWN,
    pygame.K_UP: Key.UP,
}
_PYGAME_KEYS.update({pygame.K_0 + i: Key(Key.ZERO + i) for i in range(10)})
_PYGAME_KEYS.update({pygame.K_a + i: Key(Key.A + i) for i in range(26)})


def translate_key(code: int) -> Key:
    """Map a pygame key code to a game key; Key.NULL when it has no counterpart."""
    return _PYGAME_KEYS.get(code, Key.NULL)


def _poll_input(events: Iterable[pygame.event.Event], held: Set[Key]) -> Tuple[KeyInput, bool]:
    """Turn one frame of events into key input; also report a window close."""
    pressed: List[Key] = []
    closed = False
    for event in events:
        if event.type == pygame.QUIT:
            closed = True
        elif event.type == pygame.KEYDOWN:
            key = translate_key(event.key)
            if key != Key.NULL:
                pressed.append(key)
                held.add(key)
        elif event.type == pygame.KEYUP:
            held.discard(translate_key(event.key))
    return KeyInput(pressed=pressed, down=held, queue=pressed), closed


def main(argv=None) -> int:
    """Open the game window and run until the player quits."""
    parser = argparse.ArgumentParser(prog="blockfall", description="Falling-block puzzle game.")
    parser.add_argument("--seed", type=int, default=None, help="seed for the piece sequence")
    args = parser.parse_args(argv)

    state = GameState(random.Random(args.seed))

    print(f"SCREEN_HEIGHT: {SCREEN_HEIGHT}")
    print(f"SCREEN_WIDTH: {SCREEN_WIDTH}")

    pygame.display.init()
    pygame.font.init()
    try:
        screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        renderer = Renderer(screen)
        clock = pygame.time.Clock()
        held: Set[Key] = set()
        frame_time = 0.0

        while not state.close_game:
            keyboard, window_closed = _poll_input(pygame.event.get(), held)
            if window_closed:
                break

            state.handle_keys(keyboard, frame_time)

            if state.clear_anim.active and state.scene is Scene.GAME:
                state.update_clear_anim(frame_time)

            if state.can_update_game():
                state.update_game(frame_time)

            renderer.draw_screen(state, clock.get_fps())
            pygame.display.flip()

            frame_time = clock.tick(TARGET_FPS) / 1000.0
    finally:
        pygame.quit()

    return 0