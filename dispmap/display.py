"""pygame window used as the preview sink."""

from __future__ import annotations

import numpy as np
import pygame

from dispmap.image import bgr_to_rgb
from dispmap.params import ESC


class PygameDisplay:
    """Shows BGR frames and polls the keyboard between them."""

    def __init__(self, title: str = "Displacement Map Filter", quit_key: int = ESC):
        self.title = title
        self.quit_key = quit_key
        self.screen: pygame.Surface | None = None
        pygame.init()
        pygame.display.set_caption(title)

    def show(self, frame: np.ndarray) -> None:
        h, w = frame.shape[:2]
        if self.screen is None or self.screen.get_size() != (w, h):
            self.screen = pygame.display.set_mode((w, h))
        # surfarray is indexed (x, y)
        surface = pygame.surfarray.make_surface(bgr_to_rgb(frame).swapaxes(0, 1))
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()

    def wait_key(self, timeout_ms: int) -> int | None:
        """Block up to timeout_ms; return the first key pressed, if any.

        Closing the window counts as pressing the quit key.
        """
        deadline = pygame.time.get_ticks() + timeout_ms
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return self.quit_key
                if event.type == pygame.KEYDOWN:
                    return event.key
            remaining = deadline - pygame.time.get_ticks()
            if remaining <= 0:
                return None
            pygame.time.wait(min(remaining, 5))

    def close(self) -> None:
        pygame.quit()
