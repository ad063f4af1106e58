"""Rasterizes a RenderSnapshot into an RGB buffer.

Text is not drawn here; the host window overlays floating text and the
HUD with its own font renderer.
"""

from typing import Optional, Tuple
import logging

import numpy as np

from stackblock.game.blocks import Drawable
from stackblock.game.driver import RenderSnapshot
from stackblock.graphics.primitives import (
    Buffer, Color, darken, draw_circle, draw_rect, draw_rotated_rect,
    fill_gradient, lighten, new_buffer,
)

logger = logging.getLogger(__name__)

# Background environments, advanced on speed milestones
THEMES: Tuple[Tuple[Color, Color, Color], ...] = (
    ((26, 26, 46), (22, 33, 62), (15, 52, 96)),      # Deep space
    ((45, 27, 46), (180, 80, 95), (255, 142, 114)),  # Sunset city
    ((15, 32, 39), (32, 58, 67), (44, 83, 100)),     # Cyan cyberpunk
    ((20, 30, 48), (36, 59, 85), (75, 0, 130)),      # Royal purple
    ((0, 0, 0), (67, 67, 67), (26, 26, 26)),         # Noir
)

GOLD_LIGHT: Color = (255, 248, 219)
GOLD_DARK: Color = (184, 134, 11)
SHADOW_OFFSET = 3


def theme_for(index: int) -> Tuple[Color, Color, Color]:
    return THEMES[index % len(THEMES)]


class StackRenderer:
    """Draws blocks, debris and particles into a numpy frame buffer."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.buffer: Buffer = new_buffer(width, height)
        self._background_index: Optional[int] = None
        self._background: Buffer = new_buffer(width, height)

    def render(self, snapshot: RenderSnapshot) -> Buffer:
        """Draw one frame and return the buffer (reused between frames)."""
        self._prepare_background(snapshot.environment_index)
        np.copyto(self.buffer, self._background)

        ox, oy = snapshot.shake_offset
        cam = snapshot.camera_y

        for block in snapshot.blocks:
            self._draw_block(block, ox, oy - cam)
        if snapshot.current_block is not None:
            self._draw_block(snapshot.current_block, ox, oy - cam)
        for piece in snapshot.debris:
            self._draw_debris(piece, ox, oy - cam)
        for particle in snapshot.particles:
            draw_circle(self.buffer, particle.x + ox, particle.y - cam + oy,
                        particle.radius, particle.color, particle.alpha)
        return self.buffer

    def _prepare_background(self, index: int) -> None:
        if index != self._background_index:
            fill_gradient(self._background, theme_for(index))
            self._background_index = index
            logger.debug(f"Background theme {index % len(THEMES)}")

    def _draw_block(self, block: Drawable, dx: float, dy: float) -> None:
        x = int(round(block.x + dx))
        y = int(round(block.y + dy))
        w = int(round(block.width))
        h = int(round(block.height))

        if block.highlight:
            # Gold power-up: light top half, dark rim
            draw_rect(self.buffer, x, y, w, h, block.color)
            draw_rect(self.buffer, x, y, w, h // 3, GOLD_LIGHT, alpha=0.5)
            draw_rect(self.buffer, x, y + h - h // 4, w, h // 4, GOLD_DARK, alpha=0.6)
            draw_rect(self.buffer, x, y, w, h, (255, 255, 255), filled=False)
            return

        draw_rect(self.buffer, x + SHADOW_OFFSET, y + SHADOW_OFFSET, w, h, (0, 0, 0), alpha=0.13)
        draw_rect(self.buffer, x, y, w, h, block.color)
        draw_rect(self.buffer, x, y, w, 3, lighten(block.color, 50), alpha=0.6)
        draw_rect(self.buffer, x, y, 3, h, lighten(block.color, 50), alpha=0.6)
        draw_rect(self.buffer, x, y + h - 1, w, 1, darken(block.color, 40))

    def _draw_debris(self, piece: Drawable, dx: float, dy: float) -> None:
        draw_rotated_rect(
            self.buffer,
            piece.x + piece.width / 2 + dx,
            piece.y + piece.height / 2 + dy,
            piece.width,
            piece.height,
            piece.rotation,
            piece.color,
            piece.alpha,
        )
