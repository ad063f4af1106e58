"""Graphics module for stackblock rendering."""

from stackblock.graphics.renderer import StackRenderer, THEMES, theme_for
from stackblock.graphics.primitives import (
    draw_circle,
    draw_rect,
    draw_rotated_rect,
    fill,
    fill_gradient,
    new_buffer,
)

__all__ = [
    # Renderer
    "StackRenderer",
    "THEMES",
    "theme_for",
    # Primitives
    "draw_circle",
    "draw_rect",
    "draw_rotated_rect",
    "fill",
    "fill_gradient",
    "new_buffer",
]
