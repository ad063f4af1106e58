"""Basic drawing primitives on numpy RGB buffers."""

from typing import Sequence, Tuple
import math
import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Buffer = NDArray[np.uint8]


def new_buffer(width: int, height: int) -> Buffer:
    """Allocate a black (height, width, 3) buffer."""
    return np.zeros((height, width, 3), dtype=np.uint8)


def fill(buffer: Buffer, color: Color) -> None:
    """Fill entire buffer with color."""
    buffer[:, :] = color


def fill_gradient(buffer: Buffer, stops: Sequence[Color]) -> None:
    """Fill with a vertical gradient through evenly spaced colour stops."""
    h = buffer.shape[0]
    if len(stops) == 1 or h < 2:
        fill(buffer, stops[0])
        return
    positions = np.linspace(0.0, 1.0, len(stops))
    t = np.linspace(0.0, 1.0, h)
    colors = np.asarray(stops, dtype=np.float32)
    rows = np.stack([np.interp(t, positions, colors[:, c]) for c in range(3)], axis=1)
    buffer[:, :] = rows.astype(np.uint8)[:, np.newaxis, :]


def _blend(region: NDArray, color: Color, alpha: float) -> None:
    if alpha >= 1.0:
        region[...] = color
        return
    src = np.asarray(color, dtype=np.float32)
    region[...] = (region.astype(np.float32) * (1.0 - alpha) + src * alpha).astype(np.uint8)


def draw_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    filled: bool = True,
    alpha: float = 1.0,
) -> None:
    """Draw a rectangle on the buffer.

    Args:
        buffer: Target numpy array (height, width, 3)
        x: Left edge x coordinate
        y: Top edge y coordinate
        width: Rectangle width
        height: Rectangle height
        color: RGB color tuple
        filled: If True, fill rectangle; if False, draw a 1px outline
        alpha: Opacity in [0, 1]
    """
    if alpha <= 0:
        return
    h, w = buffer.shape[:2]

    # Clamp to buffer bounds
    x1 = max(0, min(x, w))
    y1 = max(0, min(y, h))
    x2 = max(0, min(x + width, w))
    y2 = max(0, min(y + height, h))
    if x1 >= x2 or y1 >= y2:
        return

    if filled:
        _blend(buffer[y1:y2, x1:x2], color, alpha)
    else:
        _blend(buffer[y1, x1:x2], color, alpha)
        _blend(buffer[y2 - 1, x1:x2], color, alpha)
        _blend(buffer[y1 + 1:y2 - 1, x1], color, alpha)
        _blend(buffer[y1 + 1:y2 - 1, x2 - 1], color, alpha)


def draw_rotated_rect(
    buffer: Buffer,
    cx: float,
    cy: float,
    width: float,
    height: float,
    angle: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Draw a filled rectangle rotated by ``angle`` radians about its centre."""
    if alpha <= 0:
        return
    h, w = buffer.shape[:2]
    reach = math.hypot(width, height) / 2
    x1 = max(0, int(cx - reach))
    y1 = max(0, int(cy - reach))
    x2 = min(w, int(cx + reach) + 1)
    y2 = min(h, int(cy + reach) + 1)
    if x1 >= x2 or y1 >= y2:
        return

    ys, xs = np.ogrid[y1:y2, x1:x2]
    dx = xs + 0.5 - cx
    dy = ys + 0.5 - cy
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    local_x = dx * cos_a + dy * sin_a
    local_y = -dx * sin_a + dy * cos_a
    mask = (np.abs(local_x) <= width / 2) & (np.abs(local_y) <= height / 2)

    region = buffer[y1:y2, x1:x2]
    pixels = region[mask]
    _blend(pixels, color, alpha)
    region[mask] = pixels


def draw_circle(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Draw a filled circle on the buffer."""
    if alpha <= 0 or radius <= 0:
        return
    h, w = buffer.shape[:2]
    x1 = max(0, int(cx - radius))
    y1 = max(0, int(cy - radius))
    x2 = min(w, int(cx + radius) + 1)
    y2 = min(h, int(cy + radius) + 1)
    if x1 >= x2 or y1 >= y2:
        return

    ys, xs = np.ogrid[y1:y2, x1:x2]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2

    region = buffer[y1:y2, x1:x2]
    pixels = region[mask]
    _blend(pixels, color, alpha)
    region[mask] = pixels


def lighten(color: Color, amount: int) -> Color:
    return tuple(min(255, c + amount) for c in color)


def darken(color: Color, amount: int) -> Color:
    return tuple(max(0, c - amount) for c in color)
