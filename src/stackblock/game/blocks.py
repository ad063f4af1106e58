"""Blocks and block colours."""

import colorsys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple

Color = Tuple[int, int, int]

GOLD: Color = (255, 215, 0)
WHITE: Color = (255, 255, 255)
GREEN: Color = (0, 255, 0)

HUE_STEP = 22
START_HUE = 200


def hsl_color(hue: float, saturation: float = 0.68, lightness: float = 0.55) -> Color:
    """Convert an HSL triple (hue in degrees) to an RGB tuple."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness, saturation)
    return (round(r * 255), round(g * 255), round(b * 255))


def next_hue(hue: int) -> int:
    """Rotate the block hue so consecutive blocks differ."""
    return (hue + HUE_STEP) % 360


class EntityKind(Enum):
    """Closed set of renderable entity types."""
    BLOCK = auto()
    DEBRIS = auto()
    PARTICLE = auto()
    TEXT = auto()


@dataclass(frozen=True)
class Drawable:
    """Render record for one entity, in world coordinates."""
    kind: EntityKind
    x: float
    y: float
    color: Color
    alpha: float = 1.0
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    rotation: float = 0.0
    scale: float = 1.0
    text: str = ""
    highlight: bool = False


@dataclass
class Block:
    """A stack block. x is the left edge, y the top edge, in world space."""
    x: float
    y: float
    width: float
    height: float
    color: Color
    velocity: float = 0.0
    direction: int = 1
    is_power_up: bool = False

    kind = EntityKind.BLOCK

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    def advance(self, dt: float, field_width: float) -> None:
        """Slide along x, bouncing inward off the field edges."""
        self.x += self.velocity * self.direction * dt
        if self.right > field_width and self.direction > 0:
            self.direction = -1
        elif self.x < 0 and self.direction < 0:
            self.direction = 1

    def describe(self) -> Drawable:
        return Drawable(self.kind, self.x, self.y, self.color, width=self.width,
                        height=self.height, highlight=self.is_power_up)
