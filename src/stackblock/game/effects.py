"""Transient visual effects: debris, particles and floating text.

Kinematics are per 60 Hz frame. ``dt`` is measured in frames, so
``dt == 1.0`` applies each constant exactly once; additive terms scale
linearly with ``dt`` and multiplicative ones as ``factor ** dt``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import random

from stackblock.game.blocks import Color, Drawable, EntityKind

DEBRIS_GRAVITY = 0.55
DEBRIS_FADE = 0.02
PARTICLE_GRAVITY = 0.2
PARTICLE_DRAG = 0.95
PARTICLE_RADIUS = 3.0
TEXT_RISE = -1.5
TEXT_FADE = 0.015
TEXT_EASE = 0.2
TEXT_START_SCALE = 0.5


@dataclass
class Debris:
    """A trimmed-off or missed block fragment, falling and spinning."""
    x: float
    y: float
    width: float
    height: float
    color: Color
    vx: float = 0.0
    vy: float = 0.0
    alpha: float = 1.0
    rotation: float = 0.0
    rotation_speed: float = 0.0

    kind = EntityKind.DEBRIS

    @classmethod
    def spawn(cls, x: float, y: float, width: float, height: float,
              color: Color, side_bias: float, rng: random.Random) -> "Debris":
        return cls(
            x=x, y=y, width=abs(width), height=height, color=color,
            vx=side_bias * (1 + rng.random()),
            rotation_speed=(rng.random() - 0.5) * 0.1,
        )

    def advance(self, dt: float, view_bottom: Optional[float] = None) -> bool:
        self.vy += DEBRIS_GRAVITY * dt
        self.y += self.vy * dt
        self.x += self.vx * dt
        self.alpha -= DEBRIS_FADE * dt
        self.rotation += self.rotation_speed * dt
        if view_bottom is not None and self.y > view_bottom:
            return False
        return self.alpha > 0

    def describe(self) -> Drawable:
        return Drawable(self.kind, self.x, self.y, self.color, alpha=max(0.0, self.alpha),
                        width=self.width, height=self.height, rotation=self.rotation)


@dataclass
class Particle:
    """Small spark kicked upward from a placement."""
    x: float
    y: float
    color: Color
    vx: float = 0.0
    vy: float = 0.0
    alpha: float = 1.0
    decay: float = 0.03
    radius: float = PARTICLE_RADIUS

    kind = EntityKind.PARTICLE

    @classmethod
    def spawn(cls, x: float, y: float, color: Color, rng: random.Random) -> "Particle":
        return cls(
            x=x, y=y, color=color,
            vx=(rng.random() - 0.5) * 8,
            vy=-rng.random() * 5 - 1,
            decay=rng.random() * 0.02 + 0.02,
        )

    def advance(self, dt: float, view_bottom: Optional[float] = None) -> bool:
        self.vx *= PARTICLE_DRAG ** dt
        self.vy += PARTICLE_GRAVITY * dt
        self.x += self.vx * dt
        self.y += self.vy * dt
        self.alpha -= self.decay * dt
        return self.alpha > 0

    def describe(self) -> Drawable:
        return Drawable(self.kind, self.x, self.y, self.color,
                        alpha=max(0.0, self.alpha), radius=self.radius)


@dataclass
class FloatingText:
    """Label that pops in, drifts up and fades."""
    x: float
    y: float
    text: str
    color: Color
    vy: float = TEXT_RISE
    alpha: float = 1.0
    scale: float = TEXT_START_SCALE

    kind = EntityKind.TEXT

    def advance(self, dt: float, view_bottom: Optional[float] = None) -> bool:
        self.y += self.vy * dt
        self.alpha -= TEXT_FADE * dt
        self.scale += (1.0 - self.scale) * (1.0 - (1.0 - TEXT_EASE) ** dt)
        return self.alpha > 0

    def describe(self) -> Drawable:
        return Drawable(self.kind, self.x, self.y, self.color, alpha=max(0.0, self.alpha),
                        scale=self.scale, text=self.text)


@dataclass
class EffectsPool:
    """Owns and advances every transient effect of one game session."""
    rng: random.Random = field(default_factory=random.Random)
    block_height: float = 40.0
    debris: List[Debris] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    texts: List[FloatingText] = field(default_factory=list)

    def spawn_debris(self, x: float, y: float, width: float, color: Color,
                     side_bias: float) -> Debris:
        piece = Debris.spawn(x, y, width, self.block_height, color, side_bias, self.rng)
        self.debris.append(piece)
        return piece

    def spawn_particles(self, x: float, y: float, width: float, color: Color,
                        count: int) -> None:
        for _ in range(count):
            self.particles.append(
                Particle.spawn(x + self.rng.random() * width, y, color, self.rng)
            )

    def spawn_floating_text(self, x: float, y: float, text: str, color: Color) -> FloatingText:
        label = FloatingText(x=x, y=y, text=text, color=color)
        self.texts.append(label)
        return label

    def advance_all(self, dt: float, view_bottom: Optional[float] = None) -> None:
        """Advance every entity and drop the dead ones.

        Debris below ``view_bottom`` is dropped even while still visible
        in alpha terms.
        """
        self.debris = [d for d in self.debris if d.advance(dt, view_bottom)]
        self.particles = [p for p in self.particles if p.advance(dt)]
        self.texts = [t for t in self.texts if t.advance(dt)]

    def clear(self) -> None:
        self.debris.clear()
        self.particles.clear()
        self.texts.clear()

    @property
    def count(self) -> int:
        return len(self.debris) + len(self.particles) + len(self.texts)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def drawables(self) -> Dict[str, List[Drawable]]:
        return {
            "debris": [d.describe() for d in self.debris],
            "particles": [p.describe() for p in self.particles],
            "texts": [t.describe() for t in self.texts],
        }

    def stats(self) -> Dict[str, Any]:
        return {
            "debris": len(self.debris),
            "particles": len(self.particles),
            "texts": len(self.texts),
        }
