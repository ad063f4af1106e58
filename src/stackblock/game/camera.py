"""Camera follow and screen shake."""

from dataclasses import dataclass, field
from typing import Tuple
import random

SNAP_DISTANCE = 0.5
SHAKE_FLOOR = 0.5


@dataclass
class CameraController:
    """Smoothed vertical camera plus a decaying shake impulse.

    ``camera_y`` is the world y at the top of the viewport. It only ever
    moves up (negative) as the stack grows. The shake offset is meant for
    the draw transform and never touches world coordinates.
    """
    lerp: float = 0.08
    shake_decay: float = 0.85
    camera_y: float = 0.0
    target_camera_y: float = 0.0
    shake_amount: float = 0.0
    rng: random.Random = field(default_factory=random.Random)

    def follow(self, top_y: float, viewport_height: float, target_fraction: float) -> None:
        """Aim the camera so the stack top sits at ``target_fraction`` of the view."""
        self.target_camera_y = min(0.0, top_y - viewport_height * target_fraction)

    def update(self, dt: float = 1.0) -> None:
        diff = self.target_camera_y - self.camera_y
        if abs(diff) > SNAP_DISTANCE:
            self.camera_y += diff * (1.0 - (1.0 - self.lerp) ** dt)
        else:
            self.camera_y = self.target_camera_y

    def impulse(self, amount: float) -> None:
        self.shake_amount = max(self.shake_amount, amount)

    def shake_offset(self, dt: float = 1.0) -> Tuple[float, float]:
        """Return this frame's shake offset and decay the shake."""
        if self.shake_amount > SHAKE_FLOOR:
            s = self.shake_amount
            offset = (self.rng.uniform(-s, s), self.rng.uniform(-s, s))
            self.shake_amount *= self.shake_decay ** dt
            return offset
        self.shake_amount = 0.0
        return (0.0, 0.0)

    def reset(self) -> None:
        self.camera_y = 0.0
        self.target_camera_y = 0.0
        self.shake_amount = 0.0
