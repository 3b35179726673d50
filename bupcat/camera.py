"""Smoothly following camera with screen shake."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

NUM_SCREENSHAKES = 8


@dataclass(eq=False)
class CameraBounds:
    """One cell of a camera-bounds graph, linked to its neighbours."""

    x: int
    y: int
    freed: bool = False
    up: Optional["CameraBounds"] = field(default=None, repr=False)
    left: Optional["CameraBounds"] = field(default=None, repr=False)
    down: Optional["CameraBounds"] = field(default=None, repr=False)
    right: Optional["CameraBounds"] = field(default=None, repr=False)


@dataclass
class _Shake:
    duration: int = 0
    start_duration: int = 0
    x: float = 0.0
    y: float = 0.0


class Camera:
    """Eases toward a focus point; shakes are added on top of the eased position."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.bounds: CameraBounds | None = None
        self._pos = [0.0, 0.0]
        self._focus = [0.0, 0.0]
        self._shaken = (0.0, 0.0)
        self._shakes = [_Shake() for _ in range(NUM_SCREENSHAKES)]

    def set_bounds(self, bounds: CameraBounds | None) -> None:
        self.bounds = bounds

    def set_focus(self, x: float, y: float) -> None:
        self._focus = [x, y]

    def position(self) -> tuple[float, float]:
        """Position computed by the last :meth:`update`, shake included."""
        return self._shaken

    def screenshake(self, duration: int, x: float, y: float) -> None:
        """Start a shake in a free slot; ignored when all slots are busy."""
        for shake in self._shakes:
            if shake.duration != 0:
                continue
            shake.duration = shake.start_duration = duration
            shake.x, shake.y = x, y
            return

    def update(self) -> None:
        """Advance one frame."""
        self._pos[0] += (self._focus[0] - self._pos[0]) / 10
        self._pos[1] += (self._focus[1] - self._pos[1]) / 10
        sx, sy = self._pos
        for shake in self._shakes:
            if shake.duration == 0:
                continue
            intensity = shake.duration / shake.start_duration
            sx += (self._rng.randrange(2) - 1) * intensity * shake.x
            sy += (self._rng.randrange(2) - 1) * intensity * shake.y
            shake.duration -= 1
        self._shaken = (sx, sy)

    def snap(self) -> None:
        """Jump straight to the focus point on the next update."""
        self._pos = list(self._focus)