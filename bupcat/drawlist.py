"""Ordered lists of textured quads waiting to be drawn."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

DEFAULT_COLOR = 0xFFFFFFFF
"""Opaque white, in RGBA order."""

Renderer = Callable[[Any, float, float, float, float, int, int, int, int, int], None]


@dataclass(frozen=True)
class DrawCommand:
    """One quad: where it goes, which part of the texture it shows, and its tint."""

    texture: Any
    dst_x: float
    dst_y: float
    dst_w: float
    dst_h: float
    src_x: int
    src_y: int
    src_w: int
    src_h: int
    color: int


class DrawList:
    """Collects draw commands and replays them through a renderer callback."""

    def __init__(self) -> None:
        self._commands: list[DrawCommand] = []
        self._color = DEFAULT_COLOR

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[DrawCommand]:
        return iter(self._commands)

    @property
    def color(self) -> int:
        """The RGBA tint given to commands appended from now on."""
        return self._color

    def set_color(self, rgba: int) -> None:
        """Set the RGBA tint for commands appended from now on."""
        self._color = rgba & 0xFFFFFFFF

    def append(
        self,
        texture: Any,
        dst_x: float,
        dst_y: float,
        dst_w: float,
        dst_h: float,
        src_x: int,
        src_y: int,
        src_w: int,
        src_h: int,
    ) -> DrawCommand:
        """Queue a quad tinted with the current color and return it."""
        command = DrawCommand(
            texture, dst_x, dst_y, dst_w, dst_h, src_x, src_y, src_w, src_h, self._color
        )
        self._commands.append(command)
        return command

    def clear(self) -> None:
        """Drop every queued command."""
        self._commands.clear()

    def render(self, renderer: Renderer) -> None:
        """Call ``renderer`` once per command, in the order they were appended."""
        for cmd in self._commands:
            renderer(
                cmd.texture,
                cmd.dst_x,
                cmd.dst_y,
                cmd.dst_w,
                cmd.dst_h,
                cmd.src_x,
                cmd.src_y,
                cmd.src_w,
                cmd.src_h,
                cmd.color,
            )