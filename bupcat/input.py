"""Per-player button state with edge detection."""

from __future__ import annotations

from dataclasses import dataclass

MAX_PLAYERS = 16


@dataclass
class _PlayerInput:
    buttons: int = 0
    previous: int = 0
    mouse_x: int = 0
    mouse_y: int = 0


class InputState:
    """Button bit masks for every player slot, current and previous frame."""

    def __init__(self, max_players: int = MAX_PLAYERS) -> None:
        self._players = [_PlayerInput() for _ in range(max_players)]

    def _get(self, player: int) -> _PlayerInput:
        if not 0 <= player < len(self._players):
            raise IndexError(f"no player slot {player}")
        return self._players[player]

    def is_down(self, player: int, key: int) -> bool:
        return bool(self._get(player).buttons & key)

    def is_up(self, player: int, key: int) -> bool:
        return not self._get(player).buttons & key

    def is_pressed(self, player: int, key: int) -> bool:
        """True when ``key`` went down this frame."""
        p = self._get(player)
        return bool(p.buttons & ~p.previous & key)

    def is_released(self, player: int, key: int) -> bool:
        """True when ``key`` went up this frame."""
        p = self._get(player)
        return bool(p.previous & ~p.buttons & key)

    def mouse_position(self, player: int) -> tuple[int, int]:
        p = self._get(player)
        return p.mouse_x, p.mouse_y

    def set_buttons(self, player: int, buttons: int) -> None:
        """Record this frame's locally polled buttons for ``player``."""
        p = self._get(player)
        p.previous = p.buttons
        p.buttons = buttons

    def apply_packet(self, player: int, buttons: int) -> None:
        """Record buttons received from a remote player's input packet."""
        self.set_buttons(player, buttons)