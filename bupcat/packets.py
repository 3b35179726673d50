"""Network packet definitions and their wire encoding."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .serial import Array, Kind, Registry, Struct

CONNECT = "Connect"
DISCONNECT = "Disconnect"
PLAYER_ID = "PlayerID"
INPUT = "Input"
RENDERED_SCREEN = "RenderedScreen"

DRAW_ENTRY = Struct(
    ("texture", Kind.STRING),
    ("dstx", Kind.FLOAT),
    ("dsty", Kind.FLOAT),
    ("dstw", Kind.FLOAT),
    ("dsth", Kind.FLOAT),
    ("srcx", Kind.INT32),
    ("srcy", Kind.INT32),
    ("srcw", Kind.INT32),
    ("srch", Kind.INT32),
    ("color", Kind.UINT32),
)


@dataclass(frozen=True)
class Packet:
    """A packet: its object type name and its decoded value."""

    kind: str
    value: Any


def build_registry() -> Registry:
    """Return a registry holding every packet type in wire order."""
    registry = Registry()
    registry.register(CONNECT, Kind.INT8)
    registry.register(DISCONNECT, Kind.INT8)
    registry.register(PLAYER_ID, Kind.INT8)
    registry.register(INPUT, Struct(("player", Kind.UINT8), ("input", Kind.UINT32)))
    registry.register(RENDERED_SCREEN, Array(DRAW_ENTRY))
    return registry


_REGISTRY = build_registry()


def packet_connect() -> Packet:
    """Request to join a server."""
    return Packet(CONNECT, 0)


def packet_disconnect(player_id: int) -> Packet:
    """Announce that ``player_id`` leaves, or tell a client to go away."""
    return Packet(DISCONNECT, player_id)


def packet_player_id(player_id: int) -> Packet:
    """Tell a freshly connected client which player slot it has."""
    return Packet(PLAYER_ID, player_id)


def packet_input(player_id: int, buttons: int) -> Packet:
    """Carry the bit mask of buttons held by ``player_id``."""
    return Packet(INPUT, {"player": player_id, "input": buttons})


def packet_rendered_screen(
    commands: Iterable[tuple], asset_name: Callable[[Any], str]
) -> Packet:
    """Capture draw commands as a screen packet.

    Each command is ``(texture, dst_x, dst_y, dst_w, dst_h, src_x, src_y,
    src_w, src_h, color)``. Textures are sent by the name ``asset_name``
    gives them; a ``None`` texture is sent as an empty name.
    """
    entries = []
    for texture, dst_x, dst_y, dst_w, dst_h, src_x, src_y, src_w, src_h, color in commands:
        entries.append(
            {
                "texture": "" if texture is None else asset_name(texture),
                "dstx": dst_x,
                "dsty": dst_y,
                "dstw": dst_w,
                "dsth": dst_h,
                "srcx": src_x,
                "srcy": src_y,
                "srcw": src_w,
                "srch": src_h,
                "color": color,
            }
        )
    return Packet(RENDERED_SCREEN, entries)


def encode_packet(packet: Packet) -> bytes:
    """Serialize a packet, type header included."""
    return _REGISTRY.serialize(packet.kind, packet.value)


def decode_packet(data: bytes) -> Packet:
    """Deserialize one packet; raises ``SerialError`` on bad data."""
    kind, value = _REGISTRY.deserialize(data)
    return Packet(kind, value)