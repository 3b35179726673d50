import pytest

from bupcat.packets import (
    CONNECT,
    DISCONNECT,
    INPUT,
    PLAYER_ID,
    RENDERED_SCREEN,
    Packet,
    build_registry,
    decode_packet,
    encode_packet,
    packet_connect,
    packet_disconnect,
    packet_input,
    packet_player_id,
    packet_rendered_screen,
)
from bupcat.serial import SerialError


def test_registry_order_matches_definitions():
    registry = build_registry()
    names = [CONNECT, DISCONNECT, PLAYER_ID, INPUT, RENDERED_SCREEN]
    assert [registry.type_id(n) for n in names] == list(range(len(names)))


def test_connect_wire_bytes():
    assert encode_packet(packet_connect()) == b"\x00\x00\x00\x00\x00"


def test_disconnect_wire_bytes():
    assert encode_packet(packet_disconnect(3)) == b"\x01\x00\x00\x00\x03"


def test_input_packet_length():
    assert len(encode_packet(packet_input(1, 0b1011))) == 9


@pytest.mark.parametrize(
    "packet",
    [
        packet_connect(),
        packet_disconnect(0),
        packet_disconnect(15),
        packet_player_id(7),
        packet_input(3, 0b1011),
        packet_input(0, 2**32 - 1),
    ],
)
def test_simple_packets_round_trip(packet):
    assert decode_packet(encode_packet(packet)) == packet


def test_input_packet_fields():
    packet = packet_input(4, 0b110)
    assert packet.kind == INPUT
    assert packet.value == {"player": 4, "input": 0b110}


def _commands():
    return [
        ("tex-a", 1.0, 2.0, 16.0, 16.0, 0, 0, 10, 10, 0xFFFFFFFF),
        (None, -0.5, 3.25, 8.0, 8.0, 10, 20, 10, 10, 0x112233FF),
    ]


def test_rendered_screen_round_trip():
    packet = packet_rendered_screen(_commands(), lambda tex: "images/" + tex + ".png")
    decoded = decode_packet(encode_packet(packet))
    assert decoded == packet
    assert decoded.kind == RENDERED_SCREEN


def test_rendered_screen_texture_names():
    seen = []

    def name(tex):
        seen.append(tex)
        return "images/" + tex + ".png"

    packet = packet_rendered_screen(_commands(), name)
    assert [entry["texture"] for entry in packet.value] == ["images/tex-a.png", ""]
    assert seen == ["tex-a"]


def test_rendered_screen_keeps_order_and_count():
    commands = _commands()
    packet = packet_rendered_screen(commands, str)
    assert len(packet.value) == len(commands)
    assert [entry["srcx"] for entry in packet.value] == [c[5] for c in commands]
    assert [entry["color"] for entry in packet.value] == [c[9] for c in commands]


def test_empty_rendered_screen_round_trip():
    packet = packet_rendered_screen([], str)
    assert decode_packet(encode_packet(packet)) == Packet(RENDERED_SCREEN, [])


def test_decode_unknown_type_raises():
    data = bytearray(encode_packet(packet_connect()))
    data[0] = len(build_registry())
    with pytest.raises(SerialError):
        decode_packet(bytes(data))


def test_player_id_out_of_range_raises():
    with pytest.raises(SerialError):
        encode_packet(packet_player_id(200))


def test_truncated_rendered_screen_raises():
    data = encode_packet(packet_rendered_screen(_commands(), str))
    with pytest.raises(SerialError):
        decode_packet(data[:-2])