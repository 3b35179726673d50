import queue
import socket
import time

import pytest

from bupcat.network import (
    Client,
    PacketQueue,
    Server,
    frame,
    read_frame,
)
from bupcat.packets import (
    decode_packet,
    encode_packet,
    packet_connect,
    packet_disconnect,
    packet_input,
    packet_player_id,
)


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _free_port():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def server_setup():
    received = queue.Queue()
    server = Server(lambda origin, data: received.put((origin, data)), host="127.0.0.1", port=0)
    server.start()
    yield server, received
    server.shutdown()


def test_frame_prefixes_little_endian_length():
    assert frame(b"abc") == b"\x03\x00\x00\x00abc"


def test_frame_empty_payload():
    assert frame(b"") == b"\x00\x00\x00\x00"


def test_read_frame_round_trip():
    a, b = socket.socketpair()
    with a, b:
        payload = encode_packet(packet_input(2, 0b101))
        a.sendall(frame(payload) + frame(b"xy"))
        assert read_frame(b) == payload
        assert read_frame(b) == b"xy"


def test_read_frame_returns_none_on_eof():
    a, b = socket.socketpair()
    with b:
        a.close()
        assert read_frame(b) is None


def test_read_frame_truncated_raises():
    a, b = socket.socketpair()
    with b:
        a.sendall(frame(b"hello")[:6])
        a.close()
        with pytest.raises(ConnectionError):
            read_frame(b)


def test_queue_delivers_decoded_packets_in_order():
    q = PacketQueue()
    assert q.push(3, encode_packet(packet_connect()))
    assert q.push(5, encode_packet(packet_player_id(7)))
    seen = []
    count = q.process(lambda origin, packet: seen.append((origin, packet)))
    assert count == 2
    assert seen == [(3, packet_connect()), (5, packet_player_id(7))]
    assert len(q) == 0


def test_queue_rejects_unknown_type():
    q = PacketQueue()
    assert not q.push(0, b"\xff\x00\x00\x00")
    assert not q.push(0, b"\x00")
    assert len(q) == 0


def test_queue_skips_undecodable_packets():
    q = PacketQueue()
    good = encode_packet(packet_disconnect(1))
    assert q.push(0, encode_packet(packet_input(1, 2))[:5])
    assert q.push(1, good)
    seen = []
    assert q.process(lambda origin, packet: seen.append(packet)) == 1
    assert seen == [packet_disconnect(1)]


def test_client_server_exchange(server_setup):
    server, received = server_setup
    port = server.address[1]
    client_received = queue.Queue()
    client = Client(lambda origin, data: client_received.put((origin, data)), port=port)
    client.connect("localhost")
    try:
        origin, data = received.get(timeout=5)
        assert origin == 0
        assert decode_packet(data) == packet_connect()
        assert server.is_connected(0)

        server.send_to(0, packet_player_id(3))
        origin, data = client_received.get(timeout=5)
        assert origin == 0
        assert decode_packet(data) == packet_player_id(3)

        client.send(packet_input(0, 6))
        _, data = received.get(timeout=5)
        assert decode_packet(data) == packet_input(0, 6)
    finally:
        client.shutdown()


def test_server_disconnect_stops_client(server_setup):
    server, received = server_setup
    client = Client(lambda origin, data: None, port=server.address[1])
    client.connect("127.0.0.1")
    try:
        received.get(timeout=5)
        assert client.connected
        server.send_to(0, packet_disconnect(0))
        assert _wait_until(lambda: not client.connected)
    finally:
        client.shutdown()


def test_server_frees_slot_when_client_leaves(server_setup):
    server, received = server_setup
    client = Client(lambda origin, data: None, port=server.address[1], shutdown_timeout=0.1)
    client.connect("127.0.0.1")
    received.get(timeout=5)
    client.shutdown()
    _, data = received.get(timeout=5)
    assert decode_packet(data) == packet_disconnect(0)
    assert _wait_until(lambda: not server.is_connected(0))


def test_full_server_refuses_with_disconnect():
    server = Server(lambda origin, data: None, host="127.0.0.1", port=0, max_players=1)
    server.start()
    try:
        first = socket.create_connection(server.address)
        assert _wait_until(lambda: server.is_connected(0))
        second = socket.create_connection(server.address)
        with first, second:
            second.settimeout(5)
            assert read_frame(second) == encode_packet(packet_disconnect(0))
            assert read_frame(second) is None
    finally:
        server.shutdown()


def test_send_to_unknown_connection_raises(server_setup):
    server, _ = server_setup
    with pytest.raises(KeyError):
        server.send_to(4, packet_connect())


def test_client_invalid_hostname():
    client = Client(lambda origin, data: None)
    with pytest.raises(ValueError):
        client.connect("not an address")


def test_client_connection_refused():
    client = Client(lambda origin, data: None, port=_free_port())
    with pytest.raises(ConnectionError):
        client.connect("127.0.0.1")
    assert not client.connected


def test_client_send_without_connection():
    client = Client(lambda origin, data: None)
    with pytest.raises(ConnectionError):
        client.send(b"\x00\x00\x00\x00\x00")


def test_server_address_only_after_start():
    server = Server(lambda origin, data: None, host="127.0.0.1", port=0)
    with pytest.raises(RuntimeError) as excinfo:
        server.address
    assert excinfo.type is RuntimeError
    server.start()
    try:
        host, port = server.address
        assert host == "127.0.0.1"
        assert port > 0
    finally:
        server.shutdown()