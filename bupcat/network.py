"""TCP transport for game packets: length-prefixed frames, a server, a client
and a queue that hands received packets to the game loop."""

from __future__ import annotations

import socket
import struct
import threading
from collections.abc import Callable
from typing import Optional, Union

from .packets import (
    DISCONNECT,
    Packet,
    build_registry,
    decode_packet,
    encode_packet,
    packet_connect,
    packet_disconnect,
)
from .serial import SerialError

PORT = 42069
MAX_PLAYERS = 16
LISTEN_BACKLOG = 3

_LENGTH = struct.Struct("<I")
_REGISTRY = build_registry()
_DISCONNECT_ID = _REGISTRY.type_id(DISCONNECT)

PacketCallback = Callable[[int, bytes], None]
Payload = Union[Packet, bytes, bytearray]


def frame(payload: bytes) -> bytes:
    """Prefix ``payload`` with its length as a little-endian ``uint32``."""
    return _LENGTH.pack(len(payload)) + bytes(payload)


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            break
        chunks += chunk
    return bytes(chunks)


def read_frame(sock: socket.socket) -> Optional[bytes]:
    """Read one frame's payload; return None when the peer closed cleanly.

    Raises ``ConnectionError`` when the stream ends in the middle of a frame.
    """
    header = _recv_exact(sock, _LENGTH.size)
    if not header:
        return None
    if len(header) < _LENGTH.size:
        raise ConnectionError("connection closed inside a frame header")
    (length,) = _LENGTH.unpack(header)
    payload = _recv_exact(sock, length)
    if len(payload) < length:
        raise ConnectionError("connection closed inside a frame")
    return payload


def _to_bytes(payload: Payload) -> bytes:
    if isinstance(payload, Packet):
        return encode_packet(payload)
    return bytes(payload)


def _type_id(data: bytes) -> Optional[int]:
    if len(data) < _LENGTH.size:
        return None
    return _LENGTH.unpack_from(data)[0]


class PacketQueue:
    """Thread-safe queue of raw packets, drained once per frame by the game loop."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: list[tuple[int, bytes]] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def push(self, origin: int, data: bytes) -> bool:
        """Queue ``data`` from ``origin``; packets of unknown type are dropped.

        Returns whether the packet was queued.
        """
        type_id = _type_id(data)
        if type_id is None or type_id >= len(_REGISTRY):
            return False
        with self._lock:
            self._pending.append((origin, bytes(data)))
        return True

    def process(self, handler: Callable[[int, Packet], None]) -> int:
        """Decode every queued packet and pass it to ``handler`` in arrival order.

        Packets that fail to decode are skipped. Returns the number handled.
        """
        with self._lock:
            pending, self._pending = self._pending, []
        handled = 0
        for origin, data in pending:
            try:
                packet = decode_packet(data)
            except SerialError:
                continue
            handler(origin, packet)
            handled += 1
        return handled


class Server:
    """Accepts up to ``max_players`` connections and forwards their frames.

    ``callback(connection, data)`` runs on the connection's reader thread.
    """

    def __init__(
        self,
        callback: PacketCallback,
        host: str = "",
        port: int = PORT,
        max_players: int = MAX_PLAYERS,
    ) -> None:
        self._callback = callback
        self._host = host
        self._port = port
        self._max_players = max_players
        self._sock: Optional[socket.socket] = None
        self._lock = threading.Lock()
        self._send_lock = threading.Lock()
        self._connections: dict[int, socket.socket] = {}
        self._threads: list[threading.Thread] = []
        self._accept_thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        """The address the server listens on."""
        if self._sock is None:
            raise RuntimeError("server is not started")
        return self._sock.getsockname()[:2]

    def is_connected(self, connection: int) -> bool:
        with self._lock:
            return connection in self._connections

    def start(self) -> None:
        """Bind, listen and start accepting connections in the background."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._port))
            sock.listen(LISTEN_BACKLOG)
        except OSError:
            sock.close()
            raise
        sock.settimeout(0.1)
        self._sock = sock
        self._stop.clear()
        self._accept_thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._accept_thread.start()

    def _free_slot(self) -> Optional[int]:
        return next(
            (i for i in range(self._max_players) if i not in self._connections), None
        )

    def _accept_loop(self) -> None:
        assert self._sock is not None
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            conn.setblocking(True)
            with self._lock:
                slot = self._free_slot()
                if slot is not None:
                    self._connections[slot] = conn
            if slot is None:
                try:
                    conn.sendall(frame(encode_packet(packet_disconnect(0))))
                except OSError:
                    pass
                conn.close()
                continue
            thread = threading.Thread(
                target=self._connection_loop, args=(slot, conn), daemon=True
            )
            self._threads.append(thread)
            thread.start()

    def _connection_loop(self, slot: int, conn: socket.socket) -> None:
        try:
            while True:
                data = read_frame(conn)
                if data is None:
                    break
                self._callback(slot, data)
        except OSError:
            pass
        finally:
            with self._lock:
                if self._connections.get(slot) is conn:
                    del self._connections[slot]
            conn.close()

    def send_to(self, connection: int, payload: Payload) -> None:
        """Send one framed packet to the given connection slot."""
        with self._lock:
            conn = self._connections.get(connection)
        if conn is None:
            raise KeyError(f"no connection {connection}")
        with self._send_lock:
            conn.sendall(frame(_to_bytes(payload)))

    def shutdown(self) -> None:
        """Tell every client to disconnect, then close all sockets."""
        self._stop.set()
        with self._lock:
            connections = list(self._connections.values())
        goodbye = frame(encode_packet(packet_disconnect(0)))
        for conn in connections:
            try:
                conn.sendall(goodbye)
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        if self._sock is not None:
            self._sock.close()
        if self._accept_thread is not None:
            self._accept_thread.join()
            self._accept_thread = None
        for thread in self._threads:
            thread.join()
        self._threads.clear()
        self._sock = None


class Client:
    """Connects to a server and forwards received frames to ``callback``.

    ``callback(0, data)`` runs on the reader thread. A disconnect packet from
    the server ends the connection.
    """

    def __init__(
        self,
        callback: PacketCallback,
        port: int = PORT,
        player_id: int = 0,
        shutdown_timeout: float = 1.0,
    ) -> None:
        self._callback = callback
        self._port = port
        self.player_id = player_id
        self._shutdown_timeout = shutdown_timeout
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._connected = threading.Event()
        self._send_lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def connect(self, hostname: str) -> None:
        """Connect to ``hostname`` (an IPv4 address or ``localhost``) and say hello."""
        address = "127.0.0.1" if hostname == "localhost" else hostname
        try:
            socket.inet_pton(socket.AF_INET, address)
        except OSError:
            raise ValueError(f"invalid hostname: {hostname!r}") from None
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect((address, self._port))
        except OSError as exc:
            sock.close()
            raise ConnectionError(f"connection failed: {exc}") from exc
        self._sock = sock
        self._connected.set()
        self._thread = threading.Thread(target=self._reader, args=(sock,), daemon=True)
        self._thread.start()
        self.send(packet_connect())

    def _reader(self, sock: socket.socket) -> None:
        try:
            while True:
                data = read_frame(sock)
                if data is None or _type_id(data) == _DISCONNECT_ID:
                    break
                self._callback(0, data)
        except OSError:
            pass
        finally:
            self._connected.clear()

    def send(self, payload: Payload) -> None:
        """Send one framed packet to the server."""
        if self._sock is None:
            raise ConnectionError("not connected")
        with self._send_lock:
            self._sock.sendall(frame(_to_bytes(payload)))

    def shutdown(self) -> None:
        """Announce the disconnect, wait briefly for the server, then close."""
        if self._sock is None:
            return
        try:
            self.send(packet_disconnect(self.player_id))
        except OSError:
            pass
        if self._thread is not None:
            self._thread.join(self._shutdown_timeout)
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._sock = None
        self._connected.clear()