"""Live packet capture on a network interface."""

from __future__ import annotations

import logging
import queue
import socket
import struct
import threading
from collections.abc import Iterator

log = logging.getLogger(__name__)

_ETH_P_ALL = 0x0003
_SOL_PACKET = 263
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1
_SNAPLEN = 65535


class ChannelClosed(Exception):
    """Raised when sending on a channel whose receiver has gone away."""


class PacketChannel:
    """Thread-safe queue of raw frames from the capture thread to the consumer."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[bytes] = queue.SimpleQueue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, data: bytes) -> None:
        """Queue a frame; raise ChannelClosed once the receiver has closed."""
        if self._closed.is_set():
            raise ChannelClosed("receiver closed")
        self._queue.put(bytes(data))

    def try_iter(self) -> Iterator[bytes]:
        """Yield every queued frame without blocking."""
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def close(self) -> None:
        """Close the receiving end and discard anything still queued."""
        self._closed.set()
        for _ in self.try_iter():
            pass


def _interfaces() -> list[tuple[int, str]]:
    return list(socket.if_nameindex())


def list_interfaces() -> list[str]:
    """Names of the network interfaces on this host."""
    return [name for _, name in _interfaces()]


def _open_channel(index: int, name: str) -> socket.socket:
    family = getattr(socket, "AF_PACKET", None)
    if family is None:
        raise OSError(
            "An error occurred when creating the datalink channel: "
            "raw packet sockets are not supported on this platform"
        )
    try:
        sock = socket.socket(family, socket.SOCK_RAW, socket.ntohs(_ETH_P_ALL))
    except OSError as exc:
        raise OSError(f"An error occurred when creating the datalink channel: {exc}") from exc
    try:
        sock.bind((name, 0))
        membership = struct.pack("iHH8s", index, _PACKET_MR_PROMISC, 0, b"")
        try:
            sock.setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, membership)
        except OSError as exc:
            log.warning("Could not enable promiscuous mode on %s: %s", name, exc)
    except OSError as exc:
        sock.close()
        raise OSError(f"An error occurred when creating the datalink channel: {exc}") from exc
    return sock


def start_capture(interface_name: str, sender: PacketChannel) -> None:
    """Capture frames on an interface and send them until the channel closes."""
    index = next((i for i, name in _interfaces() if name == interface_name), None)
    if index is None:
        raise ValueError("Failed to find the specified network interface.")
    sock = _open_channel(index, interface_name)
    log.info("Starting packet capture on thread...")
    try:
        while True:
            try:
                packet = sock.recv(_SNAPLEN)
            except OSError as exc:
                log.error("An error occurred while reading: %s", exc)
                continue
            try:
                sender.send(packet)
            except ChannelClosed:
                log.info("GUI receiver dropped. Stopping capture thread.")
                break
    finally:
        sock.close()