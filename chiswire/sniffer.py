"""Application state and event handling for the packet sniffer."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional, Union

from chiswire.capture import PacketChannel, list_interfaces, start_capture
from chiswire.dissector import PacketInfo, dissect_packet

TICK_INTERVAL = 0.05

CaptureSpawner = Callable[[str, PacketChannel], None]


@dataclass(frozen=True)
class SelectInterface:
    """Choose the interface to capture on."""

    name: str


@dataclass(frozen=True)
class StartCapture:
    """Begin capturing on the selected interface."""


@dataclass(frozen=True)
class StopCapture:
    """Stop the running capture."""


@dataclass(frozen=True)
class PacketReceived:
    """A single raw frame delivered directly."""

    data: bytes


@dataclass(frozen=True)
class Tick:
    """Periodic poll for frames waiting in the capture channel."""


@dataclass(frozen=True)
class FilterChanged:
    """The display filter text changed."""

    text: str


@dataclass(frozen=True)
class SelectPacket:
    """Select a packet by its position in the filtered list."""

    index: int


Message = Union[
    SelectInterface,
    StartCapture,
    StopCapture,
    PacketReceived,
    Tick,
    FilterChanged,
    SelectPacket,
]


def _spawn_capture_thread(interface_name: str, channel: PacketChannel) -> None:
    threading.Thread(
        target=start_capture,
        args=(interface_name, channel),
        name=f"capture-{interface_name}",
        daemon=True,
    ).start()


class Sniffer:
    """State of the sniffer: captured packets, filter, selection and status."""

    def __init__(
        self,
        interfaces: Optional[Iterable[str]] = None,
        capture: Optional[CaptureSpawner] = None,
    ) -> None:
        self.available_interfaces: list[str] = list(
            list_interfaces() if interfaces is None else interfaces
        )
        self._spawn: CaptureSpawner = capture or _spawn_capture_thread
        self.is_capturing = False
        self.packets: list[PacketInfo] = []
        self.filtered_packets: list[PacketInfo] = []
        self.selected_interface: Optional[str] = (
            self.available_interfaces[0] if self.available_interfaces else None
        )
        self.display_filter = ""
        self.selected_packet: Optional[PacketInfo] = None
        self.status_message = "Ready. Select an interface and start capture."
        self.receiver: Optional[PacketChannel] = None

    @property
    def tick_interval(self) -> Optional[float]:
        """Seconds between polls while capturing, or None when idle."""
        return TICK_INTERVAL if self.is_capturing else None

    def title(self) -> str:
        return "Chiswire - A Simple Packet Sniffer"

    def update(self, message: Message) -> None:
        """Apply one message to the state."""
        match message:
            case SelectInterface(name=name):
                if not self.is_capturing:
                    self.selected_interface = name
            case StartCapture():
                self._start()
            case StopCapture():
                self.is_capturing = False
                if self.receiver is not None:
                    self.receiver.close()
                self.receiver = None
                self.status_message = "Capture stopped."
            case PacketReceived(data=data):
                packet = dissect_packet(data)
                if packet is not None:
                    self.packets.append(packet)
                    self._apply_display_filter()
            case Tick():
                if self.receiver is not None:
                    self._ingest(self.receiver.try_iter())
                    self._apply_display_filter()
            case FilterChanged(text=text):
                self.display_filter = text
                self._apply_display_filter()
            case SelectPacket(index=index):
                if 0 <= index < len(self.filtered_packets):
                    self.selected_packet = self.filtered_packets[index]
                else:
                    self.selected_packet = None
            case _:
                raise TypeError(f"unknown message: {message!r}")

    def _start(self) -> None:
        interface = self.selected_interface
        if interface is None:
            self.status_message = "Error: No interface selected!"
            return
        if self.is_capturing:
            return
        self.is_capturing = True
        self.packets.clear()
        self.filtered_packets.clear()
        self.selected_packet = None
        self.status_message = f"Capturing on {interface}..."
        channel = PacketChannel()
        self.receiver = channel
        self._spawn(interface, channel)

    def _ingest(self, frames: Iterable[bytes]) -> None:
        for data in frames:
            packet = dissect_packet(data)
            if packet is not None:
                self.packets.append(packet)

    def _matches(self, packet: PacketInfo, needle: str) -> bool:
        return any(
            needle in field_value.lower()
            for field_value in (packet.source, packet.destination, packet.protocol, packet.info)
        )

    def _apply_display_filter(self) -> None:
        if not self.display_filter:
            self.filtered_packets = list(self.packets)
        else:
            needle = self.display_filter.lower()
            self.filtered_packets = [p for p in self.packets if self._matches(p, needle)]
        if self.selected_packet is not None and self.selected_packet not in self.filtered_packets:
            self.selected_packet = None