import socket
import struct

import pytest

from chiswire.capture import ChannelClosed
from chiswire.sniffer import (
    FilterChanged,
    PacketReceived,
    SelectInterface,
    SelectPacket,
    Sniffer,
    StartCapture,
    StopCapture,
    Tick,
)


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, name, channel):
        self.calls.append((name, channel))


def frame(src, dst, proto=6):
    eth = b"\x02\x00\x00\x00\x00\x02" + b"\x02\x00\x00\x00\x00\x01" + struct.pack("!H", 0x0800)
    if proto == 6:
        transport = struct.pack("!HHIIHHHH", 1000, 80, 1, 0, 0x5000, 0, 0, 0)
    else:
        transport = struct.pack("!HHHH", 5353, 53, 8, 0)
    ip = struct.pack(
        "!BBHHHBBH4s4s",
        0x45, 0, 20 + len(transport), 0, 0, 64, proto, 0,
        socket.inet_aton(src), socket.inet_aton(dst),
    )
    return eth + ip + transport


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def sniffer(recorder):
    return Sniffer(["eth0", "lo"], recorder)


def started(sniffer):
    sniffer.update(StartCapture())
    return sniffer.receiver


def test_initial_state(sniffer):
    assert sniffer.selected_interface == "eth0"
    assert sniffer.status_message == "Ready. Select an interface and start capture."
    assert sniffer.packets == []
    assert sniffer.is_capturing is False
    assert sniffer.tick_interval is None


def test_no_interfaces_means_no_selection(recorder):
    sniffer = Sniffer([], recorder)
    assert sniffer.selected_interface is None
    sniffer.update(StartCapture())
    assert sniffer.status_message == "Error: No interface selected!"
    assert recorder.calls == []
    assert sniffer.is_capturing is False


def test_title(sniffer):
    assert sniffer.title() == "Chiswire - A Simple Packet Sniffer"


def test_select_interface_when_idle(sniffer):
    sniffer.update(SelectInterface("lo"))
    assert sniffer.selected_interface == "lo"


def test_select_interface_ignored_while_capturing(sniffer):
    started(sniffer)
    sniffer.update(SelectInterface("lo"))
    assert sniffer.selected_interface == "eth0"


def test_start_capture_spawns_once(sniffer, recorder):
    channel = started(sniffer)
    assert recorder.calls == [("eth0", channel)]
    assert sniffer.is_capturing is True
    assert sniffer.status_message == "Capturing on eth0..."
    assert sniffer.tick_interval == pytest.approx(0.05)
    sniffer.update(StartCapture())
    assert len(recorder.calls) == 1


def test_tick_drains_channel(sniffer):
    channel = started(sniffer)
    channel.send(frame("10.0.0.1", "10.0.0.2"))
    channel.send(frame("192.168.1.5", "10.0.0.2", proto=17))
    sniffer.update(Tick())
    assert [p.source for p in sniffer.packets] == ["10.0.0.1", "192.168.1.5"]
    assert sniffer.filtered_packets == sniffer.packets
    assert list(channel.try_iter()) == []


def test_tick_drops_frames_that_cannot_be_dissected(sniffer):
    channel = started(sniffer)
    channel.send(b"\x00\x01\x02")
    channel.send(frame("10.0.0.1", "10.0.0.2"))
    sniffer.update(Tick())
    assert [p.source for p in sniffer.packets] == ["10.0.0.1"]


def test_tick_without_capture_does_nothing(sniffer):
    sniffer.update(Tick())
    assert sniffer.packets == []


def test_packet_received_appends(sniffer):
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    sniffer.update(PacketReceived(b"short"))
    assert [p.destination for p in sniffer.packets] == ["10.0.0.2"]
    assert sniffer.filtered_packets == sniffer.packets


def test_filter_is_case_insensitive(sniffer):
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    sniffer.update(PacketReceived(frame("192.168.1.5", "10.0.0.2", proto=17)))
    sniffer.update(FilterChanged("udp"))
    assert [p.protocol for p in sniffer.filtered_packets] == ["UDP"]
    sniffer.update(FilterChanged("192.168.1.5"))
    assert [p.source for p in sniffer.filtered_packets] == ["192.168.1.5"]
    sniffer.update(FilterChanged(""))
    assert sniffer.filtered_packets == sniffer.packets


def test_filter_applies_to_new_packets(sniffer):
    sniffer.update(FilterChanged("tcp"))
    sniffer.update(PacketReceived(frame("192.168.1.5", "10.0.0.2", proto=17)))
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    assert len(sniffer.packets) == 2
    assert [p.protocol for p in sniffer.filtered_packets] == ["TCP"]


def test_select_packet(sniffer):
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    sniffer.update(SelectPacket(0))
    assert sniffer.selected_packet == sniffer.filtered_packets[0]
    sniffer.update(SelectPacket(5))
    assert sniffer.selected_packet is None
    sniffer.update(SelectPacket(-1))
    assert sniffer.selected_packet is None


def test_filter_clears_hidden_selection(sniffer):
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    sniffer.update(PacketReceived(frame("192.168.1.5", "10.0.0.2", proto=17)))
    sniffer.update(SelectPacket(1))
    kept = sniffer.selected_packet
    sniffer.update(FilterChanged("192.168"))
    assert sniffer.selected_packet == kept
    sniffer.update(FilterChanged("tcp"))
    assert sniffer.selected_packet is None


def test_start_clears_previous_packets(sniffer):
    sniffer.update(PacketReceived(frame("10.0.0.1", "10.0.0.2")))
    sniffer.update(SelectPacket(0))
    started(sniffer)
    assert sniffer.packets == []
    assert sniffer.filtered_packets == []
    assert sniffer.selected_packet is None


def test_stop_capture_closes_channel(sniffer):
    channel = started(sniffer)
    sniffer.update(StopCapture())
    assert sniffer.is_capturing is False
    assert sniffer.receiver is None
    assert sniffer.status_message == "Capture stopped."
    with pytest.raises(ChannelClosed):
        channel.send(frame("10.0.0.1", "10.0.0.2"))


def test_unknown_message_rejected(sniffer):
    with pytest.raises(TypeError):
        sniffer.update("Tick")