# chiswire

A small packet sniffer with a Tk window. It captures Ethernet frames from a
network interface, dissects them layer by layer and shows them in a live
list, together with a protocol breakdown and a hex dump of the packet you
select.

## What it understands

- Ethernet II frames
- IPv4 and IPv6, with TCP and UDP summaries (ports, sequence and
  acknowledgement numbers, UDP length)
- ICMP and ICMPv6, recognised by protocol number only
- ARP, summarised as "Who has X? Tell Y" with the destination shown as
  `Broadcast`
- Any other EtherType is listed with its hex value, e.g. `0x88cc`, and the
  info "Unknown L3 protocol"

Other IP protocols are shown as `Protocol: <name>` with an empty info column.

## Installing

```
pip install .
```

The package needs nothing beyond the Python standard library. The window
uses `tkinter`, so your Python must have Tk support.

## Running

```
chiswire
```

The same window can be opened with `python -m chiswire.app`.

Capturing uses raw `AF_PACKET` sockets, so it works on Linux only and
usually needs root privileges (or the `CAP_NET_RAW` capability). The
interface is put into promiscuous mode where possible; if that fails a
warning is logged and capture goes on. On other platforms, or without the
needed privileges, the capture thread fails with an `OSError`.

In the window:

1. Pick an interface from the buttons at the top. The first interface is
   selected at start-up; the choice cannot be changed while capturing.
2. Press **Start** to begin capturing, **Stop** to end it. Starting a new
   capture clears the previous packet list. While capturing, waiting
   frames are collected every 50 ms.
3. Type in the filter box to narrow the list. The filter is a
   case-insensitive substring match against the source, destination,
   protocol and info columns, so `tcp` or `192.168.1.1` both work. A
   selected packet that no longer matches is deselected.
4. Click a packet to see its detailed dissection and hex dump.

## Using it from Python

`chiswire.dissector` works on any bytes object holding an Ethernet frame:

```python
from chiswire.dissector import dissect_packet, pretty_hex

info = dissect_packet(frame_bytes)
if info is not None:
    print(info.source, info.destination, info.protocol, info.length, info.info)
    print(info.detailed_info)
    print(info.hex_dump)
```

`dissect_packet` returns a frozen `PacketInfo`, or `None` when the data is
too short to be a frame of the protocol it claims to carry. A TCP or UDP
header that is too short gives the info "Malformed Packet" instead.
`pretty_hex(data)` renders any bytes as a hex dump with offsets and an
ASCII column.

The application state in `chiswire.sniffer` can be driven without a window.
It is updated with message objects (`SelectInterface`, `StartCapture`,
`StopCapture`, `PacketReceived`, `Tick`, `FilterChanged`, `SelectPacket`):

```python
from chiswire.sniffer import Sniffer, FilterChanged, PacketReceived, SelectPacket

sniffer = Sniffer(interfaces=["eth0"])
sniffer.update(PacketReceived(frame_bytes))
sniffer.update(FilterChanged("udp"))
sniffer.update(SelectPacket(0))
print(sniffer.filtered_packets, sniffer.selected_packet, sniffer.status_message)
```

With `interfaces` left out, the host's interfaces are listed. The
`capture` argument is a callable taking an interface name and a
`chiswire.capture.PacketChannel`; by default `StartCapture` runs
`chiswire.capture.start_capture` in a background thread. `StopCapture`
closes the channel, which ends that thread once its next frame arrives.

## What it does not do

- It does not save captures to a file or read them back; packets live only
  in memory for the current capture.
- It has no capture filters; every frame on the interface is taken and
  only the display filter narrows what is shown.
- It does not dissect anything above TCP and UDP (no HTTP, TLS, DNS and
  so on).

## Running the tests

```
pip install .[test]
pytest
```