"""Packet capture, Ethernet frame dissection and a Tk packet viewer."""

__version__ = "0.1.0"
__all__ = ["__version__"]