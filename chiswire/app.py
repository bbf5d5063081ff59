"""Desktop window for the packet sniffer."""

from __future__ import annotations

import argparse
import logging
from typing import TYPE_CHECKING, Optional, Sequence

from chiswire.dissector import PacketInfo
from chiswire.sniffer import (
    FilterChanged,
    Message,
    SelectInterface,
    SelectPacket,
    Sniffer,
    StartCapture,
    StopCapture,
    Tick,
)

if TYPE_CHECKING:
    import tkinter as tk

_COLUMNS = (
    ("No.", 50),
    ("Source", 220),
    ("Destination", 220),
    ("Protocol", 100),
    ("Length", 100),
    ("Info", 420),
)
_FILTER_HINT = "Display filter (e.g., 'TCP' or '192.168.1.1')"
_NO_DETAILS = "Select a packet to see details"
_NO_HEX = "Select a packet to see hex dump"


def format_packet_row(index: int, packet: PacketInfo) -> tuple[str, ...]:
    """Column values for a packet at a zero-based position in the list."""
    return (
        str(index + 1),
        packet.source,
        packet.destination,
        packet.protocol,
        str(packet.length),
        packet.info,
    )


class SnifferWindow:
    """Tk view of a Sniffer that turns user actions into messages."""

    def __init__(self, root: "tk.Tk", sniffer: Sniffer) -> None:
        import tkinter as tk
        from tkinter import ttk

        self._tk = tk
        self.root = root
        self.sniffer = sniffer
        self._tick_job: Optional[str] = None
        self._syncing_filter = False
        self._shown: list[PacketInfo] = []

        root.title(sniffer.title())
        root.protocol("WM_DELETE_WINDOW", self._on_close)

        outer = ttk.Frame(root, padding=20)
        outer.pack(fill=tk.BOTH, expand=True)
        outer.columnconfigure(0, weight=1)

        controls = ttk.Frame(outer, padding=10)
        controls.grid(row=0, column=0, sticky="ew")
        ttk.Label(controls, text="Interface:").pack(side=tk.LEFT, padx=(0, 10))
        self._interface_buttons: dict[str, tk.Button] = {}
        for name in sniffer.available_interfaces:
            button = tk.Button(
                controls, text=name,
                command=lambda n=name: self._dispatch(SelectInterface(n)),
            )
            button.pack(side=tk.LEFT, padx=(0, 10))
            self._interface_buttons[name] = button
        self._toggle = ttk.Button(controls, command=self._toggle_capture, padding=10)
        self._toggle.pack(side=tk.LEFT, padx=20)
        self._filter = tk.StringVar(value=sniffer.display_filter)
        ttk.Entry(controls, textvariable=self._filter).pack(
            side=tk.LEFT, fill=tk.X, expand=True
        )
        ttk.Label(controls, text=_FILTER_HINT, foreground="gray").pack(side=tk.LEFT, padx=10)
        self._filter.trace_add("write", self._on_filter)

        list_frame = ttk.Frame(outer)
        list_frame.grid(row=1, column=0, sticky="nsew")
        list_frame.columnconfigure(0, weight=1)
        list_frame.rowconfigure(0, weight=1)
        self._tree = ttk.Treeview(
            list_frame, columns=[title for title, _ in _COLUMNS],
            show="headings", selectmode="browse",
        )
        for title, width in _COLUMNS:
            self._tree.heading(title, text=title)
            self._tree.column(title, width=width, stretch=title not in ("No.", "Protocol", "Length"))
        tree_scroll = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self._tree.yview)
        self._tree.configure(yscrollcommand=tree_scroll.set)
        self._tree.grid(row=0, column=0, sticky="nsew")
        tree_scroll.grid(row=0, column=1, sticky="ns")
        self._tree.bind("<<TreeviewSelect>>", self._on_select)

        ttk.Label(outer, text="Packet Details:", font=("TkDefaultFont", 14)).grid(
            row=2, column=0, sticky="w", pady=(10, 0)
        )
        self._details = self._text_pane(outer, row=3)
        ttk.Label(outer, text="Hex Dump:", font=("TkDefaultFont", 14)).grid(
            row=4, column=0, sticky="w", pady=(10, 0)
        )
        self._hex = self._text_pane(outer, row=5)

        self._status = tk.StringVar()
        ttk.Label(outer, textvariable=self._status).grid(row=6, column=0, sticky="w", pady=(10, 0))

        outer.rowconfigure(1, weight=2)
        outer.rowconfigure(3, weight=1)
        outer.rowconfigure(5, weight=1)

        self.refresh()
        self._schedule_tick()

    def _text_pane(self, parent, row: int) -> "tk.Text":
        from tkinter import ttk

        frame = ttk.Frame(parent)
        frame.grid(row=row, column=0, sticky="nsew")
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(0, weight=1)
        widget = self._tk.Text(frame, height=8, wrap=self._tk.NONE, font="TkFixedFont")
        scroll = ttk.Scrollbar(frame, orient=self._tk.VERTICAL, command=widget.yview)
        widget.configure(yscrollcommand=scroll.set, state=self._tk.DISABLED)
        widget.grid(row=0, column=0, sticky="nsew")
        scroll.grid(row=0, column=1, sticky="ns")
        return widget

    def _set_text(self, widget: "tk.Text", content: str) -> None:
        widget.configure(state=self._tk.NORMAL)
        widget.delete("1.0", self._tk.END)
        widget.insert("1.0", content)
        widget.configure(state=self._tk.DISABLED)

    def refresh(self) -> None:
        """Redraw every part of the window from the sniffer's state."""
        tk = self._tk
        state = self.sniffer
        for name, button in self._interface_buttons.items():
            button.configure(relief=tk.SUNKEN if name == state.selected_interface else tk.RAISED)
        self._toggle.configure(text="Stop" if state.is_capturing else "Start")

        if self._filter.get() != state.display_filter:
            self._syncing_filter = True
            try:
                self._filter.set(state.display_filter)
            finally:
                self._syncing_filter = False

        if state.filtered_packets != self._shown:
            self._tree.delete(*self._tree.get_children())
            for index, packet in enumerate(state.filtered_packets):
                self._tree.insert("", tk.END, iid=str(index), values=format_packet_row(index, packet))
            self._shown = list(state.filtered_packets)

        selected = state.selected_packet
        if selected is not None and selected in state.filtered_packets:
            iid = str(state.filtered_packets.index(selected))
            if self._tree.selection() != (iid,):
                self._tree.selection_set(iid)
            self._set_text(self._details, selected.detailed_info)
            self._set_text(self._hex, selected.hex_dump)
        else:
            if self._tree.selection():
                self._tree.selection_remove(*self._tree.selection())
            self._set_text(self._details, _NO_DETAILS)
            self._set_text(self._hex, _NO_HEX)

        self._status.set(state.status_message)

    def _dispatch(self, message: Message) -> None:
        self.sniffer.update(message)
        self.refresh()
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        interval = self.sniffer.tick_interval
        if interval is None:
            if self._tick_job is not None:
                self.root.after_cancel(self._tick_job)
                self._tick_job = None
            return
        if self._tick_job is None:
            self._tick_job = self.root.after(int(interval * 1000), self._on_tick)

    def _on_tick(self) -> None:
        self._tick_job = None
        self._dispatch(Tick())

    def _toggle_capture(self) -> None:
        self._dispatch(StopCapture() if self.sniffer.is_capturing else StartCapture())

    def _on_filter(self, *_args: object) -> None:
        if not self._syncing_filter:
            self._dispatch(FilterChanged(self._filter.get()))

    def _on_select(self, _event: object) -> None:
        selection = self._tree.selection()
        if not selection:
            return
        index = int(selection[0])
        packets = self.sniffer.filtered_packets
        if index < len(packets) and packets[index] == self.sniffer.selected_packet:
            return
        self._dispatch(SelectPacket(index))

    def _on_close(self) -> None:
        if self.sniffer.is_capturing:
            self.sniffer.update(StopCapture())
        if self._tick_job is not None:
            self.root.after_cancel(self._tick_job)
            self._tick_job = None
        self.root.destroy()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the sniffer window and run until it is closed."""
    parser = argparse.ArgumentParser(
        prog="chiswire", description="Capture and inspect network packets."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    import tkinter as tk

    root = tk.Tk()
    root.geometry("1200x800")
    SnifferWindow(root, Sniffer())
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())