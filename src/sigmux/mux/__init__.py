"""Pane multiplexer — grid layout, resize math and display modes."""

from sigmux.mux.manager import CapacityRejected, DisplayMode, PaneMultiplexer, PaneView

__all__ = [
    "CapacityRejected",
    "DisplayMode",
    "PaneMultiplexer",
    "PaneView",
]
