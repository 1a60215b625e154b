"""Input events consumed by the designer."""
from __future__ import annotations

from dataclasses import dataclass

# 210mm x 297mm at 96 dpi.
A4_WIDTH = 794
A4_HEIGHT = 1123


@dataclass(frozen=True)
class CanvasRect:
    """Bounding rectangle of the canvas in client coordinates."""

    left: float = 0
    top: float = 0
    width: float = A4_WIDTH
    height: float = A4_HEIGHT


@dataclass
class _Event:
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass
class PointerEvent(_Event):
    client_x: float = 0
    client_y: float = 0

    @classmethod
    def at(cls, client_x: float, client_y: float) -> "PointerEvent":
        return cls(client_x=client_x, client_y=client_y)


@dataclass
class KeyEvent(_Event):
    key: str = ""
    ctrl: bool = False
    meta: bool = False

    @property
    def command(self) -> bool:
        """True when Ctrl (or Cmd on macOS) is held."""

        return self.ctrl or self.meta
