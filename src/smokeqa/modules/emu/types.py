"""
Device transport types and the protocol every flow component talks to.

This is a typing-only contract; the ADB-backed implementation lives in
adapter.py and tests provide their own fakes.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from ...core.constants import AppState


POINTER_KINDS = ("move", "down", "pause", "up")

_BOUNDS_PATTERN = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


@dataclass(frozen=True)
class PointerOp:
    kind: str
    x: int = 0
    y: int = 0
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if self.kind not in POINTER_KINDS:
            raise ValueError(f"Unknown pointer op: {self.kind}")


@dataclass(frozen=True)
class UiNode:
    text: str
    resource_id: str
    bounds: Tuple[int, int, int, int]  # x1,y1,x2,y2
    clickable: bool = False

    @property
    def center(self) -> Tuple[int, int]:
        x1, y1, x2, y2 = self.bounds
        return ((x1 + x2) // 2, (y1 + y2) // 2)


def parse_ui_nodes(xml_text: str) -> List[UiNode]:
    """Parse a uiautomator hierarchy dump into a flat node list."""
    start = xml_text.find("<")
    if start == -1:
        return []
    root = ET.fromstring(xml_text[start:])
    nodes: List[UiNode] = []
    for el in root.iter("node"):
        m = _BOUNDS_PATTERN.fullmatch(el.get("bounds", ""))
        if not m:
            continue
        nodes.append(
            UiNode(
                text=el.get("text", ""),
                resource_id=el.get("resource-id", ""),
                bounds=tuple(int(v) for v in m.groups()),  # type: ignore[arg-type]
                clickable=el.get("clickable") == "true",
            )
        )
    return nodes


class DeviceProtocol(Protocol):
    implicit_wait_sec: float

    def implicit_wait(self, seconds: float) -> AbstractContextManager[float]:
        """Temporarily override the ambient wait; always restored on exit."""
        ...

    def activate_app(self, pkg: str) -> None: ...

    def current_foreground_app(self) -> Optional[str]: ...

    def query_app_state(self, pkg: str) -> AppState: ...

    def send_pointer_sequence(self, ops: Sequence[PointerOp]) -> None: ...

    def capture(self) -> bytes: ...

    def screen_size(self) -> Tuple[int, int]: ...

    def back(self) -> None: ...

    def clear_app_data(self, pkg: str) -> None: ...

    def find_text(self, text: str) -> Optional[UiNode]: ...

    def find_resource_id(self, resource_id: str) -> Optional[UiNode]: ...

    def visible_texts(self, contains: str = "") -> List[str]: ...

    def quit(self) -> None: ...


__all__ = ["PointerOp", "UiNode", "parse_ui_nodes", "DeviceProtocol", "POINTER_KINDS"]
