"""
合成触摸手势：点击与拖拽

坐标按屏幕比例表示，使用前实时读取屏幕尺寸换算为像素，从不缓存
（设备方向可能在两次调用之间改变）。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ...core.constants import DragMode
from ...core.logger import logger
from .types import DeviceProtocol, PointerOp


MIN_DRAG_MS = 50
DRAG_DISTANCE_RATIO = 0.2  # 拖拽距离 = 屏宽的 20%
OFFSET_RATIO = 0.1  # offset 变体起点相对中心右下偏移 10%


@dataclass(frozen=True)
class ScreenCoordinate:
    fx: float
    fy: float

    def __post_init__(self) -> None:
        if not (0 <= self.fx <= 1 and 0 <= self.fy <= 1):
            raise ValueError(f"Screen fractions must be within [0, 1], got ({self.fx}, {self.fy})")

    def resolve(self, size: Tuple[int, int]) -> Tuple[int, int]:
        w, h = size
        return min(int(w * self.fx), w - 1), min(int(h * self.fy), h - 1)


@dataclass(frozen=True)
class DragPlan:
    start: Tuple[int, int]
    end: Tuple[int, int]
    distance: int


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def plan_cheek_drag(width: int, height: int, mode: DragMode = DragMode.ADAPTIVE, margin: int = 50) -> DragPlan:
    """从中心向左水平拖拽屏宽 20%；offset 变体起点右下偏移并钳制在边距以内。"""
    cx, cy = width // 2, height // 2
    distance = int(width * DRAG_DISTANCE_RATIO)
    if mode == DragMode.ADAPTIVE:
        return DragPlan(start=(cx, cy), end=(cx - distance, cy), distance=distance)

    sx = cx + int(width * OFFSET_RATIO)
    sy = cy + int(height * OFFSET_RATIO)
    ex, ey = sx - distance, sy
    # 避开系统边缘手势区
    start = (_clamp(sx, margin, width - margin), _clamp(sy, margin, height - margin))
    end = (_clamp(ex, margin, width - margin), _clamp(ey, margin, height - margin))
    return DragPlan(start=start, end=end, distance=distance)


def tap_ops(x: int, y: int, hold_ms: int) -> List[PointerOp]:
    return [
        PointerOp("move", x, y),
        PointerOp("down", x, y),
        PointerOp("pause", x, y, duration_ms=hold_ms),
        PointerOp("up", x, y),
    ]


def drag_ops(x1: int, y1: int, x2: int, y2: int, duration_ms: int) -> List[PointerOp]:
    return [
        PointerOp("move", x1, y1),
        PointerOp("down", x1, y1),
        PointerOp("move", x2, y2, duration_ms=duration_ms),
        PointerOp("up", x2, y2),
    ]


class GestureDriver:
    def __init__(
        self,
        device: DeviceProtocol,
        *,
        tap_hold_ms: int = 100,
        drag_duration_ms: int = 1000,
        margin_px: int = 50,
        drag_mode: DragMode = DragMode.ADAPTIVE,
    ) -> None:
        self.device = device
        self.tap_hold_ms = tap_hold_ms
        self.drag_duration_ms = drag_duration_ms
        self.margin_px = margin_px
        self.drag_mode = drag_mode

    def tap(self, x: int, y: int) -> None:
        logger.info(f"[Touch] tap ({x}, {y})")
        self.device.send_pointer_sequence(tap_ops(x, y, self.tap_hold_ms))

    def tap_at(self, coord: ScreenCoordinate) -> Tuple[int, int]:
        x, y = coord.resolve(self.device.screen_size())
        self.tap(x, y)
        return x, y

    def drag(self, x1: int, y1: int, x2: int, y2: int, duration_ms: Optional[int] = None) -> None:
        dur = self.drag_duration_ms if duration_ms is None else duration_ms
        if dur < MIN_DRAG_MS:
            logger.warning(f"[Touch] drag duration {dur}ms too short, raised to {MIN_DRAG_MS}ms")
            dur = MIN_DRAG_MS
        logger.info(f"[Touch] drag ({x1},{y1}) -> ({x2},{y2}) in {dur}ms")
        self.device.send_pointer_sequence(drag_ops(x1, y1, x2, y2, dur))

    def drag_cheek(self, mode: Optional[DragMode] = None) -> DragPlan:
        w, h = self.device.screen_size()
        plan = plan_cheek_drag(w, h, mode or self.drag_mode, self.margin_px)
        logger.info(
            f"[Touch] cheek drag on {w}x{h}: {plan.start} -> {plan.end} "
            f"({plan.distance}px, {plan.distance * 100 / w:.0f}% of width)"
        )
        self.drag(*plan.start, *plan.end)
        return plan


__all__ = [
    "ScreenCoordinate",
    "DragPlan",
    "GestureDriver",
    "plan_cheek_drag",
    "tap_ops",
    "drag_ops",
    "MIN_DRAG_MS",
]
