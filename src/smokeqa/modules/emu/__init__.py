from .adb import Adb, AdbError
from .adapter import AdapterConfig, DeviceAdapter, open_session
from .gestures import DragPlan, GestureDriver, ScreenCoordinate, plan_cheek_drag
from .types import DeviceProtocol, PointerOp, UiNode, parse_ui_nodes

__all__ = [
    "Adb",
    "AdbError",
    "AdapterConfig",
    "DeviceAdapter",
    "open_session",
    "DragPlan",
    "GestureDriver",
    "ScreenCoordinate",
    "plan_cheek_drag",
    "DeviceProtocol",
    "PointerOp",
    "UiNode",
    "parse_ui_nodes",
]
