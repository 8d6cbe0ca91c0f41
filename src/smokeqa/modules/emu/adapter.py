"""
统一设备适配器：把 ADB 命令封装成会话对象，对外暴露传输层能力

接口：
- connect() / quit()
- activate_app(pkg) / clear_app_data(pkg)
- current_foreground_app() / query_app_state(pkg)
- send_pointer_sequence(ops)
- capture() -> PNG bytes
- screen_size() -> (w, h)，每次实时读取，考虑屏幕方向
- back()
- find_text(text) / find_resource_id(rid)：原生 UI 层级查找，受隐式等待控制
- implicit_wait(seconds)：临时覆盖隐式等待，退出时必定恢复
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple

from ...core.config import Settings
from ...core.constants import AppState
from ...core.logger import logger
from ...core.timeutils import SYSTEM_CLOCK, Clock
from .adb import Adb, AdbError
from .types import PointerOp, UiNode, parse_ui_nodes


KEYCODE_BACK = 4
UI_DUMP_INTERVAL_SEC = 0.5


@dataclass
class AdapterConfig:
    adb_path: str
    adb_addr: str
    pkg_name: str
    activity_name: str = ""
    implicit_wait_sec: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdapterConfig":
        return cls(
            adb_path=settings.adb_path,
            adb_addr=settings.device_serial,
            pkg_name=settings.pkg_name,
            activity_name=settings.activity_name,
            implicit_wait_sec=settings.implicit_wait_sec,
        )


class DeviceAdapter:
    def __init__(self, cfg: AdapterConfig, *, adb: Optional[Adb] = None, clock: Clock = SYSTEM_CLOCK) -> None:
        self.cfg = cfg
        self.adb = adb or Adb(cfg.adb_path)
        self.clock = clock
        self.implicit_wait_sec = cfg.implicit_wait_sec
        self._connected = False

    # 会话
    def connect(self) -> None:
        addr = self.cfg.adb_addr
        if addr and ":" in addr and not self.adb.connect(addr):
            raise AdbError(f"adb connect {addr} failed")
        devices = self.adb.devices()
        if addr and addr not in devices:
            raise AdbError(f"Device {addr} not attached (attached: {devices or 'none'})")
        if not addr and not devices:
            raise AdbError("No devices attached")
        self._connected = True
        logger.info(f"设备已连接: {addr or devices[0]}")

    def quit(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.info("设备会话已释放")

    @contextmanager
    def implicit_wait(self, seconds: float) -> Iterator[float]:
        saved = self.implicit_wait_sec
        self.implicit_wait_sec = seconds
        try:
            yield seconds
        finally:
            self.implicit_wait_sec = saved

    # 应用
    def activate_app(self, pkg: str) -> None:
        self.adb.start_app_monkey(self.cfg.adb_addr, pkg, fallback_activity=self.cfg.activity_name or None)

    def clear_app_data(self, pkg: str) -> None:
        self.adb.pm_clear(self.cfg.adb_addr, pkg)

    def current_foreground_app(self) -> Optional[str]:
        return self.adb.focused_package(self.cfg.adb_addr)

    def query_app_state(self, pkg: str) -> AppState:
        if self.current_foreground_app() == pkg:
            return AppState.FOREGROUND
        if self.adb.is_app_running(self.cfg.adb_addr, pkg):
            return AppState.BACKGROUND
        return AppState.NOT_RUNNING

    def back(self) -> None:
        self.adb.keyevent(self.cfg.adb_addr, KEYCODE_BACK)

    # 画面
    def capture(self) -> bytes:
        return self.adb.screencap(self.cfg.adb_addr)

    def screen_size(self) -> Tuple[int, int]:
        w, h = self.adb.wm_size(self.cfg.adb_addr)
        # wm size 总是报告自然方向，横屏时需要交换
        if self.adb.surface_orientation(self.cfg.adb_addr) in (1, 3):
            w, h = h, w
        return w, h

    # 输入
    def send_pointer_sequence(self, ops: Sequence[PointerOp]) -> None:
        kinds = [op.kind for op in ops]
        if kinds == ["move", "down", "pause", "up"]:
            start, hold = ops[0], ops[2]
            # input swipe 起止点相同即为带按压时长的点击
            self.adb.swipe(self.cfg.adb_addr, start.x, start.y, start.x, start.y, max(1, hold.duration_ms))
        elif kinds == ["move", "down", "move", "up"]:
            start, end = ops[0], ops[2]
            self.adb.swipe(self.cfg.adb_addr, start.x, start.y, end.x, end.y, max(1, end.duration_ms))
        else:
            raise ValueError(f"Unsupported pointer sequence for adb input: {kinds}")

    # 原生 UI
    def _find_node(self, match: Callable[[UiNode], bool]) -> Optional[UiNode]:
        deadline = self.clock.now() + self.implicit_wait_sec
        while True:
            for node in parse_ui_nodes(self.adb.dump_ui(self.cfg.adb_addr)):
                if match(node):
                    return node
            remaining = deadline - self.clock.now()
            if remaining <= 0:
                return None
            self.clock.sleep(min(UI_DUMP_INTERVAL_SEC, remaining))

    def find_text(self, text: str) -> Optional[UiNode]:
        return self._find_node(lambda node: node.text == text)

    def find_resource_id(self, resource_id: str) -> Optional[UiNode]:
        return self._find_node(lambda node: node.resource_id == resource_id)

    def visible_texts(self, contains: str = "") -> list[str]:
        """当前层级中的全部文本（调试用）"""
        nodes = parse_ui_nodes(self.adb.dump_ui(self.cfg.adb_addr))
        return [n.text for n in nodes if n.text and contains in n.text]


@contextmanager
def open_session(settings: Settings, *, adb: Optional[Adb] = None, clock: Clock = SYSTEM_CLOCK) -> Iterator[DeviceAdapter]:
    """连接设备并在任何退出路径上释放会话"""
    device = DeviceAdapter(AdapterConfig.from_settings(settings), adb=adb, clock=clock)
    try:
        device.connect()
        yield device
    finally:
        device.quit()


__all__ = ["AdapterConfig", "DeviceAdapter", "open_session", "KEYCODE_BACK"]
