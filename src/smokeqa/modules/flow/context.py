"""
流程公用上下文与 UI 操作工具

- expect_visible / expect_any_visible：等待模板出现，超时抛 WaitTimeout
- tap_template：等待模板出现 -> 点击中心；未出现抛 WaitTimeout
- tap_template_if_present：可选步骤，未出现返回 False
- tap_native_text / tap_native_id：原生 UI 层级（账号选择、系统权限弹窗）
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from ...core.config import Settings
from ...core.constants import AppState
from ...core.errors import WaitTimeout
from ...core.logger import logger
from ...core.timeutils import SYSTEM_CLOCK, Clock
from ..emu.gestures import GestureDriver
from ..emu.types import DeviceProtocol
from ..reporting.evidence import EvidenceStore
from ..vision.matcher import ImageMatcher
from ..vision.registry import TemplateRegistry
from ..wait.poller import PollingWaiter


@dataclass
class FlowContext:
    settings: Settings
    device: DeviceProtocol
    matcher: ImageMatcher
    gestures: GestureDriver
    evidence: Optional[EvidenceStore] = None
    clock: Clock = SYSTEM_CLOCK
    log: Any = None
    waiter: PollingWaiter = field(init=False)

    def __post_init__(self) -> None:
        self.waiter = PollingWaiter(self.clock)
        if self.log is None:
            self.log = logger

    @classmethod
    def build(
        cls,
        settings: Settings,
        device: DeviceProtocol,
        registry: TemplateRegistry,
        *,
        evidence: Optional[EvidenceStore] = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> "FlowContext":
        matcher = ImageMatcher(
            device,
            registry,
            threshold=settings.match_threshold,
            probe_sec=settings.visibility_probe_sec,
            poll_interval_sec=settings.poll_interval_sec,
            clock=clock,
        )
        gestures = GestureDriver(
            device,
            tap_hold_ms=settings.tap_hold_ms,
            drag_duration_ms=settings.drag_duration_ms,
            margin_px=settings.screen_margin_px,
            drag_mode=settings.drag_mode,
        )
        return cls(settings, device, matcher, gestures, evidence=evidence, clock=clock)

    # 通用
    def settle(self, seconds: float) -> None:
        if seconds > 0:
            self.clock.sleep(seconds)

    def capture(self, prefix: str) -> Optional[Path]:
        if self.evidence is None:
            return None
        return self.evidence.capture(self.device, prefix)

    def app_in_foreground(self) -> bool:
        return self.device.query_app_state(self.settings.pkg_name) == AppState.FOREGROUND

    # 模板
    def expect_visible(self, name: str, timeout: float) -> bool:
        if not self.matcher.wait_until_visible(name, timeout):
            raise WaitTimeout(name, timeout)
        return True

    def expect_any_visible(self, names: Iterable[str], timeout: float) -> bool:
        names = list(names)
        if not self.matcher.wait_until_any_visible(names, timeout):
            raise WaitTimeout(" / ".join(names), timeout)
        return True

    def tap_template(self, name: str, timeout: float, *, post_delay: float = 0.0) -> None:
        """等待模板出现并点击中心"""
        center = self.matcher.locate_center(name, timeout)
        if center is None:
            raise WaitTimeout(name, timeout)
        self.gestures.tap(*center)
        self.log.info(f"点击 {name} @ {center}")
        self.settle(post_delay)

    def tap_template_if_present(self, name: str, timeout: float, *, post_delay: float = 0.0) -> bool:
        center = self.matcher.locate_center(name, timeout)
        if center is None:
            return False
        self.gestures.tap(*center)
        self.log.info(f"点击 {name} @ {center}")
        self.settle(post_delay)
        return True

    # 原生 UI
    def tap_native_text(self, text: str, timeout: float) -> None:
        with self.device.implicit_wait(timeout):
            node = self.device.find_text(text)
        if node is None:
            raise WaitTimeout(f"text '{text}'", timeout)
        self.gestures.tap(*node.center)

    def tap_native_id_if_present(self, resource_id: str, timeout: float) -> bool:
        with self.device.implicit_wait(timeout):
            node = self.device.find_resource_id(resource_id)
        if node is None:
            return False
        self.gestures.tap(*node.center)
        return True


__all__ = ["FlowContext"]
