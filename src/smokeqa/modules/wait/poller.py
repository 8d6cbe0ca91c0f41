"""
通用轮询等待

所有"等待出现/等待完成"都建立在 PollingWaiter 之上：
- 立即检查一次，已满足则零等待返回
- 谓词抛出 NotYetReady 视为本轮未满足；其他异常原样抛出，中止等待
- 到期仍未满足返回 False/None，不抛异常
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ...core.errors import NotYetReady
from ...core.timeutils import SYSTEM_CLOCK, Clock


T = TypeVar("T")


@dataclass(frozen=True)
class WaitSpec:
    target: str
    timeout_sec: float
    poll_interval_sec: float

    def __post_init__(self) -> None:
        if self.poll_interval_sec <= 0:
            raise ValueError("poll_interval_sec must be > 0")
        if not self.poll_interval_sec < self.timeout_sec:
            raise ValueError(
                f"poll_interval_sec ({self.poll_interval_sec}) must be < timeout_sec ({self.timeout_sec})"
            )


class PollingWaiter:
    def __init__(self, clock: Clock = SYSTEM_CLOCK) -> None:
        self.clock = clock

    def wait_for(self, fn: Callable[[], Optional[T]], timeout: float, interval: float) -> Optional[T]:
        """轮询 fn 直到返回真值，返回该值；超时返回 None。"""
        if interval <= 0:
            raise ValueError("interval must be > 0")
        deadline = self.clock.now() + max(0.0, timeout)
        while True:
            try:
                value = fn()
            except NotYetReady:
                value = None
            if value:
                return value
            remaining = deadline - self.clock.now()
            if remaining <= 0:
                return None
            # 最后一轮只睡到截止时间，保证总耗时不超过 timeout + interval
            self.clock.sleep(min(interval, remaining))

    def wait_until(self, predicate: Callable[[], bool], timeout: float, interval: float) -> bool:
        return bool(self.wait_for(predicate, timeout, interval))

    def wait(self, spec: WaitSpec, predicate: Callable[[], bool]) -> bool:
        return self.wait_until(predicate, spec.timeout_sec, spec.poll_interval_sec)


__all__ = ["WaitSpec", "PollingWaiter"]
