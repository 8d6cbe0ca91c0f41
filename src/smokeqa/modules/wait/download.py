"""
资源下载完成检测（两阶段）

1. 驻留阶段 (WAITING)：无条件等待 min_dwell_sec，只输出进度日志，不做任何检测。
   下载过程中完成标记可能短暂闪现，驻留期内出现的标记一律不可信。
2. 检测阶段 (CHECKING)：每 interval_sec 检查一次完成标记，
   出现即 COMPLETED；自开始起累计达到 max_total_sec 仍未出现则 TIMED_OUT。

状态只会单向推进：WAITING -> CHECKING -> COMPLETED | TIMED_OUT。
中断（KeyboardInterrupt 等）不做捕获，直接向上抛出。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ...core.config import Settings
from ...core.constants import DownloadState
from ...core.logger import logger
from ...core.timeutils import SYSTEM_CLOCK, Clock


@dataclass(frozen=True)
class DownloadWait:
    target: str
    min_dwell_sec: float
    max_total_sec: float
    interval_sec: float
    progress_interval_sec: float = 30.0

    def __post_init__(self) -> None:
        if self.min_dwell_sec < 0:
            raise ValueError("min_dwell_sec must be >= 0")
        if not self.min_dwell_sec < self.max_total_sec:
            raise ValueError(
                f"min_dwell_sec ({self.min_dwell_sec}) must be < max_total_sec ({self.max_total_sec})"
            )
        if not 0 < self.interval_sec < self.max_total_sec:
            raise ValueError("interval_sec must be > 0 and < max_total_sec")
        if self.progress_interval_sec <= 0:
            raise ValueError("progress_interval_sec must be > 0")

    @classmethod
    def from_settings(cls, settings: Settings, target: str = "download_complete") -> "DownloadWait":
        return cls(
            target=target,
            min_dwell_sec=settings.download_min_dwell_sec,
            max_total_sec=settings.download_timeout_sec,
            interval_sec=settings.download_check_interval_sec,
            progress_interval_sec=settings.download_progress_interval_sec,
        )


class DownloadCompletionDetector:
    def __init__(
        self,
        is_visible: Callable[[str], bool],
        *,
        capture: Optional[Callable[[str], object]] = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self.is_visible = is_visible
        self.capture = capture
        self.clock = clock
        self.state = DownloadState.WAITING
        self.elapsed_sec = 0.0

    def _transition(self, state: DownloadState) -> None:
        logger.debug(f"[Download] {self.state.value} -> {state.value}")
        self.state = state

    def _evidence(self, prefix: str) -> None:
        if self.capture is None:
            return
        try:
            self.capture(prefix)
        except Exception as e:
            logger.warning(f"[Download] 留证截图失败 ({prefix}): {e}")

    def run(self, spec: DownloadWait) -> bool:
        """阻塞直到完成或超时；完成返回 True。"""
        if self.state != DownloadState.WAITING:
            raise RuntimeError(f"Detector already used (state={self.state.value})")

        start = self.clock.now()
        dwell = spec.min_dwell_sec
        logger.info(
            f"[Download] 驻留 {dwell:.0f}s 后开始检测 {spec.target} "
            f"(每 {spec.interval_sec:.0f}s, 上限 {spec.max_total_sec:.0f}s)"
        )

        elapsed = 0.0
        while elapsed < dwell:
            self.clock.sleep(min(spec.progress_interval_sec, dwell - elapsed))
            elapsed = self.clock.now() - start
            logger.info(f"[Download] 下载中... {elapsed:.0f}s / {dwell:.0f}s")

        self._transition(DownloadState.CHECKING)
        while True:
            elapsed = self.clock.now() - start
            if self.is_visible(spec.target):
                self.elapsed_sec = elapsed
                self._transition(DownloadState.COMPLETED)
                logger.info(f"[Download] 下载完成 ({elapsed:.0f}s)")
                self._evidence(f"download_complete_verified_{int(elapsed)}sec")
                return True
            if elapsed >= spec.max_total_sec:
                self.elapsed_sec = elapsed
                self._transition(DownloadState.TIMED_OUT)
                logger.warning(f"[Download] 下载超时 ({elapsed:.0f}s), 未检测到 {spec.target}")
                self._evidence(f"download_timeout_{int(elapsed)}sec")
                return False
            logger.debug(f"[Download] {spec.target} 未出现 ({elapsed:.0f}s)")
            self.clock.sleep(min(spec.interval_sec, spec.max_total_sec - elapsed))


__all__ = ["DownloadWait", "DownloadCompletionDetector"]
