"""
时间工具模块

所有等待都通过 Clock 完成，测试中替换为可推进的假时钟即可。
"""
from __future__ import annotations

import time
from datetime import datetime


class Clock:
    """单调时钟 + 阻塞 sleep"""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


SYSTEM_CLOCK = Clock()


def file_timestamp(dt: datetime | None = None) -> str:
    """留证文件名时间戳（毫秒级，避免重复运行时文件名冲突）"""
    dt = dt or datetime.now()
    return dt.strftime("%Y%m%d_%H%M%S_") + f"{dt.microsecond // 1000:03d}"


__all__ = ["Clock", "SYSTEM_CLOCK", "file_timestamp"]
