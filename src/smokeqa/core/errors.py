"""
异常分类

- NotYetReady: 本轮谓词未满足，PollingWaiter 内部吸收
- WaitTimeout: 等待到期仍未满足，阶段记为 Fail
- PreconditionUnmet: 前置条件不成立，阶段记为 Block
- TransportError: 设备/会话异常，不重试，直接中止整个流程
- ResourceNotFound: 模板资源缺失，启动时即失败
"""
from __future__ import annotations

from typing import Iterable


class SmokeQAError(Exception):
    """所有业务异常的基类"""


class NotYetReady(SmokeQAError):
    """谓词本轮未就绪（可重试）"""


class ElementNotFound(NotYetReady):
    """元素或模板当前不可见"""


class WaitTimeout(SmokeQAError):
    """等待超时"""

    def __init__(self, what: str, timeout: float) -> None:
        super().__init__(f"{what} not visible within {timeout:.0f}s")
        self.what = what
        self.timeout = timeout


class PreconditionUnmet(SmokeQAError):
    """前置条件不满足"""


class TransportError(SmokeQAError):
    """设备传输层异常"""


class ResourceNotFound(SmokeQAError, FileNotFoundError):
    """模板等资源文件缺失"""

    def __init__(self, paths: Iterable[str]) -> None:
        self.paths = list(paths)
        super().__init__(f"Missing resources: {', '.join(self.paths)}")


class ReportingError(SmokeQAError):
    """结果写入失败"""


# 这些异常必须原样向上传播，不能被转换成阶段结果
FATAL_ERRORS = (TransportError, ResourceNotFound, ReportingError)


__all__ = [
    "SmokeQAError",
    "NotYetReady",
    "ElementNotFound",
    "WaitTimeout",
    "PreconditionUnmet",
    "TransportError",
    "ResourceNotFound",
    "ReportingError",
    "FATAL_ERRORS",
]
