"""
阶段定义与阶段结果
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ...core.constants import FailureKind, Outcome


Action = Callable[[], None]
Check = Callable[[], bool]
FailureHook = Callable[[str, str], Optional[Path]]


@dataclass(frozen=True)
class Stage:
    """流程中的一个阶段：前置条件 -> 动作 -> 验证

    Attributes:
        name: 阶段标识，用于日志与留证文件名
        action: 有副作用的操作（手势/应用命令），可为空
        verification: 成功判定，为空表示动作完成即成功
        precondition: 返回 False 或抛 PreconditionUnmet 时记为 Block
        on_failure: (stage_name, reason) -> 留证路径；为空时使用执行器的默认截图
        index: 阶段序号，为空时按列表位置编号（从 1 开始）
    """

    name: str
    action: Optional[Action] = None
    verification: Optional[Check] = None
    precondition: Optional[Check] = None
    on_failure: Optional[FailureHook] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class StageOutcome:
    outcome: Outcome
    stage_name: str
    index: int
    reason: Optional[str] = None
    kind: Optional[FailureKind] = None
    evidence: Optional[Path] = None

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.PASS

    def summary(self) -> str:
        text = f"[{self.index}] {self.stage_name}: {self.outcome.value}"
        if self.kind is not None:
            text += f" ({self.kind.value})"
        if self.reason:
            text += f" - {self.reason}"
        return text


__all__ = ["Stage", "StageOutcome", "Action", "Check", "FailureHook"]
