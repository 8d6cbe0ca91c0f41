"""
阶段执行器：按顺序执行阶段，首个失败即停止

每个阶段：
1. 前置条件不成立 -> Block，后续阶段记为"未执行"（不产生结果）
2. 动作抛异常 -> Fail（WaitTimeout 归类为 timeout，其余为 error）
3. 验证不成立 -> Fail（verify；验证内抛 WaitTimeout 归类为 timeout，其他异常直接抛出）
4. 否则 Pass，继续下一阶段

Fail/Block 都会尝试截图留证，留证失败只记日志，不影响结果。
TransportError / ResourceNotFound / ReportingError 不做转换，直接抛出。
不做回滚，也不在阶段内部重试。
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ...core.constants import FailureKind, Outcome
from ...core.errors import FATAL_ERRORS, PreconditionUnmet, WaitTimeout
from ...core.logger import logger
from .stage import Stage, StageOutcome


EvidenceCapture = Callable[[str], Optional[Path]]
OutcomeListener = Callable[[StageOutcome], None]


class StageSequencer:
    def __init__(
        self,
        *,
        case_id: str = "",
        capture: Optional[EvidenceCapture] = None,
        on_outcome: Optional[OutcomeListener] = None,
        log: Any = None,
    ) -> None:
        self.case_id = case_id
        self.capture = capture
        self.on_outcome = on_outcome
        self.log = log or logger
        self._outcomes: List[StageOutcome] = []

    @property
    def outcomes(self) -> Tuple[StageOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def last(self) -> Optional[StageOutcome]:
        return self._outcomes[-1] if self._outcomes else None

    def _evidence(self, stage: Stage, outcome: Outcome, reason: str) -> Optional[Path]:
        prefix = "_".join(p for p in (self.case_id, stage.name, outcome.value) if p)
        try:
            if stage.on_failure is not None:
                return stage.on_failure(stage.name, reason)
            if self.capture is not None:
                return self.capture(prefix)
        except Exception as e:
            self.log.warning(f"[Stage] {stage.name} 留证失败: {e}")
        return None

    def _emit(
        self,
        stage: Stage,
        index: int,
        outcome: Outcome,
        reason: Optional[str] = None,
        kind: Optional[FailureKind] = None,
    ) -> StageOutcome:
        evidence = None
        if outcome != Outcome.PASS:
            evidence = self._evidence(stage, outcome, reason or "")
        result = StageOutcome(
            outcome=outcome,
            stage_name=stage.name,
            index=index,
            reason=reason,
            kind=kind,
            evidence=evidence,
        )
        self._outcomes.append(result)

        if outcome == Outcome.PASS:
            self.log.info(f"[Stage] {result.summary()}")
        elif kind == FailureKind.ERROR:
            self.log.error(f"[Stage] {result.summary()}")
        else:
            self.log.warning(f"[Stage] {result.summary()}")

        if self.on_outcome is not None:
            self.on_outcome(result)
        return result

    def _precondition_holds(self, stage: Stage) -> Tuple[bool, str]:
        if stage.precondition is None:
            return True, ""
        try:
            if stage.precondition():
                return True, ""
            return False, "precondition not met"
        except PreconditionUnmet as e:
            return False, str(e) or "precondition not met"

    def _skip_rest(self, stages: Sequence[Stage], start: int) -> None:
        for pos in range(start, len(stages)):
            rest = stages[pos]
            idx = rest.index if rest.index is not None else pos + 1
            self.log.info(f"[Stage] - [{idx}] {rest.name}: not run")

    def run(self, stages: Sequence[Stage]) -> bool:
        """执行阶段列表，全部通过返回 True"""
        total = len(stages)
        for pos, stage in enumerate(stages):
            idx = stage.index if stage.index is not None else pos + 1
            self.log.info(f"[Stage] [{idx}/{total}] {stage.name}")

            ok, reason = self._precondition_holds(stage)
            if not ok:
                self._emit(stage, idx, Outcome.BLOCK, reason, FailureKind.BLOCK)
                self._skip_rest(stages, pos + 1)
                return False

            try:
                if stage.action is not None:
                    stage.action()
            except FATAL_ERRORS:
                raise
            except WaitTimeout as e:
                self._emit(stage, idx, Outcome.FAIL, str(e), FailureKind.TIMEOUT)
                self._skip_rest(stages, pos + 1)
                return False
            except KeyboardInterrupt:
                self.log.error(f"[Stage] {stage.name} 被中断")
                raise
            except Exception as e:
                self._emit(stage, idx, Outcome.FAIL, f"{type(e).__name__}: {e}", FailureKind.ERROR)
                self._skip_rest(stages, pos + 1)
                return False

            try:
                verified = stage.verification is None or bool(stage.verification())
            except FATAL_ERRORS:
                raise
            except WaitTimeout as e:
                self._emit(stage, idx, Outcome.FAIL, str(e), FailureKind.TIMEOUT)
                self._skip_rest(stages, pos + 1)
                return False
            except KeyboardInterrupt:
                self.log.error(f"[Stage] {stage.name} 被中断")
                raise
            except Exception as e:
                self._emit(stage, idx, Outcome.FAIL, f"{type(e).__name__}: {e}", FailureKind.ERROR)
                self._skip_rest(stages, pos + 1)
                return False
            if not verified:
                self._emit(stage, idx, Outcome.FAIL, "verification failed", FailureKind.VERIFY)
                self._skip_rest(stages, pos + 1)
                return False

            self._emit(stage, idx, Outcome.PASS)
        return True


__all__ = ["StageSequencer", "EvidenceCapture", "OutcomeListener"]
