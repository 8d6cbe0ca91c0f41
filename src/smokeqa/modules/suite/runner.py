"""
冒烟用例编排

每个用例独立执行：用例内部由 StageSequencer 逐阶段执行（首个失败即停止），
用例结果取最后一个阶段的结果（全部通过则为 Pass），交给 ResultRecorder 记录。
TransportError 等致命异常不在此处捕获，由调用方负责释放会话。
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ...core.constants import Outcome
from ...core.logger import get_case_logger
from ..flow import FlowContext, StageOutcome, StageSequencer
from ..reporting.recorder import RecordEntry, ResultRecorder
from .cases import CATALOG, SmokeCase, select_cases


@dataclass(frozen=True)
class CaseResult:
    case: SmokeCase
    outcome: Outcome
    stages: Tuple[StageOutcome, ...]
    record: Optional[RecordEntry] = None
    reason: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.PASS


def case_outcome(stages: Sequence[StageOutcome]) -> Tuple[Outcome, Optional[str]]:
    """用例结果 = 终止阶段的结果；没有失败阶段则为 Pass"""
    if stages and stages[-1].outcome != Outcome.PASS:
        last = stages[-1]
        return last.outcome, f"{last.stage_name}: {last.reason}" if last.reason else last.stage_name
    return Outcome.PASS, None


class SmokeSuite:
    def __init__(
        self,
        ctx: FlowContext,
        recorder: ResultRecorder,
        *,
        catalog: Sequence[SmokeCase] = CATALOG,
    ) -> None:
        self.ctx = ctx
        self.recorder = recorder
        self.catalog = catalog
        self.results: List[CaseResult] = []

    def run_case(self, case: SmokeCase) -> CaseResult:
        log = get_case_logger(case.case_id, self.ctx.settings)
        log.info(f"=== {case.label} 开始 ===")
        case_ctx = dataclasses.replace(self.ctx, log=log)
        sequencer = StageSequencer(case_id=case.case_id, capture=case_ctx.capture, log=log)
        sequencer.run(case.build(case_ctx))

        outcome, reason = case_outcome(sequencer.outcomes)
        entry = self.recorder.record(case.index, case.name, outcome, reason)
        result = CaseResult(case, outcome, sequencer.outcomes, entry, reason)
        self.results.append(result)
        log.info(f"=== {case.label} 结束: {outcome.value} ===")
        return result

    def run(self, keys: Optional[Iterable[str]] = None) -> List[CaseResult]:
        cases = select_cases(keys, self.catalog)
        return [self.run_case(case) for case in cases]

    @property
    def all_passed(self) -> bool:
        return bool(self.results) and all(r.passed for r in self.results)

    def summary(self) -> str:
        lines = [f"{r.case.label}: {r.outcome.value}" + (f" ({r.reason})" if r.reason else "") for r in self.results]
        passed = sum(1 for r in self.results if r.passed)
        lines.append(f"通过 {passed}/{len(self.results)}")
        return "\n".join(lines)


__all__ = ["SmokeSuite", "CaseResult", "case_outcome"]
