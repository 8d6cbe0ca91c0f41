"""
结果记录器：只负责记录已经做出的判定，不做任何判断

单元格地址 = result_column + (header_row_offset + index)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from ...core.config import Settings
from ...core.constants import Outcome
from ...core.logger import logger
from ..emu.types import DeviceProtocol
from .evidence import EvidenceStore
from .sheets import ResultSink


@dataclass(frozen=True)
class RecordEntry:
    index: int
    name: str
    outcome: Outcome
    cell: str
    evidence: Optional[Path]
    reason: Optional[str] = None
    recorded_at: datetime = datetime.min


def cell_address(index: int, column: str = "F", header_row_offset: int = 3) -> str:
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")
    return f"{column.upper()}{header_row_offset + index}"


class ResultRecorder:
    def __init__(
        self,
        device: DeviceProtocol,
        evidence: EvidenceStore,
        sink: ResultSink,
        *,
        spreadsheet_id: str = "",
        sheet_name: str = "checklist",
        result_column: str = "F",
        header_row_offset: int = 3,
    ) -> None:
        self.device = device
        self.evidence = evidence
        self.sink = sink
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.result_column = result_column
        self.header_row_offset = header_row_offset
        self._history: List[RecordEntry] = []

    @classmethod
    def from_settings(cls, settings: Settings, device: DeviceProtocol, evidence: EvidenceStore, sink: ResultSink) -> "ResultRecorder":
        return cls(
            device,
            evidence,
            sink,
            spreadsheet_id=settings.spreadsheet_id,
            sheet_name=settings.sheet_name,
            result_column=settings.result_column,
            header_row_offset=settings.header_row_offset,
        )

    @property
    def history(self) -> Tuple[RecordEntry, ...]:
        return tuple(self._history)

    def cell_address(self, index: int) -> str:
        return cell_address(index, self.result_column, self.header_row_offset)

    def record(self, index: int, name: str, outcome: Outcome, reason: Optional[str] = None) -> RecordEntry:
        """截图留证并写入结果单元格；写入失败抛 ReportingError。"""
        outcome = Outcome(outcome)
        cell = self.cell_address(index)
        shot = self.evidence.capture(self.device, f"TC{index:02d}_{name}_{outcome.value}")
        entry = RecordEntry(
            index=index,
            name=name,
            outcome=outcome,
            cell=cell,
            evidence=shot,
            reason=reason,
            recorded_at=datetime.now(),
        )
        self._history.append(entry)
        logger.info(f"[Result] TC{index:02d} {name}: {outcome.value} -> {cell}" + (f" ({reason})" if reason else ""))
        self.sink.write_cell(self.spreadsheet_id, self.sheet_name, cell, outcome.value)
        return entry


__all__ = ["RecordEntry", "ResultRecorder", "cell_address"]
