"""
结果写入：Google Sheets（服务账号）与本地 dry-run sink
"""
from __future__ import annotations

import os
from typing import Any, List, Optional, Protocol, Tuple

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ...core.errors import ReportingError
from ...core.logger import logger


SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class ResultSink(Protocol):
    def write_cell(self, sheet_id: str, sheet_name: str, cell: str, value: str) -> None: ...


class GoogleSheetsSink:
    def __init__(self, credentials_path: str, *, service: Any = None) -> None:
        self.credentials_path = credentials_path
        self._service = service

    def _get_service(self) -> Any:
        if self._service is not None:
            return self._service
        if not os.path.exists(self.credentials_path):
            raise ReportingError(f"Google 服务账号凭据不存在: {self.credentials_path}")
        creds = service_account.Credentials.from_service_account_file(
            self.credentials_path, scopes=SHEETS_SCOPES
        )
        self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        logger.info("Google Sheets 服务初始化完成")
        return self._service

    def write_cell(self, sheet_id: str, sheet_name: str, cell: str, value: str) -> None:
        if not sheet_id:
            raise ReportingError("spreadsheet_id 未配置")
        rng = f"{sheet_name}!{cell}"
        try:
            self._get_service().spreadsheets().values().update(
                spreadsheetId=sheet_id,
                range=rng,
                valueInputOption="RAW",
                body={"values": [[value]]},
            ).execute()
        except HttpError as e:
            raise ReportingError(f"写入 {rng} 失败: {e}") from e
        logger.info(f"[Sheets] {rng} = {value}")


class LogSink:
    """dry-run：只记录日志并保存在内存中"""

    def __init__(self) -> None:
        self.writes: List[Tuple[str, str, str, str]] = []

    def write_cell(self, sheet_id: str, sheet_name: str, cell: str, value: str) -> None:
        self.writes.append((sheet_id, sheet_name, cell, value))
        logger.info(f"[DryRun] {sheet_name}!{cell} = {value}")

    def last(self) -> Optional[Tuple[str, str, str, str]]:
        return self.writes[-1] if self.writes else None


__all__ = ["ResultSink", "GoogleSheetsSink", "LogSink", "SHEETS_SCOPES"]
