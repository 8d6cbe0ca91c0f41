"""
核心配置模块

Settings 在入口处构造一次后显式传给各组件，构造即校验，之后不可修改。
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DragMode


DEFAULT_TEMPLATES: Dict[str, str] = {
    "main_marker": "main_marker.png",
    "target_logo": "target_logo.png",
    "game_started": "target_menu.png",
    "exit_button": "target_exit_button.png",
    "download_button": "first_download_button.png",
    "download_complete": "download_complete_button.png",
    "terms_screen": "terms_screen_marker.png",
    "terms_agree_all": "terms_agree_all_button.png",
    "google_login": "google_login_button.png",
    "menu_button": "menu_button.png",
    "menu_popup": "menu_popup_marker.png",
    "settings_button": "settings_button.png",
    "settings_popup": "settings_popup_marker.png",
    "etc_button": "etc_button.png",
    "logout_button": "logout_button.png",
    "logout_confirm_popup": "logout_confirm_popup.png",
    "logout_confirm_button": "logout_confirm_button.png",
}


class Settings(BaseSettings):
    """系统配置"""

    model_config = SettingsConfigDict(
        env_prefix="SMOKEQA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # 设备
    adb_path: str = Field(default="adb")
    device_serial: str = Field(default="")
    pkg_name: str = Field(default="com.epidgames.trickcalrevive")
    activity_name: str = Field(default="com.google.firebase.MessagingUnityPlayerActivity")
    implicit_wait_sec: float = Field(default=10.0)
    notification_allow_button_id: str = Field(
        default="com.android.permissioncontroller:id/permission_allow_button"
    )

    # 识图
    template_dir: str = Field(default="assets/images")
    templates: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TEMPLATES))
    match_threshold: float = Field(default=0.85)
    visibility_probe_sec: float = Field(default=1.0)

    # 等待（秒）
    poll_interval_sec: float = Field(default=1.0)
    marker_timeout_sec: float = Field(default=30.0)
    popup_transition_timeout_sec: float = Field(default=10.0)
    permission_popup_timeout_sec: float = Field(default=3.0)
    account_selection_timeout_sec: float = Field(default=20.0)
    login_processing_timeout_sec: float = Field(default=60.0)
    logout_verification_timeout_sec: float = Field(default=30.0)
    game_start_verify_timeout_sec: float = Field(default=15.0)
    exit_button_timeout_sec: float = Field(default=10.0)
    exit_verification_wait_ms: int = Field(default=3000)

    # 资源下载
    download_min_dwell_sec: float = Field(default=270.0)
    download_timeout_sec: float = Field(default=360.0)
    download_check_interval_sec: float = Field(default=10.0)
    download_progress_interval_sec: float = Field(default=30.0)

    # 阶段切换后的固定等待（秒）
    settle_short_sec: float = Field(default=1.5)
    settle_long_sec: float = Field(default=5.0)
    relaunch_settle_sec: float = Field(default=5.0)
    post_action_settle_sec: float = Field(default=3.0)

    # 手势
    drag_duration_ms: int = Field(default=1000)
    drag_mode: DragMode = Field(default=DragMode.ADAPTIVE)
    screen_margin_px: int = Field(default=50)
    tap_hold_ms: int = Field(default=100)

    # 留证与上报
    evidence_dir: str = Field(default="build/reports/evidence")
    spreadsheet_id: str = Field(default="")
    sheet_name: str = Field(default="checklist")
    result_column: str = Field(default="F")
    header_row_offset: int = Field(default=3)
    google_credentials_path: str = Field(default="credentials/google-service-account.json")
    target_google_email: str = Field(default="")

    # 日志
    log_level: str = Field(default="INFO")
    log_path: str = Field(default="./logs")
    log_retention_days: int = Field(default=3)
    log_console_enabled: bool = Field(default=True)

    @model_validator(mode="after")
    def _check_timing(self) -> "Settings":
        timeouts = {
            "marker_timeout_sec": self.marker_timeout_sec,
            "popup_transition_timeout_sec": self.popup_transition_timeout_sec,
            "permission_popup_timeout_sec": self.permission_popup_timeout_sec,
            "account_selection_timeout_sec": self.account_selection_timeout_sec,
            "login_processing_timeout_sec": self.login_processing_timeout_sec,
            "logout_verification_timeout_sec": self.logout_verification_timeout_sec,
            "game_start_verify_timeout_sec": self.game_start_verify_timeout_sec,
            "exit_button_timeout_sec": self.exit_button_timeout_sec,
        }
        if self.poll_interval_sec <= 0:
            raise ValueError("poll_interval_sec must be > 0")
        for name, value in timeouts.items():
            if not self.poll_interval_sec < value:
                raise ValueError(
                    f"poll_interval_sec ({self.poll_interval_sec}) must be < {name} ({value})"
                )
        if not 0 <= self.download_min_dwell_sec < self.download_timeout_sec:
            raise ValueError("download_min_dwell_sec must be >= 0 and < download_timeout_sec")
        if not 0 < self.download_check_interval_sec < self.download_timeout_sec:
            raise ValueError("download_check_interval_sec must be > 0 and < download_timeout_sec")
        if self.download_progress_interval_sec <= 0:
            raise ValueError("download_progress_interval_sec must be > 0")
        if not 0 < self.match_threshold <= 1:
            raise ValueError("match_threshold must be in (0, 1]")
        if self.header_row_offset < 0:
            raise ValueError("header_row_offset must be >= 0")
        if not re.fullmatch(r"[A-Za-z]+", self.result_column):
            raise ValueError(f"result_column must be column letters, got {self.result_column!r}")
        if self.screen_margin_px < 0:
            raise ValueError("screen_margin_px must be >= 0")
        return self

    def template_path(self, name: str) -> str:
        """模板名 -> 文件路径"""
        return (Path(self.template_dir) / self.templates[name]).as_posix()


def load_settings(env_file: Optional[str] = None, **overrides) -> Settings:
    """构造配置。env_file 为 None 时使用默认的 .env。"""
    if env_file is not None:
        return Settings(_env_file=env_file, **overrides)
    return Settings(**overrides)


__all__ = ["Settings", "DEFAULT_TEMPLATES", "load_settings"]
