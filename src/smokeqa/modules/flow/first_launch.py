"""
首次启动流程（6 阶段）

1) 清除应用数据并重新启动
2) 系统通知权限弹窗（有则点允许，没有则跳过）
3) 点击资源下载按钮
4) 等待资源下载完成（驻留 + 轮询）
5) 点击开始按钮进入条款画面
6) 条款同意（条款画面标记可选，同意按钮必须出现）
"""
from __future__ import annotations

from typing import List

from ...core.errors import WaitTimeout
from ..wait.download import DownloadCompletionDetector, DownloadWait
from .context import FlowContext
from .stage import Stage


def _clear_and_relaunch(ctx: FlowContext) -> None:
    s = ctx.settings
    ctx.log.info(f"清除应用数据: {s.pkg_name}")
    ctx.device.clear_app_data(s.pkg_name)
    ctx.settle(s.settle_short_sec)
    ctx.device.activate_app(s.pkg_name)
    # 等待引擎加载
    ctx.settle(s.relaunch_settle_sec)


def _relaunched(ctx: FlowContext) -> bool:
    s = ctx.settings
    return ctx.waiter.wait_until(ctx.app_in_foreground, s.marker_timeout_sec, s.poll_interval_sec)


def _handle_permission(ctx: FlowContext) -> None:
    s = ctx.settings
    if ctx.tap_native_id_if_present(s.notification_allow_button_id, s.permission_popup_timeout_sec):
        ctx.log.info("已允许通知权限")
        ctx.settle(s.settle_long_sec)
    else:
        ctx.log.info("未出现权限弹窗（可能已授权），继续")
        ctx.settle(s.settle_short_sec)


def _wait_download(ctx: FlowContext) -> bool:
    spec = DownloadWait.from_settings(ctx.settings, target="download_complete")
    detector = DownloadCompletionDetector(ctx.matcher.is_visible, capture=ctx.capture, clock=ctx.clock)
    if not detector.run(spec):
        raise WaitTimeout(spec.target, spec.max_total_sec)
    return True


def _agree_terms(ctx: FlowContext) -> None:
    s = ctx.settings
    if ctx.matcher.wait_until_visible("terms_screen", s.marker_timeout_sec):
        ctx.settle(s.settle_short_sec)
    else:
        ctx.log.warning("未检测到条款画面标记，直接尝试同意按钮")
        ctx.capture("terms_screen_not_found")
    ctx.tap_template("terms_agree_all", s.marker_timeout_sec, post_delay=s.settle_short_sec)


def build_first_launch(ctx: FlowContext) -> List[Stage]:
    s = ctx.settings
    return [
        Stage(
            "clear_app_data",
            action=lambda: _clear_and_relaunch(ctx),
            verification=lambda: _relaunched(ctx),
        ),
        Stage("notification_permission", action=lambda: _handle_permission(ctx)),
        Stage(
            "download_button",
            action=lambda: ctx.tap_template("download_button", s.marker_timeout_sec),
        ),
        Stage("download_completion", verification=lambda: _wait_download(ctx)),
        Stage(
            "start_game",
            action=lambda: ctx.tap_template("download_complete", s.marker_timeout_sec, post_delay=s.settle_long_sec),
        ),
        Stage("terms_agreement", action=lambda: _agree_terms(ctx)),
    ]


__all__ = ["build_first_launch"]
