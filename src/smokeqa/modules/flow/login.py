"""
Google 账号登录流程

- 首次登录（3 阶段）：点击 Google 登录 -> 原生账号选择（按文本精确匹配）-> 确认主画面
- 再次登录（2 阶段）：Google 会话仍在，跳过账号选择
"""
from __future__ import annotations

from typing import List

from ...core.errors import PreconditionUnmet, WaitTimeout
from .context import FlowContext
from .stage import Stage


# 主画面两种合法终态：标志图或主画面标记
MAIN_SCREEN_MARKERS = ("target_logo", "main_marker")


def _tap_google_login(ctx: FlowContext) -> None:
    s = ctx.settings
    ctx.tap_template("google_login", s.marker_timeout_sec, post_delay=s.post_action_settle_sec)


def _account_configured(ctx: FlowContext) -> bool:
    if not ctx.settings.target_google_email:
        raise PreconditionUnmet("target_google_email is not configured")
    return True


def _select_account(ctx: FlowContext) -> None:
    s = ctx.settings
    email = s.target_google_email
    try:
        ctx.tap_native_text(email, s.account_selection_timeout_sec)
    except WaitTimeout:
        candidates = ctx.device.visible_texts("@")
        ctx.log.warning(f"未找到账号 {email}，当前可见账号: {candidates or '无'}")
        raise
    ctx.log.info(f"已选择账号 {email}")
    ctx.settle(s.settle_long_sec)


def _main_screen(ctx: FlowContext) -> bool:
    return ctx.expect_any_visible(MAIN_SCREEN_MARKERS, ctx.settings.login_processing_timeout_sec)


def build_login_first(ctx: FlowContext) -> List[Stage]:
    return [
        Stage("google_login_button", action=lambda: _tap_google_login(ctx)),
        Stage(
            "select_account",
            precondition=lambda: _account_configured(ctx),
            action=lambda: _select_account(ctx),
        ),
        Stage("verify_main_screen", verification=lambda: _main_screen(ctx)),
    ]


def build_login_again(ctx: FlowContext) -> List[Stage]:
    return [
        Stage("google_login_button", action=lambda: _tap_google_login(ctx)),
        Stage(
            "verify_main_screen",
            action=lambda: ctx.settle(ctx.settings.relaunch_settle_sec),
            verification=lambda: _main_screen(ctx),
        ),
    ]


__all__ = ["build_login_first", "build_login_again", "MAIN_SCREEN_MARKERS"]
