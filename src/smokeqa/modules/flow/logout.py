"""
登出流程（9 阶段）

大厅 -> 菜单 -> 设置 -> 其他 -> 登出 -> 确认 -> 回到条款画面
"""
from __future__ import annotations

from typing import List

from .context import FlowContext
from .stage import Stage


def _confirm_logout(ctx: FlowContext) -> None:
    s = ctx.settings
    if not ctx.matcher.wait_until_visible("logout_confirm_popup", s.popup_transition_timeout_sec):
        ctx.log.warning("未检测到登出确认弹窗，直接尝试确认按钮")
    # 等待登出处理
    ctx.tap_template("logout_confirm_button", s.marker_timeout_sec, post_delay=s.post_action_settle_sec)


def build_logout(ctx: FlowContext) -> List[Stage]:
    s = ctx.settings
    marker, popup = s.marker_timeout_sec, s.popup_transition_timeout_sec
    short = s.settle_short_sec
    return [
        Stage("verify_lobby", verification=lambda: ctx.expect_visible("game_started", marker)),
        Stage("tap_menu", action=lambda: ctx.tap_template("menu_button", marker, post_delay=short)),
        Stage("verify_menu_popup", verification=lambda: ctx.expect_visible("menu_popup", popup)),
        Stage("tap_settings", action=lambda: ctx.tap_template("settings_button", marker, post_delay=short)),
        Stage("verify_settings_popup", verification=lambda: ctx.expect_visible("settings_popup", popup)),
        Stage("tap_etc", action=lambda: ctx.tap_template("etc_button", marker, post_delay=1.0)),
        Stage("tap_logout", action=lambda: ctx.tap_template("logout_button", marker, post_delay=1.0)),
        Stage("confirm_logout", action=lambda: _confirm_logout(ctx)),
        Stage(
            "verify_logged_out",
            verification=lambda: ctx.expect_visible("terms_screen", s.logout_verification_timeout_sec),
        ),
    ]


__all__ = ["build_logout"]
