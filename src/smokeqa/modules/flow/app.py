"""
应用级流程：启动、主画面、拖拽开始、退出
"""
from __future__ import annotations

from typing import List

from ...core.errors import PreconditionUnmet
from .context import FlowContext
from .login import MAIN_SCREEN_MARKERS
from .stage import Stage


def _activate(ctx: FlowContext) -> None:
    ctx.device.activate_app(ctx.settings.pkg_name)


def _foreground_reported(ctx: FlowContext) -> bool:
    pkg = ctx.device.current_foreground_app()
    ctx.log.info(f"当前前台应用: {pkg or '无'}")
    return bool(pkg)


def _app_started(ctx: FlowContext) -> bool:
    """前置条件：启动应用并确认有前台应用"""
    _activate(ctx)
    if not _foreground_reported(ctx):
        raise PreconditionUnmet("app could not be started")
    return True


def _on_main_screen(ctx: FlowContext) -> bool:
    _app_started(ctx)
    timeout = ctx.settings.popup_transition_timeout_sec
    if not ctx.matcher.wait_until_any_visible(MAIN_SCREEN_MARKERS, timeout):
        raise PreconditionUnmet("main screen not reached")
    return True


def build_start_app(ctx: FlowContext) -> List[Stage]:
    return [
        Stage(
            "activate_app",
            action=lambda: _activate(ctx),
            verification=lambda: _foreground_reported(ctx),
        )
    ]


def build_main_logo(ctx: FlowContext) -> List[Stage]:
    return [
        Stage(
            "main_logo",
            precondition=lambda: _app_started(ctx),
            verification=lambda: ctx.expect_any_visible(MAIN_SCREEN_MARKERS, ctx.settings.marker_timeout_sec),
        )
    ]


def _drag(ctx: FlowContext) -> None:
    w, h = ctx.device.screen_size()
    ctx.log.info(f"屏幕尺寸: {w}x{h}")
    ctx.gestures.drag_cheek(ctx.settings.drag_mode)
    # 等待游戏开始加载
    ctx.settle(ctx.settings.post_action_settle_sec)


def build_cheek_drag(ctx: FlowContext) -> List[Stage]:
    s = ctx.settings
    return [
        Stage(
            "cheek_drag",
            precondition=lambda: _on_main_screen(ctx),
            action=lambda: _drag(ctx),
            verification=lambda: ctx.expect_visible("game_started", s.game_start_verify_timeout_sec),
        )
    ]


def _press_back(ctx: FlowContext) -> None:
    ctx.device.back()
    ctx.settle(ctx.settings.settle_short_sec)


def _left_foreground(ctx: FlowContext) -> bool:
    ctx.settle(ctx.settings.exit_verification_wait_ms / 1000.0)
    state = ctx.device.query_app_state(ctx.settings.pkg_name)
    ctx.log.info(f"最终应用状态: {state.value}")
    return not ctx.app_in_foreground()


def build_game_exit(ctx: FlowContext) -> List[Stage]:
    s = ctx.settings
    return [
        Stage("open_exit_popup", precondition=ctx.app_in_foreground, action=lambda: _press_back(ctx)),
        Stage("tap_exit_button", action=lambda: ctx.tap_template("exit_button", s.exit_button_timeout_sec)),
        Stage("verify_exited", verification=lambda: _left_foreground(ctx)),
    ]


__all__ = [
    "build_start_app",
    "build_main_logo",
    "build_cheek_drag",
    "build_game_exit",
]
