import pytest

from conftest import FakeDevice, FakeMatcher
from smokeqa.core.constants import AppState, FailureKind, Outcome
from smokeqa.modules.emu.gestures import GestureDriver
from smokeqa.modules.emu.types import UiNode
from smokeqa.modules.flow import (
    FlowContext,
    StageSequencer,
    build_cheek_drag,
    build_first_launch,
    build_game_exit,
    build_login_again,
    build_login_first,
    build_logout,
    build_main_logo,
    build_start_app,
)
from smokeqa.modules.reporting.evidence import EvidenceStore


ALLOW_ID = "com.android.permissioncontroller:id/permission_allow_button"


@pytest.fixture()
def env(settings, fake_clock, tmp_path):
    device = FakeDevice(pkg=settings.pkg_name)
    matcher = FakeMatcher(fake_clock)
    ctx = FlowContext(
        settings,
        device,
        matcher,
        GestureDriver(device),
        evidence=EvidenceStore(tmp_path / "evidence"),
        clock=fake_clock,
    )
    return ctx, device, matcher, fake_clock


def _run(stages, ctx=None):
    seq = StageSequencer(case_id="TC", capture=ctx.capture if ctx is not None else None)
    ok = seq.run(stages)
    return ok, seq.outcomes


def test_start_app(env):
    ctx, device, _, _ = env
    ok, outcomes = _run(build_start_app(ctx))

    assert ok is True
    assert device.activated == ["com.test.game"]
    assert outcomes[0].outcome == Outcome.PASS


def test_start_app_fails_without_foreground(env):
    ctx, device, _, _ = env
    device.foreground = None
    ok, outcomes = _run(build_start_app(ctx))
    assert ok is False
    assert outcomes[-1].kind == FailureKind.VERIFY


@pytest.mark.parametrize("marker", ["target_logo", "main_marker"])
def test_main_logo_accepts_either_marker(env, marker):
    ctx, _, matcher, _ = env
    matcher.visible.add(marker)
    ok, _ = _run(build_main_logo(ctx))
    assert ok is True


def test_main_logo_blocked_when_app_not_started(env):
    ctx, device, _, _ = env
    device.foreground = None
    ok, outcomes = _run(build_main_logo(ctx))
    assert ok is False
    assert outcomes[-1].outcome == Outcome.BLOCK


def test_cheek_drag(env):
    ctx, device, matcher, _ = env
    matcher.visible.update({"target_logo", "game_started"})

    ok, _ = _run(build_cheek_drag(ctx))

    assert ok is True
    drag = device.pointer_calls[0]
    assert (drag[0].x, drag[2].x) == (540, 324)


def test_cheek_drag_blocked_off_main_screen(env):
    ctx, device, _, _ = env
    ok, outcomes = _run(build_cheek_drag(ctx))
    assert outcomes[-1].outcome == Outcome.BLOCK
    assert "main screen" in outcomes[-1].reason
    assert device.pointer_calls == []


def test_game_exit(env):
    ctx, device, matcher, _ = env
    matcher.visible.add("exit_button")
    matcher.centers["exit_button"] = (700, 1500)

    original_send = device.send_pointer_sequence

    def send(ops):
        original_send(ops)
        device.app_state = AppState.NOT_RUNNING

    device.send_pointer_sequence = send
    ok, outcomes = _run(build_game_exit(ctx))

    assert ok is True
    assert device.backs == 1
    assert device.pointer_calls[0][0].x == 700
    assert [o.stage_name for o in outcomes] == ["open_exit_popup", "tap_exit_button", "verify_exited"]


def test_game_exit_blocked_when_not_foreground(env):
    ctx, device, _, _ = env
    device.app_state = AppState.BACKGROUND
    ok, outcomes = _run(build_game_exit(ctx))
    assert outcomes[0].outcome == Outcome.BLOCK
    assert device.backs == 0


def test_first_launch_full_run(env, settings):
    ctx, device, matcher, clock = env
    device.resource_ids[ALLOW_ID] = UiNode("", ALLOW_ID, (100, 200, 300, 260), True)
    matcher.visible.update({"download_button", "terms_screen", "terms_agree_all"})
    matcher.visible_after["download_complete"] = 300

    ok, outcomes = _run(build_first_launch(ctx))

    assert ok is True
    assert [o.index for o in outcomes] == [1, 2, 3, 4, 5, 6]
    assert device.cleared == ["com.test.game"]
    # 权限按钮、下载按钮、开始按钮、同意按钮
    assert len(device.pointer_calls) == 4
    assert device.pointer_calls[0][0].x == 200
    assert clock.now() >= settings.download_min_dwell_sec


def test_first_launch_tolerates_missing_permission_popup(env):
    ctx, device, matcher, _ = env
    matcher.visible.update({"download_button", "download_complete", "terms_agree_all"})

    ok, outcomes = _run(build_first_launch(ctx))

    assert ok is True
    assert outcomes[1].outcome == Outcome.PASS
    assert device.wait_history[0] == ctx.settings.permission_popup_timeout_sec


def test_first_launch_download_timeout(env):
    ctx, _, matcher, clock = env
    matcher.visible.add("download_button")

    ok, outcomes = _run(build_first_launch(ctx))

    assert ok is False
    assert outcomes[-1].stage_name == "download_completion"
    assert outcomes[-1].kind == FailureKind.TIMEOUT
    assert clock.now() == pytest.approx(360)


def test_login_first_selects_account_by_text(env):
    ctx, device, matcher, _ = env
    device.texts["tester@example.com"] = UiNode("tester@example.com", "", (0, 500, 1080, 600))
    matcher.visible.update({"google_login", "target_logo"})

    ok, outcomes = _run(build_login_first(ctx))

    assert ok is True
    assert len(outcomes) == 3
    assert device.pointer_calls[1][0].y == 550


def test_login_first_account_missing_is_timeout(env):
    ctx, device, matcher, _ = env
    device.texts["someone@else.com"] = UiNode("someone@else.com", "", (0, 0, 10, 10))
    matcher.visible.update({"google_login", "target_logo"})

    ok, outcomes = _run(build_login_first(ctx))

    assert ok is False
    assert outcomes[-1].stage_name == "select_account"
    assert outcomes[-1].kind == FailureKind.TIMEOUT


def test_login_first_blocked_without_account(env, settings):
    ctx, _, matcher, _ = env
    ctx.settings = settings.model_copy(update={"target_google_email": ""})
    matcher.visible.update({"google_login"})

    ok, outcomes = _run(build_login_first(ctx))

    assert [o.outcome for o in outcomes] == [Outcome.PASS, Outcome.BLOCK]


def test_login_again_skips_account_chooser(env):
    ctx, device, matcher, _ = env
    matcher.visible.update({"google_login", "main_marker"})

    ok, outcomes = _run(build_login_again(ctx))

    assert ok is True
    assert len(outcomes) == 2
    assert device.wait_history == []


def test_logout_full_run(env):
    ctx, device, matcher, _ = env
    matcher.visible.update(
        {
            "game_started",
            "menu_button",
            "menu_popup",
            "settings_button",
            "settings_popup",
            "etc_button",
            "logout_button",
            "logout_confirm_button",
            "terms_screen",
        }
    )

    ok, outcomes = _run(build_logout(ctx))

    assert ok is True
    assert len(outcomes) == 9
    assert len(device.pointer_calls) == 5


def test_logout_stops_when_menu_popup_missing(env):
    ctx, device, matcher, _ = env
    matcher.visible.update({"game_started", "menu_button", "settings_button"})

    ok, outcomes = _run(build_logout(ctx), ctx)

    assert ok is False
    assert [o.stage_name for o in outcomes] == ["verify_lobby", "tap_menu", "verify_menu_popup"]
    assert outcomes[-1].evidence is not None
    assert "settings_button" not in matcher.checked
