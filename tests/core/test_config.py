import pytest
from pydantic import ValidationError

from smokeqa.core.config import DEFAULT_TEMPLATES, Settings, load_settings
from smokeqa.core.constants import DragMode


def test_default_timings():
    s = Settings(_env_file=None)
    assert s.download_min_dwell_sec == 270
    assert s.download_timeout_sec == 360
    assert s.download_check_interval_sec == 10
    assert s.download_progress_interval_sec == 30
    assert s.implicit_wait_sec == 10
    assert s.permission_popup_timeout_sec == 3
    assert s.drag_duration_ms == 1000
    assert s.screen_margin_px == 50
    assert s.tap_hold_ms == 100
    assert s.sheet_name == "checklist"
    assert s.result_column == "F"
    assert s.header_row_offset == 3
    assert s.drag_mode == DragMode.ADAPTIVE
    assert s.templates == DEFAULT_TEMPLATES


def test_settings_are_immutable():
    s = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        s.poll_interval_sec = 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"poll_interval_sec": 0},
        {"poll_interval_sec": 5, "permission_popup_timeout_sec": 3},
        {"download_min_dwell_sec": 360, "download_timeout_sec": 360},
        {"download_check_interval_sec": 400},
        {"download_progress_interval_sec": 0},
        {"match_threshold": 0},
        {"match_threshold": 1.5},
        {"header_row_offset": -1},
        {"result_column": "F1"},
        {"screen_margin_px": -5},
        {"drag_mode": "diagonal"},
    ],
)
def test_invalid_combinations_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_env_prefix_and_env_file(tmp_path, monkeypatch):
    env = tmp_path / "smoke.env"
    env.write_text("SMOKEQA_SHEET_NAME=results\nSMOKEQA_DRAG_MODE=offset\n", encoding="utf-8")
    monkeypatch.setenv("SMOKEQA_HEADER_ROW_OFFSET", "5")

    s = load_settings(str(env))

    assert s.sheet_name == "results"
    assert s.drag_mode == DragMode.OFFSET
    assert s.header_row_offset == 5


def test_template_path_joins_template_dir():
    s = Settings(_env_file=None, template_dir="assets/imgs")
    assert s.template_path("main_marker") == "assets/imgs/main_marker.png"
    with pytest.raises(KeyError):
        s.template_path("nope")
