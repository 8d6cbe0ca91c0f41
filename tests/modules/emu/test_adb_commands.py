import subprocess

import pytest

from smokeqa.modules.emu import adb as adb_module
from smokeqa.modules.emu.adb import Adb, AdbError


def _completed(stdout=b"", stderr=b"", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture()
def fake_run(monkeypatch):
    calls = []
    replies = []

    def _run(cmd, **kwargs):
        calls.append(cmd)
        return replies.pop(0) if replies else _completed()

    monkeypatch.setattr(adb_module.subprocess, "run", _run)
    return calls, replies


def test_devices_parses_attached_only(fake_run):
    calls, replies = fake_run
    replies.append(_completed(b"List of devices attached\nemulator-5554\tdevice\n127.0.0.1:16384\toffline\n"))

    assert Adb("adb").devices() == ["emulator-5554"]
    assert calls[0] == ["adb", "devices"]


def test_focused_package_from_current_focus(fake_run):
    _, replies = fake_run
    replies.append(
        _completed(b"  mCurrentFocus=Window{a1b2c3 u0 com.test.game/com.unity.Activity}\n")
    )
    assert Adb().focused_package("emulator-5554") == "com.test.game"


def test_focused_package_none_when_unknown(fake_run):
    _, replies = fake_run
    replies.append(_completed(b"nothing useful"))
    assert Adb().focused_package("") is None


def test_wm_size_prefers_override(fake_run):
    _, replies = fake_run
    replies.append(_completed(b"Physical size: 1080x2340\nOverride size: 720x1560\n"))
    assert Adb().wm_size("x") == (720, 1560)


def test_swipe_command_line(fake_run):
    calls, _ = fake_run
    Adb().swipe("emulator-5554", 1, 2, 3, 4, 250)
    assert calls[0] == ["adb", "-s", "emulator-5554", "shell", "input", "swipe", "1", "2", "3", "4", "250"]


def test_nonzero_exit_raises(fake_run):
    _, replies = fake_run
    replies.append(_completed(stderr=b"error: device offline", returncode=1))
    with pytest.raises(AdbError, match="device offline"):
        Adb().keyevent("x", 4)


def test_pm_clear_requires_success(fake_run):
    _, replies = fake_run
    replies.append(_completed(b"Failed"))
    with pytest.raises(AdbError):
        Adb().pm_clear("x", "com.test.game")


def test_missing_binary_is_adb_error(monkeypatch):
    def _run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(adb_module.subprocess, "run", _run)
    with pytest.raises(AdbError, match="not found"):
        Adb("/no/adb").devices()


def test_monkey_falls_back_to_am_start(fake_run):
    calls, replies = fake_run
    replies.append(_completed(b"** No activities found to run, monkey aborted."))
    replies.append(_completed(b"Starting: Intent"))

    Adb().start_app_monkey("x", "com.test.game", fallback_activity="com.unity.Main")

    assert calls[1][-2:] == ["-n", "com.test.game/com.unity.Main"]
