from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Set

import cv2
import numpy as np
import pytest

from smokeqa.core.config import load_settings
from smokeqa.core.constants import AppState
from smokeqa.core.timeutils import Clock
from smokeqa.modules.emu.types import UiNode


class FakeClock(Clock):
    """sleep 只推进虚拟时间"""

    def __init__(self, start: float = 0.0):
        self.t = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds > 0:
            self.t += seconds


def png_bytes(img: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def noise_image(w: int = 320, h: int = 240, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


class FakeDevice:
    def __init__(self, *, size=(1080, 2340), screen: Optional[bytes] = None, pkg: str = "com.test.game"):
        self.size = size
        self.screen = screen if screen is not None else png_bytes(noise_image())
        self.pkg = pkg
        self.implicit_wait_sec = 10.0
        self.wait_history: List[float] = []
        self.pointer_calls: List[list] = []
        self.activated: List[str] = []
        self.cleared: List[str] = []
        self.backs = 0
        self.captures = 0
        self.app_state = AppState.FOREGROUND
        self.foreground: Optional[str] = pkg
        self.texts: Dict[str, UiNode] = {}
        self.resource_ids: Dict[str, UiNode] = {}
        self.capture_error: Optional[Exception] = None
        self.quit_called = False

    @contextmanager
    def implicit_wait(self, seconds):
        saved = self.implicit_wait_sec
        self.implicit_wait_sec = seconds
        self.wait_history.append(seconds)
        try:
            yield seconds
        finally:
            self.implicit_wait_sec = saved

    def activate_app(self, pkg):
        self.activated.append(pkg)

    def current_foreground_app(self):
        return self.foreground

    def query_app_state(self, pkg):
        return self.app_state

    def send_pointer_sequence(self, ops):
        self.pointer_calls.append(list(ops))

    def capture(self):
        self.captures += 1
        if self.capture_error is not None:
            raise self.capture_error
        return self.screen

    def screen_size(self):
        return self.size

    def back(self):
        self.backs += 1

    def clear_app_data(self, pkg):
        self.cleared.append(pkg)

    def find_text(self, text):
        return self.texts.get(text)

    def find_resource_id(self, resource_id):
        return self.resource_ids.get(resource_id)

    def visible_texts(self, contains=""):
        return [t for t in self.texts if contains in t]

    def quit(self):
        self.quit_called = True


class FakeMatcher:
    """按名称控制可见性；visible_after 可指定出现的虚拟时间"""

    def __init__(self, clock: FakeClock, visible: Optional[Set[str]] = None):
        self.clock = clock
        self.visible: Set[str] = set(visible or ())
        self.visible_after: Dict[str, float] = {}
        self.centers: Dict[str, tuple] = {}
        self.checked: List[str] = []

    def _on(self, name: str) -> bool:
        if name in self.visible:
            return True
        t = self.visible_after.get(name)
        return t is not None and self.clock.now() >= t

    def is_visible(self, name):
        self.checked.append(name)
        return self._on(name)

    def any_visible(self, names):
        return any(self.is_visible(n) for n in names)

    def locate_center(self, name, timeout=None):
        self.checked.append(name)
        if self._on(name):
            return self.centers.get(name, (100, 200))
        if timeout:
            self.clock.sleep(timeout)
        return None

    def wait_until_visible(self, name, timeout):
        return self._wait(lambda: self._on(name), timeout)

    def wait_until_any_visible(self, names, timeout):
        names = list(names)
        return self._wait(lambda: any(self._on(n) for n in names), timeout)

    def _wait(self, check: Callable[[], bool], timeout: float) -> bool:
        deadline = self.clock.now() + timeout
        while True:
            if check():
                return True
            if self.clock.now() >= deadline:
                return False
            self.clock.sleep(1.0)


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def settings(tmp_path):
    return load_settings(
        pkg_name="com.test.game",
        template_dir=str(tmp_path / "images"),
        evidence_dir=str(tmp_path / "evidence"),
        log_path=str(tmp_path / "logs"),
        log_console_enabled=False,
        spreadsheet_id="sheet-123",
        target_google_email="tester@example.com",
        settle_short_sec=0,
        settle_long_sec=0,
        relaunch_settle_sec=0,
        post_action_settle_sec=0,
        exit_verification_wait_ms=0,
    )
