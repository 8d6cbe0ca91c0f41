"""
ADB 适配封装

基于 Settings 的 adb_path，提供基础操作：
- connect(addr) / devices()
- screencap(addr) -> PNG bytes
- swipe / keyevent
- start_app_monkey / pm_clear / is_app_running
- focused_package / wm_size / surface_orientation
- dump_ui(addr) -> uiautomator XML
"""
from __future__ import annotations

import re
import subprocess
from typing import List, Optional, Tuple

from ...core.errors import TransportError


UI_DUMP_REMOTE_PATH = "/sdcard/window_dump.xml"

_FOCUS_PATTERNS = (
    re.compile(r"mCurrentFocus=Window\{\S+ \S+ ([\w.]+)/"),
    re.compile(r"mFocusedApp=.*?\s([\w.]+)/"),
)
_SIZE_PATTERN = re.compile(r"(Physical|Override) size:\s*(\d+)x(\d+)")
_ORIENTATION_PATTERN = re.compile(r"SurfaceOrientation:\s*(\d)")


class AdbError(TransportError):
    pass


def _decode(data: bytes | None) -> str:
    return (data or b"").decode(errors="ignore")


class Adb:
    def __init__(self, adb_path: str = "adb") -> None:
        self.adb = adb_path

    def _run(self, args: List[str], timeout: float = 10.0) -> subprocess.CompletedProcess:
        try:
            cp = subprocess.run(
                [self.adb, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise AdbError(f"ADB executable not found: {self.adb}") from e
        except subprocess.TimeoutExpired as e:
            raise AdbError(f"ADB command timed out after {timeout:.0f}s: {' '.join(args)}") from e
        return cp

    def _run_checked(self, args: List[str], timeout: float = 10.0) -> subprocess.CompletedProcess:
        cp = self._run(args, timeout=timeout)
        if cp.returncode != 0:
            raise AdbError(_decode(cp.stderr).strip() or f"adb {' '.join(args)} exited {cp.returncode}")
        return cp

    @staticmethod
    def _target(addr: str) -> List[str]:
        return ["-s", addr] if addr else []

    def connect(self, addr: str, timeout: float = 10.0) -> bool:
        cp = self._run(["connect", addr], timeout=timeout)
        out = _decode(cp.stdout).lower()
        return cp.returncode == 0 and ("connected" in out or "already" in out)

    def devices(self, timeout: float = 10.0) -> List[str]:
        cp = self._run(["devices"], timeout=timeout)
        result = []
        for line in _decode(cp.stdout).splitlines():
            line = line.strip()
            if not line or line.lower().startswith("list of devices"):
                continue
            parts = line.split()
            if len(parts) >= 2 and parts[1] == "device":
                result.append(parts[0])
        return result

    def screencap(self, addr: str, timeout: float = 15.0) -> bytes:
        cp = self._run_checked([*self._target(addr), "exec-out", "screencap", "-p"], timeout=timeout)
        return cp.stdout

    def swipe(self, addr: str, x1: int, y1: int, x2: int, y2: int, dur_ms: int = 300, timeout: float = 10.0) -> None:
        self._run_checked(
            [*self._target(addr), "shell", "input", "swipe", str(x1), str(y1), str(x2), str(y2), str(dur_ms)],
            timeout=timeout + dur_ms / 1000.0,
        )

    def keyevent(self, addr: str, keycode: int, timeout: float = 10.0) -> None:
        self._run_checked([*self._target(addr), "shell", "input", "keyevent", str(keycode)], timeout=timeout)

    def start_app_monkey(self, addr: str, pkg: str, timeout: float = 10.0, fallback_activity: str | None = None) -> None:
        cp = self._run([
            *self._target(addr), "shell", "monkey",
            "-p", pkg,
            "-c", "android.intent.category.LAUNCHER",
            "1",
        ], timeout=timeout)
        out = (_decode(cp.stdout) + _decode(cp.stderr)).lower()
        # monkey 返回 0 也可能没有真正注入事件，检测不到 "events injected" 时改用 am start
        if cp.returncode == 0 and "events injected" in out:
            return
        if fallback_activity:
            self._run_checked([
                *self._target(addr), "shell", "am", "start",
                "-a", "android.intent.action.MAIN",
                "-c", "android.intent.category.LAUNCHER",
                "-n", f"{pkg}/{fallback_activity}",
            ], timeout=timeout)
            return
        raise AdbError(f"Failed to launch {pkg}: {out.strip()}")

    def pm_clear(self, addr: str, pkg: str, timeout: float = 30.0) -> None:
        cp = self._run_checked([*self._target(addr), "shell", "pm", "clear", pkg], timeout=timeout)
        out = _decode(cp.stdout).strip()
        if "success" not in out.lower():
            raise AdbError(f"pm clear {pkg} failed: {out}")

    def is_app_running(self, addr: str, pkg: str, timeout: float = 5.0) -> bool:
        cp = self._run([*self._target(addr), "shell", "pidof", pkg], timeout=timeout)
        return cp.returncode == 0 and bool(_decode(cp.stdout).strip())

    def focused_package(self, addr: str, timeout: float = 10.0) -> Optional[str]:
        cp = self._run_checked([*self._target(addr), "shell", "dumpsys", "window", "windows"], timeout=timeout)
        text = _decode(cp.stdout)
        for pattern in _FOCUS_PATTERNS:
            m = pattern.search(text)
            if m:
                return m.group(1)
        return None

    def wm_size(self, addr: str, timeout: float = 10.0) -> Tuple[int, int]:
        cp = self._run_checked([*self._target(addr), "shell", "wm", "size"], timeout=timeout)
        sizes = {kind: (int(w), int(h)) for kind, w, h in _SIZE_PATTERN.findall(_decode(cp.stdout))}
        # Override 优先于 Physical
        size = sizes.get("Override") or sizes.get("Physical")
        if size is None:
            raise AdbError(f"Unexpected `wm size` output: {_decode(cp.stdout).strip()}")
        return size

    def surface_orientation(self, addr: str, timeout: float = 10.0) -> int:
        cp = self._run([*self._target(addr), "shell", "dumpsys", "input"], timeout=timeout)
        m = _ORIENTATION_PATTERN.search(_decode(cp.stdout))
        return int(m.group(1)) if m else 0

    def dump_ui(self, addr: str, timeout: float = 15.0) -> str:
        self._run_checked([*self._target(addr), "shell", "uiautomator", "dump", UI_DUMP_REMOTE_PATH], timeout=timeout)
        cp = self._run_checked([*self._target(addr), "exec-out", "cat", UI_DUMP_REMOTE_PATH], timeout=timeout)
        return _decode(cp.stdout)
