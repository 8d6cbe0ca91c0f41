"""
Screen-level template lookups on top of match_template.

is_visible() runs under a short probe window (device implicit wait is
overridden and restored around the call), so it is safe to call on every
tick of an outer poll loop.
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np

from ...core.errors import ElementNotFound, TransportError
from ...core.logger import logger
from ...core.timeutils import SYSTEM_CLOCK, Clock
from ..emu.types import DeviceProtocol
from ..wait.poller import PollingWaiter
from .registry import TemplateRegistry
from .template import DEFAULT_THRESHOLD, Match, fits_inside, match_template
from .utils import load_image


MATCH_RETRY_SEC = 0.3


class ImageMatcher:
    def __init__(
        self,
        device: DeviceProtocol,
        registry: TemplateRegistry,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        probe_sec: float = 1.0,
        poll_interval_sec: float = 1.0,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self.device = device
        self.registry = registry
        self.threshold = threshold
        self.probe_sec = probe_sec
        self.poll_interval_sec = poll_interval_sec
        self.waiter = PollingWaiter(clock)

    def _grab(self) -> np.ndarray:
        raw = self.device.capture()
        try:
            return load_image(raw)
        except ValueError as e:
            raise TransportError(f"Screenshot could not be decoded: {e}") from e

    def _match_once(self, name: str) -> Match:
        tpl = self.registry.get(name)
        screen = self._grab()
        image = load_image(tpl.path)
        if not fits_inside(screen, image):
            logger.warning(
                f"[IMG] {name}: template {image.shape[1]}x{image.shape[0]} larger than "
                f"screen {screen.shape[1]}x{screen.shape[0]}, treated as not found"
            )
            raise ElementNotFound(name)
        m = match_template(screen, image, threshold=tpl.threshold or self.threshold)
        if m is None:
            raise ElementNotFound(name)
        return m

    def locate(self, name: str, timeout: Optional[float] = None) -> Optional[Match]:
        """Best match for the named template; None if absent for the whole window.

        timeout defaults to the device's ambient implicit wait.
        """
        budget = self.device.implicit_wait_sec if timeout is None else timeout
        return self.waiter.wait_for(lambda: self._match_once(name), budget, MATCH_RETRY_SEC)

    def locate_center(self, name: str, timeout: Optional[float] = None) -> Optional[Tuple[int, int]]:
        m = self.locate(name, timeout)
        if m is None:
            logger.info(f"[IMG] {name} not found")
            return None
        logger.debug(f"[IMG] {name} at ({m.x},{m.y}) {m.w}x{m.h} score={m.score:.3f} center={m.center}")
        return m.center

    def is_visible(self, name: str) -> bool:
        with self.device.implicit_wait(self.probe_sec):
            return self.locate(name) is not None

    def any_visible(self, names: Iterable[str]) -> bool:
        return any(self.is_visible(name) for name in names)

    def wait_until_visible(self, name: str, timeout: float) -> bool:
        logger.info(f"[IMG] waiting for {name} (timeout={timeout:.0f}s)")
        ok = self.waiter.wait_until(lambda: self.is_visible(name), timeout, self.poll_interval_sec)
        logger.info(f"[IMG] {name}: {'found' if ok else 'TIMEOUT'}")
        return ok

    def wait_until_any_visible(self, names: Iterable[str], timeout: float) -> bool:
        names = list(names)
        logger.info(f"[IMG] waiting for any of {names} (timeout={timeout:.0f}s)")
        ok = self.waiter.wait_until(lambda: self.any_visible(names), timeout, self.poll_interval_sec)
        logger.info(f"[IMG] {'/'.join(names)}: {'found' if ok else 'TIMEOUT'}")
        return ok


__all__ = ["ImageMatcher", "MATCH_RETRY_SEC"]
