"""
截图留证

文件名：{prefix}_{YYYYmmdd_HHMMSS_fff}.png，prefix 中的非法字符替换为下划线。
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, List, Optional

from ...core.logger import logger
from ...core.timeutils import file_timestamp


_UNSAFE = re.compile(r"[^\w.-]+")


def sanitize_prefix(prefix: str) -> str:
    cleaned = _UNSAFE.sub("_", prefix.strip()).strip("_")
    return cleaned or "evidence"


class EvidenceStore:
    def __init__(self, root: str | Path, *, timestamp: Callable[[], str] = file_timestamp) -> None:
        self.root = Path(root)
        self._timestamp = timestamp
        self.saved: List[Path] = []

    def save(self, png: bytes, prefix: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{sanitize_prefix(prefix)}_{self._timestamp()}.png"
        # 同一毫秒内重复保存时追加序号
        n = 1
        while path.exists():
            path = self.root / f"{sanitize_prefix(prefix)}_{self._timestamp()}_{n}.png"
            n += 1
        path.write_bytes(png)
        self.saved.append(path)
        logger.info(f"[Evidence] {path.as_posix()}")
        return path

    def capture(self, device, prefix: str) -> Optional[Path]:
        """截图并保存；失败只记录日志，返回 None。"""
        try:
            return self.save(device.capture(), prefix)
        except Exception as e:
            logger.warning(f"[Evidence] 截图留证失败 ({prefix}): {e}")
            return None


__all__ = ["EvidenceStore", "sanitize_prefix"]
