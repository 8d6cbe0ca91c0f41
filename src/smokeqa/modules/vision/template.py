"""
模板匹配

单一最佳匹配，TM_CCOEFF_NORMED，默认阈值 0.85。坐标相对截图左上角。
模板比截图大（低分辨率设备、横竖屏不一致）视为未匹配，返回 None。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import cv2  # type: ignore
import numpy as np

from .utils import ImageLike, load_image


DEFAULT_THRESHOLD = 0.85


@dataclass(frozen=True)
class Match:
    x: int
    y: int
    w: int
    h: int
    score: float

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)


def fits_inside(screen: np.ndarray, template: np.ndarray) -> bool:
    sh, sw = screen.shape[:2]
    th, tw = template.shape[:2]
    return th <= sh and tw <= sw


def match_template(
    image: ImageLike,
    template: ImageLike,
    *,
    threshold: Optional[float] = None,
) -> Optional[Match]:
    """在截图中查找模板的最佳位置；得分低于阈值或模板放不下时返回 None"""
    thr = DEFAULT_THRESHOLD if threshold is None else float(threshold)
    screen = load_image(image)
    tpl = load_image(template)
    if not fits_inside(screen, tpl):
        return None

    scores = cv2.matchTemplate(screen, tpl, cv2.TM_CCOEFF_NORMED)
    _, best, _, (x, y) = cv2.minMaxLoc(scores)
    if best < thr:
        return None
    th, tw = tpl.shape[:2]
    return Match(x=int(x), y=int(y), w=int(tw), h=int(th), score=float(best))


__all__ = ["DEFAULT_THRESHOLD", "Match", "fits_inside", "match_template"]
