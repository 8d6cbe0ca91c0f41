"""
冒烟用例目录

序号决定结果表中的行号，不可随意调整。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from ..flow import (
    FlowContext,
    Stage,
    build_cheek_drag,
    build_first_launch,
    build_game_exit,
    build_login_again,
    build_login_first,
    build_logout,
    build_main_logo,
    build_start_app,
)


@dataclass(frozen=True)
class SmokeCase:
    index: int
    name: str
    build: Callable[[FlowContext], List[Stage]]
    description: str = ""

    @property
    def case_id(self) -> str:
        return f"TC{self.index:02d}"

    @property
    def label(self) -> str:
        return f"{self.case_id}_{self.name}"


CATALOG: Sequence[SmokeCase] = (
    SmokeCase(1, "StartApp", build_start_app, "应用启动"),
    SmokeCase(2, "MainLogo", build_main_logo, "主画面标志"),
    SmokeCase(3, "CheekDragStart", build_cheek_drag, "拖拽后进入游戏"),
    SmokeCase(4, "GameExit", build_game_exit, "返回键退出游戏"),
    SmokeCase(5, "FirstLaunchAndSetup", build_first_launch, "首次启动与初始设置"),
    SmokeCase(6, "GoogleFirstLogin", build_login_first, "Google 首次登录"),
    SmokeCase(7, "GoogleReLogin", build_login_again, "Google 再次登录"),
    SmokeCase(8, "Logout", build_logout, "登出"),
)


def find_case(key: str, catalog: Sequence[SmokeCase] = CATALOG) -> SmokeCase:
    """按 TC05 / 5 / FirstLaunchAndSetup 查找用例（不区分大小写）"""
    k = key.strip().lower()
    for case in catalog:
        if k in (case.case_id.lower(), str(case.index), case.name.lower(), case.label.lower()):
            return case
    raise ValueError(f"Unknown test case: {key}")


def select_cases(keys: Optional[Iterable[str]] = None, catalog: Sequence[SmokeCase] = CATALOG) -> List[SmokeCase]:
    """选择用例；为空时返回全部（按目录顺序），否则保持给定顺序并去重"""
    if not keys:
        return list(catalog)
    selected: List[SmokeCase] = []
    for key in keys:
        case = find_case(key, catalog)
        if case not in selected:
            selected.append(case)
    return selected


__all__ = ["SmokeCase", "CATALOG", "find_case", "select_cases"]
