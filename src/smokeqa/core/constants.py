"""
常量和枚举定义
"""
from enum import Enum


class Outcome(str, Enum):
    """阶段/用例结果（写入表格的字面值）"""
    PASS = "Pass"
    FAIL = "Fail"
    BLOCK = "Block"


class FailureKind(str, Enum):
    """失败分类，用于日志区分超时与异常"""
    TIMEOUT = "timeout"  # 等待超时
    VERIFY = "verify"  # 校验不成立
    ERROR = "error"  # 动作抛出异常
    BLOCK = "block"  # 前置条件不满足


class AppState(str, Enum):
    """应用运行状态"""
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    NOT_RUNNING = "not_running"


class DownloadState(str, Enum):
    """资源下载检测状态机"""
    WAITING = "waiting"  # 最短驻留期，不做检测
    CHECKING = "checking"  # 轮询完成标记
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class DragMode(str, Enum):
    """拖拽手势变体"""
    ADAPTIVE = "adaptive"  # 屏幕中心起手
    OFFSET = "offset"  # 中心右下偏移起手，带边距钳制
