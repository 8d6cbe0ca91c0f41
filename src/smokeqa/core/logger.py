"""
日志配置模块
"""
import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from .config import Settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

_configured_for: Optional[Settings] = None
_case_sinks: Dict[str, int] = {}


def _console_stream():
    for stream in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__):
        if stream is not None:
            return stream
    return None


def setup_logger(settings: Settings, *, force: bool = False):
    """配置日志系统（重复调用无副作用，force=True 时重建所有 sink）"""
    global _configured_for

    if _configured_for is settings and not force:
        return logger

    # 移除默认处理器
    logger.remove()
    _case_sinks.clear()

    log_dir = Path(settings.log_path)
    log_dir.mkdir(parents=True, exist_ok=True)

    # 控制台输出
    console_missing = False
    if settings.log_console_enabled:
        stream = _console_stream()
        if stream is not None:
            logger.add(stream, level=settings.log_level, format=CONSOLE_FORMAT)
        else:
            console_missing = True

    # 文件输出 - 全局日志
    logger.add(
        log_dir / "smokeqa_{time:YYYY-MM-DD}.log",
        level=settings.log_level,
        format=FILE_FORMAT,
        rotation="00:00",
        retention=f"{settings.log_retention_days} days",
        encoding="utf-8",
    )

    # 错误日志单独记录
    logger.add(
        log_dir / "error_{time:YYYY-MM-DD}.log",
        level="ERROR",
        format=FILE_FORMAT,
        rotation="00:00",
        retention=f"{settings.log_retention_days * 2} days",
        encoding="utf-8",
    )

    if console_missing:
        logger.warning("未检测到可用控制台输出流，仅写入文件日志")

    _configured_for = settings
    return logger


def get_case_logger(case_id: str, settings: Settings):
    """获取用例专用日志器（同一用例只注册一次文件 sink）"""
    case_logger = logger.bind(case_id=case_id)
    if case_id in _case_sinks:
        return case_logger

    log_dir = Path(settings.log_path) / "cases"
    log_dir.mkdir(parents=True, exist_ok=True)
    _case_sinks[case_id] = logger.add(
        log_dir / f"case_{case_id}_{{time:YYYY-MM-DD}}.log",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        rotation="00:00",
        retention=f"{settings.log_retention_days} days",
        encoding="utf-8",
        filter=lambda record: record["extra"].get("case_id") == case_id,
    )
    return case_logger


__all__ = ["logger", "setup_logger", "get_case_logger"]
