"""
命令行入口

    smokeqa [--cases TC05 TC06 ...] [--list] [--dry-run] [--env-file PATH]

退出码：全部 Pass 为 0，否则 1；配置或模板资源错误为 2。
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from .core.config import load_settings
from .core.errors import ResourceNotFound, SmokeQAError
from .core.logger import logger, setup_logger
from .modules.emu.adapter import open_session
from .modules.flow.context import FlowContext
from .modules.reporting import EvidenceStore, GoogleSheetsSink, LogSink, ResultRecorder
from .modules.suite import CATALOG, SmokeSuite, select_cases
from .modules.vision.registry import TemplateRegistry


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smokeqa", description="Mobile game smoke test runner")
    parser.add_argument("--cases", nargs="+", metavar="CASE", help="TC05 / 5 / FirstLaunchAndSetup (default: all)")
    parser.add_argument("--list", action="store_true", help="List test cases and exit")
    parser.add_argument("--dry-run", action="store_true", help="Log results instead of writing to Google Sheets")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.list:
        for case in CATALOG:
            print(f"{case.case_id}  {case.name:<22} {case.description}")
        return EXIT_OK

    try:
        settings = load_settings(args.env_file)
    except ValidationError as e:
        print(f"配置错误:\n{e}", file=sys.stderr)
        return EXIT_CONFIG

    setup_logger(settings)

    try:
        cases = select_cases(args.cases)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_CONFIG

    registry = TemplateRegistry.from_settings(settings)
    try:
        registry.verify()
    except ResourceNotFound as e:
        logger.error(f"模板资源缺失，未连接设备: {e}")
        return EXIT_CONFIG

    if args.dry_run:
        sink = LogSink()
    elif not settings.spreadsheet_id:
        logger.error("未配置 SMOKEQA_SPREADSHEET_ID（或使用 --dry-run）")
        return EXIT_CONFIG
    else:
        sink = GoogleSheetsSink(settings.google_credentials_path)

    evidence = EvidenceStore(settings.evidence_dir)
    logger.info(f"执行用例: {', '.join(c.label for c in cases)}")
    try:
        with open_session(settings) as device:
            ctx = FlowContext.build(settings, device, registry, evidence=evidence)
            recorder = ResultRecorder.from_settings(settings, device, evidence, sink)
            suite = SmokeSuite(ctx, recorder)
            suite.run([c.case_id for c in cases])
    except KeyboardInterrupt:
        logger.warning("执行被中断")
        return EXIT_INTERRUPTED
    except SmokeQAError as e:
        logger.exception(f"执行中止: {e}")
        return EXIT_FAILED

    logger.info(f"执行结果:\n{suite.summary()}")
    return EXIT_OK if suite.all_passed else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
