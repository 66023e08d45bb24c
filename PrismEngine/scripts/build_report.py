#!/usr/bin/env python3
"""
报告构建工具。

读取报告JSON，校验通过后渲染 Markdown 与 MDX 两种产物并写入内容目录：
    <content-dir>/reports/<slug>/index.md
    <content-dir>/reports/<slug>.mdx

使用方法:
    python -m PrismEngine.scripts.build_report report.json
    prism-build report.json my-report --content-dir src/content --target all
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from PrismEngine.core import ALL_TARGETS, ArtifactStorage, ReportPublisher
from PrismEngine.ir import ReportValidationError
from PrismEngine.utils.config import settings


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    parser = argparse.ArgumentParser(
        description="报告构建工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  %(prog)s report.json
  %(prog)s report.json q3-review --target markdown
        """,
    )
    parser.add_argument("report", help="报告JSON文件")
    parser.add_argument("slug", nargs="?", help="产物slug，缺省时取报告slug或由标题生成")
    parser.add_argument(
        "--content-dir",
        default=settings.CONTENT_DIR,
        help=f"内容目录（默认: {settings.CONTENT_DIR}）",
    )
    parser.add_argument(
        "--target",
        choices=[*ALL_TARGETS, "all"],
        default="all",
        help="输出目标（默认: all）",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="显示详细信息",
    )

    args = parser.parse_args(argv)

    # 配置日志
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    report_path = Path(args.report)
    try:
        report = json.loads(report_path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.error(f"无法读取文件 {report_path}: {exc}")
        return 1
    except json.JSONDecodeError as exc:
        logger.error(f"JSON解析失败 {report_path}: {exc}")
        return 1

    targets = ALL_TARGETS if args.target == "all" else (args.target,)
    publisher = ReportPublisher(
        ArtifactStorage(args.content_dir, settings.MARKDOWN_INDEX_FILENAME)
    )
    try:
        paths = publisher.publish(report, slug=args.slug, targets=targets)
    except ReportValidationError as exc:
        print("Validation errors:", file=sys.stderr)
        for line in exc.report.format_lines():
            print(f"  {line}", file=sys.stderr)
        return 1
    except ValueError as exc:
        logger.error(str(exc))
        return 1

    for written in (paths.markdown, paths.mdx):
        if written:
            print(f"Wrote {written}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
