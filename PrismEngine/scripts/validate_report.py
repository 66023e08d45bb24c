#!/usr/bin/env python3
"""
报告JSON校验工具。

命令行工具，用于：
- 按区块目录校验一个或多个报告JSON
- 逐条列出所有结构错误（不截断）
- 任一文件无效时以非零状态退出

使用方法:
    python -m PrismEngine.scripts.validate_report report.json
    prism-validate reports/*.json --verbose
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from PrismEngine.ir import ReportValidator


def validate_file(path: Path, validator: ReportValidator) -> bool:
    """
    校验单个文件并打印结果。

    返回:
        bool: 文件存在、可解析且通过校验时为True。
    """
    try:
        candidate = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.error(f"无法读取文件 {path}: {exc}")
        return False
    except json.JSONDecodeError as exc:
        logger.error(f"JSON解析失败 {path}: {exc}")
        return False

    result = validator.validate(candidate)
    if result.valid:
        print("Valid report.")
        return True
    print("Validation errors:", file=sys.stderr)
    for line in result.format_lines():
        print(f"  {line}", file=sys.stderr)
    logger.debug(f"{path}: {len(result.errors)} 处错误")
    return False


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    parser = argparse.ArgumentParser(
        description="报告JSON校验工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  %(prog)s report.json
  %(prog)s a.json b.json --verbose
        """,
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="要校验的报告JSON文件",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="显示详细信息",
    )

    args = parser.parse_args(argv)

    # 配置日志
    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="INFO")

    validator = ReportValidator()
    all_valid = True
    for path_str in args.paths:
        path = Path(path_str)
        if len(args.paths) > 1:
            print(f"{path}:")
        if not validate_file(path, validator):
            all_valid = False

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
