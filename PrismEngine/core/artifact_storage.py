"""
渲染产物的落盘。

Markdown产物写入 reports/<slug>/index.md，使其能以目录式URL加固定
文件名被内容协商直接读取；MDX产物写入 reports/<slug>.mdx，交给站点
构建流程生成组件化页面。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from ..ir.schema import SLUG_PATTERN

REPORTS_SUBDIR = "reports"


@dataclass
class ArtifactPaths:
    """一次发布写出的产物位置，未写出的目标为None"""
    slug: str
    markdown: Optional[Path] = None
    mdx: Optional[Path] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "slug": self.slug,
            "markdown": str(self.markdown) if self.markdown else None,
            "mdx": str(self.mdx) if self.mdx else None,
        }


class ArtifactStorage:
    """
    产物写入器。

    负责：
        - 按slug计算两种产物的目标路径；
        - 自动创建目录并以UTF-8写入。
    """

    def __init__(self, content_dir: str | Path, index_filename: str = "index.md"):
        """
        Args:
            content_dir: 内容根目录，产物写入其下的 reports/ 子目录
            index_filename: Markdown产物文件名，需与内容协商使用的文件名一致
        """
        self.content_dir = Path(content_dir)
        self.index_filename = index_filename

    @property
    def reports_dir(self) -> Path:
        return self.content_dir / REPORTS_SUBDIR

    def markdown_path(self, slug: str) -> Path:
        return self.reports_dir / slug / self.index_filename

    def mdx_path(self, slug: str) -> Path:
        return self.reports_dir / f"{slug}.mdx"

    def write_markdown(self, slug: str, text: str) -> Path:
        return self._write(self.markdown_path(slug), text)

    def write_mdx(self, slug: str, text: str) -> Path:
        return self._write(self.mdx_path(slug), text)

    def _write(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info(f"产物已写入: {path}")
        return path


def slugify(text: str) -> str:
    """将标题转为仅含小写字母/数字/连字符的slug"""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower())
    return slug.strip("-")


def resolve_slug(report: Dict[str, Any], explicit: Optional[str] = None) -> str:
    """
    确定产物slug：显式参数 > 报告slug字段 > 由标题生成。

    Raises:
        ValueError: 得到的slug为空或不符合格式。
    """
    slug = explicit or report.get("slug") or slugify(str(report.get("title") or ""))
    if not slug or not re.fullmatch(SLUG_PATTERN, slug, re.ASCII):
        raise ValueError(f"无效的slug: {slug!r}，只允许小写字母、数字与连字符")
    return slug


__all__ = [
    "REPORTS_SUBDIR",
    "ArtifactPaths",
    "ArtifactStorage",
    "slugify",
    "resolve_slug",
]
