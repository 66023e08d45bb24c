"""
报告发布流程：校验 → 两个目标分别渲染 → 写入产物。
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from loguru import logger

from ..ir import ReportValidationError, ReportValidator
from ..renderers import MarkdownRenderer, MDXRenderer
from .artifact_storage import ArtifactPaths, ArtifactStorage, resolve_slug

ALL_TARGETS = ("markdown", "mdx")


class ReportPublisher:
    """
    将一份报告JSON发布为Markdown与MDX两种产物。

    校验失败时抛出 ReportValidationError，不写出任何文件。
    """

    def __init__(
        self,
        storage: ArtifactStorage,
        validator: Optional[ReportValidator] = None,
        markdown_renderer: Optional[MarkdownRenderer] = None,
        mdx_renderer: Optional[MDXRenderer] = None,
    ):
        self.storage = storage
        self.validator = validator or ReportValidator()
        self.markdown_renderer = markdown_renderer or MarkdownRenderer()
        self.mdx_renderer = mdx_renderer or MDXRenderer()

    def publish(
        self,
        report: Dict[str, Any],
        slug: Optional[str] = None,
        targets: Iterable[str] = ALL_TARGETS,
    ) -> ArtifactPaths:
        """
        校验并渲染报告，按targets写出产物。

        参数:
            report: 报告JSON对象。
            slug: 可选，覆盖报告自带的slug。
            targets: 需要输出的目标，取值 markdown / mdx。

        返回:
            ArtifactPaths: 实际写出的文件位置。
        """
        validation = self.validator.validate(report)
        if not validation.valid:
            logger.error(f"报告校验失败，共 {len(validation.errors)} 处错误")
            raise ReportValidationError(validation)

        targets = set(targets)
        unknown = targets.difference(ALL_TARGETS)
        if unknown:
            raise ValueError(f"不支持的渲染目标: {', '.join(sorted(unknown))}")

        resolved_slug = resolve_slug(report, slug)
        paths = ArtifactPaths(slug=resolved_slug)
        if "markdown" in targets:
            paths.markdown = self.storage.write_markdown(
                resolved_slug, self.markdown_renderer.render(report)
            )
        if "mdx" in targets:
            paths.mdx = self.storage.write_mdx(resolved_slug, self.mdx_renderer.render(report))
        logger.info(f"报告 {resolved_slug} 发布完成")
        return paths


__all__ = ["ALL_TARGETS", "ReportPublisher"]
