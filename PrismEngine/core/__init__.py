"""
Prism Engine核心工具集合。

该包封装产物落盘与发布流程，命令行与HTTP接口都复用这些工具。
"""

from .artifact_storage import ArtifactPaths, ArtifactStorage, resolve_slug, slugify
from .publisher import ALL_TARGETS, ReportPublisher

__all__ = [
    "ArtifactPaths",
    "ArtifactStorage",
    "resolve_slug",
    "slugify",
    "ALL_TARGETS",
    "ReportPublisher",
]
