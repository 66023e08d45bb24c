"""
Prism Engine渲染器集合。

提供 MarkdownRenderer（纯文本目标）与 MDXRenderer（组件嵌入目标）。
"""

from .markdown_renderer import MarkdownRenderer
from .mdx_renderer import MDXRenderer

RENDER_TARGETS = {
    "markdown": MarkdownRenderer,
    "mdx": MDXRenderer,
}

__all__ = [
    "MarkdownRenderer",
    "MDXRenderer",
    "RENDER_TARGETS",
]
