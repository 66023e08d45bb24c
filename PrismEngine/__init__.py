"""
Prism Engine：报告JSON的校验、双目标渲染与内容协商。

同一份报告被渲染为面向浏览器的 MDX 组件页面与面向命令行/爬虫/AI 代理
的 Markdown 纯文本，请求时按 Accept 与 User-Agent 决定返回哪一种。
"""

__version__ = "1.0.0"

from .ir import ReportValidationError, ReportValidator, normalize_report, validate_report
from .negotiation import NegotiationPolicy, NegotiationRequest, NegotiationResult, negotiate
from .renderers import MarkdownRenderer, MDXRenderer

__all__ = [
    "__version__",
    "ReportValidationError",
    "ReportValidator",
    "validate_report",
    "normalize_report",
    "MarkdownRenderer",
    "MDXRenderer",
    "NegotiationPolicy",
    "NegotiationRequest",
    "NegotiationResult",
    "negotiate",
]
