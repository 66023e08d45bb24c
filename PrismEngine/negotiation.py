"""
报告页面的内容协商。

同一份报告同时有组件化页面（浏览器）与Markdown纯文本（命令行工具、
爬虫、AI 代理）两种表示。每个请求独立判定：命中报告路径、且请求方
偏好纯文本时，尝试读取同目录下预先生成的 index.md；读取成功就直接
返回，否则交还给常规的站点处理流程。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Tuple

from loguru import logger

from PrismEngine.utils.config import Settings, settings

MARKDOWN_CONTENT_TYPE = "text/markdown; charset=utf-8"
CONTENT_FORMAT_HEADER = "X-Content-Format"
CONTENT_FORMAT_MARKDOWN = "markdown"

# 以路径取回产物正文；不存在时返回None
ArtifactFetcher = Callable[[str], Awaitable[Optional[str]]]


@dataclass(frozen=True)
class NegotiationPolicy:
    """内容协商策略：路径前缀、产物文件名、纯文本媒体类型与客户端关键字"""
    reports_prefix: str = "/reports/"
    index_filename: str = "index.md"
    media_types: Tuple[str, ...] = ("text/markdown", "text/plain")
    agent_keywords: Tuple[str, ...] = (
        "curl",
        "wget",
        "httpie",
        "anthropic",
        "openai",
        "claudebot",
        "gptbot",
    )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "NegotiationPolicy":
        config = config or settings
        return cls(
            reports_prefix=config.REPORTS_URL_PREFIX,
            index_filename=config.MARKDOWN_INDEX_FILENAME,
            media_types=tuple(config.markdown_media_types),
            agent_keywords=tuple(config.markdown_agent_keywords),
        )


@dataclass(frozen=True)
class NegotiationRequest:
    """判定所需的请求信息"""
    path: str
    accept: str = ""
    user_agent: str = ""


@dataclass
class NegotiationResult:
    """served为False表示交还常规处理；为True时body/headers即响应内容"""
    served: bool
    body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def defer(cls) -> "NegotiationResult":
        return cls(served=False)


def is_report_path(path: str, policy: NegotiationPolicy) -> bool:
    return (path or "").startswith(policy.reports_prefix)


def wants_plain_text(request: NegotiationRequest, policy: NegotiationPolicy) -> bool:
    """Accept 中含纯文本媒体类型，或 User-Agent 命中非浏览器客户端关键字"""
    accept = request.accept or ""
    if any(media_type in accept for media_type in policy.media_types):
        return True
    user_agent = (request.user_agent or "").lower()
    return any(keyword.lower() in user_agent for keyword in policy.agent_keywords)


def derive_artifact_path(path: str, index_filename: str = "index.md") -> str:
    """/reports/foo 与 /reports/foo/ 均映射为 /reports/foo/index.md"""
    return f"{path.rstrip('/')}/{index_filename}"


async def negotiate(
    request: NegotiationRequest,
    fetch_artifact: ArtifactFetcher,
    policy: Optional[NegotiationPolicy] = None,
) -> NegotiationResult:
    """
    判定本次请求是否直接返回Markdown产物。

    参数:
        request: 请求路径与相关请求头。
        fetch_artifact: 读取产物的异步函数，未找到时返回None。
        policy: 协商策略，默认取全局配置。

    返回:
        NegotiationResult: served=True 时携带产物正文与响应头。
    """
    policy = policy or NegotiationPolicy.from_settings()
    if not is_report_path(request.path, policy):
        return NegotiationResult.defer()
    if not wants_plain_text(request, policy):
        return NegotiationResult.defer()

    artifact_path = derive_artifact_path(request.path, policy.index_filename)
    try:
        body = await fetch_artifact(artifact_path)
    except Exception as exc:
        logger.warning(f"读取Markdown产物失败，回退到常规页面: {artifact_path} ({exc})")
        return NegotiationResult.defer()

    if body is None:
        logger.debug(f"Markdown产物不存在，回退到常规页面: {artifact_path}")
        return NegotiationResult.defer()

    return NegotiationResult(
        served=True,
        body=body,
        headers={
            "Content-Type": MARKDOWN_CONTENT_TYPE,
            CONTENT_FORMAT_HEADER: CONTENT_FORMAT_MARKDOWN,
        },
    )


class DirectoryArtifactFetcher:
    """
    从已构建站点目录读取产物。

    URL路径被解析到根目录之下；越界路径或不存在的文件视为未找到。
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    async def __call__(self, path: str) -> Optional[str]:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            logger.warning(f"拒绝读取站点目录之外的路径: {path}")
            return None
        if not target.is_file():
            return None
        return await asyncio.to_thread(target.read_text, encoding="utf-8")


__all__ = [
    "MARKDOWN_CONTENT_TYPE",
    "CONTENT_FORMAT_HEADER",
    "CONTENT_FORMAT_MARKDOWN",
    "ArtifactFetcher",
    "NegotiationPolicy",
    "NegotiationRequest",
    "NegotiationResult",
    "is_report_path",
    "wants_plain_text",
    "derive_artifact_path",
    "negotiate",
    "DirectoryArtifactFetcher",
]
