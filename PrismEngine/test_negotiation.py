"""
内容协商的测试用例。

异步函数通过 asyncio.run 驱动。
"""

import asyncio

import pytest

from PrismEngine.negotiation import (
    CONTENT_FORMAT_HEADER,
    MARKDOWN_CONTENT_TYPE,
    DirectoryArtifactFetcher,
    NegotiationPolicy,
    NegotiationRequest,
    derive_artifact_path,
    negotiate,
    wants_plain_text,
)

ARTIFACT = '---\ntitle: "Q3"\n---\n'


class FakeFetcher:
    """记录调用路径的内存产物源"""

    def __init__(self, artifacts=None, error=None):
        self.artifacts = artifacts or {}
        self.error = error
        self.calls = []

    async def __call__(self, path):
        self.calls.append(path)
        if self.error:
            raise self.error
        return self.artifacts.get(path)


def run(request, fetcher, policy=None):
    return asyncio.run(negotiate(request, fetcher, policy or NegotiationPolicy()))


class TestNegotiate:
    """测试协商判定"""

    def setup_method(self):
        """每个测试前初始化"""
        self.fetcher = FakeFetcher({"/reports/q3/index.md": ARTIFACT})

    def test_serves_markdown_for_accept_header(self):
        """Accept: text/markdown 且产物存在时直接返回"""
        result = run(NegotiationRequest("/reports/q3/", accept="text/markdown"), self.fetcher)
        assert result.served
        assert result.body == ARTIFACT
        assert result.headers["Content-Type"] == MARKDOWN_CONTENT_TYPE
        assert result.headers[CONTENT_FORMAT_HEADER] == "markdown"
        assert self.fetcher.calls == ["/reports/q3/index.md"]

    def test_missing_artifact_defers(self):
        """产物不存在时交还常规处理"""
        result = run(NegotiationRequest("/reports/missing/", accept="text/markdown"), self.fetcher)
        assert not result.served
        assert result.body is None
        assert self.fetcher.calls == ["/reports/missing/index.md"]

    def test_fetch_error_defers(self):
        """读取异常视为未命中"""
        fetcher = FakeFetcher(error=OSError("boom"))
        result = run(NegotiationRequest("/reports/q3/", accept="text/plain"), fetcher)
        assert not result.served

    def test_path_outside_reports_defers_without_fetch(self):
        """非报告路径不读取产物"""
        result = run(NegotiationRequest("/about/", accept="text/markdown"), self.fetcher)
        assert not result.served
        assert self.fetcher.calls == []

    def test_browser_request_defers_without_fetch(self):
        """浏览器请求返回组件化页面"""
        request = NegotiationRequest(
            "/reports/q3/",
            accept="text/html,application/xhtml+xml",
            user_agent="Mozilla/5.0 (Macintosh) Safari/605.1.15",
        )
        result = run(request, self.fetcher)
        assert not result.served
        assert self.fetcher.calls == []

    @pytest.mark.parametrize(
        "user_agent",
        ["curl/8.4.0", "Wget/1.21", "HTTPie/3.2", "ClaudeBot/1.0", "Mozilla/5.0 (compatible; GPTBot/1.0)"],
    )
    def test_agent_keywords(self, user_agent):
        """非浏览器客户端按User-Agent关键字识别，不区分大小写"""
        result = run(NegotiationRequest("/reports/q3", user_agent=user_agent), self.fetcher)
        assert result.served

    def test_path_without_trailing_slash(self):
        """无结尾斜杠的路径同样映射到index.md"""
        run(NegotiationRequest("/reports/q3", accept="text/markdown"), self.fetcher)
        assert self.fetcher.calls == ["/reports/q3/index.md"]

    def test_custom_policy(self):
        """关键字列表可配置"""
        policy = NegotiationPolicy(agent_keywords=("mybot",))
        assert run(NegotiationRequest("/reports/q3/", user_agent="MyBot/2"), self.fetcher, policy).served
        assert not run(NegotiationRequest("/reports/q3/", user_agent="curl/8"), self.fetcher, policy).served

    def test_mixed_case_keywords(self):
        """直接构造的策略中关键字大小写不影响匹配"""
        policy = NegotiationPolicy(agent_keywords=("GPTBot",))
        request = NegotiationRequest("/reports/q3/", user_agent="Mozilla/5.0 (compatible; GPTBot/1.0)")
        assert run(request, self.fetcher, policy).served


class TestHelpers:
    """测试辅助函数"""

    def test_derive_artifact_path(self):
        """路径统一补齐为目录加index.md"""
        assert derive_artifact_path("/reports/q3") == "/reports/q3/index.md"
        assert derive_artifact_path("/reports/q3/") == "/reports/q3/index.md"
        assert derive_artifact_path("/reports/q3/", "README.md") == "/reports/q3/README.md"

    def test_wants_plain_text(self):
        """Accept或User-Agent任一命中即可"""
        policy = NegotiationPolicy()
        assert wants_plain_text(NegotiationRequest("/", accept="text/plain;q=0.9"), policy)
        assert wants_plain_text(NegotiationRequest("/", user_agent="Anthropic-AI"), policy)
        assert not wants_plain_text(NegotiationRequest("/", accept="*/*", user_agent="Mozilla"), policy)


class TestDirectoryArtifactFetcher:
    """测试站点目录读取"""

    def test_reads_existing_artifact(self, tmp_path):
        """读取已构建的产物"""
        target = tmp_path / "reports" / "q3" / "index.md"
        target.parent.mkdir(parents=True)
        target.write_text(ARTIFACT, encoding="utf-8")
        fetcher = DirectoryArtifactFetcher(tmp_path)
        assert asyncio.run(fetcher("/reports/q3/index.md")) == ARTIFACT

    def test_missing_artifact_returns_none(self, tmp_path):
        """文件不存在返回None"""
        fetcher = DirectoryArtifactFetcher(tmp_path)
        assert asyncio.run(fetcher("/reports/none/index.md")) is None

    def test_path_traversal_is_refused(self, tmp_path):
        """越出站点目录的路径视为未找到"""
        site = tmp_path / "site"
        site.mkdir()
        (tmp_path / "secret.md").write_text("secret", encoding="utf-8")
        fetcher = DirectoryArtifactFetcher(site)
        assert asyncio.run(fetcher("/../secret.md")) is None
