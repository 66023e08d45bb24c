"""
Flask接口与站点应用的测试用例。
"""

import pytest

from app import create_app
from PrismEngine.utils.config import Settings

REPORT = {
    "title": "Q3 Review",
    "sections": [{"type": "progress", "label": "Upload", "value": 75, "max": 100}],
}
ARTIFACT = '---\ntitle: "Q3 Review"\n---\n\n**Upload**: 75/100 (75%)\n'


@pytest.fixture
def site_dir(tmp_path):
    report_dir = tmp_path / "reports" / "q3"
    report_dir.mkdir(parents=True)
    (report_dir / "index.md").write_text(ARTIFACT, encoding="utf-8")
    (report_dir / "index.html").write_text("<html>Q3</html>", encoding="utf-8")
    (tmp_path / "index.html").write_text("<html>home</html>", encoding="utf-8")
    return tmp_path


@pytest.fixture
def client(site_dir):
    app = create_app(Settings(SITE_DIR=str(site_dir)))
    app.config["TESTING"] = True
    return app.test_client()


class TestReportApi:
    """测试 /api/report 接口"""

    def test_schema(self, client):
        """导出JSON-Schema"""
        response = client.get("/api/report/schema")
        assert response.status_code == 200
        assert response.get_json()["required"] == ["title", "sections"]

    def test_validate_valid(self, client):
        """有效报告返回200"""
        response = client.post("/api/report/validate", json=REPORT)
        assert response.status_code == 200
        assert response.get_json() == {"valid": True, "errors": []}

    def test_validate_invalid(self, client):
        """无效报告返回422与完整错误列表"""
        response = client.post("/api/report/validate", json={"sections": [{"type": "video"}]})
        assert response.status_code == 422
        payload = response.get_json()
        assert payload["valid"] is False
        assert [e["location"] for e in payload["errors"]] == ["title", "sections[0].type"]

    def test_validate_bad_json(self, client):
        """请求体不是JSON时返回400"""
        response = client.post("/api/report/validate", data="{not json", content_type="application/json")
        assert response.status_code == 400

    def test_render_markdown(self, client):
        """渲染Markdown"""
        response = client.post("/api/report/render/markdown", json=REPORT)
        assert response.status_code == 200
        assert response.mimetype == "text/markdown"
        assert "**Upload**: 75/100 (75%)" in response.get_data(as_text=True)

    def test_render_mdx(self, client):
        """渲染MDX"""
        response = client.post("/api/report/render/mdx", json=REPORT)
        assert response.status_code == 200
        assert "<Progress " in response.get_data(as_text=True)

    def test_render_invalid_report(self, client):
        """无效报告不渲染"""
        response = client.post("/api/report/render/markdown", json={"title": "T"})
        assert response.status_code == 422
        assert response.get_json()["valid"] is False

    def test_render_unknown_target(self, client):
        """未知目标返回404"""
        response = client.post("/api/report/render/pdf", json=REPORT)
        assert response.status_code == 404

    def test_render_huge_progress_value(self, client):
        """超长整数的进度值可以正常渲染"""
        report = {"title": "T", "sections": [{"type": "progress", "label": "L", "value": 10 ** 400}]}
        response = client.post("/api/report/render/markdown", json=report)
        assert response.status_code == 200


class TestContentNegotiation:
    """测试站点上的内容协商"""

    def test_markdown_for_accept_header(self, client):
        """Accept: text/markdown 返回Markdown产物"""
        response = client.get("/reports/q3/", headers={"Accept": "text/markdown"})
        assert response.status_code == 200
        assert response.headers["Content-Type"] == "text/markdown; charset=utf-8"
        assert response.headers["X-Content-Format"] == "markdown"
        assert response.get_data(as_text=True) == ARTIFACT

    def test_markdown_for_cli_agent(self, client):
        """命令行客户端得到Markdown"""
        response = client.get("/reports/q3", headers={"User-Agent": "curl/8.4.0"})
        assert response.headers.get("X-Content-Format") == "markdown"

    def test_browser_gets_html(self, client):
        """浏览器得到静态页面"""
        response = client.get("/reports/q3/", headers={"Accept": "text/html", "User-Agent": "Mozilla/5.0"})
        assert response.status_code == 200
        assert "X-Content-Format" not in response.headers
        assert b"<html>Q3</html>" in response.data

    def test_missing_artifact_falls_through(self, client):
        """产物不存在时交给静态站点处理"""
        response = client.get("/reports/none/", headers={"Accept": "text/markdown"})
        assert response.status_code == 404
        assert "X-Content-Format" not in response.headers

    def test_site_root(self, client):
        """站点根目录返回index.html"""
        response = client.get("/")
        assert response.status_code == 200
        assert b"home" in response.data
