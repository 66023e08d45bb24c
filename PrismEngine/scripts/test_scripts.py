"""
命令行脚本的测试用例。
"""

import json

import pytest
from loguru import logger

from PrismEngine.scripts import build_report, validate_report

VALID = {"title": "Launch Notes", "sections": [{"type": "text", "content": "Shipped."}]}
INVALID = {"sections": [{"type": "comparison", "items": [{"label": "A", "highlights": []}]}]}


@pytest.fixture(autouse=True)
def reset_logger():
    """脚本会把日志重定向到被捕获的stderr，测试结束后移除该sink"""
    yield
    logger.remove()


def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestValidateReport:
    """测试 prism-validate"""

    def test_valid_report(self, tmp_path, capsys):
        """有效报告退出码0"""
        path = write_json(tmp_path / "ok.json", VALID)
        assert validate_report.main([str(path)]) == 0
        assert capsys.readouterr().out == "Valid report.\n"

    def test_invalid_report_lists_every_error(self, tmp_path, capsys):
        """无效报告在stderr逐条输出错误并退出码1"""
        path = write_json(tmp_path / "bad.json", INVALID)
        assert validate_report.main([str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        err = captured.err.splitlines()
        assert err[0] == "Validation errors:"
        assert err[1].startswith("  title ")
        assert err[2].startswith("  sections[0].items ")

    def test_unparseable_file(self, tmp_path):
        """JSON解析失败退出码1"""
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        assert validate_report.main([str(path)]) == 1


class TestBuildReport:
    """测试 prism-build"""

    def test_build_writes_both_artifacts(self, tmp_path, capsys):
        """默认写出Markdown与MDX"""
        path = write_json(tmp_path / "report.json", VALID)
        content = tmp_path / "content"
        assert build_report.main([str(path), "--content-dir", str(content)]) == 0
        assert (content / "reports" / "launch-notes" / "index.md").exists()
        assert (content / "reports" / "launch-notes.mdx").exists()
        assert "Wrote" in capsys.readouterr().out

    def test_build_with_slug_and_target(self, tmp_path):
        """指定slug与单一目标"""
        path = write_json(tmp_path / "report.json", VALID)
        content = tmp_path / "content"
        assert build_report.main([str(path), "notes", "--content-dir", str(content), "--target", "mdx"]) == 0
        assert (content / "reports" / "notes.mdx").exists()
        assert not (content / "reports" / "notes").exists()

    def test_build_invalid_report(self, tmp_path):
        """无效报告不写出产物"""
        path = write_json(tmp_path / "report.json", INVALID)
        content = tmp_path / "content"
        assert build_report.main([str(path), "x", "--content-dir", str(content)]) == 1
        assert not content.exists()
