from __future__ import annotations

import json
import math
from fractions import Fraction
from typing import Any, Callable, Dict, List

from loguru import logger

from PrismEngine.ir.normalizer import normalize_report
from PrismEngine.ir.schema import DEFAULT_DATASET_LABEL

# 进度/步骤使用的三态符号
DONE_GLYPH = "✓"
CURRENT_GLYPH = "●"
PENDING_GLYPH = "○"
STEP_CURRENT_GLYPH = "→"
EM_DASH = "—"

TREND_ARROWS: Dict[str, str] = {
    "up": "↑",
    "down": "↓",
    "neutral": "→",
}

COMPARISON_SUFFIXES: Dict[str, str] = {
    "positive": " (+)",
    "negative": " (-)",
}

EMBED_FALLBACK_LABEL = "Embedded content"


class MarkdownRenderer:
    """
    将报告JSON转为带YAML头的Markdown纯文本。

    - 元信息写入 front matter（title必有，author/date/tags按需）；
    - 每种区块对应一个纯函数，返回若干行，区块之间以空行分隔；
    - 图表降级为数据表格，tabs 展平为“Tab: 标签”小节；
    - 未识别的区块类型直接跳过，不中断整篇渲染。
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Callable[[Dict[str, Any]], List[str]]] = {
            "text": self._render_text,
            "chart": self._render_chart,
            "table": self._render_table,
            "code": self._render_code,
            "callout": self._render_callout,
            "comparison": self._render_comparison,
            "progress": self._render_progress,
            "metrics-grid": self._render_metrics_grid,
            "steps": self._render_steps,
            "diff": self._render_diff,
            "embed": self._render_embed,
            "gallery": self._render_gallery,
            "source-list": self._render_source_list,
            "statcard": self._render_statcard,
            "tabs": self._render_tabs,
            "timeline": self._render_timeline,
            "figure": self._render_figure,
            "quote": self._render_quote,
            "accordion": self._render_accordion,
        }

    def render(self, report: Dict[str, Any]) -> str:
        """
        入口：将报告转换为Markdown字符串。

        参数:
            report: 已通过校验的报告对象（不会被修改）

        返回:
            str: Markdown 字符串，相同输入总是得到逐字节相同的输出
        """
        document = normalize_report(report)
        lines = self._render_front_matter(document)
        lines.extend(self._render_sections(document.get("sections", [])))
        return "\n".join(lines)

    # ===== 元信息与区块分发 =====

    def _render_front_matter(self, document: Dict[str, Any]) -> List[str]:
        lines = ["---", f"title: {_quote(document.get('title'))}"]
        if document.get("author"):
            lines.append(f"author: {_quote(document['author'])}")
        if document.get("date"):
            lines.append(f"date: {_quote(document['date'])}")
        metadata = document.get("metadata") or {}
        tags = metadata.get("tags") if isinstance(metadata, dict) else None
        if isinstance(tags, list):
            lines.append(f"tags: [{', '.join(_quote(tag) for tag in tags)}]")
        lines.extend(["---", ""])
        return lines

    def _render_sections(self, sections: List[Dict[str, Any]]) -> List[str]:
        lines: List[str] = []
        for section in sections or []:
            section_type = section.get("type")
            handler = self._handlers.get(section_type) if isinstance(section_type, str) else None
            if handler is None:
                logger.debug(f"Markdown渲染跳过未识别的区块类型: {section_type}")
                continue
            lines.extend(handler(section))
        return lines

    # ===== 区块渲染 =====

    def _render_text(self, section: Dict[str, Any]) -> List[str]:
        return render_text_lines(section)

    def _render_table(self, section: Dict[str, Any]) -> List[str]:
        headers = section.get("headers")
        if not isinstance(headers, list):
            logger.debug("table 区块缺少headers，跳过")
            return []
        lines: List[str] = []
        caption = section.get("caption")
        if caption:
            lines.extend([f"**{caption}**", ""])
        lines.append(_markdown_row(headers))
        lines.append(_markdown_separator(len(headers)))
        for row in section.get("rows") or []:
            if isinstance(row, list):
                lines.append(_markdown_row(row))
        lines.append("")
        return lines

    def _render_code(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        filename = section.get("filename")
        if filename:
            lines.extend([f"*{filename}*", ""])
        lines.extend(_fence(section.get("language"), section.get("code")))
        lines.append("")
        return lines

    def _render_callout(self, section: Dict[str, Any]) -> List[str]:
        variant = str(section.get("variant") or "info")
        prefix = variant[:1].upper() + variant[1:]
        title = section.get("title")
        lines = [f"> **{prefix}: {title}**" if title else f"> **{prefix}:**"]
        for line in _stringify_value(section.get("content")).split("\n"):
            lines.append(f"> {line}")
        lines.append("")
        return lines

    def _render_chart(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        title = section.get("title")
        if title:
            lines.extend([f"## {title}", ""])
        lines.extend([f"*Chart type: {section.get('chartType') or ''}*", ""])

        data = section.get("data")
        data = data if isinstance(data, dict) else {}
        labels = data.get("labels")
        datasets = data.get("datasets")
        if isinstance(labels, list) and isinstance(datasets, list):
            datasets = [ds if isinstance(ds, dict) else {} for ds in datasets]
            headers = ["Label"] + [ds.get("label") or DEFAULT_DATASET_LABEL for ds in datasets]
            lines.append(_markdown_row(headers))
            lines.append(_markdown_separator(len(headers)))
            for idx, label in enumerate(labels):
                row = [label]
                for ds in datasets:
                    series = ds.get("data") if isinstance(ds.get("data"), list) else []
                    # 数据点不足时留空单元格
                    row.append(series[idx] if idx < len(series) else "")
                lines.append(_markdown_row(row))
            lines.append("")
        return lines

    def _render_comparison(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        title = section.get("title")
        if title:
            lines.extend([f"### {title}", ""])
        for item in section.get("items") or []:
            if not isinstance(item, dict):
                continue
            suffix = COMPARISON_SUFFIXES.get(str(item.get("variant")), "")
            lines.append(f"**{item.get('label') or ''}**{suffix}")
            for highlight in item.get("highlights") or []:
                lines.append(f"- {highlight}")
            lines.append("")
        return lines

    def _render_progress(self, section: Dict[str, Any]) -> List[str]:
        if section.get("mode") == "milestones":
            lines = []
            for item in section.get("items") or []:
                if not isinstance(item, dict):
                    continue
                if item.get("completed"):
                    glyph = DONE_GLYPH
                elif item.get("current"):
                    glyph = CURRENT_GLYPH
                else:
                    glyph = PENDING_GLYPH
                lines.append(f"{glyph} {item.get('label') or ''}")
            lines.append("")
            return lines

        value = section.get("value")
        value = value if _is_number(value) else 0
        maximum = section.get("max")
        maximum = maximum if _is_number(maximum) else 100
        percent = _percent(value, maximum)
        label = section.get("label")
        return [
            f"**{label}**: {_stringify_value(value)}/{_stringify_value(maximum)} ({percent}%)",
            "",
        ]

    def _render_metrics_grid(self, section: Dict[str, Any]) -> List[str]:
        lines = [
            _metric_line(metric)
            for metric in section.get("metrics") or []
            if isinstance(metric, dict)
        ]
        lines.append("")
        return lines

    def _render_steps(self, section: Dict[str, Any]) -> List[str]:
        current = _as_index(section.get("currentStep"))
        lines: List[str] = []
        for idx, step in enumerate(section.get("steps") or []):
            if not isinstance(step, dict):
                continue
            if current is None or idx > current:
                box = " "
            elif idx < current:
                box = DONE_GLYPH
            else:
                box = STEP_CURRENT_GLYPH
            line = f"{idx + 1}. [{box}] {step.get('title') or ''}"
            if step.get("description"):
                line += f" {EM_DASH} {step['description']}"
            lines.append(line)
        lines.append("")
        return lines

    def _render_diff(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        title = section.get("title")
        if title:
            lines.extend([f"### {title}", ""])
        language = section.get("language")
        lines.extend(["**Before:**", ""])
        lines.extend(_fence(language, section.get("before")))
        lines.extend(["", "**After:**", ""])
        lines.extend(_fence(language, section.get("after")))
        lines.append("")
        return lines

    def _render_embed(self, section: Dict[str, Any]) -> List[str]:
        src = section.get("src")
        if not src:
            logger.debug("embed 区块缺少src，跳过")
            return []
        return [f"[{section.get('title') or EMBED_FALLBACK_LABEL}]({src})", ""]

    def _render_gallery(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        for image in section.get("images") or []:
            if not isinstance(image, dict):
                continue
            lines.append(f"![{image.get('alt') or ''}]({image.get('src') or ''})")
            if image.get("caption"):
                lines.append(f"*{image['caption']}*")
            lines.append("")
        return lines

    def _render_source_list(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        title = section.get("title")
        if title:
            lines.extend([f"### {title}", ""])
        sources = [source for source in section.get("sources") or [] if isinstance(source, dict)]
        for idx, source in enumerate(sources, start=1):
            line = f"{idx}. [{source.get('id') or ''}] **{source.get('title') or ''}**"
            extras: List[str] = []
            if source.get("author"):
                extras.append(str(source["author"]))
            if source.get("date"):
                extras.append(f"({source['date']})")
            if source.get("url"):
                extras.append(str(source["url"]))
            if extras:
                line += f" {EM_DASH} " + " ".join(extras)
            lines.append(line)
        lines.append("")
        return lines

    def _render_statcard(self, section: Dict[str, Any]) -> List[str]:
        lines = [_metric_line(section)]
        if section.get("description"):
            lines.append(str(section["description"]))
        lines.append("")
        return lines

    def _render_tabs(self, section: Dict[str, Any]) -> List[str]:
        # defaultTab 对纯文本无意义，所有标签页按顺序展开
        lines: List[str] = []
        for tab in section.get("tabs") or []:
            if not isinstance(tab, dict):
                continue
            lines.extend([f"### Tab: {tab.get('label') or ''}", ""])
            lines.extend(self._render_sections(tab.get("sections") or []))
        return lines

    def _render_timeline(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        for event in section.get("events") or []:
            if not isinstance(event, dict):
                continue
            line = f"- **{event.get('date') or ''}**: {event.get('title') or ''}"
            if event.get("description"):
                line += f" {EM_DASH} {event['description']}"
            lines.append(line)
        lines.append("")
        return lines

    def _render_figure(self, section: Dict[str, Any]) -> List[str]:
        src = section.get("src")
        if not src:
            logger.debug("figure 区块缺少src，跳过")
            return []
        lines = [f"![{section.get('alt') or ''}]({src})"]
        if section.get("caption"):
            lines.append(f"*{section['caption']}*")
        lines.append("")
        return lines

    def _render_quote(self, section: Dict[str, Any]) -> List[str]:
        lines = [f"> {line}" for line in _stringify_value(section.get("text")).split("\n")]
        attribution = str(section.get("author") or "")
        if section.get("role"):
            attribution += f", {section['role']}"
        if attribution:
            lines.append(f"> {EM_DASH} {attribution}")
        lines.append("")
        return lines

    def _render_accordion(self, section: Dict[str, Any]) -> List[str]:
        lines: List[str] = []
        for item in section.get("items") or []:
            if not isinstance(item, dict):
                continue
            lines.extend([f"**{item.get('title') or ''}**", ""])
            lines.extend([_stringify_value(item.get("content")), ""])
        return lines


# ===== 工具函数 =====

def render_text_lines(section: Dict[str, Any]) -> List[str]:
    """text区块在两个目标中都输出为Markdown正文：可选标题 + 内容"""
    lines: List[str] = []
    heading = section.get("heading")
    if heading:
        level = max(1, min(6, _as_int(section.get("level"), 2)))
        lines.extend([f"{'#' * level} {heading}", ""])
    lines.extend([_stringify_value(section.get("content")), ""])
    return lines


def _metric_line(item: Dict[str, Any]) -> str:
    """`**label**: value`，trend与trendValue同时存在时追加箭头"""
    line = f"**{item.get('label') or ''}**: {_stringify_value(item.get('value'))}"
    arrow = TREND_ARROWS.get(str(item.get("trend")))
    if arrow and item.get("trendValue"):
        line += f" {arrow} {item['trendValue']}"
    return line


def _fence(language: Any, body: Any) -> List[str]:
    return [f"```{language or ''}", _stringify_value(body), "```"]


def _markdown_row(cells: List[Any]) -> str:
    return "| " + " | ".join(_escape_cell(cell) for cell in cells) + " |"


def _markdown_separator(count: int) -> str:
    return "| " + " | ".join(["---"] * max(1, count)) + " |"


def _escape_cell(value: Any) -> str:
    text = _stringify_value(value)
    return text.replace("|", r"\|").replace("\r", " ").replace("\n", " ")


def _quote(value: Any) -> str:
    """YAML双引号标量，与JSON字符串转义规则兼容"""
    return json.dumps(_stringify_value(value), ensure_ascii=False)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_int(value: Any, default: int) -> int:
    if _is_number(value) and not (isinstance(value, float) and not math.isfinite(value)):
        return int(value)
    return default


def _as_index(value: Any) -> int | None:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _percent(value: Any, maximum: Any) -> int:
    """value/max×100 四舍五入取整；以分数精确计算，超大整数不会溢出，非有限值记为0"""
    if not maximum:
        return 0
    if any(isinstance(v, float) and not math.isfinite(v) for v in (value, maximum)):
        return 0
    return math.floor(Fraction(value) / Fraction(maximum) * 100 + Fraction(1, 2))


def _stringify_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


__all__ = ["MarkdownRenderer", "render_text_lines"]
