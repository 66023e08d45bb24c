"""
报告JSON → MDX（组件嵌入）渲染器。

与Markdown目标不同，这里每个区块都输出为一个组件调用：区块属性
逐一转成组件参数，结构化数据（包括 tabs 内嵌的区块数组）原样以
字面量数据传给组件，由站点构建阶段的组件自行解释。
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from PrismEngine.ir.normalizer import normalize_report
from PrismEngine.ir.schema import (
    ALLOWED_SECTION_TYPES,
    SECTION_COMPONENT_NAMES,
    section_property_order,
)
from PrismEngine.renderers.markdown_renderer import render_text_lines
from PrismEngine.utils.config import settings

# 出现这些字符的字符串改用 {"..."} 表达式形式，避免JSX属性字符串无法转义
_EXPRESSION_CHARS = frozenset('"\\\n\r&{}')


class MDXRenderer:
    """
    将报告JSON转为MDX。

    输出结构：
        - front matter（title/author/date/layout）；
        - 文档中实际用到的组件 import，按区块目录顺序排列；
        - 每个区块一次组件调用；text 保持Markdown正文，callout 内容作为子节点。
    """

    def __init__(self, layout: Optional[str] = None, components_base: Optional[str] = None) -> None:
        self.layout = layout if layout is not None else settings.MDX_LAYOUT
        self.components_base = (
            components_base if components_base is not None else settings.MDX_COMPONENTS_BASE
        ).rstrip("/")
        self._handlers: Dict[str, Callable[[Dict[str, Any]], List[str]]] = {
            section_type: self._render_component for section_type in SECTION_COMPONENT_NAMES
        }
        self._handlers["text"] = render_text_lines
        self._handlers["callout"] = self._render_callout

    def render(self, report: Dict[str, Any]) -> str:
        """
        入口：将报告转换为MDX字符串。

        参数:
            report: 已通过校验的报告对象（不会被修改）

        返回:
            str: MDX 字符串
        """
        document = normalize_report(report)
        sections = document.get("sections", [])

        lines = self._render_front_matter(document)
        imports = self._render_imports(sections)
        if imports:
            lines.extend(imports)
            lines.append("")

        for section in sections:
            section_type = section.get("type")
            handler = self._handlers.get(section_type) if isinstance(section_type, str) else None
            if handler is None:
                logger.debug(f"MDX渲染跳过未识别的区块类型: {section_type}")
                continue
            lines.extend(handler(section))
        return "\n".join(lines)

    # ===== 头部 =====

    def _render_front_matter(self, document: Dict[str, Any]) -> List[str]:
        lines = ["---", f"title: {_json(str(document.get('title') or ''))}"]
        if document.get("author"):
            lines.append(f"author: {_json(str(document['author']))}")
        if document.get("date"):
            lines.append(f"date: {_json(str(document['date']))}")
        if self.layout:
            lines.append(f"layout: {self.layout}")
        lines.extend(["---", ""])
        return lines

    def _render_imports(self, sections: List[Dict[str, Any]]) -> List[str]:
        used: set[str] = set()
        self._collect_section_types(sections, used)
        return [
            f"import {name} from '{self.components_base}/{name}.astro'"
            for name in (
                SECTION_COMPONENT_NAMES[section_type]
                for section_type in ALLOWED_SECTION_TYPES
                if section_type in used and section_type in SECTION_COMPONENT_NAMES
            )
        ]

    def _collect_section_types(self, sections: List[Any], used: set[str]):
        """递归收集文档中出现的区块类型（包括 tabs 内部）"""
        for section in sections or []:
            if not isinstance(section, dict):
                continue
            section_type = section.get("type")
            if isinstance(section_type, str):
                used.add(section_type)
            if section_type == "tabs":
                for tab in section.get("tabs") or []:
                    if isinstance(tab, dict):
                        self._collect_section_types(tab.get("sections") or [], used)

    # ===== 区块渲染 =====

    def _render_component(self, section: Dict[str, Any]) -> List[str]:
        name = SECTION_COMPONENT_NAMES[section["type"]]
        props = self._format_props(section)
        tag = f"<{name} {props} />" if props else f"<{name} />"
        return [tag, ""]

    def _render_callout(self, section: Dict[str, Any]) -> List[str]:
        props = self._format_props(section, exclude=("content",))
        opening = f"<Callout {props}>" if props else "<Callout>"
        content = section.get("content")
        return [opening, "" if content is None else str(content), "</Callout>", ""]

    def _format_props(self, section: Dict[str, Any], exclude: tuple = ()) -> str:
        """按Schema声明顺序输出参数，未在Schema中声明的附加属性按原顺序追加"""
        skipped = {"type", *exclude}
        declared = [name for name in section_property_order(section.get("type")) if name in section]
        extras = [name for name in section if name not in declared]
        parts = []
        for name in declared + extras:
            if name in skipped:
                continue
            value = section[name]
            if value is None:
                continue
            parts.append(_format_prop(name, value))
        return " ".join(parts)


def _format_prop(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return f"{name}={{{'true' if value else 'false'}}}"
    if isinstance(value, (int, float)):
        return f"{name}={{{_json(value)}}}"
    if isinstance(value, str):
        if _EXPRESSION_CHARS.intersection(value):
            return f"{name}={{{_json(value)}}}"
        return f'{name}="{value}"'
    return f"{name}={{{_json(value)}}}"


def _json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


__all__ = ["MDXRenderer"]
