"""
渲染前的归一化处理。

两个渲染目标（Markdown 与 MDX）共享同一套默认值语义：这里把目录中
声明的默认值一次性补齐，产出规范化的内存结构，渲染器只消费该结构，
从而保证两种产物在默认值上永远一致。输入文档不会被修改。
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

from .schema import DEFAULT_DATASET_LABEL, SECTION_DEFAULTS


def normalize_report(report: Dict[str, Any]) -> Dict[str, Any]:
    """
    返回补齐默认值后的报告深拷贝。

    参数:
        report: 已通过校验的报告对象。

    返回:
        dict: 规范化后的报告，sections 始终为列表。
    """
    normalized = copy.deepcopy(report) if isinstance(report, dict) else {}
    normalized["sections"] = normalize_sections(normalized.get("sections"))
    return normalized


def normalize_sections(sections: Any) -> List[Dict[str, Any]]:
    """逐个区块补齐默认值，非对象区块直接丢弃"""
    if not isinstance(sections, list):
        return []
    return [_normalize_section(section) for section in sections if isinstance(section, dict)]


def _normalize_section(section: Dict[str, Any]) -> Dict[str, Any]:
    section_type = section.get("type")
    defaults = SECTION_DEFAULTS.get(section_type) if isinstance(section_type, str) else None
    for key, value in (defaults or {}).items():
        if section.get(key) is None:
            section[key] = value

    if section_type == "chart":
        _normalize_chart_data(section.get("data"))
    elif section_type == "tabs":
        for tab in section.get("tabs") or []:
            if isinstance(tab, dict):
                tab["sections"] = normalize_sections(tab.get("sections"))
    return section


def _normalize_chart_data(data: Any):
    """数据集缺少label时统一使用默认标签"""
    if not isinstance(data, dict):
        return
    for dataset in data.get("datasets") or []:
        if isinstance(dataset, dict) and not dataset.get("label"):
            dataset["label"] = DEFAULT_DATASET_LABEL


__all__ = ["normalize_report", "normalize_sections"]
