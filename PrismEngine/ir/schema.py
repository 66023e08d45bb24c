"""
Prism 报告文档契约（Report JSON）Schema定义。

这里集中维护报告根对象与全部章节区块（section）的Schema、默认值
以及组件名映射，确保校验、归一化与两种渲染目标对同一份结构有统一认知。
区块目录是封闭的：新增或删除一种区块必须整体升级 REPORT_SCHEMA_VERSION。
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

REPORT_SCHEMA_VERSION = "1.0"

# ====== 基础常量 ======
SLUG_PATTERN = r"^[a-z0-9-]*$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

ALLOWED_SECTION_TYPES: List[str] = [
    "text",
    "chart",
    "table",
    "code",
    "callout",
    "comparison",
    "progress",
    "metrics-grid",
    "steps",
    "diff",
    "embed",
    "gallery",
    "source-list",
    "statcard",
    "tabs",
    "timeline",
    "figure",
    "quote",
    "accordion",
]

# tabs 只能嵌套一层，内部区块不允许再出现 tabs
NESTABLE_SECTION_TYPES: List[str] = [t for t in ALLOWED_SECTION_TYPES if t != "tabs"]

CHART_TYPES: List[str] = ["line", "bar", "pie", "doughnut"]
CALLOUT_VARIANTS: List[str] = ["info", "warning", "success", "error"]
COMPARISON_VARIANTS: List[str] = ["positive", "negative", "neutral"]
COMPARISON_LAYOUTS: List[str] = ["side-by-side", "stacked"]
PROGRESS_MODES: List[str] = ["bar", "milestones"]
PROGRESS_VARIANTS: List[str] = ["default", "success", "warning", "error"]
TREND_DIRECTIONS: List[str] = ["up", "down", "neutral"]
STEP_ORIENTATIONS: List[str] = ["horizontal", "vertical"]

# 组件化渲染（MDX）使用的组件名；text 区块直接输出为Markdown正文
SECTION_COMPONENT_NAMES: Dict[str, str] = {
    "chart": "Chart",
    "table": "Table",
    "code": "CodeBlock",
    "callout": "Callout",
    "comparison": "Comparison",
    "progress": "Progress",
    "metrics-grid": "MetricsGrid",
    "steps": "Steps",
    "diff": "Diff",
    "embed": "Embed",
    "gallery": "Gallery",
    "source-list": "SourceList",
    "statcard": "StatCard",
    "tabs": "Tabs",
    "timeline": "Timeline",
    "figure": "Figure",
    "quote": "Quote",
    "accordion": "Accordion",
}

# 归一化阶段补齐的默认值，两个渲染目标共享
SECTION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "text": {"level": 2},
    "progress": {"mode": "bar", "label": "Completion", "max": 100},
}
DEFAULT_DATASET_LABEL = "Value"

# ====== Schema定义 ======
string_list_schema: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}

section_ref_schema: Dict[str, Any] = {"$ref": "#/definitions/section"}
nested_section_ref_schema: Dict[str, Any] = {"$ref": "#/definitions/nestedSection"}

text_section: Dict[str, Any] = {
    "title": "TextSection",
    "type": "object",
    "properties": {
        "type": {"const": "text"},
        "heading": {"type": "string"},
        "level": {"type": "integer", "minimum": 1, "maximum": 6},
        "content": {"type": "string"},
    },
    "required": ["type", "content"],
    "additionalProperties": True,
}

chart_section: Dict[str, Any] = {
    "title": "ChartSection",
    "type": "object",
    "properties": {
        "type": {"const": "chart"},
        "chartType": {"type": "string", "enum": CHART_TYPES},
        "data": {
            "type": "object",
            "properties": {
                "labels": {"type": "array"},
                "datasets": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "label": {"type": "string"},
                            "data": {"type": "array"},
                        },
                        "additionalProperties": True,
                    },
                },
            },
            "additionalProperties": True,
        },
        "title": {"type": "string"},
        "options": {"type": "object"},
    },
    "required": ["type", "chartType", "data"],
    "additionalProperties": True,
}

table_section: Dict[str, Any] = {
    "title": "TableSection",
    "type": "object",
    "properties": {
        "type": {"const": "table"},
        "headers": {"type": "array", "items": {"type": ["string", "number"]}},
        "rows": {"type": "array", "items": {"type": "array"}},
        "caption": {"type": "string"},
    },
    "required": ["type", "headers", "rows"],
    "additionalProperties": True,
}

code_section: Dict[str, Any] = {
    "title": "CodeSection",
    "type": "object",
    "properties": {
        "type": {"const": "code"},
        "language": {"type": "string"},
        "filename": {"type": "string"},
        "code": {"type": "string"},
    },
    "required": ["type", "code"],
    "additionalProperties": True,
}

callout_section: Dict[str, Any] = {
    "title": "CalloutSection",
    "type": "object",
    "properties": {
        "type": {"const": "callout"},
        "variant": {"type": "string", "enum": CALLOUT_VARIANTS},
        "title": {"type": "string"},
        "content": {"type": "string"},
    },
    "required": ["type", "variant", "content"],
    "additionalProperties": True,
}

comparison_section: Dict[str, Any] = {
    "title": "ComparisonSection",
    "type": "object",
    "properties": {
        "type": {"const": "comparison"},
        "title": {"type": "string"},
        "layout": {"type": "string", "enum": COMPARISON_LAYOUTS},
        "items": {
            "type": "array",
            "minItems": 2,
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "highlights": string_list_schema,
                    "variant": {"type": "string", "enum": COMPARISON_VARIANTS},
                },
                "required": ["label", "highlights"],
                "additionalProperties": True,
            },
        },
    },
    "required": ["type", "items"],
    "additionalProperties": True,
}

progress_section: Dict[str, Any] = {
    "title": "ProgressSection",
    "type": "object",
    "properties": {
        "type": {"const": "progress"},
        "mode": {"type": "string", "enum": PROGRESS_MODES},
        "label": {"type": "string"},
        "value": {"type": "number"},
        "max": {"type": "number"},
        "variant": {"type": "string", "enum": PROGRESS_VARIANTS},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "completed": {"type": "boolean"},
                    "current": {"type": "boolean"},
                },
                "required": ["label"],
                "additionalProperties": True,
            },
        },
    },
    "required": ["type"],
    "additionalProperties": True,
}

metric_item_schema: Dict[str, Any] = {
    "title": "MetricItem",
    "type": "object",
    "properties": {
        "label": {"type": "string"},
        "value": {"type": ["string", "number"]},
        "trend": {"type": "string", "enum": TREND_DIRECTIONS},
        "trendValue": {"type": "string"},
    },
    "required": ["label", "value"],
    "additionalProperties": True,
}

metrics_grid_section: Dict[str, Any] = {
    "title": "MetricsGridSection",
    "type": "object",
    "properties": {
        "type": {"const": "metrics-grid"},
        "metrics": {"type": "array", "minItems": 1, "items": metric_item_schema},
        "columns": {"type": "integer", "minimum": 1, "maximum": 6},
    },
    "required": ["type", "metrics"],
    "additionalProperties": True,
}

steps_section: Dict[str, Any] = {
    "title": "StepsSection",
    "type": "object",
    "properties": {
        "type": {"const": "steps"},
        "steps": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["title"],
                "additionalProperties": True,
            },
        },
        "orientation": {"type": "string", "enum": STEP_ORIENTATIONS},
        "currentStep": {"type": "integer", "minimum": 0},
    },
    "required": ["type", "steps"],
    "additionalProperties": True,
}

diff_section: Dict[str, Any] = {
    "title": "DiffSection",
    "type": "object",
    "properties": {
        "type": {"const": "diff"},
        "before": {"type": "string"},
        "after": {"type": "string"},
        "language": {"type": "string"},
        "title": {"type": "string"},
    },
    "required": ["type", "before", "after"],
    "additionalProperties": True,
}

embed_section: Dict[str, Any] = {
    "title": "EmbedSection",
    "type": "object",
    "properties": {
        "type": {"const": "embed"},
        "src": {"type": "string"},
        "title": {"type": "string"},
        "aspectRatio": {"type": "string"},
        "allowFullscreen": {"type": "boolean"},
    },
    "required": ["type", "src"],
    "additionalProperties": True,
}

gallery_section: Dict[str, Any] = {
    "title": "GallerySection",
    "type": "object",
    "properties": {
        "type": {"const": "gallery"},
        "images": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "src": {"type": "string"},
                    "alt": {"type": "string"},
                    "caption": {"type": "string"},
                },
                "required": ["src", "alt"],
                "additionalProperties": True,
            },
        },
        "columns": {"type": "integer", "minimum": 1, "maximum": 6},
    },
    "required": ["type", "images"],
    "additionalProperties": True,
}

source_list_section: Dict[str, Any] = {
    "title": "SourceListSection",
    "type": "object",
    "properties": {
        "type": {"const": "source-list"},
        "title": {"type": "string"},
        "sources": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "title": {"type": "string"},
                    "url": {"type": "string"},
                    "author": {"type": "string"},
                    "date": {"type": "string"},
                },
                "required": ["id", "title"],
                "additionalProperties": True,
            },
        },
    },
    "required": ["type", "sources"],
    "additionalProperties": True,
}

statcard_section: Dict[str, Any] = {
    "title": "StatCardSection",
    "type": "object",
    "properties": {
        "type": {"const": "statcard"},
        "label": {"type": "string"},
        "value": {"type": ["string", "number"]},
        "description": {"type": "string"},
        "trend": {"type": "string", "enum": TREND_DIRECTIONS},
        "trendValue": {"type": "string"},
    },
    "required": ["type", "label", "value"],
    "additionalProperties": True,
}

tabs_section: Dict[str, Any] = {
    "title": "TabsSection",
    "type": "object",
    "properties": {
        "type": {"const": "tabs"},
        "tabs": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "sections": {"type": "array", "items": nested_section_ref_schema},
                },
                "required": ["label", "sections"],
                "additionalProperties": True,
            },
        },
        "defaultTab": {"type": "integer", "minimum": 0},
    },
    "required": ["type", "tabs"],
    "additionalProperties": True,
}

timeline_section: Dict[str, Any] = {
    "title": "TimelineSection",
    "type": "object",
    "properties": {
        "type": {"const": "timeline"},
        "events": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "date": {"type": "string"},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["date", "title"],
                "additionalProperties": True,
            },
        },
    },
    "required": ["type", "events"],
    "additionalProperties": True,
}

figure_section: Dict[str, Any] = {
    "title": "FigureSection",
    "type": "object",
    "properties": {
        "type": {"const": "figure"},
        "src": {"type": "string"},
        "alt": {"type": "string"},
        "caption": {"type": "string"},
        "width": {"type": ["string", "number"]},
    },
    "required": ["type", "src", "alt"],
    "additionalProperties": True,
}

quote_section: Dict[str, Any] = {
    "title": "QuoteSection",
    "type": "object",
    "properties": {
        "type": {"const": "quote"},
        "text": {"type": "string"},
        "author": {"type": "string"},
        "role": {"type": "string"},
    },
    "required": ["type", "text", "author"],
    "additionalProperties": True,
}

accordion_section: Dict[str, Any] = {
    "title": "AccordionSection",
    "type": "object",
    "properties": {
        "type": {"const": "accordion"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "content": {"type": "string"},
                },
                "required": ["title", "content"],
                "additionalProperties": True,
            },
        },
        "allowMultiple": {"type": "boolean"},
    },
    "required": ["type", "items"],
    "additionalProperties": True,
}

# 与 ALLOWED_SECTION_TYPES 一一对应，是校验器与MDX参数顺序的唯一来源
SECTION_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "text": text_section,
    "chart": chart_section,
    "table": table_section,
    "code": code_section,
    "callout": callout_section,
    "comparison": comparison_section,
    "progress": progress_section,
    "metrics-grid": metrics_grid_section,
    "steps": steps_section,
    "diff": diff_section,
    "embed": embed_section,
    "gallery": gallery_section,
    "source-list": source_list_section,
    "statcard": statcard_section,
    "tabs": tabs_section,
    "timeline": timeline_section,
    "figure": figure_section,
    "quote": quote_section,
    "accordion": accordion_section,
}

REPORT_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "PrismReport",
    "version": REPORT_SCHEMA_VERSION,
    "type": "object",
    "required": ["title", "sections"],
    "properties": {
        "title": {"type": "string"},
        "slug": {"type": "string", "pattern": SLUG_PATTERN},
        "date": {"type": "string", "pattern": DATE_PATTERN},
        "author": {"type": "string"},
        "metadata": {
            "type": "object",
            "properties": {
                "tags": string_list_schema,
                "category": {"type": "string"},
            },
            "additionalProperties": True,
        },
        "sections": {"type": "array", "items": section_ref_schema},
    },
    "additionalProperties": True,
    "definitions": {
        "section": {"oneOf": [SECTION_SCHEMAS[t] for t in ALLOWED_SECTION_TYPES]},
        "nestedSection": {"oneOf": [SECTION_SCHEMAS[t] for t in NESTABLE_SECTION_TYPES]},
    },
}

REPORT_JSON_SCHEMA_TEXT: str = json.dumps(
    REPORT_JSON_SCHEMA,
    ensure_ascii=False,
    indent=2,
)


def section_property_order(section_type: str) -> List[str]:
    """返回某类区块在Schema中声明的属性顺序（不含type），未知类型返回空列表"""
    schema = SECTION_SCHEMAS.get(section_type) or {}
    return [name for name in schema.get("properties", {}) if name != "type"]


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "SLUG_PATTERN",
    "DATE_PATTERN",
    "ALLOWED_SECTION_TYPES",
    "NESTABLE_SECTION_TYPES",
    "CHART_TYPES",
    "CALLOUT_VARIANTS",
    "COMPARISON_VARIANTS",
    "COMPARISON_LAYOUTS",
    "PROGRESS_MODES",
    "PROGRESS_VARIANTS",
    "TREND_DIRECTIONS",
    "STEP_ORIENTATIONS",
    "SECTION_COMPONENT_NAMES",
    "SECTION_DEFAULTS",
    "DEFAULT_DATASET_LABEL",
    "SECTION_SCHEMAS",
    "REPORT_JSON_SCHEMA",
    "REPORT_JSON_SCHEMA_TEXT",
    "section_property_order",
]
