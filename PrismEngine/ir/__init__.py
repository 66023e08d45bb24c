"""
Prism 报告的JSON契约定义、校验与归一化工具。

该模块暴露统一的区块目录、校验器与归一化函数，供构建脚本、
HTTP接口以及两个渲染器共同复用，确保从输入到产物的结构一致。
"""

from .schema import (
    REPORT_SCHEMA_VERSION,
    REPORT_JSON_SCHEMA,
    REPORT_JSON_SCHEMA_TEXT,
    ALLOWED_SECTION_TYPES,
    NESTABLE_SECTION_TYPES,
    SECTION_COMPONENT_NAMES,
    SECTION_DEFAULTS,
)
from .validator import (
    ValidationIssue,
    ValidationReport,
    ReportValidationError,
    ReportValidator,
    validate_report,
)
from .normalizer import normalize_report

__all__ = [
    "REPORT_SCHEMA_VERSION",
    "REPORT_JSON_SCHEMA",
    "REPORT_JSON_SCHEMA_TEXT",
    "ALLOWED_SECTION_TYPES",
    "NESTABLE_SECTION_TYPES",
    "SECTION_COMPONENT_NAMES",
    "SECTION_DEFAULTS",
    "ValidationIssue",
    "ValidationReport",
    "ReportValidationError",
    "ReportValidator",
    "validate_report",
    "normalize_report",
]
