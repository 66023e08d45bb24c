"""
报告级JSON结构校验器。

报告JSON在渲染与落盘前必须经过一次完整校验，以避免渲染期的结构性
崩溃。本模块以 schema.py 中的区块目录为唯一规则来源，实现轻量级的
Python校验逻辑，无需依赖jsonschema库即可一次性收集全部错误并精确定位。
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .schema import (
    REPORT_JSON_SCHEMA,
    REPORT_SCHEMA_VERSION,
    SECTION_SCHEMAS,
)

ROOT_LOCATION = "(root)"

_SECTION_REF = "#/definitions/section"
_NESTED_SECTION_REF = "#/definitions/nestedSection"


@dataclass(frozen=True)
class ValidationIssue:
    """单条校验错误：location为path语法的字段定位，message为可读说明"""
    location: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"location": self.location, "message": self.message}


@dataclass
class ValidationReport:
    """校验结果，errors为空当且仅当valid为True"""
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """转换为 {"valid": bool, "errors": [...]} 形式，便于JSON输出"""
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
        }

    def format_lines(self) -> List[str]:
        """每条错误一行，格式为 `location message`"""
        return [f"{issue.location} {issue.message}" for issue in self.errors]


class ReportValidationError(ValueError):
    """报告未通过校验时由发布流程抛出，携带完整的ValidationReport"""

    def __init__(self, report: ValidationReport):
        self.report = report
        count = len(report.errors)
        first = report.errors[0].location if report.errors else ROOT_LOCATION
        super().__init__(f"报告校验失败，共 {count} 处错误（首个位置: {first}）")


class ReportValidator:
    """
    报告结构校验器。

    说明：
        - validate返回ValidationReport，永不因输入畸形而抛异常
        - 穷举式校验：整份文档的所有错误在一次遍历中全部收集
        - 错误定位采用path语法，如 sections[2].chartType
        - tabs 区块内部禁止再嵌套 tabs（只允许一层）
    """

    def __init__(self, schema_version: str = REPORT_SCHEMA_VERSION):
        """记录当前Schema版本，并建立区块类型到规则的映射"""
        self.schema_version = schema_version
        self._section_schemas: Dict[str, Dict[str, Any]] = dict(SECTION_SCHEMAS)

    # ======== 对外接口 ========

    def validate(self, candidate: Any) -> ValidationReport:
        """校验整份报告的根字段与全部区块"""
        errors: List[ValidationIssue] = []
        if not isinstance(candidate, dict):
            errors.append(ValidationIssue(ROOT_LOCATION, "报告必须是JSON对象"))
            return ValidationReport(False, errors)

        self._validate_value(candidate, REPORT_JSON_SCHEMA, "", errors)
        return ValidationReport(not errors, errors)

    # ======== 内部工具 ========

    def _validate_section(
        self, section: Any, path: str, errors: List[ValidationIssue], nested: bool
    ):
        """根据区块type查表，再按该区块的Schema逐字段校验"""
        if not isinstance(section, dict):
            errors.append(ValidationIssue(path, "区块必须是对象"))
            return

        type_path = _join(path, "type")
        section_type = section.get("type")
        if section_type is None:
            errors.append(ValidationIssue(type_path, "缺少必填字段 type"))
            return
        if not isinstance(section_type, str):
            errors.append(ValidationIssue(type_path, "type 必须是字符串"))
            return
        if nested and section_type == "tabs":
            errors.append(ValidationIssue(type_path, "tabs 内部不允许再嵌套 tabs（仅支持一层）"))
            return

        schema = self._section_schemas.get(section_type)
        if schema is None:
            errors.append(ValidationIssue(type_path, f"不支持的区块类型: {section_type}"))
            return
        self._validate_value(section, schema, path, errors)

    def _validate_value(
        self, value: Any, schema: Dict[str, Any], path: str, errors: List[ValidationIssue]
    ):
        """按Schema子集（type/enum/范围/pattern/minItems/required/properties/items）递归校验"""
        ref = schema.get("$ref")
        if ref == _SECTION_REF:
            self._validate_section(value, path, errors, nested=False)
            return
        if ref == _NESTED_SECTION_REF:
            self._validate_section(value, path, errors, nested=True)
            return

        location = path or ROOT_LOCATION
        expected = schema.get("type")
        if expected is not None and not _matches_type(value, expected):
            errors.append(ValidationIssue(location, f"类型错误，应为 {_describe_type(expected)}"))
            return

        enum = schema.get("enum")
        if enum is not None and value not in enum:
            errors.append(
                ValidationIssue(location, f"取值非法: {value}，允许: {'/'.join(map(str, enum))}")
            )

        if _is_number(value):
            minimum = schema.get("minimum")
            maximum = schema.get("maximum")
            if minimum is not None and value < minimum:
                errors.append(ValidationIssue(location, f"不能小于 {minimum}"))
            if maximum is not None and value > maximum:
                errors.append(ValidationIssue(location, f"不能大于 {maximum}"))

        pattern = schema.get("pattern")
        if pattern and isinstance(value, str) and not re.fullmatch(pattern, value, re.ASCII):
            errors.append(ValidationIssue(location, f"格式不符合 {pattern}"))

        if isinstance(value, list):
            min_items = schema.get("minItems")
            if min_items is not None and len(value) < min_items:
                errors.append(ValidationIssue(location, f"至少需要 {min_items} 项，当前 {len(value)} 项"))
            item_schema = schema.get("items")
            if item_schema:
                for idx, item in enumerate(value):
                    self._validate_value(item, item_schema, f"{path}[{idx}]", errors)

        if isinstance(value, dict):
            for name in schema.get("required", []):
                if name not in value:
                    errors.append(ValidationIssue(_join(path, name), f"缺少必填字段 {name}"))
            for name, sub_schema in schema.get("properties", {}).items():
                if name == "type" and "const" in sub_schema:
                    # 区块type已在查表阶段校验
                    continue
                if name in value:
                    self._validate_value(value[name], sub_schema, _join(path, name), errors)


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _is_number(value: Any) -> bool:
    """JSON数字；bool与非有限浮点（inf/nan）不算"""
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int) and not isinstance(value, bool)


def _matches_type(value: Any, expected: Any) -> bool:
    """JSON类型判定；bool不视为数字，整数值的浮点数视为integer"""
    if isinstance(expected, list):
        return any(_matches_type(value, item) for item in expected)
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        return _is_number(value)
    if expected == "integer":
        if isinstance(value, float):
            return value.is_integer()
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, dict)
    if expected == "array":
        return isinstance(value, list)
    if expected == "null":
        return value is None
    return True


def _describe_type(expected: Any) -> str:
    if isinstance(expected, list):
        return "/".join(expected)
    return str(expected)


_default_validator = ReportValidator()


def validate_report(candidate: Any) -> ValidationReport:
    """使用默认校验器校验一份报告"""
    return _default_validator.validate(candidate)


__all__ = [
    "ROOT_LOCATION",
    "ValidationIssue",
    "ValidationReport",
    "ReportValidationError",
    "ReportValidator",
    "validate_report",
]
