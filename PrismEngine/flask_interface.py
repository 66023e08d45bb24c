"""
Prism Engine Flask接口。

该模块为写作工具/CLI提供HTTP入口，负责：
1. 导出区块目录对应的JSON-Schema；
2. 校验报告JSON并返回结构化错误；
3. 将报告渲染为 Markdown 或 MDX 文本；
4. 以 before_request 钩子的形式挂载报告页面的内容协商。
"""

from typing import Optional

from flask import Blueprint, Flask, Response, jsonify, request
from loguru import logger

from .ir import REPORT_JSON_SCHEMA, ReportValidator
from .negotiation import (
    ArtifactFetcher,
    DirectoryArtifactFetcher,
    NegotiationPolicy,
    NegotiationRequest,
    negotiate,
)
from .renderers import RENDER_TARGETS
from .utils.config import settings


# 创建Blueprint
report_bp = Blueprint('prism_report', __name__)

validator = ReportValidator()

RENDER_MIMETYPES = {
    'markdown': 'text/markdown',
    'mdx': 'text/mdx',
}


def _read_json_body():
    """
    读取请求体JSON。

    返回:
        tuple: (payload, error_response)，解析失败时payload为None。
    """
    payload = request.get_json(silent=True)
    if payload is None:
        logger.warning(f"请求体不是合法JSON: {request.path}")
        return None, (jsonify({
            'success': False,
            'error': '请求体必须是合法的JSON'
        }), 400)
    return payload, None


@report_bp.route('/schema', methods=['GET'])
def get_schema():
    """返回报告的JSON-Schema，供编辑器做补全与预校验"""
    return jsonify(REPORT_JSON_SCHEMA)


@report_bp.route('/validate', methods=['POST'])
def validate():
    """
    校验报告JSON。

    返回:
        Response: {"valid": bool, "errors": [...]}，校验失败时状态码为422。
    """
    payload, error = _read_json_body()
    if error:
        return error

    result = validator.validate(payload)
    if not result.valid:
        logger.info(f"报告校验未通过，共 {len(result.errors)} 处错误")
    return jsonify(result.to_dict()), (200 if result.valid else 422)


@report_bp.route('/render/<target>', methods=['POST'])
def render(target: str):
    """
    将报告渲染为指定目标的文本。

    参数:
        target: markdown 或 mdx。

    返回:
        Response: 渲染结果文本；目标未知时404，报告无效时422附带校验结果。
    """
    renderer_cls = RENDER_TARGETS.get(target)
    if renderer_cls is None:
        return jsonify({
            'success': False,
            'error': f'不支持的渲染目标: {target}'
        }), 404

    payload, error = _read_json_body()
    if error:
        return error

    result = validator.validate(payload)
    if not result.valid:
        return jsonify(result.to_dict()), 422

    body = renderer_cls().render(payload)
    return Response(body, mimetype=RENDER_MIMETYPES[target])


def register_content_negotiation(
    app: Flask,
    fetch_artifact: Optional[ArtifactFetcher] = None,
    policy: Optional[NegotiationPolicy] = None,
) -> None:
    """
    将内容协商挂到应用的 before_request 上。

    命中时直接返回Markdown产物，否则返回None交还给后续路由。

    参数:
        app: Flask应用。
        fetch_artifact: 产物读取函数，默认从 SITE_DIR 读取。
        policy: 协商策略，默认取全局配置。
    """
    fetch_artifact = fetch_artifact or DirectoryArtifactFetcher(settings.SITE_DIR)
    policy = policy or NegotiationPolicy.from_settings()

    @app.before_request
    async def serve_markdown_artifact():
        result = await negotiate(
            NegotiationRequest(
                path=request.path,
                accept=request.headers.get('Accept', ''),
                user_agent=request.headers.get('User-Agent', ''),
            ),
            fetch_artifact,
            policy,
        )
        if not result.served:
            return None
        logger.debug(f"返回Markdown产物: {request.path}")
        response = Response(result.body, status=200)
        for name, value in result.headers.items():
            response.headers[name] = value
        return response


__all__ = [
    'report_bp',
    'register_content_negotiation',
]
