"""
Flask主应用 - 托管构建后的报告站点并挂载 Prism Engine 接口
"""

import sys
from pathlib import Path
from typing import Optional

from flask import Flask, send_from_directory
from loguru import logger

from PrismEngine.flask_interface import register_content_negotiation, report_bp
from PrismEngine.negotiation import ArtifactFetcher, DirectoryArtifactFetcher, NegotiationPolicy
from PrismEngine.utils.config import Settings, settings

INDEX_HTML = "index.html"


def setup_logger(level: str = "INFO"):
    """设置日志配置"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level,
    )


def create_app(
    config: Optional[Settings] = None,
    fetch_artifact: Optional[ArtifactFetcher] = None,
) -> Flask:
    """
    创建Flask应用。

    参数:
        config: 可选配置，默认使用全局settings。
        fetch_artifact: 可选产物读取函数，默认读取 SITE_DIR。

    返回:
        Flask: 已注册API蓝图、内容协商钩子与静态站点路由的应用。
    """
    config = config or settings
    site_dir = Path(config.SITE_DIR).resolve()

    app = Flask(__name__)
    app.register_blueprint(report_bp, url_prefix='/api/report')

    register_content_negotiation(
        app,
        fetch_artifact or DirectoryArtifactFetcher(site_dir),
        NegotiationPolicy.from_settings(config),
    )

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def serve_site(path: str):
        """静态站点兜底：目录式URL补全为 index.html"""
        if not path or path.endswith('/') or (site_dir / path).is_dir():
            path = f"{path.rstrip('/')}/{INDEX_HTML}".lstrip('/')
        return send_from_directory(site_dir, path)

    logger.info(f"站点目录: {site_dir}")
    return app


if __name__ == '__main__':
    setup_logger(settings.LOG_LEVEL)
    app = create_app()
    logger.info(f"Flask服务器已启动，访问地址: http://{settings.HOST}:{settings.PORT}")
    app.run(host=settings.HOST, port=settings.PORT, debug=False)
