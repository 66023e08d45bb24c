"""
Prism Engine 配置。

使用 pydantic-settings 管理全局配置，支持从环境变量与 .env 文件自动加载，
所有变量名统一使用大写，便于通过环境变量覆盖。
"""

from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env 优先使用当前工作目录，其次回退到项目根目录
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
CWD_ENV: Path = Path.cwd() / ".env"
ENV_FILE: str = str(CWD_ENV if CWD_ENV.exists() else (PROJECT_ROOT / ".env"))


class Settings(BaseSettings):
    """
    全局配置：构建产物位置、内容协商策略、MDX组件路径与服务端口。
    """

    # ================== 服务配置 ====================
    HOST: str = Field("0.0.0.0", description="Flask 服务监听地址")
    PORT: int = Field(4321, description="Flask 服务端口")
    LOG_LEVEL: str = Field("INFO", description="loguru 日志级别")

    # ================== 构建产物 ====================
    SITE_DIR: str = Field("dist", description="已构建的静态站点目录，内容协商从这里读取Markdown产物")
    CONTENT_DIR: str = Field("src/content", description="渲染产物写入的内容目录（reports/<slug>/index.md 与 reports/<slug>.mdx）")

    # ================== 内容协商 ====================
    REPORTS_URL_PREFIX: str = Field("/reports/", description="参与内容协商的报告路径前缀")
    MARKDOWN_INDEX_FILENAME: str = Field("index.md", description="报告目录下的Markdown产物文件名")
    MARKDOWN_MEDIA_TYPES: str = Field(
        "text/markdown,text/plain",
        description="Accept头中出现即返回Markdown的媒体类型（逗号分隔）",
    )
    MARKDOWN_AGENT_KEYWORDS: str = Field(
        "curl,wget,httpie,anthropic,openai,claudebot,gptbot",
        description="User-Agent中出现即视为非浏览器客户端的关键字（逗号分隔，不区分大小写）",
    )

    # ================== MDX 渲染 ====================
    MDX_LAYOUT: str = Field("../../layouts/ReportLayout.astro", description="MDX front matter 中的 layout")
    MDX_COMPONENTS_BASE: str = Field("../../components", description="MDX 组件 import 的基础路径")

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_prefix="",
        case_sensitive=False,
        extra="allow",
    )

    @property
    def markdown_media_types(self) -> List[str]:
        return _split_csv(self.MARKDOWN_MEDIA_TYPES)

    @property
    def markdown_agent_keywords(self) -> List[str]:
        return [keyword.lower() for keyword in _split_csv(self.MARKDOWN_AGENT_KEYWORDS)]


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


# 全局配置实例
settings = Settings()
