"""
Prism Engine工具模块。

当前主要暴露配置读取逻辑。
"""

from PrismEngine.utils.config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
