"""
Sharpener 核心模块
提供异常定义等基础设施
"""

__version__ = "1.0.0"

from .exceptions import SharpenerError

__all__ = [
    "SharpenerError",
]
