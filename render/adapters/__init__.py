"""Image generator adapters package."""

from .base import BaseImageGenerator
from .wanx import WanxImageGenerator

__all__ = [
    "BaseImageGenerator",
    "WanxImageGenerator",
]
