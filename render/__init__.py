"""Cover image generation and article template rendering."""

from .adapters import BaseImageGenerator, WanxImageGenerator
from .template import WeixinTemplateRenderer, render_body

__all__ = [
    "BaseImageGenerator",
    "WanxImageGenerator",
    "WeixinTemplateRenderer",
    "render_body",
]
