"""
WeChat Template Renderer
将文章渲染为公众号可用的内联样式 HTML (纯函数, 无副作用)
"""

from __future__ import annotations

import html as html_lib
import re
from typing import List, Sequence

from models import RenderableArticle


_STYLES = {
    "section": "margin:0 0 32px;padding:0 8px;font-size:16px;line-height:1.8;color:#333;",
    "title": "font-size:22px;font-weight:bold;margin:16px 0;color:#222;",
    "h2": "font-size:18px;font-weight:bold;margin:24px 0 12px;padding-left:10px;border-left:4px solid #07c160;color:#222;",
    "h3": "font-size:16px;font-weight:bold;margin:20px 0 10px;color:#222;",
    "p": "margin:0 0 16px;text-align:justify;",
    "li": "margin:0 0 8px;",
    "quote": "margin:0 0 16px;padding:8px 12px;background:#f7f7f7;border-left:3px solid #ccc;color:#666;",
    "tag": "display:inline-block;margin:0 6px 6px 0;padding:2px 8px;border-radius:10px;background:#e8f7ef;color:#07c160;font-size:12px;",
    "meta": "margin:24px 0 0;font-size:12px;color:#999;word-break:break-all;",
    "divider": "margin:32px 0;border:none;border-top:1px dashed #ddd;",
}

_INLINE_BOLD = re.compile(r"\*\*(.+?)\*\*")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")


def _inline(text: str) -> str:
    escaped = html_lib.escape(text.strip(), quote=False)
    return _INLINE_BOLD.sub(r"<strong>\1</strong>", escaped)


def _render_block(block: str) -> str:
    lines = [line for line in block.splitlines() if line.strip()]
    if not lines:
        return ""

    first = lines[0].lstrip()
    if len(lines) == 1 and first.startswith("#"):
        level = len(first) - len(first.lstrip("#"))
        text = first.lstrip("#")
        tag = "h3" if level >= 3 else "h2"
        return f'<{tag} style="{_STYLES[tag]}">{_inline(text)}</{tag}>'

    if all(_LIST_ITEM.match(line) for line in lines):
        items = "".join(f'<li style="{_STYLES["li"]}">{_inline(_LIST_ITEM.sub("", line))}</li>' for line in lines)
        return f"<ul>{items}</ul>"

    if all(line.lstrip().startswith(">") for line in lines):
        text = "<br/>".join(_inline(line.lstrip()[1:]) for line in lines)
        return f'<blockquote style="{_STYLES["quote"]}">{text}</blockquote>'

    text = "<br/>".join(_inline(line) for line in lines)
    return f'<p style="{_STYLES["p"]}">{text}</p>'


def render_body(content: str) -> str:
    """把段落式文本 (轻量 markdown) 转为 HTML 片段"""
    blocks = re.split(r"\n\s*\n", str(content or "").replace("\r\n", "\n"))
    return "".join(part for part in (_render_block(block) for block in blocks) if part)


class WeixinTemplateRenderer:
    """公众号图文模板渲染器"""

    def __init__(self, *, show_title: bool = False, show_source: bool = True) -> None:
        # 公众号正文上方已展示标题, 默认不在正文中重复
        self.show_title = show_title
        self.show_source = show_source

    def render(self, articles: Sequence[RenderableArticle]) -> str:
        sections: List[str] = []
        for article in articles:
            sections.append(self._render_article(article))
        divider = f'<hr style="{_STYLES["divider"]}"/>'
        return divider.join(sections)

    def _render_article(self, article: RenderableArticle) -> str:
        parts: List[str] = []
        if self.show_title:
            parts.append(f'<h1 style="{_STYLES["title"]}">{_inline(article.title)}</h1>')

        if article.keywords:
            tags = "".join(
                f'<span style="{_STYLES["tag"]}">#{html_lib.escape(str(keyword))}</span>'
                for keyword in article.keywords
            )
            parts.append(f"<p>{tags}</p>")

        parts.append(render_body(article.content))

        if self.show_source:
            meta = []
            if article.publish_date:
                meta.append(f"发布时间: {html_lib.escape(str(article.publish_date))}")
            meta.append(f"原文链接: {html_lib.escape(article.url)}")
            parts.append(f'<p style="{_STYLES["meta"]}">{"<br/>".join(meta)}</p>')

        return f'<section style="{_STYLES["section"]}">{"".join(parts)}</section>'
