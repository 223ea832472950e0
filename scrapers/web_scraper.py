"""
Web Page Scraper
直接请求页面并用 BeautifulSoup 抽取正文, 无需第三方抓取服务
"""
from typing import List, Optional
import logging
import re

import httpx
from bs4 import BeautifulSoup

from .base import ContentScraper
from config import WebScraperSettings
from models import ScrapedContent
from utils.exceptions import ScraperError


logger = logging.getLogger(__name__)


def _clean_text(value: str, *, max_chars: int) -> str:
    text = re.sub(r"[ \t\r\f\v]+", " ", str(value or ""))
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    return text[:max_chars]


class WebPageScraper(ContentScraper):
    """通用网页抓取器"""

    def __init__(
        self,
        settings: Optional[WebScraperSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        super().__init__(client=client, timeout=timeout)
        self.settings = settings or WebScraperSettings()

    @property
    def name(self) -> str:
        return "Web"

    async def scrape(self, url: str) -> List[ScrapedContent]:
        client = self._get_client()
        try:
            response = await client.get(url, headers={"User-Agent": self.settings.user_agent})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScraperError(f"page http {e.response.status_code}", source=self.name, url=url) from e
        except httpx.HTTPError as e:
            self._log_error(f"Scrape failed for '{url}'", e)
            raise ScraperError(f"page request failed: {e}", source=self.name, url=url) from e

        content = self._extract(url, response.text)
        contents = [content] if content else []
        self._log_scrape(url, len(contents))
        return contents

    def _extract(self, url: str, html: str) -> Optional[ScrapedContent]:
        if not html:
            return None
        soup = BeautifulSoup(html, "lxml")

        for node in soup(["script", "style", "noscript", "nav", "footer", "header", "aside"]):
            node.decompose()

        title = ""
        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title and og_title.get("content"):
            title = og_title["content"].strip()
        elif soup.title and soup.title.string:
            title = soup.title.string.strip()

        root = soup.find("article") or soup.find("main") or soup.body or soup
        paragraphs = []
        for node in root.find_all(["h1", "h2", "h3", "p", "li", "blockquote"]):
            snippet = node.get_text(" ", strip=True)
            if not snippet:
                continue
            if node.name in ("h1", "h2", "h3"):
                snippet = f"## {snippet}"
            paragraphs.append(snippet)

        text = _clean_text("\n\n".join(paragraphs), max_chars=self.settings.max_chars)
        if len(text) < self.settings.min_text_length:
            return None

        canonical = url
        link = soup.find("link", attrs={"rel": "canonical"})
        if link and link.get("href"):
            canonical = str(link["href"]).strip() or url

        published = soup.find("meta", attrs={"property": "article:published_time"})
        return ScrapedContent(
            id=self._content_id(canonical),
            title=title,
            content=text,
            url=canonical,
            publish_date=published.get("content") if published else None,
            metadata={"keywords": [], "source": "web"},
        )
