"""
Firecrawl Scraper
通过 Firecrawl 抓取网页正文 (markdown)
API 文档: https://docs.firecrawl.dev/api-reference/endpoint/scrape
"""
from typing import Any, Dict, List, Optional
import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .base import ContentScraper
from config import FirecrawlSettings
from models import ScrapedContent
from utils.exceptions import ScraperError


logger = logging.getLogger(__name__)


class FirecrawlScraper(ContentScraper):
    """
    Firecrawl 抓取器

    - 请求 markdown 格式, 仅抽取正文
    - 网络层错误重试 3 次, HTTP 错误直接失败
    """

    def __init__(
        self,
        settings: Optional[FirecrawlSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        super().__init__(client=client, timeout=timeout)
        self.settings = settings or FirecrawlSettings()

    @property
    def name(self) -> str:
        return "Firecrawl"

    def is_configured(self) -> bool:
        return bool(self.settings.api_key)

    async def scrape(self, url: str) -> List[ScrapedContent]:
        if not self.is_configured():
            raise ScraperError("firecrawl api key is not configured", source=self.name)

        try:
            payload = await self._post_scrape(url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise ScraperError("firecrawl auth failed", source=self.name, url=url) from e
            if status == 429:
                raise ScraperError("firecrawl quota exceeded", source=self.name, url=url) from e
            raise ScraperError(f"firecrawl http {status}", source=self.name, url=url) from e
        except httpx.HTTPError as e:
            self._log_error(f"Scrape failed for '{url}'", e)
            raise ScraperError(f"firecrawl request failed: {e}", source=self.name, url=url) from e

        if not payload.get("success", False):
            raise ScraperError(
                f"firecrawl error: {payload.get('error') or 'unknown'}",
                source=self.name,
                url=url,
            )

        contents = self._convert_to_contents(url, payload.get("data") or {})
        self._log_scrape(url, len(contents))
        return contents

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def _post_scrape(self, url: str) -> Dict[str, Any]:
        client = self._get_client()
        response = await client.post(
            f"{self.settings.base_url.rstrip('/')}/v1/scrape",
            headers={
                "Authorization": f"Bearer {self.settings.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "url": url,
                "formats": ["markdown"],
                "onlyMainContent": self.settings.only_main_content,
            },
        )
        response.raise_for_status()
        return dict(response.json() or {})

    def _convert_to_contents(self, url: str, data: Dict[str, Any]) -> List[ScrapedContent]:
        """转换 Firecrawl 响应, 没有正文时返回空列表"""
        markdown = str(data.get("markdown") or "").strip()
        if not markdown:
            return []

        meta = dict(data.get("metadata") or {})
        canonical = str(meta.get("sourceURL") or meta.get("url") or url)
        return [
            ScrapedContent(
                id=self._content_id(canonical),
                title=str(meta.get("title") or meta.get("ogTitle") or ""),
                content=markdown,
                url=canonical,
                publish_date=meta.get("publishedTime") or meta.get("article:published_time"),
                metadata={
                    "keywords": [],
                    "source": "firecrawl",
                    "description": meta.get("description"),
                    "language": meta.get("language"),
                },
            )
        ]
