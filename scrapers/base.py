"""
Base Scraper
所有内容抓取器的抽象基类
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import hashlib
import logging

import httpx

from models import ScrapedContent


logger = logging.getLogger(__name__)


class ContentScraper(ABC):
    """
    内容抓取器抽象基类

    scrape() 返回空列表表示页面没有可抽取内容 (不是错误);
    硬性失败 (鉴权、网络、服务端报错) 需抛出 ScraperError。
    """

    def __init__(self, *, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def name(self) -> str:
        """返回抓取器名称"""
        pass

    @abstractmethod
    async def scrape(self, url: str) -> List[ScrapedContent]:
        """
        抓取单个 URL

        Args:
            url: 页面地址

        Returns:
            抓取结果列表 (通常只有一个)
        """
        pass

    def is_configured(self) -> bool:
        return True

    async def refresh(self) -> None:
        """刷新凭据/会话: 丢弃自建的 HTTP 客户端, 下次调用时重建"""
        if self._owns_client:
            await self.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """清理资源"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    @staticmethod
    def _content_id(url: str) -> str:
        return hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]

    def _log_scrape(self, url: str, count: int):
        logger.info(f"[{self.name}] Scraped '{url}' -> {count} contents")

    def _log_error(self, message: str, error: Exception):
        logger.error(f"[{self.name}] {message}: {error}")
