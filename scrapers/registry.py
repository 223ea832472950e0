"""Scraper registry keyed by provider tag."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from config import Settings, get_settings
from utils.exceptions import ConfigurationError

from .base import ContentScraper
from .firecrawl_scraper import FirecrawlScraper
from .web_scraper import WebPageScraper


logger = logging.getLogger(__name__)


class ScraperRegistry:
    """Named scraper instances behind a single capability interface."""

    def __init__(self, scrapers: Optional[Dict[str, ContentScraper]] = None) -> None:
        self._scrapers: Dict[str, ContentScraper] = {}
        for tag, scraper in (scrapers or {}).items():
            self.register(tag, scraper)

    def register(self, tag: str, scraper: ContentScraper) -> None:
        key = str(tag or "").strip().lower()
        if not key:
            raise ValueError("scraper tag must be non-empty")
        self._scrapers[key] = scraper

    def get(self, tag: str) -> ContentScraper:
        key = str(tag or "").strip().lower()
        scraper = self._scrapers.get(key)
        if scraper is None:
            raise ConfigurationError(f"scraper '{tag}' not registered", {"available": self.tags()})
        return scraper

    def tags(self) -> List[str]:
        return list(self._scrapers)

    def __contains__(self, tag: str) -> bool:
        return str(tag or "").strip().lower() in self._scrapers

    def __iter__(self) -> Iterator[ContentScraper]:
        return iter(self._scrapers.values())

    async def refresh_all(self) -> None:
        for tag, scraper in self._scrapers.items():
            logger.debug("refresh scraper tag=%s", tag)
            await scraper.refresh()

    async def aclose_all(self) -> None:
        for scraper in self._scrapers.values():
            await scraper.aclose()


def build_scraper_registry(settings: Optional[Settings] = None) -> ScraperRegistry:
    """Register every built-in scraper backend."""
    settings = settings or get_settings()
    timeout = float(settings.general.request_timeout)
    return ScraperRegistry(
        {
            "firecrawl": FirecrawlScraper(settings.firecrawl, timeout=max(timeout, 60.0)),
            "web": WebPageScraper(settings.web_scraper, timeout=timeout),
        }
    )
