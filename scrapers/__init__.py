"""
Scrapers Module
"""
from .base import ContentScraper
from .firecrawl_scraper import FirecrawlScraper
from .web_scraper import WebPageScraper
from .registry import ScraperRegistry, build_scraper_registry

__all__ = [
    "ContentScraper",
    "FirecrawlScraper",
    "WebPageScraper",
    "ScraperRegistry",
    "build_scraper_registry",
]
