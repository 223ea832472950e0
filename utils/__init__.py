"""
Utilities Module
"""
from .exceptions import (
    PipelineError,
    ConfigurationError,
    FeedError,
    FeedUnavailableError,
    FeedEmptyError,
    ScraperError,
    LLMError,
    SummarizerError,
    ImageGenerationError,
    PublishError,
    NotificationError,
)
from .logger import console, setup_logger, flush_output

__all__ = [
    "PipelineError",
    "ConfigurationError",
    "FeedError",
    "FeedUnavailableError",
    "FeedEmptyError",
    "ScraperError",
    "LLMError",
    "SummarizerError",
    "ImageGenerationError",
    "PublishError",
    "NotificationError",
    "console",
    "setup_logger",
    "flush_output",
]
