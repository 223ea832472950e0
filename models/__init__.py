"""
Data Models
"""
from .schemas import (
    NotificationLevel,
    Candidate,
    ScrapedContent,
    SummaryResult,
    RenderableArticle,
    PublishStatus,
    PublishResult,
    ImageTaskState,
    ImageTaskStatus,
    RunStats,
    RunStatus,
    RunOutcome,
)

__all__ = [
    "NotificationLevel",
    "Candidate",
    "ScrapedContent",
    "SummaryResult",
    "RenderableArticle",
    "PublishStatus",
    "PublishResult",
    "ImageTaskState",
    "ImageTaskStatus",
    "RunStats",
    "RunStatus",
    "RunOutcome",
]
