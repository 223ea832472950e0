"""
Configuration Management Module
统一配置管理，实现凭据与 API 配置解耦
"""
from .settings import (
    Settings,
    FeedSettings,
    FirecrawlSettings,
    WebScraperSettings,
    LLMSettings,
    WanxSettings,
    WeixinSettings,
    BarkSettings,
    NotifySettings,
    WorkflowSettings,
    SchedulerSettings,
    get_settings,
    get_llm_settings,
    get_workflow_settings,
    get_scheduler_settings,
)

__all__ = [
    "Settings",
    "FeedSettings",
    "FirecrawlSettings",
    "WebScraperSettings",
    "LLMSettings",
    "WanxSettings",
    "WeixinSettings",
    "BarkSettings",
    "NotifySettings",
    "WorkflowSettings",
    "SchedulerSettings",
    "get_settings",
    "get_llm_settings",
    "get_workflow_settings",
    "get_scheduler_settings",
]
