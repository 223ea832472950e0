"""
Settings Configuration
使用 Pydantic 进行配置验证和管理
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class FeedSettings(BaseSettings):
    """候选文章数据源 API 配置"""
    api_url: Optional[str] = Field(default=None, description="数据源接口 URL")

    class Config:
        env_prefix = "FEED_"


class FirecrawlSettings(BaseSettings):
    """Firecrawl 抓取服务配置"""
    api_key: Optional[str] = Field(default=None, description="Firecrawl API Key")
    base_url: str = Field(default="https://api.firecrawl.dev", description="Firecrawl API 地址")
    only_main_content: bool = Field(default=True, description="仅抽取正文")

    class Config:
        env_prefix = "FIRECRAWL_"


class WebScraperSettings(BaseSettings):
    """通用网页抓取配置"""
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; WeixinArticlePipeline/1.0)",
        description="User Agent",
    )
    min_text_length: int = Field(default=200, description="正文最小长度, 低于该值视为未抓取到内容")
    max_chars: int = Field(default=20000, description="正文最大长度")

    class Config:
        env_prefix = "WEB_SCRAPER_"


class LLMSettings(BaseSettings):
    """LLM 配置"""
    provider: str = Field(default="deepseek", description="LLM提供商: deepseek, qianwen, openai")
    model_name: Optional[str] = Field(default=None, description="模型名称(不填则使用默认)")
    temperature: float = Field(default=0.7, description="生成温度")
    max_tokens: int = Field(default=4096, description="最大生成token数")

    deepseek_api_key: Optional[str] = Field(default=None, description="DeepSeek API Key")
    qianwen_api_key: Optional[str] = Field(default=None, description="通义千问 (DashScope) API Key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")

    class Config:
        env_prefix = "LLM_"


class WanxSettings(BaseSettings):
    """通义万相 文生图 配置"""
    api_key: Optional[str] = Field(default=None, description="DashScope API Key")
    base_url: str = Field(default="https://dashscope.aliyuncs.com/api/v1", description="DashScope API 地址")
    model: str = Field(default="wanx2.1-t2i-turbo", description="文生图模型")

    class Config:
        env_prefix = "WANX_"


class WeixinSettings(BaseSettings):
    """微信公众号配置"""
    app_id: Optional[str] = Field(default=None, description="公众号 AppID")
    app_secret: Optional[str] = Field(default=None, description="公众号 AppSecret")
    base_url: str = Field(default="https://api.weixin.qq.com", description="微信 API 地址")
    author: str = Field(default="", description="文章作者")
    publish_mode: str = Field(default="publish", description="publish: 发布草稿; draft: 仅保存草稿")

    class Config:
        env_prefix = "WEIXIN_"

    @field_validator("publish_mode")
    @classmethod
    def _check_publish_mode(cls, value: str) -> str:
        mode = str(value or "").strip().lower()
        if mode not in {"publish", "draft"}:
            raise ValueError(f"unsupported publish_mode: {value}")
        return mode


class BarkSettings(BaseSettings):
    """Bark 推送配置"""
    device_key: Optional[str] = Field(default=None, description="Bark 设备 Key")
    server_url: str = Field(default="https://api.day.app", description="Bark 服务地址")
    group: str = Field(default="weixin-pipeline", description="通知分组")

    class Config:
        env_prefix = "BARK_"


class NotifySettings(BaseSettings):
    """本地通知通道配置 (未配置 Bark 时使用)"""
    out_dir: str = Field(default="./data/notifications", description="notifications.jsonl 输出目录")

    class Config:
        env_prefix = "NOTIFY_"


class WorkflowSettings(BaseSettings):
    """工作流配置"""
    scraper_key: str = Field(default="firecrawl", description="批处理使用的抓取器标识")
    summarizer_provider: Optional[str] = Field(default=None, description="摘要所用 LLM 提供商 (默认同 LLM_PROVIDER)")
    max_candidates: int = Field(default=5, ge=1, description="每次运行处理的最大候选数")
    cover_size: str = Field(default="1440*768", description="封面尺寸")
    cover_prompt_template: str = Field(
        default="帮我生成一个标题封面，标题是：{title} ,封面不需要文字，找最符合标题的图片",
        description="封面提示词模板",
    )
    poll_interval: float = Field(default=3.0, ge=0, description="封面任务轮询间隔(秒)")
    poll_timeout: float = Field(default=180.0, gt=0, description="封面任务轮询超时(秒)")
    max_polls: int = Field(default=60, ge=1, description="封面任务最大轮询次数")
    summary_flush_delay: float = Field(default=1.0, ge=0, description="输出总结前的等待(秒)")
    notify_flush_delay: float = Field(default=0.5, ge=0, description="发送终态通知前的等待(秒)")
    balance_threshold: float = Field(default=1.0, description="DeepSeek 余额告警阈值(元)")
    show_progress: bool = Field(default=True, description="是否显示进度条")

    class Config:
        env_prefix = "WORKFLOW_"


class SchedulerSettings(BaseSettings):
    """定时任务配置"""
    timezone: str = Field(default="Asia/Shanghai", description="时区")
    interval_minutes: int = Field(default=10, ge=1, le=60, description="执行间隔(分钟)")
    start_hour: int = Field(default=7, ge=0, le=23, description="窗口开始小时")
    end_hour: int = Field(default=23, ge=0, le=23, description="窗口结束小时(含)")
    weekdays: str = Field(default="1,2,3,4,5,6,7", description="启用的星期, 逗号分隔 (1=周一 ... 7=周日)")

    class Config:
        env_prefix = "SCHEDULER_"

    @field_validator("weekdays")
    @classmethod
    def _check_weekdays(cls, value: str) -> str:
        parts = [part for part in str(value or "").replace(" ", "").split(",") if part]
        days = sorted({int(part) for part in parts})
        if not days or any(day < 1 or day > 7 for day in days):
            raise ValueError("weekdays must be a non-empty list within 1..7")
        return ",".join(str(day) for day in days)

    @property
    def enabled_weekdays(self) -> List[int]:
        return [int(part) for part in self.weekdays.split(",")]


class GeneralSettings(BaseSettings):
    """通用设置"""
    request_timeout: int = Field(default=30, description="请求超时时间(秒)")
    max_retries: int = Field(default=3, description="最大重试次数")


class Settings(BaseSettings):
    """主配置类 - 聚合所有子配置"""

    feed: FeedSettings = Field(default_factory=FeedSettings)
    firecrawl: FirecrawlSettings = Field(default_factory=FirecrawlSettings)
    web_scraper: WebScraperSettings = Field(default_factory=WebScraperSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    wanx: WanxSettings = Field(default_factory=WanxSettings)
    weixin: WeixinSettings = Field(default_factory=WeixinSettings)
    bark: BarkSettings = Field(default_factory=BarkSettings)
    notify: NotifySettings = Field(default_factory=NotifySettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    general: GeneralSettings = Field(default_factory=GeneralSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """从指定的 .env 文件加载配置"""
        if env_path is None:
            # 默认查找 config/.env
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            feed=FeedSettings(),
            firecrawl=FirecrawlSettings(),
            web_scraper=WebScraperSettings(),
            llm=LLMSettings(),
            wanx=WanxSettings(),
            weixin=WeixinSettings(),
            bark=BarkSettings(),
            notify=NotifySettings(),
            workflow=WorkflowSettings(),
            scheduler=SchedulerSettings(),
            general=GeneralSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """获取全局配置单例"""
    return Settings.load_from_env_file()


# 便捷访问
def get_llm_settings() -> LLMSettings:
    return get_settings().llm


def get_workflow_settings() -> WorkflowSettings:
    return get_settings().workflow


def get_scheduler_settings() -> SchedulerSettings:
    return get_settings().scheduler
