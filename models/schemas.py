"""
Data Models / Schemas
定义流水线中流转的统一数据结构
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidatorFunctionWrapHandler, field_validator


class NotificationLevel(str, Enum):
    """通知级别"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Candidate(BaseModel):
    """数据源返回的候选文章引用 (抓取前, 不可变)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="外部标识")
    title: str = Field(default="", description="标题")
    url: str = Field(..., description="原文链接")
    author: Optional[str] = Field(None, description="作者")
    timestamp: Optional[datetime] = Field(None, description="时间戳")
    cover: Optional[str] = Field(None, description="封面图提示")
    mobile_url: Optional[str] = Field(None, alias="mobileUrl", description="移动端链接")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None:
            raise ValueError("candidate id is required")
        return str(value)

    @field_validator("timestamp", mode="wrap")
    @classmethod
    def _lenient_timestamp(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Optional[datetime]:
        # "2小时前" 这类相对时间无法解析, 时间戳不参与后续处理
        try:
            return handler(value)
        except ValidationError:
            return None


class ScrapedContent(BaseModel):
    """抓取结果, 由摘要阶段原地改写"""
    id: str = Field(..., description="内容ID")
    title: str = Field(default="", description="标题")
    content: str = Field(default="", description="正文")
    url: str = Field(..., description="规范链接")
    publish_date: Optional[str] = Field(None, description="发布日期")
    metadata: Dict[str, Any] = Field(default_factory=lambda: {"keywords": []}, description="元数据 (含 keywords)")
    score: Optional[float] = Field(None, description="质量评分")

    @field_validator("metadata")
    @classmethod
    def _ensure_keywords(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        value = dict(value or {})
        value["keywords"] = list(value.get("keywords") or [])
        return value

    @property
    def keywords(self) -> List[str]:
        return self.metadata.setdefault("keywords", [])

    def set_keywords(self, value: List[str]) -> None:
        self.metadata["keywords"] = list(value or [])


class SummaryResult(BaseModel):
    """摘要器返回结果"""
    title: str = Field(..., description="改写后的标题")
    content: str = Field(..., description="改写后的正文")
    score: Optional[float] = Field(None, description="质量评分")
    keywords: List[str] = Field(default_factory=list, description="关键词")


class RenderableArticle(BaseModel):
    """模板渲染所需的文章视图 (只读)"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    url: str
    publish_date: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    keywords: List[str] = Field(default_factory=list)
    cover_media_id: Optional[str] = None

    @classmethod
    def from_content(cls, content: ScrapedContent, *, cover_media_id: Optional[str] = None) -> "RenderableArticle":
        return cls(
            id=content.id,
            title=content.title,
            content=content.content,
            url=content.url,
            publish_date=content.publish_date,
            metadata=dict(content.metadata),
            keywords=list(content.keywords),
            cover_media_id=cover_media_id,
        )


class PublishStatus(str, Enum):
    """发布状态"""
    PUBLISHED = "published"
    DRAFT = "draft"
    FAILED = "failed"


class PublishResult(BaseModel):
    """一次发布尝试的结果"""
    status: PublishStatus
    media_id: Optional[str] = Field(None, description="草稿 media_id")
    publish_id: Optional[str] = Field(None, description="发布任务ID")
    article_title: str = Field(default="", description="文章标题")
    error: Optional[str] = Field(None, description="失败原因")

    @property
    def is_success(self) -> bool:
        return self.status in (PublishStatus.PUBLISHED, PublishStatus.DRAFT)


class ImageTaskState(str, Enum):
    """图片生成任务状态"""
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    UNKNOWN = "UNKNOWN"


TERMINAL_IMAGE_STATES = {
    ImageTaskState.SUCCEEDED,
    ImageTaskState.FAILED,
    ImageTaskState.CANCELED,
    ImageTaskState.UNKNOWN,
}


class ImageTaskStatus(BaseModel):
    """图片生成任务轮询结果"""
    task_id: str
    state: ImageTaskState = ImageTaskState.PENDING
    result_url: Optional[str] = None
    message: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_IMAGE_STATES

    @property
    def succeeded(self) -> bool:
        return self.state == ImageTaskState.SUCCEEDED


class RunStats(BaseModel):
    """单次运行的统计计数 (每次运行重新创建)"""
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    contents: int = 0

    def begin_item(self) -> None:
        self.attempted += 1

    def record_success(self) -> None:
        self.succeeded += 1

    def record_failure(self) -> None:
        self.failed += 1

    def record_content(self) -> None:
        self.contents += 1


class RunStatus(str, Enum):
    """运行结果分类"""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    NO_CONTENT = "no_content"


class RunOutcome(BaseModel):
    """一次运行的终态结果"""
    status: RunStatus
    stats: RunStats
    total_candidates: int = 0
    publish_results: List[PublishResult] = Field(default_factory=list)
    publish_succeeded: int = 0
    publish_failed: int = 0
    summary: str = ""
    finished_at: datetime = Field(default_factory=datetime.now)
