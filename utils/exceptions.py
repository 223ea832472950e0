"""
Custom Exceptions
流水线自定义异常类
"""


class PipelineError(Exception):
    """文章流水线基础异常类"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PipelineError):
    """配置错误"""
    pass


class FeedError(PipelineError):
    """数据源错误 (致命, 终止本次运行)"""
    pass


class FeedUnavailableError(FeedError):
    """数据源不可达或配置错误"""
    pass


class FeedEmptyError(FeedError):
    """数据源返回为空 / 没有可处理的输入"""
    pass


class ScraperError(PipelineError):
    """抓取器错误"""

    def __init__(self, message: str, source: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.source = source


class LLMError(PipelineError):
    """LLM 调用错误"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class SummarizerError(LLMError):
    """摘要/改写失败"""
    pass


class ImageGenerationError(PipelineError):
    """封面图片生成失败"""

    def __init__(self, message: str, task_id: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.task_id = task_id


class PublishError(PipelineError):
    """发布错误"""

    def __init__(self, message: str, errcode: int = None, **kwargs):
        super().__init__(message, kwargs)
        self.errcode = errcode


class NotificationError(PipelineError):
    """通知发送错误 (由通知器内部吸收, 不向上传播)"""
    pass
