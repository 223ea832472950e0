"""
Base LLM
改写/摘要所用对话模型的抽象层
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Dict, List, Optional, Sequence


logger = logging.getLogger(__name__)


class MessageRole(str, Enum):
    """消息角色"""
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class Message:
    """对话消息"""
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


def build_messages(user_message: str, system_prompt: Optional[str] = None) -> List[Message]:
    """system (可选) + user 两段式对话"""
    messages = []
    if system_prompt:
        messages.append(Message(MessageRole.SYSTEM, system_prompt))
    messages.append(Message(MessageRole.USER, user_message))
    return messages


@dataclass
class LLMResponse:
    """LLM 响应"""
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: Optional[str] = None

    @property
    def truncated(self) -> bool:
        """输出因 max_tokens 被截断"""
        return self.finish_reason == "length"


class BaseLLM(ABC):
    """
    LLM 抽象基类

    子类声明 DEFAULT_MODEL / DEFAULT_BASE_URL / DEFAULT_TIMEOUT,
    并实现 provider 与 acomplete()。
    """

    DEFAULT_MODEL: str = ""
    DEFAULT_BASE_URL: Optional[str] = None
    DEFAULT_TIMEOUT: float = 60.0

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: Optional[float] = None,
    ):
        self.model = model or self.DEFAULT_MODEL
        self.api_key = api_key
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = self.DEFAULT_TIMEOUT if timeout is None else timeout

    @property
    @abstractmethod
    def provider(self) -> str:
        pass

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    async def acomplete(self, messages: Sequence[Message], *, json_mode: bool = False, **overrides) -> LLMResponse:
        """
        生成一次回复

        Args:
            messages: 对话消息
            json_mode: 要求模型只输出一个 JSON 对象
            **overrides: temperature / max_tokens 临时覆盖
        """
        pass

    async def achat(self, user_message: str, system_prompt: Optional[str] = None, *, json_mode: bool = False) -> str:
        response = await self.acomplete(build_messages(user_message, system_prompt), json_mode=json_mode)
        if response.truncated:
            logger.warning(f"[{self.provider}] reply truncated at max_tokens={self.max_tokens}")
        return response.content

    async def refresh(self) -> None:
        """丢弃底层客户端, 下次调用时重建"""
        await self.aclose()

    async def aclose(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model}, provider={self.provider})"
