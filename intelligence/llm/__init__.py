"""
LLM Module
多供应商 LLM 抽象层
"""
from .base import BaseLLM, LLMResponse, Message, MessageRole, build_messages
from .openai_llm import OpenAILLM
from .deepseek_llm import DeepSeekLLM
from .qianwen_llm import QianwenLLM
from .factory import get_llm

__all__ = [
    "BaseLLM",
    "LLMResponse",
    "Message",
    "MessageRole",
    "build_messages",
    "OpenAILLM",
    "DeepSeekLLM",
    "QianwenLLM",
    "get_llm",
]
