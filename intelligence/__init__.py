"""
Intelligence Module
LLM 抽象层、内容改写与额度检查
"""
from .llm import BaseLLM, get_llm
from .summarizer import ContentSummarizer, LLMSummarizer, get_summarizer
from .balance import DeepSeekBalanceChecker

__all__ = [
    "BaseLLM",
    "get_llm",
    "ContentSummarizer",
    "LLMSummarizer",
    "get_summarizer",
    "DeepSeekBalanceChecker",
]
