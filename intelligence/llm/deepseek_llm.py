"""
DeepSeek LLM
OpenAI 兼容接口; 长文改写默认使用 deepseek-chat
"""
from .openai_llm import OpenAILLM


class DeepSeekLLM(OpenAILLM):

    DEFAULT_MODEL = "deepseek-chat"
    DEFAULT_BASE_URL = "https://api.deepseek.com"
    DEFAULT_TIMEOUT = 120.0

    @property
    def provider(self) -> str:
        return "deepseek"
