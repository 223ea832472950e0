"""
Qianwen LLM
通义千问, 通过 DashScope 的 OpenAI 兼容模式调用
"""
from .openai_llm import OpenAILLM


class QianwenLLM(OpenAILLM):

    DEFAULT_MODEL = "qwen-plus"
    DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    DEFAULT_TIMEOUT = 120.0

    @property
    def provider(self) -> str:
        return "qianwen"
