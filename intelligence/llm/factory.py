"""
LLM Factory
按 LLMSettings 选择供应商并创建实例
"""
from typing import Dict, Optional, Type
import logging

from config import LLMSettings, get_llm_settings

from .base import BaseLLM
from .deepseek_llm import DeepSeekLLM
from .openai_llm import OpenAILLM
from .qianwen_llm import QianwenLLM


logger = logging.getLogger(__name__)


PROVIDERS: Dict[str, Type[BaseLLM]] = {
    "openai": OpenAILLM,
    "deepseek": DeepSeekLLM,
    "qianwen": QianwenLLM,
}


def _api_key_for(provider: str, settings: LLMSettings) -> Optional[str]:
    return {
        "openai": settings.openai_api_key,
        "deepseek": settings.deepseek_api_key,
        "qianwen": settings.qianwen_api_key,
    }.get(provider)


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    *,
    settings: Optional[LLMSettings] = None,
    **overrides,
) -> BaseLLM:
    """
    获取 LLM 实例

    LLM_MODEL_NAME 只作用于 LLM_PROVIDER 指定的默认供应商,
    显式传入其他 provider 时使用该供应商的默认模型。

    Example:
        llm = get_llm()
        llm = get_llm(provider="qianwen", temperature=0.3)
    """
    settings = settings or get_llm_settings()

    key = (provider or settings.provider).strip().lower()
    llm_cls = PROVIDERS.get(key)
    if llm_cls is None:
        raise ValueError(f"Unsupported LLM provider: {key} (available: {', '.join(PROVIDERS)})")

    if model is None and key == settings.provider.strip().lower():
        model = settings.model_name

    overrides.setdefault("temperature", settings.temperature)
    overrides.setdefault("max_tokens", settings.max_tokens)
    overrides.setdefault("api_key", _api_key_for(key, settings))

    llm = llm_cls(model, **overrides)
    logger.debug(f"get_llm -> {llm!r}")
    return llm
