"""
LLM Factory Module.

Provides the factory for the chat model used by structured profile
extraction. Callers should use this factory instead of instantiating
ChatOpenAI directly so model, endpoint and response format stay consistent.

Usage:
    from src.common.llm_factory import create_extraction_llm

    llm = create_extraction_llm()
    response = llm.invoke([SystemMessage(content="..."), HumanMessage(content="...")])
"""

import logging
from typing import Any, Optional

from langchain_openai import ChatOpenAI

from src.common.config import Config

logger = logging.getLogger(__name__)


def create_extraction_llm(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    api_key: Optional[str] = None,
    **kwargs: Any,
) -> ChatOpenAI:
    """
    Create a ChatOpenAI instance pointed at the Groq OpenAI-compatible API.

    The model is asked for a JSON object response so the reply can be parsed
    and validated directly.

    Args:
        model: Model name (defaults to Config.GROQ_MODEL)
        temperature: Temperature (defaults to Config.EXTRACTION_TEMPERATURE)
        api_key: API key (defaults to Config.GROQ_API_KEY)
        **kwargs: Additional ChatOpenAI parameters

    Returns:
        ChatOpenAI instance

    Raises:
        ValueError: If no API key is configured
    """
    effective_key = api_key or Config.GROQ_API_KEY
    if not effective_key:
        raise ValueError("GROQ_API_KEY is not configured")

    effective_model = model or Config.GROQ_MODEL
    effective_temperature = (
        temperature if temperature is not None else Config.EXTRACTION_TEMPERATURE
    )

    kwargs.setdefault("max_tokens", Config.EXTRACTION_MAX_TOKENS)
    kwargs.setdefault("timeout", Config.EXTRACTION_TIMEOUT_SECONDS)
    # One attempt per import; the caller falls back to heuristics instead
    kwargs.setdefault("max_retries", 0)

    llm = ChatOpenAI(
        model=effective_model,
        temperature=effective_temperature,
        api_key=effective_key,
        base_url=Config.GROQ_BASE_URL,
        model_kwargs={"response_format": {"type": "json_object"}},
        **kwargs,
    )

    logger.debug(
        f"Created extraction LLM: model={effective_model}, temperature={effective_temperature}"
    )

    return llm
