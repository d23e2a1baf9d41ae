"""LLM client using OpenRouter."""

from langchain_openai import ChatOpenAI

from quick_review.config import settings
from quick_review.core.logging import get_logger

logger = get_logger("llm")

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

SUPPORTED_MODELS = {
    "claude-sonnet-4": {
        "provider": "openrouter",
        "model_id": "anthropic/claude-sonnet-4",
    },
    "claude-opus-4": {
        "provider": "openrouter",
        "model_id": "anthropic/claude-opus-4",
    },
    "gpt-4o": {
        "provider": "openrouter",
        "model_id": "openai/gpt-4o",
    },
    "gpt-4o-mini": {
        "provider": "openrouter",
        "model_id": "openai/gpt-4o-mini",
    },
    "deepseek-r1": {
        "provider": "openrouter",
        "model_id": "deepseek/deepseek-r1",
    },
}


def get_chat_llm(
    model: str = "claude-sonnet-4",
    temperature: float = 0.0,
    top_p: float = 0.95,
) -> ChatOpenAI:
    """Get a chat LLM instance via OpenRouter."""
    api_key = settings.openrouter_api_key
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY not configured")

    config = SUPPORTED_MODELS.get(model)
    if config is None:
        logger.warning(f"[LLM] Unknown model {model}, falling back to claude-sonnet-4")
        config = SUPPORTED_MODELS["claude-sonnet-4"]
    model_id = config["model_id"]

    logger.info(f"[LLM] Using OpenRouter: {model} -> {model_id}")

    return ChatOpenAI(
        model=model_id,
        api_key=api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
        top_p=top_p,
    )
