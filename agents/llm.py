"""
LLM factory for helper tasks (query generation, category classification,
content preview).
"""

import logging
from typing import Optional

from config.settings import settings

logger = logging.getLogger(__name__)


def get_helper_llm(
    llm_provider: Optional[str] = None,
    timeout: float = 10.0,
    max_tokens: int = 500,
    temperature: float = 0.7,
    model: Optional[str] = None
):
    """
    Get a LangChain chat model for a helper task.

    Args:
        llm_provider: Provider name (openai, claude, gemini).
                      If None, uses QUERY_GENERATION_PROVIDER from settings
        timeout: Request timeout in seconds
        max_tokens: Output token cap
        temperature: Sampling temperature
        model: Model override (OpenAI only)

    Returns:
        LangChain chat model, or None if the provider is not configured
    """
    if llm_provider is None:
        llm_provider = settings.QUERY_GENERATION_PROVIDER

    llm_provider = llm_provider.lower()

    try:
        if llm_provider == "openai":
            if not settings.OPENAI_API_KEY:
                logger.warning("OpenAI API key not configured")
                return None
            from langchain_openai import ChatOpenAI
            return ChatOpenAI(
                model=model or settings.QUERY_GENERATION_MODEL,
                openai_api_key=settings.OPENAI_API_KEY,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
                max_retries=0
            )

        elif llm_provider == "gemini":
            if not settings.GEMINI_API_KEY:
                logger.warning("Gemini API key not configured")
                return None
            from langchain_google_genai import ChatGoogleGenerativeAI
            return ChatGoogleGenerativeAI(
                model=settings.GEMINI_MODEL,
                google_api_key=settings.GEMINI_API_KEY,
                temperature=temperature,
                max_output_tokens=max_tokens,
                timeout=timeout,
                max_retries=0
            )

        elif llm_provider == "claude":
            if not settings.ANTHROPIC_API_KEY:
                logger.warning("Anthropic API key not configured")
                return None
            from langchain_anthropic import ChatAnthropic
            return ChatAnthropic(
                model=settings.CLAUDE_MODEL,
                anthropic_api_key=settings.ANTHROPIC_API_KEY,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
                max_retries=0
            )

        else:
            logger.error(f"Unknown LLM provider: {llm_provider}")
            return None

    except Exception as e:
        logger.error(f"Failed to initialize {llm_provider} LLM: {e}")
        return None


def response_text(response) -> str:
    """Plain text of a LangChain message (content may be a list of parts)."""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        content = "".join(parts)
    return (content or "").strip()
