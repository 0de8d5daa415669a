"""
Platform adapters: one "ask and get back text + citations" call per AI platform.

Every adapter raises PlatformNotConfiguredError before any network activity
when its key is missing, and PlatformRequestError (timeout, http_error,
network, malformed) for anything that goes wrong on the wire. No retries:
a failed call is recorded by the runner and the scan degrades.
"""

import logging
from typing import List, Optional

import requests

from agents.llm import response_text
from config.settings import settings
from models.exceptions import (
    PlatformError,
    PlatformNotConfiguredError,
    PlatformRequestError,
)
from models.schemas import PlatformResponse, QueryIntent

logger = logging.getLogger(__name__)

CHATGPT_MAX_COMPLETION_TOKENS = 4000


def classify_llm_error(platform: str, error: Exception) -> PlatformRequestError:
    """Map a LangChain/provider SDK exception onto a PlatformRequestError kind."""
    name = type(error).__name__.lower()
    status = getattr(error, "status_code", None) or getattr(error, "code", None)

    if isinstance(error, TimeoutError) or "timeout" in name or "deadline" in name:
        kind = "timeout"
    elif isinstance(status, int) or "status" in name or "apierror" in name:
        kind = "http_error"
    else:
        kind = "network"

    return PlatformRequestError(platform, kind, f"{platform} request failed: {error}", {"status": status})


def ask_perplexity(query: str, timeout: Optional[float] = None) -> PlatformResponse:
    """
    Ask Perplexity, which returns source citations with its answer.

    Args:
        query: Query text
        timeout: Request timeout in seconds

    Returns:
        PlatformResponse with citations
    """
    if not settings.PERPLEXITY_API_KEY:
        raise PlatformNotConfiguredError("perplexity")

    try:
        response = requests.post(
            settings.PERPLEXITY_API_URL,
            headers={
                "Authorization": f"Bearer {settings.PERPLEXITY_API_KEY}",
                "Content-Type": "application/json",
            },
            json={
                "model": settings.PERPLEXITY_MODEL,
                "messages": [{"role": "user", "content": query}],
                "max_tokens": settings.PLATFORM_MAX_TOKENS,
            },
            timeout=timeout or settings.PLATFORM_TIMEOUT_SECONDS,
        )
    except requests.Timeout as e:
        raise PlatformRequestError("perplexity", "timeout", f"Perplexity request timed out: {e}")
    except requests.RequestException as e:
        raise PlatformRequestError("perplexity", "network", f"Perplexity request failed: {e}")

    if not response.ok:
        raise PlatformRequestError(
            "perplexity",
            "http_error",
            f"Perplexity API error: HTTP {response.status_code}",
            {"status": response.status_code},
        )

    try:
        data = response.json()
        text = data["choices"][0]["message"]["content"] or ""
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise PlatformRequestError("perplexity", "malformed", f"Malformed Perplexity response: {e}")

    citations: List[str] = [c for c in data.get("citations") or [] if isinstance(c, str)]
    if not citations:
        citations = [
            r["url"] for r in data.get("search_results") or []
            if isinstance(r, dict) and r.get("url")
        ]

    return PlatformResponse(
        platform="perplexity",
        intent=QueryIntent.BRAND,
        query=query,
        text=text,
        citations=citations,
    )


def ask_gemini(query: str, timeout: Optional[float] = None) -> PlatformResponse:
    """Ask Google Gemini. No source attribution is available."""
    if not settings.GEMINI_API_KEY:
        raise PlatformNotConfiguredError("gemini")

    from langchain_google_genai import ChatGoogleGenerativeAI
    from langchain_core.messages import HumanMessage

    llm = ChatGoogleGenerativeAI(
        model=settings.GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        max_output_tokens=settings.PLATFORM_MAX_TOKENS,
        timeout=timeout or settings.PLATFORM_TIMEOUT_SECONDS,
        max_retries=0,
    )

    try:
        response = llm.invoke([HumanMessage(content=query)])
    except Exception as e:
        raise classify_llm_error("gemini", e)

    return PlatformResponse(
        platform="gemini",
        intent=QueryIntent.BRAND,
        query=query,
        text=response_text(response),
    )


def ask_chatgpt(query: str, timeout: Optional[float] = None) -> PlatformResponse:
    """Ask ChatGPT (OpenAI). No source attribution is available."""
    if not settings.OPENAI_API_KEY:
        raise PlatformNotConfiguredError("chatgpt")

    from langchain_openai import ChatOpenAI
    from langchain_core.messages import HumanMessage

    # Reasoning models spend part of the budget before answering
    llm = ChatOpenAI(
        model=settings.CHATGPT_MODEL,
        openai_api_key=settings.OPENAI_API_KEY,
        max_tokens=CHATGPT_MAX_COMPLETION_TOKENS,
        timeout=timeout or settings.PLATFORM_TIMEOUT_SECONDS,
        max_retries=0,
    )

    try:
        response = llm.invoke([HumanMessage(content=query)])
    except Exception as e:
        raise classify_llm_error("chatgpt", e)

    return PlatformResponse(
        platform="chatgpt",
        intent=QueryIntent.BRAND,
        query=query,
        text=response_text(response),
    )


def ask_platform(
    platform: str,
    query: str,
    intent: QueryIntent = QueryIntent.BRAND,
    timeout: Optional[float] = None
) -> PlatformResponse:
    """
    Ask a specific AI platform a query.

    Args:
        platform: Platform name (perplexity, gemini, chatgpt)
        query: Query string
        intent: Intent of the query, carried onto the response
        timeout: Per-call timeout in seconds

    Returns:
        PlatformResponse

    Raises:
        PlatformError: On missing configuration or a failed call
    """
    platform_lower = platform.lower()

    if platform_lower == "perplexity":
        response = ask_perplexity(query, timeout)
    elif platform_lower == "gemini":
        response = ask_gemini(query, timeout)
    elif platform_lower == "chatgpt":
        response = ask_chatgpt(query, timeout)
    else:
        raise PlatformError(platform_lower, "unknown_platform", f"Unknown platform: {platform}")

    return response.model_copy(update={"intent": intent})
