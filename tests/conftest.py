"""
Shared fixtures. No test touches the network: DNS, HTTP fetches, LLMs and
platform calls are monkeypatched.
"""

import socket

import pytest

from config.settings import settings
from models.schemas import PlatformResponse, QueryIntent, QuerySet, SiteContext
from storage.report_store import InMemoryReportStore, set_report_store
from utils import rate_limiter


@pytest.fixture(autouse=True)
def isolated_backends(monkeypatch):
    """In-memory rate limiter and report store, no helper LLM keys."""
    monkeypatch.setattr(settings, "RATE_LIMIT_BACKEND", "memory")
    monkeypatch.setattr(settings, "REPORT_STORE_BACKEND", "memory")
    monkeypatch.setattr(settings, "RATE_LIMIT_MAX", 5)
    monkeypatch.setattr(settings, "TRUSTED_PROXY_COUNT", 1)
    monkeypatch.setattr(settings, "CATEGORY_CLASSIFICATION_ENABLED", False)
    monkeypatch.setattr(settings, "PLATFORMS", ["perplexity", "gemini", "chatgpt"])
    for key in ("PERPLEXITY_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.setattr(settings, key, "")

    rate_limiter.reset_rate_limiter()
    store = InMemoryReportStore()
    set_report_store(store)
    yield store
    rate_limiter.reset_rate_limiter()
    set_report_store(None)


@pytest.fixture
def fake_dns(monkeypatch):
    """Resolve every domain except those containing 'unresolvable'."""
    def getaddrinfo(host, *args, **kwargs):
        if "unresolvable" in host:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0))]

    monkeypatch.setattr("utils.domain.socket.getaddrinfo", getaddrinfo)


@pytest.fixture
def no_site_context(monkeypatch):
    monkeypatch.setattr(
        "agents.scan_orchestrator.nodes.fetch_site_context",
        lambda domain: SiteContext()
    )


@pytest.fixture
def acme_queries():
    return QuerySet(
        discovery="how do I track warehouse inventory automatically",
        brand="tell me about acme",
        decision="best inventory tracking software for small warehouses",
        business_summary="Inventory tracking for small warehouses",
        source="ai"
    )


@pytest.fixture
def make_response():
    def _make(platform, text, intent=QueryIntent.BRAND, query="q", citations=None):
        return PlatformResponse(
            platform=platform,
            intent=intent,
            query=query,
            text=text,
            citations=citations or []
        )
    return _make
