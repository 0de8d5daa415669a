"""
Site context fetcher.

Fetches a domain's homepage once and extracts the descriptive signals used to
personalize queries. Everything here is best-effort: failures produce an
empty SiteContext (or no category) and never abort a scan.
"""

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup

from agents.llm import get_helper_llm, response_text
from config.settings import settings
from models.schemas import SiteContext
from utils.helpers import best_effort

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; VisibilityScannerBot/1.0 (GEO Analysis))"
MAX_HEADINGS = 8


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return tag["content"].strip()
    return None


def parse_site_context(html: str) -> SiteContext:
    """
    Extract title, description, headings and Open Graph hints from HTML.

    Args:
        html: Homepage HTML

    Returns:
        SiteContext with whatever could be found
    """
    soup = BeautifulSoup(html, "html.parser")

    title = soup.title.get_text(strip=True) if soup.title else ""
    description = (
        _meta_content(soup, name="description")
        or _meta_content(soup, property="og:description")
        or ""
    )

    headings = []
    for tag in soup.find_all(["h1", "h2"]):
        text = " ".join(tag.get_text(" ", strip=True).split())
        if 3 < len(text) < 200 and text not in headings:
            headings.append(text)
        if len(headings) >= MAX_HEADINGS:
            break

    return SiteContext(
        title=title,
        description=description,
        headings=headings,
        og_type=_meta_content(soup, property="og:type"),
        site_name=_meta_content(soup, property="og:site_name"),
    )


def _fetch_homepage(domain: str, timeout: float) -> SiteContext:
    response = requests.get(
        f"https://{domain}",
        headers={"User-Agent": USER_AGENT, "Accept": "text/html"},
        timeout=timeout,
        allow_redirects=True,
    )
    if not response.ok:
        logger.info(f"Homepage of {domain} returned HTTP {response.status_code}")
        return SiteContext()

    content_type = response.headers.get("Content-Type", "")
    if "html" not in content_type.lower():
        logger.info(f"Homepage of {domain} is not HTML ({content_type})")
        return SiteContext()

    return parse_site_context(response.text)


def fetch_site_context(domain: str, timeout: Optional[float] = None) -> SiteContext:
    """
    Fetch lightweight context for a domain's homepage.

    Args:
        domain: Normalized domain
        timeout: Request timeout in seconds (default SITE_CONTEXT_TIMEOUT_SECONDS)

    Returns:
        SiteContext, empty on any failure
    """
    if timeout is None:
        timeout = settings.SITE_CONTEXT_TIMEOUT_SECONDS

    context = best_effort(
        f"Site context fetch for {domain}",
        _fetch_homepage,
        domain,
        timeout,
        default=SiteContext(),
    )
    logger.info(f"📄 Site context for {domain}: title={bool(context.title)}, "
                f"description={bool(context.description)}, headings={len(context.headings)}")
    return context


CATEGORY_PROMPT = """Classify this business into a short category (1-4 words, e.g. "project management software", "online pet store").

Domain: {domain}
Title: {title}
Description: {description}

Reply with the category only."""


def _classify(domain: str, context: SiteContext, timeout: float) -> Optional[str]:
    llm = get_helper_llm(settings.CATEGORY_PROVIDER, timeout=timeout, max_tokens=20, temperature=0)
    if llm is None:
        return None

    from langchain_core.messages import HumanMessage

    response = llm.invoke([HumanMessage(content=CATEGORY_PROMPT.format(
        domain=domain,
        title=context.title,
        description=context.description,
    ))])
    category = response_text(response).strip().strip('"').strip(".")
    if not category or len(category.split()) > 4:
        return None
    return category.lower()


def classify_category(domain: str, context: SiteContext, timeout: Optional[float] = None) -> Optional[str]:
    """
    Best-effort business category classification.

    Returns:
        A 1-4 word category, or None when disabled, without context, or on failure
    """
    if not settings.CATEGORY_CLASSIFICATION_ENABLED or not context.has_content:
        return None
    if timeout is None:
        timeout = settings.CATEGORY_TIMEOUT_SECONDS

    return best_effort(
        f"Category classification for {domain}",
        _classify,
        domain,
        context,
        timeout,
        default=None,
        timeout=timeout,
    )
