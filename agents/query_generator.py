"""
Query Generator

Turns a domain and its site context into exactly three customer queries
(discovery, brand, decision) plus a one-line business summary. Generation is
LLM-assisted when the homepage gave us something to work with, and falls back
to fixed templates otherwise.
"""

import logging
import re
from typing import Optional

from agents.llm import get_helper_llm, response_text
from config.settings import settings
from models.schemas import QueryIntent, QuerySet, SiteContext
from utils.helpers import best_effort
from utils.signals import extract_brand_name, is_brand_mentioned

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 5
MAX_QUERY_LENGTH = 200
MAX_SUMMARY_FALLBACK = 100

QUERY_GENERATION_PROMPT = """You are testing whether AI assistants know about a specific business. Given a website's information, do two things:

1. Write a one-sentence summary of what this business does (max 20 words). Be specific: not "a SaaS tool" but what it actually does.
2. Generate exactly 3 search queries that a REAL potential customer would type into ChatGPT, Perplexity, or Google AI.

RULES:
- Q1 (Discovery): someone who has the SPECIFIC PROBLEM this product solves but doesn't know this brand exists. Do NOT include the brand name "{brand}".
- Q2 (Brand): a direct query about this brand from someone who heard the name and wants to know what it does, pricing, reviews.
- Q3 (Decision): someone actively comparing options in this exact niche.
- Each query: 5-15 words, natural language, how a real person talks to AI.

RESPOND IN EXACTLY THIS FORMAT (no markdown, no extra text):
SUMMARY: [what the business does]
Q1: [discovery query]
Q2: [brand query]
Q3: [decision query]

Website information:
{site_info}"""

_LINE_PATTERNS = {
    "summary": re.compile(r"^\s*SUMMARY:\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    QueryIntent.DISCOVERY: re.compile(r"^\s*Q1:\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    QueryIntent.BRAND: re.compile(r"^\s*Q2:\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    QueryIntent.DECISION: re.compile(r"^\s*Q3:\s*(.+)$", re.IGNORECASE | re.MULTILINE),
}


def fallback_queries(domain: str, context: Optional[SiteContext] = None) -> QuerySet:
    """
    Deterministic template queries, no external calls.

    Args:
        domain: Normalized domain
        context: Site context used only for the business summary

    Returns:
        QuerySet with source "template"
    """
    context = context or SiteContext()
    brand = extract_brand_name(domain)
    summary = context.description[:MAX_SUMMARY_FALLBACK] or context.title or domain

    return QuerySet(
        discovery=f"what is {domain}",
        brand=f"tell me about {brand}",
        decision=f"{brand} reviews",
        business_summary=summary,
        source="template"
    )


def build_site_info(domain: str, context: SiteContext) -> str:
    parts = [f"Domain: {domain}"]
    if context.title:
        parts.append(f"Title: {context.title}")
    if context.description:
        parts.append(f"Description: {context.description}")
    if context.site_name:
        parts.append(f"Site name: {context.site_name}")
    if context.category:
        parts.append(f"Category: {context.category}")
    if context.headings:
        parts.append(f"Key headings: {' | '.join(context.headings)}")
    return "\n".join(parts)


def parse_generated_queries(text: str, domain: str, context: SiteContext) -> Optional[QuerySet]:
    """
    Parse the SUMMARY/Q1/Q2/Q3 format.

    Returns:
        QuerySet, or None if an intent is missing, a query has an invalid
        length, or the discovery query leaks the brand name
    """
    queries = {}
    for intent in QueryIntent:
        match = _LINE_PATTERNS[intent].search(text)
        query = match.group(1).strip().strip('"') if match else ""
        if not (MIN_QUERY_LENGTH < len(query) < MAX_QUERY_LENGTH):
            logger.warning(f"Generated {intent.value} query missing or invalid: {query!r}")
            return None
        queries[intent] = query

    if is_brand_mentioned(queries[QueryIntent.DISCOVERY], domain):
        logger.warning(f"Discovery query mentions the brand: {queries[QueryIntent.DISCOVERY]!r}")
        return None

    summary_match = _LINE_PATTERNS["summary"].search(text)
    summary = summary_match.group(1).strip() if summary_match else ""
    if not summary:
        summary = fallback_queries(domain, context).business_summary

    return QuerySet(
        discovery=queries[QueryIntent.DISCOVERY],
        brand=queries[QueryIntent.BRAND],
        decision=queries[QueryIntent.DECISION],
        business_summary=summary,
        source="ai"
    )


def _generate_with_llm(domain: str, context: SiteContext) -> Optional[QuerySet]:
    llm = get_helper_llm(
        settings.QUERY_GENERATION_PROVIDER,
        timeout=settings.QUERY_GENERATION_TIMEOUT_SECONDS,
        max_tokens=200,
    )
    if llm is None:
        return None

    from langchain_core.messages import HumanMessage

    prompt = QUERY_GENERATION_PROMPT.format(
        brand=extract_brand_name(domain),
        site_info=build_site_info(domain, context),
    )
    response = llm.invoke([HumanMessage(content=prompt)])
    return parse_generated_queries(response_text(response), domain, context)


def generate_queries(domain: str, context: Optional[SiteContext] = None) -> QuerySet:
    """
    Generate one query per intent for a domain.

    Args:
        domain: Normalized domain
        context: Site context from the homepage fetch

    Returns:
        QuerySet, LLM-generated when possible, otherwise templates
    """
    context = context or SiteContext()

    if context.has_content:
        generated = best_effort(
            f"Query generation for {domain}",
            _generate_with_llm,
            domain,
            context,
            default=None,
            timeout=settings.QUERY_GENERATION_TIMEOUT_SECONDS,
        )
        if generated is not None:
            logger.info(f"🔍 Generated queries for {domain}: {[q.text for q in generated.as_list()]}")
            return generated

    logger.info(f"🔍 Using template queries for {domain}")
    return fallback_queries(domain, context)
