"""
Content preview generator.

Produces a sample AI-optimized page for a scanned brand. Runs alongside the
platform calls and is strictly best-effort: any failure yields None.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from agents.llm import get_helper_llm, response_text
from config.settings import settings
from models.schemas import ContentPreview, FaqItem
from utils.helpers import best_effort, strip_code_fences
from utils.signals import extract_brand_name

logger = logging.getLogger(__name__)

MAX_FAQ_ITEMS = 4

SYSTEM_PROMPT = (
    "You are an AI visibility content strategist. You create authority-building pages "
    "that ChatGPT, Perplexity, and Google AI will cite when users ask questions. "
    "You respond ONLY with valid JSON. No markdown code fences."
)

USER_PROMPT = """Generate a sample fix page preview for: "{brand}"

CONTEXT:
- Domain: {domain}
{summary_line}
- This is a PREVIEW showing what AI-optimized content looks like

INSTRUCTIONS:
1. Pick a realistic query a potential customer of {brand} would ask AI
2. Write an SEO title (60-70 chars) targeting that query
3. Write a meta description (150-160 chars)
4. Write an opening paragraph (80-120 words) that directly answers the query
5. Write a body section (200-300 words) with ## headings and specific detail
6. Write 4 FAQ questions real users would ask, with concise answers (2-3 sentences each)

Respond in this exact JSON format:
{{
  "title": "SEO title here",
  "metaDescription": "Meta description here",
  "firstParagraph": "Opening paragraph in markdown",
  "body": "Rest of the content in markdown",
  "faqItems": [{{"question": "Q1?", "answer": "A1"}}]
}}"""


def parse_content_preview(raw: str, brand: str) -> ContentPreview:
    """
    Build a ContentPreview from the model's JSON answer.

    Raises:
        ValueError: If the answer is not a JSON object
    """
    parsed = json.loads(strip_code_fences(raw))
    if not isinstance(parsed, dict):
        raise ValueError("Content preview is not a JSON object")

    first_paragraph = parsed.get("firstParagraph") or ""
    body = parsed.get("body") or ""
    word_count = len(f"{first_paragraph}\n\n{body}".split())

    faq_items = []
    for item in (parsed.get("faqItems") or [])[:MAX_FAQ_ITEMS]:
        if isinstance(item, dict) and item.get("question") and item.get("answer"):
            faq_items.append(FaqItem(question=item["question"], answer=item["answer"]))

    return ContentPreview(
        title=parsed.get("title") or f"{brand}: The Complete Guide",
        meta_description=parsed.get("metaDescription") or f"Everything you need to know about {brand}.",
        first_paragraph=first_paragraph,
        blurred_body=body,
        faq_items=faq_items,
        word_count=word_count,
        brand_used=brand,
        generated_at=datetime.now(timezone.utc),
    )


def _generate(domain: str, business_summary: Optional[str]) -> Optional[ContentPreview]:
    llm = get_helper_llm(
        settings.CONTENT_PREVIEW_PROVIDER,
        timeout=settings.CONTENT_PREVIEW_TIMEOUT_SECONDS,
        max_tokens=4000,
        model=settings.CHATGPT_MODEL,
    )
    if llm is None:
        return None

    from langchain_core.messages import SystemMessage, HumanMessage

    brand = extract_brand_name(domain)
    summary_line = f"- What they do: {business_summary}" if business_summary else ""
    response = llm.invoke([
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=USER_PROMPT.format(brand=brand, domain=domain, summary_line=summary_line)),
    ])

    raw = response_text(response)
    if not raw:
        logger.warning("Empty content preview response")
        return None
    return parse_content_preview(raw, brand)


def generate_content_preview(domain: str, business_summary: Optional[str] = None) -> Optional[ContentPreview]:
    """
    Generate a content preview for a domain.

    Returns:
        ContentPreview, or None when disabled, unconfigured, or on any failure
    """
    if not settings.CONTENT_PREVIEW_ENABLED:
        return None

    preview = best_effort(
        f"Content preview for {domain}",
        _generate,
        domain,
        business_summary,
        default=None,
        timeout=settings.CONTENT_PREVIEW_TIMEOUT_SECONDS,
    )
    if preview is not None:
        logger.info(f"📝 Content preview generated for {domain} ({preview.word_count} words)")
    return preview
