"""
Signal extraction from AI platform responses.

Pure functions with no I/O: given response text, the provider's citation
list and the target domain, decide whether the brand is mentioned, cited,
or referenced by domain, and how prominently.

A mention only counts when it sits in a sentence that is not a hedge such as
"I'm not aware of ...". Provider citations are authoritative and are never
discarded by the hedge check.
"""

import re
from functools import lru_cache
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from models.schemas import ResponseSignals


# Public suffixes stripped when deriving a brand name (longest match wins)
BRAND_SUFFIXES = [
    "com", "io", "co", "ai", "app", "dev", "org", "net", "so", "sh", "me",
    "cc", "biz", "info", "xyz", "tech", "tools", "software", "cloud",
    "studio", "design", "agency", "pro", "team", "run", "build", "gg", "fm",
    "tv", "to", "ly", "it", "is", "in", "us", "uk", "de", "fr", "eu",
    "co.uk", "com.au", "co.in",
]

# TLDs recognized when scanning free text for domain-shaped tokens
TEXT_DOMAIN_PATTERN = re.compile(
    r"\b([a-z0-9-]+\.(?:com|io|co|ai|app|dev|org|net|me|sh|cc|so|biz|xyz|tech|tools|software|cloud|pro|gg|fm|tv|to|ly))\b",
    re.IGNORECASE,
)

# Sub-words that commonly make up compound brand names
COMMON_BRAND_WORDS = frozenset([
    "stack", "over", "flow", "product", "hunt", "hub", "spot", "trust",
    "pilot", "base", "camp", "click", "up", "cloud", "fire", "sale", "force",
    "mail", "chimp", "send", "grid", "drop", "box", "bit", "bucket", "craft",
    "snap", "chat", "work", "team", "book", "face", "linked", "mind", "map",
    "air", "table", "notion", "pipe", "drive", "shop", "pay", "pal", "strip",
    "wise", "fresh", "desk", "help", "scout", "inter", "com", "fast", "quick",
    "smart", "data", "dog", "new", "relic", "post", "mark", "git", "lab",
    "source", "code", "dev", "ops", "api", "web", "app", "net", "tech",
    "soft", "ware", "host", "page", "site", "link", "doc", "sign", "log",
    "auth", "key", "lock", "safe", "guard", "shield", "vault", "zen", "meta",
    "super", "mega", "micro", "mini", "max",
])

# Phrases a model uses when it does not actually know the brand
NEGATIVE_PHRASES = [
    "i don't recognize",
    "i don't have information",
    "not familiar with",
    "i'm not aware of",
    "i am not aware of",
    "no information available",
    "i cannot find",
    "i can't find",
    "don't have specific",
    "not widely known",
    "not a widely-known",
    "i don't have details",
    "unable to find",
    "couldn't find information",
    "no results for",
]

_SENTENCE_BREAK = re.compile(r"[.!?]+(?=\s)|\n+")


def _hostname(value: str) -> Optional[str]:
    """Hostname of a citation URL or bare host, lowercased and without www."""
    value = value.strip()
    if not value:
        return None
    parsed = urlparse(value if "://" in value else f"//{value}")
    host = (parsed.hostname or "").rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host or None


def extract_brand_name(domain: str) -> str:
    """
    Derive the brand token from a domain.

    Args:
        domain: Normalized domain, e.g. "app.producthunt.com"

    Returns:
        str: Brand token, e.g. "producthunt". Long hyphenated names
        (over 20 characters) are not brand-like, so the domain is returned.
    """
    domain = domain.lower()
    name = None
    for suffix in sorted(BRAND_SUFFIXES, key=len, reverse=True):
        if domain.endswith("." + suffix):
            name = domain[: -(len(suffix) + 1)]
            break
    if name is None:
        name = domain.rsplit(".", 1)[0] if "." in domain else domain

    name = name.split(".")[-1]

    if "-" in name and len(name) > 20:
        return domain
    return name


def split_compound_brand(brand: str) -> Optional[Tuple[str, str]]:
    """
    Split a compound brand into two recognized parts.

    "producthunt" -> ("product", "hunt"); "acme" -> None.
    """
    brand = brand.lower()
    for i in range(2, len(brand) - 1):
        left, right = brand[:i], brand[i:]
        if left in COMMON_BRAND_WORDS and (right in COMMON_BRAND_WORDS or len(right) >= 3):
            return left, right
    return None


MIN_BRAND_LENGTH = 2
_NEVER_MATCHES = re.compile(r"(?!)")


@lru_cache(maxsize=256)
def _brand_pattern(domain: str) -> re.Pattern:
    brand = extract_brand_name(domain)
    if len(brand) < MIN_BRAND_LENGTH:
        # Single letters match inside ordinary words ("don't"); only domain and citation signals count
        return _NEVER_MATCHES

    # "my-brand" also matches "my brand"
    alternatives = [re.escape(brand).replace(r"\-", r"[\s-]")]

    parts = split_compound_brand(brand) if "-" not in brand else None
    if parts:
        left, right = parts
        alternatives.append(rf"{re.escape(left)}[\s-]{re.escape(right)}")

    return re.compile(
        r"(?<![a-z0-9])(?:" + "|".join(alternatives) + r")(?![a-z0-9])",
        re.IGNORECASE,
    )


@lru_cache(maxsize=256)
def _domain_pattern(domain: str) -> re.Pattern:
    # The domain itself or any subdomain, not followed by a further label
    return re.compile(
        r"(?<![\w-])(?:[a-z0-9-]+\.)*" + re.escape(domain.lower()) + r"(?![\w-]|\.[a-z0-9])",
        re.IGNORECASE,
    )


def _sentence_spans(text: str) -> List[Tuple[int, int, bool]]:
    """Split text into (start, end, is_negative) sentence spans."""
    spans = []
    start = 0
    for match in _SENTENCE_BREAK.finditer(text):
        end = match.end()
        if end > start:
            spans.append((start, end, is_negative_mention(text[start:end])))
        start = end
    if start < len(text):
        spans.append((start, len(text), is_negative_mention(text[start:])))
    return spans


def _positive_matches(pattern: re.Pattern, text: str) -> List[re.Match]:
    """Matches of pattern that do not fall inside a hedging sentence."""
    if not text:
        return []
    spans = _sentence_spans(text)
    matches = []
    for match in pattern.finditer(text):
        negative = next(
            (neg for start, end, neg in spans if start <= match.start() < end),
            False,
        )
        if not negative:
            matches.append(match)
    return matches


def is_negative_mention(text: str) -> bool:
    """Check whether text contains a hedging or ignorance phrase."""
    lowered = text.lower().replace("’", "'").replace("‘", "'")
    return any(phrase in lowered for phrase in NEGATIVE_PHRASES)


def extract_mentioned_domains(text: str, citations: Optional[List[str]] = None) -> List[str]:
    """
    Collect domains referenced by a response.

    Citation hostnames come first, then domain-shaped tokens found in the
    text. Results are lowercase and de-duplicated in order of appearance.
    """
    found = []
    for citation in citations or []:
        host = _hostname(citation)
        if host and host not in found:
            found.append(host)

    for match in TEXT_DOMAIN_PATTERN.finditer(text or ""):
        host = match.group(1).lower()
        if host.startswith("www."):
            host = host[4:]
        if host not in found:
            found.append(host)

    return found


def is_domain_in_citations(citations: Optional[List[str]], domain: str) -> bool:
    """True when a citation hostname equals the domain or is a subdomain of it."""
    domain = domain.lower()
    for citation in citations or []:
        host = _hostname(citation)
        if host and (host == domain or host.endswith("." + domain)):
            return True
    return False


def is_domain_in_text(text: str, domain: str) -> bool:
    """True when the exact domain (or a subdomain) appears in a non-hedging sentence."""
    return bool(_positive_matches(_domain_pattern(domain), text or ""))


def is_brand_mentioned(text: str, domain: str) -> bool:
    """True when the brand name appears in a non-hedging sentence."""
    return bool(_positive_matches(_brand_pattern(domain), text or ""))


def find_mention_position(text: str, domain: str) -> float:
    """
    Fractional offset of the first non-hedging brand mention.

    Returns:
        float: 0.0 for the very start of the text, -1 when absent
    """
    if not text:
        return -1.0
    matches = _positive_matches(_brand_pattern(domain), text)
    if not matches:
        return -1.0
    return matches[0].start() / len(text)


def count_mentions(text: str, domain: str) -> int:
    """Number of non-overlapping, non-hedging brand mentions."""
    return len(_positive_matches(_brand_pattern(domain), text or ""))


def is_own_domain(host: str, domain: str) -> bool:
    host, domain = host.lower(), domain.lower()
    return host == domain or host.endswith("." + domain)


def extract_response_signals(
    text: str,
    citations: Optional[List[str]],
    domain: str
) -> ResponseSignals:
    """
    Extract every signal for one platform response.

    Args:
        text: Response text
        citations: Source URLs attributed by the provider (may be empty)
        domain: Normalized target domain

    Returns:
        ResponseSignals for the response
    """
    text = text or ""
    return ResponseSignals(
        mentioned_domains=extract_mentioned_domains(text, citations),
        domain_in_text=is_domain_in_text(text, domain),
        in_citations=is_domain_in_citations(citations, domain),
        brand_mentioned=is_brand_mentioned(text, domain),
        negative=is_negative_mention(text),
        mention_position=find_mention_position(text, domain),
        mention_count=count_mentions(text, domain),
    )
