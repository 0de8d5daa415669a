"""
Domain normalization and validation.

normalize_domain() is pure and idempotent; resolve_domain() performs a real
DNS lookup so unresolvable domains are rejected before any platform quota is
spent.
"""

import logging
import re
import socket
from typing import Any

from models.exceptions import DomainValidationError, DomainResolutionError

logger = logging.getLogger(__name__)

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
MAX_DOMAIN_LENGTH = 253


def normalize_domain(raw: Any) -> str:
    """
    Canonicalize user input into a bare lowercase hostname.

    Args:
        raw: User input such as "HTTPS://www.Example.com/path?x=1"

    Returns:
        str: Normalized domain, e.g. "example.com"

    Raises:
        DomainValidationError: If the input is missing or not a valid hostname
    """
    if not isinstance(raw, str) or not raw.strip():
        raise DomainValidationError("missing_domain", "Domain is required")

    domain = _SCHEME.sub("", raw.strip())
    domain = re.split(r"[/?#]", domain, maxsplit=1)[0]
    domain = domain.rsplit("@", 1)[-1]
    domain = domain.split(":", 1)[0]
    domain = domain.lower().rstrip(".")
    while domain.startswith("www.") and "." in domain[4:]:
        domain = domain[4:]

    if (
        "." not in domain
        or len(domain) > MAX_DOMAIN_LENGTH
        or not all(_LABEL.match(label) for label in domain.split("."))
    ):
        raise DomainValidationError(
            "invalid_domain",
            "Invalid domain format. Please enter a domain like example.com",
            {"input": raw[:100]}
        )

    return domain


def resolve_domain(domain: str) -> None:
    """
    Confirm that a domain exists in DNS.

    Raises:
        DomainResolutionError: If the lookup fails
    """
    try:
        socket.getaddrinfo(domain, None)
    except (socket.gaierror, UnicodeError, OSError) as e:
        logger.info(f"DNS lookup failed for {domain}: {e}")
        raise DomainResolutionError(
            "unresolvable_domain",
            f"Domain '{domain}' does not exist or could not be resolved",
            {"domain": domain}
        )


def validate_domain(raw: Any) -> str:
    """Normalize a domain and confirm it resolves."""
    domain = normalize_domain(raw)
    resolve_domain(domain)
    return domain
