import re
from typing import Iterable, Sequence

from justone.core.errors import ApiError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str:
    """
    Normalizes and format-checks an email.
    Returns the normalized address or raises 400 invalid_email.
    """
    normalized = normalize_email(email)
    if not normalized or not EMAIL_RE.match(normalized) or normalized.count("@") != 1:
        raise ApiError(400, "invalid_email", "Please enter a valid email.")
    return normalized


def email_domain(email: str) -> str:
    return normalize_email(email).rsplit("@", 1)[-1]


def domain_matches(domain: str, allowed: Iterable[str], include_subdomains: bool = False) -> bool:
    """
    Exact match against the allowlist, or (with include_subdomains)
    also `x.<allowed>` for any allowed entry.
    """
    domain = domain.lower()
    for entry in allowed:
        entry = entry.strip().lower()
        if not entry:
            continue
        if domain == entry:
            return True
        if include_subdomains and domain.endswith("." + entry):
            return True
    return False


def find_campus_for_domain(campuses: Sequence, domain: str, include_subdomains: bool = False):
    """First campus whose allowed_domains accepts `domain`, else None."""
    for campus in campuses:
        if domain_matches(domain, campus.allowed_domains or [], include_subdomains):
            return campus
    return None
