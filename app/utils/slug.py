"""
Slug helpers for tenant identifiers.
"""

import re
import time
from typing import Optional

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

# Base used when a company name has no ASCII letters or digits at all
FALLBACK_SLUG = "tenant"


def slugify(value: str) -> str:
    """
    Normalize a display name into a URL-safe base slug.

    Lowercases, collapses every run of characters outside [a-z0-9] into a
    single "-" and strips separators from both ends.

    Examples:
        "Acme, Inc."  -> "acme-inc"
        "ACME   INC"  -> "acme-inc"
    """
    return _NON_ALNUM_RUN.sub("-", value.lower()).strip("-")


def build_tenant_slug(company_name: str, suffix: Optional[str] = None) -> str:
    """
    Build a tenant slug from a company name plus a disambiguating suffix.

    The suffix defaults to the current epoch time in milliseconds, which keeps
    two signups with the same company name apart in practice. The store's slug
    reservation is what actually guarantees uniqueness.
    """
    base = slugify(company_name) or FALLBACK_SLUG
    if suffix is None:
        suffix = str(int(time.time() * 1000))
    return f"{base}-{suffix}"
