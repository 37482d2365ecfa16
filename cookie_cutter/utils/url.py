"""
URL helpers.
"""

from __future__ import annotations

from urllib import parse


def extract_domain(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except Exception:
        return "unknown"
