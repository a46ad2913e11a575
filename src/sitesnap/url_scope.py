"""URL normalization and crawl scope decisions."""

import re
from typing import Optional
from urllib.parse import urlparse, urlsplit, urlunsplit

from sitesnap.constants import (
    MAX_FILENAME_LENGTH,
    MAX_LINK_TEXT_LENGTH,
    NO_LINK_TEXT_PLACEHOLDER,
)
from sitesnap.models import ScopeConfig

_SCHEME_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9_.\-]", re.IGNORECASE | re.ASCII)


def normalize_url(url: str) -> str:
    """Normalize a URL for visited-set membership and scope checks.

    Drops the fragment and the query string, then strips trailing path
    separators. ``normalize_url(normalize_url(u)) == normalize_url(u)``.

    Args:
        url: Absolute or relative URL string

    Returns:
        Normalized URL string
    """
    normalized = url.split("#", 1)[0].split("?", 1)[0]
    return normalized.rstrip("/")


def host_of(url: str) -> Optional[str]:
    """Return the lowercased host of a URL, or None when it can't be parsed."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def build_scope(site_url: str) -> ScopeConfig:
    """Build the scope for a crawl rooted at ``site_url``.

    Scheme and host of the root are lowercased, matching the form in which
    browsers report link hrefs; the path keeps its case.

    Raises:
        ValueError: If the site URL has no host
    """
    host = host_of(site_url)
    if not host:
        raise ValueError(f"Invalid site URL: {site_url}")
    parts = urlsplit(site_url)
    root = urlunsplit(parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower()))
    return ScopeConfig(crawl_root_url=normalize_url(root), crawl_domain=host)


def is_in_scope(normalized_url: str, scope: ScopeConfig) -> bool:
    """Whether a normalized URL sits under the crawl root.

    Host similarity does not matter here: a page on a related subdomain
    outside the root prefix is rejected. The check is a plain string prefix,
    so a root of ``/docs`` also admits ``/docs-old`` and a root without a port
    admits the same host on another port.
    """
    return normalized_url.startswith(scope.crawl_root_url)


def _host_matches(host: Optional[str], domain: str) -> bool:
    if not host:
        return False
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def is_discoverable(candidate_url: str, scope: ScopeConfig) -> bool:
    """Whether a freshly discovered link may join the frontier.

    Malformed URLs are simply not discoverable.
    """
    return _host_matches(host_of(candidate_url), scope.crawl_domain)


def is_related_domain(url: str, scope: ScopeConfig) -> bool:
    """Whether an out-of-root URL still lives on the crawl domain."""
    return _host_matches(host_of(url), scope.crawl_domain)


def clean_link_text(text: Optional[str]) -> str:
    """Collapse whitespace and bound anchor text for the run log."""
    collapsed = " ".join((text or "").split())
    collapsed = collapsed[:MAX_LINK_TEXT_LENGTH].strip()
    return collapsed or NO_LINK_TEXT_PLACEHOLDER


def sanitize_filename(url: str) -> str:
    """Turn a URL into a flat, filesystem-safe file stem.

    Example:
        >>> sanitize_filename("https://site.test/About/Team?x=1")
        'site.test_about_team_x_1'
    """
    name = _SCHEME_PREFIX.sub("", url)
    if name.endswith("/"):
        name = name[:-1]
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).lower()
    return name[:MAX_FILENAME_LENGTH]
