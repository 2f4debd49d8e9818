"""URL and hostname extraction from free-form text."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

# scheme://label.label[...] with an optional path/query tail
URL_RE = re.compile(
    r"(http|https)://([\w_-]+(?:(?:\.[\w_-]+)+))(?:[\w.,@?^=%&:/~+#-]*[\w@?^=%&/~+#-])?"
)


def parse_hostname(url: str) -> Optional[str]:
    """Return the lowercase host of an absolute URL, or None if it doesn't parse."""
    try:
        parsed = urlsplit(url)
        # Raises ValueError for malformed ports
        parsed.port
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https"):
        return None
    return parsed.hostname or None


class ContentScanner:
    """Finds candidate hosts in chat messages and other free-form text."""

    def __init__(self, pattern: re.Pattern[str] = URL_RE):
        self.pattern = pattern

    def extract_hostnames(self, text: str) -> list[str]:
        """
        Extract hostnames from every URL in the text.

        - Keeps first-occurrence order
        - Keeps duplicates
        - Skips matches that fail to parse as a URL
        """
        if not text:
            return []
        hosts: list[str] = []
        for match in self.pattern.finditer(text):
            host = parse_hostname(match.group(0))
            if host:
                hosts.append(host)
        return hosts


_default_scanner = ContentScanner()


def extract_hostnames(text: str) -> list[str]:
    """Extract hostnames from text with the default URL pattern."""
    return _default_scanner.extract_hostnames(text)
