"""Harvest candidate hyperlinks from email bodies and web pages."""

import re
from typing import Iterable, Optional

import structlog
from bs4 import BeautifulSoup

from email_json.utils.logging import get_logger

# Greedy: everything up to the next whitespace belongs to the URL
TEXT_URL_PATTERN = re.compile(r"https?://\S+")

_EXCLUDED_PREFIXES = ("mailto:", "#")


def extract_html_links(html: Optional[str]) -> list[str]:
    """
    Collect every ``<a href>`` value of an HTML document.

    Values are returned verbatim, deduplicated in document order. Empty
    ``href`` attributes are skipped.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    return _unique(
        anchor.get("href")
        for anchor in soup.find_all("a", href=True)
        if anchor.get("href")
    )


def extract_text_links(text: Optional[str]) -> list[str]:
    """Collect every ``http(s)://`` run of non-whitespace from plain text."""
    if not text:
        return []
    return _unique(TEXT_URL_PATTERN.findall(text))


def is_followable(link: str) -> bool:
    """False for ``mailto:`` links and in-page anchors."""
    return not link.lower().startswith(_EXCLUDED_PREFIXES)


def _unique(links: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(links))


class LinkHarvester:
    """Build the ordered candidate link list for the link strategies."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        self.logger = logger or get_logger(__name__)

    def harvest(self, html: Optional[str] = None, text: Optional[str] = None) -> list[str]:
        """
        Harvest links from the HTML body, then the plain-text body.

        Returns:
            Unique links in first-seen order, without ``mailto:`` and ``#`` links
        """
        html_links = extract_html_links(html)
        text_links = extract_text_links(text)
        links = _unique(html_links + text_links)
        candidates = [link for link in links if is_followable(link)]

        self.logger.info(
            "Links harvested",
            html_links=len(html_links),
            text_links=len(text_links),
            candidates=len(candidates),
            skipped=len(links) - len(candidates),
        )
        return candidates
