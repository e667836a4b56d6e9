"""
Page capture.

Capturing the foreground browser tab is platform specific and lives outside
laterread; whatever does it hands over a ``PageInfo``. When only a url is
known, ``fetch_page_info`` downloads the page and reads its ``<title>``.
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from laterread.core.errors import CaptureUnavailableError

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"https?://\S+")


@dataclass(frozen=True)
class PageInfo:
    """The url and title of a captured page."""

    url: str
    title: str


def extract_url(text: str) -> str:
    """
    Find the first http(s) url in free text (e.g. clipboard contents).

    Raises:
        CaptureUnavailableError: If the text contains no url
    """
    match = _URL_PATTERN.search(text)
    if match is None:
        raise CaptureUnavailableError("No link found in the given text")
    return match.group(0)


def fetch_page_info(url: str, *, client: httpx.Client | None = None, timeout: float = 10.0) -> PageInfo:
    """
    Build a PageInfo for a url, reading the title from the page.

    Network failures are not fatal: the url itself becomes the title.

    Raises:
        CaptureUnavailableError: If the url is not an http(s) url
    """
    url = url.strip()
    if urlparse(url).scheme not in ("http", "https"):
        raise CaptureUnavailableError(f"Not a web page: {url}", url=url)

    try:
        if client is not None:
            response = client.get(url, timeout=timeout, follow_redirects=True)
        else:
            response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.info("Could not fetch title for %s: %s", url, e)
        return PageInfo(url=url, title=url)

    return PageInfo(url=url, title=page_title(response.text) or url)


def page_title(html_content: str) -> str:
    """
    Text of the page's ``<title>`` on one line, or "" if it has none.

    Example:
        >>> page_title("<title>Tom &amp; Jerry\\n  Notes</title>")
        'Tom & Jerry Notes'
    """
    soup = BeautifulSoup(html_content, "html.parser")
    if soup.title is None:
        return ""
    return " ".join(soup.title.get_text().split())
