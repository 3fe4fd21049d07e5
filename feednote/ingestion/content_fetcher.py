"""
Content Fetcher
===============

Downloads an article page and extracts its main readable text, used
when a feed entry's own description is too short to summarize.
"""

import asyncio
import re
import ssl
from typing import Optional

import aiohttp
import certifi
from bs4 import BeautifulSoup

from ..utils.logging import get_logger_for_component
from ..utils.exceptions import ContentFetchError, ErrorCode

# Candidate containers for the article body, most specific first
MAIN_CONTENT_SELECTORS = [
    "article",
    "main",
    ".post-content",
    ".entry-content",
    ".article-body",
    ".article-content",
    "#content",
    ".content",
]

# Page chrome removed before extracting text
NOISE_ELEMENTS = ["script", "style", "nav", "header", "footer", "aside"]

MIN_SELECTOR_TEXT_LENGTH = 100
MAX_RESPONSE_BYTES = 2 * 1024 * 1024
MAX_CONTENT_LENGTH = 8000

WHITESPACE_PATTERN = re.compile(r"\s+")


def extract_main_content(html_content: str, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """Extract the readable article text from an HTML page.

    Args:
        html_content: Raw HTML document
        max_length: Maximum characters returned

    Returns:
        Whitespace-normalized text, or an empty string if none was found
    """
    soup = BeautifulSoup(html_content, "html.parser")

    for element in soup(NOISE_ELEMENTS):
        element.decompose()

    text = ""
    for selector in MAIN_CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is None:
            continue
        candidate = WHITESPACE_PATTERN.sub(" ", node.get_text(" ")).strip()
        if len(candidate) > MIN_SELECTOR_TEXT_LENGTH:
            text = candidate
            break

    if not text:
        body = soup.body or soup
        text = WHITESPACE_PATTERN.sub(" ", body.get_text(" ")).strip()

    return text[:max_length]


class ContentFetcher:
    """Fetches article pages over HTTP."""

    def __init__(self, timeout: int = 15, session: Optional[aiohttp.ClientSession] = None):
        """Initialize content fetcher.

        Args:
            timeout: Request timeout in seconds
            session: Existing aiohttp session (not closed by this fetcher)
        """
        self.timeout = timeout
        self.logger = get_logger_for_component("content_fetcher")
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._session = session

    async def fetch_content(self, url: str) -> str:
        """Download a page and return its main text.

        Raises:
            ContentFetchError: On network errors, HTTP errors or empty pages
        """
        if not url:
            raise ContentFetchError("Entry has no link to fetch")

        try:
            if self._session is not None:
                html_content = await self._download(self._session, url)
            else:
                connector = aiohttp.TCPConnector(ssl=self.ssl_context)
                async with aiohttp.ClientSession(
                    connector=connector,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers={"User-Agent": "FeedNote/1.0"},
                ) as session:
                    html_content = await self._download(session, url)

        except asyncio.TimeoutError as e:
            raise ContentFetchError(
                f"Timed out after {self.timeout}s fetching page", url=url
            ) from e

        except aiohttp.ClientError as e:
            raise ContentFetchError(f"Failed to fetch page: {e}", url=url) from e

        content = extract_main_content(html_content)
        if not content:
            raise ContentFetchError(
                "No content found on page",
                url=url,
                error_code=ErrorCode.CONTENT_INVALID,
            )

        self.logger.debug(f"Extracted {len(content)} characters from {url}")
        return content

    async def _download(self, session: aiohttp.ClientSession, url: str) -> str:
        async with session.get(url) as response:
            if response.status >= 400:
                raise ContentFetchError(f"HTTP status {response.status}", url=url)

            raw = await response.content.read(MAX_RESPONSE_BYTES)
            encoding = response.charset or "utf-8"
            return raw.decode(encoding, errors="replace")
