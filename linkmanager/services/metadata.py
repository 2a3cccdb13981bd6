import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import httpx
from bs4 import BeautifulSoup

from ..utils.validators import parse_domain

logger = logging.getLogger(__name__)

DEFAULT_FAVICON_SERVICE_URL = "https://www.google.com/s2/favicons?domain={domain}&sz=32"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Only the head of a page is needed for its title and meta tags
DEFAULT_MAX_PAGE_BYTES = 1024 * 1024


def favicon_url(domain: str, template: str = DEFAULT_FAVICON_SERVICE_URL) -> str:
    return template.format(domain=domain)


@dataclass
class PageMetadata:
    """Metadata derived for a newly added link"""
    title: str
    description: str
    favicon: str
    domain: str


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def parse_page(
    html: Union[str, bytes],
    domain: str,
    favicon: str,
    encoding: Optional[str] = None
) -> PageMetadata:
    """
    Derive title and description from a page.

    Title falls back to og:title then the domain; description falls back to
    og:description then an empty string. encoding applies to bytes input and
    is otherwise sniffed from the document.
    """
    if isinstance(html, bytes) and encoding:
        soup = BeautifulSoup(html, "html.parser", from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, "html.parser")

    title = soup.title.get_text(strip=True) if soup.title else ""
    title = title or _meta_content(soup, property="og:title") or domain

    description = (
        _meta_content(soup, name="description")
        or _meta_content(soup, property="og:description")
    )

    return PageMetadata(
        title=title,
        description=description,
        favicon=favicon,
        domain=domain
    )


class MetadataExtractor:
    """
    Best-effort page scraper.

    extract() never raises; any failure yields the domain-only fallback.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
        favicon_template: str = DEFAULT_FAVICON_SERVICE_URL,
        max_page_bytes: int = DEFAULT_MAX_PAGE_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout
        self.max_page_bytes = max_page_bytes
        self.user_agent = user_agent
        self.favicon_template = favicon_template
        self.transport = transport

    def fallback(self, url: str) -> PageMetadata:
        domain = parse_domain(url)
        return PageMetadata(
            title=domain,
            description="",
            favicon=favicon_url(domain, self.favicon_template),
            domain=domain
        )

    async def fetch(self, url: str) -> Tuple[bytes, Optional[str]]:
        """
        Download at most max_page_bytes of a page.

        Returns:
            Tuple of (body, charset declared in Content-Type or None)

        Raises:
            httpx.HTTPError: On network failure or non-2xx status
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self.transport
        ) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                encoding = response.charset_encoding

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) >= self.max_page_bytes:
                        break

        return bytes(body[:self.max_page_bytes]), encoding

    async def extract(self, url: str) -> PageMetadata:
        """
        Fetch a page and derive its metadata.

        Args:
            url: A URL that already passed validation

        Returns:
            Extracted metadata, or the fallback when the fetch or parse fails
        """
        domain = parse_domain(url)
        favicon = favicon_url(domain, self.favicon_template)

        try:
            # timeout bounds the whole download, not each network operation
            html, encoding = await asyncio.wait_for(self.fetch(url), self.timeout)
            return parse_page(html, domain, favicon, encoding)

        except Exception as e:
            logger.warning("Error extracting metadata from %s: %r", url, e)
            return self.fallback(url)
