"""Fetch a web page and extract its readable text for URL summarization."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from dataclasses import dataclass
from html.parser import HTMLParser
from urllib.parse import urljoin, urlparse

import httpx

from playground.analysis.errors import InvalidRequestError
from playground.config.models import FetchConfig

logger = logging.getLogger(__name__)

_BLOCKED_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

MAX_REDIRECTS = 5

_HTML_TYPES = ("text/html", "application/xhtml+xml")


class FetchError(Exception):
    """The page could not be retrieved."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


@dataclass(slots=True)
class FetchedPage:
    url: str
    final_url: str
    text: str
    title: str | None = None
    content_type: str = ""
    truncated: bool = False


def _is_private_host(hostname: str) -> bool:
    """Check if a hostname resolves to a private/internal IP address."""
    try:
        addr_infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        return False
    for _, _, _, _, sockaddr in addr_infos:
        ip = ipaddress.ip_address(sockaddr[0])
        if any(ip in network for network in _BLOCKED_NETWORKS):
            return True
    return False


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise InvalidRequestError."""
    url = (url or "").strip()
    if not url:
        raise InvalidRequestError("No URL provided")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidRequestError("Invalid URL: must be http or https")
    if not parsed.hostname:
        raise InvalidRequestError("Invalid URL: missing host")
    return url


class TextExtractor(HTMLParser):
    """Collect the visible text of an HTML document."""

    SKIP_TAGS = frozenset({"script", "style", "noscript", "template", "svg"})
    BLOCK_TAGS = frozenset(
        {
            "p", "div", "br", "li", "ul", "ol", "section", "article", "header",
            "footer", "h1", "h2", "h3", "h4", "h5", "h6", "tr", "blockquote",
            "pre", "table",
        }
    )  # fmt: skip

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._title: list[str] = []
        self._skip_depth = 0
        self._in_title = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
        elif tag == "title":
            self._in_title = True
        elif tag in self.BLOCK_TAGS:
            self._parts.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in self.SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag == "title":
            self._in_title = False
        elif tag in self.BLOCK_TAGS:
            self._parts.append("\n")

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        if self._in_title:
            self._title.append(data)
            return
        self._parts.append(data)

    @property
    def title(self) -> str | None:
        title = " ".join("".join(self._title).split())
        return title or None

    def get_text(self) -> str:
        lines = (" ".join(line.split()) for line in "".join(self._parts).splitlines())
        return "\n".join(line for line in lines if line)


def extract_text(html: str) -> str:
    """Visible text of an HTML document, whitespace collapsed."""
    extractor = TextExtractor()
    extractor.feed(html)
    extractor.close()
    return extractor.get_text()


async def _check_host(url: str, config: FetchConfig) -> None:
    hostname = urlparse(url).hostname or ""
    if config.block_private_hosts and await asyncio.to_thread(
        _is_private_host, hostname
    ):
        raise InvalidRequestError("Cannot fetch internal/private network addresses")


def _parse_page(body: str, content_type: str) -> tuple[str, str | None]:
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime and mime not in _HTML_TYPES:
        return body.strip(), None
    extractor = TextExtractor()
    extractor.feed(body)
    extractor.close()
    return extractor.get_text(), extractor.title


async def fetch_page_text(
    url: str,
    config: FetchConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchedPage:
    """Fetch `url` and return its readable text.

    Args:
        url: http(s) URL to fetch.
        config: Fetch settings (timeout, size cap, private-host blocking).
        client: Optional client to use instead of a fresh one.

    Raises:
        InvalidRequestError: If the URL is malformed or points at a private host.
        FetchError: On transport failure or a non-success status.
    """
    config = config or FetchConfig()
    url = validate_url(url)

    headers = {
        "User-Agent": config.user_agent,
        "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
    }
    owns_client = client is None
    client = client or httpx.AsyncClient(
        timeout=config.timeout_seconds, follow_redirects=False
    )
    current = url
    try:
        # Redirects are followed by hand so every hop passes the host check
        for _ in range(MAX_REDIRECTS + 1):
            await _check_host(current, config)
            async with client.stream(
                "GET", current, headers=headers, follow_redirects=False
            ) as response:
                if response.is_redirect:
                    location = response.headers["location"]
                    current = validate_url(urljoin(current, location))
                    continue
                if not response.is_success:
                    raise FetchError(
                        url,
                        f"HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                chunks: list[bytes] = []
                received = 0
                truncated = False
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                    received += len(chunk)
                    if received >= config.max_bytes:
                        truncated = received > config.max_bytes
                        break
                raw = b"".join(chunks)[: config.max_bytes]
                encoding = response.encoding or "utf-8"
                content_type = response.headers.get("content-type", "")
                final_url = str(response.url)
                break
        else:
            raise FetchError(url, f"Too many redirects (max {MAX_REDIRECTS})")
    except httpx.HTTPError as e:
        raise FetchError(url, f"{type(e).__name__}: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    text, title = _parse_page(raw.decode(encoding, errors="replace"), content_type)
    logger.info(
        "page_fetched",
        extra={"url": final_url, "chars": len(text), "truncated": truncated},
    )
    return FetchedPage(
        url=url,
        final_url=final_url,
        text=text,
        title=title,
        content_type=content_type,
        truncated=truncated,
    )
