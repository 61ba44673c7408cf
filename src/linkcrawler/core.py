"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from linkcrawler.links import extract_links, is_candidate

DEFAULT_MAX_LINKS_PER_PAGE = 3
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "LinkCrawler/1.0"
# Used to decode bodies for link extraction when the server names no charset
FALLBACK_ENCODING = "utf-8"


class ConfigurationError(ValueError):
    """Raised when the crawler is used without a valid configuration."""


@dataclass(slots=True, frozen=True)
class CrawlConfig:
    """Settings for one crawl run."""
    storage_folder: Optional[Union[str, Path]] = None
    max_links_per_page: int = DEFAULT_MAX_LINKS_PER_PAGE
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.max_links_per_page < 0:
            raise ConfigurationError(
                f"max_links_per_page must be non-negative, got {self.max_links_per_page}"
            )
        if not (math.isfinite(self.timeout_s) and self.timeout_s > 0):
            raise ConfigurationError(f"timeout_s must be a positive number, got {self.timeout_s}")


@dataclass(slots=True)
class FetchResult:
    """Final status and raw body of a GET request."""
    url: str
    status_code: int
    content: bytes = b""
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded with the declared charset, or UTF-8 when there is none."""
        try:
            return self.content.decode(self.encoding or FALLBACK_ENCODING, errors="replace")
        except LookupError:
            return self.content.decode(FALLBACK_ENCODING, errors="replace")


Fetcher = Callable[[str], FetchResult]
Storer = Callable[[Union[str, Path], str, bytes], Path]


def derive_filename(url: str) -> str:
    """Turn a URL into a flat file name: ':', '/' and '.' become '_', plus '.html'."""
    return url.replace(":", "_").replace("/", "_").replace(".", "_") + ".html"


def fetch_page(
    session: requests.Session,
    url: str,
    timeout_s: float,
    user_agent: Optional[str] = None,
) -> FetchResult:
    """
    GET a URL, following redirects.

    The body is kept as bytes. The encoding is only recorded when the
    Content-Type header names a charset.

    Raises requests.RequestException on transport failures. The response is
    closed before returning.
    """
    headers = {"User-Agent": user_agent} if user_agent else None
    with session.get(url, headers=headers, timeout=timeout_s, allow_redirects=True) as resp:
        content_type = (resp.headers.get("content-type") or "").lower()
        encoding = resp.encoding if "charset=" in content_type else None
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            content=resp.content,
            encoding=encoding,
        )


def store_page(folder: Union[str, Path], filename: str, content: bytes) -> Path:
    """Write content verbatim to folder/filename, creating the folder if needed."""
    folder_path = Path(folder)
    folder_path.mkdir(parents=True, exist_ok=True)
    file_path = folder_path / filename
    file_path.write_bytes(content)
    return file_path


def print_fetch_line(url: str) -> None:
    sys.stderr.write(f"Fetching: {url}\n")
    sys.stderr.flush()


def print_saved_line(path: Path) -> None:
    sys.stderr.write(f"Saved: {path}\n")
    sys.stderr.flush()


def print_error_line(message: str) -> None:
    """Print a failure line to stderr, regardless of verbosity."""
    sys.stderr.write(f"  ✗ {message}\n")
    sys.stderr.flush()


class Crawler:
    """
    Recursive depth-bounded crawler.

    Each page is fetched, written to the storage folder and scanned for
    anchor links; up to ``max_links_per_page`` http(s) links are then
    crawled with one less level of depth. There is no visited set, so a
    page reachable through several paths is fetched once per path.

    Args:
        config: Crawl settings.
        session: HTTP session for the default fetcher. One is created (and
            owned) when omitted. Its headers are left untouched; the
            User-Agent is sent per request.
        fetch: Replacement fetch capability, ``fetch(url) -> FetchResult``.
            Must raise requests.RequestException on transport failures.
        store: Replacement storage capability,
            ``store(folder, filename, content) -> Path``.
    """

    def __init__(
        self,
        config: CrawlConfig,
        session: Optional[requests.Session] = None,
        fetch: Optional[Fetcher] = None,
        store: Optional[Storer] = None,
    ) -> None:
        self.config = config
        self._owns_session = session is None and fetch is None
        if self._owns_session:
            session = requests.Session()
        self.session = session
        self._fetch = fetch or self._fetch_with_session
        self._store = store or store_page

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session if this crawler created it."""
        if self._owns_session and self.session is not None:
            self.session.close()

    def _fetch_with_session(self, url: str) -> FetchResult:
        return fetch_page(self.session, url, self.config.timeout_s, self.config.user_agent)

    def crawl(self, url: str, remaining_depth: int) -> None:
        """
        Fetch url, store it, and recurse into its links.

        Raises:
            ConfigurationError: if no storage folder is configured or url is
                empty. Checked before any network activity.
        """
        if not self.config.storage_folder:
            raise ConfigurationError("A storage folder must be configured before crawling.")
        if not url:
            raise ConfigurationError("URL must not be empty.")

        if remaining_depth <= 0:
            return

        if self.config.verbose:
            print_fetch_line(url)

        try:
            result = self._fetch(url)
        except requests.RequestException as e:
            print_error_line(f"Request exception for {url}: {e}")
            return

        if not result.ok:
            print_error_line(f"Failed to fetch {url}: {result.status_code}")
            return

        try:
            path = self._store(self.config.storage_folder, derive_filename(url), result.content)
        except (OSError, ValueError) as e:
            # ValueError: file names derived from malformed links (embedded NUL)
            print_error_line(f"Failed to save {url}: {e}")
            return

        if self.config.verbose:
            print_saved_line(path)

        candidates = (link for link in extract_links(result.text) if is_candidate(link))
        for link in islice(candidates, self.config.max_links_per_page):
            self.crawl(link, remaining_depth - 1)


def crawl(
    url: str,
    depth: int,
    config: CrawlConfig,
    session: Optional[requests.Session] = None,
) -> None:
    """
    Crawl from url down to the given depth.

    Args:
        url: The URL to start crawling from.
        depth: Number of levels to fetch; 0 fetches nothing.
        config: Crawl settings; storage_folder must be set.
        session: Optional HTTP session to reuse.
    """
    with Crawler(config, session=session) as crawler:
        crawler.crawl(url, depth)
