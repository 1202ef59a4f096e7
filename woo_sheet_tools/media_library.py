"""
WordPress media library lookup.

Fetches the whole media library once per run through the REST API
(/wp-json/wp/v2/media), page by page, and folds it into an in-memory index
from normalized filename keys to canonical source URLs. All filename lookups
afterwards are local.

Pagination is sequential and cannot be cancelled part-way other than by
interrupting the process. Nothing is cached between runs.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Union

import requests
from bs4 import BeautifulSoup

from .config import WordPressConfig
from .errors import MediaLibraryError

logger = logging.getLogger(__name__)

MEDIA_ENDPOINT = "/wp-json/wp/v2/media"
PER_PAGE = 100  # WP REST maximum
INVALID_PAGE_CODE = "rest_post_invalid_page_number"

_EXTENSION_RE = re.compile(r"\.[^/.]+\Z")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_filename(raw) -> str:
    """Reduce a filename, path or title to a lookup key.

    Keeps the last path segment, lowercases it, drops the extension and
    collapses everything outside [a-z0-9] into single hyphens.
    """
    if raw is None:
        return ""
    key = str(raw).split("/")[-1].split("\\")[-1].lower()
    key = _EXTENSION_RE.sub("", key)
    key = _NON_SLUG_RE.sub("-", key)
    return key.strip("-").strip()


def strip_extension(filename: str) -> str:
    return _EXTENSION_RE.sub("", filename)


class CollisionPolicy(Enum):
    LAST_WRITE_WINS = "last"
    FIRST_WRITE_WINS = "first"


@dataclass(frozen=True)
class EndOfData:
    """Returned by a page fetcher when the server answers with a non-200 status.

    ``exhausted`` is True when WordPress reports that the page number is past
    the end of the library, which is a normal end of pagination.
    """

    status_code: Optional[int] = None
    exhausted: bool = False


@dataclass(frozen=True)
class MediaRecord:
    source_url: str
    slug: str = ""
    title: str = ""

    @classmethod
    def from_api(cls, item) -> Optional["MediaRecord"]:
        """Build a record from one media item of the REST response; None if it has no source_url."""
        if not isinstance(item, dict):
            return None
        source_url = item.get("source_url") or ""
        if not isinstance(source_url, str) or not source_url:
            return None
        title = item.get("title") or {}
        rendered = title.get("rendered", "") if isinstance(title, dict) else ""
        return cls(
            source_url=source_url,
            slug=str(item.get("slug") or ""),
            title=str(rendered or ""),
        )

    @property
    def filename(self) -> str:
        return self.source_url.split("/")[-1]

    @property
    def basename(self) -> str:
        return strip_extension(self.filename)

    def aliases(self) -> List[str]:
        """Raw strings that should resolve to this record, in registration order."""
        names = [self.filename, self.basename]
        if self.slug:
            names.append(self.slug)
        if self.title:
            names.append(self.title)
            plain = plain_title(self.title)
            if plain and plain != self.title:
                names.append(plain)
        return names


def plain_title(rendered: str) -> str:
    """Strip entities and inline markup from a rendered WordPress title."""
    if "<" not in rendered and "&" not in rendered:
        return rendered
    return BeautifulSoup(rendered, "html.parser").get_text()


class MediaIndex(Mapping):
    """Read-only mapping of normalized key -> source URL for one run."""

    def __init__(
        self,
        urls=None,
        complete=True,
        failed_status=None,
        pages_fetched=0,
        records_seen=0,
    ):
        self._urls = MappingProxyType(dict(urls or {}))
        self.complete = complete
        self.failed_status = failed_status
        self.pages_fetched = pages_fetched
        self.records_seen = records_seen

    def __getitem__(self, key):
        return self._urls[key]

    def __iter__(self):
        return iter(self._urls)

    def __len__(self):
        return len(self._urls)

    def __repr__(self):
        return (
            f"MediaIndex(keys={len(self)}, records={self.records_seen}, "
            f"pages={self.pages_fetched}, complete={self.complete})"
        )

    def lookup(self, raw) -> Optional[str]:
        return self._urls.get(normalize_filename(raw))


PageResult = Union[List[dict], EndOfData]


def build_index(
    fetch_page: Callable[[int], PageResult],
    per_page: int = PER_PAGE,
    policy: CollisionPolicy = CollisionPolicy.LAST_WRITE_WINS,
) -> MediaIndex:
    """Page through the media library and index every record's aliases.

    Stops on a non-200 page, an empty page, or a page shorter than per_page.
    A failed page ends pagination without raising; the returned index then
    has ``complete`` set to False and holds whatever was read before it.
    """
    urls: Dict[str, str] = {}
    page = 1
    pages_fetched = 0
    records_seen = 0
    complete = True
    failed_status = None

    while True:
        logger.debug(f"Fetching media page {page}")
        items = fetch_page(page)
        pages_fetched += 1

        if isinstance(items, EndOfData):
            if not items.exhausted:
                complete = False
                failed_status = items.status_code
            break

        if not items:
            break

        for item in items:
            record = item if isinstance(item, MediaRecord) else MediaRecord.from_api(item)
            if record is None:
                continue
            records_seen += 1
            for alias in record.aliases():
                key = normalize_filename(alias)
                if policy is CollisionPolicy.FIRST_WRITE_WINS and key in urls:
                    continue
                urls[key] = record.source_url

        if len(items) < per_page:
            break
        page += 1

    if complete:
        logger.info(
            f"Indexed {len(urls)} lookup keys from {records_seen} media items ({pages_fetched} page(s))"
        )
    else:
        logger.warning(
            f"Media library incomplete: page {page} failed with HTTP {failed_status}; "
            f"using {records_seen} media items read before it"
        )

    return MediaIndex(
        urls,
        complete=complete,
        failed_status=failed_status,
        pages_fetched=pages_fetched,
        records_seen=records_seen,
    )


@dataclass
class ConnectionResult:
    ok: bool
    status_code: Optional[int] = None
    message: str = ""


@dataclass
class MediaLibrary:
    """Client for a site's media endpoint. Requests are plain GETs with no retries."""

    config: WordPressConfig
    session: requests.Session = field(default=None)
    per_page: int = PER_PAGE

    def __post_init__(self):
        if self.session is None:
            self.session = self._init_session()

    def _init_session(self):
        s = requests.Session()
        adapter = requests.adapters.HTTPAdapter(max_retries=0)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        s.headers.update({"User-Agent": "woo-sheet-tools/1.0"})
        return s

    @property
    def media_url(self) -> str:
        return f"{self.config.site_url}{MEDIA_ENDPOINT}"

    def _get(self, params):
        return self.session.get(
            self.media_url,
            params=params,
            headers={"Content-Type": "application/json"},
            auth=self.config.auth(),
            timeout=self.config.timeout,
        )

    def fetch_page(self, page: int) -> PageResult:
        """Fetch one page of media items, or EndOfData on a non-200 answer."""
        try:
            response = self._get({"per_page": self.per_page, "page": page})
        except requests.RequestException as e:
            raise MediaLibraryError(f"Request for media page {page} failed: {e}") from e

        if response.status_code != 200:
            exhausted = _error_code(response) == INVALID_PAGE_CODE
            if exhausted:
                logger.debug(f"Media page {page} is past the end of the library")
            else:
                logger.warning(
                    f"Media page {page} returned HTTP {response.status_code}; stopping pagination"
                )
            return EndOfData(status_code=response.status_code, exhausted=exhausted)

        try:
            items = response.json()
        except ValueError as e:
            raise MediaLibraryError(f"Media page {page} is not valid JSON: {e}") from e

        if not isinstance(items, list):
            logger.warning(f"Media page {page} did not return a list; stopping pagination")
            return EndOfData(status_code=response.status_code)

        logger.debug(f"Media page {page}: {len(items)} item(s)")
        return items

    def build_index(self, policy=CollisionPolicy.LAST_WRITE_WINS) -> MediaIndex:
        logger.info(f"Fetching media library from {self.media_url}")
        return build_index(self.fetch_page, per_page=self.per_page, policy=policy)

    def test_connection(self) -> ConnectionResult:
        """Request a single media item to check the URL and credentials."""
        try:
            response = self._get({"per_page": 1})
        except requests.RequestException as e:
            logger.error(f"Connection to {self.media_url} failed: {e}")
            return ConnectionResult(ok=False, message=str(e))

        if response.status_code == 200:
            return ConnectionResult(
                ok=True,
                status_code=200,
                message="Connected to WordPress successfully.",
            )
        return ConnectionResult(
            ok=False,
            status_code=response.status_code,
            message=f"HTTP {response.status_code}\n\n{response.text}",
        )


def _error_code(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("code") or "")
    return ""
