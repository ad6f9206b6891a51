"""Meta tag extraction from profile page HTML.

Each logical field has an ordered list of candidate sources; the first
non-empty value wins. The extractor is total: fetch failures and parser
errors both produce an all-empty ExtractedMeta instead of an exception.
"""

import re
from typing import Callable

import logfire
from bs4 import BeautifulSoup

from src.constants import MAX_DESCRIPTION_CHARS, MAX_SHORT_FIELD_CHARS
from src.models.meta_models import ExtractedMeta, FetchResult

Candidate = Callable[[BeautifulSoup], str | None]


def _meta_property(name: str) -> Candidate:
    def read(soup: BeautifulSoup) -> str | None:
        tag = soup.find("meta", attrs={"property": name})
        return tag.get("content") if tag else None

    return read


def _meta_name(name: str) -> Candidate:
    def read(soup: BeautifulSoup) -> str | None:
        tag = soup.find("meta", attrs={"name": name})
        return tag.get("content") if tag else None

    return read


def _link_rel(rel: str) -> Candidate:
    def read(soup: BeautifulSoup) -> str | None:
        # html.parser splits rel into a list of tokens
        tag = soup.find("link", rel=rel)
        return tag.get("href") if tag else None

    return read


def _document_title(soup: BeautifulSoup) -> str | None:
    if soup.title and soup.title.string:
        return soup.title.string
    return None


# Field name -> (candidates in priority order, max length)
FIELD_CANDIDATES: dict[str, tuple[tuple[Candidate, ...], int]] = {
    "title": (
        (
            _meta_property("og:title"),
            _meta_name("twitter:title"),
            _document_title,
            _meta_name("title"),
        ),
        MAX_SHORT_FIELD_CHARS,
    ),
    "description": (
        (
            _meta_property("og:description"),
            _meta_name("twitter:description"),
            _meta_name("description"),
        ),
        MAX_DESCRIPTION_CHARS,
    ),
    "image_url": (
        (
            _meta_property("og:image"),
            _meta_property("og:image:secure_url"),
            _meta_name("twitter:image"),
        ),
        MAX_SHORT_FIELD_CHARS,
    ),
    "canonical_url": (
        (_link_rel("canonical"), _meta_property("og:url")),
        MAX_SHORT_FIELD_CHARS,
    ),
    "site_name": (
        (_meta_property("og:site_name"), _meta_name("application-name")),
        MAX_SHORT_FIELD_CHARS,
    ),
    "content_type": ((_meta_property("og:type"),), MAX_SHORT_FIELD_CHARS),
}


def clean_text(value: object, max_chars: int) -> str:
    """Collapse whitespace and truncate to ``max_chars``."""
    if not isinstance(value, str):
        # multi-valued attributes come back as lists
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        else:
            return ""
    return re.sub(r"\s+", " ", value).strip()[:max_chars]


def first_non_empty(soup: BeautifulSoup, candidates: tuple[Candidate, ...], max_chars: int) -> str:
    """Return the first candidate value that is non-empty after cleaning."""
    for candidate in candidates:
        value = clean_text(candidate(soup), max_chars)
        if value:
            return value
    return ""


def parse_meta_html(html: str, status: int = 200, source_url: str = "") -> ExtractedMeta:
    """Parse HTML and extract the meta fields.

    Args:
        html: Raw page HTML (untrusted, possibly empty)
        status: HTTP status of the response that produced ``html``
        source_url: Requested URL, used when the page has no canonical link

    Returns:
        Fully populated ExtractedMeta (empty on parse failure)
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        fields = {
            name: first_non_empty(soup, candidates, max_chars)
            for name, (candidates, max_chars) in FIELD_CANDIDATES.items()
        }
    except Exception as e:
        logfire.warn(
            "Meta extraction failed, using empty meta",
            url=source_url,
            error=str(e),
            error_type=type(e).__name__,
        )
        return ExtractedMeta.empty(status=status)

    if not fields["canonical_url"] and source_url:
        fields["canonical_url"] = source_url[:MAX_SHORT_FIELD_CHARS]

    meta = ExtractedMeta(
        **fields,
        fetch_succeeded=bool(fields["title"] or fields["description"]),
        status=status,
    )
    logfire.info(
        "Profile meta extracted",
        url=source_url,
        status_code=status,
        fetch_succeeded=meta.fetch_succeeded,
        fields_found=[name for name, value in fields.items() if value],
    )
    return meta


def extract_meta(fetch_result: FetchResult) -> ExtractedMeta:
    """Build ExtractedMeta from a fetch outcome. Never raises."""
    if not fetch_result.ok:
        logfire.info(
            "Profile page unavailable, using empty meta",
            url=fetch_result.url,
            error=fetch_result.error,
        )
        return ExtractedMeta.empty()
    return parse_meta_html(
        fetch_result.html, status=fetch_result.status, source_url=fetch_result.url
    )
