"""Models for the profile page fetch and extracted meta tags."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single profile page GET.

    A failed fetch is a value, not an exception: ``ok`` is False, ``status`` is 0
    and ``error`` describes what went wrong.
    """

    url: str
    ok: bool
    status: int = 0
    html: str = ""
    error: str | None = None

    @classmethod
    def failure(cls, url: str, error: str) -> "FetchResult":
        return cls(url=url, ok=False, status=0, html="", error=error)


class ExtractedMeta(BaseModel):
    """Meta tags scraped from a profile page.

    Every string field defaults to an empty string so consumers never branch
    on absence. Serialized with camelCase keys (``fetchSucceeded``, ``imageUrl``).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    title: str = ""
    description: str = ""
    image_url: str = ""
    canonical_url: str = ""
    site_name: str = ""
    content_type: str = ""
    fetch_succeeded: bool = False
    status: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls, status: int = 0) -> "ExtractedMeta":
        """All-empty record used when the fetch or parse failed."""
        return cls(fetch_succeeded=False, status=status)
