"""Models for validated Instagram profile references."""

from dataclasses import dataclass
from typing import Literal

ProfileKind = Literal["profile", "reel", "post", "tv"]


@dataclass(frozen=True)
class ProfileReference:
    """A validated Instagram URL.

    Created per request by the URL validator and discarded after use.
    """

    url: str
    host: str
    path: str
    kind: ProfileKind
    handle: str | None = None
    shortcode: str | None = None


@dataclass(frozen=True)
class InvalidProfileUrl:
    """Rejected URL candidate.

    Attributes:
        reason: Machine-readable rejection code (e.g. "host_not_allowed").
        message: Human-readable explanation.
    """

    reason: str
    message: str
