"""Instagram profile URL validation.

Accepts a user-supplied URL candidate and either returns a normalized
ProfileReference or an InvalidProfileUrl describing why it was rejected.
Validation is pure and never raises.
"""

import re
from urllib.parse import urlsplit, urlunsplit

from src.constants import (
    ALLOWED_PROFILE_DOMAINS,
    ALLOWED_URL_SCHEMES,
    DEFAULT_URL_SCHEME,
    MAX_HANDLE_LENGTH,
    RESERVED_PROFILE_SEGMENTS,
)
from src.models.profile_models import InvalidProfileUrl, ProfileReference

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

_HANDLE_PATH_RE = re.compile(
    rf"^/(?P<handle>[A-Za-z0-9._]{{1,{MAX_HANDLE_LENGTH}}})/?$"
)

# Content paths: /reel/<id>, /reels/<id>, /p/<id>, /tv/<id>
_CONTENT_PATH_RE = re.compile(
    r"^/(?P<prefix>reels?|p|tv)/(?P<shortcode>[A-Za-z0-9_-]+)/?$"
)

_CONTENT_KINDS = {"reel": "reel", "reels": "reel", "p": "post", "tv": "tv"}


def normalize_candidate(candidate: str) -> str:
    """Strip whitespace and prefix ``https://`` when no scheme is present."""
    value = candidate.strip()
    if _SCHEME_RE.match(value):
        return value
    # Scheme-relative ("//host/path") input is judged by its host like any other
    return f"{DEFAULT_URL_SCHEME}://{value.lstrip('/')}"


def is_allowed_host(host: str) -> bool:
    """True for an allow-listed domain or any of its subdomains."""
    host = host.lower().rstrip(".")
    return any(
        host == domain or host.endswith(f".{domain}")
        for domain in ALLOWED_PROFILE_DOMAINS
    )


def _invalid(reason: str, message: str) -> InvalidProfileUrl:
    return InvalidProfileUrl(reason=reason, message=message)


def validate_profile_url(candidate: object) -> ProfileReference | InvalidProfileUrl:
    """Validate an Instagram profile, reel, post or IGTV URL.

    Args:
        candidate: Raw value supplied by the caller.

    Returns:
        ProfileReference when the URL is acceptable, InvalidProfileUrl otherwise.
    """
    if not isinstance(candidate, str) or not candidate.strip():
        return _invalid("missing_url", "A profile URL is required.")

    normalized = normalize_candidate(candidate)
    try:
        parts = urlsplit(normalized)
        host = parts.hostname or ""
        # Accessing .port raises ValueError for out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return _invalid("malformed_url", "The URL could not be parsed.")

    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return _invalid("scheme_not_allowed", "Only http and https URLs are accepted.")

    if parts.username is not None or parts.password is not None:
        return _invalid("credentials_in_url", "URLs with credentials are not accepted.")

    if not host or not is_allowed_host(host):
        return _invalid("host_not_allowed", "Only instagram.com URLs are accepted.")

    path = parts.path
    if len(path) <= 1:
        return _invalid("missing_path", "The URL must point to a profile or post.")

    host = host.rstrip(".")
    url = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))

    content_match = _CONTENT_PATH_RE.match(path)
    if content_match:
        return ProfileReference(
            url=url,
            host=host,
            path=path,
            kind=_CONTENT_KINDS[content_match.group("prefix")],
            shortcode=content_match.group("shortcode"),
        )

    handle_match = _HANDLE_PATH_RE.match(path)
    if handle_match:
        handle = handle_match.group("handle")
        if handle.lower() not in RESERVED_PROFILE_SEGMENTS:
            return ProfileReference(
                url=url, host=host, path=path, kind="profile", handle=handle
            )

    return _invalid(
        "unrecognized_path",
        "The URL must be a profile (/handle) or a /reel/, /p/ or /tv/ link.",
    )
