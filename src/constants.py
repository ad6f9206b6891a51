"""Application-wide constants.

This module centralizes all magic numbers and configuration constants
to ensure a single source of truth and easier maintenance.
"""

# =============================================================================
# Profile URL Validation
# =============================================================================

# Registrable domain accepted for profile URLs (exact or any subdomain)
ALLOWED_PROFILE_DOMAINS = ("instagram.com",)

ALLOWED_URL_SCHEMES = ("http", "https")

DEFAULT_URL_SCHEME = "https"

# First path segments that look like handles but are Instagram app routes
RESERVED_PROFILE_SEGMENTS = frozenset(
    (
        "explore", "accounts", "direct", "stories", "about", "legal", "developer",
        "p", "reel", "reels", "tv",
    )
)

# Instagram usernames: letters, digits, periods and underscores, max 30 chars
MAX_HANDLE_LENGTH = 30

# =============================================================================
# Scraping Configuration
# =============================================================================

# Hard timeout for the single profile page fetch (seconds)
DEFAULT_HTTP_TIMEOUT_SECONDS = 12.0

DEFAULT_ACCEPT_LANGUAGE = "tr-TR,tr;q=0.9,en;q=0.8"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

# =============================================================================
# Meta Extraction Limits
# =============================================================================

# Meta tags live in <head>; bytes past this cap are dropped
MAX_PAGE_BYTES = 2 * 1024 * 1024

# Upstream HTML is untrusted; every extracted field is truncated
MAX_SHORT_FIELD_CHARS = 500
MAX_DESCRIPTION_CHARS = 1500

# =============================================================================
# Generation Configuration
# =============================================================================

DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"

DEFAULT_GENERATION_TEMPERATURE = 0.8

DEFAULT_RESPONSE_LANGUAGE = "Turkish"

# Placeholder rendered in the prompt for empty meta fields
UNKNOWN_FIELD_PLACEHOLDER = "(unknown)"

# OpenAI JSON mode; the model may only emit a single JSON object
JSON_OBJECT_RESPONSE_FORMAT = {"type": "json_object"}

INVALID_OUTPUT_REASON = "invalid structured output"

# =============================================================================
# Report Rendering
# =============================================================================

DEFAULT_REPORT_TITLE = "Shadow Operator Report"

EMPTY_REPORT_PLACEHOLDER = "No content provided."

# A4 in PDF points
REPORT_PAGE_WIDTH = 595
REPORT_PAGE_HEIGHT = 842
REPORT_MARGIN = 56

REPORT_TITLE_FONT_SIZE = 18
REPORT_BODY_FONT_SIZE = 11
REPORT_FOOTER_FONT_SIZE = 8
REPORT_LINE_SPACING = 1.45

# =============================================================================
# Server
# =============================================================================

DEFAULT_PORT = 8787

APP_VERSION = "0.3.0"
