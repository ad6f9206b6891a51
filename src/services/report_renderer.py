"""PDF rendering for analysis reports.

Title and content are opaque text. Content is laid out with a PyMuPDF Story
so long text flows across as many A4 pages as needed; a page-number footer
is stamped afterwards. Creation and modification dates are left empty.
"""

import html
import io

import fitz  # PyMuPDF
import logfire

from src.constants import (
    DEFAULT_REPORT_TITLE,
    EMPTY_REPORT_PLACEHOLDER,
    REPORT_BODY_FONT_SIZE,
    REPORT_FOOTER_FONT_SIZE,
    REPORT_LINE_SPACING,
    REPORT_MARGIN,
    REPORT_PAGE_HEIGHT,
    REPORT_PAGE_WIDTH,
    REPORT_TITLE_FONT_SIZE,
)

_REPORT_CSS = f"""
body {{ font-family: sans-serif; font-size: {REPORT_BODY_FONT_SIZE}pt; }}
h1 {{ font-size: {REPORT_TITLE_FONT_SIZE}pt; font-weight: bold; margin-bottom: 12pt; }}
p {{ margin: 0; line-height: {REPORT_LINE_SPACING}; }}
p.blank {{ height: {REPORT_BODY_FONT_SIZE}pt; }}
"""


class RenderError(Exception):
    """Raised when a report cannot be rendered."""

    pass


def _coerce(value: object, default: str) -> str:
    if value is None:
        return default
    text = str(value)
    return text if text.strip() else default


def build_report_html(title: str, content: str) -> str:
    """Escape title and content into the HTML the Story lays out."""
    paragraphs = []
    for line in content.splitlines() or [content]:
        if line.strip():
            paragraphs.append(f"<p>{html.escape(line)}</p>")
        else:
            paragraphs.append('<p class="blank"></p>')
    return f"<h1>{html.escape(title)}</h1>\n" + "\n".join(paragraphs)


def _layout_pages(report_html: str) -> bytes:
    page_rect = fitz.Rect(0, 0, REPORT_PAGE_WIDTH, REPORT_PAGE_HEIGHT)
    content_rect = page_rect + (REPORT_MARGIN, REPORT_MARGIN, -REPORT_MARGIN, -REPORT_MARGIN)

    story = fitz.Story(html=report_html, user_css=_REPORT_CSS)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)
    more = 1
    while more:
        device = writer.begin_page(page_rect)
        more, _ = story.place(content_rect)
        story.draw(device)
        writer.end_page()
    writer.close()
    return buffer.getvalue()


def _stamp_footer(doc: fitz.Document) -> None:
    total = doc.page_count
    for index, page in enumerate(doc, start=1):
        label = f"{index} / {total}"
        width = fitz.get_text_length(label, fontname="helv", fontsize=REPORT_FOOTER_FONT_SIZE)
        page.insert_text(
            ((REPORT_PAGE_WIDTH - width) / 2, REPORT_PAGE_HEIGHT - REPORT_MARGIN / 2),
            label,
            fontname="helv",
            fontsize=REPORT_FOOTER_FONT_SIZE,
            color=(0.4, 0.4, 0.4),
        )


def render_report(title: object = None, content: object = None) -> bytes:
    """Render a title and free-text body into a paginated PDF.

    Args:
        title: Report title; defaults when missing or blank
        content: Report body; a fixed placeholder replaces empty content

    Returns:
        PDF bytes

    Raises:
        RenderError: If PyMuPDF fails to lay out or serialize the document
    """
    title_text = _coerce(title, DEFAULT_REPORT_TITLE)
    content_text = _coerce(content, EMPTY_REPORT_PLACEHOLDER)

    try:
        laid_out = _layout_pages(build_report_html(title_text, content_text))
        with fitz.open(stream=laid_out, filetype="pdf") as doc:
            _stamp_footer(doc)
            doc.set_metadata(
                {
                    "title": title_text[:200],
                    "creator": "profile-analyzer",
                    "producer": "PyMuPDF",
                    "creationDate": "",
                    "modDate": "",
                }
            )
            pdf_bytes = doc.tobytes(garbage=3, deflate=True, no_new_id=True)
            page_count = doc.page_count
    except Exception as e:
        logfire.error(
            "Report rendering failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise RenderError(f"Report rendering failed: {e}") from e

    logfire.info(
        "Report rendered",
        page_count=page_count,
        content_length=len(content_text),
        pdf_bytes=len(pdf_bytes),
    )
    return pdf_bytes


def report_filename(title: object = None) -> str:
    """Attachment filename derived from the title (ASCII-only slug)."""
    text = _coerce(title, DEFAULT_REPORT_TITLE).lower()
    slug = "".join(ch if ch.isascii() and ch.isalnum() else "-" for ch in text)
    slug = "-".join(part for part in slug.split("-") if part)[:60]
    return f"{slug or 'report'}.pdf"
