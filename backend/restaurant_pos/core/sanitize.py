"""Text sanitization utilities to prevent XSS attacks."""

import html


def sanitize_text(value: str | None) -> str | None:
    """HTML-escape user-supplied text and trim surrounding whitespace.

    Bills are rendered as HTML email and PDF paragraphs (reportlab parses
    inline markup), so free text must not carry tags.
    """
    if value is None:
        return None
    return html.escape(value.strip(), quote=True)
