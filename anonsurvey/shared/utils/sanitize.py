"""Text sanitization for participant answers.

Answers are stored and may later be shown to researchers in a browser,
so characters with meaning in HTML are escaped before anything is
persisted. The escape table matches the one browsers-facing form
validators conventionally use, including `/`, backslash and backtick.
"""
from typing import Dict

# Character -> HTML entity. `&` must be escaped, the rest are the markup
# delimiters plus the characters usable to break out of attribute values.
HTML_ESCAPE_MAP: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
}

_HTML_ESCAPE_TABLE = str.maketrans(HTML_ESCAPE_MAP)


def escape_html(text: str) -> str:
    """Escape HTML-sensitive characters in a single pass.

    Args:
        text: Raw text

    Returns:
        Text safe to embed in HTML element content or quoted attributes

    Example:
        >>> escape_html("<b>hi</b> & bye")
        '&lt;b&gt;hi&lt;&#x2F;b&gt; &amp; bye'
    """
    return text.translate(_HTML_ESCAPE_TABLE)


def sanitize_text(text: str) -> str:
    """Trim surrounding whitespace, then escape for HTML."""
    return escape_html(text.strip())
