"""HTML escaping for safely embedding wikitext-derived content."""

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


def escape_text(text: str) -> str:
    """Escape the five characters that have special meaning in HTML body text."""
    return text.translate(_ESCAPES)


def escape_attr(text: str) -> str:
    """Escape a value for a double-quoted, single-line HTML attribute."""
    return escape_text(text)