"""
Allowed highlight tags and the markup built from them.
"""

from typing import Any, Tuple

ALLOWED_TAGS: Tuple[str, ...] = ("mark", "span", "strong", "em", "i")
DEFAULT_TAG = "mark"
HIGHLIGHT_CLASS = "ep-highlight"


def validate_tag(tag: Any) -> str:
    """Return the tag if it is in the allow-list, otherwise the default tag."""
    if isinstance(tag, str) and tag in ALLOWED_TAGS:
        return tag
    return DEFAULT_TAG


def opening_tag(tag: Any) -> str:
    return f'<{validate_tag(tag)} class="{HIGHLIGHT_CLASS}">'


def closing_tag(tag: Any) -> str:
    return f"</{validate_tag(tag)}>"
