"""
Excerpt rewriting that keeps the configured highlight tag.

Result excerpts are normally built by stripping every tag from the content.
When excerpt highlighting is enabled, the excerpt is rebuilt here so the
highlight tag survives the strip.
"""

from typing import Any, Optional

import structlog
from bs4 import BeautifulSoup, Comment

from ..schema.highlighting import HighlightConfig
from ..utils.logging import log_highlight_event
from .hooks import DEFAULT_EXCERPT_LENGTH, HighlightHooks
from .tags import validate_tag

logger = structlog.get_logger(__name__)

DEFAULT_EXCERPT_MORE = "[…]"
ESCAPED_CDATA_CLOSE = "\\]\\]\\>"
CDATA_CLOSE_REPLACEMENT = "]]&gt;"


def strip_tags_except(html: str, allowed_tag: Any) -> str:
    """
    Remove every HTML tag except the allowed one, keeping all text.

    Args:
        html: Markup to strip
        allowed_tag: Tag to keep; validated against the allow-list first

    Returns:
        Text with only the allowed tag left in place
    """
    allowed = validate_tag(allowed_tag)
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for element in soup.find_all(True):
        if element.name != allowed:
            element.unwrap()

    return str(soup)


class ExcerptRewriter:
    """
    Builds trimmed excerpts for search results with the highlight tag preserved.
    """

    def __init__(self, hooks: Optional[HighlightHooks] = None):
        self.hooks = hooks or HighlightHooks()

    def is_active(self, config: HighlightConfig, request_has_search_term: bool, is_admin_context: bool) -> bool:
        """Whether the custom excerpt replaces the default one for this request."""
        if is_admin_context or not request_has_search_term:
            return False
        return config.excerpt_enabled

    def rewrite(
        self,
        raw_content: str,
        config: HighlightConfig,
        request_has_search_term: bool,
        is_admin_context: bool,
        excerpt: str = "",
    ) -> str:
        """
        Produce the excerpt shown for one result.

        Args:
            raw_content: Full content of the item before rendering
            config: Saved highlight configuration
            request_has_search_term: Whether the request carries a search term
            is_admin_context: Whether the request comes from the admin side
            excerpt: Excerpt the platform already has for the item

        Returns:
            The rebuilt excerpt, or the given excerpt when rewriting does not apply
        """
        if not self.is_active(config, request_has_search_term, is_admin_context):
            return excerpt

        if excerpt != "":
            return excerpt

        return self.trim(raw_content, config)

    def trim(self, raw_content: Any, config: HighlightConfig) -> str:
        text = self.hooks.render(raw_content if isinstance(raw_content, str) else "")
        text = text.replace(ESCAPED_CDATA_CLOSE, CDATA_CLOSE_REPLACEMENT)
        text = strip_tags_except(text, config.tag)

        excerpt_length = max(self.hooks.resolve_excerpt_length(DEFAULT_EXCERPT_LENGTH), 0)

        excerpt_more = self.hooks.resolve_excerpt_more(text)
        if excerpt_more == text or not isinstance(excerpt_more, str):
            excerpt_more = DEFAULT_EXCERPT_MORE

        # Split on the literal space only; tabs and runs of spaces are left as-is
        words = text.split(" ", excerpt_length)
        if len(words) > excerpt_length:
            words.pop()
            words.append(excerpt_more)
            log_highlight_event(logger, "excerpt_trimmed", length=excerpt_length)

        return " ".join(words)
