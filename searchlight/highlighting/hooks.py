"""
Overridable extension points for highlighting and excerpt trimming.

Callers inject plain callables instead of registering named filters. Every
accessor falls back to the default value when the hook is unset or fails.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from ..utils.logging import log_highlight_event

logger = structlog.get_logger(__name__)

DEFAULT_EXCERPT_LENGTH = 55


@dataclass
class HighlightHooks:
    """Callbacks that external code may supply to change highlighting defaults."""

    tag_override: Optional[Callable[[str], str]] = None
    excerpt_length: Optional[Callable[[int], int]] = None
    excerpt_more: Optional[Callable[[str], str]] = None
    render_content: Optional[Callable[[str], str]] = None
    prepare_excerpt: Optional[Callable[[], None]] = None

    def resolve_tag(self, default_tag: str) -> Any:
        return self._call("tag_override", self.tag_override, default_tag, default_tag)

    def resolve_excerpt_length(self, default_length: int = DEFAULT_EXCERPT_LENGTH) -> int:
        length = self._call("excerpt_length", self.excerpt_length, default_length, default_length)
        try:
            return int(length)
        except (TypeError, ValueError):
            log_highlight_event(logger, "hook_degraded", hook="excerpt_length", value=repr(length))
            return default_length

    def resolve_excerpt_more(self, candidate_text: str) -> Any:
        return self._call("excerpt_more", self.excerpt_more, candidate_text, candidate_text)

    def render(self, raw_content: Any) -> str:
        if not isinstance(raw_content, str):
            raw_content = ""
        rendered = self._call("render_content", self.render_content, raw_content, raw_content)
        return rendered if isinstance(rendered, str) else raw_content

    def notify_excerpt_preparation(self) -> None:
        if self.prepare_excerpt is None:
            return
        try:
            self.prepare_excerpt()
        except Exception as e:
            log_highlight_event(logger, "hook_degraded", hook="prepare_excerpt", error=str(e))

    def _call(self, name: str, hook: Optional[Callable[..., Any]], value: Any, default: Any) -> Any:
        if hook is None:
            return default
        try:
            return hook(value)
        except Exception as e:
            log_highlight_event(logger, "hook_degraded", hook=name, error=str(e))
            return default
