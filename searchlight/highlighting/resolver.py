"""
Highlight field resolution for search query documents.
"""

import copy
from typing import Any, Dict, List, Optional

import structlog

from ..schema.highlighting import HighlightConfig, HighlightField, HighlightSpec, QueryContext
from ..utils.logging import log_highlight_event
from .hooks import HighlightHooks
from .tags import closing_tag, opening_tag, validate_tag

logger = structlog.get_logger(__name__)


class HighlightFieldResolver:
    """
    Decides which fields get highlighted and with which tag.
    """

    def __init__(self, hooks: Optional[HighlightHooks] = None):
        self.hooks = hooks or HighlightHooks()

    def resolve(
        self, context: QueryContext, config: HighlightConfig, is_admin_context: bool = False
    ) -> HighlightSpec:
        """
        Build the highlight spec for a single search request.

        Args:
            context: Search term and candidate fields for this request
            config: Saved highlight configuration
            is_admin_context: Whether the request comes from the admin side

        Returns:
            HighlightSpec, empty when there is nothing to highlight
        """
        # Lets the excerpt rewrite know a search is being prepared
        self.hooks.notify_excerpt_preparation()

        if not context.search_term:
            return HighlightSpec()

        fields = self.select_fields(context)
        tag = self.resolve_tag(config)

        if is_admin_context:
            return HighlightSpec()

        pre_tag = opening_tag(tag)
        post_tag = closing_tag(tag)
        spec = HighlightSpec(
            fields={field: HighlightField(pre_tag=pre_tag, post_tag=post_tag, type="plain") for field in fields}
        )

        log_highlight_event(logger, "highlight_resolved", tag=tag, fields=spec.field_names)
        return spec

    def apply(
        self,
        query_document: Dict[str, Any],
        context: QueryContext,
        config: HighlightConfig,
        is_admin_context: bool = False,
    ) -> Dict[str, Any]:
        """
        Return a copy of the query document with highlight.fields filled in.

        Only entries under highlight.fields are added; the rest of the
        document is left as it was.
        """
        spec = self.resolve(context, config, is_admin_context=is_admin_context)
        document = copy.deepcopy(query_document)
        if spec.is_empty:
            return document

        highlight = document.get("highlight")
        if not isinstance(highlight, dict):
            highlight = document["highlight"] = {}
        fields = highlight.get("fields")
        if not isinstance(fields, dict):
            fields = highlight["fields"] = {}

        fields.update(spec.to_query()["fields"])
        return document

    def resolve_tag(self, config: HighlightConfig) -> str:
        return validate_tag(self.hooks.resolve_tag(config.tag))

    @staticmethod
    def select_fields(context: QueryContext) -> List[str]:
        """Explicit fields win; otherwise collect fallback clause fields, first-seen order."""
        if context.explicit_fields:
            return list(context.explicit_fields)

        fields: Dict[str, None] = {}
        for clause in context.fallback_clauses:
            for field in clause.fields:
                fields.setdefault(field, None)
        return list(fields)
