"""
Search service applying highlight settings to query documents and result excerpts.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Dict, List, Optional, Protocol

from ..config.settings import SearchlightSettings, build_settings_store
from ..exceptions import SearchBackendException
from ..highlighting.excerpt import ExcerptRewriter
from ..highlighting.hooks import DEFAULT_EXCERPT_LENGTH, HighlightHooks
from ..highlighting.resolver import HighlightFieldResolver
from ..highlighting.store import SettingsStore, load_highlight_config
from ..schema.highlighting import HighlightConfig, QueryContext
from ..schema.search import Highlight, SearchHit, SearchQuery, SearchResponse
from ..utils.logging import setup_logger
from .opensearch_client import OpenSearchClient

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = ["title", "content", "keywords"]
CONTENT_FIELD = "content"
SNIPPET_LENGTH = 300


class SearchBackend(Protocol):
    async def search_raw(self, search_body: Dict[str, Any]) -> Dict[str, Any]: ...


class SearchService:
    """
    Runs searches with the saved highlight configuration applied.
    """

    def __init__(
        self,
        backend: SearchBackend,
        store: SettingsStore,
        hooks: Optional[HighlightHooks] = None,
        search_fields: Optional[List[str]] = None,
        is_admin_context: bool = False,
    ):
        self.backend = backend
        self.store = store
        self.hooks = hooks or HighlightHooks()
        self.search_fields = list(search_fields or DEFAULT_SEARCH_FIELDS)
        self.is_admin_context = is_admin_context

        self.resolver = HighlightFieldResolver(self.hooks)
        self.rewriter = ExcerptRewriter(self.hooks)

    @classmethod
    def from_settings(cls, settings: SearchlightSettings, hooks: Optional[HighlightHooks] = None) -> "SearchService":
        """Create a service with an OpenSearch backend and the configured settings store."""
        if not settings.opensearch_endpoint:
            raise ValueError("opensearch_endpoint is required to create the search service")

        setup_logger("searchlight", level=settings.log_level, json_logs=settings.json_logs)

        client = OpenSearchClient(
            endpoint=settings.opensearch_endpoint,
            index_name=settings.opensearch_index,
            username=settings.opensearch_username,
            password=settings.opensearch_password,
            timeout=settings.opensearch_timeout,
        )

        hooks = hooks or HighlightHooks()
        if hooks.excerpt_length is None and settings.default_excerpt_length != DEFAULT_EXCERPT_LENGTH:
            excerpt_length = settings.default_excerpt_length
            hooks = dataclasses.replace(hooks, excerpt_length=lambda _default: excerpt_length)

        return cls(client, build_settings_store(settings), hooks=hooks)

    def build_query(self, query: SearchQuery, config: Optional[HighlightConfig] = None) -> Dict[str, Any]:
        """
        Build the query document for a search, highlight clause included.

        Args:
            query: Search request
            config: Highlight configuration (loaded from the store if None)

        Returns:
            Query document ready for the backend
        """
        if config is None:
            config = load_highlight_config(self.store)

        from_ = (query.page - 1) * query.size
        search_body: Dict[str, Any] = {
            "size": query.size,
            "from": from_,
            "query": {
                "bool": {
                    "should": [
                        # Exact phrase (highest boost)
                        {"multi_match": {"query": query.q, "type": "phrase", "fields": self.search_fields, "boost": 3}},
                        # Fuzzy per-field match
                        {"multi_match": {"query": query.q, "fields": self.search_fields, "boost": 2, "fuzziness": 1}},
                        # All terms across fields
                        {
                            "multi_match": {
                                "query": query.q,
                                "type": "cross_fields",
                                "fields": self.search_fields,
                                "boost": 1,
                                "operator": "and",
                            }
                        },
                    ],
                    "minimum_should_match": 1,
                }
            },
        }

        context = QueryContext.from_query_document(query.q, search_body, explicit_fields=query.fields)
        return self.resolver.apply(search_body, context, config, is_admin_context=self.is_admin_context)

    async def search(self, query: SearchQuery) -> SearchResponse:
        """
        Search and return hits with highlight snippets and rewritten excerpts.

        Backend failures are logged and produce an empty response.
        """
        config = load_highlight_config(self.store)
        search_body = self.build_query(query, config)

        try:
            response = await self.backend.search_raw(search_body)
        except (SearchBackendException, asyncio.TimeoutError) as e:
            logger.error(f"Search failed for query '{query.q}': {e}")
            return SearchResponse(total=0, hits=[], page=query.page, size=query.size)

        # Backend snippets carry the effective tag, which may come from the override hook
        excerpt_config = config.model_copy(update={"tag": self.resolver.resolve_tag(config)})

        hits: List[SearchHit] = []
        for hit in response.get("hits", {}).get("hits", []):
            hits.append(self._build_hit(hit, query, excerpt_config))

        total = response.get("hits", {}).get("total", {})
        total_hits = total.get("value", len(hits)) if isinstance(total, dict) else int(total or 0)

        return SearchResponse(total=total_hits, hits=hits, page=query.page, size=query.size)

    def _build_hit(self, hit: Dict[str, Any], query: SearchQuery, config: HighlightConfig) -> SearchHit:
        source = hit.get("_source", {})

        highlights_list: List[Highlight] = []
        for field, snippets in hit.get("highlight", {}).items():
            highlights_list.append(Highlight(field=field, snippets=snippets))

        # Highlighted content carries the tag that the excerpt should keep
        content_snippets = hit.get("highlight", {}).get(CONTENT_FIELD)
        content = source.get(CONTENT_FIELD)
        if not isinstance(content, str):
            content = ""
        raw_content = " ".join(content_snippets) if content_snippets else content

        excerpt = self.rewriter.rewrite(
            raw_content,
            config,
            request_has_search_term=bool(query.q),
            is_admin_context=self.is_admin_context,
            excerpt=source.get("excerpt") or "",
        )
        if not excerpt:
            excerpt = content
            if len(excerpt) > SNIPPET_LENGTH:
                excerpt = excerpt[:SNIPPET_LENGTH] + "..."

        return SearchHit(
            id=hit["_id"],
            title=source.get("title"),
            url=source.get("url"),
            score=hit.get("_score"),
            excerpt=excerpt,
            highlights=highlights_list,
        )
