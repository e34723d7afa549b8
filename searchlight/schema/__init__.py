from .highlighting import HighlightConfig, HighlightField, HighlightSpec, MatchClause, QueryContext
from .search import Highlight, SearchHit, SearchQuery, SearchResponse

__all__ = [
    # highlighting
    "HighlightConfig",
    "HighlightField",
    "HighlightSpec",
    "MatchClause",
    "QueryContext",
    # search
    "Highlight",
    "SearchHit",
    "SearchQuery",
    "SearchResponse",
]
