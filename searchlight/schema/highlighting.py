from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..highlighting.tags import DEFAULT_TAG, validate_tag

EXCERPT_ON = "on"
EXCERPT_OFF = "off"


class HighlightConfig(BaseModel):
    """Saved highlight settings, read once per request."""

    model_config = ConfigDict(frozen=True)

    tag: str = DEFAULT_TAG
    color: str = ""
    excerpt_enabled: bool = False

    @field_validator("tag", mode="before")
    @classmethod
    def validate_highlight_tag(cls, v: Any) -> str:
        return validate_tag(v)

    @field_validator("color", mode="before")
    @classmethod
    def validate_color(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("excerpt_enabled", mode="before")
    @classmethod
    def validate_excerpt_enabled(cls, v: Any) -> bool:
        # Only the literal "on" (or an in-process True) enables excerpt rewriting
        return v is True or v == EXCERPT_ON

    @classmethod
    def from_option(cls, raw: Optional[Mapping[str, Any]]) -> "HighlightConfig":
        """Build a config from the persisted option shape, falling back to defaults."""
        if not isinstance(raw, Mapping):
            raw = {}
        return cls(
            tag=raw.get("highlight_tag"),
            color=raw.get("highlight_color"),
            excerpt_enabled=raw.get("highlight_excerpt") == EXCERPT_ON,
        )

    def to_option(self) -> Dict[str, str]:
        return {
            "highlight_tag": self.tag,
            "highlight_color": self.color,
            "highlight_excerpt": EXCERPT_ON if self.excerpt_enabled else EXCERPT_OFF,
        }


class MatchClause(BaseModel):
    fields: List[str] = Field(default_factory=list)

    @classmethod
    def from_query_clause(cls, clause: Any) -> "MatchClause":
        """Read the multi_match fields out of a backend should clause."""
        if not isinstance(clause, Mapping):
            return cls()
        multi_match = clause.get("multi_match")
        if not isinstance(multi_match, Mapping):
            return cls()
        fields = multi_match.get("fields")
        if not isinstance(fields, list):
            return cls()
        return cls(fields=[field for field in fields if isinstance(field, str)])


class QueryContext(BaseModel):
    search_term: str = ""
    explicit_fields: List[str] = Field(default_factory=list)
    fallback_clauses: List[MatchClause] = Field(default_factory=list)

    @classmethod
    def from_query_document(
        cls,
        search_term: Optional[str],
        query_document: Mapping[str, Any],
        explicit_fields: Optional[List[str]] = None,
    ) -> "QueryContext":
        """
        Build a context from an externally built query document.

        Fallback clauses are read from query.bool.should; anything missing or
        of the wrong shape yields no clauses.
        """
        should: Any = []
        query = query_document.get("query") if isinstance(query_document, Mapping) else None
        if isinstance(query, Mapping) and isinstance(query.get("bool"), Mapping):
            should = query["bool"].get("should") or []
        if not isinstance(should, list):
            should = []

        return cls(
            search_term=search_term or "",
            explicit_fields=list(explicit_fields or []),
            fallback_clauses=[MatchClause.from_query_clause(clause) for clause in should],
        )


class HighlightField(BaseModel):
    pre_tag: str
    post_tag: str
    type: str = "plain"

    def to_query(self) -> Dict[str, Any]:
        return {"pre_tags": [self.pre_tag], "post_tags": [self.post_tag], "type": self.type}


class HighlightSpec(BaseModel):
    """Per-request mapping of field name to highlight markup. Never cached."""

    fields: Dict[str, HighlightField] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def field_names(self) -> List[str]:
        return list(self.fields)

    def to_query(self) -> Dict[str, Any]:
        return {"fields": {name: field.to_query() for name, field in self.fields.items()}}
