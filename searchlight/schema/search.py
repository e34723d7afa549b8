from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SearchQuery(BaseModel):
    q: str = ""
    page: int = Field(1, ge=1)
    size: int = Field(10, ge=1, le=100)
    fields: List[str] = Field(default_factory=list)


class Highlight(BaseModel):
    field: str
    snippets: List[str] = Field(default_factory=list)


class SearchHit(BaseModel):
    id: str
    title: Optional[str] = None
    url: Optional[str] = None
    score: Optional[float] = None
    excerpt: str = ""
    highlights: List[Highlight] = Field(default_factory=list)


class SearchResponse(BaseModel):
    total: int
    hits: List[SearchHit]
    page: int
    size: int
