"""
Search-term highlighting for full-text search results.

This package handles:
1. Choosing which indexed fields receive highlight markup
2. Building the highlight clause of a search query document
3. Rewriting result excerpts so the configured highlight tag survives
"""
