"""
Highlight clause construction and excerpt rewriting.

This module provides:
1. Tag allow-list validation
2. Field selection for the query document's highlight clause
3. Excerpt trimming that keeps the configured highlight tag
4. Settings persistence for the highlight configuration
"""
