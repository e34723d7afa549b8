"""
Search service that applies the highlight configuration to queries and results.
"""
