"""Relationship analysis and category aggregation."""

from .relationships import RelationshipAnalysis, analyze_relationships, find_parent_match
from .aggregator import CategoryBucket, aggregate_categories, to_dataframe

__all__ = [
    'RelationshipAnalysis',
    'analyze_relationships',
    'find_parent_match',
    'CategoryBucket',
    'aggregate_categories',
    'to_dataframe',
]
