"""
Aggregation and classification of comparison outcomes.

Example usage:

    from bio_relatives.analysis import create_aggregator

    aggregator = create_aggregator(config.mode, config.threshold_policy)
    aggregator.add_all(outcomes)
    analysis = aggregator.analyze()
    print(analysis.are_parent_and_child)
"""

from .aggregation import (
    EPS,
    EditDistanceAggregator,
    MotifAggregator,
    ResultAggregator,
    chromosome_sort_key,
    create_aggregator,
)
from .trio import classify_provenance
from .types import (
    ChromosomeSimilarity,
    EditAnalysis,
    GeneSimilarity,
    MarkerSummary,
    MotifAnalysis,
    TrioProvenance,
    similarity_percentage,
)

__all__ = [
    # Aggregation
    'ResultAggregator',
    'EditDistanceAggregator',
    'MotifAggregator',
    'create_aggregator',
    'chromosome_sort_key',
    'EPS',
    # Trio
    'classify_provenance',
    # Types
    'GeneSimilarity',
    'ChromosomeSimilarity',
    'EditAnalysis',
    'MarkerSummary',
    'MotifAnalysis',
    'TrioProvenance',
    'similarity_percentage',
]
