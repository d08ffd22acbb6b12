"""
Core comparison modules for bio-relatives.
"""

from .distance import (
    compare_regions,
    count_motif,
    count_motifs,
    edit_distance,
    hamming_distance,
    has_comparable_bases,
    levenshtein,
    normalize,
)
from .models import (
    MAX_REGION_LENGTH,
    AssembledRegion,
    GenomicInterval,
    MarkerInterval,
    split_interval,
)
from .outcomes import (
    ComparisonOutcome,
    EditOutcome,
    MotifOutcome,
)

__all__ = [
    # Models
    'GenomicInterval',
    'MarkerInterval',
    'AssembledRegion',
    'MAX_REGION_LENGTH',
    'split_interval',
    # Outcomes
    'EditOutcome',
    'MotifOutcome',
    'ComparisonOutcome',
    # Distance engine
    'normalize',
    'levenshtein',
    'edit_distance',
    'hamming_distance',
    'count_motif',
    'count_motifs',
    'has_comparable_bases',
    'compare_regions',
]
