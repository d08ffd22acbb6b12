"""
bio-relatives - kinship analysis of aligned genomes.

Compares two or three persons' reads over a panel of genomic intervals
and decides whether they are parent and child (edit-distance modes) or
father and son (STR modes).
"""

__version__ = "0.1.0"

from .config import (
    ComparatorType,
    ComparisonConfig,
    SingleThreshold,
    TieredByChromosomeClass,
)
from .core.models import AssembledRegion, GenomicInterval, MarkerInterval
from .exceptions import GenomeError

__all__ = [
    "ComparatorType",
    "ComparisonConfig",
    "SingleThreshold",
    "TieredByChromosomeClass",
    "GenomicInterval",
    "MarkerInterval",
    "AssembledRegion",
    "GenomeError",
    "__version__",
]
