"""
Utility modules for bio-relatives.
"""

from .sequence import (
    NUCLEOTIDES,
    UNKNOWN_BASE,
    alternate_chromosome_name,
    chromosome_class,
    complement_base,
    is_unknown,
    is_valid_label,
)

__all__ = [
    'UNKNOWN_BASE',
    'NUCLEOTIDES',
    'complement_base',
    'is_unknown',
    'is_valid_label',
    'alternate_chromosome_name',
    'chromosome_class',
]
