"""
Sequence and chromosome naming utilities.

Provides the base alphabet shared by the assembler and the distance
engine, base complements and helpers for the two chromosome naming
conventions found in BED and BAM files.
"""

import re
from typing import Optional

# Marker for a position no read covered
UNKNOWN_BASE = '*'

NUCLEOTIDES = 'ACGT'

_COMPLEMENT = {
    'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G',
    'a': 't', 't': 'a', 'g': 'c', 'c': 'g',
}

# Allowed characters for gene and marker labels
LABEL_PATTERN = re.compile(r'[A-Za-z0-9.\-_+]*')

MITOCHONDRIAL_NAMES = frozenset({'M', 'MT', 'chrM', 'chrMT'})
X_NAMES = frozenset({'X', 'chrX'})


def complement_base(base: str) -> Optional[str]:
    """Return the strand complement of a base, or None if it has none.

    The unknown base and any non-ACGT symbol have no complement.
    """
    return _COMPLEMENT.get(base)


def is_unknown(base: str) -> bool:
    """Check if a base was not called by the assembler."""
    return base == UNKNOWN_BASE


def is_valid_label(label: str) -> bool:
    """Check that a gene or marker label only uses allowed characters."""
    return LABEL_PATTERN.fullmatch(label) is not None


def alternate_chromosome_name(chromosome: str) -> str:
    """Switch a chromosome name between the bare and 'chr'-prefixed forms.

    Examples:
        >>> alternate_chromosome_name("1")
        'chr1'
        >>> alternate_chromosome_name("chrMT")
        'MT'

    Names that belong to neither convention are returned as is.
    """
    if chromosome.startswith('chr'):
        bare = chromosome[3:]
        if _is_known_bare_name(bare):
            return bare
        return chromosome
    if _is_known_bare_name(chromosome):
        return f"chr{chromosome}"
    return chromosome


def _is_known_bare_name(name: str) -> bool:
    if name in ('X', 'Y', 'M', 'MT'):
        return True
    return name.isdigit() and 0 < int(name) <= 22


def chromosome_class(chromosome: str) -> str:
    """Classify a chromosome as 'mitochondrial', 'x' or 'autosomal'.

    Y chromosomes are grouped with the autosomes.
    """
    if chromosome in MITOCHONDRIAL_NAMES:
        return 'mitochondrial'
    if chromosome in X_NAMES:
        return 'x'
    return 'autosomal'
