"""
Data models for genomic intervals and assembled regions.

Intervals are loaded once from the panel file and shared read-only
between worker threads; assembled regions are produced per person and
per interval and consumed by exactly one comparison.
"""

import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Pattern, Union

from ..exceptions import InvalidIntervalError, InvalidRegionError
from ..utils.sequence import (
    NUCLEOTIDES,
    UNKNOWN_BASE,
    alternate_chromosome_name,
    is_valid_label,
)

# Longest sub-interval requested from the assembler in one call
MAX_REGION_LENGTH = 20

X_STR = "X_STR"
Y_STR = "Y_STR"

_REGION_ALPHABET = frozenset(NUCLEOTIDES + UNKNOWN_BASE)


@dataclass(frozen=True)
class GenomicInterval:
    """
    A named half-open interval [start, end) on one chromosome.

    Attributes:
        chromosome: Chromosome name as written in the panel file
        start: 0-based start position
        end: End position (exclusive), strictly greater than start
        label: Gene name, or the STR group for marker intervals
    """
    chromosome: str
    start: int
    end: int
    label: str = ""

    def __post_init__(self):
        if self.start < 0 or self.end < 0 or self.start >= self.end:
            raise InvalidIntervalError(
                "Incorrect interval bounds",
                self.chromosome, self.start, self.end, self.label,
            )
        if not is_valid_label(self.label):
            raise InvalidIntervalError(
                "Incorrect characters in interval name",
                self.chromosome, self.start, self.end, self.label,
            )

    @property
    def length(self) -> int:
        return self.end - self.start

    def with_alternate_chromosome_name(self) -> 'GenomicInterval':
        """Return a copy named with the other chromosome convention (1 <-> chr1)."""
        return replace(self, chromosome=alternate_chromosome_name(self.chromosome))

    def __str__(self) -> str:
        return f"{self.label} {self.chromosome}:{self.start}-{self.end}"


@dataclass(frozen=True)
class MarkerInterval(GenomicInterval):
    """
    An STR marker region.

    The label is derived from the chromosome: Y_STR for Y chromosome
    markers, X_STR for everything else.
    """
    label: str = field(init=False, default="")
    marker_name: str = ""
    repeat_motif: Optional[Pattern] = None

    def __post_init__(self):
        object.__setattr__(self, 'label', Y_STR if 'Y' in self.chromosome else X_STR)

        if isinstance(self.repeat_motif, str):
            object.__setattr__(self, 'repeat_motif', re.compile(self.repeat_motif))
        if self.repeat_motif is None:
            raise InvalidIntervalError(
                "Marker interval without repeat motif",
                self.chromosome, self.start, self.end, self.marker_name,
            )
        if not self.marker_name or not is_valid_label(self.marker_name):
            raise InvalidIntervalError(
                "Incorrect marker name",
                self.chromosome, self.start, self.end, self.marker_name,
            )

        super().__post_init__()

    def __str__(self) -> str:
        return f"{self.marker_name} {self.chromosome}:{self.start}-{self.end}"


Interval = Union[GenomicInterval, MarkerInterval]


def split_interval(interval: Interval, max_length: int = MAX_REGION_LENGTH) -> List[Interval]:
    """
    Split an interval into consecutive sub-intervals of at most max_length.

    Intervals no longer than max_length are returned unchanged. Otherwise
    the interval is cut into pieces of exactly max_length and the
    remainder is kept only if it is longer than one base.

    Args:
        interval: Interval to split (marker intervals keep their motif)
        max_length: Maximum sub-interval length

    Returns:
        List of sub-intervals in genomic order

    Example:
        >>> parts = split_interval(GenomicInterval("1", 0, 45, "BRCA1"))
        >>> [p.length for p in parts]
        [20, 20, 5]
    """
    if max_length < 2:
        raise ValueError(f"max_length must be at least 2, got {max_length}")

    if interval.length <= max_length:
        return [interval]

    parts = []
    start = interval.start
    while interval.end - start >= max_length:
        parts.append(replace(interval, start=start, end=start + max_length))
        start += max_length

    if interval.end - start > 1:
        parts.append(replace(interval, start=start, end=interval.end))

    return parts


@dataclass(frozen=True)
class AssembledRegion:
    """
    Consensus sequence of one person over one interval.

    Attributes:
        chromosome: Chromosome name
        gene: Gene (or STR group) the region belongs to
        start: 0-based position of the first base
        sequence: Bases from {A, C, G, T, *}; '*' marks uncalled positions
        quality: Per-base quality, same length as sequence
    """
    chromosome: str
    gene: str
    start: int
    sequence: str
    quality: bytes = None

    def __post_init__(self):
        if self.start < 0:
            raise InvalidRegionError(f"Region start must be >= 0, got {self.start}")

        if not is_valid_label(self.gene):
            raise InvalidRegionError(f"Incorrect characters in gene name: {self.gene}")

        sequence = self.sequence.upper()
        invalid = set(sequence) - _REGION_ALPHABET
        if invalid:
            raise InvalidRegionError(
                f"Unexpected symbols {sorted(invalid)} in region {self.chromosome}:{self.start}"
            )
        object.__setattr__(self, 'sequence', sequence)

        quality = bytes(len(sequence)) if self.quality is None else bytes(self.quality)
        if len(quality) != len(sequence):
            raise InvalidRegionError(
                f"Quality length {len(quality)} does not match sequence length {len(sequence)}"
            )
        object.__setattr__(self, 'quality', quality)

    @property
    def length(self) -> int:
        return len(self.sequence)

    def is_paired_with(self, other: 'AssembledRegion') -> bool:
        """Check if both regions describe the same locus (chromosome, gene, start)."""
        return (
            self.chromosome == other.chromosome
            and self.gene == other.gene
            and self.start == other.start
        )

    def __repr__(self) -> str:
        return f"AssembledRegion({self.gene} {self.chromosome}:{self.start}, len={self.length})"
