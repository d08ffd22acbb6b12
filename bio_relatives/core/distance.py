"""
Distance engine: pure functions comparing two assembled regions.

- Edit distance on sequences with unknown bases removed
- Hamming distance that accepts strand-complement matches
- STR repeat-motif counting
"""

from typing import Optional, Pattern, Tuple

from ..config import ComparatorType
from ..exceptions import ComparisonError, LengthMismatchError, RegionPairingError
from ..utils.sequence import complement_base, is_unknown
from .models import AssembledRegion, MarkerInterval
from .outcomes import ComparisonOutcome, EditOutcome, MotifOutcome


def normalize(first: str, second: str) -> Tuple[str, str]:
    """
    Remove unknown bases from a pair of sequences.

    Over the common prefix, a position is dropped from both sequences if
    either of them has an unknown base there. The tail of the longer
    sequence is appended to its own output without its unknown bases, so
    the two outputs can differ in length.

    Args:
        first: First base sequence
        second: Second base sequence

    Returns:
        Tuple of (filtered_first, filtered_second)

    Example:
        >>> normalize("AC*GT", "ACTG")
        ('ACGT', 'ACG')
        >>> normalize("AC", "AC*T")
        ('AC', 'ACT')
    """
    shared = min(len(first), len(second))
    kept = [
        (a, b) for a, b in zip(first[:shared], second[:shared])
        if not is_unknown(a) and not is_unknown(b)
    ]
    first_out = ''.join(a for a, _ in kept)
    second_out = ''.join(b for _, b in kept)

    if len(first) > shared:
        first_out += ''.join(base for base in first[shared:] if not is_unknown(base))
    elif len(second) > shared:
        second_out += ''.join(base for base in second[shared:] if not is_unknown(base))

    return first_out, second_out


def levenshtein(first: str, second: str) -> int:
    """
    Classic edit distance with unit costs, using two rolling rows.

    The rows are sized by the shorter sequence, so memory is
    O(min(len(first), len(second))).
    """
    if len(first) < len(second):
        first, second = second, first

    previous = list(range(len(second) + 1))
    for i, a in enumerate(first, 1):
        current = [i] + [0] * len(second)
        for j, b in enumerate(second, 1):
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (0 if a == b else 1),
            )
        previous = current

    return previous[len(second)]


def edit_distance(first: AssembledRegion, second: AssembledRegion) -> EditOutcome:
    """
    Compare two regions by edit distance, ignoring unknown bases.

    Args:
        first: Region of the first person
        second: Paired region of the second person

    Returns:
        EditOutcome where compared_length is the longer normalised length

    Raises:
        ComparisonError: If either sequence is empty after normalisation
    """
    f, s = normalize(first.sequence, second.sequence)
    if not f or not s:
        raise ComparisonError(
            f"No known bases left to compare in {first.gene} "
            f"{first.chromosome}:{first.start}"
        )

    return EditOutcome(
        chromosome=first.chromosome,
        gene=first.gene,
        difference_count=levenshtein(f, s),
        compared_length=max(len(f), len(s)),
    )


def hamming_distance(first: AssembledRegion, second: AssembledRegion) -> EditOutcome:
    """
    Count positions where the bases differ both directly and by complement.

    A position matches if the bases are equal or if the first base is
    the strand complement of the second (A-T, G-C). Unknown bases have no
    complement and only match another unknown base.

    Raises:
        LengthMismatchError: If the raw sequences have different lengths
    """
    if first.length != second.length:
        raise LengthMismatchError(first.length, second.length)

    differences = 0
    for a, b in zip(first.sequence.upper(), second.sequence.upper()):
        if a != b and a != complement_base(b):
            differences += 1

    return EditOutcome(
        chromosome=first.chromosome,
        gene=first.gene,
        difference_count=differences,
        compared_length=first.length,
    )


def count_motif(pattern: Pattern, sequence: str) -> int:
    """Count leftmost non-overlapping matches of a repeat motif."""
    return sum(1 for _ in pattern.finditer(sequence))


def count_motifs(
    marker: MarkerInterval,
    first: AssembledRegion,
    second: AssembledRegion,
) -> MotifOutcome:
    """Count a marker's repeat motif in both persons' regions."""
    return MotifOutcome(
        marker_name=marker.marker_name,
        first_count=count_motif(marker.repeat_motif, first.sequence),
        second_count=count_motif(marker.repeat_motif, second.sequence),
    )


def has_comparable_bases(first: AssembledRegion, second: AssembledRegion) -> bool:
    """Check that both regions keep at least one base after normalisation."""
    f, s = normalize(first.sequence, second.sequence)
    return bool(f) and bool(s)


def compare_regions(
    mode: ComparatorType,
    first: AssembledRegion,
    second: AssembledRegion,
    marker: Optional[MarkerInterval] = None,
) -> ComparisonOutcome:
    """
    Compare two paired regions with the algorithm selected by mode.

    Args:
        mode: Comparison algorithm
        first: Region of the first person
        second: Region of the second person
        marker: Marker interval, required for the STR modes

    Returns:
        EditOutcome for LEVENSHTEIN and HAMMING, MotifOutcome for STR modes

    Raises:
        RegionPairingError: If the regions are not from the same locus
    """
    if not first.is_paired_with(second):
        raise RegionPairingError(f"Regions are not paired: {first!r} and {second!r}")

    if mode is ComparatorType.LEVENSHTEIN:
        return edit_distance(first, second)
    if mode is ComparatorType.HAMMING:
        return hamming_distance(first, second)
    if mode.is_str:
        if not isinstance(marker, MarkerInterval):
            raise ComparisonError(f"Mode {mode.value} requires a marker interval")
        return count_motifs(marker, first, second)

    raise ComparisonError(f"Unsupported comparison mode: {mode}")
