"""
Per-region comparison outcomes.

ComparisonOutcome is a tagged union: edit-distance modes produce
EditOutcome, STR modes produce MotifOutcome. Consumers match on the
concrete type instead of casting.
"""

from dataclasses import dataclass
from typing import Union

from ..exceptions import ComparisonError


@dataclass(frozen=True)
class EditOutcome:
    """
    Differences found between two paired regions.

    Attributes:
        chromosome: Chromosome of the compared regions
        gene: Gene of the compared regions
        difference_count: Edit or Hamming distance
        compared_length: Number of positions the distance was measured over
    """
    chromosome: str
    gene: str
    difference_count: int
    compared_length: int

    def __post_init__(self):
        if self.difference_count < 0 or self.compared_length < 0:
            raise ComparisonError(
                f"Negative counts in outcome for {self.gene} on {self.chromosome}: "
                f"difference={self.difference_count}, length={self.compared_length}"
            )

    def __str__(self) -> str:
        return (
            f"Chromosome: {self.chromosome}, gene: {self.gene}, "
            f"differences: {self.difference_count}/{self.compared_length}"
        )


@dataclass(frozen=True)
class MotifOutcome:
    """Repeat-motif occurrence counts of one marker in both persons."""
    marker_name: str
    first_count: int
    second_count: int

    def __post_init__(self):
        if self.first_count < 0 or self.second_count < 0:
            raise ComparisonError(
                f"Negative motif counts for marker {self.marker_name}: "
                f"{self.first_count}, {self.second_count}"
            )

    def __str__(self) -> str:
        return (
            f"Marker: {self.marker_name}, occurrences: "
            f"{self.first_count} and {self.second_count}"
        )


ComparisonOutcome = Union[EditOutcome, MotifOutcome]
