"""
Type definitions for bio-relatives analysis results.

These are the read-only products of an aggregator's analyze() call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd


def similarity_percentage(differences: int, length: int) -> float:
    """Percentage of identical positions; 0.0 when nothing was compared."""
    if length == 0:
        return 0.0
    return 100.0 - (differences / length) * 100.0


@dataclass
class GeneSimilarity:
    """Summed differences of one gene."""
    gene: str
    differences: int
    length: int

    @property
    def similarity(self) -> float:
        return similarity_percentage(self.differences, self.length)


@dataclass
class ChromosomeSimilarity:
    """
    Similarity of one chromosome and its classification.

    Attributes:
        chromosome: Chromosome name
        differences: Sum of differences over all genes
        length: Sum of compared lengths over all genes
        category: Threshold category ('all', 'mitochondrial', 'x', 'autosomal')
        threshold: Cutoff applied to this chromosome
        is_similar: True if similarity reached the cutoff
        genes: Per-gene breakdown, sorted by gene name
    """
    chromosome: str
    differences: int
    length: int
    category: str
    threshold: float
    is_similar: bool
    genes: List[GeneSimilarity] = field(default_factory=list)

    @property
    def similarity(self) -> float:
        return similarity_percentage(self.differences, self.length)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for DataFrame creation."""
        return {
            "chromosome": self.chromosome,
            "similarity": self.similarity,
            "differences": self.differences,
            "compared_length": self.length,
            "category": self.category,
            "threshold": self.threshold,
            "is_similar": self.is_similar,
            "genes": len(self.genes),
        }


@dataclass
class EditAnalysis:
    """
    Final result of an edit-distance comparison.

    Attributes:
        chromosomes: Chromosomes with a non-zero compared length
        policy_description: Human readable threshold policy
    """
    chromosomes: List[ChromosomeSimilarity]
    policy_description: str = ""

    @property
    def similar_count(self) -> int:
        return sum(1 for c in self.chromosomes if c.is_similar)

    @property
    def non_similar_count(self) -> int:
        return sum(1 for c in self.chromosomes if not c.is_similar)

    @property
    def counts_by_category(self) -> Dict[str, Tuple[int, int]]:
        """Map category to (similar, non-similar) chromosome counts."""
        counts: Dict[str, Tuple[int, int]] = {}
        for c in self.chromosomes:
            similar, non_similar = counts.get(c.category, (0, 0))
            if c.is_similar:
                similar += 1
            else:
                non_similar += 1
            counts[c.category] = (similar, non_similar)
        return counts

    @property
    def are_parent_and_child(self) -> bool:
        return self.similar_count > self.non_similar_count

    def similarity_by_chromosome(self) -> Dict[str, float]:
        return {c.chromosome: c.similarity for c in self.chromosomes}

    def get(self, chromosome: str) -> Optional[ChromosomeSimilarity]:
        for c in self.chromosomes:
            if c.chromosome == chromosome:
                return c
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """One row per chromosome."""
        return pd.DataFrame([c.to_dict() for c in self.chromosomes])


@dataclass
class MarkerSummary:
    """Summed repeat-motif counts of one STR marker."""
    marker_name: str
    first_count: int
    second_count: int

    @property
    def difference(self) -> int:
        return abs(self.first_count - self.second_count)

    @property
    def owner(self) -> str:
        """'first', 'second' or 'shared' depending on which count is larger."""
        if self.first_count > self.second_count:
            return "first"
        if self.second_count > self.first_count:
            return "second"
        return "shared"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marker": self.marker_name,
            "first_count": self.first_count,
            "second_count": self.second_count,
            "difference": self.difference,
            "owner": self.owner,
        }


@dataclass
class MotifAnalysis:
    """
    Final result of an STR comparison.

    Attributes:
        markers: Per-marker summaries, sorted by marker name
        eps: Largest count difference still treated as equal
    """
    markers: List[MarkerSummary]
    eps: int = 1

    @property
    def first_person_markers(self) -> List[MarkerSummary]:
        """Markers counted at least as often in the first person."""
        return [m for m in self.markers if m.owner in ("first", "shared")]

    @property
    def second_person_markers(self) -> List[MarkerSummary]:
        """Markers counted at least as often in the second person."""
        return [m for m in self.markers if m.owner in ("second", "shared")]

    @property
    def different_markers(self) -> List[MarkerSummary]:
        return [m for m in self.markers if m.difference > self.eps]

    @property
    def are_father_and_son(self) -> bool:
        return not self.different_markers

    def to_dataframe(self) -> pd.DataFrame:
        """One row per marker."""
        return pd.DataFrame([m.to_dict() for m in self.markers])


@dataclass
class TrioProvenance:
    """Which parent each chromosome of the child appears to come from."""
    from_father: List[str] = field(default_factory=list)
    from_mother: List[str] = field(default_factory=list)

    @property
    def father_count(self) -> int:
        return len(self.from_father)

    @property
    def mother_count(self) -> int:
        return len(self.from_mother)
