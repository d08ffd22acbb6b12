"""
Thread-safe aggregation of per-region comparison outcomes.

Comparison tasks add outcomes concurrently and in any order; the sums
are associative and commutative, so the final analysis does not depend
on completion order. analyze() must only be called after every writer
has finished.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import ComparatorType, SingleThreshold, ThresholdPolicy
from ..core.outcomes import ComparisonOutcome, EditOutcome, MotifOutcome
from ..exceptions import EmptyResultError, OutcomeTypeError
from .types import (
    ChromosomeSimilarity,
    EditAnalysis,
    GeneSimilarity,
    MarkerSummary,
    MotifAnalysis,
)

logger = logging.getLogger(__name__)

# Largest repeat-count difference still treated as the same marker
EPS = 1

_CHROMOSOME_ORDER = {'X': 23, 'Y': 24, 'M': 25, 'MT': 25}


def chromosome_sort_key(chromosome: str) -> Tuple[int, str]:
    """Order chromosomes 1..22, X, Y, MT, then anything else by name."""
    bare = chromosome[3:] if chromosome.startswith('chr') else chromosome
    if bare.isdigit():
        return int(bare), chromosome
    return _CHROMOSOME_ORDER.get(bare, 100), chromosome


class ResultAggregator:
    """
    Base class holding one lock per aggregation key.

    The registry lock is only taken the first time a key is seen; updates
    to an existing key take that key's lock alone, so outcomes for
    different chromosomes or markers never contend.
    """

    outcome_type = None

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        # key -> outcomes added, updated under the key's lock
        self._added: Dict[str, int] = {}

    def _lock_for(self, key: str, create) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is not None:
            return lock
        with self._registry_lock:
            if key not in self._locks:
                create()
                self._added[key] = 0
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _check_type(self, outcome: ComparisonOutcome):
        if not isinstance(outcome, self.outcome_type):
            raise OutcomeTypeError(
                f"{type(self).__name__} cannot aggregate {type(outcome).__name__}"
            )

    def add(self, outcome: ComparisonOutcome):
        raise NotImplementedError

    def add_all(self, outcomes: Iterable[ComparisonOutcome]):
        for outcome in outcomes:
            self.add(outcome)

    def __len__(self) -> int:
        """Number of outcomes added so far."""
        return sum(list(self._added.values()))

    def analyze(self):
        raise NotImplementedError


class EditDistanceAggregator(ResultAggregator):
    """Sums differences and compared lengths per chromosome and gene."""

    outcome_type = EditOutcome

    def __init__(self, policy: Optional[ThresholdPolicy] = None):
        super().__init__()
        self.policy = policy or SingleThreshold()
        # chromosome -> gene -> [differences, length]
        self._buckets: Dict[str, Dict[str, List[int]]] = {}
        self._analysis: Optional[EditAnalysis] = None

    def add(self, outcome: EditOutcome):
        """Add one outcome to its (chromosome, gene) bucket."""
        self._check_type(outcome)

        chromosome = outcome.chromosome
        lock = self._lock_for(chromosome, lambda: self._buckets.setdefault(chromosome, {}))
        with lock:
            bucket = self._buckets[chromosome].setdefault(outcome.gene, [0, 0])
            bucket[0] += outcome.difference_count
            bucket[1] += outcome.compared_length
            self._added[chromosome] += 1

    def totals(self) -> Dict[str, Dict[str, Tuple[int, int]]]:
        """Snapshot of the raw sums as chromosome -> gene -> (differences, length)."""
        return {
            chromosome: {gene: (d, l) for gene, (d, l) in genes.items()}
            for chromosome, genes in self._buckets.items()
        }

    def analyze(self) -> EditAnalysis:
        """
        Compute per-chromosome similarity and classify each chromosome.

        Chromosomes whose compared length sums to zero are left out.

        Raises:
            EmptyResultError: If no nucleotides were compared at all
        """
        if self._analysis is not None:
            return self._analysis

        chromosomes = []
        for chromosome in sorted(self._buckets, key=chromosome_sort_key):
            genes = self._buckets[chromosome]
            differences = sum(d for d, _ in genes.values())
            length = sum(l for _, l in genes.values())
            if length == 0:
                logger.debug(f"Skipping chromosome {chromosome}: nothing compared")
                continue

            summary = ChromosomeSimilarity(
                chromosome=chromosome,
                differences=differences,
                length=length,
                category=self.policy.category(chromosome),
                threshold=self.policy.threshold_for(chromosome),
                is_similar=False,
                genes=[
                    GeneSimilarity(gene=gene, differences=d, length=l)
                    for gene, (d, l) in sorted(genes.items())
                ],
            )
            summary.is_similar = self.policy.is_similar(chromosome, summary.similarity)
            chromosomes.append(summary)

        if not chromosomes:
            raise EmptyResultError()

        self._analysis = EditAnalysis(
            chromosomes=chromosomes,
            policy_description=self.policy.describe(),
        )
        logger.info(
            f"Analyzed {len(chromosomes)} chromosomes: "
            f"{self._analysis.similar_count} similar, "
            f"{self._analysis.non_similar_count} dissimilar"
        )
        return self._analysis


class MotifAggregator(ResultAggregator):
    """Sums repeat-motif counts per STR marker."""

    outcome_type = MotifOutcome

    def __init__(self, eps: int = EPS):
        super().__init__()
        self.eps = eps
        # marker -> [first_count, second_count]
        self._markers: Dict[str, List[int]] = {}
        self._analysis: Optional[MotifAnalysis] = None

    def add(self, outcome: MotifOutcome):
        """Add one outcome to its marker's counts."""
        self._check_type(outcome)

        name = outcome.marker_name
        lock = self._lock_for(name, lambda: self._markers.setdefault(name, [0, 0]))
        with lock:
            counts = self._markers[name]
            counts[0] += outcome.first_count
            counts[1] += outcome.second_count
            self._added[name] += 1

    def totals(self) -> Dict[str, Tuple[int, int]]:
        return {name: (first, second) for name, (first, second) in self._markers.items()}

    def analyze(self) -> MotifAnalysis:
        """
        Summarise every marker.

        Raises:
            EmptyResultError: If no outcome was added
        """
        if self._analysis is not None:
            return self._analysis

        if not self._markers:
            raise EmptyResultError()

        self._analysis = MotifAnalysis(
            markers=[
                MarkerSummary(marker_name=name, first_count=first, second_count=second)
                for name, (first, second) in sorted(self._markers.items())
            ],
            eps=self.eps,
        )
        logger.info(
            f"Analyzed {len(self._analysis.markers)} markers: "
            f"{len(self._analysis.different_markers)} differ by more than {self.eps}"
        )
        return self._analysis


def create_aggregator(
    mode: ComparatorType,
    policy: Optional[ThresholdPolicy] = None,
) -> ResultAggregator:
    """Return the aggregator matching a comparison mode."""
    if mode.is_str:
        return MotifAggregator()
    return EditDistanceAggregator(policy)
