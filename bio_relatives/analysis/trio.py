"""
Parent provenance for trio comparisons.

Given the child-vs-father and child-vs-mother analyses, each chromosome
is attributed to the parent it is more similar to.
"""

import logging

from .aggregation import chromosome_sort_key
from .types import EditAnalysis, TrioProvenance

logger = logging.getLogger(__name__)


def classify_provenance(father: EditAnalysis, mother: EditAnalysis) -> TrioProvenance:
    """
    Attribute each chromosome of the child to one parent.

    Only chromosomes present in both analyses are attributed. A chromosome
    goes to the father if its similarity to him is strictly greater,
    otherwise to the mother.

    Args:
        father: Analysis of the child compared with the father
        mother: Analysis of the child compared with the mother

    Returns:
        TrioProvenance listing the chromosomes per parent
    """
    father_similarity = father.similarity_by_chromosome()
    mother_similarity = mother.similarity_by_chromosome()

    shared = set(father_similarity) & set(mother_similarity)
    skipped = set(father_similarity) ^ set(mother_similarity)
    if skipped:
        logger.warning(
            f"Chromosomes compared with only one parent are not attributed: {sorted(skipped)}"
        )

    provenance = TrioProvenance()
    for chromosome in sorted(shared, key=chromosome_sort_key):
        if father_similarity[chromosome] > mother_similarity[chromosome]:
            provenance.from_father.append(chromosome)
        else:
            provenance.from_mother.append(chromosome)

    return provenance
