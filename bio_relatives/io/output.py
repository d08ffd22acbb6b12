"""
Report generation for bio-relatives results.

Text reports are what the command line prints; the TSV export carries
the same per-chromosome or per-marker table for downstream tools.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..analysis.types import EditAnalysis, MarkerSummary, MotifAnalysis, TrioProvenance
from ..exceptions import GenomeFileError

logger = logging.getLogger(__name__)

CATEGORY_TITLES = {
    'all': 'All chromosomes',
    'mitochondrial': 'Mitochondrial chromosomes',
    'x': 'X chromosomes',
    'autosomal': 'Autosomal chromosomes',
}


def _percent(value: float) -> str:
    return f"{value:.4f}%"


def format_edit_report(analysis: EditAnalysis) -> str:
    """
    Render an edit-distance analysis as text.

    Lists every chromosome with its similarity, the number of compared
    nucleotides and a per-gene breakdown, then the classification counts
    and the verdict.
    """
    lines = ["Similarity percentage for each chromosome:"]
    for chromosome in analysis.chromosomes:
        lines.append(
            f"\tName of chromosome: {chromosome.chromosome}. "
            f"Similarity percentage: {_percent(chromosome.similarity)}"
        )
        lines.append(f"\tNumber of nucleotides compared: {chromosome.length}")
        lines.append("\tSimilarity percentage for each gene from this chromosome:")
        for gene in chromosome.genes:
            lines.append(
                f"\t\tName of gene: {gene.gene}. "
                f"Similarity percentage: {_percent(gene.similarity)}"
            )

    lines.append(f"Classification by {analysis.policy_description}:")
    for category, (similar, non_similar) in analysis.counts_by_category.items():
        threshold = next(c.threshold for c in analysis.chromosomes if c.category == category)
        lines.append(
            f"\t{CATEGORY_TITLES.get(category, category)} (>= {threshold}%): "
            f"similar {similar}, dissimilar {non_similar}"
        )
    lines.append(f"Count of similar chromosomes: {analysis.similar_count}")
    lines.append(f"Count of dissimilar chromosomes: {analysis.non_similar_count}")

    if analysis.are_parent_and_child:
        lines.append("These persons are parent and child.")
    else:
        lines.append("These persons are not parent and child.")

    return "\n".join(lines) + "\n"


def _marker_lines(markers: List[MarkerSummary], first: bool) -> List[str]:
    lines = []
    for marker in markers:
        count = marker.first_count if first else marker.second_count
        lines.append(f"\t\tMarker region - {marker.marker_name}, number of times in the genome - {count};")
    lines.append(f"\tTotal number of markers in the genome - {len(markers)};")
    return lines


def format_motif_report(analysis: MotifAnalysis) -> str:
    """Render an STR analysis as text."""
    lines = ["Comparison results of marker regions:"]
    for marker in analysis.markers:
        lines.append(
            f"\tName of marker - {marker.marker_name}, which has appeared in both genomes "
            f"{marker.first_count} and {marker.second_count} times;"
        )

    lines.append("\tMarker regions of the first person:")
    lines.extend(_marker_lines(analysis.first_person_markers, first=True))
    lines.append("\tMarker regions of the second person:")
    lines.extend(_marker_lines(analysis.second_person_markers, first=False))

    lines.append(
        f"Total number of markers with different repeat numbers "
        f"(more than EPS = {analysis.eps}): {len(analysis.different_markers)};"
    )
    if analysis.are_father_and_son:
        lines.append("These persons are father and son.")
    else:
        lines.append("These persons are not father and son.")

    return "\n".join(lines) + "\n"


def format_report(analysis: Union[EditAnalysis, MotifAnalysis]) -> str:
    """Render either kind of analysis."""
    if isinstance(analysis, MotifAnalysis):
        return format_motif_report(analysis)
    return format_edit_report(analysis)


def format_provenance(provenance: TrioProvenance) -> str:
    """Render the per-parent chromosome attribution of a trio."""
    return (
        f"Chromosomes from father: [{', '.join(provenance.from_father)}]\n"
        f"Chromosomes from mother: [{', '.join(provenance.from_mother)}]\n"
        f"Number of chromosomes apparently inherited from father: {provenance.father_count}\n"
        f"Number of chromosomes apparently inherited from mother: {provenance.mother_count}\n"
    )


def format_trio_report(
    father: Union[EditAnalysis, MotifAnalysis],
    mother: Union[EditAnalysis, MotifAnalysis],
    provenance: TrioProvenance = None,
) -> str:
    """Render both parent comparisons and, if available, the provenance."""
    parts = [
        "Comparison of father and child genomes:\n",
        format_report(father),
        "\nComparison of mother and child genomes:\n",
        format_report(mother),
    ]
    if provenance is not None:
        parts.append("\n")
        parts.append(format_provenance(provenance))
    return "".join(parts)


def write_similarity_tsv(
    analysis: Union[EditAnalysis, MotifAnalysis],
    output_path: Path,
) -> Path:
    """
    Write the per-chromosome or per-marker table to a TSV file.

    Args:
        analysis: Result of an aggregator's analyze()
        output_path: Path for output TSV

    Returns:
        Path to written file
    """
    output_path = Path(output_path)
    df = analysis.to_dataframe()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, sep='\t', index=False, float_format='%.4f')
    except OSError as e:
        raise GenomeFileError(f"cannot be written: {e}", filename=str(output_path)) from e

    logger.info(f"Wrote {len(df)} rows to {output_path}")
    return output_path
