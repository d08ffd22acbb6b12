"""
High-level entry points: compare two persons or a father/mother/child trio.

These functions wire panel loading, assembly, the comparison pipeline
and report rendering together. They accept either BAM paths, in which
case a pysam-backed assembler is built, or person keys for a supplied
assembler.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from .analysis.aggregation import create_aggregator
from .analysis.trio import classify_provenance
from .analysis.types import EditAnalysis, MotifAnalysis, TrioProvenance
from .config import ComparatorType, ComparisonConfig
from .core.models import Interval
from .exceptions import ConfigurationError
from .io.bam import BamAssembler
from .io.output import format_report, format_trio_report, write_similarity_tsv
from .io.panel import load_panel
from .pipeline import ComparisonPipeline, RegionAssembler

logger = logging.getLogger(__name__)

Analysis = Union[EditAnalysis, MotifAnalysis]
PanelSource = Union[str, Path, Sequence[Interval]]
PersonSource = Union[str, Path]


@dataclass
class PairResult:
    """Analysis of one two-person comparison with its rendered report."""
    analysis: Analysis
    report: str


@dataclass
class TrioResult:
    """Both parent comparisons of a trio with the rendered report."""
    father: Analysis
    mother: Analysis
    provenance: Optional[TrioProvenance]
    report: str


def _resolve_panel(panel: PanelSource, mode: ComparatorType) -> Sequence[Interval]:
    if isinstance(panel, (str, Path)):
        return load_panel(panel, mode)
    return list(panel)


def _resolve_assembler(
    persons: Sequence[str],
    assembler: Optional[RegionAssembler],
) -> RegionAssembler:
    if assembler is not None:
        return assembler
    return BamAssembler({person: person for person in persons})


def analyze_pair(
    first: PersonSource,
    second: PersonSource,
    panel: Sequence[Interval],
    config: ComparisonConfig,
    assembler: RegionAssembler,
) -> Analysis:
    """Run the pipeline for two persons and analyze the outcomes."""
    persons = (str(first), str(second))
    aggregator = create_aggregator(config.mode, config.threshold_policy)
    ComparisonPipeline(assembler, config, persons).run(panel, aggregator)
    return aggregator.analyze()


def run_two(
    first: PersonSource,
    second: PersonSource,
    panel: PanelSource,
    config: Optional[ComparisonConfig] = None,
    assembler: Optional[RegionAssembler] = None,
    tsv_path: Optional[Path] = None,
) -> PairResult:
    """
    Decide whether two persons are related.

    Args:
        first: BAM path (or assembler key) of the first person
        second: BAM path (or assembler key) of the second person
        panel: Panel file or already loaded intervals
        config: Run settings; defaults to Levenshtein with one thread
        assembler: Region assembler; a BamAssembler is built if None
        tsv_path: Optional path for the per-chromosome or per-marker table

    Returns:
        PairResult with the analysis and the text report
    """
    config = config or ComparisonConfig()
    intervals = _resolve_panel(panel, config.mode)
    assembler = _resolve_assembler((str(first), str(second)), assembler)

    analysis = analyze_pair(first, second, intervals, config, assembler)

    if tsv_path is not None:
        write_similarity_tsv(analysis, tsv_path)

    return PairResult(analysis=analysis, report=format_report(analysis))


def run_trio(
    father: PersonSource,
    mother: PersonSource,
    child: PersonSource,
    panel: PanelSource,
    config: Optional[ComparisonConfig] = None,
    assembler: Optional[RegionAssembler] = None,
) -> TrioResult:
    """
    Compare a child with both parents.

    The child is the first person of both comparisons. In the
    edit-distance modes every chromosome is additionally
    attributed to the parent it most resembles. Y-STR mode is rejected:
    the mother carries no Y chromosome.

    Raises:
        ConfigurationError: If the mode is Y_STR
    """
    config = config or ComparisonConfig()
    if config.mode is ComparatorType.Y_STR:
        raise ConfigurationError(
            "Y_STR mode cannot be used for a trio comparison", parameter="mode"
        )

    intervals = _resolve_panel(panel, config.mode)
    assembler = _resolve_assembler((str(father), str(mother), str(child)), assembler)

    logger.info("Comparing child and father")
    father_analysis = analyze_pair(child, father, intervals, config, assembler)
    logger.info("Comparing child and mother")
    mother_analysis = analyze_pair(child, mother, intervals, config, assembler)

    provenance = None
    if not config.mode.is_str:
        provenance = classify_provenance(father_analysis, mother_analysis)

    report = format_trio_report(father_analysis, mother_analysis, provenance)
    return TrioResult(
        father=father_analysis,
        mother=mother_analysis,
        provenance=provenance,
        report=report,
    )


def compare_two(
    first: PersonSource,
    second: PersonSource,
    panel: PanelSource,
    config: Optional[ComparisonConfig] = None,
    assembler: Optional[RegionAssembler] = None,
) -> str:
    """Compare two persons and return the text report."""
    return run_two(first, second, panel, config, assembler).report


def compare_trio(
    father: PersonSource,
    mother: PersonSource,
    child: PersonSource,
    panel: PanelSource,
    config: Optional[ComparisonConfig] = None,
    assembler: Optional[RegionAssembler] = None,
) -> str:
    """Compare a child with both parents and return the text report."""
    return run_trio(father, mother, child, panel, config, assembler).report
