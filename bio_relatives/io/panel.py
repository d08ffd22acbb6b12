"""
Panel file parsing.

Two formats are supported, both whitespace separated with '#' comments:

- BED panels: chrom, start, end, gene
- Marker-region panels (STR modes): chrom, start, end, marker name, motif

Marker motifs are regular expressions; every line of a marker reuses the
pattern compiled for its first line.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Pattern, Union

from ..config import ComparatorType
from ..core.models import GenomicInterval, Interval, MarkerInterval
from ..exceptions import GenomeFileError, InvalidIntervalError

logger = logging.getLogger(__name__)

PANEL_EXTENSION = ".bed"
COMMENT_PREFIX = "#"

BED_COLUMNS = 4
MARKER_COLUMNS = 5


def validate_panel_path(path: Path) -> Path:
    """Check that a panel file exists and has the .bed extension."""
    path = Path(path)
    if not path.is_file():
        raise GenomeFileError("does not exist or is not a file", filename=str(path))
    if path.suffix.lower() != PANEL_EXTENSION:
        raise GenomeFileError(
            f"has an unexpected extension, expected {PANEL_EXTENSION}",
            filename=str(path),
        )
    return path


def _data_lines(path: Path):
    """Yield (line_number, columns) for every non-empty, non-comment line."""
    try:
        with open(path, "rb") as f:
            for line_number, raw in enumerate(f, 1):
                try:
                    stripped = raw.decode("utf-8").strip()
                except UnicodeDecodeError as e:
                    raise GenomeFileError(
                        f"is not valid UTF-8 text: {e}",
                        filename=str(path), line_number=line_number,
                    ) from e
                if not stripped or stripped.startswith(COMMENT_PREFIX):
                    continue
                yield line_number, stripped.split()
    except OSError as e:
        raise GenomeFileError(f"cannot be read: {e}", filename=str(path)) from e


def _parse_bounds(path: Path, line_number: int, start: str, end: str):
    try:
        return int(start), int(end)
    except ValueError as e:
        raise GenomeFileError(
            f"start and end must be integers, got {start!r} and {end!r}",
            filename=path.name, line_number=line_number,
        ) from e


def load_bed_panel(path: Union[str, Path]) -> List[GenomicInterval]:
    """
    Load gene intervals from a BED panel.

    Args:
        path: Path to a .bed file with 4 columns (chrom, start, end, gene)

    Returns:
        Intervals in file order

    Raises:
        GenomeFileError: On a missing file, a wrong column count, bad
            coordinates, or a gene found on two chromosomes
    """
    path = validate_panel_path(path)
    intervals = []
    gene_chromosomes: Dict[str, str] = {}

    for line_number, columns in _data_lines(path):
        if len(columns) != BED_COLUMNS:
            raise GenomeFileError(
                f"expected {BED_COLUMNS} columns (chrom, start, end, gene), got {len(columns)}",
                filename=path.name, line_number=line_number,
            )

        chromosome, start, end, gene = columns
        start, end = _parse_bounds(path, line_number, start, end)

        known = gene_chromosomes.setdefault(gene, chromosome)
        if known != chromosome:
            raise GenomeFileError(
                f"gene {gene} is found on chromosomes {known} and {chromosome}",
                filename=path.name, line_number=line_number,
            )

        try:
            intervals.append(GenomicInterval(chromosome, start, end, gene))
        except InvalidIntervalError as e:
            raise GenomeFileError(str(e), filename=path.name, line_number=line_number) from e

    logger.info(f"Loaded {len(intervals)} intervals for {len(gene_chromosomes)} genes from {path.name}")
    return intervals


def load_marker_panel(path: Union[str, Path]) -> List[MarkerInterval]:
    """
    Load STR marker regions.

    Args:
        path: Path to a .bed file with 5 columns
            (chrom, start, end, marker name, motif regex)

    Returns:
        Marker intervals in file order

    Raises:
        GenomeFileError: On a missing file, a wrong column count, bad
            coordinates, an invalid motif, or a chromosome that is
            neither X nor Y
    """
    path = validate_panel_path(path)
    intervals = []
    patterns: Dict[str, Pattern] = {}

    for line_number, columns in _data_lines(path):
        if len(columns) != MARKER_COLUMNS:
            raise GenomeFileError(
                f"expected {MARKER_COLUMNS} columns (chrom, start, end, marker name, "
                f"marker motif), got {len(columns)}",
                filename=path.name, line_number=line_number,
            )

        chromosome, start, end, marker_name, motif = columns
        start, end = _parse_bounds(path, line_number, start, end)

        if 'X' not in chromosome and 'Y' not in chromosome:
            raise GenomeFileError(
                f"incorrect chromosome name, expected X or Y, found: {chromosome}",
                filename=path.name, line_number=line_number,
            )

        if marker_name not in patterns:
            try:
                patterns[marker_name] = re.compile(motif)
            except re.error as e:
                raise GenomeFileError(
                    f"invalid motif {motif!r} for marker {marker_name}: {e}",
                    filename=path.name, line_number=line_number,
                ) from e

        try:
            intervals.append(MarkerInterval(
                chromosome=chromosome,
                start=start,
                end=end,
                marker_name=marker_name,
                repeat_motif=patterns[marker_name],
            ))
        except InvalidIntervalError as e:
            raise GenomeFileError(str(e), filename=path.name, line_number=line_number) from e

    logger.info(f"Loaded {len(intervals)} regions for {len(patterns)} markers from {path.name}")
    return intervals


def load_panel(path: Union[str, Path], mode: ComparatorType) -> List[Interval]:
    """Load the panel format matching a comparison mode."""
    if mode.is_str:
        return load_marker_panel(path)
    return load_bed_panel(path)
