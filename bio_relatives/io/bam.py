"""
BAM-backed region assembly.

BamAssembler reconstructs a consensus sequence for one person over one
interval from the aligned reads in that person's BAM file. At every
reference position the most frequent base wins; ties go to the base with
the higher median quality. Positions without coverage become '*'.
"""

import logging
import os
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import numpy as np
import pysam

from ..core.models import AssembledRegion, Interval
from ..exceptions import AssemblyError, GenomeFileError
from ..utils.sequence import NUCLEOTIDES, UNKNOWN_BASE

logger = logging.getLogger(__name__)

BAM_EXTENSION = ".bam"


def validate_bam_path(path: Union[str, Path]) -> Path:
    """Check that a BAM file exists, is readable and has the .bam extension."""
    path = Path(path)
    if not path.is_file() or not os.access(path, os.R_OK):
        raise GenomeFileError("does not exist or is not readable", filename=str(path))
    if path.suffix.lower() != BAM_EXTENSION:
        raise GenomeFileError(
            f"has an unexpected extension, expected {BAM_EXTENSION}",
            filename=str(path),
        )
    return path


def median_quality(qualities: List[int]) -> int:
    """Median base quality, truncated to an integer; 0 for no qualities."""
    if not qualities:
        return 0
    return int(np.median(qualities))


def call_consensus_base(observations: Mapping[str, List[int]]):
    """
    Pick the consensus base at one position.

    Args:
        observations: Base -> list of qualities of the reads showing it

    Returns:
        Tuple of (base, quality); (UNKNOWN_BASE, 0) without observations

    Example:
        >>> call_consensus_base({'A': [30, 30], 'C': [40]})
        ('A', 30)
    """
    best_base, best_count, best_quality = UNKNOWN_BASE, 0, 0
    for base in NUCLEOTIDES:
        qualities = observations.get(base, [])
        if not qualities:
            continue
        quality = median_quality(qualities)
        count = len(qualities)
        if count > best_count or (count == best_count and quality > best_quality):
            best_base, best_count, best_quality = base, count, quality
    return best_base, best_quality


class BamAssembler:
    """
    Consensus assembler over one BAM file per person.

    Each call opens its own pysam handle, so one instance can be shared
    by concurrent assembly tasks.
    """

    def __init__(self, bam_paths: Mapping[str, Union[str, Path]]):
        self.bam_paths: Dict[str, Path] = {
            person: validate_bam_path(path) for person, path in bam_paths.items()
        }

    def _resolve_contig(self, bam: pysam.AlignmentFile, interval: Interval) -> Optional[str]:
        if interval.chromosome in bam.references:
            return interval.chromosome
        alternate = interval.with_alternate_chromosome_name().chromosome
        if alternate in bam.references:
            return alternate
        return None

    def assemble(self, person: str, interval: Interval) -> Optional[AssembledRegion]:
        """
        Assemble the consensus of one person over one interval.

        Args:
            person: Key of the person's BAM file
            interval: Interval to assemble

        Returns:
            AssembledRegion spanning the interval, or None if no read
            overlaps it or the chromosome is missing from the BAM header

        Raises:
            AssemblyError: If the BAM file cannot be queried
        """
        if person not in self.bam_paths:
            raise AssemblyError(f"No BAM file registered for {person}")
        path = self.bam_paths[person]

        observations = defaultdict(lambda: defaultdict(list))
        try:
            with pysam.AlignmentFile(str(path), "rb") as bam:
                contig = self._resolve_contig(bam, interval)
                if contig is None:
                    logger.warning(f"Chromosome {interval.chromosome} not found in {path.name}")
                    return None

                n_reads = 0
                for read in bam.fetch(contig, interval.start, interval.end):
                    if read.is_unmapped or read.query_sequence is None:
                        continue
                    n_reads += 1
                    qualities = read.query_qualities
                    for query_pos, ref_pos in read.get_aligned_pairs(matches_only=True):
                        if not interval.start <= ref_pos < interval.end:
                            continue
                        base = read.query_sequence[query_pos].upper()
                        if base in NUCLEOTIDES:
                            quality = qualities[query_pos] if qualities is not None else 0
                            observations[ref_pos][base].append(quality)
        except (OSError, ValueError) as e:
            raise AssemblyError(f"Cannot read {interval} from {path.name}: {e}") from e

        if n_reads == 0:
            logger.debug(f"No reads for {person} over {interval}")
            return None

        bases = []
        quality = bytearray()
        for position in range(interval.start, interval.end):
            base, base_quality = call_consensus_base(observations.get(position, {}))
            bases.append(base)
            quality.append(min(base_quality, 255))

        return AssembledRegion(
            chromosome=interval.chromosome,
            gene=interval.label,
            start=interval.start,
            sequence=''.join(bases),
            quality=bytes(quality),
        )
