"""Shared test helpers: an in-memory assembler and a tiny BAM writer."""

import threading

import pysam
import pytest
from bio_relatives.core.models import AssembledRegion
from bio_relatives.exceptions import AssemblyError


class FakeAssembler:
    """
    Assembler over in-memory genomes.

    genomes maps person -> chromosome -> sequence starting at position 0.
    Intervals whose label is listed in fail_labels raise AssemblyError.
    """

    def __init__(self, genomes, fail_labels=(), error=None):
        self.genomes = genomes
        self.fail_labels = set(fail_labels)
        self.error = error
        self.calls = 0
        self._lock = threading.Lock()

    def assemble(self, person, interval):
        with self._lock:
            self.calls += 1
        if self.error is not None:
            raise self.error
        if interval.label in self.fail_labels:
            raise AssemblyError(f"cannot assemble {interval}")

        sequence = self.genomes[person].get(interval.chromosome)
        if sequence is None or interval.start >= len(sequence):
            return None
        return AssembledRegion(
            chromosome=interval.chromosome,
            gene=interval.label,
            start=interval.start,
            sequence=sequence[interval.start:interval.end],
        )


def write_bam(path, contigs, reads):
    """
    Write a sorted, indexed BAM file.

    Args:
        path: Output path
        contigs: Mapping of contig name to length
        reads: List of (contig, start, sequence) aligned without gaps
    """
    names = list(contigs)
    header = {
        'HD': {'VN': '1.0', 'SO': 'coordinate'},
        'SQ': [{'SN': name, 'LN': length} for name, length in contigs.items()],
    }
    ordered = sorted(reads, key=lambda r: (names.index(r[0]), r[1]))
    with pysam.AlignmentFile(str(path), "wb", header=header) as bam:
        for i, (contig, start, sequence) in enumerate(ordered):
            segment = pysam.AlignedSegment(bam.header)
            segment.query_name = f"read{i}"
            segment.query_sequence = sequence
            segment.flag = 0
            segment.reference_id = names.index(contig)
            segment.reference_start = start
            segment.mapping_quality = 60
            segment.cigartuples = [(0, len(sequence))]
            segment.query_qualities = pysam.qualitystring_to_array("I" * len(sequence))
            bam.write(segment)
    pysam.index(str(path))
    return path


def tile_reads(contig, genome, read_length=25, step=10):
    """Reads covering the whole genome with overlaps."""
    starts = list(range(0, len(genome) - read_length + 1, step))
    if starts[-1] != len(genome) - read_length:
        starts.append(len(genome) - read_length)
    return [(contig, start, genome[start:start + read_length]) for start in starts]


GENOME_1 = (
    "ACGTTGCATGCCATGACGTAGCTAGCTAGGATCCAGTCAGTCGATCGATGCA"
    "TTGACCGTAGGCTAACGTTAGCCATGACTGACGGTACCATGGCATGCAAGCT"
)


@pytest.fixture
def bam_factory(tmp_path):
    def _factory(name, contigs, reads):
        return write_bam(tmp_path / f"{name}.bam", contigs, reads)
    return _factory
