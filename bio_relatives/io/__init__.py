"""
I/O modules for bio-relatives.
"""

from .bam import (
    BamAssembler,
    call_consensus_base,
    validate_bam_path,
)
from .output import (
    format_edit_report,
    format_motif_report,
    format_provenance,
    format_report,
    format_trio_report,
    write_similarity_tsv,
)
from .panel import (
    load_bed_panel,
    load_marker_panel,
    load_panel,
)

__all__ = [
    'load_panel',
    'load_bed_panel',
    'load_marker_panel',
    'BamAssembler',
    'call_consensus_base',
    'validate_bam_path',
    'format_report',
    'format_edit_report',
    'format_motif_report',
    'format_provenance',
    'format_trio_report',
    'write_similarity_tsv',
]
