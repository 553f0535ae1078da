"""
Read I/O module for PileWeaver.

Handles reading and writing sequences and loading alignments.

CONSOLIDATED MODULES:
- io_core_module.py: SeqRead, FASTA I/O, SequenceStore, PAF parsing
"""

from .io_core_module import (
    SeqRead,
    is_gzipped,
    open_file,
    read_fasta,
    write_fasta,
    SequenceStore,
    parse_paf_line,
    read_paf,
    group_alignments_by_query,
)

__all__ = [
    # Core data structures
    "SeqRead",
    "SequenceStore",

    # File helpers
    "is_gzipped",
    "open_file",

    # FASTA I/O
    "read_fasta",
    "write_fasta",

    # Alignments
    "parse_paf_line",
    "read_paf",
    "group_alignments_by_query",
]
