"""
Utilities module for PileWeaver.

This module provides core utilities:
- Sequence helpers (k-mer extraction and counting, reverse complement)
- The correction pipeline (import from pileweaver.utils.pipeline)
"""

from .sequence_utils import (
    NUCLEOTIDES,
    extract_kmers,
    count_kmers,
    reverse_complement,
)

__all__ = [
    "NUCLEOTIDES",
    "extract_kmers",
    "count_kmers",
    "reverse_complement",
]
