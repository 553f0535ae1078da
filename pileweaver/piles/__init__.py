"""
Alignment piles module for PileWeaver.

Turns a long read's alignments into coverage-supported windows and the
pile of aligned fragments for each window.
"""

from .alignment_piles import (
    Alignment,
    Window,
    get_coverages,
    get_alignment_piles_positions,
    get_alignment_pile_seq,
    get_alignment_piles,
)

__all__ = [
    'Alignment',
    'Window',
    'get_coverages',
    'get_alignment_piles_positions',
    'get_alignment_pile_seq',
    'get_alignment_piles',
]
