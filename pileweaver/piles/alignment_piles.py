#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PileWeaver v0.1.0

Alignment piles: partitions a long read into coverage-supported windows
and extracts, per window, the matching fragment of every aligned sequence.

Algorithm:
  1. Build a per-base coverage array over the template (baseline 1).
  2. Scan forward for runs of adequately covered bases and cut them into
     windows of ``window_size`` bases, optionally overlapping.
  3. Scan backward once to capture a trailing window at the template end.
  4. For each window, remap the window onto every intersecting alignment's
     target and slice that sequence (reverse-complemented for '-' strand).

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from pileweaver.utils.sequence_utils import reverse_complement

logger = logging.getLogger(__name__)

Window = Tuple[int, int]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Alignment:
    """
    Pairwise alignment of a supporting sequence (target) against the long
    read (query). All coordinates are 0-based with inclusive ends.
    """
    q_name: str
    q_start: int
    q_end: int
    q_length: int
    t_name: str
    t_start: int
    t_end: int
    t_length: int
    reverse: bool = False   # True when the target aligns on the '-' strand

    def __post_init__(self):
        """Validate coordinate consistency."""
        if not 0 <= self.q_start <= self.q_end < self.q_length:
            raise ValueError(
                f"Inconsistent query span {self.q_start}-{self.q_end} "
                f"(length {self.q_length}) for {self.q_name}"
            )
        if not 0 <= self.t_start <= self.t_end < self.t_length:
            raise ValueError(
                f"Inconsistent target span {self.t_start}-{self.t_end} "
                f"(length {self.t_length}) for {self.t_name}"
            )

    @property
    def strand(self) -> str:
        return '-' if self.reverse else '+'


# ---------------------------------------------------------------------------
# Coverage and windows
# ---------------------------------------------------------------------------

def get_coverages(template_length: int, alignments: Sequence[Alignment]) -> np.ndarray:
    """
    Per-base alignment depth over the template.

    Every base starts at 1 (the template covers itself) and gains one per
    alignment whose query span [q_start, q_end] contains it.
    """
    coverages = np.ones(template_length, dtype=np.int64)
    for al in alignments:
        coverages[al.q_start:al.q_end + 1] += 1
    return coverages


def get_alignment_piles_positions(
    template_length: int,
    alignments: Sequence[Alignment],
    min_support: int,
    window_size: int,
    window_overlap: int = 0,
) -> List[Window]:
    """
    Compute the windows (piles positions) of a template.

    Args:
        template_length: Length of the template (query) read.
        alignments: Alignments against the template.
        min_support: Minimum coverage for a base to be usable.
        window_size: Length of each emitted window.
        window_overlap: Bases shared by consecutive windows (0 = none).

    Returns:
        List of (begin, end) windows, 0-based inclusive.
    """
    if window_size <= 0:
        raise ValueError(f"window_size must be > 0, got {window_size}")
    if window_overlap < 0 or window_overlap >= window_size:
        raise ValueError(
            f"window_overlap must be in [0, window_size), got {window_overlap}"
        )

    coverages = get_coverages(template_length, alignments)
    positions: List[Window] = []

    # Forward scan
    cur_len = 0
    beg = 0
    i = 0
    while i < template_length:
        if cur_len >= window_size:
            positions.append((beg, beg + cur_len - 1))
            i -= window_overlap
            beg = i
            cur_len = 0
        if coverages[i] < min_support:
            cur_len = 0
            i += 1
            beg = i
        else:
            cur_len += 1
            i += 1

    # Backward scan for a single trailing window
    trailing: Optional[Window] = None
    end = template_length - 1
    cur_len = 0
    for i in range(template_length - 1, -1, -1):
        if coverages[i] < min_support:
            cur_len = 0
            end = i - 1
            continue
        cur_len += 1
        if cur_len >= window_size:
            trailing = (end - cur_len + 1, end)
            break

    if trailing is not None and trailing not in positions:
        positions.append(trailing)

    return positions


# ---------------------------------------------------------------------------
# Pile sequences
# ---------------------------------------------------------------------------

def _intersects(al: Alignment, beg: int, end: int) -> bool:
    """True when the alignment's query span shares at least one base with [beg, end]."""
    return (
        (al.q_start <= beg and al.q_end >= beg)
        or (al.q_start < end and al.q_end >= end)
        or (beg < al.q_start and al.q_end < end)
    )


def get_alignment_pile_seq(
    alignments: Sequence[Alignment],
    sequences: Mapping[str, str],
    beg: int,
    end: int,
    mer_size: int,
) -> List[str]:
    """
    Extract the pile of sequences for the window [beg, end].

    The template's own slice comes first, followed by the remapped slice of
    every intersecting alignment, in alignment order. Slices shorter than
    *mer_size* are dropped.

    Returns:
        The pile, or an empty list when the window exceeds the stored
        template sequence.
    """
    if not alignments:
        return []

    template = sequences[alignments[0].q_name]
    window_len = end - beg + 1

    if beg + window_len - 1 >= len(template):
        logger.debug(
            "Window %d-%d exceeds template %s (%d bp); empty pile",
            beg, end, alignments[0].q_name, len(template),
        )
        return []

    pile = [template[beg:beg + window_len]]

    for al in alignments:
        t_beg = al.t_start
        t_end = al.t_end
        length = window_len
        shift = beg - al.q_start if beg > al.q_start else 0

        if not _intersects(al, beg, end) or al.t_start + shift > al.t_end:
            continue

        starts_before = beg < al.q_start
        ends_after = al.q_end < end

        if starts_before:
            shift = 0
            t_beg = max(0, al.t_start - (al.q_start - beg))
        if ends_after:
            t_end = min(al.t_length - 1, al.t_end + (end - al.q_end))

        if starts_before and ends_after:
            length = t_end - t_beg + 1
        elif starts_before:
            length = min(length, al.t_length - t_beg)
        elif ends_after:
            length = min(length, t_end + 1)

        fragment = sequences[al.t_name][t_beg:t_end + 1]
        if al.reverse:
            fragment = reverse_complement(fragment)
        fragment = fragment[shift:shift + length]

        if len(fragment) >= mer_size:
            pile.append(fragment)

    return pile


def get_alignment_piles(
    alignments: Sequence[Alignment],
    min_support: int,
    window_size: int,
    window_overlap: int,
    sequences: Mapping[str, str],
    mer_size: int,
) -> Tuple[List[Window], List[List[str]]]:
    """
    Compute the windows of a template and the pile of each window.

    All alignments must share the same query. Returns two lists of equal
    length: the windows and, for each, its pile.
    """
    if not alignments:
        return [], []

    template_length = alignments[0].q_length
    positions = get_alignment_piles_positions(
        template_length, alignments, min_support, window_size, window_overlap,
    )

    piles = [
        get_alignment_pile_seq(alignments, sequences, beg, end, mer_size)
        for beg, end in positions
    ]

    logger.debug(
        "Template %s: %d alignments -> %d windows",
        alignments[0].q_name, len(alignments), len(positions),
    )

    return positions, piles


__all__ = [
    "Alignment",
    "Window",
    "get_coverages",
    "get_alignment_piles_positions",
    "get_alignment_pile_seq",
    "get_alignment_piles",
]

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
