#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PileWeaver v0.1.0

Pile corrector: rebuilds each window of a long read from the k-mer graph
of its pile, then stitches the windows back into a corrected read.

Algorithm:
  1. Partition the read into windows and extract one pile per window.
  2. Count the k-mers (every order from min_order to mer_size) of the pile.
  3. Link the window's first k-mer to its last k-mer through the solid
     k-mers, retrying at smaller orders when the search fails.
  4. Keep the template slice for windows that could not be linked.
  5. Stitch windows left to right, copying uncovered template stretches
     and dropping the overlap shared with the previous window.
  6. Optionally extend both read ends through unambiguous k-mer paths.

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pileweaver.piles.alignment_piles import Alignment, Window, get_alignment_piles
from pileweaver.read_correction.dbg_linker import (
    extend_left,
    extend_right,
    link_with_order_reduction,
)
from pileweaver.utils.sequence_utils import count_kmers, reverse_complement

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

@dataclass
class PileParameters:
    """Windowing parameters."""
    min_support: int = 4       # Minimum coverage (template included) per base
    window_size: int = 500     # Window length in bp
    window_overlap: int = 50   # Bases shared by consecutive windows

    def __post_init__(self):
        """Validate configuration."""
        if self.min_support < 1:
            raise ValueError(f"min_support must be >= 1, got {self.min_support}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if not 0 <= self.window_overlap < self.window_size:
            raise ValueError(
                f"window_overlap must be in [0, {self.window_size}), got {self.window_overlap}"
            )


@dataclass
class LinkParameters:
    """K-mer graph search parameters."""
    mer_size: int = 9                 # Base k-mer order
    min_order: int = 5                # Smallest order tried by order reduction
    solid_threshold: int = 4          # Minimum count of a solid k-mer
    max_branches: int = 50            # Branch budget per search
    max_distance_ratio: float = 1.5   # Max bases added, relative to window length
    order_step: int = 1

    def __post_init__(self):
        """Validate configuration."""
        if self.min_order < 1:
            raise ValueError(f"min_order must be >= 1, got {self.min_order}")
        if self.mer_size < self.min_order:
            raise ValueError(
                f"mer_size ({self.mer_size}) must be >= min_order ({self.min_order})"
            )
        if self.solid_threshold < 0:
            raise ValueError(f"solid_threshold must be >= 0, got {self.solid_threshold}")
        if self.max_branches < 0:
            raise ValueError(f"max_branches must be >= 0, got {self.max_branches}")
        if self.max_distance_ratio <= 0:
            raise ValueError(
                f"max_distance_ratio must be > 0, got {self.max_distance_ratio}"
            )
        if self.order_step < 1:
            raise ValueError(f"order_step must be >= 1, got {self.order_step}")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class CorrectedWindow:
    """One window of a read after correction."""
    window: Window
    sequence: str
    linked: bool = False
    order: Optional[int] = None   # k-mer order that closed the link
    pile_depth: int = 0           # Number of sequences in the pile


@dataclass
class CorrectedRead:
    """A long read after pile correction."""
    id: str
    sequence: str
    corrected: bool = False
    windows: List[CorrectedWindow] = field(default_factory=list)
    extended_left: int = 0
    extended_right: int = 0

    @property
    def linked_windows(self) -> int:
        return sum(1 for w in self.windows if w.linked)


# ---------------------------------------------------------------------------
# Corrector
# ---------------------------------------------------------------------------

class PileCorrector:
    """
    Long-read corrector driven by alignment piles and k-mer graph linking.

    Usage
    -----
    >>> corrector = PileCorrector(PileParameters(window_size=200), LinkParameters())
    >>> read = corrector.correct_read("read_1", alignments, sequences)
    """

    def __init__(
        self,
        pile_params: Optional[PileParameters] = None,
        link_params: Optional[LinkParameters] = None,
        *,
        extend_ends: bool = False,
        max_extension: int = 0,
    ):
        """
        Args:
            pile_params: Windowing parameters.
            link_params: K-mer graph search parameters.
            extend_ends: Extend the corrected read's ends through the graph.
            max_extension: Maximum bases added at each end.
        """
        self.pile_params = pile_params or PileParameters()
        self.link_params = link_params or LinkParameters()
        self.extend_ends = extend_ends
        self.max_extension = max_extension

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PileCorrector':
        """Build a corrector from a configuration dictionary (see config.schema)."""
        extension = config.get('extension') or {}
        return cls(
            PileParameters(**(config.get('piles') or {})),
            LinkParameters(**(config.get('dbg') or {})),
            extend_ends=extension.get('enabled', False),
            max_extension=extension.get('max_extension', 0),
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def correct_pile(self, pile: Sequence[str], window: Window = (0, 0)) -> CorrectedWindow:
        """
        Rebuild a pile's template slice through its k-mer graph.

        Args:
            pile: Template slice first, then aligned fragments.
            window: Window coordinates, carried into the result.

        Returns:
            CorrectedWindow; the template slice is kept when linking fails.
        """
        if not pile:
            return CorrectedWindow(window=window, sequence="")

        lp = self.link_params
        template = pile[0]
        if len(template) < lp.mer_size:
            return CorrectedWindow(window=window, sequence=template, pile_depth=len(pile))

        counts = count_kmers(pile, lp.min_order, lp.mer_size)
        source = template[:lp.mer_size]
        target = template[-lp.mer_size:]
        max_distance = math.ceil(len(template) * lp.max_distance_ratio)

        result = link_with_order_reduction(
            counts, source, target,
            lp.mer_size, lp.min_order,
            max_distance, lp.max_branches, lp.solid_threshold,
            order_step=lp.order_step,
        )

        if not result.found:
            logger.debug("Window %d-%d: no path between anchors", window[0], window[1])
            return CorrectedWindow(window=window, sequence=template, pile_depth=len(pile))

        return CorrectedWindow(
            window=window,
            sequence=result.missing_part,
            linked=True,
            order=result.order,
            pile_depth=len(pile),
        )

    def correct_read(
        self,
        read_id: str,
        alignments: Sequence[Alignment],
        sequences: Mapping[str, str],
    ) -> CorrectedRead:
        """
        Correct one long read from the alignments of its supporting sequences.

        Args:
            read_id: Name of the long read (query of every alignment).
            alignments: Alignments against the read, in input order.
            sequences: Sequence store holding the read and every target.

        Returns:
            CorrectedRead; unchanged and marked uncorrected when no pile
            could be built.
        """
        template = sequences[read_id]
        pp = self.pile_params

        windows, piles = get_alignment_piles(
            alignments, pp.min_support, pp.window_size, pp.window_overlap,
            sequences, self.link_params.mer_size,
        )

        corrected_windows = [
            self.correct_pile(pile, window)
            for window, pile in zip(windows, piles)
            if pile
        ]

        if not corrected_windows:
            logger.debug("Read %s: no usable piles, left uncorrected", read_id)
            return CorrectedRead(id=read_id, sequence=template)

        sequence = self._stitch(template, corrected_windows)
        read = CorrectedRead(
            id=read_id,
            sequence=sequence,
            corrected=any(w.linked for w in corrected_windows),
            windows=corrected_windows,
        )

        if self.extend_ends and self.max_extension > 0:
            self._extend(read, alignments, sequences)

        logger.debug(
            "Read %s: %d/%d windows linked, %d -> %d bp",
            read_id, read.linked_windows, len(corrected_windows),
            len(template), len(read.sequence),
        )

        return read

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    @staticmethod
    def _stitch(template: str, windows: List[CorrectedWindow]) -> str:
        """Join corrected windows, filling uncovered stretches from the template."""
        pieces: List[str] = []
        cursor = 0

        for cw in sorted(windows, key=lambda w: w.window):
            beg, end = cw.window
            if end < cursor:
                continue

            sequence = cw.sequence
            if beg > cursor:
                pieces.append(template[cursor:beg])
            elif beg < cursor:
                sequence = sequence[cursor - beg:]

            pieces.append(sequence)
            cursor = end + 1

        pieces.append(template[cursor:])
        return ''.join(pieces)

    def _extend(
        self,
        read: CorrectedRead,
        alignments: Sequence[Alignment],
        sequences: Mapping[str, str],
    ):
        """Extend both ends of *read* through the k-mers of its supporting sequences."""
        lp = self.link_params
        counts: Counter = Counter()
        for al in alignments:
            target = sequences[al.t_name]
            if al.reverse:
                target = reverse_complement(target)
            counts.update(count_kmers([target], lp.mer_size, lp.mer_size))

        read.sequence, read.extended_left = extend_left(
            counts, lp.mer_size, self.max_extension, read.sequence, lp.solid_threshold,
        )
        read.sequence, read.extended_right = extend_right(
            counts, lp.mer_size, self.max_extension, read.sequence, lp.solid_threshold,
        )


__all__ = [
    "PileParameters",
    "LinkParameters",
    "CorrectedWindow",
    "CorrectedRead",
    "PileCorrector",
]

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
