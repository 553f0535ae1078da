#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PileWeaver v0.1.0

Tests for coverage computation, window partitioning and pile extraction.

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import random

import pytest

from pileweaver.piles.alignment_piles import (
    Alignment,
    get_coverages,
    get_alignment_piles_positions,
    get_alignment_pile_seq,
    get_alignment_piles,
)
from pileweaver.utils.sequence_utils import reverse_complement


def _al(q_start, q_end, q_length, t_start=None, t_end=None, t_length=None,
        t_name="target", reverse=False):
    """Alignment helper; target coordinates default to the query ones."""
    return Alignment(
        q_name="query",
        q_start=q_start,
        q_end=q_end,
        q_length=q_length,
        t_name=t_name,
        t_start=q_start if t_start is None else t_start,
        t_end=q_end if t_end is None else t_end,
        t_length=q_length if t_length is None else t_length,
        reverse=reverse,
    )


# ============================================================================
# ALIGNMENT RECORD
# ============================================================================

class TestAlignment:

    def test_strand(self):
        assert _al(0, 3, 10).strand == '+'
        assert _al(0, 3, 10, reverse=True).strand == '-'

    def test_query_end_past_length_rejected(self):
        with pytest.raises(ValueError):
            _al(0, 10, 10)

    def test_inverted_target_span_rejected(self):
        with pytest.raises(ValueError):
            _al(0, 5, 10, t_start=6, t_end=2)


# ============================================================================
# COVERAGE
# ============================================================================

class TestCoverages:

    def test_baseline_is_one(self):
        cov = get_coverages(5, [])
        assert list(cov) == [1, 1, 1, 1, 1]

    def test_inclusive_ranges(self):
        cov = get_coverages(6, [_al(1, 3, 6), _al(3, 5, 6)])
        assert list(cov) == [1, 2, 2, 3, 2, 2]

    def test_alignments_not_mutated(self):
        al = _al(0, 4, 6)
        get_coverages(6, [al])
        assert (al.q_start, al.q_end) == (0, 4)

    @pytest.mark.parametrize("seed", range(5))
    def test_random_alignments_length_and_floor(self, seed):
        rng = random.Random(seed)
        length = rng.randint(20, 200)
        alignments = []
        for _ in range(rng.randint(0, 30)):
            start = rng.randint(0, length - 1)
            alignments.append(_al(start, rng.randint(start, length - 1), length))

        cov = get_coverages(length, alignments)

        assert len(cov) == length
        assert cov.min() >= 1


# ============================================================================
# WINDOWS
# ============================================================================

class TestPilesPositions:

    def test_single_matching_read(self):
        """Template 'AAAACGTGGGG' with one full-length read."""
        positions = get_alignment_piles_positions(11, [_al(0, 10, 11)], 2, 4, 0)

        # Forward scan cuts 4 bp windows, backward scan adds the tail window
        assert positions == [(0, 3), (4, 7), (7, 10)]

    def test_overlapping_windows(self):
        positions = get_alignment_piles_positions(10, [_al(0, 9, 10)], 2, 4, 2)

        assert positions == [(0, 3), (2, 5), (4, 7), (6, 9)]

    def test_low_coverage_breaks_runs(self):
        alignments = [_al(0, 4, 12), _al(7, 11, 12)]
        positions = get_alignment_piles_positions(12, alignments, 2, 3, 0)

        assert positions == [(0, 2), (7, 9), (9, 11)]

    def test_no_window_long_enough(self):
        alignments = [_al(0, 2, 12), _al(5, 7, 12)]
        assert get_alignment_piles_positions(12, alignments, 2, 4, 0) == []

    def test_insufficient_support(self):
        assert get_alignment_piles_positions(12, [_al(0, 11, 12)], 3, 4, 0) == []

    def test_trailing_window_not_duplicated(self):
        # Coverage [2, 2, 2, 2, 1, 1]: both scans find (0, 3)
        positions = get_alignment_piles_positions(6, [_al(0, 3, 6)], 2, 4, 0)

        assert positions == [(0, 3)]

    def test_template_exactly_one_window(self):
        assert get_alignment_piles_positions(4, [_al(0, 3, 4)], 2, 4, 0) == [(0, 3)]

    @pytest.mark.parametrize("overlap", [-1, 4, 5])
    def test_invalid_overlap(self, overlap):
        with pytest.raises(ValueError):
            get_alignment_piles_positions(10, [_al(0, 9, 10)], 2, 4, overlap)

    @pytest.mark.parametrize("seed", range(10))
    def test_windows_are_long_and_supported(self, seed):
        rng = random.Random(seed)
        length = rng.randint(30, 300)
        alignments = []
        for _ in range(rng.randint(1, 25)):
            start = rng.randint(0, length - 1)
            alignments.append(_al(start, min(length - 1, start + rng.randint(0, 80)), length))
        min_support = rng.randint(1, 4)
        window_size = rng.randint(1, 20)
        overlap = rng.randint(0, window_size - 1)

        cov = get_coverages(length, alignments)
        positions = get_alignment_piles_positions(
            length, alignments, min_support, window_size, overlap,
        )

        for beg, end in positions:
            assert 0 <= beg <= end < length
            assert end - beg + 1 >= window_size
            assert all(cov[i] >= min_support for i in range(beg, end + 1))


# ============================================================================
# PILE SEQUENCES
# ============================================================================

QUERY = "ACGTACGGTCAT"   # 12 bp template
TARGET = "TTGCAGGCATCA"  # 12 bp supporting sequence


class TestPileSequences:

    def _store(self, target=TARGET):
        return {"query": QUERY, "target": target}

    def test_template_slice_first(self):
        pile = get_alignment_pile_seq([_al(0, 11, 12)], self._store(), 4, 7, 1)

        assert pile[0] == QUERY[4:8]
        assert len(pile[0]) == 4

    def test_window_inside_alignment(self):
        pile = get_alignment_pile_seq([_al(0, 11, 12)], self._store(), 4, 7, 1)

        assert pile == [QUERY[4:8], TARGET[4:8]]

    def test_window_past_template_is_empty(self):
        store = {"query": QUERY[:6], "target": TARGET}
        assert get_alignment_pile_seq([_al(0, 11, 12)], store, 2, 7, 1) == []

    def test_window_begins_before_alignment(self):
        al = _al(4, 11, 12, t_start=2, t_end=9, t_length=12)
        pile = get_alignment_pile_seq([al], self._store(), 0, 7, 1)

        # Target begin pushed left by 4 (clamped at 0), 8 bases kept
        assert pile[1] == TARGET[0:8]

    def test_window_ends_after_alignment(self):
        al = _al(0, 5, 12, t_start=3, t_end=8, t_length=10)
        pile = get_alignment_pile_seq([al], {"query": QUERY, "target": TARGET[:10]}, 2, 9, 1)

        # Target end pushed right to 9, slice starts 2 bases into the span
        assert pile[1] == TARGET[5:10]

    def test_window_wider_than_alignment(self):
        al = _al(3, 5, 12, t_start=2, t_end=4, t_length=10)
        pile = get_alignment_pile_seq([al], {"query": QUERY, "target": TARGET[:10]}, 0, 9, 1)

        assert pile[1] == TARGET[0:9]

    def test_reverse_strand_is_reverse_complemented(self):
        target = reverse_complement(QUERY)
        al = _al(0, 11, 12, reverse=True)
        pile = get_alignment_pile_seq([al], self._store(target), 2, 5, 1)

        assert pile == [QUERY[2:6], QUERY[2:6]]

    def test_reverse_strand_window_begins_before_alignment(self):
        al = _al(4, 11, 12, t_start=2, t_end=9, t_length=12, reverse=True)
        pile = get_alignment_pile_seq([al], self._store(), 0, 7, 1)

        # Target span remapped to 0-9 first, then reverse-complemented and cut
        assert pile[1] == reverse_complement(TARGET[0:10])[:8]
        assert pile[1] == "ATGCCTGC"

    def test_reverse_strand_window_ends_after_alignment(self):
        al = _al(0, 5, 12, t_start=3, t_end=8, t_length=10, reverse=True)
        pile = get_alignment_pile_seq([al], {"query": QUERY, "target": TARGET[:10]}, 2, 9, 1)

        assert pile[1] == reverse_complement(TARGET[3:10])[2:]
        assert pile[1] == "GCCTG"

    def test_non_intersecting_alignment_skipped(self):
        pile = get_alignment_pile_seq([_al(8, 11, 12)], self._store(), 0, 3, 1)
        assert pile == [QUERY[0:4]]

    def test_degenerate_target_span_skipped(self):
        # Shift of 5 runs past the 3 bp target span
        al = _al(0, 9, 12, t_start=0, t_end=2, t_length=12)
        pile = get_alignment_pile_seq([al], self._store(), 5, 8, 1)
        assert pile == [QUERY[5:9]]

    def test_short_fragments_dropped(self):
        al = _al(0, 5, 12, t_start=6, t_end=11, t_length=12)
        pile = get_alignment_pile_seq([al], self._store(), 3, 8, 4)

        # Fragment is clamped to the 3 bases left after the shift
        assert pile == [QUERY[3:9]]

    def test_pile_keeps_alignment_order_and_duplicates(self):
        store = {"query": QUERY, "a": TARGET, "b": QUERY}
        alignments = [_al(0, 11, 12, t_name="b"), _al(0, 11, 12, t_name="a"),
                      _al(0, 11, 12, t_name="b")]
        pile = get_alignment_pile_seq(alignments, store, 0, 3, 1)

        assert pile == [QUERY[:4], QUERY[:4], TARGET[:4], QUERY[:4]]


class TestAlignmentPiles:

    def test_end_to_end_single_read(self):
        template = "AAAACGTGGGG"
        store = {"query": template, "target": template}

        windows, piles = get_alignment_piles([_al(0, 10, 11)], 2, 4, 0, store, 4)

        assert windows == [(0, 3), (4, 7), (7, 10)]
        assert piles == [["AAAA", "AAAA"], ["CGTG", "CGTG"], ["GGGG", "GGGG"]]

    def test_no_alignments(self):
        assert get_alignment_piles([], 2, 4, 0, {}, 4) == ([], [])

    def test_windows_and_piles_paired(self, support_alignments, support_sequences):
        windows, piles = get_alignment_piles(
            support_alignments, 2, 5, 1, support_sequences, 5,
        )

        assert len(windows) == len(piles) > 0
        for (beg, end), pile in zip(windows, piles):
            assert pile[0] == support_sequences["long_read"][beg:end + 1]
            assert len(pile) == 1 + len(support_alignments)

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
