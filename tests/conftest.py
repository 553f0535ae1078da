#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PileWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from pileweaver.piles import Alignment
from pileweaver.utils.sequence_utils import reverse_complement


# True sequence of the corrected region; every 4-mer stem occurs once
TRUE_SEQUENCE = "ACGTTGCAATCCGAT"
# Long read with a substitution at position 7 (A -> G)
ERRONEOUS_READ = "ACGTTGCGATCCGAT"


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="pileweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def true_sequence():
    return TRUE_SEQUENCE


@pytest.fixture
def erroneous_read():
    return ERRONEOUS_READ


@pytest.fixture
def support_sequences():
    """Long read plus four accurate supporting reads (one on the '-' strand)."""
    return {
        "long_read": ERRONEOUS_READ,
        "support_1": TRUE_SEQUENCE,
        "support_2": TRUE_SEQUENCE,
        "support_3": TRUE_SEQUENCE,
        "support_rc": reverse_complement(TRUE_SEQUENCE),
    }


@pytest.fixture
def support_alignments(support_sequences):
    """Full-length alignments of every supporting read against the long read."""
    n = len(ERRONEOUS_READ)
    return [
        Alignment("long_read", 0, n - 1, n, name, 0, n - 1, n, reverse=name.endswith("_rc"))
        for name in support_sequences
        if name != "long_read"
    ]


@pytest.fixture
def support_fasta(support_sequences, temp_output_dir):
    """FASTA file holding the long read and its supporting reads."""
    path = temp_output_dir / "reads.fasta"
    path.write_text("".join(f">{name}\n{seq}\n" for name, seq in support_sequences.items()))
    return path


@pytest.fixture
def support_paf(support_alignments, temp_output_dir):
    """PAF file of the supporting alignments (exclusive ends)."""
    path = temp_output_dir / "overlaps.paf"
    lines = []
    for al in support_alignments:
        span = al.q_end - al.q_start + 1
        lines.append("\t".join(str(v) for v in (
            al.q_name, al.q_length, al.q_start, al.q_end + 1, al.strand,
            al.t_name, al.t_length, al.t_start, al.t_end + 1,
            span, span, 60,
        )))
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def small_config():
    """Configuration suited to the 15 bp fixture reads."""
    return {
        'piles': {'min_support': 2, 'window_size': 15, 'window_overlap': 0},
        'dbg': {
            'mer_size': 5, 'min_order': 4, 'solid_threshold': 2,
            'max_branches': 10, 'max_distance_ratio': 1.5, 'order_step': 1,
        },
        'extension': {'enabled': False, 'max_extension': 0},
        'output': {'line_width': 80, 'logging': {'level': 'WARNING', 'log_file': 'test.log'}},
    }

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
