#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Core I/O module for PileWeaver.

Consolidated module containing:
- Core read data structure (SeqRead)
- FASTA file I/O operations
- SequenceStore: read-only name -> sequence lookup used by the pile extractor
- PAF alignment parsing into Alignment records

This module handles reading and writing sequences; everything past this
layer works on in-memory strings and Alignment records.
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import logging
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Union

from Bio import SeqIO

from ..piles.alignment_piles import Alignment

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 2: CORE READ DATA STRUCTURE
# =============================================================================

@dataclass
class SeqRead:
    """
    Sequencing read.

    Attributes:
        id: Read identifier
        sequence: DNA sequence (upper-cased)
        metadata: Additional metadata (FASTA description)
    """
    id: str
    sequence: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.sequence = self.sequence.upper()

    @property
    def length(self) -> int:
        """Get read length."""
        return len(self.sequence)

    def __len__(self) -> int:
        return self.length


# =============================================================================
# SECTION 3: FILE HELPERS
# =============================================================================

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """
    Check if file is gzip compressed.

    Args:
        filepath: Path to file

    Returns:
        True if file is gzipped
    """
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        return gzip.open(filepath, 'rt' if 'r' in mode else 'wt')
    return open(filepath, mode)


# =============================================================================
# SECTION 4: FASTA FILE I/O
# =============================================================================

def read_fasta(
    filepath: Union[str, Path],
    min_length: int = 0,
) -> Iterator[SeqRead]:
    """
    Read FASTA file and yield SeqRead objects.

    Args:
        filepath: Path to FASTA file (can be gzipped)
        min_length: Minimum sequence length filter

    Yields:
        SeqRead objects
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"FASTA file not found: {filepath}")

    with open_file(filepath) as handle:
        for record in SeqIO.parse(handle, "fasta"):
            sequence = str(record.seq)
            if len(sequence) < min_length:
                continue

            yield SeqRead(
                id=record.id,
                sequence=sequence,
                metadata={'description': record.description},
            )


def write_fasta(
    reads: Iterable[SeqRead],
    filepath: Union[str, Path],
    line_width: int = 80,
) -> int:
    """
    Write SeqRead objects to FASTA file.

    Args:
        reads: Iterable of SeqRead objects
        filepath: Output FASTA file path (.gz to compress)
        line_width: Number of bases per line (0 = no wrapping)

    Returns:
        Number of sequences written
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open_file(filepath, 'w') as handle:
        for read in reads:
            handle.write(f">{read.id}\n")

            if line_width > 0:
                for i in range(0, len(read.sequence), line_width):
                    handle.write(read.sequence[i:i + line_width] + '\n')
            else:
                handle.write(read.sequence + '\n')

            count += 1

    return count


# =============================================================================
# SECTION 5: SEQUENCE STORE
# =============================================================================

class SequenceStore(Mapping):
    """
    Read-only mapping from sequence name to nucleotide string.

    Populated once (from FASTA files or a dictionary) and then only read,
    so it can be shared by every pile of every read.
    """

    def __init__(self, sequences: Optional[Dict[str, str]] = None):
        self._sequences: Dict[str, str] = {
            name: seq.upper() for name, seq in (sequences or {}).items()
        }

    @classmethod
    def from_fasta(cls, *filepaths: Union[str, Path]) -> 'SequenceStore':
        """
        Load every record of one or more FASTA files.

        Later files override earlier ones on duplicate names.
        """
        sequences: Dict[str, str] = {}
        for filepath in filepaths:
            for read in read_fasta(filepath):
                sequences[read.id] = read.sequence
            logger.info("Loaded %s (%d sequences in store)", filepath, len(sequences))
        return cls(sequences)

    def __getitem__(self, name: str) -> str:
        try:
            return self._sequences[name]
        except KeyError:
            raise KeyError(f"Sequence not found in store: {name}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._sequences)

    def __len__(self) -> int:
        return len(self._sequences)

    def __repr__(self) -> str:
        return f"SequenceStore({len(self)} sequences)"


# =============================================================================
# SECTION 6: PAF ALIGNMENTS
# =============================================================================

PAF_MIN_COLUMNS = 12


def parse_paf_line(line: str) -> Alignment:
    """
    Parse one PAF record.

    PAF coordinates are 0-based with exclusive ends; the returned Alignment
    uses inclusive ends.

    Args:
        line: Tab-separated PAF line

    Returns:
        Alignment of the target (column 6) against the query (column 1)
    """
    parts = line.rstrip("\n").split("\t")
    if len(parts) < PAF_MIN_COLUMNS:
        raise ValueError(
            f"PAF record has {len(parts)} columns, expected at least {PAF_MIN_COLUMNS}"
        )

    q_name, q_len, q_start, q_end, strand, t_name, t_len, t_start, t_end = parts[:9]
    if strand not in ('+', '-'):
        raise ValueError(f"Invalid PAF strand: {strand!r}")

    return Alignment(
        q_name=q_name,
        q_start=int(q_start),
        q_end=int(q_end) - 1,
        q_length=int(q_len),
        t_name=t_name,
        t_start=int(t_start),
        t_end=int(t_end) - 1,
        t_length=int(t_len),
        reverse=strand == '-',
    )


def read_paf(filepath: Union[str, Path]) -> List[Alignment]:
    """
    Read every alignment of a PAF file (can be gzipped).

    Args:
        filepath: Path to PAF file

    Returns:
        Alignments in file order
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"PAF file not found: {filepath}")

    alignments: List[Alignment] = []
    with open_file(filepath) as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                alignments.append(parse_paf_line(line))
            except ValueError as e:
                raise ValueError(f"{filepath}:{line_number}: {e}") from e

    logger.info("Loaded %d alignments from %s", len(alignments), filepath)
    return alignments


def group_alignments_by_query(alignments: Iterable[Alignment]) -> Dict[str, List[Alignment]]:
    """
    Group alignments by query read, keeping input order within each group.

    Returns:
        Ordered dict of query name -> alignments
    """
    groups: Dict[str, List[Alignment]] = OrderedDict()
    for al in alignments:
        groups.setdefault(al.q_name, []).append(al)
    return groups


__all__ = [
    "SeqRead",
    "is_gzipped",
    "open_file",
    "read_fasta",
    "write_fasta",
    "SequenceStore",
    "parse_paf_line",
    "read_paf",
    "group_alignments_by_query",
]
