"""
PileWeaver v0.1.0

Sequence utility functions for PileWeaver.

Provides k-mer extraction, k-mer counting over piles and reverse
complementation.
"""

from collections import Counter
from typing import Iterable, List

NUCLEOTIDES = "ACGT"


def extract_kmers(sequence: str, k: int) -> List[str]:
    """
    Extract all k-mers from a sequence.

    Args:
        sequence: DNA sequence string
        k: K-mer size

    Returns:
        List of k-mer strings

    Example:
        >>> extract_kmers("ATCGATCG", 3)
        ['ATC', 'TCG', 'CGA', 'GAT', 'ATC', 'TCG']
    """
    if k <= 0 or k > len(sequence):
        return []

    sequence = sequence.upper()
    return [sequence[i:i + k] for i in range(len(sequence) - k + 1)]


def count_kmers(sequences: Iterable[str], min_k: int, max_k: int) -> Counter:
    """
    Count every k-mer of every order in [min_k, max_k] over *sequences*.

    A single table serves all orders tried during order reduction, since
    k-mers of different lengths never collide. K-mers holding anything
    other than A/C/G/T are skipped. Missing keys read as 0.

    Args:
        sequences: Pile sequences (template first, then aligned fragments)
        min_k: Smallest k-mer order to count
        max_k: Largest k-mer order to count

    Returns:
        Counter mapping k-mer -> occurrences

    Example:
        >>> counts = count_kmers(["ACGTA"], 4, 4)
        >>> counts["ACGT"], counts["TTTT"]
        (1, 0)
    """
    if min_k <= 0 or min_k > max_k:
        raise ValueError(f"Invalid k-mer order range: [{min_k}, {max_k}]")

    counts: Counter = Counter()
    for sequence in sequences:
        for k in range(min_k, max_k + 1):
            for kmer in extract_kmers(sequence, k):
                if all(base in NUCLEOTIDES for base in kmer):
                    counts[kmer] += 1

    return counts


def reverse_complement(sequence: str) -> str:
    """
    Generate reverse complement of DNA sequence.

    Args:
        sequence: DNA sequence string

    Returns:
        Reverse complement sequence

    Example:
        >>> reverse_complement("ATCG")
        'CGAT'
    """
    complement_map = {
        'A': 'T', 'T': 'A',
        'G': 'C', 'C': 'G',
        'N': 'N',
        'a': 't', 't': 'a',
        'g': 'c', 'c': 'g',
        'n': 'n'
    }

    return ''.join(complement_map.get(base, base) for base in reversed(sequence))


__all__ = [
    'NUCLEOTIDES',
    'extract_kmers',
    'count_kmers',
    'reverse_complement',
]

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
