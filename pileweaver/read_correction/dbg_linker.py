#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
PileWeaver v0.1.0

Implicit de Bruijn graph traversal over a pile's k-mer counts.
- The graph is never materialised: nodes are the solid k-mers of a count
  table, edges are (k-1)-overlaps, queried through get_neighbours()
- Linear extension of a sequence end while the path stays unambiguous
- Branch-limited linking of a source anchor to a target anchor with
  depth-first backtracking at branch points
- Order reduction: retry the link at successively smaller k

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Mapping, NamedTuple, Optional, Tuple

from pileweaver.utils.sequence_utils import NUCLEOTIDES

logger = logging.getLogger(__name__)


# ============================================================================
# Core Data Structures
# ============================================================================

class Direction(Enum):
    """Side of a k-mer on which a base is added."""
    LEFT = "left"    # prepend a base, drop the last one
    RIGHT = "right"  # append a base, drop the first one


class ExtensionResult(NamedTuple):
    """Extended sequence and the number of bases added."""
    sequence: str
    distance: int


@dataclass
class BranchCounter:
    """
    Branches explored by one linking search.

    Shared by every branch point of a single search; never share one
    counter between two searches.
    """
    count: int = 0

    def increment(self) -> int:
        self.count += 1
        return self.count


@dataclass
class LinkResult:
    """
    Outcome of a linking attempt.

    ``missing_part`` holds the path from the source through the target
    when ``found`` is True, and is empty otherwise.
    """
    found: bool
    missing_part: str = ""
    order: Optional[int] = None  # k-mer order that closed the link

    def __bool__(self) -> bool:
        return self.found


# ============================================================================
# Neighbour oracle
# ============================================================================

def get_neighbours(
    kmer: str,
    mer_size: int,
    direction: Direction,
    count_table: Mapping[str, int],
    solid_threshold: int,
) -> List[str]:
    """
    Solid one-base extensions of *kmer*.

    Args:
        kmer: Current k-mer (length mer_size)
        mer_size: K-mer order
        direction: Direction.RIGHT to append, Direction.LEFT to prepend
        count_table: K-mer counts; absent k-mers count as 0
        solid_threshold: Minimum count for a neighbour to be kept

    Returns:
        Neighbour k-mers sorted by descending count (ties keep A, C, G, T order)
    """
    if direction is Direction.RIGHT:
        stem = kmer[1:]
        candidates = [stem + base for base in NUCLEOTIDES]
    else:
        stem = kmer[:mer_size - 1]
        candidates = [base + stem for base in NUCLEOTIDES]

    neighbours = [n for n in candidates if count_table.get(n, 0) >= solid_threshold]

    return sorted(neighbours, key=lambda n: count_table.get(n, 0), reverse=True)


# ============================================================================
# Linear extension
# ============================================================================

def extend_left(
    count_table: Mapping[str, int],
    order: int,
    max_distance: int,
    sequence: str,
    solid_threshold: int,
) -> ExtensionResult:
    """
    Prepend bases to *sequence* while its leftmost k-mer has exactly one
    solid neighbour and fewer than *max_distance* bases were added.
    """
    distance = 0
    if len(sequence) < order:
        return ExtensionResult(sequence, distance)

    neighbours = get_neighbours(sequence[:order], order, Direction.LEFT,
                                count_table, solid_threshold)

    # Stop at a dead end, a branching path or the distance cap
    while len(neighbours) == 1 and distance < max_distance:
        sequence = neighbours[0][0] + sequence
        distance += 1
        neighbours = get_neighbours(sequence[:order], order, Direction.LEFT,
                                    count_table, solid_threshold)

    return ExtensionResult(sequence, distance)


def extend_right(
    count_table: Mapping[str, int],
    order: int,
    max_distance: int,
    sequence: str,
    solid_threshold: int,
) -> ExtensionResult:
    """
    Append bases to *sequence* while its rightmost k-mer has exactly one
    solid neighbour and fewer than *max_distance* bases were added.
    """
    distance = 0
    if len(sequence) < order:
        return ExtensionResult(sequence, distance)

    neighbours = get_neighbours(sequence[-order:], order, Direction.RIGHT,
                                count_table, solid_threshold)

    while len(neighbours) == 1 and distance < max_distance:
        sequence = sequence + neighbours[0][order - 1]
        distance += 1
        neighbours = get_neighbours(sequence[-order:], order, Direction.RIGHT,
                                    count_table, solid_threshold)

    return ExtensionResult(sequence, distance)


# ============================================================================
# Branch-limited linking
# ============================================================================

@dataclass
class _BranchPoint:
    """A branching k-mer whose candidates are still being tried."""
    order: int
    extended: str
    distance: int
    candidates: Iterator[str]


def _follow_unambiguous(
    count_table: Mapping[str, int],
    target_anchor: str,
    order: int,
    distance: int,
    path: str,
    max_distance: int,
    solid_threshold: int,
) -> Tuple[bool, str, int, List[str]]:
    """
    Walk from the end of *path* while exactly one solid neighbour exists.

    Returns (found, extended path, distance, neighbours of the last k-mer).
    """
    found = path[-order:] == target_anchor
    extended = path

    neighbours = get_neighbours(extended[-order:], order, Direction.RIGHT,
                                count_table, solid_threshold)

    while not found and len(neighbours) == 1 and distance <= max_distance:
        candidate = neighbours[0]
        extended += candidate[order - 1]
        found = candidate == target_anchor
        if not found:
            distance += 1
            neighbours = get_neighbours(extended[-order:], order, Direction.RIGHT,
                                        count_table, solid_threshold)

    return found, extended, distance, neighbours


def link(
    count_table: Mapping[str, int],
    source_seed: str,
    target_seed: str,
    order: int,
    branch_counter: BranchCounter,
    distance: int,
    path: Optional[str],
    base_order: int,
    max_distance: int,
    max_branches: int,
    solid_threshold: int,
    min_order: int,
) -> LinkResult:
    """
    Search the implicit graph for a path from the end of *path* to the
    first *order* bases of *target_seed*.

    Unambiguous stretches are followed directly. At a branch point every
    neighbour is tried depth-first in descending-count order, continuing at
    *base_order*; the first success wins. Branch points are kept on an
    explicit stack. A branch is abandoned when the order drops below
    *min_order*, the branch budget is exceeded or the accumulated distance
    passes *max_distance*.

    Args:
        count_table: K-mer counts of the pile (all orders)
        source_seed: Source anchor region; used as the path when *path* is None
        target_seed: Target anchor region; its first *order* bases are the goal
        order: Current k-mer order
        branch_counter: Branch counter owned by this search
        distance: Bases added so far
        path: Sequence built so far (ends with the current source anchor)
        base_order: Order used past the first branch point
        max_distance: Maximum number of bases the search may add
        max_branches: Branch budget
        solid_threshold: Minimum k-mer count for a solid k-mer
        min_order: Smallest allowed order

    Returns:
        LinkResult; on success ``missing_part`` is the path followed by the
        target seed past its first *order* bases.
    """
    def exhausted(current_order: int, current_distance: int) -> bool:
        return (current_order < min_order or branch_counter.count > max_branches
                or current_distance > max_distance)

    if exhausted(order, distance):
        return LinkResult(False)

    if path is None:
        path = source_seed

    found, extended, distance, neighbours = _follow_unambiguous(
        count_table, target_seed[:order], order, distance, path,
        max_distance, solid_threshold,
    )
    if found:
        return LinkResult(True, extended + target_seed[order:], order)

    stack: List[_BranchPoint] = []
    if len(neighbours) > 1 and distance <= max_distance:
        stack.append(_BranchPoint(order, extended, distance, iter(neighbours)))

    # Depth-first backtracking over the branch points
    while stack:
        point = stack[-1]
        candidate = next(point.candidates, None)
        if candidate is None:
            stack.pop()
            continue

        branch_path = point.extended + candidate[point.order - 1]
        if candidate == target_seed[:point.order]:
            return LinkResult(True, branch_path + target_seed[point.order:], point.order)

        branch_counter.increment()
        if exhausted(base_order, point.distance + 1):
            continue

        found, extended, distance, neighbours = _follow_unambiguous(
            count_table, target_seed[:base_order], base_order, point.distance + 1,
            branch_path, max_distance, solid_threshold,
        )
        if found:
            return LinkResult(True, extended + target_seed[base_order:], base_order)

        if len(neighbours) > 1 and distance <= max_distance:
            stack.append(_BranchPoint(base_order, extended, distance, iter(neighbours)))

    return LinkResult(False)


def link_with_order_reduction(
    count_table: Mapping[str, int],
    source: str,
    target: str,
    base_order: int,
    min_order: int,
    max_distance: int,
    max_branches: int,
    solid_threshold: int,
    order_step: int = 1,
) -> LinkResult:
    """
    Link *source* to *target*, retrying at smaller k-mer orders.

    Each attempt gets its own branch counter. Smaller orders tolerate more
    sequencing errors but yield a denser graph.

    Returns:
        The first successful LinkResult (with ``order`` set), or a failed one.
    """
    if order_step <= 0:
        raise ValueError(f"order_step must be > 0, got {order_step}")

    order = base_order
    while order >= min_order:
        if len(source) >= order and len(target) >= order:
            counter = BranchCounter()
            result = link(
                count_table, source, target, order, counter, 0, source, base_order,
                max_distance, max_branches, solid_threshold, min_order,
            )
            if result.found:
                logger.debug("Linked at k=%d after %d branches", order, counter.count)
                return result
            logger.debug("No link at k=%d (%d branches explored)", order, counter.count)
        order -= order_step

    return LinkResult(False)


__all__ = [
    "Direction",
    "ExtensionResult",
    "BranchCounter",
    "LinkResult",
    "get_neighbours",
    "extend_left",
    "extend_right",
    "link",
    "link_with_order_reduction",
]

# PileWeaver v0.1.0
# Any usage is subject to this software's license.
