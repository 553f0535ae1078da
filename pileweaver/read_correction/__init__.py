#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Read Correction Module for PileWeaver.

Modules:
- dbg_linker.py: Implicit de Bruijn graph traversal (neighbour oracle,
  linear extension, branch-limited linking, order reduction)
- pile_corrector.py: Window-by-window correction of long reads from
  alignment piles

Main Components:
    - get_neighbours: Solid one-base extensions of a k-mer
    - extend_left / extend_right: Unambiguous path extension
    - link / link_with_order_reduction: Anchor-to-anchor path search
    - PileCorrector: Long-read corrector driven by alignment piles
"""

from .dbg_linker import (
    Direction,
    ExtensionResult,
    BranchCounter,
    LinkResult,
    get_neighbours,
    extend_left,
    extend_right,
    link,
    link_with_order_reduction,
)

from .pile_corrector import (
    PileParameters,
    LinkParameters,
    CorrectedWindow,
    CorrectedRead,
    PileCorrector,
)

__all__ = [
    # Graph traversal
    'Direction',
    'ExtensionResult',
    'BranchCounter',
    'LinkResult',
    'get_neighbours',
    'extend_left',
    'extend_right',
    'link',
    'link_with_order_reduction',

    # Pile correction
    'PileParameters',
    'LinkParameters',
    'CorrectedWindow',
    'CorrectedRead',
    'PileCorrector',
]
