"""
Utilities Module

This module provides utility functions for testing and benchmarking the
chess engine.

Key Components:
    - Perft suite: move generation verification against published counts
    - Bratko-Kopec test suite: 24 positions with known best moves

Success Metrics:
    - Perft: every count must match exactly
    - Bratko-Kopec: 8/24 at depth 5 (reasonable classical engine)
"""

from bitblue.utils.testing import (
    BRATKO_KOPEC_POSITIONS,
    PERFT_POSITIONS,
    evaluate_position,
    run_bratko_kopec,
    run_perft_suite,
)

__all__ = [
    'BRATKO_KOPEC_POSITIONS',
    'PERFT_POSITIONS',
    'evaluate_position',
    'run_bratko_kopec',
    'run_perft_suite',
]
