"""
Search Module

This module implements the chess search. The primary algorithm is
iterative-deepening negamax with alpha-beta pruning, enhanced with a
transposition table for caching previously searched positions.

Key Components:
    - SearchEngine: Iterative deepening, limits, stop requests
    - find_best_move: One-shot root-level search function
    - SearchConstraints / SearchResult: Search limits and outcome
    - TranspositionTable: Zobrist-keyed position cache
    - order_moves: Heuristics to improve alpha-beta efficiency
"""

from bitblue.search.constraints import SearchConstraints, SearchResult, allocate_time
from bitblue.search.negamax import SearchEngine, find_best_move, order_moves, score_to_string
from bitblue.search.transposition import NodeType, TranspositionTable

__all__ = [
    'SearchEngine',
    'SearchConstraints',
    'SearchResult',
    'TranspositionTable',
    'NodeType',
    'find_best_move',
    'order_moves',
    'score_to_string',
    'allocate_time',
]
