"""
Evaluation Module

This module provides position evaluation functions for the chess engine.
The key design principle is that evaluators are SWAPPABLE - the search
algorithm should work with any evaluator that implements the base interface.

Key Components:
    - Evaluator (ABC): Abstract base class defining the evaluation interface
    - ClassicalEvaluator: Material + piece-square table evaluation
    - MaterialEvaluator: Material only baseline

Data Flow:
    Board -> evaluator.evaluate() -> int (centipawns)
                                     Positive = side to move is better
                                     Negative = side to move is worse
"""

from bitblue.evaluation.base import Evaluator, INFINITY, MATE_SCORE, MATE_THRESHOLD, is_mate_score
from bitblue.evaluation.classical import ClassicalEvaluator, PIECE_VALUES
from bitblue.evaluation.material import MaterialEvaluator

__all__ = [
    'Evaluator',
    'ClassicalEvaluator',
    'MaterialEvaluator',
    'PIECE_VALUES',
    'INFINITY',
    'MATE_SCORE',
    'MATE_THRESHOLD',
    'is_mate_score',
]
