"""
Move Generation Module

Enumerates exactly the legal moves of a position and reports game outcomes.

Key Components:
    - MoveGenerator: pseudo-legal generation + legality filter, perft/divide
    - Outcome: checkmate, stalemate and the draw rules
    - perft: leaf-count shortcut used for move generator verification
"""

from bitblue.movegen.generator import MoveGenerator, Outcome, perft

__all__ = ['MoveGenerator', 'Outcome', 'perft']
