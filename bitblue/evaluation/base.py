"""
Abstract Evaluator Interface

This module defines the abstract base class for all position evaluators.
By defining a common interface, we can swap between
evaluators without modifying the search algorithm.

Key Principles:
    1. Evaluators are stateless and deterministic
    2. evaluate() returns centipawns from the SIDE TO MOVE's perspective
       (negamax convention: higher is better for whoever is to move)
    3. evaluate() is static and cheap: it is called at every leaf
    4. Terminal positions are scored by evaluate_terminal(), not evaluate()

Convention:
    - Material values in centipawns (1/100th of a pawn, pawn = 100, queen = 900)
    - Return 0 for perfectly equal positions
    - Mate scores are +/-(MATE_SCORE - ply), so shorter mates score higher
"""

from abc import ABC, abstractmethod
from typing import Optional

from bitblue.board.bitboard import WHITE
from bitblue.board.position import Board
from bitblue.movegen.generator import MoveGenerator

# Evaluation constants
INFINITY = 100000  # Bound for alpha-beta windows
MATE_SCORE = 50000  # Base score for checkmate
MAX_PLY = 1000
MATE_THRESHOLD = MATE_SCORE - MAX_PLY  # Scores beyond this are forced mates

_generator = MoveGenerator()


def is_mate_score(score: int) -> bool:
    return abs(score) > MATE_THRESHOLD


class Evaluator(ABC):
    """
    Abstract base class for position evaluation.

    All evaluator implementations must inherit from this class and implement
    the evaluate() method. This ensures compatibility with the search algorithm.

    Methods:
        evaluate(board): Returns position evaluation in centipawns
        evaluate_white(board): Same score seen from White
        evaluate_terminal(board, ply): Mate/draw score or None
    """

    @abstractmethod
    def evaluate(self, board: Board) -> int:
        """
        Evaluate a position from the side to move's perspective.

        Args:
            board: Position to evaluate

        Returns:
            int: Evaluation in centipawns (positive = good for the mover)
        """

    def evaluate_white(self, board: Board) -> int:
        """Evaluation from White's perspective."""
        score = self.evaluate(board)
        return score if board.turn == WHITE else -score

    def is_draw(self, board: Board) -> bool:
        """
        Check if position is a draw by rule.

        Helper method to detect draws that don't require evaluation:
            - Stalemate
            - Insufficient material
            - Fifty-move rule
            - Threefold repetition

        Args:
            board: Position to check

        Returns:
            bool: True if position is drawn, False otherwise
        """
        return (
            board.has_insufficient_material()
            or board.is_fifty_moves()
            or board.is_repetition(3)
            or _generator.is_stalemate(board)
        )

    def evaluate_terminal(self, board: Board, ply_from_root: int = 0) -> Optional[int]:
        """
        Evaluate terminal positions (checkmate, stalemate, draw).

        This is a helper method that search algorithms can call to
        know when they can stop searching.

        Args:
            board: Position to check
            ply_from_root: Distance from root (for mate distance calculation)

        Returns:
            int: Evaluation from the mover's view if terminal position
            None: If position is not terminal
        """
        if not _generator.has_legal_move(board):
            if board.is_in_check():
                # The side to move is mated; prefer faster mates
                return -(MATE_SCORE - ply_from_root)
            return 0

        if board.has_insufficient_material() or board.is_fifty_moves() or board.is_repetition(3):
            return 0

        return None

    def __repr__(self) -> str:
        """String representation of evaluator."""
        return f"{self.__class__.__name__}()"
