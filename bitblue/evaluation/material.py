"""
Material-Only Evaluation

The simplest useful evaluator: the sum of piece values, nothing else.
Handy as a baseline and for tests where positional terms would only add
noise.
"""

from bitblue.board.bitboard import WHITE, popcount
from bitblue.board.position import Board
from bitblue.evaluation.base import Evaluator
from bitblue.evaluation.classical import PIECE_VALUES


class MaterialEvaluator(Evaluator):
    """Counts material in centipawns from the side to move's perspective."""

    def evaluate(self, board: Board) -> int:
        score = 0
        for kind, value in PIECE_VALUES.items():
            score += value * (popcount(board.pieces[kind]) - popcount(board.pieces[6 + kind]))
        return score if board.turn == WHITE else -score
