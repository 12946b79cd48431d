"""
Classical Piece-Square Table Evaluation

This module implements a traditional chess evaluation function using:
    1. Material counting (piece values)
    2. Piece-Square Tables (positional bonuses/penalties)
    3. A bishop pair bonus

Evaluation Components:
    - Material: P=100, N=320, B=330, R=500, Q=900, K=0
    - Position: PST bonuses for each piece type
    - King: middlegame table, switched to the endgame table once
      non-pawn material on the board drops below 1400 centipawns
    - Bishop pair: +30 for a side owning two or more bishops

Symmetry:
    Black reads every table through the vertically mirrored square, so a
    color-flipped position gets exactly the negated White-view score.

Reference:
    Simplified Evaluation Function
    https://www.chessprogramming.org/Simplified_Evaluation_Function
"""

import numpy as np

from bitblue.board.bitboard import WHITE, iter_squares, popcount
from bitblue.board.position import Board
from bitblue.board.types import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, PieceKind
from bitblue.evaluation.base import Evaluator

#fmt: off
# ============================================================================
# Material Values (centipawns)
# ============================================================================
# These are standard values used in most chess engines

PIECE_VALUES = {
    PieceKind.PAWN: 100,
    PieceKind.KNIGHT: 320,
    PieceKind.BISHOP: 330,
    PieceKind.ROOK: 500,
    PieceKind.QUEEN: 900,
    PieceKind.KING: 0,
}

BISHOP_PAIR_BONUS = 30
ENDGAME_MATERIAL = 1400


# ============================================================================
# Piece-Square Tables (PSTs)
# ============================================================================
# Values are from White's perspective as printed on a diagram
# (row 0 = rank 8, row 7 = rank 1). square_table() turns them into
# square-indexed lists (a1 = 0).
#
# Convention: Higher values = better squares
# Units: Centipawns (added to material value)
# ============================================================================

# Pawn PST: Encourage central pawns, discourage edge pawns
PAWN_TABLE = np.array([
    [  0,   0,   0,   0,   0,   0,   0,   0],  # Rank 8 (promotion)
    [ 50,  50,  50,  50,  50,  50,  50,  50],  # Rank 7
    [ 10,  10,  20,  30,  30,  20,  10,  10],  # Rank 6
    [  5,   5,  10,  25,  25,  10,   5,   5],  # Rank 5
    [  0,   0,   0,  20,  20,   0,   0,   0],  # Rank 4
    [  5,  -5, -10,   0,   0, -10,  -5,   5],  # Rank 3
    [  5,  10,  10, -20, -20,  10,  10,   5],  # Rank 2
    [  0,   0,   0,   0,   0,   0,   0,   0],  # Rank 1
])

# Knight PST: "Knights on the rim are dim"
KNIGHT_TABLE = np.array([
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20,   0,   0,   0,   0, -20, -40],
    [-30,   0,  10,  15,  15,  10,   0, -30],
    [-30,   5,  15,  20,  20,  15,   5, -30],
    [-30,   0,  15,  20,  20,  15,   0, -30],
    [-30,   5,  10,  15,  15,  10,   5, -30],
    [-40, -20,   0,   5,   5,   0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
])

# Bishop PST: Prefer long diagonals, avoid corners
BISHOP_TABLE = np.array([
    [-20, -10, -10, -10, -10, -10, -10, -20],
    [-10,   0,   0,   0,   0,   0,   0, -10],
    [-10,   0,   5,  10,  10,   5,   0, -10],
    [-10,   5,   5,  10,  10,   5,   5, -10],
    [-10,   0,  10,  10,  10,  10,   0, -10],
    [-10,  10,  10,  10,  10,  10,  10, -10],
    [-10,   5,   0,   0,   0,   0,   5, -10],
    [-20, -10, -10, -10, -10, -10, -10, -20],
])

# Rook PST: Prefer 7th rank and central files
ROOK_TABLE = np.array([
    [  0,   0,   0,   0,   0,   0,   0,   0],
    [  5,  10,  10,  10,  10,  10,  10,   5],
    [ -5,   0,   0,   0,   0,   0,   0,  -5],
    [ -5,   0,   0,   0,   0,   0,   0,  -5],
    [ -5,   0,   0,   0,   0,   0,   0,  -5],
    [ -5,   0,   0,   0,   0,   0,   0,  -5],
    [ -5,   0,   0,   0,   0,   0,   0,  -5],
    [  0,   0,   0,   5,   5,   0,   0,   0],
])

# Queen PST: Avoid early development, prefer central control
QUEEN_TABLE = np.array([
    [-20, -10, -10,  -5,  -5, -10, -10, -20],
    [-10,   0,   0,   0,   0,   0,   0, -10],
    [-10,   0,   5,   5,   5,   5,   0, -10],
    [ -5,   0,   5,   5,   5,   5,   0,  -5],
    [  0,   0,   5,   5,   5,   5,   0,  -5],
    [-10,   5,   5,   5,   5,   5,   0, -10],
    [-10,   0,   5,   0,   0,   0,   0, -10],
    [-20, -10, -10,  -5,  -5, -10, -10, -20],
])

# King PST (Middlegame): Stay safe, prefer castled position
KING_MIDDLEGAME_TABLE = np.array([
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-20, -30, -30, -40, -40, -30, -30, -20],
    [-10, -20, -20, -20, -20, -20, -20, -10],
    [ 20,  20,   0,   0,   0,   0,  20,  20],
    [ 20,  30,  10,   0,   0,  10,  30,  20],
])

# King PST (Endgame): Centralize king, help with pawn promotion
KING_ENDGAME_TABLE = np.array([
    [-50, -40, -30, -20, -20, -30, -40, -50],
    [-30, -20, -10,   0,   0, -10, -20, -30],
    [-30, -10,  20,  30,  30,  20, -10, -30],
    [-30, -10,  30,  40,  40,  30, -10, -30],
    [-30, -10,  30,  40,  40,  30, -10, -30],
    [-30, -10,  20,  30,  30,  20, -10, -30],
    [-30, -30,   0,   0,   0,   0, -30, -30],
    [-50, -30, -30, -30, -30, -30, -30, -50],
])
#fmt: on


def square_table(table: np.ndarray) -> list:
    """
    Convert a diagram-ordered 8x8 table into a list indexed by square.

    Row 0 of the diagram is rank 8, so flipping it vertically puts rank 1
    first and flattening yields a1, b1, ..., h8.
    """
    return np.flipud(table).astype(int).flatten().tolist()


class ClassicalEvaluator(Evaluator):
    """
    Classical evaluation using material and piece-square tables.

    This evaluator combines:
        1. Material counting (sum of piece values)
        2. Positional evaluation (piece-square table bonuses)
        3. Simple endgame detection (different king table)
        4. Bishop pair bonus

    Attributes:
        piece_tables: Square-indexed PST per piece kind (White's view)
        endgame_threshold: Non-pawn material below which the endgame king
            table is used
    """

    def __init__(self):
        """Initialize the classical evaluator with piece-square tables."""
        self.piece_tables = {
            PAWN: square_table(PAWN_TABLE),
            KNIGHT: square_table(KNIGHT_TABLE),
            BISHOP: square_table(BISHOP_TABLE),
            ROOK: square_table(ROOK_TABLE),
            QUEEN: square_table(QUEEN_TABLE),
        }
        self.king_middlegame = square_table(KING_MIDDLEGAME_TABLE)
        self.king_endgame = square_table(KING_ENDGAME_TABLE)

        self.endgame_threshold = ENDGAME_MATERIAL

    def is_endgame(self, board: Board) -> bool:
        """
        Detect if position is in endgame phase.

        Simple heuristic: Endgame if the non-pawn material of both sides
        together is below a rook + queen (1400 centipawns).
        """
        material = 0
        for color in (0, 1):
            for kind in (KNIGHT, BISHOP, ROOK, QUEEN):
                material += popcount(board.pieces[color * 6 + kind]) * PIECE_VALUES[kind]
        return material < self.endgame_threshold

    def evaluate(self, board: Board) -> int:
        """
        Evaluate position using material + PST.

        Args:
            board: Position to evaluate

        Returns:
            int: Evaluation in centipawns (side to move's perspective)
        """
        king_table = self.king_endgame if self.is_endgame(board) else self.king_middlegame

        score = 0
        for index, bb in enumerate(board.pieces):
            if not bb:
                continue
            kind = index % 6
            table = king_table if kind == KING else self.piece_tables[kind]
            value = PIECE_VALUES[kind]

            if index < 6:
                for sq in iter_squares(bb):
                    score += value + table[sq]
            else:
                # Black reads the table through the mirrored square
                for sq in iter_squares(bb):
                    score -= value + table[sq ^ 56]

        if popcount(board.pieces[BISHOP]) >= 2:
            score += BISHOP_PAIR_BONUS
        if popcount(board.pieces[6 + BISHOP]) >= 2:
            score -= BISHOP_PAIR_BONUS

        return score if board.turn == WHITE else -score
