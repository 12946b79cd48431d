"""
python-chess Interoperability

Converts between the engine's Board and python-chess's chess.Board. The
conversion goes through FEN, so only the position itself crosses over (not
the repetition history).

python-chess is used as an independent reference: the perft tool and the
test-suite compare our legal moves against chess.Board.legal_moves.
"""

import chess

from bitblue.board.position import Board


def to_python_chess(board: Board) -> chess.Board:
    """Convert a Board to a python-chess Board."""
    return chess.Board(board.fen())


def from_python_chess(board: chess.Board) -> Board:
    """Convert a python-chess Board to a Board."""
    return Board(board.fen(en_passant="fen"))
