"""
Board Representation Module

This module holds the authoritative position state of the engine.

Key Components:
    - Board: 12 piece bitboards + derived occupancy, side to move, castling
      rights, en passant square, clocks and an incremental Zobrist hash
    - Move / UndoToken: immutable move values and the state apply() saves
    - PieceKind: closed set of piece kinds (pawn ... king)
    - bitboard: square helpers and precomputed attack tables
    - set_position / parse_uci_move: building positions from UCI text

Data Flow:
    FEN / 'startpos' + moves -> set_position() -> Board
    Board.apply(move) -> UndoToken -> Board.undo(token)
"""

from bitblue.board.bitboard import BLACK, WHITE
from bitblue.board.notation import parse_uci_move, set_position
from bitblue.board.position import STARTING_FEN, Board
from bitblue.board.types import Move, MoveFlag, PieceKind, UndoToken

__all__ = [
    'BLACK',
    'WHITE',
    'STARTING_FEN',
    'Board',
    'Move',
    'MoveFlag',
    'PieceKind',
    'UndoToken',
    'parse_uci_move',
    'set_position',
]
