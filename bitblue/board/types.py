"""
Piece and Move Types

Pieces are a closed set of six kinds. A colored piece is encoded as a
single index so it can address the 12 piece bitboards directly:

    index = color * 6 + kind

     0: White Pawn      6: Black Pawn
     1: White Knight    7: Black Knight
     2: White Bishop    8: Black Bishop
     3: White Rook      9: Black Rook
     4: White Queen    10: Black Queen
     5: White King     11: Black King

Moves are immutable values. Besides the squares they carry the moved
piece kind, the captured kind and flags, so applying and undoing a move
never has to re-derive what happened.
"""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Optional

from bitblue.board.bitboard import square_name


class PieceKind(IntEnum):
    """The six kinds of chess piece."""
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def symbol(self) -> str:
        """Lower-case FEN letter of the kind."""
        return "pnbrqk"[self]


PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = PieceKind
PIECE_KINDS = tuple(PieceKind)
PROMOTION_KINDS = (QUEEN, ROOK, BISHOP, KNIGHT)

PIECE_SYMBOLS = "PNBRQKpnbrqk"
SYMBOL_TO_INDEX = {symbol: index for index, symbol in enumerate(PIECE_SYMBOLS)}


class MoveFlag(IntFlag):
    """Special-move flags carried by a Move."""
    NONE = 0
    CAPTURE = 1
    EN_PASSANT = 2
    CASTLE_KINGSIDE = 4
    CASTLE_QUEENSIDE = 8
    DOUBLE_PAWN_PUSH = 16


@dataclass(frozen=True)
class Move:
    """
    A chess move.

    Attributes:
        from_square: Origin square (0-63)
        to_square: Destination square (0-63)
        piece: Kind of the moving piece
        promotion: Kind the pawn promotes to, if any
        captured: Kind of the captured piece, if any
        flags: Special-move flags (capture, en passant, castling, double push)
    """
    from_square: int
    to_square: int
    piece: PieceKind
    promotion: Optional[PieceKind] = None
    captured: Optional[PieceKind] = None
    flags: MoveFlag = MoveFlag.NONE

    @property
    def is_capture(self) -> bool:
        return bool(self.flags & MoveFlag.CAPTURE)

    @property
    def is_en_passant(self) -> bool:
        return bool(self.flags & MoveFlag.EN_PASSANT)

    def uci(self) -> str:
        """Long algebraic notation, e.g. 'e2e4' or 'e7e8q'."""
        text = square_name(self.from_square) + square_name(self.to_square)
        if self.promotion is not None:
            text += self.promotion.symbol
        return text

    def __str__(self) -> str:
        return self.uci()


@dataclass(frozen=True)
class UndoToken:
    """
    State needed to reverse Board.apply().

    Everything that apply() cannot recompute from the move itself:
    castling rights, en-passant square, half-move clock and the hash.
    """
    move: Move
    castling_rights: int
    ep_square: Optional[int]
    halfmove_clock: int
    zobrist_hash: int
