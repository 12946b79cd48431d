"""
Move Notation and Position Setup

Helpers used by the UCI adapter to turn protocol text into engine objects:

    - parse_uci_move: 'e2e4' / 'e7e8q' -> legal Move of the current position
    - set_position: 'startpos' or a FEN plus a move list -> Board
"""

from typing import Iterable, Optional

from bitblue.board.bitboard import parse_square
from bitblue.board.position import STARTING_FEN, Board
from bitblue.board.types import PieceKind, Move
from bitblue.errors import IllegalMoveError

PROMOTION_SYMBOLS = {kind.symbol: kind for kind in PieceKind if kind not in (PieceKind.PAWN, PieceKind.KING)}


def parse_uci_move(board: Board, text: str, generator=None) -> Move:
    """
    Find the legal move matching a UCI move string.

    Args:
        board: Current position
        text: Move in long algebraic notation, e.g. 'e2e4', 'e7e8q'
        generator: MoveGenerator to use (default: a new one)

    Returns:
        The matching legal Move (with capture/castling flags filled in)

    Raises:
        ValueError: If the text is not a syntactically valid UCI move
        IllegalMoveError: If no legal move matches
    """
    if generator is None:
        from bitblue.movegen.generator import MoveGenerator
        generator = MoveGenerator()

    text = text.strip().lower()
    if len(text) not in (4, 5):
        raise ValueError(f"Invalid UCI move: {text!r}")
    from_sq = parse_square(text[0:2])
    to_sq = parse_square(text[2:4])
    promotion: Optional[PieceKind] = None
    if len(text) == 5:
        if text[4] not in PROMOTION_SYMBOLS:
            raise ValueError(f"Invalid promotion piece in {text!r}")
        promotion = PROMOTION_SYMBOLS[text[4]]

    for move in generator.generate_legal(board):
        if move.from_square == from_sq and move.to_square == to_sq and move.promotion == promotion:
            return move
    raise IllegalMoveError(f"Illegal move {text} in position {board.fen()}")


def set_position(fen_or_startpos: str = "startpos", move_list: Iterable[str] = (), generator=None) -> Board:
    """
    Build a Board from a UCI 'position' description.

    Args:
        fen_or_startpos: 'startpos' or a FEN string
        move_list: UCI move strings to play from that position
        generator: MoveGenerator used to validate moves

    Returns:
        The resulting Board, with repetition history for the played moves

    Raises:
        InvalidFenError: If the FEN is invalid
        IllegalMoveError / ValueError: If a move is malformed or illegal
    """
    fen = STARTING_FEN if fen_or_startpos.strip() == "startpos" else fen_or_startpos
    board = Board(fen)
    for text in move_list:
        board.apply(parse_uci_move(board, text, generator))
    return board
