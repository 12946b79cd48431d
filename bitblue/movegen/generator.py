"""
Legal Move Generation

Moves are produced in two stages:

1. Pseudo-legal generation, per piece kind in a fixed order (pawn, knight,
   bishop, rook, queen, king) and origin squares ascending. Leapers use the
   static attack tables, sliders use ray attacks with first-blocker lookup.
   Pawns cover single and double pushes, captures, en passant and the four
   promotion choices (one Move each).

2. Legality filtering. A move is legal if the mover's king is not attacked
   after a trial apply()/undo(). Moves of a piece that does not stand on any
   line through its own king cannot expose the king, so when the side to
   move is not in check those are accepted without the trial. King moves and
   en passant captures always get the trial, which also catches the rank pin
   through both the capturing and the captured pawn.

Castling is checked explicitly: the right must be present, the squares
between king and rook empty, and the king's start, transit and destination
squares unattacked.

Generation is deterministic: the same Board always yields the same moves in
the same order.

References:
    - Move Generation: https://www.chessprogramming.org/Move_Generation
    - Perft Results: https://www.chessprogramming.org/Perft_Results
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional

from bitblue.board.bitboard import (
    B1, B8, BLACK, C1, C8, D1, D8, E1, E8, F1, F8, G1, G8, KING_ATTACKS,
    KNIGHT_ATTACKS, PAWN_ATTACKS, RANK_2, RANK_7, RAYS, WHITE, bishop_attacks,
    iter_squares, lsb, queen_attacks, rook_attacks,
)
from bitblue.board.position import (
    BLACK_KINGSIDE, BLACK_QUEENSIDE, BOTH, WHITE_KINGSIDE, WHITE_QUEENSIDE, Board,
)
from bitblue.board.types import (
    BISHOP, KING, KNIGHT, PAWN, PIECE_KINDS, PROMOTION_KINDS, ROOK,
    Move, MoveFlag,
)

# Every square on a rank, file or diagonal through a square (empty board)
LINES_THROUGH = [
    RAYS[0][sq] | RAYS[1][sq] | RAYS[2][sq] | RAYS[3][sq]
    | RAYS[4][sq] | RAYS[5][sq] | RAYS[6][sq] | RAYS[7][sq]
    for sq in range(64)
]

# (right, king from, king to, squares that must be empty, squares that must be safe, flag)
CASTLING_MOVES = {
    WHITE: (
        (WHITE_KINGSIDE, E1, G1, (F1, G1), (E1, F1, G1), MoveFlag.CASTLE_KINGSIDE),
        (WHITE_QUEENSIDE, E1, C1, (B1, C1, D1), (E1, D1, C1), MoveFlag.CASTLE_QUEENSIDE),
    ),
    BLACK: (
        (BLACK_KINGSIDE, E8, G8, (F8, G8), (E8, F8, G8), MoveFlag.CASTLE_KINGSIDE),
        (BLACK_QUEENSIDE, E8, C8, (B8, C8, D8), (E8, D8, C8), MoveFlag.CASTLE_QUEENSIDE),
    ),
}


class Outcome(Enum):
    """Why a game has ended."""
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient material"
    FIFTY_MOVES = "fifty-move rule"
    THREEFOLD_REPETITION = "threefold repetition"

    @property
    def is_draw(self) -> bool:
        return self is not Outcome.CHECKMATE


class MoveGenerator:
    """
    Legal move generator over a Board.

    The generator is stateless; one instance can serve any number of boards.
    """

    def generate_pseudo_legal(self, board: Board) -> List[Move]:
        """All pseudo-legal moves (may leave the own king in check)."""
        return list(self._pseudo_legal(board))

    def generate_legal(self, board: Board) -> List[Move]:
        """
        All legal moves for the side to move.

        Args:
            board: Position to generate moves for (restored before returning)

        Returns:
            List of legal moves in deterministic order
        """
        return list(self._legal(board))

    def has_legal_move(self, board: Board) -> bool:
        """True if the side to move has at least one legal move."""
        for _ in self._legal(board):
            return True
        return False

    def is_checkmate(self, board: Board) -> bool:
        return board.is_in_check() and not self.has_legal_move(board)

    def is_stalemate(self, board: Board) -> bool:
        return not board.is_in_check() and not self.has_legal_move(board)

    def outcome(self, board: Board) -> Optional[Outcome]:
        """
        Game outcome of the position, or None if play continues.

        Checkmate and stalemate take precedence over the draw rules, so a
        mate delivered on the hundredth quiet ply is still a mate.
        """
        if not self.has_legal_move(board):
            return Outcome.CHECKMATE if board.is_in_check() else Outcome.STALEMATE
        if board.has_insufficient_material():
            return Outcome.INSUFFICIENT_MATERIAL
        if board.is_fifty_moves():
            return Outcome.FIFTY_MOVES
        if board.is_repetition(3):
            return Outcome.THREEFOLD_REPETITION
        return None

    # ========================================================================
    # Perft
    # ========================================================================

    def perft(self, board: Board, depth: int) -> int:
        """
        Count leaf nodes of the legal move tree to a fixed depth.

        Args:
            board: Root position (restored before returning)
            depth: Depth in plies

        Returns:
            Number of leaf positions
        """
        if depth <= 0:
            return 1
        moves = self.generate_legal(board)
        if depth == 1:
            return len(moves)
        nodes = 0
        for move in moves:
            token = board.apply(move)
            try:
                nodes += self.perft(board, depth - 1)
            finally:
                board.undo(token)
        return nodes

    def divide(self, board: Board, depth: int) -> Dict[str, int]:
        """Perft split by root move (UCI string -> leaf count)."""
        counts = {}
        for move in self.generate_legal(board):
            token = board.apply(move)
            try:
                counts[move.uci()] = self.perft(board, depth - 1)
            finally:
                board.undo(token)
        return counts

    # ========================================================================
    # Internals
    # ========================================================================

    def _legal(self, board: Board) -> Iterator[Move]:
        us = board.turn
        king_sq = lsb(board.pieces[us * 6 + KING])
        in_check = board.is_in_check(us)
        lines = LINES_THROUGH[king_sq]

        for move in self._pseudo_legal(board):
            if (
                not in_check
                and move.piece != KING
                and not move.flags & MoveFlag.EN_PASSANT
                and not lines >> move.from_square & 1
            ):
                yield move
                continue
            token = board.apply(move)
            legal = not board.is_in_check(us)
            board.undo(token)
            if legal:
                yield move

    def _pseudo_legal(self, board: Board) -> Iterator[Move]:
        us = board.turn
        them = us ^ 1
        pieces = board.pieces
        squares = board.squares
        occupied = board.occupancy[BOTH]
        own = board.occupancy[us]
        # The enemy king is never a capture target
        enemy = board.occupancy[them] & ~pieces[them * 6 + KING]
        targets_mask = ~own & ~pieces[them * 6 + KING]

        yield from self._pawn_moves(board, us, occupied, enemy)

        for kind in PIECE_KINDS[1:5]:
            for from_sq in iter_squares(pieces[us * 6 + kind]):
                if kind == KNIGHT:
                    attacks = KNIGHT_ATTACKS[from_sq]
                elif kind == BISHOP:
                    attacks = bishop_attacks(from_sq, occupied)
                elif kind == ROOK:
                    attacks = rook_attacks(from_sq, occupied)
                else:
                    attacks = queen_attacks(from_sq, occupied)
                yield from self._piece_moves(kind, from_sq, attacks & targets_mask, enemy, squares)

        king_sq = lsb(pieces[us * 6 + KING])
        yield from self._piece_moves(KING, king_sq, KING_ATTACKS[king_sq] & targets_mask, enemy, squares)
        yield from self._castling_moves(board, us, occupied)

    @staticmethod
    def _piece_moves(kind, from_sq: int, targets: int, enemy: int, squares) -> Iterator[Move]:
        for to_sq in iter_squares(targets):
            if enemy >> to_sq & 1:
                yield Move(from_sq, to_sq, kind, None, PIECE_KINDS[squares[to_sq] % 6], MoveFlag.CAPTURE)
            else:
                yield Move(from_sq, to_sq, kind)

    @staticmethod
    def _pawn_moves(board: Board, us: int, occupied: int, enemy: int) -> Iterator[Move]:
        squares = board.squares
        ep_square = board.ep_square
        attacks = PAWN_ATTACKS[us]
        if us == WHITE:
            push, start_rank, last_rank = 8, RANK_2, 7
        else:
            push, start_rank, last_rank = -8, RANK_7, 0

        for from_sq in iter_squares(board.pieces[us * 6 + PAWN]):
            to_sq = from_sq + push
            if not occupied >> to_sq & 1:
                if to_sq >> 3 == last_rank:
                    for promotion in PROMOTION_KINDS:
                        yield Move(from_sq, to_sq, PAWN, promotion)
                else:
                    yield Move(from_sq, to_sq, PAWN)
                    if start_rank >> from_sq & 1:
                        double_sq = to_sq + push
                        if not occupied >> double_sq & 1:
                            yield Move(from_sq, double_sq, PAWN, None, None, MoveFlag.DOUBLE_PAWN_PUSH)

            capture_targets = attacks[from_sq]
            for to_sq in iter_squares(capture_targets & enemy):
                captured = PIECE_KINDS[squares[to_sq] % 6]
                if to_sq >> 3 == last_rank:
                    for promotion in PROMOTION_KINDS:
                        yield Move(from_sq, to_sq, PAWN, promotion, captured, MoveFlag.CAPTURE)
                else:
                    yield Move(from_sq, to_sq, PAWN, None, captured, MoveFlag.CAPTURE)

            if ep_square is not None and capture_targets >> ep_square & 1:
                yield Move(from_sq, ep_square, PAWN, None, PAWN, MoveFlag.CAPTURE | MoveFlag.EN_PASSANT)

    @staticmethod
    def _castling_moves(board: Board, us: int, occupied: int) -> Iterator[Move]:
        rights = board.castling_rights
        if not rights & (WHITE_KINGSIDE | WHITE_QUEENSIDE if us == WHITE else BLACK_KINGSIDE | BLACK_QUEENSIDE):
            return
        them = us ^ 1
        for right, king_from, king_to, empty, safe, flag in CASTLING_MOVES[us]:
            if not rights & right:
                continue
            if any(occupied >> sq & 1 for sq in empty):
                continue
            if any(board.is_square_attacked(sq, them) for sq in safe):
                continue
            yield Move(king_from, king_to, KING, None, None, flag)


def perft(board: Board, depth: int) -> int:
    """Module-level shortcut for MoveGenerator().perft()."""
    return MoveGenerator().perft(board, depth)
