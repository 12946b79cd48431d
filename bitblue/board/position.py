"""
Bitboard Position Representation

The Board is the authoritative position state of the engine:

    - 12 piece bitboards (6 kinds * 2 colors), see bitblue.board.types
    - 3 occupancy bitboards: white, black, all (always derived from the above)
    - a 64-entry mailbox mapping square -> piece index (derived, for O(1) lookup)
    - side to move, castling rights (4 bits), en passant square
    - half-move clock and full-move number
    - a Zobrist hash maintained incrementally

The Board is mutated only through apply()/undo(). apply() returns an
UndoToken and undo() must be called with the tokens in reverse order, which
restores every field bit-for-bit (hash included). The search owns a single
Board and passes it down the recursion, so there is no copying per node.

Castling Rights Encoding:
    1 = White kingside (K)     4 = Black kingside (k)
    2 = White queenside (Q)    8 = Black queenside (q)

En passant:
    The en passant square is only recorded when an enemy pawn actually
    stands next to the double-pushed pawn. Positions that differ only by an
    unusable en passant target therefore hash (and repeat) identically.
"""

from typing import List, Optional

from bitblue.board.bitboard import (
    A1, A8, BLACK, C1, C8, COLOR_NAMES, D1, D8, DARK_SQUARES, E1, E8, F1, F8,
    FILE_NAMES, G1, G8, H1, H8, KING_ATTACKS, KNIGHT_ATTACKS, LIGHT_SQUARES,
    PAWN_ATTACKS, RANK_1, RANK_8, WHITE, bishop_attacks, flip_vertical,
    iter_squares, lsb, mirror_square, parse_square, popcount, rook_attacks,
    square, square_name,
)
from bitblue.board.types import (
    BISHOP, KING, KNIGHT, PAWN, PIECE_SYMBOLS, QUEEN, ROOK, SYMBOL_TO_INDEX,
    MoveFlag, Move, UndoToken,
)
from bitblue.board.zobrist import (
    ZOBRIST_CASTLING, ZOBRIST_EN_PASSANT, ZOBRIST_PIECES,
    ZOBRIST_SIDE_TO_MOVE, compute_hash,
)
from bitblue.errors import IllegalMoveError, InvalidFenError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

BOTH = 2  # occupancy index for all pieces

WHITE_KINGSIDE = 1
WHITE_QUEENSIDE = 2
BLACK_KINGSIDE = 4
BLACK_QUEENSIDE = 8
ALL_CASTLING = 15

CASTLING_SYMBOLS = (
    ("K", WHITE_KINGSIDE),
    ("Q", WHITE_QUEENSIDE),
    ("k", BLACK_KINGSIDE),
    ("q", BLACK_QUEENSIDE),
)

# King destination -> (rook origin, rook destination)
CASTLING_ROOK_SQUARES = {
    G1: (H1, F1),
    C1: (A1, D1),
    G8: (H8, F8),
    C8: (A8, D8),
}

# Rights that survive a move touching a square (as origin or destination).
# Moving the king or a rook, or capturing a rook at home, clears the right.
CASTLING_MASK = [ALL_CASTLING] * 64
CASTLING_MASK[A1] = ALL_CASTLING & ~WHITE_QUEENSIDE
CASTLING_MASK[H1] = ALL_CASTLING & ~WHITE_KINGSIDE
CASTLING_MASK[E1] = ALL_CASTLING & ~(WHITE_KINGSIDE | WHITE_QUEENSIDE)
CASTLING_MASK[A8] = ALL_CASTLING & ~BLACK_QUEENSIDE
CASTLING_MASK[H8] = ALL_CASTLING & ~BLACK_KINGSIDE
CASTLING_MASK[E8] = ALL_CASTLING & ~(BLACK_KINGSIDE | BLACK_QUEENSIDE)

# Home squares a right requires: right -> (king square, rook square, color)
CASTLING_HOMES = {
    WHITE_KINGSIDE: (E1, H1, WHITE),
    WHITE_QUEENSIDE: (E1, A1, WHITE),
    BLACK_KINGSIDE: (E8, H8, BLACK),
    BLACK_QUEENSIDE: (E8, A8, BLACK),
}


class Board:
    """
    Bitboard chess position.

    Attributes:
        pieces: 12 piece bitboards indexed by color * 6 + kind
        occupancy: [white, black, all] occupancy bitboards
        squares: Mailbox, piece index or None for each square
        turn: Side to move (WHITE or BLACK)
        castling_rights: 4-bit castling rights
        ep_square: En passant target square or None
        halfmove_clock: Plies since the last capture or pawn move
        fullmove_number: Starts at 1, incremented after Black moves
        zobrist_hash: Incrementally maintained 64-bit hash
    """

    def __init__(self, fen: Optional[str] = STARTING_FEN):
        """
        Create a board from FEN.

        Args:
            fen: FEN string (default: starting position). None creates an
                empty board, which is useful for building positions piece by
                piece but is not a legal position until kings are added.

        Raises:
            InvalidFenError: If the FEN is malformed or describes an
                impossible position
        """
        self.pieces: List[int] = [0] * 12
        self.occupancy: List[int] = [0, 0, 0]
        self.squares: List[Optional[int]] = [None] * 64
        self.turn = WHITE
        self.castling_rights = 0
        self.ep_square: Optional[int] = None
        self.halfmove_clock = 0
        self.fullmove_number = 1
        self.zobrist_hash = 0
        self._history: List[int] = []

        if fen is not None:
            self.set_fen(fen)
        else:
            self.zobrist_hash = compute_hash(self)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        return cls(fen)

    # ========================================================================
    # FEN
    # ========================================================================

    def set_fen(self, fen: str) -> None:
        """
        Replace the position with the one described by a FEN string.

        The half-move and full-move fields may be omitted (defaults 0 and 1).

        Raises:
            InvalidFenError: On malformed syntax, a missing or duplicated
                king, pawns on the first/last rank, or the side not to move
                being in check.
        """
        if not isinstance(fen, str) or not fen.strip():
            raise InvalidFenError("FEN must be a non-empty string")

        parts = fen.split()
        if len(parts) < 2 or len(parts) > 6:
            raise InvalidFenError(f"FEN must have 2 to 6 fields, got {len(parts)}: {fen!r}")
        parts += ["-", "-", "0", "1"][len(parts) - 2:]
        placement, side, castling, ep, halfmove, fullmove = parts

        pieces = [0] * 12
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise InvalidFenError(f"FEN board must have 8 ranks, got {len(ranks)}")
        for rank_offset, rank_text in enumerate(ranks):
            rank_index = 7 - rank_offset
            file_index = 0
            for ch in rank_text:
                if ch.isdigit():
                    if ch in "09":
                        raise InvalidFenError(f"Invalid empty-square count {ch!r} in FEN")
                    file_index += int(ch)
                elif ch in SYMBOL_TO_INDEX:
                    if file_index >= 8:
                        raise InvalidFenError(f"Too many squares in FEN rank {rank_text!r}")
                    pieces[SYMBOL_TO_INDEX[ch]] |= 1 << square(file_index, rank_index)
                    file_index += 1
                else:
                    raise InvalidFenError(f"Invalid piece symbol {ch!r} in FEN")
            if file_index != 8:
                raise InvalidFenError(f"FEN rank {rank_text!r} does not cover 8 squares")

        if side not in ("w", "b"):
            raise InvalidFenError(f"Side to move must be 'w' or 'b', got {side!r}")
        turn = WHITE if side == "w" else BLACK

        rights = 0
        if castling != "-":
            for ch in castling:
                matched = [r for symbol, r in CASTLING_SYMBOLS if symbol == ch]
                if not matched:
                    raise InvalidFenError(f"Invalid castling rights {castling!r}")
                rights |= matched[0]

        ep_square = None
        if ep != "-":
            try:
                ep_square = parse_square(ep)
            except ValueError as e:
                raise InvalidFenError(f"Invalid en passant square {ep!r}") from e
            expected_rank = 5 if turn == WHITE else 2
            if ep_square >> 3 != expected_rank:
                raise InvalidFenError(f"En passant square {ep} is on the wrong rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise InvalidFenError(f"Invalid move counters in FEN: {halfmove!r} {fullmove!r}") from e
        if halfmove_clock < 0 or fullmove_number < 1:
            raise InvalidFenError("Move counters out of range in FEN")

        self._load(pieces, turn, rights, ep_square, halfmove_clock, fullmove_number)
        self._validate()

    def _load(self, pieces, turn, rights, ep_square, halfmove_clock, fullmove_number) -> None:
        self.pieces = list(pieces)
        self.occupancy = [0, 0, 0]
        self.squares = [None] * 64
        for index, bb in enumerate(self.pieces):
            for sq in iter_squares(bb):
                if self.squares[sq] is not None:
                    raise InvalidFenError(f"Two pieces on {square_name(sq)}")
                self.squares[sq] = index
            self.occupancy[index // 6] |= bb
        self.occupancy[BOTH] = self.occupancy[WHITE] | self.occupancy[BLACK]
        self.turn = turn
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self._history = []

        # Drop rights whose king or rook has left its home square
        for right, (king_sq, rook_sq, color) in CASTLING_HOMES.items():
            if rights & right and (
                self.squares[king_sq] != color * 6 + KING
                or self.squares[rook_sq] != color * 6 + ROOK
            ):
                rights &= ~right
        self.castling_rights = rights

        self.ep_square = None
        if ep_square is not None:
            them = turn ^ 1
            pushed = ep_square + 8 if them == WHITE else ep_square - 8
            if (
                self.squares[pushed] == them * 6 + PAWN
                and self.squares[ep_square] is None
                and PAWN_ATTACKS[them][ep_square] & self.pieces[turn * 6 + PAWN]
            ):
                self.ep_square = ep_square

        self.zobrist_hash = compute_hash(self)

    def _validate(self) -> None:
        for color in (WHITE, BLACK):
            kings = popcount(self.pieces[color * 6 + KING])
            if kings != 1:
                raise InvalidFenError(
                    f"{COLOR_NAMES[color].capitalize()} must have exactly one king, found {kings}"
                )
        if (self.pieces[PAWN] | self.pieces[6 + PAWN]) & (RANK_1 | RANK_8):
            raise InvalidFenError("Pawns cannot stand on the first or last rank")
        if self.is_in_check(self.turn ^ 1):
            raise InvalidFenError("The side not to move is in check")

    def fen(self) -> str:
        """Serialize the position as a FEN string."""
        rows = []
        for rank_index in range(7, -1, -1):
            row = ""
            empty = 0
            for file_index in range(8):
                index = self.squares[square(file_index, rank_index)]
                if index is None:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += PIECE_SYMBOLS[index]
            if empty:
                row += str(empty)
            rows.append(row)

        castling = "".join(s for s, right in CASTLING_SYMBOLS if self.castling_rights & right) or "-"
        ep = square_name(self.ep_square) if self.ep_square is not None else "-"
        side = "w" if self.turn == WHITE else "b"
        return f"{'/'.join(rows)} {side} {castling} {ep} {self.halfmove_clock} {self.fullmove_number}"

    # ========================================================================
    # Piece Access
    # ========================================================================

    def piece_at(self, sq: int) -> Optional[int]:
        """Piece index (color * 6 + kind) on a square, or None if empty."""
        return self.squares[sq]

    def king_square(self, color: int) -> int:
        return lsb(self.pieces[color * 6 + KING])

    def _put(self, index: int, sq: int) -> None:
        b = 1 << sq
        self.pieces[index] |= b
        self.occupancy[index // 6] |= b
        self.occupancy[BOTH] |= b
        self.squares[sq] = index

    def _remove(self, index: int, sq: int) -> None:
        b = ~(1 << sq)
        self.pieces[index] &= b
        self.occupancy[index // 6] &= b
        self.occupancy[BOTH] &= b
        self.squares[sq] = None

    # ========================================================================
    # Move Application
    # ========================================================================

    def apply(self, move: Move) -> UndoToken:
        """
        Apply a move and return the token needed to undo it.

        The move must be pseudo-legal for the current position (as produced
        by the MoveGenerator). It may leave the mover's king in check; the
        generator uses exactly that to filter illegal moves.

        Args:
            move: Move to apply

        Returns:
            UndoToken to pass to undo()

        Raises:
            IllegalMoveError: If the move does not fit the position (wrong
                piece on the origin, own piece on the destination, declared
                capture not on the board, castling rook missing)
        """
        us = self.turn
        them = us ^ 1
        from_sq = move.from_square
        to_sq = move.to_square
        flags = move.flags
        moving = us * 6 + move.piece
        squares = self.squares

        if squares[from_sq] != moving:
            raise IllegalMoveError(
                f"No {COLOR_NAMES[us]} {move.piece.name.lower()} on {square_name(from_sq)} for {move}"
            )

        captured_index = None
        capture_sq = to_sq
        if flags & MoveFlag.EN_PASSANT:
            capture_sq = to_sq - 8 if us == WHITE else to_sq + 8
            captured_index = them * 6 + PAWN
            if to_sq != self.ep_square or squares[capture_sq] != captured_index:
                raise IllegalMoveError(f"En passant {move} is not available")
        elif flags & MoveFlag.CAPTURE:
            captured_index = squares[to_sq]
            if move.captured is None or captured_index != them * 6 + move.captured:
                raise IllegalMoveError(f"Capture {move} does not match the board")
            if move.captured == KING:
                raise IllegalMoveError(f"Capture {move} would take a king")
        elif squares[to_sq] is not None:
            raise IllegalMoveError(f"Destination of {move} is occupied")

        rook_squares = None
        if flags & (MoveFlag.CASTLE_KINGSIDE | MoveFlag.CASTLE_QUEENSIDE):
            rook_squares = CASTLING_ROOK_SQUARES.get(to_sq)
            if (
                rook_squares is None
                or squares[rook_squares[0]] != us * 6 + ROOK
                or squares[rook_squares[1]] is not None
            ):
                raise IllegalMoveError(f"Castling {move} is not possible")

        token = UndoToken(move, self.castling_rights, self.ep_square, self.halfmove_clock, self.zobrist_hash)
        self._history.append(self.zobrist_hash)
        h = self.zobrist_hash

        if self.ep_square is not None:
            h ^= ZOBRIST_EN_PASSANT[self.ep_square & 7]
            self.ep_square = None

        if captured_index is not None:
            self._remove(captured_index, capture_sq)
            h ^= ZOBRIST_PIECES[captured_index][capture_sq]

        self._remove(moving, from_sq)
        h ^= ZOBRIST_PIECES[moving][from_sq]
        placed = moving if move.promotion is None else us * 6 + move.promotion
        self._put(placed, to_sq)
        h ^= ZOBRIST_PIECES[placed][to_sq]

        if rook_squares is not None:
            rook = us * 6 + ROOK
            rook_from, rook_to = rook_squares
            self._remove(rook, rook_from)
            self._put(rook, rook_to)
            h ^= ZOBRIST_PIECES[rook][rook_from] ^ ZOBRIST_PIECES[rook][rook_to]

        rights = self.castling_rights & CASTLING_MASK[from_sq] & CASTLING_MASK[to_sq]
        if rights != self.castling_rights:
            h ^= ZOBRIST_CASTLING[self.castling_rights] ^ ZOBRIST_CASTLING[rights]
            self.castling_rights = rights

        if flags & MoveFlag.DOUBLE_PAWN_PUSH:
            ep = (from_sq + to_sq) >> 1
            if PAWN_ATTACKS[us][ep] & self.pieces[them * 6 + PAWN]:
                self.ep_square = ep
                h ^= ZOBRIST_EN_PASSANT[ep & 7]

        if move.piece == PAWN or captured_index is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if us == BLACK:
            self.fullmove_number += 1

        self.turn = them
        self.zobrist_hash = h ^ ZOBRIST_SIDE_TO_MOVE
        return token

    def undo(self, token: UndoToken) -> None:
        """
        Reverse the most recent apply().

        Args:
            token: Token returned by the matching apply()

        Raises:
            IllegalMoveError: If the token is not the one of the last
                applied move
        """
        if not self._history or self._history[-1] != token.zobrist_hash:
            raise IllegalMoveError(f"Undo token for {token.move} does not match the last applied move")

        move = token.move
        us = self.turn ^ 1
        them = self.turn
        from_sq = move.from_square
        to_sq = move.to_square
        moving = us * 6 + move.piece

        self.turn = us
        if us == BLACK:
            self.fullmove_number -= 1

        if move.flags & (MoveFlag.CASTLE_KINGSIDE | MoveFlag.CASTLE_QUEENSIDE):
            rook = us * 6 + ROOK
            rook_from, rook_to = CASTLING_ROOK_SQUARES[to_sq]
            self._remove(rook, rook_to)
            self._put(rook, rook_from)

        placed = moving if move.promotion is None else us * 6 + move.promotion
        self._remove(placed, to_sq)
        self._put(moving, from_sq)

        if move.flags & MoveFlag.EN_PASSANT:
            self._put(them * 6 + PAWN, to_sq - 8 if us == WHITE else to_sq + 8)
        elif move.flags & MoveFlag.CAPTURE:
            self._put(them * 6 + move.captured, to_sq)

        self.castling_rights = token.castling_rights
        self.ep_square = token.ep_square
        self.halfmove_clock = token.halfmove_clock
        self.zobrist_hash = token.zobrist_hash
        self._history.pop()

    # ========================================================================
    # Attack Queries
    # ========================================================================

    def attackers_of(self, sq: int, color: int) -> int:
        """
        Bitboard of the pieces of `color` that attack a square.

        Args:
            sq: Target square
            color: Color of the attacking pieces

        Returns:
            Bitboard of attacking pieces (0 if none)
        """
        pieces = self.pieces
        occupied = self.occupancy[BOTH]
        base = color * 6
        # A pawn of `color` attacks sq iff a pawn of the other color on sq
        # would attack the pawn's square.
        attackers = PAWN_ATTACKS[color ^ 1][sq] & pieces[base + PAWN]
        attackers |= KNIGHT_ATTACKS[sq] & pieces[base + KNIGHT]
        attackers |= KING_ATTACKS[sq] & pieces[base + KING]
        diagonal = pieces[base + BISHOP] | pieces[base + QUEEN]
        if diagonal:
            attackers |= bishop_attacks(sq, occupied) & diagonal
        straight = pieces[base + ROOK] | pieces[base + QUEEN]
        if straight:
            attackers |= rook_attacks(sq, occupied) & straight
        return attackers

    def is_square_attacked(self, sq: int, by_color: int) -> bool:
        """True if any piece of `by_color` attacks the square."""
        pieces = self.pieces
        base = by_color * 6
        if PAWN_ATTACKS[by_color ^ 1][sq] & pieces[base + PAWN]:
            return True
        if KNIGHT_ATTACKS[sq] & pieces[base + KNIGHT]:
            return True
        if KING_ATTACKS[sq] & pieces[base + KING]:
            return True
        occupied = self.occupancy[BOTH]
        diagonal = pieces[base + BISHOP] | pieces[base + QUEEN]
        if diagonal and bishop_attacks(sq, occupied) & diagonal:
            return True
        straight = pieces[base + ROOK] | pieces[base + QUEEN]
        return bool(straight and rook_attacks(sq, occupied) & straight)

    def is_in_check(self, color: Optional[int] = None) -> bool:
        """
        True if the king of `color` (default: side to move) is attacked.
        """
        if color is None:
            color = self.turn
        king = self.pieces[color * 6 + KING]
        if not king:
            return False
        return self.is_square_attacked(lsb(king), color ^ 1)

    # ========================================================================
    # Draw Rules
    # ========================================================================

    def is_repetition(self, count: int = 3) -> bool:
        """
        True if the current position occurred `count` times (including now).

        Only positions since the last capture or pawn move are considered;
        anything older cannot repeat.
        """
        history = self._history
        current = self.zobrist_hash
        seen = 1
        stop = max(len(history) - self.halfmove_clock, 0)
        for i in range(len(history) - 2, stop - 1, -2):
            if history[i] == current:
                seen += 1
                if seen >= count:
                    return True
        return seen >= count

    def is_fifty_moves(self) -> bool:
        """Fifty-move rule: 100 plies without a capture or pawn move."""
        return self.halfmove_clock >= 100

    def has_insufficient_material(self) -> bool:
        """
        True if neither side can possibly deliver mate.

        Covers K vs K, a single minor piece, and any number of bishops all
        standing on squares of one color.
        """
        pieces = self.pieces
        heavy = (
            pieces[PAWN] | pieces[6 + PAWN]
            | pieces[ROOK] | pieces[6 + ROOK]
            | pieces[QUEEN] | pieces[6 + QUEEN]
        )
        if heavy:
            return False
        knights = pieces[KNIGHT] | pieces[6 + KNIGHT]
        bishops = pieces[BISHOP] | pieces[6 + BISHOP]
        if popcount(knights | bishops) <= 1:
            return True
        if knights:
            return False
        return not (bishops & LIGHT_SQUARES) or not (bishops & DARK_SQUARES)

    # ========================================================================
    # Copies and Transforms
    # ========================================================================

    def copy(self) -> "Board":
        """Independent copy, including the repetition history."""
        board = Board(None)
        board.pieces = list(self.pieces)
        board.occupancy = list(self.occupancy)
        board.squares = list(self.squares)
        board.turn = self.turn
        board.castling_rights = self.castling_rights
        board.ep_square = self.ep_square
        board.halfmove_clock = self.halfmove_clock
        board.fullmove_number = self.fullmove_number
        board.zobrist_hash = self.zobrist_hash
        board._history = list(self._history)
        return board

    def mirror(self) -> "Board":
        """
        Color-flipped copy: the board is flipped vertically, piece colors
        and castling rights are swapped and the other side is to move.
        """
        pieces = [0] * 12
        for index, bb in enumerate(self.pieces):
            pieces[(index + 6) % 12] = flip_vertical(bb)
        rights = ((self.castling_rights & 3) << 2) | (self.castling_rights >> 2)
        ep = mirror_square(self.ep_square) if self.ep_square is not None else None
        board = Board(None)
        board._load(pieces, self.turn ^ 1, rights, ep, self.halfmove_clock, self.fullmove_number)
        return board

    def compute_hash(self) -> int:
        """Hash recomputed from scratch (equals zobrist_hash at all times)."""
        return compute_hash(self)

    # ========================================================================
    # Dunder Methods
    # ========================================================================

    def _state(self):
        return (
            tuple(self.pieces), self.turn, self.castling_rights, self.ep_square,
            self.halfmove_clock, self.fullmove_number, self.zobrist_hash,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None

    def __str__(self) -> str:
        """ASCII diagram, rank 8 at the top, '.' for empty squares."""
        rows = []
        for rank_index in range(7, -1, -1):
            cells = []
            for file_index in range(8):
                index = self.squares[square(file_index, rank_index)]
                cells.append("." if index is None else PIECE_SYMBOLS[index])
            rows.append(f"{rank_index + 1} " + " ".join(cells))
        rows.append("  " + " ".join(FILE_NAMES))
        return "\n".join(rows)

    def __repr__(self) -> str:
        return f"Board('{self.fen()}')"
