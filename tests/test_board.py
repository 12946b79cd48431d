"""
Unit Tests for Board Representation

Tests for the bitboard position, focusing on:
    - FEN parsing and serialization (including invalid input)
    - apply/undo round trips (every field, hash included)
    - Incremental vs from-scratch Zobrist hashing
    - Attack queries and draw rules
    - UCI move notation and position setup
"""

import chess
import pytest

from bitblue.board import STARTING_FEN, Board, Move, PieceKind, parse_uci_move, set_position
from bitblue.board.bitboard import BLACK, WHITE, bit, parse_square
from bitblue.board.interop import from_python_chess, to_python_chess
from bitblue.errors import IllegalMoveError, InvalidFenError
from bitblue.movegen import MoveGenerator

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


class TestFen:
    """Tests for FEN parsing and serialization."""

    @pytest.mark.parametrize("fen", [
        STARTING_FEN,
        KIWIPETE,
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
        "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
    ])
    def test_round_trip(self, fen):
        """Test that fen() reproduces the parsed FEN."""
        assert Board(fen).fen() == fen

    def test_default_is_starting_position(self):
        board = Board()
        assert board.fen() == STARTING_FEN
        assert board.turn == WHITE
        assert board.castling_rights == 15

    def test_counters_optional(self):
        """Test that half-move and full-move fields default to 0 and 1."""
        board = Board("4k3/8/8/8/8/8/8/4K3 b -")
        assert board.fen() == "4k3/8/8/8/8/8/8/4K3 b - - 0 1"

    @pytest.mark.parametrize("fen", [
        "",
        "not a fen",
        "8/8/8/8/8/8/8/8 w - - 0 1",  # no kings
        "4k3/8/8/8/8/8/8/4KK2 w - - 0 1",  # two white kings
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w KQkq - 0 1",  # seven ranks
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",  # bad side
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # bad count
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",  # bad piece
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkx - 0 1",  # bad rights
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e4 0 1",  # bad ep rank
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - x 1",  # bad counter
        "P3k3/8/8/8/8/8/8/4K3 w - - 0 1",  # pawn on the last rank
        "4k3/8/8/8/8/8/8/4R1K1 w - - 0 1",  # side not to move in check
    ])
    def test_invalid_fen_raises(self, fen):
        """Test that malformed or impossible positions are rejected."""
        with pytest.raises(InvalidFenError):
            Board(fen)

    def test_invalid_fen_is_value_error(self):
        with pytest.raises(ValueError):
            Board("8/8/8/8/8/8/8/8 w - - 0 1")

    def test_castling_rights_without_rook_dropped(self):
        """Test that a right whose rook is not at home is discarded."""
        board = Board("r3k2r/8/8/8/8/8/8/R3K3 w KQkq - 0 1")
        assert board.fen() == "r3k2r/8/8/8/8/8/8/R3K3 w Qkq - 0 1"

    def test_unusable_en_passant_square_dropped(self):
        """Test that an ep target no pawn can capture on is not recorded."""
        board = Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
        assert board.ep_square is None
        assert board.fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        assert board.zobrist_hash == Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1").zobrist_hash

    def test_usable_en_passant_square_kept(self):
        board = set_position("startpos", ["e2e4", "d7d5", "e4e5", "f7f5"])
        assert board.ep_square == parse_square("f6")
        assert " f6 " in board.fen()

    def test_python_chess_interop(self):
        """Test conversion to python-chess and back."""
        board = Board(KIWIPETE)
        other = to_python_chess(board)
        assert isinstance(other, chess.Board)
        assert other.fen() == KIWIPETE
        assert from_python_chess(other).fen() == KIWIPETE


class TestApplyUndo:
    """Tests for move application."""

    @pytest.fixture
    def generator(self):
        return MoveGenerator()

    @pytest.mark.parametrize("fen", [
        STARTING_FEN,
        KIWIPETE,
        "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
        "rnbqkbnr/1pp1pppp/p7/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3",
    ])
    def test_round_trip_every_move(self, generator, fen):
        """Test that undo restores every field after each legal move."""
        board = Board(fen)
        before = board.copy()

        for move in generator.generate_legal(board):
            token = board.apply(move)
            assert board.turn != before.turn, f"{move} should flip the side to move"
            assert board.zobrist_hash == board.compute_hash(), f"Incremental hash wrong after {move}"
            board.undo(token)
            assert board == before, f"Undo of {move} did not restore the position"
            assert board.squares == before.squares
            assert board.occupancy == before.occupancy

    def test_incremental_hash_over_game(self, generator):
        """Test that the incremental hash equals a full recomputation."""
        board = Board(KIWIPETE)
        tokens = []
        for ply in range(60):
            moves = generator.generate_legal(board)
            if not moves:
                break
            tokens.append(board.apply(moves[(ply * 7) % len(moves)]))
            assert board.zobrist_hash == board.compute_hash()

        for token in reversed(tokens):
            board.undo(token)
        assert board.fen() == KIWIPETE

    def test_transposition_same_hash(self):
        """Test that different move orders reaching one position hash equally."""
        a = set_position("startpos", ["g1f3", "g8f6", "b1c3"])
        b = set_position("startpos", ["b1c3", "g8f6", "g1f3"])
        assert a.zobrist_hash == b.zobrist_hash
        assert a == b

    def test_castling_moves_rook(self):
        board = Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        board.apply(parse_uci_move(board, "e1g1"))
        assert board.fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"

    def test_en_passant_capture(self):
        board = set_position("startpos", ["e2e4", "a7a6", "e4e5", "d7d5", "e5d6"])
        assert board.fen() == "rnbqkbnr/1pp1pppp/p2P4/8/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 3"

    def test_promotion(self):
        board = Board("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        board.apply(parse_uci_move(board, "e7e8q"))
        assert board.fen() == "4Q3/8/8/8/8/8/k7/4K3 b - - 0 1"

    def test_apply_wrong_piece_raises(self):
        """Test that a move without its piece on the origin is rejected untouched."""
        board = Board()
        move = Move(parse_square("e3"), parse_square("e4"), PieceKind.PAWN)
        with pytest.raises(IllegalMoveError):
            board.apply(move)
        assert board.fen() == STARTING_FEN

    def test_apply_onto_own_piece_raises(self):
        board = Board()
        with pytest.raises(IllegalMoveError):
            board.apply(Move(parse_square("g1"), parse_square("e2"), PieceKind.KNIGHT))

    def test_undo_out_of_order_raises(self):
        board = Board()
        first = board.apply(parse_uci_move(board, "e2e4"))
        board.apply(parse_uci_move(board, "e7e5"))
        with pytest.raises(IllegalMoveError):
            board.undo(first)


class TestQueries:
    """Tests for attack queries, draw rules and helpers."""

    def test_attackers_of(self):
        board = Board()
        expected = bit(parse_square("e2")) | bit(parse_square("g2")) | bit(parse_square("g1"))
        assert board.attackers_of(parse_square("f3"), WHITE) == expected
        assert board.attackers_of(parse_square("f3"), BLACK) == 0

    def test_slider_attacks_blocked(self):
        board = Board()
        assert not board.is_square_attacked(parse_square("d4"), WHITE)
        board = set_position("startpos", ["e2e4", "e7e5"])
        assert board.is_square_attacked(parse_square("a6"), WHITE), "Bf1 attacks a6 after e4"

    def test_is_in_check(self):
        board = Board("4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
        assert board.is_in_check()
        assert board.is_in_check(BLACK)
        assert not board.is_in_check(WHITE)

    def test_threefold_repetition(self):
        shuffle = ["g1f3", "g8f6", "f3g1", "f6g8"]
        board = set_position("startpos", shuffle)
        assert board.is_repetition(2)
        assert not board.is_repetition(3)

        board = set_position("startpos", shuffle * 2)
        assert board.is_repetition(3)

    def test_repetition_broken_by_pawn_move(self):
        board = set_position("startpos", ["g1f3", "g8f6", "f3g1", "f6g8", "e2e4"])
        assert not board.is_repetition(2)

    def test_fifty_moves(self):
        assert Board("4k3/8/8/8/8/8/8/4K2R w - - 100 80").is_fifty_moves()
        assert not Board("4k3/8/8/8/8/8/8/4K2R w - - 99 80").is_fifty_moves()

    @pytest.mark.parametrize("fen, expected", [
        ("8/8/4k3/8/8/4K3/8/8 w - - 0 1", True),
        ("8/8/4k3/8/8/4KB2/8/8 w - - 0 1", True),
        ("8/8/4k3/8/8/4KN2/8/8 w - - 0 1", True),
        ("5b2/8/4k3/8/8/4K3/8/2B5 w - - 0 1", True),  # bishops on dark squares
        ("4b3/8/4k3/8/8/4K3/8/2B5 w - - 0 1", False),  # opposite colors
        ("8/8/4k3/8/8/4KNN1/8/8 w - - 0 1", False),
        ("8/8/4k3/8/8/4KR2/8/8 w - - 0 1", False),
        ("8/8/4k3/8/8/4K3/4P3/8 w - - 0 1", False),
    ])
    def test_insufficient_material(self, fen, expected):
        assert Board(fen).has_insufficient_material() is expected

    def test_mirror(self):
        assert Board().mirror().fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1"
        board = Board(KIWIPETE)
        assert board.mirror().mirror() == board

    def test_copy_is_independent(self):
        board = Board()
        copy = board.copy()
        copy.apply(parse_uci_move(copy, "e2e4"))
        assert board.fen() == STARTING_FEN

    def test_str_diagram(self):
        lines = str(Board()).splitlines()
        assert lines[0] == "8 r n b q k b n r"
        assert lines[7] == "1 R N B Q K B N R"
        assert lines[-1] == "  a b c d e f g h"


class TestNotation:
    """Tests for UCI move parsing and position setup."""

    def test_parse_sets_flags(self):
        board = set_position("startpos", ["e2e4", "d7d5"])
        move = parse_uci_move(board, "e4d5")
        assert move.is_capture
        assert move.captured == PieceKind.PAWN
        assert move.uci() == "e4d5"

    @pytest.mark.parametrize("text", ["e2", "e2e4e5", "z2e4", "e7e8x"])
    def test_malformed_move_raises(self, text):
        with pytest.raises(ValueError):
            parse_uci_move(Board(), text)

    def test_illegal_move_raises(self):
        with pytest.raises(IllegalMoveError):
            parse_uci_move(Board(), "e2e5")

    def test_set_position_fen_with_moves(self):
        board = set_position(KIWIPETE, ["e1g1", "e8c8"])
        assert board.fen() == "2kr3r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R4RK1 w - - 2 2"

    def test_set_position_illegal_move_raises(self):
        with pytest.raises(IllegalMoveError):
            set_position("startpos", ["e2e4", "e2e4"])
