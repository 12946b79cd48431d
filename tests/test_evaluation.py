"""
Unit Tests for Evaluation Module

Tests for position evaluation functions, focusing on:
    - Material counting accuracy
    - Piece-square table correctness
    - Symmetry (color-flipped position = same score for its mover)
    - Terminal position detection (checkmate, stalemate, draws)
"""

import pytest

from bitblue.board import Board, set_position
from bitblue.evaluation import (
    MATE_SCORE,
    MATE_THRESHOLD,
    ClassicalEvaluator,
    Evaluator,
    MaterialEvaluator,
    is_mate_score,
)

SYMMETRY_FENS = [
    "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "r4rk1/1pp1qppp/p1np1n2/2b1p1B1/2B1P1b1/P1NP1N2/1PP1QPPP/R4RK1 w - - 0 10",
    "8/5k2/8/8/8/8/2B1K3/8 w - - 0 1",
]


class TestClassicalEvaluator:
    """Tests for ClassicalEvaluator."""

    @pytest.fixture
    def evaluator(self):
        """Create a ClassicalEvaluator instance."""
        return ClassicalEvaluator()

    def test_starting_position_equal(self, evaluator):
        """Test that the symmetric starting position evaluates to exactly 0."""
        assert evaluator.evaluate(Board()) == 0

    def test_material_advantage(self, evaluator):
        """
        Test that material advantage is properly counted.

        White is missing the h1 rook, so White to move is ~500 cp worse.
        """
        board = Board("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN1 w Qkq - 0 1")
        score = evaluator.evaluate(board)
        assert score < -400, f"Black should be ahead by ~500 cp, got {score}"

    def test_side_to_move_perspective(self, evaluator):
        """Test that the score is from the side to move's point of view."""
        white_to_move = Board("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN1 w Qkq - 0 1")
        black_to_move = Board("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN1 b Qkq - 0 1")

        assert evaluator.evaluate(black_to_move) == -evaluator.evaluate(white_to_move)
        assert evaluator.evaluate_white(black_to_move) == evaluator.evaluate_white(white_to_move)

    @pytest.mark.parametrize("fen", SYMMETRY_FENS)
    def test_symmetry(self, evaluator, fen):
        """
        Test evaluation symmetry.

        The color-flipped position has the other side to move in the
        mirrored situation, so its mover sees the same score and the
        White-view score negates.
        """
        board = Board(fen)
        mirrored = board.mirror()

        assert evaluator.evaluate(mirrored) == evaluator.evaluate(board)
        assert evaluator.evaluate_white(mirrored) == -evaluator.evaluate_white(board)

    def test_piece_square_tables(self, evaluator):
        """Test that a central knight is worth more than a cornered one."""
        board_edge = Board("7k/pppppppp/8/8/8/8/PPPPPPPP/N6K w - - 0 1")
        board_center = Board("7k/pppppppp/8/8/4N3/8/PPPPPPPP/7K w - - 0 1")

        score_edge = evaluator.evaluate(board_edge)
        score_center = evaluator.evaluate(board_center)

        assert score_center - score_edge == 70, "Knight PST: e4 = +20, a1 = -50"

    def test_bishop_pair_bonus(self, evaluator):
        """Test the bonus for owning both bishops."""
        pair = Board("4k3/8/8/8/8/8/8/2B1KB2 w - - 0 1")
        bishop_and_knight = Board("4k3/8/8/8/8/8/8/2B1KN2 w - - 0 1")

        # Same squares: bishop f1 = -10 vs knight f1 = -30 in the tables
        diff = evaluator.evaluate(pair) - evaluator.evaluate(bishop_and_knight)
        assert diff == (330 - 10) - (320 - 30) + 30

    def test_endgame_detection(self, evaluator):
        """Test the switch to the endgame king table."""
        assert evaluator.is_endgame(Board("8/4k3/8/8/8/8/4K3/8 w - - 0 1"))
        assert evaluator.is_endgame(Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1"))
        assert not evaluator.is_endgame(Board())

    def test_consistency(self, evaluator):
        """Test that evaluator is deterministic."""
        board = Board("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
        scores = [evaluator.evaluate(board) for _ in range(5)]
        assert len(set(scores)) == 1, f"Evaluator is not deterministic: {scores}"

    def test_evaluation_throughout_opening(self, evaluator):
        """Test that evaluation stays reasonable through a quiet opening."""
        moves = ["e2e4", "e7e5", "g1f3", "b8c6", "f1c4", "f8c5"]
        for i in range(1, len(moves) + 1):
            score = evaluator.evaluate(set_position("startpos", moves[:i]))
            assert isinstance(score, int)
            assert -200 < score < 200, f"Evaluation {score} seems unreasonable for opening"

    def test_repr(self, evaluator):
        assert repr(evaluator) == "ClassicalEvaluator()"


class TestMaterialEvaluator:
    """Tests for the material-only baseline."""

    def test_counts_material(self):
        evaluator = MaterialEvaluator()
        assert evaluator.evaluate(Board()) == 0
        assert evaluator.evaluate(Board("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")) == 900
        assert evaluator.evaluate(Board("4k3/8/8/8/8/8/8/3QK3 b - - 0 1")) == -900


class TestTerminalEvaluation:
    """Tests for the Evaluator terminal helpers."""

    @pytest.fixture
    def evaluator(self):
        return ClassicalEvaluator()

    def test_evaluator_is_abstract(self):
        """Test that Evaluator cannot be instantiated directly."""
        with pytest.raises(TypeError):
            Evaluator()

    def test_checkmate_score(self, evaluator):
        """Test that the mated side scores -(MATE_SCORE - ply)."""
        board = Board("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
        assert evaluator.evaluate_terminal(board, 0) == -MATE_SCORE
        assert evaluator.evaluate_terminal(board, 3) == -(MATE_SCORE - 3)

    def test_stalemate_is_draw(self, evaluator):
        board = Board("k7/2Q5/1K6/8/8/8/8/8 b - - 0 1")
        assert evaluator.evaluate_terminal(board) == 0
        assert evaluator.is_draw(board)

    def test_insufficient_material_is_draw(self, evaluator):
        board = Board("8/8/8/8/8/7k/8/K7 w - - 0 1")
        assert evaluator.evaluate_terminal(board) == 0
        assert evaluator.is_draw(board)

    def test_fifty_moves_is_draw(self, evaluator):
        assert evaluator.evaluate_terminal(Board("4k3/8/8/8/8/8/8/4K2R w - - 100 80")) == 0

    def test_normal_position_not_terminal(self, evaluator):
        assert evaluator.evaluate_terminal(Board()) is None
        assert not evaluator.is_draw(Board())

    def test_mate_score_helpers(self):
        assert is_mate_score(MATE_SCORE - 5)
        assert is_mate_score(-(MATE_SCORE - 5))
        assert not is_mate_score(MATE_THRESHOLD)
        assert not is_mate_score(900)
