"""
Negamax Search with Alpha-Beta Pruning

This module implements the core search algorithm for the chess engine.
Negamax is minimax written from the side to move's point of view: the
score of a position is the negated score of the best reply, so one
function serves both colors. Alpha-beta pruning cuts branches that cannot
change the result.

Key Concepts:
    - Iterative Deepening: Search depth 1, 2, 3, ... until a limit is hit;
      the last completed depth is always the answer
    - Alpha-Beta: Prune branches that can't affect the result
    - Transposition Table: Reuse results of positions reached twice
    - Move Ordering: TT move, captures (MVV-LVA), promotions, quiet moves
    - Principal Variation (PV): Best line of play found

Limits:
    The search is bounded by SearchConstraints (depth, time, nodes) and can
    be interrupted with stop() or a should_stop callback. Limits are polled
    every CHECK_INTERVAL nodes; an interrupted iteration is discarded.

References:
    - Negamax: https://www.chessprogramming.org/Negamax
    - Alpha-Beta: https://www.chessprogramming.org/Alpha-Beta
    - Iterative Deepening: https://www.chessprogramming.org/Iterative_Deepening
    - Move Ordering: https://www.chessprogramming.org/Move_Ordering
"""

import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

from bitblue.board.position import Board
from bitblue.board.types import Move, PieceKind
from bitblue.errors import GameOverError
from bitblue.evaluation.base import INFINITY, MATE_SCORE, Evaluator, is_mate_score
from bitblue.evaluation.classical import ClassicalEvaluator
from bitblue.movegen.generator import MoveGenerator
from bitblue.search.constraints import DEFAULT_DEPTH, SearchConstraints, SearchResult
from bitblue.search.transposition import NodeType, TranspositionTable

logger = logging.getLogger(__name__)

CHECK_INTERVAL = 256  # Nodes between limit checks

# Ordering values (the king only ever appears as an attacker)
ORDERING_VALUES = {
    PieceKind.PAWN: 100,
    PieceKind.KNIGHT: 320,
    PieceKind.BISHOP: 330,
    PieceKind.ROOK: 500,
    PieceKind.QUEEN: 900,
    PieceKind.KING: 1000,
}

TT_MOVE_SCORE = 1_000_000
CAPTURE_SCORE = 20_000
PROMOTION_SCORE = 10_000


class SearchAborted(Exception):
    """Raised inside the tree to unwind an interrupted search."""


def order_moves(moves: List[Move], tt_move: Optional[Move] = None) -> List[Move]:
    """
    Order moves to improve alpha-beta pruning efficiency.

    Move ordering is CRITICAL for alpha-beta performance. Good moves should
    be searched first to cause more cutoffs (prunes).

    Ordering Priority:
        1. The transposition table (or previous iteration) move
        2. Captures (MVV-LVA: Most Valuable Victim - Least Valuable Aggressor)
        3. Promotions
        4. Quiet moves, in generation order

    Args:
        moves: List of legal moves to order
        tt_move: Move to try first, if any

    Returns:
        Sorted list of moves (best moves first)
    """

    def move_score(move: Move) -> int:
        if tt_move is not None and move == tt_move:
            return TT_MOVE_SCORE

        score = 0
        if move.is_capture:
            victim = ORDERING_VALUES[move.captured] if move.captured is not None else 100
            score = CAPTURE_SCORE + 10 * victim - ORDERING_VALUES[move.piece]
        if move.promotion is not None:
            score += PROMOTION_SCORE + ORDERING_VALUES[move.promotion]
        return score

    # sorted() is stable, so equal scores keep generation order
    return sorted(moves, key=move_score, reverse=True)


def score_to_string(score: int) -> str:
    """
    Format a score the way UCI 'info' lines expect it.

    Returns:
        'cp <centipawns>' or 'mate <moves>' (negative when being mated)
    """
    if is_mate_score(score):
        plies = MATE_SCORE - abs(score)
        moves = (plies + 1) // 2
        return f"mate {moves if score > 0 else -moves}"
    return f"cp {score}"


class SearchEngine:
    """
    Iterative-deepening negamax searcher.

    Attributes:
        evaluator: Leaf evaluation (default ClassicalEvaluator)
        transposition_table: Optional cache shared across searches
        generator: Legal move generator
        nodes: Nodes visited by the current (or last) search
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        transposition_table: Optional[TranspositionTable] = None,
        generator: Optional[MoveGenerator] = None,
    ):
        self.evaluator = evaluator if evaluator is not None else ClassicalEvaluator()
        self.transposition_table = transposition_table
        self.generator = generator if generator is not None else MoveGenerator()
        self.nodes = 0

        self._stop_event = threading.Event()
        self._should_stop: Optional[Callable[[], bool]] = None
        self._constraints = SearchConstraints(max_depth=DEFAULT_DEPTH)
        self._start_time = 0.0

    def stop(self):
        """Ask a running search to finish. Safe to call from another thread."""
        self._stop_event.set()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._start_time

    def find_best_move(
        self,
        board: Board,
        constraints: Optional[SearchConstraints] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        on_progress: Optional[Callable[[SearchResult], None]] = None,
    ) -> SearchResult:
        """
        Find the best move in the current position.

        Args:
            board: Position to search (restored before returning)
            constraints: Depth/time/node limits (default: depth 5)
            should_stop: Polled during the search; True aborts it
            on_progress: Called with a SearchResult after every completed depth

        Returns:
            SearchResult of the deepest completed iteration. If the limits
            expire before depth 1 completes, the first ordered legal move is
            returned with depth 0.

        Raises:
            GameOverError: If the side to move has no legal moves
        """
        if constraints is None:
            constraints = SearchConstraints(max_depth=DEFAULT_DEPTH)

        self._stop_event.clear()
        self._should_stop = should_stop
        self._constraints = constraints
        self._start_time = time.perf_counter()
        self.nodes = 0

        root_moves = self.generator.generate_legal(board)
        if not root_moves:
            outcome = self.generator.outcome(board)
            raise GameOverError(f"No legal moves available ({outcome.name.lower()})", outcome)

        ordered = order_moves(root_moves)
        result = SearchResult(
            best_move=ordered[0],
            score=self.evaluator.evaluate(board),
            depth=0,
        )

        for depth in range(1, constraints.depth_limit + 1):
            if depth > 1 and self._out_of_budget():
                break

            try:
                score, best_move = self._search_root(board, ordered, depth)
            except SearchAborted:
                logger.debug("Search aborted during depth %d after %d nodes", depth, self.nodes)
                break

            result = SearchResult(
                best_move=best_move,
                score=score,
                depth=depth,
                nodes=self.nodes,
                elapsed=self.elapsed,
                pv=self._principal_variation(board, best_move, depth),
            )
            logger.debug(
                "depth %d score %s nodes %d pv %s",
                depth, score_to_string(score), self.nodes, " ".join(m.uci() for m in result.pv),
            )
            if on_progress is not None:
                on_progress(result)

            ordered = order_moves(root_moves, best_move)

        result.nodes = self.nodes
        result.elapsed = self.elapsed
        return result

    # ========================================================================
    # Tree Search
    # ========================================================================

    def _search_root(self, board: Board, moves: List[Move], depth: int) -> Tuple[int, Move]:
        """Search every root move with a full window; the root is never probed."""
        self.nodes += 1
        alpha, beta = -INFINITY, INFINITY
        best_move = moves[0]
        best_score = -INFINITY

        for move in moves:
            self._check_limits()
            token = board.apply(move)
            try:
                score = -self._negamax(board, depth - 1, -beta, -alpha, 1)
            finally:
                board.undo(token)

            if score > best_score:
                best_score = score
                best_move = move
            if score > alpha:
                alpha = score

        if self.transposition_table is not None:
            self.transposition_table.store(board.zobrist_hash, depth, best_score, NodeType.EXACT, best_move)
        return best_score, best_move

    def _negamax(self, board: Board, depth: int, alpha: int, beta: int, ply: int) -> int:
        """
        Negamax search with alpha-beta pruning.

        Args:
            board: Current position
            depth: Remaining depth
            alpha: Lower bound of the window
            beta: Upper bound of the window
            ply: Distance from the root

        Returns:
            Score from the side to move's perspective
        """
        self.nodes += 1
        if self.nodes % CHECK_INTERVAL == 0:
            self._check_limits()

        # Path dependent, so decided before the table is consulted
        if board.is_repetition(3) or board.has_insufficient_material():
            return 0

        table = self.transposition_table
        tt_move = None
        if table is not None:
            tt_score, tt_move = table.probe(board.zobrist_hash, depth, alpha, beta, ply)
            if tt_score is not None:
                return tt_score

        if depth <= 0:
            terminal = self.evaluator.evaluate_terminal(board, ply)
            if terminal is not None:
                return terminal
            return self.evaluator.evaluate(board)

        moves = self.generator.generate_legal(board)
        if not moves:
            if board.is_in_check():
                return -(MATE_SCORE - ply)
            return 0
        if board.is_fifty_moves():
            return 0

        original_alpha = alpha
        best_score = -INFINITY
        best_move = None

        for move in order_moves(moves, tt_move):
            token = board.apply(move)
            try:
                score = -self._negamax(board, depth - 1, -beta, -alpha, ply + 1)
            finally:
                board.undo(token)

            if score > best_score:
                best_score = score
                best_move = move
            if score > alpha:
                alpha = score
            if alpha >= beta:
                break

        if table is not None:
            if best_score <= original_alpha:
                node_type = NodeType.UPPER_BOUND
            elif best_score >= beta:
                node_type = NodeType.LOWER_BOUND
            else:
                node_type = NodeType.EXACT
            table.store(board.zobrist_hash, depth, best_score, node_type, best_move, ply)

        return best_score

    # ========================================================================
    # Limits
    # ========================================================================

    def _check_limits(self):
        """Raise SearchAborted once any limit is reached."""
        if self._stop_event.is_set():
            raise SearchAborted("stop requested")
        if self._should_stop is not None and self._should_stop():
            raise SearchAborted("should_stop returned True")

        constraints = self._constraints
        if constraints.node_limit is not None and self.nodes >= constraints.node_limit:
            raise SearchAborted("node limit reached")
        if constraints.time_budget is not None and self.elapsed >= constraints.time_budget:
            raise SearchAborted("time budget exhausted")

    def _out_of_budget(self) -> bool:
        """Whether a new iteration should not be started."""
        if self._stop_event.is_set():
            return True
        if self._should_stop is not None and self._should_stop():
            return True
        constraints = self._constraints
        if constraints.node_limit is not None and self.nodes >= constraints.node_limit:
            return True
        # The next iteration typically costs more than all previous ones
        return constraints.time_budget is not None and self.elapsed > constraints.time_budget / 2

    # ========================================================================
    # Principal Variation
    # ========================================================================

    def _principal_variation(self, board: Board, best_move: Move, depth: int) -> List[Move]:
        """Follow best moves stored in the table, starting with best_move."""
        pv = [best_move]
        table = self.transposition_table
        if table is None:
            return pv

        tokens = [board.apply(best_move)]
        seen = {board.zobrist_hash}
        try:
            while len(pv) < depth:
                entry = table.lookup(board.zobrist_hash)
                if entry is None or entry.best_move is None:
                    break
                move = entry.best_move
                if move not in self.generator.generate_legal(board):
                    break
                tokens.append(board.apply(move))
                pv.append(move)
                if board.zobrist_hash in seen:
                    break
                seen.add(board.zobrist_hash)
        finally:
            for token in reversed(tokens):
                board.undo(token)
        return pv


def find_best_move(
    board: Board,
    constraints: Optional[SearchConstraints] = None,
    evaluator: Optional[Evaluator] = None,
    transposition_table: Optional[TranspositionTable] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    on_progress: Optional[Callable[[SearchResult], None]] = None,
) -> SearchResult:
    """
    One-shot search with a fresh SearchEngine.

    See SearchEngine.find_best_move() for arguments and errors.
    """
    engine = SearchEngine(evaluator=evaluator, transposition_table=transposition_table)
    return engine.find_best_move(board, constraints, should_stop=should_stop, on_progress=on_progress)
