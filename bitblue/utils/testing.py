"""
Chess Engine Testing and Benchmarking

This module provides test suites and benchmarking tools for evaluating
chess engine correctness and performance.

Test Suites:
    1. Perft: Leaf counts of the legal move tree for well-known positions
       - Any mismatch means a move generation bug
       - Counts from the Chess Programming Wiki "Perft Results" page

    2. Bratko-Kopec Test: 24 positions
       - Created by Danny Kopec and Ivan Bratko (1982)
       - Tests tactical vision and search effectiveness
       - Each position has a known best move

Evaluation Metrics:
    - Correct Moves: Number of positions where engine found best move
    - Time per Position: Average thinking time
    - Nodes Searched: Total nodes visited

References:
    - Perft Results: https://www.chessprogramming.org/Perft_Results
    - Bratko-Kopec: https://www.chessprogramming.org/Bratko-Kopec_Test
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bitblue.board.position import STARTING_FEN, Board
from bitblue.errors import BitBlueError
from bitblue.evaluation.base import Evaluator
from bitblue.movegen.generator import MoveGenerator
from bitblue.search.constraints import SearchConstraints
from bitblue.search.negamax import SearchEngine
from bitblue.search.transposition import TranspositionTable

logger = logging.getLogger(__name__)


@dataclass
class SuitePosition:
    """
    A test position with expected best move(s).

    Attributes:
        id: Position identifier (e.g., "BK.01" for Bratko-Kopec #1)
        fen: Board position in FEN notation
        best_moves: Acceptable best moves (UCI format)
    """
    id: str
    fen: str
    best_moves: List[str]


@dataclass
class SuiteResult:
    """
    Result of searching a single position.

    Attributes:
        position: The test position
        found_move: Move the engine found (UCI format, "" on error)
        score: Score of the move in centipawns
        correct: Whether the engine found a best move
        time_taken: Time spent searching (seconds)
        nodes_searched: Number of nodes visited
        depth: Depth reached
    """
    position: SuitePosition
    found_move: str
    score: int
    correct: bool
    time_taken: float
    nodes_searched: int = 0
    depth: int = 0


@dataclass
class PerftPosition:
    """A perft reference position: counts[i] is the leaf count at depth i + 1."""
    name: str
    fen: str
    counts: List[int]


@dataclass
class PerftResult:
    name: str
    depth: int
    expected: int
    actual: int
    time_taken: float

    @property
    def passed(self) -> bool:
        return self.actual == self.expected


# ============================================================================
# Perft Reference Positions
# ============================================================================

KIWIPETE_FEN = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"

PERFT_POSITIONS = [
    PerftPosition("startpos", STARTING_FEN, [20, 400, 8902, 197281]),
    PerftPosition("kiwipete", KIWIPETE_FEN, [48, 2039, 97862]),
    PerftPosition("position3", "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", [14, 191, 2812, 43238]),
    PerftPosition("position4", "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1", [6, 264, 9467]),
    PerftPosition("position5", "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8", [44, 1486, 62379]),
    PerftPosition(
        "position6",
        "r4rk1/1pp1qppp/p1np1n2/2b1p1B1/2B1P1b1/P1NP1N2/1PP1QPPP/R4RK1 w - - 0 10",
        [46, 2079, 89890],
    ),
]


# ============================================================================
# Bratko-Kopec Test Suite
# ============================================================================

#fmt: off
_BRATKO_KOPEC = [
    ("BK.01", "1k1r4/pp1b1R2/3q2pp/4p3/2B5/4Q3/PPP2B2/2K5 b - - 0 1", ["d6d1"]),
    ("BK.02", "3r1k2/4npp1/1ppr3p/p6P/P2PPPP1/1NR5/5K2/2R5 w - - 0 1", ["d4d5"]),
    ("BK.03", "2q1rr1k/3bbnnp/p2p1pp1/2pPp3/PpP1P1P1/1P2BNNP/2BQ1PRK/7R b - - 0 1", ["f6f5"]),
    ("BK.04", "rnbqkb1r/p3pppp/1p6/2ppP3/3N4/2P5/PPP1QPPP/R1B1KB1R w KQkq - 0 1", ["e5e6"]),
    ("BK.05", "r1b2rk1/2q1b1pp/p2ppn2/1p6/3QP3/1BN1B3/PPP3PP/R4RK1 w - - 0 1", ["d4d7", "c3d5"]),
    ("BK.06", "2r3k1/pppR1pp1/4p3/4P1P1/5P2/1P4K1/P1P5/8 w - - 0 1", ["g5g6"]),
    ("BK.07", "1nk1r1r1/pp2n1pp/4p3/q2pPp1N/b1pP1P2/B1P2R2/2P1B1PP/R2Q2K1 w - - 0 1", ["h5f6"]),
    ("BK.08", "4b3/p3kp2/6p1/3pP2p/2pP1P2/4K1P1/P3N2P/8 w - - 0 1", ["f4f5"]),
    ("BK.09", "2kr1bnr/pbpq4/2n1pp2/3p3p/3P1P1B/2N2N1Q/PPP3PP/2KR1B1R w - - 0 1", ["f4f5"]),
    ("BK.10", "3rr1k1/pp3pp1/1qn2np1/8/3p4/PP1R1P2/2P1NQPP/R1B3K1 b - - 0 1", ["c6e5"]),
    ("BK.11", "2r1nrk1/p2q1ppp/bp1p4/n1pPp3/P1P1P3/2PBB1N1/4QPPP/R4RK1 w - - 0 1", ["f2f4"]),
    ("BK.12", "r3r1k1/ppqb1ppp/8/4p1NQ/8/2P5/PP3PPP/R3R1K1 b - - 0 1", ["d7f5"]),
    ("BK.13", "r2q1rk1/4bppp/p2p4/2pP4/3pP3/3Q4/PP1B1PPP/R3R1K1 w - - 0 1", ["b2b4"]),
    ("BK.14", "rnb2r1k/pp2p2p/2pp2p1/q2P1p2/8/1Pb2NP1/PB2PPBP/R2Q1RK1 w - - 0 1", ["d5c6", "d5d6"]),
    ("BK.15", "2r3k1/1p2q1pp/2b1pr2/p1pp4/6Q1/1P1PP1R1/P1PN2PP/5RK1 w - - 0 1", ["g4g7"]),
    ("BK.16", "r1bqkb1r/4npp1/p1p4p/1p1pP1B1/3N1P2/2N5/PPP3PP/R2QK2R w KQkq - 0 1", ["e5e6"]),
    ("BK.17", "r2q1rk1/1ppnbppp/p2p1nb1/3Pp3/2P1P1P1/2N2N1P/PPB1QP2/R1B2RK1 b - - 0 1", ["h7h5"]),
    ("BK.18", "r1bq1rk1/pp2ppbp/2np2p1/2n5/P3PP2/N1P2N2/1PB3PP/R1B1QRK1 b - - 0 1", ["c6b4"]),
    ("BK.19", "3rr3/2pq2pk/p2p1pnp/8/2QBPP2/1P6/P5PP/4RRK1 b - - 0 1", ["e8e4"]),
    ("BK.20", "r4k2/pb2bp1r/1p1qp2p/3pNp2/3P1P2/2N3P1/PPP1Q2P/2KRR3 w - - 0 1", ["g3g4"]),
    ("BK.21", "3rn2k/ppb2rpp/2ppqp2/5N2/2P1P3/1P5Q/PB3PPP/3RR1K1 w - - 0 1", ["h3h7"]),
    ("BK.22", "2r2rk1/1bqnbpp1/1p1ppn1p/pP6/N1P1P3/P2B1N1P/1B2QPP1/R2R2K1 b - - 0 1", ["b7e4"]),
    ("BK.23", "r1bqk2r/pp2bppp/2p5/3pP3/P2Q1P2/2N1B3/1PP3PP/R4RK1 b kq - 0 1", ["e8g8"]),
    ("BK.24", "r2qnrnk/p2b2b1/1p1p2pp/2pPpp2/1PP1P3/PRNBB3/3QNPPP/5RK1 w - - 0 1", ["f2f4"]),
]
#fmt: on

BRATKO_KOPEC_POSITIONS = [SuitePosition(id_, fen, moves) for id_, fen, moves in _BRATKO_KOPEC]


def evaluate_position(
    position: SuitePosition,
    constraints: SearchConstraints,
    evaluator: Optional[Evaluator] = None,
    transposition_table: Optional[TranspositionTable] = None,
    verbose: bool = False,
) -> SuiteResult:
    """
    Search a single test position.

    Args:
        position: Test position to search
        constraints: Search limits
        evaluator: Position evaluator (default: ClassicalEvaluator)
        transposition_table: Optional TT for caching
        verbose: If True, print detailed output

    Returns:
        SuiteResult with engine's move and whether it was correct
    """
    if verbose:
        print(f"\nTesting {position.id}")
        print(f"FEN: {position.fen}")
        print(f"Expected moves: {position.best_moves}")

    start_time = time.time()

    try:
        board = Board(position.fen)
        engine = SearchEngine(evaluator=evaluator, transposition_table=transposition_table)
        result = engine.find_best_move(board, constraints)
    except BitBlueError as e:
        logger.error(f"Error evaluating position {position.id}: {e}")
        return SuiteResult(
            position=position,
            found_move="",
            score=0,
            correct=False,
            time_taken=time.time() - start_time,
        )

    time_taken = time.time() - start_time
    found_move = result.best_move.uci()
    correct = found_move in position.best_moves

    if verbose:
        print(f"Engine found: {found_move} (score: {result.score})")
        print(f"Nodes searched: {result.nodes:,}")
        print(f"Principal variation: {' '.join(m.uci() for m in result.pv[:5])}")
        print(f"Time: {time_taken:.2f}s")
        print(f"Result: {'✓ CORRECT' if correct else '✗ WRONG'}")

    return SuiteResult(
        position=position,
        found_move=found_move,
        score=result.score,
        correct=correct,
        time_taken=time_taken,
        nodes_searched=result.nodes,
        depth=result.depth,
    )


def run_bratko_kopec(
    constraints: SearchConstraints,
    evaluator: Optional[Evaluator] = None,
    transposition_table: Optional[TranspositionTable] = None,
    positions: Optional[List[SuitePosition]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run the Bratko-Kopec test suite.

    Args:
        constraints: Search limits per position
        evaluator: Position evaluator
        transposition_table: Optional TT (cleared before every position)
        positions: Subset of positions to run (default: all 24)
        verbose: If True, print detailed results

    Returns:
        Dictionary with test results:
            - score: Number of correct positions
            - total: Total number of positions
            - percentage: Success percentage
            - results: List of SuiteResult objects
            - avg_time: Average time per position
            - total_time: Time for the whole suite
    """
    if positions is None:
        positions = BRATKO_KOPEC_POSITIONS

    if verbose:
        print("=" * 70)
        print("BRATKO-KOPEC TEST SUITE")
        print("=" * 70)

    results = []
    for position in positions:
        if transposition_table is not None:
            transposition_table.clear()
        results.append(
            evaluate_position(position, constraints, evaluator, transposition_table, verbose=verbose)
        )

    correct_count = sum(1 for r in results if r.correct)
    total_time = sum(r.time_taken for r in results)
    avg_time = total_time / len(positions) if positions else 0
    percentage = (correct_count / len(positions) * 100) if positions else 0

    if verbose:
        print("\n" + "=" * 70)
        print("SUMMARY")
        print("=" * 70)
        print(f"Score: {correct_count}/{len(positions)} ({percentage:.1f}%)")
        print(f"Average time: {avg_time:.2f}s")
        print(f"Total time: {total_time:.2f}s")

    return {
        'score': correct_count,
        'total': len(positions),
        'percentage': percentage,
        'results': results,
        'avg_time': avg_time,
        'total_time': total_time,
    }


def run_perft_suite(
    max_depth: Optional[int] = None,
    positions: Optional[List[PerftPosition]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run perft on the reference positions and compare with published counts.

    Args:
        max_depth: Deepest depth to run per position (None = all known)
        positions: Positions to run (default: PERFT_POSITIONS)
        verbose: If True, print one line per depth

    Returns:
        Dictionary with:
            - passed: Number of matching counts
            - total: Number of counts checked
            - results: List of PerftResult objects
            - nodes: Total leaf nodes counted
            - total_time: Seconds spent
    """
    if positions is None:
        positions = PERFT_POSITIONS

    generator = MoveGenerator()
    results = []

    for position in positions:
        board = Board(position.fen)
        for depth, expected in enumerate(position.counts, start=1):
            if max_depth is not None and depth > max_depth:
                break
            start_time = time.time()
            actual = generator.perft(board, depth)
            result = PerftResult(position.name, depth, expected, actual, time.time() - start_time)
            results.append(result)

            if verbose:
                status = "ok" if result.passed else f"FAIL (expected {expected:,})"
                print(f"{position.name:<10} depth {depth}: {actual:>10,} {status}  [{result.time_taken:.2f}s]")
            if not result.passed:
                logger.warning(f"perft mismatch {position.name} depth {depth}: {actual} != {expected}")

    return {
        'passed': sum(1 for r in results if r.passed),
        'total': len(results),
        'results': results,
        'nodes': sum(r.actual for r in results),
        'total_time': sum(r.time_taken for r in results),
    }
