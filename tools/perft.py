#!/usr/bin/env python3
"""
Perft Runner

Counts the leaves of the legal move tree, optionally split by root move
("divide"), and can cross-check every root move against python-chess to
pinpoint move generation bugs.

Usage:
    # Published reference positions
    python tools/perft.py --suite --depth 3

    # One position
    python tools/perft.py --fen "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1" --depth 3

    # Per-move split compared against python-chess
    python tools/perft.py --depth 3 --divide --check
"""

import argparse
import sys
import time

import chess
from tqdm import tqdm

from bitblue.board.interop import to_python_chess
from bitblue.board.position import STARTING_FEN, Board
from bitblue.errors import InvalidFenError
from bitblue.movegen.generator import MoveGenerator
from bitblue.utils.testing import run_perft_suite


def python_chess_perft(board: chess.Board, depth: int) -> int:
    """Reference perft on a python-chess board."""
    if depth <= 0:
        return 1
    if depth == 1:
        return board.legal_moves.count()
    nodes = 0
    for move in board.legal_moves:
        board.push(move)
        nodes += python_chess_perft(board, depth - 1)
        board.pop()
    return nodes


def python_chess_divide(board: chess.Board, depth: int) -> dict:
    counts = {}
    for move in board.legal_moves:
        board.push(move)
        counts[move.uci()] = python_chess_perft(board, depth - 1)
        board.pop()
    return counts


def run_divide(board: Board, depth: int, check: bool) -> int:
    """
    Print the perft split by root move.

    Returns:
        Number of root moves whose counts disagree with python-chess
    """
    generator = MoveGenerator()
    counts = {}
    for move in tqdm(generator.generate_legal(board), desc=f"divide {depth}", leave=False):
        token = board.apply(move)
        try:
            counts[move.uci()] = generator.perft(board, depth - 1)
        finally:
            board.undo(token)

    reference = python_chess_divide(to_python_chess(board), depth) if check else {}

    mismatches = 0
    for uci in sorted(set(counts) | set(reference)):
        line = f"{uci}: {counts.get(uci, '-')}"
        if check and counts.get(uci) != reference.get(uci):
            line += f"  (python-chess: {reference.get(uci, '-')})"
            mismatches += 1
        print(line)

    print(f"\nMoves: {len(counts)}")
    print(f"Nodes: {sum(counts.values()):,}")
    if check:
        print(f"Mismatches: {mismatches}")
    return mismatches


def main():
    parser = argparse.ArgumentParser(
        description="Count legal move tree leaves (perft)"
    )
    parser.add_argument(
        "--fen",
        type=str,
        default=STARTING_FEN,
        help="Position to count (default: starting position)"
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Depth in plies (default: 3)"
    )
    parser.add_argument(
        "--divide",
        action="store_true",
        help="Print counts per root move"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Compare against python-chess"
    )
    parser.add_argument(
        "--suite",
        action="store_true",
        help="Run the reference positions up to --depth"
    )

    args = parser.parse_args()

    if args.depth < 1:
        print("Error: depth must be at least 1")
        sys.exit(1)

    if args.suite:
        summary = run_perft_suite(max_depth=args.depth)
        print(f"\n{summary['passed']}/{summary['total']} counts match ({summary['nodes']:,} nodes in {summary['total_time']:.1f}s)")
        sys.exit(0 if summary['passed'] == summary['total'] else 1)

    try:
        board = Board(args.fen)
    except InvalidFenError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(board)
    print()

    if args.divide:
        sys.exit(1 if run_divide(board, args.depth, args.check) else 0)

    start_time = time.time()
    nodes = MoveGenerator().perft(board, args.depth)
    elapsed = time.time() - start_time
    print(f"perft({args.depth}) = {nodes:,}  [{elapsed:.2f}s, {nodes / elapsed if elapsed > 0 else 0:,.0f} nodes/s]")

    if args.check:
        expected = python_chess_perft(to_python_chess(board), args.depth)
        print(f"python-chess:  {expected:,}")
        sys.exit(0 if expected == nodes else 1)


if __name__ == "__main__":
    main()
