#!/usr/bin/env python3
"""
Bratko-Kopec Benchmark Runner

Runs the Bratko-Kopec test suite at multiple depths to establish
baseline performance metrics for the chess engine.

Usage:
    python tools/run_benchmark.py [--depths 3,4,5] [--movetime 5000] [--hash-mb 64] [--verbose]
"""

import argparse
import sys

from tqdm import tqdm

from bitblue.evaluation.classical import ClassicalEvaluator
from bitblue.search.constraints import SearchConstraints
from bitblue.search.transposition import TranspositionTable
from bitblue.utils.testing import BRATKO_KOPEC_POSITIONS, run_bratko_kopec


def format_time(seconds: float) -> str:
    """Format time"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"


def run_depth(depth: int, movetime_ms, hash_mb: int, verbose: bool) -> dict:
    """Run the whole suite once with a fresh table."""
    evaluator = ClassicalEvaluator()
    tt = TranspositionTable.from_megabytes(hash_mb)
    constraints = SearchConstraints(
        max_depth=depth,
        time_budget=movetime_ms / 1000 if movetime_ms else None,
    )

    positions = BRATKO_KOPEC_POSITIONS if verbose else tqdm(BRATKO_KOPEC_POSITIONS, desc=f"Depth {depth}", leave=False)
    summary = run_bratko_kopec(constraints, evaluator, tt, positions=positions, verbose=verbose)

    total_time = summary['total_time']
    total_nodes = sum(r.nodes_searched for r in summary['results'])
    summary['depth'] = depth
    summary['total_nodes'] = total_nodes
    summary['nodes_per_sec'] = total_nodes / total_time if total_time > 0 else 0
    return summary


def run_benchmark(depths: list[int], movetime_ms=None, hash_mb: int = 64, verbose: bool = False):
    """
    Run Bratko-Kopec benchmark at multiple depths.

    Args:
        depths: List of depths to test
        movetime_ms: Optional time cap per position
        hash_mb: Transposition table size
        verbose: If True, print detailed results for each position
    """
    print("=" * 80)
    print("BRATKO-KOPEC BENCHMARK - BitBlue Chess Engine")
    print("=" * 80)
    print("Evaluator: Classical (Piece-Square Tables)")
    print("Search: Iterative-deepening negamax with alpha-beta + transposition table")
    print(f"Depths: {depths}")
    if movetime_ms:
        print(f"Time cap: {format_time(movetime_ms / 1000)} per position")
    print("=" * 80)

    all_results = []
    for depth in depths:
        r = run_depth(depth, movetime_ms, hash_mb, verbose)
        all_results.append(r)

        print(f"\nResults at depth {depth}:")
        print(f"  Correct: {r['score']}/{r['total']} ({r['percentage']:.1f}%)")
        print(f"  Total time: {format_time(r['total_time'])}")
        print(f"  Avg time per position: {format_time(r['avg_time'])}")
        print(f"  Total nodes: {r['total_nodes']:,}")
        print(f"  Nodes/sec: {r['nodes_per_sec']:,.0f}")

        failed = [p for p in r['results'] if not p.correct]
        if failed and verbose:
            print("\n  Failed positions:")
            for p in failed:
                print(f"    {p.position.id}: Expected {p.position.best_moves}, got {p.found_move}")

    print("\n" + "=" * 80)
    print("SUMMARY TABLE")
    print("=" * 80)
    print(f"{'Depth':<8} {'Correct':<12} {'%':<8} {'Avg Time':<12} {'Nodes/sec':<15}")
    print("-" * 80)
    for r in all_results:
        print(
            f"{r['depth']:<8} {r['score']}/{r['total']:<8} {r['percentage']:<7.1f}% "
            f"{format_time(r['avg_time']):<12} {r['nodes_per_sec']:>12,.0f}"
        )
    print("=" * 80)

    solved = {p.position.id for r in all_results for p in r['results'] if p.correct}
    always_failed = sorted(p.id for p in BRATKO_KOPEC_POSITIONS if p.id not in solved)
    if always_failed:
        print(f"\nPositions that failed at all depths: {', '.join(always_failed)}")

    return all_results


def main():
    parser = argparse.ArgumentParser(
        description="Run Bratko-Kopec benchmark at multiple depths"
    )
    parser.add_argument(
        "--depths",
        type=str,
        default="3,4,5",
        help="Comma-separated list of depths to test (default: 3,4,5)"
    )
    parser.add_argument(
        "--movetime",
        type=int,
        default=None,
        help="Time cap per position in milliseconds"
    )
    parser.add_argument(
        "--hash-mb",
        type=int,
        default=64,
        help="Transposition table size in MB (default: 64)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed results for each position"
    )

    args = parser.parse_args()

    try:
        depths = [int(d.strip()) for d in args.depths.split(",")]
    except ValueError:
        print("Error: depths must be comma-separated integers")
        sys.exit(1)

    try:
        run_benchmark(depths, movetime_ms=args.movetime, hash_mb=args.hash_mb, verbose=args.verbose)
    except KeyboardInterrupt:
        print("\n\nBenchmark interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
