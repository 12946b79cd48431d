"""
BitBlue Chess Engine

A small UCI chess engine built on bitboards, with classical evaluation and
iterative-deepening negamax search.

## Architecture

The engine is organized into several key modules:

1. **board**: Board representation
   - 12 piece bitboards, incremental Zobrist hash, apply/undo
   - FEN parsing, UCI move notation, python-chess interop

2. **movegen**: Legal move generation
   - Precomputed attack tables and sliding rays
   - Perft for verification

3. **evaluation**: Position evaluation functions
   - Abstract Evaluator interface (swappable design)
   - ClassicalEvaluator: material + piece-square tables

4. **search**: Search algorithms
   - Negamax with alpha-beta pruning and iterative deepening
   - Transposition table
   - Depth, time and node limits

5. **uci**: Universal Chess Interface protocol
   - UCI command handling
   - Background search thread

6. **utils**: Testing and benchmarking utilities
   - Bratko-Kopec test suite
   - Perft reference positions

## Quick Start

### As a Python Library

```python
from bitblue.board import set_position
from bitblue.search import SearchConstraints, find_best_move

board = set_position("startpos", ["e2e4", "e7e5"])
result = find_best_move(board, SearchConstraints(max_depth=4))
print(f"Best move: {result.best_move} (score: {result.score})")
```

### As a UCI Engine

```bash
python -m bitblue.uci
```

Then connect with a chess GUI (Arena, CuteChess, etc.)
"""

__version__ = "0.1.0"
__license__ = "MIT"
