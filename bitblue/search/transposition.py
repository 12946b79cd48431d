"""
Transposition Table

This module implements a transposition table (TT) - a hash table that caches
search results to avoid re-searching positions reached through different
move orders. This is one of the most important optimizations in chess
engines.

Layout:
    A fixed number of slots; a position with hash H lives in slot
    H % max_size. Every entry keeps the full 64-bit hash so that two
    positions sharing a slot are told apart on lookup.

Replacement:
    - Different position in the slot (collision): replace.
    - Same position: replace unless the stored result is deeper.

Mate Scores:
    Mate scores depend on the distance from the root. They are stored
    relative to the node (store adds/subtracts ply) and turned back into
    root-relative scores on probe, so a cached mate found at one ply is
    still correct when the position is reached at another.

References:
    - Transposition Table: https://www.chessprogramming.org/Transposition_Table
    - Zobrist Hashing: https://www.chessprogramming.org/Zobrist_Hashing
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from bitblue.board.types import Move
from bitblue.evaluation.base import MATE_THRESHOLD

logger = logging.getLogger(__name__)

# Nominal memory per entry, used to size the table from a UCI "Hash" value
BYTES_PER_ENTRY = 64
DEFAULT_SIZE = 1 << 20


class NodeType(Enum):
    """
    Type of node in search tree.

    This determines how we can use the cached value:
        - EXACT: The exact evaluation (all moves searched, alpha improved)
        - LOWER_BOUND: Beta cutoff occurred (true value >= stored value)
        - UPPER_BOUND: No move raised alpha (true value <= stored value)
    """
    EXACT = 0
    LOWER_BOUND = 1
    UPPER_BOUND = 2


class TTEntry:
    """
    Entry in the transposition table.

    Attributes:
        zobrist_hash: 64-bit hash of position
        depth: Remaining search depth this entry was computed with
        value: Score in centipawns (mate scores stored node-relative)
        node_type: EXACT, LOWER_BOUND, or UPPER_BOUND
        best_move: Best move found in this position
    """

    __slots__ = ("zobrist_hash", "depth", "value", "node_type", "best_move")

    def __init__(
        self,
        zobrist_hash: int,
        depth: int,
        value: int,
        node_type: NodeType,
        best_move: Optional[Move] = None,
    ):
        self.zobrist_hash = zobrist_hash
        self.depth = depth
        self.value = value
        self.node_type = node_type
        self.best_move = best_move

    def __repr__(self) -> str:
        return (
            f"TTEntry(hash={self.zobrist_hash:#018x}, depth={self.depth}, "
            f"value={self.value}, type={self.node_type.name}, move={self.best_move})"
        )


def score_to_tt(score: int, ply: int) -> int:
    """Convert a root-relative mate score into a node-relative one."""
    if score > MATE_THRESHOLD:
        return score + ply
    if score < -MATE_THRESHOLD:
        return score - ply
    return score


def score_from_tt(score: int, ply: int) -> int:
    """Inverse of score_to_tt()."""
    if score > MATE_THRESHOLD:
        return score - ply
    if score < -MATE_THRESHOLD:
        return score + ply
    return score


class TranspositionTable:
    """
    Fixed-size transposition table keyed by Zobrist hash.

    Attributes:
        max_size: Number of slots
        table: Slot array of TTEntry (or None)
        entries: Number of occupied slots
        hits / misses / collisions: Usage statistics
    """

    def __init__(self, max_size: int = DEFAULT_SIZE):
        """
        Initialize transposition table.

        Args:
            max_size: Number of slots (default 1M)

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self.table: List[Optional[TTEntry]] = [None] * max_size
        self.entries = 0
        self.hits = 0
        self.misses = 0
        self.collisions = 0

    @classmethod
    def from_megabytes(cls, megabytes: int) -> "TranspositionTable":
        """Create a table sized for a memory budget (UCI 'Hash' option)."""
        return cls(max(1, megabytes * 1024 * 1024 // BYTES_PER_ENTRY))

    def store(
        self,
        zobrist_hash: int,
        depth: int,
        value: int,
        node_type: NodeType,
        best_move: Optional[Move] = None,
        ply: int = 0,
    ):
        """
        Store a search result.

        Args:
            zobrist_hash: Zobrist hash of the position
            depth: Remaining depth the result was searched with
            value: Score from the side to move's view (root-relative)
            node_type: EXACT, LOWER_BOUND, or UPPER_BOUND
            best_move: Best move found (optional)
            ply: Distance from the root, for mate score conversion
        """
        slot = zobrist_hash % self.max_size
        existing = self.table[slot]

        if existing is None:
            self.entries += 1
        elif existing.zobrist_hash != zobrist_hash:
            self.collisions += 1
        elif depth < existing.depth:
            # Keep the deeper result for the same position
            return

        self.table[slot] = TTEntry(zobrist_hash, depth, score_to_tt(value, ply), node_type, best_move)

    def lookup(self, zobrist_hash: int) -> Optional[TTEntry]:
        """
        Raw lookup of the entry for a position.

        Returns:
            TTEntry if the slot holds this position, None otherwise
        """
        entry = self.table[zobrist_hash % self.max_size]
        if entry is not None and entry.zobrist_hash == zobrist_hash:
            self.hits += 1
            return entry
        self.misses += 1
        return None

    def probe(
        self,
        zobrist_hash: int,
        depth: int,
        alpha: int,
        beta: int,
        ply: int = 0,
    ) -> Tuple[Optional[int], Optional[Move]]:
        """
        Look up a position for use inside alpha-beta search.

        The score is usable only when the entry was searched to exactly the
        requested depth and its bound fits the window. A deeper result is
        not used for a cutoff, so a search returns the same move and score
        with or without a table. Bounds:
            - EXACT: always
            - LOWER_BOUND: only if it already reaches beta
            - UPPER_BOUND: only if it already falls to alpha

        Args:
            zobrist_hash: Zobrist hash of the position
            depth: Remaining depth requested
            alpha: Current alpha
            beta: Current beta
            ply: Distance from the root, for mate score conversion

        Returns:
            (usable score or None, stored best move or None)
        """
        entry = self.lookup(zobrist_hash)
        if entry is None:
            return None, None

        if entry.depth == depth:
            score = score_from_tt(entry.value, ply)
            node_type = entry.node_type
            if (
                node_type is NodeType.EXACT
                or (node_type is NodeType.LOWER_BOUND and score >= beta)
                or (node_type is NodeType.UPPER_BOUND and score <= alpha)
            ):
                return score, entry.best_move

        return None, entry.best_move

    def clear(self):
        """Clear all entries from the transposition table."""

        self.table = [None] * self.max_size
        self.entries = 0
        self.hits = 0
        self.misses = 0
        self.collisions = 0

    def resize(self, max_size: int):
        """Change the number of slots. Existing entries are discarded."""
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        logger.debug("Resizing transposition table to %d entries", max_size)
        self.max_size = max_size
        self.clear()

    def get_stats(self) -> Dict[str, int | float]:
        """Get statistics about transposition table usage."""

        total_lookups = self.hits + self.misses
        hit_rate = (self.hits / total_lookups * 100) if total_lookups > 0 else 0

        return {
            'entries': self.entries,
            'hits': self.hits,
            'misses': self.misses,
            'collisions': self.collisions,
            'hit_rate': hit_rate,
            'fill': self.entries / self.max_size * 100,
        }

    def __len__(self) -> int:
        return self.entries

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (
            f"TranspositionTable(entries={stats['entries']}, "
            f"hit_rate={stats['hit_rate']:.1f}%)"
        )
