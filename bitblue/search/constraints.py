"""
Search Constraints and Results

SearchConstraints bound a search by depth, wall-clock time and/or node
count; at least one bound must be finite. SearchResult is what a search
hands back (and what the progress callback receives after every completed
depth).

Time Management:
    The UCI 'go' command either fixes the time per move (movetime) or gives
    the remaining clock. For a clock we spend

        remaining / movestogo + 0.75 * increment

    capped at remaining - move_overhead and never less than 10 ms.
    movestogo defaults to 30 when the GUI does not send it.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from bitblue.board.bitboard import WHITE
from bitblue.board.types import Move
from bitblue.evaluation.base import is_mate_score

MAX_DEPTH = 64  # Hard ply limit for iterative deepening
DEFAULT_DEPTH = 5
DEFAULT_MOVESTOGO = 30
DEFAULT_MOVE_OVERHEAD_MS = 50
MIN_TIME_MS = 10
INCREMENT_SHARE = 0.75


def allocate_time(
    remaining_ms: int,
    increment_ms: int = 0,
    movestogo: Optional[int] = None,
    move_overhead_ms: int = DEFAULT_MOVE_OVERHEAD_MS,
) -> float:
    """
    Time to spend on one move, in seconds.

    Args:
        remaining_ms: Time left on our clock
        increment_ms: Increment per move
        movestogo: Moves until the next time control (None = sudden death)
        move_overhead_ms: Safety margin for communication lag

    Returns:
        Time budget in seconds
    """
    moves = movestogo if movestogo and movestogo > 0 else DEFAULT_MOVESTOGO
    budget = remaining_ms / moves + INCREMENT_SHARE * increment_ms
    budget = min(budget, remaining_ms - move_overhead_ms)
    return max(budget, MIN_TIME_MS) / 1000.0


@dataclass
class SearchConstraints:
    """
    Limits for one search.

    Attributes:
        max_depth: Hard ply limit (None = up to MAX_DEPTH)
        time_budget: Wall-clock budget in seconds (None = unlimited)
        node_limit: Maximum number of nodes (None = unlimited)
    """

    max_depth: Optional[int] = None
    time_budget: Optional[float] = None
    node_limit: Optional[int] = None

    def __post_init__(self):
        """Validate that the search is bounded."""
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.time_budget is not None and (math.isnan(self.time_budget) or self.time_budget < 0):
            raise ValueError(f"time_budget must be non-negative, got {self.time_budget}")
        if self.node_limit is not None and self.node_limit < 1:
            raise ValueError(f"node_limit must be positive, got {self.node_limit}")

        finite_time = self.time_budget is not None and math.isfinite(self.time_budget)
        if self.max_depth is None and not finite_time and self.node_limit is None:
            raise ValueError("At least one of max_depth, time_budget or node_limit must be finite")

    @property
    def depth_limit(self) -> int:
        """Deepest iteration to run."""
        if self.max_depth is None:
            return MAX_DEPTH
        return min(self.max_depth, MAX_DEPTH)

    @classmethod
    def from_go(
        cls,
        turn: int = WHITE,
        depth: Optional[int] = None,
        movetime: Optional[int] = None,
        wtime: Optional[int] = None,
        btime: Optional[int] = None,
        winc: int = 0,
        binc: int = 0,
        movestogo: Optional[int] = None,
        nodes: Optional[int] = None,
        infinite: bool = False,
        default_depth: int = DEFAULT_DEPTH,
        move_overhead_ms: int = DEFAULT_MOVE_OVERHEAD_MS,
    ) -> "SearchConstraints":
        """
        Build constraints from the parameters of a UCI 'go' command.

        Times are in milliseconds as in the protocol. 'infinite' searches
        to MAX_DEPTH and relies on 'stop'. Without any limit the search
        runs to default_depth.
        """
        if infinite:
            return cls(max_depth=MAX_DEPTH)

        time_budget = None
        if movetime is not None:
            time_budget = max(movetime - move_overhead_ms, MIN_TIME_MS) / 1000.0
        else:
            remaining = wtime if turn == WHITE else btime
            increment = winc if turn == WHITE else binc
            if remaining is not None:
                time_budget = allocate_time(remaining, increment or 0, movestogo, move_overhead_ms)

        if depth is None and time_budget is None and nodes is None:
            depth = default_depth

        return cls(max_depth=depth, time_budget=time_budget, node_limit=nodes)


@dataclass
class SearchResult:
    """
    Outcome of a search (or a snapshot after one completed depth).

    Attributes:
        best_move: Best move found (None only for an empty search)
        score: Centipawns from the side to move's perspective
        depth: Deepest fully completed iteration (0 = fallback move)
        nodes: Nodes visited
        elapsed: Seconds spent
        pv: Principal variation starting with best_move
    """

    best_move: Optional[Move]
    score: int
    depth: int
    nodes: int = 0
    elapsed: float = 0.0
    pv: List[Move] = field(default_factory=list)

    @property
    def nps(self) -> int:
        return int(self.nodes / self.elapsed) if self.elapsed > 0 else 0

    @property
    def is_mate(self) -> bool:
        return is_mate_score(self.score)
