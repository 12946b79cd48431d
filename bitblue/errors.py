"""
Engine Exceptions

All errors raised by the engine derive from BitBlueError. The concrete
errors also derive from ValueError so callers that only know about the
built-in exception keep working.

Taxonomy:
    - InvalidFenError: malformed or impossible position (adapter input)
    - IllegalMoveError: a move that does not fit the current position
    - GameOverError: a search was requested in a finished position
"""

from typing import Optional


class BitBlueError(Exception):
    """Base class for engine errors."""


class InvalidFenError(BitBlueError, ValueError):
    """Raised when a FEN string cannot be turned into a valid Board."""


class IllegalMoveError(BitBlueError, ValueError):
    """Raised when a move does not match the position it is applied to."""


class GameOverError(BitBlueError, ValueError):
    """
    Raised when the side to move has no legal move.

    Attributes:
        outcome: Outcome describing why the game is over (checkmate/stalemate)
    """

    def __init__(self, message: str, outcome: Optional[object] = None):
        super().__init__(message)
        self.outcome = outcome
