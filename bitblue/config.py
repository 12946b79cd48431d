"""
Engine configuration.

Settings can come from a JSON file, e.g.

    {
        "hash_size_mb": 64,
        "default_depth": 6,
        "start_fen": "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    }

EngineConfig.load() reads the file named by $BITBLUE_SETTINGS when no path
is given and falls back to the defaults when neither exists.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from bitblue.board.position import STARTING_FEN, Board
from bitblue.errors import InvalidFenError

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "BITBLUE_SETTINGS"
DEFAULT_LOG_FILE = Path.home() / ".bitblue" / "engine.log"


@dataclass
class EngineConfig:
    """Configuration for the UCI engine.

    Every field can be overridden from a JSON settings file.
    """

    # Identity
    name: str = "BitBlue"
    """Engine name reported by 'id name'"""

    author: str = "BitBlue developers"
    """Author reported by 'id author'"""

    # Search
    hash_size_mb: int = 16
    """Transposition table size in megabytes (UCI 'Hash' option)"""

    default_depth: int = 5
    """Depth searched when 'go' carries no limit"""

    max_depth: int = 64
    """Upper bound for any requested depth"""

    # Time management
    move_overhead_ms: int = 50
    """Safety margin subtracted from the clock for communication lag"""

    default_movestogo: int = 30
    """Moves assumed left in the time control when 'movestogo' is absent"""

    # Position
    start_fen: str = STARTING_FEN
    """Position loaded at startup and on 'ucinewgame'"""

    # Logging
    log_file: Optional[Path] = DEFAULT_LOG_FILE
    """Engine log file (None disables file logging)"""

    debug: bool = False
    """Log at DEBUG level instead of INFO"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.log_file is not None:
            self.log_file = Path(self.log_file).expanduser()

        if not 1 <= self.hash_size_mb <= 1024:
            raise ValueError(f"hash_size_mb must be between 1 and 1024, got {self.hash_size_mb}")

        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")

        if not 1 <= self.default_depth <= self.max_depth:
            raise ValueError(
                f"default_depth must be between 1 and max_depth ({self.max_depth}), got {self.default_depth}"
            )

        if self.move_overhead_ms < 0:
            raise ValueError(f"move_overhead_ms must be non-negative, got {self.move_overhead_ms}")

        if self.default_movestogo <= 0:
            raise ValueError(f"default_movestogo must be positive, got {self.default_movestogo}")

        try:
            Board(self.start_fen)
        except InvalidFenError as e:
            raise ValueError(f"start_fen is not a valid position: {e}") from e

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "EngineConfig":
        """
        Load settings from a JSON file.

        Args:
            path: Settings file containing a JSON object

        Returns:
            EngineConfig with the file's values over the defaults

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON object, names unknown
                settings, or holds invalid values
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{path}: settings must be a JSON object")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"{path}: unknown settings: {', '.join(unknown)}")

        logger.debug(f"Loaded settings from {path}")
        return cls(**data)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "EngineConfig":
        """
        Load settings from `path`, or from $BITBLUE_SETTINGS, or defaults.
        """
        if path is None:
            path = os.environ.get(SETTINGS_ENV_VAR)
        if not path:
            return cls()
        return cls.from_json(path)
