"""
UCI Protocol Implementation

This module implements the Universal Chess Interface (UCI) protocol for
communication between the chess engine and GUI applications.
The engine receives total time remaining and allocates time per move
(see bitblue.search.constraints).

UCI Commands Supported:
    - uci: Identify engine
    - isready: Synchronization check
    - ucinewgame: Start new game
    - setoption name Hash value N: Resize the transposition table
    - position: Set board position
    - go: Start searching
    - stop: Stop searching
    - d: Print the board (debugging aid)
    - quit: Shutdown engine

Threading:
    - Main thread: Listen for UCI commands
    - Search thread: Run the search on a copy of the board
    - Communication: One threading.Event stop flag per search

References:
    - UCI Protocol: https://www.chessprogramming.org/UCI
"""

import argparse
import logging
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from bitblue import __version__
from bitblue.board.notation import parse_uci_move
from bitblue.board.position import STARTING_FEN, Board
from bitblue.config import EngineConfig
from bitblue.errors import GameOverError, IllegalMoveError, InvalidFenError
from bitblue.evaluation.base import Evaluator
from bitblue.movegen.generator import MoveGenerator
from bitblue.search.constraints import SearchConstraints, SearchResult
from bitblue.search.negamax import SearchEngine, score_to_string
from bitblue.search.transposition import BYTES_PER_ENTRY, TranspositionTable

HASH_MIN_MB = 1
HASH_MAX_MB = 1024

STOP_TIMEOUT = 5.0  # Seconds to wait for a stopped search to answer

GO_INT_PARAMS = ("depth", "movetime", "wtime", "btime", "winc", "binc", "movestogo", "nodes")


def setup_logger(log_file: Optional[Path] = None, debug: bool = True) -> logging.Logger:
    """
    Setup file-based logger for UCI debugging.

    stdout belongs to the protocol, so the engine logs to a file only.

    Args:
        log_file: Log file path (None: no file output)
        debug: If True, log at DEBUG level; otherwise INFO level

    Returns:
        Configured logger instance (parent of all bitblue.* loggers)
    """
    logger = logging.getLogger("bitblue")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return logger

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class UCIEngine:
    """
    UCI-compliant chess engine interface.

    This class handles all UCI communication and coordinates the search
    engine with the evaluation function.

    Attributes:
        config: Engine settings
        board: Current chess position
        transposition_table: Cache shared by all searches of a game
        search_engine: Iterative deepening searcher
        search_thread: Background thread for search
        stop_timeout: Seconds handle_stop() waits for the search thread
        running: False once 'quit' was received

    Methods:
        run: Main UCI command loop
        handle_command: Dispatch one command line
        handle_uci / handle_isready / handle_ucinewgame / handle_setoption
        handle_position / handle_go / handle_stop / handle_display / handle_quit
    """

    def __init__(self, config: Optional[EngineConfig] = None, evaluator: Optional[Evaluator] = None):
        """
        Initialize UCI engine.

        Args:
            config: Engine settings (default: EngineConfig.load())
            evaluator: Position evaluator (default: ClassicalEvaluator)
        """
        self.config = config if config is not None else EngineConfig.load()
        self.board = Board(self.config.start_fen)
        self.generator = MoveGenerator()
        self.transposition_table = TranspositionTable.from_megabytes(self.config.hash_size_mb)
        self.search_engine = SearchEngine(
            evaluator=evaluator,
            transposition_table=self.transposition_table,
            generator=self.generator,
        )

        # Search state
        self.search_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.stop_timeout = STOP_TIMEOUT
        self.running = True

        self.logger = setup_logger(self.config.log_file, debug=self.config.debug)
        self.logger.info(f"=== {self.config.name} {__version__} Engine Started ===")
        if self.config.log_file is not None:
            self.logger.info(f"Log file: {self.config.log_file}")

    @property
    def searching(self) -> bool:
        return self.search_thread is not None and self.search_thread.is_alive()

    def send(self, line: str):
        """Write one protocol line to stdout."""
        print(line)
        sys.stdout.flush()
        self.logger.debug(f"<<< {line}")

    def report_error(self, message: str):
        """Log an error and echo it to stderr as a comment line."""
        self.logger.error(message)
        print(f"# {message}", file=sys.stderr)

    def run(self):
        """
        Main UCI command loop.

        Listens for UCI commands on stdin and responds on stdout.
        Runs until 'quit' command is received or stdin is closed.
        """
        while self.running:
            try:
                command = input()
            except EOFError:
                self.logger.info("EOF received, shutting down")
                self.handle_quit()
                break

            try:
                self.handle_command(command)
            except Exception as e:
                self.logger.error(f"Command error: {e}", exc_info=True)
                print(f"# Error: {e}", file=sys.stderr)

    def handle_command(self, command: str):
        """
        Parse and execute a single command line.

        Unknown commands are ignored, as the protocol requires.
        """
        command = command.strip()
        if not command:
            return

        self.logger.debug(f">>> {command}")

        tokens = command.split()
        cmd = tokens[0].lower()

        if cmd == "uci":
            self.handle_uci()
        elif cmd == "isready":
            self.handle_isready()
        elif cmd == "ucinewgame":
            self.handle_ucinewgame()
        elif cmd == "setoption":
            self.handle_setoption(tokens)
        elif cmd == "position":
            self.handle_position(tokens)
        elif cmd == "go":
            self.handle_go(tokens)
        elif cmd == "stop":
            self.handle_stop()
        elif cmd == "d":
            self.handle_display()
        elif cmd == "quit":
            self.handle_quit()
        else:
            self.logger.debug(f"Unknown command ignored: {command}")

    def handle_uci(self):
        """
        Handle 'uci' command - identify engine.

        Response:
            id name BitBlue 0.1.0
            id author ...
            option name Hash type spin default 16 min 1 max 1024
            uciok
        """
        self.logger.info("Handling: uci")

        self.send(f"id name {self.config.name} {__version__}")
        self.send(f"id author {self.config.author}")
        self.send(
            f"option name Hash type spin default {self.config.hash_size_mb} "
            f"min {HASH_MIN_MB} max {HASH_MAX_MB}"
        )
        self.send("uciok")

    def handle_isready(self):
        """Handle 'isready' command - synchronization."""
        self.logger.info("Handling: isready")
        self.send("readyok")

    def handle_ucinewgame(self):
        """Handle 'ucinewgame' command - reset for new game."""
        self.logger.info("Handling: ucinewgame - resetting board and transposition table")

        self.handle_stop()
        self.board = Board(self.config.start_fen)
        self.transposition_table.clear()

    def handle_setoption(self, tokens: List[str]):
        """
        Handle 'setoption name <name> value <value>'.

        Only 'Hash' (megabytes) is supported; other options are ignored.
        """
        try:
            name_index = tokens.index("name")
            value_index = tokens.index("value")
        except ValueError:
            self.logger.warning(f"Malformed setoption: {' '.join(tokens)}")
            return

        name = " ".join(tokens[name_index + 1:value_index]).lower()
        value = " ".join(tokens[value_index + 1:])

        if name != "hash":
            self.logger.debug(f"Unknown option ignored: {name}")
            return

        try:
            megabytes = int(value)
        except ValueError:
            self.report_error(f"Invalid Hash value: {value}")
            return

        megabytes = max(HASH_MIN_MB, min(HASH_MAX_MB, megabytes))
        if not self.handle_stop():
            self.report_error("Previous search is still running; Hash not changed")
            return
        self.transposition_table.resize(megabytes * 1024 * 1024 // BYTES_PER_ENTRY)
        self.logger.info(f"Hash set to {megabytes} MB ({self.transposition_table.max_size} entries)")

    def handle_position(self, tokens: List[str]):
        """
        Handle 'position' command - set board position.

        Formats:
            position startpos
            position startpos moves e2e4 e7e5
            position fen <FEN string>
            position fen <FEN string> moves e2e4

        An invalid FEN leaves the current position untouched. Moves are
        applied until the first illegal or malformed one.

        Args:
            tokens: Command tokens (e.g., ['position', 'startpos', 'moves', 'e2e4'])
        """
        self.logger.info(f"Handling: position {' '.join(tokens[1:])}")

        if len(tokens) < 2:
            self.logger.warning("Position command with insufficient arguments")
            return

        if "moves" in tokens:
            move_index = tokens.index("moves")
        else:
            move_index = len(tokens)

        if tokens[1] == "startpos":
            fen = STARTING_FEN
        elif tokens[1] == "fen":
            fen = " ".join(tokens[2:move_index])
        else:
            self.logger.warning(f"Unknown position type: {tokens[1]}")
            return

        try:
            board = Board(fen)
        except InvalidFenError as e:
            self.report_error(f"Invalid FEN: {e}")
            return

        moves_applied = []
        for move_str in tokens[move_index + 1:]:
            try:
                move = parse_uci_move(board, move_str, self.generator)
            except IllegalMoveError:
                self.report_error(f"Illegal move: {move_str}")
                break
            except ValueError as e:
                self.report_error(f"Invalid move format: {move_str} - {e}")
                break
            board.apply(move)
            moves_applied.append(move_str)

        if moves_applied:
            self.logger.debug(f"Applied moves: {' '.join(moves_applied)}")

        self.board = board
        self.logger.debug(f"Full FEN: {board.fen()}")

    def parse_go(self, tokens: List[str]) -> SearchConstraints:
        """
        Turn 'go' parameters into SearchConstraints.

        Formats:
            go depth 5
            go movetime 5000 (search for 5 seconds)
            go wtime 300000 btime 300000 [winc 2000 binc 2000] [movestogo 40]
            go nodes 100000
            go infinite (search until 'stop')
        """
        params = {}
        infinite = False

        i = 1
        while i < len(tokens):
            token = tokens[i]
            if token in GO_INT_PARAMS and i + 1 < len(tokens):
                try:
                    params[token] = int(tokens[i + 1])
                except ValueError:
                    self.logger.warning(f"Ignoring non-integer {token}: {tokens[i + 1]}")
                i += 2
            elif token == "infinite":
                infinite = True
                i += 1
            else:
                i += 1

        if "depth" in params:
            params["depth"] = max(1, min(params["depth"], self.config.max_depth))
        if "nodes" in params and params["nodes"] < 1:
            del params["nodes"]
        if "movestogo" not in params:
            params["movestogo"] = self.config.default_movestogo

        return SearchConstraints.from_go(
            turn=self.board.turn,
            infinite=infinite,
            default_depth=self.config.default_depth,
            move_overhead_ms=self.config.move_overhead_ms,
            **params,
        )

    def handle_go(self, tokens: List[str]):
        """
        Handle 'go' command - start search in a background thread.

        Args:
            tokens: Command tokens (e.g., ['go', 'depth', '5'])
        """
        self.logger.info(f"Handling: go {' '.join(tokens[1:])}")

        # Only one search at a time
        if not self.handle_stop():
            self.report_error("Previous search is still running; go ignored")
            return

        constraints = self.parse_go(tokens)
        self.logger.info(f"Starting search thread with {constraints}")

        # Make a copy of the board for the search thread to avoid race conditions
        board_copy = self.board.copy()

        self._stop_event = threading.Event()
        self.search_thread = threading.Thread(
            target=self._search_thread,
            args=(board_copy, constraints, self._stop_event),
            daemon=True,
        )
        self.search_thread.start()

    def _search_thread(self, board: Board, constraints: SearchConstraints, stop_event: threading.Event):
        """
        Background thread for search.

        Output:
            info depth X seldepth X score cp Y nodes Z nps N time T pv ...
            bestmove <move>
        """
        start_time = time.perf_counter()

        try:
            self.logger.info(f"Search started: position={board.fen()}")

            result = self.search_engine.find_best_move(
                board,
                constraints,
                should_stop=stop_event.is_set,
                on_progress=self.send_info,
            )

            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            self.logger.info(
                f"Search {'stopped' if stop_event.is_set() else 'complete'}: "
                f"best_move={result.best_move}, score={result.score}, depth={result.depth}, "
                f"nodes={result.nodes}, time={elapsed_ms}ms"
            )
            self.send(f"bestmove {result.best_move.uci()}")

        except GameOverError as e:
            self.logger.info(f"No search: {e}")
            self.send("bestmove 0000")

        except Exception as e:
            elapsed_time = time.perf_counter() - start_time
            self.logger.error(f"Search error after {elapsed_time:.3f}s: {e}", exc_info=True)
            print(f"# Search error: {e}", file=sys.stderr)

            # Send a legal move as fallback
            legal_moves = self.generator.generate_legal(board)
            if legal_moves:
                fallback_move = legal_moves[0].uci()
                self.logger.warning(f"Using fallback move: {fallback_move}")
                self.send(f"bestmove {fallback_move}")
            else:
                self.send("bestmove 0000")

        finally:
            self.logger.debug("Search thread finished")

    def send_info(self, result: SearchResult):
        """Report one completed iteration."""
        info_parts = [
            "info",
            f"depth {result.depth}",
            f"seldepth {result.depth}",
            f"score {score_to_string(result.score)}",
            f"nodes {result.nodes}",
            f"nps {result.nps}",
            f"time {int(result.elapsed * 1000)}",
        ]
        if result.pv:
            info_parts.append("pv " + " ".join(m.uci() for m in result.pv))
        self.send(" ".join(info_parts))

    def handle_stop(self) -> bool:
        """
        Handle 'stop' command - stop ongoing search.

        Sets the search's stop flag and waits for the thread to finish.
        The search still answers with the best move found so far.

        Returns:
            False if the search thread is still running after stop_timeout.
            The thread is kept so that no second search can share the
            SearchEngine and transposition table with it.
        """
        if self.search_thread is None:
            return True

        self.logger.info("Handling: stop")
        self._stop_event.set()

        if self.search_thread.is_alive():
            self.logger.debug(f"Waiting for search thread to finish (timeout={self.stop_timeout}s)")
            self.search_thread.join(timeout=self.stop_timeout)
            if self.search_thread.is_alive():
                self.logger.warning("Search thread did not finish within timeout")
                return False

        self.search_thread = None
        return True

    def handle_display(self):
        """Handle 'd' command - print the board, FEN and hash."""
        print(self.board)
        print(f"Fen: {self.board.fen()}")
        print(f"Key: {self.board.zobrist_hash:016X}")
        sys.stdout.flush()

    def handle_quit(self):
        """Handle 'quit' command - shutdown engine."""
        self.logger.info("Handling: quit - shutting down engine")

        self.handle_stop()
        self.running = False

        self.logger.info(f"=== {self.config.name} Engine Stopped ===")


def main(argv: Optional[List[str]] = None):
    """Run the engine on stdin/stdout."""
    parser = argparse.ArgumentParser(description="BitBlue UCI chess engine")
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="JSON settings file (default: $BITBLUE_SETTINGS)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    args = parser.parse_args(argv)

    config = EngineConfig.load(args.settings)
    if args.debug:
        config.debug = True

    engine = UCIEngine(config)
    engine.run()
