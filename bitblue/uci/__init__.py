"""
UCI Protocol Interface

This module implements the Universal Chess Interface (UCI) protocol,
which allows the engine to communicate with chess GUIs like Arena,
CuteChess and En-croissant.

Protocol Flow:
    GUI → "uci"
    Engine → "id name BitBlue 0.1.0"
    Engine → "id author ..."
    Engine → "uciok"
    GUI → "isready"
    Engine → "readyok"
    GUI → "position startpos moves e2e4"
    GUI → "go wtime 300000 btime 300000"
    Engine → "info depth 5 seldepth 5 score cp 25 nodes 12345 nps 40000 time 308 pv e7e5 ..."
    Engine → "bestmove e7e5"

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

from bitblue.uci.interface import UCIEngine, main, setup_logger

__all__ = ['UCIEngine', 'main', 'setup_logger']
