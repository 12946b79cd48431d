"""
Zobrist Hashing Keys

Zobrist hashing assigns a random 64-bit number to every piece/square pair
and every other piece of position state. The hash of a position is the XOR
of the keys of everything present, which makes it cheap to update: moving a
piece XORs out the old square and XORs in the new one.

Hash components:
    - 12 colored pieces * 64 squares = 768 keys
    - Castling rights (4 bits, indexed as a whole) = 16 keys
    - En passant file = 8 keys
    - Side to move (XORed when Black moves) = 1 key

The Board maintains its hash incrementally in apply()/undo();
compute_hash() here recomputes it from scratch and is used for
initialisation and consistency checks.

Reference:
    - https://www.chessprogramming.org/Zobrist_Hashing
"""

import random
from typing import TYPE_CHECKING

from bitblue.board.bitboard import BLACK, iter_squares

if TYPE_CHECKING:
    from bitblue.board.position import Board

ZOBRIST_SEED = 42  # Fixed seed so hashes are reproducible across runs

_rng = random.Random(ZOBRIST_SEED)

# Piece keys: [piece index 0-11][square 0-63]
ZOBRIST_PIECES = [[_rng.getrandbits(64) for _ in range(64)] for _ in range(12)]

# Castling keys indexed by the full 4-bit rights value
ZOBRIST_CASTLING = [_rng.getrandbits(64) for _ in range(16)]

# En passant keys indexed by file
ZOBRIST_EN_PASSANT = [_rng.getrandbits(64) for _ in range(8)]

ZOBRIST_SIDE_TO_MOVE = _rng.getrandbits(64)


def compute_hash(board: "Board") -> int:
    """
    Compute the Zobrist hash of a position from scratch.

    Args:
        board: Position to hash

    Returns:
        64-bit integer hash
    """
    h = 0
    for index, bb in enumerate(board.pieces):
        keys = ZOBRIST_PIECES[index]
        for sq in iter_squares(bb):
            h ^= keys[sq]

    h ^= ZOBRIST_CASTLING[board.castling_rights]

    if board.ep_square is not None:
        h ^= ZOBRIST_EN_PASSANT[board.ep_square & 7]

    if board.turn == BLACK:
        h ^= ZOBRIST_SIDE_TO_MOVE

    return h
