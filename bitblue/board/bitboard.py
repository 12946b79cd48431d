"""
Bitboard Primitives and Attack Tables

A bitboard is a Python int where bit N is set when square N is occupied
(or attacked). Squares are numbered rank-major from White's side:

    a1 = 0, b1 = 1, ..., h1 = 7
    a2 = 8, ...
    a8 = 56, ..., h8 = 63

Attack Tables (built once at import):
    - KNIGHT_ATTACKS[sq], KING_ATTACKS[sq]: static leaper targets
    - PAWN_ATTACKS[color][sq]: squares a pawn of `color` on `sq` captures on
    - RAYS[direction][sq]: every square along a direction, excluding `sq`

Sliding pieces use the classical ray approach: walk the ray mask, find the
first blocker with a single bit scan, and cut the ray behind it.

References:
    - Bitboards: https://www.chessprogramming.org/Bitboards
    - Classical Approach: https://www.chessprogramming.org/Classical_Approach
"""

from typing import Iterator, List

WHITE = 0
BLACK = 1
COLORS = (WHITE, BLACK)
COLOR_NAMES = ("white", "black")

EMPTY = 0
FULL = (1 << 64) - 1

FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"

FILE_A = 0x0101010101010101
FILE_H = FILE_A << 7
RANK_1 = 0xFF
RANK_2 = RANK_1 << 8
RANK_4 = RANK_1 << 24
RANK_5 = RANK_1 << 32
RANK_7 = RANK_1 << 48
RANK_8 = RANK_1 << 56

LIGHT_SQUARES = 0x55AA55AA55AA55AA
DARK_SQUARES = 0xAA55AA55AA55AA55

A1, B1, C1, D1, E1, F1, G1, H1 = range(8)
A8, B8, C8, D8, E8, F8, G8, H8 = range(56, 64)


# ============================================================================
# Square Helpers
# ============================================================================

def square(file_index: int, rank_index: int) -> int:
    """Square index for a 0-based (file, rank) pair."""
    return rank_index * 8 + file_index


def square_file(sq: int) -> int:
    return sq & 7


def square_rank(sq: int) -> int:
    return sq >> 3


def square_name(sq: int) -> str:
    """Algebraic name of a square, e.g. 0 -> 'a1'."""
    return FILE_NAMES[sq & 7] + RANK_NAMES[sq >> 3]


def parse_square(name: str) -> int:
    """
    Parse an algebraic square name.

    Args:
        name: Two-character name like 'e4'

    Returns:
        Square index (0-63)

    Raises:
        ValueError: If the name is not a valid square
    """
    if len(name) != 2 or name[0] not in FILE_NAMES or name[1] not in RANK_NAMES:
        raise ValueError(f"Invalid square name: {name!r}")
    return square(FILE_NAMES.index(name[0]), RANK_NAMES.index(name[1]))


def mirror_square(sq: int) -> int:
    """Flip a square vertically (a1 <-> a8)."""
    return sq ^ 56


def bit(sq: int) -> int:
    return 1 << sq


# ============================================================================
# Bit Operations
# ============================================================================

def lsb(bb: int) -> int:
    """Index of the least significant set bit. bb must be non-zero."""
    return (bb & -bb).bit_length() - 1


def msb(bb: int) -> int:
    """Index of the most significant set bit. bb must be non-zero."""
    return bb.bit_length() - 1


def popcount(bb: int) -> int:
    return bb.bit_count()


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the set squares of a bitboard in ascending order."""
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def flip_vertical(bb: int) -> int:
    """Mirror a bitboard across the horizontal midline (rank 1 <-> rank 8)."""
    return int.from_bytes(bb.to_bytes(8, "little"), "big")


# ============================================================================
# Attack Tables
# ============================================================================

KNIGHT_OFFSETS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))

# Ray directions as (file delta, rank delta). Index order matters:
# the first four are "positive" (square index grows along the ray),
# the last four are "negative".
NORTH, EAST, NORTH_EAST, NORTH_WEST, SOUTH, WEST, SOUTH_WEST, SOUTH_EAST = range(8)
DIRECTIONS = ((0, 1), (1, 0), (1, 1), (-1, 1), (0, -1), (-1, 0), (-1, -1), (1, -1))

ROOK_DIRECTIONS = (NORTH, EAST, SOUTH, WEST)
BISHOP_DIRECTIONS = (NORTH_EAST, NORTH_WEST, SOUTH_WEST, SOUTH_EAST)
POSITIVE_DIRECTIONS = frozenset((NORTH, EAST, NORTH_EAST, NORTH_WEST))


def _leaper_table(offsets) -> List[int]:
    table = []
    for sq in range(64):
        f, r = square_file(sq), square_rank(sq)
        targets = 0
        for df, dr in offsets:
            nf, nr = f + df, r + dr
            if 0 <= nf < 8 and 0 <= nr < 8:
                targets |= 1 << square(nf, nr)
        table.append(targets)
    return table


def _ray_table() -> List[List[int]]:
    rays = []
    for df, dr in DIRECTIONS:
        per_square = []
        for sq in range(64):
            f, r = square_file(sq) + df, square_rank(sq) + dr
            ray = 0
            while 0 <= f < 8 and 0 <= r < 8:
                ray |= 1 << square(f, r)
                f += df
                r += dr
            per_square.append(ray)
        rays.append(per_square)
    return rays


KNIGHT_ATTACKS = _leaper_table(KNIGHT_OFFSETS)
KING_ATTACKS = _leaper_table(KING_OFFSETS)
PAWN_ATTACKS = [
    _leaper_table(((-1, 1), (1, 1))),    # white pawns capture towards rank 8
    _leaper_table(((-1, -1), (1, -1))),  # black pawns capture towards rank 1
]
RAYS = _ray_table()


def ray_attacks(direction: int, sq: int, occupied: int) -> int:
    """Attacks along one ray, stopping at (and including) the first blocker."""
    ray = RAYS[direction][sq]
    blockers = ray & occupied
    if blockers:
        if direction in POSITIVE_DIRECTIONS:
            first = (blockers & -blockers).bit_length() - 1
        else:
            first = blockers.bit_length() - 1
        ray ^= RAYS[direction][first]
    return ray


def rook_attacks(sq: int, occupied: int) -> int:
    return (
        ray_attacks(NORTH, sq, occupied)
        | ray_attacks(EAST, sq, occupied)
        | ray_attacks(SOUTH, sq, occupied)
        | ray_attacks(WEST, sq, occupied)
    )


def bishop_attacks(sq: int, occupied: int) -> int:
    return (
        ray_attacks(NORTH_EAST, sq, occupied)
        | ray_attacks(NORTH_WEST, sq, occupied)
        | ray_attacks(SOUTH_WEST, sq, occupied)
        | ray_attacks(SOUTH_EAST, sq, occupied)
    )


def queen_attacks(sq: int, occupied: int) -> int:
    return rook_attacks(sq, occupied) | bishop_attacks(sq, occupied)
