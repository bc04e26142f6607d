"""
occupancy snapshots read from the sensor grid and the differences between them
"""

import itertools
from dataclasses import dataclass

import chess
import numpy as np

FULL_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class OccupancyDiff:
    """
    squares whose occupied/empty status flipped between two snapshots

    Attributes:
        lifted (frozenset[int]): squares that became empty
        placed (frozenset[int]): squares that became occupied
    """
    lifted: frozenset = frozenset()
    placed: frozenset = frozenset()

    @property
    def size(self):
        return len(self.lifted) + len(self.placed)

    @property
    def squares(self):
        return self.lifted | self.placed

    def is_empty(self):
        return not self.lifted and not self.placed

    def orderings(self):
        """
        single square event sequences this diff may stand for

        lifts come before placements. a reading does not say which of two lifts
        happened first, so every order of the lifts is listed, square order first

        Returns:
            list[list[tuple[str, int]]]: ("lift", square) and ("place", square) sequences
        """
        places = [("place", sq) for sq in sorted(self.placed)]
        return [[("lift", sq) for sq in order] + places
                for order in itertools.permutations(sorted(self.lifted))]

    def __str__(self):
        parts = [f"-{chess.square_name(sq)}" for sq in sorted(self.lifted)]
        parts += [f"+{chess.square_name(sq)}" for sq in sorted(self.placed)]
        return " ".join(parts) if parts else "(no change)"


@dataclass(frozen=True)
class Occupancy:
    """
    one reading of the physical board, one bit per square

    bit i is python-chess square i (a1 = 0, h8 = 63), set when a piece is present.
    there is no piece identity or color information

    Attributes:
        bits (int): 64 bit occupancy mask
    """
    bits: int = 0

    def __post_init__(self):
        if not 0 <= self.bits <= FULL_MASK:
            raise ValueError(f"occupancy mask out of range: {self.bits:#x}")

    @classmethod
    def from_squares(cls, squares):
        """
        build a snapshot with exactly the given squares occupied

        Args:
            squares (iterable[int | str]): square indices or names like "e2"

        Returns:
            Occupancy: the snapshot
        """
        bits = 0
        for sq in squares:
            if isinstance(sq, str):
                sq = chess.parse_square(sq)
            bits |= chess.BB_SQUARES[sq]
        return cls(bits)

    @classmethod
    def from_board(cls, board):
        """
        occupancy implied by a python-chess board

        Args:
            board (chess.Board): the logical board

        Returns:
            Occupancy: every square holding a piece of either color
        """
        return cls(int(board.occupied))

    @classmethod
    def from_matrix(cls, matrix):
        """
        convert an 8×8 sensor matrix into a snapshot

        the matrix is laid out the way the grid is scanned and displayed:
        row 0 is rank 8, column 0 is file a, nonzero means occupied

        Args:
            matrix (array-like): 8×8 values

        Returns:
            Occupancy: the snapshot

        Raises:
            ValueError: if the matrix is not 8×8
        """
        grid = np.asarray(matrix)
        if grid.shape != (8, 8):
            raise ValueError(f"expected an 8x8 matrix, got shape {grid.shape}")
        bits = 0
        # every nonzero cell is an occupied square
        for r, c in zip(*np.nonzero(grid)):
            bits |= chess.BB_SQUARES[chess.square(int(c), 7 - int(r))]
        return cls(bits)

    @classmethod
    def parse(cls, text):
        """
        parse one sensor reading

        accepted forms are a decimal or 0x hex unsigned 64 bit bitboard, or a
        64 character string of 0/1 with a1 first

        Args:
            text (str): the reading

        Returns:
            Occupancy: the snapshot

        Raises:
            ValueError: if the text is not a valid reading
        """
        text = text.strip().replace("_", "")
        if len(text) == 64 and set(text) <= {"0", "1"}:
            # bit string, a1 first
            return cls(sum(1 << i for i, ch in enumerate(text) if ch == "1"))
        if text.lower().startswith("0x"):
            return cls(int(text, 16))
        if text.isdigit():
            return cls(int(text))
        raise ValueError(f"unreadable occupancy: {text!r}")

    def to_matrix(self):
        """
        the snapshot as an 8×8 array of 0/1, row 0 is rank 8

        Returns:
            np.ndarray: 8×8 int array
        """
        grid = np.zeros((8, 8), dtype=int)
        for sq in self:
            grid[7 - chess.square_rank(sq), chess.square_file(sq)] = 1
        return grid

    def diff(self, other):
        """
        what changed going from this snapshot to another one

        Args:
            other (Occupancy): the newer snapshot

        Returns:
            OccupancyDiff: squares that became empty and squares that became occupied
        """
        changed = self.bits ^ other.bits
        lifted = frozenset(chess.SquareSet(changed & self.bits))
        placed = frozenset(chess.SquareSet(changed & other.bits))
        return OccupancyDiff(lifted, placed)

    def with_square(self, square, occupied):
        """
        copy of the snapshot with one square set or cleared
        """
        if occupied:
            return Occupancy(self.bits | chess.BB_SQUARES[square])
        return Occupancy(self.bits & ~chess.BB_SQUARES[square])

    def count(self):
        return bin(self.bits).count("1")

    def __contains__(self, square):
        return bool(self.bits & chess.BB_SQUARES[square])

    def __iter__(self):
        return iter(chess.SquareSet(self.bits))

    def __str__(self):
        return str(chess.SquareSet(self.bits))
