import random
from enum import IntEnum

import numpy as np

from .utils import get_neighbors, to_index


class CellState(IntEnum):
    HIDDEN = 0
    REVEALED = 1
    FLAGGED = 2


MINE = -1


class Board:
    """
    Flat row-major Minesweeper board.

    Every per-cell array has length size * size and cell (row, col) lives at
    index row * size + col:
        mines      - bool, True where a mine sits
        adjacency  - int8, -1 for mines, 0-8 for the number of mined neighbours.
                     On a replayed board it only holds counts for cells that
                     have been disclosed so far.
        state      - int8, one of CellState
        exploded   - bool, True only for the mine the player opened
    """

    def __init__(self, size, mine_positions=()):
        self.size = size
        cells = size * size
        self.mines = np.zeros(cells, dtype=bool)
        self.adjacency = np.zeros(cells, dtype=np.int8)
        self.state = np.full(cells, CellState.HIDDEN, dtype=np.int8)
        self.exploded = np.zeros(cells, dtype=bool)

        self.mine_positions = []
        for row, col in mine_positions:
            if not self.is_valid_coord(row, col):
                raise ValueError(f"Mine position ({row}, {col}) is outside a {size}x{size} board")
            index = to_index(row, col, size)
            if self.mines[index]:
                raise ValueError(f"Duplicate mine position ({row}, {col})")
            self.mines[index] = True
            self.adjacency[index] = MINE
            self.mine_positions.append((row, col))

        self.num_mines = len(self.mine_positions)
        self.remaining_mines = self.num_mines

    @classmethod
    def from_mines(cls, size, mine_positions):
        """Build a fully computed board from a fixed mine layout."""
        board = cls(size, mine_positions)
        compute_adjacency(board)
        return board

    def is_valid_coord(self, row, col):
        try:
            row = int(row)
            col = int(col)
        except (ValueError, TypeError):
            return False
        return 0 <= row < self.size and 0 <= col < self.size

    def index(self, row, col):
        return to_index(row, col, self.size)

    def is_mine(self, row, col):
        return self.is_valid_coord(row, col) and bool(self.mines[self.index(row, col)])

    def is_revealed(self, row, col):
        return self.is_valid_coord(row, col) and self.state[self.index(row, col)] == CellState.REVEALED

    def is_flagged(self, row, col):
        return self.is_valid_coord(row, col) and self.state[self.index(row, col)] == CellState.FLAGGED

    def same_disclosure(self, other):
        """
        True when both boards show the player exactly the same thing:
        cell states, counts of disclosed cells, the exploded mine and the
        remaining-mine counter.
        """
        if self.size != other.size or self.remaining_mines != other.remaining_mines:
            return False
        if not np.array_equal(self.state, other.state):
            return False
        if not np.array_equal(self.exploded, other.exploded):
            return False
        shown = self.state == CellState.REVEALED
        return bool(np.array_equal(self.adjacency[shown], other.adjacency[shown]))

    def visible_state(self):
        """
        Symbol grid handed to the renderer:
            None - hidden
            "F"  - flagged
            0-8  - disclosed cell with its adjacency count
            "M"  - mine shown after an explosion
            "*"  - the exploded mine
        """
        grid = []
        for r in range(self.size):
            row_cells = []
            for c in range(self.size):
                i = r * self.size + c
                state = self.state[i]
                if state == CellState.FLAGGED:
                    row_cells.append("F")
                elif state == CellState.HIDDEN:
                    row_cells.append(None)
                elif self.exploded[i]:
                    row_cells.append("*")
                elif self.mines[i]:
                    row_cells.append("M")
                else:
                    row_cells.append(int(self.adjacency[i]))
            grid.append(row_cells)
        return grid

    def solution_state(self):
        """Full field with every mine and count, shown once a game is over."""
        return [
            ["M" if self.mines[r * self.size + c] else int(self.adjacency[r * self.size + c])
             for c in range(self.size)]
            for r in range(self.size)
        ]


def count_adjacent_mines(row, col, size, is_mine):
    return sum(1 for nr, nc in get_neighbors(row, col, size, size) if is_mine(nr, nc))


def compute_adjacency(board):
    size = board.size
    mines = board.mines
    for r in range(size):
        for c in range(size):
            i = r * size + c
            if mines[i]:
                continue
            board.adjacency[i] = count_adjacent_mines(
                r, c, size, lambda nr, nc: mines[nr * size + nc]
            )
    return board.adjacency


def generate_mine_positions(size, mine_count, excluded_cell, rng=None):
    """
    Rejection sampling: draw uniformly random cells and keep each one that is
    neither the excluded cell nor already a mine, until mine_count distinct
    cells are placed. Only the excluded cell itself is protected, not its
    neighbourhood.
    """
    if size < 2:
        raise ValueError(f"Board size must be at least 2, got {size}")
    if not 1 <= mine_count <= size * size - 1:
        raise ValueError(
            f"Cannot place {mine_count} mines on a {size}x{size} board "
            f"with one protected cell."
        )

    rng = rng if rng is not None else random.Random()
    excluded = tuple(excluded_cell)
    placed = set()
    positions = []

    while len(positions) < mine_count:
        cell = (rng.randrange(size), rng.randrange(size))
        if cell == excluded or cell in placed:
            continue
        placed.add(cell)
        positions.append(cell)

    return positions


def generate_board(size, mine_count, excluded_cell, rng=None):
    positions = generate_mine_positions(size, mine_count, excluded_cell, rng)
    return Board.from_mines(size, positions)
