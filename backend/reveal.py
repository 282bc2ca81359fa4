"""
Disclosure rules shared by live play and replay.

Both ``open_cell`` (live) and ``backend.replay.replay_step`` go through
``flood_disclose`` and ``detonate``; they only differ in where adjacency
counts come from.
"""

from collections import deque

import numpy as np

from .board import CellState
from .moves import Outcome
from .utils import get_neighbors


def flood_disclose(board, start, adjacency_of):
    """
    Reveal ``start`` and, through zero-count cells, every 8-connected cell
    reachable from it.

    ``adjacency_of(index)`` supplies the count for a cell about to be
    disclosed; the count is written into ``board.adjacency``. Cells that are
    not hidden (revealed or flagged) are skipped and each index is evaluated
    at most once. Returns the disclosed indices in disclosure order.
    """
    size = board.size
    visited = {start}
    queue = deque([start])
    disclosed = []

    while queue:
        index = queue.popleft()
        if board.state[index] != CellState.HIDDEN:
            continue

        count = adjacency_of(index)
        board.adjacency[index] = count
        board.state[index] = CellState.REVEALED
        disclosed.append(index)

        if count != 0:
            continue

        row, col = divmod(index, size)
        for nr, nc in get_neighbors(row, col, size, size):
            neighbor = nr * size + nc
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)

    return disclosed


def detonate(board, index):
    """Mark the opened mine as exploded and show every mine on the board."""
    board.exploded[index] = True
    board.state[board.mines] = CellState.REVEALED


def is_won(board):
    """Won once no safe cell is still hidden. A flagged safe cell does not block."""
    pending = (~board.mines) & (board.state == CellState.HIDDEN)
    return not bool(np.any(pending))


def open_cell(board, row, col):
    """
    Open (row, col) on a live board and return the Outcome.

    Opening a mine (even a flagged one) loses. Opening an already revealed
    cell changes nothing and reports SAFE.
    """
    index = board.index(row, col)

    if board.mines[index]:
        detonate(board, index)
        return Outcome.MINE

    flood_disclose(board, index, lambda i: int(board.adjacency[i]))

    if is_won(board):
        return Outcome.WIN
    return Outcome.SAFE


def toggle_flag(board, row, col):
    """
    Switch a cell between hidden and flagged, adjusting the remaining-mine
    counter. Returns False (and does nothing) for a revealed cell.
    """
    index = board.index(row, col)
    state = board.state[index]

    if state == CellState.HIDDEN:
        board.state[index] = CellState.FLAGGED
        board.remaining_mines -= 1
        return True
    if state == CellState.FLAGGED:
        board.state[index] = CellState.HIDDEN
        board.remaining_mines += 1
        return True
    return False
