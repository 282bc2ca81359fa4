# backend/utils.py

from typing import Iterable, List, Tuple

MIN_SIZE = 2
MAX_SIZE = 30


def to_index(row: int, col: int, size: int) -> int:
    """Flatten (row, col) into a row-major index."""
    return row * size + col


def get_neighbors(row: int, col: int, width: int, height: int) -> List[Tuple[int, int]]:
    """
    Return a list of valid neighboring coordinates (8-way) for (row, col).
    """
    neighbors = []
    for dr in [-1, 0, 1]:
        for dc in [-1, 0, 1]:
            nr, nc = row + dr, col + dc
            if (dr != 0 or dc != 0) and 0 <= nr < height and 0 <= nc < width:
                neighbors.append((nr, nc))
    return neighbors


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def clamp_size(size: int) -> int:
    """Field size is always kept inside [2, 30]."""
    return clamp(int(size), MIN_SIZE, MAX_SIZE)


def clamp_mines(mines: int, size: int) -> int:
    """Mine count is always kept inside [1, size^2 - 1]."""
    return clamp(int(mines), 1, size * size - 1)


def recommended_mines(size: int, ratio: float = 0.15) -> int:
    size = clamp_size(size)
    return clamp_mines(max(1, int(size * size * ratio)), size)


def serialize_positions(positions: Iterable[Tuple[int, int]]) -> List[dict]:
    """
    Convert mine positions to a JSON-safe list of {"row", "col"} dicts.
    """
    return [{"row": int(r), "col": int(c)} for r, c in positions]


def deserialize_positions(data: Iterable[dict]) -> List[Tuple[int, int]]:
    return [(int(p["row"]), int(p["col"])) for p in data]
