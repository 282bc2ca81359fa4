# tests/test_board.py

import random
import unittest

from backend.board import (
    Board,
    CellState,
    compute_adjacency,
    generate_board,
    generate_mine_positions,
)
from backend.utils import get_neighbors


class ScriptedRandom:
    """Returns a fixed sequence of draws so mine layouts can be dictated."""

    def __init__(self, draws):
        self.draws = list(draws)

    def randrange(self, stop):
        value = self.draws.pop(0)
        assert 0 <= value < stop
        return value


class TestBoardGenerator(unittest.TestCase):

    def test_board_dimensions(self):
        board = generate_board(5, 3, (0, 0), random.Random(1))
        self.assertEqual(board.size, 5)
        self.assertEqual(len(board.state), 25)
        self.assertEqual(len(board.visible_state()), 5)
        self.assertEqual(len(board.visible_state()[0]), 5)

    def test_mine_count_and_excluded_cell(self):
        rng = random.Random(7)
        for size in (2, 3, 5, 9):
            for mines in (1, size, size * size - 1):
                excluded = (rng.randrange(size), rng.randrange(size))
                board = generate_board(size, mines, excluded, rng)
                self.assertEqual(int(board.mines.sum()), mines)
                self.assertEqual(len(board.mine_positions), mines)
                self.assertFalse(board.is_mine(*excluded))

    def test_only_the_excluded_cell_is_protected(self):
        # 8 mines on a 3x3 board leave exactly the excluded cell free
        board = generate_board(3, 8, (1, 1), random.Random(3))
        for r in range(3):
            for c in range(3):
                self.assertEqual(board.is_mine(r, c), (r, c) != (1, 1))

    def test_rejection_sampling_skips_excluded_and_duplicates(self):
        rng = ScriptedRandom([0, 0, 1, 1, 1, 1, 0, 0, 0, 1])
        positions = generate_mine_positions(2, 2, (0, 0), rng)
        self.assertEqual(positions, [(1, 1), (0, 1)])

    def test_adjacency_matches_neighbor_mines(self):
        rng = random.Random(11)
        for _ in range(20):
            size = rng.randrange(2, 12)
            mines = rng.randrange(1, size * size)
            board = generate_board(size, mines, (0, 0), rng)
            mine_set = set(board.mine_positions)
            for r in range(size):
                for c in range(size):
                    if (r, c) in mine_set:
                        self.assertEqual(board.adjacency[r * size + c], -1)
                        continue
                    expected = sum(1 for n in get_neighbors(r, c, size, size) if n in mine_set)
                    self.assertEqual(board.adjacency[r * size + c], expected)

    def test_seeded_generation_is_reproducible(self):
        first = generate_mine_positions(8, 10, (4, 4), random.Random(42))
        second = generate_mine_positions(8, 10, (4, 4), random.Random(42))
        self.assertEqual(first, second)

    def test_invalid_arguments_raise(self):
        with self.assertRaises(ValueError):
            generate_mine_positions(1, 1, (0, 0))
        with self.assertRaises(ValueError):
            generate_mine_positions(3, 9, (0, 0))
        with self.assertRaises(ValueError):
            generate_mine_positions(3, 0, (0, 0))


class TestBoard(unittest.TestCase):

    def test_from_mines_layout(self):
        board = Board.from_mines(3, [(0, 0)])
        self.assertTrue(board.is_mine(0, 0))
        self.assertEqual(board.remaining_mines, 1)
        self.assertEqual(board.solution_state(), [
            ["M", 1, 0],
            [1, 1, 0],
            [0, 0, 0],
        ])

    def test_duplicate_mine_rejected(self):
        with self.assertRaises(ValueError):
            Board(3, [(1, 1), (1, 1)])

    def test_new_board_is_hidden(self):
        board = Board.from_mines(4, [(0, 0), (3, 3)])
        self.assertTrue(all(s == CellState.HIDDEN for s in board.state))
        self.assertTrue(all(cell is None for row in board.visible_state() for cell in row))

    def test_is_valid_coord(self):
        board = Board(3)
        self.assertTrue(board.is_valid_coord(2, 0))
        self.assertFalse(board.is_valid_coord(3, 0))
        self.assertFalse(board.is_valid_coord(-1, 0))
        self.assertFalse(board.is_valid_coord("x", 0))

    def test_compute_adjacency_in_place(self):
        board = Board(2, [(0, 1)])
        compute_adjacency(board)
        self.assertEqual(list(board.adjacency), [1, -1, 1, 1])

    def test_mine_outside_board_rejected(self):
        with self.assertRaises(ValueError):
            Board(3, [(-1, 0)])
        with self.assertRaises(ValueError):
            Board.from_mines(3, [(0, 3)])
        with self.assertRaises(ValueError):
            Board(3, [(3, 3)])


if __name__ == "__main__":
    unittest.main()
