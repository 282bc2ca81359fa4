# backend/replay.py

import logging

from .board import Board, CellState, count_adjacent_mines
from .moves import MoveType, Outcome
from .reveal import detonate, flood_disclose

logger = logging.getLogger(__name__)


class GameNotFoundError(LookupError):
    def __init__(self, game_id):
        super().__init__(f"Game {game_id} not found")
        self.game_id = game_id


def empty_board(size, mine_positions):
    """
    Board for reconstruction: mines are marked but no adjacency is
    precomputed; counts are filled in only as cells are disclosed.
    """
    return Board(size, mine_positions)


def replay_step(board, mine_positions, move):
    """
    Apply one logged move to a reconstructed board and return it.

    Opens go through the same disclosure code as live play, with adjacency
    counted from ``mine_positions`` on the fly. Flags follow the recorded
    outcome rather than being recomputed.
    """
    size = board.size
    if not board.is_valid_coord(move.row, move.col):
        raise ValueError(f"Move #{move.sequence_number} at ({move.row}, {move.col}) is outside the board")
    mine_set = {tuple(p) for p in mine_positions}
    index = board.index(move.row, move.col)

    if move.move_type == MoveType.OPEN:
        if (move.row, move.col) in mine_set:
            detonate(board, index)
        else:
            def adjacency_of(i):
                row, col = divmod(i, size)
                return count_adjacent_mines(row, col, size, lambda r, c: (r, c) in mine_set)

            flood_disclose(board, index, adjacency_of)

    elif move.outcome == Outcome.FLAG_SET:
        board.state[index] = CellState.FLAGGED
        board.remaining_mines -= 1
    else:
        board.state[index] = CellState.HIDDEN
        board.remaining_mines += 1

    return board


class Replay:
    """
    Step-by-step reconstruction of a stored game.

    Only the record's size, mine positions and moves are used.
    """

    def __init__(self, record):
        self.record = record
        self.reset()

    def reset(self):
        self.board = empty_board(self.record.size, self.record.mine_positions)
        self.position = 0

    @property
    def finished(self):
        return self.position >= len(self.record.moves)

    def step(self):
        """Apply the next move and return it, or None when all moves are applied."""
        if self.finished:
            return None
        move = self.record.moves[self.position]
        replay_step(self.board, self.record.mine_positions, move)
        self.position += 1
        return move

    def run(self):
        while not self.finished:
            self.step()
        return self.board

    def frames(self):
        """
        Yield (move, visible_state, remaining_mines) after each move, starting
        from a fresh board.
        """
        self.reset()
        while not self.finished:
            move = self.step()
            yield move, self.board.visible_state(), self.board.remaining_mines


def load_replay(store, game_id):
    record = store.fetch(game_id)
    if record is None:
        logger.info("Replay requested for unknown game %s", game_id)
        raise GameNotFoundError(game_id)
    return Replay(record)
