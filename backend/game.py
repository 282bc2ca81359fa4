# backend/game.py

import logging
from datetime import datetime, timezone
from enum import Enum

from .board import Board, generate_board
from .moves import GameRecord, GameResult, MoveLog, MoveType, Outcome
from .reveal import open_cell, toggle_flag
from .utils import clamp_mines, clamp_size

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class GameNotFinishedError(RuntimeError):
    pass


class GameSession:
    """
    A single game: owns the board and the move log, and turns them into a
    GameRecord once the game is over.

    The board is generated on the first open so that the clicked cell is never
    a mine. Passing ``mine_positions`` fixes the layout instead.
    """

    def __init__(self, size: int, num_mines: int, player: str = "", rng=None,
                 log_noop_opens: bool = True, mine_positions=None):
        self.size = clamp_size(size)
        self.num_mines = clamp_mines(num_mines, self.size)
        self.player = player
        self.rng = rng
        self.log_noop_opens = log_noop_opens
        self.fixed_mines = list(mine_positions) if mine_positions is not None else None
        if self.fixed_mines is not None:
            Board(self.size, self.fixed_mines)
            self.num_mines = len(self.fixed_mines)

        self.reset()

    def reset(self):
        """
        Reset the game session to a fresh state with the same parameters.
        """
        self.board = Board(self.size)
        self.board.remaining_mines = self.num_mines
        self.moves = MoveLog()
        self.status = GameStatus.NOT_STARTED
        self.record_id = None
        self._record = None

    @property
    def game_over(self) -> bool:
        return self.status in (GameStatus.WON, GameStatus.LOST)

    @property
    def won(self) -> bool:
        return self.status == GameStatus.WON

    def _check_coord(self, row, col):
        if not self.board.is_valid_coord(row, col):
            raise ValueError(f"Cell ({row}, {col}) is outside a {self.size}x{self.size} board")
        return int(row), int(col)

    def _start(self, row, col):
        if self.fixed_mines is not None:
            self.board = Board.from_mines(self.size, self.fixed_mines)
        else:
            self.board = generate_board(self.size, self.num_mines, (row, col), self.rng)
        self.status = GameStatus.IN_PROGRESS
        logger.info("Game started for %r: %dx%d with %d mines",
                    self.player, self.size, self.size, self.num_mines)

    def open_cell(self, row, col):
        """
        Open a cell. Returns the Outcome, or None if the game is already over.
        """
        row, col = self._check_coord(row, col)
        if self.game_over:
            return None
        if self.status == GameStatus.NOT_STARTED:
            self._start(row, col)

        already_revealed = self.board.is_revealed(row, col)
        outcome = open_cell(self.board, row, col)

        if outcome == Outcome.MINE:
            self.status = GameStatus.LOST
        elif outcome == Outcome.WIN:
            self.status = GameStatus.WON

        if not already_revealed or self.log_noop_opens:
            self.moves.record(row, col, MoveType.OPEN, outcome)

        if self.game_over:
            logger.info("Game over for %r: %s after %d moves", self.player, self.status.value, len(self.moves))
        return outcome

    def toggle_flag(self, row, col) -> bool:
        """
        Set or remove a flag. Only allowed while the game is in progress;
        flagging a revealed cell does nothing and is not logged.
        """
        row, col = self._check_coord(row, col)
        if self.status != GameStatus.IN_PROGRESS:
            return False

        flagged_before = self.board.is_flagged(row, col)
        if not toggle_flag(self.board, row, col):
            return False

        outcome = Outcome.FLAG_REMOVED if flagged_before else Outcome.FLAG_SET
        self.moves.record(row, col, MoveType.FLAG, outcome)
        return True

    def step(self, action: str, row: int, col: int) -> dict:
        """
        Apply an action ("reveal" or "flag") at position (row, col).
        Returns a dict describing the game state after the action.
        """
        if action == "reveal":
            self.open_cell(row, col)
        elif action == "flag":
            self.toggle_flag(row, col)
        else:
            raise ValueError(f"Unknown action {action!r}")
        return self.get_state()

    def get_state(self) -> dict:
        """
        Return the current visible board and game status.
        """
        return {
            "board": self.board.visible_state(),
            "remaining_mines": int(self.board.remaining_mines),
            "status": self.status.value,
            "game_over": self.game_over,
            "won": self.won,
            "moves_made": len(self.moves),
            "size": self.size,
            "num_mines": self.num_mines,
            "player": self.player,
        }

    def reveal_full_board(self):
        """
        Return the complete board (including mines), shown once the game ends.
        """
        return self.board.solution_state()

    def create_record(self, played_at=None) -> GameRecord:
        """
        Build the GameRecord of a finished game. The record is built once and
        the same one is returned on later calls, so a failed save can be retried.
        """
        if not self.game_over:
            raise GameNotFinishedError("Only a finished game can be recorded")
        if self._record is not None:
            return self._record
        self._record = GameRecord(
            player=self.player,
            played_at=played_at or datetime.now(timezone.utc),
            size=self.size,
            mine_count=self.num_mines,
            mine_positions=tuple(self.board.mine_positions),
            result=GameResult.WIN if self.won else GameResult.LOSE,
            total_moves=len(self.moves),
            moves=self.moves.moves,
        )
        return self._record
