# backend/moves.py

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class MoveType(str, Enum):
    OPEN = "open"
    FLAG = "flag"


class Outcome(str, Enum):
    SAFE = "safe"
    MINE = "mine"
    WIN = "win"
    FLAG_SET = "flag_set"
    FLAG_REMOVED = "flag_removed"


class GameResult(str, Enum):
    WIN = "win"
    LOSE = "lose"


OUTCOMES_BY_TYPE = {
    MoveType.OPEN: {Outcome.SAFE, Outcome.MINE, Outcome.WIN},
    MoveType.FLAG: {Outcome.FLAG_SET, Outcome.FLAG_REMOVED},
}


@dataclass(frozen=True)
class Move:
    sequence_number: int
    row: int
    col: int
    move_type: MoveType
    outcome: Outcome

    def __post_init__(self):
        if self.outcome not in OUTCOMES_BY_TYPE[self.move_type]:
            raise ValueError(f"Outcome {self.outcome.value!r} is not valid for a {self.move_type.value} move")

    @property
    def is_terminal(self) -> bool:
        return self.outcome in (Outcome.MINE, Outcome.WIN)

    def to_dict(self) -> dict:
        return {
            "move_number": self.sequence_number,
            "row": self.row,
            "col": self.col,
            "move_type": self.move_type.value,
            "result": self.outcome.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Move":
        return cls(
            sequence_number=int(data["move_number"]),
            row=int(data["row"]),
            col=int(data["col"]),
            move_type=MoveType(data["move_type"]),
            outcome=Outcome(data["result"]),
        )


class MoveLog:
    """
    Append-only, ordered record of a session's moves. Sequence numbers are
    assigned here, starting from 1.
    """

    def __init__(self):
        self._moves: List[Move] = []

    @classmethod
    def from_moves(cls, moves) -> "MoveLog":
        log = cls()
        for expected, move in enumerate(moves, start=1):
            if move.sequence_number != expected:
                raise ValueError(f"Move log out of sequence: expected #{expected}, got #{move.sequence_number}")
            log._moves.append(move)
        return log

    def record(self, row: int, col: int, move_type: MoveType, outcome: Outcome) -> Move:
        move = Move(len(self._moves) + 1, row, col, MoveType(move_type), Outcome(outcome))
        self._moves.append(move)
        return move

    @property
    def moves(self) -> Tuple[Move, ...]:
        return tuple(self._moves)

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(tuple(self._moves))

    def __getitem__(self, position: int) -> Move:
        return self._moves[position]


@dataclass(frozen=True)
class GameSummary:
    id: int
    player: str
    played_at: datetime
    size: int
    mine_count: int
    result: GameResult
    total_moves: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player": self.player,
            "played_at": self.played_at.isoformat(),
            "size": self.size,
            "mine_count": self.mine_count,
            "result": self.result.value,
            "total_moves": self.total_moves,
        }


@dataclass(frozen=True)
class GameRecord:
    """A finished game: the header plus everything needed to replay it."""
    player: str
    played_at: datetime
    size: int
    mine_count: int
    mine_positions: Tuple[Tuple[int, int], ...]
    result: GameResult
    total_moves: int
    moves: Tuple[Move, ...] = field(default_factory=tuple)
    id: Optional[int] = None

    def summary(self) -> GameSummary:
        return GameSummary(
            id=self.id,
            player=self.player,
            played_at=self.played_at,
            size=self.size,
            mine_count=self.mine_count,
            result=self.result,
            total_moves=self.total_moves,
        )

    def to_dict(self) -> dict:
        data = self.summary().to_dict()
        data["mine_positions"] = [{"row": r, "col": c} for r, c in self.mine_positions]
        data["moves"] = [move.to_dict() for move in self.moves]
        return data
