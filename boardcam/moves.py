"""Turn square changes seen on the board into move notation."""

from __future__ import annotations

import os
from collections.abc import Sequence
from enum import Enum, auto
from pathlib import Path

EMPTY_SQUARE = "0"
_PAWN = "B"
_BACK_RANK = "TSLDKLST"


class FieldChange(Enum):
    """What happened to one square since the previous turn."""

    NO_CHANGE = auto()
    EMPTY = auto()
    WHITE_PIECE = auto()
    BLACK_PIECE = auto()


def initial_position() -> list[list[str]]:
    """Return the starting position, one list of piece letters per row."""
    return [
        list(_BACK_RANK),
        [_PAWN] * 8,
        *([EMPTY_SQUARE] * 8 for _ in range(4)),
        [_PAWN] * 8,
        list(_BACK_RANK),
    ]


_E = FieldChange.EMPTY
_W = FieldChange.WHITE_PIECE
_B = FieldChange.BLACK_PIECE

# (row, required changes by column, resulting pieces by column, notation)
_CASTLINGS = (
    (0, {0: _E, 2: _B, 3: _B, 4: _E}, {0: "0", 2: "K", 3: "T", 4: "0"}, "0-0-0"),
    (7, {0: _E, 2: _W, 3: _W, 4: _W}, {0: "0", 2: "K", 3: "T", 4: "0"}, "0-0-0"),
    (0, {4: _E, 5: _B, 6: _B, 7: _E}, {4: "0", 5: "T", 6: "K", 7: "0"}, "0-0"),
    (7, {4: _E, 5: _W, 6: _W, 7: _E}, {4: "0", 5: "T", 6: "K", 7: "0"}, "0-0"),
)


def _grid(changes: Sequence[Sequence[FieldChange]]) -> list[list[FieldChange]]:
    grid = [list(row) for row in changes]
    if len(grid) != 8 or any(len(row) != 8 for row in grid):
        raise ValueError("changes must be an 8x8 grid")
    for row in grid:
        for change in row:
            if not isinstance(change, FieldChange):
                raise TypeError(f"{change!r} is not a FieldChange")
    return grid


class MoveRecorder:
    """Tracks the pieces on the board and appends each move to a log file."""

    def __init__(self, log_path: str | os.PathLike[str]) -> None:
        self.log_path = Path(log_path)
        self.board = initial_position()

    def analyse(self, changes: Sequence[Sequence[FieldChange]]) -> str:
        """Record one turn given as an 8x8 grid of changes indexed [row][column].

        Returns the notation written to the log.
        """
        grid = _grid(changes)
        line = ""
        pending = ""
        piece = " "
        target: tuple[int, int] | None = None
        count = 0

        for y, row in enumerate(grid):
            rank = str(8 - y)
            for x, change in enumerate(row):
                if change is FieldChange.NO_CHANGE:
                    continue
                count += 1
                square = chr(ord("A") + x) + rank
                if change is FieldChange.EMPTY:
                    piece = self.board[y][x]
                    if target is not None:
                        ty, tx = target
                        self.board[ty][tx] = piece
                        target = None
                    line = "" if piece == _PAWN else piece + line[1:]
                    line += square + pending
                    self.board[y][x] = EMPTY_SQUARE
                else:
                    sign = "-" if self.board[y][x] == EMPTY_SQUARE else "X"
                    if not line:
                        pending = sign + pending[1:] + square
                        target = (y, x)
                    else:
                        line += sign + square
                        self.board[y][x] = piece
                        target = None

        if count == 3:
            line += "ep"
        elif count == 4:
            line = self.castling(grid)

        with self.log_path.open("a", encoding="ascii") as log:
            log.write(line + "\n")
        return line

    def castling(self, changes: Sequence[Sequence[FieldChange]]) -> str:
        """Apply a castling seen in ``changes``; return its notation or ''."""
        grid = _grid(changes)
        for row, required, result, notation in _CASTLINGS:
            if all(grid[row][column] is change for column, change in required.items()):
                for column, square in result.items():
                    self.board[row][column] = square
                return notation
        return ""