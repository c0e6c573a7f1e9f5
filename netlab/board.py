"""Tic-tac-toe board and match rules shared by the game servers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

BOARD_SIZE = 9
EMPTY = " "

WIN_LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

_MARKS = {1: "X", 2: "O"}


class InvalidMove(ValueError):
    """Raised when a move cannot be played."""


class Outcome(Enum):
    """Result of playing one move."""

    CONTINUE = "continue"
    WIN = "win"
    DRAW = "draw"


def mark_for(player):
    """Return the mark ('X' or 'O') used by player 1 or 2."""
    try:
        return _MARKS[player]
    except KeyError:
        raise ValueError(f"no such player: {player!r}") from None


def parse_move(text):
    """Parse a move sent by a player: exactly one digit from 0 to 8."""
    if len(text) != 1 or text not in "012345678":
        raise InvalidMove(f"not a board position: {text!r}")
    return int(text)


def parse_answer(text):
    """Return True if a play-again answer starts with 'y' or 'Y'."""
    return text[:1] in ("y", "Y")


def _empty_cells():
    return [EMPTY] * BOARD_SIZE


@dataclass
class Board:
    """A 3x3 board stored as nine cells, numbered row by row."""

    cells: list = field(default_factory=_empty_cells)

    def reset(self):
        self.cells = _empty_cells()

    def render(self):
        return (
            "\n {} | {} | {}\n"
            "---+---+---\n"
            " {} | {} | {}\n"
            "---+---+---\n"
            " {} | {} | {}\n\n"
        ).format(*self.cells)

    def is_valid_move(self, move):
        return 0 <= move < BOARD_SIZE and self.cells[move] == EMPTY

    def place(self, move, mark):
        if not self.is_valid_move(move):
            raise InvalidMove(f"position {move} is not free")
        self.cells[move] = mark

    def has_line(self):
        cells = self.cells
        return any(
            cells[a] != EMPTY and cells[a] == cells[b] == cells[c]
            for a, b, c in WIN_LINES
        )

    def is_full(self):
        return EMPTY not in self.cells


@dataclass
class Match:
    """One game between player 1 (X) and player 2 (O); player 1 starts."""

    board: Board = field(default_factory=Board)
    current_player: int = 1
    move_count: int = 0
    game_over: bool = False
    winner: int | None = None

    def reset(self):
        self.board.reset()
        self.current_player = 1
        self.move_count = 0
        self.game_over = False
        self.winner = None

    def play(self, player, move):
        """Play a move for player and report how the game stands."""
        if self.game_over:
            raise InvalidMove("the game is over")
        if player != self.current_player:
            raise InvalidMove(f"it is player {self.current_player}'s turn")
        self.board.place(move, mark_for(player))
        self.move_count += 1
        if self.board.has_line():
            self.game_over = True
            self.winner = player
            return Outcome.WIN
        if self.board.is_full():
            self.game_over = True
            return Outcome.DRAW
        self.current_player = 2 if player == 1 else 1
        return Outcome.CONTINUE