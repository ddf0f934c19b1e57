"""Pairings for a round-robin tournament, produced one game at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional

__all__ = ["Pairing", "MatchGenerator"]


@dataclass(frozen=True)
class Pairing:
    """One game to play: its round, pair and game numbers, opening and players."""

    round_id: int
    pairing_id: int
    game_id: int
    opening_id: Optional[int]
    player1: int
    player2: int


class MatchGenerator:
    """Walks every pair of players, ``games`` games per pair, for ``rounds`` rounds.

    ``fetch_opening`` is called once for each new pair of games and gives
    the opening those games share. ``played_games`` resumes numbering after
    games already played.
    """

    def __init__(
        self,
        fetch_opening: Callable[[], Optional[int]],
        players: int,
        rounds: int,
        games: int,
        played_games: int = 0,
    ) -> None:
        if players < 2 or rounds < 1 or games < 1:
            raise ValueError("Invalid number of players, rounds, or games per round")

        self._fetch_opening = fetch_opening
        self._players = players
        self._rounds = rounds
        self._games_per_round = games
        self._current_round = played_games // games + 1
        self._game_counter = played_games
        self._player1 = 0
        self._player2 = 1
        self._games_per_pair = 0
        self._pair_counter = played_games // games
        self._opening: Optional[int] = None

    def next(self) -> Optional[Pairing]:
        """The next game, or None once every round is done."""
        if self._current_round > self._rounds:
            return None

        if self._games_per_pair == 0:
            self._opening = self._fetch_opening()

        self._game_counter += 1
        pairing = Pairing(
            round_id=self._current_round,
            pairing_id=self._pair_counter,
            game_id=self._game_counter,
            opening_id=self._opening,
            player1=self._player1,
            player2=self._player2,
        )

        self._games_per_pair += 1

        if self._games_per_pair >= self._games_per_round:
            self._games_per_pair = 0
            self._player2 += 1
            self._pair_counter += 1

            if self._player2 >= self._players:
                self._player1 += 1
                self._player2 = self._player1 + 1

            if self._player1 >= self._players - 1:
                self._current_round += 1
                self._player1 = 0
                self._player2 = 1

        return pairing

    def __iter__(self) -> Iterator[Pairing]:
        while (pairing := self.next()) is not None:
            yield pairing