"""Match state: line-ups, scoring, falls and the end-of-game rules."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import Config
from .messages import TEAM_SIZE, DisplayMessage

WINNER = "Winner"
LOSER = "Loser"
TIE = "tie"


def random_in_range(low: int, high: int, rng: Optional[random.Random] = None) -> int:
    """Return a random integer in [low, high]."""
    if high < low:
        raise ValueError(f"empty range: {low}..{high}")
    return (rng or random).randint(low, high)


@dataclass
class Slot:
    """One place in a line-up: a player's id and current energy."""

    energy: int
    player_id: int


def sort_lineup(lineup: Iterable[Slot]) -> list[Slot]:
    """Order slots by ascending energy, keeping ties in their original order."""
    return sorted(lineup, key=lambda slot: slot.energy)


def _zeros() -> list[int]:
    return [0] * TEAM_SIZE


@dataclass
class Team:
    team_id: int
    score: int = 0
    win_counter: int = 0
    player_ids: list[int] = field(default_factory=_zeros)
    initial_energy: list[int] = field(default_factory=_zeros)
    pids: list[int] = field(default_factory=_zeros)

    def record_win(self) -> None:
        self.score += 1
        self.win_counter += 1

    def reset_streak(self) -> None:
        self.win_counter = 0


@dataclass(frozen=True)
class RoundResult:
    total_1: int
    total_2: int
    winner: Optional[int]


class Match:
    """The referee's view of the game, independent of how messages travel."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.teams = (Team(0), Team(1))
        self.lineups: list[list[Slot]] = [
            [Slot(0, 0) for _ in range(TEAM_SIZE)] for _ in range(2)
        ]
        self.max_win_in_row = int(config.max_score / 2) + 1
        self.finished = False
        self.fallen: Optional[tuple[int, int]] = None
        self._prev_energy = 0

    def set_initial_energy(self, team_id: int, player_id: int, pid: int, energy: int) -> None:
        team = self.teams[int(team_id != 0)]
        team.team_id = team_id
        team.player_ids[player_id] = player_id
        team.pids[player_id] = pid
        team.initial_energy[player_id] = energy
        team.score = 0
        team.win_counter = 0

    def load_current_energy(self, first: bool) -> None:
        """Rebuild line-ups from initial energy when first, then sort them."""
        if self.finished:
            return
        if first:
            self.lineups = [
                [Slot(e, p) for e, p in zip(team.initial_energy, team.player_ids)]
                for team in self.teams
            ]
        self.lineups = [sort_lineup(lineup) for lineup in self.lineups]

    def position_of(self, team_id: int, player_id: int) -> int:
        for position, slot in enumerate(self.lineups[int(team_id != 0)]):
            if slot.player_id == player_id:
                return position
        raise KeyError(f"player {player_id} not in team {team_id} line-up")

    def apply_efforts(self, efforts: Iterable[tuple[int, int, int]]) -> Optional[RoundResult]:
        """Apply (team_id, player_id, effort) reports and score the round.

        Efforts are weighted by line-up position; a fallen player's report is
        ignored. Returns None once the match has finished.
        """
        if self.finished:
            return None
        totals = [0, 0]
        for team_id, player_id, effort in efforts:
            side = int(team_id != 0)
            if self.fallen == (side, player_id):
                continue
            position = self.position_of(side, player_id)
            weighted = effort * (position + 1)
            self.lineups[side][position].energy -= weighted
            totals[side] += weighted
        return RoundResult(totals[0], totals[1], self._score_round(*totals))

    def _score_round(self, total_1: int, total_2: int) -> Optional[int]:
        if total_1 > total_2:
            winner = 0
        elif total_1 < total_2:
            winner = 1
        elif total_1 >= self.config.win_threshold:
            winner = 0
        else:
            return None
        self.teams[winner].record_win()
        self.teams[1 - winner].reset_streak()
        return winner

    def leader(self) -> Optional[int]:
        first, second = self.teams[0].score, self.teams[1].score
        if first > second:
            return 0
        if first < second:
            return 1
        return None

    def status_for(self, team_id: int) -> str:
        leader = self.leader()
        if leader is None:
            return TIE
        return WINNER if leader == int(team_id != 0) else LOSER

    def check_winner(self) -> Optional[int]:
        """End the match if a team reached the score or streak limit; return it."""
        if self.finished:
            return None
        for side, team in enumerate(self.teams):
            if team.score == self.config.max_score or team.win_counter == self.max_win_in_row:
                self.finished = True
                return side
        return None

    def final_result(self) -> str:
        leader = self.leader()
        if leader is None:
            return "Tie"
        return f"Team {leader + 1} has won :)"

    def player_fallen(self, team_id: int, player_id: int) -> None:
        side = int(team_id != 0)
        slot = self.lineups[side][self.position_of(side, player_id)]
        self._prev_energy = slot.energy
        slot.energy = 0
        self.fallen = (side, player_id)

    def player_woken(self) -> None:
        """Return the fallen player to the rope with the energy it had."""
        if self.fallen is None:
            return
        side, player_id = self.fallen
        self.fallen = None
        self.lineups[side][self.position_of(side, player_id)].energy = self._prev_energy

    def display_message(self) -> DisplayMessage:
        first, second = self.lineups
        return DisplayMessage(
            energies_1=[slot.energy for slot in first],
            ids_1=[slot.player_id for slot in first],
            energies_2=[slot.energy for slot in second],
            ids_2=[slot.player_id for slot in second],
            score_1=self.teams[0].score,
            score_2=self.teams[1].score,
        )