"""
Search results for the Triad solver.

A SolverResult summarizes one or many games explored from a state: how many
were won, drawn and played. Rollout estimates are stored as fractions, so all
fields are floats.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class SolverResult:
    """
    Win/draw statistics of a search branch.

    Branches are ranked by win chance only; a result with the same win
    chance is never better, so the first branch found keeps ties.
    """
    wins: float = 0.0
    draws: float = 0.0
    games: float = 0.0

    ZERO: ClassVar['SolverResult']

    def __post_init__(self):
        if self.wins < 0 or self.draws < 0 or self.games < 0:
            raise ValueError(f"SolverResult fields can't be negative: {self}")

    @property
    def win_chance(self) -> float:
        return self.wins / self.games if self.games > 0 else 0.0

    @property
    def draw_chance(self) -> float:
        return self.draws / self.games if self.games > 0 else 0.0

    def is_better_than(self, other: 'SolverResult') -> bool:
        """
        Compare two results by win chance.

        Args:
            other: Result to compare against

        Returns:
            True only if this result has a strictly higher win chance
        """
        return self.win_chance > other.win_chance

    def normalized(self) -> 'SolverResult':
        """Get the same result scaled to a single game."""
        return SolverResult(self.win_chance, self.draw_chance, 1.0 if self.games > 0 else 0.0)

    def __add__(self, other: 'SolverResult') -> 'SolverResult':
        return SolverResult(self.wins + other.wins, self.draws + other.draws, self.games + other.games)

    def __str__(self) -> str:
        return f"win:{self.win_chance:.2%} draw:{self.draw_chance:.2%} (games:{self.games:g})"


SolverResult.ZERO = SolverResult()
