"""
Cards and decks for the Triple Triad game.

This module defines the static card data, the per-game deck instance that
tracks which cards are still in hand, and factory functions to create random
cards and decks.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from triad_ai.core.constants import (
    GameSide, MAX_AVAILABLE_CARDS, MIN_CARD_VALUE, MAX_CARD_VALUE,
    FULL_DECK_MASK
)


def compute_optimizer_score(sides: Sequence[int]) -> float:
    """
    Compute the static desirability of a card from its side values.

    Strong cards raise the average, and a weak side is an opening for the
    opponent, so the weakest side is weighted in as well.

    Args:
        sides: Four side values in GameSide order

    Returns:
        Score in the range [0, 1]
    """
    values = (np.asarray(sides, dtype=np.float64) - MIN_CARD_VALUE) / (MAX_CARD_VALUE - MIN_CARD_VALUE)
    return float(0.8 * values.mean() + 0.2 * values.min())


@dataclass(frozen=True)
class TriadCard:
    """
    Represents the static data of a Triple Triad card.

    Each card has four side values (1-10, where 10 is shown as "A") and a
    precomputed optimizer score used when rating a hand.
    """
    card_id: int
    sides: Tuple[int, int, int, int]  # UP, LEFT, DOWN, RIGHT
    name: str = ""
    optimizer_score: Optional[float] = None

    def __post_init__(self):
        """Validate the card after initialization."""
        if len(self.sides) != 4:
            raise ValueError(f"Card {self.card_id} needs 4 side values, got {len(self.sides)}")

        for value in self.sides:
            if not MIN_CARD_VALUE <= value <= MAX_CARD_VALUE:
                raise ValueError(
                    f"Card {self.card_id} side value ({value}) outside valid range "
                    f"({MIN_CARD_VALUE}-{MAX_CARD_VALUE})"
                )

        object.__setattr__(self, 'sides', tuple(int(v) for v in self.sides))
        if self.optimizer_score is None:
            object.__setattr__(self, 'optimizer_score', compute_optimizer_score(self.sides))

    def get_number(self, side: GameSide) -> int:
        """Get the value printed on the given side."""
        return self.sides[side]

    def __str__(self) -> str:
        """String representation of the card."""
        up, left, down, right = ("A" if v == MAX_CARD_VALUE else str(v) for v in self.sides)
        label = self.name or f"#{self.card_id}"
        return f"Card({label} [{up}-{left}-{down}-{right}])"


@dataclass
class DeckInstance:
    """
    A player's hand during one game.

    Cards are addressed by their index in the hand; a set bit in
    available_card_mask means the card at that index has not been played yet.
    """
    cards: Tuple[TriadCard, ...]
    available_card_mask: int = FULL_DECK_MASK
    num_placed: int = 0

    def __post_init__(self):
        self.cards = tuple(self.cards)
        if len(self.cards) > MAX_AVAILABLE_CARDS:
            raise ValueError(f"Deck can hold at most {MAX_AVAILABLE_CARDS} cards")
        self.available_card_mask &= (1 << len(self.cards)) - 1

    def get_card(self, card_idx: int) -> TriadCard:
        return self.cards[card_idx]

    def is_available(self, card_idx: int) -> bool:
        return 0 <= card_idx < len(self.cards) and (self.available_card_mask & (1 << card_idx)) != 0

    @property
    def num_available(self) -> int:
        return bin(self.available_card_mask).count("1")

    def mark_placed(self, card_idx: int) -> None:
        """Remove a card from the hand."""
        self.available_card_mask &= ~(1 << card_idx)
        self.num_placed += 1

    def clone(self) -> 'DeckInstance':
        # card data is immutable and shared between copies
        return DeckInstance(self.cards, self.available_card_mask, self.num_placed)


def create_random_card(rng: np.random.Generator, card_id: int = 0) -> TriadCard:
    """
    Create a card with random side values.

    Args:
        rng: NumPy random generator
        card_id: Identifier of the new card

    Returns:
        TriadCard
    """
    sides = rng.integers(MIN_CARD_VALUE, MAX_CARD_VALUE + 1, size=4)
    return TriadCard(card_id=card_id, sides=tuple(int(v) for v in sides))


def create_random_deck(
    rng: np.random.Generator,
    size: int = MAX_AVAILABLE_CARDS,
    first_id: int = 0
) -> DeckInstance:
    """
    Create a full hand of random cards.

    Args:
        rng: NumPy random generator
        size: Number of cards in the hand
        first_id: Identifier of the first card, the rest are numbered sequentially

    Returns:
        DeckInstance with every card available
    """
    cards = [create_random_card(rng, first_id + idx) for idx in range(size)]
    return DeckInstance(tuple(cards))


def create_deck(side_values: List[Tuple[int, int, int, int]], first_id: int = 0) -> DeckInstance:
    """
    Create a hand from explicit side values.

    Args:
        side_values: One (up, left, down, right) tuple per card
        first_id: Identifier of the first card

    Returns:
        DeckInstance with every card available
    """
    cards = [TriadCard(card_id=first_id + idx, sides=sides) for idx, sides in enumerate(side_values)]
    return DeckInstance(tuple(cards))
