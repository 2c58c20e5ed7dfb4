"""
Constants for the Triple Triad game.

This module defines the board geometry, card limits, owners, sides and game
state tags used throughout the Triad AI implementation.
"""
from enum import Enum, IntEnum, auto
from typing import Final, Tuple


class CardOwner(Enum):
    """Enum representing the owner of a placed card."""
    NONE = auto()
    BLUE = auto()
    RED = auto()

    @property
    def opponent(self) -> 'CardOwner':
        """Get the opposing owner (NONE stays NONE)."""
        if self == CardOwner.BLUE:
            return CardOwner.RED
        if self == CardOwner.RED:
            return CardOwner.BLUE
        return CardOwner.NONE


class GameSide(IntEnum):
    """Enum representing the four sides of a card, in card data order."""
    UP = 0
    LEFT = 1
    DOWN = 2
    RIGHT = 3

    @property
    def opposite(self) -> 'GameSide':
        """Get the side facing this one on an adjacent card."""
        return GameSide((self + 2) % 4)


class GameStateTag(Enum):
    """
    Enum representing the state of a game.

    Terminal tags are always expressed from Blue's point of view.
    """
    IN_PROGRESS_BLUE = auto()
    IN_PROGRESS_RED = auto()
    BLUE_WINS = auto()
    BLUE_DRAW = auto()
    BLUE_LOST = auto()

    @property
    def is_in_progress(self) -> bool:
        return self in (GameStateTag.IN_PROGRESS_BLUE, GameStateTag.IN_PROGRESS_RED)


# Board geometry
BOARD_SIZE: Final[int] = 3
BOARD_SIZE_SQ: Final[int] = BOARD_SIZE * BOARD_SIZE

# Number of cards in each player's hand
MAX_AVAILABLE_CARDS: Final[int] = 5

# Card side values, 10 is displayed as "A"
MIN_CARD_VALUE: Final[int] = 1
MAX_CARD_VALUE: Final[int] = 10
NUM_CARD_VALUES: Final[int] = MAX_CARD_VALUE - MIN_CARD_VALUE + 1


def _build_neighbors() -> Tuple[Tuple[int, int, int, int], ...]:
    neighbors = []
    for idx in range(BOARD_SIZE_SQ):
        row, col = divmod(idx, BOARD_SIZE)
        neighbors.append((
            idx - BOARD_SIZE if row > 0 else -1,               # UP
            idx - 1 if col > 0 else -1,                        # LEFT
            idx + BOARD_SIZE if row < BOARD_SIZE - 1 else -1,  # DOWN
            idx + 1 if col < BOARD_SIZE - 1 else -1,           # RIGHT
        ))
    return tuple(neighbors)


# Adjacent cell per board position, indexed by GameSide; -1 = off the board
NEIGHBORS: Final[Tuple[Tuple[int, int, int, int], ...]] = _build_neighbors()

# Bitmask with every board cell set
FULL_BOARD_MASK: Final[int] = (1 << BOARD_SIZE_SQ) - 1

# Bitmask with every hand slot set
FULL_DECK_MASK: Final[int] = (1 << MAX_AVAILABLE_CARDS) - 1
