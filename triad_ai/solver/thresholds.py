"""
Adaptive switch between exhaustive search and rollouts.

Counting the states reachable from a board with a given number of placed
cards tells how late in the game exhaustive search becomes cheap:

    placed 0: (5 * 9) * (5 * 8) * (4 * 7) * (4 * 6) * ... = (5! * 5!) * 9!
    placed 1: (5 * 8) * (4 * 7) * (4 * 6) * ...           = (4! * 5!) * 8!
    ...
    placed 8: (1 * 1)

Each ply multiplies the free cells by the cards left in the acting hand. With
a forced card only the cells remain.
"""
from dataclasses import dataclass

from triad_ai.core.constants import BOARD_SIZE_SQ
from triad_ai.core.game import SimulationState


def count_states(num_to_place: int) -> int:
    """
    Count reachable states with num_to_place cards still to be placed.

    Args:
        num_to_place: Number of empty cells

    Returns:
        Product of the branching factors of all remaining plies
    """
    num_states = 1
    for to_place in range(1, num_to_place + 1):
        num_states *= to_place * ((to_place + 2) // 2) * ((to_place + 1) // 2)
    return num_states


def count_states_forced(num_to_place: int) -> int:
    """Count reachable states when every card choice is forced."""
    num_states = 1
    for to_place in range(1, num_to_place + 1):
        num_states *= to_place
    return num_states


@dataclass(frozen=True)
class ExplorationThresholds:
    """
    Smallest number of placed cards at which exhaustive search stays within
    max_states reachable states.

    States with fewer cards placed than the threshold are estimated with
    rollouts instead (except at the root of the search).
    """
    min_placed_to_explore: int = BOARD_SIZE_SQ + 1
    min_placed_to_explore_with_forced: int = BOARD_SIZE_SQ + 1
    max_states: int = 10_000

    @classmethod
    def compute(cls, max_states: int = 10_000) -> 'ExplorationThresholds':
        """
        Compute both thresholds for a state ceiling.

        Args:
            max_states: Largest number of states explored exhaustively

        Returns:
            ExplorationThresholds
        """
        min_placed = BOARD_SIZE_SQ + 1
        min_placed_forced = BOARD_SIZE_SQ + 1

        num_states = 1
        num_states_forced = 1
        for num_to_place in range(1, BOARD_SIZE_SQ + 1):
            num_placed = BOARD_SIZE_SQ - num_to_place

            num_states_forced *= num_to_place
            if num_states_forced <= max_states:
                min_placed_forced = num_placed

            num_states *= num_to_place * ((num_to_place + 2) // 2) * ((num_to_place + 1) // 2)
            if num_states <= max_states:
                min_placed = num_placed

        return cls(min_placed, min_placed_forced, max_states)

    def threshold_for(self, state: SimulationState) -> int:
        if state.forced_card_idx >= 0:
            return self.min_placed_to_explore_with_forced
        return self.min_placed_to_explore

    def should_run_rollout(self, state: SimulationState, depth: int) -> bool:
        """
        Check if a state is too far from the end for exhaustive search.

        Args:
            state: Non-terminal game state
            depth: Search depth, the root (0) is always expanded

        Returns:
            True if the state should be estimated with rollouts
        """
        return depth > 0 and state.num_cards_placed < self.threshold_for(state)
