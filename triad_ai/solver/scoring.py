"""
Static state scoring for Triple Triad.

The state score rates a position for Blue without playing it out:
- defense: how hard it is to capture Blue's cards through their open sides
- capture: how much of the board Blue already owns
- deck: quality of the cards left in Blue's hand

Early in the game, rollouts from random play are a noisy estimate, so the
score is blended into the rollout win chance with a weight that decays with
every card Blue places.
"""
from typing import Optional, Tuple

from triad_ai.core.constants import (
    CardOwner, GameSide, NEIGHBORS, MIN_CARD_VALUE, MAX_CARD_VALUE, NUM_CARD_VALUES
)
from triad_ai.core.game import SimulationState, TriadGameSimulation
from triad_ai.solver.config import SolverConfig
from triad_ai.solver.result import SolverResult

# Owning this many cells gives the full capture score
NUM_CARDS_FOR_FULL_CAPTURE = 5


class StateScorer:
    """Computes the state score and blends it into rollout results."""

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()

    def state_weight(self, num_placed: int) -> float:
        """
        Get the weight of the state score.

        Args:
            num_placed: Number of cards Blue has placed

        Returns:
            Weight in [0, state_weight]
        """
        return max(0.0, self.config.state_weight - (num_placed - 1) * self.config.state_weight_decay)

    def blend(self, rollout_result: SolverResult, state_score: float, num_placed: int) -> SolverResult:
        """
        Blend the state score into a rollout estimate.

        Args:
            rollout_result: Result of the rollouts
            state_score: Score of the state, in [0, 1]
            num_placed: Number of cards Blue has placed

        Returns:
            Normalized result with the adjusted win chance; draws pass through
        """
        weight = self.state_weight(num_placed)
        num_wins = rollout_result.win_chance * (1.0 - weight) + state_score * weight
        return SolverResult(min(1.0, num_wins), rollout_result.draw_chance, 1)

    def calculate_state_score(self, simulation: TriadGameSimulation, state: SimulationState) -> float:
        """
        Compute the combined state score for Blue.

        Args:
            simulation: Rules used to check captures and rate cards
            state: Game state

        Returns:
            Weighted average of the defense, capture and deck scores
        """
        defense_score, capture_score = self.calculate_board_score(simulation, state)
        deck_score = self.calculate_deck_score(simulation, state)

        config = self.config
        total_priority = config.priority_defense + config.priority_deck + config.priority_capture
        return (defense_score * config.priority_defense
                + capture_score * config.priority_capture
                + deck_score * config.priority_deck) / total_priority

    def calculate_board_score(self, simulation: TriadGameSimulation, state: SimulationState) -> Tuple[float, float]:
        """
        Compute the defense and capture scores of Blue's cards on the board.

        For every open side of a Blue card, count the values 1-10 that would
        capture it. The normalized count, averaged over all Blue cards and
        inverted, is the defense score.

        Returns:
            Tuple of (defense score, capture score)
        """
        capturing_sum = 0.0
        num_blue_cards = 0

        for board_pos, cell in enumerate(state.board):
            if cell is None or cell.owner != CardOwner.BLUE:
                continue

            neighbors = NEIGHBORS[board_pos]
            num_capturing_values = 0
            num_valid_sides = 0
            for side in GameSide:
                neighbor_pos = neighbors[side]
                if neighbor_pos < 0 or state.board[neighbor_pos] is not None:
                    continue

                card_number = cell.card.get_number(side)
                num_capturing_values += sum(
                    1 for test_value in range(MIN_CARD_VALUE, MAX_CARD_VALUE + 1)
                    if simulation.can_be_captured_with(card_number, test_value)
                )
                num_valid_sides += 1

            if num_valid_sides > 0:
                capturing_sum += num_capturing_values / (num_valid_sides * NUM_CARD_VALUES)
            num_blue_cards += 1

        defense_score = (1.0 - capturing_sum / num_blue_cards) if num_blue_cards > 0 else 0.0
        capture_score = min(1.0, num_blue_cards / NUM_CARDS_FOR_FULL_CAPTURE)
        return defense_score, capture_score

    def calculate_deck_score(self, simulation: TriadGameSimulation, state: SimulationState) -> float:
        """Average modifier-adjusted optimizer score of the cards in Blue's hand."""
        deck = state.deck_blue
        scores = [
            simulation.score_card(deck.get_card(card_idx))
            for card_idx in range(len(deck.cards))
            if deck.is_available(card_idx)
        ]
        return sum(scores) / len(scores) if scores else 0.0
