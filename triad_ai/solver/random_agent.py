"""
Random agent for Triple Triad.

The random agent is the baseline for comparison with the search agents and
the policy of both sides in rollout playouts.
"""
from __future__ import annotations
from typing import Optional
import random

from triad_ai.core.constants import GameStateTag, BOARD_SIZE_SQ, MAX_AVAILABLE_CARDS
from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.solver.base import TriadGameAgent, AgentMove, NO_MOVE
from triad_ai.solver.search import pick_random_bit_from_mask


class RandomAgent(TriadGameAgent):
    """
    Agent that picks a random legal card and cell.

    Two selection modes are supported:
    - equal distribution: uniform pick among the legal cards and cells
    - scan (default): random start position, then the first legal index
      found stepping forward with wraparound

    Scan mode favors indices that follow a run of illegal ones, so it is not
    uniform over legal actions and biases the simulated opponent. It stays the
    default because historical win rate baselines were measured with it.
    """

    name = "Random"

    def __init__(
        self,
        use_equal_distribution: bool = False,
        name: Optional[str] = None,
        solver: Optional[TriadGameSolver] = None,
        session_seed: Optional[int] = None
    ):
        """
        Initialize the random agent.

        Args:
            use_equal_distribution: Pick uniformly among legal actions instead of scanning
            name: Name of the agent
            solver: If given together with session_seed, initialize right away
            session_seed: Seed of the random stream
        """
        super().__init__(name=name)
        self.use_equal_distribution = use_equal_distribution
        self.rand_gen: Optional[random.Random] = None

        if solver is not None and session_seed is not None:
            self.initialize(solver, session_seed)

    def initialize(self, solver: TriadGameSolver, session_seed: int) -> None:
        self.rand_gen = random.Random(session_seed)

    def is_initialized(self) -> bool:
        return self.rand_gen is not None

    def find_next_move(self, solver: TriadGameSolver, state: SimulationState) -> AgentMove:
        if not self.is_initialized():
            return NO_MOVE

        if self.use_equal_distribution:
            board_mask, num_board, card_mask, num_cards = solver.find_available_actions(state)
            if num_cards <= 0 or num_board <= 0:
                return NO_MOVE

            card_idx = self.pick_bitmask_index(card_mask, num_cards)
            board_pos = self.pick_bitmask_index(board_mask, num_board)
            return AgentMove(card_idx, board_pos)

        board_pos = -1
        if state.num_cards_placed < BOARD_SIZE_SQ:
            test_pos = self.rand_gen.randrange(BOARD_SIZE_SQ)
            for _ in range(BOARD_SIZE_SQ):
                test_pos = (test_pos + 1) % BOARD_SIZE_SQ
                if state.board[test_pos] is None:
                    board_pos = test_pos
                    break

        card_idx = -1
        use_deck = state.deck_blue if state.state == GameStateTag.IN_PROGRESS_BLUE else state.deck_red
        if use_deck.available_card_mask > 0:
            test_idx = self.rand_gen.randrange(MAX_AVAILABLE_CARDS)
            for _ in range(MAX_AVAILABLE_CARDS):
                test_idx = (test_idx + 1) % MAX_AVAILABLE_CARDS
                if use_deck.available_card_mask & (1 << test_idx):
                    card_idx = test_idx
                    break

        return AgentMove(card_idx, board_pos)

    def pick_bitmask_index(self, mask: int, num_set: int) -> int:
        """Pick one of the num_set set bits of a mask uniformly."""
        return pick_random_bit_from_mask(mask, self.rand_gen.randrange(num_set))
