"""
Exhaustive action graph search for Triple Triad.

This module implements the recursive exploration of every (card, cell) action
until the game ends:
1. Even depths are the searching player's turns: keep the best branch
2. Odd depths are the opponent's turns: average over every reply
3. A leaf evaluator can cut the recursion short and estimate a branch instead

The opponent is modeled as the same statistical policy used for rollouts, not
as a perfect adversary, so odd depths sum instead of minimizing.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import random

from triad_ai.core.constants import GameStateTag, MAX_AVAILABLE_CARDS, BOARD_SIZE_SQ
from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.solver.base import AgentMove
from triad_ai.solver.result import SolverResult


_TERMINAL_RESULTS: Dict[GameStateTag, SolverResult] = {
    GameStateTag.BLUE_WINS: SolverResult(1, 0, 1),
    GameStateTag.BLUE_DRAW: SolverResult(0, 1, 1),
    GameStateTag.BLUE_LOST: SolverResult(0, 0, 1),
}


def is_finished(state: SimulationState) -> Tuple[bool, SolverResult]:
    """
    Check if the game is over.

    Args:
        state: Game state, evaluated for Blue

    Returns:
        Tuple of (is finished, fixed result of the finished game or ZERO)
    """
    result = _TERMINAL_RESULTS.get(state.state)
    if result is None:
        return False, SolverResult.ZERO
    return True, result


def pick_random_bit_from_mask(mask: int, rand_step: int) -> int:
    """
    Find the position of the rand_step-th set bit (0-based) of a mask.

    Args:
        mask: Bitmask to scan, lowest bit first
        rand_step: Number of set bits to skip

    Returns:
        Bit position, or -1 if the mask has rand_step or fewer set bits
    """
    bit_idx = 0
    test_mask = 1
    while test_mask <= mask:
        if test_mask & mask:
            rand_step -= 1
            if rand_step < 0:
                return bit_idx

        bit_idx += 1
        test_mask <<= 1

    return -1


class LeafEvaluator(ABC):
    """
    Decides where the exhaustive search stops and estimates the value there.
    """

    def initialize(self, solver: TriadGameSolver, session_seed: int) -> None:
        """Set up random streams and workers for a new session."""

    def is_initialized(self) -> bool:
        return True

    def close(self) -> None:
        """Release worker resources."""

    @abstractmethod
    def should_evaluate(self, state: SimulationState, depth: int) -> bool:
        """
        Check if the state should be estimated instead of expanded.

        Args:
            state: Non-terminal game state
            depth: Search depth of the state, 0 = root

        Returns:
            True to call evaluate instead of recursing
        """

    def evaluate(self, solver: TriadGameSolver, state: SimulationState) -> SolverResult:
        """Estimate the result of a non-terminal state."""
        return is_finished(state)[1]


class ExhaustiveLeaf(LeafEvaluator):
    """Never cuts the search: every branch is played to the end."""

    def should_evaluate(self, state, depth):
        return False


@dataclass
class SearchSession:
    """
    Per-agent search state, recreated by every initialize call.

    Only the root level of a search updates progress.
    """
    session_seed: int
    show_details: bool = False
    progress: float = 0.0
    stats: Dict[str, int] = field(default_factory=lambda: {"nodes": 0, "leaf_evaluations": 0})
    _failsafe_rng: Optional[random.Random] = None

    @property
    def failsafe_rng(self) -> random.Random:
        if self._failsafe_rng is None:
            self._failsafe_rng = random.Random(self.session_seed)
        return self._failsafe_rng

    def reset_stats(self) -> None:
        for key in self.stats:
            self.stats[key] = 0


def search_action_space(
    solver: TriadGameSolver,
    state: SimulationState,
    depth: int,
    leaf: LeafEvaluator,
    session: SearchSession
) -> AgentMove:
    """
    Explore every action from a non-terminal state.

    The caller checks for a finished game before calling this function.
    Actions are visited by increasing card index, then increasing cell index,
    and the first of equally good actions is kept.

    Args:
        solver: Solver of the game
        state: Non-terminal game state, not modified
        depth: Search depth, 0 = root
        leaf: Evaluator that can replace the expansion of this state
        session: Search session of the agent

    Returns:
        AgentMove with the best action (root level) and the value of the state
    """
    session.stats["nodes"] += 1
    if leaf.should_evaluate(state, depth):
        session.stats["leaf_evaluations"] += 1
        return AgentMove(-1, -1, leaf.evaluate(solver, state))

    best_card_idx = -1
    best_board_pos = -1
    best_result = SolverResult.ZERO
    total_result = SolverResult.ZERO

    is_root_level = depth == 0
    if is_root_level:
        session.progress = 0.0

    board_mask, num_board, card_mask, num_cards = solver.find_available_actions(state)
    if num_cards > 0 and num_board > 0:
        turn_owner = state.acting_owner
        card_progress_counter = 0
        has_valid_placements = False

        for card_idx in range(MAX_AVAILABLE_CARDS):
            if not card_mask & (1 << card_idx):
                continue

            if is_root_level:
                session.progress = card_progress_counter / num_cards
                card_progress_counter += 1

            for board_pos in range(BOARD_SIZE_SQ):
                if not board_mask & (1 << board_pos):
                    continue

                state_copy = state.clone()
                is_placed = solver.simulation.place_card(
                    state_copy, card_idx, state_copy.acting_deck, turn_owner, board_pos)
                if not is_placed:
                    continue

                # check if finished before going deeper
                finished, branch_result = is_finished(state_copy)
                if not finished:
                    state_copy.forced_card_idx = -1
                    branch_result = search_action_space(solver, state_copy, depth + 1, leaf, session).result

                if is_root_level and session.show_details:
                    print(f"  card {card_idx} at {board_pos} => {branch_result}")

                if not has_valid_placements or branch_result.is_better_than(best_result):
                    best_result = branch_result
                    best_card_idx = card_idx
                    best_board_pos = board_pos

                total_result = total_result + branch_result
                has_valid_placements = True

        if not has_valid_placements:
            # failsafe in case the rules reject every enumerated action
            rng = session.failsafe_rng
            best_card_idx = pick_random_bit_from_mask(card_mask, rng.randrange(num_cards))
            best_board_pos = pick_random_bit_from_mask(board_mask, rng.randrange(num_board))

    is_owner_turn = (depth % 2) == 0
    return AgentMove(best_card_idx, best_board_pos, best_result if is_owner_turn else total_result)
