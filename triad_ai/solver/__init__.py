"""
Move search for Triple Triad.

This package provides the agents that pick the next move. The search works by:

1. Exploring every (card, cell) action of the searching player and every
   reply of the opponent, recursively.
2. Keeping the best branch on the searching player's turns and averaging over
   the opponent's replies.
3. Replacing the recursion with Monte Carlo rollouts (random-vs-random
   playouts run in parallel) while the game is too far from its end for
   exhaustive search to be cheap.
4. Optionally blending a static state score into early rollout estimates.

The agents can be configured with different rollout counts, worker pool sizes
and heuristic weights.
"""

from triad_ai.solver.result import SolverResult
from triad_ai.solver.base import TriadGameAgent, AgentMove, NO_MOVE
from triad_ai.solver.random_agent import RandomAgent
from triad_ai.solver.search import (
    is_finished,
    pick_random_bit_from_mask,
    search_action_space,
    LeafEvaluator,
    ExhaustiveLeaf,
    SearchSession
)
from triad_ai.solver.rollout import RolloutEvaluator
from triad_ai.solver.thresholds import ExplorationThresholds, count_states, count_states_forced
from triad_ai.solver.scoring import StateScorer
from triad_ai.solver.agent import GraphExplorerAgent, TriadAgentFactory
from triad_ai.solver.config import SolverConfig, DebugFlags

__all__ = [
    'SolverResult',
    'TriadGameAgent',
    'AgentMove',
    'NO_MOVE',
    'RandomAgent',
    'GraphExplorerAgent',
    'TriadAgentFactory',
    'is_finished',
    'pick_random_bit_from_mask',
    'search_action_space',
    'LeafEvaluator',
    'ExhaustiveLeaf',
    'SearchSession',
    'RolloutEvaluator',
    'ExplorationThresholds',
    'count_states',
    'count_states_forced',
    'StateScorer',
    'SolverConfig',
    'DebugFlags'
]
