"""
Triad AI - Move search agents for the card game Triple Triad.

This package provides a compact implementation of the Triple Triad placement
and capture rules, along with AI agents that pick moves using exhaustive
search, Monte Carlo rollouts and a static state heuristic.
"""

__version__ = "0.1.0"
__author__ = "Triad AI Team"

# Make key components available at package level
from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.core.cards import TriadCard, DeckInstance
from triad_ai.solver.agent import TriadAgentFactory

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))

# Default configuration
DEFAULT_CONFIG = {
    "board_size": 3,
    "cards_per_player": 5,
    "rollout_count": 2000,
    "num_workers": 8,
    "max_states_to_explore": 10_000
}
