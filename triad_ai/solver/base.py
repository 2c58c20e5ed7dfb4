"""
Agent interface for Triple Triad.

Every move selection strategy implements TriadGameAgent. The match runner and
the rule simulation only talk to agents through this interface.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional, TYPE_CHECKING

from triad_ai.solver.config import DebugFlags
from triad_ai.solver.result import SolverResult

if TYPE_CHECKING:
    from triad_ai.core.game import SimulationState, TriadGameSolver


class AgentMove(NamedTuple):
    """
    Move selected by an agent.

    A negative card_idx or board_pos means no move was produced.
    """
    card_idx: int = -1
    board_pos: int = -1
    result: SolverResult = SolverResult.ZERO

    @property
    def is_valid(self) -> bool:
        return self.card_idx >= 0 and self.board_pos >= 0


NO_MOVE = AgentMove()


class TriadGameAgent(ABC):
    """
    Base class for all Triple Triad agents.

    Agents are created once per match side, initialized with a solver and a
    session seed, and asked for a move once per turn. Agents always play as
    Blue; the caller mirrors the state for the Red side.
    """

    name: str = "??"

    def __init__(self, name: Optional[str] = None, debug_flags: DebugFlags = DebugFlags.NONE):
        """
        Initialize the agent.

        Args:
            name: Name of the agent, defaults to the strategy name
            debug_flags: Diagnostics to print
        """
        if name is not None:
            self.name = name
        self.debug_flags = debug_flags

    def initialize(self, solver: 'TriadGameSolver', session_seed: int) -> None:
        """
        Set up random streams and workers, replacing any previous session.

        Args:
            solver: Solver of the game the agent will play
            session_seed: Seed of all random streams used by the agent
        """

    def is_initialized(self) -> bool:
        return True

    def get_progress(self) -> float:
        """Get the progress of the current move search, in [0, 1]."""
        return 0.0

    def on_simulation_start(self) -> None:
        """Called before the agent plays a full game through run_simulation."""

    def close(self) -> None:
        """Release worker resources. The agent can be initialized again afterwards."""

    @abstractmethod
    def find_next_move(self, solver: 'TriadGameSolver', state: 'SimulationState') -> AgentMove:
        """
        Select the next move for the acting player.

        Args:
            solver: Solver of the game
            state: Current game state, not modified

        Returns:
            AgentMove, with negative indices when no move can be made
        """

    def _print_search_info(self, move: AgentMove, stats: Dict[str, Any]) -> None:
        """
        Print information about the search.

        Args:
            move: Selected move
            stats: Search statistics
        """
        print(f"\n{self.name} selected: card {move.card_idx} at {move.board_pos} => {move.result}")
        if "time_elapsed" in stats:
            print(f"Time: {stats['time_elapsed']:.3f}s")
        if stats.get("leaf_evaluations"):
            print(f"Leaf evaluations: {stats['leaf_evaluations']} ({stats.get('rollouts', 0)} rollouts)")

    def __str__(self) -> str:
        return self.name
