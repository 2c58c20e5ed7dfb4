"""
Search agents for Triple Triad.

This module provides GraphExplorerAgent, the agent that explores the action
graph of the game, and TriadAgentFactory, which assembles the named agent
variants from a leaf evaluator:

- GraphExplorer: exhaustive search to the end of the game
- DerpyCarlo: expands the root, estimates every child with rollouts
- CarloTheExplorer: rollouts early in the game, exhaustive search near the end
- CarloScored: CarloTheExplorer with the state score blended into rollouts
"""
from typing import Any, Dict, List, Optional, Tuple
import time

from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.solver.base import TriadGameAgent, AgentMove
from triad_ai.solver.config import SolverConfig, DebugFlags
from triad_ai.solver.random_agent import RandomAgent
from triad_ai.solver.rollout import RolloutEvaluator
from triad_ai.solver.scoring import StateScorer
from triad_ai.solver.search import (
    LeafEvaluator, ExhaustiveLeaf, SearchSession, is_finished, search_action_space
)


class GraphExplorerAgent(TriadGameAgent):
    """
    Agent recursively exploring the action graph.

    The depth at which exploration stops, and how the value of a state is
    estimated there, is decided by the leaf evaluator.
    """

    name = "GraphExplorer"

    def __init__(
        self,
        leaf: Optional[LeafEvaluator] = None,
        config: Optional[SolverConfig] = None,
        name: Optional[str] = None
    ):
        """
        Initialize a graph explorer agent.

        Args:
            leaf: Leaf evaluator, defaults to exhaustive search
            config: Solver configuration parameters
            name: Name of the agent
        """
        self.config = config or SolverConfig()
        super().__init__(name=name, debug_flags=self.config.debug_flags)
        self.leaf = leaf or ExhaustiveLeaf()
        self.session: Optional[SearchSession] = None

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # History of all moves and their statistics
        self.action_history: List[Tuple[AgentMove, Dict[str, Any]]] = []

    def initialize(self, solver: TriadGameSolver, session_seed: int) -> None:
        self.session = SearchSession(
            session_seed=session_seed,
            show_details=DebugFlags.SHOW_MOVE_DETAILS in self.debug_flags
        )
        self.leaf.initialize(solver, session_seed)

        if DebugFlags.AGENT_INITIALIZE in self.debug_flags:
            thresholds = getattr(self.leaf, "thresholds", None)
            print(f"{self.name} initialized, seed:{session_seed}"
                  + (f", explore from placed:{thresholds.min_placed_to_explore}"
                     f" (forced:{thresholds.min_placed_to_explore_with_forced})" if thresholds else ""))

    def is_initialized(self) -> bool:
        return self.session is not None and self.leaf.is_initialized()

    def get_progress(self) -> float:
        return self.session.progress if self.session is not None else 0.0

    def close(self) -> None:
        self.leaf.close()

    def find_next_move(self, solver: TriadGameSolver, state: SimulationState) -> AgentMove:
        """
        Select the best move for Blue.

        Args:
            solver: Solver of the game
            state: Current game state, not modified

        Returns:
            AgentMove with the value of the selected move
        """
        finished, result = is_finished(state)
        if finished or not self.is_initialized():
            return AgentMove(-1, -1, result)

        if DebugFlags.SHOW_MOVE_START in self.debug_flags:
            print(f"\n{self.name} searching, placed:{state.num_cards_placed} forced:{state.forced_card_idx}")

        start_time = time.time()
        num_rollouts_before = getattr(self.leaf, "num_rollouts", 0)
        self.session.reset_stats()

        move = search_action_space(solver, state, 0, self.leaf, self.session)

        stats: Dict[str, Any] = dict(self.session.stats)
        stats["rollouts"] = getattr(self.leaf, "num_rollouts", 0) - num_rollouts_before
        stats["time_elapsed"] = time.time() - start_time
        self.last_stats = stats
        self.action_history.append((move, stats))

        if DebugFlags.SHOW_MOVE_RESULT in self.debug_flags:
            self._print_search_info(move, stats)

        return move

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent search.

        Returns:
            Dictionary of search statistics
        """
        return self.last_stats

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_stats = {}
        self.action_history = []


class TriadAgentFactory:
    """
    Factory for creating the named agent variants.
    """

    AGENT_NAMES = ("random", "graph_explorer", "derpy_carlo", "carlo_the_explorer", "carlo_scored")

    @staticmethod
    def create_random(config: Optional[SolverConfig] = None) -> RandomAgent:
        """
        Create a random agent.

        Returns:
            RandomAgent
        """
        config = config or SolverConfig()
        return RandomAgent(use_equal_distribution=config.use_equal_distribution)

    @staticmethod
    def create_graph_explorer(config: Optional[SolverConfig] = None) -> GraphExplorerAgent:
        """
        Create an agent searching every branch to the end of the game.

        Only practical late in the game.

        Returns:
            GraphExplorerAgent
        """
        return GraphExplorerAgent(ExhaustiveLeaf(), config, name="GraphExplorer")

    @staticmethod
    def create_derpy_carlo(config: Optional[SolverConfig] = None) -> GraphExplorerAgent:
        """
        Create a single level rollout agent.

        Returns:
            GraphExplorerAgent
        """
        return GraphExplorerAgent(RolloutEvaluator(config), config, name="DerpyCarlo")

    @staticmethod
    def create_carlo_the_explorer(config: Optional[SolverConfig] = None) -> GraphExplorerAgent:
        """
        Create an agent switching from rollouts to exhaustive search.

        Returns:
            GraphExplorerAgent
        """
        return GraphExplorerAgent(RolloutEvaluator(config, adaptive=True), config, name="CarloTheExplorer")

    @staticmethod
    def create_carlo_scored(config: Optional[SolverConfig] = None) -> GraphExplorerAgent:
        """
        Create an adaptive rollout agent refined with the state score.

        Returns:
            GraphExplorerAgent
        """
        leaf = RolloutEvaluator(config, adaptive=True, scorer=StateScorer(config))
        return GraphExplorerAgent(leaf, config, name="CarloScored")

    @classmethod
    def create(cls, agent_name: str, config: Optional[SolverConfig] = None) -> TriadGameAgent:
        """
        Create an agent by name.

        Args:
            agent_name: One of AGENT_NAMES
            config: Solver configuration parameters

        Returns:
            TriadGameAgent
        """
        key = agent_name.lower().replace("-", "_")
        if key not in cls.AGENT_NAMES:
            raise ValueError(f"Unknown agent '{agent_name}', expected one of {', '.join(cls.AGENT_NAMES)}")
        return getattr(cls, f"create_{key}")(config)
