"""
Monte Carlo rollout estimates for Triple Triad.

Instead of expanding a state, the rollout evaluator plays a fixed number of
random-vs-random games from it and uses the fraction of won and drawn games
as the value of the state.

Every playout has its own random agent, seeded with the session seed plus the
playout index, so the estimate for a fixed seed doesn't depend on how many
worker processes run the playouts. Worker processes receive the random states
of their playouts and send the advanced states back, keeping every stream
continuous across estimates.
"""
from __future__ import annotations
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence, Tuple

from triad_ai.core.constants import GameStateTag
from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.solver.config import SolverConfig
from triad_ai.solver.random_agent import RandomAgent
from triad_ai.solver.result import SolverResult
from triad_ai.solver.scoring import StateScorer
from triad_ai.solver.search import LeafEvaluator
from triad_ai.solver.thresholds import ExplorationThresholds


def play_rollouts(solver: TriadGameSolver, state: SimulationState, agents: Sequence[RandomAgent]) -> Tuple[int, int]:
    """
    Play one game per agent from a state, the agent making both sides' moves.

    Args:
        solver: Solver of the game
        state: Non-terminal game state, not modified
        agents: Initialized random agents

    Returns:
        Tuple of (won games, drawn games)
    """
    num_wins = 0
    num_draws = 0
    for agent in agents:
        state_copy = state.clone()
        solver.run_simulation(state_copy, agent, agent)

        if state_copy.state == GameStateTag.BLUE_WINS:
            num_wins += 1
        elif state_copy.state == GameStateTag.BLUE_DRAW:
            num_draws += 1

    return num_wins, num_draws


def _play_rollout_chunk(
    solver: TriadGameSolver,
    state: SimulationState,
    use_equal_distribution: bool,
    rng_states: Sequence[tuple]
) -> Tuple[int, int, List[tuple]]:
    # runs in a worker process
    agents = []
    for rng_state in rng_states:
        agent = RandomAgent(use_equal_distribution=use_equal_distribution, solver=solver, session_seed=0)
        agent.rand_gen.setstate(rng_state)
        agents.append(agent)

    num_wins, num_draws = play_rollouts(solver, state, agents)
    return num_wins, num_draws, [agent.rand_gen.getstate() for agent in agents]


class RolloutEvaluator(LeafEvaluator):
    """
    Leaf evaluator running parallel random playouts.

    Without adaptive thresholds only the root is expanded and every child is
    estimated. With them, states close enough to the end of the game are
    still explored exhaustively. An optional StateScorer refines the estimate.
    """

    def __init__(
        self,
        config: Optional[SolverConfig] = None,
        adaptive: bool = False,
        scorer: Optional[StateScorer] = None
    ):
        """
        Initialize the rollout evaluator.

        Args:
            config: Solver configuration parameters
            adaptive: Whether to switch to exhaustive search near the end of the game
            scorer: Optional state scorer blended into the estimate
        """
        self.config = config or SolverConfig()
        self.adaptive = adaptive
        self.scorer = scorer

        self.thresholds: Optional[ExplorationThresholds] = None
        self.worker_agents: Optional[List[RandomAgent]] = None
        self.num_rollouts = 0
        self._executor: Optional[ProcessPoolExecutor] = None
        self._num_processes = 1

    def initialize(self, solver: TriadGameSolver, session_seed: int) -> None:
        self.close()

        # one stream per playout, created once per session
        self.worker_agents = [
            RandomAgent(
                use_equal_distribution=self.config.use_equal_distribution,
                solver=solver,
                session_seed=session_seed + idx
            )
            for idx in range(self.config.rollout_count)
        ]

        if self.adaptive:
            self.thresholds = ExplorationThresholds.compute(self.config.max_states_to_explore)

        self._num_processes = min(self.config.num_workers, self.config.rollout_count)
        if self._num_processes > 1:
            self._executor = ProcessPoolExecutor(max_workers=self._num_processes)

    def is_initialized(self) -> bool:
        return self.worker_agents is not None

    def close(self) -> None:
        """Shut down the worker processes. Later estimates run inline."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def should_evaluate(self, state: SimulationState, depth: int) -> bool:
        if self.thresholds is not None:
            return self.thresholds.should_run_rollout(state, depth)
        return depth > 0

    def evaluate(self, solver: TriadGameSolver, state: SimulationState) -> SolverResult:
        result = self.find_winning_probability(solver, state)
        if self.scorer is None:
            return result

        state_score = self.scorer.calculate_state_score(solver.simulation, state)
        return self.scorer.blend(result, state_score, state.deck_blue.num_placed)

    def find_winning_probability(self, solver: TriadGameSolver, state: SimulationState) -> SolverResult:
        """
        Play every worker's game from a state.

        Args:
            solver: Solver of the game
            state: Non-terminal game state, not modified

        Returns:
            Normalized result: fractions of won and drawn games, games = 1
        """
        num_games = len(self.worker_agents)

        if self._executor is None:
            num_wins, num_draws = play_rollouts(solver, state, self.worker_agents)
        else:
            # contiguous ranges, each worker index is played by exactly one process
            chunk_size = -(-num_games // self._num_processes)
            chunks = [self.worker_agents[start:start + chunk_size] for start in range(0, num_games, chunk_size)]
            futures = [
                self._executor.submit(
                    _play_rollout_chunk,
                    solver,
                    state,
                    self.config.use_equal_distribution,
                    [agent.rand_gen.getstate() for agent in chunk]
                )
                for chunk in chunks
            ]

            num_wins = 0
            num_draws = 0
            for chunk, future in zip(chunks, futures):
                chunk_wins, chunk_draws, rng_states = future.result()
                num_wins += chunk_wins
                num_draws += chunk_draws
                for agent, rng_state in zip(chunk, rng_states):
                    agent.rand_gen.setstate(rng_state)

        self.num_rollouts += num_games
        return SolverResult(num_wins / num_games, num_draws / num_games, 1)
