"""
Match runner for Triad AI agents.

Plays games between two agents and collects win/draw/loss statistics from
Blue's point of view. Agents always evaluate themselves as Blue, so the Red
agent is given a mirrored copy of the game state.

Example usage:
    # Compare the scored rollout agent with the random baseline
    triad-match --blue carlo_scored --red random --games 20
"""
import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from triad_ai.core.cards import DeckInstance, create_random_deck
from triad_ai.core.constants import GameStateTag
from triad_ai.core.game import SimulationState, TriadGameSolver
from triad_ai.core.modifiers import TriadGameModifier, create_modifier
from triad_ai.solver.agent import TriadAgentFactory
from triad_ai.solver.base import TriadGameAgent
from triad_ai.solver.config import SolverConfig


@dataclass
class MatchSummary:
    """Results of a series of games, from Blue's point of view."""
    wins: int = 0
    draws: int = 0
    losses: int = 0
    unfinished: int = 0
    results: List[GameStateTag] = field(default_factory=list)

    def record(self, state: GameStateTag) -> None:
        self.results.append(state)
        if state == GameStateTag.BLUE_WINS:
            self.wins += 1
        elif state == GameStateTag.BLUE_DRAW:
            self.draws += 1
        elif state == GameStateTag.BLUE_LOST:
            self.losses += 1
        else:
            self.unfinished += 1

    @property
    def num_games(self) -> int:
        return len(self.results)

    @property
    def win_rate(self) -> float:
        if not self.results:
            return 0.0
        return float(np.mean([tag == GameStateTag.BLUE_WINS for tag in self.results]))

    @property
    def draw_rate(self) -> float:
        if not self.results:
            return 0.0
        return float(np.mean([tag == GameStateTag.BLUE_DRAW for tag in self.results]))

    def __str__(self) -> str:
        return (f"games:{self.num_games} wins:{self.wins} draws:{self.draws} "
                f"losses:{self.losses} (win rate {self.win_rate:.1%}, draw rate {self.draw_rate:.1%})")


def play_match(
    solver: TriadGameSolver,
    agent_blue: TriadGameAgent,
    agent_red: TriadGameAgent,
    deck_blue: DeckInstance,
    deck_red: DeckInstance,
    blue_first: bool = True
) -> SimulationState:
    """
    Play a single game between two initialized agents.

    Args:
        solver: Solver of the game
        agent_blue: Agent playing Blue
        agent_red: Agent playing Red
        deck_blue: Blue player's hand
        deck_red: Red player's hand
        blue_first: Whether Blue makes the first move

    Returns:
        Final game state; still in progress if an agent failed to produce a move
    """
    state = SimulationState.create(deck_blue, deck_red, blue_first=blue_first)

    while state.state.is_in_progress:
        if state.state == GameStateTag.IN_PROGRESS_BLUE:
            move = agent_blue.find_next_move(solver, state)
        else:
            move = agent_red.find_next_move(solver, state.mirrored())

        if not move.is_valid:
            break

        is_placed = solver.simulation.place_card(
            state, move.card_idx, state.acting_deck, state.acting_owner, move.board_pos)
        if not is_placed:
            break

    return state


def run_matches(
    blue_name: str,
    red_name: str,
    num_games: int = 10,
    seed: int = 0,
    config: Optional[SolverConfig] = None,
    modifiers: Optional[Sequence[TriadGameModifier]] = None,
    show_progress: bool = True
) -> MatchSummary:
    """
    Play a series of games with random hands.

    Both players get new hands every game and the first move alternates.

    Args:
        blue_name: Agent name for Blue (see TriadAgentFactory.AGENT_NAMES)
        red_name: Agent name for Red
        num_games: Number of games
        seed: Seed of the hands and of the agents' sessions
        config: Solver configuration parameters
        modifiers: Rule modifiers active in every game
        show_progress: Whether to show a progress bar

    Returns:
        MatchSummary
    """
    rng = np.random.default_rng(seed)
    solver = TriadGameSolver(modifiers=modifiers)
    agent_blue = TriadAgentFactory.create(blue_name, config)
    agent_red = TriadAgentFactory.create(red_name, config)

    summary = MatchSummary()
    try:
        for game_idx in tqdm(range(num_games), desc=f"{agent_blue} vs {agent_red}", disable=not show_progress):
            agent_blue.initialize(solver, seed + game_idx * 2)
            agent_red.initialize(solver, seed + game_idx * 2 + 1)

            deck_blue = create_random_deck(rng)
            deck_red = create_random_deck(rng, first_id=len(deck_blue.cards))
            state = play_match(solver, agent_blue, agent_red, deck_blue, deck_red, blue_first=game_idx % 2 == 0)
            summary.record(state.state)
    finally:
        agent_blue.close()
        agent_red.close()

    return summary


def parse_args(args: Optional[Sequence[str]] = None):
    """Parse command-line arguments for the match configuration."""
    parser = argparse.ArgumentParser(description="Play Triple Triad games between AI agents")

    parser.add_argument("--blue", type=str, default="carlo_scored",
                        choices=TriadAgentFactory.AGENT_NAMES, help="Agent playing Blue")
    parser.add_argument("--red", type=str, default="random",
                        choices=TriadAgentFactory.AGENT_NAMES, help="Agent playing Red")
    parser.add_argument("--games", type=int, default=10, help="Number of games")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--rollouts", type=int, default=SolverConfig.rollout_count,
                        help="Random playouts per estimated state")
    parser.add_argument("--workers", type=int, default=SolverConfig.num_workers,
                        help="Worker processes running playouts")
    parser.add_argument("--modifiers", type=str, nargs="*", default=[],
                        help="Rule modifiers (reverse, fallen_ace)")
    parser.add_argument("--equal-distribution", action="store_true",
                        help="Use uniform random playouts instead of the scan policy")
    parser.add_argument("--verbose", action="store_true", help="Print the result of every search")

    return parser.parse_args(args)


def main(args: Optional[Sequence[str]] = None) -> None:
    """Run a match with command-line arguments."""
    args = parse_args(args)

    modifiers = []
    for mod_name in args.modifiers:
        modifier = create_modifier(mod_name)
        if modifier is None:
            raise SystemExit(f"Unknown modifier: {mod_name}")
        modifiers.append(modifier)

    config = SolverConfig(
        rollout_count=args.rollouts,
        num_workers=args.workers,
        use_equal_distribution=args.equal_distribution,
        verbose=args.verbose
    )

    summary = run_matches(
        args.blue,
        args.red,
        num_games=args.games,
        seed=args.seed,
        config=config,
        modifiers=modifiers
    )

    print(f"\n{args.blue} (Blue) vs {args.red} (Red)")
    print(f"  {summary}")


if __name__ == "__main__":
    main()
