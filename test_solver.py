#!/usr/bin/env python
"""
Test script for the Triad AI move search.

This script tests the core functionality of the solver:
1. Search results and bitmask helpers
2. Random agent selection modes
3. Exhaustive action graph search
4. Rollout estimates and the adaptive exploration thresholds
5. State scoring
6. Agent creation and end-to-end move selection

This is a lightweight test to verify behavior, not playing strength.
"""
import random
import unittest
from collections import Counter
from concurrent.futures import ProcessPoolExecutor

import numpy as np

import triad_ai
from triad_ai.core.cards import TriadCard, DeckInstance, create_deck, create_random_deck
from triad_ai.core.constants import CardOwner, GameStateTag, BOARD_SIZE, MAX_AVAILABLE_CARDS
from triad_ai.core.game import SimulationState, PlacedCard, TriadGameSimulation, TriadGameSolver
from triad_ai.core.modifiers import ReverseModifier, FallenAceModifier
from triad_ai.match import play_match, run_matches
from triad_ai.solver import (
    SolverResult, AgentMove, NO_MOVE, RandomAgent, TriadAgentFactory,
    is_finished, pick_random_bit_from_mask, search_action_space, LeafEvaluator, SearchSession,
    RolloutEvaluator, ExplorationThresholds, count_states, count_states_forced,
    StateScorer, SolverConfig, DebugFlags
)
from triad_ai.solver.rollout import play_rollouts, _play_rollout_chunk


def uniform_deck(value, available_card_mask=0b11111, num_placed=0, first_id=0):
    deck = create_deck([(value, value, value, value)] * 5, first_id)
    return DeckInstance(deck.cards, available_card_mask, num_placed)


def endgame_state(blue_card_mask):
    """
    Board with only the center empty and Blue to move.

    Blue owns two corners, Red owns the rest. Blue's card 0 (all 1s) can't
    capture anything and loses; card 1 (all As) captures all four neighbors
    and wins.
    """
    filler = TriadCard(card_id=20, sides=(5, 5, 5, 5))
    board = [PlacedCard(filler, CardOwner.RED) for _ in range(9)]
    board[0] = PlacedCard(filler, CardOwner.BLUE)
    board[2] = PlacedCard(filler, CardOwner.BLUE)
    board[4] = None

    deck_blue = create_deck([(1, 1, 1, 1), (10, 10, 10, 10), (5, 5, 5, 5), (5, 5, 5, 5), (5, 5, 5, 5)])
    deck_blue = DeckInstance(deck_blue.cards, blue_card_mask, 3)
    deck_red = uniform_deck(5, available_card_mask=0, num_placed=5, first_id=5)
    return SimulationState(
        deck_blue=deck_blue,
        deck_red=deck_red,
        board=board,
        state=GameStateTag.IN_PROGRESS_BLUE,
        num_cards_placed=8,
    )


def opening_state(seed=21):
    rng = np.random.default_rng(seed)
    return SimulationState.create(create_random_deck(rng), create_random_deck(rng, first_id=5))


class ConstantLeaf(LeafEvaluator):
    """Estimates every state below the root with the same result."""

    def should_evaluate(self, state, depth):
        return depth > 0

    def evaluate(self, solver, state):
        return SolverResult(0.5, 0.25, 1)


class BlueCornerLeaf(LeafEvaluator):
    """Below depth 1, a state is won if Blue owns the top left corner."""

    def should_evaluate(self, state, depth):
        return depth >= 2

    def evaluate(self, solver, state):
        corner = state.board[0]
        return SolverResult(1 if corner is not None and corner.owner == CardOwner.BLUE else 0, 0, 1)


class RejectingSimulation(TriadGameSimulation):
    """Rules that reject every placement."""

    def place_card(self, state, card_idx, deck, owner, board_pos):
        return False


class TestSolverResult(unittest.TestCase):
    """Test case for search results."""

    def test_is_better_than(self):
        """Results are ranked by win chance only."""
        self.assertTrue(SolverResult(1, 0, 2).is_better_than(SolverResult(1, 0, 3)))
        self.assertFalse(SolverResult(1, 0, 3).is_better_than(SolverResult(1, 0, 2)))
        self.assertTrue(SolverResult(0.1, 0, 1).is_better_than(SolverResult.ZERO))

    def test_equal_ratio_is_not_better(self):
        self.assertFalse(SolverResult(1, 0, 2).is_better_than(SolverResult(2, 0, 4)))
        self.assertFalse(SolverResult(2, 5, 4).is_better_than(SolverResult(1, 0, 2)))
        self.assertFalse(SolverResult.ZERO.is_better_than(SolverResult.ZERO))

    def test_sum_and_normalize(self):
        total = SolverResult(1, 0, 1) + SolverResult(0, 1, 1) + SolverResult(0, 0, 1)
        self.assertEqual(total, SolverResult(1, 1, 3))
        self.assertAlmostEqual(total.win_chance, 1 / 3)
        normalized = total.normalized()
        self.assertAlmostEqual(normalized.draws, 1 / 3)
        self.assertEqual(normalized.games, 1)

    def test_negative_values_rejected(self):
        with self.assertRaises(ValueError):
            SolverResult(-1, 0, 1)


class TestBitmask(unittest.TestCase):
    """Test case for pick_random_bit_from_mask."""

    def test_known_mask(self):
        self.assertEqual(pick_random_bit_from_mask(0b10110, 0), 1)
        self.assertEqual(pick_random_bit_from_mask(0b10110, 1), 2)
        self.assertEqual(pick_random_bit_from_mask(0b10110, 2), 4)
        self.assertEqual(pick_random_bit_from_mask(0b10110, 3), -1)
        self.assertEqual(pick_random_bit_from_mask(0, 0), -1)

    def test_every_board_mask(self):
        """Every step below the number of set bits returns a set bit, in order."""
        for mask in range(1 << 9):
            bits = [idx for idx in range(9) if mask & (1 << idx)]
            for step, bit_idx in enumerate(bits):
                self.assertEqual(pick_random_bit_from_mask(mask, step), bit_idx)
            self.assertEqual(pick_random_bit_from_mask(mask, len(bits)), -1)
            self.assertEqual(pick_random_bit_from_mask(mask, len(bits) + 3), -1)


class TestRandomAgent(unittest.TestCase):
    """Test case for the random agent."""

    def setUp(self):
        self.solver = TriadGameSolver()
        self.state = opening_state()

    def test_uninitialized(self):
        agent = RandomAgent()
        self.assertFalse(agent.is_initialized())
        self.assertEqual(agent.find_next_move(self.solver, self.state), NO_MOVE)

    def test_legal_moves(self):
        """Both modes only pick empty cells and available cards."""
        for use_equal_distribution in (False, True):
            agent = RandomAgent(use_equal_distribution, solver=self.solver, session_seed=3)
            state = self.state.clone()
            while state.state.is_in_progress:
                move = agent.find_next_move(self.solver, state)
                self.assertTrue(move.is_valid)
                self.assertIsNone(state.board[move.board_pos])
                self.assertTrue(state.acting_deck.is_available(move.card_idx))
                self.assertTrue(self.solver.simulation.place_card(
                    state, move.card_idx, state.acting_deck, state.acting_owner, move.board_pos))

    def test_reinitialize_restarts_stream(self):
        agent = RandomAgent(solver=self.solver, session_seed=7)
        first = [agent.find_next_move(self.solver, self.state) for _ in range(5)]
        agent.initialize(self.solver, 7)
        second = [agent.find_next_move(self.solver, self.state) for _ in range(5)]
        self.assertEqual(first, second)

    def test_scan_mode_is_biased(self):
        """Scan mode prefers the first empty cell after a run of occupied ones."""
        state = self.state.clone()
        filler = TriadCard(card_id=30, sides=(5, 5, 5, 5))
        for board_pos in range(2, 9):
            state.board[board_pos] = PlacedCard(filler, CardOwner.RED)
        state.num_cards_placed = 7

        scan_agent = RandomAgent(False, solver=self.solver, session_seed=1)
        equal_agent = RandomAgent(True, solver=self.solver, session_seed=1)
        scan_counts = Counter(scan_agent.find_next_move(self.solver, state).board_pos for _ in range(900))
        equal_counts = Counter(equal_agent.find_next_move(self.solver, state).board_pos for _ in range(900))

        self.assertEqual(set(scan_counts), {0, 1})
        self.assertGreater(scan_counts[0], 3 * scan_counts[1])
        self.assertEqual(set(equal_counts), {0, 1})
        self.assertTrue(350 < equal_counts[0] < 550)

    def test_equal_distribution_respects_forced_card(self):
        state = self.state.clone()
        state.forced_card_idx = 2
        agent = RandomAgent(True, solver=self.solver, session_seed=5)
        for _ in range(20):
            self.assertEqual(agent.find_next_move(self.solver, state).card_idx, 2)

    def test_empty_deck(self):
        state = self.state.clone()
        state.deck_blue.available_card_mask = 0
        for use_equal_distribution in (False, True):
            agent = RandomAgent(use_equal_distribution, solver=self.solver, session_seed=0)
            move = agent.find_next_move(self.solver, state)
            self.assertEqual(move.card_idx, -1)
            self.assertFalse(move.is_valid)


class TestGraphExplorer(unittest.TestCase):
    """Test case for the exhaustive action graph search."""

    def setUp(self):
        self.solver = TriadGameSolver()

    def test_terminal_results(self):
        """Finished games have fixed results."""
        state = endgame_state(0b00011)
        expected = {
            GameStateTag.BLUE_WINS: SolverResult(1, 0, 1),
            GameStateTag.BLUE_DRAW: SolverResult(0, 1, 1),
            GameStateTag.BLUE_LOST: SolverResult(0, 0, 1),
        }
        for tag, result in expected.items():
            state.state = tag
            self.assertEqual(is_finished(state), (True, result))

            agent = TriadAgentFactory.create_graph_explorer()
            agent.initialize(self.solver, 0)
            move = agent.find_next_move(self.solver, state)
            self.assertEqual(move, AgentMove(-1, -1, result))
            self.assertEqual(agent.session.stats["nodes"], 0)

        state.state = GameStateTag.IN_PROGRESS_RED
        self.assertEqual(is_finished(state), (False, SolverResult.ZERO))

    def test_finds_winning_move(self):
        agent = TriadAgentFactory.create_graph_explorer()
        agent.initialize(self.solver, 0)
        state = endgame_state(0b00011)
        move = agent.find_next_move(self.solver, state)

        self.assertEqual((move.card_idx, move.board_pos), (1, 4))
        self.assertEqual(move.result, SolverResult(1, 0, 1))
        self.assertEqual(state.num_cards_placed, 8)
        self.assertIsNone(state.board[4])

    def test_single_legal_action(self):
        """One card and one cell is always the selected move."""
        state = endgame_state(0b00100)
        for seed in range(5):
            for agent in (TriadAgentFactory.create_graph_explorer(),
                          TriadAgentFactory.create_carlo_the_explorer(SolverConfig(rollout_count=4, num_workers=1))):
                agent.initialize(self.solver, seed)
                move = agent.find_next_move(self.solver, state)
                self.assertEqual((move.card_idx, move.board_pos), (2, 4))

    def test_opponent_turn_is_averaged(self):
        """Odd depths sum every reply instead of taking the worst one."""
        state = SimulationState.create(uniform_deck(1, 0b00001), uniform_deck(1, 0b00001, first_id=5))
        session = SearchSession(session_seed=0)
        move = search_action_space(self.solver, state, 0, BlueCornerLeaf(), session)

        self.assertEqual((move.card_idx, move.board_pos), (0, 0))
        self.assertEqual(move.result, SolverResult(8, 0, 8))
        self.assertEqual(session.stats["leaf_evaluations"], 9 * 8)
        self.assertEqual(session.stats["nodes"], 1 + 9 + 9 * 8)

    def test_ties_keep_first_action(self):
        state = SimulationState.create(uniform_deck(5, 0b00110), uniform_deck(5, first_id=5))
        session = SearchSession(session_seed=0)
        move = search_action_space(self.solver, state, 0, ConstantLeaf(), session)

        self.assertEqual((move.card_idx, move.board_pos), (1, 0))
        self.assertEqual(move.result, SolverResult(0.5, 0.25, 1))
        self.assertAlmostEqual(session.progress, 0.5)

    def test_failsafe_pick(self):
        """If every placement is rejected, a random legal action is picked."""
        solver = TriadGameSolver(simulation=RejectingSimulation())
        state = opening_state()
        for seed in (0, 1, 2):
            agent = TriadAgentFactory.create_graph_explorer()
            agent.initialize(solver, seed)
            move = agent.find_next_move(solver, state)

            rng = random.Random(seed)
            self.assertEqual(move.card_idx, rng.randrange(5))
            self.assertEqual(move.board_pos, rng.randrange(9))
            self.assertEqual(move.result, SolverResult.ZERO)

    def test_empty_deck(self):
        """No cards left produces no move."""
        state = opening_state()
        state.deck_blue.available_card_mask = 0
        config = SolverConfig(rollout_count=4, num_workers=1)
        for agent_name in TriadAgentFactory.AGENT_NAMES:
            agent = TriadAgentFactory.create(agent_name, config)
            agent.initialize(self.solver, 0)
            move = agent.find_next_move(self.solver, state)
            self.assertEqual(move.card_idx, -1)

    def test_uninitialized(self):
        agent = TriadAgentFactory.create_derpy_carlo(SolverConfig(rollout_count=4))
        self.assertFalse(agent.is_initialized())
        self.assertEqual(agent.get_progress(), 0.0)
        move = agent.find_next_move(self.solver, opening_state())
        self.assertFalse(move.is_valid)


class TestRollout(unittest.TestCase):
    """Test case for rollout estimates."""

    def setUp(self):
        self.solver = TriadGameSolver()
        self.state = opening_state()
        self.solver.simulation.place_card(self.state, 0, self.state.deck_blue, CardOwner.BLUE, 4)
        self.evaluators = []

    def tearDown(self):
        for evaluator in self.evaluators:
            evaluator.close()

    def create(self, num_workers=1, **kwargs):
        evaluator = RolloutEvaluator(SolverConfig(rollout_count=64, num_workers=num_workers), **kwargs)
        evaluator.initialize(self.solver, 1234)
        self.evaluators.append(evaluator)
        return evaluator

    def test_normalized_result(self):
        result = self.create().evaluate(self.solver, self.state)
        self.assertEqual(result.games, 1)
        self.assertLessEqual(result.wins + result.draws, 1.0)
        self.assertAlmostEqual(result.wins * 64, round(result.wins * 64))
        self.assertAlmostEqual(result.draws * 64, round(result.draws * 64))

    def test_reproducible_regardless_of_workers(self):
        """A fixed seed gives the same estimates with any number of worker processes."""
        single = self.create(num_workers=1)
        pooled = self.create(num_workers=4)
        repeated = self.create(num_workers=3)

        for _ in range(3):
            expected = single.evaluate(self.solver, self.state)
            self.assertEqual(pooled.evaluate(self.solver, self.state), expected)
            self.assertEqual(repeated.evaluate(self.solver, self.state), expected)

        self.assertEqual(single.num_rollouts, 3 * 64)

    def test_state_not_modified(self):
        snapshot = self.state.clone()
        self.create(num_workers=2).evaluate(self.solver, self.state)
        self.assertEqual(self.state, snapshot)

    def test_base_predicate(self):
        evaluator = self.create()
        self.assertFalse(evaluator.should_evaluate(self.state, 0))
        self.assertTrue(evaluator.should_evaluate(self.state, 1))
        self.assertTrue(evaluator.should_evaluate(endgame_state(0b11), 3))

    def test_scored_estimate(self):
        """The scored estimate blends the state score into the plain one."""
        plain = self.create().evaluate(self.solver, self.state)
        scorer = StateScorer()
        scored = self.create(scorer=scorer).evaluate(self.solver, self.state)

        score = scorer.calculate_state_score(self.solver.simulation, self.state)
        self.assertEqual(scored, scorer.blend(plain, score, 1))
        self.assertEqual(scored.draws, plain.draws)

    def test_chunk_continues_streams(self):
        """A worker chunk plays the same games as inline agents and returns their advanced streams."""
        inline_agents = [RandomAgent(solver=self.solver, session_seed=1234 + idx) for idx in range(6)]
        rng_states = [agent.rand_gen.getstate() for agent in inline_agents]

        num_wins, num_draws, new_states = _play_rollout_chunk(self.solver, self.state, False, rng_states)

        self.assertEqual((num_wins, num_draws), play_rollouts(self.solver, self.state, inline_agents))
        self.assertEqual(new_states, [agent.rand_gen.getstate() for agent in inline_agents])
        self.assertNotEqual(new_states, rng_states)

    def test_worker_processes(self):
        self.assertIsNone(self.create(num_workers=1)._executor)
        self.assertIsInstance(self.create(num_workers=4)._executor, ProcessPoolExecutor)

    def test_close_falls_back_inline(self):
        """After close, estimates run inline and continue the same streams."""
        single = self.create(num_workers=1)
        pooled = self.create(num_workers=4)

        self.assertEqual(pooled.evaluate(self.solver, self.state), single.evaluate(self.solver, self.state))
        pooled.close()
        pooled.close()
        self.assertIsNone(pooled._executor)
        self.assertEqual(pooled.evaluate(self.solver, self.state), single.evaluate(self.solver, self.state))


class TestThresholds(unittest.TestCase):
    """Test case for the adaptive exploration thresholds."""

    def test_state_counts(self):
        self.assertEqual([count_states(n) for n in range(1, 6)], [1, 4, 48, 1152, 51840])
        self.assertEqual(count_states_forced(7), 5040)
        for n in range(1, 9):
            self.assertLessEqual(count_states(n), count_states(n + 1))
            self.assertLessEqual(count_states_forced(n), count_states_forced(n + 1))

    def test_default_thresholds(self):
        thresholds = ExplorationThresholds.compute(10_000)
        self.assertEqual(thresholds.min_placed_to_explore, 5)
        self.assertEqual(thresholds.min_placed_to_explore_with_forced, 2)

    def test_threshold_is_earliest_cheap_position(self):
        """Exhaustive search starts as soon as the remaining states fit the ceiling."""
        for max_states in (1, 10, 100, 10_000, 1_000_000):
            thresholds = ExplorationThresholds.compute(max_states)
            placed = thresholds.min_placed_to_explore
            self.assertLessEqual(count_states(9 - placed), max_states)
            if placed > 0:
                self.assertGreater(count_states(9 - placed + 1), max_states)

    def test_rollout_predicate(self):
        thresholds = ExplorationThresholds.compute(10_000)
        state = opening_state()
        self.assertFalse(thresholds.should_run_rollout(state, 0))

        state.num_cards_placed = 4
        self.assertTrue(thresholds.should_run_rollout(state, 1))
        state.num_cards_placed = 5
        self.assertFalse(thresholds.should_run_rollout(state, 1))

        state.forced_card_idx = 1
        state.num_cards_placed = 1
        self.assertTrue(thresholds.should_run_rollout(state, 2))
        state.num_cards_placed = 3
        self.assertFalse(thresholds.should_run_rollout(state, 2))


class TestStateScorer(unittest.TestCase):
    """Test case for the state heuristic."""

    def setUp(self):
        self.scorer = StateScorer()
        deck_blue = DeckInstance((
            TriadCard(card_id=0, sides=(5, 5, 5, 5), optimizer_score=0.2),
            TriadCard(card_id=1, sides=(5, 5, 5, 5), optimizer_score=0.6),
            TriadCard(card_id=2, sides=(5, 5, 5, 5), optimizer_score=1.0),
        ), available_card_mask=0b011, num_placed=1)
        self.state = SimulationState(deck_blue=deck_blue, deck_red=uniform_deck(5, first_id=5))
        self.state.board[4] = PlacedCard(TriadCard(card_id=9, sides=(5, 5, 5, 5)), CardOwner.BLUE)

    def test_state_weight(self):
        self.assertAlmostEqual(self.scorer.state_weight(1), 0.75)
        self.assertAlmostEqual(self.scorer.state_weight(2), 0.5)
        self.assertAlmostEqual(self.scorer.state_weight(3), 0.25)
        for num_placed in range(4, 10):
            self.assertEqual(self.scorer.state_weight(num_placed), 0.0)
        for num_placed in range(0, 10):
            self.assertGreaterEqual(self.scorer.state_weight(num_placed), 0.0)

    def test_board_score(self):
        """A lone 5 in the center can be captured by 6-10 on every side."""
        defense, capture = self.scorer.calculate_board_score(TriadGameSimulation(), self.state)
        self.assertAlmostEqual(defense, 0.5)
        self.assertAlmostEqual(capture, 0.2)

        defense, _ = self.scorer.calculate_board_score(TriadGameSimulation([ReverseModifier()]), self.state)
        self.assertAlmostEqual(defense, 0.6)

    def test_board_score_closed_sides(self):
        """Only open sides count; As in the corner are safe unless Fallen Ace is active."""
        state = self.state.clone()
        state.board[4] = None
        state.board[0] = PlacedCard(TriadCard(card_id=9, sides=(1, 1, 10, 10)), CardOwner.BLUE)
        defense, _ = self.scorer.calculate_board_score(TriadGameSimulation(), state)
        self.assertAlmostEqual(defense, 1.0)

        defense, _ = self.scorer.calculate_board_score(TriadGameSimulation([FallenAceModifier()]), state)
        self.assertAlmostEqual(defense, 0.9)

    def test_no_blue_cards(self):
        state = self.state.clone()
        state.board[4] = PlacedCard(state.board[4].card, CardOwner.RED)
        self.assertEqual(self.scorer.calculate_board_score(TriadGameSimulation(), state), (0.0, 0.0))

    def test_capture_score_is_capped(self):
        state = self.state.clone()
        filler = TriadCard(card_id=8, sides=(5, 5, 5, 5))
        for board_pos in range(7):
            state.board[board_pos] = PlacedCard(filler, CardOwner.BLUE)
        _, capture = self.scorer.calculate_board_score(TriadGameSimulation(), state)
        self.assertEqual(capture, 1.0)

    def test_deck_score(self):
        """Only cards in hand are scored, after modifiers adjust them."""
        self.assertAlmostEqual(self.scorer.calculate_deck_score(TriadGameSimulation(), self.state), 0.4)
        self.assertAlmostEqual(
            self.scorer.calculate_deck_score(TriadGameSimulation([ReverseModifier()]), self.state), 0.6)

        empty = self.state.clone()
        empty.deck_blue.available_card_mask = 0
        self.assertEqual(self.scorer.calculate_deck_score(TriadGameSimulation(), empty), 0.0)

    def test_combined_score(self):
        score = self.scorer.calculate_state_score(TriadGameSimulation(), self.state)
        self.assertAlmostEqual(score, (0.5 * 1.0 + 0.2 * 3.5 + 0.4 * 2.0) / 6.5)

    def test_blend(self):
        blended = self.scorer.blend(SolverResult(0.4, 0.2, 1), 0.8, 1)
        self.assertAlmostEqual(blended.wins, 0.4 * 0.25 + 0.8 * 0.75)
        self.assertAlmostEqual(blended.draws, 0.2)
        self.assertEqual(blended.games, 1)

        late = self.scorer.blend(SolverResult(3, 1, 4), 1.0, 4)
        self.assertAlmostEqual(late.wins, 0.75)
        self.assertAlmostEqual(late.draws, 0.25)

        capped = StateScorer(SolverConfig(state_weight=1.0)).blend(SolverResult(1, 0, 1), 1.0, 1)
        self.assertLessEqual(capped.wins, 1.0)


class TestAgents(unittest.TestCase):
    """Test case for agent creation and end-to-end searches."""

    def setUp(self):
        self.solver = TriadGameSolver()
        self.config = SolverConfig(rollout_count=4, num_workers=2)
        self.agents = []

    def tearDown(self):
        for agent in self.agents:
            agent.close()

    def create(self, agent_name):
        agent = TriadAgentFactory.create(agent_name, self.config)
        self.agents.append(agent)
        return agent

    def test_factory_names(self):
        self.assertIsInstance(self.create("random"), RandomAgent)
        self.assertEqual(self.create("graph_explorer").name, "GraphExplorer")
        self.assertEqual(self.create("derpy-carlo").name, "DerpyCarlo")
        self.assertEqual(self.create("carlo_the_explorer").name, "CarloTheExplorer")
        self.assertEqual(self.create("CARLO_SCORED").name, "CarloScored")
        with self.assertRaises(ValueError):
            TriadAgentFactory.create("minimax")

    def test_opening_dispatches_to_rollouts(self):
        """From an empty board only the root is expanded, every child is estimated."""
        agent = self.create("carlo_the_explorer")
        agent.initialize(self.solver, 99)
        self.assertEqual(agent.leaf.thresholds.min_placed_to_explore, 5)

        state = opening_state()
        move = agent.find_next_move(self.solver, state)

        self.assertIn(move.card_idx, range(5))
        self.assertIn(move.board_pos, range(9))
        stats = agent.get_last_statistics()
        self.assertEqual(stats["leaf_evaluations"], 5 * 9)
        self.assertEqual(stats["nodes"], 1 + 5 * 9)
        self.assertEqual(stats["rollouts"], 5 * 9 * 4)
        self.assertAlmostEqual(agent.get_progress(), 0.8)
        self.assertEqual(state.num_cards_placed, 0)

    def test_scored_agent_is_deterministic(self):
        state = opening_state()
        moves = []
        for _ in range(2):
            agent = self.create("carlo_scored")
            agent.initialize(self.solver, 5)
            moves.append(agent.find_next_move(self.solver, state))

        self.assertEqual(moves[0], moves[1])
        self.assertTrue(moves[0].is_valid)

    def test_reinitialize_replaces_session(self):
        agent = self.create("derpy_carlo")
        agent.initialize(self.solver, 1)
        first_session = agent.session
        first_workers = agent.leaf.worker_agents
        agent.initialize(self.solver, 1)

        self.assertIsNot(agent.session, first_session)
        self.assertIsNot(agent.leaf.worker_agents, first_workers)
        self.assertTrue(agent.is_initialized())

    def test_close_releases_workers(self):
        agent = self.create("derpy_carlo")
        agent.initialize(self.solver, 3)
        self.assertIsNotNone(agent.leaf._executor)

        agent.close()
        self.assertIsNone(agent.leaf._executor)
        self.assertTrue(agent.find_next_move(self.solver, opening_state()).is_valid)

        random_agent = self.create("random")
        random_agent.close()
        self.assertIsInstance(random_agent, RandomAgent)

    def test_exhaustive_late_game(self):
        """Close to the end the adaptive agent agrees with full exploration."""
        state = endgame_state(0b00011)
        adaptive = self.create("carlo_the_explorer")
        adaptive.initialize(self.solver, 0)
        exhaustive = self.create("graph_explorer")
        exhaustive.initialize(self.solver, 0)

        self.assertEqual(adaptive.find_next_move(self.solver, state), exhaustive.find_next_move(self.solver, state))
        self.assertEqual(adaptive.get_last_statistics()["rollouts"], 0)


class TestMatch(unittest.TestCase):
    """Test case for the match runner."""

    def test_random_match(self):
        summary = run_matches("random", "random", num_games=6, seed=3, show_progress=False)
        self.assertEqual(summary.num_games, 6)
        self.assertEqual(summary.wins + summary.draws + summary.losses, 6)
        self.assertEqual(summary.unfinished, 0)
        self.assertAlmostEqual(summary.win_rate, summary.wins / 6)

    def test_matches_are_reproducible(self):
        first = run_matches("random", "random", num_games=4, seed=11, show_progress=False)
        second = run_matches("random", "random", num_games=4, seed=11, show_progress=False)
        self.assertEqual(first.results, second.results)

    def test_red_agent_sees_mirrored_state(self):
        """Red's winning move is found from the mirrored state."""
        solver = TriadGameSolver()
        agent_red = TriadAgentFactory.create_graph_explorer()
        agent_red.initialize(solver, 1)

        state = endgame_state(0b00011).mirrored()
        self.assertEqual(state.state, GameStateTag.IN_PROGRESS_RED)
        move = agent_red.find_next_move(solver, state.mirrored())
        self.assertEqual((move.card_idx, move.board_pos), (1, 4))

    def test_search_agent_plays_red(self):
        """A search agent on Red finishes the game with legal moves."""
        solver = TriadGameSolver()
        config = SolverConfig(rollout_count=8, num_workers=1)
        agent_blue = TriadAgentFactory.create_random(config)
        agent_red = TriadAgentFactory.create_carlo_scored(config)
        agent_blue.initialize(solver, 0)
        agent_red.initialize(solver, 1)

        rng = np.random.default_rng(0)
        for blue_first in (True, False):
            final = play_match(solver, agent_blue, agent_red,
                               create_random_deck(rng), create_random_deck(rng, first_id=5), blue_first=blue_first)
            self.assertFalse(final.state.is_in_progress)
            self.assertEqual(final.num_cards_placed, 9)
            self.assertEqual(final.deck_red.num_placed, 4 if blue_first else 5)

        self.assertGreater(len(agent_red.action_history), 0)
        agent_red.close()

    def test_search_match(self):
        config = SolverConfig(rollout_count=8, num_workers=2)
        summary = run_matches("random", "carlo_the_explorer", num_games=2, seed=5, config=config, show_progress=False)
        self.assertEqual(summary.num_games, 2)
        self.assertEqual(summary.unfinished, 0)


class TestConfig(unittest.TestCase):
    """Test case for solver configuration."""

    def test_validation(self):
        with self.assertRaises(ValueError):
            SolverConfig(rollout_count=0)
        with self.assertRaises(ValueError):
            SolverConfig(num_workers=0)
        with self.assertRaises(ValueError):
            SolverConfig(max_states_to_explore=-1)
        with self.assertRaises(ValueError):
            SolverConfig(state_weight=1.5)
        with self.assertRaises(ValueError):
            SolverConfig(priority_defense=0, priority_deck=0, priority_capture=0)

    def test_dict_conversion(self):
        config = SolverConfig.from_dict({"rollout_count": 10, "unknown": 1, "debug_flags": 1})
        self.assertEqual(config.rollout_count, 10)
        self.assertEqual(config.debug_flags, DebugFlags.AGENT_INITIALIZE)
        self.assertEqual(SolverConfig.from_dict(config.to_dict()), config)

    def test_presets(self):
        self.assertEqual(SolverConfig.default(), SolverConfig())
        self.assertLess(SolverConfig.fast().rollout_count, SolverConfig().rollout_count)
        self.assertTrue(SolverConfig.thorough().use_equal_distribution)

    def test_package_defaults(self):
        """The package level defaults agree with SolverConfig."""
        self.assertEqual(SolverConfig.from_dict(triad_ai.DEFAULT_CONFIG), SolverConfig())
        self.assertEqual(triad_ai.DEFAULT_CONFIG["board_size"], BOARD_SIZE)
        self.assertEqual(triad_ai.DEFAULT_CONFIG["cards_per_player"], MAX_AVAILABLE_CARDS)

    def test_verbose_shows_results(self):
        self.assertIn(DebugFlags.SHOW_MOVE_RESULT, SolverConfig(verbose=True).debug_flags)


if __name__ == "__main__":
    unittest.main()
