"""
Game state and rule simulation for Triple Triad.

This module defines the core game mechanics, including:
- SimulationState: Complete, cloneable representation of a game's state
- TriadGameSimulation: Card placement and capture rules, with modifiers
- TriadGameSolver: Action enumeration and full game playouts for agents

Terminal states are always expressed from Blue's point of view; callers
mirror the state when Red is the player being evaluated.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence, TYPE_CHECKING

from triad_ai.core.constants import (
    CardOwner, GameSide, GameStateTag, BOARD_SIZE_SQ, NEIGHBORS
)
from triad_ai.core.cards import DeckInstance, TriadCard
from triad_ai.core.modifiers import TriadGameModifier, ModifierFeature

if TYPE_CHECKING:
    from triad_ai.solver.base import TriadGameAgent


class PlacedCard(NamedTuple):
    """A card on the board together with its current owner."""
    card: TriadCard
    owner: CardOwner


class AvailableActions(NamedTuple):
    """Legal board cells and hand cards for the acting player, as bitmasks."""
    board_mask: int
    num_board: int
    card_mask: int
    num_cards: int


@dataclass
class SimulationState:
    """
    Complete representation of a Triple Triad game state.

    The board holds BOARD_SIZE_SQ cells, each empty (None) or a PlacedCard.
    forced_card_idx pins the card the acting player has to use for the next
    move (-1 = free choice).
    """
    deck_blue: DeckInstance
    deck_red: DeckInstance
    board: List[Optional[PlacedCard]] = field(default_factory=lambda: [None] * BOARD_SIZE_SQ)
    state: GameStateTag = GameStateTag.IN_PROGRESS_BLUE
    num_cards_placed: int = 0
    forced_card_idx: int = -1

    @classmethod
    def create(
        cls,
        deck_blue: DeckInstance,
        deck_red: DeckInstance,
        blue_first: bool = True
    ) -> 'SimulationState':
        """
        Create the initial state of a game.

        Args:
            deck_blue: Blue player's hand
            deck_red: Red player's hand
            blue_first: Whether Blue makes the first move

        Returns:
            SimulationState with an empty board
        """
        return cls(
            deck_blue=deck_blue.clone(),
            deck_red=deck_red.clone(),
            state=GameStateTag.IN_PROGRESS_BLUE if blue_first else GameStateTag.IN_PROGRESS_RED,
        )

    @property
    def acting_owner(self) -> CardOwner:
        if self.state == GameStateTag.IN_PROGRESS_BLUE:
            return CardOwner.BLUE
        if self.state == GameStateTag.IN_PROGRESS_RED:
            return CardOwner.RED
        return CardOwner.NONE

    @property
    def acting_deck(self) -> DeckInstance:
        return self.deck_blue if self.state == GameStateTag.IN_PROGRESS_BLUE else self.deck_red

    @property
    def is_finished(self) -> bool:
        return not self.state.is_in_progress

    def count_owned(self, owner: CardOwner) -> int:
        """Count cells owned by a player."""
        return sum(1 for cell in self.board if cell is not None and cell.owner == owner)

    def clone(self) -> 'SimulationState':
        """
        Create an independent copy of the game state.

        Board cells are immutable tuples, so copying the list is enough.

        Returns:
            Copy of the game state
        """
        return SimulationState(
            deck_blue=self.deck_blue.clone(),
            deck_red=self.deck_red.clone(),
            board=list(self.board),
            state=self.state,
            num_cards_placed=self.num_cards_placed,
            forced_card_idx=self.forced_card_idx,
        )

    def mirrored(self) -> 'SimulationState':
        """
        Create a copy with Blue and Red swapped.

        Used to present the game to the Red player's agent, which always
        evaluates itself as Blue.

        Returns:
            Mirrored copy of the game state
        """
        swapped_tags = {
            GameStateTag.IN_PROGRESS_BLUE: GameStateTag.IN_PROGRESS_RED,
            GameStateTag.IN_PROGRESS_RED: GameStateTag.IN_PROGRESS_BLUE,
            GameStateTag.BLUE_WINS: GameStateTag.BLUE_LOST,
            GameStateTag.BLUE_LOST: GameStateTag.BLUE_WINS,
            GameStateTag.BLUE_DRAW: GameStateTag.BLUE_DRAW,
        }
        board = [
            None if cell is None else PlacedCard(cell.card, cell.owner.opponent)
            for cell in self.board
        ]
        return SimulationState(
            deck_blue=self.deck_red.clone(),
            deck_red=self.deck_blue.clone(),
            board=board,
            state=swapped_tags[self.state],
            num_cards_placed=self.num_cards_placed,
            forced_card_idx=self.forced_card_idx,
        )

    def __str__(self) -> str:
        rows = []
        for row_start in range(0, BOARD_SIZE_SQ, 3):
            cells = []
            for cell in self.board[row_start:row_start + 3]:
                if cell is None:
                    cells.append("  .  ")
                else:
                    cells.append(f"{cell.owner.name[0]}{cell.card.card_id:>4}")
            rows.append(" | ".join(cells))
        return f"{self.state.name} (placed: {self.num_cards_placed})\n" + "\n".join(rows)


class TriadGameSimulation:
    """
    Rules of card placement and capture.

    Captures compare the side of the placed card with the facing side of each
    adjacent opposing card; active modifiers can change both the compared
    numbers and the comparison itself.
    """

    def __init__(self, modifiers: Optional[Sequence[TriadGameModifier]] = None):
        """
        Initialize the simulation.

        Args:
            modifiers: Rule modifiers active in this game
        """
        self.modifiers: List[TriadGameModifier] = list(modifiers or [])
        self.mod_features = ModifierFeature.NONE
        for mod in self.modifiers:
            self.mod_features |= mod.features

    def check_capture(self, board_pos: int, neighbor_pos: int, capturing_num: int, defending_num: int) -> bool:
        """
        Check whether a number captures the facing number of an adjacent card.

        Args:
            board_pos: Cell of the capturing card (-1 when not on the board)
            neighbor_pos: Cell of the defending card (-1 when not on the board)
            capturing_num: Side value of the capturing card
            defending_num: Facing side value of the defending card

        Returns:
            True if the defending card is captured
        """
        if ModifierFeature.CAPTURE_WEIGHTS in self.mod_features:
            is_reverse_active = ModifierFeature.CAPTURE_MATH in self.mod_features
            for mod in self.modifiers:
                capturing_num, defending_num = mod.on_check_capture_card_weights(
                    board_pos, neighbor_pos, is_reverse_active, capturing_num, defending_num)

        is_captured = capturing_num > defending_num

        if ModifierFeature.CAPTURE_MATH in self.mod_features:
            for mod in self.modifiers:
                is_captured = mod.on_check_capture_card_math(
                    board_pos, neighbor_pos, capturing_num, defending_num, is_captured)

        return is_captured

    def can_be_captured_with(self, defending_num: int, capturing_num: int) -> bool:
        """Check a capture independent of any board position."""
        return self.check_capture(-1, -1, capturing_num, defending_num)

    def score_card(self, card: TriadCard) -> float:
        """Get a card's optimizer score after every modifier has adjusted it."""
        score = card.optimizer_score
        for mod in self.modifiers:
            score = mod.on_score_card(card, score)
        return score

    def place_card(
        self,
        state: SimulationState,
        card_idx: int,
        deck: DeckInstance,
        owner: CardOwner,
        board_pos: int
    ) -> bool:
        """
        Place a card from a hand on the board and resolve captures.

        Args:
            state: Game state to modify
            card_idx: Index of the card in the hand
            deck: Hand the card is taken from
            owner: Owner of the placed card
            board_pos: Target cell

        Returns:
            True if the card was placed, False if the move is illegal (the state
            is left unmodified)
        """
        if not state.state.is_in_progress:
            return False
        if not 0 <= board_pos < BOARD_SIZE_SQ or state.board[board_pos] is not None:
            return False
        if not deck.is_available(card_idx):
            return False

        card = deck.get_card(card_idx)
        state.board[board_pos] = PlacedCard(card, owner)
        deck.mark_placed(card_idx)
        state.num_cards_placed += 1
        state.forced_card_idx = -1

        for side in GameSide:
            neighbor_pos = NEIGHBORS[board_pos][side]
            if neighbor_pos < 0:
                continue

            neighbor = state.board[neighbor_pos]
            if neighbor is None or neighbor.owner == owner:
                continue

            capturing_num = card.get_number(side)
            defending_num = neighbor.card.get_number(side.opposite)
            if self.check_capture(board_pos, neighbor_pos, capturing_num, defending_num):
                state.board[neighbor_pos] = PlacedCard(neighbor.card, owner)

        self._update_game_state(state)
        return True

    def _update_game_state(self, state: SimulationState) -> None:
        if state.num_cards_placed < BOARD_SIZE_SQ:
            state.state = (GameStateTag.IN_PROGRESS_RED
                           if state.state == GameStateTag.IN_PROGRESS_BLUE
                           else GameStateTag.IN_PROGRESS_BLUE)
            return

        # cards left in hand count towards the score
        blue_score = state.count_owned(CardOwner.BLUE) + state.deck_blue.num_available
        red_score = state.count_owned(CardOwner.RED) + state.deck_red.num_available

        if blue_score > red_score:
            state.state = GameStateTag.BLUE_WINS
        elif blue_score == red_score:
            state.state = GameStateTag.BLUE_DRAW
        else:
            state.state = GameStateTag.BLUE_LOST


class TriadGameSolver:
    """
    Entry point used by agents to query and play out games.

    Owns the rule simulation and exposes action enumeration and full game
    playouts.
    """

    def __init__(
        self,
        simulation: Optional[TriadGameSimulation] = None,
        modifiers: Optional[Sequence[TriadGameModifier]] = None
    ):
        self.simulation = simulation or TriadGameSimulation(modifiers)

    def find_available_actions(self, state: SimulationState) -> AvailableActions:
        """
        Get the legal cells and cards for the acting player.

        Args:
            state: Current game state

        Returns:
            AvailableActions bitmasks and their set bit counts
        """
        if not state.state.is_in_progress:
            return AvailableActions(0, 0, 0, 0)

        board_mask = 0
        for board_pos, cell in enumerate(state.board):
            if cell is None:
                board_mask |= 1 << board_pos

        deck = state.acting_deck
        card_mask = deck.available_card_mask
        if state.forced_card_idx >= 0 and deck.is_available(state.forced_card_idx):
            card_mask = 1 << state.forced_card_idx

        return AvailableActions(
            board_mask=board_mask,
            num_board=bin(board_mask).count("1"),
            card_mask=card_mask,
            num_cards=bin(card_mask).count("1"),
        )

    def run_simulation(
        self,
        state: SimulationState,
        agent_blue: 'TriadGameAgent',
        agent_red: 'TriadGameAgent'
    ) -> SimulationState:
        """
        Play a game to the end, modifying the state in place.

        The playout stops early, leaving the game in progress, when the acting
        agent can't produce a legal move.

        Args:
            state: Game state to play from
            agent_blue: Agent making Blue's moves
            agent_red: Agent making Red's moves

        Returns:
            The same state object, for convenience
        """
        agent_blue.on_simulation_start()
        if agent_red is not agent_blue:
            agent_red.on_simulation_start()

        while state.state.is_in_progress:
            agent = agent_blue if state.state == GameStateTag.IN_PROGRESS_BLUE else agent_red
            move = agent.find_next_move(self, state)
            if not move.is_valid:
                break

            is_placed = self.simulation.place_card(
                state, move.card_idx, state.acting_deck, state.acting_owner, move.board_pos)
            if not is_placed:
                break

        return state
