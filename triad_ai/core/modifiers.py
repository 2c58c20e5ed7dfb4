"""
Rule modifiers for the Triple Triad game.

Modifiers alter how captures are resolved and how cards are rated. The
simulation only runs the hooks of modifiers whose features are active, see
TriadGameSimulation.mod_features.
"""
from enum import Flag, auto
from typing import Optional, Tuple

from triad_ai.core.cards import TriadCard
from triad_ai.core.constants import MIN_CARD_VALUE, MAX_CARD_VALUE


class ModifierFeature(Flag):
    """Hooks a modifier implements."""
    NONE = 0
    CAPTURE_WEIGHTS = auto()
    CAPTURE_MATH = auto()
    CARD_SCORE = auto()


class TriadGameModifier:
    """
    Base class for rule modifiers.

    Every hook is a no-op here; subclasses override the ones listed in
    their features.
    """
    name: str = "None"
    features: ModifierFeature = ModifierFeature.NONE

    def on_score_card(self, card: TriadCard, score: float) -> float:
        """Adjust the optimizer score of a card in hand."""
        return score

    def on_check_capture_card_weights(
        self,
        board_pos: int,
        neighbor_pos: int,
        is_reverse_active: bool,
        capturing_num: int,
        defending_num: int
    ) -> Tuple[int, int]:
        """Adjust the two numbers before they are compared."""
        return capturing_num, defending_num

    def on_check_capture_card_math(
        self,
        board_pos: int,
        neighbor_pos: int,
        capturing_num: int,
        defending_num: int,
        is_captured: bool
    ) -> bool:
        """Override the result of comparing the two numbers."""
        return is_captured

    def __str__(self) -> str:
        return self.name


class ReverseModifier(TriadGameModifier):
    """Lower numbers capture higher ones."""
    name = "Reverse"
    features = ModifierFeature.CAPTURE_MATH | ModifierFeature.CARD_SCORE

    def on_score_card(self, card: TriadCard, score: float) -> float:
        return 1.0 - score

    def on_check_capture_card_math(self, board_pos, neighbor_pos, capturing_num, defending_num, is_captured):
        return capturing_num < defending_num


class FallenAceModifier(TriadGameModifier):
    """A 1 captures an A (reversed: an A captures a 1)."""
    name = "Fallen Ace"
    features = ModifierFeature.CAPTURE_WEIGHTS

    def on_check_capture_card_weights(self, board_pos, neighbor_pos, is_reverse_active, capturing_num, defending_num):
        if is_reverse_active:
            if capturing_num == MAX_CARD_VALUE and defending_num == MIN_CARD_VALUE:
                capturing_num = MIN_CARD_VALUE - 1
        elif capturing_num == MIN_CARD_VALUE and defending_num == MAX_CARD_VALUE:
            capturing_num = MAX_CARD_VALUE + 1

        return capturing_num, defending_num


MODIFIERS_BY_NAME = {
    ReverseModifier.name.lower(): ReverseModifier,
    FallenAceModifier.name.lower().replace(" ", "_"): FallenAceModifier,
}


def create_modifier(name: str) -> Optional[TriadGameModifier]:
    """
    Create a modifier from its name ("reverse", "fallen_ace").

    Returns:
        Modifier instance, or None for an unknown name
    """
    modifier_cls = MODIFIERS_BY_NAME.get(name.lower().replace(" ", "_"))
    return modifier_cls() if modifier_cls else None
