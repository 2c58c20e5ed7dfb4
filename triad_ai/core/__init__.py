"""
Triad AI Core Package

This package contains the core game logic for Triple Triad, including:
- Game state representation
- Card placement and capture rules
- Rule modifiers
- Card and deck definitions
- Constants and enums

All core components can be imported directly from this package.
"""

# Game state and rules
from triad_ai.core.game import (
    SimulationState, PlacedCard, AvailableActions,
    TriadGameSimulation, TriadGameSolver
)

# Cards
from triad_ai.core.cards import (
    TriadCard, DeckInstance,
    compute_optimizer_score, create_random_card, create_random_deck, create_deck
)

# Modifiers
from triad_ai.core.modifiers import (
    TriadGameModifier, ModifierFeature,
    ReverseModifier, FallenAceModifier, create_modifier
)

# Constants
from triad_ai.core.constants import (
    CardOwner, GameSide, GameStateTag,
    BOARD_SIZE, BOARD_SIZE_SQ, MAX_AVAILABLE_CARDS, NEIGHBORS
)

__all__ = [
    # Game
    'SimulationState', 'PlacedCard', 'AvailableActions',
    'TriadGameSimulation', 'TriadGameSolver',

    # Cards
    'TriadCard', 'DeckInstance',
    'compute_optimizer_score', 'create_random_card', 'create_random_deck', 'create_deck',

    # Modifiers
    'TriadGameModifier', 'ModifierFeature',
    'ReverseModifier', 'FallenAceModifier', 'create_modifier',

    # Constants
    'CardOwner', 'GameSide', 'GameStateTag',
    'BOARD_SIZE', 'BOARD_SIZE_SQ', 'MAX_AVAILABLE_CARDS', 'NEIGHBORS'
]
