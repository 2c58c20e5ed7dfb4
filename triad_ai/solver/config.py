"""
Configuration for the Triad solver agents.

This module defines the configuration parameters for the search agents,
including rollout counts, worker pool size, the exhaustive search ceiling
and the weights of the state heuristic.
"""
from dataclasses import dataclass, fields
from enum import Flag, auto
from typing import ClassVar


class DebugFlags(Flag):
    """Selects which diagnostics an agent prints."""
    NONE = 0
    AGENT_INITIALIZE = auto()
    SHOW_MOVE_RESULT = auto()
    SHOW_MOVE_START = auto()
    SHOW_MOVE_DETAILS = auto()


@dataclass
class SolverConfig:
    """
    Configuration parameters for the Triad solver agents.

    This class defines all tunable parameters of the search,
    with validation and sensible defaults.
    """
    # Rollout parameters
    rollout_count: int = 2000
    """Number of random playouts used to estimate a single state"""

    num_workers: int = 8
    """Number of worker processes running playouts (1 = run in the calling process)"""

    use_equal_distribution: bool = False
    """Whether random playouts pick uniformly among legal actions instead of scanning"""

    # Exhaustive search parameters
    max_states_to_explore: int = 10_000
    """Largest number of reachable states still explored exhaustively"""

    # State heuristic
    state_weight: float = 0.75
    """Weight of the state score blended into the rollout estimate"""

    state_weight_decay: float = 0.25
    """Weight lost with every additional card placed by the evaluated player"""

    priority_defense: float = 1.0
    """Weight of the defense score"""

    priority_deck: float = 2.0
    """Weight of the hand quality score"""

    priority_capture: float = 3.5
    """Weight of the board ownership score"""

    # Diagnostics
    verbose: bool = False
    """Whether to print the result of every move search"""

    debug_flags: DebugFlags = DebugFlags.NONE
    """Additional diagnostics to print"""

    # Constants
    MAX_WORKERS: ClassVar[int] = 256
    """Upper limit of the worker pool size"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.rollout_count <= 0:
            raise ValueError("rollout_count must be positive")

        if self.num_workers <= 0 or self.num_workers > self.MAX_WORKERS:
            raise ValueError(f"num_workers must be between 1 and {self.MAX_WORKERS}")

        if self.max_states_to_explore <= 0:
            raise ValueError("max_states_to_explore must be positive")

        if not 0.0 <= self.state_weight <= 1.0:
            raise ValueError("state_weight must be between 0 and 1")

        if self.state_weight_decay < 0:
            raise ValueError("state_weight_decay can't be negative")

        priorities = (self.priority_defense, self.priority_deck, self.priority_capture)
        if any(p < 0 for p in priorities) or sum(priorities) <= 0:
            raise ValueError("priorities can't be negative and must not all be zero")

        if self.verbose:
            self.debug_flags |= DebugFlags.SHOW_MOVE_RESULT

    @classmethod
    def default(cls) -> 'SolverConfig':
        """
        Get the default configuration.

        Returns:
            Default SolverConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'SolverConfig':
        """
        Get a configuration optimized for speed (fewer playouts).

        Returns:
            Fast SolverConfig object
        """
        return cls(
            rollout_count=200,
            max_states_to_explore=1_000
        )

    @classmethod
    def thorough(cls) -> 'SolverConfig':
        """
        Get a configuration optimized for accuracy.

        Returns:
            Thorough SolverConfig object
        """
        return cls(
            rollout_count=5000,
            num_workers=16,
            max_states_to_explore=100_000,
            use_equal_distribution=True
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'SolverConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            SolverConfig object
        """
        # Filter out any keys that aren't valid parameters
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        if isinstance(valid_params.get("debug_flags"), int):
            valid_params["debug_flags"] = DebugFlags(valid_params["debug_flags"])
        return cls(**valid_params)

    def to_dict(self) -> dict:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["debug_flags"] = self.debug_flags.value
        return result

    def __str__(self) -> str:
        """
        Get a human-readable string representation.

        Returns:
            String representation
        """
        params = [f"{f.name}={getattr(self, f.name)}" for f in fields(self)]
        return f"SolverConfig({', '.join(params)})"
