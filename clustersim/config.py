"""
Configuration module for the Cluster Load Simulator.

This module stores the default simulation parameters and the validated
configuration record that every simulation is built from. Validation
happens once, at construction, so a misconfigured run fails before any
tick is simulated.

Defaults:
    - Cluster size is drawn uniformly from [16, 64] processors
    - A task spawns with probability 0.3 per tick
    - Tasks demand 1-8 processors for 1-10 ticks
    - A run lasts 1000 ticks
"""

from dataclasses import dataclass, replace
import random


# =============================================================================
# Simulation Defaults
# =============================================================================

MIN_CLUSTER_PROCESSORS: int = 16
"""Smallest cluster the CLI picks when no processor count is given."""

MAX_CLUSTER_PROCESSORS: int = 64
"""Largest cluster the CLI picks when no processor count is given."""

DEFAULT_TICKS: int = 1000
"""Number of ticks in a default run."""

DEFAULT_SPAWN_PROBABILITY: float = 0.3
"""Probability that a new task arrives on any given tick."""

DEFAULT_MIN_TASK_PROCESSORS: int = 1
DEFAULT_MAX_TASK_PROCESSORS: int = 8

DEFAULT_MIN_EXEC_TIME: int = 1
DEFAULT_MAX_EXEC_TIME: int = 10


# =============================================================================
# Errors
# =============================================================================

class InvalidConfiguration(ValueError):
    """Raised when simulation parameters are out of range."""


def validate_probability(probability: float) -> None:
    """Reject spawn probabilities outside [0, 1]."""
    if probability < 0.0 or probability > 1.0:
        raise InvalidConfiguration(
            f"Task spawn probability must be between 0 and 1, got {probability}"
        )


def validate_range(name: str, low: int, high: int) -> None:
    """
    Reject an inclusive integer range that is non-positive or inverted.

    Args:
        name: Human-readable name used in the error message
        low: Inclusive lower bound (must be >= 1)
        high: Inclusive upper bound (must be >= low)

    Raises:
        InvalidConfiguration: If the range is unusable
    """
    if low < 1:
        raise InvalidConfiguration(f"Minimum {name} must be >= 1, got {low}")
    if high < low:
        raise InvalidConfiguration(
            f"Maximum {name} must be >= minimum ({low}), got {high}"
        )


# =============================================================================
# Simulation Configuration
# =============================================================================

@dataclass(frozen=True)
class SimulationConfig:
    """
    Validated parameters for a single simulation run.

    Attributes:
        processors: Total processors in the cluster (>= 1)
        spawn_probability: Per-tick task arrival probability, in [0, 1]
        ticks: Number of ticks to simulate (>= 0)
        min_processors: Smallest processor demand of a generated task
        max_processors: Largest processor demand of a generated task
        min_exec_time: Shortest execution time of a generated task
        max_exec_time: Longest execution time of a generated task

    Example:
        >>> config = SimulationConfig(processors=32, spawn_probability=0.5)
        >>> config.ticks
        1000
    """
    processors: int
    spawn_probability: float = DEFAULT_SPAWN_PROBABILITY
    ticks: int = DEFAULT_TICKS
    min_processors: int = DEFAULT_MIN_TASK_PROCESSORS
    max_processors: int = DEFAULT_MAX_TASK_PROCESSORS
    min_exec_time: int = DEFAULT_MIN_EXEC_TIME
    max_exec_time: int = DEFAULT_MAX_EXEC_TIME

    def __post_init__(self) -> None:
        if self.processors < 1:
            raise InvalidConfiguration(
                f"Cluster must have at least 1 processor, got {self.processors}"
            )
        if self.ticks < 0:
            raise InvalidConfiguration(f"Tick count must be >= 0, got {self.ticks}")
        validate_probability(self.spawn_probability)
        validate_range("task processors", self.min_processors, self.max_processors)
        validate_range("execution time", self.min_exec_time, self.max_exec_time)

    def with_spawn_probability(self, spawn_probability: float) -> "SimulationConfig":
        """Return a copy with a different spawn probability (used by sweeps)."""
        return replace(self, spawn_probability=spawn_probability)


def random_cluster_size(
    rng: random.Random,
    low: int = MIN_CLUSTER_PROCESSORS,
    high: int = MAX_CLUSTER_PROCESSORS
) -> int:
    """Draw a cluster size uniformly from [low, high]."""
    validate_range("cluster processors", low, high)
    return rng.randint(low, high)
