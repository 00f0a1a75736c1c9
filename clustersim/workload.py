"""
Workload generation module for the Cluster Load Simulator.

Tasks arrive as a Bernoulli process: on every tick a task spawns with a
fixed probability, independently of every other tick. A spawned task
draws its processor demand and execution time uniformly from configured
inclusive ranges.

The generator owns its random number generator. Pass a seed (or a
ready-made ``random.Random``) to make a run reproducible.
"""

from dataclasses import dataclass
from typing import Optional
import random

from clustersim.config import InvalidConfiguration, validate_probability, validate_range


@dataclass(frozen=True)
class Task:
    """
    A unit of work submitted to the cluster.

    Tasks are immutable: once created they are either allocated (and then
    live on only as busy counters inside the cluster) or stay pending.

    Attributes:
        task_id: Unique, monotonically increasing identifier
        arrival_tick: Tick on which the task was generated
        required_processors: Processors the task needs simultaneously
        execution_time: Ticks the task keeps its processors busy
    """
    task_id: int
    arrival_tick: int
    required_processors: int
    execution_time: int

    def __post_init__(self) -> None:
        if self.required_processors < 1:
            raise InvalidConfiguration(
                f"Task must require at least 1 processor, got {self.required_processors}"
            )
        if self.execution_time < 1:
            raise InvalidConfiguration(
                f"Task execution time must be >= 1, got {self.execution_time}"
            )


class TaskGenerator:
    """
    Produces zero or one task per tick.

    Attributes:
        spawn_probability: Chance of producing a task on each call
        min_processors, max_processors: Inclusive processor demand range
        min_exec_time, max_exec_time: Inclusive execution time range

    Example:
        >>> gen = TaskGenerator(1.0, 2, 2, 5, 5, seed=7)
        >>> gen.maybe_generate(0)
        Task(task_id=1, arrival_tick=0, required_processors=2, execution_time=5)
    """

    def __init__(
        self,
        spawn_probability: float,
        min_processors: int,
        max_processors: int,
        min_exec_time: int,
        max_exec_time: int,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ) -> None:
        """
        Initialize the generator.

        Args:
            spawn_probability: Per-tick arrival probability in [0, 1]
            min_processors: Smallest processor demand (>= 1)
            max_processors: Largest processor demand (>= min_processors)
            min_exec_time: Shortest execution time (>= 1)
            max_exec_time: Longest execution time (>= min_exec_time)
            seed: Seed for a private RNG (ignored when rng is given)
            rng: Random number generator to use instead of a private one

        Raises:
            InvalidConfiguration: If any parameter is out of range
        """
        validate_probability(spawn_probability)
        validate_range("task processors", min_processors, max_processors)
        validate_range("execution time", min_exec_time, max_exec_time)

        self.spawn_probability = spawn_probability
        self.min_processors = min_processors
        self.max_processors = max_processors
        self.min_exec_time = min_exec_time
        self.max_exec_time = max_exec_time
        self._rng = rng if rng is not None else random.Random(seed)
        self._next_id = 1

    @property
    def tasks_generated(self) -> int:
        """Number of tasks produced so far."""
        return self._next_id - 1

    def maybe_generate(self, current_tick: int) -> Optional[Task]:
        """
        Possibly produce a task arriving at current_tick.

        Args:
            current_tick: Tick to stamp as the arrival time

        Returns:
            A new Task with probability spawn_probability, otherwise None
        """
        # random() is in [0, 1): p=0 never spawns, p=1 always does
        if self._rng.random() >= self.spawn_probability:
            return None

        task = Task(
            task_id=self._next_id,
            arrival_tick=current_tick,
            required_processors=self._rng.randint(self.min_processors, self.max_processors),
            execution_time=self._rng.randint(self.min_exec_time, self.max_exec_time),
        )
        self._next_id += 1
        return task
