"""
Core simulation engine for the Cluster Load Simulator.

This module implements a discrete-time simulation of a compute cluster.
Each tick runs four steps in a fixed order:
    1. Advance the cluster (finished tasks release their processors)
    2. Possibly generate one new task and queue it
    3. Admit pending tasks according to the admission policy
    4. Sample cluster utilization into the running statistics

Simulation Approach:
    Unlike an event-driven simulator, every tick is visited. Runs are
    short (thousands of ticks) and the per-tick work is a scan over the
    processor counters, so time-stepping keeps the model simple.

The module also provides helpers for experiments made of many
independent runs (probability sweeps, seeded replications). Each run is
a whole engine, so runs parallelize across processes with no shared state.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol
import logging
import random

import numpy as np

from clustersim.config import SimulationConfig
from clustersim.workload import Task, TaskGenerator
from clustersim.cluster import Cluster, ClusterStatistics
from clustersim.scheduler import AdmissionPolicy, HeadOfLineAdmission, TaskQueue, create_policy


logger = logging.getLogger(__name__)


class TaskSource(Protocol):
    """Anything that can hand the engine at most one task per tick."""

    def maybe_generate(self, current_tick: int) -> Optional[Task]:
        ...


@dataclass(frozen=True)
class SimulationResults:
    """
    Final statistics from a simulation run.

    Attributes:
        total_processors: Cluster size
        total_tasks: Tasks generated (or submitted)
        completed_tasks: Tasks allocated to processors
        idle_ticks: Ticks on which the whole cluster was free
        average_utilization: Mean busy fraction per tick (0.0 with no ticks)
        ticks: Ticks simulated
        pending_tasks: Tasks still waiting when the run ended
        policy: Name of the admission policy used
    """
    total_processors: int
    total_tasks: int
    completed_tasks: int
    idle_ticks: int
    average_utilization: float
    ticks: int = 0
    pending_tasks: int = 0
    policy: str = "head-of-line"

    @property
    def completion_ratio(self) -> float:
        """Fraction of generated tasks that got processors."""
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks / self.total_tasks

    def __str__(self) -> str:
        return (
            f"Processors: {self.total_processors}, "
            f"Tasks: {self.completed_tasks}/{self.total_tasks}, "
            f"Idle ticks: {self.idle_ticks}, "
            f"Avg Load: {self.average_utilization * 100:.2f}%"
        )


class SimulationEngine:
    """
    Tick-driven simulator for a single cluster.

    The engine owns the cluster, the task source, the pending queue and
    the statistics. It runs once; calling run() again returns the results
    of the first run.

    Attributes:
        config: Parameters of this run
        cluster: The simulated cluster
        queue: Tasks waiting for processors
        stats: Running statistics
        policy: Admission policy applied each tick
    """

    def __init__(
        self,
        config: SimulationConfig,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        policy: Optional[AdmissionPolicy] = None,
        task_generator: Optional[TaskSource] = None
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Validated simulation parameters
            seed: Seed for the task generator's RNG
            rng: RNG handed to the task generator (overrides seed)
            policy: Admission policy (default: head-of-line)
            task_generator: Custom task source replacing the random generator
        """
        self.config = config
        self.cluster = Cluster(config.processors)
        self.queue = TaskQueue()
        self.stats = ClusterStatistics()
        self.policy = policy if policy is not None else HeadOfLineAdmission()

        if task_generator is None:
            task_generator = TaskGenerator(
                config.spawn_probability,
                config.min_processors,
                config.max_processors,
                config.min_exec_time,
                config.max_exec_time,
                seed=seed,
                rng=rng,
            )
        self.task_generator = task_generator
        self._results: Optional[SimulationResults] = None

        if config.max_processors > config.processors:
            logger.warning(
                "Tasks may request up to %d processors but the cluster only has %d; "
                "such tasks will never be admitted",
                config.max_processors, config.processors
            )

    def submit(self, task: Task) -> None:
        """Queue a task directly, counting it as generated."""
        self.queue.push(task)
        self.stats.total_tasks += 1

    def step(self, tick: int) -> None:
        """
        Run one tick of the simulation.

        Does nothing once run() has produced its results, so the snapshot
        stays consistent with the engine state.

        Raises:
            ValueError: If tick is outside [0, config.ticks)
        """
        if self._results is not None:
            return
        if not 0 <= tick < self.config.ticks:
            raise ValueError(f"Tick must be in [0, {self.config.ticks}), got {tick}")

        self.cluster.advance_tick()

        task = self.task_generator.maybe_generate(tick)
        if task is not None:
            self.submit(task)

        self.policy.admit(self.queue, self.cluster, self.stats, tick)

        self.cluster.record_sample(self.stats)

    def run(self) -> SimulationResults:
        """
        Execute the full simulation and return the final statistics.

        Returns:
            SimulationResults snapshot of the run
        """
        if self._results is not None:
            return self._results

        logger.info(
            "Starting simulation: %d processors, %d ticks, p=%.3f, policy=%s",
            self.config.processors, self.config.ticks,
            self.config.spawn_probability, self.policy.name
        )

        for tick in range(self.config.ticks):
            self.step(tick)

        self._results = self._snapshot()
        logger.info("Simulation finished: %s", self._results)
        return self._results

    def _snapshot(self) -> SimulationResults:
        return SimulationResults(
            total_processors=self.cluster.total_processors,
            total_tasks=self.stats.total_tasks,
            completed_tasks=self.stats.completed_tasks,
            idle_ticks=self.stats.idle_ticks,
            average_utilization=self.stats.average_load,
            ticks=self.config.ticks,
            pending_tasks=len(self.queue),
            policy=self.policy.name,
        )


def run_simulation(
    processors: int,
    spawn_probability: float,
    ticks: int,
    min_processors: int,
    max_processors: int,
    min_exec_time: int,
    max_exec_time: int,
    policy: str = "head-of-line",
    seed: Optional[int] = None
) -> SimulationResults:
    """
    Convenience function to run a complete simulation.

    Args:
        processors: Cluster size
        spawn_probability: Per-tick task arrival probability
        ticks: Number of ticks to simulate
        min_processors, max_processors: Task processor demand range
        min_exec_time, max_exec_time: Task execution time range
        policy: Admission policy name
        seed: Random seed for reproducibility

    Returns:
        SimulationResults from the simulation

    Raises:
        InvalidConfiguration: If any parameter is out of range
    """
    config = SimulationConfig(
        processors=processors,
        spawn_probability=spawn_probability,
        ticks=ticks,
        min_processors=min_processors,
        max_processors=max_processors,
        min_exec_time=min_exec_time,
        max_exec_time=max_exec_time,
    )
    engine = SimulationEngine(config, seed=seed, policy=create_policy(policy))
    return engine.run()


# =============================================================================
# Multi-run experiments
# =============================================================================

def _run_single_experiment(args: tuple) -> tuple:
    """
    Worker function for parallel experiment execution.

    Args:
        args: Tuple of (config, policy_name, seed, key)

    Returns:
        Tuple of (policy_name, key, results)
    """
    config, policy_name, seed, key = args
    engine = SimulationEngine(config, seed=seed, policy=create_policy(policy_name))
    return (policy_name, key, engine.run())


def _execute(
    experiments: List[tuple],
    parallel: bool,
    max_workers: Optional[int]
) -> List[tuple]:
    if parallel and len(experiments) > 1:
        from concurrent.futures import ProcessPoolExecutor
        import os

        n_workers = max_workers or min(os.cpu_count() or 4, len(experiments))
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            return list(executor.map(_run_single_experiment, experiments))

    return [_run_single_experiment(exp) for exp in experiments]


def sweep_spawn_probabilities(
    config: SimulationConfig,
    probabilities: List[float],
    policies: Optional[List[str]] = None,
    seed: int = 42,
    parallel: bool = True,
    max_workers: Optional[int] = None
) -> Dict[str, Dict[float, SimulationResults]]:
    """
    Run one simulation per (policy, spawn probability) pair.

    Every policy sees the same seed at a given probability, so policies
    are compared on identical arrival sequences.

    Args:
        config: Base configuration; its spawn probability is overridden
        probabilities: Spawn probabilities to test
        policies: Policy names (default: all registered policies)
        seed: Base random seed (offset by each probability's position)
        parallel: Use multiprocessing
        max_workers: Max parallel workers (default: CPU count)

    Returns:
        Nested dict: {policy_name: {probability: results}}
    """
    if policies is None:
        policies = ["head-of-line", "backfill"]

    experiments = []
    for policy_name in policies:
        for idx, p in enumerate(probabilities):
            experiments.append((
                config.with_spawn_probability(p),
                policy_name,
                seed + idx,
                p,
            ))

    results: Dict[str, Dict[float, SimulationResults]] = {name: {} for name in policies}
    for policy_name, p, run_results in _execute(experiments, parallel, max_workers):
        results[policy_name][p] = run_results
    return results


def run_replications(
    config: SimulationConfig,
    n_runs: int,
    seed: int = 42,
    policy: str = "head-of-line",
    parallel: bool = False,
    max_workers: Optional[int] = None
) -> List[SimulationResults]:
    """
    Repeat one configuration with seeds seed, seed + 1, ..., seed + n_runs - 1.

    Returns:
        Results in seed order
    """
    experiments = [(config, policy, seed + i, i) for i in range(n_runs)]
    outcomes = _execute(experiments, parallel, max_workers)
    outcomes.sort(key=lambda outcome: outcome[1])
    return [outcome[2] for outcome in outcomes]


@dataclass
class ReplicationSummary:
    """
    Distribution of key metrics across replicated runs.

    Attributes:
        runs: Number of runs summarized
        mean_utilization, std_utilization: Average utilization statistics
        mean_completion_ratio: Mean fraction of tasks admitted
        mean_idle_ticks: Mean idle tick count
    """
    runs: int
    mean_utilization: float
    std_utilization: float
    mean_completion_ratio: float
    mean_idle_ticks: float


def summarize_replications(results: List[SimulationResults]) -> ReplicationSummary:
    """Aggregate replicated runs into means and standard deviations."""
    if not results:
        return ReplicationSummary(
            runs=0,
            mean_utilization=0.0,
            std_utilization=0.0,
            mean_completion_ratio=0.0,
            mean_idle_ticks=0.0,
        )

    utilization = np.array([r.average_utilization for r in results])
    completion = np.array([r.completion_ratio for r in results])
    idle = np.array([r.idle_ticks for r in results], dtype=float)

    return ReplicationSummary(
        runs=len(results),
        mean_utilization=float(utilization.mean()),
        std_utilization=float(utilization.std()),
        mean_completion_ratio=float(completion.mean()),
        mean_idle_ticks=float(idle.mean()),
    )
