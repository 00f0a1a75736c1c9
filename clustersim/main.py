"""
Main entry point for the Cluster Load Simulator.

This script runs a single simulation and prints a summary of the
cluster's behaviour. When no processor count is given, the cluster size
is drawn at random between 16 and 64 processors from the same seeded
generator, so a fixed seed reproduces the whole run.

Example:
    python -m clustersim.main --seed 42 --ticks 1000 --spawn-probability 0.3
"""

import logging
import random
import sys
from typing import List, Optional

from clustersim.config import (
    DEFAULT_MAX_EXEC_TIME,
    DEFAULT_MAX_TASK_PROCESSORS,
    DEFAULT_MIN_EXEC_TIME,
    DEFAULT_MIN_TASK_PROCESSORS,
    DEFAULT_SPAWN_PROBABILITY,
    DEFAULT_TICKS,
    InvalidConfiguration,
    SimulationConfig,
    random_cluster_size,
)
from clustersim.scheduler import POLICIES, create_policy
from clustersim.simulator import SimulationEngine, SimulationResults


def format_results(results: SimulationResults) -> str:
    """Render the results block shown at the end of a run."""
    lines = [
        "Results:",
        f"Total processors: {results.total_processors}",
        f"Total tasks generated: {results.total_tasks}",
        f"Total tasks completed: {results.completed_tasks}",
        f"Total idle ticks: {results.idle_ticks}",
        f"Average cluster load: {results.average_utilization * 100:.2f}%",
    ]
    return "\n".join(lines)


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="Discrete-time simulator of task admission on a fixed-size cluster"
    )
    parser.add_argument(
        "--processors", "-p", type=int, default=None,
        help="Cluster size (default: random between 16 and 64)"
    )
    parser.add_argument(
        "--ticks", "-t", type=int, default=DEFAULT_TICKS,
        help=f"Number of ticks to simulate (default: {DEFAULT_TICKS})"
    )
    parser.add_argument(
        "--spawn-probability", type=float, default=DEFAULT_SPAWN_PROBABILITY,
        help=f"Per-tick task arrival probability (default: {DEFAULT_SPAWN_PROBABILITY})"
    )
    parser.add_argument(
        "--min-task-processors", type=int, default=DEFAULT_MIN_TASK_PROCESSORS,
        help=f"Smallest task demand (default: {DEFAULT_MIN_TASK_PROCESSORS})"
    )
    parser.add_argument(
        "--max-task-processors", type=int, default=DEFAULT_MAX_TASK_PROCESSORS,
        help=f"Largest task demand (default: {DEFAULT_MAX_TASK_PROCESSORS})"
    )
    parser.add_argument(
        "--min-exec-time", type=int, default=DEFAULT_MIN_EXEC_TIME,
        help=f"Shortest task run time in ticks (default: {DEFAULT_MIN_EXEC_TIME})"
    )
    parser.add_argument(
        "--max-exec-time", type=int, default=DEFAULT_MAX_EXEC_TIME,
        help=f"Longest task run time in ticks (default: {DEFAULT_MAX_EXEC_TIME})"
    )
    parser.add_argument(
        "--policy", choices=sorted(POLICIES), default="head-of-line",
        help="Admission policy (default: head-of-line)"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed (default: unseeded)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every admission decision"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    rng = random.Random(args.seed)
    try:
        processors = args.processors
        if processors is None:
            processors = random_cluster_size(rng)

        config = SimulationConfig(
            processors=processors,
            spawn_probability=args.spawn_probability,
            ticks=args.ticks,
            min_processors=args.min_task_processors,
            max_processors=args.max_task_processors,
            min_exec_time=args.min_exec_time,
            max_exec_time=args.max_exec_time,
        )
    except InvalidConfiguration as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    engine = SimulationEngine(config, rng=rng, policy=create_policy(args.policy))
    results = engine.run()

    print(format_results(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
