"""
Cluster Load Simulator

A discrete-time simulator of a fixed-size compute cluster that admits
randomly arriving multi-processor tasks and tracks utilization.

Key Components:
    - config: Simulation defaults and validated configuration
    - workload: Tasks and the per-tick task generator
    - cluster: Processor pool and running statistics
    - scheduler: Pending queue and admission policies
    - simulator: Tick-driven simulation engine and experiment helpers
    - plotter: Visualization utilities

Usage:
    # Run one simulation
    python -m clustersim.main --seed 42

    # Generate plots
    python -m clustersim.plotter

    # Run tests
    pytest clustersim/tests/
"""

from clustersim.config import (
    DEFAULT_SPAWN_PROBABILITY,
    DEFAULT_TICKS,
    InvalidConfiguration,
    SimulationConfig,
    random_cluster_size,
)

from clustersim.workload import (
    Task,
    TaskGenerator,
)

from clustersim.cluster import (
    Cluster,
    ClusterStatistics,
)

from clustersim.scheduler import (
    AdmissionPolicy,
    HeadOfLineAdmission,
    BackfillAdmission,
    TaskQueue,
    create_policy,
)

from clustersim.simulator import (
    SimulationEngine,
    SimulationResults,
    ReplicationSummary,
    run_simulation,
    sweep_spawn_probabilities,
    run_replications,
    summarize_replications,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "DEFAULT_SPAWN_PROBABILITY",
    "DEFAULT_TICKS",
    "InvalidConfiguration",
    "SimulationConfig",
    "random_cluster_size",
    # Workload
    "Task",
    "TaskGenerator",
    # Cluster
    "Cluster",
    "ClusterStatistics",
    # Scheduler
    "AdmissionPolicy",
    "HeadOfLineAdmission",
    "BackfillAdmission",
    "TaskQueue",
    "create_policy",
    # Simulator
    "SimulationEngine",
    "SimulationResults",
    "ReplicationSummary",
    "run_simulation",
    "sweep_spawn_probabilities",
    "run_replications",
    "summarize_replications",
]
