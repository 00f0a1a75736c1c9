"""
Cluster model for the Cluster Load Simulator.

The cluster is a fixed pool of interchangeable processors. Each processor
carries a counter of remaining busy ticks; zero means free. Time advances
one tick at a time and the number of available processors is recomputed
from the counters on every tick rather than tracked incrementally.
"""

from dataclasses import dataclass
from typing import List, Tuple

from clustersim.config import InvalidConfiguration


@dataclass
class ClusterStatistics:
    """
    Running accumulators updated once per tick.

    Attributes:
        total_tasks: Tasks that entered the pending queue
        completed_tasks: Tasks successfully allocated to processors
        idle_ticks: Ticks on which every processor was free
        load_accumulated: Sum of per-tick utilization fractions
        load_measurements: Number of utilization samples taken
    """
    total_tasks: int = 0
    completed_tasks: int = 0
    idle_ticks: int = 0
    load_accumulated: float = 0.0
    load_measurements: int = 0

    @property
    def average_load(self) -> float:
        """Mean utilization over all samples (0.0 before the first sample)."""
        if self.load_measurements == 0:
            return 0.0
        return self.load_accumulated / self.load_measurements


class Cluster:
    """
    A fixed-size pool of processors with per-processor busy counters.

    Attributes:
        total_processors: Number of processors (constant)
        available_processors: Free processors as of the last update
    """

    def __init__(self, total_processors: int) -> None:
        if total_processors < 1:
            raise InvalidConfiguration(
                f"Cluster must have at least 1 processor, got {total_processors}"
            )
        self._total = total_processors
        self._available = total_processors
        self._status: List[int] = [0] * total_processors

    @property
    def total_processors(self) -> int:
        return self._total

    @property
    def available_processors(self) -> int:
        return self._available

    @property
    def busy_processors(self) -> int:
        return self._total - self._available

    @property
    def utilization(self) -> float:
        """Fraction of processors currently busy."""
        return self.busy_processors / self._total

    @property
    def processor_status(self) -> Tuple[int, ...]:
        """Snapshot of the remaining busy ticks for every processor."""
        return tuple(self._status)

    def can_fit(self, required: int) -> bool:
        return required <= self._available

    def advance_tick(self) -> None:
        """
        Move the cluster forward by one tick.

        Every busy counter drops by one, then availability is recounted.
        Tasks whose counters reach zero release their processors here,
        before any allocation for the new tick.
        """
        for idx, remaining in enumerate(self._status):
            if remaining > 0:
                self._status[idx] = remaining - 1
        self._available = self._status.count(0)

    def try_allocate(self, required: int, duration: int) -> bool:
        """
        Reserve processors for a task.

        Rejection leaves the cluster untouched, so callers can retry the
        same task on a later tick.

        Args:
            required: Number of processors to reserve
            duration: Ticks the processors stay busy

        Returns:
            True if the processors were reserved, False otherwise

        Raises:
            InvalidConfiguration: If required or duration is below 1
        """
        if required < 1:
            raise InvalidConfiguration(f"Allocation must request at least 1 processor, got {required}")
        if duration < 1:
            raise InvalidConfiguration(f"Allocation duration must be >= 1, got {duration}")
        if required > self._available:
            return False

        allocated = 0
        for idx, remaining in enumerate(self._status):
            if allocated == required:
                break
            if remaining == 0:
                self._status[idx] = duration
                allocated += 1

        self._available -= required
        return True

    def record_sample(self, stats: ClusterStatistics) -> None:
        """Add the current utilization to stats and count idle ticks."""
        stats.load_accumulated += self.utilization
        stats.load_measurements += 1
        if self._available == self._total:
            stats.idle_ticks += 1

    def __repr__(self) -> str:
        return (
            f"Cluster(total_processors={self._total}, "
            f"available_processors={self._available})"
        )
