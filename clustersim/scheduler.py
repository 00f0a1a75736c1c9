"""
Scheduler module for the Cluster Load Simulator.

This module holds the pending-task queue and the admission policies that
move tasks from the queue onto the cluster once per tick.

Pending tasks are ordered by processor demand, largest first. Ties go to
the task that was queued first.

Policies Implemented:
    1. HeadOfLineAdmission (Default): Admits in strict demand order and
       stops at the first task that does not fit. A large task at the head
       of the queue blocks smaller tasks behind it even when they would fit.
    2. BackfillAdmission: Same order, but a task that does not fit is set
       aside and the scan continues with smaller tasks.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
import heapq
import itertools
import logging

from clustersim.workload import Task
from clustersim.cluster import Cluster, ClusterStatistics


logger = logging.getLogger(__name__)


class TaskQueue:
    """
    Max-heap of pending tasks keyed on required processors.

    Ties between equal demands are broken by insertion order, so a task
    that is popped and pushed back loses its place to tasks queued before
    the requeue.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, Task]] = []
        self._counter = itertools.count()

    def push(self, task: Task) -> None:
        """Add a task to the queue."""
        heapq.heappush(self._heap, (-task.required_processors, next(self._counter), task))

    def pop(self) -> Task:
        """Remove and return the task with the largest demand."""
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Optional[Task]:
        """View the task with the largest demand without removing it."""
        return self._heap[0][2] if self._heap else None

    def tasks(self) -> List[Task]:
        """All pending tasks in admission order."""
        return [entry[2] for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def is_empty(self) -> bool:
        return len(self._heap) == 0


class AdmissionPolicy(ABC):
    """
    Abstract base class for admission policies.

    A policy runs once per tick, after the cluster has advanced and any new
    arrival has been queued. It decides which pending tasks start now.
    """

    @abstractmethod
    def admit(
        self,
        queue: TaskQueue,
        cluster: Cluster,
        stats: ClusterStatistics,
        current_tick: int
    ) -> int:
        """
        Move pending tasks onto the cluster.

        Args:
            queue: Pending tasks; rejected tasks must be left in it
            cluster: Cluster to allocate processors on
            stats: Statistics whose completed_tasks is bumped per admission
            current_tick: Current tick (for logging)

        Returns:
            Number of tasks admitted this tick
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this policy."""
        pass


class HeadOfLineAdmission(AdmissionPolicy):
    """
    Strict priority admission with head-of-line blocking.

    Pops the largest pending task and tries to allocate it. On success the
    next largest is tried; on the first rejection the task goes back into
    the queue and the pass ends for this tick.
    """

    def admit(
        self,
        queue: TaskQueue,
        cluster: Cluster,
        stats: ClusterStatistics,
        current_tick: int
    ) -> int:
        admitted = 0
        while not queue.is_empty:
            task = queue.pop()
            if not cluster.try_allocate(task.required_processors, task.execution_time):
                queue.push(task)
                logger.debug(
                    "tick %d: task %d blocked (needs %d, %d free)",
                    current_tick, task.task_id, task.required_processors,
                    cluster.available_processors
                )
                break
            stats.completed_tasks += 1
            admitted += 1
            logger.debug(
                "tick %d: admitted task %d (%d processors, %d ticks)",
                current_tick, task.task_id, task.required_processors, task.execution_time
            )
        return admitted

    @property
    def name(self) -> str:
        return "head-of-line"


class BackfillAdmission(AdmissionPolicy):
    """
    Priority admission that lets smaller tasks overtake a blocked one.

    Every pending task is considered once per tick in demand order. Tasks
    that fit are admitted; tasks that do not are requeued after the scan.
    """

    def admit(
        self,
        queue: TaskQueue,
        cluster: Cluster,
        stats: ClusterStatistics,
        current_tick: int
    ) -> int:
        admitted = 0
        deferred: List[Task] = []
        while not queue.is_empty:
            task = queue.pop()
            if cluster.try_allocate(task.required_processors, task.execution_time):
                stats.completed_tasks += 1
                admitted += 1
                logger.debug(
                    "tick %d: admitted task %d (%d processors, %d ticks)",
                    current_tick, task.task_id, task.required_processors, task.execution_time
                )
            else:
                deferred.append(task)
            if cluster.available_processors == 0:
                break

        for task in deferred:
            queue.push(task)
        return admitted

    @property
    def name(self) -> str:
        return "backfill"


# =============================================================================
# Factory function for easy policy creation
# =============================================================================

POLICIES = {
    "head-of-line": HeadOfLineAdmission,
    "backfill": BackfillAdmission,
}


def create_policy(policy_type: str) -> AdmissionPolicy:
    """
    Factory function to create admission policies by name.

    Args:
        policy_type: "head-of-line" or "backfill"

    Returns:
        Policy instance

    Raises:
        ValueError: If policy_type is unknown
    """
    key = policy_type.lower()
    if key not in POLICIES:
        raise ValueError(
            f"Unknown policy type: {policy_type}. "
            f"Available: {list(POLICIES.keys())}"
        )
    return POLICIES[key]()
