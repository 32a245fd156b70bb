from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from npu_sim.cluster.pool import NpuPool, PoolStatistics
from npu_sim.metrics.collector import SimulationStatistics
from npu_sim.sim.clock import SimTime
from npu_sim.sim.events import Event, EventKind, EventQueue
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    task: Task
    npu_ids: Tuple[str, ...]
    start_time: SimTime


@dataclass(frozen=True)
class SimulationSnapshot:
    current_time: SimTime
    waiting_tasks: List[Task]
    completed_tasks: List[Task]
    running: Dict[str, Tuple[str, ...]]
    pool_statistics: PoolStatistics
    simulation_statistics: SimulationStatistics


class SimEngine:
    """
    Discrete-event simulation engine for placing tasks on an NPU pool.

    Event types:
      - ARRIVAL: task joins the waiting list
      - COMPLETION: task finishes and frees its NPUs

    After every event the engine runs an admission cycle: it keeps asking the
    pool to place waiting tasks until a pass places nothing (or nobody is
    left waiting). A task that does not fit simply waits; it is retried after
    every later state change.
    """

    def __init__(
        self,
        npu_count: int,
        strategy: AllocationStrategy,
        metrics: Optional[SimulationStatistics] = None,
        status_interval: int = 100,
    ):
        self._queue = EventQueue()
        self._pool = NpuPool(npu_count, strategy)
        self._stats = metrics if metrics is not None else SimulationStatistics()
        self.status_interval = status_interval

        self._now: SimTime = SimTime.ZERO
        self._running: bool = False
        self._waiting: List[Task] = []
        self._completed: List[Task] = []
        self._allocations: Dict[str, Allocation] = {}
        self._history: List[Allocation] = []
        self._seen_ids: Set[str] = set()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def now(self) -> SimTime:
        return self._now

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pool(self) -> NpuPool:
        return self._pool

    @property
    def statistics(self) -> SimulationStatistics:
        return self._stats

    @property
    def waiting_tasks(self) -> List[Task]:
        return list(self._waiting)

    @property
    def completed_tasks(self) -> List[Task]:
        return list(self._completed)

    @property
    def allocation_history(self) -> List[Allocation]:
        """Every allocation committed since the last reset, in admission order."""
        return list(self._history)

    @property
    def pending_events(self) -> int:
        return len(self._queue)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def submit(self, task: Task) -> None:
        if task is None or not task.is_valid():
            raise ValueError(f"Invalid task: {task}")
        if task.task_id in self._seen_ids:
            raise ValueError(f"Duplicate task_id: {task.task_id}")
        if task.arrival_time < self._now:
            raise ValueError(
                f"Task {task.task_id} arrives at {task.arrival_time}, before current time {self._now}"
            )
        self._seen_ids.add(task.task_id)
        self._queue.add(Event.arrival(task))
        self._stats.on_task_submitted(task)

    def submit_all(self, tasks: Iterable[Task]) -> None:
        for task in tasks:
            self.submit(task)

    def set_strategy(self, strategy: AllocationStrategy) -> None:
        self._pool.set_strategy(strategy)

    def stop(self) -> None:
        self._running = False

    def run(self, until: Optional[SimTime] = None) -> SimulationSnapshot:
        """
        Process events until the queue drains, ``stop()`` is called, or the
        next event lies strictly after ``until``. An event beyond ``until`` is
        left in the queue, so a later ``run()`` picks up where this one ended.
        """
        self._running = True
        self._stats.start_wall_clock()
        logger.info(
            "Starting NPU simulation: %d NPUs, strategy=%s, %d events queued",
            len(self._pool), self._pool.strategy.name, len(self._queue),
        )

        try:
            while self._running and self._queue:
                head = self._queue.peek()
                if until is not None and head.time > until:
                    break
                ev = self._queue.poll()

                self._stats.record_interval(ev.time, self._pool.npus)
                self._now = ev.time
                logger.debug("Processing %s", ev)

                if ev.kind is EventKind.ARRIVAL:
                    self._on_arrival(ev)
                elif ev.kind is EventKind.COMPLETION:
                    self._on_completion(ev)
                else:
                    raise ValueError(f"Unknown event kind: {ev.kind}")

                self._stats.on_event()
                if self.status_interval > 0 and self._stats.processed_events % self.status_interval == 0:
                    self._log_status()
        finally:
            self._running = False
            self._stats.stop_wall_clock()

        self.log_summary()
        return self.snapshot()

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            current_time=self._now,
            waiting_tasks=list(self._waiting),
            completed_tasks=list(self._completed),
            running={tid: a.npu_ids for tid, a in self._allocations.items()},
            pool_statistics=self._pool.statistics(),
            simulation_statistics=self._stats.copy(),
        )

    def reset(self) -> None:
        if self._running:
            raise RuntimeError("Cannot reset a running simulation")
        self._queue.clear()
        self._pool.reset()
        self._stats.reset()
        self._now = SimTime.ZERO
        self._waiting.clear()
        self._completed.clear()
        self._allocations.clear()
        self._history.clear()
        self._seen_ids.clear()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_arrival(self, ev: Event) -> None:
        task = ev.task
        logger.debug("Task %s arrived (demands %d NPUs)", task.task_id, task.npu_demand)
        self._waiting.append(task)
        self._admit_waiting()

    def _on_completion(self, ev: Event) -> None:
        task = ev.task
        self._pool.deallocate_for_task(task, ev.npu_ids)
        self._allocations.pop(task.task_id, None)
        self._completed.append(task)
        self._stats.on_task_completed(task, self._now)
        logger.debug("Task %s completed, released %s", task.task_id, list(ev.npu_ids))
        self._admit_waiting()

    def _admit_waiting(self) -> None:
        """
        Admission cycle. Every pass either admits at least one task (which
        leaves the waiting list for good) or admits none and ends the cycle,
        so there are at most ``len(waiting) + 1`` passes.
        """
        while self._waiting:
            self._stats.on_admission_pass()
            committed = self._pool.allocate_for_waiting_tasks(self._waiting)
            if not committed:
                return

            admitted = set(committed)
            for task in [t for t in self._waiting if t.task_id in admitted]:
                npu_ids = tuple(committed[task.task_id])
                allocation = Allocation(task, npu_ids, self._now)
                self._allocations[task.task_id] = allocation
                self._history.append(allocation)
                self._stats.on_task_accepted(task, self._now)
                self._queue.add(Event.completion(self._now + task.duration, task, npu_ids))
                logger.debug("Task %s accepted on %s", task.task_id, list(npu_ids))
            self._waiting = [t for t in self._waiting if t.task_id not in admitted]

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _log_status(self) -> None:
        s = self._stats
        logger.info(
            "t=%s events=%d accepted=%d completed=%d waiting=%d pool=%s remaining_events=%d",
            self._now, s.processed_events, s.accepted_tasks, s.completed_tasks,
            len(self._waiting), self._pool.statistics(), len(self._queue),
        )

    def log_summary(self) -> None:
        s = self._stats
        pool = self._pool.statistics()
        logger.info("Simulation finished at t=%s after %d events (%.1f ms wall)",
                    self._now, s.processed_events, s.wall_duration_ms())
        logger.info("Tasks: total=%d accepted=%d completed=%d waiting=%d acceptance=%.2f%%",
                    s.total_tasks, s.accepted_tasks, s.completed_tasks,
                    len(self._waiting), s.acceptance_rate() * 100)
        logger.info("Response time: avg=%s min=%s max=%s",
                    s.average_response_time(), s.min_response_time(), s.max_response_time())
        logger.info("Pool: %s, strategy=%s", pool, self._pool.strategy.name)
