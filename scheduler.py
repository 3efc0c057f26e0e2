"""
Scheduler Module for the MLFQ Scheduler Simulator

The Scheduler owns a single blocking queue and one CPU queue per priority
level (level 0 = highest priority, shortest quantum). It runs the dispatch
loop and implements the interrupt handling that moves processes between
queues.

Dispatch rules:
1. Blocking work has strict priority: while the blocking queue holds a
   process, no CPU work is done.
2. Among CPU queues, the first non-empty queue by level is serviced. Lower
   levels only run once every higher level has drained; interrupts demote
   CPU-heavy processes so that eventually happens.

Interrupt rules:
- PROCESS_BLOCKED -> blocking queue
- PROCESS_READY   -> one level down if still queued in its source CPU queue
                     (stays put on the lowest level), otherwise re-admitted
                     like a new process
- LOWER_PRIORITY  -> blocking queue stays on the blocking queue; CPU queues
                     move one level down, floor at the lowest level

Author: Student
Date: December 2024
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Any
import logging

from config import (
    QueueType,
    SchedulerInterrupt,
    SchedulerConfig,
    BLOCKING_QUEUE_PRIORITY_LEVEL,
    DEFAULT_SCHEDULER_CONFIG
)
from clock import WallClock
from metrics import SchedulerMetrics
from process import Process
from scheduling_queue import InterruptHandler, ProcessQueue, WorkResult
from validators import (
    DuplicateMembershipError,
    UnknownInterruptError,
    ValidationError,
    ensure_valid_config,
    require_in_range
)

logger = logging.getLogger(__name__)


@dataclass
class TraceEvent:
    """One dispatch on the scheduler's virtual timeline."""
    start: int
    end: int
    pid: int
    queue_name: str
    priority_level: int
    units: int
    outcome: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start': self.start,
            'end': self.end,
            'pid': self.pid,
            'queue': self.queue_name,
            'priority_level': self.priority_level,
            'units': self.units,
            'outcome': self.outcome
        }


class Scheduler(InterruptHandler):
    """
    Multi-Level Feedback Queue scheduler.

    Usage:
        scheduler = Scheduler(clock=VirtualClock(tick=50))
        for process in processes:
            scheduler.add_new_process(process)
        scheduler.run()

    Attributes:
        config: Queue layout
        clock: Last clock reading; each iteration works for (now - clock)
        blocking_queue: The single blocking queue
        running_queues: CPU queues, index = priority level
        metrics: Dispatch and interrupt counters
        trace: Dispatches with non-zero work, in order (if enabled)
    """

    def __init__(self, config: SchedulerConfig = None,
                 clock: Optional[Callable[[], int]] = None):
        self.config = ensure_valid_config(config or DEFAULT_SCHEDULER_CONFIG)
        self._clock_source = clock or WallClock()
        self.clock = self._clock_source()
        self.start_clock = self.clock

        self.blocking_queue = ProcessQueue(
            self,
            self.config.blocking_quantum,
            BLOCKING_QUEUE_PRIORITY_LEVEL,
            QueueType.BLOCKING_QUEUE
        )
        # Initialize all the CPU running queues
        self.running_queues: List[ProcessQueue] = [
            ProcessQueue(self, self.config.get_quantum(level), level, QueueType.CPU_QUEUE)
            for level in range(self.config.priority_levels)
        ]

        self.metrics = SchedulerMetrics()
        self.trace: List[TraceEvent] = []
        self.iterations = 0
        self.processes: Dict[int, Process] = {}

    @property
    def lowest_priority_level(self) -> int:
        return len(self.running_queues) - 1

    @property
    def elapsed(self) -> int:
        """Time elapsed since the scheduler was created."""
        return self.clock - self.start_clock

    # =========================================================================
    # Admission
    # =========================================================================

    def add_new_process(self, process: Process) -> ProcessQueue:
        """
        Admit a process: blocking need -> blocking queue, else CPU level 0.

        Returns:
            The queue the process was placed in
        """
        if process.arrival_time is None:
            process.arrival_time = self.elapsed
        self.processes[process.pid] = process
        self.metrics.admissions += 1

        queue = self._admit(process)
        logger.debug(f"Admitted P{process.pid} to {queue.name} at t={self.elapsed}")
        return queue

    def _admit(self, process: Process) -> ProcessQueue:
        if process.needs_blocking():
            target = self.blocking_queue
        else:
            target = self.running_queues[0]
        self._place(target, process)
        return target

    def _place(self, queue: ProcessQueue, process: Process) -> None:
        """Enqueue `process`, checking it is not already queued anywhere."""
        if self.config.check_membership:
            for existing in self.get_all_queues():
                if process in existing:
                    raise DuplicateMembershipError(process.pid, existing.name)
        queue.enqueue(process)

    # =========================================================================
    # Dispatch Loop
    # =========================================================================

    def run(self) -> None:
        """Dispatch until every queue is empty."""
        logger.info(
            f"Scheduler started with {len(self.processes)} processes, "
            f"quanta={self.config.get_quantums()}, blocking quantum={self.config.blocking_quantum}"
        )
        while not self.all_queues_empty():
            self.step()
        logger.info(
            f"Scheduler finished after {self.iterations} iterations, "
            f"t={self.elapsed}, completed={self.metrics.completions}"
        )

    def step(self) -> Optional[WorkResult]:
        """
        One iteration of the dispatch loop.

        Returns:
            WorkResult of the serviced queue, or None if all queues were empty
        """
        now = self._clock_source()
        work_time = now - self.clock
        self.clock = now
        self.iterations += 1

        start = self.elapsed - work_time

        if not self.blocking_queue.is_empty():
            result = self.blocking_queue.do_blocking_work(work_time)
        else:
            queue = self._first_non_empty_cpu_queue()
            if queue is None:
                return None
            result = queue.do_cpu_work(work_time)

        self._record(result, start)
        return result

    def _first_non_empty_cpu_queue(self) -> Optional[ProcessQueue]:
        for queue in self.running_queues:
            if not queue.is_empty():
                return queue
        return None

    def _record(self, result: WorkResult, start: int) -> None:
        """Update process timing, counters and the trace after a dispatch."""
        process = result.process
        if process.start_time is None:
            process.start_time = start

        self.metrics.record_dispatch(result)

        if result.terminated:
            process.set_completed(start + result.units)
            self.metrics.completions += 1
            logger.info(f"P{process.pid} completed at t={process.completion_time}")
            outcome = "TERMINATED"
        else:
            outcome = result.interrupt.value

        if self.config.record_trace and result.units > 0:
            if result.queue_type == QueueType.BLOCKING_QUEUE:
                queue_name = self.blocking_queue.name
            else:
                queue_name = self.running_queues[result.priority_level].name
            self.trace.append(TraceEvent(
                start=start,
                end=start + result.units,
                pid=process.pid,
                queue_name=queue_name,
                priority_level=result.priority_level,
                units=result.units,
                outcome=outcome
            ))

    def all_queues_empty(self) -> bool:
        """True iff the blocking queue and every CPU queue are empty."""
        if not self.blocking_queue.is_empty():
            return False
        return all(queue.is_empty() for queue in self.running_queues)

    # =========================================================================
    # Interrupt Handling
    # =========================================================================

    def handle_interrupt(self, queue: ProcessQueue, process: Process,
                         interrupt: SchedulerInterrupt) -> None:
        """
        Move `process` after `queue` serviced it.

        The process is first removed from `queue` if it is still there; queues
        normally dequeue before raising, so it usually is not.

        Raises:
            UnknownInterruptError: If `interrupt` is not a SchedulerInterrupt
        """
        if not isinstance(interrupt, SchedulerInterrupt):
            raise UnknownInterruptError(interrupt)

        was_present = queue.remove_process(process)
        self.metrics.record_interrupt(interrupt)

        if interrupt == SchedulerInterrupt.PROCESS_BLOCKED:
            target = self.blocking_queue

        elif interrupt == SchedulerInterrupt.PROCESS_READY:
            if was_present and queue.get_queue_type() == QueueType.CPU_QUEUE:
                if queue.get_priority_level() < self.lowest_priority_level:
                    target = self.running_queues[queue.get_priority_level() + 1]
                else:
                    target = queue
            else:
                target = self._admit(process)
                logger.debug(f"P{process.pid} ready, re-admitted to {target.name}")
                return

        elif interrupt == SchedulerInterrupt.LOWER_PRIORITY:
            if queue.get_queue_type() == QueueType.BLOCKING_QUEUE:
                target = queue
            elif queue.get_priority_level() == self.lowest_priority_level:
                target = queue
            else:
                target = self.running_queues[queue.get_priority_level() + 1]
                process.demotion_count += 1
                self.metrics.demotions += 1

        else:
            raise UnknownInterruptError(interrupt)

        self._place(target, process)
        logger.debug(f"P{process.pid} {interrupt.value}: {queue.name} -> {target.name}")

    # =========================================================================
    # Inspection
    # =========================================================================

    def get_blocking_queue(self) -> ProcessQueue:
        return self.blocking_queue

    def get_cpu_queue(self, priority_level: int) -> ProcessQueue:
        """CPU queue at `priority_level` (0 = highest priority)."""
        if not isinstance(priority_level, int):
            raise ValidationError("priority_level must be an integer", "priority_level", priority_level)
        require_in_range(priority_level, 0, self.lowest_priority_level, "priority_level")
        return self.running_queues[priority_level]

    def get_all_queues(self) -> List[ProcessQueue]:
        """Blocking queue first, then the CPU queues by level."""
        return [self.blocking_queue] + self.running_queues

    def get_queue_sizes(self) -> Dict[str, int]:
        return {queue.name: len(queue) for queue in self.get_all_queues()}

    def find_process(self, process: Process) -> Optional[ProcessQueue]:
        """Queue currently holding `process`, or None."""
        for queue in self.get_all_queues():
            if process in queue:
                return queue
        return None

    def verify_membership(self) -> bool:
        """
        Check that no PID is queued twice across all queues.

        Raises:
            DuplicateMembershipError: On the first duplicate found
        """
        seen: Dict[int, str] = {}
        for queue in self.get_all_queues():
            for process in queue:
                if process.pid in seen:
                    raise DuplicateMembershipError(process.pid, f"{seen[process.pid]} and {queue.name}")
                seen[process.pid] = queue.name
        return True

    def get_statistics(self) -> Dict[str, Any]:
        """Get scheduler statistics."""
        return {
            'elapsed': self.elapsed,
            'iterations': self.iterations,
            'queue_sizes': self.get_queue_sizes(),
            'quantums': self.config.get_quantums(),
            'blocking_quantum': self.config.blocking_quantum,
            **self.metrics.to_dict()
        }
