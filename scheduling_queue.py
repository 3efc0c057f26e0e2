"""
Scheduling Queue Module for the MLFQ Scheduler Simulator

A ProcessQueue is a FIFO of processes with a fixed time quantum, a priority
level and a queue type. The scheduler owns one blocking queue and one CPU
queue per priority level.

Each call to do_cpu_work / do_blocking_work services the process at the head
of the queue for at most min(time, quantum) units and then reports what the
scheduler has to do with it through a synchronous interrupt:

    CPU queue                                 Blocking queue
    ---------                                 --------------
    CPU done, blocking left -> BLOCKED        blocking done   -> READY
    CPU done, nothing left  -> (terminated)   quantum expired -> LOWER_PRIORITY
    full quantum used       -> LOWER_PRIORITY
    time ran out first      -> READY

The serviced process is always dequeued first; only the interrupt decides
where it goes next.

Author: Student
Date: December 2024
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional
import logging

from config import QueueType, SchedulerInterrupt
from process import Process
from validators import (
    EmptyQueueError,
    QueueTypeError,
    DuplicateMembershipError,
    require_positive,
    require_non_negative
)

logger = logging.getLogger(__name__)


class InterruptHandler(ABC):
    """Receiver of the interrupts raised by a ProcessQueue."""

    @abstractmethod
    def handle_interrupt(self, queue: 'ProcessQueue', process: Process,
                         interrupt: SchedulerInterrupt) -> None:
        """Move `process`, just serviced by `queue`, according to `interrupt`."""
        pass


@dataclass
class WorkResult:
    """
    What happened during one service call.

    The interrupt (if any) has already been delivered when this is returned.
    """
    process: Process
    queue_type: QueueType
    priority_level: int
    units: int
    interrupt: Optional[SchedulerInterrupt] = None
    terminated: bool = False


class ProcessQueue:
    """
    FIFO queue of processes serviced with a fixed time quantum.

    Attributes:
        scheduler: InterruptHandler that receives this queue's interrupts
        quantum: Maximum time units granted per dispatch
        priority_level: Level of a CPU queue (0 = highest); a sentinel for
            the blocking queue
        queue_type: QueueType.CPU_QUEUE or QueueType.BLOCKING_QUEUE
        processes: Queued processes, head first
    """

    def __init__(self, scheduler: InterruptHandler, quantum: int,
                 priority_level: int, queue_type: QueueType):
        self.scheduler = scheduler
        self.quantum = require_positive(quantum, "quantum")
        self.priority_level = priority_level
        self.queue_type = queue_type
        self.processes: Deque[Process] = deque()

    @property
    def name(self) -> str:
        if self.queue_type == QueueType.BLOCKING_QUEUE:
            return "BlockingQueue"
        return f"CPUQueue[{self.priority_level}]"

    def __repr__(self) -> str:
        return (f"ProcessQueue(name={self.name}, quantum={self.quantum}, "
                f"pids={[p.pid for p in self.processes]})")

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    def __contains__(self, process: Process) -> bool:
        return any(p.pid == process.pid for p in self.processes)

    # =========================================================================
    # Queue Operations
    # =========================================================================

    def enqueue(self, process: Process) -> Process:
        """
        Append a process to the tail of the queue.

        Raises:
            DuplicateMembershipError: If a process with the same PID is queued here
        """
        if process in self:
            raise DuplicateMembershipError(process.pid, self.name)

        self.processes.append(process)
        if self.queue_type == QueueType.BLOCKING_QUEUE:
            process.set_blocked()
        else:
            process.set_ready()
        return process

    def dequeue(self) -> Process:
        """
        Remove and return the process at the head of the queue.

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if not self.processes:
            raise EmptyQueueError(self.name)
        return self.processes.popleft()

    def peek(self) -> Optional[Process]:
        """Head of the queue without removing it, or None."""
        return self.processes[0] if self.processes else None

    def is_empty(self) -> bool:
        return len(self.processes) == 0

    def remove_process(self, process: Process) -> bool:
        """
        Remove the process with the same PID if it is queued here.

        Returns:
            True if it was found and removed
        """
        for index, queued in enumerate(self.processes):
            if queued.pid == process.pid:
                del self.processes[index]
                return True
        return False

    def get_queue_type(self) -> QueueType:
        return self.queue_type

    def get_priority_level(self) -> int:
        return self.priority_level

    # =========================================================================
    # Work
    # =========================================================================

    def emit_interrupt(self, process: Process, interrupt: SchedulerInterrupt) -> None:
        """Report an interrupt for `process` to the owning scheduler."""
        logger.debug(f"{self.name}: P{process.pid} raised {interrupt.value}")
        self.scheduler.handle_interrupt(self, process, interrupt)

    def do_blocking_work(self, time: int) -> WorkResult:
        """
        Service the head process's blocking need.

        Args:
            time: Time available this iteration; capped by the quantum

        Returns:
            WorkResult describing the dispatch
        """
        if self.queue_type != QueueType.BLOCKING_QUEUE:
            raise QueueTypeError("do_blocking_work", self.queue_type)
        require_non_negative(time, "time")

        process = self.dequeue()
        process.set_running()
        units = min(time, self.quantum)

        if process.perform_blocking_work(units):
            interrupt = SchedulerInterrupt.PROCESS_READY
        else:
            interrupt = SchedulerInterrupt.LOWER_PRIORITY

        self.emit_interrupt(process, interrupt)
        return WorkResult(process, self.queue_type, self.priority_level, units, interrupt)

    def do_cpu_work(self, time: int) -> WorkResult:
        """
        Run the head process on the CPU.

        The checks are ordered: a finished CPU burst with blocking work left
        blocks before anything else; a finished process with nothing left
        terminates; a process that used its whole quantum is demoted; one that
        ran out of time before the quantum ended is ready again.

        Args:
            time: Time available this iteration; capped by the quantum

        Returns:
            WorkResult describing the dispatch
        """
        if self.queue_type != QueueType.CPU_QUEUE:
            raise QueueTypeError("do_cpu_work", self.queue_type)
        require_non_negative(time, "time")

        process = self.dequeue()
        process.set_running()
        units = min(time, self.quantum)

        cpu_done = process.perform_cpu_work(units)

        if cpu_done and process.needs_blocking():
            interrupt = SchedulerInterrupt.PROCESS_BLOCKED
        elif cpu_done:
            logger.debug(f"{self.name}: P{process.pid} finished its CPU need")
            return WorkResult(process, self.queue_type, self.priority_level, units, terminated=True)
        elif units >= self.quantum:
            interrupt = SchedulerInterrupt.LOWER_PRIORITY
        else:
            interrupt = SchedulerInterrupt.PROCESS_READY

        self.emit_interrupt(process, interrupt)
        return WorkResult(process, self.queue_type, self.priority_level, units, interrupt)
