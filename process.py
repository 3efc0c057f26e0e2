"""
Process Module for the MLFQ Scheduler Simulator

This module defines the Process class which represents a unit of work handed
to the scheduler, and the ProcessGenerator that builds synthetic workloads.

Key OS Concepts Demonstrated:
- Process Control Block (PCB): Data structure storing process information
- CPU bursts vs. blocking (I/O) bursts
- Process States: NEW, READY, RUNNING, BLOCKED, COMPLETED

The scheduler only relies on a small contract:
- perform_cpu_work(units) -> True once the CPU need is exhausted
- perform_blocking_work(units) -> True once the blocking need is exhausted
- needs_blocking() -> True while blocking work remains
- pid, used for identity

Author: Student
Date: December 2024
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
import random

from config import (
    ProcessState,
    SimulationConfig,
    DEFAULT_SIMULATION_CONFIG
)
from validators import ProcessError, require_non_negative


@dataclass
class Process:
    """
    Represents a process in the scheduler simulation.

    Attributes:
        pid (int): Unique process identifier
        cpu_time_needed (int): CPU time still needed (decreases as the process runs)
        blocking_time_needed (int): Blocking time still needed (0 = never blocks)
        state (ProcessState): Current state of the process
        arrival_time (Optional[int]): Virtual time the scheduler admitted the process
        start_time (Optional[int]): Virtual time of the first dispatch
        completion_time (Optional[int]): Virtual time the process terminated
        dispatch_count (int): Number of times a queue serviced the process
        demotion_count (int): Number of LOWER_PRIORITY interrupts received
    """

    pid: int

    # Remaining needs
    cpu_time_needed: int = 10
    blocking_time_needed: int = 0

    # Initial needs, kept for metrics
    cpu_time_total: int = field(init=False)
    blocking_time_total: int = field(init=False)

    state: ProcessState = ProcessState.NEW

    # Timing Metrics (set by the scheduler)
    arrival_time: Optional[int] = None
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    dispatch_count: int = 0
    demotion_count: int = 0

    def __post_init__(self):
        if not isinstance(self.pid, int):
            raise ProcessError("pid must be an integer", "pid", self.pid)
        if self.cpu_time_needed < 0:
            raise ProcessError("cpu_time_needed cannot be negative", "cpu_time_needed", self.cpu_time_needed)
        if self.blocking_time_needed < 0:
            raise ProcessError("blocking_time_needed cannot be negative", "blocking_time_needed",
                               self.blocking_time_needed)

        self.cpu_time_total = self.cpu_time_needed
        self.blocking_time_total = self.blocking_time_needed

    def __str__(self) -> str:
        return (
            f"Process[PID={self.pid}, State={self.state.name}, "
            f"CPU={self.cpu_time_needed}/{self.cpu_time_total}, "
            f"Blocking={self.blocking_time_needed}/{self.blocking_time_total}]"
        )

    def __repr__(self) -> str:
        return (
            f"Process(pid={self.pid}, cpu_time_needed={self.cpu_time_needed}, "
            f"blocking_time_needed={self.blocking_time_needed}, state={self.state})"
        )

    def __eq__(self, other: object) -> bool:
        """Processes are equal when their PIDs match."""
        if not isinstance(other, Process):
            return False
        return self.pid == other.pid

    def __hash__(self) -> int:
        return hash(self.pid)

    # =========================================================================
    # Work Methods
    # =========================================================================

    def perform_cpu_work(self, units: int) -> bool:
        """
        Run the process on the CPU for at most `units` time units.

        Args:
            units: Time granted by the queue

        Returns:
            True if the CPU need is now fully satisfied
        """
        require_non_negative(units, "units")
        executed = min(units, self.cpu_time_needed)
        self.cpu_time_needed -= executed
        self.dispatch_count += 1
        return self.cpu_time_needed == 0

    def perform_blocking_work(self, units: int) -> bool:
        """
        Service the process's blocking (I/O) need for at most `units` time units.

        Args:
            units: Time granted by the blocking queue

        Returns:
            True if the blocking need is now fully satisfied
        """
        require_non_negative(units, "units")
        executed = min(units, self.blocking_time_needed)
        self.blocking_time_needed -= executed
        self.dispatch_count += 1
        return self.blocking_time_needed == 0

    def needs_blocking(self) -> bool:
        """True while the process still has blocking work to do."""
        return self.blocking_time_needed > 0

    # =========================================================================
    # State Management Methods
    # =========================================================================

    def set_ready(self) -> None:
        """Process was placed in a CPU queue."""
        self.state = ProcessState.READY

    def set_blocked(self) -> None:
        """Process was placed in the blocking queue."""
        self.state = ProcessState.BLOCKED

    def set_running(self, current_time: Optional[int] = None) -> None:
        """
        Process was dequeued for work.

        Args:
            current_time: Virtual time of the dispatch; recorded as the start
                time on the first dispatch. Queues do not know the time and
                pass nothing.
        """
        self.state = ProcessState.RUNNING
        if self.start_time is None and current_time is not None:
            self.start_time = current_time

    def set_completed(self, current_time: int) -> None:
        """Process terminated; it is in no queue any more."""
        self.state = ProcessState.COMPLETED
        self.completion_time = current_time

    # =========================================================================
    # Query Methods
    # =========================================================================

    def is_finished(self) -> bool:
        """True when neither CPU nor blocking work remains."""
        return self.cpu_time_needed == 0 and self.blocking_time_needed == 0

    def is_completed(self) -> bool:
        return self.state == ProcessState.COMPLETED

    def get_service_time(self) -> int:
        """Total work (CPU plus blocking) the process asked for."""
        return self.cpu_time_total + self.blocking_time_total

    def get_progress(self) -> float:
        """
        Get execution progress as a fraction of the total work.

        Returns:
            Float between 0.0 and 1.0
        """
        total = self.get_service_time()
        if total == 0:
            return 1.0
        remaining = self.cpu_time_needed + self.blocking_time_needed
        return (total - remaining) / total

    def get_turnaround_time(self) -> Optional[int]:
        """
        Turnaround Time = Completion Time - Arrival Time

        Returns:
            Turnaround time if process is completed, None otherwise
        """
        if self.completion_time is not None and self.arrival_time is not None:
            return self.completion_time - self.arrival_time
        return None

    def get_response_time(self) -> Optional[int]:
        """
        Response Time = First Dispatch Time - Arrival Time

        Returns:
            Response time if process has been dispatched, None otherwise
        """
        if self.start_time is not None and self.arrival_time is not None:
            return self.start_time - self.arrival_time
        return None

    def reset(self) -> None:
        """Restore the initial needs so the same workload can be rerun."""
        self.cpu_time_needed = self.cpu_time_total
        self.blocking_time_needed = self.blocking_time_total
        self.state = ProcessState.NEW
        self.arrival_time = None
        self.start_time = None
        self.completion_time = None
        self.dispatch_count = 0
        self.demotion_count = 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert process to dictionary for serialization or logging.

        Returns:
            Dictionary with all process information
        """
        return {
            'pid': self.pid,
            'cpu_time_total': self.cpu_time_total,
            'blocking_time_total': self.blocking_time_total,
            'cpu_time_needed': self.cpu_time_needed,
            'blocking_time_needed': self.blocking_time_needed,
            'state': self.state.name,
            'arrival_time': self.arrival_time,
            'start_time': self.start_time,
            'completion_time': self.completion_time,
            'dispatch_count': self.dispatch_count,
            'demotion_count': self.demotion_count,
            'turnaround_time': self.get_turnaround_time(),
            'response_time': self.get_response_time()
        }


# =============================================================================
# PROCESS GENERATOR
# =============================================================================

class ProcessGenerator:
    """
    Factory class for generating processes with random or specified attributes.

    This generator simulates workload creation: a mix of CPU-bound processes
    and processes that block for I/O before they compute.
    """

    def __init__(self, config: SimulationConfig = None, seed: Optional[int] = None):
        """
        Initialize the process generator with configuration.

        Args:
            config: SimulationConfig instance (uses default if None)
            seed: Random seed; falls back to config.seed
        """
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self._rng = random.Random(seed if seed is not None else self.config.seed)
        self._next_pid = 1  # Auto-incrementing PID counter

    def reset(self) -> None:
        """Reset the PID counter for a new simulation run."""
        self._next_pid = 1

    def generate_process(
        self,
        cpu_time: Optional[int] = None,
        blocking_time: Optional[int] = None
    ) -> Process:
        """
        Generate a single process with random or specified attributes.

        Args:
            cpu_time: Specific CPU need (random if None)
            blocking_time: Specific blocking need (random if None; 0 = never blocks)

        Returns:
            New Process instance
        """
        if cpu_time is None:
            cpu_time = self._rng.randint(self.config.min_cpu_time, self.config.max_cpu_time)

        if blocking_time is None:
            if self._rng.random() < self.config.blocking_probability:
                blocking_time = self._rng.randint(
                    self.config.min_blocking_time,
                    self.config.max_blocking_time
                )
            else:
                blocking_time = 0

        process = Process(
            pid=self._next_pid,
            cpu_time_needed=cpu_time,
            blocking_time_needed=blocking_time
        )

        self._next_pid += 1
        return process

    def generate_processes(self, count: Optional[int] = None) -> List[Process]:
        """
        Generate multiple processes.

        Args:
            count: Number of processes to generate (uses config default if None)

        Returns:
            List of Process instances in PID order
        """
        if count is None:
            count = self.config.num_processes

        return [self.generate_process() for _ in range(count)]

    def generate_cpu_bound_workload(self, count: int) -> List[Process]:
        """Processes that never block; long ones sink through the levels."""
        return [self.generate_process(blocking_time=0) for _ in range(count)]

    def generate_io_bound_workload(self, count: int) -> List[Process]:
        """Processes with short CPU needs that all block first."""
        processes = []
        for _ in range(count):
            cpu = self._rng.randint(self.config.min_cpu_time,
                                    max(self.config.min_cpu_time, self.config.max_cpu_time // 4))
            blocking = self._rng.randint(self.config.min_blocking_time, self.config.max_blocking_time)
            processes.append(self.generate_process(cpu_time=cpu, blocking_time=blocking))
        return processes

    def generate_predefined_test_set(self) -> List[Process]:
        """
        Generate a predefined set of processes for consistent testing.

        Returns:
            List of processes with known, predictable attributes
        """
        test_processes = [
            (5, 0),     # P1: finishes inside the level 0 quantum
            (25, 0),    # P2: demoted once
            (120, 0),   # P3: sinks to the lowest level
            (10, 30),   # P4: blocks first, then one short burst
            (40, 70),   # P5: blocking need spans two blocking quanta
            (8, 0),     # P6
            (60, 20),   # P7
            (15, 0),    # P8
        ]

        return [
            self.generate_process(cpu_time=cpu, blocking_time=blocking)
            for cpu, blocking in test_processes
        ]
