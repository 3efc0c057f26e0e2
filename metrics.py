"""
Metrics Module for the MLFQ Scheduler Simulator

Counters kept by the scheduler while it runs, and the per-process and
system-wide metrics computed once a run is over.

Metrics:
- Turnaround Time = Completion Time - Arrival Time
- Response Time   = First Dispatch - Arrival Time
- Waiting Time    = Turnaround Time - Service Time (never below zero)
- Slowdown        = Turnaround Time / Service Time
- Throughput      = Completed Processes / Total Time

Author: Student
Date: December 2024
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from config import QueueType, SchedulerInterrupt
from process import Process
from utils import calculate_mean, calculate_std_dev, calculate_jains_fairness_index

if TYPE_CHECKING:
    from scheduling_queue import WorkResult


# =============================================================================
# SCHEDULER COUNTERS
# =============================================================================

@dataclass
class SchedulerMetrics:
    """Counters updated by the scheduler during a run."""
    admissions: int = 0
    dispatches: int = 0
    idle_dispatches: int = 0    # Dispatches granted zero time units
    completions: int = 0
    demotions: int = 0
    cpu_time_granted: int = 0
    blocking_time_granted: int = 0
    interrupts: Dict[str, int] = field(
        default_factory=lambda: {i.value: 0 for i in SchedulerInterrupt}
    )
    dispatches_per_queue: Dict[str, int] = field(default_factory=dict)

    def record_dispatch(self, result: 'WorkResult') -> None:
        self.dispatches += 1
        if result.units == 0:
            self.idle_dispatches += 1

        if result.queue_type == QueueType.BLOCKING_QUEUE:
            key = "blocking"
            self.blocking_time_granted += result.units
        else:
            key = f"level_{result.priority_level}"
            self.cpu_time_granted += result.units
        self.dispatches_per_queue[key] = self.dispatches_per_queue.get(key, 0) + 1

    def record_interrupt(self, interrupt: SchedulerInterrupt) -> None:
        self.interrupts[interrupt.value] += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'admissions': self.admissions,
            'dispatches': self.dispatches,
            'idle_dispatches': self.idle_dispatches,
            'completions': self.completions,
            'demotions': self.demotions,
            'cpu_time_granted': self.cpu_time_granted,
            'blocking_time_granted': self.blocking_time_granted,
            'interrupts': dict(self.interrupts),
            'dispatches_per_queue': dict(self.dispatches_per_queue)
        }


# =============================================================================
# PROCESS AND SYSTEM METRICS
# =============================================================================

@dataclass
class ProcessMetrics:
    """Metrics for one finished (or unfinished) process."""
    pid: int
    service_time: int
    arrival_time: Optional[int]
    completion_time: Optional[int]
    turnaround_time: Optional[int]
    response_time: Optional[int]
    waiting_time: Optional[int]
    dispatch_count: int
    demotion_count: int

    @property
    def slowdown(self) -> Optional[float]:
        if self.turnaround_time is None:
            return None
        if self.service_time == 0:
            return 1.0
        return self.turnaround_time / self.service_time

    @classmethod
    def from_process(cls, process: Process) -> 'ProcessMetrics':
        turnaround = process.get_turnaround_time()
        waiting = None
        if turnaround is not None:
            waiting = max(0, turnaround - process.get_service_time())
        return cls(
            pid=process.pid,
            service_time=process.get_service_time(),
            arrival_time=process.arrival_time,
            completion_time=process.completion_time,
            turnaround_time=turnaround,
            response_time=process.get_response_time(),
            waiting_time=waiting,
            dispatch_count=process.dispatch_count,
            demotion_count=process.demotion_count
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pid': self.pid,
            'service_time': self.service_time,
            'arrival_time': self.arrival_time,
            'completion_time': self.completion_time,
            'turnaround_time': self.turnaround_time,
            'response_time': self.response_time,
            'waiting_time': self.waiting_time,
            'slowdown': self.slowdown,
            'dispatch_count': self.dispatch_count,
            'demotion_count': self.demotion_count
        }


@dataclass
class SystemMetrics:
    """Aggregated metrics for a whole run."""
    total_processes: int = 0
    completed_processes: int = 0
    total_time: int = 0

    avg_turnaround_time: float = 0.0
    std_turnaround_time: float = 0.0
    avg_waiting_time: float = 0.0
    avg_response_time: float = 0.0
    max_response_time: float = 0.0
    avg_slowdown: float = 0.0
    throughput: float = 0.0
    jains_fairness_index: float = 1.0

    total_demotions: int = 0
    total_dispatches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_processes': self.total_processes,
            'completed_processes': self.completed_processes,
            'total_time': self.total_time,
            'avg_turnaround_time': round(self.avg_turnaround_time, 3),
            'std_turnaround_time': round(self.std_turnaround_time, 3),
            'avg_waiting_time': round(self.avg_waiting_time, 3),
            'avg_response_time': round(self.avg_response_time, 3),
            'max_response_time': round(self.max_response_time, 3),
            'avg_slowdown': round(self.avg_slowdown, 3),
            'throughput': round(self.throughput, 6),
            'jains_fairness_index': round(self.jains_fairness_index, 4),
            'total_demotions': self.total_demotions,
            'total_dispatches': self.total_dispatches
        }


class MetricsCalculator:
    """Builds ProcessMetrics and SystemMetrics from a finished run."""

    def __init__(self):
        self.process_metrics: List[ProcessMetrics] = []
        self.system_metrics: Optional[SystemMetrics] = None

    def reset(self) -> None:
        self.process_metrics = []
        self.system_metrics = None

    def calculate(self, processes: List[Process],
                  scheduler_metrics: SchedulerMetrics = None,
                  total_time: int = 0) -> SystemMetrics:
        """
        Compute metrics for a list of processes.

        Args:
            processes: Every process handed to the scheduler
            scheduler_metrics: Counters from the scheduler (optional)
            total_time: Virtual time the run took

        Returns:
            SystemMetrics for the run
        """
        self.process_metrics = [ProcessMetrics.from_process(p) for p in processes]
        finished = [m for m in self.process_metrics if m.turnaround_time is not None]

        turnarounds = [m.turnaround_time for m in finished]
        waits = [m.waiting_time for m in finished]
        slowdowns = [m.slowdown for m in finished]
        responses = [m.response_time for m in self.process_metrics if m.response_time is not None]

        metrics = SystemMetrics(
            total_processes=len(processes),
            completed_processes=len(finished),
            total_time=total_time,
            avg_turnaround_time=calculate_mean(turnarounds),
            std_turnaround_time=calculate_std_dev(turnarounds),
            avg_waiting_time=calculate_mean(waits),
            avg_response_time=calculate_mean(responses),
            max_response_time=float(max(responses)) if responses else 0.0,
            avg_slowdown=calculate_mean(slowdowns),
            throughput=len(finished) / total_time if total_time > 0 else 0.0,
            jains_fairness_index=calculate_jains_fairness_index(slowdowns)
        )

        if scheduler_metrics is not None:
            metrics.total_demotions = scheduler_metrics.demotions
            metrics.total_dispatches = scheduler_metrics.dispatches

        self.system_metrics = metrics
        return metrics
