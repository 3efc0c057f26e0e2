"""
Simulation Engine Module for the MLFQ Scheduler Simulator

This module provides the engine that ties together workload generation, the
scheduler, and metrics collection.

The simulation follows a step model:
1. Initialize: build the scheduler and admit every process
2. At each step:
   - The scheduler reads its clock and services one queue
   - A snapshot of all queue sizes is recorded
3. Continue until every queue is empty

With the default VirtualClock every step is handed exactly `time_slice`
units, so runs are reproducible for a given seed.

Author: Student
Date: December 2024
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Callable
from enum import Enum
import logging
import time

from config import (
    SchedulerConfig,
    SimulationConfig,
    DEFAULT_SCHEDULER_CONFIG,
    DEFAULT_SIMULATION_CONFIG
)
from clock import VirtualClock, WallClock
from metrics import MetricsCalculator, ProcessMetrics, SystemMetrics
from process import Process, ProcessGenerator
from scheduler import Scheduler, TraceEvent
from validators import (
    ConfigValidator,
    ConfigurationError,
    SimulationError,
    log_validation_result
)

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    """
    States of the simulation engine.

    IDLE -> RUNNING (first step)
    RUNNING -> COMPLETED (all queues empty)
    """
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class SimulationSnapshot:
    """Queue sizes after one scheduler iteration."""
    time: int
    blocking_queue_size: int
    cpu_queue_sizes: List[int]
    serviced_pid: Optional[int]
    completed_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'blocking_queue_size': self.blocking_queue_size,
            'cpu_queue_sizes': list(self.cpu_queue_sizes),
            'serviced_pid': self.serviced_pid,
            'completed_count': self.completed_count
        }


@dataclass
class SimulationResult:
    """
    Complete results of a simulation run.

    Contains all data needed for analysis, charts and export.
    """
    config: SimulationConfig
    scheduler_config: SchedulerConfig
    processes: List[Process]
    system_metrics: SystemMetrics
    process_metrics: List[ProcessMetrics]
    scheduler_statistics: Dict[str, Any]
    trace: List[TraceEvent] = field(default_factory=list)
    snapshots: List[SimulationSnapshot] = field(default_factory=list)
    total_time: int = 0
    iterations: int = 0
    execution_duration: float = 0.0  # Real wall-clock time

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export."""
        return {
            'config': self.config.to_dict(),
            'scheduler_config': self.scheduler_config.to_dict(),
            'total_time': self.total_time,
            'iterations': self.iterations,
            'execution_duration': round(self.execution_duration, 3),
            'system_metrics': self.system_metrics.to_dict() if self.system_metrics else {},
            'scheduler_statistics': self.scheduler_statistics,
            'processes': [m.to_dict() for m in self.process_metrics]
        }


class SimulationEngine:
    """
    Runs one MLFQ simulation.

    Usage:
        engine = SimulationEngine(config)
        engine.initialize()
        result = engine.run()
        # or for step-by-step:
        engine.initialize()
        while engine.step():
            pass
        result = engine.get_result()
    """

    def __init__(self, config: SimulationConfig = None,
                 scheduler_config: SchedulerConfig = None):
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self.scheduler_config = scheduler_config or DEFAULT_SCHEDULER_CONFIG

        self.scheduler: Optional[Scheduler] = None
        self.process_generator: Optional[ProcessGenerator] = None
        self.metrics_calculator = MetricsCalculator()

        self.all_processes: List[Process] = []
        self.snapshots: List[SimulationSnapshot] = []

        self.state = SimulationState.IDLE
        self.steps = 0

        self._on_step_callback: Optional[Callable] = None
        self._start_wall_time: float = 0
        self._end_wall_time: float = 0

    def set_callbacks(self, on_step: Callable = None):
        """
        Set callback functions for events.

        Args:
            on_step: Called with the SimulationSnapshot after each step
        """
        self._on_step_callback = on_step

    def _make_clock(self) -> Callable[[], int]:
        if self.config.use_virtual_clock:
            return VirtualClock(tick=self.config.time_slice)
        return WallClock()

    def initialize(self, processes: List[Process] = None,
                   clock: Callable[[], int] = None) -> None:
        """
        Build the scheduler and admit the workload.

        Args:
            processes: Pre-built processes (generated from config if None);
                they are reset to their initial needs first
            clock: Clock source override (VirtualClock or WallClock by config)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        validation = ConfigValidator.validate_simulation_config(self.config, self.scheduler_config)
        log_validation_result(validation, "SimulationConfig")
        if not validation.is_valid:
            raise ConfigurationError("; ".join(validation.errors))

        if processes is not None:
            self.all_processes = list(processes)
            for p in self.all_processes:
                p.reset()
        else:
            self.process_generator = ProcessGenerator(config=self.config)
            self.all_processes = self.process_generator.generate_processes(self.config.num_processes)

        self.scheduler = Scheduler(self.scheduler_config, clock=clock or self._make_clock())
        for process in self.all_processes:
            self.scheduler.add_new_process(process)

        self.snapshots = []
        self.metrics_calculator.reset()
        self.state = SimulationState.IDLE
        self.steps = 0

        logger.info(f"Simulation initialized with {len(self.all_processes)} processes")

    def step(self) -> bool:
        """
        Execute one scheduler iteration.

        Returns:
            True if the simulation should continue, False if done
        """
        if self.scheduler is None:
            raise SimulationError("Simulation not initialized")
        if self.state == SimulationState.COMPLETED:
            return False

        if self.state == SimulationState.IDLE:
            self.state = SimulationState.RUNNING
            self._start_wall_time = time.time()

        if self.scheduler.all_queues_empty():
            self._complete()
            return False

        if self.config.max_steps is not None and self.steps >= self.config.max_steps:
            raise SimulationError(
                "Simulation exceeded max_steps without finishing",
                "max_steps",
                self.config.max_steps
            )

        result = self.scheduler.step()
        self.steps += 1
        snapshot = self._record_snapshot(result.process.pid if result else None)

        if self._on_step_callback:
            self._on_step_callback(snapshot)

        if self.scheduler.all_queues_empty():
            self._complete()
            return False
        return True

    def _record_snapshot(self, serviced_pid: Optional[int]) -> SimulationSnapshot:
        snapshot = SimulationSnapshot(
            time=self.scheduler.elapsed,
            blocking_queue_size=len(self.scheduler.blocking_queue),
            cpu_queue_sizes=[len(q) for q in self.scheduler.running_queues],
            serviced_pid=serviced_pid,
            completed_count=self.scheduler.metrics.completions
        )
        self.snapshots.append(snapshot)
        return snapshot

    def _complete(self) -> None:
        self.state = SimulationState.COMPLETED
        self._end_wall_time = time.time()
        self.metrics_calculator.calculate(
            self.all_processes,
            self.scheduler.metrics,
            self.scheduler.elapsed
        )
        logger.info(
            f"Simulation complete: {self.scheduler.metrics.completions}/{len(self.all_processes)} "
            f"processes in t={self.scheduler.elapsed} ({self.steps} steps)"
        )

    def run(self) -> SimulationResult:
        """
        Run the simulation to completion.

        Returns:
            SimulationResult containing all data
        """
        if self.scheduler is None:
            self.initialize()

        while self.step():
            pass

        return self.get_result()

    def is_complete(self) -> bool:
        return self.state == SimulationState.COMPLETED

    def get_result(self) -> SimulationResult:
        """Collect the results of a completed run."""
        if not self.is_complete():
            raise SimulationError("Simulation has not completed yet")

        return SimulationResult(
            config=self.config,
            scheduler_config=self.scheduler_config,
            processes=list(self.all_processes),
            system_metrics=self.metrics_calculator.system_metrics,
            process_metrics=list(self.metrics_calculator.process_metrics),
            scheduler_statistics=self.scheduler.get_statistics(),
            trace=list(self.scheduler.trace),
            snapshots=list(self.snapshots),
            total_time=self.scheduler.elapsed,
            iterations=self.scheduler.iterations,
            execution_duration=self._end_wall_time - self._start_wall_time
        )
