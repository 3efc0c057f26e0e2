"""
Configuration Module for the MLFQ Scheduler Simulator

This module contains all configuration constants and parameters used throughout
the simulation. Centralizing configuration makes it easy to adjust the queue
layout (number of levels, quanta) without modifying the scheduling logic.

In Operating Systems, MLFQ tuning is mostly a matter of configuration:
- How many priority levels exist
- How long each level's time slice is
- How long blocked (I/O) work is serviced per dispatch

Author: Student
Date: December 2024
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, Any, List, Optional


# =============================================================================
# ENUMERATIONS - Define categorical constants
# =============================================================================

class ProcessState(Enum):
    """
    Process states in the simulated lifecycle.

    - NEW: Process has been created but not admitted to the scheduler
    - READY: Process sits in one of the CPU queues
    - RUNNING: Process was dequeued and is receiving work
    - BLOCKED: Process sits in the blocking queue waiting for I/O work
    - COMPLETED: Process has no CPU or blocking need left
    """
    NEW = auto()
    READY = auto()
    RUNNING = auto()
    BLOCKED = auto()
    COMPLETED = auto()


class QueueType(Enum):
    """Kind of a scheduling queue. Fixed when the queue is built."""
    CPU_QUEUE = "CPU_QUEUE"
    BLOCKING_QUEUE = "BLOCKING_QUEUE"


class SchedulerInterrupt(Enum):
    """
    Interrupts a queue raises to its scheduler after servicing a process.

    - PROCESS_BLOCKED: CPU burst done, process now needs blocking work
    - PROCESS_READY: process is ready to (re-)enter CPU contention
    - LOWER_PRIORITY: process used its whole quantum without finishing
    """
    PROCESS_BLOCKED = "PROCESS_BLOCKED"
    PROCESS_READY = "PROCESS_READY"
    LOWER_PRIORITY = "LOWER_PRIORITY"


# =============================================================================
# SCHEDULER CONSTANTS
# =============================================================================

PRIORITY_LEVELS = 3
BASE_QUANTUM = 10           # Quantum of level 0
QUANTUM_STEP = 20           # Added per level: 10, 30, 50
BLOCKING_QUEUE_QUANTUM = 50
BLOCKING_QUEUE_PRIORITY_LEVEL = -1  # Blocking queue is not leveled


# =============================================================================
# SCHEDULER CONFIGURATION
# =============================================================================

@dataclass
class SchedulerConfig:
    """
    Queue layout of the MLFQ scheduler.

    Attributes:
        priority_levels: Number of CPU queues (index 0 = highest priority)
        base_quantum: Time quantum of the highest priority queue
        quantum_step: Quantum increase per lower priority level
        blocking_quantum: Time quantum of the blocking queue
        check_membership: Verify no process sits in two queues on every move
        record_trace: Keep a per-dispatch trace for charts and export
    """
    priority_levels: int = PRIORITY_LEVELS
    base_quantum: int = BASE_QUANTUM
    quantum_step: int = QUANTUM_STEP
    blocking_quantum: int = BLOCKING_QUEUE_QUANTUM

    check_membership: bool = True
    record_trace: bool = True

    def get_quantum(self, priority_level: int) -> int:
        """Quantum of the CPU queue at the given priority level."""
        return self.base_quantum + priority_level * self.quantum_step

    def get_quantums(self) -> List[int]:
        """Quanta of all CPU queues, highest priority first."""
        return [self.get_quantum(i) for i in range(self.priority_levels)]

    def validate(self) -> bool:
        """
        Validate configuration parameters.

        Returns:
            bool: True if configuration is valid

        Raises:
            ValueError: If any parameter is invalid
        """
        if self.priority_levels < 1:
            raise ValueError("priority_levels must be at least 1")

        if self.base_quantum < 1:
            raise ValueError("base_quantum must be at least 1")

        # Lower priority levels must get strictly longer slices
        if self.priority_levels > 1 and self.quantum_step < 1:
            raise ValueError("quantum_step must be at least 1")

        if self.blocking_quantum < 1:
            raise ValueError("blocking_quantum must be at least 1")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            'priority_levels': self.priority_levels,
            'base_quantum': self.base_quantum,
            'quantum_step': self.quantum_step,
            'blocking_quantum': self.blocking_quantum,
            'quantums': self.get_quantums(),
            'check_membership': self.check_membership,
            'record_trace': self.record_trace
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SchedulerConfig':
        """
        Create configuration from dictionary.

        Unknown keys (such as the derived 'quantums') are ignored.
        """
        config = cls()
        for key, value in data.items():
            if key in cls.__dataclass_fields__:
                setattr(config, key, value)
        return config


# =============================================================================
# SIMULATION CONFIGURATION
# =============================================================================

@dataclass
class SimulationConfig:
    """
    Workload and clocking configuration for a simulation run.

    Attributes:
        num_processes: Number of processes to generate
        min_cpu_time / max_cpu_time: Range of CPU time needed per process
        min_blocking_time / max_blocking_time: Range of blocking time for
            processes that block
        blocking_probability: Chance that a generated process needs blocking
        seed: Random seed for reproducible workloads (None = random)
        use_virtual_clock: Drive the scheduler with a VirtualClock instead of
            wall-clock milliseconds
        time_slice: Virtual time handed to each scheduler iteration
        max_steps: Abort the engine after this many iterations (None = no limit)
    """
    # Process Configuration
    num_processes: int = 10
    min_processes: int = 1
    max_processes: int = 1000

    # Process Generation Parameters
    min_cpu_time: int = 5
    max_cpu_time: int = 120
    min_blocking_time: int = 10
    max_blocking_time: int = 80
    blocking_probability: float = 0.3
    seed: Optional[int] = None

    # Time Configuration
    use_virtual_clock: bool = True
    time_slice: int = 50
    max_steps: Optional[int] = None

    def validate(self) -> bool:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid
        """
        if not (self.min_processes <= self.num_processes <= self.max_processes):
            raise ValueError(f"num_processes must be between {self.min_processes} and {self.max_processes}")

        if self.min_cpu_time < 0:
            raise ValueError("min_cpu_time cannot be negative")

        if self.min_cpu_time > self.max_cpu_time:
            raise ValueError("min_cpu_time cannot be greater than max_cpu_time")

        if self.min_blocking_time < 1:
            raise ValueError("min_blocking_time must be at least 1")

        if self.min_blocking_time > self.max_blocking_time:
            raise ValueError("min_blocking_time cannot be greater than max_blocking_time")

        if not (0.0 <= self.blocking_probability <= 1.0):
            raise ValueError("blocking_probability must be between 0 and 1")

        if self.time_slice < 1:
            raise ValueError("time_slice must be at least 1")

        if self.max_steps is not None and self.max_steps < 1:
            raise ValueError("max_steps must be positive when set")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            'num_processes': self.num_processes,
            'min_cpu_time': self.min_cpu_time,
            'max_cpu_time': self.max_cpu_time,
            'min_blocking_time': self.min_blocking_time,
            'max_blocking_time': self.max_blocking_time,
            'blocking_probability': self.blocking_probability,
            'seed': self.seed,
            'use_virtual_clock': self.use_virtual_clock,
            'time_slice': self.time_slice,
            'max_steps': self.max_steps
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Create configuration from dictionary."""
        config = cls()
        for key, value in data.items():
            if hasattr(config, key):
                setattr(config, key, value)
        return config


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

@dataclass
class LoggingConfig:
    """
    Configuration for the logging system.

    Logging is essential for:
    - Following a process through its queue transitions
    - Debugging interrupt handling
    - Analyzing simulation results
    """
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "simulation.log"
    level: str = "INFO"

    # Log format
    log_format: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # If True, per-dispatch DEBUG messages are emitted
    verbose: bool = False


# =============================================================================
# DEFAULT INSTANCES
# =============================================================================

DEFAULT_SCHEDULER_CONFIG = SchedulerConfig()
DEFAULT_SIMULATION_CONFIG = SimulationConfig()
DEFAULT_LOGGING_CONFIG = LoggingConfig()


# =============================================================================
# CONSTANTS
# =============================================================================

VERSION = "1.0.0"
APP_NAME = "MLFQ Scheduler Simulator"

INTERRUPT_DESCRIPTIONS = {
    SchedulerInterrupt.PROCESS_BLOCKED: "CPU burst finished with blocking work outstanding; moved to the blocking queue",
    SchedulerInterrupt.PROCESS_READY: "Ready for CPU contention; re-admitted (or moved one level down if still queued)",
    SchedulerInterrupt.LOWER_PRIORITY: "Used the whole quantum; demoted one level (floor at the lowest level)",
}
