"""
Validators Module for the MLFQ Scheduler Simulator

This module provides the exception hierarchy, configuration validation and
guard helpers used by the scheduler core and the simulation engine.

Error Categories:
1. Validation errors: bad configuration values, bad process attributes
2. Queue errors: dequeue on an empty queue, work on the wrong queue kind
3. Interrupt errors: an interrupt token the scheduler does not know
4. Invariant errors: a process sitting in two queues at once

All of these are programming errors. They are raised, never retried.

Author: Student
Date: December 2024
"""

import logging
from typing import Optional, Any, List, Union
from dataclasses import dataclass, field

from config import SchedulerConfig, SimulationConfig


# Configure logger
logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class SchedulerError(Exception):
    """Base exception for all simulator errors."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.field and self.value is not None:
            return f"{self.message} ('{self.field}'={self.value})"
        elif self.field:
            return f"{self.message} ('{self.field}')"
        return self.message


class ValidationError(SchedulerError):
    """Exception for invalid values."""

    def _format_message(self) -> str:
        if self.field and self.value is not None:
            return f"Validation error for '{self.field}' (value={self.value}): {self.message}"
        elif self.field:
            return f"Validation error for '{self.field}': {self.message}"
        return f"Validation error: {self.message}"


class ConfigurationError(ValidationError):
    """Exception for configuration-related validation errors."""
    pass


class ProcessError(ValidationError):
    """Exception for process-related validation errors."""
    pass


class SimulationError(SchedulerError):
    """Exception for simulation engine failures."""
    pass


class EmptyQueueError(SchedulerError):
    """Raised when dequeuing from an empty queue."""

    def __init__(self, queue_name: str):
        super().__init__("Cannot dequeue from an empty queue", field=queue_name)


class QueueTypeError(SchedulerError):
    """Raised when CPU work is requested on a blocking queue or vice versa."""

    def __init__(self, operation: str, queue_type: Any):
        self.operation = operation
        super().__init__(f"{operation} is not valid on this queue", field="queue_type", value=queue_type)


class UnknownInterruptError(SchedulerError):
    """Raised when the scheduler receives an unrecognized interrupt."""

    def __init__(self, interrupt: Any):
        self.interrupt = interrupt
        super().__init__("Unknown interrupt", field="interrupt", value=interrupt)


class DuplicateMembershipError(SchedulerError):
    """Raised when a process would end up in two queues at once."""

    def __init__(self, pid: int, queue_name: str):
        self.pid = pid
        self.queue_name = queue_name
        super().__init__(f"Process {pid} is already queued in {queue_name}", field="pid", value=pid)


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass
class ValidationResult:
    """
    Outcome of checking a config: hard errors plus advisory warnings.

    Truthy when there are no errors; warnings never make it falsy.
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    field_name: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def success(cls) -> 'ValidationResult':
        return cls(is_valid=True)

    @classmethod
    def failure(cls, error: str, field_name: str = None) -> 'ValidationResult':
        return cls(is_valid=False, errors=[error], field_name=field_name)

    def add_error(self, error: str):
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Fold `other` into this result (errors, warnings and validity)."""
        self.errors += other.errors
        self.warnings += other.warnings
        self.is_valid = self.is_valid and other.is_valid
        return self


# =============================================================================
# CONFIGURATION VALIDATORS
# =============================================================================

class ConfigValidator:
    """Validator for scheduler and simulation configuration."""

    # Absolute bounds for configuration values
    MIN_PRIORITY_LEVELS = 1
    MAX_PRIORITY_LEVELS = 16
    MIN_QUANTUM = 1
    MAX_QUANTUM = 10000
    MIN_PROCESSES = 1
    MAX_PROCESSES = 10000

    @classmethod
    def validate_scheduler_config(cls, config: SchedulerConfig) -> ValidationResult:
        """
        Validate the queue layout.

        Args:
            config: SchedulerConfig to validate

        Returns:
            ValidationResult with all errors and warnings
        """
        result = ValidationResult.success()

        result.merge(cls.validate_priority_levels(config.priority_levels))
        result.merge(cls.validate_quantum(config.base_quantum, "base_quantum"))
        result.merge(cls.validate_quantum(config.blocking_quantum, "blocking_quantum"))

        if config.priority_levels > 1 and config.quantum_step < 1:
            result.add_error(
                f"quantum_step must be at least 1 so lower levels get longer quanta, got {config.quantum_step}"
            )

        if result.is_valid:
            lowest = config.get_quantum(config.priority_levels - 1)
            if lowest > cls.MAX_QUANTUM:
                result.add_error(f"Lowest level quantum ({lowest}) exceeds {cls.MAX_QUANTUM}")

        if not config.check_membership:
            result.add_warning("Membership checks are disabled; duplicate queueing will go unnoticed")

        return result

    @classmethod
    def validate_simulation_config(cls, config: SimulationConfig,
                                   scheduler_config: SchedulerConfig = None) -> ValidationResult:
        """
        Validate a simulation run's workload and clock settings.

        When a scheduler config is given, also warns about time slices that
        never cover a full quantum (processes then bounce between levels
        through PROCESS_READY instead of being demoted).
        """
        result = ValidationResult.success()

        try:
            config.validate()
        except ValueError as e:
            result.add_error(str(e))

        if config.num_processes > cls.MAX_PROCESSES:
            result.add_error(f"num_processes must be at most {cls.MAX_PROCESSES}")

        if scheduler_config is not None and config.use_virtual_clock:
            lowest = scheduler_config.get_quantum(scheduler_config.priority_levels - 1)
            if config.time_slice < lowest:
                result.add_warning(
                    f"time_slice ({config.time_slice}) is shorter than the lowest level quantum "
                    f"({lowest}); processes on that level never use a full quantum"
                )

        if not config.use_virtual_clock and config.max_steps is None:
            result.add_warning("Wall-clock runs without max_steps cannot be bounded")

        return result

    @classmethod
    def validate_priority_levels(cls, value: int) -> ValidationResult:
        """Validate number of priority levels."""
        if not isinstance(value, int):
            return ValidationResult.failure(
                f"priority_levels must be an integer, got {type(value).__name__}",
                "priority_levels"
            )
        if value < cls.MIN_PRIORITY_LEVELS or value > cls.MAX_PRIORITY_LEVELS:
            return ValidationResult.failure(
                f"priority_levels must be between {cls.MIN_PRIORITY_LEVELS} and {cls.MAX_PRIORITY_LEVELS}, got {value}",
                "priority_levels"
            )
        return ValidationResult.success()

    @classmethod
    def validate_quantum(cls, value: int, name: str = "quantum") -> ValidationResult:
        """Validate a time quantum."""
        if not isinstance(value, int):
            return ValidationResult.failure(
                f"{name} must be an integer, got {type(value).__name__}",
                name
            )
        if value < cls.MIN_QUANTUM or value > cls.MAX_QUANTUM:
            return ValidationResult.failure(
                f"{name} must be between {cls.MIN_QUANTUM} and {cls.MAX_QUANTUM}, got {value}",
                name
            )
        return ValidationResult.success()


# =============================================================================
# GUARD FUNCTIONS
# =============================================================================

def require_positive(value: int, name: str) -> int:
    """Guard that requires a positive integer."""
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer", name, value)
    return value


def require_non_negative(value: int, name: str) -> int:
    """Guard that requires a non-negative integer."""
    if not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer", name, value)
    return value


def require_in_range(value: Union[int, float], min_val, max_val, name: str):
    """Guard that requires a value within a range."""
    if value < min_val or value > max_val:
        raise ValidationError(
            f"{name} must be between {min_val} and {max_val}",
            name,
            value
        )
    return value


def ensure_valid_config(config: SchedulerConfig) -> SchedulerConfig:
    """Raise ConfigurationError if the scheduler config has errors; log warnings."""
    result = ConfigValidator.validate_scheduler_config(config)
    log_validation_result(result, "SchedulerConfig")
    if not result.is_valid:
        raise ConfigurationError("; ".join(result.errors))
    return config


# =============================================================================
# LOGGING UTILITIES
# =============================================================================

def log_validation_result(result: ValidationResult, context: str = ""):
    """Errors go out at ERROR, warnings at WARNING, a clean pass at DEBUG."""
    prefix = f"[{context}] " if context else ""

    for error in result.errors:
        logger.error(f"{prefix}{error}")
    for warning in result.warnings:
        logger.warning(f"{prefix}{warning}")
    if result.is_valid and not result.warnings:
        logger.debug(f"{prefix}Configuration OK")
