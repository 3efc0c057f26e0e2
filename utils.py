"""
Utility Module for the MLFQ Scheduler Simulator

Logging setup, statistics helpers and result export.

Author: Student
Date: December 2024
"""

import csv
import json
import logging
import os
from typing import Any, Dict, List, Sequence

import numpy as np

from config import LoggingConfig, DEFAULT_LOGGING_CONFIG


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(config: LoggingConfig = None) -> logging.Logger:
    """
    Configure the root logger from a LoggingConfig.

    Only the CLI calls this; library modules just use logging.getLogger.

    Returns:
        The application logger
    """
    config = config or DEFAULT_LOGGING_CONFIG
    level = logging.DEBUG if config.verbose else getattr(logging, config.level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(config.log_format, datefmt=config.date_format)

    if config.log_to_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if config.log_to_file:
        file_handler = logging.FileHandler(config.log_file_path, mode='w')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return logging.getLogger("mlfq")


# =============================================================================
# STATISTICS
# =============================================================================

def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def calculate_jains_fairness_index(values: Sequence[float]) -> float:
    """
    Jain's fairness index: (sum x)^2 / (n * sum x^2).

    1.0 means perfectly even; 1/n means one value takes everything.
    """
    if len(values) == 0:
        return 1.0
    arr = np.asarray(values, dtype=float)
    denominator = len(arr) * float(np.sum(arr ** 2))
    if denominator == 0:
        return 1.0
    return float(np.sum(arr) ** 2 / denominator)


# =============================================================================
# EXPORT
# =============================================================================

class DataExporter:
    """Write simulation results to JSON or CSV."""

    TRACE_FIELDS = ['start', 'end', 'pid', 'queue', 'priority_level', 'units', 'outcome']

    @staticmethod
    def _ensure_dir(path: str) -> None:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)

    @classmethod
    def export_json(cls, result: Any, path: str, include_trace: bool = False) -> str:
        """
        Export a SimulationResult as JSON.

        Args:
            result: Object with a to_dict() method
            path: Output file path
            include_trace: Also write every dispatch event

        Returns:
            The path written
        """
        cls._ensure_dir(path)
        data: Dict[str, Any] = result.to_dict()
        if include_trace:
            data['trace'] = [event.to_dict() for event in result.trace]
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
        return path

    @classmethod
    def export_trace_csv(cls, result: Any, path: str) -> str:
        """Export the dispatch trace, one row per dispatch."""
        cls._ensure_dir(path)
        rows: List[Dict[str, Any]] = [event.to_dict() for event in result.trace]
        with open(path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=cls.TRACE_FIELDS)
            writer.writeheader()
            writer.writerows(rows)
        return path
