"""
Visualization Module for the MLFQ Scheduler Simulator

Static matplotlib charts of a finished run, written to image files:
- Gantt chart: one row per process, one bar per dispatch, colored by queue
- Queue occupancy: size of every queue after each scheduler iteration

Author: Student
Date: December 2024
"""

from typing import Dict, List
import logging

import matplotlib
matplotlib.use('Agg')  # No display needed
from matplotlib.figure import Figure
from matplotlib.patches import Patch

from simulation import SimulationResult

logger = logging.getLogger(__name__)


BLOCKING_COLOR = "#9E9E9E"
LEVEL_COLORS = (
    "#4CAF50",  # Green - level 0
    "#FFC107",  # Amber - level 1
    "#F44336",  # Red - level 2
    "#3F51B5",  # Indigo
    "#009688",  # Teal
    "#673AB7",  # Deep Purple
)


def get_queue_color(priority_level: int) -> str:
    """Color of a queue in the charts."""
    if priority_level < 0:
        return BLOCKING_COLOR
    return LEVEL_COLORS[priority_level % len(LEVEL_COLORS)]


def plot_gantt(result: SimulationResult, path: str, title: str = None) -> str:
    """
    Draw a Gantt chart of every dispatch in the run's trace.

    Args:
        result: Completed SimulationResult (trace recording enabled)
        path: Image file to write (format from extension)
        title: Optional chart title

    Returns:
        The path written
    """
    pids = sorted({event.pid for event in result.trace})
    rows: Dict[int, int] = {pid: row for row, pid in enumerate(pids)}

    fig = Figure(figsize=(12, max(3, 0.4 * len(pids) + 1.5)), dpi=100)
    ax = fig.add_subplot(111)

    legend: Dict[str, str] = {}
    for event in result.trace:
        color = get_queue_color(event.priority_level)
        legend.setdefault(event.queue_name, color)
        ax.broken_barh(
            [(event.start, event.end - event.start)],
            (rows[event.pid] - 0.4, 0.8),
            facecolors=color,
            edgecolor="black",
            linewidth=0.3
        )

    ax.set_yticks(range(len(pids)))
    ax.set_yticklabels([f"P{pid}" for pid in pids])
    ax.set_xlabel("Time")
    ax.set_ylabel("Process")
    ax.set_title(title or f"MLFQ dispatches ({len(result.trace)} bursts)")
    ax.grid(axis='x', linestyle=':', alpha=0.5)

    handles = [Patch(facecolor=color, label=name) for name, color in sorted(legend.items())]
    if handles:
        ax.legend(handles=handles, loc='upper right', fontsize='small')

    fig.tight_layout()
    fig.savefig(path)
    logger.info(f"Gantt chart written to {path}")
    return path


def plot_queue_occupancy(result: SimulationResult, path: str, title: str = None) -> str:
    """
    Plot queue sizes over time from the run's snapshots.

    Returns:
        The path written
    """
    times: List[int] = [s.time for s in result.snapshots]
    levels = result.scheduler_config.priority_levels

    fig = Figure(figsize=(10, 4), dpi=100)
    ax = fig.add_subplot(111)

    ax.step(times, [s.blocking_queue_size for s in result.snapshots],
            where='post', color=BLOCKING_COLOR, label="BlockingQueue")
    for level in range(levels):
        ax.step(times, [s.cpu_queue_sizes[level] for s in result.snapshots],
                where='post', color=get_queue_color(level), label=f"CPUQueue[{level}]")

    ax.set_xlabel("Time")
    ax.set_ylabel("Processes queued")
    ax.set_title(title or "Queue occupancy")
    ax.legend(loc='upper right', fontsize='small')
    ax.grid(linestyle=':', alpha=0.5)

    fig.tight_layout()
    fig.savefig(path)
    logger.info(f"Queue occupancy chart written to {path}")
    return path
