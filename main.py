#!/usr/bin/env python3
"""
MLFQ Scheduler Simulator - Main Entry Point

Generates a synthetic workload, runs it through the Multi-Level Feedback
Queue scheduler and prints the resulting metrics. Optionally writes charts
and a JSON/CSV export of the run.

The simulation demonstrates key Operating System concepts:
- Multi-Level Feedback Queue scheduling
- Time quanta and priority demotion
- Blocking (I/O) work vs. CPU work
- Performance Metrics and Analysis

Usage:
    python main.py                          # 10 random processes, virtual clock
    python main.py -n 25 --seed 7           # reproducible larger workload
    python main.py --chart gantt.png        # also draw a Gantt chart
    python main.py --export run.json        # export metrics as JSON
    python main.py --test                   # run the test suite

Author: Student
Date: December 2024
"""

import sys
import os
import argparse
import logging
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import (
    SchedulerConfig,
    SimulationConfig,
    LoggingConfig,
    VERSION,
    APP_NAME
)
from simulation import SimulationEngine, SimulationResult
from utils import setup_logging, DataExporter
from validators import SchedulerError


def print_banner():
    """Print application banner."""
    banner = f"""
╔══════════════════════════════════════════════════════════════════════╗
║                                                                      ║
║                  MULTI-LEVEL FEEDBACK QUEUE SCHEDULER                ║
║                           Simulator v{VERSION}                           ║
║                                                                      ║
╚══════════════════════════════════════════════════════════════════════╝
"""
    print(banner)


def print_result(engine: SimulationEngine, result: SimulationResult):
    """Print the workload and the run's metrics."""
    scheduler_config = result.scheduler_config

    print("Configuration:")
    print(f"  Priority Levels: {scheduler_config.priority_levels}")
    print(f"  CPU Quanta: {scheduler_config.get_quantums()}")
    print(f"  Blocking Quantum: {scheduler_config.blocking_quantum}")
    clock = f"virtual, {result.config.time_slice} per step" if result.config.use_virtual_clock else "wall clock (ms)"
    print(f"  Clock: {clock}")

    print("\nProcesses:")
    for m in result.process_metrics:
        process = next(p for p in engine.all_processes if p.pid == m.pid)
        print(f"  P{m.pid}: cpu={process.cpu_time_total}, blocking={process.blocking_time_total}, "
              f"turnaround={m.turnaround_time}, response={m.response_time}, "
              f"dispatches={m.dispatch_count}, demotions={m.demotion_count}")

    m = result.system_metrics
    stats = result.scheduler_statistics
    print("\n[Simulation Complete]")
    print("-" * 60)
    print(f"Total Time: {result.total_time} time units")
    print(f"Iterations: {result.iterations}")
    print(f"Execution Duration: {result.execution_duration:.3f} seconds")
    print(f"Completed: {m.completed_processes}/{m.total_processes}")

    print("\nProcess Metrics:")
    print(f"  Average Turnaround Time: {m.avg_turnaround_time:.2f} (std {m.std_turnaround_time:.2f})")
    print(f"  Average Waiting Time: {m.avg_waiting_time:.2f}")
    print(f"  Average Response Time: {m.avg_response_time:.2f}")
    print(f"  Average Slowdown: {m.avg_slowdown:.2f}")
    print(f"  Jain's Fairness Index: {m.jains_fairness_index:.4f}")

    print("\nScheduler Metrics:")
    print(f"  Dispatches: {stats['dispatches']} ({stats['idle_dispatches']} idle)")
    print(f"  Demotions: {stats['demotions']}")
    for name, count in stats['interrupts'].items():
        print(f"  {name}: {count}")
    for name, count in sorted(stats['dispatches_per_queue'].items()):
        print(f"  Dispatches on {name}: {count}")


def run_cli_simulation(args: argparse.Namespace) -> int:
    """
    Run a simulation from parsed command-line arguments.

    Returns:
        Process exit code
    """
    logger = logging.getLogger("mlfq")

    config = SimulationConfig(
        num_processes=args.processes,
        seed=args.seed,
        time_slice=args.time_slice,
        use_virtual_clock=not args.wall_clock,
        max_steps=args.max_steps
    )
    scheduler_config = SchedulerConfig(
        priority_levels=args.levels,
        record_trace=bool(args.chart or args.trace_csv)
    )

    try:
        engine = SimulationEngine(config, scheduler_config)
        engine.initialize()
        result = engine.run()
    except SchedulerError as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    print_result(engine, result)

    if args.chart:
        from visualization import plot_gantt
        plot_gantt(result, args.chart)
        print(f"\nGantt chart: {args.chart}")
    if args.occupancy_chart:
        from visualization import plot_queue_occupancy
        plot_queue_occupancy(result, args.occupancy_chart)
        print(f"Queue occupancy chart: {args.occupancy_chart}")
    if args.export:
        DataExporter.export_json(result, args.export)
        print(f"Exported results: {args.export}")
    if args.trace_csv:
        DataExporter.export_trace_csv(result, args.trace_csv)
        print(f"Exported trace: {args.trace_csv}")

    return 0


def run_module_tests() -> int:
    """Run the unittest suite."""
    import test_suite
    result = test_suite.run_all_tests(verbosity=2)
    return 0 if result.wasSuccessful() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} v{VERSION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py -n 20 --seed 42          Run 20 processes reproducibly
  python main.py --time-slice 10          Hand each iteration 10 time units
  python main.py --chart gantt.png        Write a Gantt chart
  python main.py --test                   Run the test suite
        """
    )

    parser.add_argument('--test', action='store_true', help='Run the test suite')
    parser.add_argument('--version', '-v', action='version', version=f'{APP_NAME} v{VERSION}')

    parser.add_argument('--processes', '-n', type=int, default=10,
                        help='Number of processes (default: 10)')
    parser.add_argument('--seed', '-s', type=int, default=None,
                        help='Random seed for the workload')
    parser.add_argument('--levels', '-l', type=int, default=3,
                        help='Number of CPU priority levels (default: 3)')
    parser.add_argument('--time-slice', '-t', type=int, default=50,
                        help='Virtual time per scheduler iteration (default: 50)')
    parser.add_argument('--wall-clock', action='store_true',
                        help='Drive the scheduler with wall-clock milliseconds')
    parser.add_argument('--max-steps', type=int, default=None,
                        help='Abort after this many iterations')

    parser.add_argument('--chart', metavar='PATH', help='Write a Gantt chart image')
    parser.add_argument('--occupancy-chart', metavar='PATH', help='Write a queue occupancy chart image')
    parser.add_argument('--export', metavar='PATH', help='Write results as JSON')
    parser.add_argument('--trace-csv', metavar='PATH', help='Write the dispatch trace as CSV')

    parser.add_argument('--verbose', action='store_true', help='Log every queue transition')
    parser.add_argument('--log-file', metavar='PATH', help='Also log to this file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.

    Parses command-line arguments and runs the appropriate mode.
    """
    args = build_parser().parse_args(argv)

    setup_logging(LoggingConfig(
        verbose=args.verbose,
        level="DEBUG" if args.verbose else "WARNING",
        log_to_file=bool(args.log_file),
        log_file_path=args.log_file or "simulation.log"
    ))

    if args.test:
        return run_module_tests()

    print_banner()
    return run_cli_simulation(args)


if __name__ == "__main__":
    sys.exit(main())
