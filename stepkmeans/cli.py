"""
stepkmeans CLI - Stepwise K-Means from the command line.

Usage:
    stepkmeans tui [--config config.yaml] [--points points.yaml] [--k 3]
    stepkmeans step points.yaml --k 3 --steps 5 [--seed 42]
    stepkmeans check-config config.yaml
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import yaml

from .config import KMeansConfig, load_config, load_points
from .core.controller import IterationController
from .core.errors import KMeansError
from .core.logger import EventLog
from .core.store import EngineView
from .tui.render import format_cluster


def _build_config(args) -> KMeansConfig:
    """Load config file (if given) and apply command-line overrides."""
    config = load_config(Path(args.config)) if args.config else KMeansConfig()
    if getattr(args, "k", None) is not None:
        config.k = args.k
    if getattr(args, "seed", None) is not None:
        config.seed = args.seed
    if getattr(args, "log_dir", None):
        config.log_dir = args.log_dir
    if getattr(args, "quiet", False):
        config.verbose = False
    return config.validate()


def print_view(view: EngineView) -> None:
    """Print centroids and the points table."""
    status = "converged" if view.converged else view.phase.value
    print(f"Iteration: {view.iteration} ({status})")
    for i, c in enumerate(view.centroids):
        print(f"  centroid {i + 1}: ({c.x:.3f}, {c.y:.3f})")
    print(f"  {'Point':<8}{'X':>8}{'Y':>8}  Cluster")
    for p in view.points:
        cluster = format_cluster(p.cluster)
        print(f"  {p.name:<8}{p.x:>8.2f}{p.y:>8.2f}  {cluster}")


def cmd_tui(args):
    """Launch the interactive terminal UI."""
    # Imported here so the other commands work without a terminal
    from .tui.app import run_app

    config = _build_config(args)
    points = load_points(Path(args.points)) if args.points else None
    run_app(config, points)
    return 0


def cmd_step(args):
    """Load points, initialize and run up to N explicit iterations."""
    config = _build_config(args)
    points = load_points(Path(args.points))

    event_log: Optional[EventLog] = EventLog(Path(config.log_dir)) if config.log_dir else None
    try:
        controller = IterationController.from_config(config, event_log=event_log)
        for x, y in points:
            controller.add_point(x, y)

        controller.initialize(config.k)
        if config.verbose:
            print(f"Initialized k={config.k} from {len(points)} points")
            print_view(controller.view())
            print("-" * 40)

        for _ in range(args.steps):
            result = controller.step()
            if result is None:
                break
            if config.verbose:
                print_view(controller.view())
                print(f"  max shift: {result.max_shift:.4f}")
                print("-" * 40)

        view = controller.view()
        print(f"Completed {view.iteration} iterations, converged={view.converged}")
        if args.output:
            with open(args.output, 'w') as f:
                yaml.safe_dump(view.to_dict(), f, default_flow_style=False)
            print(f"Final state written to {args.output}")
    finally:
        if event_log:
            event_log.close()

    return 0


def cmd_check_config(args):
    """Validate a config file and print the merged result."""
    config = load_config(Path(args.path))
    print(yaml.safe_dump(config.to_dict(), default_flow_style=False), end="")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Interactive, steppable K-Means clustering",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # tui
    p_tui = subparsers.add_parser("tui", help="Launch terminal UI")
    p_tui.add_argument("--config", help="YAML config file")
    p_tui.add_argument("--points", help="YAML/JSON file of initial points")
    p_tui.add_argument("--k", type=int, help="Initial number of clusters")
    p_tui.add_argument("--seed", type=int, help="RNG seed")
    p_tui.add_argument("--log-dir", help="Write JSONL events here")

    # step
    p_step = subparsers.add_parser("step", help="Run explicit iterations on a points file")
    p_step.add_argument("points", help="YAML/JSON file of points")
    p_step.add_argument("--k", type=int, help="Number of clusters")
    p_step.add_argument("--steps", type=int, default=1, help="Iterations to attempt")
    p_step.add_argument("--seed", type=int, help="RNG seed")
    p_step.add_argument("--config", help="YAML config file")
    p_step.add_argument("--log-dir", help="Write JSONL events here")
    p_step.add_argument("--output", help="Write final state as YAML")
    p_step.add_argument("--quiet", action="store_true", help="Only print the summary")

    # check-config
    p_check = subparsers.add_parser("check-config", help="Validate a config file")
    p_check.add_argument("path", help="YAML config file")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch
    commands = {
        "tui": cmd_tui,
        "step": cmd_step,
        "check-config": cmd_check_config,
    }

    try:
        return commands[args.command](args)
    except KMeansError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
