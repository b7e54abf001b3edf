#!/usr/bin/env python3
"""
pwfit - CLI Entry Point

Usage:
    python main.py validate CONFIG_PATH
    python main.py count CONFIG_PATH
    python main.py fit CONFIG_PATH [--data CSV] [--jobs N] [--dry-run] [--output DIR]
    python main.py demo [--jobs N] [--strategy KEY]
    python main.py models [MODEL_KEY]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))


def cmd_validate(args):
    """Validate a problem configuration YAML."""
    import jsonschema
    from core.errors import ConfigurationError
    from fitting.problem import build_orchestrator, load_problem_config, segment_sizes
    from utils.reason_codes import E_CONFIG, E_SCHEMA

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}")
        return 1

    try:
        config = load_problem_config(str(config_path))
    except jsonschema.ValidationError as e:
        print(f"{E_SCHEMA}: Validation error: {e.message}")
        print(f"Path: {list(e.path)}")
        return 1
    except ValueError as e:
        print(f"{E_CONFIG}: {e}")
        return 1

    print(f"Config validated successfully: {config_path}")

    try:
        orchestrator = build_orchestrator(config)
    except (KeyError, ValueError) as e:
        # ConfigurationError is a ValueError
        kind = "layout" if isinstance(e, ConfigurationError) else "reference"
        print(f"{E_CONFIG}: invalid {kind}: {e}")
        return 1

    print(f"\nProblem: {config['name']}")
    for seg in segment_sizes(orchestrator):
        kind = 'constrained' if seg['constrained'] else 'free'
        print(f"  {seg['name']}: {seg['size']} ({kind})")

    total = orchestrator.size()
    if total == 0:
        print("Warning: search space is empty (a range has size 0)")
    print(f"\nTotal combinations: {total}")

    return 0


def cmd_count(args):
    """Print the number of combinations of a problem."""
    from fitting.problem import build_orchestrator, load_problem_config

    config = load_problem_config(args.config)
    print(build_orchestrator(config).size())
    return 0


def cmd_fit(args):
    """Fit a problem to observations."""
    from fitting import config as defaults
    from fitting.runner import run_fit

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}")
        return 1

    output_dir = args.output or str(PROJECT_ROOT / defaults.get('output', 'results_dir', 'results'))

    try:
        result = run_fit(
            config_path=str(config_path),
            data=args.data,
            output_dir=None if args.dry_run else output_dir,
            n_jobs=args.jobs,
            dry_run=args.dry_run,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if result.dry_run:
        return 0

    print(f"\nFit complete: {result.name}")
    print(f"  Combinations: {result.n_total}")
    print(f"  Scored: {result.search.n_scored}")
    if result.search.skipped:
        print(f"  Skipped: {result.search.skipped}")
    if not result.search.found:
        print("  No combination produced a finite score")
        return 1

    print(f"  Best index: {result.best_index}")
    print(f"  Best score: {result.best_score:.6f}")
    print(f"  Runtime: {result.search.runtime_seconds:.1f}s")
    print("\nBest parameters:")
    print(result.best_params.to_string(index=False))

    return 0


def cmd_demo(args):
    """Recover a line bound between two parabolas from synthetic data."""
    from analysis.reports import combination_frame
    from analysis.scoring import make_scorer
    from fitting.demo import DEMO_SCORE, build_demo_orchestrator, demo_observations
    from search.parallel import parallel_search

    orchestrator = build_demo_orchestrator(strategy=args.strategy)
    observations = demo_observations(noise_std=args.noise)
    score_fn, maximize = make_scorer(DEMO_SCORE, observations['x'], observations['y'])

    print(f"Demo: {orchestrator.size()} combinations, {len(observations)} observations")

    result = parallel_search(orchestrator, score_fn, n_jobs=args.jobs, maximize=maximize)

    pm = orchestrator.make_at(result.best_index)
    print(f"Best index: {result.best_index}")
    print(f"Best score: {result.best_score:.6f}")
    print(f"f(-1) = {pm(-1.0):.4f}, f(0) = {pm(0.0):.4f}, f(1) = {pm(1.0):.4f}")
    print("\nParameters:")
    print(combination_frame(orchestrator, result.best_index).to_string(index=False))

    return 0


def cmd_models(args):
    """List available models or show model details."""
    from model.binders import list_binders
    from model.primitives import get_model_info, list_models
    from search.strategies import list_strategies

    if args.model:
        if args.model not in list_models():
            print(f"Unknown model: {args.model}")
            print(f"Available: {list_models()}")
            return 1

        info = get_model_info(args.model)
        print(f"Model: {info['key']}")
        print(f"Formula: {info['formula']}")
        print(f"Params: {info['params']}")
        return 0

    models = list_models()
    print(f"Registered models ({len(models)}):")
    for key in models:
        print(f"  - {key}: {get_model_info(key)['formula']}")
    print(f"Binders: {list_binders()}")
    print(f"Strategies: {list_strategies()}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Piecewise model fitting by exhaustive parameter search",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # validate
    p_validate = subparsers.add_parser("validate", help="Validate problem config")
    p_validate.add_argument("config", help="Path to problem YAML")

    # count
    p_count = subparsers.add_parser("count", help="Count combinations")
    p_count.add_argument("config", help="Path to problem YAML")

    # fit
    p_fit = subparsers.add_parser("fit", help="Run exhaustive fit")
    p_fit.add_argument("config", help="Path to problem YAML")
    p_fit.add_argument("--data", help="Observation CSV (x, y); default: config data.path")
    p_fit.add_argument("--jobs", type=int, default=None, help="Parallel jobs (1 = sequential)")
    p_fit.add_argument("--dry-run", action="store_true", help="Count only")
    p_fit.add_argument("--output", help="Results root directory")

    # demo
    p_demo = subparsers.add_parser("demo", help="Run the built-in demo")
    p_demo.add_argument("--jobs", type=int, default=-1, help="Parallel jobs")
    p_demo.add_argument("--strategy", default="enumeration", help="Strategy KEY")
    p_demo.add_argument("--noise", type=float, default=0.0, help="Noise std on y")

    # models
    p_models = subparsers.add_parser("models", help="List models")
    p_models.add_argument("model", nargs="?", help="Model KEY for details")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    # Dispatch to command handler
    handlers = {
        "validate": cmd_validate,
        "count": cmd_count,
        "fit": cmd_fit,
        "demo": cmd_demo,
        "models": cmd_models,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
