"""Main entry point for Grove interactive tree evolution.

This module provides command-line options:
- run: headless evolution with an automated picker
- recalc: recompute fitness for a folder of evaluation archives
- best: list the fittest archived trees
- serve: start the FastAPI backend for the browser UI
"""

import argparse
import logging
import sys

from grove.config.server import DEFAULT_API_PORT, DEFAULT_ARCHIVE_DIR
from grove.exceptions import GroveError
from grove.logging_config import configure_logging

logger = logging.getLogger(__name__)

SEPARATOR_WIDTH = 60


def cmd_run(args: argparse.Namespace) -> int:
    from grove.config import EvolutionConfig
    from grove.engine import GrammaticalEvolution
    from grove.headless import get_picker, run_headless

    overrides = {
        "seed": args.seed,
        "required_generations": args.generations,
        "population_size": args.population_size,
    }
    config = EvolutionConfig.from_env()
    config = EvolutionConfig.from_dict(
        {**config.to_dict(), **{k: v for k, v in overrides.items() if v is not None}}
    )
    picker = get_picker(args.picker)

    logger.info(
        "Evolving %d generations of %d trees (picker=%s, seed=%s)",
        config.required_generations,
        config.population_size,
        args.picker,
        config.seed,
    )
    path = run_headless(GrammaticalEvolution(config), picker, args.output_dir)
    if path is None:
        logger.error("Run finished but the archive was not saved")
        return 1
    logger.info("Archive written to %s", path)
    return 0


def cmd_recalc(args: argparse.Namespace) -> int:
    from grove.persistence import recalculate_folder

    written = recalculate_folder(args.folder, args.output_dir)
    logger.info("Recalculated %d archive files", len(written))
    return 0


def cmd_best(args: argparse.Namespace) -> int:
    from grove.persistence import best_records

    best = best_records(args.folder, args.count)
    logger.info("=" * SEPARATOR_WIDTH)
    for rank, record in enumerate(best, start=1):
        print(f"{rank:2d}. {record.fitness.overall_fitness:.4f}  {record.sentence}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from backend.app_factory import create_app

    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("GROVE - WEB SERVER")
    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("API docs available at http://localhost:%d/docs", args.port)
    logger.info("Press Ctrl+C to stop the server")

    app = create_app(archive_dir=args.output_dir)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive evolution of L-system trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the browser UI backend
  python main.py serve

  # Headless run picking the structurally fittest trees
  python main.py run --picker fitness --seed 42

  # Recompute fitness for saved archives, then list the best trees
  python main.py recalc data/evaluations
  python main.py best data/evaluations --count 5
        """,
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: GROVE_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Evolve headlessly with an automated picker")
    run.add_argument("--picker", choices=("random", "fitness"), default="random")
    run.add_argument("--seed", type=int, default=None, help="Random seed (optional)")
    run.add_argument("--generations", type=int, default=None, help="Generations to breed")
    run.add_argument("--population-size", type=int, default=None, help="Trees per generation")
    run.add_argument("--output-dir", default=DEFAULT_ARCHIVE_DIR, help="Archive folder")
    run.set_defaults(func=cmd_run)

    recalc = sub.add_parser("recalc", help="Recompute fitness in archive files")
    recalc.add_argument("folder")
    recalc.add_argument("--output-dir", default=None, help="Write here instead of in place")
    recalc.set_defaults(func=cmd_recalc)

    best = sub.add_parser("best", help="List the fittest archived trees")
    best.add_argument("folder")
    best.add_argument("--count", type=int, default=10)
    best.set_defaults(func=cmd_best)

    serve = sub.add_parser("serve", help="Run the FastAPI backend")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=DEFAULT_API_PORT)
    serve.add_argument("--output-dir", default=DEFAULT_ARCHIVE_DIR, help="Archive folder")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    """Parse command-line arguments and run the chosen command."""
    args = build_parser().parse_args(argv)
    try:
        configure_logging(level=args.log_level)
        return args.func(args)
    except GroveError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
