# src/ttpgen/main.py
import argparse
import logging
import os
import sys
from typing import List, Optional

from ttpgen.config import Settings
from ttpgen.distances import build_distance_matrix
from ttpgen.evaluator import write_evaluation_report
from ttpgen.generator import ProgressReporter, SolutionPool, generate_all_solutions
from ttpgen.logging_setup import init_logger
from ttpgen.parser import parse_instance
from ttpgen.permutations import generate_random_permutations
from ttpgen.schedule import schedule_to_dataframe
from ttpgen.statistics import generate_statistics
from ttpgen.storage import JsonSolutionStore, rebuild_distances, save_permutations

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_arg_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ttpgen", description="Generates TTP schedules")
    parser.add_argument("--input", default=settings.input, help="RobinX XML instance file")
    parser.add_argument("--output-solutions", default=settings.output_solutions)
    parser.add_argument("--output-permutations", default=settings.output_permutations)
    parser.add_argument("--permutations", type=int, default=settings.permutations,
                        help="number of distinct random team orderings")
    parser.add_argument("--seed", type=int, default=settings.seed)
    parser.add_argument("--save", action=argparse.BooleanOptionalAction, default=settings.save,
                        help="write every schedule and the permutation set as JSON")
    parser.add_argument("--log", dest="log_enabled", action=argparse.BooleanOptionalAction,
                        default=settings.log_enabled)
    parser.add_argument("--log-file", default=settings.log_file)
    parser.add_argument("--log-level", type=str.upper, default=settings.log_level,
                        choices=LOG_LEVELS, help="DEBUG adds the per-round construction trace")
    parser.add_argument("--workers", type=int, default=settings.workers)
    parser.add_argument("--results-dir", default=settings.results_dir)
    parser.add_argument("--rescore", metavar="DIR", default=None,
                        help="re-evaluate stored schedules in DIR instead of generating")
    return parser


def run(args: argparse.Namespace) -> List[int]:
    logger.info("Loading instance file %s", args.input)
    instance = parse_instance(args.input)

    logger.info("Generating traveling distance matrix")
    D = build_distance_matrix(instance)

    if args.rescore:
        logger.info("Rebuilding distances from %s", args.rescore)
        distances = rebuild_distances(args.rescore, D)
    else:
        logger.info("Generating permutations")
        permutations = generate_random_permutations(instance.team_ids, args.permutations, args.seed)
        if args.save:
            save_permutations(permutations, args.seed, instance.name, args.output_permutations)

        logger.info("Generating solutions")
        pool = SolutionPool(keep_top=10)
        total = 2 * instance.num_teams * len(permutations)
        _, distances = generate_all_solutions(
            instance, D, permutations,
            sink=JsonSolutionStore(args.output_solutions) if args.save else None,
            persist_enabled=args.save,
            progress=ProgressReporter(total, every=max(1, total // 20)),
            pool=pool,
            workers=args.workers,
        )

        if pool.best() is not None:
            best, best_eval = pool.best()
            os.makedirs(args.results_dir, exist_ok=True)
            prefix = os.path.join(args.results_dir, instance.name or "instance")
            schedule_to_dataframe(best, instance.team_names()).to_csv(f"{prefix}_best_schedule.csv", index=False)
            write_evaluation_report(instance, best, D, f"{prefix}_evaluation.txt", best_eval)
            print(f"Best solution: {best.id} | distance={best_eval.distance} | feasible={best_eval.feasible}")

    if not distances:
        print("No solutions to summarize.")
        return distances

    os.makedirs(args.results_dir, exist_ok=True)
    hist_path = os.path.join(args.results_dir, f"{instance.name or 'instance'}_histogram.csv")
    stats = generate_statistics(distances, hist_path)

    print("\n==== DISTANCE STATISTICS ====")
    for key, value in stats.items():
        print(f"{key:>10}: {value}")
    return distances


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    parser = build_arg_parser(settings)
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")

    try:
        init_logger(args.log_file, args.log_enabled, getattr(logging, args.log_level))
        logger.info("Logger initialized")
        run(args)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("%s", e)
        print(f"ttpgen: error: {e}", file=sys.stderr)
        return 1

    logger.info("Framework execution completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
