# src/ttpgen/generator.py

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

from ttpgen.distances import DistanceMatrix, matrix_rows
from ttpgen.evaluator import Evaluation, evaluate_solution
from ttpgen.instance import Instance, validate_instance
from ttpgen.schedule import Solution, generate_solution, solution_to_string

logger = logging.getLogger(__name__)

Unit = Tuple[Tuple[int, ...], int, bool, int]  # (ordering, fixed team index, upward, id)


class SolutionSink(Protocol):
    def store(self, solution: Solution): ...


class ProgressSink(Protocol):
    def advance(self) -> None: ...


# -----------------------
# Progress
# -----------------------

class ProgressReporter:
    """Prints a progress line every `every` units and on the last one."""

    def __init__(self, total: int, every: int = 100):
        self.total = total
        self.every = max(1, every)
        self.done = 0

    def advance(self) -> None:
        self.done += 1
        if self.done % self.every == 0 or self.done == self.total:
            pct = 100.0 * self.done / self.total if self.total else 100.0
            print(f"Solutions {self.done:>7d}/{self.total} ({pct:5.1f}%)")


# -----------------------
# Solution Pool
# -----------------------

class SolutionPool:
    def __init__(self, keep_top: int = 20):
        self.keep_top = keep_top
        self.pool: List[Tuple[Solution, Evaluation]] = []

    def add(self, solution: Solution, evaluation: Evaluation) -> None:
        self.pool.append((solution, evaluation))
        # keep best few; ties go to the lower id
        self.pool = sorted(self.pool, key=lambda x: (x[1].distance, x[0].id))[: self.keep_top]

    def best(self) -> Optional[Tuple[Solution, Evaluation]]:
        return self.pool[0] if self.pool else None

    def best_feasible(self) -> Optional[Tuple[Solution, Evaluation]]:
        for entry in self.pool:
            if entry[1].feasible:
                return entry
        return None


# -----------------------
# Units of work
# -----------------------

def ordered_orderings(orderings: Iterable[Sequence[int]]) -> List[Tuple[int, ...]]:
    """
    Orderings as tuples. A set or frozenset has no order of its own, so it is
    sorted to keep ids reproducible; any other iterable keeps its order.
    """
    if isinstance(orderings, (set, frozenset)):
        return sorted(tuple(o) for o in orderings)
    return [tuple(o) for o in orderings]


def iter_units(orderings: Iterable[Sequence[int]], num_teams: int) -> Iterator[Unit]:
    """
    Ordering x direction (upward first) x fixed team, ids counting from 1.
    Orderings are visited in the order given.
    """
    solution_id = 0
    for order in map(tuple, orderings):
        for direction in (True, False):
            for fixed_team in range(num_teams):
                solution_id += 1
                yield order, fixed_team, direction, solution_id


def build_and_score(instance: Instance, rows: List[List[int]], unit: Unit) -> Tuple[Solution, Evaluation]:
    order, fixed_team, upward, solution_id = unit
    solution = generate_solution(instance, order, fixed_team, upward, solution_id)
    # the constructor only emits well-formed matrices
    return solution, evaluate_solution(instance, rows, solution, validate=False)


_worker_instance: Optional[Instance] = None
_worker_rows: Optional[List[List[int]]] = None


def _init_worker(instance: Instance, rows: List[List[int]]) -> None:
    global _worker_instance, _worker_rows
    _worker_instance, _worker_rows = instance, rows


def _score_in_worker(unit: Unit) -> Tuple[Solution, Evaluation]:
    return build_and_score(_worker_instance, _worker_rows, unit)


def _log_solution(solution: Solution, evaluation: Evaluation, instance: Instance) -> None:
    if logger.isEnabledFor(logging.INFO):
        logger.info(
            "Solution:\n%s\nDistance: %d\nCapacity Constraints: %d\n"
            "Separation Constraints: %d\nRound Robin Respect: %s",
            solution_to_string(solution, instance.team_names()), evaluation.distance,
            evaluation.capacity_violations, evaluation.separation_violations,
            evaluation.round_robin_ok,
        )


# -----------------------
# Driver
# -----------------------

def generate_all_solutions(
    instance: Instance,
    D: DistanceMatrix,
    orderings: Iterable[Sequence[int]],
    sink: Optional[SolutionSink] = None,
    persist_enabled: bool = False,
    progress: Optional[ProgressSink] = None,
    pool: Optional[SolutionPool] = None,
    workers: int = 1,
) -> Tuple[List[Solution], List[int]]:
    """
    Build and score every (ordering, direction, fixed team) schedule.

    Returns the schedules and their travel distances in id order. When
    `persist_enabled` is set every schedule is handed to `sink.store` as soon
    as it is scored; `progress.advance()` is called once per schedule.
    With workers > 1 construction and scoring run in a process pool; results
    are consumed in the same order as the sequential run.
    """
    validate_instance(instance)
    if persist_enabled and sink is None:
        raise ValueError("persist_enabled is set but no solution sink was given")

    rows = matrix_rows(D)
    if len(rows) != instance.num_teams or any(len(r) != instance.num_teams for r in rows):
        raise ValueError(
            f"Distance matrix is not {instance.num_teams}x{instance.num_teams} "
            f"for instance {instance.name!r}"
        )

    team_set = sorted(instance.team_ids)
    orderings = ordered_orderings(orderings)
    for order in orderings:
        if sorted(order) != team_set:
            raise ValueError(f"Ordering {list(order)} is not a permutation of the teams of {instance.name!r}")
        logger.info("Permutation: %s", list(order))

    total = 2 * instance.num_teams * len(orderings)
    logger.info("Generating %d solutions (%d orderings x 2 directions x %d fixed teams)",
                total, len(orderings), instance.num_teams)

    units = iter_units(orderings, instance.num_teams)
    if workers > 1:
        executor = ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                                       initargs=(instance, rows))
        results = executor.map(_score_in_worker, units, chunksize=max(1, instance.num_teams))
    else:
        executor = None
        results = (build_and_score(instance, rows, u) for u in units)

    solutions: List[Solution] = []
    distances: List[int] = []
    try:
        for solution, evaluation in results:
            _log_solution(solution, evaluation, instance)

            solutions.append(solution)
            distances.append(evaluation.distance)
            if pool is not None:
                pool.add(solution, evaluation)

            if persist_enabled:
                sink.store(solution)

            if progress is not None:
                progress.advance()
    finally:
        if executor is not None:
            executor.shutdown(cancel_futures=True)

    if pool is not None and pool.best() is not None:
        best, best_eval = pool.best()
        logger.info("Best solution %d: distance=%d feasible=%s", best.id, best_eval.distance, best_eval.feasible)

    return solutions, distances
