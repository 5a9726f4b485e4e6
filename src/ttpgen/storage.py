# src/ttpgen/storage.py

import json
import logging
import os
import re
from typing import Any, Dict, Iterable, List, Sequence

from ttpgen.distances import DistanceMatrix, matrix_rows
from ttpgen.evaluator import evaluate_objective
from ttpgen.schedule import Game, Solution, list_solution_issues

logger = logging.getLogger(__name__)

SOLUTION_FILE = re.compile(r"^solution_(\d+)\.json$")
PERMUTATION_FILE = "permutation.json"


class StorageError(RuntimeError):
    pass


def solution_to_dict(solution: Solution) -> Dict[str, Any]:
    return {
        "id": solution.id,
        "solution": [[{"home_game": g.home_game, "opponent": g.opponent} for g in row]
                     for row in solution.games],
    }


def solution_from_dict(data: Dict[str, Any]) -> Solution:
    games = tuple(
        tuple(Game(home_game=bool(cell["home_game"]), opponent=int(cell["opponent"])) for cell in row)
        for row in data["solution"]
    )
    return Solution(games=games, id=int(data["id"]))


def save_to_file(data: Any, path: str) -> None:
    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except (OSError, TypeError) as e:
        raise StorageError(f"Could not write {path}: {e}") from e


class JsonSolutionStore:
    """
    One pretty-printed JSON file per schedule, `solution_<id>.json`, under
    `path`. The directory is created on first use.
    """

    def __init__(self, path: str):
        self.path = path
        self._ready = False

    def _ensure_dir(self) -> None:
        if self._ready:
            return
        try:
            os.makedirs(self.path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create directory {self.path}: {e}") from e
        self._ready = True

    def file_for(self, solution_id: int) -> str:
        return os.path.join(self.path, f"solution_{solution_id}.json")

    def store(self, solution: Solution) -> str:
        self._ensure_dir()
        target = self.file_for(solution.id)
        save_to_file(solution_to_dict(solution), target)
        return target


def save_permutations(permutations: Iterable[Sequence[int]], seed: int, instance_name: str,
                      path: str) -> str:
    """Write the sampled orderings with their seed and instance name to `path/permutation.json`."""
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Could not create directory {path}: {e}") from e

    target = os.path.join(path, PERMUTATION_FILE)
    save_to_file({
        "seed": seed,
        "instance_name": instance_name,
        "permutations": [list(p) for p in sorted(tuple(p) for p in permutations)],
    }, target)
    logger.info("Saved %s", target)
    return target


def load_permutations(path: str) -> Dict[str, Any]:
    target = os.path.join(path, PERMUTATION_FILE)
    try:
        with open(target) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(f"Could not read {target}: {e}") from e
    data["permutations"] = [tuple(p) for p in data.get("permutations", [])]
    return data


def load_solutions(path: str) -> List[Solution]:
    """
    Every `solution_<id>.json` in `path`, sorted by id. Files whose matrix is
    malformed are rejected, not skipped.
    """
    try:
        names = os.listdir(path)
    except OSError as e:
        raise StorageError(f"Could not open directory {path}: {e}") from e

    solutions = []
    for name in names:
        full = os.path.join(path, name)
        if not SOLUTION_FILE.match(name) or not os.path.isfile(full):
            continue
        try:
            with open(full) as f:
                solution = solution_from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Could not load solution file {full}: {e}") from e

        issues = list_solution_issues(solution)
        if issues:
            raise StorageError(f"Solution file {full} is malformed: {issues[0]}")
        solutions.append(solution)

    solutions.sort(key=lambda s: s.id)
    logger.info("Loaded %d solutions from %s", len(solutions), path)
    return solutions


def rebuild_distances(path: str, D: DistanceMatrix) -> List[int]:
    """Travel distance of every stored solution in `path`, in id order."""
    rows = matrix_rows(D)
    distances = []
    for solution in load_solutions(path):
        if solution.num_teams != len(rows):
            raise ValueError(
                f"Solution {solution.id} has {solution.num_teams} teams, "
                f"distance matrix has {len(rows)}"
            )
        distances.append(evaluate_objective(rows, solution))
    return distances
