import json
import os

import pytest

from ttpgen.distances import build_distance_matrix
from ttpgen.generator import generate_all_solutions
from ttpgen.schedule import build_florian_solution
from ttpgen.storage import (
    JsonSolutionStore,
    StorageError,
    load_permutations,
    load_solutions,
    rebuild_distances,
    save_permutations,
)


def test_store_writes_one_file_per_solution(four_teams, tmp_path):
    out = tmp_path / "solutions"
    store = JsonSolutionStore(str(out))
    D = build_distance_matrix(four_teams)
    solutions, _ = generate_all_solutions(four_teams, D, [(0, 1, 2, 3)], sink=store, persist_enabled=True)

    files = sorted(os.listdir(out))
    assert len(files) == 8
    assert "solution_1.json" in files

    with open(out / "solution_1.json") as f:
        data = json.load(f)
    assert data["id"] == 1
    assert len(data["solution"]) == 6
    assert data["solution"][0][0] == {"home_game": False, "opponent": 1}


def test_rescore_matches_generation(four_teams, tmp_path):
    out = tmp_path / "solutions"
    D = build_distance_matrix(four_teams)
    solutions, distances = generate_all_solutions(
        four_teams, D, [(2, 0, 3, 1), (0, 1, 2, 3)],
        sink=JsonSolutionStore(str(out)), persist_enabled=True)

    (out / "notes.txt").write_text("ignored")
    loaded = load_solutions(str(out))
    assert [s.id for s in loaded] == list(range(1, 17))
    assert loaded == solutions
    assert rebuild_distances(str(out), D) == distances


def test_permutation_file_round_trip(tmp_path):
    perms = {(1, 0, 3, 2), (0, 1, 2, 3)}
    path = save_permutations(perms, 2025, "NL4", str(tmp_path / "perms"))
    assert path.endswith("permutation.json")
    data = load_permutations(str(tmp_path / "perms"))
    assert data["seed"] == 2025
    assert data["instance_name"] == "NL4"
    assert set(data["permutations"]) == perms


def test_missing_directory_is_a_storage_error(tmp_path):
    with pytest.raises(StorageError):
        load_solutions(str(tmp_path / "nope"))


def test_corrupt_file_is_a_storage_error(tmp_path):
    (tmp_path / "solution_3.json").write_text("{not json")
    with pytest.raises(StorageError, match="solution_3.json"):
        load_solutions(str(tmp_path))


def test_malformed_matrix_is_rejected(tmp_path):
    bad = {"id": 1, "solution": [[{"home_game": True, "opponent": 1}, {"home_game": True, "opponent": 0}]]}
    (tmp_path / "solution_1.json").write_text(json.dumps(bad))
    with pytest.raises(StorageError, match="malformed"):
        load_solutions(str(tmp_path))


def test_store_into_regular_file_is_a_storage_error(tmp_path):
    blocker = tmp_path / "taken"
    blocker.write_text("not a directory")
    solution = build_florian_solution([0, 1, 2, 3], 0, True, solution_id=1)
    with pytest.raises(StorageError, match="taken"):
        JsonSolutionStore(str(blocker)).store(solution)
    assert blocker.read_text() == "not a directory"


def test_permutation_write_failure_is_a_storage_error(tmp_path):
    blocker = tmp_path / "perms"
    blocker.write_text("")
    with pytest.raises(StorageError):
        save_permutations({(0, 1, 2, 3)}, 1, "NL4", str(blocker))


def test_generation_stops_on_write_failure(four_teams, tmp_path):
    blocker = tmp_path / "solutions"
    blocker.write_text("")
    with pytest.raises(StorageError):
        generate_all_solutions(four_teams, build_distance_matrix(four_teams), [(0, 1, 2, 3)],
                               sink=JsonSolutionStore(str(blocker)), persist_enabled=True)
