from collections import Counter

import pytest

from ttpgen.schedule import (
    Game,
    Solution,
    build_florian_solution,
    check_double_round_robin,
    generate_solution,
    has_duplicate_solutions,
    list_solution_issues,
    schedule_to_dataframe,
    solution_to_string,
    to_rounds,
)


def rotate_reference(order, fixed_team, upward):
    """Straightforward remove/rotate/append construction to compare against."""
    n = len(order)
    teams = list(order)
    teams.append(teams.pop(fixed_team))
    grid = [[None] * n for _ in range(2 * (n - 1))]
    for rnd in range(2 * (n - 1)):
        for i in range(n // 2):
            a, b = teams[i], teams[n - 1 - i]
            home_first = (rnd % 2 == 0) == upward
            grid[rnd][a] = Game(home_first, b)
            grid[rnd][b] = Game(not home_first, a)
        last = teams.pop()
        teams = teams[-1:] + teams[:-1]
        teams.append(last)
    return tuple(tuple(r) for r in grid)


def test_four_team_scenario():
    sol = build_florian_solution([0, 1, 2, 3], 0, True, solution_id=1)
    assert sol.num_slots == 6
    assert sol.num_teams == 4
    opponents = Counter(sol[s][0].opponent for s in range(6))
    assert opponents == {1: 2, 2: 2, 3: 2}
    assert to_rounds(sol)[0] == [(1, 0), (2, 3)]
    assert [sol[s][0].home_game for s in range(6)] == [False, True, False, True, False, True]


def test_downward_flips_every_venue():
    up = build_florian_solution([0, 1, 2, 3], 0, True)
    down = build_florian_solution([0, 1, 2, 3], 0, False)
    for s in range(6):
        for t in range(4):
            assert up[s][t].opponent == down[s][t].opponent
            assert up[s][t].home_game != down[s][t].home_game


@pytest.mark.parametrize("n", [2, 4, 6, 8, 10])
def test_double_round_robin_for_every_anchor_and_direction(n):
    order = list(range(n))[::-1]
    for fixed_team in range(n):
        for upward in (True, False):
            sol = build_florian_solution(order, fixed_team, upward)
            assert sol.num_slots == 2 * (n - 1)
            assert list_solution_issues(sol) == []
            assert check_double_round_robin(sol)

            ordered = Counter(g for rnd in to_rounds(sol) for g in rnd)
            for h in range(n):
                for a in range(n):
                    if h != a:
                        assert ordered[(h, a)] == 1


def test_symmetry_invariant():
    sol = build_florian_solution([3, 0, 5, 1, 4, 2], 2, False)
    for row in sol.games:
        for t, game in enumerate(row):
            other = row[game.opponent]
            assert other.opponent == t
            assert other.home_game != game.home_game


@pytest.mark.parametrize("order,fixed_team,upward", [
    ([0, 1, 2, 3], 0, True),
    ([2, 0, 3, 1], 3, False),
    ([5, 3, 1, 0, 2, 4], 1, True),
    ([7, 6, 5, 4, 3, 2, 1, 0], 5, False),
])
def test_modular_rotation_matches_list_rotation(order, fixed_team, upward):
    sol = build_florian_solution(order, fixed_team, upward)
    assert sol.games == rotate_reference(order, fixed_team, upward)


def test_construction_is_deterministic():
    a = build_florian_solution([1, 3, 0, 2, 5, 4], 4, True, 7)
    b = build_florian_solution([1, 3, 0, 2, 5, 4], 4, True, 7)
    assert a == b
    assert a.games == b.games


@pytest.mark.parametrize("order,fixed_team", [
    ([0, 1, 2], 0),
    ([0, 1, 2, 3], 4),
    ([0, 1, 2, 2], 0),
    ([1, 2, 3, 4], 0),
])
def test_bad_construction_inputs_are_rejected(order, fixed_team):
    with pytest.raises(ValueError):
        build_florian_solution(order, fixed_team, True)


def test_generate_solution_checks_team_count(four_teams):
    with pytest.raises(ValueError, match="instance 'TEST'"):
        generate_solution(four_teams, [0, 1], 0, True, 1)
    assert generate_solution(four_teams, [3, 2, 1, 0], 1, False, 9).id == 9


def test_issues_reported_for_broken_matrix():
    sol = build_florian_solution([0, 1, 2, 3], 0, True)
    row0 = list(sol.games[0])
    row0[0] = Game(True, 1)  # both 0 and 1 at home now
    broken = Solution(games=(tuple(row0),) + sol.games[1:])
    issues = list_solution_issues(broken)
    assert any("both home" in i for i in issues)
    assert not check_double_round_robin(broken)

    unassigned = Solution(games=((Game(), Game()),))
    assert any("out of range" in i for i in list_solution_issues(unassigned))


def test_duplicates_ignore_ids():
    a = build_florian_solution([0, 1, 2, 3], 0, True, 1)
    b = build_florian_solution([0, 1, 2, 3], 0, True, 2)
    c = build_florian_solution([0, 1, 2, 3], 0, False, 3)
    assert a == b
    assert has_duplicate_solutions([a, c, b])
    assert not has_duplicate_solutions([a, c])


def test_solution_to_string():
    sol = build_florian_solution([0, 1, 2, 3], 0, True, 1)
    text = solution_to_string(sol, {0: "ATL", 1: "NYM", 2: "PHI", 3: "MON"})
    lines = text.splitlines()
    assert lines[0] == "Id: 1"
    assert lines[1].split() == ["ATL:0", "NYM:1", "PHI:2", "MON:3"]
    assert lines[2].split() == ["Slot:0", "1A", "0H", "3H", "2A"]
    assert len(lines) == 8


def test_schedule_to_dataframe():
    sol = build_florian_solution([0, 1, 2, 3], 0, True, 1)
    df = schedule_to_dataframe(sol, {0: "ATL", 1: "NYM", 2: "PHI", 3: "MON"})
    assert len(df) == 12
    first = df[df["slot"] == 0]
    assert set(zip(first["home_id"], first["away_id"])) == {(1, 0), (2, 3)}
