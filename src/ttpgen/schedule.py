# src/ttpgen/schedule.py

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from ttpgen.instance import Instance, TeamId

logger = logging.getLogger(__name__)

UNASSIGNED = -1


@dataclass(frozen=True)
class Game:
    """One cell of a schedule: seen from a team, at home or not, against `opponent`."""
    home_game: bool = False
    opponent: int = UNASSIGNED


Row = Tuple[Game, ...]                  # one slot, indexed by team id
Rounds = List[List[Tuple[TeamId, TeamId]]]  # (home, away) per slot


@dataclass(frozen=True)
class Solution:
    """
    A slots x teams matrix: games[slot][team] is team's game in that slot.
    `id` does not take part in equality or hashing, so two solutions with the
    same games compare equal whatever their ids.
    """
    games: Tuple[Row, ...]
    id: int = field(default=-1, compare=False)

    @property
    def num_slots(self) -> int:
        return len(self.games)

    @property
    def num_teams(self) -> int:
        return len(self.games[0]) if self.games else 0

    def __getitem__(self, slot: int) -> Row:
        return self.games[slot]

    def with_id(self, solution_id: int) -> "Solution":
        return Solution(games=self.games, id=solution_id)


def empty_grid(num_slots: int, num_teams: int) -> List[List[Game]]:
    return [[Game() for _ in range(num_teams)] for _ in range(num_slots)]


# ---------------------------------------------------------------------
# Florian's circular construction
# ---------------------------------------------------------------------

def build_florian_solution(order: Sequence[TeamId], fixed_team: int, upward: bool,
                           solution_id: int = -1) -> Solution:
    """
    Circle-method double round-robin.

    The team at position `fixed_team` of `order` is moved to the end and stays
    there; the other n-1 teams turn one step to the right after every round.
    In round r, position i meets position n-1-i, and position i is at home
    iff (r is even) == upward.

    Instead of rotating a list, the team at rotating position p in round r is
    read as rest[(p - r) mod (n-1)].
    """
    n = len(order)
    if n < 2 or n % 2 != 0:
        raise ValueError(f"Need an even number of teams >= 2, got {n}")
    if not 0 <= fixed_team < n:
        raise ValueError(f"Fixed team index {fixed_team} out of range for {n} teams")
    if sorted(order) != list(range(n)):
        raise ValueError(f"Team order {list(order)} is not a permutation of 0..{n - 1}")

    anchor = order[fixed_team]
    rest = [t for i, t in enumerate(order) if i != fixed_team]
    m = n - 1

    logger.debug("Florian construction | %d teams | fixed team %d | %s",
                 n, anchor, "upward" if upward else "downward")

    def at(position: int, rnd: int) -> TeamId:
        if position == m:
            return anchor
        return rest[(position - rnd) % m]

    verbose = logger.isEnabledFor(logging.DEBUG)
    grid = empty_grid(2 * m, n)
    for rnd in range(2 * m):
        home_first = (rnd % 2 == 0) == upward
        for i in range(n // 2):
            team_a = at(i, rnd)
            team_b = at(n - 1 - i, rnd)
            grid[rnd][team_a] = Game(home_game=home_first, opponent=team_b)
            grid[rnd][team_b] = Game(home_game=not home_first, opponent=team_a)
            if verbose:
                logger.debug("Round %d: team %d vs team %d | %d is home",
                             rnd, team_a, team_b, team_a if home_first else team_b)

    return Solution(games=tuple(tuple(row) for row in grid), id=solution_id)


def generate_solution(instance: Instance, order: Sequence[TeamId], fixed_team: int,
                      upward: bool, solution_id: int) -> Solution:
    """Build one schedule for `instance` from a team ordering."""
    if len(order) != instance.num_teams:
        raise ValueError(
            f"Ordering {list(order)} has {len(order)} teams, "
            f"instance {instance.name!r} has {instance.num_teams}"
        )
    return build_florian_solution(order, fixed_team, upward, solution_id)


# ---------------------------------------------------------------------
# Structural checks
# ---------------------------------------------------------------------

def list_solution_issues(solution: Solution, num_teams: Optional[int] = None) -> List[str]:
    """
    Human-readable list of structural problems: ragged rows, opponents out of
    range, self-play, broken symmetry between the two sides of a game.
    An empty list means the matrix is well formed.
    """
    issues = []
    if solution.num_slots == 0:
        return ["Solution has no slots"]

    n = solution.num_teams if num_teams is None else num_teams
    for s, row in enumerate(solution.games):
        if len(row) != n:
            issues.append(f"Slot {s}: {len(row)} games, expected {n}")
            continue
        for t, game in enumerate(row):
            o = game.opponent
            if not 0 <= o < n:
                issues.append(f"Slot {s}: team {t} has opponent {o} out of range")
                continue
            if o == t:
                issues.append(f"Slot {s}: team {t} plays itself")
                continue
            other = row[o]
            if other.opponent != t:
                issues.append(f"Slot {s}: team {t} meets {o} but {o} meets {other.opponent}")
            elif other.home_game == game.home_game:
                issues.append(f"Slot {s}: teams {t} and {o} are both {'home' if game.home_game else 'away'}")
    return issues


def validate_solution(solution: Solution, instance: Instance) -> None:
    issues = list_solution_issues(solution, instance.num_teams)
    if solution.num_slots != instance.num_slots:
        issues.insert(0, f"{solution.num_slots} slots, instance has {instance.num_slots}")
    if issues:
        raise ValueError(f"Solution {solution.id} is malformed for instance {instance.name!r}: "
                         + "; ".join(issues[:5]))


def check_double_round_robin(solution: Solution) -> bool:
    """
    True iff the matrix is well formed, has 2*(n-1) slots, and every unordered
    pair meets exactly twice with a different home team each time.
    """
    if list_solution_issues(solution):
        return False
    n = solution.num_teams
    if solution.num_slots != 2 * (n - 1):
        return False

    legs: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for home, away in (g for rnd in to_rounds(solution) for g in rnd):
        key = (home, away) if home < away else (away, home)
        legs[key].append(home)

    if len(legs) != n * (n - 1) // 2:
        return False
    return all(len(h) == 2 and h[0] != h[1] for h in legs.values())


def has_duplicate_solutions(solutions: Iterable[Solution]) -> bool:
    seen = set()
    for sol in solutions:
        if sol in seen:
            return True
        seen.add(sol)
    return False


# ---------------------------------------------------------------------
# Conversions / display
# ---------------------------------------------------------------------

def to_rounds(solution: Solution) -> Rounds:
    """(home, away) pairs per slot."""
    rounds = []
    for row in solution.games:
        rounds.append([(t, g.opponent) for t, g in enumerate(row) if g.home_game])
    return rounds


def solution_to_string(solution: Solution, teams: Dict[TeamId, str]) -> str:
    """
    Grid with one column per team; each cell is the opponent id followed by
    H (home) or A (away):

        Id: 1
                   ATL:0   NYM:1   PHI:2   MON:3
          Slot:0      1A      0H      3H      2A
    """
    lines = [f"Id: {solution.id}"]
    header = [" " * 8]
    for t in range(solution.num_teams):
        header.append(f"{teams.get(t, t)}:{t}".rjust(8))
    lines.append("".join(header))
    for s, row in enumerate(solution.games):
        cells = [f"Slot:{s}".rjust(8)]
        for g in row:
            cells.append(f"{g.opponent}{'H' if g.home_game else 'A'}".rjust(8))
        lines.append("".join(cells))
    return "\n".join(lines)


def schedule_to_dataframe(solution: Solution, teams: Dict[TeamId, str]) -> pd.DataFrame:
    rows = []
    for slot, games in enumerate(to_rounds(solution)):
        for h, a in games:
            rows.append({"slot": slot, "home_id": h, "away_id": a,
                         "home": teams[h], "away": teams[a]})
    return pd.DataFrame(rows).sort_values(["slot", "home"]).reset_index(drop=True)
