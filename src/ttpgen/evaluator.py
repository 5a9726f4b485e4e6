# src/ttpgen/evaluator.py

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ttpgen.distances import DistanceMatrix, matrix_rows
from ttpgen.instance import CapacityConstraint, Instance, SeparationConstraint
from ttpgen.schedule import Solution, validate_solution

logger = logging.getLogger(__name__)

# A double round-robin meets each pair twice; anything above this is surely broken.
MAX_MEETINGS_PER_PAIR = 4


@dataclass(frozen=True)
class Evaluation:
    distance: int
    capacity_violations: int
    separation_violations: int
    round_robin_ok: bool
    weighted_penalty: int = 0

    @property
    def feasible(self) -> bool:
        return (self.round_robin_ok
                and self.capacity_violations == 0
                and self.separation_violations == 0)


def _applies_to(teams_filter: Sequence[int], num_teams: int) -> List[int]:
    if not teams_filter:
        return list(range(num_teams))
    return [t for t in teams_filter if 0 <= t < num_teams]


# ---------------- CONSTRAINT CHECKS ---------------- #

def count_capacity_violations(constraint: CapacityConstraint, solution: Solution) -> int:
    """
    Slide a window of `intp` slots over each team's games and count the
    windows whose number of home (mode 'H') or away (mode 'A') games falls
    outside [min, max]. Windows never stick out past the last slot.
    """
    num_slots = solution.num_slots
    width = constraint.intp
    if width < 1 or width > num_slots:
        return 0

    want_home = constraint.mode1 == "H"
    violations = 0
    for team in _applies_to(constraint.teams1, solution.num_teams):
        hits = [1 if solution.games[s][team].home_game == want_home else 0
                for s in range(num_slots)]
        count = sum(hits[:width])
        for start in range(num_slots - width + 1):
            if start > 0:
                count += hits[start + width - 1] - hits[start - 1]
            if count < constraint.min or count > constraint.max:
                violations += 1
    return violations


def count_separation_violations(constraint: SeparationConstraint, solution: Solution) -> int:
    """
    For each team, compare every meeting with the previous meeting against the
    same opponent: gap <= min or gap > max is one violation. A first meeting
    has nothing to compare against.
    """
    violations = 0
    for team in _applies_to(constraint.teams, solution.num_teams):
        last_slot_vs: Dict[int, int] = {}
        for slot, row in enumerate(solution.games):
            opponent = row[team].opponent
            last = last_slot_vs.get(opponent)
            if last is not None:
                gap = slot - last
                if gap <= constraint.min or gap > constraint.max:
                    violations += 1
            last_slot_vs[opponent] = slot
    return violations


def pair_meetings(solution: Solution) -> Counter:
    """Number of slots in which each unordered pair (lo, hi) meets."""
    meetings: Counter = Counter()
    for row in solution.games:
        for team, game in enumerate(row):
            if team < game.opponent:
                meetings[(team, game.opponent)] += 1
    return meetings


def check_round_robin(solution: Solution) -> bool:
    return all(c <= MAX_MEETINGS_PER_PAIR for c in pair_meetings(solution).values())


def constraint_violations(instance: Instance, solution: Solution) -> Tuple[List[int], List[int]]:
    """Violation count per capacity constraint and per separation constraint."""
    capacity = [count_capacity_violations(c, solution) for c in instance.capacity_constraints]
    separation = [count_separation_violations(c, solution) for c in instance.separation_constraints]
    return capacity, separation


def check_constraints(instance: Instance, solution: Solution) -> Tuple[int, int, bool]:
    """
    Returns (capacity_violations, separation_violations, round_robin_ok).
    """
    capacity, separation = constraint_violations(instance, solution)
    return sum(capacity), sum(separation), check_round_robin(solution)


def _penalty(instance: Instance, capacity: Sequence[int], separation: Sequence[int]) -> int:
    total = sum(n * c.penalty for n, c in zip(capacity, instance.capacity_constraints))
    total += sum(n * c.penalty for n, c in zip(separation, instance.separation_constraints))
    return total


def weighted_penalty(instance: Instance, solution: Solution) -> int:
    """Violations weighted by each constraint's penalty."""
    return _penalty(instance, *constraint_violations(instance, solution))


# ---------------- TRAVEL ---------------- #

def team_travel(team: int, solution: Solution, rows: Sequence[Sequence[int]]) -> int:
    """
    Walk the team through its season: it starts at its own venue, moves to its
    own venue for home games and to the opponent's for away games, paying
    rows[from][to] for every move.
    """
    travel = 0
    current = team
    for slot_games in solution.games:
        game = slot_games[team]
        nxt = team if game.home_game else game.opponent
        travel += rows[current][nxt]
        current = nxt
    return travel


def evaluate_objective(D: DistanceMatrix, solution: Solution) -> int:
    rows = matrix_rows(D)
    return sum(team_travel(t, solution, rows) for t in range(solution.num_teams))


def evaluate_solution(instance: Instance, D: DistanceMatrix, solution: Solution,
                      validate: bool = True) -> Evaluation:
    """
    Travel distance plus constraint counts for one schedule.
    Malformed matrices are rejected before anything is counted.
    """
    if validate:
        validate_solution(solution, instance)

    capacity, separation = constraint_violations(instance, solution)
    return Evaluation(
        distance=evaluate_objective(D, solution),
        capacity_violations=sum(capacity),
        separation_violations=sum(separation),
        round_robin_ok=check_round_robin(solution),
        weighted_penalty=_penalty(instance, capacity, separation),
    )


# ---------------- TRAVEL METRICS / REPORT ---------------- #

def compute_travel_metrics(teams: Dict[int, str], solution: Solution, D: DistanceMatrix):
    """
    Per-team travel table and a total/average/variance summary.
    """
    rows = matrix_rows(D)
    results = []
    for tid in range(solution.num_teams):
        results.append({
            "team": teams.get(tid, str(tid)),
            "travel_distance": team_travel(tid, solution, rows),
        })

    df = pd.DataFrame(results)
    summary = {
        "total_travel": int(df["travel_distance"].sum()),
        "average_travel": float(df["travel_distance"].mean()),
        "variance_travel": float(df["travel_distance"].var()),
    }
    return df, summary


def write_evaluation_report(instance: Instance, solution: Solution, D: DistanceMatrix,
                            save_path: str, evaluation: Optional[Evaluation] = None) -> Evaluation:
    """
    Plain-text report: per-team travel, totals, and constraint counts.
    """
    if evaluation is None:
        evaluation = evaluate_solution(instance, D, solution)
    travel_df, travel_summary = compute_travel_metrics(instance.team_names(), solution, D)

    with open(save_path, "w") as f:
        f.write(f"===== SOLUTION {solution.id} ({instance.name}) =====\n")
        f.write("===== TRAVEL SUMMARY =====\n")
        f.write(travel_df.to_string(index=False))
        f.write("\n\nTOTAL TRAVEL: {:.0f}".format(travel_summary["total_travel"]))
        f.write("\nAVERAGE TRAVEL: {:.1f}".format(travel_summary["average_travel"]))
        f.write("\nVARIANCE: {:.1f}".format(travel_summary["variance_travel"]))

        f.write("\n\n===== CONSTRAINT CHECKS =====\n")
        f.write(f"Capacity Violations: {evaluation.capacity_violations}\n")
        f.write(f"Separation Violations: {evaluation.separation_violations}\n")
        f.write(f"Round Robin Respected: {evaluation.round_robin_ok}\n")
        f.write(f"Weighted Penalty: {evaluation.weighted_penalty}\n")
        f.write(f"\nFeasible: {evaluation.feasible}\n")

    logger.info("Evaluation report for solution %d saved to %s", solution.id, save_path)
    return evaluation
