# src/ttpgen/instance.py

from dataclasses import dataclass
from typing import Tuple

TeamId = int


@dataclass(frozen=True)
class Team:
    id: TeamId
    league: int = 0
    name: str = "Null"
    team_groups: int = 0


@dataclass(frozen=True)
class Slot:
    id: int
    name: str = "Null"


@dataclass(frozen=True)
class Distance:
    team1: TeamId
    team2: TeamId
    dist: int


@dataclass(frozen=True)
class CapacityConstraint:
    """
    CA constraint: for every team, every window of `intp` consecutive slots
    must hold between `min` and `max` games of the kind selected by `mode1`
    ('H' = home games, 'A' = away games).
    """
    intp: int
    min: int
    max: int
    mode1: str = "H"
    mode2: str = "GAMES"
    penalty: int = 0
    teams1: Tuple[TeamId, ...] = ()
    teams2: Tuple[TeamId, ...] = ()
    type: str = "HARD"


@dataclass(frozen=True)
class SeparationConstraint:
    """
    SE constraint: two consecutive meetings of the same pair must be more than
    `min` and at most `max` slots apart.
    """
    min: int
    max: int
    penalty: int = 0
    teams: Tuple[TeamId, ...] = ()
    type: str = "HARD"


@dataclass(frozen=True)
class Instance:
    name: str
    teams: Tuple[Team, ...]
    slots: Tuple[Slot, ...]
    distances: Tuple[Distance, ...] = ()
    capacity_constraints: Tuple[CapacityConstraint, ...] = ()
    separation_constraints: Tuple[SeparationConstraint, ...] = ()

    @property
    def num_teams(self) -> int:
        return len(self.teams)

    @property
    def num_slots(self) -> int:
        return len(self.slots)

    @property
    def team_ids(self) -> Tuple[TeamId, ...]:
        return tuple(t.id for t in self.teams)

    def team_names(self):
        return {t.id: t.name for t in self.teams}


def validate_instance(instance: Instance) -> None:
    """
    Reject instances the constructor and checker cannot work with.
    Team ids double as matrix indices, so they must be exactly 0..N-1.
    """
    n = instance.num_teams
    if n < 2 or n % 2 != 0:
        raise ValueError(f"Instance {instance.name!r}: need an even number of teams >= 2, got {n}")

    ids = sorted(instance.team_ids)
    if ids != list(range(n)):
        raise ValueError(f"Instance {instance.name!r}: team ids must be 0..{n - 1}, got {ids}")

    expected_slots = 2 * (n - 1)
    if instance.num_slots != expected_slots:
        raise ValueError(
            f"Instance {instance.name!r}: {n} teams need {expected_slots} slots "
            f"for a double round-robin, got {instance.num_slots}"
        )

    for d in instance.distances:
        if not (0 <= d.team1 < n and 0 <= d.team2 < n):
            raise ValueError(
                f"Instance {instance.name!r}: distance {d.team1}->{d.team2} "
                f"references a team outside 0..{n - 1}"
            )

    for c in instance.capacity_constraints:
        if c.intp < 1:
            raise ValueError(f"Instance {instance.name!r}: capacity constraint with intp={c.intp}")
        if c.mode1 not in ("H", "A"):
            raise ValueError(f"Instance {instance.name!r}: unknown capacity mode {c.mode1!r}")
