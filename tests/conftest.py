import os

import pytest

from ttpgen.instance import Distance, Instance, Slot, Team

DATA_DIR = os.path.join(os.path.dirname(__file__), os.pardir, "data")


def make_instance(n, capacity=(), separation=(), distances=None, name="TEST"):
    if distances is None:
        distances = [Distance(i, j, abs(i - j)) for i in range(n) for j in range(n) if i != j]
    return Instance(
        name=name,
        teams=tuple(Team(id=i, name=f"T{i}") for i in range(n)),
        slots=tuple(Slot(id=s, name=f"Slot{s}") for s in range(2 * (n - 1))),
        distances=tuple(distances),
        capacity_constraints=tuple(capacity),
        separation_constraints=tuple(separation),
    )


@pytest.fixture
def four_teams():
    return make_instance(4)


@pytest.fixture
def abs_matrix():
    return [[abs(i - j) for j in range(4)] for i in range(4)]


@pytest.fixture
def nl4_path():
    return os.path.join(DATA_DIR, "NL4.xml")
