"""Construction, scoring and enumeration of Traveling Tournament Problem schedules."""

from ttpgen.distances import build_distance_matrix
from ttpgen.evaluator import Evaluation, check_constraints, evaluate_objective, evaluate_solution
from ttpgen.generator import SolutionPool, generate_all_solutions
from ttpgen.instance import (
    CapacityConstraint,
    Distance,
    Instance,
    SeparationConstraint,
    Slot,
    Team,
)
from ttpgen.parser import parse_instance
from ttpgen.permutations import generate_random_permutations
from ttpgen.schedule import Game, Solution, build_florian_solution, generate_solution

__version__ = "1.1.0"
