# src/ttpgen/distances.py

from typing import List, Sequence, Union

import pandas as pd

from ttpgen.instance import Instance

DistanceMatrix = Union[pd.DataFrame, Sequence[Sequence[int]]]


def build_distance_matrix(instance: Instance) -> pd.DataFrame:
    """
    Dense travel matrix D with D.loc[origin, destination] = cost.
    Pairs missing from the instance stay 0; a repeated pair keeps its last value.
    """
    n = instance.num_teams
    rows = [(d.team1, d.team2, d.dist) for d in instance.distances]
    if not rows:
        return pd.DataFrame(0, index=range(n), columns=range(n), dtype="int64")

    df = pd.DataFrame(rows, columns=["i", "j", "dist"])
    df = df.drop_duplicates(subset=["i", "j"], keep="last")

    D = (df.pivot(index="i", columns="j", values="dist")
           .reindex(index=range(n), columns=range(n))
           .fillna(0)
           .astype("int64"))
    D.index.name = None
    D.columns.name = None
    return D


def matrix_rows(D: DistanceMatrix) -> List[List[int]]:
    """Plain nested lists of Python ints, the form the evaluator iterates over."""
    if isinstance(D, pd.DataFrame):
        return D.to_numpy().tolist()
    if isinstance(D, list) and all(isinstance(row, list) for row in D):
        return D
    return [[int(x) for x in row] for row in D]
