# src/ttpgen/parser.py

import logging
import xml.etree.ElementTree as ET
from typing import List, Tuple

from ttpgen.instance import (
    CapacityConstraint,
    Distance,
    Instance,
    SeparationConstraint,
    Slot,
    Team,
    validate_instance,
)

logger = logging.getLogger(__name__)


def _int(node: ET.Element, attr: str, default: int = 0) -> int:
    value = node.get(attr)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"<{node.tag}> attribute {attr}={value!r} is not an integer") from None


def _team_list(node: ET.Element, attr: str) -> Tuple[int, ...]:
    # RobinX lists team ids separated by ';'
    raw = node.get(attr) or ""
    return tuple(int(x) for x in raw.split(";") if x.strip())


def parse_instance(xml_path: str, validate: bool = True) -> Instance:
    """
    Returns the instance model of a RobinX / ITC2021 style XML file:
      name:                    <InstanceName>
      teams / slots:           <Resources>/<Teams>, <Resources>/<Slots>
      distances:               <Data>/<Distances>
      capacity constraints:    every <CA*> element
      separation constraints:  every <SE*> element
    """
    tree = ET.parse(xml_path)
    root = tree.getroot()

    name_node = root.find(".//InstanceName")
    name = name_node.text.strip() if name_node is not None and name_node.text else ""

    # ----------------------------
    # TEAMS
    # ----------------------------
    teams: List[Team] = []
    for t in root.iter("team"):
        teams.append(Team(id=_int(t, "id"),
                          league=_int(t, "league"),
                          name=t.get("name", "Null"),
                          team_groups=_int(t, "teamGroups")))

    # ----------------------------
    # SLOTS
    # ----------------------------
    slots = [Slot(id=_int(s, "id"), name=s.get("name", "Null")) for s in root.iter("slot")]

    # ----------------------------
    # DISTANCES
    # ----------------------------
    distances = [Distance(team1=_int(d, "team1"), team2=_int(d, "team2"), dist=_int(d, "dist"))
                 for d in root.iter("distance")]

    # ----------------------------
    # CAPACITY (CA*) / SEPARATION (SE*) CONSTRAINTS
    # ----------------------------
    capacity: List[CapacityConstraint] = []
    separation: List[SeparationConstraint] = []
    constraints_root = root.find("Constraints")
    if constraints_root is not None:
        for node in constraints_root.iter():
            if node.tag.startswith("CA"):
                capacity.append(CapacityConstraint(
                    intp=_int(node, "intp"),
                    min=_int(node, "min"),
                    max=_int(node, "max"),
                    mode1=(node.get("mode1") or "H")[0],
                    mode2=node.get("mode2", "GAMES"),
                    penalty=_int(node, "penalty"),
                    teams1=_team_list(node, "teams1"),
                    teams2=_team_list(node, "teams2"),
                    type=node.get("type", "HARD"),
                ))
            elif node.tag.startswith("SE"):
                separation.append(SeparationConstraint(
                    min=_int(node, "min"),
                    max=_int(node, "max"),
                    penalty=_int(node, "penalty"),
                    teams=_team_list(node, "teams"),
                    type=node.get("type", "HARD"),
                ))

    instance = Instance(
        name=name,
        teams=tuple(sorted(teams, key=lambda t: t.id)),
        slots=tuple(sorted(slots, key=lambda s: s.id)),
        distances=tuple(distances),
        capacity_constraints=tuple(capacity),
        separation_constraints=tuple(separation),
    )
    logger.info("Loaded instance %r: %d teams, %d slots, %d distances, %d CA, %d SE",
                instance.name, instance.num_teams, instance.num_slots,
                len(instance.distances), len(capacity), len(separation))

    if validate:
        validate_instance(instance)
    return instance
