"""Relationship network: people linked by shared approaches.

Starting from a focal person, the network is expanded through co-participants
up to ``MAX_LEVEL`` hops:

* level 0 is the focal person,
* level 1 are people who shared an approach with the focal person,
* level 2 are people who shared an approach with a level-1 person.

Expansion is depth-first: once a person's expansion starts, it runs to
completion before the expanding person moves on to its next co-participant.
A person keeps the level at which it was first reached, which is not
necessarily its shortest distance from the focal person.

Edges are aggregated per unordered pair of people. An edge's weight is the
number of distinct approaches shared by the pair, and its ``is_indirect``
flag records whether it was first seen while expanding someone other than
the focal person.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_LEVEL = 2
NODE_SIZES = {0: 20, 1: 15, 2: 10}
CLASSIFICATIONS = {0: "selected", 1: "direct", 2: "indirect"}
UNNAMED_LABEL = "Name not provided"

PairKey = Tuple[str, str]


def pair_key(a: str, b: str) -> PairKey:
    """Order-independent key for the pair (a, b)."""
    return (a, b) if a <= b else (b, a)


@dataclass
class EdgeAccumulator:
    is_indirect: bool
    approach_ids: List[str] = field(default_factory=list)

    @property
    def weight(self) -> int:
        return len(self.approach_ids)

    def add(self, approach_id: str) -> bool:
        if approach_id in self.approach_ids:
            return False
        self.approach_ids.append(approach_id)
        return True


def _person_id(person) -> Optional[str]:
    if not isinstance(person, dict):
        return None
    pid = person.get("id")
    if not isinstance(pid, str) or not pid:
        return None
    return pid


def _participants(approach) -> List[dict]:
    """Well-formed participants of an approach, first occurrence of each id."""
    seen = {}
    for person in approach.get("people") or []:
        pid = _person_id(person)
        if pid is None:
            logger.warning("Skipping malformed participant in approach %s", approach.get("id"))
            continue
        seen.setdefault(pid, person)
    return list(seen.values())


def _index_by_person(approaches: Iterable[dict]) -> Dict[str, List[Tuple[str, List[dict]]]]:
    """person id -> [(approach id, participants), ...] in input order."""
    index: Dict[str, List[Tuple[str, List[dict]]]] = {}
    for approach in approaches:
        if not isinstance(approach, dict) or not approach.get("id"):
            logger.warning("Skipping approach without an id")
            continue
        people = _participants(approach)
        if len(people) < 2:
            continue
        for person in people:
            index.setdefault(person["id"], []).append((approach["id"], people))
    return index


def make_node(person: dict, level: int) -> dict:
    return {
        "id": person["id"],
        "label": person.get("name") or UNNAMED_LABEL,
        "photo": person.get("profile_photo") or None,
        "size": NODE_SIZES[level],
        "level": level,
        "classification": CLASSIFICATIONS[level],
        "person": person,
    }


def build_network(focal_person: dict, approaches: Iterable[dict]) -> dict:
    """Build the relationship network around ``focal_person``.

    ``approaches`` must be the complete collection, each approach carrying
    resolved participant records under ``people``. Returns
    ``{"nodes": [...], "edges": [...]}`` with both lists in discovery order.
    """
    focal_id = _person_id(focal_person)
    if focal_id is None:
        raise ValueError("Focal person must have a non-empty id")

    index = _index_by_person(approaches)
    visited: set[str] = set()
    nodes: Dict[str, dict] = {}
    edges: Dict[PairKey, EdgeAccumulator] = {}

    def co_participants(person_id: str) -> Iterator[Tuple[str, dict]]:
        for approach_id, people in index.get(person_id, ()):
            for other in people:
                if other["id"] != person_id:
                    yield approach_id, other

    def visit(person: dict, level: int):
        visited.add(person["id"])
        if person["id"] not in nodes:
            nodes[person["id"]] = make_node(person, level)
        stack.append((person["id"], level, co_participants(person["id"])))

    stack: List[Tuple[str, int, Iterator[Tuple[str, dict]]]] = []
    visit(focal_person, 0)

    while stack:
        person_id, level, pending = stack[-1]
        step = next(pending, None)
        if step is None:
            stack.pop()
            continue
        approach_id, other = step

        key = pair_key(person_id, other["id"])
        edge = edges.get(key)
        if edge is None:
            edge = edges[key] = EdgeAccumulator(is_indirect=level > 0)
        edge.add(approach_id)

        if level < MAX_LEVEL and other["id"] not in visited:
            visit(other, level + 1)

    return {
        "nodes": list(nodes.values()),
        "edges": [
            {
                "source": source,
                "target": target,
                "weight": edge.weight,
                "approach_ids": list(edge.approach_ids),
                "is_indirect": edge.is_indirect,
            }
            for (source, target), edge in edges.items()
            # pairs recorded from the outermost level can point past the node set
            if source in nodes and target in nodes
        ],
    }


def find_node(network: dict, node_id: str) -> Optional[dict]:
    for node in network["nodes"]:
        if node["id"] == node_id:
            return node
    return None
