from __future__ import annotations
import math
from typing import Dict, List, Tuple


def discovery_tree(nodes: List[dict], edges: List[dict]) -> Dict[str, List[str]]:
    """
    children_map[node_id] = [child_id, ...] where each level-N node hangs off
    the first level-(N-1) node it shares an edge with, in edge order.
    """
    level = {n["id"]: n["level"] for n in nodes}
    children_map: Dict[str, List[str]] = {n["id"]: [] for n in nodes}
    placed = {n["id"] for n in nodes if n["level"] == 0}

    for e in edges:
        a, b = e["source"], e["target"]
        if a not in level or b not in level:
            continue
        for parent, child in ((a, b), (b, a)):
            if child not in placed and level[child] == level[parent] + 1:
                children_map[parent].append(child)
                placed.add(child)

    # anything unreachable through the edge list goes under the focal node
    roots = [n["id"] for n in nodes if n["level"] == 0]
    if roots:
        for n in nodes:
            if n["id"] not in placed:
                children_map[roots[0]].append(n["id"])
                placed.add(n["id"])
    return children_map


def level_ring_layout(
    children_map: Dict[str, List[str]],
    root: str,
    ring_gap: float = 4.0,
    child_padding: float = 0.05,
) -> Dict[str, Tuple[float, float]]:
    """
    Focal node at the origin, each level on its own ring.
    Angles are allocated proportional to subtree size so a node's
    children sit in the wedge facing it.
    """
    if root not in children_map:
        return {}

    subtree_cache: Dict[str, int] = {}

    def subtree_size(node: str) -> int:
        if node in subtree_cache:
            return subtree_cache[node]
        size = 1
        for c in children_map.get(node, []):
            size += subtree_size(c)
        subtree_cache[node] = size
        return size

    subtree_size(root)
    pos: Dict[str, Tuple[float, float]] = {}

    def assign(node: str, depth: int, a0: float, a1: float):
        amid = 0.5 * (a0 + a1)
        r = depth * ring_gap
        pos[node] = (r * math.cos(amid), r * math.sin(amid))

        kids = children_map.get(node, [])
        if not kids:
            return
        sizes = [subtree_cache[k] for k in kids]
        total = sum(sizes)

        span = a1 - a0
        total_pad = child_padding * max(len(kids) - 1, 0)
        usable = max(span - total_pad, span * 0.3)
        pad = (span - usable) / max(len(kids) - 1, 1)

        cur = a0
        for kid, s in zip(kids, sizes):
            kspan = usable * s / total
            assign(kid, depth + 1, cur, cur + kspan)
            cur = cur + kspan + pad

    assign(root, 0, 0.0, 2.0 * math.pi)
    return pos
