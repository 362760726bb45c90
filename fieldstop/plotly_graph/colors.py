from __future__ import annotations
from typing import List

LEVEL_COLORS = {
    0: "#ff6b6b",  # focal person
    1: "#4dabf5",  # direct
    2: "#69f0ae",  # indirect
}
FALLBACK_COLOR = "#666666"

DIRECT_EDGE_COLOR = "rgba(77, 171, 245, 0.27)"
INDIRECT_EDGE_COLOR = "rgba(105, 240, 174, 0.27)"


def node_color(level: int) -> str:
    return LEVEL_COLORS.get(level, FALLBACK_COLOR)


def build_level_colors(nodes: List[dict]) -> List[str]:
    return [node_color(n["level"]) for n in nodes]


def edge_color(is_indirect: bool) -> str:
    return INDIRECT_EDGE_COLOR if is_indirect else DIRECT_EDGE_COLOR
