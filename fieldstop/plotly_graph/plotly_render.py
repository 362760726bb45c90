from __future__ import annotations

import json
from typing import List

from plotly import graph_objects as go

from .layout import discovery_tree, level_ring_layout
from .colors import build_level_colors, edge_color

# marker size in px per unit of node size
SIZE_SCALE = 1.5
MAX_EDGE_WIDTH = 8


def _edge_traces(edges: List[dict], pos) -> List[go.Scatter]:
    traces = []
    for e in edges:
        if e["source"] not in pos or e["target"] not in pos:
            continue
        x0, y0 = pos[e["source"]]
        x1, y1 = pos[e["target"]]
        traces.append(go.Scatter(
            x=[x0, x1],
            y=[y0, y1],
            mode="lines",
            line=dict(width=min(e["weight"], MAX_EDGE_WIDTH), color=edge_color(e["is_indirect"])),
            hoverinfo="text",
            hovertext=f"{e['weight']} shared approach(es)",
            showlegend=False,
        ))
    return traces


def build_network_figure(network: dict, ring_gap: float = 4.0) -> go.Figure:
    nodes, edges = network["nodes"], network["edges"]
    roots = [n["id"] for n in nodes if n["level"] == 0]

    if not roots:
        fig = go.Figure()
        fig.update_layout(title="No relationship data found")
        return fig

    children_map = discovery_tree(nodes, edges)
    pos = level_ring_layout(children_map, roots[0], ring_gap=ring_gap)

    placed = [n for n in nodes if n["id"] in pos]
    node_trace = go.Scatter(
        x=[pos[n["id"]][0] for n in placed],
        y=[pos[n["id"]][1] for n in placed],
        mode="markers+text",
        text=[n["label"] for n in placed],
        textposition="bottom center",
        hoverinfo="text",
        hovertext=[f"{n['label']} ({n['classification']})" for n in placed],
        customdata=[n["id"] for n in placed],
        marker=dict(
            size=[n["size"] * SIZE_SCALE for n in placed],
            color=build_level_colors(placed),
            line=dict(width=1, color="#333"),
        ),
        textfont=dict(size=10, color="white"),
        showlegend=False,
    )

    xs = [xy[0] for xy in pos.values()]
    ys = [xy[1] for xy in pos.values()]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    pad_x = 0.15 * (x_max - x_min if x_max > x_min else 1)
    pad_y = 0.15 * (y_max - y_min if y_max > y_min else 1)

    fig = go.Figure(data=[*_edge_traces(edges, pos), node_trace])
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        dragmode="pan",
        autosize=True,
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="#1a1a1a",
        paper_bgcolor="#1a1a1a",
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[x_min - pad_x, x_max + pad_x],
            scaleanchor="y",
            scaleratio=1,
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[y_min - pad_y, y_max + pad_y],
        ),
    )
    return fig


def build_network_figure_json(network: dict) -> dict:
    """Figure as a plain JSON-compatible dict (numpy arrays flattened)."""
    return json.loads(build_network_figure(network).to_json())


def write_html(fig: go.Figure, out_path: str) -> None:
    config = {"scrollZoom": True, "displayModeBar": True, "responsive": True}
    fig.write_html(out_path, include_plotlyjs="cdn", full_html=True, config=config)
