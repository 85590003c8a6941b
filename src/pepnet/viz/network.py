"""
Rendering of connected-component subgraphs and CC size distributions.

Only drawing lives here; which vertices and edges to draw is decided by
pepnet.graph.subgraph.extract_subgraph.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

import matplotlib.pyplot as plt
import networkx as nx
import pandas as pd
import seaborn as sns
from matplotlib.lines import Line2D

from pepnet.graph.subgraph import CCSubgraph
from pepnet.stats.ambiguity import CCStats
from pepnet.viz.core import Figure
from pepnet.viz.styles import Palette, get_palette, style_context

__all__ = ['plot_cc_subgraph', 'plot_cc_size_distribution']

logger = logging.getLogger(__name__)

Layout = Literal["bipartite", "spring", "kamada_kawai"]


def _layout(G: nx.Graph, layout: Layout, seed: int) -> dict:
    if layout == "bipartite":
        peptides = [n for n, d in G.nodes(data=True) if d["bipartite"] == 0]
        return nx.bipartite_layout(G, peptides)
    if layout == "kamada_kawai" and G.number_of_nodes() > 1:
        return nx.kamada_kawai_layout(G)
    return nx.spring_layout(G, seed=seed)


def plot_cc_subgraph(
    subgraph: CCSubgraph,
    layout: Layout = "spring",
    palette: str | Palette = "default",
    show_labels: bool = True,
    figsize: tuple[float, float] = (8, 6),
    seed: int = 42,
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> Figure:
    """
    Draw the bipartite peptide-protein graph of one component.

    Parameters
    ----------
    subgraph : CCSubgraph
        Output of extract_subgraph
    layout : {"bipartite", "spring", "kamada_kawai"}
        Node placement
    palette : str or Palette
        Colors per vertex role
    show_labels : bool
        Draw vertex identifiers
    seed : int
        Seed for the spring layout

    Returns
    -------
    Figure
    """
    pal = get_palette(palette)
    G = subgraph.to_networkx()
    pos = _layout(G, layout, seed)

    with style_context(style):
        fig, ax = plt.subplots(figsize=figsize)
        nx.draw_networkx_edges(G, pos, ax=ax, edge_color=pal.edge, alpha=0.6, width=1.0)

        for role, shape in (("peptide", "o"), ("protein", "s"), ("contaminant", "s")):
            nodes = [n for n, d in G.nodes(data=True) if d["role"] == role]
            if not nodes:
                continue
            edgecolors = [pal.highlight if n == subgraph.protein else "white" for n in nodes]
            nx.draw_networkx_nodes(
                G, pos, nodelist=nodes, ax=ax,
                node_color=pal.roles[role],
                node_shape=shape,
                node_size=300 if role == "peptide" else 500,
                edgecolors=edgecolors,
                linewidths=2,
            )

        if show_labels:
            nx.draw_networkx_labels(G, pos, ax=ax, font_size=7)

        handles = [
            Line2D([], [], marker=m, linestyle="", markersize=9, color=pal.roles[r], label=r)
            for r, m in (("peptide", "o"), ("protein", "s"), ("contaminant", "s"))
            if any(d["role"] == r for _, d in G.nodes(data=True))
        ]
        ax.legend(handles=handles, loc="best")
        n_prot = len(subgraph.proteins)
        n_pep = len(subgraph.peptides)
        ax.set_title(f"{subgraph.component_id}: {n_prot} proteins, {n_pep} peptides")
        ax.axis("off")

    logger.debug(f"Plotted {subgraph.component_id} ({G.number_of_nodes()} vertices)")
    return Figure(
        fig=fig,
        title=f"Connected component {subgraph.component_id}",
        description=f"Peptide-protein graph of the component containing {subgraph.protein}",
        metadata={"component_id": subgraph.component_id, "protein": subgraph.protein, "layout": layout},
    )


def plot_cc_size_distribution(
    stats: CCStats | Sequence[CCStats],
    labels: Optional[Sequence[str]] = None,
    palette: str | Palette = "default",
    log_scale: bool = True,
    figsize: tuple[float, float] = (8, 4),
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> Figure:
    """
    Bar chart of component counts per size bucket, one bar group per pass.

    Parameters
    ----------
    stats : CCStats or sequence of CCStats
        One entry per analysis pass (e.g. raw and filtered)
    labels : sequence of str, optional
        Pass names; defaults to "pass 1", "pass 2", ...
    log_scale : bool
        Logarithmic count axis (single-protein CCs usually dominate)
    """
    if isinstance(stats, CCStats):
        stats = [stats]
    if labels is None:
        labels = [f"pass {k}" for k in range(1, len(stats) + 1)]
    if len(labels) != len(stats):
        raise ValueError(f"Got {len(labels)} labels for {len(stats)} stats")

    pal = get_palette(palette)
    frames = []
    for label, s in zip(labels, stats):
        df = s.size_distribution.rename("n_components").reset_index()
        df["pass"] = label
        frames.append(df)
    data = pd.concat(frames, ignore_index=True)

    with style_context(style):
        fig, ax = plt.subplots(figsize=figsize)
        sns.barplot(
            data=data, x="cc_size", y="n_components", hue="pass",
            palette=pal.for_passes(list(labels)), ax=ax,
        )
        if log_scale and (data["n_components"] > 0).any():
            ax.set_yscale("log")
        ax.set_xlabel("Proteins per connected component")
        ax.set_ylabel("Number of CCs")
        ax.set_title("Connected component size distribution")

    return Figure(
        fig=fig,
        title="CC size distribution",
        description="Number of connected components per size bucket",
        metadata={"labels": list(labels)},
    )
