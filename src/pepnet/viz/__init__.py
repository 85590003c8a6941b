"""
Visualization of peptide/protein connected components.

Static matplotlib/seaborn figures for:
- The bipartite peptide-protein graph of one connected component
- Component size distributions, optionally comparing analysis passes

Examples
--------
>>> from pepnet.viz import plot_cc_subgraph
>>>
>>> subgraph = pipeline.subgraph(report, "ENSP00000354587")
>>> fig = plot_cc_subgraph(subgraph, layout="bipartite")
>>> fig.save("figures/ENSP00000354587.pdf")
"""

from pepnet.viz.core import Figure
from pepnet.viz.styles import Palette, PALETTES, get_palette, style_context
from pepnet.viz.network import plot_cc_subgraph, plot_cc_size_distribution

__all__ = [
    # Core
    "Figure",
    # Styles
    "Palette",
    "PALETTES",
    "get_palette",
    "style_context",
    # Plots
    "plot_cc_subgraph",
    "plot_cc_size_distribution",
]
