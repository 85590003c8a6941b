"""
Consistent visual styles for peptide/protein graph figures.

Domain Conventions
------------------
- Peptides = Gray-blue circles, proteins = Blue squares,
  contaminants = Orange squares
- Queried protein highlighted in Emerald
- Raw vs filtered passes: Slate vs Blue bars
- All colorblind-safe palettes

Styles are applied through ``style_context()``, which scopes every
matplotlib/seaborn parameter change to a ``with`` block and restores the
previous state on exit, even when plotting fails.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Literal

import matplotlib.pyplot as plt
import seaborn as sns

__all__ = ['Palette', 'PALETTES', 'get_palette', 'style_context']


@dataclass(frozen=True)
class Palette:
    """
    Color palette for CC figures.

    Attributes
    ----------
    peptide : str
        Peptide vertex color
    protein : str
        Protein vertex color
    contaminant : str
        Contaminant protein vertex color
    highlight : str
        Outline of the queried protein
    edge : str
        Peptide-protein edge color
    raw : str
        Bars of the unfiltered pass
    filtered : str
        Bars of the filtered pass
    """
    peptide: str = "#94a3b8"      # Slate-400
    protein: str = "#2563eb"      # Blue-600
    contaminant: str = "#f97316"  # Orange-500
    highlight: str = "#059669"    # Emerald-600
    edge: str = "#6b7280"         # Gray-500
    raw: str = "#475569"          # Slate-600
    filtered: str = "#2563eb"     # Blue-600

    @property
    def roles(self) -> dict[str, str]:
        """Color mapping for subgraph vertex roles."""
        return {"peptide": self.peptide, "protein": self.protein, "contaminant": self.contaminant}

    def for_passes(self, labels: list[str]) -> list[str]:
        """Bar colors for analysis passes: first is raw, the rest filtered shades."""
        if not labels:
            return []
        extra = sns.light_palette(self.filtered, n_colors=len(labels) + 1, reverse=True).as_hex()
        return [self.raw] + extra[:len(labels) - 1]


PALETTES = {
    "default": Palette(),
    "colorblind": Palette(
        peptide="#bbbbbb",
        protein="#0077bb",
        contaminant="#ee7733",
        highlight="#009988",
        edge="#999999",
        raw="#555555",
        filtered="#0077bb",
    ),
    "print": Palette(
        peptide="#e6e6e6",
        protein="#333333",
        contaminant="#999999",
        highlight="#000000",
        edge="#808080",
        raw="#1a1a1a",
        filtered="#808080",
    ),
}


def get_palette(palette: str | Palette = "default") -> Palette:
    if isinstance(palette, Palette):
        return palette
    return PALETTES.get(palette, PALETTES["default"])


_BASE_PARAMS = {
    "figure.facecolor": "white",
    "axes.facecolor": "white",
    "axes.edgecolor": "#333333",
    "axes.labelcolor": "#333333",
    "text.color": "#333333",
    "xtick.color": "#333333",
    "ytick.color": "#333333",
    "axes.spines.top": False,
    "axes.spines.right": False,
    "legend.frameon": False,
}

_STYLE_PARAMS = {
    "paper": ("paper", {"font.size": 10, "axes.titlesize": 11, "savefig.dpi": 300}),
    "presentation": ("talk", {"font.size": 14, "axes.titlesize": 18, "savefig.dpi": 150}),
    "notebook": ("notebook", {"font.size": 11, "axes.titlesize": 12, "savefig.dpi": 150}),
}


@contextmanager
def style_context(
    style: Literal["paper", "presentation", "notebook"] = "paper",
    font_scale: float = 1.0,
) -> Iterator[None]:
    """
    Apply figure style for the duration of a ``with`` block.

    Examples
    --------
    >>> with style_context("paper"):
    ...     fig, ax = plt.subplots()
    >>> # rcParams are back to their previous values here
    """
    if style not in _STYLE_PARAMS:
        raise ValueError(f"Unknown style '{style}'. Choose from: {', '.join(_STYLE_PARAMS)}")
    context, params = _STYLE_PARAMS[style]
    rc = dict(_BASE_PARAMS)
    for key, value in params.items():
        rc[key] = value * font_scale if key.endswith("size") else value

    with sns.axes_style("white"), sns.plotting_context(context, font_scale=font_scale), plt.rc_context(rc):
        yield
