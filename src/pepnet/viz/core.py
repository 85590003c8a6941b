"""
Figure wrapper with metadata and consistent saving.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

import matplotlib.figure
import matplotlib.pyplot as plt

__all__ = ['Figure']

OutputFormat = Literal["png", "pdf", "svg"]


@dataclass
class Figure:
    """
    A matplotlib figure plus a title, description and creation metadata.

    Attributes
    ----------
    fig : matplotlib.figure.Figure
        The underlying figure
    title : str
        Human-readable title
    description : str
        What the figure shows
    metadata : dict
        Parameters used to build the figure (component id, protein, ...)

    Examples
    --------
    >>> fig = plot_cc_subgraph(subgraph)
    >>> fig.save("figures/CC12.pdf")
    """
    fig: matplotlib.figure.Figure
    title: str
    description: str = ""
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if "created_at" not in self.metadata:
            self.metadata["created_at"] = datetime.now().isoformat()

    def save(
        self,
        path: Path | str,
        format: Optional[OutputFormat] = None,
        dpi: int = 300,
        **kwargs,
    ) -> Path:
        """
        Save figure to file; format inferred from the extension (default png).

        Returns
        -------
        Path
            The path where the figure was saved.
        """
        path = Path(path)
        if format is None:
            format = path.suffix.lstrip(".").lower()
            if format not in ("png", "pdf", "svg"):
                format = "png"

        path.parent.mkdir(parents=True, exist_ok=True)
        save_kwargs = {"dpi": dpi, "bbox_inches": "tight", "facecolor": "white", **kwargs}
        self.fig.savefig(path, format=format, **save_kwargs)
        return path

    def close(self) -> None:
        """Release the figure's memory in pyplot."""
        plt.close(self.fig)
