"""
pepnet - Protein identification ambiguity from peptide/protein graphs

Builds the shared-peptide graph of a shotgun-proteomics search result, finds
its connected components and measures how much transcriptome evidence reduces
the ambiguity of protein identifications.
"""

__version__ = "0.1.0"

from pepnet.core.incidence import IncidenceMatrix
from pepnet.core.transform import Transform
from pepnet.filtering.transcriptome import FilterPolicy
from pepnet.pipeline import AmbiguityPipeline, AmbiguityReport, compare_reports

__all__ = [
    "IncidenceMatrix",
    "Transform",
    "FilterPolicy",
    "AmbiguityPipeline",
    "AmbiguityReport",
    "compare_reports",
]
