"""
Core data structures for peptide/protein graph analysis.

1. IncidenceMatrix: binary peptide × protein mapping with named axes
2. Transform: abstract base class for immutable matrix transformations
3. Exceptions: MalformedInputError, UnknownProteinError, ProteinNotFoundError

Examples:
    >>> from pepnet.core import IncidenceMatrix
    >>> matrix = IncidenceMatrix.from_mapping({"pep1": ["P1", "P2"], "pep2": ["P2"]})
"""

from pepnet.core.exceptions import (
    PepnetError,
    MalformedInputError,
    UnknownProteinError,
    ProteinNotFoundError,
    EmptyGraphWarning,
)
from pepnet.core.incidence import IncidenceMatrix
from pepnet.core.transform import Transform

__all__ = [
    'IncidenceMatrix',
    'Transform',
    'PepnetError',
    'MalformedInputError',
    'UnknownProteinError',
    'ProteinNotFoundError',
    'EmptyGraphWarning',
]
