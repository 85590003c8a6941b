"""
Incidence-matrix reduction to the proteins that carry ambiguity.

A protein whose peptides are all specific cannot be connected to any other
protein: it forms a single-protein connected component on its own. Removing
such proteins (and the peptides that only map to them) before building the
protein × protein graph shrinks the adjacency computation to the part of the
data where ambiguity actually lives.

Algorithm:
    1. Shared peptides = rows mapping to >= 2 proteins (over the full matrix)
    2. Kept proteins = columns with at least one shared peptide
    3. Kept peptides = rows incident on at least one kept protein

Guarantee:
    Every protein left in the reduced matrix shares a peptide with another
    protein, so the reduced graph has no single-protein component. Single
    proteins are recovered later by set difference against the full matrix.

Examples:
    >>> from pepnet.core import IncidenceMatrix
    >>> from pepnet.graph.reduction import reduce_matrix
    >>>
    >>> m = IncidenceMatrix.from_mapping({
    ...     "pep1": ["P1", "P2"],
    ...     "pep2": ["P2"],
    ...     "pep3": ["P3"],
    ... })
    >>> reduced = reduce_matrix(m)
    >>> list(reduced.protein_ids)  # P3 only has a specific peptide
    ['P1', 'P2']
    >>> list(reduced.peptide_ids)  # pep2 is kept, it maps to P2
    ['pep1', 'pep2']
"""

from __future__ import annotations

import logging
import warnings

import numpy as np

from pepnet.core.exceptions import EmptyGraphWarning
from pepnet.core.incidence import IncidenceMatrix
from pepnet.core.transform import Transform

__all__ = ['reduce_matrix', 'MatrixReducer']

logger = logging.getLogger(__name__)


def reduce_matrix(matrix: IncidenceMatrix) -> IncidenceMatrix:
    """
    Keep only proteins sharing at least one peptide with another protein.

    Args:
        matrix: Full (raw or filtered) incidence matrix

    Returns:
        Reduced IncidenceMatrix. If no peptide is shared by two proteins, the
        0 × 0 empty matrix is returned and an EmptyGraphWarning is emitted.

    Idempotent: reduce_matrix(reduce_matrix(m)) == reduce_matrix(m), since a
    shared peptide keeps all of its proteins and therefore stays shared.
    """
    shared = matrix.proteins_per_peptide() >= 2
    n_shared = int(shared.sum())

    if n_shared == 0:
        warnings.warn(
            f"No shared peptide among {matrix.n_peptides} peptides: every protein "
            "is a single-protein connected component",
            EmptyGraphWarning,
            stacklevel=2,
        )
        return IncidenceMatrix.empty()

    # Proteins hit by at least one shared peptide
    protein_mask = np.asarray(matrix.data[shared, :].sum(axis=0)).ravel() > 0
    protein_reduced = matrix.select_proteins(protein_mask)

    # Peptides still mapping to a kept protein
    peptide_mask = protein_reduced.proteins_per_peptide() > 0
    reduced = protein_reduced.select_peptides(peptide_mask)

    logger.debug(
        f"Reduction: {matrix.n_peptides}x{matrix.n_proteins} -> "
        f"{reduced.n_peptides}x{reduced.n_proteins} "
        f"({n_shared} shared peptides, "
        f"{matrix.n_proteins - reduced.n_proteins} proteins without shared peptide)"
    )

    return reduced


class MatrixReducer(Transform):
    """Transform wrapper around reduce_matrix for pipeline composition."""

    def __init__(self) -> None:
        super().__init__(name="MatrixReducer", params={"min_shared": 2})

    def apply(self, matrix: IncidenceMatrix) -> IncidenceMatrix:
        errors = self.validate(matrix)
        if errors:
            raise ValueError(f"Validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
        return reduce_matrix(matrix)
