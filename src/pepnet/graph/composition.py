"""
Per-component peptide content.

For every multi-protein connected component, collect the peptides mapping to
any of its proteins and the induced sub-incidence matrix (those peptides ×
the component's proteins). Because a component is maximal, a peptide of a
member protein can only map to other members, so no peptide of a foreign
protein leaks into the sub-matrix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from pepnet.core.exceptions import ProteinNotFoundError
from pepnet.core.incidence import IncidenceMatrix
from pepnet.graph.components import ConnectedComponent

__all__ = ['CCComposition', 'compose_components', 'composition_table']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CCComposition:
    """
    Peptides and sub-matrix of one multi-protein component.

    Attributes:
        component: The component described
        peptide_ids: Peptides mapping to at least one member, in matrix row order
        matrix: Induced IncidenceMatrix (peptide_ids × component.members)
    """
    component: ConnectedComponent
    peptide_ids: tuple[str, ...]
    matrix: IncidenceMatrix

    @property
    def component_id(self) -> str:
        return self.component.component_id

    @property
    def n_proteins(self) -> int:
        return self.component.size

    @property
    def n_peptides(self) -> int:
        return len(self.peptide_ids)

    def to_dict(self) -> dict:
        return {
            'component_id': self.component_id,
            'n_proteins': self.n_proteins,
            'n_peptides': self.n_peptides,
            'proteins': ';'.join(self.component.members),
            'peptides': ';'.join(self.peptide_ids),
        }


def compose_components(
    components: Sequence[ConnectedComponent],
    full_matrix: IncidenceMatrix,
) -> list[CCComposition]:
    """
    Build the peptide set and sub-incidence matrix of each multi-protein CC.

    Args:
        components: Components (single-protein ones are skipped)
        full_matrix: Matrix the components were derived from (reduced or full)

    Returns:
        One CCComposition per multi-protein component, in component order.

    Raises:
        ProteinNotFoundError: If a member protein is absent from full_matrix
    """
    protein_ids = full_matrix.protein_ids
    data = full_matrix.data.tocsc()
    compositions = []

    for component in components:
        if component.size < 2:
            continue

        cols = protein_ids.get_indexer(list(component.members))
        if (cols < 0).any():
            missing = component.members[int(np.flatnonzero(cols < 0)[0])]
            raise ProteinNotFoundError(missing, f"of {component.component_id} not in matrix")

        block = data[:, cols].tocsr()
        rows = np.flatnonzero(np.diff(block.indptr) > 0)
        peptide_ids = full_matrix.peptide_ids[rows]

        sub = IncidenceMatrix(block[rows, :], peptide_ids, list(component.members))
        compositions.append(CCComposition(
            component=component,
            peptide_ids=tuple(peptide_ids),
            matrix=sub,
        ))

    logger.debug(f"Composed {len(compositions)} multi-protein components")
    return compositions


def composition_table(compositions: Sequence[CCComposition]) -> pd.DataFrame:
    """One row per component: id, sizes, and ';'-joined proteins/peptides."""
    columns = ['component_id', 'n_proteins', 'n_peptides', 'proteins', 'peptides']
    return pd.DataFrame([c.to_dict() for c in compositions], columns=columns)
