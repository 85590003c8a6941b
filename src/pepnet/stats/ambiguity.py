"""
Ambiguity statistics over connected components and peptides.

Two summaries describe how ambiguous a set of protein identifications is:

1. Component level: how many proteins stand alone (single-protein CCs) and
   how many are tangled into multi-protein CCs, with the CC size distribution.
2. Peptide level: how many peptides are shared (>= 2 proteins) versus
   specific (exactly 1 protein).

Both functions accept empty inputs and then return zero counts; an empty
reduction (no shared peptide) is a normal outcome, not an error.

Examples:
    >>> from pepnet.stats.ambiguity import compute_cc_stats, compute_peptide_stats
    >>> stats = compute_cc_stats(full_matrix, components, reduced=True)
    >>> stats.n_single, stats.n_multi
    (1520, 873)
    >>> compute_peptide_stats(full_matrix).perc_specific
    71.36
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
import pandas as pd

from pepnet.core.incidence import IncidenceMatrix
from pepnet.graph.components import ConnectedComponent

__all__ = [
    'SIZE_BUCKETS',
    'CCStats',
    'PeptideStats',
    'compute_cc_stats',
    'compute_peptide_stats',
    'size_distribution',
]

logger = logging.getLogger(__name__)

MAX_EXPLICIT_SIZE = 10
SIZE_BUCKETS = [str(k) for k in range(1, MAX_EXPLICIT_SIZE + 1)] + [f">{MAX_EXPLICIT_SIZE}"]


def _bucket(size: int) -> str:
    return str(size) if size <= MAX_EXPLICIT_SIZE else f">{MAX_EXPLICIT_SIZE}"


def size_distribution(sizes: Sequence[int], n_single_extra: int = 0) -> pd.Series:
    """
    Count components per size bucket ("1".."10", ">10").

    Args:
        sizes: Component sizes
        n_single_extra: Single-protein components not listed in `sizes`
            (those recovered by set difference in reduced mode)

    Returns:
        Integer Series indexed by SIZE_BUCKETS, zero-filled.
    """
    counts = pd.Series(0, index=pd.Index(SIZE_BUCKETS, name="cc_size"), name="n_components", dtype=int)
    for size in sizes:
        counts[_bucket(int(size))] += 1
    counts["1"] += n_single_extra
    return counts


@dataclass
class CCStats:
    """
    Connected-component summary.

    Attributes:
        n_proteins: Proteins in the full matrix
        n_single: Single-protein components
        n_multi: Multi-protein components
        n_multi_proteins: Proteins belonging to multi-protein components
        size_distribution: Component counts per size bucket

    Invariant: n_single + n_multi_proteins == n_proteins
    """
    n_proteins: int
    n_single: int
    n_multi: int
    n_multi_proteins: int
    size_distribution: pd.Series = field(repr=False)

    @property
    def n_components(self) -> int:
        return self.n_single + self.n_multi

    def to_dict(self) -> dict:
        return {
            'n_proteins': self.n_proteins,
            'n_single_protein_ccs': self.n_single,
            'n_multi_protein_ccs': self.n_multi,
            'n_proteins_in_multi_protein_ccs': self.n_multi_proteins,
            'size_distribution': {k: int(v) for k, v in self.size_distribution.items()},
        }


@dataclass
class PeptideStats:
    """
    Shared/specific peptide counts.

    Attributes:
        n_shared: Peptides mapping to >= 2 proteins
        n_specific: Peptides mapping to exactly 1 protein
        perc_specific: n_specific / (n_shared + n_specific) * 100, 2 decimals
        n_unmapped: Peptides mapping to no protein (normally 0)
    """
    n_shared: int
    n_specific: int
    perc_specific: float
    n_unmapped: int = 0

    def to_dict(self) -> dict:
        return {
            'n_shared_peptides': self.n_shared,
            'n_specific_peptides': self.n_specific,
            'perc_specific_peptides': self.perc_specific,
            'n_unmapped_peptides': self.n_unmapped,
        }


def compute_cc_stats(
    full_matrix: IncidenceMatrix,
    components: Sequence[ConnectedComponent],
    reduced: bool = True,
) -> CCStats:
    """
    Single/multi-protein component counts and size distribution.

    Args:
        full_matrix: Unreduced matrix (defines the total protein set)
        components: Components of the reduced matrix (reduced=True) or of the
            full matrix (reduced=False)
        reduced: Whether `components` exclude single-protein components

    Returns:
        CCStats. Zero multi-protein components is a valid result.
    """
    sizes = [c.size for c in components]
    multi_sizes = [s for s in sizes if s >= 2]
    n_proteins = full_matrix.n_proteins

    if reduced:
        n_single = n_proteins - sum(sizes)
        if n_single < 0:
            raise ValueError(
                f"Components hold {sum(sizes)} proteins, more than the "
                f"{n_proteins} of the full matrix"
            )
        if len(multi_sizes) != len(sizes):
            logger.warning(
                f"{len(sizes) - len(multi_sizes)} single-protein component(s) passed "
                "with reduced=True; they are counted once as singles"
            )
        distribution = size_distribution(sizes, n_single_extra=n_single)
        n_single += len(sizes) - len(multi_sizes)
    else:
        n_single = len(sizes) - len(multi_sizes)
        distribution = size_distribution(sizes)

    stats = CCStats(
        n_proteins=n_proteins,
        n_single=n_single,
        n_multi=len(multi_sizes),
        n_multi_proteins=int(sum(multi_sizes)),
        size_distribution=distribution,
    )
    logger.debug(
        f"CC stats: {stats.n_single} single-protein, {stats.n_multi} multi-protein "
        f"({stats.n_multi_proteins} proteins)"
    )
    return stats


def compute_peptide_stats(matrix: IncidenceMatrix) -> PeptideStats:
    """
    Count shared and specific peptides of the (full) matrix.

    Returns:
        PeptideStats; perc_specific is 0.0 when no peptide is mapped.
    """
    per_peptide = matrix.proteins_per_peptide()
    n_shared = int(np.sum(per_peptide >= 2))
    n_specific = int(np.sum(per_peptide == 1))
    n_unmapped = int(np.sum(per_peptide == 0))

    if n_unmapped:
        logger.warning(f"{n_unmapped} peptide(s) map to no protein and are not counted")

    total = n_shared + n_specific
    perc_specific = round(n_specific / total * 100, 2) if total else 0.0

    return PeptideStats(
        n_shared=n_shared,
        n_specific=n_specific,
        perc_specific=perc_specific,
        n_unmapped=n_unmapped,
    )
