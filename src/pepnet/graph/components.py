"""
Connected components of the shared-peptide protein graph.

Two proteins are connected when they share at least one peptide; a connected
component (CC) is a maximal set of proteins linked through chains of shared
peptides. The CC is the unit of identification ambiguity: the peptides seen
for a multi-protein CC cannot, on their own, tell which members are present.

Algorithm:
    Union-find (disjoint-set forest) over the nonzero edges of the adjacency
    matrix, with union by size and path halving, so the cost is
    O(E · α(N)). Edge weights and direction are ignored. Union is
    commutative, so edges may be processed in any order (or in shards merged
    afterwards) with the same partition as result.

Ordering:
    Members are sorted by identifier, components by their smallest member.
    Component ids ("CC1", "CC2", ...) follow that order, which makes output
    reproducible for a given input.

Examples:
    >>> from pepnet.core import IncidenceMatrix
    >>> from pepnet.graph.adjacency import build_adjacency
    >>> from pepnet.graph.components import find_components
    >>>
    >>> m = IncidenceMatrix.from_mapping({
    ...     "pep1": ["P1", "P2"],
    ...     "pep2": ["P2", "P3"],
    ...     "pep3": ["P3"],
    ... })
    >>> find_components(build_adjacency(m))
    [ConnectedComponent(component_id='CC1', members=('P1', 'P2', 'P3'))]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import pandas as pd
import scipy.sparse as sp

from pepnet.core.exceptions import ProteinNotFoundError
from pepnet.graph.adjacency import AdjacencyGraph

__all__ = [
    'ConnectedComponent',
    'DisjointSet',
    'find_components',
    'component_membership',
    'find_component_of',
    'single_protein_ids',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectedComponent:
    """
    A maximal set of proteins transitively linked by shared peptides.

    Attributes:
        component_id: Stable display identifier ("CC1", "CC2", ...)
        members: Sorted protein identifiers
    """
    component_id: str
    members: tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_single(self) -> bool:
        return len(self.members) == 1

    def __contains__(self, protein: object) -> bool:
        return protein in self.members

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict:
        return {
            'component_id': self.component_id,
            'size': self.size,
            'members': ';'.join(self.members),
        }


class DisjointSet:
    """
    Union-find over vertices 0..n-1.

    Examples:
        >>> ds = DisjointSet(4)
        >>> ds.union(0, 1); ds.union(2, 3); ds.union(1, 3)
        >>> ds.find(0) == ds.find(2)
        True
    """

    def __init__(self, n: int):
        self.parent = list(range(n))
        self.size = [1] * n

    def find(self, x: int) -> int:
        parent = self.parent
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return
        if self.size[ra] < self.size[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]

    def union_edges(self, rows: Iterable[int], cols: Iterable[int]) -> None:
        for a, b in zip(rows, cols):
            self.union(int(a), int(b))

    def groups(self) -> dict[int, list[int]]:
        """Root -> vertex list, vertices in increasing order."""
        groups: dict[int, list[int]] = {}
        for v in range(len(self.parent)):
            groups.setdefault(self.find(v), []).append(v)
        return groups


def find_components(adjacency: AdjacencyGraph) -> list[ConnectedComponent]:
    """
    Partition the adjacency graph's proteins into connected components.

    Every vertex appears in exactly one component; isolated vertices (e.g. in
    a graph built from an unreduced matrix) become single-protein components.

    Args:
        adjacency: Shared-peptide graph

    Returns:
        Components sorted by smallest member id; empty list for an empty graph.
    """
    n = adjacency.n_proteins
    if n == 0:
        logger.debug("Component search on empty graph")
        return []

    upper = sp.triu(adjacency.data, k=1).tocoo()
    edge_mask = upper.data > 0

    ds = DisjointSet(n)
    ds.union_edges(upper.row[edge_mask], upper.col[edge_mask])

    ids = adjacency.protein_ids
    groups = [sorted(str(ids[v]) for v in vertices) for vertices in ds.groups().values()]
    groups.sort(key=lambda members: members[0])

    components = [
        ConnectedComponent(component_id=f"CC{k}", members=tuple(members))
        for k, members in enumerate(groups, start=1)
    ]

    n_multi = sum(1 for c in components if c.size > 1)
    logger.debug(
        f"Found {len(components)} connected components over {n} proteins "
        f"({n_multi} multi-protein)"
    )
    return components


def component_membership(components: Sequence[ConnectedComponent]) -> pd.Series:
    """Protein id -> component id lookup table."""
    index, values = [], []
    for component in components:
        index.extend(component.members)
        values.extend([component.component_id] * component.size)
    return pd.Series(values, index=pd.Index(index, dtype=object, name="protein"),
                     name="component_id", dtype=object)


def find_component_of(protein: str, components: Sequence[ConnectedComponent]) -> ConnectedComponent:
    """
    Component containing the given protein.

    Raises:
        ProteinNotFoundError: If no component contains the protein
    """
    for component in components:
        if protein in component.members:
            return component
    raise ProteinNotFoundError(str(protein))


def single_protein_ids(all_proteins: Iterable[str], components: Sequence[ConnectedComponent]) -> list[str]:
    """
    Proteins absent from the given (reduced-matrix) components.

    These are the single-protein components, recovered by set difference.
    """
    in_components = {p for c in components for p in c.members}
    return sorted(str(p) for p in all_proteins if str(p) not in in_components)
