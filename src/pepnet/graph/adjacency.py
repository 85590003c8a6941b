"""
Protein × protein adjacency from shared peptides.

The adjacency count between two proteins is the number of peptides mapping to
both of them:

    A[i, j] = sum_p M[p, i] * M[p, j]      (i != j)

i.e. the off-diagonal part of MᵀM. The diagonal (number of peptides of a
protein) is meaningless for connectivity and stored as zero.

Performance:
    A dense product costs O(P · N²) and needs an N × N dense array, which is
    prohibitive at tens of thousands of proteins. On CSR data the sparse
    product only touches, for each peptide, the pairs of proteins it maps to,
    i.e. O(sum_p k_p²) where k_p is the number of proteins of peptide p. Since
    most peptides map to one or two proteins this stays close to linear.

    With ``chunk_size`` the peptides are processed in row batches and the
    partial adjacencies summed. Accumulation is commutative and associative,
    so batches can be computed independently (e.g. in worker processes) and
    merged without changing the result.

Examples:
    >>> from pepnet.core import IncidenceMatrix
    >>> from pepnet.graph.adjacency import build_adjacency
    >>>
    >>> m = IncidenceMatrix.from_mapping({"pep1": ["P1", "P2"], "pep2": ["P1", "P2"]})
    >>> adj = build_adjacency(m)
    >>> adj.shared_count("P1", "P2")
    2
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

import networkx as nx
import numpy as np
import pandas as pd
import scipy.sparse as sp

from pepnet.core.exceptions import ProteinNotFoundError
from pepnet.core.incidence import IncidenceMatrix

__all__ = ['AdjacencyGraph', 'build_adjacency']

logger = logging.getLogger(__name__)


class AdjacencyGraph:
    """
    Symmetric protein × protein shared-peptide counts.

    Attributes:
        data: Sparse CSR matrix (proteins × proteins), zero diagonal
        protein_ids: Vertex identifiers, aligned with rows and columns
    """

    def __init__(self, data: sp.csr_matrix, protein_ids: pd.Index):
        if data.shape != (len(protein_ids), len(protein_ids)):
            raise ValueError(
                f"adjacency shape {data.shape} must be square and match "
                f"{len(protein_ids)} protein ids"
            )
        self._data = sp.csr_matrix(data)
        self._protein_ids = pd.Index(protein_ids)

    @property
    def data(self) -> sp.csr_matrix:
        return self._data

    @property
    def protein_ids(self) -> pd.Index:
        return self._protein_ids

    @property
    def n_proteins(self) -> int:
        return len(self._protein_ids)

    @property
    def n_edges(self) -> int:
        """Number of undirected protein-protein edges."""
        return sp.triu(self._data, k=1).nnz

    def _loc(self, protein: str) -> int:
        try:
            return self._protein_ids.get_loc(str(protein))
        except KeyError:
            raise ProteinNotFoundError(str(protein), "not a vertex of the adjacency graph") from None

    def shared_count(self, a: str, b: str) -> int:
        """Number of peptides shared by proteins a and b (0 for a == b)."""
        return int(self._data[self._loc(a), self._loc(b)])

    def neighbors(self, protein: str) -> list[str]:
        """Proteins sharing at least one peptide with the given protein."""
        i = self._loc(protein)
        cols = self._data.indices[self._data.indptr[i]:self._data.indptr[i + 1]]
        return self._protein_ids[np.sort(cols)].tolist()

    def degree(self) -> pd.Series:
        """Number of neighbours per protein."""
        return pd.Series(np.diff(self._data.indptr), index=self._protein_ids, name="degree")

    def edges(self) -> Iterator[tuple[str, str, int]]:
        """Yield (protein_a, protein_b, shared_count) once per undirected edge."""
        upper = sp.triu(self._data, k=1).tocoo()
        for i, j, w in zip(upper.row, upper.col, upper.data):
            yield self._protein_ids[i], self._protein_ids[j], int(w)

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame view; only sensible for small graphs."""
        return pd.DataFrame(
            self._data.toarray(), index=self._protein_ids, columns=self._protein_ids
        )

    def to_networkx(self) -> nx.Graph:
        """Weighted networkx Graph, every protein a node, weight = shared peptides."""
        G = nx.Graph()
        G.add_nodes_from(self._protein_ids)
        G.add_weighted_edges_from(self.edges())
        return G

    def __repr__(self) -> str:
        return f"AdjacencyGraph({self.n_proteins} proteins, {self.n_edges} edges)"


def _accumulate(block: sp.csr_matrix) -> sp.csr_matrix:
    """Shared-peptide counts contributed by one batch of peptide rows."""
    block = block.astype(np.int32)
    return (block.T @ block).tocsr()


def build_adjacency(matrix: IncidenceMatrix, chunk_size: Optional[int] = None) -> AdjacencyGraph:
    """
    Build the protein × protein shared-peptide graph of an incidence matrix.

    Args:
        matrix: Incidence matrix, typically the reduced one
        chunk_size: If given, accumulate peptides in batches of this many rows

    Returns:
        AdjacencyGraph with one vertex per matrix protein (isolated vertices
        included) and a zero diagonal.

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    n = matrix.n_proteins
    data = matrix.data

    if n == 0:
        return AdjacencyGraph(sp.csr_matrix((0, 0), dtype=np.int32), matrix.protein_ids)

    if chunk_size is None or chunk_size >= matrix.n_peptides:
        adjacency = _accumulate(data)
    else:
        adjacency = sp.csr_matrix((n, n), dtype=np.int32)
        for start in range(0, matrix.n_peptides, chunk_size):
            adjacency = adjacency + _accumulate(data[start:start + chunk_size, :])

    # Drop self-counts (peptides per protein)
    adjacency = sp.csr_matrix(adjacency - sp.diags(adjacency.diagonal(), format="csr", dtype=adjacency.dtype))
    adjacency.eliminate_zeros()
    adjacency.sort_indices()

    graph = AdjacencyGraph(adjacency, matrix.protein_ids)
    logger.debug(f"Adjacency: {graph.n_proteins} proteins, {graph.n_edges} edges")
    return graph
