"""
Tests for matrix reduction and shared-peptide adjacency.
"""

import numpy as np
import pytest

from pepnet.core.exceptions import EmptyGraphWarning, ProteinNotFoundError
from pepnet.core.incidence import IncidenceMatrix
from pepnet.graph.adjacency import build_adjacency
from pepnet.graph.reduction import MatrixReducer, reduce_matrix
from conftest import generate_random_incidence


class TestReduceMatrix:
    """Test reduction to proteins with shared peptides."""

    def test_chain_keeps_everything(self, chain_matrix):
        reduced = reduce_matrix(chain_matrix)
        assert reduced == chain_matrix

    def test_drops_proteins_without_shared_peptide(self, mixed_matrix):
        reduced = reduce_matrix(mixed_matrix)
        assert set(reduced.protein_ids) == {"ENSP01", "ENSP02", "ENSP04", "CON__K1"}
        # Specific peptides of kept proteins stay, those of dropped proteins go
        assert list(reduced.peptide_ids) == ["pepA", "pepB", "pepD", "pepF"]

    def test_every_kept_protein_has_shared_peptide(self, random_matrix):
        reduced = reduce_matrix(random_matrix)
        shared_rows = reduced.proteins_per_peptide() >= 2
        hit = np.asarray(reduced.data[shared_rows, :].sum(axis=0)).ravel()
        assert (hit > 0).all()

    def test_idempotent(self, random_matrix):
        once = reduce_matrix(random_matrix)
        assert reduce_matrix(once) == once

    def test_input_not_modified(self, mixed_matrix):
        before = mixed_matrix.copy()
        reduce_matrix(mixed_matrix)
        assert mixed_matrix == before

    def test_no_shared_peptide_warns_and_returns_empty(self):
        m = IncidenceMatrix(np.eye(3), ["a", "b", "c"], ["P1", "P2", "P3"])
        with pytest.warns(EmptyGraphWarning, match="No shared peptide"):
            reduced = reduce_matrix(m)
        assert reduced.shape == (0, 0)

    def test_transform_wrapper(self, chain_matrix):
        reducer = MatrixReducer()
        assert repr(reducer) == "MatrixReducer(min_shared=2)"
        assert reducer(chain_matrix) == reduce_matrix(chain_matrix)
        assert reducer.validate(IncidenceMatrix.empty()) == ["Matrix has no proteins"]

    def test_transform_rejects_empty_matrix(self):
        with pytest.raises(ValueError, match="Matrix has no proteins"):
            MatrixReducer().apply(IncidenceMatrix.empty())


class TestBuildAdjacency:
    """Test protein x protein shared-peptide counts."""

    def test_chain_counts(self, chain_matrix):
        adj = build_adjacency(chain_matrix)
        assert adj.shared_count("ENSP1", "ENSP2") == 1
        assert adj.shared_count("ENSP2", "ENSP3") == 1
        assert adj.shared_count("ENSP1", "ENSP3") == 0
        assert adj.n_edges == 2

    def test_counts_multiple_shared_peptides(self):
        m = IncidenceMatrix.from_mapping({"a": ["P1", "P2"], "b": ["P1", "P2"], "c": ["P1"]})
        assert build_adjacency(m).shared_count("P1", "P2") == 2

    def test_symmetric_zero_diagonal(self, random_matrix):
        adj = build_adjacency(reduce_matrix(random_matrix))
        dense = adj.data.toarray()
        np.testing.assert_array_equal(dense, dense.T)
        assert (np.diag(dense) == 0).all()

    def test_matches_dense_product(self, random_matrix):
        m = reduce_matrix(random_matrix)
        expected = m.data.toarray().astype(int)
        expected = expected.T @ expected
        np.fill_diagonal(expected, 0)
        np.testing.assert_array_equal(build_adjacency(m).data.toarray(), expected)

    @pytest.mark.parametrize("chunk_size", [1, 7, 64, 10_000])
    def test_chunked_equals_unchunked(self, chunk_size):
        m = generate_random_incidence(300, 80, seed=3)
        full = build_adjacency(m).data
        chunked = build_adjacency(m, chunk_size=chunk_size).data
        assert (full != chunked).nnz == 0

    def test_invalid_chunk_size(self, chain_matrix):
        with pytest.raises(ValueError, match="chunk_size"):
            build_adjacency(chain_matrix, chunk_size=0)

    def test_empty_matrix(self):
        adj = build_adjacency(IncidenceMatrix.empty())
        assert adj.n_proteins == 0
        assert adj.n_edges == 0

    def test_neighbors_and_degree(self, chain_matrix):
        adj = build_adjacency(chain_matrix)
        assert adj.neighbors("ENSP2") == ["ENSP1", "ENSP3"]
        assert adj.degree().to_dict() == {"ENSP1": 1, "ENSP2": 2, "ENSP3": 1}

    def test_unknown_protein(self, chain_matrix):
        with pytest.raises(ProteinNotFoundError):
            build_adjacency(chain_matrix).neighbors("ENSP9")

    def test_edges_and_networkx(self, chain_matrix):
        adj = build_adjacency(chain_matrix)
        assert sorted(adj.edges()) == [("ENSP1", "ENSP2", 1), ("ENSP2", "ENSP3", 1)]
        G = adj.to_networkx()
        assert G.number_of_nodes() == 3
        assert G["ENSP1"]["ENSP2"]["weight"] == 1
