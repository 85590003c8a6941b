"""
Tests for connected-component and peptide ambiguity statistics.
"""

import numpy as np
import pytest

from pepnet.core.incidence import IncidenceMatrix
from pepnet.graph.adjacency import build_adjacency
from pepnet.graph.components import ConnectedComponent, find_components
from pepnet.graph.reduction import reduce_matrix
from pepnet.stats.ambiguity import (
    SIZE_BUCKETS,
    compute_cc_stats,
    compute_peptide_stats,
    size_distribution,
)


def _reduced_components(matrix):
    return find_components(build_adjacency(reduce_matrix(matrix)))


class TestSizeDistribution:
    """Test size bucketing."""

    def test_buckets(self):
        dist = size_distribution([2, 2, 3, 11, 25], n_single_extra=4)
        assert list(dist.index) == SIZE_BUCKETS
        assert dist["1"] == 4
        assert dist["2"] == 2
        assert dist["3"] == 1
        assert dist[">10"] == 2
        assert dist.sum() == 9

    def test_empty(self):
        dist = size_distribution([])
        assert dist.sum() == 0
        assert len(dist) == 11


class TestCCStats:
    """Test component statistics."""

    def test_chain_scenario(self, chain_matrix):
        stats = compute_cc_stats(chain_matrix, _reduced_components(chain_matrix))
        assert stats.n_single == 0
        assert stats.n_multi == 1
        assert stats.n_multi_proteins == 3
        assert stats.size_distribution["3"] == 1

    def test_mixed(self, mixed_matrix):
        stats = compute_cc_stats(mixed_matrix, _reduced_components(mixed_matrix))
        assert stats.n_proteins == 6
        assert stats.n_single == 2
        assert stats.n_multi == 2
        assert stats.n_multi_proteins == 4
        assert stats.n_components == 4

    def test_protein_count_invariant(self, random_matrix):
        stats = compute_cc_stats(random_matrix, _reduced_components(random_matrix))
        assert stats.n_single + stats.n_multi_proteins == random_matrix.n_proteins
        assert stats.size_distribution.sum() == stats.n_components

    def test_reduced_and_unreduced_agree(self, random_matrix):
        reduced = compute_cc_stats(random_matrix, _reduced_components(random_matrix), reduced=True)
        full = compute_cc_stats(
            random_matrix, find_components(build_adjacency(random_matrix)), reduced=False
        )
        assert reduced.to_dict() == full.to_dict()

    def test_no_shared_peptides(self):
        m = IncidenceMatrix(np.eye(4), list("abcd"), ["P1", "P2", "P3", "P4"])
        with pytest.warns(UserWarning):
            components = _reduced_components(m)
        stats = compute_cc_stats(m, components)
        assert stats.n_single == 4
        assert stats.n_multi == 0
        assert stats.n_multi_proteins == 0

    def test_empty_matrix(self):
        stats = compute_cc_stats(IncidenceMatrix.empty(), [])
        assert stats.n_single == 0
        assert stats.n_multi == 0

    def test_too_many_members(self, chain_matrix):
        components = [ConnectedComponent("CC1", ("a", "b", "c", "d"))]
        with pytest.raises(ValueError, match="more than"):
            compute_cc_stats(chain_matrix, components)

    def test_to_dict(self, mixed_matrix):
        d = compute_cc_stats(mixed_matrix, _reduced_components(mixed_matrix)).to_dict()
        assert d["n_single_protein_ccs"] == 2
        assert d["size_distribution"]["2"] == 2


class TestPeptideStats:
    """Test shared/specific peptide counts."""

    def test_chain_scenario(self, chain_matrix):
        stats = compute_peptide_stats(chain_matrix)
        assert stats.n_shared == 2
        assert stats.n_specific == 1
        assert stats.perc_specific == pytest.approx(33.33)

    def test_mixed(self, mixed_matrix):
        stats = compute_peptide_stats(mixed_matrix)
        assert stats.n_shared == 2
        assert stats.n_specific == 4
        assert stats.perc_specific == pytest.approx(66.67)

    def test_counts_partition_peptides(self, random_matrix):
        stats = compute_peptide_stats(random_matrix)
        assert stats.n_shared + stats.n_specific + stats.n_unmapped == random_matrix.n_peptides
        assert 0.0 <= stats.perc_specific <= 100.0

    def test_empty(self):
        stats = compute_peptide_stats(IncidenceMatrix.empty())
        assert stats.n_shared == 0
        assert stats.perc_specific == 0.0

    def test_unmapped_peptide_counted_separately(self):
        m = IncidenceMatrix(np.array([[1, 0], [0, 0]]), ["a", "b"], ["P1", "P2"])
        stats = compute_peptide_stats(m)
        assert stats.n_specific == 1
        assert stats.n_unmapped == 1
        assert stats.perc_specific == 100.0
