"""
Pytest configuration and shared fixtures.

This module provides small hand-built incidence matrices with known
components and a seeded random matrix generator for property-style tests.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import scipy.sparse as sp

from pepnet.core.incidence import IncidenceMatrix


def generate_random_incidence(
    n_peptides: int,
    n_proteins: int,
    max_proteins_per_peptide: int = 3,
    seed: int = 42,
) -> IncidenceMatrix:
    """
    Generate a random binary peptide x protein matrix.

    Args:
        n_peptides: Number of peptides (rows)
        n_proteins: Number of proteins (columns)
        max_proteins_per_peptide: Each peptide maps to 1..this many proteins
        seed: Random seed for reproducibility

    Design:
        - Most peptides are specific, as in real search results
          (proteins per peptide drawn with decreasing probability)
        - Protein ids are zero-padded "ENSP" accessions so sorting by id
          equals sorting by column
    """
    rng = np.random.RandomState(seed)
    k_max = min(max_proteins_per_peptide, n_proteins)
    weights = 1.0 / np.arange(1, k_max + 1) ** 2
    weights /= weights.sum()

    rows, cols = [], []
    for i in range(n_peptides):
        k = rng.choice(np.arange(1, k_max + 1), p=weights)
        for j in rng.choice(n_proteins, size=k, replace=False):
            rows.append(i)
            cols.append(j)

    data = sp.csr_matrix(
        (np.ones(len(rows), dtype=np.int8), (rows, cols)),
        shape=(n_peptides, n_proteins),
    )
    return IncidenceMatrix(
        data,
        [f"pep{i:05d}" for i in range(n_peptides)],
        [f"ENSP{j:011d}" for j in range(n_proteins)],
    )


@pytest.fixture
def chain_matrix():
    """pep1 -> {P1, P2}, pep2 -> {P2, P3}, pep3 -> {P3}: one chained component."""
    return IncidenceMatrix(
        data=np.array([
            [1, 1, 0],
            [0, 1, 1],
            [0, 0, 1],
        ]),
        peptide_ids=["pep1", "pep2", "pep3"],
        protein_ids=["ENSP1", "ENSP2", "ENSP3"],
    )


@pytest.fixture
def mixed_matrix():
    """
    Two multi-protein components, two single proteins and a contaminant.

    Components: {CON__K1, ENSP04} (CC1), {ENSP01, ENSP02} (CC2)
    Singles: ENSP03, ENSP05
    Shared peptides: pepA, pepD; specific: pepB, pepC, pepE, pepF
    """
    return IncidenceMatrix.from_mapping({
        "pepA": ["ENSP01", "ENSP02"],
        "pepB": ["ENSP02"],
        "pepC": ["ENSP03"],
        "pepD": ["ENSP04", "CON__K1"],
        "pepE": ["ENSP05"],
        "pepF": ["ENSP04"],
    })


@pytest.fixture
def filter_matrix():
    """
    Matrix where the three filter policies all give different results.

    With only ENST3 and ENST5 expressed:
        unsupported        ENSP1, ENSP2, ENSP4, ENSP6
        no specific pep.   ENSP2, ENSP4, ENSP6
        pep7 maps only to ENSP2 and ENSP4
    """
    return IncidenceMatrix.from_mapping({
        "pep1": ["ENSP1"],
        "pep2": ["ENSP1", "ENSP2"],
        "pep3": ["ENSP2", "ENSP3"],
        "pep4": ["ENSP3"],
        "pep5": ["ENSP4", "ENSP5"],
        "pep6": ["CON__X", "ENSP5"],
        "pep7": ["ENSP2", "ENSP4"],
        "pep8": ["ENSP5", "ENSP6"],
    })


@pytest.fixture
def protein_to_transcript():
    return {f"ENSP{k}": f"ENST{k}" for k in range(1, 7)}


@pytest.fixture
def expressed_transcripts():
    return {"ENST3", "ENST5"}


@pytest.fixture
def random_matrix():
    return generate_random_incidence(400, 150, seed=7)
