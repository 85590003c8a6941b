"""
Core data structure for peptide-to-protein incidence matrices.

IncidenceMatrix couples a binary peptide × protein mapping with its row and
column identifiers, so that every downstream step (reduction, adjacency,
filtering) can refer to peptides and proteins by name instead of position.

Biological Context:
    Shotgun proteomics identifies peptides, not proteins. Each identified
    peptide is mapped back to every protein sequence that contains it:
    - Rows = peptides (sequences, or arbitrary numeric tags)
    - Columns = proteins (Ensembl-style ids, or contaminant entries)
    - Values = 1 if the peptide maps to the protein, else 0

    A peptide mapping to a single protein is "specific"; a peptide mapping to
    several proteins is "shared" and is the source of identification
    ambiguity.

Engineering Design:
    - Immutable: operations return new instances
    - Sparse: stored as scipy CSR, since a peptide maps to few proteins
    - Validated: constructor checks shape, uniqueness and binarity
    - Identifier-based: accessors take ids, never positional indices

Examples:
    >>> import numpy as np
    >>> from pepnet.core.incidence import IncidenceMatrix
    >>>
    >>> matrix = IncidenceMatrix(
    ...     data=np.array([[1, 1, 0], [0, 1, 1], [0, 0, 1]]),
    ...     peptide_ids=["pep1", "pep2", "pep3"],
    ...     protein_ids=["P1", "P2", "P3"],
    ... )
    >>> matrix.proteins_of("pep1")
    ['P1', 'P2']
    >>> shared = matrix.select_peptides(matrix.proteins_per_peptide() >= 2)
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd
import scipy.sparse as sp

from pepnet.core.exceptions import MalformedInputError, ProteinNotFoundError

__all__ = ['IncidenceMatrix']


def _as_index(ids: Iterable, axis_name: str) -> pd.Index:
    """Coerce identifiers to a string Index and reject duplicates."""
    index = pd.Index([str(i) for i in ids], dtype=object, name=axis_name)
    if index.has_duplicates:
        dups = index[index.duplicated()].unique().tolist()
        preview = ", ".join(dups[:5]) + (", ..." if len(dups) > 5 else "")
        raise MalformedInputError(
            f"Found {len(dups)} duplicate {axis_name} identifier(s): {preview}"
        )
    return index


class IncidenceMatrix:
    """
    Immutable binary peptide × protein mapping with named axes.

    Attributes:
        data: Sparse CSR matrix (peptides × proteins), int8 values in {0, 1}
        peptide_ids: Row identifiers
        protein_ids: Column identifiers

    Shape Invariants:
        - data.shape[0] == len(peptide_ids)
        - data.shape[1] == len(protein_ids)
        - identifiers unique within each axis
        - every stored value equals 1

    Empty rows or columns are allowed; they disappear only after
    reduction or filtering.
    """

    def __init__(
        self,
        data,
        peptide_ids: Sequence,
        protein_ids: Sequence,
    ):
        """
        Initialize IncidenceMatrix with validation.

        Args:
            data: Binary matrix, dense (numpy array / nested list) or scipy sparse
            peptide_ids: Row identifiers, one per matrix row
            protein_ids: Column identifiers, one per matrix column

        Raises:
            MalformedInputError: If the matrix is not 2D, if identifier counts do
                not match the matrix shape, if identifiers are duplicated or if a
                value is not 0/1.
        """
        if sp.issparse(data):
            csr = sp.csr_matrix(data)
        else:
            try:
                dense = np.asarray(data)
            except ValueError as e:
                raise MalformedInputError(f"data must be a rectangular 2D matrix: {e}") from e
            if dense.size == 0 and dense.ndim < 2:
                try:
                    dense = dense.reshape(len(peptide_ids), len(protein_ids))
                except ValueError as e:
                    raise MalformedInputError(
                        f"Empty data cannot hold {len(peptide_ids)} peptides × "
                        f"{len(protein_ids)} proteins"
                    ) from e
            if dense.ndim != 2:
                raise MalformedInputError(f"data must be 2D, got shape {dense.shape}")
            if not (np.issubdtype(dense.dtype, np.number) or dense.dtype == bool):
                raise MalformedInputError(f"data must be numeric, got dtype {dense.dtype}")
            csr = sp.csr_matrix(dense)

        csr.eliminate_zeros()
        if csr.nnz and not np.all(csr.data == 1):
            bad = np.unique(csr.data[csr.data != 1])[:5]
            raise MalformedInputError(
                f"Incidence matrix must be binary (0/1); found values {bad.tolist()}"
            )

        n_peptides, n_proteins = csr.shape
        peptide_index = _as_index(peptide_ids, "peptide")
        protein_index = _as_index(protein_ids, "protein")

        if len(peptide_index) != n_peptides:
            raise MalformedInputError(
                f"peptide_ids length ({len(peptide_index)}) must match matrix rows ({n_peptides})"
            )
        if len(protein_index) != n_proteins:
            raise MalformedInputError(
                f"protein_ids length ({len(protein_index)}) must match matrix columns ({n_proteins})"
            )

        csr = csr.astype(np.int8)
        csr.sort_indices()
        self._data = csr
        self._peptide_ids = peptide_index
        self._protein_ids = protein_index

    @classmethod
    def empty(cls) -> IncidenceMatrix:
        """The 0 × 0 matrix returned when nothing survives a reduction."""
        return cls(sp.csr_matrix((0, 0), dtype=np.int8), [], [])

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> IncidenceMatrix:
        """Build from a DataFrame indexed by peptide with one column per protein."""
        return cls(df.to_numpy(), list(df.index), list(df.columns))

    @classmethod
    def from_mapping(cls, peptide_to_proteins: dict) -> IncidenceMatrix:
        """
        Build from a peptide -> proteins mapping.

        Proteins are ordered by first appearance, peptides by mapping order.

        Examples:
            >>> m = IncidenceMatrix.from_mapping({"pep1": ["P1", "P2"], "pep2": ["P2"]})
            >>> m.shape
            (2, 2)
        """
        peptides = list(peptide_to_proteins)
        proteins: dict[str, int] = {}
        rows, cols = [], []
        for i, pep in enumerate(peptides):
            for prot in peptide_to_proteins[pep]:
                j = proteins.setdefault(str(prot), len(proteins))
                rows.append(i)
                cols.append(j)
        data = sp.csr_matrix(
            (np.ones(len(rows), dtype=np.int8), (rows, cols)),
            shape=(len(peptides), len(proteins)),
        )
        # duplicate pairs in the mapping would sum to 2
        data.data[:] = 1
        return cls(data, peptides, list(proteins))

    @property
    def data(self) -> sp.csr_matrix:
        """Sparse incidence matrix (peptides × proteins)."""
        return self._data

    @property
    def peptide_ids(self) -> pd.Index:
        """Row identifiers."""
        return self._peptide_ids

    @property
    def protein_ids(self) -> pd.Index:
        """Column identifiers."""
        return self._protein_ids

    @property
    def shape(self) -> tuple[int, int]:
        """Matrix dimensions (n_peptides, n_proteins)."""
        return self._data.shape

    @property
    def n_peptides(self) -> int:
        return self._data.shape[0]

    @property
    def n_proteins(self) -> int:
        return self._data.shape[1]

    @property
    def nnz(self) -> int:
        """Number of peptide-protein edges."""
        return self._data.nnz

    @property
    def is_empty(self) -> bool:
        """True if the matrix has no peptide or no protein."""
        return self.n_peptides == 0 or self.n_proteins == 0

    def proteins_per_peptide(self) -> np.ndarray:
        """Row sums: number of proteins each peptide maps to."""
        return np.asarray(self._data.sum(axis=1)).ravel().astype(int)

    def peptides_per_protein(self) -> np.ndarray:
        """Column sums: number of peptides mapping to each protein."""
        return np.asarray(self._data.sum(axis=0)).ravel().astype(int)

    def proteins_of(self, peptide: str) -> list[str]:
        """Proteins the given peptide maps to, in column order."""
        try:
            i = self._peptide_ids.get_loc(str(peptide))
        except KeyError:
            raise KeyError(f"Peptide '{peptide}' not in matrix") from None
        row = self._data.indices[self._data.indptr[i]:self._data.indptr[i + 1]]
        return self._protein_ids[row].tolist()

    def peptides_of(self, protein: str) -> list[str]:
        """Peptides mapping to the given protein, in row order."""
        try:
            j = self._protein_ids.get_loc(str(protein))
        except KeyError:
            raise ProteinNotFoundError(str(protein), "not in matrix") from None
        rows = self._data[:, j].nonzero()[0]
        return self._peptide_ids[np.sort(rows)].tolist()

    def select_peptides(self, mask: np.ndarray | pd.Series) -> IncidenceMatrix:
        """
        Subset rows by boolean mask.

        Raises:
            ValueError: If mask length doesn't match n_peptides
        """
        if isinstance(mask, pd.Series):
            mask = mask.values
        mask = np.asarray(mask, dtype=bool)
        if len(mask) != self.n_peptides:
            raise ValueError(
                f"mask length ({len(mask)}) must match n_peptides ({self.n_peptides})"
            )
        return IncidenceMatrix(
            data=self._data[mask, :],
            peptide_ids=self._peptide_ids[mask],
            protein_ids=self._protein_ids,
        )

    def select_proteins(self, mask: np.ndarray | pd.Series) -> IncidenceMatrix:
        """
        Subset columns by boolean mask.

        Raises:
            ValueError: If mask length doesn't match n_proteins
        """
        if isinstance(mask, pd.Series):
            mask = mask.values
        mask = np.asarray(mask, dtype=bool)
        if len(mask) != self.n_proteins:
            raise ValueError(
                f"mask length ({len(mask)}) must match n_proteins ({self.n_proteins})"
            )
        return IncidenceMatrix(
            data=self._data[:, mask],
            peptide_ids=self._peptide_ids,
            protein_ids=self._protein_ids[mask],
        )

    def subset(
        self,
        peptides: Optional[Iterable[str]] = None,
        proteins: Optional[Iterable[str]] = None,
    ) -> IncidenceMatrix:
        """
        Subset by identifiers, keeping the requested order.

        Args:
            peptides: Peptide ids to keep (None keeps all)
            proteins: Protein ids to keep (None keeps all)

        Raises:
            KeyError: If a peptide id is unknown
            ProteinNotFoundError: If a protein id is unknown
        """
        data = self._data
        peptide_ids = self._peptide_ids
        protein_ids = self._protein_ids

        if peptides is not None:
            wanted = pd.Index([str(p) for p in peptides], dtype=object)
            rows = self._peptide_ids.get_indexer(wanted)
            if (rows < 0).any():
                missing = wanted[rows < 0].tolist()
                raise KeyError(f"Unknown peptide id(s): {missing[:5]}")
            data = data[rows, :]
            peptide_ids = wanted

        if proteins is not None:
            wanted = pd.Index([str(p) for p in proteins], dtype=object)
            cols = self._protein_ids.get_indexer(wanted)
            if (cols < 0).any():
                raise ProteinNotFoundError(wanted[cols < 0][0], "not in matrix")
            data = data[:, cols]
            protein_ids = wanted

        return IncidenceMatrix(data, peptide_ids, protein_ids)

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame view (peptides as index, proteins as columns)."""
        return pd.DataFrame(
            self._data.toarray(),
            index=self._peptide_ids.copy(),
            columns=self._protein_ids.copy(),
        )

    def copy(self) -> IncidenceMatrix:
        return IncidenceMatrix(self._data.copy(), self._peptide_ids.copy(), self._protein_ids.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, IncidenceMatrix):
            return NotImplemented
        if self.shape != other.shape:
            return False
        if not self._peptide_ids.equals(other.peptide_ids):
            return False
        if not self._protein_ids.equals(other.protein_ids):
            return False
        return (self._data != other.data).nnz == 0

    __hash__ = None

    def __repr__(self) -> str:
        """String representation for debugging."""
        if self.is_empty:
            return f"IncidenceMatrix({self.n_peptides} peptides × {self.n_proteins} proteins, empty)"
        return (
            f"IncidenceMatrix({self.n_peptides} peptides × {self.n_proteins} proteins, "
            f"{self.nnz} edges)\n"
            f"  Peptides: {self._peptide_ids[0]}...{self._peptide_ids[-1]}\n"
            f"  Proteins: {self._protein_ids[0]}...{self._protein_ids[-1]}"
        )

    def __str__(self) -> str:
        return self.__repr__()
