"""
Loaders for incidence matrices and transcriptome evidence.

Input formats:
    - Incidence matrix: tab-delimited 0/1 values, no header row or column
    - Peptide ids: one per line, same count and order as matrix rows
    - Protein ids: one per line, same count and order as matrix columns
    - Expressed transcripts: one transcript id per line
    - Protein-to-transcript map: two tab-separated columns
      (protein id, transcript id), optional header; a protein may appear
      on several lines

Example matrix file (3 peptides × 3 proteins):
```
1	1	0
0	1	1
0	0	1
```

Engineering Design:
    - File-level problems raise FileNotFoundError or MalformedInputError,
      chained from the underlying pandas error
    - Recoverable oddities (blank lines, ids matching neither protein nor
      contaminant tag) are reported with warnings.warn(UserWarning)

Examples:
    >>> from pathlib import Path
    >>> from pepnet.io.loaders import load_incidence_matrix
    >>>
    >>> matrix = load_incidence_matrix(
    ...     Path("incM.tsv"), Path("peptideIDs.txt"), Path("proteinIDs.txt")
    ... )
    >>> print(f"Loaded {matrix.n_peptides} peptides × {matrix.n_proteins} proteins")
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
import pandas as pd
import scipy.sparse as sp

from pepnet.core.exceptions import MalformedInputError
from pepnet.core.incidence import IncidenceMatrix

__all__ = [
    'load_id_list',
    'load_incidence_matrix',
    'load_expressed_transcripts',
    'load_protein_transcript_map',
    'classify_protein_ids',
]

logger = logging.getLogger(__name__)


def _check_file(path: Path | str) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")
    return path


def load_id_list(path: Path | str) -> list[str]:
    """
    Read one identifier per line; surrounding whitespace and blank lines are dropped.

    Raises:
        FileNotFoundError: If path does not exist
    """
    path = _check_file(path)
    ids = [line.strip() for line in path.read_text().splitlines()]
    while ids and not ids[-1]:
        ids.pop()
    n_blank = ids.count('')
    if n_blank:
        warnings.warn(f"Skipping {n_blank} blank line(s) in {path.name}", UserWarning)
    return [i for i in ids if i]


def _chunk_to_csr(chunk: pd.DataFrame, first_row: int, matrix_path: Path) -> sp.csr_matrix:
    """Validate one block of matrix rows and convert it to CSR."""
    values = chunk.to_numpy()
    missing = np.isnan(values)
    if missing.any():
        row = first_row + int(np.argmax(missing.any(axis=1))) + 1
        raise MalformedInputError(
            f"Matrix file has {int(missing.sum())} missing value(s) starting at row {row} "
            f"(ragged rows?): {matrix_path}"
        )
    if not np.isin(values, (0, 1)).all():
        bad = np.unique(values[~np.isin(values, (0, 1))])[:5]
        raise MalformedInputError(
            f"Incidence matrix must be binary (0/1); found values {bad.tolist()} in {matrix_path}"
        )
    return sp.csr_matrix(values.astype(np.int8))


def load_incidence_matrix(
    matrix_path: Path | str,
    peptides_path: Path | str,
    proteins_path: Path | str,
    chunk_size: int = 1_000,
) -> IncidenceMatrix:
    """
    Load a binary peptide × protein matrix and its identifier lists.

    Args:
        matrix_path: Tab-delimited 0/1 matrix without header
        peptides_path: Peptide ids, one per line, in row order
        proteins_path: Protein ids, one per line, in column order
        chunk_size: Matrix rows parsed per block; only one dense block is held
            in memory at a time

    Returns:
        IncidenceMatrix

    Raises:
        FileNotFoundError: If a file does not exist
        MalformedInputError: If the matrix is empty, non-numeric or not binary,
            or if an id list does not match the matrix dimensions
        ValueError: If chunk_size is not positive
    """
    matrix_path = _check_file(matrix_path)
    peptide_ids = load_id_list(peptides_path)
    protein_ids = load_id_list(proteins_path)
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    blocks = []
    try:
        with pd.read_csv(
            matrix_path, sep='\t', header=None, dtype=np.float32, chunksize=chunk_size
        ) as reader:
            for chunk in reader:
                blocks.append(_chunk_to_csr(chunk, len(blocks) * chunk_size, matrix_path))
    except MalformedInputError:
        raise
    except pd.errors.EmptyDataError as e:
        raise MalformedInputError(f"Matrix file is empty: {matrix_path}") from e
    except ValueError as e:
        raise MalformedInputError(f"Matrix file contains non-numeric values: {matrix_path}: {e}") from e

    data = sp.vstack(blocks, format='csr')
    if len(peptide_ids) != data.shape[0]:
        raise MalformedInputError(
            f"{peptides_path} lists {len(peptide_ids)} peptides but the matrix has "
            f"{data.shape[0]} rows"
        )
    if len(protein_ids) != data.shape[1]:
        raise MalformedInputError(
            f"{proteins_path} lists {len(protein_ids)} proteins but the matrix has "
            f"{data.shape[1]} columns"
        )

    matrix = IncidenceMatrix(data, peptide_ids, protein_ids)
    logger.info(
        f"Loaded incidence matrix: {matrix.n_peptides} peptides × "
        f"{matrix.n_proteins} proteins ({matrix.nnz} mappings)"
    )
    return matrix


def load_expressed_transcripts(path: Path | str) -> frozenset[str]:
    """Read expressed transcript ids (one per line)."""
    transcripts = frozenset(load_id_list(path))
    logger.info(f"Loaded {len(transcripts)} expressed transcripts from {Path(path).name}")
    return transcripts


def load_protein_transcript_map(path: Path | str) -> dict[str, frozenset[str]]:
    """
    Read a protein -> transcript table.

    The file has two tab-separated columns. A first line in which neither
    field contains a digit (e.g. "protein\\ttranscript") is taken as a header
    and skipped, since protein and transcript accessions always carry digits.

    Returns:
        Dict protein id -> frozenset of transcript ids

    Raises:
        FileNotFoundError: If path does not exist
        MalformedInputError: If the file does not have two columns
    """
    path = _check_file(path)
    try:
        df = pd.read_csv(path, sep='\t', header=None, dtype=str)
    except pd.errors.EmptyDataError as e:
        raise MalformedInputError(f"Protein-transcript map is empty: {path}") from e
    except pd.errors.ParserError as e:
        raise MalformedInputError(f"Failed to parse protein-transcript map {path}: {e}") from e

    if df.shape[1] != 2:
        raise MalformedInputError(
            f"Protein-transcript map must have exactly 2 columns, found {df.shape[1]}: {path}"
        )

    df.columns = ['protein', 'transcript']
    df = df.dropna()
    df['protein'] = df['protein'].str.strip()
    df['transcript'] = df['transcript'].str.strip()

    if len(df) and not any(ch.isdigit() for ch in ''.join(df.iloc[0])):
        logger.debug(f"Skipping header line of {path.name}: {df.iloc[0].tolist()}")
        df = df.iloc[1:]

    mapping = {
        protein: frozenset(group)
        for protein, group in df.groupby('protein', sort=False)['transcript']
    }
    n_multi = sum(1 for t in mapping.values() if len(t) > 1)
    logger.info(
        f"Loaded transcript mapping for {len(mapping)} proteins "
        f"({n_multi} with several transcripts)"
    )
    return mapping


def classify_protein_ids(
    protein_ids: Iterable[str],
    prot_tag: Optional[str] = None,
    contam_tag: Optional[str] = None,
    warn: bool = True,
) -> pd.Series:
    """
    Label protein ids as "protein", "contaminant" or "other".

    Args:
        protein_ids: Protein identifiers
        prot_tag: Substring of regular (e.g. Ensembl "ENSP") protein ids
        contam_tag: Substring of contaminant ids
        warn: Emit a UserWarning when some ids match neither tag

    Returns:
        Series indexed by protein id
    """
    ids = pd.Index([str(p) for p in protein_ids], dtype=object, name="protein")
    kinds = pd.Series("other", index=ids, name="kind", dtype=object)
    if prot_tag:
        kinds[ids.str.contains(prot_tag, regex=False)] = "protein"
    elif len(ids):
        kinds[:] = "protein"
    if contam_tag:
        kinds[ids.str.contains(contam_tag, regex=False)] = "contaminant"

    n_other = int((kinds == "other").sum())
    if warn and n_other:
        examples = kinds[kinds == "other"].index[:5].tolist()
        warnings.warn(
            f"{n_other} protein id(s) match neither '{prot_tag}' nor '{contam_tag}': {examples}",
            UserWarning,
        )
    return kinds
