"""
Writers for incidence matrices, components and run summaries.

Matrices are written in the same three-file layout the loaders read, so a
filtered matrix can be fed back into a new analysis:

    {base}.matrix.tsv     tab-delimited 0/1 values, no header
    {base}.peptides.txt   peptide ids, one per line
    {base}.proteins.txt   protein ids, one per line

JSON summaries are written atomically (temp file in the same directory, then
``os.replace()``), so an interrupted run never leaves a truncated file.

Examples:
    >>> from pathlib import Path
    >>> from pepnet.io.writers import write_incidence_matrix
    >>> paths = write_incidence_matrix(filtered, Path("results/filtered"))
    >>> paths["matrix"]
    PosixPath('results/filtered.matrix.tsv')
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import pandas as pd

from pepnet.core.incidence import IncidenceMatrix
from pepnet.graph.components import ConnectedComponent

__all__ = [
    'write_incidence_matrix',
    'write_components',
    'write_summary_json',
]

logger = logging.getLogger(__name__)


def write_incidence_matrix(
    matrix: IncidenceMatrix,
    base_path: Path | str,
    chunk_size: int = 1_000,
) -> dict[str, Path]:
    """
    Write matrix and id lists next to each other.

    Args:
        matrix: Matrix to write
        base_path: Path prefix (without extension); parent directories are created
        chunk_size: Rows densified per write, bounding memory for large matrices

    Returns:
        Dict with keys "matrix", "peptides", "proteins" -> written paths
    """
    base_path = Path(base_path)
    base_path.parent.mkdir(parents=True, exist_ok=True)

    paths = {
        'matrix': base_path.with_name(base_path.name + '.matrix.tsv'),
        'peptides': base_path.with_name(base_path.name + '.peptides.txt'),
        'proteins': base_path.with_name(base_path.name + '.proteins.txt'),
    }

    with open(paths['matrix'], 'w') as fh:
        for start in range(0, matrix.n_peptides, chunk_size):
            block = matrix.data[start:start + chunk_size].toarray()
            np.savetxt(fh, block, fmt='%d', delimiter='\t')
    paths['peptides'].write_text(''.join(f"{p}\n" for p in matrix.peptide_ids))
    paths['proteins'].write_text(''.join(f"{p}\n" for p in matrix.protein_ids))

    logger.info(f"Wrote {matrix.n_peptides}x{matrix.n_proteins} matrix to {paths['matrix']}")
    return paths


def write_components(components: Sequence[ConnectedComponent], path: Path | str) -> Path:
    """Write one row per component (component_id, size, ';'-joined members) as TSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        [c.to_dict() for c in components],
        columns=['component_id', 'size', 'members'],
    )
    df.to_csv(path, sep='\t', index=False)
    logger.info(f"Wrote {len(df)} components to {path}")
    return path


def write_summary_json(summary: Any, path: Path | str, *, indent: int = 2) -> Path:
    """
    Write a JSON-serializable summary atomically via temp-file + rename.

    numpy scalars are converted to Python numbers.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=path.parent, suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = tmp.name
            json.dump(summary, tmp, indent=indent, default=_json_default)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    return path


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
