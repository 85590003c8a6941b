"""
Transcriptome-informed protein filtering.

Proteomics search databases usually hold every annotated protein isoform,
while a given sample only expresses a fraction of the corresponding
transcripts. Proteins whose transcript is not detected in matched RNA-seq
data (``unsupported`` proteins) are unlikely to be present and inflate
identification ambiguity through the peptides they share with expressed
isoforms.

Biological Context:
    - Contaminants (keratins, trypsin, ...) carry a tag in their identifier
      and never have a transcript: they are always kept.
    - A protein identified by a specific peptide has direct evidence of its
      own; policies SHARED_ONLY and SHARED_NO_REMOVE keep it regardless of
      transcript support.

Policies:
    ALL               drop every unsupported protein, then peptides left
                      without any protein
    SHARED_ONLY       drop unsupported proteins that have no specific peptide,
                      then peptides left without any protein
    SHARED_NO_REMOVE  as SHARED_ONLY, but only drop a protein if each of its
                      peptides also maps to a protein that stays; no peptide
                      is ever removed

Proteins removed under SHARED_ONLY are a subset of those removed under ALL,
and SHARED_NO_REMOVE removes a subset of SHARED_ONLY.

Examples:
    >>> from pepnet.filtering import FilterPolicy, filter_by_transcriptome
    >>> filtered = filter_by_transcriptome(
    ...     matrix,
    ...     expressed_transcripts={"ENST0001", "ENST0002"},
    ...     protein_to_transcript={"ENSP0001": "ENST0001", "ENSP0003": "ENST0003"},
    ...     contam_tag="CON__",
    ...     policy=FilterPolicy.SHARED_ONLY,
    ... )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import numpy as np
import pandas as pd

from pepnet.core.exceptions import UnknownProteinError
from pepnet.core.incidence import IncidenceMatrix
from pepnet.core.transform import Transform

__all__ = [
    'FilterPolicy',
    'MISSING_MAPPING_MODES',
    'FilterSummary',
    'unsupported_proteins',
    'filter_by_transcriptome',
    'summarize_filter',
    'TranscriptomeFilter',
]

logger = logging.getLogger(__name__)

MISSING_MAPPING_MODES = ('unsupported', 'raise', 'supported')


class FilterPolicy(str, Enum):
    """Which unsupported proteins are dropped, and whether their peptides go too."""
    ALL = "all"
    SHARED_ONLY = "shared_only"
    SHARED_NO_REMOVE = "shared_no_remove"

    @classmethod
    def parse(cls, value: str | FilterPolicy) -> FilterPolicy:
        """
        Accept an enum member, its value, or its name (case-insensitive, '-' or '_').

        Raises:
            ValueError: If value names no policy
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace('-', '_')
        for policy in cls:
            if key in (policy.value, policy.name.lower()):
                return policy
        raise ValueError(
            f"Unknown filter policy '{value}'. Choose from: "
            f"{', '.join(p.value for p in cls)}"
        )


def _as_transcripts(value: Any) -> Optional[frozenset]:
    """Normalize a mapping value to a set of transcript ids (None if empty)."""
    if value is None:
        return None
    if isinstance(value, str):
        return frozenset([value]) if value else None
    if isinstance(value, Iterable):
        transcripts = frozenset(str(v) for v in value if v is not None and not pd.isna(v))
        return transcripts or None
    if pd.isna(value):
        return None
    return frozenset([str(value)])


def unsupported_proteins(
    protein_ids: Iterable[str],
    expressed_transcripts: Iterable[str],
    protein_to_transcript: Mapping[str, Any],
    contam_tag: Optional[str] = None,
    on_missing: str = 'unsupported',
) -> np.ndarray:
    """
    Boolean mask of proteins without transcriptome support.

    A protein is supported if any of its mapped transcripts is expressed.
    Contaminant-tagged proteins are never evaluated (always False).

    Args:
        protein_ids: Proteins to evaluate
        expressed_transcripts: Transcript ids detected in the RNA data
        protein_to_transcript: Protein -> transcript id (or collection of ids)
        contam_tag: Substring marking contaminant proteins
        on_missing: Treatment of proteins absent from the mapping:
            'unsupported' (default) counts them unsupported and logs a warning,
            'raise' raises UnknownProteinError, 'supported' keeps them.

    Raises:
        ValueError: If on_missing is not a known mode
        UnknownProteinError: If on_missing='raise' and proteins lack a mapping
    """
    if on_missing not in MISSING_MAPPING_MODES:
        raise ValueError(
            f"on_missing must be one of {MISSING_MAPPING_MODES}, got '{on_missing}'"
        )

    expressed = frozenset(str(t) for t in expressed_transcripts)
    proteins = [str(p) for p in protein_ids]
    mask = np.zeros(len(proteins), dtype=bool)
    missing = []

    for k, protein in enumerate(proteins):
        if contam_tag and contam_tag in protein:
            continue
        transcripts = _as_transcripts(protein_to_transcript.get(protein))
        if transcripts is None:
            missing.append(protein)
            mask[k] = on_missing == 'unsupported'
            continue
        mask[k] = transcripts.isdisjoint(expressed)

    if missing:
        if on_missing == 'raise':
            raise UnknownProteinError(missing)
        logger.warning(
            f"{len(missing)} non-contaminant protein(s) have no transcript mapping; "
            f"treated as {'unsupported' if on_missing == 'unsupported' else 'supported'}"
        )

    return mask


def _hits(rows: np.ndarray, matrix: IncidenceMatrix) -> np.ndarray:
    """Per protein: does any of the selected peptide rows map to it."""
    if not rows.any():
        return np.zeros(matrix.n_proteins, dtype=bool)
    return np.asarray(matrix.data[rows, :].sum(axis=0)).ravel() > 0


def filter_by_transcriptome(
    matrix: IncidenceMatrix,
    expressed_transcripts: Iterable[str],
    protein_to_transcript: Mapping[str, Any],
    contam_tag: Optional[str] = None,
    policy: FilterPolicy | str = FilterPolicy.ALL,
    on_missing: str = 'unsupported',
) -> IncidenceMatrix:
    """
    Remove proteins unsupported by transcriptome evidence.

    Under SHARED_NO_REMOVE a peptide counts as covered by any protein outside
    the candidate set, including an unsupported protein kept for its specific
    peptide.

    Args:
        matrix: Full (unreduced) incidence matrix
        expressed_transcripts: Transcript ids detected in the RNA data
        protein_to_transcript: Protein -> transcript id(s)
        contam_tag: Substring marking contaminants (always retained)
        policy: FilterPolicy or its string value
        on_missing: See unsupported_proteins()

    Returns:
        New IncidenceMatrix; surviving identifiers are unchanged and keep
        their order. The input matrix is not modified.

    Raises:
        UnknownProteinError: If on_missing='raise' and a protein lacks a mapping
    """
    policy = FilterPolicy.parse(policy)
    unsupported = unsupported_proteins(
        matrix.protein_ids, expressed_transcripts, protein_to_transcript,
        contam_tag=contam_tag, on_missing=on_missing,
    )

    if policy is FilterPolicy.ALL:
        remove = unsupported
    else:
        specific_rows = matrix.proteins_per_peptide() == 1
        candidates = unsupported & ~_hits(specific_rows, matrix)

        if policy is FilterPolicy.SHARED_ONLY:
            remove = candidates
        else:
            # Peptides not covered by any protein outside the candidates would be orphaned
            covered = np.asarray(matrix.data @ (~candidates).astype(np.int32)).ravel() > 0
            remove = candidates & ~_hits(~covered, matrix)

    filtered = matrix.select_proteins(~remove)
    if policy is not FilterPolicy.SHARED_NO_REMOVE:
        filtered = filtered.select_peptides(filtered.proteins_per_peptide() > 0)

    logger.info(
        f"Transcriptome filter ({policy.value}): {int(unsupported.sum())} unsupported "
        f"proteins, removed {int(remove.sum())} proteins and "
        f"{matrix.n_peptides - filtered.n_peptides} peptides"
    )
    return filtered


@dataclass
class FilterSummary:
    """Proteins and peptides removed between two matrices."""
    policy: str
    removed_proteins: list[str] = field(default_factory=list)
    removed_peptides: list[str] = field(default_factory=list)
    n_proteins_before: int = 0
    n_proteins_after: int = 0
    n_peptides_before: int = 0
    n_peptides_after: int = 0

    def to_dict(self) -> dict:
        return {
            'policy': self.policy,
            'n_proteins_before': self.n_proteins_before,
            'n_proteins_after': self.n_proteins_after,
            'n_peptides_before': self.n_peptides_before,
            'n_peptides_after': self.n_peptides_after,
            'n_removed_proteins': len(self.removed_proteins),
            'n_removed_peptides': len(self.removed_peptides),
        }


def summarize_filter(
    before: IncidenceMatrix,
    after: IncidenceMatrix,
    policy: FilterPolicy | str = FilterPolicy.ALL,
) -> FilterSummary:
    """Describe what a filter removed (ids in original order)."""
    return FilterSummary(
        policy=FilterPolicy.parse(policy).value,
        removed_proteins=before.protein_ids.difference(after.protein_ids, sort=False).tolist(),
        removed_peptides=before.peptide_ids.difference(after.peptide_ids, sort=False).tolist(),
        n_proteins_before=before.n_proteins,
        n_proteins_after=after.n_proteins,
        n_peptides_before=before.n_peptides,
        n_peptides_after=after.n_peptides,
    )


class TranscriptomeFilter(Transform):
    """
    Transform wrapper around filter_by_transcriptome.

    Examples:
        >>> step = TranscriptomeFilter(expressed, prot_to_tx, contam_tag="CON__",
        ...                            policy="shared_only")
        >>> filtered = step.apply(matrix)
    """

    def __init__(
        self,
        expressed_transcripts: Iterable[str],
        protein_to_transcript: Mapping[str, Any],
        contam_tag: Optional[str] = None,
        policy: FilterPolicy | str = FilterPolicy.ALL,
        on_missing: str = 'unsupported',
    ):
        self.policy = FilterPolicy.parse(policy)
        if on_missing not in MISSING_MAPPING_MODES:
            raise ValueError(
                f"on_missing must be one of {MISSING_MAPPING_MODES}, got '{on_missing}'"
            )
        self.expressed_transcripts = frozenset(str(t) for t in expressed_transcripts)
        super().__init__(
            name="TranscriptomeFilter",
            params={
                "policy": self.policy.value,
                "contam_tag": contam_tag,
                "on_missing": on_missing,
                "n_expressed_transcripts": len(self.expressed_transcripts),
            },
        )
        self.protein_to_transcript = protein_to_transcript
        self.contam_tag = contam_tag
        self.on_missing = on_missing

    def apply(self, matrix: IncidenceMatrix) -> IncidenceMatrix:
        errors = self.validate(matrix)
        if errors:
            raise ValueError(f"Validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
        return filter_by_transcriptome(
            matrix,
            self.expressed_transcripts,
            self.protein_to_transcript,
            contam_tag=self.contam_tag,
            policy=self.policy,
            on_missing=self.on_missing,
        )
