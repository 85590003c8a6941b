"""
End-to-end ambiguity analysis of a peptide-to-protein mapping.

One pass runs reduction, adjacency, connected components, compositions and
statistics. The filtered analysis runs a first pass on the raw matrix, filters
proteins with transcriptome evidence and runs a second pass on the result, so
the effect of the filter on ambiguity can be compared side by side.

Examples:
    >>> from pepnet.pipeline import AmbiguityPipeline, compare_reports
    >>> pipeline = AmbiguityPipeline(prot_tag="ENSP", contam_tag="CON__")
    >>> report = pipeline.run(matrix)
    >>> print(report.cc_stats.n_multi)
    >>>
    >>> before, after, filtered = pipeline.run_with_filter(
    ...     matrix, expressed, prot_to_tx, policy="shared_only"
    ... )
    >>> compare_reports(before, after)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from pepnet.core.incidence import IncidenceMatrix
from pepnet.filtering.transcriptome import (
    FilterPolicy,
    FilterSummary,
    filter_by_transcriptome,
    summarize_filter,
)
from pepnet.graph.adjacency import AdjacencyGraph, build_adjacency
from pepnet.graph.components import ConnectedComponent, find_components
from pepnet.graph.composition import CCComposition, compose_components
from pepnet.graph.reduction import reduce_matrix
from pepnet.graph.subgraph import CCSubgraph, extract_subgraph
from pepnet.stats.ambiguity import CCStats, PeptideStats, compute_cc_stats, compute_peptide_stats

__all__ = ['AmbiguityReport', 'AmbiguityPipeline', 'compare_reports']

logger = logging.getLogger(__name__)


@dataclass
class AmbiguityReport:
    """
    Results of one analysis pass.

    Attributes:
        label: Name of the pass ("raw", "filtered", ...)
        matrix: Full matrix analysed
        reduced: Reduced matrix
        adjacency: Shared-peptide graph of the reduced matrix
        components: Multi-protein components
        compositions: Peptide content of each component
        cc_stats: Component statistics (reduced mode)
        peptide_stats: Shared/specific peptide statistics on the full matrix
        filter_summary: What the transcriptome filter removed (filtered passes)
    """
    label: str
    matrix: IncidenceMatrix = field(repr=False)
    reduced: IncidenceMatrix = field(repr=False)
    adjacency: AdjacencyGraph = field(repr=False)
    components: list[ConnectedComponent] = field(repr=False)
    compositions: list[CCComposition] = field(repr=False)
    cc_stats: CCStats = None
    peptide_stats: PeptideStats = None
    filter_summary: Optional[FilterSummary] = None

    def metrics(self) -> dict[str, Any]:
        """Flat metric dictionary used for comparison tables."""
        return {
            'n_peptides': self.matrix.n_peptides,
            'n_proteins': self.matrix.n_proteins,
            'n_single_protein_ccs': self.cc_stats.n_single,
            'n_multi_protein_ccs': self.cc_stats.n_multi,
            'n_proteins_in_multi_protein_ccs': self.cc_stats.n_multi_proteins,
            'n_shared_peptides': self.peptide_stats.n_shared,
            'n_specific_peptides': self.peptide_stats.n_specific,
            'perc_specific_peptides': self.peptide_stats.perc_specific,
        }

    def to_dict(self) -> dict[str, Any]:
        result = {
            'label': self.label,
            'n_peptides': self.matrix.n_peptides,
            'n_proteins': self.matrix.n_proteins,
            'n_reduced_peptides': self.reduced.n_peptides,
            'n_reduced_proteins': self.reduced.n_proteins,
            'n_edges': self.adjacency.n_edges,
            'cc_stats': self.cc_stats.to_dict(),
            'peptide_stats': self.peptide_stats.to_dict(),
        }
        if self.filter_summary is not None:
            result['filter'] = self.filter_summary.to_dict()
        return result


class AmbiguityPipeline:
    """
    Runs the reduction → adjacency → components → statistics chain.

    Parameters:
        prot_tag: Substring of regular protein ids (used for subgraph roles)
        contam_tag: Substring of contaminant ids (kept by the filter)
        chunk_size: Peptide batch size for adjacency accumulation (None = one batch)
    """

    def __init__(
        self,
        prot_tag: Optional[str] = "ENSP",
        contam_tag: Optional[str] = "CON__",
        chunk_size: Optional[int] = None,
    ):
        self.prot_tag = prot_tag
        self.contam_tag = contam_tag
        self.chunk_size = chunk_size

    def run(self, matrix: IncidenceMatrix, label: str = "raw") -> AmbiguityReport:
        """Analyse one matrix; never fails on a matrix without shared peptides."""
        logger.info(f"[{label}] Analysing {matrix.n_peptides} peptides x {matrix.n_proteins} proteins")

        reduced = reduce_matrix(matrix)
        adjacency = build_adjacency(reduced, chunk_size=self.chunk_size)
        components = find_components(adjacency)
        compositions = compose_components(components, matrix)
        cc_stats = compute_cc_stats(matrix, components, reduced=True)
        peptide_stats = compute_peptide_stats(matrix)

        logger.info(
            f"[{label}] {cc_stats.n_single} single-protein CCs, "
            f"{cc_stats.n_multi} multi-protein CCs; "
            f"{peptide_stats.perc_specific}% specific peptides"
        )
        return AmbiguityReport(
            label=label,
            matrix=matrix,
            reduced=reduced,
            adjacency=adjacency,
            components=components,
            compositions=compositions,
            cc_stats=cc_stats,
            peptide_stats=peptide_stats,
        )

    def run_with_filter(
        self,
        matrix: IncidenceMatrix,
        expressed_transcripts: Iterable[str],
        protein_to_transcript: Mapping[str, Any],
        policy: FilterPolicy | str = FilterPolicy.ALL,
        on_missing: str = 'unsupported',
    ) -> tuple[AmbiguityReport, AmbiguityReport, IncidenceMatrix]:
        """
        Analyse the raw matrix, filter it, and analyse the filtered matrix.

        Returns:
            (raw report, filtered report, filtered matrix)
        """
        policy = FilterPolicy.parse(policy)
        before = self.run(matrix, label="raw")
        filtered = filter_by_transcriptome(
            matrix,
            expressed_transcripts,
            protein_to_transcript,
            contam_tag=self.contam_tag,
            policy=policy,
            on_missing=on_missing,
        )
        after = self.run(filtered, label=f"filtered_{policy.value}")
        after.filter_summary = summarize_filter(matrix, filtered, policy)
        return before, after, filtered

    def subgraph(self, report: AmbiguityReport, protein: str) -> CCSubgraph:
        """Bipartite subgraph of the component containing `protein` in a report."""
        return extract_subgraph(
            protein,
            report.components,
            report.compositions,
            prot_tag=self.prot_tag,
            contam_tag=self.contam_tag,
        )


def compare_reports(*reports: AmbiguityReport) -> pd.DataFrame:
    """Metrics of several passes side by side (one column per report label)."""
    return pd.DataFrame({r.label: r.metrics() for r in reports})
