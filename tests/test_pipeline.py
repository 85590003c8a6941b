"""
Integration tests for the end-to-end ambiguity pipeline.
"""

import json

import numpy as np
import pytest

from pepnet.core.exceptions import ProteinNotFoundError
from pepnet.core.incidence import IncidenceMatrix
from pepnet.filtering.transcriptome import FilterPolicy
from pepnet.pipeline import AmbiguityPipeline, compare_reports


@pytest.fixture
def pipeline():
    return AmbiguityPipeline(prot_tag="ENSP", contam_tag="CON__")


class TestRun:
    """Test a single analysis pass."""

    def test_chain(self, pipeline, chain_matrix):
        report = pipeline.run(chain_matrix)
        assert report.label == "raw"
        assert report.cc_stats.n_multi == 1
        assert report.cc_stats.n_single == 0
        assert report.peptide_stats.n_shared == 2
        assert report.peptide_stats.n_specific == 1
        assert len(report.compositions) == 1

    def test_metrics(self, pipeline, mixed_matrix):
        metrics = pipeline.run(mixed_matrix).metrics()
        assert metrics["n_single_protein_ccs"] == 2
        assert metrics["n_multi_protein_ccs"] == 2
        assert metrics["perc_specific_peptides"] == pytest.approx(66.67)

    def test_to_dict_is_json_serializable(self, pipeline, mixed_matrix):
        d = pipeline.run(mixed_matrix).to_dict()
        assert json.loads(json.dumps(d))["n_edges"] == 2

    def test_chunked_pipeline_same_result(self, mixed_matrix):
        a = AmbiguityPipeline().run(mixed_matrix)
        b = AmbiguityPipeline(chunk_size=2).run(mixed_matrix)
        assert a.components == b.components

    def test_no_shared_peptides(self, pipeline):
        m = IncidenceMatrix(np.eye(3), ["a", "b", "c"], ["ENSP1", "ENSP2", "ENSP3"])
        with pytest.warns(UserWarning):
            report = pipeline.run(m)
        assert report.components == []
        assert report.cc_stats.n_single == 3
        assert report.peptide_stats.perc_specific == 100.0

    def test_subgraph(self, pipeline, mixed_matrix):
        report = pipeline.run(mixed_matrix)
        sub = pipeline.subgraph(report, "ENSP04")
        assert sub.roles["CON__K1"] == "contaminant"
        with pytest.raises(ProteinNotFoundError):
            pipeline.subgraph(report, "ENSP03")


class TestRunWithFilter:
    """Test the raw -> filtered comparison."""

    def test_before_after(self, pipeline, filter_matrix, expressed_transcripts, protein_to_transcript):
        before, after, filtered = pipeline.run_with_filter(
            filter_matrix, expressed_transcripts, protein_to_transcript, policy="all"
        )
        assert before.label == "raw"
        assert after.label == "filtered_all"
        assert after.matrix is filtered
        # Raw: all seven proteins form one component
        assert before.cc_stats.n_multi == 1
        assert before.cc_stats.n_multi_proteins == 7
        # Filtered: ENSP3 alone, {CON__X, ENSP5}
        assert after.cc_stats.n_single == 1
        assert after.cc_stats.n_multi == 1
        assert after.filter_summary.policy == "all"
        assert len(after.filter_summary.removed_proteins) == 4

    def test_compare_reports(self, pipeline, filter_matrix, expressed_transcripts, protein_to_transcript):
        before, after, _ = pipeline.run_with_filter(
            filter_matrix, expressed_transcripts, protein_to_transcript,
            policy=FilterPolicy.SHARED_NO_REMOVE,
        )
        table = compare_reports(before, after)
        assert list(table.columns) == ["raw", "filtered_shared_no_remove"]
        assert table.loc["n_proteins", "raw"] == 7
        assert table.loc["n_proteins", "filtered_shared_no_remove"] == 6
        assert table.loc["n_peptides", "filtered_shared_no_remove"] == 8
