"""
Integration tests for file loading and writing.

Uses temporary files with the same layout as real search-engine exports.
"""

import json

import numpy as np
import pytest

from pepnet.core.exceptions import MalformedInputError
from pepnet.graph.adjacency import build_adjacency
from pepnet.graph.components import find_components
from pepnet.graph.reduction import reduce_matrix
from pepnet.io.loaders import (
    classify_protein_ids,
    load_expressed_transcripts,
    load_id_list,
    load_incidence_matrix,
    load_protein_transcript_map,
)
from pepnet.io.writers import write_components, write_incidence_matrix, write_summary_json


@pytest.fixture
def matrix_files(tmp_path):
    """Chain matrix written as incM / peptideIDs / proteinIDs files."""
    matrix = tmp_path / "incM.tsv"
    matrix.write_text("1\t1\t0\n0\t1\t1\n0\t0\t1\n")
    peptides = tmp_path / "peptideIDs.txt"
    peptides.write_text("pep1\npep2\npep3\n")
    proteins = tmp_path / "proteinIDs.txt"
    proteins.write_text("ENSP1\nENSP2\nENSP3\n")
    return matrix, peptides, proteins


class TestLoadIdList:
    """Test identifier list parsing."""

    def test_strips_and_drops_trailing_blank(self, tmp_path):
        path = tmp_path / "ids.txt"
        path.write_text(" a \nb\n\n")
        assert load_id_list(path) == ["a", "b"]

    def test_interior_blank_warns(self, tmp_path):
        path = tmp_path / "ids.txt"
        path.write_text("a\n\nb\n")
        with pytest.warns(UserWarning, match="blank"):
            assert load_id_list(path) == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_id_list(tmp_path / "nope.txt")

    def test_directory(self, tmp_path):
        with pytest.raises(ValueError, match="not a file"):
            load_id_list(tmp_path)


class TestLoadIncidenceMatrix:
    """Test matrix loading and validation."""

    def test_chain(self, matrix_files, chain_matrix):
        assert load_incidence_matrix(*matrix_files) == chain_matrix

    def test_row_count_mismatch(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        peptides.write_text("pep1\npep2\n")
        with pytest.raises(MalformedInputError, match="lists 2 peptides"):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_column_count_mismatch(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        proteins.write_text("ENSP1\nENSP2\nENSP3\nENSP4\n")
        with pytest.raises(MalformedInputError, match="lists 4 proteins"):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_non_binary(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        matrix.write_text("1\t2\t0\n0\t1\t1\n0\t0\t1\n")
        with pytest.raises(MalformedInputError, match="binary"):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_non_numeric(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        matrix.write_text("1\tx\t0\n0\t1\t1\n0\t0\t1\n")
        with pytest.raises(MalformedInputError):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_empty_matrix_file(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        matrix.write_text("")
        with pytest.raises(MalformedInputError, match="empty"):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_duplicate_protein_ids(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        proteins.write_text("ENSP1\nENSP1\nENSP3\n")
        with pytest.raises(MalformedInputError, match="duplicate"):
            load_incidence_matrix(matrix, peptides, proteins)

    def test_chunked_matches_single_block(self, tmp_path, random_matrix):
        paths = write_incidence_matrix(random_matrix, tmp_path / "rand", chunk_size=37)
        files = paths["matrix"], paths["peptides"], paths["proteins"]
        whole = load_incidence_matrix(*files, chunk_size=random_matrix.n_peptides)
        assert load_incidence_matrix(*files, chunk_size=7) == whole
        assert whole == random_matrix

    def test_missing_value_reports_row(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        matrix.write_text("1\t1\t0\n0\t1\t1\n0\t0\n")
        with pytest.raises(MalformedInputError, match="row 3"):
            load_incidence_matrix(matrix, peptides, proteins, chunk_size=2)

    def test_non_binary_in_later_chunk(self, matrix_files):
        matrix, peptides, proteins = matrix_files
        matrix.write_text("1\t1\t0\n0\t1\t1\n0\t3\t1\n")
        with pytest.raises(MalformedInputError, match="binary"):
            load_incidence_matrix(matrix, peptides, proteins, chunk_size=1)

    def test_invalid_chunk_size(self, matrix_files):
        with pytest.raises(ValueError, match="chunk_size"):
            load_incidence_matrix(*matrix_files, chunk_size=0)


class TestTranscriptomeFiles:
    """Test expressed transcripts and protein-transcript map loading."""

    def test_expressed(self, tmp_path):
        path = tmp_path / "expressed.txt"
        path.write_text("ENST1\nENST2\nENST1\n")
        assert load_expressed_transcripts(path) == frozenset({"ENST1", "ENST2"})

    def test_map_with_header_and_multiple_transcripts(self, tmp_path):
        path = tmp_path / "map.tsv"
        path.write_text("protein\ttranscript\nENSP1\tENST1\nENSP1\tENST9\nENSP2\tENST2\n")
        mapping = load_protein_transcript_map(path)
        assert mapping == {
            "ENSP1": frozenset({"ENST1", "ENST9"}),
            "ENSP2": frozenset({"ENST2"}),
        }

    def test_map_without_header(self, tmp_path):
        path = tmp_path / "map.tsv"
        path.write_text("ENSP1\tENST1\n")
        assert load_protein_transcript_map(path) == {"ENSP1": frozenset({"ENST1"})}

    def test_map_wrong_column_count(self, tmp_path):
        path = tmp_path / "map.tsv"
        path.write_text("ENSP1\tENST1\tx\n")
        with pytest.raises(MalformedInputError, match="2 columns"):
            load_protein_transcript_map(path)

    def test_map_empty(self, tmp_path):
        path = tmp_path / "map.tsv"
        path.write_text("")
        with pytest.raises(MalformedInputError):
            load_protein_transcript_map(path)


class TestClassifyProteinIds:
    """Test protein / contaminant / other labelling."""

    def test_kinds(self):
        with pytest.warns(UserWarning, match="match neither"):
            kinds = classify_protein_ids(["ENSP1", "CON__K1", "sp|P1"], "ENSP", "CON__")
        assert kinds.tolist() == ["protein", "contaminant", "other"]

    def test_no_warning_when_all_match(self, recwarn):
        classify_protein_ids(["ENSP1", "CON__K1"], "ENSP", "CON__")
        assert len(recwarn) == 0

    def test_no_prot_tag_means_protein(self):
        kinds = classify_protein_ids(["X1", "CON__K1"], None, "CON__")
        assert kinds.tolist() == ["protein", "contaminant"]


class TestWriters:
    """Test output writers."""

    def test_matrix_roundtrip(self, tmp_path, mixed_matrix):
        paths = write_incidence_matrix(mixed_matrix, tmp_path / "out" / "mixed")
        assert paths["matrix"].name == "mixed.matrix.tsv"
        loaded = load_incidence_matrix(paths["matrix"], paths["peptides"], paths["proteins"])
        assert loaded == mixed_matrix

    def test_components(self, tmp_path, mixed_matrix):
        components = find_components(build_adjacency(reduce_matrix(mixed_matrix)))
        path = write_components(components, tmp_path / "components.tsv")
        lines = path.read_text().splitlines()
        assert lines[0] == "component_id\tsize\tmembers"
        assert lines[1] == "CC1\t2\tCON__K1;ENSP04"

    def test_summary_json(self, tmp_path):
        path = write_summary_json(
            {"n": np.int64(3), "perc": np.float64(1.5), "ids": {"b", "a"}},
            tmp_path / "summary.json",
        )
        assert json.loads(path.read_text()) == {"n": 3, "perc": 1.5, "ids": ["a", "b"]}
        assert list(tmp_path.glob("*.tmp")) == []

    def test_summary_json_failure_leaves_no_file(self, tmp_path):
        with pytest.raises(TypeError):
            write_summary_json({"x": object()}, tmp_path / "summary.json")
        assert not (tmp_path / "summary.json").exists()
        assert list(tmp_path.glob("*.tmp")) == []
