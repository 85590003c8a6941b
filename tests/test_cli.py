"""
Integration tests for the pepnet command-line interface.

Each test writes real input files and calls pepnet.cli.main() with an
argument list, as the console script would.
"""

import json

import pytest
import yaml

from pepnet.cli import main
from pepnet.io.writers import write_incidence_matrix


@pytest.fixture
def inputs(tmp_path, filter_matrix, protein_to_transcript, expressed_transcripts):
    """filter_matrix plus transcriptome evidence written to disk."""
    paths = write_incidence_matrix(filter_matrix, tmp_path / "input" / "search")
    expressed = tmp_path / "input" / "expressed.txt"
    expressed.write_text("".join(f"{t}\n" for t in sorted(expressed_transcripts)))
    tx_map = tmp_path / "input" / "prot2tx.tsv"
    tx_map.write_text("protein\ttranscript\n" + "".join(
        f"{p}\t{t}\n" for p, t in protein_to_transcript.items()
    ))
    paths.update(expressed=expressed, transcript_map=tx_map)
    return paths


def _matrix_args(paths):
    return [
        "--matrix", str(paths["matrix"]),
        "--peptides", str(paths["peptides"]),
        "--proteins", str(paths["proteins"]),
    ]


class TestMain:
    """Test the dispatcher."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "stats" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "0.1.0" in capsys.readouterr().out


class TestStatsCommand:
    """Test pepnet stats."""

    def test_writes_outputs(self, inputs, tmp_path, capsys):
        out = tmp_path / "results"
        assert main(["stats", *_matrix_args(inputs), "-o", str(out)]) == 0

        summary = json.loads((out / "summary.json").read_text())
        assert summary["n_proteins"] == 7
        assert summary["cc_stats"]["n_multi_protein_ccs"] == 1
        assert (out / "components.tsv").exists()
        assert (out / "cc_composition.tsv").exists()
        assert (out / "cc_size_distribution.tsv").exists()
        assert "Multi-protein CCs" in capsys.readouterr().out

    def test_plot_flag(self, inputs, tmp_path):
        out = tmp_path / "results"
        assert main(["stats", *_matrix_args(inputs), "-o", str(out), "--plot"]) == 0
        assert (out / "cc_size_distribution.png").exists()

    def test_missing_inputs(self, tmp_path):
        assert main(["stats", "-o", str(tmp_path)]) == 1

    def test_missing_file(self, inputs, tmp_path):
        args = _matrix_args(inputs)
        args[1] = str(tmp_path / "nope.tsv")
        assert main(["stats", *args, "-o", str(tmp_path / "out")]) == 1

    def test_config_file(self, inputs, tmp_path):
        out = tmp_path / "from_config"
        config = tmp_path / "pepnet.yaml"
        config.write_text(yaml.safe_dump({
            "matrix": str(inputs["matrix"]),
            "peptides": str(inputs["peptides"]),
            "proteins": str(inputs["proteins"]),
            "output": {"dir": str(out)},
        }))
        assert main(["stats", "--config", str(config)]) == 0
        assert (out / "summary.json").exists()

    def test_invalid_config(self, inputs, tmp_path):
        config = tmp_path / "pepnet.yaml"
        config.write_text(yaml.safe_dump({"chunk_size": -1}))
        assert main(["stats", *_matrix_args(inputs), "--config", str(config)]) == 1


class TestFilterCommand:
    """Test pepnet filter."""

    def _filter_args(self, inputs):
        return [
            *_matrix_args(inputs),
            "--expressed", str(inputs["expressed"]),
            "--transcript-map", str(inputs["transcript_map"]),
        ]

    @pytest.mark.parametrize("policy, n_proteins", [
        ("all", 3),
        ("shared_only", 4),
        ("shared_no_remove", 6),
    ])
    def test_policies(self, inputs, tmp_path, policy, n_proteins):
        out = tmp_path / policy
        code = main(["filter", *self._filter_args(inputs), "--policy", policy, "-o", str(out)])
        assert code == 0

        summary = json.loads((out / "summary.json").read_text())
        assert summary["policy"] == policy
        assert summary["filtered"]["n_proteins"] == n_proteins
        assert (out / "filtered.matrix.tsv").exists()
        assert (out / "comparison.tsv").exists()
        assert (out / "raw_components.tsv").exists()
        assert (out / "filtered_components.tsv").exists()

    def test_on_missing_raise(self, inputs, tmp_path):
        inputs["transcript_map"].write_text("ENSP1\tENST1\n")
        code = main([
            "filter", *self._filter_args(inputs), "--on-missing", "raise", "-o", str(tmp_path / "out"),
        ])
        assert code == 1

    def test_requires_transcriptome(self, inputs, tmp_path):
        assert main(["filter", *_matrix_args(inputs), "-o", str(tmp_path / "out")]) == 1

    def test_plot_flag(self, inputs, tmp_path):
        out = tmp_path / "out"
        assert main(["filter", *self._filter_args(inputs), "-o", str(out), "--plot"]) == 0
        assert (out / "cc_size_distribution.png").exists()


class TestPlotCommand:
    """Test pepnet plot."""

    def test_plots_component(self, inputs, tmp_path, capsys):
        out = tmp_path / "figures"
        code = main([
            "plot", *_matrix_args(inputs), "--protein", "ENSP3", "--layout", "bipartite",
            "--dpi", "50", "-o", str(out),
        ])
        assert code == 0
        assert (out / "CC1_ENSP3.png").exists()
        assert "ENSP3 is in CC1" in capsys.readouterr().out

    def test_unknown_protein(self, inputs, tmp_path):
        code = main(["plot", *_matrix_args(inputs), "-p", "ENSP99", "-o", str(tmp_path)])
        assert code == 1
