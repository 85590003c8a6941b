"""
pepnet filter command - Transcriptome-informed protein filtering.

Runs the connected-component analysis on the raw matrix, removes proteins
without transcriptome support according to a policy, re-runs the analysis on
the filtered matrix and writes a before/after comparison.

Policies:
    all               Remove every unsupported protein
    shared_only       Keep unsupported proteins that have a specific peptide
    shared_no_remove  Like shared_only, but never lose a peptide

Usage:
    pepnet filter -m incM.tsv --peptides peptideIDs.txt --proteins proteinIDs.txt \\
        --expressed expressed.txt --transcript-map prot2tx.tsv --policy shared_only
"""

import argparse
import logging
from pathlib import Path

from pepnet.cli._common import (
    DEFAULTS,
    INPUT_ERRORS,
    add_input_arguments,
    load_matrix_from_args,
    resolve_args,
    setup_logging,
)
from pepnet.cli.stats import print_report, write_report
from pepnet.filtering.transcriptome import MISSING_MAPPING_MODES, FilterPolicy

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the filter subcommand."""
    parser = subparsers.add_parser(
        "filter",
        help="Filter proteins with transcriptome evidence and compare ambiguity",
        description=(
            "Remove proteins whose transcripts are not expressed, then compare "
            "connected-component statistics before and after filtering."
        )
    )
    add_input_arguments(parser)

    group = parser.add_argument_group("transcriptome")
    group.add_argument("--expressed", type=Path, default=DEFAULTS.expressed,
                       help="Expressed transcript ids, one per line")
    group.add_argument("--transcript-map", type=Path, default=DEFAULTS.transcript_map,
                       help="Two-column TSV: protein id, transcript id")
    group.add_argument("--policy", choices=[p.value for p in FilterPolicy],
                       default=DEFAULTS.filter.policy,
                       help=f"Which unsupported proteins to remove (default: {DEFAULTS.filter.policy})")
    group.add_argument("--on-missing", choices=list(MISSING_MAPPING_MODES),
                       default=DEFAULTS.filter.on_missing,
                       help="Treatment of proteins absent from the transcript map "
                            f"(default: {DEFAULTS.filter.on_missing})")

    parser.add_argument("--plot", action="store_true",
                        help="Also save a before/after CC size distribution figure")
    parser.set_defaults(func=run_filter)


def run_filter(args: argparse.Namespace) -> int:
    """Execute the filter command."""
    from pepnet.io.loaders import load_expressed_transcripts, load_protein_transcript_map
    from pepnet.io.writers import write_incidence_matrix, write_summary_json
    from pepnet.pipeline import AmbiguityPipeline, compare_reports

    setup_logging(args.verbose)
    args = resolve_args(args, required=("matrix", "peptides", "proteins", "expressed", "transcript_map"))
    if args is None:
        return 1

    try:
        policy = FilterPolicy.parse(args.policy)
        matrix = load_matrix_from_args(args)
        expressed = load_expressed_transcripts(args.expressed)
        prot_to_tx = load_protein_transcript_map(args.transcript_map)
    except INPUT_ERRORS as e:
        logger.error(f"Failed to load inputs: {e}")
        return 1

    pipeline = AmbiguityPipeline(
        prot_tag=args.prot_tag,
        contam_tag=args.contam_tag,
        chunk_size=args.chunk_size,
    )
    try:
        before, after, filtered = pipeline.run_with_filter(
            matrix, expressed, prot_to_tx, policy=policy, on_missing=args.on_missing
        )
    except INPUT_ERRORS as e:
        logger.error(f"Filtering failed: {e}")
        return 1

    print_report(before)
    print_report(after)
    comparison = compare_reports(before, after)
    print(comparison.to_string())
    print()

    output = args.output
    output.mkdir(parents=True, exist_ok=True)
    write_report(before, output, prefix="raw_")
    write_report(after, output, prefix="filtered_")
    comparison.to_csv(output / "comparison.tsv", sep="\t", index_label="metric")
    write_incidence_matrix(filtered, output / "filtered")
    write_summary_json(
        {"policy": policy.value, "on_missing": args.on_missing,
         "raw": before.to_dict(), "filtered": after.to_dict()},
        output / "summary.json",
    )

    if args.plot:
        from pepnet.viz.network import plot_cc_size_distribution

        fig = plot_cc_size_distribution(
            [before.cc_stats, after.cc_stats], labels=[before.label, after.label]
        )
        fig.save(output / "cc_size_distribution.png")
        fig.close()

    logger.info(f"Results written to {output}")
    return 0
