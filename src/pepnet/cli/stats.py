"""
pepnet stats command - Connected-component ambiguity statistics.

Loads a peptide x protein incidence matrix, reduces it to proteins with shared
peptides, finds connected components of the shared-peptide graph and reports
how ambiguous the protein identifications are.

Usage:
    pepnet stats --matrix incM.tsv --peptides peptideIDs.txt --proteins proteinIDs.txt -o results/
"""

import argparse
import logging

from pepnet.cli._common import (
    INPUT_ERRORS,
    add_input_arguments,
    load_matrix_from_args,
    resolve_args,
    setup_logging,
)

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the stats subcommand."""
    parser = subparsers.add_parser(
        "stats",
        help="Connected-component statistics of a peptide-protein mapping",
        description=(
            "Reduce the incidence matrix to proteins sharing peptides, find "
            "connected components of the shared-peptide graph and report "
            "single/multi-protein CC counts and shared/specific peptides."
        )
    )
    add_input_arguments(parser)
    parser.add_argument("--plot", action="store_true",
                        help="Also save the CC size distribution figure")
    parser.set_defaults(func=run_stats)


def print_report(report) -> None:
    """Print the statistics of one analysis pass."""
    cc, pep = report.cc_stats, report.peptide_stats
    print(f"\n{'='*60}")
    print(f"  Connected components: {report.label}")
    print(f"{'='*60}")
    print(f"  Proteins:                     {cc.n_proteins}")
    print(f"  Single-protein CCs:           {cc.n_single}")
    print(f"  Multi-protein CCs:            {cc.n_multi}")
    print(f"  Proteins in multi-protein CCs: {cc.n_multi_proteins}")
    print(f"  Shared peptides:              {pep.n_shared}")
    print(f"  Specific peptides:            {pep.n_specific} ({pep.perc_specific}%)")
    print("\n  CC size distribution:")
    for size, count in cc.size_distribution.items():
        print(f"    {size:>4}: {count}")
    print()


def write_report(report, output_dir, prefix: str = "") -> None:
    """Write summary, components, compositions and size distribution of one pass."""
    from pepnet.graph.composition import composition_table
    from pepnet.io.writers import write_components, write_summary_json

    write_summary_json(report.to_dict(), output_dir / f"{prefix}summary.json")
    write_components(report.components, output_dir / f"{prefix}components.tsv")
    composition_table(report.compositions).to_csv(
        output_dir / f"{prefix}cc_composition.tsv", sep="\t", index=False
    )
    report.cc_stats.size_distribution.to_csv(
        output_dir / f"{prefix}cc_size_distribution.tsv", sep="\t"
    )


def run_stats(args: argparse.Namespace) -> int:
    """Execute the stats command."""
    from pepnet.pipeline import AmbiguityPipeline

    setup_logging(args.verbose)
    args = resolve_args(args)
    if args is None:
        return 1

    try:
        matrix = load_matrix_from_args(args)
    except INPUT_ERRORS as e:
        logger.error(f"Failed to load inputs: {e}")
        return 1

    pipeline = AmbiguityPipeline(
        prot_tag=args.prot_tag,
        contam_tag=args.contam_tag,
        chunk_size=args.chunk_size,
    )
    report = pipeline.run(matrix)
    print_report(report)

    args.output.mkdir(parents=True, exist_ok=True)
    write_report(report, args.output)

    if args.plot:
        from pepnet.viz.network import plot_cc_size_distribution

        fig = plot_cc_size_distribution(report.cc_stats, labels=[report.label])
        fig.save(args.output / "cc_size_distribution.png")
        fig.close()

    logger.info(f"Results written to {args.output}")
    return 0
