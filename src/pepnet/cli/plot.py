"""
pepnet plot command - Render the connected component containing a protein.

Usage:
    pepnet plot -m incM.tsv --peptides peptideIDs.txt --proteins proteinIDs.txt \\
        --protein ENSP00000354587 --layout bipartite -o figures/
"""

import argparse
import logging

from pepnet.cli._common import (
    DEFAULTS,
    INPUT_ERRORS,
    add_input_arguments,
    load_matrix_from_args,
    resolve_args,
    setup_logging,
)

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the plot subcommand."""
    parser = subparsers.add_parser(
        "plot",
        help="Plot the peptide-protein graph of one connected component",
        description=(
            "Find the multi-protein connected component containing --protein "
            "and save its bipartite peptide-protein graph as an image."
        )
    )
    add_input_arguments(parser)
    parser.add_argument("--protein", "-p", required=True,
                        help="Protein id whose connected component is drawn")
    parser.add_argument("--layout", choices=["spring", "bipartite", "kamada_kawai"], default="spring",
                        help="Node layout (default: spring)")
    parser.add_argument("--palette", choices=["default", "colorblind", "print"], default="default",
                        help="Color palette (default: default)")
    parser.add_argument("--format", choices=["png", "pdf", "svg"], default="png",
                        help="Image format (default: png)")
    parser.add_argument("--dpi", type=int, default=DEFAULTS.output.dpi,
                        help=f"Resolution for raster output (default: {DEFAULTS.output.dpi})")
    parser.add_argument("--no-labels", action="store_true",
                        help="Do not draw vertex ids")
    parser.set_defaults(func=run_plot)


def run_plot(args: argparse.Namespace) -> int:
    """Execute the plot command."""
    from pepnet.core.exceptions import ProteinNotFoundError
    from pepnet.pipeline import AmbiguityPipeline
    from pepnet.viz.network import plot_cc_subgraph

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

    try:
        subgraph = pipeline.subgraph(report, args.protein)
    except ProteinNotFoundError as e:
        logger.error(str(e))
        return 1

    fig = plot_cc_subgraph(
        subgraph,
        layout=args.layout,
        palette=args.palette,
        show_labels=not args.no_labels,
    )
    path = fig.save(
        args.output / f"{subgraph.component_id}_{args.protein}.{args.format}",
        format=args.format,
        dpi=args.dpi,
    )
    fig.close()

    print(f"{args.protein} is in {subgraph.component_id} "
          f"({len(subgraph.proteins)} proteins, {len(subgraph.peptides)} peptides)")
    logger.info(f"Figure saved to {path}")
    return 0
