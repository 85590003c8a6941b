"""
pepnet CLI - Peptide/protein graph ambiguity analysis.

Commands:
    pepnet stats   - Connected-component statistics of a peptide-protein mapping
    pepnet filter  - Transcriptome-informed filtering with before/after comparison
    pepnet plot    - Plot the peptide-protein graph of one connected component
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for pepnet."""
    parser = argparse.ArgumentParser(
        prog="pepnet",
        description="Protein identification ambiguity from peptide-protein graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  stats    Connected-component statistics of a peptide-protein mapping
  filter   Transcriptome-informed filtering with before/after comparison
  plot     Plot the peptide-protein graph of one connected component

Examples:
  pepnet stats -m incM.tsv --peptides peptideIDs.txt --proteins proteinIDs.txt -o results/
  pepnet filter --config pepnet.yaml --policy shared_only
  pepnet plot --config pepnet.yaml --protein ENSP00000354587 --layout bipartite
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from pepnet.cli import stats, filter, plot
    stats.register_parser(subparsers)
    filter.register_parser(subparsers)
    plot.register_parser(subparsers)

    argv = list(sys.argv[1:] if args is None else args)
    parsed_args = parser.parse_args(argv)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Raw arguments let config merging tell explicit flags from defaults
    parsed_args.argv = argv
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
