"""
Shared argument groups and input handling for pepnet subcommands.
"""

import argparse
import logging
from pathlib import Path

from pepnet.cli.config import AnalysisConfig, load_config, merge_config_with_args, validate_config
from pepnet.core.exceptions import PepnetError
from pepnet.core.incidence import IncidenceMatrix
from pepnet.io.loaders import classify_protein_ids, load_incidence_matrix

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULTS = AnalysisConfig()


def add_input_arguments(parser: argparse.ArgumentParser) -> None:
    """Matrix inputs, tags, output and config options shared by every subcommand."""
    group = parser.add_argument_group("input")
    group.add_argument("--matrix", "-m", type=Path, default=DEFAULTS.matrix,
                       help="Tab-delimited 0/1 peptide x protein matrix (no header)")
    group.add_argument("--peptides", type=Path, default=DEFAULTS.peptides,
                       help="Peptide ids, one per line, in matrix row order")
    group.add_argument("--proteins", type=Path, default=DEFAULTS.proteins,
                       help="Protein ids, one per line, in matrix column order")

    group = parser.add_argument_group("identifiers")
    group.add_argument("--prot-tag", default=DEFAULTS.tags.prot_tag,
                       help=f"Substring of regular protein ids (default: {DEFAULTS.tags.prot_tag})")
    group.add_argument("--contam-tag", default=DEFAULTS.tags.contam_tag,
                       help=f"Substring of contaminant ids (default: {DEFAULTS.tags.contam_tag})")

    parser.add_argument("--output", "-o", type=Path, default=DEFAULTS.output.dir,
                        help=f"Output directory (default: {DEFAULTS.output.dir})")
    parser.add_argument("--chunk-size", type=int, default=DEFAULTS.chunk_size,
                        help="Peptides per batch when building the adjacency (default: all at once)")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def resolve_args(args: argparse.Namespace, required: tuple = ("matrix", "peptides", "proteins")):
    """
    Merge the config file into the parsed arguments and check required inputs.

    Returns:
        The merged Namespace, or None after logging the problem
    """
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            config = load_config(args.config)
            validate_config(config)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Invalid configuration: {e}")
            return None
        args = merge_config_with_args(config, args, getattr(args, "argv", None))

    missing = [name for name in required if getattr(args, name, None) is None]
    if missing:
        flags = ", ".join(f"--{name.replace('_', '-')}" for name in missing)
        logger.error(f"Missing required input(s) {flags} (via CLI or config file)")
        return None

    if args.chunk_size is not None and args.chunk_size <= 0:
        logger.error(f"--chunk-size must be positive, got {args.chunk_size}")
        return None
    return args


def load_matrix_from_args(args: argparse.Namespace) -> IncidenceMatrix:
    """Load the incidence matrix named by the arguments and report id kinds."""
    matrix = load_incidence_matrix(args.matrix, args.peptides, args.proteins)
    kinds = classify_protein_ids(matrix.protein_ids, args.prot_tag, args.contam_tag)
    counts = kinds.value_counts()
    logger.info(
        f"Protein ids: {counts.get('protein', 0)} proteins, "
        f"{counts.get('contaminant', 0)} contaminants, {counts.get('other', 0)} other"
    )
    return matrix


INPUT_ERRORS = (FileNotFoundError, PepnetError, ValueError)
