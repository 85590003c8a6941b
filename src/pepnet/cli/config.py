"""
Configuration file support for the pepnet CLI.

Supports YAML and JSON config files with CLI argument override.

Example config:

    matrix: data/incM.tsv
    peptides: data/peptideIDs.txt
    proteins: data/proteinIDs.txt
    expressed: data/expressed_transcripts.txt
    transcript_map: data/protein_to_transcript.tsv
    tags:
      prot_tag: ENSP
      contam_tag: CON__
    filter:
      policy: shared_only
      on_missing: unsupported
    output:
      dir: results/run1
      dpi: 300
"""

import json
from argparse import Namespace
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from pepnet.filtering.transcriptome import MISSING_MAPPING_MODES, FilterPolicy


@dataclass
class TagConfig:
    """Identifier tags."""
    prot_tag: Optional[str] = "ENSP"
    contam_tag: Optional[str] = "CON__"


@dataclass
class FilterConfig:
    """Transcriptome filter configuration."""
    policy: str = "all"
    on_missing: str = "unsupported"


@dataclass
class OutputConfig:
    """Output configuration."""
    dir: Path = Path("results")
    dpi: int = 300


@dataclass
class AnalysisConfig:
    """
    Complete configuration schema for pepnet commands.

    Mirrors the CLI argument structure for consistency.
    """
    matrix: Optional[Path] = None
    peptides: Optional[Path] = None
    proteins: Optional[Path] = None
    expressed: Optional[Path] = None
    transcript_map: Optional[Path] = None
    chunk_size: Optional[int] = None
    tags: TagConfig = field(default_factory=TagConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


# (section, key) in the config file -> (argparse dest, is_path)
_CONFIG_TO_ARG = {
    (None, 'matrix'): ('matrix', True),
    (None, 'peptides'): ('peptides', True),
    (None, 'proteins'): ('proteins', True),
    (None, 'expressed'): ('expressed', True),
    (None, 'transcript_map'): ('transcript_map', True),
    (None, 'chunk_size'): ('chunk_size', False),
    ('tags', 'prot_tag'): ('prot_tag', False),
    ('tags', 'contam_tag'): ('contam_tag', False),
    ('filter', 'policy'): ('policy', False),
    ('filter', 'on_missing'): ('on_missing', False),
    ('output', 'dir'): ('output', True),
    ('output', 'dpi'): ('dpi', False),
}

_SHORT_TO_LONG = {
    'm': 'matrix',
    'o': 'output',
    'c': 'config',
    'p': 'protein',
    'v': 'verbose',
}


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid

    Examples:
        >>> config = load_config(Path("pepnet.yaml"))
        >>> print(config['filter']['policy'])
        shared_only
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Unsupported config format: {suffix}. "
            f"Use .yaml, .yml, or .json"
        )

    try:
        with open(config_path, 'r') as f:
            if suffix == '.json':
                config = json.load(f)
            else:
                config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    """Argument dests that appear on the command line."""
    explicit = set()
    for arg in cli_args or []:
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in _SHORT_TO_LONG:
            explicit.add(_SHORT_TO_LONG[arg[1]])
    return explicit


def _merge_value(cli_value: Any, config_value: Any, was_explicitly_set: bool) -> Any:
    """
    Merge a single config value with CLI argument.

    Rules:
    - CLI args ALWAYS override config if explicitly set
    - If CLI arg not set, use config value
    - If neither set, keep CLI default
    """
    if was_explicitly_set:
        return cli_value
    if config_value is not None:
        return config_value
    return cli_value


def merge_config_with_args(config: Dict[str, Any], args: Namespace, cli_args: Optional[List[str]] = None) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values).
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values; arguments the subcommand
        does not define are left untouched
    """
    explicit = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    for (section, key), (arg_name, is_path) in _CONFIG_TO_ARG.items():
        if not hasattr(merged, arg_name):
            continue
        source = config if section is None else config.get(section) or {}
        if key not in source:
            continue
        config_value = source[key]
        if is_path and config_value is not None:
            config_value = Path(config_value)
        setattr(
            merged,
            arg_name,
            _merge_value(getattr(merged, arg_name), config_value, arg_name in explicit),
        )

    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Raises:
        ValueError: If configuration is invalid
    """
    for section in ('tags', 'filter', 'output'):
        if section in config and not isinstance(config[section], dict):
            raise ValueError(f"Config section '{section}' must be a mapping")

    if 'filter' in config and 'policy' in config['filter']:
        FilterPolicy.parse(config['filter']['policy'])

    if 'filter' in config and 'on_missing' in config['filter']:
        on_missing = config['filter']['on_missing']
        if on_missing not in MISSING_MAPPING_MODES:
            raise ValueError(
                f"Invalid on_missing mode '{on_missing}'. "
                f"Choose from: {', '.join(MISSING_MAPPING_MODES)}"
            )

    if config.get('chunk_size') is not None:
        chunk_size = config['chunk_size']
        if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got: {chunk_size}")

    if 'output' in config and 'dpi' in config['output']:
        dpi = config['output']['dpi']
        if not isinstance(dpi, int) or dpi <= 0:
            raise ValueError(f"Output dpi must be a positive integer, got: {dpi}")

    if 'tags' in config:
        for key in ('prot_tag', 'contam_tag'):
            value = config['tags'].get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Tag '{key}' must be a string, got: {value!r}")
