"""
I/O module for incidence matrices and transcriptome evidence.

Key Functions:
    - load_incidence_matrix: matrix TSV + peptide and protein id lists
    - load_expressed_transcripts: expressed transcript ids
    - load_protein_transcript_map: protein -> transcript table
    - write_incidence_matrix: write a matrix back in the loader's layout
    - write_components / write_summary_json: analysis outputs

Examples:
    >>> from pepnet.io import load_incidence_matrix
    >>> matrix = load_incidence_matrix("incM.tsv", "peptideIDs.txt", "proteinIDs.txt")
"""

from pepnet.io.loaders import (
    load_id_list,
    load_incidence_matrix,
    load_expressed_transcripts,
    load_protein_transcript_map,
    classify_protein_ids,
)
from pepnet.io.writers import write_incidence_matrix, write_components, write_summary_json

__all__ = [
    'load_id_list',
    'load_incidence_matrix',
    'load_expressed_transcripts',
    'load_protein_transcript_map',
    'classify_protein_ids',
    'write_incidence_matrix',
    'write_components',
    'write_summary_json',
]
