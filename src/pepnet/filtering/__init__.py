"""
Protein filtering based on external evidence (transcriptome support).
"""

from pepnet.filtering.transcriptome import (
    FilterPolicy,
    MISSING_MAPPING_MODES,
    FilterSummary,
    unsupported_proteins,
    filter_by_transcriptome,
    summarize_filter,
    TranscriptomeFilter,
)

__all__ = [
    'FilterPolicy',
    'MISSING_MAPPING_MODES',
    'FilterSummary',
    'unsupported_proteins',
    'filter_by_transcriptome',
    'summarize_filter',
    'TranscriptomeFilter',
]
