"""
Ambiguity statistics: connected-component and shared/specific peptide counts.
"""

from pepnet.stats.ambiguity import (
    SIZE_BUCKETS,
    CCStats,
    PeptideStats,
    compute_cc_stats,
    compute_peptide_stats,
    size_distribution,
)

__all__ = [
    'SIZE_BUCKETS',
    'CCStats',
    'PeptideStats',
    'compute_cc_stats',
    'compute_peptide_stats',
    'size_distribution',
]
