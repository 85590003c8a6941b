"""
Exception hierarchy for peptide/protein graph analysis.

All errors raised by pepnet derive from PepnetError so callers can catch the
whole family at once. The concrete classes also derive from the closest
builtin (ValueError, KeyError) so generic handlers keep working.
"""

from __future__ import annotations

__all__ = [
    'PepnetError',
    'MalformedInputError',
    'UnknownProteinError',
    'ProteinNotFoundError',
    'EmptyGraphWarning',
]


class PepnetError(Exception):
    """Base class for all pepnet errors."""
    pass


class MalformedInputError(PepnetError, ValueError):
    """Raised when a matrix and its identifier lists are inconsistent."""
    pass


class UnknownProteinError(PepnetError, KeyError):
    """Raised when a protein has no transcript mapping and lookups are strict."""

    def __init__(self, proteins):
        self.proteins = list(proteins)
        preview = ", ".join(self.proteins[:5])
        if len(self.proteins) > 5:
            preview += ", ..."
        super().__init__(
            f"{len(self.proteins)} protein(s) missing from the protein-to-transcript "
            f"mapping: {preview}"
        )

    def __str__(self) -> str:
        return self.args[0]


class ProteinNotFoundError(PepnetError, KeyError):
    """Raised when a protein cannot be resolved in the component partition."""

    def __init__(self, protein: str, reason: str = "not found in any multi-protein component"):
        self.protein = protein
        super().__init__(f"Protein '{protein}' {reason}")

    def __str__(self) -> str:
        return self.args[0]


class EmptyGraphWarning(UserWarning):
    """Emitted when a reduction leaves no shared peptides (no multi-protein CCs)."""
    pass
