"""
Base transformation framework for immutable incidence-matrix operations.

Reduction and transcriptome filtering both take an IncidenceMatrix and return
a new one. Expressing them as Transform subclasses gives every step a name and
a parameter dictionary that can be logged and written next to the results.

Engineering Design:
    Pure Functions:
        - No side effects (input matrix is never modified)
        - Deterministic (same input + params -> same output)
        - Composable (transforms chain into pipelines)

Examples:
    >>> from pepnet.core.transform import Transform
    >>>
    >>> class DropContaminants(Transform):
    ...     def __init__(self, contam_tag: str = "CON__"):
    ...         super().__init__(name="DropContaminants", params={"contam_tag": contam_tag})
    ...         self.contam_tag = contam_tag
    ...
    ...     def apply(self, matrix):
    ...         keep = ~matrix.protein_ids.str.contains(self.contam_tag, regex=False)
    ...         return matrix.select_proteins(keep)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from pepnet.core.incidence import IncidenceMatrix

__all__ = ['Transform']


class Transform(ABC):
    """
    Abstract base class for IncidenceMatrix transformations.

    Attributes:
        name: Human-readable transformation name (e.g., "MatrixReducer")
        params: JSON-serializable parameters, kept for provenance
        timestamp: When this transform instance was created
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        self.name = name
        self.params = params
        self.timestamp = datetime.now()

    @abstractmethod
    def apply(self, matrix: IncidenceMatrix) -> IncidenceMatrix:
        """
        Execute transformation and return a new matrix.

        Must never modify the input matrix.
        """
        pass

    def validate(self, matrix: IncidenceMatrix) -> list[str]:
        """
        Check preconditions before applying the transformation.

        Subclasses should override and call super().validate() first.

        Returns:
            List of error messages (empty list = transformation can proceed)
        """
        errors: list[str] = []

        if matrix.n_proteins == 0:
            errors.append("Matrix has no proteins")

        return errors

    def __call__(self, matrix: IncidenceMatrix) -> IncidenceMatrix:
        return self.apply(matrix)

    def __repr__(self) -> str:
        """
        String representation for logging.

        Examples:
            >>> print(MatrixReducer())
            MatrixReducer(min_shared=2)
        """
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"
