"""
Bipartite subgraph of the component containing a protein of interest.

Used to inspect one ambiguous group: the peptides and proteins of the
component, each peptide-protein mapping as an edge, and a role per vertex so
a renderer can style peptides, proteins and contaminants differently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import networkx as nx

from pepnet.core.exceptions import MalformedInputError, ProteinNotFoundError
from pepnet.graph.components import ConnectedComponent
from pepnet.graph.composition import CCComposition

__all__ = ['CCSubgraph', 'extract_subgraph', 'protein_role']

logger = logging.getLogger(__name__)

ROLE_PEPTIDE = "peptide"
ROLE_PROTEIN = "protein"
ROLE_CONTAMINANT = "contaminant"


def protein_role(protein: str, prot_tag: Optional[str] = None, contam_tag: Optional[str] = None) -> str:
    """
    Role of a protein vertex: "contaminant" if it carries contam_tag, else "protein".

    prot_tag only matters for logging: proteins matching neither tag are still
    drawn as proteins.
    """
    if contam_tag and contam_tag in protein:
        return ROLE_CONTAMINANT
    if prot_tag and prot_tag not in protein:
        logger.debug(f"Protein '{protein}' matches neither '{prot_tag}' nor contaminant tag")
    return ROLE_PROTEIN


@dataclass
class CCSubgraph:
    """
    Bipartite peptide-protein graph of one component.

    Attributes:
        component_id: Id of the component containing `protein`
        protein: The queried protein
        edges: Sorted (peptide, protein) pairs
        roles: Vertex id -> "peptide" | "protein" | "contaminant"
    """
    component_id: str
    protein: str
    edges: list[tuple[str, str]]
    roles: dict[str, str] = field(default_factory=dict)

    @property
    def peptides(self) -> list[str]:
        return sorted(v for v, r in self.roles.items() if r == ROLE_PEPTIDE)

    @property
    def proteins(self) -> list[str]:
        return sorted(v for v, r in self.roles.items() if r != ROLE_PEPTIDE)

    def to_networkx(self) -> nx.Graph:
        """
        Bipartite networkx Graph (peptides bipartite=0, proteins bipartite=1).

        Node attributes: role, bipartite. Graph attributes: component_id, protein.
        """
        G = nx.Graph(component_id=self.component_id, protein=self.protein)
        for node, role in self.roles.items():
            G.add_node(node, role=role, bipartite=0 if role == ROLE_PEPTIDE else 1)
        G.add_edges_from(self.edges)
        return G


def extract_subgraph(
    protein: str,
    components: Sequence[ConnectedComponent],
    compositions: Sequence[CCComposition],
    prot_tag: Optional[str] = None,
    contam_tag: Optional[str] = None,
) -> CCSubgraph:
    """
    Locate the multi-protein component of `protein` and return its bipartite graph.

    Args:
        protein: Protein of interest
        components: Component partition (reduced or full)
        compositions: Output of compose_components for those components
        prot_tag: Substring marking regular protein ids (logging only)
        contam_tag: Substring marking contaminant protein ids

    Returns:
        CCSubgraph whose edges all lie inside the protein's component.

    Raises:
        ProteinNotFoundError: If the protein is in no multi-protein component
            (single-protein component, or unknown protein)
        MalformedInputError: If a peptide and a protein share an identifier,
            which would merge two vertices
    """
    protein = str(protein)
    component = next((c for c in components if protein in c.members), None)
    if component is None:
        raise ProteinNotFoundError(protein)
    if component.is_single:
        raise ProteinNotFoundError(protein, f"forms a single-protein component ({component.component_id})")

    composition = next(
        (c for c in compositions if c.component_id == component.component_id), None
    )
    if composition is None:
        raise ProteinNotFoundError(protein, f"has no composition for {component.component_id}")

    sub = composition.matrix
    coo = sub.data.tocoo()
    edges = sorted(
        (sub.peptide_ids[i], sub.protein_ids[j]) for i, j in zip(coo.row, coo.col)
    )

    roles: dict[str, str] = {}
    for pep in sub.peptide_ids:
        roles[pep] = ROLE_PEPTIDE
    for prot in sub.protein_ids:
        if prot in roles:
            raise MalformedInputError(
                f"Identifier '{prot}' is used both as a peptide and as a protein"
            )
        roles[prot] = protein_role(prot, prot_tag, contam_tag)

    logger.debug(
        f"Subgraph of {protein}: {component.component_id}, "
        f"{sub.n_peptides} peptides, {sub.n_proteins} proteins, {len(edges)} edges"
    )
    return CCSubgraph(
        component_id=component.component_id,
        protein=protein,
        edges=edges,
        roles=roles,
    )
