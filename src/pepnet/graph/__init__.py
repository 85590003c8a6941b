"""
Peptide/protein graph construction and connected-component analysis.

Pipeline (leaves first):
    reduce_matrix       -> drop proteins without shared peptides
    build_adjacency     -> protein × protein shared-peptide counts
    find_components     -> union-find connected components
    compose_components  -> peptides and sub-matrix per multi-protein CC
    extract_subgraph    -> bipartite graph of one CC for display

Examples:
    >>> from pepnet.graph import reduce_matrix, build_adjacency, find_components
    >>> reduced = reduce_matrix(matrix)
    >>> components = find_components(build_adjacency(reduced))
"""

from pepnet.graph.reduction import reduce_matrix, MatrixReducer
from pepnet.graph.adjacency import AdjacencyGraph, build_adjacency
from pepnet.graph.components import (
    ConnectedComponent,
    DisjointSet,
    find_components,
    component_membership,
    find_component_of,
    single_protein_ids,
)
from pepnet.graph.composition import CCComposition, compose_components, composition_table
from pepnet.graph.subgraph import CCSubgraph, extract_subgraph, protein_role

__all__ = [
    'reduce_matrix',
    'MatrixReducer',
    'AdjacencyGraph',
    'build_adjacency',
    'ConnectedComponent',
    'DisjointSet',
    'find_components',
    'component_membership',
    'find_component_of',
    'single_protein_ids',
    'CCComposition',
    'compose_components',
    'composition_table',
    'CCSubgraph',
    'extract_subgraph',
    'protein_role',
]
