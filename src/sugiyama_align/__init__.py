"""sugiyama_align: block alignment for the coordinate-assignment phase of a Sugiyama layout.

Pipeline position:
  layering + ordering (external) → mark_conflicts → vertical_alignment → compaction (external)
"""

from sugiyama_align.graph import (
    Edge,
    LayeringError,
    Node,
    add_edge,
    add_node,
    build_layered_graph,
    check_layers,
    edge_data,
    layers_from_graph,
    node_data,
)
from sugiyama_align.median import Direction, median
from sugiyama_align.position import (
    HorizontalDirection,
    VerticalDirection,
    blocks,
    brandes,
    mark_conflicts,
    vertical_alignment,
)

__all__ = [
    "Direction",
    "Edge",
    "HorizontalDirection",
    "LayeringError",
    "Node",
    "VerticalDirection",
    "add_edge",
    "add_node",
    "blocks",
    "brandes",
    "build_layered_graph",
    "check_layers",
    "edge_data",
    "layers_from_graph",
    "mark_conflicts",
    "median",
    "node_data",
    "vertical_alignment",
]
