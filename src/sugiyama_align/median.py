"""Median-neighbour oracle used to pick alignment partners."""

from __future__ import annotations

from collections.abc import Callable, Collection, Hashable
from enum import Enum

import networkx as nx

from sugiyama_align.graph import node_data


class Direction(Enum):
    """Which adjacent layer to look at: predecessors or successors."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


MedianPair = tuple[Hashable, Hashable]
MedianOracle = Callable[..., MedianPair | None]


def median(
    graph: nx.DiGraph,
    node_id: Hashable,
    direction: Direction,
    within: Collection[Hashable] | None = None,
) -> MedianPair | None:
    """Return the (left, right) median neighbours of ``node_id``.

    Neighbours are ranked by their ``order`` field. For an odd number of
    neighbours both entries are the single median; for an even number they
    are the two middle neighbours, left one first. ``within`` restricts the
    neighbours considered, typically to the ids of the adjacent layer.

    Returns None if the node has no (qualifying) neighbours.
    """
    node_data(graph, node_id)
    if direction is Direction.INCOMING:
        neighbors = list(graph.predecessors(node_id))
    else:
        neighbors = list(graph.successors(node_id))

    if within is not None:
        neighbors = [nb for nb in neighbors if nb in within]
    if not neighbors:
        return None

    neighbors.sort(key=lambda nb: node_data(graph, nb).order)
    n = len(neighbors)
    if n % 2 == 1:
        m = neighbors[n // 2]
        return (m, m)
    return (neighbors[n // 2 - 1], neighbors[n // 2])
