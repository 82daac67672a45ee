"""Position assignment, alignment half (Brandes & Köpf).

Phases covered here:
  1. Type-1 conflict marking (outer segments crossing inner segments)
  2. Vertical alignment into blocks (root/align rings)

Horizontal compaction and the four-way balancing of directional results are
done downstream; ``blocks()`` hands the block structure over to them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Hashable
from enum import Enum

import networkx as nx

from sugiyama_align.graph import Layers, LayeringError, check_layers, edge_data, node_data
from sugiyama_align.median import Direction, MedianOracle
from sugiyama_align.median import median as median_neighbors

logger = logging.getLogger(__name__)


class VerticalDirection(Enum):
    """Layer sweep direction: DOWN aligns against predecessors, UP against successors."""

    DOWN = "down"
    UP = "up"


class HorizontalDirection(Enum):
    """In-layer sweep direction: LEFT walks ascending order, RIGHT descending."""

    LEFT = "left"
    RIGHT = "right"


# ─── Conflict Marking ─────────────────────────────────────────────────────────


def _segments(
    graph: nx.DiGraph,
    upper: list[Hashable],
    lower: set[Hashable],
) -> tuple[list[tuple[Hashable, Hashable]], list[tuple[Hashable, Hashable]]]:
    """Split the edges from ``upper`` into ``lower`` into (inner, outer) segments.

    Inner segments join two dummy nodes; everything else is outer. Edges
    leaving ``upper`` for any other layer are not segments of this gap.
    """
    inner: list[tuple[Hashable, Hashable]] = []
    outer: list[tuple[Hashable, Hashable]] = []
    for u in upper:
        u_dummy = node_data(graph, u).dummy
        for v in graph.successors(u):
            if v not in lower:
                continue
            if u_dummy and node_data(graph, v).dummy:
                inner.append((u, v))
            else:
                outer.append((u, v))
    return inner, outer


def mark_conflicts(graph: nx.DiGraph, layers: Layers) -> None:
    """Flag every outer segment that crosses an inner segment (type-1 conflict).

    The gaps below layers 1 .. len(layers) - 2 are scanned, which skips only
    the gap between layers 0 and 1; the last gap is scanned.
    Flags are only ever set, so running this twice gives the same result as
    running it once.

    Raises:
        LayeringError: ``layers`` is empty or references ids not in ``graph``.
    """
    check_layers(graph, layers)

    for i in range(1, len(layers) - 1):
        inner, outer = _segments(graph, layers[i], set(layers[i + 1]))
        marked = 0
        for u1, v1 in inner:
            ou1 = node_data(graph, u1).order
            ov1 = node_data(graph, v1).order
            for u2, v2 in outer:
                ou2 = node_data(graph, u2).order
                ov2 = node_data(graph, v2).order
                # Strict on both sides: segments sharing an endpoint do not cross.
                if (ou1 < ou2 and ov1 > ov2) or (ou1 > ou2 and ov1 < ov2):
                    edge = edge_data(graph, u2, v2)
                    if not edge.conflict:
                        edge.conflict = True
                        marked += 1
        logger.debug(
            "layers %d→%d: %d inner, %d outer segments, %d newly conflicted",
            i,
            i + 1,
            len(inner),
            len(outer),
            marked,
        )


# ─── Vertical Alignment ───────────────────────────────────────────────────────


def vertical_alignment(
    graph: nx.DiGraph,
    layers: Layers,
    median: MedianOracle = median_neighbors,
    vertical: VerticalDirection = VerticalDirection.DOWN,
    horizontal: HorizontalDirection = HorizontalDirection.LEFT,
) -> None:
    """Group nodes into alignment blocks by writing ``root`` and ``align``.

    Every node starts as its own singleton block. Layers are then swept away
    from the anchor layer (layer 0 for DOWN, the last layer for UP); within a
    layer nodes are visited in ``order`` (reversed for RIGHT). Each node ``v``
    joins the block of the first median neighbour ``u`` in the previous layer
    whose connecting edge is not conflicted and whose ``order`` lies strictly
    beyond ``r``, the last order used as an anchor in this layer. Joining sets
    ``v.root = v.align = u.root`` and ``u.align = v``, so every block is a ring
    through ``align`` that starts and ends at its root.

    Args:
        graph:      Layered graph; ``conflict`` flags should already be marked.
        layers:     Node ids per layer, in ascending ``order``.
        median:     Oracle called as ``median(graph, v, direction, within)``
                    returning ``(left, right)`` medians or None.
        vertical:   Which way layers are swept.
        horizontal: Which way nodes are visited and which median is tried first.

    Raises:
        LayeringError: invalid ``layers``, or the oracle named a neighbour with
            no edge to ``v``.
    """
    check_layers(graph, layers)

    for node_id in graph.nodes:
        data = node_data(graph, node_id)
        data.root = node_id
        data.align = node_id

    downward = vertical is VerticalDirection.DOWN
    leftmost = horizontal is HorizontalDirection.LEFT
    sweep = layers if downward else layers[::-1]
    direction = Direction.INCOMING if downward else Direction.OUTGOING

    joined = 0
    for prev_layer, layer in zip(sweep, sweep[1:]):
        prev_ids = set(prev_layer)
        r = -math.inf if leftmost else math.inf
        for v in layer if leftmost else reversed(layer):
            medians = median(graph, v, direction, prev_ids)
            if medians is None:
                continue
            left, right = medians
            candidates = [left] if left == right else [left, right]
            if not leftmost:
                candidates.reverse()

            for u in candidates:
                edge = edge_data(graph, u, v) if downward else edge_data(graph, v, u)
                if edge.conflict:
                    continue
                u_data = node_data(graph, u)
                if (u_data.order > r) if leftmost else (u_data.order < r):
                    v_data = node_data(graph, v)
                    v_data.align = u_data.root
                    v_data.root = u_data.root
                    u_data.align = v
                    r = u_data.order
                    joined += 1
                    break

    logger.debug(
        "vertical alignment (%s, %s): %d nodes joined, %d blocks",
        vertical.value,
        horizontal.value,
        joined,
        graph.number_of_nodes() - joined,
    )


def brandes(graph: nx.DiGraph, layers: Layers, median: MedianOracle = median_neighbors) -> None:
    """Run one alignment pass: mark type-1 conflicts, then align top-down, left-first.

    This goes further than a conflict-marking-only pass: the top-down,
    left-first alignment runs as well. The remaining three directional passes
    and their balancing are not run here; see ``VerticalDirection`` /
    ``HorizontalDirection`` to run them.
    """
    mark_conflicts(graph, layers)
    vertical_alignment(graph, layers, median=median)


# ─── Block Extraction ─────────────────────────────────────────────────────────


def blocks(graph: nx.DiGraph) -> dict[Hashable, list[Hashable]]:
    """Read the block structure left by ``vertical_alignment``.

    Returns a dict mapping each block root to the ids of its members, in
    ``align`` order starting at the root.

    Raises:
        LayeringError: a node has not been aligned, a ring does not close on
            its root, or a node is not reachable from its root's ring.
    """
    result: dict[Hashable, list[Hashable]] = {}
    for node_id in graph.nodes:
        data = node_data(graph, node_id)
        if data.root is None or data.align is None:
            raise LayeringError(f"node {node_id!r} has not been aligned")
        if data.root != node_id:
            continue

        chain = [node_id]
        seen = {node_id}
        cur = data.align
        while cur != node_id:
            if cur in seen:
                raise LayeringError(f"block {node_id!r}: align ring loops at {cur!r} without closing")
            cur_data = node_data(graph, cur)
            if cur_data.root != node_id:
                raise LayeringError(f"block {node_id!r}: member {cur!r} has root {cur_data.root!r}")
            chain.append(cur)
            seen.add(cur)
            cur = cur_data.align
        result[node_id] = chain

    members = sum(len(chain) for chain in result.values())
    if members != graph.number_of_nodes():
        raise LayeringError(f"{graph.number_of_nodes() - members} nodes are not on their root's ring")
    return result
