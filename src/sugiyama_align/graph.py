"""Layered graph data model shared by the conflict marker and the aligner.

The graph is a plain ``networkx.DiGraph``. Node keys are the node ids and act
as indices into the graph's node table: ``root`` and ``align`` hold ids, never
references to payload objects. Payloads live under the ``data`` attribute:

    graph.nodes[node_id]["data"]  -> Node
    graph.edges[u, v]["data"]     -> Edge

A layer sequence (``Layers``) is a list of layers, each a list of node ids in
ascending ``order``. It is the source of truth for ordering; the ``order``
field on each node must agree with it.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass

import networkx as nx

Layers = list[list[Hashable]]


class LayeringError(LookupError):
    """The layered graph is inconsistent with itself or with its layer sequence.

    Raised for unknown node or edge ids, empty layer sequences, nodes listed in
    more than one layer, nodes listed under a layer other than their ``layer``
    field, and layers whose ``order`` values do not ascend.
    """


# ─── Payloads ─────────────────────────────────────────────────────────────────


@dataclass
class Node:
    """Per-node payload of a layered graph.

    ``x``/``y``/``width``/``height`` belong to the compaction stage and are
    carried through untouched. ``root`` and ``align`` hold node ids; a bare
    ``Node()`` leaves them ``None`` because it does not know its own id, while
    ``add_node`` seeds both with it.
    """

    layer: int = 0
    order: int = 0
    width: int = 0
    height: int = 0
    x: int = 0
    y: int = 0
    dummy: bool = False
    root: Hashable | None = None
    align: Hashable | None = None


@dataclass
class Edge:
    """Per-edge payload. ``conflict`` is set once the edge crosses an inner segment."""

    conflict: bool = False


# ─── Construction & Lookup ────────────────────────────────────────────────────


def add_node(graph: nx.DiGraph, node_id: Hashable, **fields) -> Node:
    """Add ``node_id`` with a fresh ``Node`` payload and return the payload.

    ``root`` and ``align`` default to ``node_id``: a singleton block.
    """
    fields.setdefault("root", node_id)
    fields.setdefault("align", node_id)
    data = Node(**fields)
    graph.add_node(node_id, data=data)
    return data


def add_edge(graph: nx.DiGraph, src: Hashable, tgt: Hashable) -> Edge:
    """Add ``src → tgt`` with a fresh ``Edge`` payload and return the payload."""
    data = Edge()
    graph.add_edge(src, tgt, data=data)
    return data


def node_data(graph: nx.DiGraph, node_id: Hashable) -> Node:
    """Return the ``Node`` payload of ``node_id``."""
    try:
        return graph.nodes[node_id]["data"]
    except KeyError:
        raise LayeringError(f"node {node_id!r} is not in the graph") from None


def edge_data(graph: nx.DiGraph, src: Hashable, tgt: Hashable) -> Edge:
    """Return the ``Edge`` payload of ``src → tgt``."""
    try:
        return graph.edges[src, tgt]["data"]
    except KeyError:
        raise LayeringError(f"edge {src!r} → {tgt!r} is not in the graph") from None


def build_layered_graph(
    layers: Layers,
    edges: Iterable[tuple[Hashable, Hashable]],
    dummies: Iterable[Hashable] = (),
) -> nx.DiGraph:
    """Build a layered graph from a layer sequence and an edge list.

    Each node's ``layer`` and ``order`` are taken from its position in
    ``layers`` (both 0-based); ``dummy`` is set for ids listed in ``dummies``.

    Args:
        layers:  Node ids per layer, left to right.
        edges:   ``(src, tgt)`` pairs; both endpoints must appear in ``layers``.
        dummies: Ids of synthetic long-edge nodes.

    Returns:
        A ``DiGraph`` with ``Node``/``Edge`` payloads under ``data``.
    """
    dummy_ids = set(dummies)
    g: nx.DiGraph = nx.DiGraph()
    for layer_idx, layer in enumerate(layers):
        for order, node_id in enumerate(layer):
            if node_id in g:
                raise LayeringError(f"node {node_id!r} appears in more than one layer")
            add_node(g, node_id, layer=layer_idx, order=order, dummy=node_id in dummy_ids)

    unknown = dummy_ids - set(g.nodes)
    if unknown:
        raise LayeringError(f"dummy ids not in any layer: {sorted(map(repr, unknown))}")

    for src, tgt in edges:
        for end in (src, tgt):
            if end not in g:
                raise LayeringError(f"edge {src!r} → {tgt!r} references unknown node {end!r}")
        add_edge(g, src, tgt)
    return g


def layers_from_graph(graph: nx.DiGraph) -> Layers:
    """Group node ids by their ``layer`` field, each layer sorted by ``order``.

    Layers with no nodes in between populated ones come back as empty lists.
    """
    by_layer: dict[int, list[Hashable]] = {}
    for node_id in graph.nodes:
        data = node_data(graph, node_id)
        by_layer.setdefault(data.layer, []).append(node_id)

    if not by_layer:
        return []
    layers: Layers = [[] for _ in range(max(by_layer) + 1)]
    for layer_idx, ids in by_layer.items():
        layers[layer_idx] = sorted(ids, key=lambda n: node_data(graph, n).order)
    return layers


def check_layers(graph: nx.DiGraph, layers: Layers) -> None:
    """Verify that ``layers`` is a usable layer sequence for ``graph``.

    Checks that there is at least one layer, that every id is a node of the
    graph listed in exactly one layer whose index matches its ``layer`` field,
    and that ``order`` strictly ascends along each layer. Gaps in ``order`` are tolerated.
    """
    if len(layers) < 1:
        raise LayeringError("layer sequence is empty")

    seen: set[Hashable] = set()
    for layer_idx, layer in enumerate(layers):
        prev_order: int | None = None
        for node_id in layer:
            if node_id in seen:
                raise LayeringError(f"node {node_id!r} appears in more than one layer")
            seen.add(node_id)
            data = node_data(graph, node_id)
            if data.layer != layer_idx:
                raise LayeringError(f"node {node_id!r} has layer {data.layer} but is listed in layer {layer_idx}")
            order = data.order
            if prev_order is not None and order <= prev_order:
                raise LayeringError(
                    f"layer {layer_idx}: order of {node_id!r} ({order}) does not follow {prev_order}"
                )
            prev_order = order
