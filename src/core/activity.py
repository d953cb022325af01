"""Activity classification over a thread's reply tree."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

from core.models import FlattenedNode, Item, ItemGraph


class ActivityMark(enum.IntFlag):
    """Why a node is shown with content.

    SELF: the node itself is fresh. CHILD: some descendant is fresh.
    """

    INERT = 0
    SELF = 1
    CHILD = 2


def is_fresh(item: Item, active_after: float) -> bool:
    return item.time > active_after and not item.dead and not item.deleted


def is_rendered(mark: ActivityMark, is_root: bool = False) -> bool:
    """Roots are always shown for context, whatever their mark."""

    return is_root or bool(mark & (ActivityMark.SELF | ActivityMark.CHILD))


def flatten(root: Item, graph: ItemGraph, root_time: Optional[int] = None) -> list[FlattenedNode]:
    """Pre-order walk of ``root``'s subtree in stored child order.

    Ids missing from ``graph`` are leaves. An id reached twice is skipped so a
    malformed graph cannot loop.
    """

    nodes: list[FlattenedNode] = []
    visited: set[int] = set()
    stack: list[tuple[Item, int]] = [(root, 0)]
    while stack:
        item, depth = stack.pop()
        if item.id in visited:
            continue
        visited.add(item.id)
        time = root_time if depth == 0 and root_time is not None else item.time
        nodes.append(FlattenedNode(item=item, depth=depth, time=time))
        children = graph.get(item.id, ())
        # Reversed so the first child is popped first.
        for child in reversed(children):
            stack.append((child, depth + 1))
    return nodes


def classify(nodes: Sequence[FlattenedNode], active_after: float) -> dict[int, ActivityMark]:
    """Compute the SELF/CHILD mark of every node in a flattened tree.

    Walking the pre-order sequence backwards visits every child before its
    parent, so descendant activity can be pushed up one level at a time.
    """

    marks: dict[int, ActivityMark] = {}
    has_active_descendant: set[int] = set()
    for node in reversed(nodes):
        item = node.item
        mark = ActivityMark.INERT
        if is_fresh(item, active_after):
            mark |= ActivityMark.SELF
        if item.id in has_active_descendant:
            mark |= ActivityMark.CHILD
        marks[item.id] = mark
        if mark and item.parent is not None:
            has_active_descendant.add(item.parent)
    return marks


@dataclass(frozen=True)
class ActivityTree:
    """A flattened, classified thread ready for presentation."""

    root: Item
    nodes: list[FlattenedNode]
    marks: dict[int, ActivityMark]

    @classmethod
    def build(
        cls,
        root: Item,
        graph: ItemGraph,
        active_after: float,
        root_time: Optional[int] = None,
    ) -> "ActivityTree":
        nodes = flatten(root, graph, root_time)
        return cls(root=root, nodes=nodes, marks=classify(nodes, active_after))

    def mark(self, node: FlattenedNode) -> ActivityMark:
        return self.marks.get(node.id, ActivityMark.INERT)

    def rendered(self, node: FlattenedNode) -> bool:
        return is_rendered(self.mark(node), node.id == self.root.id)

