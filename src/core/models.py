"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the JSON shapes returned by the item API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Item:
    """A story, comment or job as returned by the item source.

    Equality and hashing use the id only: two fetches of the same item are
    interchangeable as cache keys even if their payloads differ.
    """

    id: int
    by: str = field(default="", compare=False)
    time: int = field(default=0, compare=False)
    parent: Optional[int] = field(default=None, compare=False)
    dead: bool = field(default=False, compare=False)
    deleted: bool = field(default=False, compare=False)
    text: str = field(default="", compare=False)
    title: str = field(default="", compare=False)
    url: str = field(default="", compare=False)
    type: str = field(default="", compare=False)
    kids: tuple[int, ...] = field(default=(), compare=False)

    @classmethod
    def from_api(cls, payload: dict) -> "Item":
        """Build an Item from the Firebase API JSON object."""

        return cls(
            id=int(payload["id"]),
            by=payload.get("by", "") or "",
            time=int(payload.get("time", 0) or 0),
            parent=payload.get("parent"),
            dead=bool(payload.get("dead", False)),
            deleted=bool(payload.get("deleted", False)),
            text=payload.get("text", "") or "",
            title=payload.get("title", "") or "",
            url=payload.get("url", "") or "",
            type=payload.get("type", "") or "",
            kids=tuple(payload.get("kids", ()) or ()),
        )


# Parent id -> direct children, ordered by id.
ItemGraph = dict[int, list[Item]]


@dataclass(frozen=True)
class FlattenedNode:
    """One node of a pre-order traversal with its depth and display time."""

    item: Item
    depth: int
    time: int

    @property
    def id(self) -> int:
        return self.item.id


@dataclass(frozen=True)
class Root:
    """A thread root selected for presentation."""

    item: Item
    time: int
    second_chance: bool = False


@dataclass(frozen=True)
class ActiveRow:
    """Transport row for the active-threads listing."""

    by: str
    text: str
    age: str
    id: int
    depth: int
    active: bool
    second_chance: bool = False


@dataclass(frozen=True)
class TreeRow:
    """Transport row for a single item's full tree."""

    by: str
    text: str
    time: int
    id: int
    depth: int


@dataclass(frozen=True)
class ActiveResult:
    """Rows for one active-threads request plus the degraded flag."""

    rows: list[ActiveRow]
    second_chance_failed: bool = False
