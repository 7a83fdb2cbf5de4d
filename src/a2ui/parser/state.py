"""
Component tree state.

Nodes live in one flat id index; ``children`` on the wire is decomposed into
ownership links (``child_ids`` / ``parent_ids``) so no node is stored twice
and updates to a child are visible wherever the tree is materialized.
"""

from dataclasses import dataclass, field
from typing import Any

from ..protocol.models import ComponentNode
from .errors import TreeInvariantError


@dataclass
class TreeState:
    """Flat component index plus derived root ordering."""

    components: dict[str, ComponentNode] = field(default_factory=dict)
    root_ids: list[str] = field(default_factory=list)
    version: int = 0
    complete: bool = False
    child_ids: dict[str, list[str]] = field(default_factory=dict)
    parent_ids: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.components)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.components

    def copy(self) -> "TreeState":
        """Snapshot; nodes are immutable so only the containers are copied."""
        return TreeState(
            components=dict(self.components),
            root_ids=list(self.root_ids),
            version=self.version,
            complete=self.complete,
            child_ids={key: list(value) for key, value in self.child_ids.items()},
            parent_ids=dict(self.parent_ids),
        )

    def clear(self) -> None:
        """Empty the tree in place (parsers sharing it see the reset)."""
        self.components.clear()
        self.root_ids.clear()
        self.child_ids.clear()
        self.parent_ids.clear()
        self.version = 0
        self.complete = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def new_ids(self, node: ComponentNode) -> int:
        """How many ids in ``node``'s subtree are not yet in the index."""
        return sum(1 for each in node.walk() if each.id not in self.components)

    def ancestors(self, node_id: str) -> list[str]:
        """Ids from the direct parent up to the root."""
        chain: list[str] = []
        seen = {node_id}
        current = self.parent_ids.get(node_id)
        while current is not None:
            if current in seen:
                raise TreeInvariantError(f"Ownership cycle through component '{current}'")
            seen.add(current)
            chain.append(current)
            current = self.parent_ids.get(current)
        return chain

    def placement_depth(self, node: ComponentNode) -> int:
        """
        Depth of the deepest node once ``node`` is inserted.

        A node already owned by a parent keeps that parent, and its inline
        subtree replaces the stored one, so the result is its current
        ancestry plus the inline depth.
        """
        return len(self.ancestors(node.id)) + node.depth()

    def materialize(self, node_id: str) -> ComponentNode | None:
        """Rebuild a node with its current children resolved from the index."""
        if node_id not in self.components:
            return None

        built: dict[str, ComponentNode] = {}
        path: set[str] = set()
        stack: list[tuple[str, bool]] = [(node_id, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                path.discard(current)
                children = [built[child] for child in self.child_ids.get(current, []) if child in built]
                built[current] = self.components[current].model_copy(update={"children": children})
                continue
            if current in path:
                raise TreeInvariantError(f"Component '{current}' is its own ancestor")
            path.add(current)
            stack.append((current, True))
            for child_id in reversed(self.child_ids.get(current, [])):
                if child_id in self.components:
                    stack.append((child_id, False))
        return built[node_id]

    def roots(self) -> list[ComponentNode]:
        """Materialized root components in first-seen order."""
        return [node for node in (self.materialize(rid) for rid in self.root_ids) if node is not None]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, node: ComponentNode) -> None:
        """
        Insert or replace ``node`` and its inline subtree.

        Raises:
            TreeInvariantError: If the subtree repeats an id or would make a
                node its own ancestor. Nothing is mutated in that case.
        """
        ids = [each.id for each in node.walk()]
        if len(ids) != len(set(ids)):
            raise TreeInvariantError(f"Subtree of '{node.id}' declares an id more than once")

        ancestors = set(self.ancestors(node.id))
        for node_id in ids:
            if node_id in ancestors:
                raise TreeInvariantError(
                    f"Component '{node_id}' would become a descendant of itself under '{node.id}'"
                )

        self._attach(node, None)

    def merge_props(self, node_id: str, patch: dict[str, Any]) -> bool:
        """Shallow-merge ``patch`` into a node's props; False if the id is unknown."""
        node = self.components.get(node_id)
        if node is None:
            return False
        self.components[node_id] = node.model_copy(update={"props": {**node.props, **patch}})
        return True

    def remove(self, node_id: str) -> bool:
        """Remove a node and its descendants; False if the id is unknown."""
        if node_id not in self.components:
            return False

        parent = self.parent_ids.get(node_id)
        if parent is not None:
            siblings = self.child_ids.get(parent)
            if siblings and node_id in siblings:
                siblings.remove(node_id)

        self._discard(node_id)
        return True

    def _attach(self, node: ComponentNode, parent_id: str | None) -> None:
        node_id = node.id
        declared = [child.id for child in node.child_list()]

        # Children the replacement no longer declares go with their subtrees
        for old_child in self.child_ids.get(node_id, []):
            if old_child not in declared and self.parent_ids.get(old_child) == node_id:
                self._discard(old_child)

        self.components[node_id] = node.model_copy(update={"children": None})
        self.child_ids[node_id] = declared

        if parent_id is not None:
            previous = self.parent_ids.get(node_id)
            if previous is not None and previous != parent_id:
                siblings = self.child_ids.get(previous)
                if siblings and node_id in siblings:
                    siblings.remove(node_id)
            self.parent_ids[node_id] = parent_id
            if node_id in self.root_ids:
                self.root_ids.remove(node_id)
        elif node_id not in self.parent_ids and node_id not in self.root_ids:
            self.root_ids.append(node_id)

        for child in node.child_list():
            self._attach(child, node_id)

    def _discard(self, node_id: str) -> None:
        stack = [node_id]
        while stack:
            current = stack.pop()
            if current not in self.components:
                continue
            for child in self.child_ids.pop(current, []):
                if self.parent_ids.get(child) == current:
                    stack.append(child)
            del self.components[current]
            self.parent_ids.pop(current, None)
            if current in self.root_ids:
                self.root_ids.remove(current)
