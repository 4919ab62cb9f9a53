from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .build import EntityTree, TreeNode


@dataclass
class TreeState:
    """Selection and expansion for one view of an ``EntityTree``.

    Passed explicitly into every tree query; ids refer to ``EntityTree.nodes``.
    """

    selected: int = 0
    expanded: set[int] = field(default_factory=set)

    def is_expanded(self, node_id: int) -> bool:
        return node_id in self.expanded

    def toggle_expanded(self, node_id: int) -> None:
        if node_id in self.expanded:
            self.expanded.discard(node_id)
        else:
            self.expanded.add(node_id)

    def expand_all(self, tree: EntityTree) -> None:
        for node in tree.nodes:
            if node.children:
                self.expanded.add(node.id)

    def expand_roots(self, tree: EntityTree) -> None:
        self.expanded.update(tree.root_children)

    def toggle_expand(self, tree: EntityTree) -> None:
        node = tree.get_node(self.selected)
        if node is not None and node.children:
            self.toggle_expanded(self.selected)

    def collapse(self) -> None:
        self.expanded.discard(self.selected)

    def move_up(self, visible: Sequence[TreeNode]) -> None:
        idx = _position(visible, self.selected)
        if idx is None:
            self.ensure_visible(visible)
        elif idx > 0:
            self.selected = visible[idx - 1].id

    def move_down(self, visible: Sequence[TreeNode]) -> None:
        idx = _position(visible, self.selected)
        if idx is None:
            self.ensure_visible(visible)
        elif idx < len(visible) - 1:
            self.selected = visible[idx + 1].id

    def ensure_visible(self, visible: Sequence[TreeNode]) -> None:
        # Keep the selection on something the user can see.
        if visible and not any(n.id == self.selected for n in visible):
            self.selected = visible[0].id


def _position(visible: Sequence[TreeNode], node_id: int) -> int | None:
    for i, n in enumerate(visible):
        if n.id == node_id:
            return i
    return None
