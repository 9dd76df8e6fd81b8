"""Assemble tree nodes into a forest from their nesting levels."""

from loguru import logger

from keynote_file.models.note import TreeNode


class TreeBuilder:
    """Attach nodes, in stream order, under the last-seen node one level up.

    Level-0 nodes become roots. A node whose level skips a generation hangs
    under the nearest shallower node and its level is normalized to match.
    Node ids are handed out sequentially starting at 1.
    """

    def __init__(self) -> None:
        self.roots: list[TreeNode] = []
        # Path from the current root to the most recently attached node, with
        # each node's level as read from the stream.
        self._path: list[tuple[TreeNode, int]] = []
        self._next_id = 1

    def add(self, node: TreeNode, level: int) -> TreeNode:
        node.node_id = self._next_id
        self._next_id += 1

        level = max(level, 0)
        while self._path and self._path[-1][1] >= level:
            self._path.pop()

        if self._path:
            parent = self._path[-1][0]
            if level != self._path[-1][1] + 1:
                logger.warning(
                    "Tree node {!r} at level {} has no parent at level {}, attaching to {!r}",
                    node.name, level, level - 1, parent.name,
                )
            parent.add_child(node)
        else:
            if level > 0:
                logger.warning(
                    "Tree node {!r} at level {} has no ancestors, treating as root",
                    node.name, level,
                )
            node.parent_id = None
            node.level = 0
            self.roots.append(node)

        self._path.append((node, level))
        return node


def build_forest(nodes: list[tuple[TreeNode, int]]) -> list[TreeNode]:
    """Build root nodes from (node, level) pairs in stream order."""
    builder = TreeBuilder()
    for node, level in nodes:
        builder.add(node, level)
    return builder.roots
