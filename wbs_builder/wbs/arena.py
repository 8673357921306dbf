"""Node arena addressed by WBS code."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from wbs_builder.models import WBSNode
from .codes import child_code, code_depth, last_segment, sort_nodes

logger = logging.getLogger(__name__)


class WbsArena:
    """
    Collection of WBS nodes keyed by code.

    Child sequence numbers are derived from the children already stored under
    a parent, so allocation never depends on counters threaded through the
    callers. Stored nodes are immutable; nothing is renumbered.
    """

    def __init__(self, nodes: Optional[Iterable[WBSNode]] = None):
        self._nodes: Dict[str, WBSNode] = {}
        self._children: Dict[str, List[str]] = {}
        self._max_child: Dict[str, int] = {}
        self.duplicates: List[WBSNode] = []
        for node in nodes or []:
            self.add(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, code: str) -> bool:
        return code in self._nodes

    def __iter__(self) -> Iterator[WBSNode]:
        return iter(self._nodes.values())

    def get(self, code: Optional[str]) -> Optional[WBSNode]:
        if code is None:
            return None
        return self._nodes.get(code)

    def add(self, node: WBSNode) -> WBSNode:
        """
        Store a node.

        A node whose code is already taken is kept aside in `duplicates`
        (first one wins) so the validation pass can report it.
        """
        if node.code in self._nodes:
            logger.warning(f'Duplicate WBS code {node.code}: {node.name!r}')
            self.duplicates.append(node)
            return node

        self._nodes[node.code] = node
        if node.parent_code is not None:
            self._children.setdefault(node.parent_code, []).append(node.code)
            sequence = last_segment(node.code)
            if sequence is not None:
                current = self._max_child.get(node.parent_code, 0)
                self._max_child[node.parent_code] = max(current, sequence)
        return node

    def children_of(self, code: str) -> List[WBSNode]:
        """Direct children in insertion order."""
        return [self._nodes[c] for c in self._children.get(code, [])]

    def next_sequence(self, parent_code: str) -> int:
        """Next unused trailing segment under parent_code (1-based)."""
        return self._max_child.get(parent_code, 0) + 1

    def allocate_code(self, parent_code: str) -> str:
        """Code for the next child of parent_code."""
        return child_code(parent_code, self.next_sequence(parent_code))

    def level_below(self, parent_code: str) -> int:
        """Level of a new child of parent_code."""
        parent = self.get(parent_code)
        if parent is not None and parent.level:
            return parent.level + 1
        return code_depth(parent_code) + 1

    def roots(self) -> List[WBSNode]:
        return [node for node in self._nodes.values() if node.parent_code is None]

    def nodes(self) -> List[WBSNode]:
        """All stored nodes sorted by dotted-numeric code."""
        return sort_nodes(self._nodes.values())
