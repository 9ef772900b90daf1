# services/tree_builder.py
"""
Flat folder list -> nested tree for display.

Orphan policy: a folder whose parent_id points at a folder that is not in the
input is left out of the tree, and so is everything beneath it. Such rows can
only exist if the store was corrupted; they are logged, never raised.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

TreeNode = Dict[str, Any]


def _sort_key(folder):
    return (folder.name.casefold(), folder.name, folder.id)


def _to_node(folder) -> TreeNode:
    return {
        "id": folder.id,
        "name": folder.name,
        "parent_id": folder.parent_id,
        "created_at": folder.created_at,
        "updated_at": folder.updated_at,
        "children": [],
    }


def build_tree(folders: Iterable) -> List[TreeNode]:
    """
    Build an ordered forest from folder records (anything with id, name,
    parent_id, created_at, updated_at attributes).

    Siblings come out alphabetically because the input is sorted by name
    before it is grouped by parent_id.
    """
    ordered = sorted(folders, key=_sort_key)

    by_parent: Dict[Optional[int], List] = defaultdict(list)
    for f in ordered:
        by_parent[f.parent_id].append(f)

    roots = [_to_node(f) for f in by_parent.get(None, [])]
    attached = {node["id"] for node in roots}
    stack = list(roots)
    while stack:
        node = stack.pop()
        for child in by_parent.get(node["id"], []):
            if child.id in attached:
                continue
            attached.add(child.id)
            child_node = _to_node(child)
            node["children"].append(child_node)
            stack.append(child_node)

    omitted = len(ordered) - len(attached)
    if omitted:
        logger.warning(f"{omitted} folder(s) unreachable from any root were left out of the tree")
    return roots


def iter_postorder(tree: List[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node after all of its children."""
    stack = [(node, False) for node in reversed(tree)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node["children"]):
            stack.append((child, False))
