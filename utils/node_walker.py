"""
节点树遍历 — 所有提取器共用的先序遍历
"""
from typing import Callable, Iterator, List

from messages.design_messages import VisualNode


def walk_nodes(node: VisualNode, visitor: Callable[[VisualNode], None]) -> None:
    """先序遍历：先访问节点本身，再按顺序访问子节点。"""
    for current in iter_nodes(node):
        visitor(current)


def iter_nodes(node: VisualNode) -> Iterator[VisualNode]:
    """先序遍历生成器（显式栈，深层嵌套不会触发递归上限）。"""
    stack: List[VisualNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def walk_with_ancestors(
    node: VisualNode,
    visitor: Callable[[VisualNode, List[VisualNode]], None],
) -> None:
    """先序遍历，同时传入祖先链（根节点在前，不含当前节点）。"""
    stack: List[tuple] = [(node, [])]
    while stack:
        current, ancestors = stack.pop()
        visitor(current, ancestors)
        chain = ancestors + [current]
        for child in reversed(current.children):
            stack.append((child, chain))
