"""
Street network helpers.

A street network is a tree of paths: a root path plus the branches
rooted at its points, recursively. These helpers only read the graph;
they are what a rasterizer or an exporter consumes.
"""

from typing import Any, Dict, Iterator, List

import structlog

from ..exceptions import InvalidArgumentError
from .path import Path

logger = structlog.get_logger()


def iter_network(root: Path) -> Iterator[Path]:
    """
    Yield 'root' and every path branching from it, depth first.

    Branches are visited in the order they appear along their parent
    path, so the order is reproducible across runs. A path reachable
    twice is only yielded once.
    """
    if not isinstance(root, Path):
        raise InvalidArgumentError(f"root {root!r} is not a Path")
    seen = set()
    stack = [root]
    while stack:
        pth = stack.pop()
        if pth.id in seen:
            continue
        seen.add(pth.id)
        yield pth
        stack.extend(reversed(pth.branches()))


def network_paths(root: Path) -> List[Path]:
    return list(iter_network(root))


def network_length(root: Path) -> float:
    """Total length of all paths in the network."""
    return sum(pth.length() for pth in iter_network(root))


def network_to_dict(root: Path) -> Dict[str, Any]:
    """
    Convert a network to nested dictionaries for JSON export.

    Each path dictionary gets a "branches" list with one entry per
    branch path.
    """
    if not isinstance(root, Path):
        raise InvalidArgumentError(f"root {root!r} is not a Path")

    def convert(pth: Path, ancestors: set) -> Dict[str, Any]:
        data = pth.to_dict()
        data["branches"] = [
            convert(branch, ancestors | {pth.id})
            for branch in pth.branches()
            if branch.id not in ancestors and branch.id != pth.id
        ]
        return data

    data = convert(root, set())
    logger.debug("Network exported", root_id=root.id)
    return data
