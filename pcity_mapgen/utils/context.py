"""
Graph context: id counters and randomness shared by points and paths.

Point and path ids only have to be unique and increasing within one
process run. They are kept on an explicit context object rather than in
hidden globals so tests can reset them and independent graphs can use
their own counters.
"""

import itertools
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..config import settings
from ..core.alea_prng import AleaPRNG


@dataclass
class GraphContext:
    """Counters and PRNG used when creating and sampling graph elements."""

    seed: str = field(default_factory=lambda: settings.seed)
    point_ids: Iterator[int] = field(default_factory=lambda: itertools.count(1))
    path_ids: Iterator[int] = field(default_factory=lambda: itertools.count(1))
    prng: Optional[AleaPRNG] = None

    def __post_init__(self):
        if self.prng is None:
            self.prng = AleaPRNG(self.seed)

    def next_point_id(self) -> int:
        return next(self.point_ids)

    def next_path_id(self) -> int:
        return next(self.path_ids)


# Process-wide default context
_context = None


def get_context() -> GraphContext:
    """
    Get the current default context, creating it on first use.

    Returns:
        GraphContext instance
    """
    global _context
    if _context is None:
        _context = GraphContext()
    return _context


def set_context(context: GraphContext) -> None:
    """Install 'context' as the default for newly created points and paths."""
    global _context
    _context = context


def reset_context(seed: Optional[str] = None) -> GraphContext:
    """
    Replace the default context with a fresh one.

    Ids start again from 1 and the PRNG is reseeded with 'seed' (or the
    configured default seed).

    Args:
        seed: Seed string for the new PRNG

    Returns:
        The new default context
    """
    context = GraphContext(seed=seed) if seed is not None else GraphContext()
    set_context(context)
    return context
