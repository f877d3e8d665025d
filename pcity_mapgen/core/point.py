"""
Point class for the street graph.

A point owns a position and can be linked into a doubly linked sequence
(a Path). Points can also share one position with other points
(attachment) and can root branch paths, which is how a single street
grows side streets.

Ownership:
    'next' is the only owning link. 'previous' and 'path' are weak
    back-references and 'attached'/'branches' are weak sets, so a Path
    (which owns its start point) is what keeps its points alive.
"""

import weakref
from typing import Iterator, List, Optional, Tuple

import numpy as np
import structlog

from ..exceptions import InvalidArgumentError
from ..utils.context import GraphContext, get_context
from .geometry import X, Y, Z, as_position

logger = structlog.get_logger()


def _check_point(obj, name: str = "point") -> None:
    if not isinstance(obj, Point):
        raise InvalidArgumentError(f"{name} {obj!r} is not a Point")


class Point:
    """Node of the street graph.

    Attributes:
        id: Unique, increasing id used only as an ordering tie-break
        next: Following point in the sequence, or None
        attached: Points sharing this point's position array
        branches: Paths rooted at this point
    """

    def __init__(self, position, context: Optional[GraphContext] = None):
        self._context = context if context is not None else get_context()
        self._position = as_position(position)
        self.id = self._context.next_point_id()
        self.next: Optional["Point"] = None
        self._previous = None
        self._path = None
        self.attached = weakref.WeakSet()
        self.branches = weakref.WeakSet()

    def __repr__(self):
        x, y, z = self._position
        return f"Point(id={self.id}, {x:.2f}, {y:.2f}, {z:.2f})"

    def __lt__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return Point.comparator(self, other)

    @staticmethod
    def check(obj) -> bool:
        """Check if the object is a point."""
        return isinstance(obj, Point)

    # Back-references

    @property
    def previous(self) -> Optional["Point"]:
        return self._previous() if self._previous is not None else None

    @previous.setter
    def previous(self, p: Optional["Point"]):
        self._previous = weakref.ref(p) if p is not None else None

    @property
    def path(self):
        """Path currently containing this point, or None."""
        return self._path() if self._path is not None else None

    @path.setter
    def path(self, pth):
        self._path = weakref.ref(pth) if pth is not None else None

    # Position

    @property
    def position(self) -> np.ndarray:
        """Position array, shared (not copied) with every attached point."""
        return self._position

    @property
    def x(self) -> float:
        return float(self._position[X])

    @property
    def y(self) -> float:
        return float(self._position[Y])

    @property
    def z(self) -> float:
        return float(self._position[Z])

    def set_position(self, position) -> None:
        """Move this point and every point sharing its position array."""
        self._position[:] = as_position(position)

    def copy(self) -> "Point":
        """
        Create a new unlinked point at the same position.

        The copy has its own position array and no path, links,
        attachments or branches.
        """
        return Point(self._position, context=self._context)

    def sort_key(self) -> Tuple[float, float, float, int]:
        x, y, z = self._position
        return (float(x), float(y), float(z), self.id)

    # Identity and ordering

    @staticmethod
    def equals(p1: "Point", p2: "Point") -> bool:
        """True only for the same point (same id) at the same position."""
        _check_point(p1, "p1")
        _check_point(p2, "p2")
        return p1.id == p2.id and np.array_equal(p1.position, p2.position)

    @staticmethod
    def comparator(p1: "Point", p2: "Point") -> bool:
        """True iff 'p1' strictly precedes 'p2' by (x, y, z, id)."""
        _check_point(p1, "p1")
        _check_point(p2, "p2")
        return p1.sort_key() < p2.sort_key()

    @staticmethod
    def sort(points) -> List["Point"]:
        """Return a new list of 'points' in deterministic order."""
        points = list(points)
        for p in points:
            _check_point(p)
        return sorted(points, key=Point.sort_key)

    def attached_sorted(self) -> List["Point"]:
        return Point.sort(self.attached)

    def branches_sorted(self) -> list:
        from .path import Path
        return Path.sort(self.branches)

    # Linking

    @staticmethod
    def same_path(*points: "Point") -> bool:
        """Check if all points belong to the same path."""
        if not points:
            return True
        first_path = points[0].path
        return all(p.path is first_path for p in points)

    @staticmethod
    def link(*points: "Point") -> None:
        """
        Link points in the given order: p1 -> p2 -> ... -> pn.

        Only the links between consecutive arguments are overwritten;
        path membership is left alone.
        """
        for p in points:
            _check_point(p)
        for p1, p2 in zip(points, points[1:]):
            p1.next = p2
            p2.previous = p1

    def unlink_from_previous(self) -> None:
        previous = self.previous
        if previous is not None and previous.next is self:
            previous.next = None
        self.previous = None

    def unlink_from_next(self) -> None:
        nxt = self.next
        if nxt is not None and nxt.previous is self:
            nxt.previous = None
        self.next = None

    def unlink(self) -> None:
        """Unlink the point from both the previous and the next point."""
        self.unlink_from_previous()
        self.unlink_from_next()

    # Attachment

    def attachment_group(self) -> set:
        """This point plus every point reachable through attachments."""
        group = {self}
        stack = [self]
        while stack:
            for q in list(stack.pop().attached):
                if q not in group:
                    group.add(q)
                    stack.append(q)
        return group

    def attach(self, *points: "Point") -> None:
        """
        Make every point in 'points' share this point's position array.

        Points already attached to an argument come along, so a whole
        attachment group always shares one array. Moving any of them
        (see 'set_position') moves all of them.
        """
        for p in points:
            _check_point(p)
        for p in points:
            if p is self:
                continue
            for q in p.attachment_group():
                q._position = self._position
            self.attached.add(p)
            p.attached.add(self)

    def detach(self, *points: "Point") -> None:
        """
        Break the attachment with each point in 'points'.

        If that splits the attachment group, the part holding the
        detached point keeps its current coordinates in a private copy
        of the position array.
        """
        for p in points:
            _check_point(p)
        for p in points:
            if p not in self.attached:
                continue
            self.attached.discard(p)
            p.attached.discard(self)
            group = p.attachment_group()
            if self not in group:
                position = self._position.copy()
                for q in group:
                    q._position = position

    def detach_all(self) -> None:
        self.detach(*list(self.attached))

    # Traversal

    def iterator(self) -> Iterator[Tuple[int, "Point"]]:
        """
        Walk forward from the point after this one to the end of the
        sequence, yielding (ordinal, point) pairs starting at 1.

        Example:
            for i, p in start.iterator():
                ...
        """
        i = 0
        current = self.next
        while current is not None:
            i += 1
            yield i, current
            current = current.next

    def reverse_iterator(self) -> Iterator[Tuple[int, "Point"]]:
        """Like 'iterator', but walks 'previous' links towards the start."""
        i = 0
        current = self.previous
        while current is not None:
            i += 1
            yield i, current
            current = current.previous

    # Path membership and branching

    def set_path(self, pth) -> None:
        """
        Move this point's membership to 'pth' (or to no path for None).

        Only the bookkeeping changes; links are left to the caller.
        """
        from .path import Path
        if pth is None:
            old_path = self.path
            if old_path is not None:
                old_path._release(self)
            return
        if not isinstance(pth, Path):
            raise InvalidArgumentError(f"path {pth!r} is not a Path")
        pth._adopt(self, intermediate=self is not pth.start and self is not pth.finish)

    def branch(self, finish: "Point"):
        """
        Start a new path (a branch) at this point, ending at 'finish'.

        The branch start is a copy of this point attached to it, so the
        branch stays connected when this point moves. Returns the branch,
        or None if 'finish' already belongs to a path.
        """
        from .path import Path
        _check_point(finish, "finish")
        if finish.path is not None:
            return None
        start = self.copy()
        branch = Path(start, finish, context=self._context)
        self.attach(start)
        self.branches.add(branch)
        pth = self.path
        if pth is not None:
            pth._branching_points.add(self)
        logger.debug("Branch created", point_id=self.id, branch_id=branch.id)
        return branch

    def has_branches(self) -> bool:
        return len(self.branches) > 0

    def unbranch(self, branch) -> None:
        """Forget 'branch'; unmark this point as branching if none remain."""
        from .path import _check_path
        _check_path(branch, "branch")
        self.branches.discard(branch)
        pth = self.path
        if not self.has_branches() and pth is not None:
            pth._branching_points.discard(self)

    def unbranch_all(self) -> None:
        for branch in list(self.branches):
            self.unbranch(branch)

    def clear(self) -> None:
        """
        Unlink, detach and unbranch the point and drop it from its path.

        Caution: the path is not relinked around the point; use
        'Path.remove' to take an intermediate point out of a path.
        """
        self.unlink()
        self.detach_all()
        self.unbranch_all()
        self.set_path(None)

    def to_dict(self):
        """Convert to dictionary for JSON export"""
        return {"id": self.id, "position": self._position.tolist()}
