"""
Path class for the street graph.

A path is a directed run of linked points between a 'start' and a
'finish' point. Streets, corridors and other linear city features are
laid out as paths, refined with the geometric passes below (subdivide,
unsubdivide, wave and slant generation) and finally handed to the
rasterizer through 'all_positions()'.

Structural operations never raise for points that belong elsewhere or
for ordinals out of range; they return None/False and leave the path
untouched. Arguments of the wrong kind raise InvalidArgumentError.
"""

import math
from numbers import Integral, Real
from typing import List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError

from ..config import settings
from ..exceptions import InvalidArgumentError
from ..utils.context import GraphContext, get_context
from . import geometry
from .point import Point, _check_point

logger = structlog.get_logger()


class WaveOptions(BaseModel):
    """Parameters of a sinusoidal street."""

    segment_count: int = Field(ge=1, description="Number of segments in the wave")
    amplitude: float = Field(description="Largest sideways offset in nodes")
    density: float = Field(
        description="Number of complete wave cycles over the whole path"
    )


def _check_ordinal(nr) -> None:
    if isinstance(nr, bool) or not isinstance(nr, Integral):
        raise InvalidArgumentError(f"nr {nr!r} is not an integer")


def _check_path(obj, name: str = "path") -> None:
    if not isinstance(obj, Path):
        raise InvalidArgumentError(f"{name} {obj!r} is not a Path")


def _check_positive_number(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Real) or not value > 0:
        raise InvalidArgumentError(f"{name} {value!r} is not a positive number")


class Path:
    """Doubly linked run of points from 'start' to 'finish'.

    Attributes:
        id: Unique, increasing id
        start: First point; its 'previous' is always None
        finish: Last point; its 'next' is always None
    """

    def __init__(self, start: Point, finish: Point,
                 context: Optional[GraphContext] = None):
        _check_point(start, "start")
        _check_point(finish, "finish")
        if start is finish:
            raise InvalidArgumentError("start and finish must be different points")
        for name, p in (("start", start), ("finish", finish)):
            if p.path is not None:
                raise InvalidArgumentError(f"{name} {p!r} already belongs to a path")
        self._context = context if context is not None else get_context()
        self.id = self._context.next_path_id()
        # Lookup sets; the linked sequence itself is the source of order
        self._intermediate = set()
        self._branching_points = set()
        self.start = start
        self.finish = finish
        start.unlink()
        finish.unlink()
        self._adopt(start, intermediate=False)
        self._adopt(finish, intermediate=False)
        Point.link(start, finish)

    def __repr__(self):
        return (f"Path(id={self.id}, start={self.start!r}, "
                f"finish={self.finish!r}, intermediate={self.count_intermediate()})")

    def __iter__(self):
        return iter(self.all_points())

    def __len__(self):
        return self.count_intermediate() + 2

    @staticmethod
    def check(obj) -> bool:
        """Check if an object is a path."""
        return isinstance(obj, Path)

    # Membership bookkeeping

    def _adopt(self, p: Point, intermediate: bool = True) -> None:
        """Register 'p' as a member of this path, taking it from its old path."""
        old_path = p.path
        if old_path is not None and old_path is not self:
            old_path._release(p)
        p.path = self
        if intermediate:
            self._intermediate.add(p)
        else:
            self._intermediate.discard(p)
        if p.has_branches():
            self._branching_points.add(p)

    def _release(self, p: Point) -> None:
        """Drop 'p' from this path's bookkeeping."""
        self._intermediate.discard(p)
        self._branching_points.discard(p)
        if p.path is self:
            p.path = None

    def _is_free(self, p: Point) -> bool:
        return p.path is None

    # Identity and ordering

    def sort_key(self):
        return self.start.sort_key() + self.finish.sort_key()

    @staticmethod
    def comparator(pth1: "Path", pth2: "Path") -> bool:
        """Order paths by start point, then by finish point."""
        _check_path(pth1, "pth1")
        _check_path(pth2, "pth2")
        return pth1.sort_key() < pth2.sort_key()

    @staticmethod
    def sort(paths) -> List["Path"]:
        """Return a new list of 'paths' in deterministic order."""
        paths = list(paths)
        for pth in paths:
            _check_path(pth)
        return sorted(paths, key=Path.sort_key)

    # Counting and membership

    def count_intermediate(self) -> int:
        return len(self._intermediate)

    def has_intermediate(self) -> bool:
        return self.count_intermediate() > 0

    def point_in_path(self, p: Point) -> bool:
        """Check if 'p' is the start, the finish or an intermediate point."""
        return p is self.start or p is self.finish or p in self._intermediate

    @property
    def branching_points(self):
        """Points of this path that root at least one branch (unordered)."""
        return frozenset(self._branching_points)

    # Endpoint replacement

    def set_start(self, p: Point) -> bool:
        """
        Replace the start point with 'p'.

        The old start is unlinked and loses its path reference. 'p' must
        not already belong to a path.
        """
        _check_point(p)
        if p is self.start:
            return True
        if not self._is_free(p):
            return False
        old_start = self.start
        first = old_start.next
        old_start.unlink_from_next()
        self._release(old_start)
        p.unlink()
        self.start = p
        self._adopt(p, intermediate=False)
        Point.link(p, first)
        return True

    def set_finish(self, p: Point) -> bool:
        """Replace the finish point with 'p'; mirror of 'set_start'."""
        _check_point(p)
        if p is self.finish:
            return True
        if not self._is_free(p):
            return False
        old_finish = self.finish
        last = old_finish.previous
        old_finish.unlink_from_previous()
        self._release(old_finish)
        p.unlink()
        self.finish = p
        self._adopt(p, intermediate=False)
        Point.link(last, p)
        return True

    # Positional access

    def get_point(self, nr: int) -> Optional[Point]:
        """
        Return the intermediate point with ordinal 'nr'.

        'nr' = 1 is the first point after the start. Returns None if 'nr'
        is lower than 1 or bigger than the number of intermediate points.
        """
        _check_ordinal(nr)
        if nr <= 0 or nr > self.count_intermediate():
            return None
        for i, p in self.start.iterator():
            if i == nr:
                return p
        return None

    def get_points(self, from_point: Point, to_point: Point) -> Optional[List[Point]]:
        """
        Return the intermediate points from 'from_point' to 'to_point'.

        Both ends are included when they are intermediate points; the
        start and finish of the path never are. Returns None if either
        point is not in this path and an empty list if 'to_point' does
        not come after 'from_point'.
        """
        _check_point(from_point, "from_point")
        _check_point(to_point, "to_point")
        if not (self.point_in_path(from_point) and self.point_in_path(to_point)):
            return None
        points = []
        current = from_point
        while current is not None:
            if current in self._intermediate:
                points.append(current)
            if current is to_point:
                return points
            current = current.next
        return []

    def random_intermediate_point(self) -> Optional[Point]:
        """Pick a random intermediate point, or None if there are none."""
        count = self.count_intermediate()
        if count == 0:
            return None
        return self.get_point(self._context.prng.randint(1, count))

    # Insertion

    def insert_between(self, p_prev: Point, p_next: Point, p: Point) -> bool:
        """
        Insert 'p' between two adjacent points of this path.

        Returns False if 'p_prev' and 'p_next' are not adjacent members
        of this path or if 'p' already belongs to a path.
        """
        _check_point(p_prev, "p_prev")
        _check_point(p_next, "p_next")
        _check_point(p)
        if not (self.point_in_path(p_prev) and self.point_in_path(p_next)):
            return False
        if p_prev.next is not p_next or not self._is_free(p):
            return False
        p.unlink()
        self._adopt(p)
        Point.link(p_prev, p, p_next)
        return True

    def insert_at(self, nr: int, p: Point) -> bool:
        """
        Insert 'p' so that it becomes the intermediate point 'nr'.

        An 'nr' past the last intermediate point inserts before the finish.
        """
        _check_ordinal(nr)
        _check_point(p)
        if nr <= 0:
            return False
        target = self.get_point(nr)
        if target is None:
            return self.insert(p)
        return self.insert_before(target, p)

    def insert_before(self, target: Point, p: Point) -> bool:
        _check_point(target, "target")
        if target is self.start or not self.point_in_path(target):
            return False
        return self.insert_between(target.previous, target, p)

    def insert_after(self, target: Point, p: Point) -> bool:
        _check_point(target, "target")
        if target is self.finish or not self.point_in_path(target):
            return False
        return self.insert_between(target, target.next, p)

    def insert(self, p: Point) -> bool:
        """Insert 'p' right before the finish point."""
        return self.insert_between(self.finish.previous, self.finish, p)

    # Removal

    def remove(self, p: Point) -> Optional[Point]:
        """
        Take the intermediate point 'p' out of the path and relink its
        neighbours. Returns 'p', or None if it is not an intermediate
        point of this path.
        """
        _check_point(p)
        if p not in self._intermediate:
            return None
        p_prev, p_next = p.previous, p.next
        p.unlink()
        Point.link(p_prev, p_next)
        self._release(p)
        return p

    def remove_previous(self, target: Point) -> Optional[Point]:
        """Remove the intermediate point right before 'target'."""
        _check_point(target, "target")
        if not self.point_in_path(target) or target.previous is None:
            return None
        return self.remove(target.previous)

    def remove_next(self, target: Point) -> Optional[Point]:
        """Remove the intermediate point right after 'target'."""
        _check_point(target, "target")
        if not self.point_in_path(target) or target.next is None:
            return None
        return self.remove(target.next)

    def remove_at(self, nr: int) -> Optional[Point]:
        p = self.get_point(nr)
        if p is None:
            return None
        return self.remove(p)

    def clear_intermediate(self) -> None:
        """Remove all intermediate points, linking start directly to finish."""
        for _, p in list(self.start.iterator()):
            if p is self.finish:
                break
            p.unlink()
            self._release(p)
        Point.link(self.start, self.finish)

    # Extending and shortening

    def extend(self, p: Point) -> bool:
        """Append 'p' as the new finish; the old finish becomes intermediate."""
        _check_point(p)
        if not self._is_free(p):
            return False
        old_finish = self.finish
        p.unlink()
        self._intermediate.add(old_finish)
        self.finish = p
        self._adopt(p, intermediate=False)
        Point.link(old_finish, p)
        return True

    def shorten(self) -> bool:
        """
        Drop the finish point, promoting the last intermediate point.

        Returns False (and changes nothing) if there are no intermediate
        points.
        """
        if not self.has_intermediate():
            return False
        old_finish = self.finish
        new_finish = old_finish.previous
        old_finish.unlink_from_previous()
        self._release(old_finish)
        self._intermediate.discard(new_finish)
        self.finish = new_finish
        return True

    def shorten_by(self, nr: int) -> int:
        """Shorten the path 'nr' times or until it has no intermediates.

        Returns the number of points dropped.
        """
        _check_ordinal(nr)
        dropped = 0
        while dropped < nr and self.shorten():
            dropped += 1
        return dropped

    def cut_off(self, stop_point: Point) -> bool:
        """Drop every point after 'stop_point', which becomes the finish."""
        _check_point(stop_point, "stop_point")
        if stop_point is self.start or not self.point_in_path(stop_point):
            return False
        while self.finish is not stop_point:
            self.shorten()
        return True

    # Read-only traversal

    def all_points(self) -> List[Point]:
        """All points from start to finish, in order."""
        points = [self.start]
        points.extend(p for _, p in self.start.iterator())
        return points

    def all_positions(self) -> np.ndarray:
        """Positions of all points as an (n, 3) array copy, in order."""
        return np.array([p.position for p in self.all_points()], dtype=np.float64)

    def branching_points_sorted(self) -> List[Point]:
        """Branching points in the order they appear along the path."""
        return [p for p in self.all_points() if p in self._branching_points]

    def branches(self) -> list:
        """Branch paths rooted on this path, in path order then branch order."""
        branches = []
        for p in self.branching_points_sorted():
            branches.extend(p.branches_sorted())
        return branches

    def direction(self) -> np.ndarray:
        """Unit vector from start to finish."""
        return geometry.normalize(self.finish.position - self.start.position)

    def horizontal_axis(self) -> int:
        """Dominant horizontal axis (geometry.X or geometry.Z) of the path."""
        return geometry.dominant_horizontal_axis(
            self.finish.position - self.start.position
        )

    # Geometry

    def length(self) -> float:
        """Sum of the lengths of all segments."""
        positions = self.all_positions()
        return float(np.linalg.norm(np.diff(positions, axis=0), axis=1).sum())

    def subdivide(self, segment_length: float) -> int:
        """
        Split every segment longer than 'segment_length' into equal parts
        no longer than 'segment_length'. Shorter segments are untouched.

        Returns:
            Number of points inserted
        """
        _check_positive_number(segment_length, "segment_length")
        inserted = 0
        current = self.start
        while current.next is not None:
            nxt = current.next
            seg_length = geometry.distance(current.position, nxt.position)
            if seg_length > segment_length + settings.distance_tolerance:
                parts = math.ceil(seg_length / segment_length)
                step = (nxt.position - current.position) / parts
                previous = current
                for k in range(1, parts):
                    p = Point(current.position + step * k, context=self._context)
                    self.insert_between(previous, nxt, p)
                    previous = p
                inserted += parts - 1
            current = nxt
        logger.debug("Path subdivided", path_id=self.id,
                     segment_length=segment_length, inserted=inserted)
        return inserted

    def _is_significant(self, p: Point) -> bool:
        """Points that simplification must keep: junctions and shared points."""
        return (p in self._branching_points or p.has_branches()
                or len(p.attached) > 0)

    def unsubdivide(self, angle: float) -> int:
        """
        Remove intermediate points whose incoming and outgoing directions
        differ by less than 'angle' (radians).

        Branching points and attached points are always kept.

        Returns:
            Number of points removed
        """
        if isinstance(angle, bool) or not isinstance(angle, Real) or angle < 0:
            raise InvalidArgumentError(f"angle {angle!r} is not a non-negative number")
        removed = 0
        prev = self.start
        mid = prev.next
        while mid is not None and mid.next is not None:
            nxt = mid.next
            incoming = mid.position - prev.position
            outgoing = nxt.position - mid.position
            if (not self._is_significant(mid)
                    and geometry.angle_between(incoming, outgoing) < angle):
                self.remove(mid)
                removed += 1
            else:
                prev = mid
            mid = prev.next
        logger.debug("Path unsubdivided", path_id=self.id, angle=angle, removed=removed)
        return removed

    def split_at(self, p: Point) -> Optional["Path"]:
        """
        Split the path at the intermediate point 'p'.

        This path ends at 'p' afterwards. The returned path starts at a
        copy of 'p' attached to it and continues with the points that
        followed 'p', up to the old finish. Returns None if 'p' is not an
        intermediate point of this path.
        """
        _check_point(p)
        if p not in self._intermediate:
            return None
        old_finish = self.finish
        tail = []
        for _, q in p.iterator():
            if q is old_finish:
                break
            tail.append(q)

        new_start = p.copy()
        p.attach(new_start)
        p.unlink_from_next()
        self._intermediate.discard(p)
        self.finish = p
        self._release(old_finish)

        new_path = Path(new_start, old_finish, context=self._context)
        for q in tail:
            new_path._adopt(q)
        Point.link(new_start, *tail, old_finish)
        logger.debug("Path split", path_id=self.id, new_path_id=new_path.id,
                     moved=len(tail))
        return new_path

    def transfer_points_to(self, other: "Path", first: Point, last: Point) -> bool:
        """
        Move the intermediate run 'first'..'last' into 'other', right
        before its finish. This path is relinked across the gap.

        Returns False if the run is not a contiguous stretch of this
        path's intermediate points or 'other' is this path.
        """
        if not isinstance(other, Path):
            raise InvalidArgumentError(f"other {other!r} is not a Path")
        _check_point(first, "first")
        _check_point(last, "last")
        if other is self:
            return False
        if first not in self._intermediate or last not in self._intermediate:
            return False
        run = self.get_points(first, last)
        if not run or run[-1] is not last:
            return False

        p_before, p_after = first.previous, last.next
        first.unlink_from_previous()
        last.unlink_from_next()
        Point.link(p_before, p_after)

        for q in run:
            other._adopt(q)
        Point.link(other.finish.previous, *run, other.finish)
        logger.debug("Points transferred", path_id=self.id, other_path_id=other.id,
                     moved=len(run))
        return True

    def make_straight(self, segment_length: Optional[float] = None) -> None:
        """
        Make the path a straight line from start to finish, subdivided
        into segments of at most 'segment_length' when it is given.
        """
        self.clear_intermediate()
        if segment_length is not None:
            self.subdivide(segment_length)

    def make_wave(self, segment_count: int, amplitude: float, density: float) -> None:
        """
        Make a wavy path from start to finish.

        The path is divided into 'segment_count' segments. Points are
        pushed sideways (along the horizontal normal of the street) by up to
        'amplitude' nodes; 'density' is the number of wave cycles over
        the whole path. The wave fades out towards both ends.
        """
        try:
            options = WaveOptions(segment_count=segment_count, amplitude=amplitude,
                                  density=density)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid wave parameters: {e}") from e

        self.clear_intermediate()
        origin = self.start.position.copy()
        vec = self.finish.position - origin
        step = vec / options.segment_count
        sideways = geometry.normalize((-vec[geometry.Z], 0.0, vec[geometry.X]))

        for i in range(1, options.segment_count):
            t = i / options.segment_count
            envelope = math.sin(t * math.pi)
            wave = math.sin(t * 2 * math.pi * options.density)
            pos = origin + step * i + sideways * envelope * wave * options.amplitude
            self.insert(Point(pos, context=self._context))

    def make_slanted(self, segment_length: Optional[float] = None) -> None:
        """
        Connect start and finish with one 45 degree slanted part and one
        part parallel to the x or z axis.

        Nothing is inserted when start and finish are already aligned on
        the x or z axis, or lie on an exact diagonal. When
        'segment_length' is given, the result is subdivided.
        """
        self.clear_intermediate()
        origin = self.start.position
        vec = self.finish.position - origin
        ax, az = abs(vec[geometry.X]), abs(vec[geometry.Z])
        tolerance = settings.axis_tolerance
        if ax > tolerance and az > tolerance and ax != az:
            m = min(ax, az)
            offset = np.array([m * np.sign(vec[geometry.X]), 0.0,
                               m * np.sign(vec[geometry.Z])])
            self.insert(Point(origin + offset, context=self._context))
        if segment_length is not None:
            self.subdivide(segment_length)

    def to_dict(self):
        """Convert to dictionary for JSON export"""
        return {
            "id": self.id,
            "start": self.start.id,
            "finish": self.finish.id,
            "points": self.all_positions().tolist(),
            "length": self.length(),
        }
