"""Exceptions raised by the point/path graph."""


class InvalidArgumentError(ValueError):
    """Raised when an operation receives a value of the wrong kind.

    Examples are a malformed position, a non-Point passed where a Point
    is expected, or a non-integer ordinal. Expected control-flow outcomes
    (a point from another path, an ordinal out of range) are reported
    with sentinel return values instead.
    """
