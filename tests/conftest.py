"""Shared fixtures and checks for the street graph tests."""

import pytest

from pcity_mapgen.utils.context import reset_context


@pytest.fixture(autouse=True)
def fresh_context():
    """Give every test its own id counters and PRNG."""
    return reset_context("test_seed")


def assert_consistent(pth):
    """Walk the path both ways and check links and bookkeeping agree."""
    assert pth.start.previous is None
    assert pth.finish.next is None

    forward = [pth.start]
    current = pth.start
    steps = 0
    while current is not pth.finish:
        nxt = current.next
        assert nxt is not None
        assert nxt.previous is current
        forward.append(nxt)
        current = nxt
        steps += 1
    assert steps == pth.count_intermediate() + 1

    backward = [pth.finish]
    current = pth.finish
    while current is not pth.start:
        current = current.previous
        backward.append(current)
    assert len(backward) - 1 == steps
    assert backward[::-1] == forward

    for p in forward:
        assert p.path is pth
    for p in forward[1:-1]:
        assert pth.point_in_path(p)
