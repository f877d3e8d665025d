"""Tests for the Alea PRNG and the graph context that owns it."""

import pytest

from pcity_mapgen import AleaPRNG, GraphContext, Point, get_context, reset_context, set_context


class TestAleaPRNG:
    """Test seeded random number generation."""

    def test_same_seed_same_sequence(self):
        prng1 = AleaPRNG("streets")
        prng2 = AleaPRNG("streets")

        assert [prng1.random() for _ in range(50)] == [prng2.random() for _ in range(50)]

    def test_different_seeds_differ(self):
        prng1 = AleaPRNG("streets")
        prng2 = AleaPRNG("alleys")

        assert [prng1.random() for _ in range(10)] != [prng2.random() for _ in range(10)]

    def test_iterable_seed(self):
        assert AleaPRNG(["a", 1]).random() == AleaPRNG(("a", 1)).random()

    def test_random_range(self):
        prng = AleaPRNG(42)
        values = [prng.random() for _ in range(1000)]

        assert all(0 <= v < 1 for v in values)

    def test_randint_inclusive(self):
        prng = AleaPRNG("dice")
        values = {prng.randint(1, 6) for _ in range(500)}

        assert values == {1, 2, 3, 4, 5, 6}
        assert prng.randint(3, 3) == 3

    def test_randint_empty_range(self):
        with pytest.raises(ValueError):
            AleaPRNG("dice").randint(5, 4)

    def test_choice(self):
        prng = AleaPRNG("pick")
        options = ["north", "south", "east", "west"]

        for _ in range(20):
            assert prng.choice(options) in options

        with pytest.raises(IndexError):
            prng.choice([])


class TestGraphContext:
    """Test id counters and the default context."""

    def test_ids_restart_after_reset(self):
        reset_context("one")
        first = Point((0, 0, 0))
        reset_context("one")
        again = Point((0, 0, 0))

        assert first.id == again.id == 1

    def test_explicit_context(self):
        context = GraphContext(seed="own")

        p1 = Point((0, 0, 0), context=context)
        p2 = Point((0, 0, 0), context=context)
        shared = Point((0, 0, 0))

        assert (p1.id, p2.id) == (1, 2)
        assert shared.id == 1
        assert p1.copy().id == 3

    def test_set_context(self):
        context = GraphContext(seed="installed")
        set_context(context)

        assert get_context() is context
        assert context.prng.seed == "installed"

    def test_reset_context_default_seed(self):
        from pcity_mapgen.config import settings

        assert reset_context().seed == settings.seed
