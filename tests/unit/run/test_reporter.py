"""
Unit tests for the Reporter class and run snapshots.
"""

import dataclasses
import logging
import pytest
from unittest.mock import Mock, call

from evotopo.run.reporter import Reporter, Snapshot, SpeciesSummary


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def snapshot():
    species = (SpeciesSummary(id=1, size=3, fitness=1.0, max_fitness=2.0, created=0, last_improved=1),
               SpeciesSummary(id=4, size=2, fitness=0.5, max_fitness=0.5, created=2, last_improved=2))
    return Snapshot(generation=3, population_size=5, fitness_values=(1.0, 2.0, 0.0, 0.5, 0.5),
                    species=species, best_genome=None, best_fitness=2.0, compatibility_threshold=3.0)


# ============================================================================
# Test: Snapshot
# ============================================================================

class TestSnapshot:
    """Test the immutable run snapshot."""

    def test_num_species(self, snapshot):
        assert snapshot.num_species == 2

    def test_snapshot_is_immutable(self, snapshot):
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.best_fitness = 5.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.species[0].size = 10


# ============================================================================
# Test: Hook registration
# ============================================================================

class TestAddHook:
    """Test Reporter.add_hook()."""

    def test_add_hook(self):
        reporter = Reporter()
        reporter.add_hook(1, Mock())
        reporter.add_hook(5, Mock())
        assert len(reporter) == 2

    @pytest.mark.parametrize("every", [0, -3, 1.5, "2", None])
    def test_bad_period_raises(self, every):
        with pytest.raises(ValueError, match="positive integer"):
            Reporter().add_hook(every, Mock())


# ============================================================================
# Test: Firing hooks
# ============================================================================

class TestFire:
    """Test Reporter.fire()."""

    def test_hooks_called_at_multiples_of_their_period(self, snapshot):
        reporter = Reporter()
        every_gen   = Mock()
        every_third = Mock()
        reporter.add_hook(1, every_gen)
        reporter.add_hook(3, every_third)

        for generation in range(1, 7):
            reporter.fire(generation, lambda: snapshot)

        assert every_gen.call_count == 6
        assert every_third.call_args_list == [call(3, snapshot), call(6, snapshot)]

    def test_hooks_called_in_registration_order(self, snapshot):
        reporter = Reporter()
        order = []
        reporter.add_hook(1, lambda generation, snap: order.append("first"))
        reporter.add_hook(1, lambda generation, snap: order.append("second"))
        reporter.add_hook(1, lambda generation, snap: order.append("third"))

        reporter.fire(1, lambda: snapshot)

        assert order == ["first", "second", "third"]

    def test_snapshot_built_once_when_due(self, snapshot):
        reporter = Reporter()
        reporter.add_hook(1, Mock())
        reporter.add_hook(2, Mock())
        make_snapshot = Mock(return_value=snapshot)

        reporter.fire(2, make_snapshot)

        make_snapshot.assert_called_once_with()

    def test_snapshot_not_built_when_nothing_due(self):
        reporter = Reporter()
        reporter.add_hook(5, Mock())
        make_snapshot = Mock()

        reporter.fire(3, make_snapshot)

        make_snapshot.assert_not_called()

    def test_failing_hook_is_logged_and_others_still_run(self, snapshot, caplog):
        reporter = Reporter()
        failing = Mock(side_effect=RuntimeError("boom"))
        after   = Mock()
        reporter.add_hook(1, failing)
        reporter.add_hook(1, after)

        with caplog.at_level(logging.ERROR, logger="evotopo.run.reporter"):
            reporter.fire(4, lambda: snapshot)

        after.assert_called_once_with(4, snapshot)
        assert "failed in generation 4" in caplog.text
        assert "boom" in caplog.text
