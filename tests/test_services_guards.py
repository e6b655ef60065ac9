"""
Tests for geoconnect.services.guards — SequenceGuard, SuppressionLatch,
FitPolicy.
"""
from __future__ import annotations

from geoconnect.services.guards import FitPolicy, SequenceGuard, SuppressionLatch


# ═══════════════════════════════════════════════════════════════════
# SequenceGuard
# ═══════════════════════════════════════════════════════════════════
class TestSequenceGuard:
    def test_starts_at_zero(self):
        g = SequenceGuard()
        assert g.current == 0
        assert not g.is_current(1)

    def test_strictly_increasing(self):
        g = SequenceGuard()
        ids = [g.next() for _ in range(5)]
        assert ids == [1, 2, 3, 4, 5]
        assert g.current == 5

    def test_only_latest_is_current(self):
        g = SequenceGuard()
        first = g.next()
        second = g.next()
        assert not g.is_current(first)
        assert g.is_current(second)

    def test_is_current_does_not_issue(self):
        g = SequenceGuard()
        g.next()
        g.is_current(1)
        g.is_current(7)
        assert g.current == 1


# ═══════════════════════════════════════════════════════════════════
# SuppressionLatch
# ═══════════════════════════════════════════════════════════════════
class TestSuppressionLatch:
    def test_unarmed_consume(self):
        latch = SuppressionLatch()
        assert latch.consume_if_armed() is False

    def test_swallows_exactly_one(self):
        latch = SuppressionLatch()
        latch.arm_for_next_move()
        assert latch.armed
        assert latch.consume_if_armed() is True
        assert latch.consume_if_armed() is False
        assert not latch.armed

    def test_disarm(self):
        latch = SuppressionLatch()
        latch.arm_for_next_move()
        latch.disarm()
        assert latch.consume_if_armed() is False

    def test_disarm_when_clear_is_noop(self):
        latch = SuppressionLatch()
        latch.disarm()
        assert not latch.armed

    def test_arming_twice_still_one_shot(self):
        latch = SuppressionLatch()
        latch.arm_for_next_move()
        latch.arm_for_next_move()
        assert latch.consume_if_armed() is True
        assert latch.consume_if_armed() is False


# ═══════════════════════════════════════════════════════════════════
# FitPolicy
# ═══════════════════════════════════════════════════════════════════
class TestFitPolicy:
    def test_first_consume_allows(self):
        p = FitPolicy()
        assert p.should_auto_fit() is True
        assert p.consume() is True

    def test_never_again(self):
        p = FitPolicy()
        p.consume()
        assert p.should_auto_fit() is False
        assert [p.consume() for _ in range(3)] == [False, False, False]

    def test_should_auto_fit_is_read_only(self):
        p = FitPolicy()
        p.should_auto_fit()
        p.should_auto_fit()
        assert p.consume() is True
