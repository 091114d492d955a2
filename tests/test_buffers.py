"""
Tests for rolling buffers and cooldown bookkeeping.
"""

import pytest

from algorithms.buffers import ClassSmoothingBuffer, CooldownTracker, PersistenceBuffer


class TestPersistenceBuffer:

    def test_count_over_window(self):
        buf = PersistenceBuffer(5)
        for value in [False, True, True, True, False]:
            buf.push(value)
        assert buf.count() == 3
        assert buf.is_full()
        assert buf.size() == 5

    def test_partial_window(self):
        """Only written slots are counted before the first wrap."""
        buf = PersistenceBuffer(5)
        buf.push(True)
        buf.push(False)
        assert not buf.is_full()
        assert buf.size() == 2
        assert len(buf) == 2
        assert buf.count() == 1
        assert buf.get_ordered_contents() == [True, False]

    def test_ordered_contents_after_wrap(self):
        buf = PersistenceBuffer(3)
        for value in [True, False, False, True]:
            buf.push(value)
        assert buf.get_ordered_contents() == [False, False, True]
        assert buf.count() == 1

    def test_oldest_value_is_overwritten(self):
        buf = PersistenceBuffer(2)
        buf.push(True)
        buf.push(True)
        buf.push(False)
        assert buf.count() == 1

    def test_all_true_requires_full_window(self):
        buf = PersistenceBuffer(3)
        buf.push(True)
        buf.push(True)
        assert buf.all_true() is False
        buf.push(True)
        assert buf.all_true() is True
        buf.push(False)
        assert buf.all_true() is False

    def test_reset(self):
        buf = PersistenceBuffer(3)
        for _ in range(4):
            buf.push(True)
        buf.reset()
        assert buf.size() == 0
        assert buf.count() == 0
        assert not buf.is_full()
        assert buf.get_ordered_contents() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            PersistenceBuffer(0)


class TestClassSmoothingBuffer:

    def test_majority(self):
        buf = ClassSmoothingBuffer(5)
        for label in ["normal", "throwing", "throwing", "throwing", "normal"]:
            buf.push(label)
        assert buf.majority_class() == "throwing"

    def test_tie_goes_to_first_label(self):
        buf = ClassSmoothingBuffer(4)
        for label in ["a", "b", "a", "b"]:
            buf.push(label)
        assert buf.majority_class() == "a"

    def test_tie_after_wrap_follows_slot_order(self):
        """Once the buffer wraps, ties go to the label in the lowest slot."""
        buf = ClassSmoothingBuffer(2)
        for label in ["a", "b", "a"]:
            buf.push(label)
        assert buf.majority_class() == "a"

    def test_empty_buffer(self):
        assert ClassSmoothingBuffer(3).majority_class() == ""

    def test_window_slides(self):
        buf = ClassSmoothingBuffer(2)
        buf.push("normal")
        buf.push("throwing")
        buf.push("throwing")
        assert buf.is_full()
        assert buf.majority_class() == "throwing"

    def test_reset(self):
        buf = ClassSmoothingBuffer(2)
        buf.push("normal")
        buf.reset()
        assert buf.majority_class() == ""
        assert not buf.is_full()


class TestCooldownTracker:

    def test_cooldown_window(self):
        """A key is suppressed strictly before its expiry."""
        cd = CooldownTracker()
        cd.set_cooldown("7", now=10.0, duration=5.0)
        assert cd.is_on_cooldown("7", 10.0)
        assert cd.is_on_cooldown("7", 14.9)
        assert not cd.is_on_cooldown("7", 15.0)
        assert not cd.is_on_cooldown("8", 10.0)

    def test_remaining(self):
        cd = CooldownTracker()
        cd.set_cooldown("a", now=10.0, duration=5.0)
        assert cd.remaining("a", 12.0) == pytest.approx(3.0)
        assert cd.remaining("a", 20.0) == 0.0
        assert cd.remaining("missing", 0.0) == 0.0
        assert cd.expiry("a") == pytest.approx(15.0)
        assert cd.expiry("missing") is None

    def test_clear_expired(self):
        cd = CooldownTracker()
        cd.set_cooldown("a", now=0.0, duration=5.0)
        cd.set_cooldown("b", now=0.0, duration=50.0)
        assert cd.clear_expired(5.0) == 1
        assert "a" not in cd
        assert "b" in cd
        assert len(cd) == 1

    def test_reset(self):
        cd = CooldownTracker()
        cd.set_cooldown("a", now=0.0, duration=5.0)
        cd.reset()
        assert len(cd) == 0
        assert not cd.is_on_cooldown("a", 1.0)
