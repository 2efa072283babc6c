"""Tests for ContainerRegistry."""

import threading
from datetime import timedelta

from conftest import FakeClock

from node_launcher.runners.registry import ContainerRegistry


class TestContainerRegistry:
    """Tests for ContainerRegistry class."""

    def test_record_and_unrecord(self):
        clock = FakeClock()
        registry = ContainerRegistry(clock=clock)

        registry.record("a")
        assert "a" in registry
        assert len(registry) == 1
        assert registry.created_at("a") == clock.now

        assert registry.unrecord("a") is True
        assert "a" not in registry
        assert registry.unrecord("a") is False

    def test_snapshot_older_than(self):
        """Only entries strictly older than now - age are returned."""
        clock = FakeClock()
        registry = ContainerRegistry(clock=clock)

        registry.record("old")
        clock.advance(minutes=5)
        registry.record("new")
        clock.advance(minutes=5)

        assert registry.snapshot_older_than(timedelta(minutes=7)) == ["old"]
        assert sorted(registry.snapshot_older_than(timedelta(minutes=1))) == ["new", "old"]
        # Exactly at the boundary is not older
        assert registry.snapshot_older_than(timedelta(minutes=10)) == []

    def test_snapshot_is_a_copy(self):
        registry = ContainerRegistry(clock=FakeClock())
        registry.record("a")

        ids = registry.snapshot()
        registry.unrecord("a")

        assert ids == ["a"]

    def test_clear(self):
        registry = ContainerRegistry(clock=FakeClock())
        for i in range(3):
            registry.record(f"c{i}")

        registry.clear()

        assert len(registry) == 0
        assert registry.snapshot() == []

    def test_concurrent_record_unrecord(self):
        """No lost updates when many threads mutate the registry at once."""
        registry = ContainerRegistry()
        barrier = threading.Barrier(8)

        def worker(n: int) -> None:
            barrier.wait()
            for i in range(200):
                registry.record(f"{n}-{i}")
            for i in range(0, 200, 2):
                registry.unrecord(f"{n}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 8 * 100
        assert all(int(cid.split("-")[1]) % 2 == 1 for cid in registry.snapshot())
