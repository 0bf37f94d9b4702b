"""Test module for the `ExpirationManager`."""

from docstore.store import ExpirationManager, ExpirationState, KeyRecord


def test_state_transitions(clock):
    """Test expiration states of a record."""
    manager = ExpirationManager(clock)
    record = KeyRecord("a", {}, 1)
    assert manager.state(record) is ExpirationState.NO_TTL
    assert manager.remaining(record) is None

    assert manager.schedule(record, 10) == clock.now + 10
    assert manager.state(record) is ExpirationState.TTL_SET
    assert manager.remaining(record) == 10

    clock.advance(9.5)
    assert not manager.is_expired(record)
    assert manager.remaining(record) == 0.5

    clock.advance(0.5)
    assert manager.state(record) is ExpirationState.TTL_SET
    assert manager.remaining(record) == 0.0

    clock.advance(0.5)
    assert manager.state(record) is ExpirationState.EXPIRED
    assert manager.remaining(record) == 0.0


def test_clear(clock):
    """Test method `clear` of `ExpirationManager`."""
    manager = ExpirationManager(clock)
    record = KeyRecord("a", {}, 1)
    assert not manager.clear(record)
    manager.schedule(record, 1)
    assert manager.clear(record)
    clock.advance(2)
    assert manager.state(record) is ExpirationState.NO_TTL


def test_due(clock):
    """Test method `due` of `ExpirationManager`."""
    manager = ExpirationManager(clock)
    records = [KeyRecord(key, {}, 1) for key in "abc"]
    for ttl, record in zip((3, 1, 2), records):
        manager.schedule(record, ttl)
    assert len(manager) == 3
    assert not manager.due()

    clock.advance(2)
    assert [key for _, key in manager.due()] == ["b"]
    clock.advance(0.5)
    assert [key for _, key in manager.due()] == ["c"]
    assert len(manager) == 1

    clock.advance(5)
    manager.schedule(KeyRecord("d", {}, 1), -1)
    assert [key for _, key in manager.due(limit=1)] == ["a"]
    assert [key for _, key in manager.due()] == ["d"]
    assert len(manager) == 0


def test_default_clock():
    """Test `ExpirationManager` with the default clock."""
    manager = ExpirationManager()
    record = KeyRecord("a", {}, 1)
    manager.schedule(record, 100)
    assert 99 < manager.remaining(record) <= 100


def test_compaction_refresh(clock):
    """Test that refreshing a deadline does not grow the heap unbounded."""
    manager = ExpirationManager(clock)
    record = KeyRecord("a", {}, 1)
    for _ in range(10 * manager.COMPACT_THRESHOLD):
        manager.schedule(record, 100)
    assert len(manager) <= manager.COMPACT_THRESHOLD + 1
    clock.advance(101)
    assert {key for _, key in manager.due()} == {"a"}


def test_compaction_clear(clock):
    """Test that cleared deadlines are compacted away."""
    manager = ExpirationManager(clock)
    for index in range(10 * manager.COMPACT_THRESHOLD):
        record = KeyRecord(str(index), {}, 1)
        manager.schedule(record, 100)
        manager.clear(record)
    assert len(manager) <= manager.COMPACT_THRESHOLD + 1
    clock.advance(101)
    live = KeyRecord("live", {}, 1)
    manager.schedule(live, 1)
    clock.advance(2)
    assert "live" in [key for _, key in manager.due()]
