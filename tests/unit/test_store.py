import threading

from parspack_ranges.prefixes import parse_prefixes
from parspack_ranges.store import SnapshotStore


def test_store_starts_empty():
    store = SnapshotStore()

    assert store.read() == ()
    assert store.generation == 0
    assert store.updated_at is None


def test_replace_then_read_returns_snapshot():
    store = SnapshotStore()
    prefixes = parse_prefixes("1.2.3.0/24\n5.6.7.0/16\n")

    store.replace(prefixes)

    assert store.read() == prefixes
    assert store.generation == 1
    assert store.updated_at is not None
    assert len(store) == 2


def test_replace_copies_mutable_input():
    store = SnapshotStore()
    prefixes = list(parse_prefixes("1.2.3.0/24"))

    store.replace(prefixes)
    prefixes.clear()

    assert len(store.read()) == 1


def test_concurrent_readers_never_see_torn_snapshot():
    store = SnapshotStore()
    first = store.replace(parse_prefixes("\n".join(f"10.{i}.0.0/16" for i in range(200))))
    second = parse_prefixes("\n".join(f"172.16.{i}.0/24" for i in range(150)))
    snapshots = {first, second}
    stop = threading.Event()
    errors = []

    def reader():
        while not stop.is_set():
            current = store.read()
            if current not in snapshots:
                errors.append(current)

    def writer():
        for i in range(500):
            store.replace(second if i % 2 else first)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    writers = [threading.Thread(target=writer) for _ in range(2)]
    for thread in writers:
        thread.start()
    for thread in writers:
        thread.join()
    stop.set()
    for thread in readers:
        thread.join()

    assert errors == []
    assert store.generation == 1001

    store.replace(second)
    assert store.read() == second
