import threading
import unittest

from bin_collector.core.cache import SnapshotCache
from bin_collector.scrapers.simbio import ScheduleSnapshot

FIELDS = list(ScheduleSnapshot().as_dict())


def _tagged(tag: str) -> ScheduleSnapshot:
    return ScheduleSnapshot(**{f: tag for f in FIELDS})


class TestSnapshotCache(unittest.TestCase):
    def test_default_before_first_write(self):
        cache = SnapshotCache()
        self.assertEqual(cache.read(), ScheduleSnapshot())
        self.assertIsNone(cache.last_write())
        self.assertIsNone(cache.age())

    def test_write_replaces_whole_snapshot(self):
        cache = SnapshotCache()
        cache.write(_tagged("a"))
        cache.write(ScheduleSnapshot(city="Celje"))
        self.assertEqual(cache.read(), ScheduleSnapshot(city="Celje"))

    def test_write_rejects_other_types(self):
        cache = SnapshotCache()
        with self.assertRaises(TypeError):
            cache.write({"city": "Celje"})
        self.assertEqual(cache.read(), ScheduleSnapshot())

    def test_age_uses_clock(self):
        now = [1000.0]
        cache = SnapshotCache(clock=lambda: now[0])
        cache.write(_tagged("a"))
        now[0] = 1012.34
        self.assertEqual(cache.last_write(), 1000.0)
        self.assertEqual(cache.age(), 12.3)

    def test_injected_lock_is_used(self):
        class CountingLock:
            def __init__(self):
                self.entered = 0
                self._lock = threading.Lock()

            def __enter__(self):
                self.entered += 1
                return self._lock.__enter__()

            def __exit__(self, *exc):
                return self._lock.__exit__(*exc)

        lock = CountingLock()
        cache = SnapshotCache(lock=lock)
        cache.write(_tagged("a"))
        cache.read()
        self.assertEqual(lock.entered, 2)
        cache.read_with_ts()
        self.assertEqual(lock.entered, 3)

    def test_read_with_ts_before_first_write(self):
        self.assertEqual(SnapshotCache().read_with_ts(), (ScheduleSnapshot(), None))

    def test_read_with_ts_pairs_snapshot_with_its_write(self):
        current = [0]
        cache = SnapshotCache(clock=lambda: float(current[0]))
        stop = threading.Event()
        mismatched = []

        def writer():
            i = 1
            while not stop.is_set():
                current[0] = i
                cache.write(_tagged(str(i)))
                i += 1

        def reader():
            for _ in range(5000):
                snapshot, ts = cache.read_with_ts()
                if ts is None:
                    if snapshot != ScheduleSnapshot():
                        mismatched.append((snapshot.city, ts))
                elif snapshot.city != str(int(ts)):
                    mismatched.append((snapshot.city, ts))

        w = threading.Thread(target=writer)
        readers = [threading.Thread(target=reader) for _ in range(4)]
        w.start()
        for r in readers:
            r.start()
        for r in readers:
            r.join()
        stop.set()
        w.join()

        self.assertEqual(mismatched, [])

    def test_concurrent_reads_never_see_mixed_snapshots(self):
        cache = SnapshotCache()
        stop = threading.Event()
        torn = []

        def writer():
            i = 0
            while not stop.is_set():
                cache.write(_tagged(f"fetch-{i % 2}"))
                i += 1

        def reader():
            for _ in range(5000):
                values = set(cache.read().as_dict().values())
                if len(values) != 1:
                    torn.append(values)

        w = threading.Thread(target=writer)
        readers = [threading.Thread(target=reader) for _ in range(4)]
        w.start()
        for r in readers:
            r.start()
        for r in readers:
            r.join()
        stop.set()
        w.join()

        self.assertEqual(torn, [])


if __name__ == "__main__":
    unittest.main()
