import unittest

from filepreview.cache import BlobCache, get_default_cache

tc = unittest.TestCase()


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_put_and_get() -> None:
    cache = BlobCache(ttl_seconds=10, clock=FakeClock())

    file_id = cache.put(b"%PDF-1.7", format="pdf", display_name="report.pdf")
    entry = cache.get(file_id)

    tc.assertTrue(file_id.startswith("file_"))
    tc.assertEqual(b"%PDF-1.7", entry.payload)
    tc.assertEqual("pdf", entry.format)
    tc.assertEqual("report.pdf", entry.display_name)
    tc.assertEqual(8, entry.size)
    tc.assertIn(file_id, cache)
    tc.assertEqual(1, len(cache))


def test_default_display_name() -> None:
    cache = BlobCache(clock=FakeClock())

    entry = cache.get(cache.put(b"data", format="pdf"))

    tc.assertRegex(entry.display_name, r"^document_\d+\.pdf$")


def test_missing_entry() -> None:
    tc.assertIsNone(BlobCache().get("file_0_unknown"))


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = BlobCache(ttl_seconds=10, clock=clock)
    fresh = cache.put(b"a", format="pdf")
    stale = cache.put(b"b", format="pdf")

    clock.now = 9
    tc.assertIsNotNone(cache.get(fresh))

    clock.now = 11
    tc.assertIsNone(cache.get(stale))
    tc.assertNotIn(stale, cache)
    # refreshed at t=9
    tc.assertIsNotNone(cache.get(fresh))


def test_entry_is_valid_at_exactly_ttl() -> None:
    clock = FakeClock()
    cache = BlobCache(ttl_seconds=10, clock=clock)
    file_id = cache.put(b"a", format="pdf")

    clock.now = 10

    tc.assertIsNotNone(cache.get(file_id))


def test_get_refreshes_the_entry() -> None:
    clock = FakeClock()
    cache = BlobCache(ttl_seconds=10, clock=clock)
    file_id = cache.put(b"a", format="pdf")

    for now in (8, 16, 24):
        clock.now = now
        tc.assertIsNotNone(cache.get(file_id))

    clock.now = 35
    tc.assertIsNone(cache.get(file_id))


def test_sweep_runs_after_put() -> None:
    clock = FakeClock()
    cache = BlobCache(ttl_seconds=10, clock=clock)
    cache.put(b"a", format="pdf")
    cache.put(b"b", format="pdf")

    clock.now = 20
    cache.put(b"c", format="pdf")

    tc.assertEqual(1, len(cache))
    tc.assertEqual(0, cache.sweep())


def test_sweep_returns_removed_count() -> None:
    clock = FakeClock()
    cache = BlobCache(ttl_seconds=5, clock=clock)
    cache.put(b"a", format="pdf")
    cache.put(b"b", format="pdf")

    clock.now = 6

    tc.assertEqual(2, cache.sweep())
    tc.assertEqual(0, len(cache))


def test_default_cache_is_shared() -> None:
    tc.assertIs(get_default_cache(), get_default_cache())
