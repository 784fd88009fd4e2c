from screenprint.core.cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_returns_value_before_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("catalog", {"tiers": 4})

    clock.now += 59
    assert cache.get("catalog") == {"tiers": 4}
    assert "catalog" in cache


def test_entry_expires_after_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("catalog", "snapshot")

    clock.now += 60
    assert cache.get("catalog") is None
    assert len(cache) == 0


def test_invalidate_single_key_and_all():
    cache = TTLCache(ttl=60, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.invalidate()
    assert len(cache) == 0


def test_zero_ttl_never_serves_cached_value():
    cache = TTLCache(ttl=0, clock=FakeClock())
    cache.set("a", 1)
    assert cache.get("a") is None
