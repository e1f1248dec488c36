from concurrent.futures import ThreadPoolExecutor

import pytest

from visitor_counter.services.counter import VisitCounter, should_increment
from visitor_counter.services.identity import resolve_client_id
from visitor_counter.services.registry import DEFAULT_INACTIVITY_THRESHOLD_MS, ActiveVisitorRegistry


def test_upsert_sets_first_seen_only_on_insert() -> None:
    registry = ActiveVisitorRegistry()
    registry.upsert("abc", 1_000)
    registry.upsert("abc", 5_000)

    user = registry.get("abc")
    assert user is not None
    assert user.first_seen == 1_000
    assert user.last_active == 5_000
    assert registry.count() == 1


def test_get_returns_a_copy() -> None:
    registry = ActiveVisitorRegistry()
    registry.upsert("abc", 1_000)
    user = registry.get("abc")
    user.last_active = 0

    assert registry.get("abc").last_active == 1_000
    assert registry.get("missing") is None


def test_sweep_evicts_only_entries_past_threshold() -> None:
    registry = ActiveVisitorRegistry()
    registry.upsert("old", 0)
    registry.upsert("edge", 1_000)
    registry.upsert("fresh", 100_000)

    evicted = registry.sweep(now=121_000, threshold_ms=DEFAULT_INACTIVITY_THRESHOLD_MS)

    # "edge" is idle exactly 120000ms, which is not strictly past the threshold.
    assert evicted == 1
    assert registry.get("old") is None
    assert registry.get("edge") is not None
    assert registry.count() == 2


def test_sweep_on_empty_registry_is_noop() -> None:
    assert ActiveVisitorRegistry().sweep(now=10**12) == 0


def test_registry_concurrent_upserts_count_each_client_once() -> None:
    registry = ActiveVisitorRegistry()

    def _touch(i: int) -> None:
        registry.upsert(f"client-{i % 50}", i)
        registry.sweep(now=i)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_touch, range(2_000)))

    assert registry.count() == 50


def test_counter_increments_are_not_lost_under_threads() -> None:
    counter = VisitCounter()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: counter.increment(), range(4_000)))

    assert counter.read() == 4_000


def test_counter_increment_returns_new_value() -> None:
    counter = VisitCounter(start=41)
    assert counter.increment() == 42
    assert counter.read() == 42


@pytest.mark.parametrize(
    ("policy", "header", "expected"),
    [
        ("always", None, True),
        ("always", "false", True),
        ("on_request", None, False),
        ("on_request", "", False),
        ("on_request", "false", False),
        ("on_request", "true", True),
        ("on_request", " TRUE ", True),
    ],
)
def test_should_increment_policies(policy, header, expected) -> None:
    assert should_increment(policy, header) is expected


def test_resolve_client_id_keeps_supplied_value() -> None:
    assert resolve_client_id("any opaque value") == ("any opaque value", False)


def test_resolve_client_id_generates_when_missing_or_empty() -> None:
    first, generated = resolve_client_id(None)
    second, _ = resolve_client_id("")

    assert generated is True
    assert first and second
    assert first != second
