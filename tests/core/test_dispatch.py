import re

import pytest

from svcbus import metrics
from svcbus.modules import (
    ALL,
    CallerIdentity,
    InvalidModuleError,
    Many,
    MissingServiceError,
    Named,
    Pattern,
    Single,
    as_target,
)


@pytest.fixture()
def abc(registry):
    mods = {}
    for name in ("A", "B", "C"):
        m = registry.create(name)
        m.declare_service("s", lambda call, name=name: f"{name}:{call.payload}")
        mods[name] = m
    return mods


def test_pattern_broadcast_in_registry_order(registry, abc):
    caller = registry.create("caller")
    assert caller.notify(re.compile("^(A|B)$"), "s", "d") == ["A:d", "B:d"]
    assert caller.notify(Pattern.compile("^(B|A)$"), "s", "d") == ["A:d", "B:d"]


def test_pattern_uses_search_semantics(registry, abc):
    caller = registry.create("caller")
    assert caller.notify(re.compile("B"), "s", 1) == ["B:1"]


def test_unknown_name_returns_none(registry):
    caller = registry.create("caller")
    assert caller.notify("ghost", "s", "d") is None


def test_named_single_and_module_reference(registry, abc):
    caller = registry.create("caller")
    assert caller.notify("A", "s", 1) == "A:1"
    assert caller.notify(abc["C"], "s", 2) == "C:2"


def test_collection_results_one_per_entry(registry, abc):
    caller = registry.create("caller")
    result = caller.notify([abc["B"], "ghost", "A", re.compile("^C$")], "s", 0)
    assert result == ["B:0", None, "A:0", ["C:0"]]


def test_nested_collections(registry, abc):
    caller = registry.create("caller")
    assert caller.notify(["A", ["B", "C"]], "s", 0) == ["A:0", ["B:0", "C:0"]]


def test_duplicates_permitted(registry, abc):
    caller = registry.create("caller")
    assert caller.notify(("A", "A"), "s", 0) == ["A:0", "A:0"]


def test_invalid_single_target_rejected(registry):
    caller = registry.create("caller")
    with pytest.raises(InvalidModuleError) as exc:
        caller.notify(object(), "s")
    assert exc.value.error_type == "invalid-module"
    with pytest.raises(InvalidModuleError):
        caller.notify(["A", 3], "s")


def test_invalid_entry_rejected_before_any_invocation(registry, abc):
    calls = []
    side = registry.create("side")
    side.declare_service("s", lambda call: calls.append(call.payload))
    caller = registry.create("caller")
    with pytest.raises(InvalidModuleError) as exc:
        caller.notify([side, "A", [abc["B"], 3]], "s", "x")
    assert exc.value.target == 3
    assert calls == []
    with pytest.raises(InvalidModuleError):
        caller.notify(Many((Named("A"), 7)), "s")


def test_caller_identity_injected(registry):
    seen = []
    target = registry.create("target")
    target.declare_service("who", lambda call: seen.append(call.caller))
    registry.create("alice").notify("target", "who")
    registry.create("bob").notify(target, "who")
    assert seen == [CallerIdentity("alice"), CallerIdentity("bob")]


def test_dispatcher_requires_module_caller(registry):
    registry.create("target")
    with pytest.raises(InvalidModuleError):
        registry.dispatcher.notify("target", "s", caller="mallory")


def test_default_target_broadcasts_to_all_including_self(registry):
    names = []
    for n in ("x", "y"):
        m = registry.create(n)
        m.declare_service("ping", lambda call, n=n: names.append(n) or n)
    caller = registry.get("x")
    assert caller.notify(service="ping") == ["x", "y"]
    assert names == ["x", "y"]


def test_missing_service_on_resolved_target_raises(registry, abc):
    caller = registry.create("caller")
    with pytest.raises(MissingServiceError):
        caller.notify("A", "unknown")


def test_pattern_skips_modules_created_during_dispatch(registry):
    first = registry.create("p1")
    first.declare_service(
        "spawn", lambda call: registry.create("p2") and "spawned"
    )
    caller = registry.create("caller")
    assert caller.notify(re.compile("^p"), "spawn") == ["spawned"]
    assert "p2" in registry


def test_as_target_coercion(registry):
    m = registry.create("m")
    assert as_target("m") == Named("m")
    assert as_target(m) == Single(m)
    assert as_target(ALL) is ALL
    assert as_target(["m", m]) == Many((Named("m"), Single(m)))
    assert isinstance(as_target(re.compile("x")), Pattern)


def test_dispatch_counted_by_target_kind(registry, abc):
    caller = registry.create("caller")
    caller.notify("A", "s")
    caller.notify(["A"], "s")
    snap = metrics.snapshot()["counters"]
    assert snap["notify_dispatch_total{target=named}"] == 1
    assert snap["notify_dispatch_total{target=many}"] == 1
