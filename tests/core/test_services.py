import pytest

from svcbus import metrics
from svcbus.modules import (
    DuplicateServiceError,
    InvalidHandlerError,
    MissingServiceError,
    ServiceCall,
)


def test_echo_round_trip(registry):
    m = registry.create("m")
    m.declare_service("echo", lambda call: call.payload)
    assert m.invoke_service("echo", 42) == 42


def test_direct_invocation_has_no_caller(registry):
    m = registry.create("m")
    seen = []
    m.declare_service("record", seen.append)
    m.invoke_service("record", {"k": 1})
    assert seen == [ServiceCall(payload={"k": 1}, caller=None)]


def test_duplicate_service_rejected_and_first_kept(registry):
    m = registry.create("m")
    m.declare_service("s", lambda call: "first")
    with pytest.raises(DuplicateServiceError) as exc:
        m.declare_service("s", lambda call: "second")
    assert exc.value.module == "m"
    assert exc.value.service == "s"
    assert m.invoke_service("s") == "first"
    with pytest.raises(DuplicateServiceError):
        m.declare_service("s", lambda call: "third", defer=True)


def test_same_service_name_in_different_modules(registry):
    a = registry.create("a")
    b = registry.create("b")
    a.declare_service("s", lambda call: "a")
    b.declare_service("s", lambda call: "b")
    assert (a.invoke_service("s"), b.invoke_service("s")) == ("a", "b")


def test_missing_service_raises(registry):
    m = registry.create("m")
    with pytest.raises(MissingServiceError) as exc:
        m.invoke_service("nope", 1)
    assert exc.value.error_type == "missing-service"
    assert "nope" in str(exc.value)


def test_duplicate_checked_before_handler(registry):
    m = registry.create("m")
    m.declare_service("s", lambda call: 1)
    with pytest.raises(DuplicateServiceError):
        m.declare_service("s", "not callable")
    assert m.invoke_service("s") == 1


def test_handler_must_be_callable(registry):
    m = registry.create("m")
    with pytest.raises(InvalidHandlerError):
        m.declare_service("s", "not callable")
    assert not m.has_service("s")


def test_handler_exception_propagates(registry):
    m = registry.create("m")

    def boom(call):
        raise ValueError("bad payload")

    m.declare_service("boom", boom)
    with pytest.raises(ValueError):
        m.invoke_service("boom")


def test_provides_decorator(registry):
    m = registry.create("m")

    @m.provides("double")
    def double(call):
        return call.payload * 2

    assert m.has_service("double")
    assert m.service_names() == ["double"]
    assert m.invoke_service("double", 21) == 42
    assert double(ServiceCall(payload=1)) == 2


def test_sync_invocations_counted(registry):
    m = registry.create("m")
    m.declare_service("echo", lambda call: call.payload)
    m.invoke_service("echo", 1)
    m.invoke_service("echo", 2, defer=True)
    assert metrics.counter("service_invocations_total", {"mode": "sync"}) == 2


def test_service_declared_event(registry):
    seen = []
    registry.events.on("servicedeclared", lambda ev: seen.append(ev.data))
    m = registry.create("m")
    m.declare_service("s", lambda call: None, defer=True)
    assert seen[0]["module"] == "m"
    assert seen[0]["service"] == "s"
    assert seen[0]["defer"] is True
    snap = metrics.snapshot()["counters"]
    assert snap["services_declared_total{defer=true}"] == 1
