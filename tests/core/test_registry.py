import pytest

from svcbus.config import get_config
from svcbus.defer import QueueScheduler
from svcbus.modules import DuplicateNameError, ModuleRegistry, NameGenerator


def test_create_rejects_duplicate_name(registry):
    registry.create("alpha")
    for _ in range(3):
        with pytest.raises(DuplicateNameError) as exc:
            registry.create("alpha")
        assert exc.value.name == "alpha"
        assert exc.value.error_type == "duplicate-name"
    assert registry.names() == ["alpha"]


def test_get_or_create_is_idempotent(registry):
    a1 = registry.get_or_create("alpha")
    a2 = registry.get_or_create("alpha")
    assert a1 is a2
    assert registry.get("alpha") is a1
    assert len(registry) == 1


def test_get_unknown_returns_none(registry):
    assert registry.get("ghost") is None
    assert "ghost" not in registry


def test_generated_names_are_unique_and_prefixed(registry):
    mods = [registry.create() for _ in range(250)]
    names = [m.name for m in mods]
    assert len(set(names)) == len(names)
    assert all(n.startswith("TMPMODULE") for n in names)


def test_get_or_create_without_name_generates(registry):
    m = registry.get_or_create()
    assert m.name.startswith("TMPMODULE")
    assert registry.get(m.name) is m


def test_empty_string_is_a_valid_name(registry):
    m = registry.get_or_create("")
    assert m.name == ""
    assert registry.get_or_create("") is m


def test_name_must_be_str(registry):
    with pytest.raises(TypeError):
        registry.create(42)


def test_name_generator_counter_wraps(monkeypatch):
    import svcbus.modules.registry as reg

    monkeypatch.setattr(reg.time, "time", lambda: 1.0)
    gen = NameGenerator(prefix="P", wrap=3)
    assert [gen() for _ in range(5)] == [
        "P10000",
        "P10001",
        "P10002",
        "P10000",
        "P10001",
    ]


def test_registry_order_and_iteration(registry):
    for n in ("c", "a", "b"):
        registry.create(n)
    assert registry.names() == ["c", "a", "b"]
    assert [m.name for m in registry] == ["c", "a", "b"]


def test_registries_are_isolated():
    r1 = ModuleRegistry(scheduler=QueueScheduler())
    r2 = ModuleRegistry(scheduler=QueueScheduler())
    r1.create("shared")
    r2.create("shared")
    assert r1.get("shared") is not r2.get("shared")


def test_registry_uses_configured_prefix():
    cfg = get_config().model_copy(deep=True)
    cfg.registry.name_prefix = "AUTO"
    reg = ModuleRegistry(config=cfg, scheduler=QueueScheduler())
    assert reg.create().name.startswith("AUTO")


def test_module_created_event(registry):
    seen = []
    registry.events.on("ModuleCreated", lambda ev: seen.append(ev.data))
    registry.create("alpha")
    registry.create()
    assert seen[0]["module"] == "alpha"
    assert seen[0]["generated_name"] is False
    assert seen[1]["generated_name"] is True
