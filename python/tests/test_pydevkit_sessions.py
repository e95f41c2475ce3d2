import types

from pydevkit.engine import EngineState, ReadEvent, WriteEvent


def _writes(events):
    return "".join(event.text for event in events if isinstance(event, WriteEvent))


def test_start_does_not_run_the_console(registry):
    session = registry.start("a", None)
    assert not session.engine.started
    assert "a" in registry
    assert registry.ids() == ["a"]


def test_handle_drives_the_session(registry):
    registry.start("a", 21)
    assert list(registry.handle("a", "")) == [ReadEvent(">>> ")]
    events = list(registry.handle("a", "self * 2"))
    assert _writes(events) == "42\n"
    assert events[-1] == ReadEvent(">>> ")


def test_handle_unknown_id(registry):
    assert registry.handle("missing", "1") is None
    assert registry.complete("missing", "pr") is None


def test_sessions_are_independent(registry):
    registry.start("a", None)
    registry.start("b", None)
    list(registry.handle("a", ""))
    list(registry.handle("b", ""))
    list(registry.handle("a", "x = 'from a'"))
    events = list(registry.handle("b", "'x' in dir()"))
    assert _writes(events) == "False\n"
    assert len(registry) == 2


def test_finished_session_is_treated_as_absent(registry):
    registry.start("a", None)
    list(registry.handle("a", ""))
    assert list(registry.handle("a", "exit()")) == []
    assert registry.get("a") is None
    assert registry.handle("a", "1") is None
    assert registry.complete("a", "x") is None
    # still registered until stopped
    assert "a" in registry
    assert registry.stop("a") is True


def test_stop_is_idempotent(registry):
    session = registry.start("a", None)
    list(registry.handle("a", ""))
    assert registry.stop("a") is True
    assert session.engine.state is EngineState.TERMINATED
    assert registry.stop("a") is False
    assert registry.handle("a", "1") is None
    assert registry.complete("a", "x") is None


def test_restart_replaces_and_closes_previous(registry):
    old = registry.start("a", 1)
    list(registry.handle("a", ""))
    new = registry.start("a", 2)
    assert old.engine.state is EngineState.TERMINATED
    assert registry.get("a") is new
    list(registry.handle("a", ""))
    assert _writes(registry.handle("a", "self")) == "2\n"


def test_complete_uses_session_namespace(registry):
    module = types.ModuleType("scratch")
    module.alpha_value = 1
    module.alpha_other = 2
    registry.start("m", module)
    completions = registry.complete("m", "alpha_")
    assert set(completions) == {"alpha_value", "alpha_other"}
    registry.start("s", "text")
    assert "self.upper(" in registry.complete("s", "self.up")


def test_close_all(registry):
    first = registry.start("a", None)
    second = registry.start("b", None)
    list(registry.handle("a", ""))
    registry.close_all()
    assert len(registry) == 0
    assert not first.alive and not second.alive
