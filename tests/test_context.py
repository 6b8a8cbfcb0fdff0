from robs.context import AppContext, ScopedContext
from robs.events import ErrorEvent, LogEvent, LogLevel


def test_new_context_has_empty_registries():
    ctx = AppContext()
    assert ctx.source_registry.count() == 0
    assert ctx.encoder_registry.count() == 0
    assert ctx.output_registry.count() == 0


def test_new_context_pipeline_is_stopped():
    assert AppContext().pipeline.is_running() is False


def test_send_event_reaches_bus_in_order():
    ctx = AppContext()
    first = LogEvent(LogLevel.INFO, "hello")
    second = ErrorEvent(code="E1", message="boom")
    ctx.send_event(first)
    ctx.send_event(second)
    assert ctx.event_bus.drain() == [first, second]


def test_contexts_do_not_share_state():
    a, b = AppContext(), AppContext()
    a.source_registry.register("x", object())
    a.send_event(LogEvent(LogLevel.DEBUG, "only a"))
    assert b.source_registry.count() == 0
    assert b.event_bus.drain() == []


def test_scoped_context_returns_shared_context():
    ctx = AppContext()
    scoped = ScopedContext(ctx)
    assert scoped.context() is ctx