"""The application context: registries, event bus and pipeline in one place."""

from __future__ import annotations

from robs.events import EventBus, RobsEvent
from robs.interfaces import EncoderFactory, OutputFactory, SourceFactory
from robs.pipeline import Pipeline
from robs.registry import Registry


class AppContext:
    """Shared state of a running application."""

    def __init__(self) -> None:
        self.source_registry: Registry[SourceFactory] = Registry()
        self.encoder_registry: Registry[EncoderFactory] = Registry()
        self.output_registry: Registry[OutputFactory] = Registry()
        self.event_bus = EventBus()
        self.pipeline = Pipeline()

    def send_event(self, event: RobsEvent) -> None:
        """Put ``event`` on the application's event bus."""
        self.event_bus.send(event)


class ScopedContext:
    """A handle that gives access to a shared application context."""

    def __init__(self, ctx: AppContext) -> None:
        self._ctx = ctx

    def context(self) -> AppContext:
        return self._ctx