"""Finding plugin libraries and registering what loaded plugins provide."""

from __future__ import annotations

import logging
from pathlib import Path

from robs.interfaces import EncoderFactory, OutputFactory, SourceFactory
from robs.plugin import Plugin, PluginInfo, UnknownPlugin
from robs.registry import Registry

_log = logging.getLogger(__name__)

_LIBRARY_SUFFIXES = {"dll", "so", "dylib"}


class PluginManager:
    """Loaded plugins, keyed by the path they were loaded from."""

    def __init__(
        self,
        source_registry: Registry[SourceFactory],
        encoder_registry: Registry[EncoderFactory],
        output_registry: Registry[OutputFactory],
    ) -> None:
        self._plugins: dict[str, Plugin] = {}
        self.plugin_dirs: list[Path] = [Path("./plugins")]
        self.source_registry = source_registry
        self.encoder_registry = encoder_registry
        self.output_registry = output_registry

    def add_plugin_dir(self, directory: str | Path) -> None:
        self.plugin_dirs.append(Path(directory))

    def discover_plugins(self) -> list[str]:
        """Paths of shared libraries (.dll, .so, .dylib) in the plugin directories."""
        discovered: list[str] = []
        for directory in self.plugin_dirs:
            if not directory.exists():
                continue
            try:
                entries = list(directory.iterdir())
            except OSError:
                continue
            discovered.extend(
                str(path) for path in entries if path.suffix[1:] in _LIBRARY_SUFFIXES
            )
        return discovered

    def load_plugin(self, path: str) -> Plugin:
        """Load the plugin at ``path`` and register its components."""
        info = PluginInfo(
            name=path,
            version="1.0",
            author="Unknown",
            description="Loaded plugin",
            path=path,
        )
        plugin = UnknownPlugin(info)
        self._register_plugin_components(plugin)
        self._plugins[path] = plugin
        _log.info("Loaded: %s", path)
        return plugin

    def unload_plugin(self, name: str) -> None:
        """Unload a plugin and unregister its components; unknown names are ignored."""
        plugin = self._plugins.pop(name, None)
        if plugin is not None:
            self._unregister_plugin_components(plugin)
            _log.info("Unloaded: %s", name)

    def _register_plugin_components(self, plugin: Plugin) -> None:
        caps = plugin.capabilities()
        if caps.sources:
            for source in plugin.get_sources():
                self.source_registry.register(source.source_type(), source)
        if caps.encoders:
            for encoder in plugin.get_encoders():
                self.encoder_registry.register(encoder.encoder_type(), encoder)
        if caps.outputs:
            for output in plugin.get_outputs():
                self.output_registry.register(output.output_type(), output)

    def _unregister_plugin_components(self, plugin: Plugin) -> None:
        caps = plugin.capabilities()
        if caps.sources:
            for source in plugin.get_sources():
                self.source_registry.unregister(source.source_type())
        if caps.encoders:
            for encoder in plugin.get_encoders():
                self.encoder_registry.unregister(encoder.encoder_type())
        if caps.outputs:
            for output in plugin.get_outputs():
                self.output_registry.unregister(output.output_type())

    def list_plugins(self) -> list[str]:
        return list(self._plugins)

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)