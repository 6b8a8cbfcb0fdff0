from pathlib import Path

import pytest

from robs.interfaces import EncoderFactory, OutputFactory, SourceFactory
from robs.plugin import Plugin, PluginCapabilities
from robs.plugin_manager import PluginManager
from robs.registry import Registry


class DummySourceFactory(SourceFactory):
    def source_type(self):
        return "dummy_source"

    def display_name(self):
        return "Dummy Source"

    def create(self):
        raise AssertionError("not used")

    def properties_definition(self):
        return []


class DummyEncoderFactory(EncoderFactory):
    def encoder_type(self):
        return "dummy_encoder"

    def display_name(self):
        return "Dummy Encoder"

    def codec_name(self):
        return "h264"

    def create(self):
        raise AssertionError("not used")


class DummyOutputFactory(OutputFactory):
    def output_type(self):
        return "dummy_output"

    def display_name(self):
        return "Dummy Output"

    def protocol(self):
        return "rtmp"

    def create(self):
        raise AssertionError("not used")


class CapablePlugin(Plugin):
    def __init__(self, caps):
        self.caps = caps

    def name(self):
        return "capable"

    def version(self):
        return "2.0"

    def author(self):
        return "someone"

    def description(self):
        return "provides everything"

    def capabilities(self):
        return self.caps

    def get_sources(self):
        return [DummySourceFactory()]

    def get_encoders(self):
        return [DummyEncoderFactory()]

    def get_outputs(self):
        return [DummyOutputFactory()]

    def initialize(self):
        return None

    def shutdown(self):
        return None


@pytest.fixture
def manager():
    return PluginManager(Registry(), Registry(), Registry())


def test_default_plugin_dir(manager):
    assert manager.plugin_dirs == [Path("./plugins")]


def test_discover_finds_shared_libraries_only(manager, tmp_path, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    libs = tmp_path / "libs"
    libs.mkdir()
    names = ["a.dll", "b.so", "c.dylib", "d.txt", "e"]
    for name in names:
        (libs / name).write_bytes(b"")
    manager.add_plugin_dir(libs)

    found = manager.discover_plugins()

    assert set(found) == {str(libs / n) for n in ("a.dll", "b.so", "c.dylib")}


def test_discover_skips_missing_directories(manager, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    manager.add_plugin_dir(tmp_path / "does-not-exist")
    assert manager.discover_plugins() == []


def test_load_plugin_records_metadata(manager):
    plugin = manager.load_plugin("plugins/foo.so")
    assert plugin.name() == "plugins/foo.so"
    assert plugin.version() == "1.0"
    assert plugin.author() == "Unknown"
    assert plugin.description() == "Loaded plugin"
    assert manager.list_plugins() == ["plugins/foo.so"]
    assert manager.get_plugin("plugins/foo.so") is plugin


def test_loaded_unknown_plugin_registers_nothing(manager):
    manager.load_plugin("plugins/foo.so")
    assert manager.source_registry.count() == 0
    assert manager.encoder_registry.count() == 0
    assert manager.output_registry.count() == 0


def test_unload_plugin_removes_it(manager):
    manager.load_plugin("plugins/foo.so")
    manager.unload_plugin("plugins/foo.so")
    assert manager.list_plugins() == []
    assert manager.get_plugin("plugins/foo.so") is None


def test_unload_unknown_plugin_leaves_others(manager):
    manager.load_plugin("plugins/foo.so")
    manager.unload_plugin("plugins/bar.so")
    assert manager.list_plugins() == ["plugins/foo.so"]


def test_components_registered_by_capability(manager):
    plugin = CapablePlugin(PluginCapabilities(sources=True, encoders=True, outputs=True))
    manager._register_plugin_components(plugin)
    assert manager.source_registry.list() == ["dummy_source"]
    assert manager.encoder_registry.list() == ["dummy_encoder"]
    assert manager.output_registry.list() == ["dummy_output"]

    manager._unregister_plugin_components(plugin)
    assert manager.source_registry.count() == 0
    assert manager.encoder_registry.count() == 0
    assert manager.output_registry.count() == 0


def test_components_without_capability_are_not_registered(manager):
    plugin = CapablePlugin(PluginCapabilities(encoders=True))
    manager._register_plugin_components(plugin)
    assert manager.source_registry.count() == 0
    assert manager.encoder_registry.list() == ["dummy_encoder"]
    assert manager.output_registry.count() == 0