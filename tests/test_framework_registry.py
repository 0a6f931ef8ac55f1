import pytest

from core.framework_registry import FrameworkRegistry, default_registry
from core.script_renderer import ScriptRenderer
from models.import_map import ImportMap
from renderers.stimulus import StimulusRenderer


class AlpineRenderer(ScriptRenderer):
    def __init__(self, import_map, block="", instance_name=None):
        super().__init__(import_map, block)
        self.instance_name = instance_name or "Alpine"

    def generate_body(self):
        return self._join(self.processed_block(), f"{self.instance_name}.start();")


def test_builtins_include_stimulus():
    registry = FrameworkRegistry.with_builtins()
    assert registry.supported_frameworks() == ["stimulus"]
    assert registry.core_module("stimulus") == "@hotwired/stimulus"
    assert registry.get_registration("stimulus").factory is StimulusRenderer


def test_detect_uses_patterns():
    registry = FrameworkRegistry.with_builtins()
    assert registry.detect("HelloController") == "stimulus"
    assert registry.detect("lodash") is None


def test_detect_tries_frameworks_in_registration_order():
    registry = FrameworkRegistry()
    registry.register("first", ScriptRenderer, patterns=[r"Widget$"])
    registry.register("second", ScriptRenderer, patterns=[r"^Fancy"])
    assert registry.detect("FancyWidget") == "first"


def test_isolated_registries_do_not_share_state():
    one = FrameworkRegistry()
    two = FrameworkRegistry()
    one.register("alpine", AlpineRenderer, patterns=[r"^alpine"])
    assert "alpine" in one
    assert "alpine" not in two


def test_register_overwrites_in_place():
    registry = FrameworkRegistry.with_builtins()
    registry.register("alpine", AlpineRenderer, patterns=[r"^alpine"], core_module="alpinejs")
    registry.register("stimulus", AlpineRenderer, patterns=[r"Ctrl$"], core_module="custom-stimulus")

    assert registry.supported_frameworks() == ["stimulus", "alpine"]
    assert registry.detect("HelloController") is None
    assert registry.detect("HelloCtrl") == "stimulus"
    assert registry.core_module("stimulus") == "custom-stimulus"


def test_register_rejects_bad_arguments():
    registry = FrameworkRegistry()
    with pytest.raises(ValueError):
        registry.register("", ScriptRenderer)
    with pytest.raises(ValueError):
        registry.register("vue", "not-a-factory")


def test_create_returns_framework_renderer(controller_map):
    renderer = FrameworkRegistry.with_builtins().create("stimulus", controller_map, "", instance_name="app")
    assert isinstance(renderer, StimulusRenderer)
    assert renderer.application_name == "app"


def test_create_falls_back_for_unknown_framework(empty_map):
    renderer = FrameworkRegistry.with_builtins().create("unknown", empty_map, "console.log(1)", instance_name="x")
    assert type(renderer) is ScriptRenderer
    assert renderer.render() == ScriptRenderer(empty_map, "console.log(1)").render()


def test_create_with_custom_factory():
    registry = FrameworkRegistry()
    registry.register("alpine", AlpineRenderer, patterns=[r"^alpine"], core_module="alpinejs")
    import_map = ImportMap()
    import_map.add_import("alpinejs", "https://cdn.example/alpine.js")

    result = registry.create("alpine", import_map, "console.log(1);").render()

    assert result == (
        '<script type="module">\n'
        'import "alpinejs";\n'
        "\n"
        "console.log(1);\n"
        "\n"
        "Alpine.start();\n"
        "</script>"
    )


def test_summary():
    registry = FrameworkRegistry.with_builtins()
    registry.register("alpine", AlpineRenderer, patterns=[r"^alpine", r"x-data"], core_module="alpinejs", description="Alpine.js")
    summary = registry.summary()

    assert summary["frameworks"] == ["stimulus", "alpine"]
    assert summary["total_patterns"] == 3
    assert summary["details"]["alpine"] == {"core_import": "alpinejs", "description": "Alpine.js"}
    assert summary["details"]["stimulus"]["core_import"] == "@hotwired/stimulus"


def test_default_registry_is_shared():
    assert default_registry() is default_registry()
    assert "stimulus" in default_registry()
