from core import engine as engine_module
from core.engine import Engine
from core.framework_registry import FrameworkRegistry
from core.script_renderer import ScriptRenderer
from models.import_map import ImportMap


def test_analyze_dependencies():
    findings = Engine().analyze_dependencies("$('.x').fadeIn(); moment().format('x');")
    assert "jquery" in findings.external
    assert "moment" in findings.external


def test_render_script_empty_input(empty_map):
    assert Engine().render_script(empty_map, "") == ""


def test_render_script_is_idempotent(controller_map):
    engine = Engine()
    assert engine.render_script(controller_map, "init();") == engine.render_script(controller_map, "init();")


def test_unknown_framework_falls_back_to_plain_render(controller_map):
    engine = Engine()
    assert engine.render_framework_script("unknown", controller_map, "console.log(1)") == engine.render_script(
        controller_map, "console.log(1)"
    )


def test_render_framework_script_with_instance_name(controller_map):
    result = Engine().render_framework_script("stimulus", controller_map, "", instance_name="app")
    assert "const app = Application.start();" in result
    assert 'app.register("modal", ModalController);' in result


def test_dedup_through_framework_render():
    import_map = ImportMap()
    import_map.add_import("FooController", "./foo_controller.js")
    block = 'import FooController from "FooController";\nStimulus.register("foo", FooController);'

    result = Engine().render_framework_script("stimulus", import_map, block)

    assert result.count('import FooController from "FooController";') == 1
    assert result.count('register("foo", FooController)') == 1


def test_render_script_with_analysis(empty_map):
    result = Engine().render_script_with_analysis(empty_map, "axios.get('/api');")
    assert '// WARNING: Add to import map: import_map.add_import("axios", "https://cdn.jsdelivr.net/npm/axios@1.5.0/+esm")' in result


def test_register_framework_on_injected_registry(empty_map):
    registry = FrameworkRegistry.with_builtins()
    engine = Engine(registry=registry)

    engine.register_framework("plain", ScriptRenderer, patterns=[r"\.plain$"], description="No bootstrap")
    capabilities = engine.get_framework_capabilities()

    assert capabilities["supported_frameworks"] == ["stimulus", "plain"]
    assert capabilities["registry_summary"]["total_patterns"] == 2
    assert capabilities["registry_summary"]["details"]["plain"]["description"] == "No bootstrap"
    assert "plain" not in Engine(registry=FrameworkRegistry.with_builtins()).registry


def test_module_level_functions(monkeypatch, empty_map):
    monkeypatch.setattr(engine_module, "_default_engine", Engine(registry=FrameworkRegistry.with_builtins()))

    assert engine_module.render_script(empty_map, "") == ""
    assert "jquery" in engine_module.analyze_dependencies("$('#a')").external
    assert engine_module.render_framework_script("unknown", empty_map, "a();") == engine_module.render_script(
        empty_map, "a();"
    )
    assert "WARNING" in engine_module.render_script_with_analysis(empty_map, "new Chart(ctx, {});")

    engine_module.register_framework("extra", ScriptRenderer, patterns=[r"^extra"])
    assert engine_module.get_framework_capabilities()["supported_frameworks"] == ["stimulus", "extra"]


def test_render_framework_script_with_analysis(controller_map):
    result = Engine().render_framework_script_with_analysis("stimulus", controller_map, "moment().format('x');")

    assert result.index("// WARNING:") < result.index("const application = Application.start();")
    assert "moment" in result
    assert 'application.register("hello", HelloController);' in result
