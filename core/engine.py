import logging
from typing import Any, Callable, Dict, Iterable, Optional

from core.dependency_analyzer import DependencyAnalyzer
from core.framework_registry import FrameworkRegistry, PatternLike, default_registry
from core.script_renderer import ScriptRenderer
from models.findings import DependencyFindings
from models.import_map import ImportMap

logger = logging.getLogger(__name__)


class Engine:
    def __init__(self, registry: Optional[FrameworkRegistry] = None, analyzer: Optional[DependencyAnalyzer] = None):
        """Bind the rendering entry points to a framework registry.

        Args:
            registry: Registry used for framework dispatch; defaults to the
                process-wide registry holding the built-in frameworks
            analyzer: Dependency analyzer; defaults to one using the bundled rules
        """
        self.registry = registry if registry is not None else default_registry()
        self.analyzer = analyzer or DependencyAnalyzer()
        logger.debug(f"Initialized engine with frameworks: {', '.join(self.registry.supported_frameworks())}")

    def analyze_dependencies(self, script: str) -> DependencyFindings:
        return self.analyzer.analyze(script)

    def render_script(self, import_map: ImportMap, script: str) -> str:
        return ScriptRenderer(import_map, script, analyzer=self.analyzer).render()

    def render_script_with_analysis(self, import_map: ImportMap, script: str) -> str:
        return ScriptRenderer(import_map, script, analyzer=self.analyzer).render_with_analysis()

    def render_framework_script(
        self,
        framework_id: str,
        import_map: ImportMap,
        script: str,
        instance_name: Optional[str] = None,
    ) -> str:
        renderer = self.registry.create(framework_id, import_map, script, instance_name=instance_name)
        return renderer.render()

    def render_framework_script_with_analysis(
        self,
        framework_id: str,
        import_map: ImportMap,
        script: str,
        instance_name: Optional[str] = None,
    ) -> str:
        renderer = self.registry.create(framework_id, import_map, script, instance_name=instance_name)
        return renderer.render_with_analysis()

    def register_framework(
        self,
        id: str,
        factory: Callable[..., Any],
        patterns: Optional[Iterable[PatternLike]] = None,
        core_module: str = "",
        description: str = "",
    ) -> None:
        self.registry.register(id, factory, patterns, core_module, description)

    def get_framework_capabilities(self) -> Dict[str, Any]:
        return {
            "supported_frameworks": self.registry.supported_frameworks(),
            "registry_summary": self.registry.summary(),
        }


_default_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _default_engine
    if _default_engine is None:
        _default_engine = Engine()
    return _default_engine


def analyze_dependencies(script: str) -> DependencyFindings:
    return get_engine().analyze_dependencies(script)


def render_script(import_map: ImportMap, script: str) -> str:
    return get_engine().render_script(import_map, script)


def render_script_with_analysis(import_map: ImportMap, script: str) -> str:
    return get_engine().render_script_with_analysis(import_map, script)


def render_framework_script(
    framework_id: str, import_map: ImportMap, script: str, instance_name: Optional[str] = None
) -> str:
    return get_engine().render_framework_script(framework_id, import_map, script, instance_name)


def render_framework_script_with_analysis(
    framework_id: str, import_map: ImportMap, script: str, instance_name: Optional[str] = None
) -> str:
    return get_engine().render_framework_script_with_analysis(framework_id, import_map, script, instance_name)


def register_framework(
    id: str,
    factory: Callable[..., Any],
    patterns: Optional[Iterable[PatternLike]] = None,
    core_module: str = "",
    description: str = "",
) -> None:
    get_engine().register_framework(id, factory, patterns, core_module, description)


def get_framework_capabilities() -> Dict[str, Any]:
    return get_engine().get_framework_capabilities()
