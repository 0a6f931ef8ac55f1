"""Framework registration and renderer dispatch."""
import importlib
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Union

from core.script_renderer import ScriptRenderer
from models.framework import FrameworkRegistration
from models.import_map import ImportMap

logger = logging.getLogger(__name__)

PatternLike = Union[str, Pattern[str]]

# Modules whose import registers built-in frameworks through @builtin_framework
BUILTIN_RENDERER_MODULES = ["renderers.stimulus"]

_builtin_registrations: List[FrameworkRegistration] = []
_default_registry: Optional["FrameworkRegistry"] = None


def _compile_patterns(patterns: Optional[Iterable[PatternLike]]) -> List[Pattern[str]]:
    return [p if isinstance(p, re.Pattern) else re.compile(p) for p in (patterns or [])]


def builtin_framework(
    id: str,
    patterns: Optional[Iterable[PatternLike]] = None,
    core_module: str = "",
    description: str = "",
):
    """Decorator declaring a renderer class as a bundled framework.

    Example:
        @builtin_framework("stimulus", patterns=[r"Controller$"], core_module="@hotwired/stimulus")
        class StimulusRenderer(ScriptRenderer):
            ...
    """
    def decorator(renderer_class):
        _builtin_registrations.append(
            FrameworkRegistration(
                id=id,
                factory=renderer_class,
                patterns=_compile_patterns(patterns),
                core_module=core_module,
                description=description,
            )
        )
        logger.debug(f"Declared built-in framework: {id} -> {renderer_class.__name__}")
        return renderer_class
    return decorator


class FrameworkRegistry:
    """Maps framework ids to renderer factories and import-name patterns.

    Registrations are append/override only: registering an existing id replaces
    it in place, so detection order stays the order ids were first seen.
    """

    def __init__(self):
        self._registrations: Dict[str, FrameworkRegistration] = {}
        self._order: List[str] = []

    @classmethod
    def with_builtins(cls) -> "FrameworkRegistry":
        """Create a registry pre-populated with the bundled frameworks."""
        for module_name in BUILTIN_RENDERER_MODULES:
            importlib.import_module(module_name)

        registry = cls()
        for registration in _builtin_registrations:
            registry.add(registration)
        return registry

    def register(
        self,
        id: str,
        factory: Callable[..., Any],
        patterns: Optional[Iterable[PatternLike]] = None,
        core_module: str = "",
        description: str = "",
    ) -> FrameworkRegistration:
        """Register a framework renderer; the last registration for an id wins.

        Args:
            id: Framework identifier (e.g., "stimulus")
            factory: Callable taking ``(import_map, block, instance_name=None)``
                and returning a renderer
            patterns: Regexes matched against import names by ``detect``
            core_module: Import name of the framework's runtime
            description: Human-readable summary

        Raises:
            ValueError: If ``id`` is empty or ``factory`` is not callable.
        """
        if not id:
            raise ValueError("Framework id must not be empty")
        if not callable(factory):
            raise ValueError(f"Factory for framework '{id}' must be callable, got {factory!r}")

        return self.add(
            FrameworkRegistration(
                id=id,
                factory=factory,
                patterns=_compile_patterns(patterns),
                core_module=core_module or "",
                description=description or "",
            )
        )

    def add(self, registration: FrameworkRegistration) -> FrameworkRegistration:
        if registration.id in self._registrations:
            logger.warning(f"Framework '{registration.id}' already registered, overwriting")
        else:
            self._order.append(registration.id)
        self._registrations[registration.id] = registration
        logger.debug(f"Registered framework: {registration.id} ({len(registration.patterns)} patterns)")
        return registration

    def detect(self, import_name: str) -> Optional[str]:
        """Return the first framework, in registration order, whose patterns match ``import_name``."""
        for framework_id in self._order:
            if self._registrations[framework_id].matches(import_name):
                return framework_id
        return None

    def create(self, framework_id: str, import_map: ImportMap, block: str = "", instance_name: Optional[str] = None):
        """Instantiate the renderer for ``framework_id``.

        Unknown ids fall back to the plain ``ScriptRenderer``.
        """
        registration = self._registrations.get(framework_id)
        if registration is None:
            logger.debug(f"No renderer registered for '{framework_id}', using ScriptRenderer")
            return ScriptRenderer(import_map, block)

        if instance_name is None:
            return registration.factory(import_map, block)
        return registration.factory(import_map, block, instance_name=instance_name)

    def supported_frameworks(self) -> List[str]:
        return self._order.copy()

    def get_registration(self, framework_id: str) -> Optional[FrameworkRegistration]:
        return self._registrations.get(framework_id)

    def get_metadata(self, framework_id: str) -> Optional[Dict[str, str]]:
        registration = self._registrations.get(framework_id)
        return registration.metadata() if registration else None

    def core_module(self, framework_id: str) -> Optional[str]:
        registration = self._registrations.get(framework_id)
        if registration is None or not registration.core_module:
            return None
        return registration.core_module

    def summary(self) -> Dict[str, Any]:
        return {
            "frameworks": self.supported_frameworks(),
            "total_patterns": sum(len(r.patterns) for r in self._registrations.values()),
            "details": {framework_id: self._registrations[framework_id].metadata() for framework_id in self._order},
        }

    def __contains__(self, framework_id: object) -> bool:
        return framework_id in self._registrations

    def __len__(self) -> int:
        return len(self._order)


def default_registry() -> FrameworkRegistry:
    """Process-wide registry with the built-ins, created on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FrameworkRegistry.with_builtins()
    return _default_registry
