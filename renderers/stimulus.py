"""Stimulus support: controller discovery, bootstrap and registration emission."""
import logging
import re
from typing import List, Optional, Set

from core.dependency_analyzer import DependencyAnalyzer
from core.framework_registry import builtin_framework
from core.script_renderer import IDENTIFIER_PATTERN, ScriptRenderer, import_statement
from models.import_map import CONTROLLER_NAME_PATTERN, ImportMap, ImportMapEntry

logger = logging.getLogger(__name__)

CORE_MODULE = "@hotwired/stimulus"
CONTROLLER_SUFFIX = "Controller"
DEFAULT_APPLICATION_NAME = "application"

_IDENT = r"[A-Za-z_$][\w$]*"

# import Foo from "x" (discovery scans anywhere in the block)
DEFAULT_IMPORT_PATTERN = re.compile(rf"import\s+({_IDENT})\s+from\s+[\"']([^\"']+)[\"']")

# Whole-line forms the filter is allowed to drop; anything else is kept verbatim
IMPORT_LINE_PATTERN = re.compile(
    rf"\s*import\s+(?:(?P<binding>{_IDENT})\s*(?:,\s*[^;]*?)?|[^;\"']*?)\s+from\s+[\"'](?P<specifier>[^\"']+)[\"']\s*;?\s*"
)
SIDE_EFFECT_IMPORT_LINE_PATTERN = re.compile(r"\s*import\s+[\"'](?P<specifier>[^\"']+)[\"']\s*;?\s*")

# import { Application, Controller } from "@hotwired/stimulus"
CORE_NAMED_IMPORT_LINE_PATTERN = re.compile(
    rf"\s*import\s*\{{(?P<names>[^}}]*)\}}\s*from\s*[\"']{re.escape(CORE_MODULE)}[\"']\s*;?\s*"
)
CORE_IMPORT_NAMES = (CORE_MODULE, "stimulus")


def controller_identifier(class_name: str) -> str:
    """Convert a controller class name to its Stimulus identifier.

    ``HelloController`` -> ``hello``, ``UserProfileController`` -> ``user-profile``.
    Every capital gets its own hyphen, so acronyms split per letter
    (``HTMLController`` -> ``h-t-m-l``).
    """
    base = class_name[: -len(CONTROLLER_SUFFIX)] if class_name.endswith(CONTROLLER_SUFFIX) else class_name
    return re.sub(r"([A-Z])", r"-\1", base).lower().lstrip("-")


def looks_like_controller(name: str) -> bool:
    return CONTROLLER_NAME_PATTERN.match(name) is not None


def is_core_module_entry(entry: ImportMapEntry) -> bool:
    """True for map entries that load the Stimulus runtime itself rather than a controller."""
    if looks_like_controller(entry.name):
        return False
    return entry.name in CORE_IMPORT_NAMES or CORE_MODULE in entry.location or entry.framework == "stimulus"


@builtin_framework(
    "stimulus",
    patterns=[CONTROLLER_NAME_PATTERN],
    core_module=CORE_MODULE,
    description="Hotwired Stimulus framework for HTML-first JavaScript",
)
class StimulusRenderer(ScriptRenderer):
    """Renderer that boots a Stimulus application and registers its controllers.

    Controllers come from import-map names ending in ``Controller`` and from
    the block itself (controller imports and ``Stimulus.register`` /
    ``<application>.register`` calls). Import, registration and
    ``Application.start()`` lines the renderer regenerates are removed from
    the user block; lines in any other shape are left alone even if that
    produces a visible duplicate. Named bindings the block imports from the
    Stimulus package (``Controller``, ``Application as App``) are merged into
    the generated core import.
    """

    def __init__(
        self,
        import_map: ImportMap,
        block: str = "",
        instance_name: Optional[str] = None,
        enable_dependency_analysis: bool = True,
        analyzer: Optional[DependencyAnalyzer] = None,
    ):
        super().__init__(import_map, block, enable_dependency_analysis, analyzer)
        self.application_name = instance_name or DEFAULT_APPLICATION_NAME
        if not IDENTIFIER_PATTERN.match(self.application_name):
            raise ValueError(f"Application name must be a JavaScript identifier, got {self.application_name!r}")

        self.registration_pattern = re.compile(
            rf"\b(?:Stimulus|{re.escape(self.application_name)})\.register\s*\(\s*[\"'][^\"']+[\"']\s*,\s*({_IDENT})\s*\)"
        )
        # Application.start(); / application.start(); / const application = Application.start();
        self.bootstrap_pattern = re.compile(
            rf"\s*(?:(?:const|let|var)\s+{re.escape(self.application_name)}\s*=\s*Application"
            rf"|Application|{re.escape(self.application_name)})\.start\s*\(\s*\)\s*;?\s*"
        )
        self.map_controllers = [entry.name for entry in import_map if looks_like_controller(entry.name)]
        self.block_controllers = self._discover_block_controllers()
        self.controllers = self.map_controllers + self.block_controllers
        self.reimported_block_controllers = self._find_reimported_block_controllers()
        self.core_bindings = self._find_core_bindings()
        logger.debug(
            f"Discovered {len(self.controllers)} Stimulus controllers "
            f"({len(self.map_controllers)} from import map, {len(self.block_controllers)} from script)"
        )

    def _state_key(self) -> str:
        return self.application_name

    def _import_key(self) -> str:
        return self._key(self.import_map.content_key(), self.block)

    def _process_key(self) -> str:
        return self._key(self.import_map.content_key(), self.block)

    # Discovery

    def _discover_block_controllers(self) -> List[str]:
        found = []
        for match in self.registration_pattern.finditer(self.block):
            found.append((match.start(), match.group(1)))
        for match in DEFAULT_IMPORT_PATTERN.finditer(self.block):
            if looks_like_controller(match.group(1)):
                found.append((match.start(), match.group(1)))

        controllers: List[str] = []
        for _, name in sorted(found):
            if name in self.map_controllers or name in controllers:
                continue
            if not controller_identifier(name):
                # Stimulus.register("x", Controller) has no identifier to register under
                logger.debug(f"Ignoring registration of '{name}': no Stimulus identifier")
                continue
            controllers.append(name)
        return controllers

    def _find_reimported_block_controllers(self) -> List[str]:
        """Block controllers whose own import line gets dropped and must be regenerated."""
        reimported = []
        for line in self.block.split("\n"):
            match = IMPORT_LINE_PATTERN.fullmatch(line)
            if not match:
                continue
            binding = match.group("binding")
            if binding in self.block_controllers and match.group("specifier") in self.controllers and binding not in reimported:
                reimported.append(binding)
        return reimported

    def _find_core_bindings(self) -> List[str]:
        """Named imports from the Stimulus package, other than ``Application``, used by the block."""
        bindings: List[str] = []
        for line in self.block.split("\n"):
            match = CORE_NAMED_IMPORT_LINE_PATTERN.fullmatch(line)
            if not match:
                continue
            for name in match.group("names").split(","):
                name = " ".join(name.split())
                if name and name != "Application" and name not in bindings:
                    bindings.append(name)
        return bindings

    def provided_names(self) -> Set[str]:
        provided = super().provided_names()
        provided.update(self.controllers)
        provided.update({"Application", "Stimulus"})
        return provided

    # Filtering

    def process(self, block: str) -> str:
        processed = block.strip()
        if not processed:
            return processed

        reimported = set(self.map_controllers) | set(self.reimported_block_controllers)
        kept = [line for line in processed.split("\n") if not self._is_handled_line(line, reimported)]
        return "\n".join(kept).strip()

    def _is_handled_line(self, line: str, reimported: Set[str]) -> bool:
        match = IMPORT_LINE_PATTERN.fullmatch(line)
        if match:
            if match.group("specifier") == CORE_MODULE:
                # default and namespace imports from the core package are kept as written
                return CORE_NAMED_IMPORT_LINE_PATTERN.fullmatch(line) is not None
            return match.group("specifier") in self.controllers or match.group("binding") in reimported

        match = SIDE_EFFECT_IMPORT_LINE_PATTERN.fullmatch(line)
        if match:
            return match.group("specifier") in self.controllers or match.group("specifier") == CORE_MODULE

        if self.bootstrap_pattern.fullmatch(line):
            return True

        match = self.registration_pattern.fullmatch(line.strip().rstrip(";").strip())
        if match:
            return match.group(1) in self.controllers
        return False

    # Emission

    def _build_import_statements(self) -> str:
        core_names = ", ".join(["Application"] + self.core_bindings)
        statements = [f'import {{ {core_names} }} from "{CORE_MODULE}";']
        statements.extend(import_statement(entry.name) for entry in self.import_map if not is_core_module_entry(entry))
        statements.extend(f'import {name} from "{name}";' for name in self.reimported_block_controllers)
        return "\n".join(statements)

    def generate_body(self) -> str:
        return self._join(
            self.generate_application_setup(),
            self.processed_block(),
            self.generate_controller_registrations(),
        )

    def generate_application_setup(self) -> str:
        return f"const {self.application_name} = Application.start();"

    def generate_controller_registrations(self) -> str:
        return "\n".join(
            f'{self.application_name}.register("{controller_identifier(name)}", {name});'
            for name in self.controllers
        )
