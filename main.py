import argparse
import json
import logging
import sys
from dataclasses import asdict

from core.engine import Engine
from models.import_map import ImportMap


def _read_script(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _load_import_map(path: str) -> ImportMap:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("Import map file must contain a JSON object")
    return ImportMap.from_dict(data)


def _analyze(engine: Engine, args, logger) -> int:
    script = _read_script(args.script)
    logger.info(f"Analyzing {len(script)} characters of JavaScript")
    findings = engine.analyze_dependencies(script)
    result = asdict(findings)
    if args.complexity:
        result["complexity"] = asdict(engine.analyzer.analyze_complexity(script))
    print(json.dumps(result, indent=2))
    return 0


def _render(engine: Engine, args, logger) -> int:
    script = _read_script(args.script)
    import_map = _load_import_map(args.import_map) if args.import_map else ImportMap()
    logger.info(f"Rendering with {len(import_map)} imports")

    if args.framework:
        if args.framework not in engine.registry:
            logger.warning(f"Unknown framework '{args.framework}', rendering a plain module script")
        if args.with_analysis:
            output = engine.render_framework_script_with_analysis(
                args.framework, import_map, script, args.application_name
            )
        else:
            output = engine.render_framework_script(args.framework, import_map, script, args.application_name)
    elif args.with_analysis:
        output = engine.render_script_with_analysis(import_map, script)
    else:
        output = engine.render_script(import_map, script)

    print(output)
    return 0


def _frameworks(engine: Engine, args, logger) -> int:
    print(json.dumps(engine.get_framework_capabilities(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate module script tags from an import map and inline JavaScript")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Report the dependencies a script refers to")
    analyze.add_argument("script", help="JavaScript file to analyze ('-' for stdin)")
    analyze.add_argument("--complexity", action="store_true", help="Include code complexity metrics")
    analyze.set_defaults(handler=_analyze)

    render = subparsers.add_parser("render", help="Render a <script type=\"module\"> tag")
    render.add_argument("script", help="JavaScript file to embed ('-' for stdin)")
    render.add_argument("--import-map", type=str, help="Path to a JSON file describing the import map")
    render.add_argument("--framework", type=str, help="Framework renderer to use (e.g., stimulus)")
    render.add_argument("--application-name", type=str, default=None, help="Name of the framework application instance")
    render.add_argument("--with-analysis", action="store_true", help="Add warning comments for missing dependencies")
    render.set_defaults(handler=_render)

    frameworks = subparsers.add_parser("frameworks", help="List registered frameworks")
    frameworks.set_defaults(handler=_frameworks)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    engine = Engine()
    try:
        return args.handler(engine, args, logger)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in import map file: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
