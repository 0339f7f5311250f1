"""Command line entry point.

Subcommands:
    discover    Capture the launch screen and write element_discovery.json
    inspect     Shallow exploration, writes deep_inspection.json and test cases
    generate    Generate a pytest suite from deep_inspection.json
    run-flow    Run the production data flow (or a JSON flow definition)
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Optional

from .automation.flow_runner import PRODUCTION_DATA_FLOW, load_flow, run_flow
from .automation.suite_generator import SuiteGenerator, build_test_cases
from .core.config import Config, config
from .core.explorer import discover_screen, inspect_app
from .core.logger import log
from .core.models import ExplorationRun
from .core.session import SessionError
from .reporting.report_writer import ReportWriter
from .utils.file_utils import load_json


def _apply_overrides(settings: Config, args: argparse.Namespace) -> Config:
    overrides = {
        "max_per_kind": args.max_per_kind,
        "settle_interval": args.settle,
        "results_dir": args.results_dir,
        "app_path": args.app,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    settings = settings.model_copy(update=updates)
    settings.validate_config()
    return settings


def _cmd_discover(settings: Config, args: argparse.Namespace) -> int:
    snapshot, app_info = asyncio.run(discover_screen(settings))
    ReportWriter(settings.results_dir, settings.screenshot_dir).write_discovery(snapshot, app_info)
    for kind, descriptors in snapshot.elements_by_kind.items():
        log.info(f"{kind.value:<11} {len(descriptors)}")
    return 0


def _cmd_inspect(settings: Config, args: argparse.Namespace) -> int:
    run, app_info = asyncio.run(inspect_app(settings, args.max_clicks))
    test_cases = build_test_cases(run)
    ReportWriter(settings.results_dir, settings.screenshot_dir).write_inspection(run, test_cases, app_info)
    summary = run.summary()
    log.info(f"Screens: {summary['totalScreens']}, clicks: {summary['totalClicks']}, test cases: {len(test_cases)}")
    if run.session_error:
        log.error(f"Inspection ended early: {run.session_error}")
        return 1
    return 0


def _cmd_generate(settings: Config, args: argparse.Namespace) -> int:
    source = args.input or os.path.join(settings.results_dir, "deep_inspection.json")
    data = load_json(source)
    if not data:
        log.error(f"No inspection data found at {source}. Run 'droidprobe inspect' first.")
        return 1
    run = ExplorationRun.from_dict(data)
    package = (data.get("appInfo") or {}).get("package", "")
    written = SuiteGenerator(args.output or settings.generated_tests_dir, settings).generate(run, package)
    for path in written:
        log.info(f"Generated {path}")
    return 0


def _cmd_run_flow(settings: Config, args: argparse.Namespace) -> int:
    flow = load_flow(args.flow) if args.flow else PRODUCTION_DATA_FLOW
    results = asyncio.run(run_flow(settings, flow))
    ReportWriter(settings.results_dir, settings.screenshot_dir).write_flow_results(results)
    summary = results.summary()
    log.info(f"{summary['passed']}/{summary['total']} steps passed ({summary['successRate']}%)")
    return 0 if results.all_passed else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="droidprobe", description="Android UI discovery over Appium")
    parser.add_argument("--app", help="APK path (overrides APP_PATH)")
    parser.add_argument("--max-per-kind", type=int, help="Nodes inspected per element kind")
    parser.add_argument("--settle", type=float, help="Settle interval in seconds after click/back")
    parser.add_argument("--results-dir", help="Directory for JSON/HTML results")
    parser.add_argument("--log-level", help="Console log level")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("discover", help="Discover elements on the launch screen")

    inspect_parser = sub.add_parser("inspect", help="Shallow exploration of the launch screen")
    inspect_parser.add_argument("--max-clicks", type=int, help="Clickable elements to try (default: config)")

    generate_parser = sub.add_parser("generate", help="Generate a pytest suite from inspection data")
    generate_parser.add_argument("--input", help="Inspection JSON (default: <results-dir>/deep_inspection.json)")
    generate_parser.add_argument("--output", help="Output directory (default: config)")

    flow_parser = sub.add_parser("run-flow", help="Run the scripted interaction flow")
    flow_parser.add_argument("--flow", help="JSON flow definition (default: production data flow)")
    return parser


_COMMANDS = {
    "discover": _cmd_discover,
    "inspect": _cmd_inspect,
    "generate": _cmd_generate,
    "run-flow": _cmd_run_flow,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main function; returns the process exit status."""
    args = build_parser().parse_args(argv)
    if args.log_level:
        log.set_level(args.log_level)

    try:
        settings = _apply_overrides(config, args)
    except ValueError as e:
        log.error(f"Invalid configuration: {e}")
        return 2

    try:
        return _COMMANDS[args.command](settings, args)
    except SessionError as e:
        log.error(f"Automation session failed: {e}")
        log.info("Make sure the Appium server is running and a device is connected (adb devices)")
        return 1
    except ValueError as e:
        log.error(f"Invalid input: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
