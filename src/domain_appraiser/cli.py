"""
Command-line interface for the domain appraiser.

This module provides the main CLI entry point with commands for:
- appraise: Run every report kind for a domain and export the HTML report
- config: Configuration management

Settings are read from a JSON configuration file, then overridden by
environment variables (a local .env file is loaded through python-dotenv),
then by command line flags.
"""

import argparse
import asyncio
import dataclasses
import json
import os
import random
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .aggregator import ReportAggregator
from .audit_logger import OUTPUT_FORMATS, AuditLogger
from .config import (
    ExportConfig,
    GenerativeServiceConfig,
    LoggingConfig,
    SystemConfig,
)
from .enums import ConfigErrorCode, LogLevel, ReportKind, ReportState
from .exceptions import ConfigurationError, ValidationError
from .export import ExportSynthesizer
from .generative_client import GenerativeClient
from .models import ReportSession
from .report_service import ReportService
from .scoring import ScoringEngine


DEFAULT_CONFIG_PATH = Path.home() / ".domain_appraiser" / "config.json"

ENV_PREFIX = "DOMAIN_APPRAISER_"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def create_default_config(
    simulation_mode: bool = False,
    random_seed: Optional[int] = None,
) -> SystemConfig:
    """
    Create a default system configuration.

    Args:
        simulation_mode: Enable simulation mode (no real network requests)
        random_seed: Seed for reproducible scores and fallback data

    Returns:
        SystemConfig with default settings
    """
    return SystemConfig(
        generative=GenerativeServiceConfig(),
        logging=LoggingConfig(level="info", output_format="text"),
        export=ExportConfig(),
        simulation_mode=simulation_mode,
        random_seed=random_seed,
    )


def validate_config(config: SystemConfig) -> None:
    """
    Check configuration values that the dataclasses cannot enforce.

    Raises:
        ConfigurationError: On the first invalid value
    """
    problems = []
    if config.logging.output_format not in OUTPUT_FORMATS:
        problems.append(f"logging.output_format must be one of {', '.join(OUTPUT_FORMATS)}")
    if config.logging.level not in {level.value for level in LogLevel}:
        problems.append(f"logging.level is not a known level: {config.logging.level}")
    if config.generative.timeout_seconds <= 0:
        problems.append("generative.timeout_seconds must be positive")
    if config.generative.max_tokens <= 0:
        problems.append("generative.max_tokens must be positive")
    if not config.generative.base_url.startswith(("https://", "http://")):
        problems.append("generative.base_url must be an http(s) URL")

    if problems:
        raise ConfigurationError(
            code=ConfigErrorCode.INVALID_VALUE.value,
            message=problems[0],
            details={"problems": problems},
        )


def load_config_from_file(config_path: Path) -> SystemConfig:
    """
    Load configuration from a JSON file.

    Missing keys take their default values.

    Args:
        config_path: Path to the configuration file

    Returns:
        The validated SystemConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            code=ConfigErrorCode.FILE_NOT_FOUND.value,
            message=f"No configuration found at: {config_path}",
            details={"path": str(config_path)},
        )
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            code=ConfigErrorCode.INVALID_JSON.value,
            message=f"Configuration is not valid JSON: {e}",
            details={"path": str(config_path)},
        )

    try:
        defaults = GenerativeServiceConfig()
        generative_data = data.get("generative", {})
        generative = GenerativeServiceConfig(
            base_url=generative_data.get("base_url", defaults.base_url),
            api_key=generative_data.get("api_key", defaults.api_key),
            text_model=generative_data.get("text_model", defaults.text_model),
            image_model=generative_data.get("image_model", defaults.image_model),
            timeout_seconds=float(generative_data.get("timeout_seconds", defaults.timeout_seconds)),
            temperature=float(generative_data.get("temperature", defaults.temperature)),
            max_tokens=int(generative_data.get("max_tokens", defaults.max_tokens)),
            image_size=generative_data.get("image_size", defaults.image_size),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        export_defaults = ExportConfig()
        export_data = data.get("export", {})
        export = ExportConfig(
            report_filename=export_data.get("report_filename", export_defaults.report_filename),
            template_filename=export_data.get("template_filename", export_defaults.template_filename),
            generator_name=export_data.get("generator_name", export_defaults.generator_name),
        )

        seed = data.get("random_seed")
        config = SystemConfig(
            generative=generative,
            logging=logging_config,
            export=export,
            simulation_mode=bool(data.get("simulation_mode", False)),
            random_seed=int(seed) if seed is not None else None,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code=ConfigErrorCode.INVALID_VALUE.value,
            message=f"Invalid configuration value: {e}",
            details={"path": str(config_path)},
        )

    validate_config(config)
    return config


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: SystemConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(dataclasses.asdict(config), f, indent=2, ensure_ascii=False)
        return True
    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def apply_env_overrides(
    config: SystemConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> SystemConfig:
    """
    Override configuration values from DOMAIN_APPRAISER_* variables.

    When no mapping is given, a .env file in the working directory is loaded
    first and the process environment is used.

    Raises:
        ConfigurationError: If a variable has an unusable value
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    def get(name: str) -> Optional[str]:
        value = environ.get(ENV_PREFIX + name)
        return value if value else None

    generative_changes = {}
    for name, attribute in (
        ("API_KEY", "api_key"),
        ("BASE_URL", "base_url"),
        ("TEXT_MODEL", "text_model"),
        ("IMAGE_MODEL", "image_model"),
    ):
        value = get(name)
        if value is not None:
            generative_changes[attribute] = value

    changes = {}
    if generative_changes:
        changes["generative"] = dataclasses.replace(config.generative, **generative_changes)

    simulation = get("SIMULATION")
    if simulation is not None:
        changes["simulation_mode"] = simulation.strip().lower() in TRUE_VALUES

    seed = get("SEED")
    if seed is not None:
        try:
            changes["random_seed"] = int(seed)
        except ValueError:
            raise ConfigurationError(
                code=ConfigErrorCode.INVALID_VALUE.value,
                message=f"{ENV_PREFIX}SEED must be an integer, got {seed!r}",
            )

    return dataclasses.replace(config, **changes) if changes else config


async def appraise_domain(
    domain: str,
    config: SystemConfig,
    kinds: Optional[list[ReportKind]] = None,
    output_dir: Optional[Path] = None,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run the requested report kinds for a domain and export the result.

    Args:
        domain: Domain to appraise
        config: System configuration
        kinds: Report kinds to run (all by default)
        output_dir: Directory for the HTML artifacts (None to skip writing)
        as_json: Print results as JSON instead of a text summary
        verbose: Enable debug logging

    Returns:
        Exit code (0 if the basic report loaded, 1 if not, 2 for a bad domain)
    """
    logger = AuditLogger(
        output_format=config.logging.output_format,
        min_level=LogLevel.DEBUG if verbose else config.logging.level,
    )

    if not config.simulation_mode and not config.generative.api_key:
        print(
            f"Error: no API key configured. Set {ENV_PREFIX}API_KEY or use --dry-run.",
            file=sys.stderr,
        )
        return 1

    if config.simulation_mode and not as_json:
        print("Simulation mode: no requests are sent to the generative service")

    engine = ScoringEngine(random.Random(config.random_seed))
    session = ReportSession()

    async with GenerativeClient(
        config.generative,
        simulation_mode=config.simulation_mode,
        logger=logger,
    ) as client:
        service = ReportService(client, engine=engine, logger=logger)
        aggregator = ReportAggregator(service, logger=logger)
        try:
            result = await aggregator.analyze(session, domain, kinds)
        except ValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 2

    if as_json:
        print(json.dumps(_session_to_dict(session), indent=2, ensure_ascii=False))
    else:
        print(f"Appraisal of {result.domain.full}")
        for kind, cell in result.cells.items():
            if cell.state == ReportState.LOADED:
                source = cell.result.source.value
                print(f"  {kind.value:<10} loaded ({source})")
            else:
                print(f"  {kind.value:<10} {cell.state.value}: {cell.error or ''}".rstrip())
        basic = session.cell(ReportKind.BASIC).result
        if basic is not None:
            for label, value in basic.metrics.items():
                print(f"    {label}: {value}")

    if not aggregator.can_export(session):
        print("Basic report unavailable; nothing exported.", file=sys.stderr)
        return 1

    if output_dir is not None:
        synthesizer = ExportSynthesizer(config.export, logger=logger)
        documents = [
            synthesizer.synthesize(session),
            synthesizer.render_landing_template(session),
        ]
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for document in documents:
                path = output_dir / document.filename
                path.write_text(document.content, encoding="utf-8")
                if not as_json:
                    print(f"Written: {path}")
        except OSError as e:
            print(f"Error writing export: {e}", file=sys.stderr)
            return 1

    return 0


def _session_to_dict(session: ReportSession) -> dict:
    reports = {}
    for kind, cell in session.cells.items():
        entry = {"state": cell.state.value}
        if cell.result is not None:
            entry["source"] = cell.result.source.value
            entry["result"] = cell.result.to_dict()
        if cell.error:
            entry["error"] = cell.error
        reports[kind.value] = entry
    return {
        "domain": session.domain.full if session.domain else None,
        "reports": reports,
    }


def _resolve_config(args: argparse.Namespace) -> SystemConfig:
    if args.config:
        config = load_config_from_file(Path(args.config))
    else:
        config = create_default_config()

    config = apply_env_overrides(config)

    if args.dry_run:
        config = dataclasses.replace(config, simulation_mode=True)
    if args.seed is not None:
        config = dataclasses.replace(config, random_seed=args.seed)
    return config


def cmd_appraise(args: argparse.Namespace) -> int:
    """Handle the 'appraise' command."""
    try:
        config = _resolve_config(args)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    kinds = [ReportKind(value) for value in args.kinds] if args.kinds else None
    output_dir = None if args.no_export else Path(args.output_dir)

    return asyncio.run(appraise_domain(
        domain=args.domain,
        config=config,
        kinds=kinds,
        output_dir=output_dir,
        as_json=args.json,
        verbose=args.verbose,
    ))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        try:
            config = load_config_from_file(config_path)
        except ConfigurationError as e:
            print(e.message)
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Service: {config.generative.base_url}")
        print(f"  API key: {'set' if config.generative.api_key else 'not set'}")
        print(f"  Text model: {config.generative.text_model}")
        print(f"  Image model: {config.generative.image_model}")
        print(f"  Simulation mode: {config.simulation_mode}")
        print(f"  Random seed: {config.random_seed}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Report file: {config.export.report_filename}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        if save_config_to_file(create_default_config(), config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        try:
            load_config_from_file(config_path)
        except ConfigurationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-appraiser",
        description="Domain name valuation and report export",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'appraise' command
    appraise_parser = subparsers.add_parser(
        "appraise",
        help="Appraise a domain and export the report",
    )
    appraise_parser.add_argument(
        "domain",
        help="Domain to appraise (e.g., example.com)",
    )
    appraise_parser.add_argument(
        "--kinds", "-k",
        nargs="+",
        choices=[kind.value for kind in ReportKind],
        help="Report kinds to run (default: all)",
    )
    appraise_parser.add_argument(
        "--output-dir", "-o",
        default=".",
        help="Directory for the exported HTML files (default: current directory)",
    )
    appraise_parser.add_argument(
        "--no-export",
        action="store_true",
        help="Do not write HTML files",
    )
    appraise_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    appraise_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no requests to the generative service",
    )
    appraise_parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible scores",
    )
    appraise_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    appraise_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    appraise_parser.set_defaults(func=cmd_appraise)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
