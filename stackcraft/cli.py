"""stackcraft command-line interface.

Usage::

    stackcraft my-app --frontend next --backend hono --database sqlite
    stackcraft my-app --frontend nuxt --api orpc --dry-run
    python -m stackcraft --config stackcraft.json

Flags are merged over an optional JSON configuration file, which is merged
over the built-in defaults.  The merged configuration is validated before
anything is written; a violation prints one message to stderr and exits 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import time
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.markup import escape

from .config import Settings
from .errors import InvalidConfigurationError, StackcraftError
from .models import (
    API,
    ORM,
    Addon,
    Auth,
    Backend,
    Database,
    DatabaseSetup,
    Example,
    Frontend,
    PackageManager,
    ProjectConfig,
    Runtime,
    ServerDeploy,
    WebDeploy,
)
from .scaffolder import Overlay, ProjectGenerator, describe_overlays
from .utils import (
    configure_logging,
    console,
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

# (flag, ProjectConfig field, enum, takes a list)
_OPTION_FLAGS: list[tuple[str, str, type[Enum], bool]] = [
    ("--frontend", "frontend", Frontend, True),
    ("--backend", "backend", Backend, False),
    ("--runtime", "runtime", Runtime, False),
    ("--database", "database", Database, False),
    ("--orm", "orm", ORM, False),
    ("--auth", "auth", Auth, False),
    ("--api", "api", API, False),
    ("--db-setup", "db_setup", DatabaseSetup, False),
    ("--web-deploy", "web_deploy", WebDeploy, False),
    ("--server-deploy", "server_deploy", ServerDeploy, False),
    ("--addons", "addons", Addon, True),
    ("--examples", "examples", Example, True),
    ("--package-manager", "package_manager", PackageManager, False),
]


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stackcraft",
        description="stackcraft -- scaffold a full-stack TypeScript monorepo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stackcraft my-app\n"
            "  stackcraft my-app --frontend next native-nativewind --backend hono\n"
            "  stackcraft my-app --frontend svelte --api orpc --dry-run\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default=None,
        help="Project name and directory (default: my-stack-app)",
    )

    options = parser.add_argument_group("stack options")
    for flag, dest, enum_type, is_list in _OPTION_FLAGS:
        choices = [member.value for member in enum_type]
        options.add_argument(
            flag,
            dest=dest,
            nargs="*" if is_list else None,
            choices=choices,
            default=None,
            metavar=flag.lstrip("-").upper().replace("-", "_"),
            help=f"one of: {', '.join(choices)}",
        )
    options.add_argument("--no-git", dest="git", action="store_false", default=None,
                         help="Record that git should not be initialised")
    options.add_argument("--no-install", dest="install", action="store_false", default=None,
                         help="Record that dependencies should not be installed")

    run = parser.add_argument_group("run options")
    run.add_argument("--config", type=Path, default=None,
                     help="JSON project configuration to start from")
    run.add_argument("--directory", "-d", type=Path, default=None,
                     help="Output directory (default: ./<project-name>)")
    run.add_argument("--yes", "-y", action="store_true",
                     help="Scaffold into a non-empty directory without refusing")
    run.add_argument("--dry-run", action="store_true",
                     help="Validate and list the template overlays without writing")
    run.add_argument("--templates-dir", type=Path, default=None,
                     help="Use a different template tree")
    run.add_argument("--strict-templates", action="store_true", default=None,
                     help="Fail when a resolved template directory is missing")
    run.add_argument("--verbose", "-v", action="store_true", default=None,
                     help="Show debug logging")
    return parser


# ---------------------------------------------------------------------------
# Configuration merging
# ---------------------------------------------------------------------------


def collect_flag_values(args: argparse.Namespace) -> dict[str, Any]:
    """Return only the project options the user passed explicitly."""
    values: dict[str, Any] = {}
    if args.project_name is not None:
        values["project_name"] = args.project_name
    for _flag, dest, _enum, _is_list in _OPTION_FLAGS:
        value = getattr(args, dest)
        if value is not None:
            values[dest] = value
    for dest in ("git", "install"):
        if getattr(args, dest) is not None:
            values[dest] = getattr(args, dest)
    if args.directory is not None:
        values["project_dir"] = args.directory
    return values


def build_project_config(
    flags: dict[str, Any], config_file: Optional[Path] = None
) -> ProjectConfig:
    """Merge *flags* over *config_file* over the defaults.

    Raises:
        pydantic.ValidationError: For unknown option values.
        OSError: If *config_file* cannot be read.
    """
    merged: dict[str, Any] = {}
    if config_file is not None:
        from_file = ProjectConfig.load(config_file)
        merged.update(from_file.model_dump(exclude_unset=True))
    merged.update(flags)
    return ProjectConfig.model_validate(merged)


def build_settings(args: argparse.Namespace) -> Settings:
    """Environment settings, overridden by explicit run flags."""
    settings = Settings.from_env()
    overrides: dict[str, Any] = {}
    if args.templates_dir is not None:
        overrides["templates_dir"] = args.templates_dir
    if args.strict_templates is not None:
        overrides["strict_templates"] = args.strict_templates
    if args.verbose is not None:
        overrides["verbose"] = args.verbose
    return settings.model_copy(update=overrides) if overrides else settings


def _config_summary(config: ProjectConfig) -> dict[str, str]:
    def _join(items: tuple[Enum, ...]) -> str:
        return ", ".join(i.value for i in items) or "none"

    return {
        "Project": config.project_name,
        "Frontend": _join(config.frontend),
        "Backend": config.backend.value,
        "Runtime": config.runtime.value,
        "API": config.api.value,
        "Database": config.database.value,
        "ORM": config.orm.value,
        "Auth": config.auth.value,
        "DB setup": config.db_setup.value,
        "Web deploy": config.web_deploy.value,
        "Server deploy": config.server_deploy.value,
        "Addons": _join(config.addons),
        "Examples": _join(config.examples),
        "Package manager": config.package_manager.value,
    }


def _is_non_empty_dir(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``stackcraft`` and ``python -m stackcraft``.

    Returns:
        The process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(args)
    except ValidationError as exc:
        print_error(f"Invalid settings: {exc}")
        return 1
    configure_logging(settings.verbose)

    try:
        config = build_project_config(collect_flag_values(args), args.config)
    except ValidationError as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        print_error(f"Could not read configuration file: {exc}")
        return 1

    generator = ProjectGenerator(settings)
    try:
        overlays = generator.plan(config)
    except InvalidConfigurationError as exc:
        print_error(exc.message)
        return 1

    if args.dry_run:
        print_summary_table(_config_summary(config), title="Configuration")
        console.print(describe_overlays(overlays))
        missing = generator.composer.missing_templates(overlays)
        if missing:
            print_warning(f"{len(missing)} overlay(s) have no template and will be skipped")
        return 0

    target = config.target_dir
    if _is_non_empty_dir(target) and not args.yes:
        print_error(
            f"Directory {target} already exists and is not empty. "
            f"Use --yes to scaffold into it anyway."
        )
        return 1

    started = time.monotonic()
    try:
        with create_progress() as progress:
            task = progress.add_task("Scaffolding", total=len(overlays))

            def _advance(overlay: Overlay) -> None:
                progress.update(
                    task, advance=1, description=f"[{overlay.phase.value}] {overlay.label}"
                )

            result = asyncio.run(generator.generate(config, target, on_overlay=_advance))
    except StackcraftError as exc:
        print_error(str(exc))
        return 1
    except OSError as exc:
        print_error(f"Failed while writing the project: {exc}")
        return 1

    elapsed = format_duration(time.monotonic() - started)
    print_summary_table(_config_summary(config), title="Configuration")
    print_success(
        f"Created {config.project_name} at {result.project_dir} "
        f"({result.file_count} files, {len(result.applied)} overlays) in {elapsed}"
    )
    console.print(
        f"[dim]Reproduce with:[/dim] {escape(config.reproducible_command())}",
        highlight=False,
        soft_wrap=True,
    )
    return 0
