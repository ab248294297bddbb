# updategen/updategen.py
# updategen: Builds update and installation packages from a git working tree.
# Copyright (C) 2025 Dank A. Saurus

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY;
# without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

# -*- coding: utf-8 -*-

"""
Update Package Generator
Main entry point for the application.
"""

import argparse
import sys
import traceback
from pathlib import Path

from dotenv import load_dotenv
from prompt_toolkit import prompt
from rich.console import Console
from rich.table import Table

from . import config, utils
from . import settings as app_settings
from .exceptions import UpdateGeneratorError, ValidationError
from .generator import UpdateGenerator
from .settings import GeneratorConfig, settings

PACKAGE_TYPES = ("update", "new", "both")


class CustomHelpFormatter(
    argparse.RawTextHelpFormatter, argparse.ArgumentDefaultsHelpFormatter
):
    """Custom formatter for argparse help messages."""


def build_generate_parser() -> argparse.ArgumentParser:
    """Creates the parser for the (default) generate command."""
    parser = argparse.ArgumentParser(
        prog="updategen",
        description="Generate update and new installation packages from a git project.",
        formatter_class=CustomHelpFormatter,
    )
    range_group = parser.add_argument_group("Change Range")
    version_group = parser.add_argument_group("Versions")
    output_group = parser.add_argument_group("Project & Output")

    range_group.add_argument(
        "--start_date", "--start-date", dest="start_date", help="Start date (YYYY-MM-DD)."
    )
    range_group.add_argument(
        "--end_date", "--end-date", dest="end_date", help="End date (YYYY-MM-DD)."
    )
    version_group.add_argument(
        "--current_version",
        "--current-version",
        dest="current_version",
        help="Version currently installed on the target.",
    )
    version_group.add_argument(
        "--update_version",
        "--update-version",
        dest="update_version",
        help="Version the package upgrades to.",
    )
    parser.add_argument(
        "--type",
        dest="type",
        default="both",
        help="Type of package to generate: update, new or both.",
    )
    output_group.add_argument(
        "--project-root",
        type=Path,
        help="Project to package (default: current directory).",
    )
    output_group.add_argument(
        "--output-dir",
        type=Path,
        help=f"Where packages are written (default: {settings['output_directory']}).",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Prompt for any missing option instead of failing.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print a stack trace for unexpected errors.",
    )
    return parser


def build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="updategen config",
        description=f"Persist a setting in {config.SETTINGS_FILE}.",
    )
    parser.add_argument("key", help="Setting name, e.g. git_timeout.")
    parser.add_argument(
        "value", help="New value. Lists are given comma separated."
    )
    return parser


def prompt_missing_inputs(args: argparse.Namespace) -> None:
    """Asks for every required option the user left out."""
    questions = [("update_version", "Update version: ")]
    if args.type in ("update", "both"):
        questions = [
            ("start_date", "Start date (YYYY-MM-DD): "),
            ("end_date", "End date (YYYY-MM-DD): "),
            ("current_version", "Current version: "),
        ] + questions
    for attr, question in questions:
        if not getattr(args, attr):
            setattr(args, attr, prompt(question).strip())


def validate_inputs(args: argparse.Namespace) -> None:
    """Raises ValidationError for an unknown type or a missing required option."""
    if args.type not in PACKAGE_TYPES:
        raise ValidationError(
            f"Invalid type: {args.type}. Use 'update', 'new', or 'both'"
        )

    if args.type in ("update", "both"):
        if not args.start_date:
            raise ValidationError("Start date is required for update packages")
        if not args.end_date:
            raise ValidationError("End date is required for update packages")
        if not args.current_version:
            raise ValidationError("Current version is required for update packages")

    if not args.update_version:
        raise ValidationError("Update version is required")


def display_results(console: Console, generated_files: list[Path], package_type: str) -> None:
    """Prints the generated packages as a table."""
    console.print()
    console.print("Package generation completed successfully!", style="green")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Type", style="white")
    table.add_column("Generated File", style="bright_cyan")
    for file in generated_files:
        table.add_row(package_type, Path(file).name)
    console.print(table)

    console.print()
    console.print(f"Files saved to: {Path(generated_files[0]).parent}")


def run_generate_command(args: argparse.Namespace, console: Console | None = None) -> int:
    """Generates the requested packages and returns the process exit code."""
    console = console or Console()
    try:
        if args.interactive:
            prompt_missing_inputs(args)
        validate_inputs(args)

        generator_config = GeneratorConfig.from_settings(
            settings, project_root=args.project_root, output_directory=args.output_dir
        )
        generator = UpdateGenerator(generator_config)

        console.print("Starting package generation...", style="bright_cyan")
        if args.type == "update":
            generated_files = generator.generate_update(
                args.start_date, args.end_date, args.current_version, args.update_version
            )
        elif args.type == "new":
            generated_files = generator.generate_new_installation(args.update_version)
        else:
            generated_files = generator.generate_both(
                args.start_date, args.end_date, args.current_version, args.update_version
            )

        display_results(console, generated_files, args.type)
        return 0

    except UpdateGeneratorError as e:
        print(f"{utils.ERROR_MSG}{e.label}: {e}{utils.RESET_COLOR}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"{utils.ERROR_MSG}Unexpected Error: {e}{utils.RESET_COLOR}", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return 1


def run_config_command(args: argparse.Namespace) -> int:
    return 0 if app_settings.save_setting(args.key, args.value) else 1


def run(argv: list[str] | None = None) -> int:
    """Parses arguments, dispatches to a command and returns the exit code."""
    load_dotenv(dotenv_path=config.DOTENV_FILE)

    args_list = list(sys.argv[1:] if argv is None else argv)
    if args_list and args_list[0] == "config":
        args = build_config_parser().parse_args(args_list[1:])
        return run_config_command(args)

    if args_list and args_list[0] == "generate":
        args_list = args_list[1:]
    args = build_generate_parser().parse_args(args_list)
    return run_generate_command(args)


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
