"""
Command-line interface for avrlibc-build.

This module provides the `avrlibc` CLI tool. It is meant to be called from
a Cargo build script (or as one), so build directives go to stdout and
everything else goes to stderr.
"""

import argparse
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional

from avrlibc import __version__
from avrlibc.build import LibcBuildOrchestrator
from avrlibc.build.header_policy import relative_header_name
from avrlibc.build.orchestrator import BuildDirectives
from avrlibc.cli_utils import ErrorFormatter, PathValidator, configure_logging
from avrlibc.config import AvrLibcConfig, BuildConfig, BuildTarget
from avrlibc.config.target import EMBEDDED_ARCH, arch_from_triple
from avrlibc.errors import AvrLibcError


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    mcu: Optional[str] = None
    arch: Optional[str] = None
    target: Optional[str] = None
    host: Optional[str] = None
    docs: bool = False
    verbose: bool = False


@dataclass
class HeadersArgs:
    """Arguments for the headers command."""

    project_dir: Path
    mcu: Optional[str] = None
    docs: bool = False
    verbose: bool = False


def load_config(project_dir: Path, mcu: Optional[str], docs: bool, arch: Optional[str] = None) -> BuildConfig:
    """Load avrlibc.ini and apply command-line overrides."""
    config = AvrLibcConfig.load(project_dir)
    return config.with_overrides(
        mcu=mcu,
        arch=arch,
        documentation=True if docs or os.environ.get("DOCS_RS") else None,
    )


def resolve_build_target(
    target: Optional[str] = None, host: Optional[str] = None, mcu: Optional[str] = None
) -> BuildTarget:
    """Read the target from the environment, then apply overrides.

    Outside Cargo no architecture is known; a configured MCU then selects AVR.
    """
    build_target = BuildTarget.from_environment()

    if target:
        build_target = replace(build_target, triple=target, arch=arch_from_triple(target))
    if host:
        build_target = replace(build_target, host=host)
    if mcu and not build_target.arch:
        build_target = replace(build_target, arch=EMBEDDED_ARCH)

    return build_target


def build_command(args: BuildArgs) -> None:
    """Build avr-libc and generate Rust bindings.

    Examples:
        avrlibc build                         # Build using the Cargo environment
        avrlibc build --mcu atmega328p        # Select the MCU explicitly
        avrlibc build --docs                  # Bindings only, no native build
        avrlibc build --verbose               # Verbose output
    """
    configure_logging(args.verbose)

    try:
        config = load_config(args.project_dir, args.mcu, args.docs, args.arch)
        target = resolve_build_target(args.target, args.host, config.mcu)

        orchestrator = LibcBuildOrchestrator(config, directives=BuildDirectives())
        result = orchestrator.build(target)

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print(f"Bindings: {result.bindings_path}", file=sys.stderr)
            print(f"Build time: {result.build_time:.2f}s", file=sys.stderr)
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

    except AvrLibcError as e:
        ErrorFormatter.print_error("Build failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def headers_command(args: HeadersArgs) -> None:
    """List the headers that would be passed to bindgen.

    Examples:
        avrlibc headers                       # Headers without an MCU
        avrlibc headers --mcu atmega328p      # Headers for a specific MCU
    """
    configure_logging(args.verbose)

    try:
        config = load_config(args.project_dir, args.mcu, args.docs)
        target = BuildTarget.from_environment()
        if args.mcu:
            target = replace(target, arch=EMBEDDED_ARCH)

        orchestrator = LibcBuildOrchestrator(config)
        ctx = orchestrator.resolve_target(target)

        for header in orchestrator.collect_headers(ctx):
            print(relative_header_name(header, config.include_dir))

        sys.exit(0)

    except AvrLibcError as e:
        ErrorFormatter.print_error("Header scan failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main(argv: Optional[List[str]] = None) -> None:
    """avrlibc-build - avr-libc builder and Rust binding generator."""
    parser = argparse.ArgumentParser(
        prog="avrlibc",
        description="Build avr-libc and generate Rust bindings for it",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"avrlibc {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build avr-libc and generate bindings",
    )
    build_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    build_parser.add_argument(
        "-m",
        "--mcu",
        default=None,
        help="Microcontroller name (default: from the target specification)",
    )
    build_parser.add_argument(
        "-a",
        "--arch",
        default=None,
        help="avr-libc architecture directory (default: avr6)",
    )
    build_parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Target triple or JSON target specification (default: $TARGET)",
    )
    build_parser.add_argument(
        "--host",
        default=None,
        help="Host triple passed to configure (default: $HOST)",
    )
    build_parser.add_argument(
        "--docs",
        action="store_true",
        help="Documentation build: skip the native avr-libc build",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Headers command
    headers_parser = subparsers.add_parser(
        "headers",
        help="List headers eligible for binding generation",
    )
    headers_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    headers_parser.add_argument(
        "-m",
        "--mcu",
        default=None,
        help="Microcontroller name (default: none)",
    )
    headers_parser.add_argument(
        "--docs",
        action="store_true",
        help="Documentation build",
    )
    headers_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    PathValidator.validate_project_dir(parsed_args.project_dir)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.project_dir,
                mcu=parsed_args.mcu,
                arch=parsed_args.arch,
                target=parsed_args.target,
                host=parsed_args.host,
                docs=parsed_args.docs,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "headers":
        headers_command(
            HeadersArgs(
                project_dir=parsed_args.project_dir,
                mcu=parsed_args.mcu,
                docs=parsed_args.docs,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()
