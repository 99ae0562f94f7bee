"""
Main CLI for the debrep tool.

Fetches source archives and prebuilt packages, and builds Debian packages into
the pool.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from debrep import __version__
from debrep.core.errors import BuildError, ConfigError
from debrep.core.utils import CONFIG_FILE, log


# =============================================================================
# Argument Parsing
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all subcommands."""

    parser = argparse.ArgumentParser(
        prog="debrep",
        description="Build Debian packages from source into a package pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  fetch       Download source archives and prebuilt packages
  build       Build packages with sbuild and publish them to the pool

Examples:
  debrep fetch                   # Download everything sources.toml lists
  debrep build                   # Build every package that changed
  debrep build foo bar           # Build only foo and bar
  debrep build --force foo       # Rebuild foo even if it is up to date
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print debug output",
    )

    parser.add_argument(
        "--workdir",
        type=Path,
        default=Path("."),
        help="Working directory holding assets/, build/, record/ and repo/ (default: .)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Configuration file (default: <workdir>/{CONFIG_FILE})",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- fetch ---
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Download source archives and prebuilt packages",
    )
    fetch_parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="Number of parallel downloads",
    )

    # --- build ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build packages into the pool",
    )
    build_parser.add_argument(
        "packages",
        nargs="*",
        metavar="NAME",
        help="Packages to build (default: all)",
    )
    build_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Build even if the recorded version or commit was already built",
    )

    return parser


# =============================================================================
# Commands
# =============================================================================


def cmd_fetch(args: argparse.Namespace) -> int:
    from debrep.build.config import load_config
    from debrep.fetch import DownloadError, FetchStatus, fetch_all, plan_downloads

    config = load_config(args.config or args.workdir / CONFIG_FILE)
    items = plan_downloads(config, args.workdir)

    log.header(f"Fetching {len(items)} files")
    outcomes = fetch_all(items, workers=args.jobs)

    failures = 0
    for outcome in outcomes:
        if isinstance(outcome, DownloadError):
            failures += 1
            log.error(str(outcome))
        elif outcome.status is FetchStatus.ALREADY_EXISTS:
            log.dim(f"{outcome.item.name}: already exists")
        else:
            log.success(f"{outcome.item.name}: downloaded {outcome.size} bytes")

    if failures:
        log.error(f"{failures} of {len(items)} downloads failed")
        return 1
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    from debrep.build.config import load_config
    from debrep.build.orchestrator import build_all, build_packages

    config = load_config(args.config or args.workdir / CONFIG_FILE)

    try:
        if args.packages:
            build_packages(config, args.workdir, args.packages, force=args.force)
        else:
            build_all(config, args.workdir, force=args.force)
    except BuildError as e:
        if e.package:
            log.error(f"package '{e.package}' failed to build: {e}")
        else:
            log.error(f"build failed: {e}")
        return 1
    return 0


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        log.set_color(False)
    if args.verbose:
        log.set_verbose(True)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "fetch":
            return cmd_fetch(args)

        elif args.command == "build":
            return cmd_build(args)

        else:
            log.error(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        log.warning("\nInterrupted")
        return 130
    except ConfigError as e:
        log.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
