"""Command-line interface for AVX Sight.

This module provides a CLI for listing, searching and inspecting installed
audio plugins, and for managing the folder-access grants the scan relies on.

Commands:
    scan: Discover plugins under the system and user libraries
    show: Display details for one plugin bundle
    grants: List, revoke or clear persisted folder grants

Example:
    $ avx-sight scan
    $ avx-sight scan --search reverb --format json
    $ avx-sight scan --user-library ~/Library --system-library /Library --yes
    $ avx-sight show "/Library/Audio/Plug-Ins/Components/Reverb.component"
    $ avx-sight grants revoke /Library
"""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from avx_sight.access.coordinator import AccessCoordinator
from avx_sight.access.grants import GrantStore
from avx_sight.access.prompt import AccessPrompter, ConsolePrompter, StaticPrompter
from avx_sight.config import ScanConfig
from avx_sight.discovery.scanner import DirectoryScanner
from avx_sight.exceptions import AVXSightError
from avx_sight.models import Domain, LibraryRoot, PromptOutcome
from avx_sight.observability.audit import AuditSink, JSONLAuditSink
from avx_sight.render.json_renderer import JSONRenderer
from avx_sight.render.text_renderer import TextRenderer
from avx_sight.runtime.service import PluginScanService


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="avx-sight",
        description="Find audio plugins (AU, VST, VST3, AAX) installed on this machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan",
        help="Discover installed plugins",
        description="Scan the system and user libraries for plugin bundles",
    )
    scan_parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (optional)",
    )
    scan_parser.add_argument(
        "--system-library",
        type=Path,
        help="System library folder (default: /Library)",
    )
    scan_parser.add_argument(
        "--user-library",
        type=Path,
        help="User library folder (default: ~/Library)",
    )
    scan_parser.add_argument(
        "--grants-file",
        type=Path,
        help="File storing folder access grants (optional)",
    )
    scan_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    scan_parser.add_argument(
        "--search",
        default="",
        help="Only list plugins whose name contains this text (case-insensitive)",
    )
    prompt_group = scan_parser.add_mutually_exclusive_group()
    prompt_group.add_argument(
        "--yes",
        action="store_true",
        help="Grant access to every configured folder without asking",
    )
    prompt_group.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never ask; folders without a stored grant are skipped",
    )
    scan_parser.add_argument(
        "--audit-log",
        type=Path,
        help="Append audit events to this JSONL file (optional)",
    )

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show details for one plugin",
        description="Display name, type, path and metadata for a plugin bundle",
    )
    show_parser.add_argument(
        "path",
        type=Path,
        help="Path to a .component, .vst, .vst3 or .aaxplugin bundle",
    )
    show_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # Grants command
    grants_parser = subparsers.add_parser(
        "grants",
        help="Manage folder access grants",
        description="List, revoke or clear persisted folder access grants",
    )
    grants_parser.add_argument(
        "action",
        choices=["list", "revoke", "clear"],
        help="Operation to perform",
    )
    grants_parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Folder whose grant to revoke (revoke only)",
    )
    grants_parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (optional)",
    )
    grants_parser.add_argument(
        "--grants-file",
        type=Path,
        help="File storing folder access grants (optional)",
    )
    grants_parser.add_argument(
        "--audit-log",
        type=Path,
        help="Append audit events to this JSONL file (optional)",
    )

    return parser


def load_config(args: argparse.Namespace) -> ScanConfig:
    """Build the scan configuration from a config file and CLI overrides."""
    config = ScanConfig.from_yaml(args.config) if args.config else ScanConfig()

    if getattr(args, "system_library", None):
        config.roots = _override_root(config.roots, Domain.SYSTEM, args.system_library)
    if getattr(args, "user_library", None):
        config.roots = _override_root(config.roots, Domain.USER, args.user_library)
    if args.grants_file:
        config.grants_path = args.grants_file.expanduser()

    return config


def _override_root(roots: list[LibraryRoot], domain: Domain, path: Path) -> list[LibraryRoot]:
    replacement = LibraryRoot(path.expanduser(), domain)
    if not any(root.domain is domain for root in roots):
        return roots + [replacement]
    return [replacement if root.domain is domain else root for root in roots]


def _prompter_for(args: argparse.Namespace) -> AccessPrompter:
    if args.yes:
        return StaticPrompter(PromptOutcome.GRANTED)
    if args.no_prompt:
        return StaticPrompter(PromptOutcome.DENIED)
    return ConsolePrompter()


def cmd_scan(args: argparse.Namespace) -> int:
    """Execute the scan command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error). A scan that could only read
        some folders still succeeds; the problem is reported on stderr.
    """
    try:
        config = load_config(args)

        audit_sink: AuditSink | None = JSONLAuditSink(args.audit_log) if args.audit_log else None

        coordinator = AccessCoordinator(
            grant_store=GrantStore(config.grants_path),
            prompter=_prompter_for(args),
            audit_sink=audit_sink,
        )
        service = PluginScanService(
            config=config,
            coordinator=coordinator,
            audit_sink=audit_sink,
        )

        result = service.scan()
        records = result.search(args.search)

        renderer = JSONRenderer() if args.format == "json" else TextRenderer()
        print(renderer.render(records))

        if result.error:
            print(f"Notice: {result.error}", file=sys.stderr)

        return 0

    except AVXSightError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: argparse.Namespace) -> int:
    """Execute the show command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        record = DirectoryScanner().inspect(args.path)

        renderer = JSONRenderer() if args.format == "json" else TextRenderer()
        print(renderer.render_detail(record))

        return 0

    except AVXSightError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def cmd_grants(args: argparse.Namespace) -> int:
    """Execute the grants command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = load_config(args)
        audit_sink: AuditSink | None = JSONLAuditSink(args.audit_log) if args.audit_log else None

        # Never prompts; only reads and revokes stored grants
        coordinator = AccessCoordinator(
            grant_store=GrantStore(config.grants_path),
            prompter=StaticPrompter(PromptOutcome.DENIED),
            audit_sink=audit_sink,
        )

        if args.action == "list":
            grants = coordinator.grants()
            if not grants:
                print("No grants stored.")
                return 0
            print(f"{len(grants)} grant(s):\n")
            for grant in grants:
                print(f"  {grant.path}")
                print(f"    Granted: {grant.created_at.isoformat(timespec='seconds')}")
                if grant.refreshed_at:
                    print(f"    Refreshed: {grant.refreshed_at.isoformat(timespec='seconds')}")
            return 0

        if args.action == "revoke":
            if args.path is None:
                print("Error: revoke requires a folder path", file=sys.stderr)
                return 1
            if coordinator.revoke(args.path):
                print(f"Revoked access grant for {args.path}")
                return 0
            print(f"No grant stored for {args.path}", file=sys.stderr)
            return 1

        coordinator.clear()
        print("Cleared all grants.")
        return 0

    except AVXSightError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the avx-sight command is executed.
    It parses command-line arguments and dispatches to the appropriate
    command handler.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Dispatch to command handler
    if args.command == "scan":
        exit_code = cmd_scan(args)
    elif args.command == "show":
        exit_code = cmd_show(args)
    elif args.command == "grants":
        exit_code = cmd_grants(args)
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
