"""CLI entry point for Dynamic MOTD."""

import argparse
import logging
import sys
from typing import List, NoReturn, Optional

import structlog

from dynamic_motd import __version__
from dynamic_motd.config import InstallerConfig, LoggingConfig
from dynamic_motd.exceptions import ConfigurationError, MotdError
from dynamic_motd.installer import MotdInstaller
from dynamic_motd.types import InstallResult, RenderMode


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="dynamic-motd",
        description="Dynamic MOTD - system status login banner for Debian and Fedora",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
The banner shows hostname art, OS and kernel, load, uptime, memory, disk,
extra mount points and the primary IP address, and clears the screen on
login. Debian systems with /etc/update-motd.d get a PAM-driven hook;
everything else gets a profile.d script.

Examples:
  sudo dynamic-motd                # Install the dynamic MOTD
  sudo dynamic-motd --uninstall    # Remove it and restore the originals

Environment variables:
  BANNER_SSH_ONLY       - Only show the profile.d banner in SSH sessions
  DEPS_PACKAGES         - Packages to install (default: bc,toilet,figlet)
  SERVICE_RESTART_SSH   - Restart sshd after installing (true/false)
  LOG_LEVEL             - Log level (default: INFO)
  LOG_FILE              - Write logs to this file instead of stderr
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-i",
        "--install",
        action="store_true",
        help="Install the dynamic MOTD (default)",
    )
    mode.add_argument(
        "-u",
        "--uninstall",
        action="store_true",
        help="Uninstall the dynamic MOTD",
    )
    mode.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="Show this help message",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    return parser


def describe() -> str:
    """Return the usage text."""
    return build_parser().format_help()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def configure_logging(
    config: LoggingConfig, verbose: bool = False, quiet: bool = False
) -> None:
    """Configure structlog from settings and CLI flags."""
    level_name = config.level.upper()
    if verbose:
        level_name = "DEBUG"
    elif quiet:
        level_name = "ERROR"
    level = getattr(logging, level_name, logging.INFO)

    package_logger = logging.getLogger("dynamic_motd")
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)

    if config.file:
        # Opened on the first event; a refused run must leave no file behind
        package_logger.addHandler(logging.FileHandler(config.file, delay=True))
        package_logger.setLevel(level)
        logger_factory = structlog.stdlib.LoggerFactory()
        colors = False
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)
        colors = sys.stderr.isatty()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=logger_factory,
    )


def print_header() -> None:
    print("╔══════════════════════════════════════╗")
    print("║  DYNAMIC MOTD - DEBIAN & FEDORA      ║")
    print(f"║  Version {__version__:<28}║")
    print("╚══════════════════════════════════════╝\n")


def report_install(installer: MotdInstaller, result: InstallResult) -> None:
    """Show the banner preview and a summary of what was installed."""
    print("\n--- MOTD Preview ---")
    print(installer.preview(result.method), end="")
    print("--- End Preview ---\n")

    print("✅ Installation complete!")
    print(f"  Method: {result.method.value}")
    if result.fell_back:
        print("  (update-motd.d verification failed, fell back to profile.d)")
    renderer = "toilet" if result.render_mode == RenderMode.ENHANCED else "plain text"
    print(f"  Hostname rendering: {result.render_mode.value} ({renderer})")
    print(f"  MOTD file location: {result.artifact_path}")
    print("\n📌 Log out and log back in to see the new MOTD")
    print(f"  To customize: sudo nano {result.artifact_path}")
    print("  To uninstall: sudo dynamic-motd --uninstall\n")


def run_install(installer: MotdInstaller, quiet: bool) -> int:
    """Install and report; returns the exit code."""
    issues = installer.config.validate_config()
    if issues:
        raise ConfigurationError("; ".join(issues))

    result = installer.apply()
    if not result.success:
        print(
            f"\n❌ Error: installation failed, {result.artifact_path} did not run cleanly",
            file=sys.stderr,
        )
        return 1

    if not quiet:
        report_install(installer, result)
    return 0


def run_uninstall(installer: MotdInstaller, quiet: bool) -> int:
    """Uninstall; missing state is never an error."""
    actions = installer.revert()
    if not quiet:
        for action in actions:
            print(f"  • {action}")
        print("\n✅ Dynamic MOTD uninstalled\n")
    return 0


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """Main entry point for CLI.

    Raises:
        SystemExit: Always exits with appropriate code
    """
    args = parse_args(argv)

    if args.help:
        print(describe())
        sys.exit(0)

    if not args.quiet:
        print_header()

    try:
        config = InstallerConfig.from_env()
        configure_logging(config.logging, verbose=args.verbose, quiet=args.quiet)

        installer = MotdInstaller(config)

        if args.uninstall:
            sys.exit(run_uninstall(installer, args.quiet))

        if not sys.platform.startswith("linux"):
            print("Error: This tool only supports Linux systems", file=sys.stderr)
            sys.exit(1)

        sys.exit(run_install(installer, args.quiet))

    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        sys.exit(130)

    except MotdError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"\n❌ Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
