"""Command-line interface for network limiter."""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich import box

from . import __version__
from .config import LimiterConfig
from .dispatcher import CommandDispatcher
from .errors import LimiterError
from .models.device import ScanResult
from .models.status import StatusReport


console = Console()
logger = logging.getLogger("network_limiter")


def setup_logging(level: str, verbosity: int = 0) -> None:
    """Route library logging through rich on the shared console."""
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity == 1:
        level = "INFO"

    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers[:] = [handler]
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of KB/s, got {number}")
    return number


def render_scan(result: ScanResult) -> None:
    """Print scan results."""
    console.print(f"[bold]Current network:[/bold] {escape(result.network_name or 'not associated')}")
    if result.local_address:
        console.print(f"[bold]Local address:[/bold]   {escape(result.local_address)} ({escape(result.subnet or '')})")
    console.print()

    table = Table(
        title=Text(f"Discovered Devices on {result.interface}"),
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("IP Address", style="bold")
    table.add_column("MAC Address")
    table.add_column("Hostname")
    table.add_column("Vendor")

    for device in result.devices:
        table.add_row(
            Text(device.ip),
            Text(device.mac or "N/A"),
            Text(device.display_name),
            Text(device.vendor or ""),
        )

    console.print(table)

    if not result.devices:
        console.print("[yellow]No devices found.[/yellow]")
    elif not result.nmap_used:
        console.print("[dim]ARP cache only; install nmap for a full sweep.[/dim]")


def render_rules(title: str, rules: str, persistent: bool, anchor_file: str) -> None:
    console.print(Panel(Syntax(rules, "text", theme="ansi_dark"), title=title, border_style="green"))
    if persistent:
        console.print(f"[green]Rules installed to {escape(anchor_file)} and will load at boot.[/green]")


def render_status(report: StatusReport) -> None:
    """Print pf status report."""
    state = Text("ENABLED", style="bold green") if report.enabled else Text("DISABLED", style="bold red")

    table = Table(title="Packet Filter Status", box=box.ROUNDED, show_header=False)
    table.add_column("Item", style="bold cyan")
    table.add_column("Value")

    table.add_row("pf", state)
    if report.info_header:
        table.add_row("Info", Text(report.info_header))
    table.add_row(
        "Rule file",
        Text(report.rules_file, style="green") if report.rules_file_present
        else Text(f"{report.rules_file} (absent)", style="dim"),
    )
    table.add_row(
        "Anchor file",
        Text(report.anchor_file, style="green") if report.anchor_installed
        else Text(f"{report.anchor_file} (absent)", style="dim"),
    )
    table.add_row(
        "pf.conf marker",
        Text("present", style="green") if report.pf_conf_marker else Text("absent", style="dim"),
    )
    table.add_row("Loaded rules", f"{len(report.loaded_rules)}")

    console.print(table)

    if report.rules_file_present:
        console.print(Panel(Text(report.rules_file_contents.rstrip()), title="Rule File", border_style="cyan"))

    if report.loaded_rules:
        console.print(Panel(Text("\n".join(report.loaded_rules)), title="Active Rules", border_style="cyan"))
    else:
        console.print("[yellow]No rules loaded.[/yellow]")


def run_scan(dispatcher: CommandDispatcher, args) -> None:
    interface = args.interface or dispatcher.config.scan.interface
    with console.status(f"Scanning {interface}..."):
        result = dispatcher.scan(interface)
    render_scan(result)


def run_monitor(dispatcher: CommandDispatcher, args) -> None:
    rules = dispatcher.monitor(args.ip, persistent=args.persistent)
    console.print(f"[green]Started monitoring {args.ip}[/green]")
    render_rules("Monitoring Rules", rules, args.persistent, dispatcher.config.paths.anchor_file)


def run_limit(dispatcher: CommandDispatcher, args) -> None:
    rules = dispatcher.limit(
        args.ip,
        upload=args.upload,
        download=args.download,
        persistent=args.persistent,
    )
    console.print(f"[green]Bandwidth limits applied for {args.ip}[/green]")
    render_rules("Bandwidth Limiting Rules", rules, args.persistent, dispatcher.config.paths.anchor_file)


def run_remove(dispatcher: CommandDispatcher, args) -> None:
    dispatcher.remove(args.ip)
    console.print(f"[green]Removed rules for {args.ip}[/green]")


def run_status(dispatcher: CommandDispatcher, args) -> None:
    render_status(dispatcher.status())


COMMANDS = {
    "scan": run_scan,
    "monitor": run_monitor,
    "limit": run_limit,
    "remove": run_remove,
    "status": run_status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="network-limiter",
        description="Discover devices on the local network and monitor or throttle them with pf.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Scan for devices on the network")
    scan_parser.add_argument(
        "-i", "--interface",
        help="Network interface (default: en0)",
    )

    # Monitor command
    monitor_parser = subparsers.add_parser("monitor", help="Monitor a specific device")
    monitor_parser.add_argument(
        "-i", "--ip",
        required=True,
        help="Target IP address",
    )
    monitor_parser.add_argument(
        "-p", "--persistent",
        action="store_true",
        help="Keep rules across reboots",
    )

    # Limit command
    limit_parser = subparsers.add_parser("limit", help="Limit bandwidth for a device")
    limit_parser.add_argument(
        "-i", "--ip",
        required=True,
        help="Target IP address",
    )
    limit_parser.add_argument(
        "-u", "--upload",
        type=positive_int,
        help="Upload speed limit in KB/s",
    )
    limit_parser.add_argument(
        "-d", "--download",
        type=positive_int,
        help="Download speed limit in KB/s",
    )
    limit_parser.add_argument(
        "-p", "--persistent",
        action="store_true",
        help="Keep rules across reboots",
    )

    # Remove command
    remove_parser = subparsers.add_parser("remove", help="Remove rules for a device")
    remove_parser.add_argument(
        "-i", "--ip",
        required=True,
        help="Target IP address",
    )

    # Status command
    subparsers.add_parser("status", help="Show packet filter status and installed rules")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 0

    try:
        config = LimiterConfig.load(args.config)
        setup_logging(config.logging.level, args.verbose)
        dispatcher = CommandDispatcher(config=config)
        COMMANDS[args.command](dispatcher, args)
    except LimiterError as e:
        console.print(Text.assemble(("Error: ", "bold red"), str(e)))
        return e.exit_code
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
