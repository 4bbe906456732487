"""
Chronus Player Control Tool - run the player supervisor and inspect players
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .bounded_wait import run_bounded
from .channel import PlayerChannel
from .config import DEFAULT_ENV_FILE, SupervisorConfig, apply_env_file
from .errors import PlayerError
from .log import configure_logging
from .registry import StateDirRegistry
from .supervisor import PlayerSupervisor


class PlayerCtl:
    def __init__(self, config: SupervisorConfig, console: Console = None):
        self.config = config
        self.console = console or Console()
        self.registry = StateDirRegistry(
            config.state_dir,
            player_command=config.player_command,
            pool_size=config.pool_size,
        )

    def supervisor(self) -> PlayerSupervisor:
        return PlayerSupervisor(self.registry, self.config)

    def supervise(self) -> int:
        """Run the supervisor in the foreground until Ctrl+C"""
        supervisor = self.supervisor()
        supervisor.start()
        self.console.print(f"[bold green]Supervising players in {self.config.state_dir}[/bold green]")

        try:
            while True:
                time.sleep(self.config.tick_interval)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]Stopping supervisor...[/yellow]")
        return 0

    def players(self) -> int:
        """Print the players the registry currently knows about"""
        players = self.registry.list_players()
        if not players:
            self.console.print("[yellow]No player processes found[/yellow]")
            return 0

        table = Table(show_header=True)
        table.add_column("ID")
        table.add_column("State")
        table.add_column("Port", justify="right")
        table.add_column("PID", justify="right")
        for player in players:
            table.add_row(player.id, player.state, str(player.port), str(player.pid or "-"))

        self.console.print(table)
        return 0

    def ping(self, port: int) -> int:
        channel = PlayerChannel(port, host=self.config.player_host, transport=self.config.transport)
        try:
            run_bounded(channel.send_ping, self.config.ping_timeout)
        except Exception as e:
            self.console.print(f"[red]Ping to {channel} failed: {e}[/red]")
            return 1

        self.console.print(f"[green]Ping sent to {channel}[/green]")
        return 0

    def shutdown(self) -> int:
        """Bind a player (waiting up to the discovery timeout) and shut it down"""
        supervisor = self.supervisor()
        supervisor.start()

        try:
            player = supervisor.shutdown_player()
        except (PlayerError, OSError) as e:
            self.console.print(f"[red]Shutdown failed: {e}[/red]")
            return 1

        self.console.print(f"[green]Shutdown sent to player {player.id}[/green]")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronus-player",
        description="Chronus Player Control Tool - supervise and inspect player processes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chronus-player supervise              # Keep a player bound, pool filled
  chronus-player players                # List known player processes
  chronus-player ping --port 27713      # Ping one player
  chronus-player shutdown               # Shut down the active player
        """
    )

    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE,
                        help=f"Load CHRONUS_* settings from this file (default: {DEFAULT_ENV_FILE})")
    parser.add_argument("--state-dir", help="Player state directory (overrides CHRONUS_PLAYER_STATE_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("supervise", help="Run the player supervisor")
    subparsers.add_parser("players", help="List player processes")

    ping_parser = subparsers.add_parser("ping", help="Ping a player process")
    ping_parser.add_argument("--port", type=int, required=True, help="Player OSC port")

    subparsers.add_parser("shutdown", help="Shut down the active player process")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(logging.INFO, verbose=args.verbose)
    apply_env_file(args.env_file)

    try:
        config = SupervisorConfig.from_env()
        if args.state_dir:
            config.state_dir = Path(args.state_dir).expanduser()
    except ValueError as e:
        print(f"[chronus-player] Invalid configuration: {e}", file=sys.stderr)
        return 2

    ctl = PlayerCtl(config)

    if args.command == "supervise":
        return ctl.supervise()
    elif args.command == "players":
        return ctl.players()
    elif args.command == "ping":
        return ctl.ping(args.port)
    elif args.command == "shutdown":
        return ctl.shutdown()

    print(f"Unknown command: {args.command}")
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
