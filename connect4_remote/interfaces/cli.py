"""
cli.py - Command-line interface for remote Connect Four

This module provides a CLI for running the game server, registering
players, playing against the server from a terminal, and replaying
recorded games offline.
"""

import argparse
import sys
import time
from typing import Callable, List, Optional

from connect4_remote.client.api_client import GameApiClient
from connect4_remote.client.controller import ClientGame
from connect4_remote.client.replay import ReplayPlayer
from connect4_remote.config import Settings
from connect4_remote.data.recorder import RecordingStore
from connect4_remote.debug import debug, DebugLevel
from connect4_remote.errors import Connect4Error, ConsistencyError, RemoteError, TransportError
from connect4_remote.utils import COLS, GameStatus

RESULT_MESSAGES = {
    GameStatus.HUMAN_WIN: "You win! Congratulations!",
    GameStatus.SERVER_WIN: "The server wins! Better luck next time.",
    GameStatus.DRAW: "It's a draw!",
}


class SimpleCLI:
    """Terminal front end for the client side of the game."""

    def __init__(self, settings: Settings, input_fn: Callable[[str], str] = input,
                 animate: bool = False):
        """
        Initialize the CLI.

        Args:
            settings: Runtime settings
            input_fn: Reads one line of user input
            animate: Print every animation frame instead of only the final board
        """
        self.settings = settings
        self.input_fn = input_fn
        self.animate = animate
        self.recorder = RecordingStore(settings.client_dir)

    def _api(self) -> GameApiClient:
        return GameApiClient(self.settings.api_url, request_timeout_s=self.settings.request_timeout)

    def register_player(self, player_id: int, first_name: str, phone: str, country: str) -> int:
        api = self._api()
        try:
            player = api.register_player(player_id, first_name, phone, country)
        except (RemoteError, TransportError) as e:
            print(f"Registration failed: {e}")
            return 1
        finally:
            api.close()

        print(f"Registered player {player['playerId']} ({player['firstName']}, {player['country']})")
        return 0

    def play_game(self, player_id: int, game_id: Optional[int] = None) -> int:
        """Play one game against the server interactively."""
        api = self._api()
        client = ClientGame(api, self.recorder, player_id)
        try:
            snapshot = client.resume(game_id) if game_id is not None else client.start()
        except (RemoteError, TransportError) as e:
            print(f"Cannot start game: {e}")
            api.close()
            return 1

        print(f"Game {snapshot.game_id} - you are X, the server is O.")
        print(f"Enter column number (0-{COLS - 1}) to make a move, 'q' to quit.")
        print(client.render())

        try:
            while not client.status.is_game_over():
                move = self.get_human_move()
                if move is None:
                    continue
                if move == -1:
                    print(f"Leaving game {client.game_id}. Resume it with: "
                          f"python run.py play --player-id {player_id} --game-id {client.game_id}")
                    return 0
                self._submit(client, move)
        finally:
            api.close()

        print("Game over!")
        print(RESULT_MESSAGES[client.status])
        return 0

    def _submit(self, client: ClientGame, move: int):
        try:
            client.submit_move(move)
        except RemoteError as e:
            print(f"Move rejected: {e}")
            return
        except TransportError as e:
            print(f"{e}\nNothing was changed, try the move again.")
            return
        except ConsistencyError:
            # Client and server disagree; nothing sensible left to show
            raise
        except Connect4Error as e:
            print(f"Invalid move: {e}")
            return

        self._run_animations(client)

    def _run_animations(self, client: ClientGame):
        while client.tick():
            if self.animate:
                print(client.render() + "\n")
            time.sleep(self.settings.tick_seconds)
        print(client.render())

    def get_human_move(self) -> Optional[int]:
        """
        Get a move from human player input.

        Returns:
            Column index, -1 to quit, or None if the input was not understood
        """
        user_input = self.input_fn(f"Your move (columns 0-{COLS - 1}, q): ").strip().lower()
        if user_input in ('q', 'quit', 'exit'):
            return -1
        try:
            return int(user_input)
        except ValueError:
            print(f"Please enter a number from 0-{COLS - 1} or 'q'")
            return None

    def replay_game(self, server_game_id: int, interval_ticks: Optional[int] = None) -> int:
        """Replay a recorded game without contacting the server."""
        interval = self.settings.replay_interval_ticks if interval_ticks is None else interval_ticks
        try:
            player = ReplayPlayer.for_server_game(self.recorder, server_game_id, interval_ticks=interval)
        except Connect4Error as e:
            print(f"Error: {e}")
            return 1

        game = player.game
        print(f"Replaying game {game.server_game_id} of {game.player_name or game.player_id}: "
              f"{len(player.moves)} moves, result {game.result.to_wire()}")

        shown = 0
        running = True
        try:
            while running:
                running = player.tick()
                if self.animate:
                    print(player.render() + "\n")
                elif player.position != shown and not player.animations.busy:
                    shown = player.position
                    print(f"\nMove {shown}:")
                    print(player.render())
                if running:
                    time.sleep(self.settings.tick_seconds)
        except Connect4Error as e:
            print(f"Replay stopped: {e}")
            return 1

        print("\nFinal board:")
        print(player.render())
        return 0

    def list_recordings(self, player_id: Optional[int] = None) -> int:
        games = self.recorder.list_recordings(player_id)
        if not games:
            print("No recorded games found")
            return 0

        print(f"Found {len(games)} recorded games:")
        print("\nGame | Player | Result     | Duration | Moves | Started")
        print("-" * 66)
        for game in games:
            moves = len(self.recorder.load_moves(game.local_id))
            duration = f"{game.duration_seconds}s" if game.duration_seconds is not None else "-"
            print(f"{game.server_game_id:4d} | {game.player_id:6d} | {game.result.to_wire():10s} | "
                  f"{duration:>8s} | {moves:5d} | {game.started_at.split('.')[0]}")
        print("\nTo replay a game: python run.py replay --game-id GAME_ID")
        return 0


def serve(settings: Settings) -> int:
    from connect4_remote.server.app import create_app

    app = create_app(settings=settings)
    debug.info(f"Serving on http://{settings.host}:{settings.port} (data in {settings.server_dir})", "server")
    app.run(host=settings.host, port=settings.port, threaded=True)
    return 0


def configure_debug(args, settings: Settings):
    """Configure debug level from --debug / --debug-level, falling back to settings."""
    if args.debug:
        debug.configure(level=DebugLevel.DEBUG)
    elif not debug.set_from_string(args.debug_level or settings.log_level):
        debug.configure(level=DebugLevel.INFO)

    log_file = args.log_file or settings.log_file
    if log_file:
        debug.configure(log_file=log_file)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Remote Connect Four',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:

    # Run the game server
    python run.py serve --port 5000 --seed 42

    # Register a player
    python run.py register --player-id 7 --first-name Dana --phone 0501234567 --country Israel

    # Play against the server
    python run.py play --player-id 7

    # Continue an unfinished game
    python run.py play --player-id 7 --game-id 3

    # List and replay recorded games (no server needed)
    python run.py recordings --player-id 7
    python run.py replay --game-id 3 --interval 5
    """
    )
    parser.add_argument('--data-dir', type=str, help='Directory for server and client data files')
    parser.add_argument('--api-url', type=str, help='Base URL of the game server')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode (same as --debug-level debug)')
    parser.add_argument('--debug-level',
                        choices=['none', 'error', 'warning', 'info', 'debug', 'trace'],
                        help='Set debug level: none (silent) ... trace (most verbose)')
    parser.add_argument('--log-file', type=str, help='Also write log messages to this file')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    serve_parser = subparsers.add_parser('serve', help='Run the game server')
    serve_parser.add_argument('--host', type=str, help='Interface to bind')
    serve_parser.add_argument('--port', type=int, help='Port to listen on')
    serve_parser.add_argument('--seed', type=int, help='Seed for the server move generator')

    register_parser = subparsers.add_parser('register', help='Register a player on the server')
    register_parser.add_argument('--player-id', type=int, required=True, help='External player id (1-1000)')
    register_parser.add_argument('--first-name', type=str, required=True)
    register_parser.add_argument('--phone', type=str, required=True, help='9 to 11 digits')
    register_parser.add_argument('--country', type=str, required=True)

    play_parser = subparsers.add_parser('play', help='Play a game against the server')
    play_parser.add_argument('--player-id', type=int, required=True)
    play_parser.add_argument('--game-id', type=int, help='Resume this game instead of starting a new one')
    play_parser.add_argument('--animate', action='store_true', help='Print every animation frame')

    replay_parser = subparsers.add_parser('replay', help='Replay a recorded game offline')
    replay_parser.add_argument('--game-id', type=int, required=True, help='Server game id of the recording')
    replay_parser.add_argument('--interval', type=int, help='Ticks between moves')
    replay_parser.add_argument('--animate', action='store_true', help='Print every animation frame')

    recordings_parser = subparsers.add_parser('recordings', help='List recorded games')
    recordings_parser.add_argument('--player-id', type=int, help='Only show games of this player')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for remote Connect Four."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env().override(
        data_dir=args.data_dir,
        api_url=args.api_url,
        host=getattr(args, 'host', None),
        port=getattr(args, 'port', None),
        seed=getattr(args, 'seed', None),
    )
    configure_debug(args, settings)

    if args.command == 'serve':
        return serve(settings)

    if args.command is None:
        parser.print_help()
        return 1

    cli = SimpleCLI(settings, animate=getattr(args, 'animate', False))
    try:
        if args.command == 'register':
            return cli.register_player(args.player_id, args.first_name, args.phone, args.country)
        if args.command == 'play':
            return cli.play_game(args.player_id, args.game_id)
        if args.command == 'replay':
            return cli.replay_game(args.game_id, args.interval)
        if args.command == 'recordings':
            return cli.list_recordings(args.player_id)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except Connect4Error as e:
        debug.error(f"{type(e).__name__}: {e}", "cli")
        print(f"Error: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
