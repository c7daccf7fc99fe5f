"""
Virus! CLI - Command-line interface for the engine.

Usage:
    virusgame serve [--host HOST] [--port PORT]       Run the room server
    virusgame simulate [--players N] [--seed S]       Play a random local game
"""

import argparse
import logging
import os
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Virus! - Card game engine and room server",
        prog="virusgame",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the room server")
    serve_parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"), help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT") or os.getenv("GAME_SERVER_PORT") or 4000),
        help="Listen port",
    )
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a random game locally")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of players")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--max-turns", type=int, default=500, help="Stop after this many actions")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "simulate":
        sys.exit(cmd_simulate(args))
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the FastAPI app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "virusgame.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=str(args.log_level).lower(),
    )


def cmd_simulate(args) -> int:
    """Play random legal actions until someone wins or the turn limit hits."""
    from .engine_core import Reducer, legal_actions, setup_game

    if args.players < 1:
        print("Error: need at least one player")
        return 1

    rng = random.Random(args.seed)
    reducer = Reducer(rng=rng)
    state = setup_game([f"Jugador {i + 1}" for i in range(args.players)], rng=rng)

    for _ in range(args.max_turns):
        if state.is_finished:
            break
        action = rng.choice(legal_actions(state))
        state = reducer.apply(state, action).new_state

    for line in state.log:
        print(line)

    print()
    if state.winner_id:
        print(f"Winner: {state.get_player(state.winner_id).name}")
    else:
        print(f"No winner after {args.max_turns} actions")
    for player in state.players:
        print(f"  {player.name}: {player.healthy_organ_count} healthy organ(s), {len(player.organs)} total")
    return 0


if __name__ == "__main__":
    main()
