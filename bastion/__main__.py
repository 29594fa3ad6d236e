"""Entry point: ``python -m bastion``.

Supports two modes:
  - ``python -m bastion``            → Launch the FastAPI game server
  - ``python -m bastion cli``        → Headless game that auto-starts waves
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bastion tower-defense engine")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI game server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--theme", type=str, default=None, help="Free-text map theme for the external generator")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless game")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--ticks", type=int, default=20_000)
    cli.add_argument("--waves", type=int, default=10, help="Stop after this many waves")
    cli.add_argument("--speed", type=float, default=1.0, help="Game-speed multiplier")
    cli.add_argument("--blank", action="store_true", help="Use an empty grass map")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from bastion.api.app import create_app
    from bastion.config import GameConfig

    config = GameConfig(seed=args.seed, log_level=args.log_level)
    app = create_app(config, theme=args.theme)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from bastion.config import GameConfig
    from bastion.engine.session import GameSession
    from bastion.utils.logging import setup_logging

    config = GameConfig(
        seed=args.seed,
        max_ticks=args.ticks,
        procedural_map=not args.blank,
        log_level=args.log_level,
    )
    setup_logging(config.log_level)

    session = GameSession(config)
    session.set_speed(args.speed)
    state = session.state
    last_wave = args.waves

    while state.tick < config.max_ticks and not state.game_over:
        if not state.wave_active:
            if state.wave > last_wave:
                break
            session.actions.start_wave()
        session.loop.tick_once()
        if state.tick % 600 == 0:
            logger.info(
                "Tick %d: wave %d, %d enemies, %d lives, %d gold",
                state.tick, state.wave, len(state.enemies), state.lives, state.gold,
            )

    logger.info(
        "Done at tick %d: reached wave %d with %d lives and %d gold%s",
        state.tick, state.wave, state.lives, state.gold, " (castle fell)" if state.game_over else "",
    )


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
