from __future__ import annotations

import argparse
import logging

from mazeserver.common.config import Settings, settings
from mazeserver.engine.engine import MatchEngine
from mazeserver.net.gate import accept_players, open_listener
from mazeserver.net.server import MatchServer

logger = logging.getLogger("mazeserver")


def build_parser(defaults: Settings = settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Authoritative two-player maze server")
    parser.add_argument("--host", default=defaults.host, help="Bind address")
    parser.add_argument("--port", type=int, default=defaults.port, help="Listening port")
    parser.add_argument(
        "--latency-ms",
        type=int,
        default=defaults.latency_ms,
        help="Simulated one-way latency applied to input and state messages",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.random_seed,
        help="Maze generation seed (random if omitted)",
    )
    parser.add_argument("--log-level", default=defaults.log_level, help="Logging level")
    return parser


def serve(args: argparse.Namespace) -> None:
    latency = args.latency_ms / 1000.0
    engine = MatchEngine(seed=args.seed)
    listener = open_listener(args.host, args.port)
    connections = {}
    try:
        connections = accept_players(listener, engine.level)
        MatchServer(engine, connections, latency).run()
    except Exception:
        logger.exception("Server loop failed")
        raise
    finally:
        for connection in connections.values():
            connection.close()
        listener.close()


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("=== Multiplayer Maze Server ===")
    logger.info("Port: %s", args.port)
    logger.info("Latency: %sms (simulated)", args.latency_ms)
    try:
        serve(args)
    except KeyboardInterrupt:
        logger.info("Server stopped.")


if __name__ == "__main__":
    main()
