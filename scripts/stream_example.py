#!/usr/bin/env python3
"""
Stream market data for one instrument.

Usage:
    python scripts/stream_example.py --token <token> [--figi BBG005DXJS36] [--duration 10]

The token may also come from INVEST_TOKEN in the environment or the --env-file.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import dotenv

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from helpers.unified_logger import get_logger
from invest_openapi import CandleInterval, MissingTokenError, StreamingClient, StreamingSettings, new_request_id
from invest_openapi.streaming import StreamingError, StreamingReadError


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Subscribe to candles, order book, and instrument info for one FIGI."
    )

    parser.add_argument(
        "--token",
        "-t",
        type=str,
        default=None,
        help="OpenAPI token (default: INVEST_TOKEN).",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment file with the token (default: .env).",
    )

    parser.add_argument(
        "--figi",
        type=str,
        default="BBG005DXJS36",
        help="Instrument FIGI to subscribe to (default: BBG005DXJS36, TCS).",
    )

    parser.add_argument(
        "--interval",
        type=str,
        default=CandleInterval.MIN_5.value,
        choices=[interval.value for interval in CandleInterval],
        help="Candle interval (default: 5min).",
    )

    parser.add_argument(
        "--depth",
        type=int,
        default=10,
        help="Order book depth, 1-20 (default: 10).",
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Seconds to stay subscribed before unsubscribing (default: 10).",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INVEST_LOG_LEVEL or INFO).",
    )

    return parser.parse_args()


async def stream(args: argparse.Namespace, settings: StreamingSettings) -> int:
    logger = get_logger("script", "stream_example", {"figi": args.figi}, log_level=settings.log_level)
    client_logger = get_logger("streaming", "invest_openapi", log_level=settings.log_level)
    client = await StreamingClient.from_settings(settings, logger=client_logger)

    def on_event(event):
        logger.info(f"Got event {event!r}")

    reader = asyncio.create_task(client.run_read_loop(on_event), name="stream-read-loop")
    interval = CandleInterval(args.interval)

    try:
        logger.info(f"Subscribing to instrument info for {args.figi}")
        await client.subscribe_instrument_info(args.figi, new_request_id())

        logger.info(f"Subscribing to {interval.value} candles for {args.figi}")
        await client.subscribe_candle(args.figi, interval, new_request_id())

        logger.info(f"Subscribing to order book (depth {args.depth}) for {args.figi}")
        await client.subscribe_orderbook(args.figi, args.depth, new_request_id())

        done, _ = await asyncio.wait({reader}, timeout=args.duration)
        if reader in done:
            # The loop only ends on failure; surface it
            reader.result()

        logger.info(f"Unsubscribing from {args.figi}")
        await client.unsubscribe_instrument_info(args.figi, new_request_id())
        await client.unsubscribe_candle(args.figi, interval, new_request_id())
        await client.unsubscribe_orderbook(args.figi, args.depth, new_request_id())
    finally:
        await client.close()
        try:
            await reader
        except StreamingReadError:
            pass

    return 0


def main() -> int:
    args = parse_arguments()
    dotenv.load_dotenv(args.env_file)

    overrides = {}
    if args.token:
        overrides["token"] = args.token
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        settings = StreamingSettings(**overrides)
        return asyncio.run(stream(args, settings))
    except KeyboardInterrupt:
        return 130
    except MissingTokenError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except StreamingError as exc:
        print(f"Streaming failed: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
