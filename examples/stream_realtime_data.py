#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from apca.stream import (
    ApiInfo,
    Bar,
    Client,
    DecodeError,
    ErrorMessage,
    Feed,
    MarketData,
    Quote,
    RealtimeData,
    Trade,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream realtime bars, quotes and trades (needs APCA_API_* env vars)")
    p.add_argument("symbols", nargs="*", default=["AAPL", "SPY"])
    p.add_argument("--feed", default="iex", choices=[f.value for f in Feed])
    p.add_argument("--quotes", action="store_true", help="also subscribe to quotes")
    p.add_argument("--limit", type=int, default=20, help="stop after this many events")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    symbols = [s.upper() for s in args.symbols]
    request = MarketData(bars=symbols, trades=symbols, quotes=symbols if args.quotes else ())

    async with Client(ApiInfo.from_env()) as client:
        stream, subscription = await client.subscribe(RealtimeData(feed=Feed(args.feed)), subscriptions=request)
        print(f"Subscribed: {subscription.subscriptions}")
        try:
            count = 0
            async for event in stream:
                if isinstance(event, Bar):
                    print(f"{event.timestamp.isoformat()} | BAR   {event.symbol:6} c={event.close_price} v={event.volume}")
                elif isinstance(event, Trade):
                    print(f"{event.timestamp.isoformat()} | TRADE {event.symbol:6} p={event.price} s={event.size}")
                elif isinstance(event, Quote):
                    print(
                        f"{event.timestamp.isoformat()} | QUOTE {event.symbol:6} "
                        f"{event.bid_price}x{event.bid_size} / {event.ask_price}x{event.ask_size}"
                    )
                elif isinstance(event, ErrorMessage):
                    print(f"server error: {event}")
                elif isinstance(event, DecodeError):
                    print(f"undecodable message: {event}")
                count += 1
                if count >= args.limit:
                    break
        finally:
            await subscription.close()


if __name__ == "__main__":
    asyncio.run(main())
