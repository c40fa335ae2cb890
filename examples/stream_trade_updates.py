#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from apca.stream import Client, DecodeError, TradeUpdate, TradeUpdates


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Print order updates of the account (needs APCA_API_* env vars)")
    p.add_argument("limit", nargs="?", type=int, default=10)
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with Client.from_env() as client:
        stream, subscription = await client.subscribe(TradeUpdates())
        print("Listening for trade updates...")
        try:
            count = 0
            async for update in stream:
                if isinstance(update, TradeUpdate):
                    order = update.order
                    print(
                        f"{update.event.value:14} | {order.symbol:6} {order.side.value:4} "
                        f"qty={order.quantity} filled={order.filled_quantity} status={order.status.value}"
                    )
                elif isinstance(update, DecodeError):
                    print(f"undecodable message: {update}")
                count += 1
                if count >= args.limit:
                    break
        finally:
            await subscription.close()


if __name__ == "__main__":
    asyncio.run(main())
