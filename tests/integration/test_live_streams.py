"""Integration tests against the live (paper) streaming endpoints."""

import asyncio
import os

import pytest

from apca.stream import AuthenticationError, Feed, MarketData, RealtimeData, TradeUpdates, drive
from apca.stream.core import ApiInfo

pytestmark = pytest.mark.skipif(
    os.environ.get("APCA_RUN_NETWORK_TESTS") != "1",
    reason="Requires network access and APCA_API_* credentials",
)


class TestRealtimeDataIntegration:
    """Test the market data channel against the IEX feed."""

    @pytest.mark.asyncio
    async def test_subscribe_and_unsubscribe(self, api_info):
        stream, subscription = await RealtimeData(feed=Feed.IEX).connect(api_info, MarketData(bars=["SPY", "AAPL"]))
        try:
            assert subscription.subscriptions.bars == ["AAPL", "SPY"]

            await drive(subscription.subscribe(MarketData(trades=["*"])), stream)
            assert subscription.subscriptions.trades.is_all

            await drive(subscription.unsubscribe(MarketData(bars=["AAPL", "SPY"], trades=["*"])), stream)
            assert subscription.subscriptions.is_empty
        finally:
            await subscription.close()

    @pytest.mark.asyncio
    async def test_bad_credentials(self, api_info):
        bad = ApiInfo.from_parts(api_info.api_base_url, "invalid", "invalid")
        with pytest.raises(AuthenticationError):
            await asyncio.wait_for(RealtimeData(feed=Feed.IEX).connect(bad), timeout=30)


class TestTradeUpdatesIntegration:
    """Test the trade update channel handshake."""

    @pytest.mark.asyncio
    async def test_connect(self, api_info):
        _, subscription = await asyncio.wait_for(TradeUpdates().connect(api_info), timeout=30)
        await subscription.close()
