"""List and detail view controllers, one pair per browser session.

Each view owns a FetchSite, so navigation within one browser supersedes its
own in-flight fetches without affecting other browsers. Sessions live in a
bounded LRU registry. Eviction only forgets a session: fetches it already
started run to completion so the requests awaiting them still render.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import OrderedDict

from crypto_tracker.config import DashboardSettings
from crypto_tracker.logging import get_logger
from crypto_tracker.market_data.detail_fetcher import CoinDetailFetcher
from crypto_tracker.market_data.list_fetcher import ListQuery, MarketDataFetcher
from crypto_tracker.models import CoinDetail, CoinSummary
from crypto_tracker.state import FetchSite, FetchState

logger = get_logger(__name__)


def sort_by_rank(coins: list[CoinSummary], descending: bool = False) -> list[CoinSummary]:
    """Order coins by market-cap rank; unranked coins always go last."""
    ranked = [c for c in coins if c.market_cap_rank is not None]
    unranked = [c for c in coins if c.market_cap_rank is None]
    ranked.sort(key=lambda c: c.market_cap_rank, reverse=descending)  # type: ignore[arg-type, return-value]
    return ranked + unranked


class ListView:
    """Ranked coin table. Keeps the last list visible (stale) after an error."""

    def __init__(self, fetcher: MarketDataFetcher, query: ListQuery) -> None:
        self._fetcher = fetcher
        self._query = query
        self.site: FetchSite[list[CoinSummary]] = FetchSite(
            "coin_list", keep_value_on_error=True
        )

    @property
    def query(self) -> ListQuery:
        return self._query

    async def mount(self) -> FetchState[list[CoinSummary]]:
        """Fetch the list and wait for the newest fetch to settle."""
        return await self.site.load(self._fetch, params=self._query)

    def refresh(self) -> asyncio.Task:  # type: ignore[type-arg]
        """Start a refetch in the background, superseding any fetch in flight."""
        return self.site.trigger(self._fetch, params=self._query)

    async def _fetch(self) -> list[CoinSummary]:
        return await self._fetcher.fetch(self._query)


class DetailView:
    """Single-coin page. An error clears the previous coin so it is never shown
    under another coin's URL."""

    def __init__(self, fetcher: CoinDetailFetcher, currency: str) -> None:
        self._fetcher = fetcher
        self._currency = currency
        self.site: FetchSite[CoinDetail] = FetchSite(
            "coin_detail", keep_value_on_error=False
        )

    async def show(self, coin_id: str) -> FetchState[CoinDetail]:
        """Fetch ``coin_id`` and wait for the newest fetch to settle.

        If a fetch for another coin superseded this one, returns an idle
        state for ``coin_id`` with no value.
        """

        async def fetch() -> CoinDetail:
            return await self._fetcher.fetch(coin_id, self._currency)

        state = await self.site.load(fetch, params=coin_id)
        if state.params != coin_id:
            logger.info("coin_detail_superseded", coin_id=coin_id, newer_coin_id=state.params)
            return FetchState(params=coin_id)
        return state


class ViewSession:
    """The views belonging to one browser."""

    def __init__(self, session_id: str, list_view: ListView, detail_view: DetailView) -> None:
        self.session_id = session_id
        self.list_view = list_view
        self.detail_view = detail_view

    async def close(self) -> None:
        await self.list_view.site.cancel()
        await self.detail_view.site.cancel()


class SessionRegistry:
    """Bounded LRU map of session id -> ViewSession."""

    def __init__(
        self,
        list_fetcher: MarketDataFetcher,
        detail_fetcher: CoinDetailFetcher,
        settings: DashboardSettings,
    ) -> None:
        self._list_fetcher = list_fetcher
        self._detail_fetcher = detail_fetcher
        self._settings = settings
        self._query = ListQuery(
            target_currency=settings.currency,
            page_size=settings.page_size,
            include_descriptions=settings.include_descriptions,
        )
        self._sessions: OrderedDict[str, ViewSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str | None) -> ViewSession:
        """Return the session for ``session_id``, creating one if unknown."""
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return self._sessions[session_id]

        session = ViewSession(
            session_id=uuid.uuid4().hex,
            list_view=ListView(self._list_fetcher, self._query),
            detail_view=DetailView(self._detail_fetcher, self._settings.currency),
        )
        self._sessions[session.session_id] = session

        while len(self._sessions) > self._settings.max_sessions:
            _, evicted = self._sessions.popitem(last=False)
            logger.debug("view_session_evicted", session_id=evicted.session_id)

        return session

    async def close(self) -> None:
        """Cancel every session's in-flight fetches."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.close()
