"""Shared data models for the crypto tracker.

Coin records carry both the raw upstream numbers and their display strings.
Upstream nulls stay None.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CoinSummary:
    """One row of the ranked coin list, priced in a single display currency."""

    id: str
    symbol: str
    name: str
    image: str
    currency: str  # upper-case display currency code, e.g. "ZAR"

    current_price: float | None
    price_change_24h: float | None
    price_change_percentage_24h: float | None
    market_cap: float | None
    total_volume: float | None
    market_cap_rank: int | None
    high_24h: float | None
    low_24h: float | None
    circulating_supply: float | None
    ath: float | None
    ath_date: str | None  # ISO-8601
    last_updated: str | None  # ISO-8601
    description: str | None

    formatted_price: str
    formatted_price_change: str
    formatted_price_change_percentage: str
    formatted_market_cap: str
    formatted_total_volume: str
    formatted_high_24h: str
    formatted_low_24h: str
    formatted_circulating_supply: str
    formatted_ath: str
    formatted_ath_date: str
    formatted_last_updated: str

    @property
    def is_price_up(self) -> bool:
        """True when the 24h change is zero or positive."""
        return (
            self.price_change_percentage_24h is not None
            and self.price_change_percentage_24h >= 0
        )


@dataclass(frozen=True)
class CoinDetail(CoinSummary):
    """Full detail for a single coin: the summary plus lows, sentiment and links."""

    atl: float | None
    atl_date: str | None
    up_votes_percentage: float
    down_votes_percentage: float
    homepage: str
    blockchain_site: str

    formatted_atl: str
    formatted_atl_date: str
    formatted_up_votes_percentage: str
    formatted_down_votes_percentage: str


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    """Point-in-time exchange rates relative to a base currency.

    ``target_rate`` is None unless the snapshot contains the target code;
    conversions then report "unavailable" (None), never zero.
    """

    base: str
    timestamp: int  # Unix seconds
    target_currency: str
    rates: dict[str, float] = field(default_factory=dict)

    @property
    def target_rate(self) -> float | None:
        return self.rates.get(self.target_currency.upper())

    def to_target(self, amount: float | None) -> float | None:
        """Convert a base-currency amount to the target currency, or None."""
        rate = self.target_rate
        if amount is None or rate is None:
            return None
        return amount * rate
