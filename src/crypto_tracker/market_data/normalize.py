"""Map raw CoinGecko payloads onto CoinSummary / CoinDetail records.

Extraction happens first, conversion second, formatting last. Every
monetary field passes through the supplied converter: the identity when
the upstream already priced the coin in the display currency, or an
exchange-rate conversion otherwise. Percentages and supply are
currency-independent and never converted.

Any missing required key or wrongly-typed value is reported as
MalformedResponseError.
"""

from collections.abc import Callable, Mapping
from typing import Any

from crypto_tracker import formatters as fmt
from crypto_tracker.exceptions import MalformedResponseError, UnsupportedCurrencyError
from crypto_tracker.models import CoinDetail, CoinSummary

Converter = Callable[[float | None], float | None]


def no_conversion(amount: float | None) -> float | None:
    return amount


def _number(raw: Any, field: str) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedResponseError(f"Field '{field}' is not numeric: {raw!r}")
    return float(raw)


def _rank(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedResponseError(f"Field 'market_cap_rank' is not numeric: {raw!r}")
    return int(raw)


def _text(raw: Any) -> str | None:
    return raw if isinstance(raw, str) and raw else None


def _first_link(links: Mapping[str, Any], key: str) -> str:
    """Return the first non-empty URL of a CoinGecko link list."""
    values = links.get(key) or []
    if isinstance(values, str):
        return values
    return next((v for v in values if isinstance(v, str) and v), "")


def _in_currency(market_data: Mapping[str, Any], field: str, currency: str) -> Any:
    per_currency = market_data.get(field)
    if per_currency is None:
        return None
    if not isinstance(per_currency, Mapping):
        raise MalformedResponseError(f"Field 'market_data.{field}' is not a currency map")
    return per_currency.get(currency)


def _summary_fields(
    *,
    currency: str,
    convert: Converter,
    current_price: Any,
    price_change_24h: Any,
    price_change_percentage_24h: Any,
    market_cap: Any,
    total_volume: Any,
    high_24h: Any,
    low_24h: Any,
    circulating_supply: Any,
    ath: Any,
    ath_date: Any,
    last_updated: Any,
) -> dict[str, Any]:
    """Convert and format the fields CoinSummary and CoinDetail share."""
    price = convert(_number(current_price, "current_price"))
    change = convert(_number(price_change_24h, "price_change_24h"))
    change_pct = _number(price_change_percentage_24h, "price_change_percentage_24h")
    cap = convert(_number(market_cap, "market_cap"))
    volume = convert(_number(total_volume, "total_volume"))
    high = convert(_number(high_24h, "high_24h"))
    low = convert(_number(low_24h, "low_24h"))
    supply = _number(circulating_supply, "circulating_supply")
    ath_value = convert(_number(ath, "ath"))
    ath_date = _text(ath_date)
    last_updated = _text(last_updated)

    return {
        "currency": currency,
        "current_price": price,
        "price_change_24h": change,
        "price_change_percentage_24h": change_pct,
        "market_cap": cap,
        "total_volume": volume,
        "high_24h": high,
        "low_24h": low,
        "circulating_supply": supply,
        "ath": ath_value,
        "ath_date": ath_date,
        "last_updated": last_updated,
        "formatted_price": fmt.format_currency(price, currency),
        "formatted_price_change": fmt.format_currency(change, currency),
        "formatted_price_change_percentage": fmt.format_percentage(change_pct),
        "formatted_market_cap": fmt.format_currency_no_fraction(cap, currency),
        "formatted_total_volume": fmt.format_currency_no_fraction(volume, currency),
        "formatted_high_24h": fmt.format_currency(high, currency),
        "formatted_low_24h": fmt.format_currency(low, currency),
        "formatted_circulating_supply": fmt.format_plain_number(supply),
        "formatted_ath": fmt.format_currency(ath_value, currency),
        "formatted_ath_date": fmt.format_date(ath_date),
        "formatted_last_updated": fmt.format_datetime(last_updated),
    }


def summary_from_market(
    item: Mapping[str, Any],
    currency: str,
    convert: Converter = no_conversion,
    description: str | None = None,
) -> CoinSummary:
    """Build a CoinSummary from one /coins/markets entry.

    Args:
        item: Raw market object.
        currency: Display currency code (formatting only).
        convert: Applied to every monetary field.
        description: Long-form description from the enrichment request, if any.
    """
    if not isinstance(item, Mapping):
        raise MalformedResponseError("CoinGecko market entry is not a JSON object")
    try:
        return CoinSummary(
            id=item["id"],
            symbol=str(item["symbol"]).upper(),
            name=item["name"],
            image=item.get("image") or "",
            market_cap_rank=_rank(item.get("market_cap_rank")),
            description=description,
            **_summary_fields(
                currency=currency.upper(),
                convert=convert,
                current_price=item.get("current_price"),
                price_change_24h=item.get("price_change_24h"),
                price_change_percentage_24h=item.get("price_change_percentage_24h"),
                market_cap=item.get("market_cap"),
                total_volume=item.get("total_volume"),
                high_24h=item.get("high_24h"),
                low_24h=item.get("low_24h"),
                circulating_supply=item.get("circulating_supply"),
                ath=item.get("ath"),
                ath_date=item.get("ath_date"),
                last_updated=item.get("last_updated"),
            ),
        )
    except KeyError as e:
        raise MalformedResponseError(f"CoinGecko market entry missing field {e}") from e


def detail_from_coin(
    data: Mapping[str, Any],
    price_currency: str,
    display_currency: str,
    convert: Converter = no_conversion,
) -> CoinDetail:
    """Build a CoinDetail from a /coins/{id} payload.

    Args:
        data: Raw coin object.
        price_currency: Key to read from the per-currency ``market_data`` maps.
        display_currency: Currency the record is formatted in.
        convert: Applied to every monetary field after extraction.

    Raises:
        UnsupportedCurrencyError: ``market_data.current_price`` has no entry
            for ``price_currency``.
        MalformedResponseError: Required fields are missing or mistyped.
    """
    try:
        coin_id = data["id"]
        market_data = data["market_data"]
        if not isinstance(market_data, Mapping):
            raise MalformedResponseError("CoinGecko 'market_data' is not a JSON object")

        key = price_currency.lower()
        prices = market_data.get("current_price")
        if not isinstance(prices, Mapping):
            raise MalformedResponseError("CoinGecko 'market_data.current_price' is missing")
        if key not in prices:
            raise UnsupportedCurrencyError(coin_id, price_currency)

        currency = display_currency.upper()
        image = data.get("image") or {}
        links = data.get("links") or {}
        description = data.get("description") or {}

        atl = convert(_number(_in_currency(market_data, "atl", key), "atl"))
        atl_date = _text(_in_currency(market_data, "atl_date", key))
        up_votes = _number(data.get("sentiment_votes_up_percentage"), "sentiment_votes_up_percentage") or 0.0
        down_votes = _number(data.get("sentiment_votes_down_percentage"), "sentiment_votes_down_percentage") or 0.0
        rank = market_data.get("market_cap_rank", data.get("market_cap_rank"))

        return CoinDetail(
            id=coin_id,
            symbol=str(data["symbol"]).upper(),
            name=data["name"],
            image=image.get("large") or image.get("small") or image.get("thumb") or "",
            market_cap_rank=_rank(rank),
            description=_text(description.get("en")),
            **_summary_fields(
                currency=currency,
                convert=convert,
                current_price=prices[key],
                price_change_24h=_in_currency(market_data, "price_change_24h_in_currency", key),
                price_change_percentage_24h=_in_currency(
                    market_data, "price_change_percentage_24h_in_currency", key
                ),
                market_cap=_in_currency(market_data, "market_cap", key),
                total_volume=_in_currency(market_data, "total_volume", key),
                high_24h=_in_currency(market_data, "high_24h", key),
                low_24h=_in_currency(market_data, "low_24h", key),
                circulating_supply=market_data.get("circulating_supply"),
                ath=_in_currency(market_data, "ath", key),
                ath_date=_in_currency(market_data, "ath_date", key),
                last_updated=data.get("last_updated"),
            ),
            atl=atl,
            atl_date=atl_date,
            up_votes_percentage=up_votes,
            down_votes_percentage=down_votes,
            homepage=_first_link(links, "homepage"),
            blockchain_site=_first_link(links, "blockchain_site"),
            formatted_atl=fmt.format_currency(atl, currency),
            formatted_atl_date=fmt.format_date(atl_date),
            formatted_up_votes_percentage=f"{up_votes:.2f}%",
            formatted_down_votes_percentage=f"{down_votes:.2f}%",
        )
    except KeyError as e:
        raise MalformedResponseError(f"CoinGecko coin payload missing field {e}") from e
    except AttributeError as e:
        raise MalformedResponseError("CoinGecko coin payload has an unexpected shape") from e
