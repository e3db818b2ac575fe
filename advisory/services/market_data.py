"""Stock quote providers backing price refreshes and portfolio valuation."""
from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Protocol

from advisory.core.config import MarketDataSettings, get_settings
from advisory.core.logger import get_logger
from advisory.domain.finance import quantize_money
from advisory.models.base import utcnow
from advisory.models.portfolio import TICKER_PATTERN

LOGGER = get_logger(__name__)

MOCK_PRICES: dict[str, Decimal] = {
    "AAPL": Decimal("175.50"),
    "MSFT": Decimal("378.25"),
    "GOOGL": Decimal("142.65"),
    "AMZN": Decimal("155.80"),
    "TSLA": Decimal("238.45"),
}

# name, exchange, sector
MOCK_COMPANIES: dict[str, tuple[str, str, str]] = {
    "AAPL": ("Apple Inc.", "NASDAQ", "Technology"),
    "MSFT": ("Microsoft Corporation", "NASDAQ", "Technology"),
    "GOOGL": ("Alphabet Inc.", "NASDAQ", "Technology"),
    "AMZN": ("Amazon.com, Inc.", "NASDAQ", "Consumer Discretionary"),
    "TSLA": ("Tesla, Inc.", "NASDAQ", "Automotive"),
}


@dataclass(frozen=True)
class StockQuote:
    symbol: str
    company_name: str
    exchange: str
    sector: str
    current_price: Decimal
    previous_close: Decimal
    day_high: Decimal
    day_low: Decimal
    currency: str
    last_updated: datetime

    @property
    def day_change(self) -> Decimal:
        return self.current_price - self.previous_close

    @property
    def day_change_percentage(self) -> float:
        if not self.previous_close:
            return 0.0
        return round(float(self.day_change / self.previous_close * 100), 2)


class QuoteProvider(Protocol):
    def get_current_price(self, symbol: str) -> Decimal | None: ...

    def get_quote(self, symbol: str) -> StockQuote | None: ...

    def get_batch_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]: ...


def normalize_symbol(symbol: str | None) -> str | None:
    """Upper-case ``symbol`` and return it when it looks like a US ticker."""

    if not symbol:
        return None
    candidate = symbol.strip().upper()
    return candidate if TICKER_PATTERN.match(candidate) else None


class StaticQuoteProvider:
    """Offline provider with fixed prices for well-known tickers.

    Unknown but well-formed tickers get a stable price in the 50-250 range
    derived from the symbol. ``variation`` adds a random +/- jitter fraction.
    """

    def __init__(self, variation: float = 0.0, rng: random.Random | None = None) -> None:
        self._variation = max(0.0, variation)
        self._rng = rng or random.Random()

    @staticmethod
    def _base_price(symbol: str) -> Decimal:
        known = MOCK_PRICES.get(symbol)
        if known is not None:
            return known
        digest = int(hashlib.sha256(symbol.encode("ascii")).hexdigest(), 16)
        return Decimal(50) + Decimal(digest % 20000) / Decimal(100)

    def get_current_price(self, symbol: str) -> Decimal | None:
        normalized = normalize_symbol(symbol)
        if normalized is None:
            return None
        price = self._base_price(normalized)
        if self._variation:
            factor = Decimal(str(1 + self._rng.uniform(-self._variation, self._variation)))
            price = quantize_money(price * factor)
        return price

    def get_quote(self, symbol: str) -> StockQuote | None:
        price = self.get_current_price(symbol)
        if price is None:
            return None
        normalized = normalize_symbol(symbol)
        name, exchange, sector = MOCK_COMPANIES.get(
            normalized, (f"{normalized} Corporation", "NYSE", "Unknown")
        )
        return StockQuote(
            symbol=normalized,
            company_name=name,
            exchange=exchange,
            sector=sector,
            current_price=price,
            previous_close=quantize_money(price * Decimal("0.99")),
            day_high=quantize_money(price * Decimal("1.02")),
            day_low=quantize_money(price * Decimal("0.98")),
            currency="USD",
            last_updated=utcnow(),
        )

    def get_batch_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]:
        prices: dict[str, Decimal] = {}
        for symbol in symbols:
            price = self.get_current_price(symbol)
            if price is not None:
                prices[symbol] = price
        return prices


class YahooQuoteProvider:
    """Live prices from Yahoo Finance through ``yfinance``."""

    def __init__(self, ticker_factory=None) -> None:
        if ticker_factory is None:
            import yfinance as yf

            ticker_factory = yf.Ticker
        self._ticker_factory = ticker_factory

    def _history(self, symbol: str):
        ticker = self._ticker_factory(symbol)
        return ticker, ticker.history(period="5d")

    def get_current_price(self, symbol: str) -> Decimal | None:
        quote = self.get_quote(symbol)
        return quote.current_price if quote else None

    def get_quote(self, symbol: str) -> StockQuote | None:
        normalized = normalize_symbol(symbol)
        if normalized is None:
            return None
        try:
            ticker, hist = self._history(normalized)
        except Exception as exc:  # network and parsing errors from yfinance
            LOGGER.error("Failed to fetch quote for %s: %s", normalized, exc)
            return None
        if hist is None or hist.empty:
            LOGGER.warning("No data found for %s", normalized)
            return None

        last = hist.iloc[-1]
        previous = hist.iloc[-2] if len(hist) > 1 else last
        info = getattr(ticker, "info", None) or {}
        return StockQuote(
            symbol=normalized,
            company_name=info.get("shortName") or f"{normalized} Corporation",
            exchange=info.get("exchange") or "NYSE",
            sector=info.get("sector") or "Unknown",
            current_price=quantize_money(Decimal(str(last["Close"]))),
            previous_close=quantize_money(Decimal(str(previous["Close"]))),
            day_high=quantize_money(Decimal(str(last["High"]))),
            day_low=quantize_money(Decimal(str(last["Low"]))),
            currency=info.get("currency") or "USD",
            last_updated=utcnow(),
        )

    def get_batch_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]:
        prices: dict[str, Decimal] = {}
        for symbol in symbols:
            price = self.get_current_price(symbol)
            if price is not None:
                prices[symbol] = price
        return prices


def build_quote_provider(settings: MarketDataSettings) -> QuoteProvider:
    if settings.provider == "yahoo":
        return YahooQuoteProvider()
    if settings.provider != "static":
        LOGGER.warning("Unknown market data provider %r, using static prices", settings.provider)
    return StaticQuoteProvider(variation=settings.variation)


@lru_cache(maxsize=1)
def get_quote_provider() -> QuoteProvider:
    """Return the configured, process-wide quote provider."""

    return build_quote_provider(get_settings().market_data)


__all__ = [
    "MOCK_PRICES",
    "QuoteProvider",
    "StaticQuoteProvider",
    "StockQuote",
    "YahooQuoteProvider",
    "build_quote_provider",
    "get_quote_provider",
    "normalize_symbol",
]
