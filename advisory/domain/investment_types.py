"""Kinds of investment vehicles offered to clients."""
from __future__ import annotations

from enum import Enum


class InvestmentType(str, Enum):
    STOCK = "STOCK"
    ETF = "ETF"
    MUTUAL_FUND = "MUTUAL_FUND"
    BOND = "BOND"
    REIT = "REIT"
    OTHER = "OTHER"

    @property
    def code(self) -> str:
        return _META[self][0]

    @property
    def display_name(self) -> str:
        return _META[self][1]

    @property
    def description(self) -> str:
        return _META[self][2]

    @property
    def is_tradable(self) -> bool:
        return _META[self][3]

    @property
    def pays_dividends(self) -> bool:
        return _META[self][4]

    @property
    def supports_fractional_shares(self) -> bool:
        return _META[self][5]

    @classmethod
    def from_code(cls, code: str) -> "InvestmentType":
        normalized = (code or "").strip().upper()
        for member in cls:
            if member.code == normalized or member.value == normalized:
                return member
        raise ValueError(f"Unknown investment type code: {code}")

    @classmethod
    def tradable_types(cls) -> list["InvestmentType"]:
        return [member for member in cls if member.is_tradable]

    @classmethod
    def dividend_paying_types(cls) -> list["InvestmentType"]:
        return [member for member in cls if member.pays_dividends]


# code, display name, description, tradable, dividends, fractional shares
_META = {
    InvestmentType.STOCK: ("STK", "Stock", "Individual company shares traded on NYSE, NASDAQ, etc.", True, True, True),
    InvestmentType.ETF: ("ETF", "Exchange-Traded Fund", "A basket of securities that trades like a stock", True, True, True),
    InvestmentType.MUTUAL_FUND: ("MF", "Mutual Fund", "Pooled investment managed by professionals", True, True, True),
    InvestmentType.BOND: ("BND", "Bond", "Fixed income securities with regular interest payments", True, False, False),
    InvestmentType.REIT: (
        "REIT",
        "Real Estate Investment Trust",
        "Companies that own or finance income-producing real estate",
        True,
        True,
        True,
    ),
    InvestmentType.OTHER: ("OTH", "Other Investment", "Alternative investments not categorized above", False, False, False),
}

__all__ = ["InvestmentType"]
