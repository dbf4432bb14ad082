"""Instrument catalog - static reference data for the simulator and recommendations"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional

from app.services.errors import UnknownInstrumentError


class AssetClass(str, enum.Enum):
    """Asset classes used by allocation and recommendations"""
    EQUITY = "equity"
    DEBT = "debt"
    GOVERNMENT = "government"


class RiskLevel(str, enum.Enum):
    """Instrument risk level"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Instrument:
    """A tradable instrument. Returns, volatility and expense ratio are percentages."""

    symbol: str
    name: str
    asset_class: AssetClass
    three_year_return: Decimal
    volatility: Decimal
    expense_ratio: Decimal
    current_price: Decimal
    risk_level: RiskLevel
    min_investment: Decimal
    description: str = ""


class InstrumentCatalog:
    """Read-only, ordered collection of instruments keyed by symbol.

    Iteration order is the catalog order; recommendation sorts rely on it
    to break ties.
    """

    def __init__(self, instruments: Iterable[Instrument]) -> None:
        self._instruments: List[Instrument] = []
        self._by_symbol: Dict[str, Instrument] = {}
        for instrument in instruments:
            if instrument.symbol in self._by_symbol:
                raise ValueError(f"Duplicate instrument symbol: {instrument.symbol}")
            self._instruments.append(instrument)
            self._by_symbol[instrument.symbol] = instrument

    @classmethod
    def default(cls) -> "InstrumentCatalog":
        return cls(DEFAULT_INSTRUMENTS)

    def __iter__(self) -> Iterator[Instrument]:
        return iter(self._instruments)

    def __len__(self) -> int:
        return len(self._instruments)

    def find(self, symbol: str) -> Optional[Instrument]:
        return self._by_symbol.get(symbol)

    def get(self, symbol: str) -> Instrument:
        """Look up an instrument, raising UnknownInstrumentError if absent."""
        instrument = self.find(symbol)
        if instrument is None:
            raise UnknownInstrumentError(symbol)
        return instrument

    def by_class(self, asset_class: AssetClass) -> List[Instrument]:
        return [i for i in self._instruments if i.asset_class == asset_class]

    def search(self, term: str) -> List[Instrument]:
        """Case-insensitive match on name or symbol; an empty term returns everything."""
        needle = term.strip().lower()
        if not needle:
            return list(self._instruments)
        return [
            i for i in self._instruments
            if needle in i.name.lower() or needle in i.symbol.lower()
        ]

    def prices(self) -> Dict[str, Decimal]:
        """Current catalog price per symbol, usable as a price map."""
        return {i.symbol: i.current_price for i in self._instruments}


def _instrument(
    symbol: str,
    name: str,
    asset_class: AssetClass,
    three_year_return: str,
    volatility: str,
    expense_ratio: str,
    current_price: str,
    risk_level: RiskLevel,
    min_investment: str,
    description: str,
) -> Instrument:
    return Instrument(
        symbol=symbol,
        name=name,
        asset_class=asset_class,
        three_year_return=Decimal(three_year_return),
        volatility=Decimal(volatility),
        expense_ratio=Decimal(expense_ratio),
        current_price=Decimal(current_price),
        risk_level=risk_level,
        min_investment=Decimal(min_investment),
        description=description,
    )


DEFAULT_INSTRUMENTS: List[Instrument] = [
    # Equity
    _instrument(
        "NIFTY50ETF", "Nifty 50 ETF", AssetClass.EQUITY,
        "12.5", "16.2", "0.5", "185.50", RiskLevel.MEDIUM, "1000",
        "Tracks the Nifty 50 index, providing broad market exposure to top 50 Indian companies.",
    ),
    _instrument(
        "ICICIPRU", "ICICI Prudential Bluechip Fund", AssetClass.EQUITY,
        "14.8", "18.5", "1.05", "62.30", RiskLevel.MEDIUM, "5000",
        "Invests in large-cap stocks with strong fundamentals and growth potential.",
    ),
    _instrument(
        "HDFCTOP100", "HDFC Top 100 Fund", AssetClass.EQUITY,
        "13.2", "17.8", "1.25", "745.20", RiskLevel.MEDIUM, "5000",
        "Focuses on top 100 companies by market capitalization for steady growth.",
    ),
    _instrument(
        "MOTILALMIDCAP", "Motilal Oswal Midcap Fund", AssetClass.EQUITY,
        "18.6", "24.3", "1.8", "89.15", RiskLevel.HIGH, "5000",
        "Invests in mid-cap companies with high growth potential but higher volatility.",
    ),
    _instrument(
        "SBISMALLCAP", "SBI Small Cap Fund", AssetClass.EQUITY,
        "22.4", "28.7", "1.95", "156.80", RiskLevel.HIGH, "5000",
        "Targets small-cap companies for potentially higher returns with significant risk.",
    ),
    # Debt
    _instrument(
        "ICICISHTERM", "ICICI Short Term Fund", AssetClass.DEBT,
        "6.8", "2.1", "0.65", "28.45", RiskLevel.LOW, "5000",
        "Invests in short-term debt securities with low interest rate risk.",
    ),
    _instrument(
        "HDFCCORP", "HDFC Corporate Bond Fund", AssetClass.DEBT,
        "7.2", "2.8", "0.45", "22.15", RiskLevel.LOW, "5000",
        "Invests in high-quality corporate bonds for stable income.",
    ),
    _instrument(
        "AXISCREDIT", "Axis Credit Risk Fund", AssetClass.DEBT,
        "8.5", "4.2", "1.15", "19.85", RiskLevel.MEDIUM, "5000",
        "Invests in lower-rated corporate bonds for higher yields with moderate risk.",
    ),
    _instrument(
        "UTILTDURATION", "UTI Medium Duration Fund", AssetClass.DEBT,
        "7.8", "3.5", "0.85", "25.60", RiskLevel.LOW, "5000",
        "Invests in medium-duration debt securities balancing yield and interest rate risk.",
    ),
    # Government securities
    _instrument(
        "GILT10Y", "10-Year Government Bond", AssetClass.GOVERNMENT,
        "6.2", "3.8", "0.25", "102.50", RiskLevel.LOW, "10000",
        "Direct investment in 10-year government bonds with sovereign guarantee.",
    ),
    _instrument(
        "SBIGILTSEC", "SBI Magnum Gilt Fund", AssetClass.GOVERNMENT,
        "5.9", "4.1", "0.55", "48.25", RiskLevel.LOW, "5000",
        "Invests in government securities across different maturities.",
    ),
    _instrument(
        "ICICIGILT", "ICICI Gilt Fund", AssetClass.GOVERNMENT,
        "6.0", "3.9", "0.6", "18.90", RiskLevel.LOW, "5000",
        "Focuses on government bonds for capital preservation and steady income.",
    ),
]
