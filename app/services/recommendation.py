"""Recommendation filter - picks catalog instruments that fit a risk score"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from app.services.catalog import AssetClass, Instrument, RiskLevel

EQUITY_LIMIT = 3
DEBT_LIMIT = 2
GOVERNMENT_LIMIT = 2


@dataclass
class Recommendations:
    equity: List[Instrument] = field(default_factory=list)
    debt: List[Instrument] = field(default_factory=list)
    government: List[Instrument] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[Instrument]]:
        return {
            AssetClass.EQUITY.value: self.equity,
            AssetClass.DEBT.value: self.debt,
            AssetClass.GOVERNMENT.value: self.government,
        }


def eligible_equity_risk_levels(score: int) -> List[RiskLevel]:
    if score <= 30:
        return [RiskLevel.LOW]
    if score <= 50:
        return [RiskLevel.LOW, RiskLevel.MEDIUM]
    return [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH]


def _by_return(instruments: Iterable[Instrument]) -> List[Instrument]:
    # sorted() is stable, so equal returns keep catalog order
    return sorted(instruments, key=lambda i: i.three_year_return, reverse=True)


def recommend(score: int, catalog: Iterable[Instrument]) -> Recommendations:
    """Select and order instruments per asset class for ``score``.

    Equity candidates are gated by risk level; conservative scores (<= 40)
    see the least volatile funds first, the rest see the best 3-year
    returns first. Debt and government lists are always ranked by return.
    """
    instruments = list(catalog)
    allowed = eligible_equity_risk_levels(score)

    equity = [
        i for i in instruments
        if i.asset_class == AssetClass.EQUITY and i.risk_level in allowed
    ]
    if score <= 40:
        equity = sorted(equity, key=lambda i: i.volatility)
    else:
        equity = _by_return(equity)

    debt = _by_return(i for i in instruments if i.asset_class == AssetClass.DEBT)
    government = _by_return(i for i in instruments if i.asset_class == AssetClass.GOVERNMENT)

    return Recommendations(
        equity=equity[:EQUITY_LIMIT],
        debt=debt[:DEBT_LIMIT],
        government=government[:GOVERNMENT_LIMIT],
    )
