"""Advisor session - owns one user's risk profile and portfolio.

Loaded from a SnapshotStore at the start of a request and saved back after
every successful mutation. Rejected trades are not saved.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional

from app.services.catalog import InstrumentCatalog
from app.services.errors import RiskProfileMissingError
from app.services.portfolio_ledger import (
    DEFAULT_STARTING_CASH,
    PortfolioLedger,
    TradeResult,
    TradeSide,
)
from app.services.recommendation import Recommendations, recommend
from app.services.risk_profile import RiskProfile
from app.services.risk_scoring import QuestionnaireAnswers, RiskScoringEngine
from app.services.snapshot_store import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)


class AdvisorSession:
    def __init__(
        self,
        user_id: str,
        store: SnapshotStore,
        catalog: InstrumentCatalog,
        ledger: Optional[PortfolioLedger] = None,
        risk_profile: Optional[RiskProfile] = None,
        starting_cash: Any = DEFAULT_STARTING_CASH,
        scoring_engine: Optional[RiskScoringEngine] = None,
    ) -> None:
        self.user_id = user_id
        self.store = store
        self.catalog = catalog
        self.ledger = ledger or PortfolioLedger(starting_cash=starting_cash)
        self.risk_profile = risk_profile
        self.scoring_engine = scoring_engine or RiskScoringEngine()

    @classmethod
    async def load(
        cls,
        store: SnapshotStore,
        user_id: str,
        catalog: InstrumentCatalog,
        starting_cash: Any = DEFAULT_STARTING_CASH,
    ) -> "AdvisorSession":
        """Restore a session from the store, or start a fresh one."""
        snapshot = await store.load(user_id)
        if snapshot is None:
            logger.info(f"No saved state for {user_id}, starting with cash {starting_cash}")
            return cls(user_id, store, catalog, starting_cash=starting_cash)

        profile_data = snapshot.get("riskProfile")
        return cls(
            user_id,
            store,
            catalog,
            ledger=PortfolioLedger.from_snapshot(snapshot["portfolio"]),
            risk_profile=RiskProfile.from_snapshot(profile_data) if profile_data else None,
        )

    def snapshot(self) -> Snapshot:
        return {
            "riskProfile": self.risk_profile.to_snapshot() if self.risk_profile else None,
            "portfolio": self.ledger.to_snapshot(),
        }

    async def save(self) -> None:
        await self.store.save(self.user_id, self.snapshot())

    # ==================== Questionnaire ====================

    async def submit_questionnaire(self, answers: QuestionnaireAnswers) -> RiskProfile:
        """Score the answers and replace the current profile (retakes included)."""
        profile = RiskProfile.from_answers(answers, self.scoring_engine)
        self.risk_profile = profile
        await self.save()
        logger.info(f"Risk profile for {self.user_id}: score={profile.score} ({profile.label})")
        return profile

    def require_profile(self) -> RiskProfile:
        if self.risk_profile is None:
            raise RiskProfileMissingError(f"User {self.user_id} has not completed the questionnaire")
        return self.risk_profile

    def recommendations(self) -> Recommendations:
        return recommend(self.require_profile().score, self.catalog)

    # ==================== Simulator ====================

    async def trade(
        self,
        symbol: str,
        side: TradeSide,
        quantity: int,
        price: Optional[Any] = None,
    ) -> TradeResult:
        """Trade a catalog instrument, at its catalog price unless ``price`` is given."""
        instrument = self.catalog.get(symbol)
        result = self.ledger.execute_trade(
            symbol=instrument.symbol,
            side=side,
            quantity=quantity,
            price=instrument.current_price if price is None else price,
            name=instrument.name,
            asset_class=instrument.asset_class,
        )
        if result:
            await self.save()
        return result

    async def update_prices(self, price_map: Mapping[str, Any]) -> None:
        self.ledger.update_prices(price_map)
        await self.save()

    async def mark_to_catalog(self) -> None:
        """Mark every holding to the catalog's current price."""
        await self.update_prices(self.catalog.prices())

    @property
    def cash(self) -> Decimal:
        return self.ledger.cash
