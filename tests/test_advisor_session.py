"""
Advisor session tests - questionnaire flow, trading and persistence calls
"""

import pytest
from decimal import Decimal

from app.services.advisor_session import AdvisorSession
from app.services.catalog import InstrumentCatalog
from app.services.errors import (
    IncompleteQuestionnaireError,
    RiskProfileMissingError,
    UnknownInstrumentError,
)
from app.services.portfolio_ledger import TradeFailure, TradeSide
from app.services.risk_scoring import QuestionnaireAnswers
from app.services.snapshot_store import InMemorySnapshotStore

pytestmark = pytest.mark.asyncio

USER_ID = "user-1"


def _complete_answers(**overrides) -> QuestionnaireAnswers:
    data = dict(
        age=45,
        income=600000,
        investment_horizon=5,
        risk_tolerance=2,
        financial_goals=["home"],
    )
    data.update(overrides)
    return QuestionnaireAnswers(**data)


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def catalog():
    return InstrumentCatalog.default()


async def _session(store, catalog, starting_cash=100000):
    return await AdvisorSession.load(store, USER_ID, catalog, starting_cash=starting_cash)


class TestQuestionnaireFlow:
    """Submitting and retaking the questionnaire"""

    async def test_fresh_session(self, store, catalog):
        session = await _session(store, catalog, starting_cash=50000)

        assert session.risk_profile is None
        assert session.cash == Decimal("50000")
        assert store.save_count == 0

    async def test_submit_scores_and_saves(self, store, catalog):
        session = await _session(store, catalog)

        profile = await session.submit_questionnaire(_complete_answers())

        # 17.5 + 10 + 18 + 4.5 + 5
        assert profile.score == 55
        assert profile.allocation.as_dict() == {"equity": 60, "debt": 25, "government": 15}
        assert store.snapshots[USER_ID]["riskProfile"]["score"] == 55
        assert store.save_count == 1

    async def test_incomplete_answers_rejected_without_saving(self, store, catalog):
        session = await _session(store, catalog)

        with pytest.raises(IncompleteQuestionnaireError):
            await session.submit_questionnaire(_complete_answers(financial_goals=[]))

        assert session.risk_profile is None
        assert store.save_count == 0

    async def test_unknown_goal_rejected_without_saving(self, store, catalog):
        session = await _session(store, catalog)

        with pytest.raises(IncompleteQuestionnaireError) as exc_info:
            await session.submit_questionnaire(_complete_answers(financial_goals=["yacht"]))

        assert exc_info.value.invalid == ["financial_goals"]
        assert session.risk_profile is None
        assert store.save_count == 0

    async def test_retake_replaces_profile(self, store, catalog):
        session = await _session(store, catalog)
        first = await session.submit_questionnaire(_complete_answers())

        second = await session.submit_questionnaire(
            _complete_answers(age=70, investment_horizon=1, risk_tolerance=1)
        )

        assert second is session.risk_profile
        assert second.score < first.score
        assert store.snapshots[USER_ID]["riskProfile"]["age"] == 70

    async def test_recommendations_need_profile(self, store, catalog):
        session = await _session(store, catalog)

        with pytest.raises(RiskProfileMissingError):
            session.recommendations()

        await session.submit_questionnaire(_complete_answers())
        recs = session.recommendations()
        assert [i.symbol for i in recs.equity] == ["SBISMALLCAP", "MOTILALMIDCAP", "ICICIPRU"]


class TestSimulator:
    """Trades through the session"""

    async def test_trade_uses_catalog_price_and_saves(self, store, catalog):
        session = await _session(store, catalog)

        result = await session.trade("GILT10Y", TradeSide.BUY, 10)

        assert result
        assert session.cash == Decimal("100000") - Decimal("1025.00")
        holding = session.ledger.holding("GILT10Y")
        assert holding.name == "10-Year Government Bond"
        assert holding.asset_class.value == "government"
        assert store.save_count == 1
        assert store.snapshots[USER_ID]["portfolio"]["holdings"][0]["symbol"] == "GILT10Y"

    async def test_rejected_trade_is_not_saved(self, store, catalog):
        session = await _session(store, catalog)

        result = await session.trade("GILT10Y", TradeSide.SELL, 1)

        assert result.reason == TradeFailure.INSUFFICIENT_HOLDINGS
        assert store.save_count == 0

    async def test_unknown_symbol_rejected_at_boundary(self, store, catalog):
        session = await _session(store, catalog)

        with pytest.raises(UnknownInstrumentError):
            await session.trade("NOPE", TradeSide.BUY, 1)

        assert session.ledger.transactions == []

    async def test_explicit_price_overrides_catalog(self, store, catalog):
        session = await _session(store, catalog)

        await session.trade("GILT10Y", TradeSide.BUY, 10, price=100)

        assert session.ledger.holding("GILT10Y").avg_price == Decimal("100")

    async def test_state_survives_reload(self, store, catalog):
        session = await _session(store, catalog)
        await session.submit_questionnaire(_complete_answers())
        await session.trade("NIFTY50ETF", TradeSide.BUY, 4)
        await session.update_prices({"NIFTY50ETF": 190})

        reloaded = await _session(store, catalog)

        assert reloaded.risk_profile == session.risk_profile
        assert reloaded.cash == session.cash
        assert reloaded.ledger.holding("NIFTY50ETF").current_price == Decimal("190")
        assert len(reloaded.ledger.transactions) == 1

    async def test_mark_to_catalog(self, store, catalog):
        session = await _session(store, catalog)
        await session.trade("HDFCCORP", TradeSide.BUY, 100, price=20)

        await session.mark_to_catalog()

        assert session.ledger.holding("HDFCCORP").current_price == Decimal("22.15")
        assert session.ledger.summary().unrealized_pnl == Decimal("215.00")
