"""
Advisor API routes
Questionnaire, recommendations and the trading simulator
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.models.instrument import load_catalog
from app.services.advisor_session import AdvisorSession
from app.services.catalog import AssetClass, Instrument, InstrumentCatalog
from app.services.errors import (
    IncompleteQuestionnaireError,
    PersistenceError,
    RiskProfileMissingError,
    UnknownInstrumentError,
)
from app.services.portfolio_ledger import TradeSide
from app.services.risk_profile import RiskProfile
from app.services.risk_scoring import QUESTIONS, QuestionnaireAnswers
from app.services.snapshot_store import SqlSnapshotStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Risk Advisor"])


# ============ Pydantic Models ============


class OptionResponse(BaseModel):
    value: Union[int, str]
    label: str
    weight: Decimal


class QuestionResponse(BaseModel):
    id: str
    title: str
    subtitle: str
    category_weight: int
    multiple: bool
    options: List[OptionResponse]


class InstrumentResponse(BaseModel):
    symbol: str
    name: str
    asset_class: AssetClass
    three_year_return: Decimal
    volatility: Decimal
    expense_ratio: Decimal
    current_price: Decimal
    risk_level: str
    min_investment: Decimal
    description: str

    @classmethod
    def from_instrument(cls, instrument: Instrument) -> "InstrumentResponse":
        return cls(
            symbol=instrument.symbol,
            name=instrument.name,
            asset_class=instrument.asset_class,
            three_year_return=instrument.three_year_return,
            volatility=instrument.volatility,
            expense_ratio=instrument.expense_ratio,
            current_price=instrument.current_price,
            risk_level=instrument.risk_level.value,
            min_investment=instrument.min_investment,
            description=instrument.description,
        )


class QuestionnaireRequest(BaseModel):
    age: Optional[int] = Field(None, description="Age bucket value")
    income: Optional[int] = Field(None, description="Income bracket value")
    investment_horizon: Optional[int] = Field(None, description="Horizon bucket in years")
    risk_tolerance: Optional[int] = Field(None, ge=1, le=5, description="Reaction to volatility, 1-5")
    financial_goals: List[str] = Field(default_factory=list, description="Goal tags")


class AllocationResponse(BaseModel):
    equity: int
    debt: int
    government: int


class RiskProfileResponse(BaseModel):
    age: int
    income: int
    investment_horizon: int
    risk_tolerance: int
    financial_goals: List[str]
    score: int
    label: str
    allocation: AllocationResponse

    @classmethod
    def from_profile(cls, profile: RiskProfile) -> "RiskProfileResponse":
        return cls(
            age=profile.age,
            income=profile.income,
            investment_horizon=profile.investment_horizon,
            risk_tolerance=profile.risk_tolerance,
            financial_goals=list(profile.financial_goals),
            score=profile.score,
            label=profile.label,
            allocation=AllocationResponse(**profile.allocation.as_dict()),
        )


class RecommendationResponse(BaseModel):
    score: int
    allocation: AllocationResponse
    equity: List[InstrumentResponse]
    debt: List[InstrumentResponse]
    government: List[InstrumentResponse]


class HoldingResponse(BaseModel):
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: int
    avg_price: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal


class TransactionResponse(BaseModel):
    id: str
    symbol: str
    side: TradeSide
    quantity: int
    price: Decimal
    timestamp: datetime


class PortfolioResponse(BaseModel):
    cash: Decimal
    investment_value: Decimal
    total_value: Decimal
    unrealized_pnl: Decimal
    holdings: List[HoldingResponse]
    transactions: List[TransactionResponse]


class TradeRequest(BaseModel):
    symbol: str = Field(..., description="Catalog symbol")
    side: TradeSide = Field(..., description="buy/sell")
    quantity: int = Field(..., gt=0, description="Units to trade")
    price: Optional[Decimal] = Field(None, gt=0, description="Execution price, defaults to catalog price")


class TradeResponse(BaseModel):
    success: bool
    message: str
    transaction: Optional[TransactionResponse]
    portfolio: PortfolioResponse


class PriceUpdateRequest(BaseModel):
    prices: Optional[Dict[str, Decimal]] = Field(
        None, description="symbol -> price; omit to mark holdings to catalog prices"
    )


# ============ Dependencies ============


async def get_catalog(db: AsyncSession = Depends(get_db)) -> InstrumentCatalog:
    return await load_catalog(db)


async def get_session(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    catalog: InstrumentCatalog = Depends(get_catalog),
) -> AdvisorSession:
    settings = get_settings()
    try:
        return await AdvisorSession.load(
            SqlSnapshotStore(db), user_id, catalog, starting_cash=settings.starting_cash
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _portfolio_response(session: AdvisorSession) -> PortfolioResponse:
    ledger = session.ledger
    summary = ledger.summary()
    return PortfolioResponse(
        cash=summary.cash,
        investment_value=summary.investment_value,
        total_value=summary.total_value,
        unrealized_pnl=summary.unrealized_pnl,
        holdings=[
            HoldingResponse(
                symbol=h.symbol,
                name=h.name,
                asset_class=h.asset_class,
                quantity=h.quantity,
                avg_price=h.avg_price,
                current_price=h.current_price,
                market_value=h.market_value,
                unrealized_pnl=h.unrealized_pnl,
            )
            for h in ledger.holdings
        ],
        transactions=[
            TransactionResponse(
                id=t.id,
                symbol=t.symbol,
                side=t.side,
                quantity=t.quantity,
                price=t.price,
                timestamp=t.timestamp,
            )
            for t in ledger.transactions
        ],
    )


# ============ Catalog APIs ============


@router.get("/questionnaire", response_model=List[QuestionResponse])
async def get_questionnaire():
    """Questions, options and weights"""
    return [
        QuestionResponse(
            id=q.id,
            title=q.title,
            subtitle=q.subtitle,
            category_weight=q.category_weight,
            multiple=q.multiple,
            options=[OptionResponse(value=o.value, label=o.label, weight=o.weight) for o in q.options],
        )
        for q in QUESTIONS
    ]


@router.get("/instruments", response_model=List[InstrumentResponse])
async def list_instruments(
    search: Optional[str] = Query(None, description="Match on name or symbol"),
    catalog: InstrumentCatalog = Depends(get_catalog),
):
    """List the instrument catalog"""
    instruments = catalog.search(search) if search else list(catalog)
    return [InstrumentResponse.from_instrument(i) for i in instruments]


# ============ Risk Profile APIs ============


@router.put("/users/{user_id}/risk-profile", response_model=RiskProfileResponse)
async def submit_questionnaire(
    request: QuestionnaireRequest, session: AdvisorSession = Depends(get_session)
):
    """Score a completed questionnaire; replaces any previous profile"""
    answers = QuestionnaireAnswers(
        age=request.age,
        income=request.income,
        investment_horizon=request.investment_horizon,
        risk_tolerance=request.risk_tolerance,
        financial_goals=request.financial_goals,
    )
    try:
        profile = await session.submit_questionnaire(answers)
    except IncompleteQuestionnaireError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return RiskProfileResponse.from_profile(profile)


@router.get("/users/{user_id}/risk-profile", response_model=RiskProfileResponse)
async def get_risk_profile(session: AdvisorSession = Depends(get_session)):
    """Current risk profile"""
    if session.risk_profile is None:
        raise HTTPException(status_code=404, detail="Risk profile not found")
    return RiskProfileResponse.from_profile(session.risk_profile)


@router.get("/users/{user_id}/recommendations", response_model=RecommendationResponse)
async def get_recommendations(session: AdvisorSession = Depends(get_session)):
    """Instruments ranked for the user's risk score"""
    try:
        profile = session.require_profile()
    except RiskProfileMissingError as e:
        raise HTTPException(status_code=404, detail=str(e))

    recommendations = session.recommendations()
    return RecommendationResponse(
        score=profile.score,
        allocation=AllocationResponse(**profile.allocation.as_dict()),
        equity=[InstrumentResponse.from_instrument(i) for i in recommendations.equity],
        debt=[InstrumentResponse.from_instrument(i) for i in recommendations.debt],
        government=[InstrumentResponse.from_instrument(i) for i in recommendations.government],
    )


# ============ Simulator APIs ============


@router.get("/users/{user_id}/portfolio", response_model=PortfolioResponse)
async def get_portfolio(session: AdvisorSession = Depends(get_session)):
    """Cash, holdings, transaction log and totals"""
    return _portfolio_response(session)


@router.post("/users/{user_id}/trades", response_model=TradeResponse)
async def execute_trade(request: TradeRequest, session: AdvisorSession = Depends(get_session)):
    """Buy or sell a catalog instrument"""
    try:
        result = await session.trade(request.symbol, request.side, request.quantity, request.price)
    except UnknownInstrumentError as e:
        logger.warning(f"Trade for {session.user_id} on unknown symbol {request.symbol}")
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not result:
        raise HTTPException(
            status_code=422,
            detail={"reason": result.reason.value, "message": result.message},
        )

    verb = "Purchased" if request.side == TradeSide.BUY else "Sold"
    instrument = session.catalog.get(request.symbol)
    t = result.transaction
    return TradeResponse(
        success=True,
        message=f"{verb} {request.quantity} units of {instrument.name}",
        transaction=TransactionResponse(
            id=t.id, symbol=t.symbol, side=t.side, quantity=t.quantity, price=t.price, timestamp=t.timestamp
        ),
        portfolio=_portfolio_response(session),
    )


@router.post("/users/{user_id}/prices", response_model=PortfolioResponse)
async def update_prices(request: PriceUpdateRequest, session: AdvisorSession = Depends(get_session)):
    """Mark holdings to new prices"""
    try:
        if request.prices is None:
            await session.mark_to_catalog()
        else:
            await session.update_prices(request.prices)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _portfolio_response(session)
