"""Services package initialization"""
from app.services.allocation import Allocation, allocate
from app.services.catalog import AssetClass, Instrument, InstrumentCatalog, RiskLevel
from app.services.portfolio_ledger import PortfolioLedger, TradeFailure, TradeResult, TradeSide
from app.services.recommendation import Recommendations, recommend
from app.services.risk_scoring import QuestionnaireAnswers, RiskScoringEngine, risk_label

__all__ = [
    "Allocation",
    "allocate",
    "AssetClass",
    "Instrument",
    "InstrumentCatalog",
    "RiskLevel",
    "PortfolioLedger",
    "TradeFailure",
    "TradeResult",
    "TradeSide",
    "Recommendations",
    "recommend",
    "QuestionnaireAnswers",
    "RiskScoringEngine",
    "risk_label",
]
