"""Portfolio ledger - simulated cash, holdings and an append-only trade log.

Holdings are tracked at weighted-average cost. A trade is validated in
full before anything is touched, so a rejected trade leaves the portfolio
exactly as it was.
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.services.catalog import AssetClass

logger = logging.getLogger(__name__)

DEFAULT_STARTING_CASH = Decimal("100000")


class TradeSide(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"


class TradeFailure(str, enum.Enum):
    """Why a trade was rejected"""
    INSUFFICIENT_FUNDS = "insufficient_funds"        # buy cost exceeds cash
    INSUFFICIENT_HOLDINGS = "insufficient_holdings"  # nothing held, or not enough
    INVALID_ORDER = "invalid_order"                  # bad side, quantity, price or asset class


FAILURE_MESSAGES = {
    TradeFailure.INSUFFICIENT_FUNDS: "Insufficient funds!",
    TradeFailure.INSUFFICIENT_HOLDINGS: "Insufficient shares to sell!",
    TradeFailure.INVALID_ORDER: "Quantity and price must be positive",
}


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class Holding:
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: int
    avg_price: Decimal
    current_price: Decimal

    @property
    def cost_basis(self) -> Decimal:
        return self.avg_price * self.quantity

    @property
    def market_value(self) -> Decimal:
        return self.current_price * self.quantity

    @property
    def unrealized_pnl(self) -> Decimal:
        return self.market_value - self.cost_basis


@dataclass(frozen=True)
class Transaction:
    id: str
    symbol: str
    side: TradeSide
    quantity: int
    price: Decimal
    timestamp: datetime

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Portfolio:
    cash: Decimal = DEFAULT_STARTING_CASH
    # keyed by symbol, insertion order = order of first purchase
    holdings: Dict[str, Holding] = field(default_factory=dict)
    transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class TradeResult:
    """Outcome of ``execute_trade``; truthy when the trade went through."""

    success: bool
    reason: Optional[TradeFailure] = None
    transaction: Optional[Transaction] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def message(self) -> Optional[str]:
        return FAILURE_MESSAGES.get(self.reason) if self.reason else None


@dataclass(frozen=True)
class PortfolioSummary:
    cash: Decimal
    investment_value: Decimal
    total_value: Decimal
    unrealized_pnl: Decimal
    holdings_count: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_transaction_id() -> str:
    return uuid.uuid4().hex


class PortfolioLedger:
    """Executes trades against a single Portfolio."""

    def __init__(
        self,
        portfolio: Optional[Portfolio] = None,
        starting_cash: Any = DEFAULT_STARTING_CASH,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_transaction_id,
    ) -> None:
        self.portfolio = portfolio or Portfolio(cash=to_decimal(starting_cash))
        self._clock = clock
        self._id_factory = id_factory

    # ==================== Queries ====================

    @property
    def cash(self) -> Decimal:
        return self.portfolio.cash

    @property
    def holdings(self) -> List[Holding]:
        return list(self.portfolio.holdings.values())

    @property
    def transactions(self) -> List[Transaction]:
        return list(self.portfolio.transactions)

    def holding(self, symbol: str) -> Optional[Holding]:
        return self.portfolio.holdings.get(symbol)

    def summary(self) -> PortfolioSummary:
        investment_value = sum((h.market_value for h in self.holdings), Decimal("0"))
        unrealized = sum((h.unrealized_pnl for h in self.holdings), Decimal("0"))
        return PortfolioSummary(
            cash=self.cash,
            investment_value=investment_value,
            total_value=self.cash + investment_value,
            unrealized_pnl=unrealized,
            holdings_count=len(self.portfolio.holdings),
        )

    # ==================== Trading ====================

    def execute_trade(
        self,
        symbol: str,
        side: TradeSide,
        quantity: int,
        price: Any,
        name: str,
        asset_class: AssetClass,
    ) -> TradeResult:
        try:
            side = TradeSide(side)
        except ValueError:
            logger.info(f"Rejected {side!r} {symbol}: unknown trade side")
            return TradeResult(success=False, reason=TradeFailure.INVALID_ORDER)

        try:
            price = to_decimal(price)
        except (InvalidOperation, ValueError, TypeError):
            return self._reject(symbol, side, TradeFailure.INVALID_ORDER)
        if (
            isinstance(quantity, bool)
            or not isinstance(quantity, int)
            or quantity <= 0
            or not price.is_finite()
            or price <= 0
        ):
            return self._reject(symbol, side, TradeFailure.INVALID_ORDER)

        amount = price * quantity
        holdings = self.portfolio.holdings

        if side == TradeSide.BUY:
            if self.portfolio.cash < amount:
                return self._reject(symbol, side, TradeFailure.INSUFFICIENT_FUNDS)

            existing = holdings.get(symbol)
            if existing is None:
                try:
                    asset_class = AssetClass(asset_class)
                except ValueError:
                    return self._reject(symbol, side, TradeFailure.INVALID_ORDER)

            self.portfolio.cash -= amount
            if existing:
                total_quantity = existing.quantity + quantity
                total_cost = existing.quantity * existing.avg_price + amount
                existing.avg_price = total_cost / total_quantity
                existing.quantity = total_quantity
                existing.current_price = price
            else:
                holdings[symbol] = Holding(
                    symbol=symbol,
                    name=name,
                    asset_class=asset_class,
                    quantity=quantity,
                    avg_price=price,
                    current_price=price,
                )
        else:
            existing = holdings.get(symbol)
            if existing is None or existing.quantity < quantity:
                return self._reject(symbol, side, TradeFailure.INSUFFICIENT_HOLDINGS)

            self.portfolio.cash += amount
            existing.quantity -= quantity
            if existing.quantity == 0:
                del holdings[symbol]

        transaction = Transaction(
            id=self._id_factory(),
            symbol=symbol,
            side=side,
            quantity=quantity,
            price=price,
            timestamp=self._next_timestamp(),
        )
        self.portfolio.transactions.append(transaction)
        logger.info(f"{side.value} {symbol} x {quantity} @ {price}, cash={self.portfolio.cash}")
        return TradeResult(success=True, transaction=transaction)

    def update_prices(self, price_map: Mapping[str, Any]) -> None:
        """Mark holdings to the supplied prices.

        Symbols that are not held are ignored, as are non-positive prices.
        """
        for symbol, holding in self.portfolio.holdings.items():
            if symbol not in price_map:
                continue
            try:
                price = to_decimal(price_map[symbol])
            except (InvalidOperation, ValueError, TypeError):
                logger.warning(f"Ignoring unparsable price for {symbol}: {price_map[symbol]!r}")
                continue
            if not price.is_finite() or price <= 0:
                logger.warning(f"Ignoring non-positive price for {symbol}: {price}")
                continue
            holding.current_price = price

    def _reject(self, symbol: str, side: TradeSide, reason: TradeFailure) -> TradeResult:
        logger.info(f"Rejected {side.value} {symbol}: {reason.value}")
        return TradeResult(success=False, reason=reason)

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self.portfolio.transactions:
            last = self.portfolio.transactions[-1].timestamp
            if now < last:
                return last
        return now

    # ==================== Snapshot ====================

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "cash": float(self.portfolio.cash),
            "holdings": [
                {
                    "symbol": h.symbol,
                    "name": h.name,
                    "type": h.asset_class.value,
                    "quantity": h.quantity,
                    "avgPrice": float(h.avg_price),
                    "currentPrice": float(h.current_price),
                }
                for h in self.holdings
            ],
            "transactions": [
                {
                    "id": t.id,
                    "symbol": t.symbol,
                    "type": t.side.value,
                    "quantity": t.quantity,
                    "price": float(t.price),
                    "timestamp": t.timestamp.isoformat(),
                }
                for t in self.portfolio.transactions
            ],
        }

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any], **kwargs: Any) -> "PortfolioLedger":
        holdings = {}
        for item in data.get("holdings", []):
            holdings[item["symbol"]] = Holding(
                symbol=item["symbol"],
                name=item.get("name", item["symbol"]),
                asset_class=AssetClass(item["type"]),
                quantity=int(item["quantity"]),
                avg_price=to_decimal(item["avgPrice"]),
                current_price=to_decimal(item["currentPrice"]),
            )
        transactions = [
            Transaction(
                id=str(item["id"]),
                symbol=item["symbol"],
                side=TradeSide(item["type"]),
                quantity=int(item["quantity"]),
                price=to_decimal(item["price"]),
                timestamp=_parse_timestamp(item["timestamp"]),
            )
            for item in data.get("transactions", [])
        ]
        portfolio = Portfolio(
            cash=to_decimal(data["cash"]),
            holdings=holdings,
            transactions=transactions,
        )
        return cls(portfolio=portfolio, **kwargs)


def _parse_timestamp(value: str) -> datetime:
    # JavaScript's toISOString() ends with "Z"
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
