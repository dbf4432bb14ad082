"""
Instrument catalog table
Seeded once at startup; the ordering column preserves catalog order
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Integer, Numeric, String, Text, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.services.catalog import AssetClass, Instrument, InstrumentCatalog, RiskLevel


class InstrumentRecord(Base):
    """Tradable instrument with return/risk metadata"""

    __tablename__ = "instruments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    symbol: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    asset_class: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # equity/debt/government
    risk_level: Mapped[str] = mapped_column(String(10), nullable=False)  # low/medium/high

    # percentages
    three_year_return: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))
    volatility: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))
    expense_ratio: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))

    current_price: Mapped[Decimal] = mapped_column(Numeric(20, 4), nullable=False)
    min_investment: Mapped[Decimal] = mapped_column(Numeric(20, 4), default=Decimal("0"))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    @classmethod
    def from_instrument(cls, instrument: Instrument, sort_order: int = 0) -> "InstrumentRecord":
        return cls(
            symbol=instrument.symbol,
            name=instrument.name,
            asset_class=instrument.asset_class.value,
            risk_level=instrument.risk_level.value,
            three_year_return=instrument.three_year_return,
            volatility=instrument.volatility,
            expense_ratio=instrument.expense_ratio,
            current_price=instrument.current_price,
            min_investment=instrument.min_investment,
            description=instrument.description,
            sort_order=sort_order,
        )

    def to_instrument(self) -> Instrument:
        return Instrument(
            symbol=self.symbol,
            name=self.name,
            asset_class=AssetClass(self.asset_class),
            three_year_return=Decimal(str(self.three_year_return)),
            volatility=Decimal(str(self.volatility)),
            expense_ratio=Decimal(str(self.expense_ratio)),
            current_price=Decimal(str(self.current_price)),
            risk_level=RiskLevel(self.risk_level),
            min_investment=Decimal(str(self.min_investment)),
            description=self.description or "",
        )

    def __repr__(self) -> str:
        return f"<InstrumentRecord(symbol='{self.symbol}', class='{self.asset_class}')>"


async def load_catalog(db: AsyncSession) -> InstrumentCatalog:
    """Load the seeded catalog in catalog order"""
    stmt = select(InstrumentRecord).order_by(InstrumentRecord.sort_order, InstrumentRecord.id)
    result = await db.execute(stmt)
    return InstrumentCatalog(record.to_instrument() for record in result.scalars().all())
