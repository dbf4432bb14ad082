"""
User snapshot table
One JSON record per user holding the risk profile and the simulated portfolio
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base


class UserSnapshot(Base):
    """Persisted state of one user's session"""

    __tablename__ = "user_snapshots"

    user_id: Mapped[str] = mapped_column(String(100), primary_key=True)

    risk_profile: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    portfolio: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict:
        return {"riskProfile": self.risk_profile, "portfolio": self.portfolio}

    def __repr__(self) -> str:
        return f"<UserSnapshot(user_id='{self.user_id}')>"
