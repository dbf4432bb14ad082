"""Persistence port for per-user snapshots, with in-memory and SQL adapters"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.snapshot import UserSnapshot
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]


class SnapshotStore(Protocol):
    async def load(self, user_id: str) -> Optional[Snapshot]:
        ...

    async def save(self, user_id: str, snapshot: Snapshot) -> None:
        ...


class InMemorySnapshotStore:
    """Dict-backed store. Snapshots are deep-copied in and out."""

    def __init__(self) -> None:
        self.snapshots: Dict[str, Snapshot] = {}
        self.save_count = 0

    async def load(self, user_id: str) -> Optional[Snapshot]:
        snapshot = self.snapshots.get(user_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    async def save(self, user_id: str, snapshot: Snapshot) -> None:
        self.snapshots[user_id] = copy.deepcopy(snapshot)
        self.save_count += 1


class SqlSnapshotStore:
    """Stores snapshots in the ``user_snapshots`` table through an AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def load(self, user_id: str) -> Optional[Snapshot]:
        try:
            stmt = select(UserSnapshot).where(UserSnapshot.user_id == user_id)
            result = await self.db.execute(stmt)
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load snapshot for {user_id}: {e}")
            raise PersistenceError(f"Could not load state for user {user_id}") from e

        return record.to_dict() if record else None

    async def save(self, user_id: str, snapshot: Snapshot) -> None:
        try:
            record = await self.db.get(UserSnapshot, user_id)
            if record is None:
                record = UserSnapshot(user_id=user_id)
                self.db.add(record)
            # assign fresh objects so the JSON columns are flagged as changed
            record.risk_profile = copy.deepcopy(snapshot.get("riskProfile"))
            record.portfolio = copy.deepcopy(snapshot["portfolio"])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save snapshot for {user_id}: {e}")
            raise PersistenceError(f"Could not save state for user {user_id}") from e
