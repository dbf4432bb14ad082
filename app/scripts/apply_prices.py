import asyncio
import json
import logging
import sys
from typing import Optional

from app.config import get_settings
from app.database import get_db_session, init_db
from app.models.instrument import load_catalog
from app.services.advisor_session import AdvisorSession
from app.services.snapshot_store import SqlSnapshotStore

logger = logging.getLogger(__name__)


async def _run_once(user_id: str, prices_file: Optional[str] = None) -> None:
    await init_db()
    async_session_factory = get_db_session()
    async with async_session_factory() as session:  # type: AsyncSession
        catalog = await load_catalog(session)
        advisor = await AdvisorSession.load(
            SqlSnapshotStore(session),
            user_id,
            catalog,
            starting_cash=get_settings().starting_cash,
        )

        if prices_file:
            with open(prices_file, encoding="utf-8") as f:
                prices = json.load(f)
            await advisor.update_prices(prices)
            logger.info("Applied %d prices from %s for user %s", len(prices), prices_file, user_id)
        else:
            await advisor.mark_to_catalog()
            logger.info("Marked holdings of user %s to catalog prices", user_id)

        summary = advisor.ledger.summary()
        logger.info(
            "User %s: cash=%s holdings=%s total=%s unrealized=%s",
            user_id,
            summary.cash,
            summary.investment_value,
            summary.total_value,
            summary.unrealized_pnl,
        )


def main(user_id: str, prices_file: Optional[str] = None) -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_run_once(user_id, prices_file=prices_file))


if __name__ == "__main__":
    # For direct CLI execution:
    # python -m app.scripts.apply_prices <user_id> [prices.json]
    if len(sys.argv) < 2:
        print("usage: python -m app.scripts.apply_prices <user_id> [prices.json]")
        sys.exit(1)
    main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
