"""
API endpoint tests - questionnaire, recommendations and simulator
Uses a temporary SQLite database per test
"""

import pytest
import pytest_asyncio
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import get_db, Base, seed_instruments

pytestmark = pytest.mark.asyncio

COMPLETE_ANSWERS = {
    "age": 35,
    "income": 1000000,
    "investment_horizon": 10,
    "risk_tolerance": 3,
    "financial_goals": ["retirement", "wealth"],
}


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path):
    """Fresh database with tables and a seeded catalog; overrides get_db"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'advisor.db'}",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with factory() as session:
        await seed_instruments(session)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestCatalogAPI:
    """Questionnaire and catalog endpoints"""

    async def test_questionnaire(self, client):
        response = await client.get("/api/v1/questionnaire")
        assert response.status_code == 200

        questions = response.json()
        assert [q["id"] for q in questions] == [
            "age", "income", "investment_horizon", "risk_tolerance", "financial_goals",
        ]
        assert sum(q["category_weight"] for q in questions) == 100
        assert questions[-1]["multiple"] is True

    async def test_instruments_in_catalog_order(self, client):
        response = await client.get("/api/v1/instruments")
        assert response.status_code == 200

        symbols = [i["symbol"] for i in response.json()]
        assert len(symbols) == 12
        assert symbols[0] == "NIFTY50ETF"
        assert symbols[-1] == "ICICIGILT"

    async def test_instrument_search(self, client):
        response = await client.get("/api/v1/instruments", params={"search": "small"})
        assert [i["symbol"] for i in response.json()] == ["SBISMALLCAP"]

    async def test_seeding_is_idempotent(self, session_factory):
        async with session_factory() as session:
            assert await seed_instruments(session) == 0


class TestRiskProfileAPI:
    """Questionnaire submission and recommendations"""

    async def test_submit_and_read_profile(self, client):
        response = await client.put("/api/v1/users/u1/risk-profile", json=COMPLETE_ANSWERS)
        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 78
        assert data["label"] == "Aggressive"
        assert data["allocation"] == {"equity": 80, "debt": 15, "government": 5}

        response = await client.get("/api/v1/users/u1/risk-profile")
        assert response.status_code == 200
        assert response.json()["score"] == 78

    async def test_incomplete_questionnaire(self, client):
        answers = dict(COMPLETE_ANSWERS, financial_goals=[])
        response = await client.put("/api/v1/users/u1/risk-profile", json=answers)

        assert response.status_code == 400
        assert "financial_goals" in response.json()["detail"]

    @pytest.mark.parametrize("overrides", [{"age": 30}, {"financial_goals": ["yacht"]}])
    async def test_answers_outside_options_rejected(self, client, overrides):
        answers = dict(COMPLETE_ANSWERS, **overrides)
        response = await client.put("/api/v1/users/u1/risk-profile", json=answers)

        assert response.status_code == 400
        assert "invalid" in response.json()["detail"]
        assert (await client.get("/api/v1/users/u1/risk-profile")).status_code == 404

    async def test_missing_profile(self, client):
        assert (await client.get("/api/v1/users/nobody/risk-profile")).status_code == 404
        assert (await client.get("/api/v1/users/nobody/recommendations")).status_code == 404

    async def test_recommendations(self, client):
        await client.put("/api/v1/users/u1/risk-profile", json=COMPLETE_ANSWERS)

        response = await client.get("/api/v1/users/u1/recommendations")
        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 78
        assert [i["symbol"] for i in data["equity"]] == ["SBISMALLCAP", "MOTILALMIDCAP", "ICICIPRU"]
        assert [i["symbol"] for i in data["debt"]] == ["AXISCREDIT", "UTILTDURATION"]
        assert [i["symbol"] for i in data["government"]] == ["GILT10Y", "ICICIGILT"]


class TestSimulatorAPI:
    """Trading and price marks"""

    async def test_new_user_portfolio(self, client):
        response = await client.get("/api/v1/users/u2/portfolio")
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["cash"]) == Decimal("100000")
        assert data["holdings"] == []
        assert data["transactions"] == []

    async def test_buy_and_sell(self, client):
        response = await client.post(
            "/api/v1/users/u2/trades",
            json={"symbol": "NIFTY50ETF", "side": "buy", "quantity": 10, "price": "100"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Purchased 10 units of Nifty 50 ETF"
        assert Decimal(data["portfolio"]["cash"]) == Decimal("99000")

        await client.post(
            "/api/v1/users/u2/trades",
            json={"symbol": "NIFTY50ETF", "side": "buy", "quantity": 5, "price": "120"},
        )
        response = await client.get("/api/v1/users/u2/portfolio")
        holding = response.json()["holdings"][0]
        assert holding["quantity"] == 15
        assert Decimal(holding["avg_price"]).quantize(Decimal("0.01")) == Decimal("106.67")

        response = await client.post(
            "/api/v1/users/u2/trades",
            json={"symbol": "NIFTY50ETF", "side": "sell", "quantity": 15, "price": "130"},
        )
        assert response.status_code == 200
        portfolio = response.json()["portfolio"]
        assert portfolio["holdings"] == []
        assert Decimal(portfolio["cash"]) == Decimal("100350")
        assert [t["side"] for t in portfolio["transactions"]] == ["buy", "buy", "sell"]

    async def test_buy_defaults_to_catalog_price(self, client):
        response = await client.post(
            "/api/v1/users/u3/trades",
            json={"symbol": "GILT10Y", "side": "buy", "quantity": 2},
        )
        assert response.status_code == 200
        assert Decimal(response.json()["transaction"]["price"]) == Decimal("102.5")

    async def test_insufficient_funds(self, client):
        response = await client.post(
            "/api/v1/users/u3/trades",
            json={"symbol": "HDFCTOP100", "side": "buy", "quantity": 1000},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "insufficient_funds"

        portfolio = (await client.get("/api/v1/users/u3/portfolio")).json()
        assert Decimal(portfolio["cash"]) == Decimal("100000")
        assert portfolio["transactions"] == []

    async def test_insufficient_holdings(self, client):
        response = await client.post(
            "/api/v1/users/u3/trades",
            json={"symbol": "GILT10Y", "side": "sell", "quantity": 1},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "Insufficient shares to sell!"

    async def test_unknown_symbol(self, client):
        response = await client.post(
            "/api/v1/users/u3/trades",
            json={"symbol": "XYZ", "side": "buy", "quantity": 1},
        )
        assert response.status_code == 404

    async def test_non_positive_quantity_rejected_by_schema(self, client):
        response = await client.post(
            "/api/v1/users/u3/trades",
            json={"symbol": "GILT10Y", "side": "buy", "quantity": 0},
        )
        assert response.status_code == 422

    async def test_price_updates(self, client):
        await client.post(
            "/api/v1/users/u4/trades",
            json={"symbol": "HDFCCORP", "side": "buy", "quantity": 100, "price": "20"},
        )

        response = await client.post("/api/v1/users/u4/prices", json={"prices": {"HDFCCORP": "21"}})
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["holdings"][0]["current_price"]) == Decimal("21")
        assert Decimal(data["unrealized_pnl"]) == Decimal("100")

        response = await client.post("/api/v1/users/u4/prices", json={})
        assert Decimal(response.json()["holdings"][0]["current_price"]) == Decimal("22.15")


async def test_health(client):
    response = await client.get("/health")
    assert response.json()["status"] == "healthy"
