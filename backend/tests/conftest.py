"""
Agro API - Configuração de Testes

Cada teste roda contra um SQLite em memória novo (aiosqlite), com as
tabelas criadas pelo mesmo init_db usado no startup.
"""
import itertools
import os

# =============================================================================
# PASSO 1: FORÇAR BANCO DE TESTE ANTES DE QUALQUER IMPORT
# =============================================================================
TEST_DB_URL = "sqlite+aiosqlite://"

os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["DB_CREATE_TABLES"] = "false"

# =============================================================================
# PASSO 2: IMPORTS
# =============================================================================
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from agro_api.core.database import build_engine, get_db, init_db
from agro_api.main import app
from agro_api.services import tax_id

API = "/api/v1"


# =============================================================================
# PYTEST HOOKS
# =============================================================================

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: testes de integração (API + banco)")


def pytest_unconfigure(config):
    app.dependency_overrides.clear()


# =============================================================================
# BANCO
# =============================================================================

@pytest_asyncio.fixture
async def db_engine():
    """Engine SQLite em memória, uma conexão compartilhada."""
    engine = build_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker):
    """Sessão para testes de service (sem HTTP)."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    """Cliente HTTP ligado ao banco do teste - NOVO a cada teste."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# FÁBRICAS (criam registros pela API)
# =============================================================================

async def _post(client: AsyncClient, path: str, payload: dict) -> dict:
    response = await client.post(f"{API}{path}", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_producer(client):
    counter = itertools.count(1)

    async def _make(**overrides) -> dict:
        n = next(counter)
        payload = {
            "document": tax_id.generate_cpf(f"{123456000 + n:09d}"),
            "document_type": "CPF",
            "name": f"Produtor {n}",
        }
        payload.update(overrides)
        return await _post(client, "/producers", payload)

    return _make


@pytest.fixture
def make_property(client, make_producer):
    counter = itertools.count(1)

    async def _make(producer_id: str = None, **overrides) -> dict:
        n = next(counter)
        if producer_id is None:
            producer_id = (await make_producer())["id"]
        payload = {
            "name": f"Fazenda {n}",
            "city": "Ribeirão Preto",
            "state": "SP",
            "total_area": 1000,
            "arable_area": 600,
            "vegetation_area": 300,
            "producer_id": producer_id,
        }
        payload.update(overrides)
        return await _post(client, "/properties", payload)

    return _make


@pytest.fixture
def make_culture_type(client):
    counter = itertools.count(1)

    async def _make(name: str = None, title: str = None) -> dict:
        n = next(counter)
        name = name or f"cultura-{n}"
        return await _post(client, "/culture-types", {"name": name, "title": title or name.title()})

    return _make


@pytest.fixture
def make_season(client, make_property):
    async def _make(property_id: str = None, name: str = "Safra 2024", year: int = 2024) -> dict:
        if property_id is None:
            property_id = (await make_property())["id"]
        return await _post(client, "/seasons", {"name": name, "year": year, "property_id": property_id})

    return _make


@pytest.fixture
def make_crop(client, make_season, make_culture_type):
    async def _make(season_id: str = None, culture_type_id: str = None, planted_area: float = None) -> dict:
        if season_id is None:
            season_id = (await make_season())["id"]
        if culture_type_id is None:
            culture_type_id = (await make_culture_type())["id"]
        payload = {"season_id": season_id, "culture_type_id": culture_type_id}
        if planted_area is not None:
            payload["planted_area"] = planted_area
        return await _post(client, "/crops", payload)

    return _make
