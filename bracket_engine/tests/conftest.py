"""
Shared fixtures.

DB tests run on a temp-file SQLite database rather than :memory: so the
live read path can open several concurrent sessions, each with its own
connection, exactly as it does in production.
"""
from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from bracket_engine.database import get_db, get_session_factory
from bracket_engine.main import app
from bracket_engine.orm import (
    Base,
    BracketEntry,
    BracketLeague,
    BracketPick,
    Tournament,
    User,
)
from bracket_engine.tests.factories import TIPOFF, make_game, make_node


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh schema per test on a throwaway file."""
    db_file = tmp_path / "bracket_test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_file}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the test database; one session per request."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# Scenario: a small regional bracket with one league
# =============================================================================
#
#   R1-1  Alpha(1)  v Omega(16)  ──┐
#                                  ├─ R2-1 ──┐
#   R1-2  Gamma(8)  v Delta(9)   ──┘         │
#                                            ├─ R3-1
#   R1-3  Echo(5)   v Foxtrot(12) ─┐         │
#                                  ├─ R2-2 ──┘
#   R1-4  Hotel(4)  v India(13)  ──┘

@pytest.fixture
def scenario_ids():
    return {
        "tournament": "tourn-2026",
        "league": "league-1",
        "r1": ["n-r1-1", "n-r1-2", "n-r1-3", "n-r1-4"],
        "r2": ["n-r2-1", "n-r2-2"],
        "r3": "n-r3-1",
        "games": ["g-1", "g-2", "g-3"],
    }


@pytest_asyncio.fixture
async def scenario(db_session, scenario_ids):
    """
    R1-1 final 70-50 (Alpha), R1-2 final 60-58 (Gamma), R2-1 final 65-64
    (Alpha). Picks are still pending; run resolution to score them.
    """
    ids = scenario_ids
    r1, r2 = ids["r1"], ids["r2"]

    db_session.add(Tournament(id=ids["tournament"], name="Regional 2026", season=2026, sport="ncaam"))

    db_session.add_all([
        make_game("g-1", "Alpha", "Omega", 70, 50, "final", TIPOFF),
        make_game("g-2", "Gamma", "Delta", 60, 58, "final", TIPOFF + timedelta(hours=2)),
        make_game("g-3", "Alpha", "Gamma", 65, 64, "final", TIPOFF + timedelta(days=2)),
    ])

    nodes = [
        make_node(r1[0], "R1-1", 1, "Alpha", "Omega", r2[0], "HOME", "g-1", 1, 16, "East"),
        make_node(r1[1], "R1-2", 1, "Gamma", "Delta", r2[0], "AWAY", "g-2", 8, 9, "East"),
        make_node(r1[2], "R1-3", 1, "Echo", "Foxtrot", r2[1], "HOME", None, 5, 12, "East"),
        make_node(r1[3], "R1-4", 1, "Hotel", "India", r2[1], "AWAY", None, 4, 13, "East"),
        make_node(r2[0], "R2-1", 2, None, None, ids["r3"], "HOME", "g-3", region="East"),
        make_node(r2[1], "R2-2", 2, None, None, ids["r3"], "AWAY", None, region="East"),
        make_node(ids["r3"], "R3-1", 3, region="East"),
    ]
    for node in nodes:
        node.tournament_id = ids["tournament"]
    db_session.add_all(nodes)

    db_session.add_all([
        User(id="u-1", display_name="Riley"),
        User(id="u-2", display_name="Sam", avatar_url="https://example.com/sam.png"),
    ])
    db_session.add(BracketLeague(
        id=ids["league"],
        tournament_id=ids["tournament"],
        name="Office Pool",
        scoring_mode="momentum",
    ))
    db_session.add_all([
        BracketEntry(id="e-1", league_id=ids["league"], user_id="u-1", name="Chalk", created_at=TIPOFF),
        BracketEntry(id="e-2", league_id=ids["league"], user_id="u-2", name="Chaos",
                     created_at=TIPOFF + timedelta(minutes=1)),
    ])
    db_session.add_all([
        # Chalk: Alpha twice, then Alpha again in R3 (pending)
        BracketPick(entry_id="e-1", node_id=r1[0], picked_team_name="Alpha"),
        BracketPick(entry_id="e-1", node_id=r2[0], picked_team_name="Alpha"),
        BracketPick(entry_id="e-1", node_id=ids["r3"], picked_team_name="Alpha"),
        # Chaos: Omega over Alpha, Delta over Gamma
        BracketPick(entry_id="e-2", node_id=r1[0], picked_team_name="Omega"),
        BracketPick(entry_id="e-2", node_id=r1[1], picked_team_name="Delta"),
    ])
    await db_session.commit()
    return ids
