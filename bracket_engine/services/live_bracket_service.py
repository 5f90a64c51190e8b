"""
Live Bracket Service

Read path behind GET /api/bracket/live. Fetches a consistent snapshot of
one tournament (and optionally one league), then derives winners,
standings and the poll hint from it. Nothing is written.

Fetch plan:
1. tournament + nodes (needed to know which games to load)
2. concurrently, each on its own session:
   - linked games by id
   - league, entries (creation order), picks and users
A failed fetch aborts the whole request; a partial snapshot never
produces standings.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from bracket_engine.orm.bracket import BracketNode, SportsGame, Tournament
from bracket_engine.orm.league import BracketEntry, BracketLeague
from bracket_engine.services.bracket_graph import BracketArena
from bracket_engine.services.live_results import (
    attach_live_games,
    has_live_games,
    poll_interval_ms,
)
from bracket_engine.services.pick_ledger import build_seed_map
from bracket_engine.services.standings_service import compute_standings, sleeper_teams

logger = logging.getLogger(__name__)


class TournamentNotFoundError(Exception):
    def __init__(self, tournament_id: str):
        self.tournament_id = tournament_id
        super().__init__(f"Tournament {tournament_id} not found")


class LeagueNotFoundError(Exception):
    def __init__(self, league_id: str):
        self.league_id = league_id
        super().__init__(f"League {league_id} not found")


class SnapshotFetchError(Exception):
    """An upstream read failed; no partial payload is built."""


@dataclass
class BracketSnapshot:
    tournament: Tournament
    nodes: List[BracketNode]
    games: List[SportsGame] = field(default_factory=list)
    league: Optional[BracketLeague] = None
    entries: List[BracketEntry] = field(default_factory=list)


async def fetch_tournament(
    session_factory: async_sessionmaker,
    tournament_id: str,
) -> Tuple[Optional[Tournament], List[BracketNode]]:
    async with session_factory() as db:
        tournament = await db.get(Tournament, tournament_id)
        if tournament is None:
            return None, []
        result = await db.execute(
            select(BracketNode)
            .where(BracketNode.tournament_id == tournament_id)
            .order_by(BracketNode.round, BracketNode.slot)
        )
        return tournament, list(result.scalars().all())


async def fetch_games(
    session_factory: async_sessionmaker,
    game_ids: List[str],
) -> List[SportsGame]:
    if not game_ids:
        return []
    async with session_factory() as db:
        result = await db.execute(
            select(SportsGame)
            .where(SportsGame.id.in_(game_ids))
            .order_by(SportsGame.start_time, SportsGame.id)
        )
        return list(result.scalars().all())


async def fetch_league(
    session_factory: async_sessionmaker,
    league_id: str,
    tournament_id: str,
) -> Tuple[Optional[BracketLeague], List[BracketEntry]]:
    async with session_factory() as db:
        result = await db.execute(
            select(BracketLeague).where(
                BracketLeague.id == league_id,
                BracketLeague.tournament_id == tournament_id,
            )
        )
        league = result.scalar_one_or_none()
        if league is None:
            return None, []

        result = await db.execute(
            select(BracketEntry)
            .where(BracketEntry.league_id == league_id)
            .options(
                selectinload(BracketEntry.picks),
                selectinload(BracketEntry.user),
            )
            .order_by(BracketEntry.created_at, BracketEntry.id)
        )
        return league, list(result.scalars().all())


async def load_snapshot(
    tournament_id: str,
    league_id: Optional[str],
    session_factory: async_sessionmaker,
) -> BracketSnapshot:
    """
    Fetch everything the live payload needs.

    Raises:
        TournamentNotFoundError, LeagueNotFoundError: stale ids
        SnapshotFetchError: any database failure
    """
    try:
        tournament, nodes = await fetch_tournament(session_factory, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)

        game_ids = sorted({n.sports_game_id for n in nodes if n.sports_game_id})
        if league_id:
            # Wait for both fetches; the first failure is re-raised
            outcomes = await asyncio.gather(
                fetch_games(session_factory, game_ids),
                fetch_league(session_factory, league_id, tournament_id),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            games, (league, entries) = outcomes
            if league is None:
                raise LeagueNotFoundError(league_id)
        else:
            games = await fetch_games(session_factory, game_ids)
            league, entries = None, []
    except SQLAlchemyError as e:
        logger.error(f"Snapshot fetch failed for tournament {tournament_id}: {e}")
        raise SnapshotFetchError(str(e)) from e

    return BracketSnapshot(
        tournament=tournament,
        nodes=nodes,
        games=games,
        league=league,
        entries=entries,
    )


def build_live_payload(snapshot: BracketSnapshot) -> Dict[str, Any]:
    arena = BracketArena(snapshot.nodes)
    views = attach_live_games(arena, snapshot.games)
    live = has_live_games(views)
    seed_map = build_seed_map(snapshot.nodes)

    standings = None
    if snapshot.league is not None:
        games_by_id = {g.id: g for g in snapshot.games}
        rows = compute_standings(snapshot.league, snapshot.entries, arena, games_by_id)
        standings = [row.to_dict() for row in rows]

    return {
        "ok": True,
        "tournamentId": snapshot.tournament.id,
        "tournament": snapshot.tournament.to_dict(),
        "games": [g.to_dict() for g in snapshot.games],
        "nodes": [v.to_dict() for v in views],
        "standings": standings,
        "sleeperTeams": sleeper_teams(views, seed_map),
        "hasLiveGames": live,
        "pollIntervalMs": poll_interval_ms(live),
    }


async def get_live_bracket(
    tournament_id: str,
    league_id: Optional[str],
    session_factory: async_sessionmaker,
) -> Dict[str, Any]:
    snapshot = await load_snapshot(tournament_id, league_id, session_factory)
    return build_live_payload(snapshot)
