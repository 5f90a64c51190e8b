"""
Feed ingest: applies provider score updates to the games a tournament
links to, then runs resolution so picks and next-round names catch up.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bracket_engine.orm.base import utcnow
from bracket_engine.orm.bracket import BracketNode, GameStatus, SportsGame, Tournament
from bracket_engine.services.bracket_resolution_service import resolve_tournament
from bracket_engine.services.live_bracket_service import TournamentNotFoundError
from bracket_engine.services.team_names import map_feed_status

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = "unknown"


@dataclass
class GameUpdate:
    game_id: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: Optional[str] = None


def _incoming_status(game: SportsGame, update: GameUpdate) -> Optional[str]:
    """
    Normalised status to write, or None to leave the game untouched.

    Updates without a status are ignored, and a final game only accepts
    further final updates (score corrections).
    """
    if not update.status or not update.status.strip():
        return None
    status = map_feed_status(update.status)
    if status == UNKNOWN_STATUS:
        return None
    if game.status == GameStatus.FINAL.value and status != GameStatus.FINAL.value:
        return None
    return status


async def apply_game_updates(
    db: AsyncSession,
    tournament_id: str,
    updates: Iterable[GameUpdate],
) -> Dict[str, Any]:
    """
    Write scores and normalised status onto linked games.

    Updates for games the tournament does not link to are reported back,
    not applied.
    """
    tournament = await db.get(Tournament, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(tournament_id)

    result = await db.execute(
        select(SportsGame)
        .join(BracketNode, BracketNode.sports_game_id == SportsGame.id)
        .where(BracketNode.tournament_id == tournament_id)
    )
    games = {g.id: g for g in result.scalars().unique().all()}

    now = utcnow()
    updated = 0
    unknown: List[str] = []
    skipped: List[str] = []
    for update in updates:
        game = games.get(update.game_id)
        if game is None:
            unknown.append(update.game_id)
            continue
        status = _incoming_status(game, update)
        if status is None:
            skipped.append(update.game_id)
            continue
        if update.home_score is not None:
            game.home_score = update.home_score
        if update.away_score is not None:
            game.away_score = update.away_score
        game.status = status
        game.fetched_at = now
        updated += 1

    await db.commit()

    if unknown:
        logger.warning(f"Ignored {len(unknown)} update(s) for games not linked to {tournament_id}: {unknown}")
    if skipped:
        logger.warning(f"Skipped {len(skipped)} update(s) with no usable status or reopening a final game: {skipped}")
    logger.info(f"Applied {updated} game update(s) to {tournament.name}")

    resolution = await resolve_tournament(db, tournament_id)
    return {
        "updatedGames": updated,
        "unknownGames": unknown,
        "skippedGames": skipped,
        "resolution": resolution.to_dict(),
    }
