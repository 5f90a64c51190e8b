"""
bracket_engine/routes/bracket_workers.py
Worker hooks: push live scores, run pick resolution.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bracket_engine.config.feature_flags import feature_flags
from bracket_engine.database import get_db
from bracket_engine.errors import (
    BadRequestError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
)
from bracket_engine.services.bracket_resolution_service import resolve_tournament
from bracket_engine.services.feed_ingest import GameUpdate, apply_game_updates
from bracket_engine.services.live_bracket_service import TournamentNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bracket/workers", tags=["Bracket Workers"])


class GameUpdateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")
    home_score: Optional[int] = Field(None, alias="homeScore")
    away_score: Optional[int] = Field(None, alias="awayScore")
    status: Optional[str] = None


class LiveIngestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tournament_id: Optional[str] = Field(None, alias="tournamentId")
    updates: List[GameUpdateIn] = Field(default_factory=list)


class ResolveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tournament_id: Optional[str] = Field(None, alias="tournamentId")


def check_workers_enabled():
    if not feature_flags.FEATURE_LIVE_INGEST_WORKER:
        raise ForbiddenError("Live ingest workers are disabled")


def _require_tournament_id(tournament_id: Optional[str]) -> str:
    if not tournament_id:
        raise BadRequestError("Missing tournamentId", code=ErrorCode.MISSING_FIELD)
    return tournament_id


@router.post("/live-ingest")
async def live_ingest(body: LiveIngestRequest, db: AsyncSession = Depends(get_db)):
    check_workers_enabled()
    tournament_id = _require_tournament_id(body.tournament_id)

    updates = [
        GameUpdate(
            game_id=u.game_id,
            home_score=u.home_score,
            away_score=u.away_score,
            status=u.status,
        )
        for u in body.updates
    ]
    try:
        summary = await apply_game_updates(db, tournament_id, updates)
    except TournamentNotFoundError:
        raise NotFoundError("Tournament", tournament_id, code=ErrorCode.TOURNAMENT_NOT_FOUND)

    return {"ok": True, "tournamentId": tournament_id, **summary}


@router.post("/resolve")
async def resolve(body: ResolveRequest, db: AsyncSession = Depends(get_db)):
    check_workers_enabled()
    tournament_id = _require_tournament_id(body.tournament_id)

    try:
        result = await resolve_tournament(db, tournament_id)
    except TournamentNotFoundError:
        raise NotFoundError("Tournament", tournament_id, code=ErrorCode.TOURNAMENT_NOT_FOUND)

    return {"ok": True, "tournamentId": tournament_id, **result.to_dict()}
