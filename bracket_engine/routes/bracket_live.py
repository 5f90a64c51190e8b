"""
bracket_engine/routes/bracket_live.py
Live bracket read endpoint: nodes, winners, standings and poll hint.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import async_sessionmaker

from bracket_engine.config.feature_flags import LIVE_RATE_LIMIT
from bracket_engine.database import get_session_factory
from bracket_engine.errors import (
    BadRequestError,
    ErrorCode,
    NotFoundError,
    internal_error_from,
)
from bracket_engine.services.live_bracket_service import (
    LeagueNotFoundError,
    SnapshotFetchError,
    TournamentNotFoundError,
    get_live_bracket,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bracket", tags=["Bracket"])
limiter = Limiter(key_func=get_remote_address)


@router.get("/live")
@limiter.limit(LIVE_RATE_LIMIT)
async def live_bracket(
    request: Request,  # Required by slowapi
    tournament_id: Optional[str] = Query(None, alias="tournamentId"),
    league_id: Optional[str] = Query(None, alias="leagueId"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Current bracket state for a tournament.

    Standings are only computed when leagueId is given; otherwise
    `standings` is null. Clients should re-poll after `pollIntervalMs`.
    """
    if not tournament_id:
        raise BadRequestError("tournamentId is required", code=ErrorCode.MISSING_FIELD)

    try:
        return await get_live_bracket(tournament_id, league_id or None, session_factory)
    except TournamentNotFoundError:
        raise NotFoundError("Tournament", tournament_id, code=ErrorCode.TOURNAMENT_NOT_FOUND)
    except LeagueNotFoundError:
        raise NotFoundError("League", league_id, code=ErrorCode.LEAGUE_NOT_FOUND)
    except SnapshotFetchError as e:
        raise internal_error_from(e, "GET /api/bracket/live", code=ErrorCode.FETCH_FAILED)
