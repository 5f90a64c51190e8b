"""
bracket_engine/routes/bracket_admin.py
Admin: seed a season's bracket structure.
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bracket_engine.config.feature_flags import feature_flags
from bracket_engine.database import get_db
from bracket_engine.errors import (
    BadRequestError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
)
from bracket_engine.orm.bracket import NodeSide
from bracket_engine.services.bracket_seeding_service import (
    BracketStructureError,
    TournamentExistsError,
    seed_tournament,
)
from bracket_engine.services.bracket_structure import FeedTarget, REGION_NAMES, Semifinal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/bracket", tags=["Bracket Admin"])

MIN_SEASON = 1939
MAX_SEASON = 2100


# =============================================================================
# Request Models
# =============================================================================

class FirstFourTarget(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    next_slot: str = Field(alias="nextSlot")
    next_side: NodeSide = Field(alias="nextSide")


class SemifinalPairing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home_region: str = Field(alias="homeRegion")
    away_region: str = Field(alias="awayRegion")


class SlotTeams(BaseModel):
    home: Optional[str] = None
    away: Optional[str] = None


class InitBracketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    season: Optional[int] = None
    first_four: Optional[Dict[str, FirstFourTarget]] = Field(None, alias="firstFour")
    final_four: Optional[Dict[str, SemifinalPairing]] = Field(None, alias="finalFour")
    field: Optional[Dict[str, SlotTeams]] = None


def check_admin_enabled():
    if not feature_flags.FEATURE_BRACKET_ADMIN:
        raise ForbiddenError("Bracket admin endpoints are disabled")


# =============================================================================
# Routes
# =============================================================================

@router.post("/init", status_code=status.HTTP_201_CREATED)
async def init_bracket(
    body: InitBracketRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create the tournament and its 67 nodes for a season."""
    check_admin_enabled()

    if body.season is None:
        raise BadRequestError("season (number) is required", code=ErrorCode.MISSING_FIELD)
    if not MIN_SEASON <= body.season <= MAX_SEASON:
        raise BadRequestError(f"season must be between {MIN_SEASON} and {MAX_SEASON}")

    first_four = None
    if body.first_four:
        first_four = {
            slot: FeedTarget(t.next_slot, t.next_side) for slot, t in body.first_four.items()
        }

    final_four = None
    if body.final_four:
        unknown = {
            code for semi in body.final_four.values()
            for code in (semi.home_region, semi.away_region)
            if code not in REGION_NAMES
        }
        if unknown:
            raise BadRequestError(f"Unknown region code(s): {sorted(unknown)}")
        final_four = {
            slot: Semifinal(s.home_region, s.away_region) for slot, s in body.final_four.items()
        }

    field = None
    if body.field:
        field = {slot: teams.model_dump(exclude_none=True) for slot, teams in body.field.items()}

    try:
        return await seed_tournament(db, body.season, first_four, final_four, field)
    except TournamentExistsError as e:
        raise ConflictError(str(e), details={"tournamentId": e.tournament_id})
    except BracketStructureError as e:
        raise BadRequestError(
            str(e),
            code=ErrorCode.INVALID_STRUCTURE,
            details={"errors": e.errors},
        )
