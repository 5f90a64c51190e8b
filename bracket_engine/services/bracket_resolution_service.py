"""
Bracket Resolution Service

Write path: turns final games into pick correctness and advances winners
into the next node. Run after every feed update; safe to re-run, since
only pending picks and empty next-node sides are ever written.

Order matters: nodes are walked in ascending round order so a winner
propagated from round r is on its round r+1 node before that node's own
game is considered.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bracket_engine.orm.bracket import BracketNode, GameStatus, NodeSide, SportsGame, Tournament
from bracket_engine.orm.league import BracketPick
from bracket_engine.services.bracket_graph import BracketArena, propagate_winner
from bracket_engine.services.live_bracket_service import TournamentNotFoundError
from bracket_engine.services.team_names import match_node_side

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    games_finalized: int = 0
    picks_scored: int = 0
    teams_advanced: int = 0
    team_names_seeded: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gamesFinalized": self.games_finalized,
            "picksScored": self.picks_scored,
            "teamsAdvanced": self.teams_advanced,
            "teamNamesSeeded": self.team_names_seeded,
            "errors": self.errors,
        }


def _seed_names_from_game(node: BracketNode, game: SportsGame) -> bool:
    changed = False
    if not node.home_team_name and game.home_team:
        node.home_team_name = game.home_team
        changed = True
    if not node.away_team_name and game.away_team:
        node.away_team_name = game.away_team
        changed = True
    return changed


async def resolve_tournament(db: AsyncSession, tournament_id: str) -> ResolutionResult:
    tournament = await db.get(Tournament, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(tournament_id)

    result = ResolutionResult()

    nodes_result = await db.execute(
        select(BracketNode).where(BracketNode.tournament_id == tournament_id)
    )
    arena = BracketArena(nodes_result.scalars().all())
    linked = [n for n in arena.in_round_order() if n.sports_game_id]
    if not linked:
        return result

    games_result = await db.execute(
        select(SportsGame).where(SportsGame.id.in_([n.sports_game_id for n in linked]))
    )
    games = {g.id: g for g in games_result.scalars().all()}

    picks_result = await db.execute(
        select(BracketPick).where(
            BracketPick.node_id.in_([n.id for n in linked]),
            BracketPick.is_correct.is_(None),
        )
    )
    pending: Dict[str, List[BracketPick]] = defaultdict(list)
    for pick in picks_result.scalars().all():
        pending[pick.node_id].append(pick)

    for node in linked:
        game = games.get(node.sports_game_id)
        if game is None:
            continue

        if not (node.home_team_name and node.away_team_name):
            if _seed_names_from_game(node, game):
                result.team_names_seeded += 1

        if game.status != GameStatus.FINAL.value or game.home_score is None or game.away_score is None:
            continue
        if game.home_score == game.away_score:
            logger.warning(f"Node {node.slot}: tied final {game.home_score}-{game.away_score}, skipped")
            continue

        game_winner = game.home_team if game.home_score > game.away_score else game.away_team
        side = match_node_side(game_winner, node.home_team_name, node.away_team_name)
        if side is None:
            result.errors.append(f"Node {node.slot}: game final but could not resolve winner")
            continue
        winner = node.home_team_name if side is NodeSide.HOME else node.away_team_name

        result.games_finalized += 1

        for pick in pending.pop(node.id, []):
            pick.is_correct = pick.picked_team_name == winner
            result.picks_scored += 1

        try:
            if propagate_winner(arena, node, winner) is not None:
                result.teams_advanced += 1
        except KeyError as e:
            result.errors.append(str(e.args[0]))

    await db.commit()

    logger.info(
        f"Resolved {tournament.name}: {result.games_finalized} games final, "
        f"{result.picks_scored} picks scored, {result.teams_advanced} teams advanced, "
        f"{len(result.errors)} errors"
    )
    for error in result.errors:
        logger.warning(error)

    return result
