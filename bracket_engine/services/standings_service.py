"""
Standings Aggregator

Runs every entry of a league through the pick ledger and the league's
scoring strategy, then orders the rows by total points.

Ordering:
- totalPoints descending
- ties keep entry order (created_at, then id); no secondary key
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from bracket_engine.orm.bracket import SportsGame
from bracket_engine.orm.league import BracketEntry, BracketLeague
from bracket_engine.services.bracket_graph import BracketArena
from bracket_engine.services.live_results import NodeView
from bracket_engine.services.pick_ledger import (
    SCORED_ROUNDS,
    build_seed_map,
    max_possible,
    resolve_entry,
)
from bracket_engine.services.scoring_strategies import (
    LeaguePickDistribution,
    ScoringStrategy,
    strategy_for_league,
)

logger = logging.getLogger(__name__)

# Wins a team of each seed is expected to collect in the main bracket
SEED_EXPECTED_WINS: Dict[int, int] = {
    1: 4, 2: 3, 3: 2, 4: 2,
    5: 1, 6: 1, 7: 1, 8: 1,
    **{seed: 0 for seed in range(9, 17)},
}


@dataclass
class StandingRow:
    entry_id: str
    entry_name: str
    user_id: Optional[str]
    display_name: Optional[str]
    avatar_url: Optional[str]
    total_points: Decimal
    correct_picks: int
    total_picks: int
    round_correct: Dict[int, int]
    champion_pick: Optional[str]
    max_possible: Decimal
    scoring_details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entryId": self.entry_id,
            "entryName": self.entry_name,
            "userId": self.user_id,
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
            "totalPoints": self.total_points,
            "correctPicks": self.correct_picks,
            "totalPicks": self.total_picks,
            "roundCorrect": self.round_correct,
            "championPick": self.champion_pick,
            "maxPossible": self.max_possible,
            "scoringDetails": self.scoring_details,
        }


def score_entry(
    entry: BracketEntry,
    arena: BracketArena,
    seed_map: Dict[str, int],
    strategy: ScoringStrategy,
    distribution: Optional[LeaguePickDistribution] = None,
    games_by_id: Optional[Dict[str, SportsGame]] = None,
) -> StandingRow:
    ledger = resolve_entry(entry.picks, arena, seed_map, games_by_id)
    if ledger.unmapped_picks:
        logger.warning(
            f"Entry {entry.id}: {ledger.unmapped_picks} pick(s) reference unknown nodes"
        )
    result = strategy.score(ledger.picks, distribution)
    user = entry.user

    return StandingRow(
        entry_id=entry.id,
        entry_name=entry.name,
        user_id=entry.user_id,
        display_name=user.display_name if user else None,
        avatar_url=user.avatar_url if user else None,
        total_points=result.total,
        correct_picks=ledger.correct_picks,
        total_picks=ledger.total_picks,
        round_correct=ledger.round_correct,
        champion_pick=ledger.champion_pick,
        max_possible=max_possible(ledger, strategy, result, distribution),
        scoring_details=result.details,
    )


def compute_standings(
    league: BracketLeague,
    entries: List[BracketEntry],
    arena: BracketArena,
    games_by_id: Optional[Dict[str, SportsGame]] = None,
) -> List[StandingRow]:
    """
    Score every entry and sort by total points.

    ``entries`` must already be in creation order; Python's sort is
    stable so equal totals keep that order.
    """
    strategy = strategy_for_league(league.scoring_mode, league.scoring_rules)
    seed_map = build_seed_map(arena.in_round_order())
    distribution = LeaguePickDistribution.from_picks(
        pick for entry in entries for pick in entry.picks
    )

    rows = [
        score_entry(entry, arena, seed_map, strategy, distribution, games_by_id)
        for entry in entries
    ]
    rows.sort(key=lambda row: row.total_points, reverse=True)

    logger.info(
        f"League {league.id}: scored {len(rows)} entries with {strategy.mode.value}"
    )
    return rows


def sleeper_teams(views: Iterable[NodeView], seed_map: Dict[str, int]) -> List[str]:
    """
    Teams whose main-bracket wins exceed what their seed predicts.

    Ordered by excess wins, then worse seed first, then name.
    """
    wins: Counter = Counter()
    for view in views:
        if view.winner and view.round in SCORED_ROUNDS:
            wins[view.winner] += 1

    flagged = []
    for team, won in wins.items():
        seed = seed_map.get(team)
        if seed is None:
            continue
        excess = won - SEED_EXPECTED_WINS.get(seed, 0)
        if excess > 0:
            flagged.append((excess, seed, team))

    flagged.sort(key=lambda t: (-t[0], -t[1], t[2]))
    return [team for _, _, team in flagged]
