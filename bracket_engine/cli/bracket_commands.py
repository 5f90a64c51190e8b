"""
Bracket CLI commands

Seeding, pick resolution and a terminal view of league standings.
"""
import asyncio
from typing import Any, Dict, List


def format_standings(standings: List[Dict[str, Any]]) -> str:
    """Plain-text leaderboard; rank is the row position."""
    header = f"{'#':>3}  {'Entry':<28} {'Points':>8} {'Max':>8} {'Correct':>9}  Champion"
    lines = [header, "-" * len(header)]
    for rank, row in enumerate(standings, start=1):
        correct = f"{row['correctPicks']}/{row['totalPicks']}"
        lines.append(
            f"{rank:>3}  {row['entryName'][:28]:<28} {float(row['totalPoints']):>8.2f} "
            f"{float(row['maxPossible']):>8.2f} {correct:>9}  {row['championPick'] or '-'}"
        )
    return "\n".join(lines)


class BracketCommand:
    """Bracket CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        """Execute bracket command."""
        if args.bracket_action == "init":
            return self._init(args)
        elif args.bracket_action == "resolve":
            return self._resolve(args)
        elif args.bracket_action == "standings":
            return self._standings(args)
        else:
            print("Error: Unknown bracket action")
            return 1

    def _init(self, args) -> int:
        print(f"=== Seed Bracket for Season {args.season} ===")

        if self.dry_run:
            from bracket_engine.services.bracket_structure import generate_ncaam_structure

            structure = generate_ncaam_structure(args.season)
            print(f"[DRY RUN] Would create {len(structure.nodes)} nodes: {structure.count_by_round()}")
            return 0

        try:
            summary = asyncio.run(self._async_init(args.season))
        except Exception as e:
            print(f"Error: {e}")
            return 1

        print(f"✓ Tournament created: {summary['tournamentId']}")
        print(f"  Name: {summary['name']}")
        print(f"  Nodes: {summary['totalNodes']} ({summary['linkedEdges']} links)")
        for round_no, count in summary["nodesByRound"].items():
            print(f"    Round {round_no}: {count}")
        return 0

    async def _async_init(self, season: int) -> Dict[str, Any]:
        from bracket_engine.database import AsyncSessionLocal, close_db
        from bracket_engine.services.bracket_seeding_service import seed_tournament

        try:
            async with AsyncSessionLocal() as session:
                return await seed_tournament(session, season)
        finally:
            await close_db()

    def _resolve(self, args) -> int:
        print(f"=== Resolve Tournament {args.id} ===")

        if self.dry_run:
            print(f"[DRY RUN] Would score pending picks for tournament {args.id}")
            return 0

        try:
            result = asyncio.run(self._async_resolve(args.id))
        except Exception as e:
            print(f"Error: {e}")
            return 1

        print(f"✓ Games finalized: {result.games_finalized}")
        print(f"  Picks scored: {result.picks_scored}")
        print(f"  Teams advanced: {result.teams_advanced}")
        print(f"  Team names seeded: {result.team_names_seeded}")
        for error in result.errors:
            print(f"  ! {error}")
        return 1 if result.errors else 0

    async def _async_resolve(self, tournament_id: str):
        from bracket_engine.database import AsyncSessionLocal, close_db
        from bracket_engine.services.bracket_resolution_service import resolve_tournament

        try:
            async with AsyncSessionLocal() as session:
                return await resolve_tournament(session, tournament_id)
        finally:
            await close_db()

    def _standings(self, args) -> int:
        try:
            payload = asyncio.run(self._async_standings(args.id, args.league))
        except Exception as e:
            print(f"Error: {e}")
            return 1

        tournament = payload["tournament"]
        print(f"=== {tournament['name']} ===")
        print(format_standings(payload["standings"] or []))
        if payload["sleeperTeams"]:
            print(f"\nSleeper teams: {', '.join(payload['sleeperTeams'])}")
        return 0

    async def _async_standings(self, tournament_id: str, league_id: str) -> Dict[str, Any]:
        from bracket_engine.database import close_db, get_session_factory
        from bracket_engine.services.live_bracket_service import get_live_bracket

        try:
            return await get_live_bracket(tournament_id, league_id, get_session_factory())
        finally:
            await close_db()
