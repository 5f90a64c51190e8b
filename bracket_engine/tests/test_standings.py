"""
Standings aggregation and sleeper detection, on transient ORM objects.
"""
from decimal import Decimal

from bracket_engine.orm.league import BracketEntry, BracketLeague, BracketPick
from bracket_engine.services.bracket_graph import BracketArena
from bracket_engine.services.live_results import NodeView
from bracket_engine.services.standings_service import compute_standings, sleeper_teams
from bracket_engine.tests.factories import make_node


def arena():
    return BracketArena([
        make_node("r1-a", "R1-1", 1, "Alpha", "Omega", "r2", "HOME", "g-1", 1, 16),
        make_node("r1-b", "R1-2", 1, "Gamma", "Delta", "r2", "AWAY", "g-2", 8, 9),
        make_node("r2", "R2-1", 2, "Alpha", "Gamma", "champ", "HOME"),
        make_node("champ", "CHAMP", 6),
    ])


def league(mode="momentum", rules=None):
    return BracketLeague(id="l-1", tournament_id="t-1", name="Pool", scoring_mode=mode, scoring_rules=rules)


def entry(entry_id, name, *picks):
    return BracketEntry(
        id=entry_id,
        league_id="l-1",
        user_id=f"u-{entry_id}",
        name=name,
        picks=[
            BracketPick(id=f"{entry_id}-{node_id}", entry_id=entry_id, node_id=node_id,
                        picked_team_name=team, is_correct=is_correct)
            for node_id, team, is_correct in picks
        ],
    )


class TestComputeStandings:

    def test_sorted_by_total_with_stable_ties(self):
        first = entry("e-1", "First", ("r1-a", "Alpha", True))
        second = entry("e-2", "Second", ("r1-b", "Gamma", True))
        leader = entry("e-3", "Leader", ("r1-a", "Alpha", True), ("r2", "Alpha", True))

        rows = compute_standings(league(), [first, second, leader], arena())
        assert [r.entry_name for r in rows] == ["Leader", "First", "Second"]
        assert [r.total_points for r in rows] == [Decimal("3"), Decimal("1"), Decimal("1")]

        rows = compute_standings(league(), [second, first, leader], arena())
        assert [r.entry_name for r in rows] == ["Leader", "Second", "First"]

    def test_row_fields(self):
        e = entry(
            "e-1", "Chalk",
            ("r1-a", "Alpha", True),
            ("r1-b", "Delta", False),
            ("r2", "Alpha", None),
            ("champ", "Alpha", None),
        )
        row = compute_standings(league(), [e], arena())[0]

        assert row.correct_picks == 1
        assert row.total_picks == 2
        assert row.champion_pick == "Alpha"
        assert row.max_possible == Decimal("35")
        assert row.user_id == "u-e-1"
        assert row.display_name is None

        payload = row.to_dict()
        assert payload["entryName"] == "Chalk"
        assert payload["roundCorrect"][1] == 1
        assert payload["scoringDetails"]["mode"] == "momentum"

    def test_league_distribution_feeds_boldness(self):
        entries = [
            entry("e-1", "A", ("r1-a", "Alpha", True)),
            entry("e-2", "B", ("r1-a", "Alpha", True)),
            entry("e-3", "C", ("r1-a", "Omega", False)),
        ]
        rows = compute_standings(league("accuracy_boldness"), entries, arena())

        # Two of three picked Alpha: rarity 1/2, multiplier 1.5
        assert [r.total_points for r in rows] == [Decimal("1.50"), Decimal("1.50"), Decimal("0")]
        assert rows[0].scoring_details["mode"] == "accuracy_boldness"

    def test_unknown_mode_scores_as_momentum(self, caplog):
        rows = compute_standings(league("bogus"), [entry("e-1", "A", ("r2", "Alpha", True))], arena())
        assert rows[0].total_points == Decimal("2")
        assert rows[0].scoring_details["mode"] == "momentum"
        assert "falling back to momentum" in caplog.text

    def test_round_points_override(self):
        rules = {"roundPoints": {"1": 10}}
        rows = compute_standings(league(rules=rules), [entry("e-1", "A", ("r1-a", "Alpha", True))], arena())
        assert rows[0].total_points == Decimal("10")

    def test_empty_league(self):
        assert compute_standings(league(), [], arena()) == []


# =============================================================================
# Sleeper teams
# =============================================================================

def view(node_id, round_no, winner):
    return NodeView(
        id=node_id,
        slot=node_id.upper(),
        round=round_no,
        region=None,
        seed_home=None,
        seed_away=None,
        home_team_name=None,
        away_team_name=None,
        next_node_id=None,
        next_node_side=None,
        live_game=None,
        winner=winner,
    )


SEEDS = {"Alpha": 1, "Omega": 16, "Delta": 9, "Kilo": 12, "Lima": 12, "Zulu": 16}


class TestSleeperTeams:

    def test_wins_above_seed_expectation(self):
        views = [
            view("a", 1, "Omega"), view("b", 2, "Omega"),
            view("c", 1, "Alpha"), view("d", 2, "Alpha"), view("e", 3, "Alpha"), view("f", 4, "Alpha"),
            view("g", 1, "Delta"),
            view("h", 1, None),
        ]
        assert sleeper_teams(views, SEEDS) == ["Omega", "Delta"]

    def test_play_in_wins_do_not_count(self):
        assert sleeper_teams([view("ff", 0, "Zulu")], SEEDS) == []

    def test_unseeded_winner_is_ignored(self):
        assert sleeper_teams([view("a", 1, "Mystery")], SEEDS) == []

    def test_ties_break_on_worse_seed_then_name(self):
        views = [view("a", 1, "Lima"), view("b", 1, "Kilo"), view("c", 1, "Delta")]
        assert sleeper_teams(views, SEEDS) == ["Kilo", "Lima", "Delta"]
