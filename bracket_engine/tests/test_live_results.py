"""
Joining nodes to live games: winners, missing games and the poll hint.
"""
from bracket_engine.services.bracket_graph import BracketArena
from bracket_engine.services.live_results import (
    IDLE_POLL_INTERVAL_MS,
    LIVE_POLL_INTERVAL_MS,
    attach_live_games,
    has_live_games,
    poll_interval_ms,
    winners_by_node,
)
from bracket_engine.tests.factories import TIPOFF, make_game, make_node


def arena():
    return BracketArena([
        make_node("r2", "R2-1", 2, None, None, None, None, "g-missing"),
        make_node("r1-b", "R1-2", 1, "Gamma", "Delta", "r2", "AWAY", "g-2", 8, 9),
        make_node("r1-a", "R1-1", 1, "Alpha", "Omega", "r2", "HOME", "g-1", 1, 16, "East"),
        make_node("r1-c", "R1-3", 1, "Echo", "Foxtrot"),
    ])


def games(g2_status="in_progress"):
    return [
        make_game("g-1", "Alpha", "Omega", 70, 50, "final", TIPOFF),
        make_game("g-2", "Gamma", "Delta", 30, 28, g2_status, TIPOFF),
    ]


def test_views_follow_round_order():
    views = attach_live_games(arena(), games())
    assert [v.slot for v in views] == ["R1-1", "R1-2", "R1-3", "R2-1"]


def test_winners_only_for_final_games():
    views = attach_live_games(arena(), games())
    assert winners_by_node(views) == {
        "r1-a": "Alpha",
        "r1-b": None,
        "r1-c": None,
        "r2": None,
    }


def test_missing_game_leaves_null_live_game(caplog):
    views = {v.id: v for v in attach_live_games(arena(), games())}
    assert views["r2"].live_game is None
    assert views["r2"].winner is None
    # An unlinked node is not a missing game
    assert views["r1-c"].live_game is None
    assert "1 node(s) reference games missing" in caplog.text


def test_node_payload_shape():
    views = {v.id: v for v in attach_live_games(arena(), games())}
    payload = views["r1-a"].to_dict()

    assert payload["slot"] == "R1-1"
    assert payload["region"] == "East"
    assert (payload["seedHome"], payload["seedAway"]) == (1, 16)
    assert payload["nextNodeId"] == "r2"
    assert payload["nextNodeSide"] == "HOME"
    assert payload["winner"] == "Alpha"
    assert payload["liveGame"] == {
        "homeScore": 70,
        "awayScore": 50,
        "status": "final",
        "startTime": TIPOFF.isoformat(),
        "venue": None,
        "fetchedAt": None,
    }
    assert views["r2"].to_dict()["liveGame"] is None


def test_feed_orientation_is_mapped_back_to_node_names():
    node = make_node("a", "S-1", 1, "Duke", "Purdue", game_id="g")
    game = make_game("g", "Purdue University", "Duke University", 60, 75, "final")
    views = attach_live_games(BracketArena([node]), [game])
    assert views[0].winner == "Duke"


def test_poll_interval_follows_live_games():
    live_views = attach_live_games(arena(), games("in_progress"))
    assert has_live_games(live_views)
    assert poll_interval_ms(has_live_games(live_views)) == LIVE_POLL_INTERVAL_MS == 10_000

    idle_views = attach_live_games(arena(), games("final"))
    assert not has_live_games(idle_views)
    assert poll_interval_ms(has_live_games(idle_views)) == IDLE_POLL_INTERVAL_MS == 60_000


def test_halftime_is_not_treated_as_live():
    views = attach_live_games(arena(), games("halftime"))
    assert not has_live_games(views)
