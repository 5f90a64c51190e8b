"""
NCAA bracket topology generation and validation.
"""
from bracket_engine.orm.bracket import NodeSide
from bracket_engine.services.bracket_structure import (
    CHAMPIONSHIP_SLOT,
    NodeSpec,
    Semifinal,
    generate_ncaam_structure,
    validate_structure,
)


def by_slot(structure):
    return {n.slot: n for n in structure.nodes}


class TestGenerateStructure:

    def test_node_counts(self):
        structure = generate_ncaam_structure(2026)
        assert len(structure.nodes) == 67
        assert structure.count_by_round() == {0: 4, 1: 32, 2: 16, 3: 8, 4: 4, 5: 2, 6: 1}
        assert structure.sport == "ncaam"
        assert structure.season == 2026

    def test_generated_structure_is_valid(self):
        assert validate_structure(generate_ncaam_structure(2026).nodes) == []

    def test_round_of_64_edges(self):
        slots = by_slot(generate_ncaam_structure(2026))

        first = slots["E-R64-1"]
        assert (first.seed_home, first.seed_away) == (1, 16)
        assert first.region == "East"
        assert (first.next_slot, first.next_side) == ("E-R32-1", NodeSide.HOME)

        second = slots["E-R64-2"]
        assert (second.seed_home, second.seed_away) == (8, 9)
        assert (second.next_slot, second.next_side) == ("E-R32-1", NodeSide.AWAY)

        last = slots["M-R64-8"]
        assert (last.seed_home, last.seed_away) == (2, 15)
        assert (last.next_slot, last.next_side) == ("M-R32-4", NodeSide.AWAY)

    def test_first_four_feeds_away_side(self):
        slots = by_slot(generate_ncaam_structure(2026))
        play_in = slots["FF-16-A"]
        assert play_in.round == 0
        assert (play_in.seed_home, play_in.seed_away) == (16, 16)
        assert (play_in.next_slot, play_in.next_side) == ("E-R64-1", NodeSide.AWAY)
        assert slots["FF-11-B"].next_slot == "M-R64-5"

    def test_final_four_and_championship(self):
        slots = by_slot(generate_ncaam_structure(2026))
        assert (slots["E-E8-1"].next_slot, slots["E-E8-1"].next_side) == ("FF-1", NodeSide.HOME)
        assert (slots["W-E8-1"].next_slot, slots["W-E8-1"].next_side) == ("FF-1", NodeSide.AWAY)
        assert (slots["S-E8-1"].next_slot, slots["S-E8-1"].next_side) == ("FF-2", NodeSide.HOME)
        assert slots["FF-2"].next_side == NodeSide.AWAY
        assert slots[CHAMPIONSHIP_SLOT].round == 6
        assert slots[CHAMPIONSHIP_SLOT].next_slot is None

    def test_custom_final_four_pairing(self):
        structure = generate_ncaam_structure(
            2027,
            final_four={
                "FF-1": Semifinal(home_region="E", away_region="S"),
                "FF-2": Semifinal(home_region="W", away_region="M"),
            },
        )
        slots = by_slot(structure)
        assert (slots["S-E8-1"].next_slot, slots["S-E8-1"].next_side) == ("FF-1", NodeSide.AWAY)
        assert validate_structure(structure.nodes) == []


class TestValidateStructure:

    def test_duplicate_slot(self):
        nodes = [
            NodeSpec("A", 1, None, next_slot="F", next_side=NodeSide.HOME),
            NodeSpec("A", 1, None, next_slot="F", next_side=NodeSide.AWAY),
            NodeSpec("F", 2, None),
        ]
        assert any("Duplicate slot: A" in e for e in validate_structure(nodes))

    def test_dangling_next_slot(self):
        nodes = [
            NodeSpec("A", 1, None, next_slot="NOPE", next_side=NodeSide.HOME),
            NodeSpec("F", 2, None),
        ]
        errors = validate_structure(nodes)
        assert any("missing nextSlot: NOPE" in e for e in errors)

    def test_more_than_one_root(self):
        nodes = [NodeSpec("A", 1, None), NodeSpec("B", 1, None)]
        assert any("exactly one root" in e for e in validate_structure(nodes))

    def test_three_inbound_edges(self):
        nodes = [
            NodeSpec("A", 1, None, next_slot="F", next_side=NodeSide.HOME),
            NodeSpec("B", 1, None, next_slot="F", next_side=NodeSide.AWAY),
            NodeSpec("C", 1, None, next_slot="F", next_side=NodeSide.AWAY),
            NodeSpec("F", 2, None),
        ]
        errors = validate_structure(nodes)
        assert any("F has 3 inbound edges" in e for e in errors)
        assert any("both feed F AWAY" in e for e in errors)
