import math
import random

import pytest

from partycompass.alignment import PartyAlignment, detect_ties, rank_parties
from partycompass.axis import Point, party_position
from partycompass.bank import Party


def _positions(bank):
    return [(p, party_position(bank, p.id)) for p in bank.parties]


def _fake(party_id, alignment):
    return PartyAlignment(
        party=Party(id=party_id),
        position=Point(0, 0),
        normalized_position=Point(0, 0),
        distance=100 - alignment,
        alignment=alignment,
        economic_diff=0.0,
        social_diff=0.0,
    )


class TestRankParties:
    def test_toy_ranking(self, toy_bank):
        ranked = rank_parties(_positions(toy_bank), Point(10.0, 10.0))
        assert [r.party.id for r in ranked] == ["x", "y"]

        best = ranked[0]
        assert best.distance == pytest.approx(2.5)
        # max_extent = hypot(10, 10), max_distance = 2.5 * max_extent
        assert best.alignment == pytest.approx(100 - 100 / (10 * math.sqrt(2)))
        assert best.economic_diff == pytest.approx(-2.5)
        assert best.social_diff == pytest.approx(0.0)

        assert ranked[1].distance == pytest.approx(math.hypot(17.5, 20))

    def test_zero_distance_is_full_alignment(self, toy_bank):
        ranked = rank_parties(_positions(toy_bank), Point(7.5, 10.0))
        assert ranked[0].party.id == "x"
        assert ranked[0].distance == 0
        assert ranked[0].alignment == 100

    def test_normalized_positions_are_recentered(self, mini_bank):
        ranked = rank_parties(_positions(mini_bank), Point(0, 0))
        total_x = sum(r.normalized_position.x for r in ranked)
        total_y = sum(r.normalized_position.y for r in ranked)
        assert total_x == pytest.approx(0.0, abs=1e-9)
        assert total_y == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("seed", range(20))
    def test_alignment_bounds(self, real_bank, seed):
        rng = random.Random(seed)
        user = Point(rng.uniform(-10, 10), rng.uniform(-10, 10))
        ranked = rank_parties(_positions(real_bank), user)
        assert len(ranked) == 4
        assert all(0 <= r.alignment <= 100 for r in ranked)
        distances = [r.distance for r in ranked]
        assert distances == sorted(distances)
        alignments = [r.alignment for r in ranked]
        assert alignments == sorted(alignments, reverse=True)

    def test_equal_distances_keep_registry_order(self):
        parties = [Party(id="first"), Party(id="second"), Party(id="third")]
        positions = [(parties[0], Point(1, 0)), (parties[1], Point(-1, 0)), (parties[2], Point(0, 5))]
        ranked = rank_parties(positions, Point(0, 0))
        assert ranked[0].distance == ranked[1].distance
        assert [r.party.id for r in ranked] == ["first", "second", "third"]

        reversed_positions = [positions[1], positions[0], positions[2]]
        ranked = rank_parties(reversed_positions, Point(0, 0))
        assert [r.party.id for r in ranked] == ["second", "first", "third"]

    def test_everything_on_the_centroid(self):
        positions = [(Party(id="a"), Point(2, 2)), (Party(id="b"), Point(2, 2))]
        ranked = rank_parties(positions, Point(2, 2))
        assert [r.alignment for r in ranked] == [100.0, 100.0]

    def test_inflation_changes_scale(self, toy_bank):
        tight = rank_parties(_positions(toy_bank), Point(10.0, 10.0), inflation=1.0)
        loose = rank_parties(_positions(toy_bank), Point(10.0, 10.0), inflation=5.0)
        assert tight[0].alignment < loose[0].alignment

    def test_no_parties(self):
        assert rank_parties([], Point(0, 0)) == []


class TestDetectTies:
    def test_close_match_within_threshold(self):
        ranked = [_fake("a", 61.0), _fake("b", 58.0), _fake("c", 30.0)]
        result = detect_ties(ranked, threshold=9)
        assert result.is_tie is True
        assert result.best.party.id == "a"
        assert [r.party.id for r in result.close_ones] == ["b"]
        assert result.tie_threshold == 9

    def test_no_tie_with_narrow_threshold(self):
        ranked = [_fake("a", 61.0), _fake("b", 58.0), _fake("c", 30.0)]
        result = detect_ties(ranked, threshold=2)
        assert result.is_tie is False
        assert result.close_ones == []

    def test_threshold_is_inclusive(self):
        ranked = [_fake("a", 61.0), _fake("b", 52.0)]
        assert detect_ties(ranked, threshold=9).is_tie is True

    def test_single_party(self):
        result = detect_ties([_fake("a", 80.0)], threshold=9)
        assert result.is_tie is False

    def test_empty_ranking(self):
        with pytest.raises(ValueError):
            detect_ties([], threshold=9)
