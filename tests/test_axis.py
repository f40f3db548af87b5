import math

import pytest

from partycompass.axis import (
    Point,
    axis_direction,
    centroid,
    directions_for,
    normalize_point,
    party_position,
    quadrant_description,
    quadrant_name,
)
from partycompass.bank import Question, UnknownPartyError


def _question(**scores):
    return Question(id=1, text="Q", category="welfare", axis="economic", weight=1, party_scores=scores)


class TestAxisDirection:
    def test_toy_bank_directions(self, toy_bank):
        assert directions_for(toy_bank) == {1: 1, 2: 1, 3: -1}

    def test_mini_bank_directions(self, mini_bank):
        assert directions_for(mini_bank) == {1: 1, 2: 0, 3: -1, 4: 1, 5: -1}

    def test_null_stance_is_left_out_of_the_mean(self, mini_bank):
        # se c contasse como 0 a média seria 0.5 e a direção +1
        q = mini_bank.get(2)
        assert axis_direction(q, "a", ["b", "c"]) == 0

    def test_zero_stance_stays_in_the_mean(self):
        q = _question(a=1, b=0, c=2)
        assert axis_direction(q, "a", ["b", "c"]) == 0

    def test_dead_zone(self):
        q = _question(a=1, b=1, c=1, d=0)
        assert axis_direction(q, "a", ["b", "c", "d"]) == 1
        assert axis_direction(q, "a", ["b", "c", "d"], epsilon=0.5) == 0

    def test_magnitude_insensitive(self):
        assert axis_direction(_question(a=2, b=-2), "a", ["b"]) == 1
        assert axis_direction(_question(a=1, b=0), "a", ["b"]) == 1
        assert axis_direction(_question(a=-1, b=2), "a", ["b"]) == -1

    def test_baseline_without_stance(self):
        assert axis_direction(_question(a=None, b=2), "a", ["b"]) == 0

    def test_no_other_stances(self):
        assert axis_direction(_question(a=2, b=None), "a", ["b"]) == 0

    def test_real_bank_examples(self, real_bank):
        dirs = directions_for(real_bank)
        assert dirs[1] == -1   # GST cut: opposition supports more
        assert dirs[2] == 1    # reserves: PAP supports more
        assert dirs[13] == -1
        assert dirs[39] == 1
        assert set(dirs.values()) <= {-1, 0, 1}


class TestPartyPosition:
    def test_toy_positions(self, toy_bank):
        assert party_position(toy_bank, "x") == Point(7.5, 10.0)
        assert party_position(toy_bank, "y") == Point(-7.5, -10.0)

    def test_mini_positions(self, mini_bank):
        assert party_position(mini_bank, "a") == Point(10.0, 10.0)
        # nenhuma pergunta econômica com sinal para b: fica no centro
        assert party_position(mini_bank, "b") == Point(0.0, 1.25)
        assert party_position(mini_bank, "c") == Point(-7.5, -10.0)

    def test_real_positions_within_range(self, real_bank):
        for pid in real_bank.party_ids:
            pos = party_position(real_bank, pid)
            assert -10 <= pos.x <= 10
            assert -10 <= pos.y <= 10

    def test_unknown_party(self, toy_bank):
        with pytest.raises(UnknownPartyError):
            party_position(toy_bank, "nope")

    def test_multiplier_is_clamped(self, toy_bank):
        assert party_position(toy_bank, "x", multiplier=4.0) == Point(10.0, 10.0)


class TestNormalization:
    def test_centroid(self):
        assert centroid([Point(10, 10), Point(0, 1.25), Point(-7.5, -10)]) == pytest.approx(
            Point(2.5 / 3, 1.25 / 3)
        )

    def test_centroid_empty(self):
        assert centroid([]) == Point(0.0, 0.0)

    def test_normalize(self):
        assert normalize_point(Point(3, 4), Point(1, 1)) == Point(2, 3)

    def test_normalized_parties_average_to_zero(self, real_bank):
        positions = [party_position(real_bank, pid) for pid in real_bank.party_ids]
        mean = centroid(positions)
        normalized = [normalize_point(p, mean) for p in positions]
        assert math.isclose(sum(p.x for p in normalized), 0.0, abs_tol=1e-9)
        assert math.isclose(sum(p.y for p in normalized), 0.0, abs_tol=1e-9)


class TestQuadrants:
    @pytest.mark.parametrize(
        "x, y, name",
        [
            (5, 5, "Authoritarian Right"),
            (-5, 5, "Authoritarian Left"),
            (-5, -5, "Libertarian Left"),
            (5, -5, "Libertarian Right"),
            (0, 0, "Libertarian Right"),
        ],
    )
    def test_quadrant_name(self, x, y, name):
        assert quadrant_name(x, y) == name

    def test_nan_is_centrist(self):
        assert quadrant_name(float("nan"), float("nan")) == "Centrist"

    def test_description(self):
        assert "free market" in quadrant_description(5, -5)
