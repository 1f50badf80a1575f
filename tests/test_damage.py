import pytest

from fleet_formations.catalog import build_catalog
from fleet_formations.damage import (
    apportion_by_ship_type,
    apportion_damage,
    distribute_damage,
    distribute_to_buckets,
    filled_positions,
)
from fleet_formations.models import Formation, FormationAssignment
from fleet_formations.types import FormationPosition as P, FormationType, ShipType


def assignment(pos, ship, idx, count, hp):
    return FormationAssignment(position=pos, ship_type=ship, bucket_index=idx, count=count, assigned_hp=hp)


def front_and_back():
    return Formation(
        type=FormationType.LINE,
        assignments=[
            assignment(P.FRONT, ShipType.FIGHTER, 0, 5, 1000),
            assignment(P.BACK, ShipType.BOMBER, 0, 3, 1500),
        ],
    )


def test_weights_renormalised_over_filled_positions():
    assert distribute_damage(front_and_back(), 1000, "frontal") == {P.FRONT: 857, P.BACK: 142}


def test_method_on_formation():
    assert front_and_back().damage_distribution(1000, "frontal") == {P.FRONT: 857, P.BACK: 142}


def test_rear_attack():
    assert distribute_damage(front_and_back(), 1200, "rear") == {P.FRONT: 200, P.BACK: 1000}


def test_single_filled_position_takes_everything():
    f = Formation(type="line", assignments=[assignment(P.FLANK, ShipType.SCOUT, 0, 7, 700)])
    for direction in ("frontal", "flanking", "rear", "envelopment"):
        assert distribute_damage(f, 777, direction) == {P.FLANK: 777}


def test_every_position_filled_envelopment():
    f = Formation(
        type="swarm",
        assignments=[assignment(pos, ShipType.FIGHTER, i, 1, 200) for i, pos in enumerate(P)],
    )
    assert distribute_damage(f, 1001, "envelopment") == {pos: 250 for pos in P}


def test_unknown_direction_uses_frontal():
    f = front_and_back()
    assert distribute_damage(f, 1000, "sideways") == distribute_damage(f, 1000, "frontal")


def test_empty_formation_returns_empty():
    assert distribute_damage(Formation(type="line"), 1000, "frontal") == {}


def test_unfilled_assignments_soak_nothing():
    f = Formation(
        type="line",
        assignments=[
            assignment(P.FRONT, ShipType.FIGHTER, 0, 0, 0),
            assignment(P.BACK, ShipType.BOMBER, 0, 3, 1500),
        ],
    )
    assert filled_positions(f) == [P.BACK]
    assert distribute_damage(f, 500, "frontal") == {P.BACK: 500}


def test_zero_and_negative_damage():
    assert distribute_damage(front_and_back(), 0, "frontal") == {}
    assert distribute_damage(front_and_back(), -50, "frontal") == {}


def test_tiny_damage_shares_are_omitted():
    assert distribute_damage(front_and_back(), 5, "frontal") == {P.FRONT: 4}


def test_even_split_when_filled_positions_have_no_weight():
    cat = build_catalog({"directional_weights": {"frontal": {"front": 1.0, "flank": 0.0, "back": 0.0, "support": 0.0}}})
    f = Formation(
        type="line",
        assignments=[
            assignment(P.BACK, ShipType.BOMBER, 0, 1, 500),
            assignment(P.SUPPORT, ShipType.DRONE, 0, 1, 100),
        ],
    )
    assert distribute_damage(f, 101, "frontal", cat) == {P.BACK: 50, P.SUPPORT: 50}
    assert distribute_damage(f, 1, "frontal", cat) == {}


def test_sum_never_exceeds_input():
    f = Formation(
        type="swarm",
        assignments=[assignment(pos, ShipType.FIGHTER, i, 1, 200) for i, pos in enumerate(P)],
    )
    for damage in (1, 7, 99, 1000, 12345):
        for direction in ("frontal", "flanking", "rear", "envelopment"):
            out = distribute_damage(f, damage, direction)
            assert sum(out.values()) <= damage
            assert damage - sum(out.values()) <= len(P)


def test_apportion_is_proportional_and_floored():
    group = [
        assignment(P.FRONT, ShipType.FIGHTER, 0, 3, 300),
        assignment(P.FRONT, ShipType.CRUISER, 0, 1, 100),
    ]
    assert apportion_damage(101, group) == [75, 25]
    assert apportion_damage(0, group) == [0, 0]


def test_apportion_with_no_hp():
    group = [assignment(P.FRONT, ShipType.FIGHTER, 0, 0, 0)] * 2
    assert apportion_damage(500, group) == [0, 0]
    assert apportion_damage(500, []) == []


def test_apportion_by_ship_type_sums_buckets():
    group = [
        assignment(P.FRONT, ShipType.FIGHTER, 0, 2, 400),
        assignment(P.FRONT, ShipType.FIGHTER, 1, 2, 400),
        assignment(P.FRONT, ShipType.CRUISER, 0, 1, 200),
    ]
    assert apportion_by_ship_type(1000, group) == {ShipType.FIGHTER: 800, ShipType.CRUISER: 200}


def test_distribute_to_buckets():
    f = Formation(
        type="line",
        assignments=[
            assignment(P.FRONT, ShipType.FIGHTER, 0, 3, 600),
            assignment(P.FRONT, ShipType.FIGHTER, 1, 1, 200),
            assignment(P.FRONT, ShipType.CRUISER, 0, 0, 0),
        ],
    )
    assert distribute_to_buckets(f, 1000, "frontal") == {ShipType.FIGHTER: {0: 750, 1: 250}}


def test_distribute_to_buckets_across_positions():
    out = distribute_to_buckets(front_and_back(), 1000, "frontal")
    assert out == {ShipType.FIGHTER: {0: 857}, ShipType.BOMBER: {0: 142}}


@pytest.mark.parametrize("direction", ["frontal", "flanking", "rear", "envelopment"])
def test_distribution_is_deterministic(direction):
    f = front_and_back()
    assert distribute_damage(f, 999, direction) == distribute_damage(f.copy(), 999, direction)


def pair(first, second):
    return Formation(
        type="line",
        assignments=[
            assignment(first, ShipType.FIGHTER, 0, 5, 1000),
            assignment(second, ShipType.SCOUT, 0, 5, 500),
        ],
    )


@pytest.mark.parametrize("first,second,direction,damage,expected", [
    (P.FRONT, P.FLANK, "frontal", 1000, (750, 250)),
    (P.FRONT, P.FLANK, "frontal", 4, (3, 1)),
    (P.FRONT, P.FLANK, "frontal", 8, (6, 2)),
    (P.BACK, P.SUPPORT, "frontal", 1000, (500, 500)),
    (P.FRONT, P.FLANK, "flanking", 700, (300, 400)),
    (P.FLANK, P.BACK, "flanking", 600, (400, 200)),
    (P.BACK, P.SUPPORT, "flanking", 300, (200, 100)),
    (P.FLANK, P.BACK, "rear", 800, (300, 500)),
    (P.FLANK, P.BACK, "rear", 1000, (375, 625)),
    (P.FRONT, P.BACK, "rear", 600, (100, 500)),
    (P.FRONT, P.SUPPORT, "rear", 10, (5, 5)),
    (P.FLANK, P.SUPPORT, "envelopment", 1000, (500, 500)),
])
def test_exact_shares_for_two_filled_positions(first, second, direction, damage, expected):
    assert distribute_damage(pair(first, second), damage, direction) == {first: expected[0], second: expected[1]}


def test_three_filled_positions_exact():
    f = Formation(
        type="line",
        assignments=[
            assignment(P.FRONT, ShipType.FIGHTER, 0, 1, 200),
            assignment(P.FLANK, ShipType.SCOUT, 0, 1, 100),
            assignment(P.SUPPORT, ShipType.DRONE, 0, 1, 100),
        ],
    )
    # frontal weights .6/.2/.1 over a total of .9
    assert distribute_damage(f, 900, "frontal") == {P.FRONT: 600, P.FLANK: 200, P.SUPPORT: 100}
    assert distribute_damage(f, 9, "frontal") == {P.FRONT: 6, P.FLANK: 2, P.SUPPORT: 1}


def test_flooring_loss_is_below_filled_count():
    f = pair(P.FRONT, P.FLANK)
    for damage in range(1, 2001):
        out = distribute_damage(f, damage, "frontal")
        assert out.get(P.FRONT, 0) == damage * 3 // 4
        assert out.get(P.FLANK, 0) == damage // 4
        assert damage - sum(out.values()) <= 1
