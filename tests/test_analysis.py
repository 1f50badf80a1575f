from fleet_formations.analysis import (
    analyze_position_effectiveness,
    apply_damage_to_stack,
    formation_info,
    stack_destroyed,
    validate_formation,
)
from fleet_formations.assignment import assign_formation
from fleet_formations.catalog import load_catalog
from fleet_formations.models import Formation, FormationAssignment, HPBucket
from fleet_formations.types import FormationPosition as P, ShipType


def test_formation_info():
    assert formation_info(None) == "No formation set"
    assert formation_info(Formation(type="wedge")) == "Unknown formation: wedge"
    f = assign_formation({"fighter": [(200, 5), (150, 2)], "drone": [(100, 4)]}, "line")
    text = formation_info(f)
    assert text.startswith("Formation: Line Formation\n")
    assert "Speed Multiplier: 1.00x" in text
    assert "Reconfigure Time: 120s" in text
    assert "Assignments: 3" in text
    assert "  front: 7 ships" in text
    assert "  support: 4 ships" in text
    assert text.index("front:") < text.index("support:")


def test_validate_formation():
    assert validate_formation(None) == ["Formation is nil"]
    assert validate_formation(assign_formation({"fighter": [(200, 5)]}, "box")) == []
    problems = validate_formation(Formation(type="wedge"))
    assert "Unknown formation type: wedge" in problems
    assert "Formation has no assignments" in problems


def test_validate_flags_bad_assignments_and_capacity():
    cat = load_catalog(overrides={"formations": {"line": {"slot_limits": {"front": 1}}}})
    f = Formation(
        type="line",
        assignments=[
            FormationAssignment(position=P.FRONT, ship_type=ShipType.FIGHTER, bucket_index=0, count=2, assigned_hp=400),
            FormationAssignment(position=P.FRONT, ship_type=ShipType.FIGHTER, bucket_index=1, count=0, assigned_hp=0),
        ],
    )
    problems = validate_formation(f, cat)
    assert "Assignment 1 has count <= 0" in problems
    assert "Assignment 1 has HP <= 0" in problems
    assert "Position front holds 2 assignments, limit is 1" in problems


def test_position_effectiveness():
    f = Formation(
        type="line",
        assignments=[
            FormationAssignment(position=P.FRONT, ship_type=ShipType.FIGHTER, bucket_index=0, count=3, assigned_hp=600),
            FormationAssignment(position=P.FLANK, ship_type=ShipType.FIGHTER, bucket_index=1, count=1, assigned_hp=200),
            FormationAssignment(position=P.BACK, ship_type=ShipType.FIGHTER, bucket_index=2, count=1, assigned_hp=200),
            FormationAssignment(position=P.FRONT, ship_type=ShipType.BOMBER, bucket_index=0, count=1, assigned_hp=500),
        ],
    )
    scores = analyze_position_effectiveness(f)
    assert scores[P.FLANK] == 0.8
    assert scores[P.BACK] == 0.6
    assert abs(scores[P.FRONT] - (3 * 1.0 + 0.6) / 4) < 1e-9
    assert analyze_position_effectiveness(None) == {}


def test_damage_removes_whole_ships_and_splits_off_partial():
    out = apply_damage_to_stack({"fighter": [(200, 5), (150, 2)]}, {"fighter": {0: 450}})
    assert out[ShipType.FIGHTER] == [HPBucket(200, 2), HPBucket(150, 2), HPBucket(150, 1)]


def test_damage_leaves_lone_survivor_in_place():
    out = apply_damage_to_stack({"fighter": [(200, 5)]}, {ShipType.FIGHTER: {0: 900}})
    assert out[ShipType.FIGHTER] == [HPBucket(100, 1)]


def test_damage_exact_multiple():
    out = apply_damage_to_stack({"bomber": [(500, 3)]}, {"bomber": {0: 1000}})
    assert out[ShipType.BOMBER] == [HPBucket(500, 1)]


def test_destroyed_bucket_keeps_its_index():
    ships = {"drone": [(100, 2), (80, 1)]}
    out = apply_damage_to_stack(ships, {"drone": {0: 250, 5: 10}, "scout": {0: 10}})
    assert out[ShipType.DRONE] == [HPBucket(0, 0), HPBucket(80, 1)]
    assert not stack_destroyed(out)
    assert stack_destroyed(apply_damage_to_stack(out, {"drone": {1: 80}}))


def test_input_stack_untouched():
    ships = {ShipType.FIGHTER: [HPBucket(200, 5)]}
    apply_damage_to_stack(ships, {"fighter": {0: 450}})
    assert ships == {ShipType.FIGHTER: [HPBucket(200, 5)]}


def test_empty_stack_is_destroyed():
    assert stack_destroyed({})
    assert stack_destroyed({"fighter": []})


def test_damage_indices_follow_folded_stack():
    ships = {"Fighter": [(200, 5)], "fighter": [(150, 2)]}
    out = apply_damage_to_stack(ships, {"fighter": {1: 150}})
    assert out[ShipType.FIGHTER] == [HPBucket(200, 5), HPBucket(150, 1)]
