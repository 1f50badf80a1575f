from datetime import datetime

from fleet_formations.assignment import assign_formation
from fleet_formations.models import Formation, FormationAssignment, HPBucket, coerce_stack, stack_counts
from fleet_formations.modifiers import DamageMods, StatMods
from fleet_formations.types import FormationPosition as P, FormationType, ShipType


def test_bucket_coercion():
    assert HPBucket.coerce((200, 3)) == HPBucket(200, 3)
    assert HPBucket.coerce({"hp": 150, "count": 2}).total_hp == 300
    assert HPBucket.coerce({"perShipHP": 90, "count": 1}) == HPBucket(90, 1)
    b = HPBucket(10, 1)
    assert HPBucket.coerce(b) is b


def test_coerce_stack_normalises_keys():
    stack = coerce_stack({"Fighter": [(200, 1)], "titan": [[5, 2]]})
    assert stack == {ShipType.FIGHTER: [HPBucket(200, 1)], "titan": [HPBucket(5, 2)]}
    assert stack_counts({"drone": [(100, 3), (80, 2)]}) == {ShipType.DRONE: 5}
    assert coerce_stack(None) == {}


def test_assignment_wire_shape():
    a = FormationAssignment(position=P.FLANK, ship_type=ShipType.SCOUT, bucket_index=2, count=4, assigned_hp=400, layer=1)
    assert a.to_dict() == {
        "position": "flank",
        "layer": 1,
        "shipType": "scout",
        "bucketIndex": 2,
        "count": 4,
        "assignedHP": 400,
    }
    assert FormationAssignment.from_dict(a.to_dict()) == a


def test_stat_mods_wire_keys():
    wire = StatMods(bucket_hp_pct=0.15, laser_shield_delta=2, damage=DamageMods(laser_pct=0.1)).to_dict()
    assert wire["BucketHPPct"] == 0.15
    assert wire["LaserShieldDelta"] == 2
    assert wire["Damage"] == {"LaserPct": 0.1, "NuclearPct": 0.0, "AntimatterPct": 0.0}
    assert wire["CloakDetect"] is False
    assert StatMods.from_dict(wire) == StatMods.from_dict({"bucket_hp_pct": 0.15, "laser_shield_delta": 2, "damage": {"laser_pct": 0.1}})


def test_formation_document_round_trip():
    stamp = datetime(2024, 5, 1, 8, 30)
    f = assign_formation({"fighter": [(200, 5)], "bomber": [(500, 2)]}, "phalanx", facing="east", created_at=stamp)
    doc = f.to_dict()
    assert doc["formationType"] == "phalanx"
    assert doc["facing"] == "east"
    assert doc["createdAt"] == "2024-05-01T08:30:00"
    assert doc["version"] == 1
    assert doc["modifiers"]["speedMultiplier"] == 0.8
    assert doc["modifiers"]["reconfigureTime"] == 180
    assert doc["modifiers"]["positionBonuses"]["front"]["BucketHPPct"] == 0.15
    assert set(doc["modifiers"]["specialProperties"]) == {"frontal_fortress", "extreme_flank_weakness"}
    assert Formation.from_dict(doc) == f


def test_unknown_formation_type_survives_round_trip():
    f = Formation.from_dict({"formationType": "wedge", "assignments": []})
    assert f.type == "wedge"
    assert f.to_dict()["formationType"] == "wedge"
    assert f.created_at is None


def test_copy_is_independent():
    f = assign_formation({"fighter": [(200, 5)]}, "line")
    c = f.copy()
    c.assignments[0].assigned_hp = 1
    c.modifiers.special_properties.append("x")
    assert f.assignments[0].assigned_hp == 1000
    assert "x" not in f.modifiers.special_properties
    assert c.type is FormationType.LINE


def test_queries():
    f = assign_formation({"fighter": [(200, 5), (100, 1)], "bomber": [(500, 2)]}, "line")
    assert [a.bucket_index for a in f.assignments_by_position(P.FRONT)] == [0, 1]
    assert f.occupancy() == {P.BACK: 1, P.FRONT: 2}


def test_coerce_stack_folds_keys_naming_the_same_ship():
    stack = coerce_stack({"Fighter": [(200, 5)], "fighter": [(150, 2)], ShipType.FIGHTER: [(90, 1)]})
    assert stack == {ShipType.FIGHTER: [HPBucket(200, 5), HPBucket(150, 2), HPBucket(90, 1)]}
    assert stack_counts({"Drone": [(100, 1)], "drone": [(100, 2)]}) == {ShipType.DRONE: 3}
