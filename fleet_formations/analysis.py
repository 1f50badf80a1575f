"""Inspection helpers for formations and stacks.

None of these feed back into assignment or damage math; they summarise,
sanity-check and fold damage results back into a stack.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .catalog import Catalog, default_catalog
from .models import Formation, HPBucket, Stack, coerce_stack
from .positions import determine_optimal_position
from .types import POSITIONS, FormationPosition, ShipKey, ship_key

# Score for an assignment sitting in a front/flank position when the other was preferred.
NEAR_MISS_SCORE = 0.8
MISPLACED_SCORE = 0.6

_NEAR_MISS = {
    (FormationPosition.FRONT, FormationPosition.FLANK),
    (FormationPosition.FLANK, FormationPosition.FRONT),
}


def formation_info(formation: Optional[Formation], catalog: Optional[Catalog] = None) -> str:
    """Human-readable summary of a formation."""
    if formation is None:
        return "No formation set"
    catalog = catalog or default_catalog()
    spec = catalog.formation(formation.type)
    if spec is None:
        return f"Unknown formation: {formation.type}"

    lines = [
        f"Formation: {spec.name}",
        f"Description: {spec.description}",
        f"Speed Multiplier: {spec.speed_multiplier:.2f}x",
        f"Reconfigure Time: {spec.reconfigure_seconds}s",
        f"Special Properties: {', '.join(spec.tags)}",
        f"Assignments: {len(formation.assignments)}",
        "",
        "Ship Distribution:",
    ]
    ships_per_position: Dict[FormationPosition, int] = {}
    for a in formation.assignments:
        ships_per_position[a.position] = ships_per_position.get(a.position, 0) + a.count
    for pos in POSITIONS:
        if pos in ships_per_position:
            lines.append(f"  {pos}: {ships_per_position[pos]} ships")
    return "\n".join(lines)


def validate_formation(formation: Optional[Formation], catalog: Optional[Catalog] = None) -> List[str]:
    """Return a list of problems; empty when the formation looks sound."""
    if formation is None:
        return ["Formation is nil"]
    catalog = catalog or default_catalog()
    problems: List[str] = []
    if catalog.formation(formation.type) is None:
        problems.append(f"Unknown formation type: {formation.type}")
    if not formation.assignments:
        problems.append("Formation has no assignments")
    for i, a in enumerate(formation.assignments):
        if a.count <= 0:
            problems.append(f"Assignment {i} has count <= 0")
        if a.assigned_hp <= 0:
            problems.append(f"Assignment {i} has HP <= 0")
    capacity = catalog.capacity()
    for pos, used in formation.occupancy().items():
        limit = capacity.max_slots(formation.type, pos)
        if used > limit:
            problems.append(f"Position {pos} holds {used} assignments, limit is {limit}")
    return problems


def analyze_position_effectiveness(
    formation: Optional[Formation], catalog: Optional[Catalog] = None
) -> Dict[FormationPosition, float]:
    """Ship-count weighted placement score per position (1.0 = everyone where they prefer)."""
    if formation is None:
        return {}
    catalog = catalog or default_catalog()
    scores: Dict[FormationPosition, float] = {}
    weights: Dict[FormationPosition, float] = {}
    for a in formation.assignments:
        optimal = determine_optimal_position(a.ship_type, formation.type, catalog)
        if a.position == optimal:
            score = 1.0
        elif (a.position, optimal) in _NEAR_MISS:
            score = NEAR_MISS_SCORE
        else:
            score = MISPLACED_SCORE
        scores[a.position] = scores.get(a.position, 0.0) + score * a.count
        weights[a.position] = weights.get(a.position, 0.0) + a.count
    return {pos: scores[pos] / weights[pos] for pos in scores if weights[pos] > 0}


def stack_destroyed(ships: Mapping[Any, Sequence[Any]]) -> bool:
    return all(b.count <= 0 for buckets in coerce_stack(ships).values() for b in buckets)


def apply_damage_to_stack(
    ships: Mapping[Any, Sequence[Any]], damage_map: Mapping[Any, Mapping[int, int]]
) -> Stack:
    """Return a new stack with per-bucket damage taken off.

    Damage removes whole ships at the bucket's per-ship HP first. When whole
    ships survive, a leftover partially damaged ship is appended as a new
    bucket at the end of that ship type's list so existing bucket indices
    stay valid; a lone survivor just takes the reduced HP in place. A bucket
    that runs out of HP becomes ``HPBucket(0, 0)`` rather than being removed.
    """
    stack = coerce_stack(ships)
    out: Stack = {key: list(buckets) for key, buckets in stack.items()}
    for raw_key, bucket_damage in damage_map.items():
        key: ShipKey = ship_key(raw_key)
        buckets = out.get(key)
        if not buckets:
            continue
        partials: List[HPBucket] = []
        for index, damage in sorted(bucket_damage.items()):
            if index < 0 or index >= len(stack[key]) or damage <= 0:
                continue
            bucket = buckets[index]
            remaining = bucket.total_hp - damage
            if remaining <= 0 or bucket.per_ship_hp <= 0:
                buckets[index] = HPBucket(0, 0)
                continue
            whole, partial = divmod(remaining, bucket.per_ship_hp)
            if whole == 0:
                buckets[index] = HPBucket(partial, 1)
                continue
            buckets[index] = HPBucket(bucket.per_ship_hp, whole)
            if partial:
                partials.append(HPBucket(partial, 1))
        buckets.extend(partials)
    return out


__all__ = [
    "formation_info",
    "validate_formation",
    "analyze_position_effectiveness",
    "stack_destroyed",
    "apply_damage_to_stack",
]
