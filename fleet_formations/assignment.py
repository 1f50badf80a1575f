"""Capacity-bounded placement of HP buckets into formation positions.

:func:`assign_formation` walks the stack in a fixed order (ship types sorted
by name, then bucket index) so the same stack always yields the same
formation. Each bucket goes to its preferred position while that position has
spare slots; otherwise the overflow resolver picks among the positions that
still have room:

1. most buckets of the same ship type already there,
2. closest per-ship HP to one of those buckets,
3. most remaining capacity,
4. canonical position order.

A bucket that fits nowhere is left out of the formation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .catalog import Catalog, CapacityProvider, default_catalog
from .models import Formation, FormationAssignment, FormationMods, coerce_stack
from .positions import determine_layer, determine_optimal_position
from .types import POSITIONS, FormationPosition, FormationType, ShipKey, sort_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedBucket:
    position: FormationPosition
    ship_type: ShipKey
    per_ship_hp: int


def _hp_gap_rank(gap: Optional[int]) -> Tuple[int, int]:
    # No same-type bucket to compare with ranks below any real gap.
    if gap is None:
        return (0, 0)
    return (1, -gap)


def choose_overflow_position(
    placed: Sequence[PlacedBucket],
    ship_type: ShipKey,
    per_ship_hp: int,
    occupancy: Mapping[FormationPosition, int],
    formation_type: Any,
    capacity: CapacityProvider,
) -> Optional[FormationPosition]:
    """Pick an alternate position for a bucket whose preferred one is full.

    Returns ``None`` when every position is at capacity.
    """
    best: Optional[FormationPosition] = None
    best_key = None
    for pos in POSITIONS:
        limit = capacity.max_slots(formation_type, pos)
        used = occupancy.get(pos, 0)
        if used >= limit:
            continue
        same_type_hp = [p.per_ship_hp for p in placed if p.position == pos and p.ship_type == ship_type]
        gap = min(abs(hp - per_ship_hp) for hp in same_type_hp) if same_type_hp else None
        key = (len(same_type_hp), _hp_gap_rank(gap), limit - used)
        if best_key is None or key > best_key:
            best, best_key = pos, key
    return best


def assign_formation(
    ships: Mapping[Any, Sequence[Any]],
    formation_type: Any,
    capacity: Optional[CapacityProvider] = None,
    catalog: Optional[Catalog] = None,
    facing: str = "north",
    created_at: Optional[datetime] = None,
) -> Formation:
    """Build a Formation for a ship stack.

    Args:
        ships: ship type -> ordered HP buckets
        formation_type: target formation
        capacity: slot limits; defaults to the catalog's table
        catalog: static data; defaults to :func:`default_catalog`
        facing: stored as-is on the formation
        created_at: optional timestamp stored on the formation

    Returns:
        A version 1 Formation with assignments in traversal order.
    """
    catalog = catalog or default_catalog()
    capacity = capacity or catalog.capacity()
    stack = coerce_stack(ships)

    ft = FormationType.parse(formation_type) or formation_type
    spec = catalog.formation(ft)
    formation = Formation(
        type=ft,
        facing=facing,
        modifiers=spec.mods() if spec is not None else FormationMods(),
        version=1,
        created_at=created_at,
    )

    occupancy: Dict[FormationPosition, int] = {}
    placed: List[PlacedBucket] = []
    for ship_type in sorted(stack, key=sort_key):
        for bucket_index, bucket in enumerate(stack[ship_type]):
            if bucket.count <= 0 or bucket.per_ship_hp <= 0:
                continue

            position = determine_optimal_position(ship_type, ft, catalog)
            if occupancy.get(position, 0) >= capacity.max_slots(ft, position):
                alternate = choose_overflow_position(
                    placed, ship_type, bucket.per_ship_hp, occupancy, ft, capacity
                )
                if alternate is None:
                    logger.debug(
                        "no capacity left in %s for %s bucket %d; dropped", ft, ship_type, bucket_index
                    )
                    continue
                logger.debug(
                    "%s bucket %d overflowed from %s to %s", ship_type, bucket_index, position, alternate
                )
                position = alternate

            occupancy[position] = occupancy.get(position, 0) + 1
            placed.append(PlacedBucket(position, ship_type, bucket.per_ship_hp))
            formation.assignments.append(
                FormationAssignment(
                    position=position,
                    layer=determine_layer(position),
                    ship_type=ship_type,
                    bucket_index=bucket_index,
                    count=bucket.count,
                    assigned_hp=bucket.per_ship_hp * bucket.count,
                )
            )
    return formation


__all__ = ["assign_formation", "choose_overflow_position", "PlacedBucket"]
