"""Directional damage split across positions and the assignments holding them.

Both steps floor each share independently. The sum of the shares can come up
short of the input by at most one point per recipient, and that remainder is
discarded rather than handed to any particular position or assignment.
"""
from __future__ import annotations

import logging
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence

from .catalog import Catalog, default_catalog
from .models import Formation, FormationAssignment
from .types import POSITIONS, FormationPosition, ShipKey

logger = logging.getLogger(__name__)


def _exact_weight(weight: float) -> Fraction:
    # weights are written as short decimals; 0.6 / 0.8 must give exactly 3/4
    return Fraction(str(weight))


def filled_positions(formation: Formation) -> List[FormationPosition]:
    """Positions holding at least one assignment with ships and HP left, in canonical order."""
    occupied = {a.position for a in formation.assignments if a.filled}
    return [pos for pos in POSITIONS if pos in occupied]


def distribute_damage(
    formation: Formation,
    incoming_damage: int,
    direction: Any,
    catalog: Optional[Catalog] = None,
) -> Dict[FormationPosition, int]:
    """Split incoming damage over the formation's filled positions.

    The direction's weights are renormalised over the filled positions so
    empty positions soak nothing. Unknown directions use the frontal row.
    If the filled positions carry no weight at all, damage is split evenly.
    Positions whose share floors to zero are omitted, and with no filled
    position the damage is discarded and ``{}`` is returned.
    """
    catalog = catalog or default_catalog()
    damage = max(0, int(incoming_damage))
    weights = catalog.weights(direction)

    filled = filled_positions(formation)
    if not filled:
        return {}

    exact = {pos: _exact_weight(weights.get(pos, 0.0)) for pos in filled}
    total_weight = sum(exact.values())
    distribution: Dict[FormationPosition, int] = {}
    if total_weight <= 0:
        share = damage // len(filled)
        if share > 0:
            distribution = {pos: share for pos in filled}
        return distribution

    for pos in filled:
        amount = damage * exact[pos] // total_weight
        if amount > 0:
            distribution[pos] = int(amount)
    lost = damage - sum(distribution.values())
    if lost:
        logger.debug("rounding discarded %d of %d damage", lost, damage)
    return distribution


def apportion_damage(position_damage: int, assignments: Sequence[FormationAssignment]) -> List[int]:
    """Split one position's damage across its assignments in proportion to current HP.

    The result is aligned with ``assignments``; it is all zeros when their
    total HP is zero.
    """
    damage = max(0, int(position_damage))
    total_hp = sum(a.assigned_hp for a in assignments)
    if total_hp <= 0:
        return [0 for _ in assignments]
    return [damage * a.assigned_hp // total_hp for a in assignments]


def apportion_by_ship_type(
    position_damage: int, assignments: Sequence[FormationAssignment]
) -> Dict[ShipKey, int]:
    """Per ship type totals of :func:`apportion_damage`."""
    out: Dict[ShipKey, int] = {}
    for a, amount in zip(assignments, apportion_damage(position_damage, assignments)):
        out[a.ship_type] = out.get(a.ship_type, 0) + amount
    return out


def distribute_to_buckets(
    formation: Formation,
    incoming_damage: int,
    direction: Any,
    catalog: Optional[Catalog] = None,
) -> Dict[ShipKey, Dict[int, int]]:
    """Run both steps and key the result by ship type and bucket index.

    Only filled assignments take part in a position's split.
    """
    out: Dict[ShipKey, Dict[int, int]] = {}
    for pos, pos_damage in distribute_damage(formation, incoming_damage, direction, catalog).items():
        live = [a for a in formation.assignments_by_position(pos) if a.filled]
        for a, amount in zip(live, apportion_damage(pos_damage, live)):
            buckets = out.setdefault(a.ship_type, {})
            buckets[a.bucket_index] = buckets.get(a.bucket_index, 0) + amount
    return out


__all__ = [
    "filled_positions",
    "distribute_damage",
    "apportion_damage",
    "apportion_by_ship_type",
    "distribute_to_buckets",
]
