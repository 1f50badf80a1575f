"""Preferred tactical position per ship type."""
from __future__ import annotations

from typing import Any, Optional

from .catalog import Catalog, default_catalog
from .types import FormationPosition, FormationType, ShipType

# Rules that do not depend on the formation or the ship's speed.
_FIXED_POSITIONS = {
    ShipType.DRONE: FormationPosition.SUPPORT,  # support/economic units
    ShipType.SCOUT: FormationPosition.FLANK,
    ShipType.FIGHTER: FormationPosition.FRONT,
    ShipType.BOMBER: FormationPosition.BACK,  # long-range siege
    ShipType.CRUISER: FormationPosition.FRONT,
    ShipType.BALLISTA: FormationPosition.BACK,
    ShipType.GHOST: FormationPosition.FLANK,
    ShipType.FRIGATE: FormationPosition.SUPPORT,
}

_LAYERS = {
    FormationPosition.FRONT: 0,
    FormationPosition.FLANK: 1,
    FormationPosition.SUPPORT: 1,
    FormationPosition.BACK: 2,
}


def determine_optimal_position(
    ship_type: Any, formation_type: Any, catalog: Optional[Catalog] = None
) -> FormationPosition:
    """Return the position a ship type prefers in a formation.

    Total over its inputs: an unknown ship type goes to the front, and a
    speed-dependent rule treats a ship without a blueprint as slow.
    """
    st = ShipType.parse(ship_type)
    if st is None:
        return FormationPosition.FRONT
    fixed = _FIXED_POSITIONS.get(st)
    if fixed is not None:
        return fixed

    ft = FormationType.parse(formation_type)
    catalog = catalog or default_catalog()
    speed = catalog.base_speed(st) or 0

    if st is ShipType.CARRIER:
        # tanky platforms hold the line in a box
        if ft is FormationType.BOX:
            return FormationPosition.FRONT
        return FormationPosition.SUPPORT
    if st is ShipType.DESTROYER:
        if ft in (FormationType.VANGUARD, FormationType.PHALANX):
            return FormationPosition.FRONT
        if speed >= 6:
            return FormationPosition.FLANK
        return FormationPosition.FRONT
    if st is ShipType.CORVETTE:
        if ft in (FormationType.SKIRMISH, FormationType.VANGUARD) or speed >= 7:
            return FormationPosition.FLANK
        return FormationPosition.FRONT
    return FormationPosition.FRONT


def determine_layer(position: Any) -> int:
    """Depth of a position: 0 frontline, 1 mid-line, 2 backline."""
    pos = FormationPosition.parse(position)
    if pos is None:
        return 0
    return _LAYERS[pos]


__all__ = ["determine_optimal_position", "determine_layer"]
