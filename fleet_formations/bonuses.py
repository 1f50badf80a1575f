"""Formation position bonuses and formation speed."""
from __future__ import annotations

import math
from typing import Any, Callable, Optional

from .catalog import Catalog, default_catalog
from .modifiers import StatMods, combine_mods
from .types import FormationPosition

CombineFn = Callable[[StatMods, StatMods], StatMods]


def apply_position_bonuses(
    formation_type: Any,
    position: Any,
    base_mods: StatMods,
    catalog: Optional[Catalog] = None,
    combine: CombineFn = combine_mods,
) -> StatMods:
    """Merge the formation's bonus for ``position`` into ``base_mods``.

    Unknown formations and positions without a bonus return ``base_mods``
    untouched.
    """
    catalog = catalog or default_catalog()
    spec = catalog.formation(formation_type)
    if spec is None:
        return base_mods
    pos = FormationPosition.parse(position)
    bonus = spec.position_bonuses.get(pos) if pos is not None else None
    if bonus is None:
        return base_mods
    return combine(base_mods, bonus)


def effective_speed(formation_type: Any, base_speed: int, catalog: Optional[Catalog] = None) -> int:
    catalog = catalog or default_catalog()
    spec = catalog.formation(formation_type)
    if spec is None:
        return base_speed
    # halves round up: speed 6 at 0.75x gives 5
    return int(math.floor(base_speed * spec.speed_multiplier + 0.5))


__all__ = ["apply_position_bonuses", "effective_speed"]
