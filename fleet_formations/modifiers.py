"""Soft stat modifiers and their linear composition.

Percentages are expressed as fractions (``0.12`` for +12%) and deltas as
integer offsets to base stats. Modifiers from several sources are summed;
clamping belongs to whatever applies the final numbers to a ship.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class DamageMods:
    """Percentage damage change per damage channel."""

    laser_pct: float = 0.0
    nuclear_pct: float = 0.0
    antimatter_pct: float = 0.0


@dataclass(frozen=True)
class StatMods:
    damage: DamageMods = field(default_factory=DamageMods)
    attack_interval_pct: float = 0.0  # lower is better
    speed_delta: int = 0
    visibility_delta: int = 0
    attack_range_delta: int = 0

    laser_shield_delta: int = 0
    nuclear_shield_delta: int = 0
    antimatter_shield_delta: int = 0

    bucket_hp_pct: float = 0.0
    out_of_combat_regen_pct: float = 0.0
    ability_cooldown_pct: float = 0.0  # negative shortens cooldowns
    transport_capacity_pct: float = 0.0

    warp_charge_pct: float = 0.0
    warp_scatter_pct: float = 0.0
    interdiction_resist_pct: float = 0.0

    structure_damage_pct: float = 0.0
    splash_radius_delta: int = 0
    accuracy_pct: float = 0.0
    crit_pct: float = 0.0
    first_volley_pct: float = 0.0
    shield_pierce_pct: float = 0.0

    upkeep_pct: float = 0.0
    construction_cost_pct: float = 0.0

    cloak_detect: bool = False  # capabilities are OR-composed
    ping_range_pct: float = 0.0

    def is_zero(self) -> bool:
        return self == StatMods()

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with the PascalCase keys used by stored formation documents."""
        return _to_wire(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "StatMods":
        """Build from either PascalCase wire keys or snake_case catalog keys."""
        return _from_wire(cls, data or {})


def zero_mods() -> StatMods:
    return StatMods()


def _add(a: Any, b: Any) -> Any:
    if isinstance(a, bool):
        return a or b
    if isinstance(a, (DamageMods, StatMods)):
        return _combine(a, b)
    return a + b


def _combine(a, b):
    return replace(a, **{f.name: _add(getattr(a, f.name), getattr(b, f.name)) for f in fields(a)})


def combine_mods(a: StatMods, b: StatMods) -> StatMods:
    """Add ``b`` onto ``a`` field by field and return the result."""
    return _combine(a, b)


# -----------------------------
# Wire format
# -----------------------------

_WIRE_ALIASES = {"bucket_hp_pct": "BucketHPPct"}


def _wire_name(name: str) -> str:
    alias = _WIRE_ALIASES.get(name)
    if alias:
        return alias
    return "".join(part.capitalize() for part in name.split("_"))


def _to_wire(obj) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, DamageMods):
            value = _to_wire(value)
        out[_wire_name(f.name)] = value
    return out


def _from_wire(cls, data: Mapping[str, Any]):
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        wire = _wire_name(f.name)
        if f.name in data:
            value = data[f.name]
        elif wire in data:
            value = data[wire]
        else:
            continue
        if f.name == "damage":
            value = _from_wire(DamageMods, value or {})
        kwargs[f.name] = value
    return cls(**kwargs)


__all__ = ["DamageMods", "StatMods", "zero_mods", "combine_mods"]
