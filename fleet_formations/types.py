"""Enumerations shared across the formation engine."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union


class _Choice(str, Enum):
    """String enum with a lenient, non-raising parser."""

    @classmethod
    def parse(cls, value: Any) -> Optional["_Choice"]:
        """Return the member for ``value`` or ``None`` when it is unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class ShipType(_Choice):
    DRONE = "drone"
    SCOUT = "scout"
    FIGHTER = "fighter"
    BOMBER = "bomber"
    CARRIER = "carrier"
    DESTROYER = "destroyer"
    CRUISER = "cruiser"
    CORVETTE = "corvette"
    BALLISTA = "ballista"
    GHOST = "ghost"
    FRIGATE = "frigate"


class FormationType(_Choice):
    LINE = "line"  # balanced front-back arrangement
    BOX = "box"  # defensive all-around protection
    VANGUARD = "vanguard"  # aggressive forward deployment
    SKIRMISH = "skirmish"  # mobile flanking focus
    ECHELON = "echelon"  # diagonal staggered lines
    PHALANX = "phalanx"  # heavy frontal concentration
    SWARM = "swarm"  # dispersed anti-AoE


class FormationPosition(_Choice):
    FRONT = "front"
    FLANK = "flank"
    BACK = "back"
    SUPPORT = "support"


class AttackDirection(_Choice):
    FRONTAL = "frontal"
    FLANKING = "flanking"
    REAR = "rear"
    ENVELOPMENT = "envelopment"


# Canonical iteration order for "every position" loops.
POSITIONS = tuple(FormationPosition)

# Stacks may be keyed by ShipType members or by raw strings from a document.
ShipKey = Union[ShipType, str]


def ship_key(value: Any) -> ShipKey:
    """Normalise a stack key: known names become ShipType, others stay as-is."""
    parsed = ShipType.parse(value)
    if parsed is not None:
        return parsed
    return str(value)


def sort_key(value: Any) -> str:
    """Lexicographic key used for deterministic ship-type traversal."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


__all__ = [
    "ShipType",
    "FormationType",
    "FormationPosition",
    "AttackDirection",
    "POSITIONS",
    "ShipKey",
    "ship_key",
    "sort_key",
]
