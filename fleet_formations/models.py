"""Formation data model and its stored-document shape."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .modifiers import StatMods
from .types import FormationPosition, FormationType, ShipKey, ship_key


@dataclass(frozen=True)
class HPBucket:
    """A homogeneous group of ships sharing the same per-ship HP."""

    per_ship_hp: int = 0
    count: int = 0

    @property
    def total_hp(self) -> int:
        return self.per_ship_hp * self.count

    @classmethod
    def coerce(cls, value: Any) -> "HPBucket":
        """Accept an HPBucket, an ``(hp, count)`` pair or an ``{"hp", "count"}`` dict."""
        if isinstance(value, HPBucket):
            return value
        if isinstance(value, Mapping):
            hp = value.get("hp", value.get("per_ship_hp", value.get("perShipHP", 0)))
            return cls(per_ship_hp=int(hp or 0), count=int(value.get("count", 0) or 0))
        hp, count = value
        return cls(per_ship_hp=int(hp), count=int(count))


Stack = Dict[ShipKey, List[HPBucket]]


def coerce_stack(ships: Optional[Mapping[Any, Iterable[Any]]]) -> Stack:
    """Normalise a ship stack into ``{ShipType|str: [HPBucket, ...]}``.

    Keys that name the same ship type (``"Fighter"`` and ``"fighter"``) are
    folded together: their bucket lists are concatenated in input order, and
    bucket indices elsewhere in the package refer to the folded list.
    """
    out: Stack = {}
    for key, buckets in (ships or {}).items():
        out.setdefault(ship_key(key), []).extend(HPBucket.coerce(b) for b in (buckets or []))
    return out


@dataclass
class FormationAssignment:
    """One HP bucket placed at a tactical position.

    ``assigned_hp`` starts as ``per_ship_hp * count`` and afterwards tracks
    the current aggregate HP, which combat may change on its own.
    """

    position: FormationPosition
    ship_type: ShipKey
    bucket_index: int
    count: int = 0
    assigned_hp: int = 0
    layer: int = 0  # 0=frontline, 1=mid, 2=backline

    @property
    def filled(self) -> bool:
        return self.count > 0 and self.assigned_hp > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": str(self.position),
            "layer": self.layer,
            "shipType": str(self.ship_type),
            "bucketIndex": self.bucket_index,
            "count": self.count,
            "assignedHP": self.assigned_hp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormationAssignment":
        position = FormationPosition.parse(data.get("position")) or data.get("position")
        return cls(
            position=position,
            ship_type=ship_key(data.get("shipType", data.get("ship_type", ""))),
            bucket_index=int(data.get("bucketIndex", data.get("bucket_index", 0))),
            count=int(data.get("count", 0)),
            assigned_hp=int(data.get("assignedHP", data.get("assigned_hp", 0))),
            layer=int(data.get("layer", 0)),
        )


@dataclass
class FormationMods:
    """Catalog modifiers copied onto a formation when it is created."""

    speed_multiplier: float = 1.0
    reconfigure_time: int = 0  # seconds
    position_bonuses: Dict[FormationPosition, StatMods] = field(default_factory=dict)
    special_properties: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speedMultiplier": self.speed_multiplier,
            "reconfigureTime": self.reconfigure_time,
            "positionBonuses": {str(pos): mods.to_dict() for pos, mods in self.position_bonuses.items()},
            "specialProperties": list(self.special_properties),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FormationMods":
        data = data or {}
        bonuses: Dict[FormationPosition, StatMods] = {}
        for key, mods in (data.get("positionBonuses") or {}).items():
            pos = FormationPosition.parse(key)
            if pos is not None:
                bonuses[pos] = StatMods.from_dict(mods)
        return cls(
            speed_multiplier=float(data.get("speedMultiplier", 1.0)),
            reconfigure_time=int(data.get("reconfigureTime", 0)),
            position_bonuses=bonuses,
            special_properties=list(data.get("specialProperties") or []),
        )


@dataclass
class Formation:
    """Tactical arrangement of a stack plus the formation's static modifiers."""

    type: Any  # FormationType, or the raw value when loaded from an unknown document
    facing: str = "north"
    assignments: List[FormationAssignment] = field(default_factory=list)
    modifiers: FormationMods = field(default_factory=FormationMods)
    version: int = 1
    created_at: Optional[datetime] = None

    def assignments_by_position(self, position: FormationPosition) -> List[FormationAssignment]:
        return [a for a in self.assignments if a.position == position]

    def occupancy(self) -> Dict[FormationPosition, int]:
        counts: Dict[FormationPosition, int] = {}
        for a in self.assignments:
            counts[a.position] = counts.get(a.position, 0) + 1
        return counts

    def damage_distribution(self, incoming_damage: int, direction: Any, catalog=None) -> Dict[FormationPosition, int]:
        from .damage import distribute_damage

        return distribute_damage(self, incoming_damage, direction, catalog=catalog)

    def copy(self) -> "Formation":
        return Formation(
            type=self.type,
            facing=self.facing,
            assignments=[
                FormationAssignment(
                    position=a.position,
                    ship_type=a.ship_type,
                    bucket_index=a.bucket_index,
                    count=a.count,
                    assigned_hp=a.assigned_hp,
                    layer=a.layer,
                )
                for a in self.assignments
            ],
            modifiers=FormationMods(
                speed_multiplier=self.modifiers.speed_multiplier,
                reconfigure_time=self.modifiers.reconfigure_time,
                position_bonuses=dict(self.modifiers.position_bonuses),
                special_properties=list(self.modifiers.special_properties),
            ),
            version=self.version,
            created_at=self.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formationType": str(self.type),
            "facing": self.facing,
            "assignments": [a.to_dict() for a in self.assignments],
            "modifiers": self.modifiers.to_dict(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Formation":
        raw_type = data.get("formationType", data.get("type"))
        created = data.get("createdAt")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        return cls(
            type=FormationType.parse(raw_type) or raw_type,
            facing=data.get("facing", "north"),
            assignments=[FormationAssignment.from_dict(a) for a in data.get("assignments") or []],
            modifiers=FormationMods.from_dict(data.get("modifiers")),
            version=int(data.get("version", 1)),
            created_at=created,
        )


def stack_counts(ships: Mapping[Any, Sequence[HPBucket]]) -> Dict[ShipKey, int]:
    """Total ship count per ship type."""
    return {key: sum(b.count for b in buckets) for key, buckets in coerce_stack(ships).items()}


__all__ = [
    "HPBucket",
    "Stack",
    "coerce_stack",
    "FormationAssignment",
    "FormationMods",
    "Formation",
    "stack_counts",
]
