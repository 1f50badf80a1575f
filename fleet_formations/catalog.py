"""Static catalogs: formation specs, ship blueprints, counters and weights.

The bundled data lives in ``data/formations.yaml`` and ``data/ships.yaml``.
:func:`load_catalog` merges optional override files and environment variables
on top of it, validates the merged document and freezes it into a
:class:`Catalog`. A catalog is read-only after construction and can be shared
freely between threads; :func:`default_catalog` builds the process-wide one
exactly once.
"""
from __future__ import annotations

import logging
import math
import os
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

import yaml
from pydantic import BaseModel, Field, NonNegativeInt, ValidationError, field_validator

from .config import DEFAULT_ENV_PREFIX, deep_merge, env_overrides, load_configs
from .errors import CatalogError
from .models import FormationMods
from .modifiers import StatMods
from .types import (
    POSITIONS,
    AttackDirection,
    FormationPosition,
    FormationType,
    ShipKey,
    ship_key,
)

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-6

_DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
_BUNDLED_FILES = ("formations.yaml", "ships.yaml")


# =============================
# Document schema
# =============================


class FormationEntry(BaseModel):
    name: str = ""
    description: str = ""
    speed_multiplier: float = 1.0
    reconfigure_seconds: NonNegativeInt = 0
    slot_limits: Dict[FormationPosition, NonNegativeInt] = Field(default_factory=dict)
    position_bonuses: Dict[FormationPosition, StatMods] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


class ShipEntry(BaseModel):
    hp: NonNegativeInt = 0
    speed: int = 0
    attack_damage: NonNegativeInt = 0


class CatalogDocument(BaseModel):
    formations: Dict[FormationType, FormationEntry] = Field(default_factory=dict)
    ships: Dict[str, ShipEntry] = Field(default_factory=dict)
    counters: Dict[FormationType, Dict[FormationType, float]] = Field(default_factory=dict)
    directional_weights: Dict[AttackDirection, Dict[FormationPosition, float]] = Field(default_factory=dict)

    @field_validator("directional_weights")
    @classmethod
    def _rows_sum_to_one(cls, value):
        for direction, row in value.items():
            total = sum(row.values())
            if not math.isclose(total, 1.0, abs_tol=WEIGHT_TOLERANCE):
                raise ValueError(f"weights for {direction.value} sum to {total}, expected 1.0")
        return value


# =============================
# Frozen catalog
# =============================


@dataclass(frozen=True)
class FormationSpec:
    """Static characteristics of one formation type."""

    type: FormationType
    name: str
    description: str
    speed_multiplier: float
    reconfigure_seconds: int
    slot_limits: Mapping[FormationPosition, int]
    position_bonuses: Mapping[FormationPosition, StatMods]
    tags: Tuple[str, ...] = ()

    def max_slots(self, position: FormationPosition) -> int:
        return self.slot_limits.get(position, 0)

    def total_slots(self) -> int:
        return sum(self.max_slots(pos) for pos in POSITIONS)

    def mods(self) -> FormationMods:
        """Fresh, caller-owned modifiers for a new Formation."""
        return FormationMods(
            speed_multiplier=self.speed_multiplier,
            reconfigure_time=self.reconfigure_seconds,
            position_bonuses=dict(self.position_bonuses),
            special_properties=list(self.tags),
        )


@dataclass(frozen=True)
class ShipBlueprint:
    ship_type: ShipKey
    hp: int
    speed: int
    attack_damage: int


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Catalog:
    formations: Mapping[FormationType, FormationSpec] = field(default_factory=lambda: _frozen({}))
    ships: Mapping[ShipKey, ShipBlueprint] = field(default_factory=lambda: _frozen({}))
    counters: Mapping[FormationType, Mapping[FormationType, float]] = field(default_factory=lambda: _frozen({}))
    directional_weights: Mapping[AttackDirection, Mapping[FormationPosition, float]] = field(
        default_factory=lambda: _frozen({})
    )

    def formation(self, formation_type: Any) -> Optional[FormationSpec]:
        ft = FormationType.parse(formation_type)
        if ft is None:
            return None
        return self.formations.get(ft)

    def ship(self, ship_type: Any) -> Optional[ShipBlueprint]:
        return self.ships.get(ship_key(ship_type))

    def base_speed(self, ship_type: Any) -> Optional[int]:
        blueprint = self.ship(ship_type)
        return blueprint.speed if blueprint is not None else None

    def weights(self, direction: Any) -> Mapping[FormationPosition, float]:
        """Directional weights, falling back to the frontal row."""
        parsed = AttackDirection.parse(direction)
        row = self.directional_weights.get(parsed) if parsed is not None else None
        if row is None:
            row = self.directional_weights.get(AttackDirection.FRONTAL, _frozen({}))
        return row

    def capacity(self) -> "TableCapacityProvider":
        return TableCapacityProvider(self)


def build_catalog(document: Mapping[str, Any]) -> Catalog:
    """Validate a raw catalog document and freeze it."""
    try:
        doc = CatalogDocument.model_validate(dict(document))
    except ValidationError as exc:
        raise CatalogError(f"invalid catalog document: {exc}") from exc

    formations = {
        ft: FormationSpec(
            type=ft,
            name=entry.name or ft.value,
            description=entry.description,
            speed_multiplier=entry.speed_multiplier,
            reconfigure_seconds=entry.reconfigure_seconds,
            slot_limits=_frozen(entry.slot_limits),
            position_bonuses=_frozen(entry.position_bonuses),
            tags=tuple(entry.tags),
        )
        for ft, entry in doc.formations.items()
    }
    ships = {}
    for name, entry in doc.ships.items():
        key = ship_key(name)
        ships[key] = ShipBlueprint(ship_type=key, hp=entry.hp, speed=entry.speed, attack_damage=entry.attack_damage)

    return Catalog(
        formations=_frozen(formations),
        ships=_frozen(ships),
        counters=_frozen({att: _frozen(row) for att, row in doc.counters.items()}),
        directional_weights=_frozen({d: _frozen(row) for d, row in doc.directional_weights.items()}),
    )


def _bundled_document() -> Dict[str, Any]:
    doc: Dict[str, Any] = {}
    for name in _BUNDLED_FILES:
        with open(os.path.join(_DATA_DIR, name), "r", encoding="utf-8") as f:
            doc = deep_merge(doc, yaml.safe_load(f) or {})
    return doc


def load_catalog(
    paths: Iterable[str] | None = None,
    overrides: Optional[Mapping[str, Any]] = None,
    env_prefix: Optional[str] = None,
) -> Catalog:
    """Build a catalog from the bundled data plus optional overrides.

    Args:
        paths: YAML/JSON files merged in order over the bundled data
        overrides: nested dict merged last
        env_prefix: when set, ``<prefix>KEY__SUBKEY=value`` variables are
            merged after the files

    Raises:
        CatalogError: if the merged document does not validate
        ConfigError: if an override file cannot be read
    """
    doc = deep_merge(
        _bundled_document(),
        load_configs(paths),
        env_overrides(env_prefix) if env_prefix else None,
        overrides,
    )
    catalog = build_catalog(doc)
    logger.info(
        "loaded catalog: %d formations, %d ship blueprints", len(catalog.formations), len(catalog.ships)
    )
    return catalog


_DEFAULT_CATALOG: Optional[Catalog] = None
_DEFAULT_LOCK = threading.Lock()


def default_catalog() -> Catalog:
    """Process-wide catalog built on first use from the bundled data and env."""
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is not None:
        return _DEFAULT_CATALOG
    with _DEFAULT_LOCK:
        if _DEFAULT_CATALOG is None:
            _DEFAULT_CATALOG = load_catalog(env_prefix=DEFAULT_ENV_PREFIX)
    return _DEFAULT_CATALOG


# =============================
# Capacity
# =============================


class CapacityProvider(Protocol):
    def max_slots(self, formation_type: Any, position: Any) -> int:
        ...


class TableCapacityProvider:
    """Slot limits read from the catalog's per-formation ``slot_limits``."""

    def __init__(self, catalog: Optional[Catalog] = None) -> None:
        self._catalog = catalog or default_catalog()

    def max_slots(self, formation_type: Any, position: Any) -> int:
        spec = self._catalog.formation(formation_type)
        pos = FormationPosition.parse(position)
        if spec is None or pos is None:
            return 0
        return spec.max_slots(pos)


def is_position_full(
    formation_type: Any, position: Any, current_slots: int, capacity: Optional[CapacityProvider] = None
) -> bool:
    capacity = capacity or TableCapacityProvider()
    return current_slots >= capacity.max_slots(formation_type, position)


def total_max_slots(formation_type: Any, capacity: Optional[CapacityProvider] = None) -> int:
    capacity = capacity or TableCapacityProvider()
    return sum(capacity.max_slots(formation_type, pos) for pos in POSITIONS)


__all__ = [
    "Catalog",
    "CatalogDocument",
    "FormationSpec",
    "ShipBlueprint",
    "CapacityProvider",
    "TableCapacityProvider",
    "build_catalog",
    "load_catalog",
    "default_catalog",
    "is_position_full",
    "total_max_slots",
]
