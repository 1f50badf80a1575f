"""Fleet formations: place ship stacks into formations and split combat damage across them."""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "ShipType",
    "FormationType",
    "FormationPosition",
    "AttackDirection",
    "HPBucket",
    "FormationAssignment",
    "FormationMods",
    "Formation",
    "StatMods",
    "DamageMods",
    "combine_mods",
    "Catalog",
    "FormationSpec",
    "TableCapacityProvider",
    "load_catalog",
    "default_catalog",
    "determine_optimal_position",
    "determine_layer",
    "assign_formation",
    "distribute_damage",
    "apportion_damage",
    "distribute_to_buckets",
    "counter_multiplier",
    "compare_formations",
    "apply_position_bonuses",
    "effective_speed",
    "CatalogError",
    "ConfigError",
    "FormationError",
    "__version__",
]

_EXPORTS = {
    "ShipType": ("types", "ShipType"),
    "FormationType": ("types", "FormationType"),
    "FormationPosition": ("types", "FormationPosition"),
    "AttackDirection": ("types", "AttackDirection"),
    "HPBucket": ("models", "HPBucket"),
    "FormationAssignment": ("models", "FormationAssignment"),
    "FormationMods": ("models", "FormationMods"),
    "Formation": ("models", "Formation"),
    "StatMods": ("modifiers", "StatMods"),
    "DamageMods": ("modifiers", "DamageMods"),
    "combine_mods": ("modifiers", "combine_mods"),
    "Catalog": ("catalog", "Catalog"),
    "FormationSpec": ("catalog", "FormationSpec"),
    "TableCapacityProvider": ("catalog", "TableCapacityProvider"),
    "load_catalog": ("catalog", "load_catalog"),
    "default_catalog": ("catalog", "default_catalog"),
    "determine_optimal_position": ("positions", "determine_optimal_position"),
    "determine_layer": ("positions", "determine_layer"),
    "assign_formation": ("assignment", "assign_formation"),
    "distribute_damage": ("damage", "distribute_damage"),
    "apportion_damage": ("damage", "apportion_damage"),
    "distribute_to_buckets": ("damage", "distribute_to_buckets"),
    "counter_multiplier": ("counters", "counter_multiplier"),
    "compare_formations": ("counters", "compare_formations"),
    "apply_position_bonuses": ("bonuses", "apply_position_bonuses"),
    "effective_speed": ("bonuses", "effective_speed"),
    "CatalogError": ("errors", "CatalogError"),
    "ConfigError": ("errors", "ConfigError"),
    "FormationError": ("errors", "FormationError"),
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module_name, attr_name = _EXPORTS[name]
        module = import_module(f".{module_name}", __name__)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(set(list(globals().keys()) + list(__all__)))
