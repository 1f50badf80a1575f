"""Formation-vs-formation counter multipliers.

The table is deliberately asymmetric: ``counter_multiplier(a, b)`` and
``counter_multiplier(b, a)`` encode different matchups. Applying the
multiplier to actual damage is left to the combat resolver.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from .catalog import Catalog, default_catalog
from .types import FormationType

NEUTRAL = 1.0

# Thresholds for the matchup helpers.
STRONG_COUNTER = 1.15
STRONG_WEAKNESS = 0.85
ADVANTAGE_CUTOFF = 1.1
DISADVANTAGE_CUTOFF = 0.9


def counter_multiplier(attacker: Any, defender: Any, catalog: Optional[Catalog] = None) -> float:
    """Damage multiplier for ``attacker`` formation hitting ``defender``; 1.0 when not tabled."""
    catalog = catalog or default_catalog()
    att = FormationType.parse(attacker)
    dfn = FormationType.parse(defender)
    if att is None or dfn is None:
        return NEUTRAL
    row = catalog.counters.get(att)
    if row is None:
        return NEUTRAL
    return float(row.get(dfn, NEUTRAL))


def counter_formations(target: Any, catalog: Optional[Catalog] = None) -> List[FormationType]:
    """Formations that hit ``target`` for more than a 15% bonus."""
    catalog = catalog or default_catalog()
    return [ft for ft in FormationType if counter_multiplier(ft, target, catalog) > STRONG_COUNTER]


def countered_by_formations(target: Any, catalog: Optional[Catalog] = None) -> List[FormationType]:
    """Formations that ``target`` hits for less than 85% damage."""
    catalog = catalog or default_catalog()
    return [ft for ft in FormationType if counter_multiplier(target, ft, catalog) < STRONG_WEAKNESS]


@dataclass(frozen=True)
class MatchupReport:
    attacker: Any
    defender: Any
    multiplier: float
    verdict: str  # "attacker", "defender" or "even"

    def summary(self) -> str:
        label = {
            "attacker": "Strong advantage for attacker",
            "defender": "Strong advantage for defender",
            "even": "Even matchup",
        }[self.verdict]
        return (
            f"Formation Matchup: {self.attacker} vs {self.defender}\n"
            f"Counter Multiplier: {self.multiplier:.2f}x\n"
            f"Result: {label}"
        )


def compare_formations(attacker: Any, defender: Any, catalog: Optional[Catalog] = None) -> MatchupReport:
    mult = counter_multiplier(attacker, defender, catalog)
    if mult > ADVANTAGE_CUTOFF:
        verdict = "attacker"
    elif mult < DISADVANTAGE_CUTOFF:
        verdict = "defender"
    else:
        verdict = "even"
    return MatchupReport(
        attacker=FormationType.parse(attacker) or attacker,
        defender=FormationType.parse(defender) or defender,
        multiplier=mult,
        verdict=verdict,
    )


__all__ = [
    "counter_multiplier",
    "counter_formations",
    "countered_by_formations",
    "compare_formations",
    "MatchupReport",
]
